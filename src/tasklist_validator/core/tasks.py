"""
Task model recovery for task list documents.

Two views of the same tasks are extracted:

- summary tables (``## Current Tasks`` / ``## Completed Tasks``) give one
  TaskStub per row;
- detail sections (``### ABC001: Title``) give one TaskDetail each, with the
  subtasks found inside it in either notation:

      #### 1. Parse input (ABC001-1)          <- numbered
      - [x] Tidy imports [ABC001a]            <- checkbox

Extraction never fails on bad content. Malformed IDs are kept with the
INVALID_FORMAT sentinel so the validators can report them.
"""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional, Sequence, Tuple

from tasklist_validator.core.document import Document
from tasklist_validator.core.references import placeholders_in
from tasklist_validator.core.results import ErrorKind, Severity, ValidationError

logger = logging.getLogger(__name__)

INVALID_FORMAT = "INVALID_FORMAT"

DETAIL_HEADING = re.compile(r"^### ([A-Z][A-Za-z0-9-]*[0-9][A-Za-z0-9-]*):\s*(.*)$")
SECTION_BOUNDARY = re.compile(r"^#{1,3}\s")
NUMBERED_SUBTASK = re.compile(r"^#### \d+\.")
NUMBERED_SUBTASK_ID = re.compile(r"\(([A-Z]{2,4}\d{3,4}-\d+)\)")
CHECKBOX_SUBTASK = re.compile(r"^\s*- \[( |x|X)\]")
CHECKBOX_TRAILING_ID = re.compile(r"\[([A-Z]{2,4}\d{3,4}[a-z]?)\]\s*$")
CHECKBOX_BOLD_ID = re.compile(r"\*\*([A-Z]{2,4}\d{3,4}[a-z]?)\*\*")
SEPARATOR_ROW = re.compile(r"^\s*\|?[\s:|-]*-[\s:|-]*\|?\s*$")

ID_PREFIX = re.compile(r"^([A-Z]+)")
ID_NUMBER = re.compile(r"^[A-Z]+(\d+)")
SUBTASK_SUFFIX = re.compile(r"(-\d+|(?<=\d)[a-z])$")


class TableOrigin(str, Enum):
    """Which summary table a task row came from."""

    ACTIVE = "active"
    COMPLETED = "completed"


class SubtaskFormat(str, Enum):
    """Subtask notation.

    NUMBERED subtasks are ``#### N. Title (ID)`` headings with their own body.
    CHECKBOX subtasks are single ``- [ ]`` list lines.
    """

    NUMBERED = "numbered"
    CHECKBOX = "checkbox"


def id_prefix(task_id: str) -> str:
    """Return the leading uppercase letters of an ID ("SSH001-2" -> "SSH")."""
    match = ID_PREFIX.match(task_id)
    return match.group(1) if match else ""


def id_number(task_id: str) -> Optional[int]:
    """Return the numeric part after the prefix ("SSH042a" -> 42)."""
    match = ID_NUMBER.match(task_id)
    return int(match.group(1)) if match else None


def is_subtask_id(task_id: str) -> bool:
    return bool(SUBTASK_SUFFIX.search(task_id))


def parent_id(task_id: str) -> str:
    """Strip a subtask suffix ("SSH001-2" -> "SSH001", "SSH001a" -> "SSH001")."""
    return SUBTASK_SUFFIX.sub("", task_id)


def has_section(lines: Iterable[str], marker: str) -> bool:
    """True if any line starts with ``marker`` (e.g. "**Description**")."""
    return any(line.strip().startswith(marker) for line in lines)


def has_placeholder(lines: Iterable[str], name: str) -> bool:
    return any(name in placeholders_in(line) for line in lines)


def find_placeholder(lines: Iterable[str], pattern: "re.Pattern[str]") -> Optional[str]:
    """Return the first placeholder whose name matches ``pattern``."""
    for line in lines:
        for name in placeholders_in(line):
            if pattern.search(name):
                return name
    return None


def read_field(lines: Sequence[str], label: str) -> Optional[Tuple[str, int]]:
    """Read a ``**Label**: value`` field.

    The value may follow the label on the same line or sit alone on the next
    line. Returns (value, index of the label line), or None when the label is
    absent. An empty value is returned as "".
    """
    marker = f"**{label}**"
    for index, line in enumerate(lines):
        stripped = line.strip()
        if not stripped.startswith(marker):
            continue
        value = stripped[len(marker) :].lstrip(":").strip()
        if not value and index + 1 < len(lines):
            following = lines[index + 1].strip()
            if following and not following.startswith(("**", "#", "{{")):
                value = following
        return value, index
    return None


@dataclass(frozen=True)
class TaskStub:
    """A summary table row.

    Attributes:
        id: Raw ID cell
        source_line: 1-based document line of the row
        raw_status: Status cell, "" when the row has no status column
        origin: Table the row came from
    """

    id: str
    source_line: int
    raw_status: str
    origin: TableOrigin


@dataclass(frozen=True)
class Subtask:
    """A subtask inside a detail section.

    Attributes:
        id: Extracted ID, or INVALID_FORMAT when none could be found
        line_offset: Index of the subtask line within the parent's content_lines
        line_number: 1-based document line of the subtask line
        format: Notation the subtask was written in
        checked: Checkbox state (always False for numbered subtasks)
        content_lines: Subtask line up to the next subtask or the end of the
            parent section; a checkbox subtask holds only its own line
    """

    id: str
    line_offset: int
    line_number: int
    format: SubtaskFormat
    checked: bool = False
    content_lines: Tuple[str, ...] = ()

    @property
    def is_numbered(self) -> bool:
        return self.format == SubtaskFormat.NUMBERED

    @property
    def has_valid_id(self) -> bool:
        return self.id != INVALID_FORMAT

    def field(self, label: str) -> Optional[str]:
        found = read_field(self.content_lines, label)
        return found[0] if found else None


@dataclass(frozen=True)
class TaskDetail:
    """A ``### ID: Title`` section and everything in it.

    Attributes:
        id: Task ID from the heading
        title: Heading text after the colon
        start_line: 1-based document line of the heading
        content_lines: Heading line through the end of the section
        subtasks: Subtasks in document order
    """

    id: str
    title: str
    start_line: int
    content_lines: Tuple[str, ...]
    subtasks: Tuple[Subtask, ...] = field(default_factory=tuple)

    @property
    def prefix(self) -> str:
        return id_prefix(self.id)

    @property
    def number(self) -> Optional[int]:
        return id_number(self.id)

    def line_number(self, offset: int) -> int:
        """Map an index into content_lines to a 1-based document line."""
        return self.start_line + offset

    def field(self, label: str) -> Optional[str]:
        found = read_field(self.content_lines, label)
        return found[0] if found else None

    def field_with_line(self, label: str) -> Optional[Tuple[str, int]]:
        found = read_field(self.content_lines, label)
        if found is None:
            return None
        value, offset = found
        return value, self.line_number(offset)

    @property
    def own_lines(self) -> Tuple[str, ...]:
        """Content lines outside every numbered subtask body."""
        covered = set()
        for subtask in self.subtasks:
            if subtask.is_numbered:
                covered.update(range(subtask.line_offset, subtask.line_offset + len(subtask.content_lines)))
        return tuple(line for index, line in enumerate(self.content_lines) if index not in covered)

    def has_section(self, marker: str) -> bool:
        return has_section(self.content_lines, marker)

    def has_placeholder(self, name: str) -> bool:
        return has_placeholder(self.content_lines, name)

    def find_placeholder(self, pattern: "re.Pattern[str]") -> Optional[str]:
        return find_placeholder(self.content_lines, pattern)


@dataclass(frozen=True)
class TableExtraction:
    """Rows read from one summary table plus any layout warnings."""

    stubs: Tuple[TaskStub, ...] = ()
    warnings: Tuple[ValidationError, ...] = ()


def _split_row(line: str) -> List[str]:
    return [cell.strip() for cell in line.split("|")]


def _is_table_end(line: str) -> bool:
    return not line.strip() or line.startswith("##")


def extract_table_tasks(
    document: Document,
    heading: str,
    origin: TableOrigin = TableOrigin.ACTIVE,
) -> TableExtraction:
    """Read the rows of the summary table under ``heading``.

    The expected layout is the heading, optional blank lines, a header row, a
    separator row, then data rows up to the first blank line or ``##`` heading.
    When the header or separator row is missing a MALFORMED_TABLE warning is
    recorded and every non-separator row is read as data.

    Returns:
        TableExtraction; empty when the heading is absent.
    """
    lines = document.lines
    try:
        heading_index = next(i for i, line in enumerate(lines) if line.strip() == heading)
    except StopIteration:
        logger.debug("Table heading %r not found", heading)
        return TableExtraction()

    index = heading_index + 1
    while index < len(lines) and not lines[index].strip():
        index += 1

    warnings: List[ValidationError] = []
    has_header = index < len(lines) and lines[index].lstrip().startswith("|")
    has_separator = (
        has_header and index + 1 < len(lines) and bool(SEPARATOR_ROW.match(lines[index + 1]))
    )
    if has_header and has_separator:
        index += 2
    else:
        message = (
            f"Table under '{heading}' is missing its header or separator row; "
            "rows were read without them"
        )
        logger.warning(message)
        warnings.append(
            ValidationError(
                kind=ErrorKind.MALFORMED_TABLE,
                message=message,
                severity=Severity.WARNING,
                line_number=heading_index + 1,
                context={"heading": heading},
            )
        )

    stubs: List[TaskStub] = []
    first_row = True
    while index < len(lines) and not _is_table_end(lines[index]):
        line = lines[index]
        index += 1
        if SEPARATOR_ROW.match(line):
            continue
        cells = _split_row(line)
        if len(cells) < 2:
            continue
        # a header row read without its separator
        if first_row and not has_separator and cells[1].lower() == "id":
            first_row = False
            continue
        first_row = False
        stubs.append(
            TaskStub(
                id=cells[1],
                source_line=index,
                raw_status=cells[3] if len(cells) > 3 else "",
                origin=origin,
            )
        )

    logger.debug("Read %d row(s) from %r", len(stubs), heading)
    return TableExtraction(stubs=tuple(stubs), warnings=tuple(warnings))


def _checkbox_id(line: str) -> str:
    match = CHECKBOX_TRAILING_ID.search(line) or CHECKBOX_BOLD_ID.search(line)
    return match.group(1) if match else INVALID_FORMAT


def extract_subtasks(content_lines: Sequence[str], start_line: int = 1) -> Tuple[Subtask, ...]:
    """Find subtasks in a detail section's content.

    Args:
        content_lines: Section lines, heading first
        start_line: 1-based document line of content_lines[0]
    """
    markers: List[Tuple[int, SubtaskFormat, re.Match]] = []
    for offset, line in enumerate(content_lines):
        if offset == 0:
            continue
        if NUMBERED_SUBTASK.match(line):
            markers.append((offset, SubtaskFormat.NUMBERED, None))
        else:
            checkbox = CHECKBOX_SUBTASK.match(line)
            if checkbox:
                markers.append((offset, SubtaskFormat.CHECKBOX, checkbox))

    subtasks: List[Subtask] = []
    for position, (offset, subtask_format, checkbox) in enumerate(markers):
        line = content_lines[offset]
        if subtask_format == SubtaskFormat.NUMBERED:
            match = NUMBERED_SUBTASK_ID.search(line)
            end = markers[position + 1][0] if position + 1 < len(markers) else len(content_lines)
            subtasks.append(
                Subtask(
                    id=match.group(1) if match else INVALID_FORMAT,
                    line_offset=offset,
                    line_number=start_line + offset,
                    format=subtask_format,
                    content_lines=tuple(content_lines[offset:end]),
                )
            )
        else:
            subtasks.append(
                Subtask(
                    id=_checkbox_id(line),
                    line_offset=offset,
                    line_number=start_line + offset,
                    format=subtask_format,
                    checked=checkbox.group(1) in ("x", "X"),
                    content_lines=(line,),
                )
            )
    return tuple(subtasks)


def extract_task_details(document: Document) -> List[TaskDetail]:
    """Return every ``### ID: Title`` section in document order.

    A section ends at the next heading of level 1 to 3 or at the end of the
    document; ``####`` subtask headings stay inside it.
    """
    lines = document.lines
    details: List[TaskDetail] = []
    index = 0
    while index < len(lines):
        match = DETAIL_HEADING.match(lines[index])
        if not match:
            index += 1
            continue

        end = index + 1
        while end < len(lines) and not SECTION_BOUNDARY.match(lines[end]):
            end += 1

        content = tuple(lines[index:end])
        details.append(
            TaskDetail(
                id=match.group(1),
                title=match.group(2).strip(),
                start_line=index + 1,
                content_lines=content,
                subtasks=extract_subtasks(content, start_line=index + 1),
            )
        )
        index = end

    logger.debug("Extracted %d task detail section(s)", len(details))
    return details
