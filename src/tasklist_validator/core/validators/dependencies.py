"""
Dependency checks.

Dependencies are declared as

    **Dependencies**: SSH001, SSH002-1

or with the IDs on the following line or as a bullet list. ``None``, an
empty value or a placeholder such as ``{{def-no-dependencies}}`` mean the
task has no dependencies.
"""

import logging
import re
from typing import Dict, List, Sequence, Set, Tuple

from tasklist_validator.core.references import PLACEHOLDER
from tasklist_validator.core.results import ErrorKind, ValidationError, ValidationResult
from tasklist_validator.core.tasks import TaskDetail
from tasklist_validator.core.validators.base import BaseValidator, ValidationContext

logger = logging.getLogger(__name__)

MARKER = "**Dependencies**"
NONE_VALUES = ("none", "n/a", "-")


def _split_items(value: str) -> List[str]:
    items = []
    for raw in re.split(r"[,;]", value):
        item = raw.strip().strip("`*").strip()
        if item:
            items.append(item)
    return items


def parse_dependencies(lines: Sequence[str]) -> List[Tuple[str, int]]:
    """Return (dependency ID, line index) pairs in declaration order."""
    for index, line in enumerate(lines):
        stripped = line.strip()
        if not stripped.startswith(MARKER):
            continue

        inline = stripped[len(MARKER) :].lstrip(":").strip()
        entries: List[Tuple[str, int]] = []
        if inline:
            entries = [(inline, index)]
        else:
            for offset in range(index + 1, len(lines)):
                following = lines[offset].strip()
                if following.startswith("- "):
                    entries.append((following[2:], offset))
                elif not entries and following and not following.startswith(("**", "#")):
                    entries.append((following, offset))
                    break
                else:
                    break

        dependencies = []
        for text, line_index in entries:
            text = PLACEHOLDER.sub("", text)
            for item in _split_items(text):
                if item.lower() not in NONE_VALUES:
                    dependencies.append((item, line_index))
        return dependencies
    return []


def find_cycles(start: str, graph: Dict[str, List[str]]) -> List[List[str]]:
    """Return every simple cycle through ``start`` whose other members sort after it.

    Running this for each node yields each cycle exactly once, from its
    smallest member.
    """
    cycles: List[List[str]] = []
    path = [start]
    on_path: Set[str] = {start}

    def visit(node: str) -> None:
        for target in graph.get(node, []):
            if target == start:
                cycles.append(path + [start])
            elif target > start and target in graph and target not in on_path:
                path.append(target)
                on_path.add(target)
                visit(target)
                path.pop()
                on_path.discard(target)

    visit(start)
    return cycles


class DependencyValidator(BaseValidator):
    """Checks that declared dependencies exist and do not form cycles."""

    name = "dependencies"
    priority = 40

    def validate(self, task: TaskDetail, context: ValidationContext) -> ValidationResult:
        findings: List[ValidationError] = []
        dependencies = parse_dependencies(task.content_lines)
        known = context.known_ids

        for dependency, offset in dependencies:
            line_number = task.line_number(offset)
            if dependency == task.id:
                findings.append(
                    self.finding(
                        ErrorKind.CIRCULAR_DEPENDENCY,
                        f"Task '{task.id}' depends on itself",
                        task_id=task.id,
                        line_number=line_number,
                        cycle=[task.id, task.id],
                    )
                )
            elif dependency not in known:
                findings.append(
                    self.finding(
                        ErrorKind.INVALID_DEPENDENCY,
                        f"Task '{task.id}' depends on unknown task '{dependency}'",
                        task_id=task.id,
                        line_number=line_number,
                        dependency=dependency,
                    )
                )

        if dependencies:
            graph = {
                other.id: [dep for dep, _ in parse_dependencies(other.content_lines) if dep != other.id]
                for other in context.tasks
            }
            for cycle in find_cycles(task.id, graph):
                findings.append(
                    self.finding(
                        ErrorKind.CIRCULAR_DEPENDENCY,
                        f"Circular dependency detected: {' -> '.join(cycle)}",
                        task_id=task.id,
                        line_number=task.start_line,
                        cycle=cycle,
                    )
                )

        return ValidationResult.from_findings(findings)
