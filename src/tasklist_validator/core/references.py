"""
Reference placeholder handling for task list documents.

Documents may factor repeated content into definition blocks:

    ## #{{error-handling}}
    **Error Handling**
    ...

and refer to them anywhere with ``{{error-handling}}``. Resolution is
existence-only: placeholders are never expanded, only checked against the
set of defined names. Definitions may appear before or after their use.
"""

import logging
import re
from collections import Counter
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Tuple

from tasklist_validator.core.document import Document
from tasklist_validator.core.results import (
    ErrorKind,
    Severity,
    ValidationError,
    ValidationResult,
)

logger = logging.getLogger(__name__)

DEFINITION_HEADER = re.compile(r"^## #?\{\{([^}]+)\}\}\s*$")
PLACEHOLDER = re.compile(r"\{\{([^}]+)\}\}")

# Name -> definition body lines
ReferenceMap = Mapping[str, Tuple[str, ...]]


@dataclass(frozen=True)
class ReferenceUsage:
    """A placeholder occurrence.

    Attributes:
        name: Referenced definition name
        line_number: 1-based line of the occurrence
    """

    name: str
    line_number: int


def placeholders_in(line: str) -> List[str]:
    """Return the placeholder names used on a single line."""
    return PLACEHOLDER.findall(line)


def _definition_blocks(lines: Iterable[str]) -> List[Tuple[str, int, List[str]]]:
    blocks: List[Tuple[str, int, List[str]]] = []
    for line_number, line in enumerate(lines, start=1):
        match = DEFINITION_HEADER.match(line)
        if match:
            blocks.append((match.group(1), line_number, []))
        elif blocks:
            blocks[-1][2].append(line)
    return blocks


def extract_references(document: Document) -> Dict[str, Tuple[str, ...]]:
    """Collect every definition block in the document.

    A block runs from the line after its header up to the next definition
    header or the end of the document. When a name is defined twice the later
    block wins.
    """
    references: Dict[str, Tuple[str, ...]] = {}
    for name, line_number, body in _definition_blocks(document.lines):
        if name in references:
            logger.debug(
                "Reference '%s' redefined at line %d; later definition wins", name, line_number
            )
        references[name] = tuple(body)

    logger.debug("Extracted %d reference definitions", len(references))
    return references


def find_reference_usages(document: Document) -> List[ReferenceUsage]:
    """Return every placeholder occurrence in document order.

    Definition headers themselves are not usages.
    """
    usages: List[ReferenceUsage] = []
    for line_number, line in document.numbered():
        if DEFINITION_HEADER.match(line):
            continue
        for name in placeholders_in(line):
            usages.append(ReferenceUsage(name=name, line_number=line_number))
    return usages


def resolve_references(document: Document, references: ReferenceMap) -> ValidationResult:
    """Check that every placeholder has a definition somewhere in the document.

    Args:
        document: Document to scan
        references: Definitions from extract_references()

    Returns:
        Success, or a failure with one MISSING_REFERENCE_DEFINITION error per
        (name, line) pair, in document order.
    """
    errors: List[ValidationError] = []
    seen = set()
    for usage in find_reference_usages(document):
        if usage.name in references:
            continue
        key = (usage.name, usage.line_number)
        if key in seen:
            continue
        seen.add(key)
        errors.append(
            ValidationError(
                kind=ErrorKind.MISSING_REFERENCE_DEFINITION,
                message=(
                    f"Missing reference definition: '{{{{{usage.name}}}}}' "
                    f"at line {usage.line_number}"
                ),
                severity=Severity.ERROR,
                line_number=usage.line_number,
                context={"reference": usage.name},
            )
        )

    if errors:
        logger.debug("%d unresolved reference(s)", len(errors))
        return ValidationResult.failure(errors)
    return ValidationResult.success()


def reference_stats(document: Document) -> Dict[str, Any]:
    """Summarise definitions and their usage.

    Returns:
        Dict with total_definitions, total_usages, usage_counts (name -> count),
        unused_definitions, undefined_references, most_used and
        duplicate_definitions.
    """
    blocks = _definition_blocks(document.lines)
    definition_counts = Counter(name for name, _, _ in blocks)
    defined = list(dict.fromkeys(name for name, _, _ in blocks))

    usage_counts = Counter(usage.name for usage in find_reference_usages(document))
    most_used = [
        {"name": name, "count": count}
        for name, count in sorted(usage_counts.items(), key=lambda item: (-item[1], item[0]))[:5]
    ]

    return {
        "total_definitions": len(defined),
        "total_usages": sum(usage_counts.values()),
        "usage_counts": dict(sorted(usage_counts.items())),
        "unused_definitions": [name for name in defined if name not in usage_counts],
        "undefined_references": sorted(name for name in usage_counts if name not in definition_counts),
        "most_used": most_used,
        "duplicate_definitions": sorted(
            name for name, count in definition_counts.items() if count > 1
        ),
    }
