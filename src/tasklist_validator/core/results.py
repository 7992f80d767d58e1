"""
Validation findings and result aggregation for task list documents.

Every validator returns a ValidationResult. Results combine associatively and
preserve order, so a run over many tasks is just the combination of the
per-task results.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple


class Severity(str, Enum):
    """Severity of a finding.

    CRITICAL findings halt the remaining validators for the same task.
    """

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorKind(str, Enum):
    """Failure classes reported by the validation engine."""

    INVALID_ID_FORMAT = "invalid_id_format"
    DUPLICATE_ID = "duplicate_id"
    MISSING_DETAIL_SECTION = "missing_detail_section"
    MISSING_REQUIRED_SECTION = "missing_required_section"
    MISSING_COMPLETION_SECTION = "missing_completion_section"
    MISSING_ERROR_HANDLING = "missing_error_handling"
    INVALID_STATUS = "invalid_status"
    INVALID_PRIORITY = "invalid_priority"
    MISSING_SUBTASKS = "missing_subtasks"
    STATUS_MISMATCH = "status_mismatch"
    SUBTASK_PREFIX_MISMATCH = "subtask_prefix_mismatch"
    MISSING_SUBTASK_SECTION = "missing_subtask_section"
    INVALID_REVIEW_RATING = "invalid_review_rating"
    MISSING_REVIEW_RATING = "missing_review_rating"
    INVALID_DEPENDENCY = "invalid_dependency"
    CIRCULAR_DEPENDENCY = "circular_dependency"
    MISSING_KPI = "missing_kpi"
    KPI_EXCEEDS_LIMIT = "kpi_exceeds_limit"
    CATEGORY_OUT_OF_RANGE = "category_out_of_range"
    MISSING_CATEGORY_SECTION = "missing_category_section"
    MISSING_REFERENCE_DEFINITION = "missing_reference_definition"
    MALFORMED_TABLE = "malformed_table"
    MIXED_PREFIXES = "mixed_prefixes"
    NO_TASKS_FOUND = "no_tasks_found"
    IO_FAILURE = "io_failure"


@dataclass(frozen=True)
class ValidationError:
    """
    A single validation finding.

    Attributes:
        kind: Failure class
        message: Human-readable description naming the offending ID and rule
        task_id: Task or subtask ID the finding belongs to (None for document-level findings)
        severity: Finding severity
        line_number: 1-based document line, when known
        priority: Priority of the validator that produced the finding (0 for document-level checks)
        context: Machine-readable details (actual values, limits, missing names)
    """

    kind: ErrorKind
    message: str
    task_id: Optional[str] = None
    severity: Severity = Severity.ERROR
    line_number: Optional[int] = None
    priority: int = 0
    context: Dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    @property
    def is_critical(self) -> bool:
        return self.severity == Severity.CRITICAL

    @property
    def is_warning(self) -> bool:
        return self.severity in (Severity.WARNING, Severity.INFO)

    def format(self) -> str:
        """Format the finding as one report line."""
        if self.task_id and self.line_number is not None:
            location = f" ({self.task_id}, line {self.line_number})"
        elif self.task_id:
            location = f" ({self.task_id})"
        elif self.line_number is not None:
            location = f" (line {self.line_number})"
        else:
            location = ""
        return f"{self.severity.value.upper()}{location}: {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "message": self.message,
            "task_id": self.task_id,
            "severity": self.severity.value,
            "line_number": self.line_number,
            "context": dict(self.context),
        }


@dataclass(frozen=True)
class ValidationResult:
    """
    Outcome of one or more validation checks.

    ``valid`` is True when ``errors`` is empty. Warnings never affect validity.
    """

    valid: bool = True
    errors: Tuple[ValidationError, ...] = ()
    warnings: Tuple[ValidationError, ...] = ()
    task_count: int = 0

    @classmethod
    def success(
        cls,
        warnings: Iterable[ValidationError] = (),
        task_count: int = 0,
    ) -> "ValidationResult":
        return cls(valid=True, errors=(), warnings=tuple(warnings), task_count=task_count)

    @classmethod
    def failure(
        cls,
        errors: "ValidationError | Iterable[ValidationError]",
        warnings: Iterable[ValidationError] = (),
        task_count: int = 0,
    ) -> "ValidationResult":
        if isinstance(errors, ValidationError):
            errors = (errors,)
        error_tuple = tuple(errors)
        return cls(
            valid=not error_tuple,
            errors=error_tuple,
            warnings=tuple(warnings),
            task_count=task_count,
        )

    @classmethod
    def from_findings(
        cls,
        findings: Iterable[ValidationError],
        task_count: int = 0,
    ) -> "ValidationResult":
        """Split findings into errors and warnings by severity."""
        errors: List[ValidationError] = []
        warnings: List[ValidationError] = []
        for finding in findings:
            (warnings if finding.is_warning else errors).append(finding)
        return cls.failure(errors, warnings=warnings, task_count=task_count)

    @classmethod
    def combine(cls, results: Iterable["ValidationResult"]) -> "ValidationResult":
        """Merge results in order. The empty combination is a success."""
        errors: List[ValidationError] = []
        warnings: List[ValidationError] = []
        task_count = 0
        for result in results:
            errors.extend(result.errors)
            warnings.extend(result.warnings)
            task_count += result.task_count
        return cls(
            valid=not errors,
            errors=tuple(errors),
            warnings=tuple(warnings),
            task_count=task_count,
        )

    def merge(self, other: "ValidationResult") -> "ValidationResult":
        return ValidationResult.combine((self, other))

    def with_task_count(self, task_count: int) -> "ValidationResult":
        return ValidationResult(
            valid=self.valid,
            errors=self.errors,
            warnings=self.warnings,
            task_count=task_count,
        )

    @property
    def has_critical(self) -> bool:
        return any(error.is_critical for error in self.errors)

    @property
    def error_count(self) -> int:
        return len(self.errors)

    @property
    def warning_count(self) -> int:
        return len(self.warnings)

    def errors_for_task(self, task_id: str) -> List[ValidationError]:
        return [error for error in self.errors if error.task_id == task_id]

    def has_error_kind(self, kind: ErrorKind) -> bool:
        return any(error.kind == kind for error in self.errors)

    def group_errors_by_kind(self) -> Dict[ErrorKind, List[ValidationError]]:
        grouped: Dict[ErrorKind, List[ValidationError]] = {}
        for error in self.errors:
            grouped.setdefault(error.kind, []).append(error)
        return grouped

    def stabilized(self) -> "ValidationResult":
        """Return a copy with duplicate findings dropped and a deterministic order.

        Findings are ordered by task ID (document-level findings first), then
        by validator priority (highest first), then by discovery order.
        """
        return ValidationResult(
            valid=self.valid,
            errors=_stable_order(self.errors),
            warnings=_stable_order(self.warnings),
            task_count=self.task_count,
        )


def _stable_order(findings: Tuple[ValidationError, ...]) -> Tuple[ValidationError, ...]:
    unique: List[ValidationError] = []
    seen = set()
    for finding in findings:
        key = (finding.kind, finding.task_id, finding.message, finding.line_number)
        if key in seen:
            continue
        seen.add(key)
        unique.append(finding)
    return tuple(
        sorted(
            unique,
            key=lambda finding: (
                finding.task_id is not None,
                finding.task_id or "",
                -finding.priority,
            ),
        )
    )


SUCCESS_MESSAGE = "TaskList validation passed!"


def format_result(result: ValidationResult) -> str:
    """Build the plain-text summary of a result.

    Success yields the fixed confirmation message; failure yields one line per
    finding, errors first, warnings after.
    """
    if result.valid:
        summary = f"{SUCCESS_MESSAGE} ({result.task_count} tasks validated)"
        if not result.warnings:
            return summary
        lines = [summary, "", "Warnings:"]
        lines.extend(warning.format() for warning in result.warnings)
        return "\n".join(lines)

    header = f"TaskList validation failed with {result.error_count} error(s)"
    if result.warnings:
        header += f" and {result.warning_count} warning(s)"
    lines = [header, "", "Errors:"]
    lines.extend(error.format() for error in result.errors)
    if result.warnings:
        lines.extend(["", "Warnings:"])
        lines.extend(warning.format() for warning in result.warnings)
    return "\n".join(lines)
