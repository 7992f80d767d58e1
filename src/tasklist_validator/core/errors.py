"""
Exceptions for structural failures that end a validation run early.

Per-task rule violations are never raised; they are reported as
ValidationError findings. These exceptions cover only conditions that make
further analysis meaningless.
"""

from typing import Optional, Sequence, Tuple

from tasklist_validator.core.results import ErrorKind, Severity, ValidationError


class TaskListError(Exception):
    """Base exception for fatal task list failures.

    Attributes:
        kind: Failure class used when the exception is turned into a finding.
    """

    kind: ErrorKind = ErrorKind.IO_FAILURE

    def __init__(self, message: str, line_number: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.line_number = line_number

    def to_finding(self) -> ValidationError:
        return ValidationError(
            kind=self.kind,
            message=self.message,
            severity=Severity.CRITICAL,
            line_number=self.line_number,
            context={"fatal": True},
        )


class DocumentReadError(TaskListError):
    """Raised when the task list file cannot be read or decoded."""

    kind = ErrorKind.IO_FAILURE

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class NoTasksFoundError(TaskListError):
    """Raised when neither summary table lists a task."""

    kind = ErrorKind.NO_TASKS_FOUND


class InvalidTableIdError(TaskListError):
    """Raised when a summary table row carries a malformed task ID.

    Attributes:
        rows: (line_number, task_id) pairs for every malformed row, 1-based.
    """

    kind = ErrorKind.INVALID_ID_FORMAT

    def __init__(self, rows: Sequence[Tuple[int, str]]):
        self.rows = tuple(rows)
        details = "\n".join(f"  Line {line}: {task_id} (invalid format)" for line, task_id in self.rows)
        super().__init__(f"Invalid task ID format:\n{details}")

    def to_finding(self) -> ValidationError:
        finding = super().to_finding()
        return ValidationError(
            kind=finding.kind,
            message=finding.message,
            severity=finding.severity,
            context={
                **finding.context,
                "rows": [{"line": line, "id": task_id} for line, task_id in self.rows],
            },
        )


class ConfigError(ValueError):
    """Raised when validator configuration is inconsistent."""

    def __init__(self, message: str, key: Optional[str] = None):
        super().__init__(message)
        self.key = key
