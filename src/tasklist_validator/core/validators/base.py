"""
Validator protocol and shared run context.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Mapping, Optional, Protocol, Tuple, runtime_checkable

from tasklist_validator.config import ValidatorConfig
from tasklist_validator.core.results import (
    ErrorKind,
    Severity,
    ValidationError,
    ValidationResult,
)
from tasklist_validator.core.tasks import INVALID_FORMAT, TableOrigin, TaskDetail, TaskStub


@dataclass(frozen=True)
class ValidationContext:
    """Everything a validator may consult besides the task itself.

    Built once per run and passed explicitly to every validator.

    Attributes:
        tasks: All detail sections in document order
        stubs: All summary table rows, active table first
        references: Reference definitions by name
        config: Rules in effect for the run
    """

    tasks: Tuple[TaskDetail, ...] = ()
    stubs: Tuple[TaskStub, ...] = ()
    references: Mapping[str, Tuple[str, ...]] = field(default_factory=dict)
    config: ValidatorConfig = field(default_factory=ValidatorConfig)

    @property
    def known_ids(self) -> FrozenSet[str]:
        """Task, table and subtask IDs that dependencies may point at."""
        ids = {task.id for task in self.tasks}
        ids.update(stub.id for stub in self.stubs)
        for task in self.tasks:
            ids.update(subtask.id for subtask in task.subtasks if subtask.has_valid_id)
        ids.discard(INVALID_FORMAT)
        return frozenset(ids)

    @property
    def completed_ids(self) -> FrozenSet[str]:
        return frozenset(stub.id for stub in self.stubs if stub.origin == TableOrigin.COMPLETED)

    def stub_for(self, task_id: str, origin: Optional[TableOrigin] = None) -> Optional[TaskStub]:
        for stub in self.stubs:
            if stub.id == task_id and (origin is None or stub.origin == origin):
                return stub
        return None


@runtime_checkable
class Validator(Protocol):
    """A rule that checks one task.

    Validators run in descending ``priority`` order. A result containing a
    CRITICAL error stops the remaining validators for that task.
    """

    name: str
    priority: int

    def validate(self, task: TaskDetail, context: ValidationContext) -> ValidationResult:
        ...


class BaseValidator(ABC):
    """Convenience base providing finding constructors stamped with the validator priority."""

    name = "base"
    priority = 0

    def finding(
        self,
        kind: ErrorKind,
        message: str,
        task_id: Optional[str] = None,
        severity: Severity = Severity.ERROR,
        line_number: Optional[int] = None,
        **context: Any,
    ) -> ValidationError:
        return ValidationError(
            kind=kind,
            message=message,
            task_id=task_id,
            severity=severity,
            line_number=line_number,
            priority=self.priority,
            context=dict(context),
        )

    @abstractmethod
    def validate(self, task: TaskDetail, context: ValidationContext) -> ValidationResult:
        """Check one task and return its findings."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(priority={self.priority})"


def context_dict(context: ValidationContext) -> Dict[str, Any]:
    """Describe a context for debug logging."""
    return {
        "tasks": len(context.tasks),
        "stubs": len(context.stubs),
        "references": len(context.references),
    }
