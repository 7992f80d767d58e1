"""
Status and priority checks for main tasks.
"""

import logging

from tasklist_validator.core.results import ErrorKind, Severity, ValidationResult
from tasklist_validator.core.tasks import TableOrigin, TaskDetail
from tasklist_validator.core.validators.base import BaseValidator, ValidationContext

logger = logging.getLogger(__name__)

IN_PROGRESS = "In Progress"


class StatusValidator(BaseValidator):
    """Checks **Status** and **Priority** values against the configured enumerations.

    Missing fields are left to SectionValidator. An "In Progress" task must
    have at least one subtask, and a detail status that disagrees with the
    summary table is reported as a warning.
    """

    name = "status"
    priority = 60

    def validate(self, task: TaskDetail, context: ValidationContext) -> ValidationResult:
        config = context.config
        findings = []

        status_field = task.field_with_line("Status")
        status = None
        if status_field is not None:
            status, line_number = status_field
            if status not in config.valid_statuses:
                findings.append(
                    self.finding(
                        ErrorKind.INVALID_STATUS,
                        f"Task '{task.id}' has invalid status '{status}'. "
                        f"Must be one of: {', '.join(config.valid_statuses)}",
                        task_id=task.id,
                        line_number=line_number,
                        value=status,
                    )
                )

        priority_field = task.field_with_line("Priority")
        if priority_field is not None:
            priority, line_number = priority_field
            if priority not in config.valid_priorities:
                findings.append(
                    self.finding(
                        ErrorKind.INVALID_PRIORITY,
                        f"Task '{task.id}' has invalid priority '{priority}'. "
                        f"Must be one of: {', '.join(config.valid_priorities)}",
                        task_id=task.id,
                        line_number=line_number,
                        value=priority,
                    )
                )

        if status == IN_PROGRESS and not task.subtasks:
            findings.append(
                self.finding(
                    ErrorKind.MISSING_SUBTASKS,
                    f"Task '{task.id}' is In Progress but has no subtasks",
                    task_id=task.id,
                    line_number=task.start_line,
                )
            )

        if status is not None:
            for origin in TableOrigin:
                stub = context.stub_for(task.id, origin)
                if stub is None or not stub.raw_status or stub.raw_status == status:
                    continue
                findings.append(
                    self.finding(
                        ErrorKind.STATUS_MISMATCH,
                        f"Task '{task.id}' status '{status}' differs from "
                        f"{stub.origin.value} table status '{stub.raw_status}' (line {stub.source_line})",
                        task_id=task.id,
                        severity=Severity.WARNING,
                        line_number=stub.source_line,
                        detail_status=status,
                        table_status=stub.raw_status,
                    )
                )

        return ValidationResult.from_findings(findings)
