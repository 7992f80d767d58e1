"""
Required section checks for main tasks.

A required section is satisfied either by its ``**Marker**`` line or by a
placeholder configured to stand in for it, e.g. ``{{test-requirements}}``
for **Test Requirements** and **Integration Test Scenarios**.
"""

import logging
from typing import Iterable, List

from tasklist_validator.core.results import ErrorKind, ValidationError, ValidationResult
from tasklist_validator.core.tasks import TaskDetail, has_placeholder, has_section
from tasklist_validator.core.validators.base import BaseValidator, ValidationContext

logger = logging.getLogger(__name__)

COMPLETED = "Completed"


class SectionValidator(BaseValidator):
    """Checks required, completion and error-handling sections."""

    name = "sections"
    priority = 50

    def validate(self, task: TaskDetail, context: ValidationContext) -> ValidationResult:
        config = context.config
        findings: List[ValidationError] = []

        findings.extend(
            self._missing(
                task,
                context,
                config.required_sections,
                ErrorKind.MISSING_REQUIRED_SECTION,
                "is missing required section",
            )
        )

        if self.is_completed(task, context):
            findings.extend(
                self._missing(
                    task,
                    context,
                    config.completion_sections,
                    ErrorKind.MISSING_COMPLETION_SECTION,
                    "is completed but missing section",
                )
            )

        # subtask bodies carry their own error handling
        own_lines = task.own_lines
        if not any(has_placeholder(own_lines, name) for name in config.error_handling_references):
            for marker in config.error_handling_sections:
                if not has_section(own_lines, marker):
                    findings.append(
                        self.finding(
                            ErrorKind.MISSING_ERROR_HANDLING,
                            f"Task '{task.id}' is missing error handling section {marker}",
                            task_id=task.id,
                            line_number=task.start_line,
                            section=marker,
                        )
                    )

        return ValidationResult.from_findings(findings)

    @staticmethod
    def is_completed(task: TaskDetail, context: ValidationContext) -> bool:
        return task.field("Status") == COMPLETED or task.id in context.completed_ids

    def _missing(
        self,
        task: TaskDetail,
        context: ValidationContext,
        markers: Iterable[str],
        kind: ErrorKind,
        phrase: str,
    ) -> List[ValidationError]:
        references = context.config.section_references
        missing = []
        for marker in markers:
            if task.has_section(marker):
                continue
            if any(task.has_placeholder(name) for name in references.get(marker, ())):
                continue
            missing.append(
                self.finding(
                    kind,
                    f"Task '{task.id}' {phrase} {marker}",
                    task_id=task.id,
                    line_number=task.start_line,
                    section=marker,
                )
            )
        return missing
