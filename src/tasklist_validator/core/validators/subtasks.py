"""
Subtask checks.

Numbered subtasks carry their own body and are held to the full rules:
a valid **Status**, error-handling sections (or an error-handling
placeholder) and, once Completed, a **Review Rating**. Checkbox subtasks are
single lines and only have their prefix checked.
"""

import logging
from typing import List

from tasklist_validator.core.results import ErrorKind, ValidationError, ValidationResult
from tasklist_validator.core.tasks import Subtask, TaskDetail, has_placeholder, has_section, id_prefix
from tasklist_validator.core.validators.base import BaseValidator, ValidationContext
from tasklist_validator.core.validators.ids import prefix_mismatch_message

logger = logging.getLogger(__name__)


class SubtaskValidator(BaseValidator):
    name = "subtasks"
    priority = 45

    def validate(self, task: TaskDetail, context: ValidationContext) -> ValidationResult:
        findings: List[ValidationError] = []
        for subtask in task.subtasks:
            if not subtask.has_valid_id:
                continue
            if id_prefix(subtask.id) != task.prefix:
                findings.append(
                    self.finding(
                        ErrorKind.SUBTASK_PREFIX_MISMATCH,
                        prefix_mismatch_message(subtask, task),
                        task_id=task.id,
                        line_number=subtask.line_number,
                        subtask_id=subtask.id,
                        format=subtask.format.value,
                    )
                )
            if subtask.is_numbered:
                findings.extend(self._check_numbered(subtask, context))
        return ValidationResult.from_findings(findings)

    def _check_numbered(self, subtask: Subtask, context: ValidationContext) -> List[ValidationError]:
        config = context.config
        findings: List[ValidationError] = []

        status = subtask.field("Status")
        if status is None:
            findings.append(
                self.finding(
                    ErrorKind.MISSING_SUBTASK_SECTION,
                    f"Subtask '{subtask.id}' is missing **Status**",
                    task_id=subtask.id,
                    line_number=subtask.line_number,
                    section="**Status**",
                )
            )
        elif status not in config.valid_statuses:
            findings.append(
                self.finding(
                    ErrorKind.INVALID_STATUS,
                    f"Subtask '{subtask.id}' has invalid status '{status}'. "
                    f"Must be one of: {', '.join(config.valid_statuses)}",
                    task_id=subtask.id,
                    line_number=subtask.line_number,
                    value=status,
                )
            )

        lines = subtask.content_lines
        if not any(has_placeholder(lines, name) for name in config.subtask_error_handling_references):
            for marker in config.subtask_error_handling_sections:
                if not has_section(lines, marker):
                    findings.append(
                        self.finding(
                            ErrorKind.MISSING_SUBTASK_SECTION,
                            f"Subtask '{subtask.id}' is missing {marker}",
                            task_id=subtask.id,
                            line_number=subtask.line_number,
                            section=marker,
                        )
                    )

        if status == "Completed":
            rating = subtask.field("Review Rating")
            if rating is None or rating in ("", "-"):
                findings.append(
                    self.finding(
                        ErrorKind.MISSING_REVIEW_RATING,
                        f"Completed subtask {subtask.id} is missing review rating",
                        task_id=subtask.id,
                        line_number=subtask.line_number,
                    )
                )
            elif not config.rating_regex.match(rating):
                findings.append(
                    self.finding(
                        ErrorKind.INVALID_REVIEW_RATING,
                        f"Subtask '{subtask.id}' has invalid review rating '{rating}'. "
                        "Expected 1-5 with optional decimal and '(partial)' suffix",
                        task_id=subtask.id,
                        line_number=subtask.line_number,
                        value=rating,
                    )
                )

        return findings
