"""
Category checks driven by the numeric part of the task ID.
"""

import logging

from tasklist_validator.core.results import ErrorKind, ValidationResult
from tasklist_validator.core.tasks import TaskDetail
from tasklist_validator.core.validators.base import BaseValidator, ValidationContext

logger = logging.getLogger(__name__)


class CategoryValidator(BaseValidator):
    """Maps each task to a category by ID number and checks the category's sections.

    ``{{<category>-sections}}`` satisfies every section of that category.
    """

    name = "category"
    priority = 35

    def validate(self, task: TaskDetail, context: ValidationContext) -> ValidationResult:
        config = context.config
        number = task.number
        if number is None:
            return ValidationResult.success()

        category = config.category_for(number)
        if category is None:
            ranges = ", ".join(c.describe() for c in config.category_ranges)
            return ValidationResult.failure(
                self.finding(
                    ErrorKind.CATEGORY_OUT_OF_RANGE,
                    f"Task '{task.id}' number {number} is outside every category range: {ranges}",
                    task_id=task.id,
                    line_number=task.start_line,
                    number=number,
                )
            )

        logger.debug("Task %s is in category %s", task.id, category.name)
        if task.has_placeholder(config.category_reference(category)):
            return ValidationResult.success()

        findings = [
            self.finding(
                ErrorKind.MISSING_CATEGORY_SECTION,
                f"Task '{task.id}' ({category.name}) is missing {marker}",
                task_id=task.id,
                line_number=task.start_line,
                category=category.name,
                section=marker,
            )
            for marker in category.sections
            if not task.has_section(marker)
        ]
        return ValidationResult.from_findings(findings)
