"""
Code quality KPI checks.

A task declares its KPIs in a section such as

    **Code Quality KPIs**
    - Functions per module: 5
    - Lines per function: 12
    - Call depth: 2

or pulls them in with a KPI placeholder (``{{standard-kpis}}``), which
skips the check.
"""

import logging
import re
from typing import List, Optional, Sequence

from tasklist_validator.core.results import ErrorKind, ValidationError, ValidationResult
from tasklist_validator.core.tasks import TaskDetail
from tasklist_validator.core.validators.base import BaseValidator, ValidationContext

logger = logging.getLogger(__name__)

MARKER = "**Code Quality KPIs**"
FIELD_LINE = re.compile(r"^\*\*[^*]+\*\*")


def kpi_section(lines: Sequence[str]) -> Optional[List[str]]:
    """Return the KPI section body, or None when the marker is absent.

    The body runs until the next ``**Field**`` line or a blank line.
    """
    for index, line in enumerate(lines):
        stripped = line.strip()
        if not stripped.startswith(MARKER):
            continue
        body = [stripped[len(MARKER) :]]
        for following in lines[index + 1 :]:
            text = following.strip()
            if not text or FIELD_LINE.match(text):
                break
            body.append(text)
        return body
    return None


class KpiValidator(BaseValidator):
    name = "kpi"
    priority = 30

    def validate(self, task: TaskDetail, context: ValidationContext) -> ValidationResult:
        config = context.config
        if task.find_placeholder(re.compile(config.kpi_reference_pattern)) is not None:
            return ValidationResult.success()

        body = kpi_section(task.content_lines)
        if body is None:
            return ValidationResult.failure(
                self.finding(
                    ErrorKind.MISSING_KPI,
                    f"Task '{task.id}' is missing {MARKER} section",
                    task_id=task.id,
                    line_number=task.start_line,
                )
            )

        findings: List[ValidationError] = []
        text = "\n".join(body)
        for metric in config.kpi_metrics():
            match = metric.pattern.search(text)
            if match is None:
                if metric.required:
                    findings.append(
                        self.finding(
                            ErrorKind.MISSING_KPI,
                            f"Task '{task.id}' KPI section is missing {metric.label}",
                            task_id=task.id,
                            line_number=task.start_line,
                            metric=metric.key,
                        )
                    )
                continue

            value = int(match.group(1))
            if value > metric.limit:
                findings.append(
                    self.finding(
                        ErrorKind.KPI_EXCEEDS_LIMIT,
                        f"Task '{task.id}' exceeds {metric.label} limit: {value} > {metric.limit}",
                        task_id=task.id,
                        line_number=task.start_line,
                        metric=metric.key,
                        actual=value,
                        limit=metric.limit,
                    )
                )

        return ValidationResult.from_findings(findings)
