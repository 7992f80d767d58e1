"""
Task and subtask ID checks.

All findings here are CRITICAL: once a task's IDs are wrong, the remaining
rules would report noise against the wrong names.
"""

import logging
from collections import defaultdict
from typing import Dict, List

from tasklist_validator.core.results import ErrorKind, Severity, ValidationResult
from tasklist_validator.core.tasks import INVALID_FORMAT, Subtask, TaskDetail, id_prefix
from tasklist_validator.core.validators.base import BaseValidator, ValidationContext

logger = logging.getLogger(__name__)


def prefix_mismatch_message(subtask: Subtask, task: TaskDetail) -> str:
    return (
        f"Subtask '{subtask.id}' prefix '{id_prefix(subtask.id)}' does not match "
        f"parent task '{task.id}' prefix '{task.prefix}'"
    )


def _id_lines(context: ValidationContext) -> Dict[str, List[int]]:
    lines: Dict[str, List[int]] = defaultdict(list)
    for task in context.tasks:
        lines[task.id].append(task.start_line)
        for subtask in task.subtasks:
            if subtask.id != INVALID_FORMAT:
                lines[subtask.id].append(subtask.line_number)
    return lines


class IdValidator(BaseValidator):
    """Checks ID grammar, uniqueness across detail sections and subtasks, and subtask prefixes."""

    name = "id"
    priority = 90

    def __init__(self, warn_mixed_prefixes: bool = True):
        self.warn_mixed_prefixes = warn_mixed_prefixes

    def validate(self, task: TaskDetail, context: ValidationContext) -> ValidationResult:
        id_regex = context.config.id_regex
        findings = []

        if not id_regex.match(task.id):
            findings.append(
                self.finding(
                    ErrorKind.INVALID_ID_FORMAT,
                    f"Task ID '{task.id}' does not match the required format",
                    task_id=task.id,
                    severity=Severity.CRITICAL,
                    line_number=task.start_line,
                    pattern=id_regex.pattern,
                )
            )

        for subtask in task.subtasks:
            if subtask.id == INVALID_FORMAT:
                findings.append(
                    self.finding(
                        ErrorKind.INVALID_ID_FORMAT,
                        f"Subtask of '{task.id}' at line {subtask.line_number} has a missing or malformed ID",
                        task_id=task.id,
                        severity=Severity.CRITICAL,
                        line_number=subtask.line_number,
                        format=subtask.format.value,
                    )
                )
            elif not id_regex.match(subtask.id):
                findings.append(
                    self.finding(
                        ErrorKind.INVALID_ID_FORMAT,
                        f"Subtask ID '{subtask.id}' does not match the required format",
                        task_id=task.id,
                        severity=Severity.CRITICAL,
                        line_number=subtask.line_number,
                    )
                )
            elif id_prefix(subtask.id) != task.prefix:
                findings.append(
                    self.finding(
                        ErrorKind.SUBTASK_PREFIX_MISMATCH,
                        prefix_mismatch_message(subtask, task),
                        task_id=task.id,
                        severity=Severity.CRITICAL,
                        line_number=subtask.line_number,
                        subtask_id=subtask.id,
                        format=subtask.format.value,
                    )
                )

        id_lines = _id_lines(context)
        own_ids = [task.id] + [s.id for s in task.subtasks if s.id != INVALID_FORMAT]
        for own_id in dict.fromkeys(own_ids):
            lines = id_lines.get(own_id, [])
            if len(lines) > 1:
                joined = ", ".join(str(line) for line in sorted(lines))
                findings.append(
                    self.finding(
                        ErrorKind.DUPLICATE_ID,
                        f"Duplicate task IDs found: {own_id} (lines {joined})",
                        task_id=own_id,
                        severity=Severity.CRITICAL,
                        lines=sorted(lines),
                    )
                )

        if self.warn_mixed_prefixes and context.tasks and task is context.tasks[0]:
            prefixes = sorted({t.prefix for t in context.tasks if t.prefix})
            if len(prefixes) > 1:
                findings.append(
                    self.finding(
                        ErrorKind.MIXED_PREFIXES,
                        f"Task list mixes ID prefixes: {', '.join(prefixes)}",
                        severity=Severity.INFO,
                        prefixes=prefixes,
                    )
                )

        if findings:
            logger.debug("Task %s: %d ID finding(s)", task.id, len(findings))
        return ValidationResult.from_findings(findings)
