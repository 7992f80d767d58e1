"""
Whole-document validation for task lists.

Runs the stages in order:

1. summary tables -> TaskStubs (fatal on no tasks or malformed table IDs)
2. table-level checks: duplicate IDs, active tasks without a detail section
3. reference resolution
4. the validator pipeline over every detail section

and returns a single stabilised ValidationResult.
"""

import logging
from collections import defaultdict
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple, Union

from tasklist_validator.config import ValidatorConfig
from tasklist_validator.core.document import Document
from tasklist_validator.core.errors import (
    InvalidTableIdError,
    NoTasksFoundError,
    TaskListError,
)
from tasklist_validator.core.pipeline import default_validators, run_many
from tasklist_validator.core.references import extract_references, resolve_references
from tasklist_validator.core.results import (
    ErrorKind,
    Severity,
    ValidationError,
    ValidationResult,
)
from tasklist_validator.core.tasks import (
    TableOrigin,
    TaskDetail,
    TaskStub,
    extract_table_tasks,
    extract_task_details,
    is_subtask_id,
)
from tasklist_validator.core.validators.base import ValidationContext, Validator

logger = logging.getLogger(__name__)


def read_tables(document: Document, config: ValidatorConfig) -> Tuple[List[TaskStub], List[ValidationError]]:
    """Read both summary tables.

    Raises:
        NoTasksFoundError: If neither table has a row.
        InvalidTableIdError: If any row's ID is malformed.
    """
    active = extract_table_tasks(document, config.active_table_heading, TableOrigin.ACTIVE)
    completed = extract_table_tasks(document, config.completed_table_heading, TableOrigin.COMPLETED)
    stubs = list(active.stubs + completed.stubs)

    if not stubs:
        raise NoTasksFoundError(
            f"No tasks found in '{config.active_table_heading}' or "
            f"'{config.completed_table_heading}' tables"
        )

    id_regex = config.id_regex
    invalid = [(stub.source_line, stub.id) for stub in stubs if not id_regex.match(stub.id)]
    if invalid:
        raise InvalidTableIdError(invalid)

    return stubs, list(active.warnings + completed.warnings)


def check_duplicate_ids(stubs: Sequence[TaskStub]) -> List[ValidationError]:
    """One finding per duplicated table ID, naming every row it appears on."""
    lines: Dict[str, List[int]] = defaultdict(list)
    for stub in stubs:
        lines[stub.id].append(stub.source_line)

    findings = []
    for task_id, rows in lines.items():
        if len(rows) < 2:
            continue
        joined = ", ".join(str(row) for row in rows)
        findings.append(
            ValidationError(
                kind=ErrorKind.DUPLICATE_ID,
                message=f"Duplicate task IDs found: {task_id} (lines {joined})",
                task_id=task_id,
                severity=Severity.ERROR,
                line_number=rows[0],
                context={"lines": rows},
            )
        )
    return findings


def check_missing_details(
    stubs: Sequence[TaskStub], details: Sequence[TaskDetail]
) -> List[ValidationError]:
    """Active, non-subtask rows must have a detail section. Completed rows are exempt."""
    detail_ids = {detail.id for detail in details}
    findings = []
    seen = set()
    for stub in stubs:
        if stub.origin != TableOrigin.ACTIVE or is_subtask_id(stub.id):
            continue
        if stub.id in detail_ids or stub.id in seen:
            continue
        seen.add(stub.id)
        findings.append(
            ValidationError(
                kind=ErrorKind.MISSING_DETAIL_SECTION,
                message=f"Task '{stub.id}' is listed in the task table but has no detail section",
                task_id=stub.id,
                severity=Severity.ERROR,
                line_number=stub.source_line,
            )
        )
    return findings


def validate_document(
    document: Document,
    config: Optional[ValidatorConfig] = None,
    validators: Optional[Sequence[Validator]] = None,
) -> ValidationResult:
    """Validate a whole task list document.

    Args:
        document: Document to check
        config: Rules to apply; defaults to ValidatorConfig()
        validators: Validator chain; defaults to default_validators()

    Returns:
        Stabilised ValidationResult. Fatal conditions yield a failed result
        holding only the fatal finding.
    """
    config = config or ValidatorConfig()
    validators = default_validators() if validators is None else list(validators)

    try:
        stubs, table_warnings = read_tables(document, config)
    except TaskListError as exc:
        logger.info("Validation of %s stopped: %s", document.source, exc.kind.value)
        return ValidationResult.failure(exc.to_finding())

    details = extract_task_details(document)
    table_result = ValidationResult.from_findings(
        check_duplicate_ids(stubs) + check_missing_details(stubs, details) + table_warnings
    )

    references = extract_references(document)
    reference_result = resolve_references(document, references)

    context = ValidationContext(
        tasks=tuple(details),
        stubs=tuple(stubs),
        references=references,
        config=config,
    )
    task_result = run_many(details, context, validators)

    result = (
        ValidationResult.combine([table_result, reference_result, task_result])
        .with_task_count(len(details))
        .stabilized()
    )

    logger.info(
        "Validated %s: %d task(s), %d error(s), %d warning(s)",
        document.source,
        result.task_count,
        result.error_count,
        result.warning_count,
    )
    return result


def validate_text(
    text: str,
    config: Optional[ValidatorConfig] = None,
    validators: Optional[Sequence[Validator]] = None,
) -> ValidationResult:
    return validate_document(Document.from_text(text), config=config, validators=validators)


def validate_file(
    path: Union[str, Path],
    config: Optional[ValidatorConfig] = None,
    validators: Optional[Sequence[Validator]] = None,
) -> ValidationResult:
    """Read and validate a task list file.

    An unreadable file yields a failed result with a single IO_FAILURE finding.
    """
    try:
        document = Document.from_path(path)
    except TaskListError as exc:
        logger.info("Could not read %s: %s", path, exc.message)
        return ValidationResult.failure(exc.to_finding())
    return validate_document(document, config=config, validators=validators)
