"""Reference statistics command for the tasklist-validator CLI."""

import click

from tasklist_validator.cli.logging import cli_command
from tasklist_validator.cli.output import emit_error, emit_response
from tasklist_validator.core.document import Document
from tasklist_validator.core.errors import DocumentReadError
from tasklist_validator.core.references import (
    extract_references,
    reference_stats,
    resolve_references,
)
from tasklist_validator.core.responses import ErrorCode, ErrorType, success_response


@click.command("references")
@click.argument("path", type=click.Path(dir_okay=False))
@cli_command("references")
def references_cmd(path: str) -> None:
    """Report reference definitions and placeholder usage in a task list.

    PATH is the TaskList.md file to inspect. Unresolved placeholders are
    listed but do not fail the command.
    """
    try:
        document = Document.from_path(path)
    except DocumentReadError as exc:
        emit_error(
            exc.message,
            code=ErrorCode.IO_ERROR.value,
            error_type=ErrorType.NOT_FOUND.value,
            remediation="Check the path and file encoding",
            details={"path": path},
        )

    stats = reference_stats(document)
    resolution = resolve_references(document, extract_references(document))
    stats["unresolved"] = [
        {"reference": error.context.get("reference"), "line": error.line_number}
        for error in resolution.errors
    ]
    emit_response(
        success_response(
            stats,
            source=path,
            warnings=[error.message for error in resolution.errors],
        )
    )
