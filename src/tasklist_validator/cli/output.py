"""JSON output helpers for the tasklist-validator CLI.

Commands print exactly one response-v2 envelope. Operational errors (bad
options, unreadable config) go to stderr; validation outcomes go to stdout.
"""

import json
import sys
from dataclasses import asdict
from typing import Any, Mapping, NoReturn, Optional

from tasklist_validator.core.responses import ToolResponse, error_response


def emit(data: Any) -> None:
    """Emit minified JSON to stdout."""
    print(json.dumps(data, separators=(",", ":"), default=str))


def emit_response(response: ToolResponse) -> None:
    """Emit a response envelope to stdout, exiting 1 when it reports failure."""
    emit(asdict(response))
    if not response.success:
        sys.exit(1)


def emit_error(
    message: str,
    code: str = "INTERNAL_ERROR",
    *,
    error_type: str = "internal",
    remediation: Optional[str] = None,
    details: Optional[Mapping[str, Any]] = None,
) -> NoReturn:
    """Emit error JSON to stderr and exit with code 1.

    Raises:
        SystemExit: Always exits with code 1.
    """
    response = error_response(
        message=message,
        error_code=code,
        error_type=error_type,
        remediation=remediation,
        details=details,
    )
    print(json.dumps(asdict(response), separators=(",", ":"), default=str), file=sys.stderr)
    sys.exit(1)
