"""
Response envelope for machine-readable tasklist-validator output.

Every CLI command prints one envelope:

    {
        "success": bool,       # operation succeeded and the document is valid
        "data": {...},         # payload (error_code / error_type on failure)
        "error": str | null,   # human-readable message on failure
        "meta": {
            "version": "response-v2",
            "request_id": "run_abc123"?,
            "warnings": ["..."]?
        }
    }

Keep findings and counts inside ``data`` and run context inside ``meta``.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Sequence, Union

from tasklist_validator.core.logging_config import get_run_id
from tasklist_validator.core.results import ErrorKind, ValidationResult, format_result

logger = logging.getLogger(__name__)


class ErrorCode(str, Enum):
    """Machine-readable error codes. Codes follow SCREAMING_SNAKE_CASE."""

    # Document errors
    VALIDATION_FAILED = "VALIDATION_FAILED"
    INVALID_FORMAT = "INVALID_FORMAT"
    NO_TASKS_FOUND = "NO_TASKS_FOUND"

    # Input errors
    NOT_FOUND = "NOT_FOUND"
    INVALID_ARGUMENT = "INVALID_ARGUMENT"
    CONFIG_ERROR = "CONFIG_ERROR"

    # System errors
    IO_ERROR = "IO_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class ErrorType(str, Enum):
    """Error categories for routing by callers."""

    VALIDATION = "validation"  # document broke a rule, fix the document
    NOT_FOUND = "not_found"  # input path does not exist
    CONFIGURATION = "configuration"  # config file or option is wrong
    INTERNAL = "internal"


# Kind of a run-ending finding (context["fatal"]) -> (code, type)
FATAL_CODES: Dict[ErrorKind, tuple] = {
    ErrorKind.IO_FAILURE: (ErrorCode.IO_ERROR, ErrorType.NOT_FOUND),
    ErrorKind.NO_TASKS_FOUND: (ErrorCode.NO_TASKS_FOUND, ErrorType.VALIDATION),
    ErrorKind.INVALID_ID_FORMAT: (ErrorCode.INVALID_FORMAT, ErrorType.VALIDATION),
}


@dataclass
class ToolResponse:
    """
    Standard response structure.

    Attributes:
        success: Whether the operation completed successfully
        data: The primary payload
        error: Error message if success is False, None otherwise
        meta: Response metadata including version identifier
    """

    success: bool
    data: Dict[str, Any] = field(default_factory=dict)
    error: Optional[str] = None
    meta: Dict[str, Any] = field(default_factory=lambda: {"version": "response-v2"})


def _build_meta(
    *,
    request_id: Optional[str] = None,
    warnings: Optional[Sequence[str]] = None,
    extra: Optional[Mapping[str, Any]] = None,
) -> Dict[str, Any]:
    """Construct a metadata payload that always includes the response version."""
    meta: Dict[str, Any] = {"version": "response-v2"}

    effective_request_id = request_id or get_run_id() or None
    if effective_request_id:
        meta["request_id"] = effective_request_id
    if warnings:
        meta["warnings"] = list(warnings)
    if extra:
        meta.update(dict(extra))
    return meta


def success_response(
    data: Optional[Mapping[str, Any]] = None,
    *,
    warnings: Optional[Sequence[str]] = None,
    request_id: Optional[str] = None,
    meta: Optional[Mapping[str, Any]] = None,
    **fields: Any,
) -> ToolResponse:
    """Create a standardized success response.

    Args:
        data: Optional mapping used as the base payload.
        warnings: Non-fatal issues to surface in ``meta.warnings``.
        request_id: Correlation identifier (defaults to the current run ID).
        meta: Extra metadata to merge into ``meta``.
        **fields: Additional payload fields.
    """
    payload: Dict[str, Any] = {}
    if data:
        payload.update(dict(data))
    if fields:
        payload.update(fields)

    return ToolResponse(
        success=True,
        data=payload,
        error=None,
        meta=_build_meta(request_id=request_id, warnings=warnings, extra=meta),
    )


def error_response(
    message: str,
    *,
    data: Optional[Mapping[str, Any]] = None,
    error_code: Optional[Union[ErrorCode, str]] = None,
    error_type: Optional[Union[ErrorType, str]] = None,
    remediation: Optional[str] = None,
    details: Optional[Mapping[str, Any]] = None,
    request_id: Optional[str] = None,
    meta: Optional[Mapping[str, Any]] = None,
) -> ToolResponse:
    """Create a standardized error response.

    Example:
        >>> error_response(
        ...     "File TaskList.md not found",
        ...     error_code=ErrorCode.IO_ERROR,
        ...     error_type=ErrorType.NOT_FOUND,
        ...     remediation="Check the path",
        ... )
    """
    payload: Dict[str, Any] = {}
    if data:
        payload.update(dict(data))

    code = error_code if error_code is not None else ErrorCode.INTERNAL_ERROR
    kind = error_type if error_type is not None else ErrorType.INTERNAL
    payload.setdefault("error_code", code.value if isinstance(code, Enum) else code)
    payload.setdefault("error_type", kind.value if isinstance(kind, Enum) else kind)
    if remediation is not None:
        payload.setdefault("remediation", remediation)
    if details:
        payload.setdefault("details", dict(details))

    return ToolResponse(
        success=False,
        data=payload,
        error=message,
        meta=_build_meta(request_id=request_id, extra=meta),
    )


def result_payload(result: ValidationResult) -> Dict[str, Any]:
    return {
        "valid": result.valid,
        "task_count": result.task_count,
        "error_count": result.error_count,
        "warning_count": result.warning_count,
        "errors": [error.to_dict() for error in result.errors],
        "warnings": [warning.to_dict() for warning in result.warnings],
        "report": format_result(result),
    }


def validation_response(result: ValidationResult, *, source: Optional[str] = None) -> ToolResponse:
    """Wrap a ValidationResult in an envelope.

    A valid document gives a success response. An invalid one gives an error
    response carrying the full findings, with the code taken from the fatal
    finding when the run stopped early.
    """
    payload = result_payload(result)
    if source is not None:
        payload["source"] = source

    if result.valid:
        return success_response(
            payload,
            warnings=[warning.message for warning in result.warnings],
        )

    code, error_type = ErrorCode.VALIDATION_FAILED, ErrorType.VALIDATION
    first = result.errors[0]
    if first.context.get("fatal") and first.kind in FATAL_CODES:
        code, error_type = FATAL_CODES[first.kind]

    logger.debug("Validation failed with %d error(s)", result.error_count)
    return error_response(
        payload["report"].splitlines()[0],
        data=payload,
        error_code=code,
        error_type=error_type,
        remediation="Fix the listed findings and re-run validation",
    )
