"""
tasklist-validator: schema validation for TaskList.md task documents.
"""

from tasklist_validator.config import PACKAGE_VERSION, ValidatorConfig
from tasklist_validator.core.results import (
    ErrorKind,
    Severity,
    ValidationError,
    ValidationResult,
    format_result,
)
from tasklist_validator.core.validation import validate_document, validate_file, validate_text

__version__ = PACKAGE_VERSION

__all__ = [
    "ErrorKind",
    "Severity",
    "ValidationError",
    "ValidationResult",
    "ValidatorConfig",
    "__version__",
    "format_result",
    "validate_document",
    "validate_file",
    "validate_text",
]
