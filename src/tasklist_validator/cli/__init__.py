"""Command-line interface for tasklist-validator.

All commands emit a single JSON envelope for reliable parsing.
"""

from tasklist_validator.cli.main import cli
from tasklist_validator.cli.output import emit, emit_error, emit_response

__all__ = [
    "cli",
    "emit",
    "emit_error",
    "emit_response",
]
