"""Run logging hooks for CLI commands.

Each command invocation runs inside a run context so every log line and the
response envelope carry the same run ID.
"""

import logging
import time
from functools import wraps
from typing import Any, Callable, Optional, TypeVar

from tasklist_validator.core.logging_config import run_context

__all__ = ["cli_command", "get_cli_logger"]

T = TypeVar("T")

_cli_logger = logging.getLogger("tasklist_validator.cli")


def get_cli_logger() -> logging.Logger:
    """Get the CLI logger."""
    return _cli_logger


def cli_command(command_name: Optional[str] = None) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """Decorator for CLI commands.

    Sets a fresh run ID and logs command start, end and duration.

    Example:
        >>> @cli_command("validate")
        ... def validate_cmd(path: str):
        ...     ...
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        name = command_name or func.__name__

        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            with run_context() as run_id:
                start = time.perf_counter()
                success = True
                _cli_logger.debug("CLI command started: %s", name, extra={"command": name})
                try:
                    return func(*args, **kwargs)
                except Exception:
                    success = False
                    raise
                finally:
                    _cli_logger.debug(
                        "CLI command completed: %s",
                        name,
                        extra={
                            "command": name,
                            "success": success,
                            "duration_ms": round((time.perf_counter() - start) * 1000, 2),
                            "request_id": run_id,
                        },
                    )

        return wrapper

    return decorator
