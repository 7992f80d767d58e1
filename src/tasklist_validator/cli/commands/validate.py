"""Validate command for the tasklist-validator CLI."""

from typing import Optional

import click

from tasklist_validator.cli.logging import cli_command, get_cli_logger
from tasklist_validator.cli.output import emit_error, emit_response
from tasklist_validator.config import ValidatorConfig
from tasklist_validator.core.errors import ConfigError
from tasklist_validator.core.logging_config import configure_logging
from tasklist_validator.core.pipeline import build_validators, default_validators
from tasklist_validator.core.responses import ErrorCode, ErrorType, validation_response
from tasklist_validator.core.validation import validate_file

logger = get_cli_logger()


@click.command("validate")
@click.argument("path", type=click.Path(dir_okay=False))
@click.option(
    "--config",
    "config_file",
    envvar="TASKLIST_VALIDATOR_CONFIG_FILE",
    type=click.Path(dir_okay=False),
    help="TOML config file (default: ./tasklist-validator.toml when present)",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Override the configured log level",
)
@click.option(
    "--validators",
    "validator_names",
    help="Comma-separated validators to run (id,status,sections,subtasks,dependencies,category,kpi)",
)
@click.pass_context
@cli_command("validate")
def validate_cmd(
    ctx: click.Context,
    path: str,
    config_file: Optional[str],
    log_level: Optional[str],
    validator_names: Optional[str],
) -> None:
    """Validate a task list document.

    PATH is the TaskList.md file to check. Exits 1 when the document fails.
    """
    try:
        config = ValidatorConfig.from_env(config_file)
    except ConfigError as exc:
        emit_error(
            f"Invalid configuration: {exc}",
            code=ErrorCode.CONFIG_ERROR.value,
            error_type=ErrorType.CONFIGURATION.value,
            remediation="Fix the config file or TASKLIST_VALIDATOR_* environment variables",
            details={"key": exc.key},
        )

    log_format = (ctx.obj or {}).get("log_format", "structured")
    configure_logging(level=log_level or config.log_level, format=log_format)

    if validator_names:
        try:
            validators = build_validators(
                name for name in validator_names.split(",") if name.strip()
            )
        except ValueError as exc:
            emit_error(
                str(exc),
                code=ErrorCode.INVALID_ARGUMENT.value,
                error_type=ErrorType.VALIDATION.value,
                remediation="Use names listed in --help",
                details={"validators": validator_names},
            )
    else:
        validators = default_validators()

    logger.debug("Validating %s with %d validator(s)", path, len(validators))
    result = validate_file(path, config=config, validators=validators)
    emit_response(validation_response(result, source=path))
