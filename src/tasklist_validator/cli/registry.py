"""Command registry for the tasklist-validator CLI."""

import click


def register_all_commands(cli: click.Group) -> None:
    """Register all commands with the CLI group.

    Commands are imported here to keep the main module free of import cycles.
    """
    from tasklist_validator.cli.commands.references import references_cmd
    from tasklist_validator.cli.commands.validate import validate_cmd

    cli.add_command(validate_cmd)
    cli.add_command(references_cmd)
