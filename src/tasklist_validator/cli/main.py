"""tasklist-validator CLI entry point.

JSON-only output for scripts and CI jobs.
"""

import click

from tasklist_validator import __version__
from tasklist_validator.cli.registry import register_all_commands


@click.group()
@click.version_option(__version__, prog_name="tasklist-validator")
@click.option(
    "--log-format",
    type=click.Choice(["structured", "human"]),
    default="structured",
    show_default=True,
    help="Format for log lines written to stderr",
)
@click.pass_context
def cli(ctx: click.Context, log_format: str) -> None:
    """Validate TaskList.md documents against the task list schema.

    All commands output JSON envelopes.
    """
    ctx.ensure_object(dict)
    ctx.obj["log_format"] = log_format


register_all_commands(cli)


if __name__ == "__main__":
    cli()
