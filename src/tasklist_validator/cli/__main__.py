"""Enables running the CLI via: python -m tasklist_validator.cli"""

from tasklist_validator.cli.main import cli

if __name__ == "__main__":
    cli()
