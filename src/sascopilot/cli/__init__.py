"""
SAS Copilot CLI.

This package splits CLI commands into focused modules:
- main: chat (default), personas, clean-logs
"""

from typing import Optional

import typer

from sascopilot.cli.main import (
    configure_logging,
    load_environment,
    register_commands,
    run_chat,
)

app = typer.Typer(help="SAS Copilot - a terminal assistant for SAS and SQL")


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable verbose logging (DEBUG level)"
    ),
    mock: Optional[bool] = typer.Option(
        None, "--mock/--no-mock", help="Start with mock mode on or off"
    ),
    persona: Optional[str] = typer.Option(
        None, "--persona", "-p", help="Persona to start the session with"
    ),
):
    """
    SAS Copilot - start an interactive session when no command is given.
    """
    configure_logging(verbose)
    settings = load_environment()
    ctx.obj = settings

    if ctx.invoked_subcommand is None:
        run_chat(settings, mock=mock, persona=persona)


# Register commands (chat, personas, clean-logs)
register_commands(app)

if __name__ == "__main__":
    app()
