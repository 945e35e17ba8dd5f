"""
CLI commands: chat, personas, clean-logs.
"""

import os
from pathlib import Path
from typing import Optional

import typer
from dotenv import find_dotenv, load_dotenv

from sascopilot.config import Settings
from sascopilot.logger import get_logger, setup_logging
from sascopilot.personas import PersonaRegistry
from sascopilot.session.engine import SessionEngine
from sascopilot.session.retention import prune_logs, resolve_threshold

logger = get_logger(__name__)


def configure_logging(verbose: bool = False):
    """Configure logging for the CLI."""
    log_level = "DEBUG" if verbose else "WARNING"
    setup_logging(level=log_level)

    if not verbose:
        os.environ["LOGURU_LEVEL"] = "WARNING"


def load_environment() -> Settings:
    """Load ``.env`` (without overriding the real environment) and build settings."""
    dotenv_path = find_dotenv(usecwd=True)
    if dotenv_path:
        load_dotenv(dotenv_path)
        logger.debug(f"Loaded environment from {dotenv_path}")

    settings = Settings.from_env()
    if not settings.api_key and not settings.mock_enabled:
        logger.warning("OPENAI_API_KEY is not set; requests will fail unless /mock on")
    return settings


def run_chat(
    settings: Settings, mock: Optional[bool] = None, persona: Optional[str] = None
):
    """Start the interactive session."""
    kwargs = {}
    if mock is not None:
        kwargs["mock_enabled"] = mock
    if persona is not None:
        kwargs["persona"] = persona

    engine = SessionEngine.from_settings(settings, **kwargs)
    typer.secho(
        "🤖 SAS Copilot ready. Type /help for commands.", fg=typer.colors.CYAN
    )
    try:
        engine.run()
    except KeyboardInterrupt:
        # asyncio.Runner re-raises Ctrl-C after the engine has already closed
        pass


def register_commands(app: typer.Typer):
    """Register commands onto the app."""

    @app.command()
    def chat(
        ctx: typer.Context,
        mock: Optional[bool] = typer.Option(
            None, "--mock/--no-mock", help="Start with mock mode on or off"
        ),
        persona: Optional[str] = typer.Option(
            None, "--persona", "-p", help="Persona to start the session with"
        ),
    ):
        """Start an interactive session (the default command)."""
        run_chat(ctx.obj, mock=mock, persona=persona)

    @app.command()
    def personas(ctx: typer.Context):
        """List the configured personas."""
        settings: Settings = ctx.obj
        registry = PersonaRegistry.from_prompts(
            settings.personas, default=settings.default_persona
        )
        for name, persona in registry.items():
            marker = "*" if name == registry.default else " "
            typer.echo(f"{marker} {name:<10} {persona.system_prompt}")

    @app.command("clean-logs")
    def clean_logs(
        ctx: typer.Context,
        directory: Optional[Path] = typer.Option(
            None, "--dir", "-d", help="Log directory (defaults to LOGGING_DIR)"
        ),
        days: Optional[int] = typer.Option(
            None, "--days", help="Delete logs older than this many days"
        ),
        minutes: Optional[int] = typer.Option(
            None, "--minutes", help="Delete logs older than this many minutes (wins over --days)"
        ),
    ):
        """Delete transcript logs older than the retention threshold."""
        settings: Settings = ctx.obj
        directory = directory or Path(settings.logging.directory)
        # Explicit --days overrides configured minutes, not only configured days
        if minutes is None:
            minutes = settings.logging.retention_minutes if days is None else 0
        if days is None:
            days = settings.logging.retention_days

        threshold = resolve_threshold(minutes=minutes, days=days)
        typer.echo(f"🧹 Pruning logs in {directory} older than {threshold:%Y-%m-%d %H:%M}")

        result = prune_logs(directory, threshold)
        if result.missing_directory:
            typer.secho(f"⚠️  Log directory not found: {directory}", fg=typer.colors.YELLOW)
            return

        for path, error in result.errors:
            typer.secho(f"  ❌ {path.name}: {error}", fg=typer.colors.RED)
        typer.echo(f"✅ Deleted {result.count} log file(s)")
