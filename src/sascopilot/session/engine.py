"""
Interactive session engine.

Reads one line at a time, decides whether it is a command or a question, and
for questions runs a full turn (completion, rendering, transcript) before the
next prompt is shown. Only one turn is ever in flight.
"""

import asyncio
import sys
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, TextIO

import typer

from sascopilot.config import DEFAULT_EXIT_COMMANDS, Settings
from sascopilot.formatter import render_response
from sascopilot.llm import CompletionClient, GatewayError, LLMClient, MockLLMClient
from sascopilot.logger import get_logger
from sascopilot.personas import PersonaRegistry
from sascopilot.session.transcript import LogEntry, TranscriptLog

logger = get_logger(__name__)

HELP_COMMANDS = ("/help", "help", "?")

EMPTY_INPUT_HINT = (
    "⚠️  Please enter a question, command, or prompt. "
    "Use `/persona <name>` to switch personas or type something to begin."
)
INVALID_INPUT_HINT = (
    "⚠️  That doesn't look like a valid question. Try asking something about "
    "SAS or SQL, or switch persona using `/persona <name>`."
)
EXIT_MESSAGE = "👋 Exiting SAS Assistant. See you next time!"
INTERRUPT_MESSAGE = "👋 Session ended. SAS Assistant signing off."


class SessionStatus(str, Enum):
    IDLE = "idle"
    DISPATCHING = "dispatching"
    TERMINATED = "terminated"


@dataclass
class SessionState:
    """Mutable per-session settings, changed only by chat commands."""

    active_persona: str
    mock_enabled: bool = False


class SessionEngine:
    """
    Read-eval-print loop for the assistant.

    Args:
        registry: Available personas
        client: Completion client used for real requests
        mock_client: Client used while mock mode is on
        transcript: Where completed turns are recorded (None disables)
        renderer: Callable displaying ``(response, persona)``
        exit_commands: Tokens that end the session, matched case-insensitively
        mock_enabled: Initial mock mode
        persona: Initial persona (defaults to the registry default)
        input_stream: Text stream to read lines from; stdin via ``input()`` if None
    """

    def __init__(
        self,
        registry: PersonaRegistry,
        client: CompletionClient,
        *,
        mock_client: Optional[CompletionClient] = None,
        transcript: Optional[TranscriptLog] = None,
        renderer: Callable[[str, str], None] = render_response,
        exit_commands: Optional[list[str]] = None,
        mock_enabled: bool = False,
        persona: Optional[str] = None,
        input_stream: Optional[TextIO] = None,
    ):
        self.registry = registry
        self.client = client
        self.mock_client = mock_client or MockLLMClient()
        self.transcript = transcript
        self.renderer = renderer
        self.exit_commands = [
            token.lower() for token in (exit_commands or DEFAULT_EXIT_COMMANDS)
        ]
        self.input_stream = input_stream

        start_persona = registry.default
        if persona is not None:
            if registry.lookup(persona) is None:
                logger.warning(
                    f"Unknown starting persona {persona!r}, using {start_persona!r}"
                )
            else:
                start_persona = persona
        self.state = SessionState(active_persona=start_persona, mock_enabled=mock_enabled)
        self.status = SessionStatus.IDLE

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs) -> "SessionEngine":
        """Wire an engine from application settings."""
        registry = PersonaRegistry.from_prompts(
            settings.personas, default=settings.default_persona
        )
        kwargs.setdefault(
            "client",
            LLMClient(
                model=settings.model,
                temperature=settings.temperature,
                api_key=settings.api_key,
            ),
        )
        kwargs.setdefault("transcript", TranscriptLog(settings.logging))
        kwargs.setdefault("exit_commands", settings.exit_commands)
        kwargs.setdefault("mock_enabled", settings.mock_enabled)
        return cls(registry, **kwargs)

    # ─── Loop ─────────────────────────────────────────────────────────

    @property
    def prompt_text(self) -> str:
        return typer.style(
            f"💬 [{self.state.active_persona}] How can I help: ",
            fg=typer.colors.MAGENTA,
        )

    def _read_line(self) -> str:
        if self.input_stream is None:
            return input(self.prompt_text)

        typer.echo(self.prompt_text, nl=False)
        line = self.input_stream.readline()
        if line == "":
            raise EOFError
        return line

    def run(self) -> None:
        """Run until an exit command, an interrupt, or end of input."""
        logger.debug(
            f"Session started (persona={self.state.active_persona}, "
            f"mock={self.state.mock_enabled})"
        )
        with asyncio.Runner() as runner:
            while self.status != SessionStatus.TERMINATED:
                try:
                    line = self._read_line()
                except (KeyboardInterrupt, EOFError):
                    self.close(INTERRUPT_MESSAGE)
                    break

                self.status = SessionStatus.DISPATCHING
                try:
                    runner.run(self.handle_line(line))
                except GatewayError as e:
                    logger.warning(f"Turn failed: {e}")
                    typer.secho(f"\n❌ Request failed: {e}\n", fg=typer.colors.RED)
                except KeyboardInterrupt:
                    self.close(INTERRUPT_MESSAGE)
                    break
                finally:
                    if self.status == SessionStatus.DISPATCHING:
                        self.status = SessionStatus.IDLE

        logger.debug("Session terminated")

    def close(self, message: str = EXIT_MESSAGE) -> None:
        """Say goodbye, close the input stream and stop the loop."""
        if self.status == SessionStatus.TERMINATED:
            return
        typer.secho(f"\n{message}\n", fg=typer.colors.BRIGHT_YELLOW)
        stream = self.input_stream if self.input_stream is not None else sys.stdin
        stream.close()
        self.status = SessionStatus.TERMINATED

    # ─── Dispatch ─────────────────────────────────────────────────────

    async def handle_line(self, raw: str) -> None:
        """
        Classify one input line and act on it.

        Raises:
            GatewayError: If a question could not be answered
        """
        line = raw.strip()
        lower = line.lower()

        if not line:
            self._warn(EMPTY_INPUT_HINT)
            return

        # "?" is a help token even though it has no alphanumeric character
        if line in HELP_COMMANDS:
            self._show_help()
            return

        if not any(ch.isalnum() for ch in line):
            self._warn(INVALID_INPUT_HINT)
            return

        # Shorthand persona switch, e.g. /sas, /sql
        if line.startswith("/") and self.registry.lookup(line[1:]) is not None:
            self.switch_persona(line[1:])
            return

        if lower == "/persona":
            typer.secho(
                f"\nActive persona: {self.state.active_persona}\n", fg=typer.colors.CYAN
            )
            return

        if lower.startswith("/persona "):
            self._handle_persona_command(lower)
            return

        if line == "/personas":
            self._list_personas()
            return

        if lower == "/mock" or lower.startswith("/mock "):
            self._handle_mock_command(lower)
            return

        if lower in self.exit_commands:
            self.close(EXIT_MESSAGE)
            return

        await self.ask(line)

    async def ask(self, text: str) -> str:
        """Run one question-and-answer turn under the active persona."""
        persona = self.registry[self.state.active_persona]
        client = self.mock_client if self.state.mock_enabled else self.client

        response = await client.complete(text, persona.system_prompt)

        self.renderer(response, persona.name)
        if self.transcript is not None:
            self.transcript.record(
                LogEntry(persona=persona.name, input=text, response=response)
            )
        return response

    # ─── Commands ─────────────────────────────────────────────────────

    def switch_persona(self, name: str) -> bool:
        """Make ``name`` the active persona. Returns False if it is unknown."""
        persona = self.registry.lookup(name)
        if persona is None:
            typer.secho(f'\n❌ Unknown persona: "{name}"\n', fg=typer.colors.RED)
            return False

        self.state.active_persona = persona.name
        logger.debug(f"Persona switched to {persona.name}")
        typer.secho(f'\n✨ Persona switched to "{persona.name}"\n', fg=typer.colors.CYAN)
        if persona.welcome_message:
            typer.secho(f"{persona.welcome_message}\n", fg=typer.colors.BRIGHT_BLACK)
        return True

    def _handle_persona_command(self, lower: str) -> None:
        args = lower.split()[1:]
        if len(args) != 1:
            typer.secho("\n❌ Usage: /persona <name>\n", fg=typer.colors.RED)
            return
        self.switch_persona(args[0])

    def _list_personas(self) -> None:
        typer.secho("\n📚 Available Personas:\n", fg=typer.colors.CYAN)
        for name, persona in self.registry.items():
            marker = "*" if name == self.state.active_persona else "•"
            label = typer.style(name.ljust(10), fg=typer.colors.GREEN)
            typer.echo(f"{marker} {label} – {persona.system_prompt}")
        typer.echo("")

    def _handle_mock_command(self, lower: str) -> None:
        args = lower.split()[1:]
        if not args:
            state = "on" if self.state.mock_enabled else "off"
            typer.secho(f"\n🧪 Mock mode is {state}\n", fg=typer.colors.CYAN)
            return

        if args == ["on"]:
            self.state.mock_enabled = True
        elif args == ["off"]:
            self.state.mock_enabled = False
        else:
            typer.secho("\n❌ Usage: /mock [on|off]\n", fg=typer.colors.RED)
            return

        logger.debug(f"Mock mode set to {self.state.mock_enabled}")
        state = "enabled" if self.state.mock_enabled else "disabled"
        typer.secho(f"\n🧪 Mock mode {state}\n", fg=typer.colors.CYAN)

    def _show_help(self) -> None:
        exits = ", ".join(self.exit_commands)
        typer.secho("\n📖 Commands:\n", fg=typer.colors.CYAN)
        typer.echo("  <question>         Ask the active persona")
        typer.echo("  /<name>            Switch persona (e.g. /sql)")
        typer.echo("  /persona <name>    Switch persona")
        typer.echo("  /persona           Show the active persona")
        typer.echo("  /personas          List available personas")
        typer.echo("  /mock [on|off]     Show or toggle mock mode")
        typer.echo("  /help, help, ?     Show this help")
        typer.echo(f"  {exits:<18} Exit the assistant")
        typer.echo("")

    def _warn(self, message: str) -> None:
        typer.secho(f"\n{message}\n", fg=typer.colors.BRIGHT_YELLOW)
