"""
Persona registry.

A persona is a named system prompt plus an optional welcome message shown when
the user switches to it. The registry is built once at startup and never
changes afterwards.
"""

from collections.abc import Mapping
from types import MappingProxyType
from typing import Iterator, Optional

from pydantic import BaseModel, ConfigDict

from sascopilot.logger import get_logger

logger = get_logger(__name__)


DEFAULT_PERSONA = "sas"

DEFAULT_PERSONAS: dict[str, str] = {
    "sas": (
        "You are a helpful SAS programming assistant. Respond with clean, "
        "well-formatted explanations and SAS code."
    ),
    "sql": (
        "You are a knowledgeable SQL assistant. Answer queries with explanations "
        "and well-formatted SQL code."
    ),
    "mentor": (
        "You are a thoughtful mentor. Provide practical career and technical "
        "advice with empathy and clarity."
    ),
    "debugger": (
        "You are a code reviewer. Explain and help fix bugs in SAS code step by step."
    ),
    "teacher": (
        "You are a SAS teacher. Explain concepts slowly with analogies and "
        "beginner-friendly examples."
    ),
}

DEFAULT_WELCOME_MESSAGES: dict[str, str] = {
    "sas": "💡 SAS mode activated. Ask about PROC steps, data steps, or macro logic.",
    "sql": "💡 SQL mode activated. Ask me about queries, joins, optimization, or DDL.",
    "mentor": "💡 Mentor mode on. Let's talk career paths, goals, and strategies.",
    "debugger": "💡 Debugger mode: I'll help diagnose issues in your SAS code.",
    "teacher": "💡 Teacher mode: I'll explain concepts clearly with beginner-friendly examples.",
}


class Persona(BaseModel):
    """A named system-prompt profile."""

    model_config = ConfigDict(frozen=True)

    name: str
    system_prompt: str
    welcome_message: Optional[str] = None


class PersonaRegistry(Mapping):
    """Read-only, insertion-ordered mapping of persona name to ``Persona``."""

    def __init__(self, personas: list[Persona], default: str = DEFAULT_PERSONA):
        if not personas:
            raise ValueError("At least one persona must be registered")

        entries: dict[str, Persona] = {}
        for persona in personas:
            if persona.name in entries:
                raise ValueError(f"Duplicate persona name: {persona.name!r}")
            entries[persona.name] = persona
        self._entries = MappingProxyType(entries)

        if default not in self._entries:
            fallback = next(iter(self._entries))
            logger.warning(
                f"Default persona {default!r} is not registered, using {fallback!r}"
            )
            default = fallback
        self._default = default

    @classmethod
    def from_prompts(
        cls,
        prompts: Mapping[str, str],
        default: str = DEFAULT_PERSONA,
        welcome_messages: Optional[Mapping[str, str]] = None,
    ) -> "PersonaRegistry":
        """Build a registry from a ``name -> system prompt`` mapping."""
        welcome_messages = (
            DEFAULT_WELCOME_MESSAGES if welcome_messages is None else welcome_messages
        )
        personas = [
            Persona(
                name=name,
                system_prompt=prompt,
                welcome_message=welcome_messages.get(name),
            )
            for name, prompt in prompts.items()
        ]
        return cls(personas, default=default)

    @property
    def default(self) -> str:
        return self._default

    def lookup(self, name: str) -> Optional[Persona]:
        """Return the persona called ``name`` or ``None``."""
        return self._entries.get(name)

    def __getitem__(self, name: str) -> Persona:
        return self._entries[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"PersonaRegistry({list(self._entries)!r}, default={self._default!r})"
