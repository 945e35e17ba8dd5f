"""
Terminal rendering of assistant responses.

Responses are split on Markdown code fences so code can be shown in a
different colour from the surrounding explanation.
"""

import re
from dataclasses import dataclass
from typing import Optional

import typer

# Opening or closing fence with an optional language tag (```sas, ```sql, ...)
FENCE_RE = re.compile(r"```[\w+#.-]*")

DIVIDER = "─" * 44


@dataclass
class TextChunk:
    """A piece of response text to be displayed."""

    content: str
    is_code: bool = False


def split_segments(text: str) -> list[TextChunk]:
    """Split ``text`` into alternating prose and code chunks.

    Even-indexed parts are prose, odd-indexed parts are code. Empty parts are
    dropped. An unterminated fence treats the remainder as code.
    """
    chunks = []
    for i, part in enumerate(FENCE_RE.split(text)):
        part = part.strip()
        if part:
            chunks.append(TextChunk(part, is_code=i % 2 == 1))
    return chunks


def render_response(text: str, persona: Optional[str] = None) -> None:
    """Print a response with a persona header and coloured code blocks."""
    label = persona.upper() if persona else "ASSISTANT"
    typer.echo("")
    typer.secho(f"🧠 {label} Response:", fg=typer.colors.CYAN, bold=True)
    typer.echo("")

    for chunk in split_segments(text):
        if chunk.is_code:
            typer.secho(f"\n{chunk.content}\n", fg=typer.colors.BRIGHT_GREEN)
        else:
            typer.secho(chunk.content, fg=typer.colors.WHITE)

    typer.secho(DIVIDER, fg=typer.colors.BRIGHT_BLACK)
