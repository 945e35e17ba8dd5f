"""
LiteLLM integration for chat completions.

Each call sends exactly one system message and one user message; no history is
carried between calls.
"""

from typing import Optional, Protocol

import litellm

from sascopilot.config import DEFAULT_MODEL, DEFAULT_TEMPERATURE
from sascopilot.logger import get_logger

logger = get_logger(__name__)

# Drop unsupported parameters when calling APIs
litellm.drop_params = True


class GatewayError(Exception):
    """Raised when a completion could not be obtained."""


class CompletionClient(Protocol):
    async def complete(self, prompt: str, system: str) -> str: ...


class LLMClient:
    """LiteLLM client for single-turn completions."""

    def __init__(
        self,
        model: str = DEFAULT_MODEL,
        temperature: float = DEFAULT_TEMPERATURE,
        api_key: Optional[str] = None,
    ):
        """Initialize LLM client.

        Args:
            model: LiteLLM model identifier (e.g. 'gpt-5-mini')
            temperature: Sampling temperature
            api_key: Provider API key; LiteLLM reads the environment when None
        """
        self.model = model
        self.temperature = temperature
        self.api_key = api_key

    def _build_messages(self, prompt: str, system: Optional[str]) -> list[dict]:
        messages = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})
        return messages

    async def complete(self, prompt: str, system: Optional[str] = None) -> str:
        """Generate a completion for a prompt.

        Args:
            prompt: User prompt
            system: System message selecting the persona

        Returns:
            Generated text response

        Raises:
            GatewayError: On network, authentication or malformed-response errors
        """
        kwargs = {}
        if self.api_key:
            kwargs["api_key"] = self.api_key

        try:
            response = await litellm.acompletion(
                model=self.model,
                messages=self._build_messages(prompt, system),
                temperature=self.temperature,
                **kwargs,
            )
        except Exception as e:
            logger.error(f"LLM completion failed: {e}")
            raise GatewayError(str(e)) from e

        try:
            content = response.choices[0].message.content
        except (AttributeError, IndexError, KeyError, TypeError) as e:
            logger.error(f"Malformed completion response: {e}")
            raise GatewayError("Malformed completion response") from e

        if content is None:
            raise GatewayError("Completion response contained no text")
        return content


class MockLLMClient:
    """Offline stand-in used while mock mode is on."""

    def __init__(self):
        self.calls: list[tuple[str, Optional[str]]] = []

    async def complete(self, prompt: str, system: Optional[str] = None) -> str:
        self.calls.append((prompt, system))
        logger.debug(f"Mock completion for: {prompt[:60]}")
        role = (system or "").split(".")[0].strip() or "Assistant"
        return (
            f"[mock] {role}.\n"
            f"You asked: {prompt.strip()}\n"
            "```sas\n"
            "data work.example;\n"
            "    set sashelp.class;\n"
            "run;\n"
            "```\n"
            "Mock mode is on, so no request was sent."
        )
