"""Anthropic Claude LLM provider."""

import logging

from src.scoring.llm.base import SYSTEM_PROMPT, LLMProvider

logger = logging.getLogger(__name__)


class AnthropicProvider(LLMProvider):
    """LLM provider using the Anthropic Claude API."""

    @property
    def provider_id(self) -> str:
        return "anthropic"

    @property
    def default_model(self) -> str:
        return "claude-sonnet-4-20250514"

    @property
    def env_var(self) -> str:
        return "ANTHROPIC_API_KEY"

    def complete(
        self,
        prompt: str,
        model: str | None = None,
        *,
        system: str | None = None,
        max_tokens: int = 2048,
    ) -> str:
        api_key = self._require_key()

        try:
            import anthropic
        except ImportError:
            msg = (
                "anthropic is required for LLM scoring. "
                "Install with: pip install 'candidate-screening[anthropic]'"
            )
            raise ImportError(msg) from None

        client = anthropic.Anthropic(api_key=api_key)
        use_model = model or self.default_model
        use_system = system if system is not None else SYSTEM_PROMPT

        logger.debug("Sending prompt to Anthropic API (%s)", use_model)
        message = client.messages.create(
            model=use_model,
            max_tokens=max_tokens,
            system=use_system,
            messages=[{"role": "user", "content": prompt}],
        )

        return message.content[0].text  # type: ignore[union-attr]
