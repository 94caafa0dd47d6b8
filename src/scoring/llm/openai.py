"""OpenAI LLM provider."""

import logging

from src.scoring.llm.base import SYSTEM_PROMPT, LLMProvider

logger = logging.getLogger(__name__)


class OpenAIProvider(LLMProvider):
    """LLM provider using the OpenAI API."""

    @property
    def provider_id(self) -> str:
        return "openai"

    @property
    def default_model(self) -> str:
        return "gpt-4o-mini"

    @property
    def env_var(self) -> str:
        return "OPENAI_API_KEY"

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
            import openai
        except ImportError:
            msg = (
                "openai is required for LLM scoring. "
                "Install with: pip install 'candidate-screening[openai]'"
            )
            raise ImportError(msg) from None

        client = openai.OpenAI(api_key=api_key)
        use_model = model or self.default_model
        use_system = system if system is not None else SYSTEM_PROMPT

        logger.debug("Sending prompt to OpenAI API (%s)", use_model)
        response = client.chat.completions.create(
            model=use_model,
            max_tokens=max_tokens,
            messages=[
                {"role": "system", "content": use_system},
                {"role": "user", "content": prompt},
            ],
        )

        return response.choices[0].message.content  # type: ignore[no-any-return]
