"""Google Gemini LLM provider (google-genai SDK)."""

import logging

from src.scoring.llm.base import SYSTEM_PROMPT, LLMProvider

logger = logging.getLogger(__name__)


class GeminiProvider(LLMProvider):
    """LLM provider using the Google Gemini API (google-genai SDK)."""

    @property
    def provider_id(self) -> str:
        return "gemini"

    @property
    def default_model(self) -> str:
        return "gemini-2.5-flash"

    @property
    def env_var(self) -> str:
        return "GOOGLE_API_KEY"

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
            from google import genai
            from google.genai import types as genai_types
        except ImportError:
            msg = (
                "google-genai is required for LLM scoring. "
                "Install with: pip install 'candidate-screening[gemini]'"
            )
            raise ImportError(msg) from None

        use_model = model or self.default_model
        use_system = system if system is not None else SYSTEM_PROMPT

        logger.debug("Sending prompt to Gemini API (%s)", use_model)
        client = genai.Client(api_key=api_key)
        response = client.models.generate_content(
            model=use_model,
            contents=prompt,
            config=genai_types.GenerateContentConfig(
                system_instruction=use_system,
                max_output_tokens=max_tokens,
            ),
        )

        return response.text  # type: ignore[no-any-return]
