"""Abstract base class for LLM providers and the shared scoring prompt."""

from abc import ABC, abstractmethod

SYSTEM_PROMPT = (
    "You are a senior recruiter scoring a candidate's resume against the "
    "requirements of a job posting.\n\n"
    "Score every numbered requirement from 0 to 10:\n"
    "  9-10: Clear, repeated evidence well beyond the requirement\n"
    "  7-8:  Solid evidence the requirement is met\n"
    "  4-6:  Partial or indirect evidence\n"
    "  1-3:  Little evidence\n"
    "  0:    No evidence at all\n\n"
    "Return ONLY a JSON object (no markdown, no explanation):\n"
    '{"scores": [{"requirement": <requirement number>, "score": <integer 0-10>, '
    '"comment": "<one sentence>"}], '
    '"strengths": ["<short phrase>", ...], '
    '"weaknesses": ["<short phrase>", ...]}'
)


class LLMProvider(ABC):
    """Base class that every LLM provider must implement.

    The API key is passed in by the caller (see src.core.secrets); providers
    never look it up themselves.
    """

    def __init__(self, api_key: str | None = None) -> None:
        self._api_key = api_key

    @property
    @abstractmethod
    def provider_id(self) -> str:
        """Unique identifier for this provider (e.g. 'anthropic')."""

    @abstractmethod
    def complete(
        self,
        prompt: str,
        model: str | None = None,
        *,
        system: str | None = None,
        max_tokens: int = 2048,
    ) -> str:
        """Send a prompt to the LLM and return raw response text.

        Args:
            prompt: User prompt (resume plus numbered requirements).
            model: Override the provider's default model. None uses default.
            system: Override the system prompt. None falls back to SYSTEM_PROMPT.
            max_tokens: Upper bound on response length where the API takes one.

        Returns:
            Raw text response from the LLM (expected to be JSON).
        """

    @property
    @abstractmethod
    def default_model(self) -> str:
        """The default model ID used when no override is specified."""

    @property
    @abstractmethod
    def env_var(self) -> str | None:
        """Default secret name for the API key, or None if not needed."""

    def _require_key(self) -> str:
        if not self._api_key:
            msg = f"{self.env_var} is required for the {self.provider_id} provider"
            raise ValueError(msg)
        return self._api_key
