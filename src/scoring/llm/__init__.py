"""LLM provider registry with lazy loading.

Usage:
    from src.scoring.llm import get_provider, resolve_api_key

    key = resolve_api_key("anthropic", EnvSecretStore())
    provider = get_provider("anthropic", api_key=key)
    raw = provider.complete(prompt)
"""

from __future__ import annotations

import importlib

from src.core.secrets import SecretStore
from src.scoring.llm.base import SYSTEM_PROMPT, LLMProvider

__all__ = [
    "SYSTEM_PROMPT",
    "LLMProvider",
    "available_providers",
    "get_provider",
    "resolve_api_key",
]

# Lazy registry: maps provider name → (module_path, class_name)
_REGISTRY: dict[str, tuple[str, str]] = {
    "anthropic": ("src.scoring.llm.anthropic", "AnthropicProvider"),
    "openai": ("src.scoring.llm.openai", "OpenAIProvider"),
    "gemini": ("src.scoring.llm.gemini", "GeminiProvider"),
    "ollama": ("src.scoring.llm.ollama", "OllamaProvider"),
}


def get_provider(name: str, api_key: str | None = None) -> LLMProvider:
    """Instantiate and return an LLM provider by name.

    Args:
        name: Provider identifier (anthropic, openai, gemini, ollama).
        api_key: Key handed to the provider; checked when it is first used.

    Returns:
        An LLMProvider instance.

    Raises:
        ValueError: If the provider name is unknown.
    """
    if name not in _REGISTRY:
        valid = ", ".join(sorted(_REGISTRY))
        msg = f"Unknown LLM provider '{name}'. Available: {valid}"
        raise ValueError(msg)

    module_path, class_name = _REGISTRY[name]
    module = importlib.import_module(module_path)
    cls = getattr(module, class_name)
    return cls(api_key=api_key)  # type: ignore[no-any-return]


def resolve_api_key(
    name: str,
    secrets: SecretStore,
    secret_name: str | None = None,
) -> str | None:
    """Look up the API key for a provider in the given secret store.

    ``secret_name`` overrides the provider's default variable name.
    Returns None for providers that need no key (ollama) or when unset.
    """
    provider = get_provider(name)
    key_name = secret_name or provider.env_var
    if key_name is None:
        return None
    return secrets.get(key_name)


def available_providers() -> list[str]:
    """Return sorted list of registered provider names."""
    return sorted(_REGISTRY)
