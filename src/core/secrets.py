"""Secret storage for API keys.

Keys are looked up through an injected store and handed to providers
explicitly; nothing reads them from module-level or process-global state.
"""

import os
from abc import ABC, abstractmethod
from collections.abc import Mapping


class SecretStore(ABC):
    """Base class for API key lookup."""

    @abstractmethod
    def get(self, name: str) -> str | None:
        """Return the secret stored under ``name``, or None if absent."""

    def require(self, name: str) -> str:
        """Return the secret or raise ValueError naming what is missing."""
        value = self.get(name)
        if not value:
            msg = f"{name} is required but was not found in the secret store"
            raise ValueError(msg)
        return value


class EnvSecretStore(SecretStore):
    """Reads secrets from environment variables."""

    def __init__(self, environ: Mapping[str, str] | None = None) -> None:
        self._environ = environ

    def get(self, name: str) -> str | None:
        environ = self._environ if self._environ is not None else os.environ
        return environ.get(name) or None


class StaticSecretStore(SecretStore):
    """Holds secrets supplied in code (tests, embedding applications)."""

    def __init__(self, secrets: Mapping[str, str]) -> None:
        self._secrets = dict(secrets)

    def get(self, name: str) -> str | None:
        return self._secrets.get(name) or None
