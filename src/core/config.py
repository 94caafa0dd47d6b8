"""Configuration models and YAML loaders for the candidate screening engine."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator

PROVIDER_NAMES = ("anthropic", "gemini", "ollama", "openai")


class DatabaseConfig(BaseModel):
    """Database configuration."""

    path: str = "data/screening.db"


class ScoringConfig(BaseModel):
    """LLM scoring collaborator settings.

    The API key itself never lives in config: ``api_key_env`` names the
    variable the secret store reads, falling back to the provider default.
    """

    provider: str = "openai"
    model: str | None = None
    api_key_env: str | None = None
    max_tokens: int = Field(default=2048, ge=256)

    @field_validator("provider")
    @classmethod
    def provider_known(cls, v: str) -> str:
        v = v.lower().strip()
        if v not in PROVIDER_NAMES:
            msg = f"provider must be one of {list(PROVIDER_NAMES)}, got '{v}'"
            raise ValueError(msg)
        return v


class BatchConfig(BaseModel):
    """Batch processing limits.

    max_concurrency=1 keeps the sequential behaviour: one candidate
    finishes before the next one is sent to the scoring service.
    """

    max_concurrency: int = Field(default=1, ge=1, le=16)


class Settings(BaseModel):
    """Top-level settings loaded from YAML."""

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    batch: BatchConfig = Field(default_factory=BatchConfig)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Settings":
        """Load settings from a YAML file."""
        path = Path(path)
        if not path.exists():
            msg = f"Config file not found: {path}"
            raise FileNotFoundError(msg)
        raw: dict[str, Any] = yaml.safe_load(path.read_text()) or {}
        return cls.model_validate(raw)


class RequirementSpec(BaseModel):
    """A requirement entry in a job YAML file."""

    description: str
    weight: int = Field(default=5, ge=1, le=10)
    is_required: bool = False
    category: str = ""

    @field_validator("description")
    @classmethod
    def description_not_empty(cls, v: str) -> str:
        if not v.strip():
            msg = "requirement description must not be empty"
            raise ValueError(msg)
        return v.strip()


class JobSpec(BaseModel):
    """Job posting definition used by the add-job command."""

    title: str
    company: str = ""
    department: str = ""
    location: str = ""
    description: str = ""
    requirements: list[RequirementSpec] = Field(default_factory=list)

    @field_validator("title")
    @classmethod
    def title_not_empty(cls, v: str) -> str:
        if not v.strip():
            msg = "title must not be empty"
            raise ValueError(msg)
        return v.strip()

    @classmethod
    def from_yaml(cls, path: str | Path) -> "JobSpec":
        """Load a job definition from a YAML file."""
        path = Path(path)
        if not path.exists():
            msg = f"Job file not found: {path}"
            raise FileNotFoundError(msg)
        raw: dict[str, Any] = yaml.safe_load(path.read_text()) or {}
        return cls.model_validate(raw)
