from __future__ import annotations

from typing import Dict, Optional

from pydantic import AliasChoices, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import NULL_SENTINEL
from .errors import MissingRequiredConfig
from .git import GitClient, resolve_origin
from .logging import ActionLogger


class RunConfig(BaseSettings):
    """Configuration loaded from GitHub Actions inputs and the runner environment."""

    model_config = SettingsConfigDict(
        env_prefix="INPUT_",
        frozen=True,
        extra="ignore",
        env_ignore_empty=True,
    )

    api_token: SecretStr = Field(
        default="",
        description="CodeSee API token. Required only by steps that upload or fetch insights.",
    )
    webpack_config_path: Optional[str] = Field(default=None)
    support_typescript: bool = Field(default=False)
    skip_upload: bool = Field(default=False)
    step: str = Field(default="legacy", description="map, mapUpload, insights or legacy")
    languages: Dict[str, bool] = Field(
        default_factory=dict,
        description='JSON object of language name to enabled flag, e.g. {"python": true}',
    )

    # Runner-provided values. GITHUB_HEAD_REF wins over the github_ref input:
    # the runner value is always right for pull requests, the input may be stale.
    head_ref: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("GITHUB_HEAD_REF", "INPUT_GITHUB_REF"),
    )
    base_ref: Optional[str] = Field(default=None, validation_alias=AliasChoices("GITHUB_BASE_REF"))
    origin: Optional[str] = Field(default=None, validation_alias=AliasChoices("GITHUB_REPOSITORY"))

    # Testing overrides
    with_event_name: Optional[str] = Field(default=None)
    with_event_data: Optional[str] = Field(default=None)

    insights_service_url: Optional[str] = Field(default=None)
    codesee_version: str = Field(default="latest")

    @field_validator("webpack_config_path", mode="before")
    @classmethod
    def _normalize_null_sentinel(cls, value: Optional[str]) -> Optional[str]:
        if isinstance(value, str):
            trimmed = value.strip()
            if not trimmed or trimmed == NULL_SENTINEL:
                return None
            return trimmed
        return value

    @field_validator("head_ref", "base_ref", "origin", "insights_service_url", mode="before")
    @classmethod
    def _strip_optional(cls, value: Optional[str]) -> Optional[str]:
        if isinstance(value, str):
            return value.strip() or None
        return value

    @field_validator("step", "codesee_version", mode="before")
    @classmethod
    def _strip(cls, value: str) -> str:
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("languages", mode="before")
    @classmethod
    def _normalize_languages(cls, value: object) -> object:
        if isinstance(value, dict):
            return {str(k).strip().lower(): v for k, v in value.items()}
        return value

    def has_credential(self) -> bool:
        return bool(self.api_token.get_secret_value())

    def require_api_token(self) -> str:
        token = self.api_token.get_secret_value()
        if not token:
            raise MissingRequiredConfig(f"api_token is required for step '{self.step}'")
        return token

    def language_enabled(self, name: str) -> bool:
        return bool(self.languages.get(name.lower(), False))


async def resolve_run_config(git: GitClient, logger: ActionLogger) -> RunConfig:
    """
    Build the run configuration snapshot.

    The origin comes from GITHUB_REPOSITORY; outside a runner it falls back to
    the single `origin` git remote.
    """
    config = RunConfig()
    if config.origin:
        return config

    remotes = await git.get_remotes()
    origin = resolve_origin(remotes)
    logger.info("Resolved origin from git remote", origin=origin)
    return config.model_copy(update={"origin": origin})
