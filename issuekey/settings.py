"""Settings resolution: Jira credentials with profile support, plus Actions runner inputs."""

import json
import os
from collections.abc import Mapping
from functools import lru_cache
from pathlib import Path

import tomlkit
import typer
from pydantic import Field, SecretStr, ValidationError, field_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from issuekey.exceptions import EventError
from issuekey.models import GitHubEvent

CONFIG_PATH = Path.home() / ".config" / "issuekey" / "config.toml"


class JiraSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="JIRA_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    profile: str | None = None  # profile name the values were loaded from

    base_url: str | None = None  # https://your-domain.atlassian.net
    user_email: str | None = None
    api_token: SecretStr | None = None

    timeout: float = 30.0  # seconds per existence check
    max_concurrency: int = Field(default=10, ge=1)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # Profile values arrive as init kwargs; env vars and .env override them.
        return env_settings, dotenv_settings, init_settings, file_secret_settings

    @field_validator("base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str | None) -> str | None:
        return value.rstrip("/") if value else value


class RunnerInputs(BaseSettings):
    """Inputs handed to the tool by the GitHub Actions runner."""

    model_config = SettingsConfigDict(extra="ignore")

    string: str | None = Field(default=None, validation_alias="INPUT_STRING")
    from_: str | None = Field(default=None, validation_alias="INPUT_FROM")
    event_path: Path | None = Field(default=None, validation_alias="GITHUB_EVENT_PATH")
    github_output: Path | None = Field(default=None, validation_alias="GITHUB_OUTPUT")

    @field_validator("string", "from_", "event_path", "github_output", mode="before")
    @classmethod
    def _empty_is_unset(cls, value: object) -> object:
        # The runner sets INPUT_* to "" for inputs the workflow did not pass
        return None if value == "" else value


@lru_cache(maxsize=1)
def _load_toml() -> tomlkit.TOMLDocument:
    """Load ~/.config/issuekey/config.toml, returning empty document if missing."""
    if not CONFIG_PATH.exists():
        return tomlkit.document()
    return tomlkit.load(CONFIG_PATH.open())


def _list_profiles(config: Mapping) -> list[str]:
    # tomlkit Table implements MutableMapping but not dict, so check Mapping
    return [k for k, v in config.items() if isinstance(v, Mapping)]


def get_settings(profile: str | None = None) -> JiraSettings:
    """Resolve the active profile and return a fully populated JiraSettings.

    Active profile precedence (highest to lowest):
    1. profile argument (--profile CLI flag)
    2. JIRA_PROFILE env var
    3. default_profile key in ~/.config/issuekey/config.toml
    4. First profile defined in ~/.config/issuekey/config.toml

    JIRA_* env vars (and .env in cwd) override the profile's values.
    """
    toml_config = _load_toml()

    active = (
        profile
        or os.environ.get("JIRA_PROFILE")
        or toml_config.get("default_profile")
        or ((_profiles := _list_profiles(toml_config)) and _profiles[0] or None)
    )

    profile_defaults: dict = {}
    if active:
        if active in toml_config and isinstance(toml_config[active], Mapping):
            profile_defaults = dict(toml_config[active])
        elif active not in toml_config:
            profiles = _list_profiles(toml_config)
            typer.echo(f"Profile '{active}' not found in {CONFIG_PATH}. Available: {profiles or '(none)'}")
            raise typer.Exit(1)

    settings = JiraSettings(**profile_defaults)
    # JIRA_PROFILE in the env would otherwise win over the --profile flag here
    settings.profile = active

    missing = [
        name
        for name, value in (
            ("base_url", settings.base_url),
            ("user_email", settings.user_email),
            ("api_token", settings.api_token),
        )
        if not value
    ]
    if missing:
        env_names = ", ".join(f"JIRA_{name.upper()}" for name in missing)
        typer.echo(
            f"Missing Jira configuration: {', '.join(missing)}. Set {env_names} or "
            f"add them to the [{active or 'profile'}] section of {CONFIG_PATH}"
        )
        raise typer.Exit(1)

    return settings


def load_event(path: Path | None) -> GitHubEvent | None:
    """Parse the GitHub Actions event payload at path (GITHUB_EVENT_PATH)."""
    if path is None:
        return None
    try:
        payload = json.loads(path.read_text())
    except (OSError, json.JSONDecodeError) as exc:
        raise EventError(f"Could not read GitHub event payload {path}: {exc}") from exc
    try:
        return GitHubEvent.model_validate(payload)
    except ValidationError as exc:
        raise EventError(f"Unexpected GitHub event payload in {path}: {exc}") from exc
