"""Configuration loading from YAML, environment and CLI arguments.

Deployment values (PR_NUMBER, URL, COMMIT_SHA, ...) come from the
environment, as set by the CI job. An optional YAML file can provide
defaults for the non-secret settings; the environment always wins over
the file. Never put real tokens in config files committed to the repo.
"""

import logging
import os
from pathlib import Path
from typing import Any, Mapping

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from preview_comment.models import Mode, TemplateKind, Transport
from preview_comment.template import render_url

DEFAULT_TITLE = "# Preview Deployment"
DEFAULT_API_URL = "https://api.github.com"
DEFAULT_TIMEOUT = 30

ALWAYS_REQUIRED = ("PR_NUMBER", "USER_LOGIN", "GITHUB_TOKEN")
TEMPLATE_REQUIRED = ("URL", "COMMIT_SHA")


class ConfigError(Exception):
    """Raised when configuration is invalid or incomplete."""

    def __init__(self, message: str, missing: list[str] | None = None) -> None:
        super().__init__(message)
        self.missing = list(missing or [])


class _EnvFirstSettings(BaseSettings):
    """Settings where environment variables override values from the YAML file."""

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return env_settings, init_settings, dotenv_settings, file_secret_settings


class GitHubConfig(_EnvFirstSettings):
    """GitHub API access settings."""

    model_config = SettingsConfigDict(env_prefix="GITHUB_", env_ignore_empty=True, extra="ignore")

    token: str | None = Field(default=None, description="PAT or Actions token; use env only")
    api_url: str = Field(default=DEFAULT_API_URL, description="API base URL")
    timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0, description="Per-request timeout in seconds")
    retries: int = Field(default=0, ge=0, le=10, description="Retries for transient HTTP failures")
    transport: Transport = Field(default=Transport.HTTP, description="http (requests) or gh (GitHub CLI)")


class DeploymentSettings(_EnvFirstSettings):
    """Values describing the deployment being reported (unprefixed env vars)."""

    model_config = SettingsConfigDict(env_ignore_empty=True, extra="ignore")

    pr_number: str = ""
    user_login: str = ""
    url: str = ""
    commit_sha: str = ""
    title: str = DEFAULT_TITLE
    assets_dir: str = ""
    debug: bool = False

    @field_validator("debug", mode="before")
    @classmethod
    def _debug_only_when_true(cls, value: Any) -> bool:
        # Only the literal "true" enables debug output
        return str(value).strip().lower() == "true"


class LoggingConfig(_EnvFirstSettings):
    """Logging settings."""

    model_config = SettingsConfigDict(env_prefix="LOGGING_", extra="ignore")

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format",
    )


class AppSettings(BaseModel):
    """All settings sections loaded from YAML + env."""

    github: GitHubConfig = Field(default_factory=GitHubConfig)
    deployment: DeploymentSettings = Field(default_factory=DeploymentSettings)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


class PreviewConfig(BaseModel):
    """Resolved configuration for a single run. Built once, never mutated."""

    model_config = ConfigDict(frozen=True)

    repo: str
    pr_number: str
    user_login: str
    token: str = Field(repr=False)
    mode: Mode = Mode.COMMENT
    title: str = DEFAULT_TITLE
    commit_sha: str = ""
    url: str = ""
    assets_dir: str = ""
    static_file: Path | None = None
    url_is_template: bool = False
    debug: bool = False
    api_url: str = DEFAULT_API_URL
    timeout: float = DEFAULT_TIMEOUT
    retries: int = 0
    transport: Transport = Transport.HTTP

    @property
    def template_kind(self) -> TemplateKind:
        """Markdown body for direct HTTP, JSON payload for the gh CLI."""
        if self.transport is Transport.GH:
            return TemplateKind.JSON
        return TemplateKind.MARKDOWN


def _substitute_env(value: Any, env: Mapping[str, str]) -> Any:
    """Replace ${VAR} and $VAR in YAML strings with environment values."""
    if isinstance(value, str):
        if value.startswith("${") and value.endswith("}"):
            return env.get(value[2:-1].strip(), value)
        if value.startswith("$") and not value.startswith("${"):
            return env.get(value[1:].strip(), value)
        return value
    if isinstance(value, dict):
        return {k: _substitute_env(v, env) for k, v in value.items()}
    if isinstance(value, list):
        return [_substitute_env(v, env) for v in value]
    return value


def load_settings(config_path: Path | None = None) -> AppSettings:
    """Load settings from an optional YAML file and the environment.

    Raises:
        ConfigError: If the YAML file or any value is invalid
    """
    raw: dict[str, Any] = {}
    if config_path is not None:
        try:
            raw = yaml.safe_load(Path(config_path).read_text(encoding="utf-8")) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Failed to load config file {config_path}: {e}") from e
        if not isinstance(raw, dict):
            raise ConfigError(f"Config file {config_path} must contain a mapping")
        raw = _substitute_env(raw, os.environ)

    try:
        return AppSettings(
            github=GitHubConfig(**(raw.get("github") or {})),
            deployment=DeploymentSettings(**(raw.get("deployment") or {})),
            logging=LoggingConfig(**(raw.get("logging") or {})),
        )
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e


def required_env(mode: Mode, static_file: Path | None) -> tuple[str, ...]:
    """Environment variables that must be non-empty for the given mode."""
    if mode is Mode.COMMENT and static_file is None:
        return ALWAYS_REQUIRED + TEMPLATE_REQUIRED
    return ALWAYS_REQUIRED


def find_missing(settings: AppSettings, required: tuple[str, ...]) -> list[str]:
    """Return every required variable that has no value, in order."""
    values = {
        "PR_NUMBER": settings.deployment.pr_number,
        "USER_LOGIN": settings.deployment.user_login,
        "GITHUB_TOKEN": settings.github.token or "",
        "URL": settings.deployment.url,
        "COMMIT_SHA": settings.deployment.commit_sha,
    }
    return [name for name in required if not values[name]]


def resolve_config(
    settings: AppSettings,
    repo: str,
    mode: Mode | None = None,
    static_file: Path | None = None,
    url_is_template: bool = False,
    transport: Transport | None = None,
    log: logging.Logger | None = None,
) -> PreviewConfig:
    """Validate settings against the CLI choices and build PreviewConfig.

    Raises:
        ConfigError: Listing all missing required environment variables
        TemplateParseError: If the URL template is malformed
    """
    log = log or logging.getLogger("preview_comment.config")
    if mode is None:
        log.info("No mode specified. Defaulting to 'comment'.")
        mode = Mode.COMMENT
    log.info("Mode set to '%s'.", mode.value)

    missing = find_missing(settings, required_env(mode, static_file))
    if missing:
        raise ConfigError(
            "\n".join(f"{name} environment variable is required" for name in missing),
            missing=missing,
        )

    deployment = settings.deployment
    url = deployment.url
    if url_is_template:
        url = render_url(url, deployment.pr_number)

    return PreviewConfig(
        repo=repo,
        pr_number=deployment.pr_number,
        user_login=deployment.user_login,
        token=settings.github.token or "",
        mode=mode,
        title=deployment.title,
        commit_sha=deployment.commit_sha,
        url=url,
        assets_dir=deployment.assets_dir,
        static_file=static_file,
        url_is_template=url_is_template,
        debug=deployment.debug,
        api_url=settings.github.api_url,
        timeout=settings.github.timeout,
        retries=settings.github.retries,
        transport=transport or settings.github.transport,
    )


def log_config(config: PreviewConfig, log: logging.Logger) -> None:
    """Log every resolved value at DEBUG. The token is reported as set or not set."""
    log.debug("Debug mode enabled")
    log.debug("Repository: %s", config.repo)
    log.debug("PR Number: %s", config.pr_number)
    log.debug("User Login: %s", config.user_login)
    log.debug("GitHub Token: %s", "set" if config.token else "not set")
    log.debug("Mode: %s", config.mode.value)
    log.debug("Commit SHA: %s", config.commit_sha)
    log.debug("URL: %s", config.url)
    log.debug("Title: %s", config.title)
    log.debug("Assets Dir: %s", config.assets_dir)
    log.debug("Static File: %s", config.static_file or "-")
    log.debug("API URL: %s", config.api_url)
    log.debug("Transport: %s (timeout=%ss, retries=%s)", config.transport.value, config.timeout, config.retries)
