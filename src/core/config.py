"""Configuration of the tool.

Responsibility:
- Locate the per-user configuration file (`config.yaml`).
- Bootstrap it with defaults on first run and stop so the user can edit it.
- Validate it through pydantic-settings, letting `CLIPPY_*` environment
  variables override individual file values.

Precedence, per field: environment variable > file value > built-in default.
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field, SecretStr, ValidationError, field_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from core.domain.models import ImageDetail
from core.errors import ConfigError, ConfigFirstRunBootstrap, ConfigInvalid

logger = logging.getLogger(__name__)

APP_NAME = "clippy-clippy"
CONFIG_FILE_NAME = "config.yaml"
ENV_PREFIX = "CLIPPY_"
COMPLETIONS_PATH = "/chat/completions"

PLACEHOLDER_API_KEY = "YOUR_API_KEY_HERE"
DEFAULT_ENDPOINT = "https://api.openai.com/v1"
DEFAULT_MODEL = "gpt-4o"
DEFAULT_SYSTEM_PROMPT = (
    "You are a precise OCR engine. Transcribe all visible text in the image verbatim, "
    "preserving reading order and line breaks. Do not summarize, translate, correct "
    "or comment on the text."
)
DEFAULT_TIMEOUT_SECONDS = 60
DEFAULT_MAX_TOKENS = 1024

_CONFIG_HEADER = f"""\
# Configuration for {APP_NAME}
# Point `endpoint` at any OpenAI-compatible API base URL (the tool calls
# <endpoint>/chat/completions) and put your key in `api_key`.
# Every value can be overridden with an environment variable named
# {ENV_PREFIX}<FIELD>, e.g. {ENV_PREFIX}API_KEY or {ENV_PREFIX}MODEL.
"""


def get_user_config_dir() -> Path:
    """Per-user configuration directory (cross-platform, no extra dependencies)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / APP_NAME
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / APP_NAME

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / APP_NAME
    return Path.home() / ".config" / APP_NAME


def get_default_config_path() -> Path:
    return get_user_config_dir() / CONFIG_FILE_NAME


class AppSettings(BaseSettings):
    """Validated, immutable configuration threaded through the pipeline."""

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        extra="forbid",
        case_sensitive=False,
        frozen=True,
    )

    endpoint: str = Field(
        default=DEFAULT_ENDPOINT,
        min_length=1,
        description="Base URL of the OpenAI-compatible API.",
    )
    api_key: SecretStr = Field(
        default=SecretStr(PLACEHOLDER_API_KEY),
        validate_default=True,
        description="Bearer token for the API. Never logged.",
    )
    model: str = Field(
        default=DEFAULT_MODEL,
        min_length=1,
        description="Vision-capable model identifier.",
    )
    system_prompt: str = Field(
        default=DEFAULT_SYSTEM_PROMPT,
        description="System-level instruction sent with every request.",
    )
    timeout_seconds: float = Field(
        default=DEFAULT_TIMEOUT_SECONDS,
        gt=0,
        description="HTTP timeout for the completion request (seconds).",
    )
    max_tokens: int = Field(
        default=DEFAULT_MAX_TOKENS,
        ge=1,
        description="Upper bound on the tokens generated for the transcription.",
    )
    image_detail: ImageDetail = Field(
        default="high",
        description="Image detail hint for the model (low, high, auto).",
    )

    @field_validator("endpoint", "model", mode="before")
    @classmethod
    def _strip_identifiers(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value

    @field_validator("endpoint")
    @classmethod
    def _normalize_endpoint(cls, value: str) -> str:
        # Accept both the base URL and the full completions URL.
        endpoint = value.rstrip("/")
        if endpoint.endswith(COMPLETIONS_PATH):
            endpoint = endpoint[: -len(COMPLETIONS_PATH)].rstrip("/")
        if not endpoint:
            raise ValueError("endpoint URL is empty")
        return endpoint

    @field_validator("api_key")
    @classmethod
    def _reject_placeholder_key(cls, value: SecretStr) -> SecretStr:
        secret = value.get_secret_value().strip()
        if not secret:
            raise ValueError("API key is empty")
        if secret == PLACEHOLDER_API_KEY:
            raise ValueError(f"replace '{PLACEHOLDER_API_KEY}' with your actual API key")
        return SecretStr(secret)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # File values arrive as init kwargs; environment must win over them.
        return (env_settings, init_settings)


def default_config_values() -> dict[str, Any]:
    """Fully populated defaults, as written on first run."""

    return {
        "endpoint": DEFAULT_ENDPOINT,
        "api_key": PLACEHOLDER_API_KEY,
        "model": DEFAULT_MODEL,
        "system_prompt": DEFAULT_SYSTEM_PROMPT,
        "timeout_seconds": DEFAULT_TIMEOUT_SECONDS,
        "max_tokens": DEFAULT_MAX_TOKENS,
        "image_detail": "high",
    }


def write_default_config(path: Path) -> Path:
    """Write the default configuration file, creating parent directories."""

    body = yaml.safe_dump(default_config_values(), sort_keys=False, allow_unicode=True, width=88)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(_CONFIG_HEADER + "\n" + body, encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Could not write default configuration to {path}: {exc}", path=path) from exc
    logger.info("Wrote default configuration to %s", path)
    return path


def load_config_file(path: Path) -> dict[str, Any]:
    """Read the YAML file and return its top-level mapping."""

    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigInvalid(path=path, reason=f"cannot read file: {exc}") from exc

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigInvalid(path=path, reason=f"not valid YAML: {exc}") from exc

    if data is None:
        raise ConfigInvalid(path=path, reason="file is empty")
    if not isinstance(data, dict):
        raise ConfigInvalid(path=path, reason=f"expected a mapping of settings, got {type(data).__name__}")

    bad_keys = [key for key in data if not isinstance(key, str)]
    if bad_keys:
        raise ConfigInvalid(path=path, field=str(bad_keys[0]), reason="setting names must be strings")
    return data


def _invalid_from_validation(path: Path, exc: ValidationError) -> ConfigInvalid:
    first = exc.errors()[0]
    field = ".".join(str(part) for part in first.get("loc", ())) or None
    message = first.get("msg", "invalid value")
    if first.get("type") == "extra_forbidden":
        message = "unknown setting"
    return ConfigInvalid(path=path, field=field, reason=message)


def resolve_settings(config_path: Path | None = None) -> AppSettings:
    """Load the configuration, bootstrapping it on first run.

    - `config_path=None` uses the per-user default location. When that file
      does not exist, defaults are written there and
      `ConfigFirstRunBootstrap` is raised.
    - An explicit `config_path` must exist; nothing is written to it.
    - Once a file exists, any problem is `ConfigInvalid`; there is no silent
      fallback to defaults.
    """

    explicit = config_path is not None
    path = config_path.expanduser() if config_path is not None else get_default_config_path()
    logger.info("Using configuration file: %s", path)

    if not path.exists():
        if explicit:
            raise ConfigInvalid(path=path, reason="file does not exist")
        write_default_config(path)
        raise ConfigFirstRunBootstrap(path)

    data = load_config_file(path)
    try:
        settings = AppSettings(**data)
    except ValidationError as exc:
        raise _invalid_from_validation(path, exc) from exc

    logger.debug("Resolved endpoint=%s model=%s timeout=%ss", settings.endpoint, settings.model, settings.timeout_seconds)
    return settings
