"""Server configuration via environment variables."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable
from pathlib import Path

from pydantic import BaseModel, Field, field_validator

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

VALID_DOC_LANGUAGES = {"en", "ru"}
DEFAULT_MODEL = "gemini-2.5-flash"

ENV_FILE = Path.home() / ".config" / "script-documenter-mcp" / ".env"


def _is_unset(key: str, value: str | None) -> bool:
    """Blank values and unexpanded ``${KEY}`` placeholders from MCP hosts count as unset."""
    if value is None:
        return True
    value = value.strip().strip("\"'").strip()
    return not value or value in {f"${key}", f"${{{key}}}"}


def load_env_file(path: Path | None = None) -> list[str]:
    """Copy ``KEY=VALUE`` lines from *path* into ``os.environ``.

    Only variables that are unset in the process environment are taken.
    Comments, blank lines and an ``export`` prefix are allowed; surrounding
    quotes are stripped.

    Returns:
        Names of the variables that were set.
    """
    path = path or ENV_FILE
    if not path.is_file():
        return []

    loaded: list[str] = []
    for line in path.read_text(encoding="utf-8").splitlines():
        line = line.strip().removeprefix("export ").strip()
        key, sep, value = line.partition("=")
        key = key.strip()
        if line.startswith("#") or not sep or not key:
            continue
        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
            value = value[1:-1]
        if _is_unset(key, os.environ.get(key)):
            os.environ[key] = value
            loaded.append(key)
    return loaded


def _resolve_tracing_enabled(flag_value: str, tracking_uri: str) -> bool:
    """Derive tracing_enabled from env vars.

    - ``GEMINI_TRACING_ENABLED=false`` → always disabled (explicit opt-out).
    - Otherwise enabled when ``MLFLOW_TRACKING_URI`` is non-empty.
    """
    if flag_value.lower() == "false":
        return False
    return bool(tracking_uri)


def _default_export_dir() -> str:
    downloads = Path.home() / "Downloads"
    return str(downloads if downloads.is_dir() else Path.cwd())


def _optional_float(raw: str) -> float | None:
    raw = raw.strip()
    return float(raw) if raw else None


class ServerConfig(BaseModel):
    """Runtime configuration resolved from environment."""

    gemini_api_key: str = Field(default="")
    default_model: str = Field(default=DEFAULT_MODEL)
    default_temperature: float | None = Field(default=None)
    default_doc_language: str = Field(default="en")
    export_dir: str = Field(default="")
    tracing_enabled: bool = Field(default=False)
    mlflow_tracking_uri: str = Field(default="")
    mlflow_experiment_name: str = Field(default="script-documenter-mcp")

    @field_validator("default_doc_language")
    @classmethod
    def validate_doc_language(cls, value: str) -> str:
        lang = value.strip().lower()
        if lang not in VALID_DOC_LANGUAGES:
            allowed = ", ".join(sorted(VALID_DOC_LANGUAGES))
            raise ValueError(f"Invalid documentation language '{value}'. Allowed: {allowed}")
        return lang

    @field_validator("default_temperature")
    @classmethod
    def validate_temperature(cls, value: float | None) -> float | None:
        if value is not None and not 0.0 <= value <= 2.0:
            raise ValueError("Temperature must be between 0.0 and 2.0")
        return value

    @field_validator("default_model")
    @classmethod
    def validate_model(cls, value: str) -> str:
        model = value.strip()
        if not model:
            raise ValueError("Model ID must not be empty")
        return model

    @classmethod
    def from_env(cls) -> ServerConfig:
        """Build config from environment variables.

        ``GEMINI_API_KEY`` wins over the legacy ``API_KEY`` name.
        """
        return cls(
            gemini_api_key=os.getenv("GEMINI_API_KEY", "") or os.getenv("API_KEY", ""),
            default_model=os.getenv("GEMINI_MODEL", DEFAULT_MODEL),
            default_temperature=_optional_float(os.getenv("GEMINI_TEMPERATURE", "")),
            default_doc_language=os.getenv("DOC_LANGUAGE", "en"),
            export_dir=os.getenv("DOCUMENTER_EXPORT_DIR", "") or _default_export_dir(),
            tracing_enabled=_resolve_tracing_enabled(
                os.getenv("GEMINI_TRACING_ENABLED", ""),
                os.getenv("MLFLOW_TRACKING_URI", ""),
            ),
            mlflow_tracking_uri=os.getenv("MLFLOW_TRACKING_URI", ""),
            mlflow_experiment_name=os.getenv("MLFLOW_EXPERIMENT_NAME", "script-documenter-mcp"),
        )

    def require_api_key(self) -> str:
        """Return the Gemini API key or fail hard.

        Raises:
            ConfigurationError: If no key is configured.
        """
        if not self.gemini_api_key:
            raise ConfigurationError(
                "GEMINI_API_KEY environment variable not set "
                "(the legacy API_KEY name is also accepted)"
            )
        return self.gemini_api_key


_config: ServerConfig | None = None


def get_config() -> ServerConfig:
    """Return the global config singleton, creating it on first access.

    Reads :data:`ENV_FILE` first; the process environment always wins.
    """
    global _config
    if _config is None:
        loaded = load_env_file()
        if loaded:
            logger.info("Loaded %d var(s) from %s: %s", len(loaded), ENV_FILE, ", ".join(loaded))
        _config = ServerConfig.from_env()
    return _config


def update_config(*, reset: Iterable[str] = (), **overrides: object) -> ServerConfig:
    """Patch the live config (used by the ``infra_configure`` tool).

    ``None`` overrides are ignored. Fields named in *reset* go back to their
    declared default, e.g. ``reset=["default_temperature"]`` hands the
    temperature back to the model.

    Raises:
        ValueError: If *reset* names an unknown field, or the result fails validation.
    """
    global _config
    data = get_config().model_dump()
    for name in reset:
        field = ServerConfig.model_fields.get(name)
        if field is None:
            raise ValueError(f"Unknown config field '{name}'")
        data[name] = field.get_default(call_default_factory=True)
    data.update({k: v for k, v in overrides.items() if v is not None})
    _config = ServerConfig(**data)
    return _config
