"""App configuration — environment variable loading with typed defaults.

Loads settings from .env file (via python-dotenv) and os.environ.
Real environment variables take precedence over .env file values.

Usage:
    from praiser.config import get_settings
    settings = get_settings()
    print(settings.groq_base_url)  # "https://api.groq.com/openai/v1"
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Only load .env from the project root — don't traverse parent directories.
PROJECT_ROOT = Path(__file__).resolve().parent.parent
_DOTENV_PATH = PROJECT_ROOT / ".env"

DEFAULT_GROQ_BASE_URL = "https://api.groq.com/openai/v1"


@dataclass(frozen=True)
class Settings:
    """Typed configuration for the Praiser backend.

    All fields have sensible defaults for local development. An empty
    groq_api_key is legal: the model catalog then serves its static
    fallback list and completion calls fail at request time.
    """

    # App
    app_env: str
    app_port: int
    log_level: str
    cors_origins: list[str]

    # AI
    groq_api_key: str
    groq_base_url: str
    use_groq_stub: bool
    model_cache_ttl_seconds: int

    # Storage
    data_dir: Path

    # Admin
    admin_username: str
    admin_password: str


def _split_csv(value: str) -> list[str]:
    """Splits a comma-separated string into a list of stripped, non-empty values."""
    return [item.strip() for item in value.split(",") if item.strip()]


def _parse_int(env_var: str, value: str) -> int:
    """Parses an integer environment value.

    Raises:
        ValueError: If the value is not an integer, naming the variable.
    """
    try:
        return int(value)
    except ValueError:
        raise ValueError(
            f"Invalid value for {env_var}: {value!r}. Expected an integer."
        ) from None


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def _load_settings() -> Settings:
    """Loads configuration from .env file and environment variables.

    Returns:
        A fully resolved Settings instance.
    """
    load_dotenv(_DOTENV_PATH)

    data_dir = Path(os.environ.get("DATA_DIR", "data"))
    if not data_dir.is_absolute():
        data_dir = PROJECT_ROOT / data_dir

    return Settings(
        # App
        app_env=os.environ.get("APP_ENV", "development"),
        app_port=_parse_int("APP_PORT", os.environ.get("APP_PORT", "8000")),
        log_level=os.environ.get("LOG_LEVEL", "info"),
        cors_origins=_split_csv(
            os.environ.get("CORS_ORIGINS", "http://localhost:3000")
        ),
        # AI
        groq_api_key=os.environ.get("GROQ_API_KEY", ""),
        groq_base_url=os.environ.get("GROQ_BASE_URL", DEFAULT_GROQ_BASE_URL),
        use_groq_stub=_parse_bool(os.environ.get("PRAISER_USE_GROQ_STUB", "false")),
        model_cache_ttl_seconds=_parse_int(
            "MODEL_CACHE_TTL_SECONDS",
            os.environ.get("MODEL_CACHE_TTL_SECONDS", "3600"),
        ),
        # Storage
        data_dir=data_dir,
        # Admin
        admin_username=os.environ.get("ADMIN_USERNAME", "admin"),
        admin_password=os.environ.get("ADMIN_PASSWORD", ""),
    )


_settings: Settings | None = None


def get_settings() -> Settings:
    """Returns the singleton Settings instance. Loads .env on first call."""
    global _settings
    if _settings is None:
        _settings = _load_settings()
    return _settings
