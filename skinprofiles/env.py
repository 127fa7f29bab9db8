"""
Environment loading and runtime settings.

Settings are read from environment variables (optionally seeded from a
.env file in the working directory).
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

ENV_PREFIX = "SKINPROFILES_"


def load_env(path: Optional[Path] = None) -> bool:
    """Load .env from the working directory if present.

    Variables that are already set are left untouched.

    Returns:
        True if a file was loaded
    """
    env_path = path or Path.cwd() / ".env"
    if not env_path.exists():
        return False
    return load_dotenv(dotenv_path=env_path, override=False)


def _env_str(name: str, default: Optional[str]) -> Optional[str]:
    value = os.environ.get(ENV_PREFIX + name)
    if value is None or not value.strip():
        return default
    return value.strip()


def _env_number(name: str, default, cast):
    raw = _env_str(name, None)
    if raw is None:
        return default
    try:
        return cast(raw)
    except ValueError:
        raise ValueError(f"{ENV_PREFIX}{name} must be a number, got {raw!r}")


@dataclass(frozen=True)
class Settings:
    """Runtime configuration for the resolver, logger and worker pool."""

    log_level: str = "INFO"
    log_dir: Optional[Path] = None
    http_timeout: float = 10.0
    name_api_url: str = "https://api.mojang.com/users/profiles/minecraft/"
    session_api_url: str = "https://sessionserver.mojang.com/session/minecraft/profile/"
    rate_limit: int = 600
    rate_window: float = 600.0
    workers: int = 4
    cache_size: int = 0

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Build settings from SKINPROFILES_* environment variables.

        Raises:
            ValueError: If a numeric variable cannot be parsed
        """
        defaults = cls()
        log_dir = _env_str("LOG_DIR", None)
        return cls(
            log_level=_env_str("LOG_LEVEL", defaults.log_level).upper(),
            log_dir=Path(log_dir) if log_dir else None,
            http_timeout=_env_number("HTTP_TIMEOUT", defaults.http_timeout, float),
            name_api_url=_env_str("NAME_API_URL", defaults.name_api_url),
            session_api_url=_env_str("SESSION_API_URL", defaults.session_api_url),
            rate_limit=_env_number("RATE_LIMIT", defaults.rate_limit, int),
            rate_window=_env_number("RATE_WINDOW", defaults.rate_window, float),
            workers=_env_number("WORKERS", defaults.workers, int),
            cache_size=_env_number("CACHE_SIZE", defaults.cache_size, int),
        )


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get or create the process-wide settings, loading .env on first use."""
    global _settings

    if _settings is None:
        load_env()
        _settings = Settings.from_env()

    return _settings


def reset_settings():
    """Forget the cached settings (useful for testing)."""
    global _settings
    _settings = None
