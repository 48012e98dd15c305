"""
Configuration for the bot process.

Values come from the environment, optionally seeded from a ``.env`` file.

Precedence:
1) explicit overrides passed to load_settings (CLI options)
2) environment variables / .env
3) defaults
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from .converter import DEFAULT_ENGINE, ENGINES
from .errors import ConfigError

ENV_TOKEN = "TELEGRAM_BOT_TOKEN"
ENV_ENGINE = "PRESCRIPTION_BOT_ENGINE"
ENV_WKHTMLTOPDF = "PRESCRIPTION_BOT_WKHTMLTOPDF"
ENV_TIMEOUT = "PRESCRIPTION_BOT_TIMEOUT"
ENV_POLL_TIMEOUT = "PRESCRIPTION_BOT_POLL_TIMEOUT"
ENV_DEBUG = "PRESCRIPTION_BOT_DEBUG"

DEFAULT_TIMEOUT = 120.0
DEFAULT_POLL_TIMEOUT = 60
CONVERSION_TIMEOUT_MARGIN = 5.0

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})


@dataclass(frozen=True)
class Settings:
    token: str
    engine: str = DEFAULT_ENGINE
    wkhtmltopdf_binary: str = "wkhtmltopdf"
    processing_timeout: float = DEFAULT_TIMEOUT
    poll_timeout: int = DEFAULT_POLL_TIMEOUT
    debug: bool = False

    @property
    def conversion_timeout(self) -> float:
        """Engine timeout, kept below the processing timeout so the engine stops first."""
        return max(self.processing_timeout - CONVERSION_TIMEOUT_MARGIN, self.processing_timeout / 2)

    def __repr__(self) -> str:
        return (
            f"Settings(token='***', engine={self.engine!r}, "
            f"processing_timeout={self.processing_timeout}, "
            f"poll_timeout={self.poll_timeout}, debug={self.debug})"
        )


def _positive_number(name: str, raw: str) -> float:
    try:
        value = float(raw)
    except ValueError as e:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from e
    if value <= 0:
        raise ConfigError(f"{name} must be positive, got {raw!r}")
    return value


def load_settings(
    env_file: str | Path | None = None,
    *,
    engine: str | None = None,
    debug: bool | None = None,
) -> Settings:
    """
    Build Settings from the environment.

    A missing ``.env`` file is not an error; a missing token is.
    """
    if env_file is not None:
        env_path = Path(env_file).expanduser()
        if not env_path.is_file():
            raise ConfigError(f"Env file not found: {env_path}")
        load_dotenv(env_path)
    else:
        load_dotenv(Path.cwd() / ".env")

    token = os.getenv(ENV_TOKEN, "").strip()
    if not token:
        raise ConfigError(f"{ENV_TOKEN} environment variable is not set")

    resolved_engine = (engine or os.getenv(ENV_ENGINE) or DEFAULT_ENGINE).strip().lower()
    if resolved_engine not in ENGINES:
        raise ConfigError(
            f"Unknown conversion engine {resolved_engine!r}; expected one of: {', '.join(ENGINES)}"
        )

    timeout = _positive_number(ENV_TIMEOUT, os.getenv(ENV_TIMEOUT) or str(DEFAULT_TIMEOUT))
    poll_timeout = _positive_number(
        ENV_POLL_TIMEOUT, os.getenv(ENV_POLL_TIMEOUT) or str(DEFAULT_POLL_TIMEOUT)
    )

    if debug is None:
        debug = os.getenv(ENV_DEBUG, "").strip().lower() in _TRUE_VALUES

    return Settings(
        token=token,
        engine=resolved_engine,
        wkhtmltopdf_binary=os.getenv(ENV_WKHTMLTOPDF) or "wkhtmltopdf",
        processing_timeout=timeout,
        poll_timeout=int(poll_timeout),
        debug=debug,
    )
