"""Load Taskflow settings from the environment and `<data_dir>/config.yaml`.

Environment variables win over the config file; the file wins over the
built-in defaults.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional

from loguru import logger

from .constants import (
    CONFIG_FILE,
    DEFAULT_API_URL,
    DEFAULT_DATA_DIR_NAME,
    DEFAULT_SECRET_KEY,
    DEFAULT_TOKEN_EXPIRE_MINUTES,
    JWT_ALGORITHM,
)
from .io_utils import load_yaml_with_error

ENV_PREFIX = "TASKFLOW_"


@dataclass
class Settings:
    data_dir: Path = field(default_factory=lambda: Path.cwd() / DEFAULT_DATA_DIR_NAME)
    secret_key: str = DEFAULT_SECRET_KEY
    algorithm: str = JWT_ALGORITHM
    token_expire_minutes: int = DEFAULT_TOKEN_EXPIRE_MINUTES
    bcrypt_rounds: int = 12
    log_level: str = "INFO"
    api_url: str = DEFAULT_API_URL
    token: Optional[str] = None
    cors_origins: list[str] = field(default_factory=lambda: ["*"])


def load_config_file(data_dir: Path) -> dict[str, Any]:
    """Load the optional config file.  A malformed file is logged and ignored."""
    path = data_dir / CONFIG_FILE
    data, err = load_yaml_with_error(path, {})
    if err:
        logger.warning("Ignoring config file: {}", err)
        return {}
    return data


def _split_origins(raw: Any) -> list[str]:
    if isinstance(raw, (list, tuple)):
        return [str(o).strip() for o in raw if str(o).strip()]
    return [o.strip() for o in str(raw).split(",") if o.strip()]


def load_settings(
    data_dir: Optional[Path] = None,
    env: Optional[Mapping[str, str]] = None,
) -> Settings:
    """Build :class:`Settings` from *env* (default ``os.environ``) and the config file.

    Args:
        data_dir: Explicit data directory; overrides ``TASKFLOW_DATA_DIR``.
        env: Environment mapping, mainly for tests.

    Returns:
        The resolved settings.
    """
    env = os.environ if env is None else env

    def _env(name: str) -> Optional[str]:
        value = env.get(ENV_PREFIX + name)
        return value if value not in (None, "") else None

    resolved_dir = data_dir or (Path(_env("DATA_DIR")).expanduser() if _env("DATA_DIR") else None)
    settings = Settings(data_dir=resolved_dir) if resolved_dir else Settings()
    file_cfg = load_config_file(settings.data_dir)

    secret = _env("SECRET_KEY") or file_cfg.get("secret_key")
    if secret:
        settings.secret_key = str(secret)

    expire = _env("TOKEN_EXPIRE_MINUTES") or file_cfg.get("token_expire_minutes")
    if expire is not None:
        try:
            settings.token_expire_minutes = int(expire)
        except (TypeError, ValueError):
            logger.warning("Invalid token_expire_minutes {!r}; using {}", expire, settings.token_expire_minutes)

    rounds = _env("BCRYPT_ROUNDS") or file_cfg.get("bcrypt_rounds")
    if rounds is not None:
        try:
            settings.bcrypt_rounds = max(4, min(31, int(rounds)))
        except (TypeError, ValueError):
            logger.warning("Invalid bcrypt_rounds {!r}; using {}", rounds, settings.bcrypt_rounds)

    level = _env("LOG_LEVEL") or file_cfg.get("log_level")
    if level:
        settings.log_level = str(level).upper()

    api_url = _env("API_URL") or file_cfg.get("api_url")
    if api_url:
        settings.api_url = str(api_url).rstrip("/")

    settings.token = _env("TOKEN") or file_cfg.get("token") or None

    origins = _env("CORS_ORIGINS") or file_cfg.get("cors_origins")
    if origins:
        settings.cors_origins = _split_origins(origins) or ["*"]

    return settings
