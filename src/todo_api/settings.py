from __future__ import annotations

import os
from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy.engine import URL


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables.

    Env vars:
    - DATABASE_URL: full SQLAlchemy URL; when set, the DB_* parts are ignored
    - DB_DRIVER: SQLAlchemy driver name (default: 'mysql+pymysql')
    - DB_HOST / DB_PORT: database server address (default: 127.0.0.1:3306)
    - DB_USER / DB_PASSWORD: database credentials (default: root / empty)
    - DB_NAME: database name (default: 'todos')
    - DB_ECHO: 'true' to echo SQL statements (default: false)
    - HOST / PORT: HTTP bind address (default: 0.0.0.0:8080)
    - CORS_ALLOW_ORIGINS: comma-separated list of allowed origins; '*' by default
    - LOG_LEVEL: logging level name (default: INFO)
    """

    db_driver: str
    db_host: str
    db_port: int
    db_user: str
    db_password: str
    db_name: str
    db_echo: bool
    database_url_override: Optional[str]
    host: str
    port: int
    cors_allow_origins: List[str]
    log_level: str

    @property
    def database_url(self) -> str:
        """Connection URL for the configured database."""
        if self.database_url_override:
            return self.database_url_override
        return build_database_url(
            driver=self.db_driver,
            host=self.db_host,
            port=self.db_port,
            user=self.db_user,
            password=self.db_password,
            name=self.db_name,
        )


# PUBLIC_INTERFACE
def build_database_url(
    driver: str,
    host: str,
    port: int,
    user: str,
    password: str,
    name: str,
) -> str:
    """
    Assemble a SQLAlchemy connection URL from its parts.

    MySQL URLs are pinned to the utf8mb4 charset. The password is escaped by
    SQLAlchemy, so special characters are safe.
    """
    query = {"charset": "utf8mb4"} if driver.startswith("mysql") else {}
    url = URL.create(
        drivername=driver,
        username=user or None,
        password=password or None,
        host=host or None,
        port=port,
        database=name or None,
        query=query,
    )
    return url.render_as_string(hide_password=False)


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name, default)
    if value is None or value == "":
        return default
    return value


def _parse_bool(value: str, default: bool = False) -> bool:
    v = value.strip().lower()
    if v in {"1", "true", "yes", "on"}:
        return True
    if v in {"0", "false", "no", "off"}:
        return False
    return default


def _parse_port(name: str, value: str) -> int:
    try:
        port = int(value.strip())
    except ValueError as e:
        raise ValueError(f"{name} must be an integer, got {value!r}") from e
    if not (0 < port < 65536):
        raise ValueError(f"{name} must be between 1 and 65535, got {port}")
    return port


def _parse_origins(origins_value: str) -> List[str]:
    """
    Parse CORS origins from env. Supports:
    - '*' to allow all origins
    - Comma-separated list of origins
    """
    value = origins_value.strip()
    if value == "*":
        return ["*"]
    return [o.strip() for o in value.split(",") if o.strip()]


# PUBLIC_INTERFACE
def get_settings() -> Settings:
    """Return application settings loaded from environment variables."""
    url_override = os.getenv("DATABASE_URL") or None

    return Settings(
        db_driver=_get_env("DB_DRIVER", "mysql+pymysql").strip(),
        db_host=_get_env("DB_HOST", "127.0.0.1").strip(),
        db_port=_parse_port("DB_PORT", _get_env("DB_PORT", "3306")),
        db_user=_get_env("DB_USER", "root").strip(),
        db_password=os.getenv("DB_PASSWORD", ""),
        db_name=_get_env("DB_NAME", "todos").strip(),
        db_echo=_parse_bool(_get_env("DB_ECHO", "false"), False),
        database_url_override=url_override.strip() if url_override else None,
        host=_get_env("HOST", "0.0.0.0").strip(),
        port=_parse_port("PORT", _get_env("PORT", "8080")),
        cors_allow_origins=_parse_origins(_get_env("CORS_ALLOW_ORIGINS", "*")),
        log_level=_get_env("LOG_LEVEL", "INFO").strip().upper(),
    )
