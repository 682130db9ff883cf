"""Configuration management and environment variable utilities."""

import os

from typing import overload

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

from src.helpers.constants import (
    DEFAULT_API_HOST,
    DEFAULT_API_PORT,
    DEFAULT_FROM_BLOCK,
    DEFAULT_TIMEOUT,
    ETH_USD_FEED,
    FETCH_RETRIES,
    HISTORY_WINDOW,
    RETRY_DELAY,
)


# Load environment variables from .env file
load_dotenv()


def get_required_env(key: str) -> str:
    """Get a required environment variable.

    Args:
        key: Environment variable name

    Returns:
        Environment variable value

    Raises:
        ValueError: If the environment variable is not set

    Example:
        ```python
        from src.helpers.config import get_required_env

        rpc_url = get_required_env("ETH_RPC_URL")
        ```
    """
    value = os.getenv(key)
    if not value:
        msg = f"{key} environment variable is not set"
        raise ValueError(msg)
    return value


@overload
def get_optional_env(key: str, default: str) -> str: ...


@overload
def get_optional_env(key: str, default: None = None) -> str | None: ...


def get_optional_env(key: str, default: str | None = None) -> str | None:
    """Get an optional environment variable with a default value.

    Args:
        key: Environment variable name
        default: Default value if not set

    Returns:
        Environment variable value or default
    """
    return os.getenv(key, default)


def get_eth_rpc_url(rpc_url: str | None = None) -> str:
    """Get Ethereum RPC URL from parameter or environment.

    Args:
        rpc_url: Optional RPC URL to use directly

    Returns:
        Ethereum RPC URL

    Raises:
        ValueError: If RPC URL is not provided and ETH_RPC_URL env var is not set
    """
    if rpc_url:
        return rpc_url

    env_rpc_url = get_optional_env("ETH_RPC_URL")
    if not env_rpc_url:
        msg = "ETH_RPC_URL must be provided or set in environment variables"
        raise ValueError(msg)

    return env_rpc_url


def get_database_url(database_url: str | None = None) -> str:
    """Get the database URL from parameter or environment.

    DATABASE_URL wins when set. Otherwise the URL is assembled from the
    POSTGRE_* variables and uses psycopg (version 3) as the async driver.

    Args:
        database_url: Optional SQLAlchemy URL to use directly

    Returns:
        SQLAlchemy database URL

    Raises:
        ValueError: If required environment variables are not set

    Example:
        ```python
        from src.helpers.config import get_database_url

        # sqlite+aiosqlite:///blocks.db
        url = get_database_url("sqlite+aiosqlite:///blocks.db")
        ```
    """
    if database_url:
        return database_url

    env_database_url = get_optional_env("DATABASE_URL")
    if env_database_url:
        return env_database_url

    postgre_host = get_required_env("POSTGRE_HOST")
    postgre_port = get_optional_env("POSTGRE_PORT", "5432")
    postgre_user = get_required_env("POSTGRE_USER")
    postgre_password = get_required_env("POSTGRE_PASSWORD")
    postgre_db = get_required_env("POSTGRE_DB")

    return (
        "postgresql+psycopg://"
        f"{postgre_user}:{postgre_password}"
        f"@{postgre_host}:{postgre_port}"
        f"/{postgre_db}"
    )


class CrawlerConfig(BaseModel):
    """Settings passed explicitly to every component."""

    rpc_url: str
    database_url: str
    oracle_address: str = ETH_USD_FEED
    default_from_block: int = Field(default=DEFAULT_FROM_BLOCK, ge=0)
    history_window: int = Field(default=HISTORY_WINDOW, ge=0)
    fetch_retries: int = Field(default=FETCH_RETRIES, ge=1)
    retry_delay: float = Field(default=RETRY_DELAY, ge=0)
    rpc_timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0)
    log_level: str = "INFO"
    api_host: str = DEFAULT_API_HOST
    api_port: int = DEFAULT_API_PORT

    model_config = ConfigDict(frozen=True)


def load_config(
    rpc_url: str | None = None,
    database_url: str | None = None,
) -> CrawlerConfig:
    """Build the crawler configuration from the environment.

    Args:
        rpc_url: Optional RPC URL overriding ETH_RPC_URL
        database_url: Optional database URL overriding DATABASE_URL

    Returns:
        Validated configuration

    Raises:
        ValueError: If a required setting is missing or invalid
    """
    return CrawlerConfig(
        rpc_url=get_eth_rpc_url(rpc_url),
        database_url=get_database_url(database_url),
        oracle_address=get_optional_env("ETH_USD_FEED", ETH_USD_FEED),
        default_from_block=int(
            get_optional_env("DEFAULT_FROM_BLOCK", str(DEFAULT_FROM_BLOCK))
        ),
        history_window=int(get_optional_env("HISTORY_WINDOW", str(HISTORY_WINDOW))),
        fetch_retries=int(get_optional_env("FETCH_RETRIES", str(FETCH_RETRIES))),
        retry_delay=float(get_optional_env("RETRY_DELAY", str(RETRY_DELAY))),
        rpc_timeout=float(get_optional_env("RPC_TIMEOUT", str(DEFAULT_TIMEOUT))),
        log_level=get_optional_env("LOG_LEVEL", "INFO").upper(),
        api_host=get_optional_env("API_HOST", DEFAULT_API_HOST),
        api_port=int(get_optional_env("API_PORT", str(DEFAULT_API_PORT))),
    )


__all__ = [
    "CrawlerConfig",
    "get_database_url",
    "get_eth_rpc_url",
    "get_optional_env",
    "get_required_env",
    "load_config",
]
