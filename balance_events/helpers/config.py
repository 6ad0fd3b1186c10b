"""Configuration management and environment variable utilities."""

import os

from dotenv import load_dotenv

from balance_events.helpers.constants import (
    DEFAULT_BLOCKS_LIMIT,
    DEFAULT_SCAN_INTERVAL,
    DEFAULT_TIMEOUT,
)


# Load environment variables from .env file
load_dotenv()

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


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
        from balance_events.helpers.config import get_required_env

        rpc_url = get_required_env("ETH_RPC_URL")
        ```
    """
    value = os.getenv(key)
    if not value:
        msg = f"{key} environment variable is not set"
        raise ValueError(msg)
    return value


def get_optional_env(key: str, default: str | None = None) -> str | None:
    """Get an optional environment variable with a default value.

    Args:
        key: Environment variable name
        default: Default value if not set

    Returns:
        Environment variable value or default
    """
    return os.getenv(key, default)


def get_positive_int_env(key: str, default: int) -> int:
    """Get an environment variable that must be an integer >= 1.

    Args:
        key: Environment variable name
        default: Value used when the variable is unset or empty

    Returns:
        Parsed integer value

    Raises:
        ValueError: If the value is not an integer or is lower than 1
    """
    raw = get_optional_env(key)
    if not raw:
        return default

    try:
        value = int(raw)
    except ValueError:
        msg = f"{key} must be an integer, got {raw!r}"
        raise ValueError(msg) from None

    if value < 1:
        msg = f"{key} must be >= 1, got {value}"
        raise ValueError(msg)
    return value


def get_eth_rpc_url(rpc_url: str | None = None) -> str:
    """Get Ethereum RPC URL from parameter or environment.

    Args:
        rpc_url: Optional RPC URL to use directly

    Returns:
        Ethereum RPC URL

    Raises:
        ValueError: If rpc_url is empty and ETH_RPC_URL is not set

    Example:
        ```python
        from balance_events.helpers.config import get_eth_rpc_url

        # Get from environment
        rpc_url = get_eth_rpc_url()

        # Or provide explicitly
        rpc_url = get_eth_rpc_url("https://eth.llamarpc.com")
        ```
    """
    if rpc_url:
        return rpc_url
    return get_required_env("ETH_RPC_URL")


def get_scan_interval() -> int:
    """Seconds between two scan ticks (SCAN_INTERVAL_SECONDS)."""
    return get_positive_int_env("SCAN_INTERVAL_SECONDS", DEFAULT_SCAN_INTERVAL)


def get_blocks_limit() -> int:
    """Maximum number of blocks fetched per cycle (SCAN_BLOCKS_LIMIT)."""
    return get_positive_int_env("SCAN_BLOCKS_LIMIT", DEFAULT_BLOCKS_LIMIT)


def get_rpc_timeout() -> float:
    """Get the per-request JSON-RPC timeout in seconds.

    Returns:
        Timeout from RPC_TIMEOUT, or DEFAULT_TIMEOUT when unset

    Raises:
        ValueError: If RPC_TIMEOUT is not a positive number
    """
    raw = get_optional_env("RPC_TIMEOUT")
    if not raw:
        return DEFAULT_TIMEOUT

    try:
        timeout = float(raw)
    except ValueError:
        msg = f"RPC_TIMEOUT must be a number, got {raw!r}"
        raise ValueError(msg) from None

    if timeout <= 0:
        msg = f"RPC_TIMEOUT must be positive, got {timeout}"
        raise ValueError(msg)
    return timeout


def get_log_level() -> str:
    """Get the log level name from LOG_LEVEL.

    Returns:
        Upper-cased level name, INFO when unset

    Raises:
        ValueError: If LOG_LEVEL is not a known level name
    """
    level = (get_optional_env("LOG_LEVEL") or "INFO").upper()
    if level not in LOG_LEVELS:
        msg = f"Invalid log level: {level}"
        raise ValueError(msg)
    return level


__all__ = [
    "LOG_LEVELS",
    "get_blocks_limit",
    "get_eth_rpc_url",
    "get_log_level",
    "get_optional_env",
    "get_positive_int_env",
    "get_required_env",
    "get_rpc_timeout",
    "get_scan_interval",
]
