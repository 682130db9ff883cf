"""Common configuration constants used across the application."""

# Fixed-point decimals
ETH_DECIMALS = 18
"""Number of decimals of the native currency (1 ETH = 10**18 wei)"""

GWEI_DECIMALS = 9
"""Number of decimals of a gwei (1 gwei = 10**9 wei)"""

USD_PRICE_DECIMALS = 8
"""Number of decimals of the Chainlink USD price feeds"""

UINT256_MAX = 2**256 - 1
"""Largest value of an unsigned 256-bit integer"""

# Gas
TRANSFER_GAS_UNITS = 21_000
"""Gas used by a standard ETH transfer"""

# Price oracle
ETH_USD_FEED = "0x5f4eC3Df9cbd43714FE2740f5E3616155c5b8419"
"""Chainlink ETH/USD aggregator on mainnet"""

LATEST_ANSWER_SELECTOR = "0x50d25bcd"
"""4-byte selector of latestAnswer(), which returns an int256"""

# Ingestion
DEFAULT_FROM_BLOCK = 16_976_395
"""First block downloaded when the historic dataset is empty"""

HISTORY_WINDOW = 500
"""Number of blocks behind the chain head downloaded from the CLI"""

RECENT_COUNT = 10
"""Number of blocks or transactions returned by the recent data queries"""

FETCH_RETRIES = 3
"""Number of fetch attempts per block before it is skipped"""

RETRY_DELAY = 0.01
"""Fixed delay between two fetch attempts in seconds"""

# HTTP and Network Constants
DEFAULT_TIMEOUT = 30.0
"""Default HTTP request timeout in seconds"""

# API server
DEFAULT_API_HOST = "127.0.0.1"
"""Default bind address of the REST API"""

DEFAULT_API_PORT = 8080
"""Default port of the REST API"""


__all__ = [
    "DEFAULT_API_HOST",
    "DEFAULT_API_PORT",
    "DEFAULT_FROM_BLOCK",
    "DEFAULT_TIMEOUT",
    "ETH_DECIMALS",
    "ETH_USD_FEED",
    "FETCH_RETRIES",
    "GWEI_DECIMALS",
    "HISTORY_WINDOW",
    "LATEST_ANSWER_SELECTOR",
    "RECENT_COUNT",
    "RETRY_DELAY",
    "TRANSFER_GAS_UNITS",
    "UINT256_MAX",
    "USD_PRICE_DECIMALS",
]
