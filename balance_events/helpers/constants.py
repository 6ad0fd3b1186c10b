"""Common configuration constants used across the application."""

from eth_utils import encode_hex, function_signature_to_4byte_selector, keccak

# Scanner Defaults
DEFAULT_SCAN_INTERVAL = 10
"""Default number of seconds between two scan ticks"""

DEFAULT_BLOCKS_LIMIT = 1
"""Default maximum number of blocks fetched per scan cycle"""

# HTTP and Network Constants
DEFAULT_TIMEOUT = 30.0
"""Default HTTP request timeout in seconds"""

MAX_KEEPALIVE_CONNECTIONS = 5
"""Maximum number of keepalive connections in pool"""

MAX_CONNECTIONS = 10
"""Maximum total number of connections"""

# Chain Constants
NATIVE_SYMBOL = "ETH"
"""Currency symbol of the chain's native balance"""

NATIVE_DECIMALS = 18
"""Wei per ether as a power of ten"""

AMOUNT_PRECISION = 100
"""Significant digits for amount arithmetic; a uint256 has at most 78"""

# ERC-20 Constants
TRANSFER_EVENT_SIGNATURE = "Transfer(address,address,uint256)"
"""Signature of the standard token Transfer event"""

TRANSFER_TOPIC = encode_hex(keccak(text=TRANSFER_EVENT_SIGNATURE))
"""topic0 of every standard Transfer log (0xddf252ad...)"""

TRANSFER_TOPIC_COUNT = 3
"""Transfer logs carry the signature plus indexed from and to"""

TOTAL_SUPPLY_SELECTOR = encode_hex(function_signature_to_4byte_selector("totalSupply()"))
SYMBOL_SELECTOR = encode_hex(function_signature_to_4byte_selector("symbol()"))
DECIMALS_SELECTOR = encode_hex(function_signature_to_4byte_selector("decimals()"))
BALANCE_OF_SELECTOR = encode_hex(function_signature_to_4byte_selector("balanceOf(address)"))


__all__ = [
    "AMOUNT_PRECISION",
    "BALANCE_OF_SELECTOR",
    "DECIMALS_SELECTOR",
    "DEFAULT_BLOCKS_LIMIT",
    "DEFAULT_SCAN_INTERVAL",
    "DEFAULT_TIMEOUT",
    "MAX_CONNECTIONS",
    "MAX_KEEPALIVE_CONNECTIONS",
    "NATIVE_DECIMALS",
    "NATIVE_SYMBOL",
    "SYMBOL_SELECTOR",
    "TOTAL_SUPPLY_SELECTOR",
    "TRANSFER_EVENT_SIGNATURE",
    "TRANSFER_TOPIC",
    "TRANSFER_TOPIC_COUNT",
]
