"""Parsing utilities for common data transformations."""

from decimal import Context, Decimal

from balance_events.helpers.constants import AMOUNT_PRECISION, NATIVE_DECIMALS


AMOUNT_CONTEXT = Context(prec=AMOUNT_PRECISION)
"""Decimal context for token and native amounts, wide enough for any uint256"""


def parse_hex_int(hex_value: str | int | None, default: int = 0) -> int:
    """Parse hex string to integer.

    Args:
        hex_value: Hex-encoded string, an already decoded int, or None
        default: Default value if hex_value is None or empty

    Returns:
        int: Parsed integer value

    Example:
        >>> parse_hex_int("0xff")
        255
        >>> parse_hex_int(None, 0)
        0
    """
    if hex_value is None or hex_value in {"", "0x"}:
        return default
    if isinstance(hex_value, int):
        return hex_value
    return int(hex_value, 16)


def to_block_param(block: int | str) -> str:
    """Render a block number or tag as a JSON-RPC block parameter.

    Example:
        >>> to_block_param(4660)
        '0x1234'
        >>> to_block_param("latest")
        'latest'
    """
    return hex(block) if isinstance(block, int) else block


def scale_amount(raw: int, decimals: int) -> Decimal:
    """Convert a raw integer amount into human-readable units.

    Args:
        raw: Raw on-chain integer amount
        decimals: Power of ten the raw amount is scaled by

    Returns:
        Decimal: raw / 10**decimals, without float rounding

    Example:
        >>> scale_amount(100_000_000, 6)
        Decimal('100.000000')
    """
    return Decimal(raw).scaleb(-decimals, context=AMOUNT_CONTEXT)


def wei_to_eth(wei: int | None) -> Decimal | None:
    """Convert Wei to ETH (divide by 1e18).

    Example:
        >>> wei_to_eth(1000000000000000000)
        Decimal('1.000000000000000000')
        >>> wei_to_eth(None)
        None
    """
    return scale_amount(wei, NATIVE_DECIMALS) if wei is not None else None


def is_empty_hex(value: str | None) -> bool:
    """Whether an eth_call result carries no data ("0x", "" or None)."""
    return value is None or value in {"", "0x"}


__all__ = [
    "AMOUNT_CONTEXT",
    "is_empty_hex",
    "parse_hex_int",
    "scale_amount",
    "to_block_param",
    "wei_to_eth",
]
