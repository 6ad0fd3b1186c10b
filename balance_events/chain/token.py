"""Read-only access to ERC-20 token contracts through eth_call."""

from typing import TYPE_CHECKING

import httpx
from eth_abi import encode
from eth_abi.exceptions import DecodingError

from balance_events.helpers.constants import (
    BALANCE_OF_SELECTOR,
    DECIMALS_SELECTOR,
    SYMBOL_SELECTOR,
    TOTAL_SUPPLY_SELECTOR,
)
from balance_events.helpers.logging import get_logger
from balance_events.helpers.parsers import is_empty_hex
from balance_events.helpers.rpc import RPCError


if TYPE_CHECKING:
    from balance_events.chain.client import ChainClient


logger = get_logger(__name__)


class UnrecognizedTokenError(Exception):
    """Address does not answer the ERC-20 totalSupply() check."""

    def __init__(self, address: str) -> None:
        self.address = address
        super().__init__(f"{address} is not a recognizable token contract")


class TokenContract:
    """ERC-20 contract bound to one address.

    Only the read-only subset needed to rebuild balances is exposed:
    totalSupply, symbol, decimals and balanceOf.
    """

    def __init__(self, chain: "ChainClient", address: str) -> None:
        self.chain = chain
        self.address = address

    async def _call(self, data: str, block: int | str) -> str:
        return await self.chain.call_contract(self.address, data, block)

    async def total_supply(self, block: int | str = "latest") -> int | None:
        """Total supply, or None if the call returned no data."""
        result = await self._call(TOTAL_SUPPLY_SELECTOR, block)
        if is_empty_hex(result):
            return None
        return self.chain.decode_abi_parameter("uint256", result)

    async def is_token(self, block: int | str = "latest") -> bool:
        """Check the contract with totalSupply().

        Args:
            block: Block to run the check against

        Returns:
            True if totalSupply() answered with a value
        """
        try:
            supply = await self.total_supply(block)
        except (httpx.HTTPError, RPCError, DecodingError) as e:
            logger.debug("totalSupply() check failed for %s: %s", self.address, e)
            return False
        return supply is not None

    async def require_token(self, block: int | str = "latest") -> None:
        """Raise UnrecognizedTokenError if the totalSupply() check fails."""
        if not await self.is_token(block):
            raise UnrecognizedTokenError(self.address)

    async def symbol(self, block: int | str = "latest") -> str:
        result = await self._call(SYMBOL_SELECTOR, block)
        return self.chain.decode_abi_parameter("string", result)

    async def decimals(self, block: int | str = "latest") -> int:
        result = await self._call(DECIMALS_SELECTOR, block)
        return self.chain.decode_abi_parameter("uint8", result)

    async def balance_of(self, owner: str, block: int | str = "latest") -> int:
        """Raw (unscaled) token balance of owner at block."""
        data = BALANCE_OF_SELECTOR + encode(["address"], [owner]).hex()
        result = await self._call(data, block)
        return self.chain.decode_abi_parameter("uint256", result)

    def __repr__(self) -> str:
        return f"TokenContract({self.address})"


__all__ = [
    "TokenContract",
    "UnrecognizedTokenError",
]
