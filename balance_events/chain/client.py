"""Chain client: typed access to the blocks, receipts and balances of one endpoint."""

from decimal import Decimal
from typing import Any, Self

import httpx
from eth_abi import decode
from eth_utils import decode_hex

from balance_events.chain.models import Block, Receipt
from balance_events.chain.token import TokenContract
from balance_events.helpers.constants import (
    DEFAULT_TIMEOUT,
    MAX_CONNECTIONS,
    MAX_KEEPALIVE_CONNECTIONS,
)
from balance_events.helpers.logging import get_logger
from balance_events.helpers.parsers import wei_to_eth
from balance_events.helpers.rpc import RPCClient


logger = get_logger(__name__)


class ChainClient:
    """Chain client bound to one JSON-RPC endpoint.

    Wraps RPCClient and a shared httpx.AsyncClient, and turns raw RPC
    payloads into the pydantic models of balance_events.chain.models.

    Example:
        ```python
        async with ChainClient("https://eth.llamarpc.com") as chain:
            height = await chain.current_height()
            block = await chain.block_at(height)
        ```
    """

    def __init__(
        self,
        rpc_url: str,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the chain client.

        Args:
            rpc_url: Ethereum JSON-RPC endpoint URL
            timeout: Per-request timeout in seconds
            http_client: Optional HTTP client to reuse; one is created
                (and owned) otherwise

        Raises:
            ValueError: If rpc_url is empty
        """
        self.rpc = RPCClient(rpc_url, timeout=timeout)
        self._owns_http_client = http_client is None
        self.http_client = http_client or httpx.AsyncClient(
            timeout=timeout,
            limits=httpx.Limits(
                max_keepalive_connections=MAX_KEEPALIVE_CONNECTIONS,
                max_connections=MAX_CONNECTIONS,
            ),
        )

    async def current_height(self) -> int:
        """Latest block number."""
        return await self.rpc.get_block_number(self.http_client)

    async def block_at(
        self, number: int, *, include_transactions: bool = True
    ) -> Block | None:
        """Fetch a block by number.

        Args:
            number: Block height
            include_transactions: Whether to fetch full transaction objects

        Returns:
            Block, or None if the node has no block at that height yet
        """
        raw = await self.rpc.get_block_by_number(
            self.http_client, number, full_transactions=include_transactions
        )
        if not raw:
            return None
        return Block.model_validate(raw)

    async def receipt_of(self, tx_hash: str) -> Receipt | None:
        """Fetch a transaction receipt, None if it is not available."""
        raw = await self.rpc.get_transaction_receipt(self.http_client, tx_hash)
        if not raw:
            return None
        return Receipt.model_validate(raw)

    async def native_balance_of(
        self, address: str, block: int | str = "latest"
    ) -> Decimal:
        """Native balance of address at block, in ether."""
        wei = await self.rpc.get_balance(self.http_client, address, block)
        return wei_to_eth(wei)  # type: ignore[return-value]

    async def call_contract(
        self, address: str, data: str, block: int | str = "latest"
    ) -> str:
        """Run a read-only contract call and return the raw hex result."""
        return await self.rpc.eth_call(self.http_client, address, data, block)

    def decode_abi_parameter(self, abi_type: str, hex_data: str) -> Any:
        """Decode one ABI-encoded value.

        Args:
            abi_type: Solidity type, e.g. "address" or "uint256"
            hex_data: 0x-prefixed ABI encoding (a topic or a data payload)

        Returns:
            Decoded Python value (checksummed str for addresses)

        Raises:
            eth_abi.exceptions.DecodingError: If the data does not hold the type
        """
        (value,) = decode([abi_type], decode_hex(hex_data))
        return value

    def token_contract(self, address: str) -> TokenContract:
        """Bind an ERC-20 contract at address to this client."""
        return TokenContract(self, address)

    async def aclose(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_http_client:
            await self.http_client.aclose()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()


__all__ = ["ChainClient"]
