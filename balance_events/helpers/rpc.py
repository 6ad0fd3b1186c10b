"""Ethereum JSON-RPC client utilities."""

from typing import Any

import httpx
from pydantic import ValidationError

from balance_events.helpers.constants import DEFAULT_TIMEOUT
from balance_events.helpers.parsers import parse_hex_int, to_block_param
from balance_events.helpers.rpc_models import (
    EthBlockNumberRequest,
    EthCallRequest,
    EthGetBalanceRequest,
    EthGetBlockByNumberRequest,
    EthGetTransactionReceiptRequest,
    JsonRpcError,
    JsonRpcRequest,
)


class RPCError(ValueError):
    """JSON-RPC endpoint answered with an error object."""

    def __init__(self, error: Any) -> None:
        try:
            parsed = JsonRpcError.model_validate(error)
        except ValidationError:
            parsed = None

        self.code = parsed.code if parsed else None
        self.error = error
        detail = f"{parsed.message} (code {parsed.code})" if parsed else error
        super().__init__(f"RPC error: {detail}")


class RPCClient:
    """Ethereum JSON-RPC client."""

    def __init__(self, rpc_url: str, timeout: float = DEFAULT_TIMEOUT) -> None:
        """Initialize RPC client.

        Args:
            rpc_url: Ethereum JSON-RPC endpoint URL
            timeout: Default timeout for requests in seconds

        Raises:
            ValueError: If rpc_url is empty or None
        """
        if not rpc_url:
            msg = "RPC URL cannot be empty"
            raise ValueError(msg)

        self.rpc_url = rpc_url
        self.timeout = timeout

    async def send(
        self,
        client: httpx.AsyncClient,
        request: JsonRpcRequest,
        *,
        timeout: float | None = None,
    ) -> Any:
        """Send a prepared JSON-RPC request.

        Args:
            client: HTTP client instance
            request: Request model to send
            timeout: Optional timeout override

        Returns:
            RPC result value (None when the node has no result)

        Raises:
            httpx.HTTPError: If the HTTP request fails
            RPCError: If the RPC response contains an error
        """
        response = await client.post(
            self.rpc_url,
            json=request.model_dump(),
            timeout=timeout or self.timeout,
        )
        response.raise_for_status()
        result = response.json()

        if "error" in result:
            raise RPCError(result["error"])

        return result.get("result")

    async def get_block_number(self, client: httpx.AsyncClient) -> int:
        """Get the latest block number.

        Args:
            client: HTTP client instance

        Returns:
            Latest block number
        """
        result = await self.send(client, EthBlockNumberRequest())
        return parse_hex_int(result)

    async def get_block_by_number(
        self,
        client: httpx.AsyncClient,
        block_number: int | str,
        *,
        full_transactions: bool = True,
    ) -> dict[str, Any] | None:
        """Get a raw block.

        Args:
            client: HTTP client instance
            block_number: Block number (int) or tag such as "latest"
            full_transactions: Whether to inline transaction objects

        Returns:
            Raw block dictionary, or None if the block does not exist yet
        """
        request = EthGetBlockByNumberRequest(
            params=[to_block_param(block_number), full_transactions]
        )
        return await self.send(client, request)

    async def get_transaction_receipt(
        self, client: httpx.AsyncClient, tx_hash: str
    ) -> dict[str, Any] | None:
        """Get a raw transaction receipt.

        Args:
            client: HTTP client instance
            tx_hash: Transaction hash

        Returns:
            Raw receipt dictionary, or None for pending/unknown transactions
        """
        request = EthGetTransactionReceiptRequest(params=[tx_hash])
        return await self.send(client, request)

    async def get_balance(
        self,
        client: httpx.AsyncClient,
        address: str,
        block_number: int | str = "latest",
    ) -> int:
        """Get ETH balance for an address at a specific block.

        Args:
            client: HTTP client instance
            address: Ethereum address
            block_number: Block number (int) or "latest"

        Returns:
            Balance in wei
        """
        request = EthGetBalanceRequest(
            params=[address, to_block_param(block_number)]
        )
        result = await self.send(client, request)
        return parse_hex_int(result)

    async def eth_call(
        self,
        client: httpx.AsyncClient,
        to: str,
        data: str,
        block_number: int | str = "latest",
    ) -> str:
        """Execute a read-only contract call.

        Args:
            client: HTTP client instance
            to: Contract address
            data: ABI-encoded call data (selector + arguments)
            block_number: Block number (int) or "latest"

        Returns:
            Hex-encoded return data ("0x" when the call returned nothing)
        """
        request = EthCallRequest(
            params=[{"to": to, "data": data}, to_block_param(block_number)]
        )
        result = await self.send(client, request)
        return result or "0x"


__all__ = [
    "RPCClient",
    "RPCError",
]
