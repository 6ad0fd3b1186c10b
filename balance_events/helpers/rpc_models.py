"""Pydantic models for JSON-RPC requests and responses."""

from typing import Any

from pydantic import BaseModel, Field


class JsonRpcRequest(BaseModel):
    """JSON-RPC 2.0 request model."""

    jsonrpc: str = Field(default="2.0", description="JSON-RPC version")
    method: str = Field(..., description="Method name to call")
    params: list[Any] = Field(
        default_factory=list, description="Method parameters"
    )
    id: int | str = Field(default=1, description="Request ID")


class EthBlockNumberRequest(JsonRpcRequest):
    """JSON-RPC request for eth_blockNumber."""

    method: str = Field(default="eth_blockNumber", frozen=True)
    params: list[Any] = Field(default_factory=list, frozen=True)


class EthGetBlockByNumberRequest(JsonRpcRequest):
    """JSON-RPC request for eth_getBlockByNumber."""

    method: str = Field(default="eth_getBlockByNumber", frozen=True)


class EthGetTransactionReceiptRequest(JsonRpcRequest):
    """JSON-RPC request for eth_getTransactionReceipt."""

    method: str = Field(default="eth_getTransactionReceipt", frozen=True)


class EthGetBalanceRequest(JsonRpcRequest):
    """JSON-RPC request for eth_getBalance."""

    method: str = Field(default="eth_getBalance", frozen=True)


class EthCallRequest(JsonRpcRequest):
    """JSON-RPC request for eth_call."""

    method: str = Field(default="eth_call", frozen=True)


class JsonRpcError(BaseModel):
    """Error object of a failed JSON-RPC response."""

    code: int = Field(..., description="Error code")
    message: str = Field(..., description="Error message")
    data: Any = Field(default=None, description="Optional error details")


__all__ = [
    "EthBlockNumberRequest",
    "EthCallRequest",
    "EthGetBalanceRequest",
    "EthGetBlockByNumberRequest",
    "EthGetTransactionReceiptRequest",
    "JsonRpcError",
    "JsonRpcRequest",
]
