"""Pydantic models for raw chain data (blocks, transactions, receipts, logs)."""

from typing import Annotated, Any

from eth_utils import to_checksum_address
from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

from balance_events.helpers.parsers import parse_hex_int


# Hex quantities ("0x1a") become ints, addresses become EIP-55 checksummed
HexInt = Annotated[int, BeforeValidator(parse_hex_int)]
ChecksumAddress = Annotated[str, BeforeValidator(to_checksum_address)]


class Log(BaseModel):
    """Event log emitted by a contract during a transaction."""

    address: ChecksumAddress = Field(..., description="Emitting contract address")
    topics: list[str] = Field(default_factory=list, description="Topic hashes")
    data: str = Field(default="0x", description="Non-indexed payload")
    log_index: HexInt | None = Field(default=None, alias="logIndex")

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @field_validator("topics", mode="before")
    @classmethod
    def lowercase_topics(cls, topics: list[str] | None) -> list[str]:
        return [topic.lower() for topic in topics or []]


class Receipt(BaseModel):
    """Transaction receipt, the source of gas used and logs."""

    transaction_hash: str = Field(..., alias="transactionHash")
    gas_used: HexInt = Field(..., alias="gasUsed")
    status: HexInt | None = Field(default=None, description="1 success, 0 reverted")
    logs: list[Log] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True, populate_by_name=True)


class Transaction(BaseModel):
    """Mined transaction as returned inside a full block."""

    hash: str
    from_address: ChecksumAddress = Field(..., alias="from")
    to_address: ChecksumAddress | None = Field(
        default=None, alias="to", description="Absent for contract creation"
    )
    value: HexInt = Field(default=0, description="Native value in wei")
    gas_price: HexInt = Field(default=0, alias="gasPrice", description="Wei per gas")
    block_number: HexInt = Field(..., alias="blockNumber")
    block_hash: str | None = Field(default=None, alias="blockHash")
    transaction_index: HexInt | None = Field(default=None, alias="transactionIndex")

    model_config = ConfigDict(frozen=True, populate_by_name=True)


class Block(BaseModel):
    """Block with its ordered transactions."""

    number: HexInt
    hash: str | None = None
    transactions: list[Transaction] = Field(default_factory=list)
    transaction_hashes: list[str] = Field(
        default_factory=list,
        description="Filled instead of transactions when fetched without bodies",
    )

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @model_validator(mode="before")
    @classmethod
    def split_transaction_hashes(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        transactions = data.get("transactions") or []
        if transactions and all(isinstance(tx, str) for tx in transactions):
            return {**data, "transactions": [], "transaction_hashes": transactions}
        return data


__all__ = [
    "Block",
    "ChecksumAddress",
    "HexInt",
    "Log",
    "Receipt",
    "Transaction",
]
