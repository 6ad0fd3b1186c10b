"""Pydantic models for normalized balance change events."""

from decimal import Decimal
from enum import Enum, IntEnum

from pydantic import BaseModel, Field

from balance_events.helpers.constants import NATIVE_SYMBOL


class BlockchainType(IntEnum):
    """Chain an event's account address belongs to."""

    SOLANA = 0
    NEAR = 1
    ETHEREUM = 2


class EventRole(Enum):
    """Which side of a transfer an event is built for.

    Only used while constructing an event; it decides how the previous
    native balance is reconstructed and is not stored on the event.
    """

    SENDER = "sender"
    RECEIVER = "receiver"


class TokenChange(BaseModel):
    """Token balance of one account before and after a transfer."""

    symbol: str
    mint: str = Field(default="", description="Mint address, empty on EVM chains")
    pre_amount: Decimal = Field(..., description="Balance before, human units")
    post_amount: Decimal = Field(..., description="Balance after, human units")


class BalanceChangeEvent(BaseModel):
    """Native and token balance change of one account in one transaction."""

    currency_string: str = NATIVE_SYMBOL
    account_address: str
    account_address_blockchain: BlockchainType = BlockchainType.ETHEREUM
    current_native_balance: Decimal = Field(..., ge=0)
    previous_native_balance: Decimal = Field(..., ge=0)
    transaction_cost: Decimal = Field(
        default=Decimal(0), ge=0, description="Gas paid by this account"
    )
    block_hash: str | None = None
    sequence_number: int = Field(..., description="Block number")
    change_signature: str = Field(..., description="Transaction hash")
    token_changes: list[TokenChange] = Field(default_factory=list)


__all__ = [
    "BalanceChangeEvent",
    "BlockchainType",
    "EventRole",
    "TokenChange",
]
