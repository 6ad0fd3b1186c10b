"""Transaction analyzer.

Turns one mined transaction into the balance change events of every account
it touched:

1. Native transfer (value > 0): one sender event and one receiver event. Logs
   are not inspected, so token transfers made in the same transaction are
   not reported.
2. Otherwise: one sender event for the transaction's own sender, plus the
   token changes decoded from standard ERC-20 Transfer logs. A log whose
   emitter fails the totalSupply() check stops the processing of that log
   and of every later log in the transaction.

Sender events always come before receiver events in the returned list.
"""

from dataclasses import dataclass
from decimal import Decimal, localcontext

import httpx
from eth_abi.exceptions import DecodingError
from eth_utils import to_checksum_address

from balance_events.chain.client import ChainClient
from balance_events.chain.models import Log, Receipt, Transaction
from balance_events.chain.token import UnrecognizedTokenError
from balance_events.events.models import BalanceChangeEvent, EventRole, TokenChange
from balance_events.helpers.constants import TRANSFER_TOPIC, TRANSFER_TOPIC_COUNT
from balance_events.helpers.logging import get_logger
from balance_events.helpers.parsers import AMOUNT_CONTEXT, scale_amount, wei_to_eth
from balance_events.helpers.rpc import RPCError


logger = get_logger(__name__)

ZERO = Decimal(0)


def reconstruct_previous_balance(
    role: EventRole,
    current_balance: Decimal,
    transaction_cost: Decimal,
    transferred_value: Decimal,
) -> Decimal:
    """Rebuild an account's native balance before the transaction.

    A sender paid gas and value, so both are added back. A receiver got
    value, so it is subtracted and clamped at zero.
    """
    with localcontext(AMOUNT_CONTEXT):
        if role is EventRole.SENDER:
            return current_balance + transaction_cost + transferred_value
        return max(ZERO, current_balance - transferred_value)


def is_transfer_log(log: Log) -> bool:
    """Whether log looks like an ERC-20 Transfer(address,address,uint256)."""
    return len(log.topics) == TRANSFER_TOPIC_COUNT and log.topics[0] == TRANSFER_TOPIC


@dataclass(frozen=True)
class TransferEffect:
    """Everything one Transfer log contributes, gathered before it is applied."""

    sender: str
    sender_change: TokenChange
    receiver: str
    receiver_change: TokenChange
    new_sender_event: BalanceChangeEvent | None = None
    new_receiver_event: BalanceChangeEvent | None = None


class TransactionAnalyzer:
    """Builds BalanceChangeEvents for single transactions."""

    def __init__(self, chain: ChainClient) -> None:
        self.chain = chain

    async def analyze(self, transaction: Transaction) -> list[BalanceChangeEvent]:
        """Analyze one transaction.

        Args:
            transaction: Mined transaction taken from a full block

        Returns:
            Sender events followed by receiver events; empty when the
            receipt is not available

        Raises:
            httpx.HTTPError: If a native balance or the receipt cannot be read
            RPCError: If the node rejects one of those calls
        """
        receipt = await self.chain.receipt_of(transaction.hash)
        if receipt is None:
            logger.debug("No receipt for %s yet, skipping", transaction.hash)
            return []

        transaction_cost = wei_to_eth(transaction.gas_price * receipt.gas_used)
        transferred_value = wei_to_eth(transaction.value)
        assert transaction_cost is not None and transferred_value is not None

        if transferred_value > 0:
            return await self._native_transfer_events(
                transaction, transaction_cost, transferred_value
            )
        return await self._token_transfer_events(transaction, receipt, transaction_cost)

    async def build_event(
        self,
        role: EventRole,
        address: str,
        transaction: Transaction,
        *,
        transaction_cost: Decimal = ZERO,
        transferred_value: Decimal = ZERO,
    ) -> BalanceChangeEvent:
        """Build an event for address with its native balance at the tx block.

        Args:
            role: Sender or receiver, decides how the previous balance is rebuilt
            address: Account the event is about
            transaction: Transaction the event belongs to
            transaction_cost: Gas cost paid by address, in ether
            transferred_value: Native value moved, in ether

        Returns:
            Event without token changes
        """
        current = await self.chain.native_balance_of(address, transaction.block_number)
        return BalanceChangeEvent(
            account_address=address,
            current_native_balance=current,
            previous_native_balance=reconstruct_previous_balance(
                role, current, transaction_cost, transferred_value
            ),
            transaction_cost=transaction_cost,
            block_hash=transaction.block_hash,
            sequence_number=transaction.block_number,
            change_signature=transaction.hash,
        )

    async def _native_transfer_events(
        self,
        transaction: Transaction,
        transaction_cost: Decimal,
        transferred_value: Decimal,
    ) -> list[BalanceChangeEvent]:
        events = [
            await self.build_event(
                EventRole.SENDER,
                transaction.from_address,
                transaction,
                transaction_cost=transaction_cost,
                transferred_value=transferred_value,
            )
        ]
        # Contract creation carries value but has no receiver account
        if transaction.to_address is not None:
            events.append(
                await self.build_event(
                    EventRole.RECEIVER,
                    transaction.to_address,
                    transaction,
                    transferred_value=transferred_value,
                )
            )
        return events

    async def _token_transfer_events(
        self,
        transaction: Transaction,
        receipt: Receipt,
        transaction_cost: Decimal,
    ) -> list[BalanceChangeEvent]:
        senders = {
            transaction.from_address: await self.build_event(
                EventRole.SENDER,
                transaction.from_address,
                transaction,
                transaction_cost=transaction_cost,
            )
        }
        receivers: dict[str, BalanceChangeEvent] = {}

        for log in filter(is_transfer_log, receipt.logs):
            try:
                effect = await self._read_transfer(transaction, log, senders, receivers)
            except UnrecognizedTokenError as e:
                logger.info("%s in %s, ignoring remaining logs", e, transaction.hash)
                break
            except (httpx.HTTPError, RPCError, DecodingError, ValueError) as e:
                logger.warning(
                    "Failed to read Transfer log of %s in %s, "
                    "ignoring remaining logs: %s",
                    log.address,
                    transaction.hash,
                    e,
                )
                break

            if effect.new_sender_event is not None:
                senders[effect.sender] = effect.new_sender_event
            senders[effect.sender].token_changes.append(effect.sender_change)

            if effect.new_receiver_event is not None:
                receivers[effect.receiver] = effect.new_receiver_event
            receivers[effect.receiver].token_changes.append(effect.receiver_change)

        return [*senders.values(), *receivers.values()]

    async def _read_transfer(
        self,
        transaction: Transaction,
        log: Log,
        senders: dict[str, BalanceChangeEvent],
        receivers: dict[str, BalanceChangeEvent],
    ) -> TransferEffect:
        """Query everything a Transfer log needs without touching any event."""
        block = transaction.block_number
        sender = to_checksum_address(
            self.chain.decode_abi_parameter("address", log.topics[1])
        )
        receiver = to_checksum_address(
            self.chain.decode_abi_parameter("address", log.topics[2])
        )
        raw_amount = self.chain.decode_abi_parameter("uint256", log.data)

        token = self.chain.token_contract(log.address)
        await token.require_token(block)

        symbol = await token.symbol(block)
        decimals = await token.decimals(block)
        amount = scale_amount(raw_amount, decimals)

        sender_balance = scale_amount(await token.balance_of(sender, block), decimals)
        receiver_balance = scale_amount(
            await token.balance_of(receiver, block), decimals
        )

        new_sender_event = None
        if sender not in senders:
            new_sender_event = await self.build_event(
                EventRole.SENDER, sender, transaction
            )

        new_receiver_event = None
        if receiver not in receivers:
            new_receiver_event = await self.build_event(
                EventRole.RECEIVER, receiver, transaction
            )

        with localcontext(AMOUNT_CONTEXT):
            sender_pre = sender_balance + amount
            receiver_pre = max(ZERO, receiver_balance - amount)

        return TransferEffect(
            sender=sender,
            sender_change=TokenChange(
                symbol=symbol,
                pre_amount=sender_pre,
                post_amount=sender_balance,
            ),
            receiver=receiver,
            receiver_change=TokenChange(
                symbol=symbol,
                pre_amount=receiver_pre,
                post_amount=receiver_balance,
            ),
            new_sender_event=new_sender_event,
            new_receiver_event=new_receiver_event,
        )


__all__ = [
    "TransactionAnalyzer",
    "TransferEffect",
    "is_transfer_log",
    "reconstruct_previous_balance",
]
