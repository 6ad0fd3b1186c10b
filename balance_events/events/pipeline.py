"""Walks fetched blocks and hands every derived event to a sink."""

import inspect
from collections.abc import Awaitable, Callable
from typing import TypeAlias

from balance_events.chain.models import Block
from balance_events.events.analyzer import TransactionAnalyzer
from balance_events.events.models import BalanceChangeEvent
from balance_events.helpers.logging import get_logger


logger = get_logger(__name__)

EventSink: TypeAlias = Callable[[BalanceChangeEvent], Awaitable[None] | None]


class EventPipeline:
    """Sequentially analyzes blocks and emits events in chain order."""

    def __init__(self, analyzer: TransactionAnalyzer) -> None:
        self.analyzer = analyzer
        self.transactions_analyzed = 0
        self.events_emitted = 0

    async def process_blocks(self, blocks: list[Block], emit: EventSink) -> None:
        """Analyze every transaction of blocks, in order, and emit its events.

        A transaction whose analysis fails is logged and skipped. Errors
        raised by emit are not caught here.

        Args:
            blocks: Blocks in ascending order, fetched with full transactions
            emit: Called once per event; may be a coroutine function
        """
        for block in blocks:
            for transaction in block.transactions:
                try:
                    events = await self.analyzer.analyze(transaction)
                except Exception:
                    logger.exception(
                        "Failed to analyze %s in block #%s",
                        transaction.hash,
                        block.number,
                    )
                    continue

                self.transactions_analyzed += 1
                for event in events:
                    result = emit(event)
                    if inspect.isawaitable(result):
                        await result
                    self.events_emitted += 1

            logger.debug(
                "Processed block #%s (%s transactions)",
                block.number,
                len(block.transactions),
            )


__all__ = [
    "EventPipeline",
    "EventSink",
]
