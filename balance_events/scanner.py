"""Block scanner.

Polls the chain on a fixed interval and hands newly produced blocks to a
callback. The scanner starts from the chain head: on its first cycle it only
records the current height, so history is never backfilled.

Each cycle goes Idle -> Scanning -> Idle. A tick that fires while a cycle is
still scanning is dropped, not queued. Nothing raised inside a cycle escapes
it; a failing endpoint leaves the cursor where it was and the next tick tries
again.

Usage:
    ```python
    scanner = BlockScanner(chain)
    scanner.start(10, 1, on_blocks)
    ...
    scanner.stop()
    await scanner.wait_closed()
    ```
"""

import inspect
from collections.abc import Awaitable, Callable
from typing import TypeAlias

import asyncio

from balance_events.chain.client import ChainClient
from balance_events.chain.models import Block
from balance_events.helpers.logging import get_logger


logger = get_logger(__name__)

BlocksHandler: TypeAlias = Callable[[list[Block]], Awaitable[None] | None]


class ScanCursor:
    """Last block handed off to analysis, plus the busy flag."""

    def __init__(self, block_number: int | None = None) -> None:
        self.block_number = block_number
        self.busy = False

    @property
    def initialized(self) -> bool:
        return self.block_number is not None

    def advance(self, block_number: int) -> None:
        """Move the cursor forward to block_number.

        Raises:
            ValueError: If block_number is behind the cursor
        """
        if self.block_number is not None and block_number < self.block_number:
            msg = f"Cursor cannot move back from {self.block_number} to {block_number}"
            raise ValueError(msg)
        self.block_number = block_number

    def __repr__(self) -> str:
        return f"ScanCursor(block_number={self.block_number}, busy={self.busy})"


class BlockScanner:
    """Timer-driven scanner owning one cursor over one chain endpoint."""

    def __init__(self, chain: ChainClient, cursor: ScanCursor | None = None) -> None:
        self.chain = chain
        self.cursor = cursor or ScanCursor()

        self._stop_event: asyncio.Event | None = None
        self._loop_task: asyncio.Task[None] | None = None
        self._cycles: set[asyncio.Task[list[Block]]] = set()

        # Stats
        self.cycles_run = 0
        self.ticks_skipped = 0
        self.blocks_fetched = 0

    @property
    def is_running(self) -> bool:
        return self._loop_task is not None and not self._loop_task.done()

    async def fetch_blocks(self, from_block: int, limit: int) -> list[Block]:
        """Fetch blocks from_block+1 .. from_block+limit.

        Stops at the first height the node cannot return yet.

        Args:
            from_block: Last block already handled
            limit: Maximum number of blocks to fetch

        Returns:
            Fetched blocks in ascending order, possibly empty
        """
        blocks: list[Block] = []
        for number in range(from_block + 1, from_block + limit + 1):
            block = await self.chain.block_at(number, include_transactions=True)
            if block is None:
                break
            blocks.append(block)
        return blocks

    async def run_cycle(
        self, batch_limit: int, on_blocks: BlocksHandler
    ) -> list[Block]:
        """Run one scan cycle.

        Args:
            batch_limit: Maximum number of blocks to fetch
            on_blocks: Called with the fetched blocks; may be a coroutine function

        Returns:
            Blocks handed to on_blocks (empty when nothing was fetched)
        """
        if self.cursor.busy:
            self.ticks_skipped += 1
            logger.info("Previous scan still running, skipping tick")
            return []

        self.cursor.busy = True
        try:
            try:
                height = await self.chain.current_height()

                if not self.cursor.initialized:
                    self.cursor.advance(height)
                    logger.info("Scanner starting at block #%s", height)
                    return []

                if height == self.cursor.block_number:
                    return []

                logger.info("Scanning from block #%s", self.cursor.block_number)
                blocks = await self.fetch_blocks(self.cursor.block_number, batch_limit)
            except Exception as e:
                logger.warning(
                    "Scan aborted at block #%s: %s", self.cursor.block_number, e
                )
                return []

            if not blocks:
                return []

            try:
                result = on_blocks(blocks)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception(
                    "Block handler failed for blocks #%s-#%s",
                    blocks[0].number,
                    blocks[-1].number,
                )

            self.cursor.advance(blocks[-1].number)
            self.blocks_fetched += len(blocks)
            return blocks
        finally:
            self.cycles_run += 1
            self.cursor.busy = False

    def start(
        self, interval_seconds: int, batch_limit: int, on_blocks: BlocksHandler
    ) -> None:
        """Start the repeating scan loop on the running event loop.

        A loop already started by this scanner is stopped first.

        Args:
            interval_seconds: Seconds between two ticks, >= 1
            batch_limit: Maximum number of blocks fetched per cycle, >= 1
            on_blocks: Called with each non-empty batch of blocks

        Raises:
            ValueError: If interval_seconds or batch_limit is lower than 1
            RuntimeError: If called without a running event loop
        """
        if interval_seconds < 1:
            msg = f"interval_seconds must be >= 1, got {interval_seconds}"
            raise ValueError(msg)
        if batch_limit < 1:
            msg = f"batch_limit must be >= 1, got {batch_limit}"
            raise ValueError(msg)

        self.stop()
        self._stop_event = asyncio.Event()
        self._loop_task = asyncio.create_task(
            self._run(interval_seconds, batch_limit, on_blocks, self._stop_event)
        )
        logger.info(
            "Block scanner started (interval: %ss, limit: %s blocks)",
            interval_seconds,
            batch_limit,
        )

    def stop(self) -> None:
        """Stop scheduling new cycles; a cycle in progress runs to completion."""
        if self._stop_event is not None and not self._stop_event.is_set():
            logger.info("Stopping block scanner")
            self._stop_event.set()

    async def wait_closed(self) -> None:
        """Wait for the loop and any in-flight cycle to finish."""
        if self._loop_task is not None:
            await self._loop_task
        if self._cycles:
            await asyncio.gather(*self._cycles, return_exceptions=True)

    async def _run(
        self,
        interval_seconds: int,
        batch_limit: int,
        on_blocks: BlocksHandler,
        stop_event: asyncio.Event,
    ) -> None:
        while not stop_event.is_set():
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=interval_seconds)
            except TimeoutError:
                self._tick(batch_limit, on_blocks)

        logger.info("Block scanner stopped at block #%s", self.cursor.block_number)

    def _tick(self, batch_limit: int, on_blocks: BlocksHandler) -> None:
        # Cycles run as their own tasks so the timer keeps firing while one
        # is in progress; run_cycle drops the tick if the cursor is busy.
        task = asyncio.create_task(self.run_cycle(batch_limit, on_blocks))
        self._cycles.add(task)
        task.add_done_callback(self._cycle_done)

    def _cycle_done(self, task: asyncio.Task[list[Block]]) -> None:
        self._cycles.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error("Scan cycle failed: %s", error, exc_info=error)


__all__ = [
    "BlockScanner",
    "BlocksHandler",
    "ScanCursor",
]
