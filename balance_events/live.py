"""Live balance change monitor.

Polls the chain head, analyzes every transaction of each new block and prints
the resulting balance change events to the console.

Processing flow:
1. BlockScanner ticks every SCAN_INTERVAL_SECONDS and fetches new blocks
2. EventPipeline analyzes each transaction, in block order
3. Each BalanceChangeEvent is printed

Usage:
    python -m balance_events.live
    python -m balance_events.live --interval 5 --limit 3
"""

from argparse import ArgumentParser
import signal
import sys

import asyncio

from rich.console import Console
from rich.table import Table

from balance_events.chain.client import ChainClient
from balance_events.chain.models import Block
from balance_events.events.analyzer import TransactionAnalyzer
from balance_events.events.models import BalanceChangeEvent
from balance_events.events.pipeline import EventPipeline
from balance_events.helpers.config import (
    get_blocks_limit,
    get_eth_rpc_url,
    get_log_level,
    get_rpc_timeout,
    get_scan_interval,
)
from balance_events.helpers.logging import get_logger, set_log_level
from balance_events.scanner import BlockScanner


logger = get_logger(__name__)


def render_event(event: BalanceChangeEvent) -> Table:
    """Render one event as a two-column rich table."""
    table = Table(
        title=f"{event.account_address} @ #{event.sequence_number}",
        show_header=False,
        title_justify="left",
    )
    table.add_column("Field", style="cyan")
    table.add_column("Value")

    table.add_row("Transaction", event.change_signature)
    table.add_row("Block hash", event.block_hash or "-")
    table.add_row(
        f"{event.currency_string} balance",
        f"{event.previous_native_balance} -> {event.current_native_balance}",
    )
    table.add_row("Transaction cost", str(event.transaction_cost))
    for change in event.token_changes:
        table.add_row(
            change.symbol,
            f"{change.pre_amount} -> {change.post_amount}",
        )
    return table


class LiveEventMonitor:
    """Wires chain client, scanner and pipeline, and prints events."""

    def __init__(
        self,
        rpc_url: str | None = None,
        interval: int | None = None,
        limit: int | None = None,
        console: Console | None = None,
    ) -> None:
        """Initialize the live monitor.

        Args:
            rpc_url: JSON-RPC endpoint, ETH_RPC_URL when omitted
            interval: Seconds between scans, SCAN_INTERVAL_SECONDS when omitted
            limit: Blocks per scan, SCAN_BLOCKS_LIMIT when omitted
            console: Console to print events to

        Raises:
            ValueError: If the endpoint is missing or a setting is invalid
        """
        self.interval = interval if interval is not None else get_scan_interval()
        self.limit = limit if limit is not None else get_blocks_limit()

        self.chain = ChainClient(get_eth_rpc_url(rpc_url), timeout=get_rpc_timeout())
        self.pipeline = EventPipeline(TransactionAnalyzer(self.chain))
        self.scanner = BlockScanner(self.chain)
        self.console = console or Console()

        self._shutdown = asyncio.Event()

    def print_event(self, event: BalanceChangeEvent) -> None:
        self.console.print(render_event(event))

    async def handle_blocks(self, blocks: list[Block]) -> None:
        await self.pipeline.process_blocks(blocks, self.print_event)
        logger.info(
            "Handled blocks #%s-#%s (%s events so far)",
            blocks[0].number,
            blocks[-1].number,
            self.pipeline.events_emitted,
        )

    def shutdown(self) -> None:
        """Gracefully shutdown the monitor."""
        logger.info("Shutdown signal received, stopping...")
        self.scanner.stop()
        self._shutdown.set()

    async def run(self) -> None:
        """Run until SIGINT/SIGTERM."""
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, self.shutdown)

        try:
            self.scanner.start(self.interval, self.limit, self.handle_blocks)
            await self._shutdown.wait()
            await self.scanner.wait_closed()
        finally:
            for sig in (signal.SIGINT, signal.SIGTERM):
                loop.remove_signal_handler(sig)
            await self.chain.aclose()

        logger.info(
            "Live monitor stopped (%s events emitted)", self.pipeline.events_emitted
        )


async def main(
    rpc_url: str | None = None,
    interval: int | None = None,
    limit: int | None = None,
) -> None:
    """Main entry point."""
    try:
        set_log_level(get_log_level())
        monitor = LiveEventMonitor(rpc_url=rpc_url, interval=interval, limit=limit)
        await monitor.run()
    except ValueError as e:
        logger.error("Invalid configuration: %s", e)
        sys.exit(2)
    except Exception:
        logger.exception("Fatal error")
        sys.exit(1)


def cli() -> None:
    """Command-line interface entry point."""
    parser = ArgumentParser(description="Print balance change events of new blocks")
    parser.add_argument("--rpc-url", help="JSON-RPC endpoint (default: ETH_RPC_URL)")
    parser.add_argument(
        "--interval",
        type=int,
        help="Seconds between scans (default: SCAN_INTERVAL_SECONDS or 10)",
    )
    parser.add_argument(
        "--limit",
        type=int,
        help="Maximum blocks per scan (default: SCAN_BLOCKS_LIMIT or 1)",
    )
    args = parser.parse_args()

    asyncio.run(main(args.rpc_url, args.interval, args.limit))


if __name__ == "__main__":
    cli()
