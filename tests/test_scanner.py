"""Tests for the block scanner."""

import pytest

import asyncio

from balance_events.chain.models import Block
from balance_events.scanner import BlockScanner, ScanCursor
from tests.fakes import FakeChain


def add_blocks(chain: FakeChain, *numbers: int) -> None:
    for number in numbers:
        chain.blocks[number] = Block(number=number, hash=f"0x{number:064x}")


class Recorder:
    """Collects the batches handed to on_blocks."""

    def __init__(self) -> None:
        self.batches: list[list[int]] = []

    async def __call__(self, blocks: list[Block]) -> None:
        self.batches.append([block.number for block in blocks])


class TestScanCursor:
    """Tests for ScanCursor."""

    def test_starts_uninitialized(self) -> None:
        """Test a new cursor has no block and is idle."""
        cursor = ScanCursor()

        assert cursor.block_number is None
        assert not cursor.initialized
        assert not cursor.busy

    def test_advance_forward(self) -> None:
        """Test the cursor moves forward."""
        cursor = ScanCursor(10)
        cursor.advance(12)

        assert cursor.block_number == 12

    def test_advance_backward_raises(self) -> None:
        """Test the cursor refuses to move back."""
        cursor = ScanCursor(10)

        with pytest.raises(ValueError, match="cannot move back"):
            cursor.advance(9)


class TestRunCycle:
    """Tests for BlockScanner.run_cycle."""

    @pytest.mark.asyncio
    async def test_first_cycle_starts_from_head(self, chain: FakeChain) -> None:
        """Test the first cycle only records the current height."""
        chain.height = 500
        add_blocks(chain, 500, 501)
        recorder = Recorder()
        scanner = BlockScanner(chain)

        blocks = await scanner.run_cycle(5, recorder)

        assert blocks == []
        assert scanner.cursor.block_number == 500
        assert chain.count("block_at") == 0
        assert recorder.batches == []

    @pytest.mark.asyncio
    async def test_no_new_blocks(self, chain: FakeChain) -> None:
        """Test nothing is fetched when the head did not move."""
        chain.height = 500
        scanner = BlockScanner(chain, ScanCursor(500))

        await scanner.run_cycle(5, Recorder())

        assert chain.count("block_at") == 0
        assert scanner.cursor.block_number == 500

    @pytest.mark.asyncio
    async def test_fetches_up_to_limit(self, chain: FakeChain) -> None:
        """Test at most batch_limit blocks past the cursor are fetched."""
        chain.height = 510
        add_blocks(chain, *range(501, 511))
        recorder = Recorder()
        scanner = BlockScanner(chain, ScanCursor(500))

        await scanner.run_cycle(3, recorder)

        assert recorder.batches == [[501, 502, 503]]
        assert scanner.cursor.block_number == 503

    @pytest.mark.asyncio
    async def test_stops_at_missing_block(self, chain: FakeChain) -> None:
        """Test fetching stops early at a block the node cannot return."""
        chain.height = 503
        add_blocks(chain, 501, 502)
        recorder = Recorder()
        scanner = BlockScanner(chain, ScanCursor(500))

        await scanner.run_cycle(5, recorder)

        assert recorder.batches == [[501, 502]]
        assert scanner.cursor.block_number == 502
        assert chain.count("block_at") == 3

    @pytest.mark.asyncio
    async def test_nothing_fetched_keeps_cursor(self, chain: FakeChain) -> None:
        """Test the cursor stays when no block could be fetched."""
        chain.height = 501
        recorder = Recorder()
        scanner = BlockScanner(chain, ScanCursor(500))

        await scanner.run_cycle(1, recorder)

        assert recorder.batches == []
        assert scanner.cursor.block_number == 500

    @pytest.mark.asyncio
    async def test_height_failure_is_swallowed(self, chain: FakeChain) -> None:
        """Test a failing height query aborts the cycle quietly."""
        chain.failing_calls.add("current_height")
        scanner = BlockScanner(chain, ScanCursor(500))

        blocks = await scanner.run_cycle(1, Recorder())

        assert blocks == []
        assert scanner.cursor.block_number == 500
        assert not scanner.cursor.busy

    @pytest.mark.asyncio
    async def test_block_failure_keeps_cursor(self, chain: FakeChain) -> None:
        """Test a failing block fetch drops the whole batch."""
        chain.height = 505
        add_blocks(chain, 501, 502)
        chain.failing_calls.add("block_at")
        recorder = Recorder()
        scanner = BlockScanner(chain, ScanCursor(500))

        await scanner.run_cycle(3, recorder)

        assert recorder.batches == []
        assert scanner.cursor.block_number == 500
        assert not scanner.cursor.busy

    @pytest.mark.asyncio
    async def test_handler_failure_still_advances(
        self, chain: FakeChain, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Test a failing on_blocks is logged and the cursor moves on."""
        chain.height = 501
        add_blocks(chain, 501)
        scanner = BlockScanner(chain, ScanCursor(500))

        async def failing(blocks: list[Block]) -> None:
            msg = "sink down"
            raise RuntimeError(msg)

        blocks = await scanner.run_cycle(1, failing)

        assert [block.number for block in blocks] == [501]
        assert scanner.cursor.block_number == 501
        assert not scanner.cursor.busy
        assert any("Block handler failed" in r.message for r in caplog.records)

    @pytest.mark.asyncio
    async def test_sync_handler(self, chain: FakeChain) -> None:
        """Test a plain function can be used as on_blocks."""
        chain.height = 501
        add_blocks(chain, 501)
        seen: list[int] = []
        scanner = BlockScanner(chain, ScanCursor(500))

        await scanner.run_cycle(1, lambda blocks: seen.extend(b.number for b in blocks))

        assert seen == [501]

    @pytest.mark.asyncio
    async def test_cursor_is_monotonic_and_never_refetches(
        self, chain: FakeChain
    ) -> None:
        """Test successive cycles never fetch a block twice."""
        add_blocks(chain, *range(101, 111))
        recorder = Recorder()
        scanner = BlockScanner(chain)
        positions: list[int | None] = []

        for height in (100, 100, 102, 102, 104, 110, 110, 110):
            chain.height = height
            await scanner.run_cycle(2, recorder)
            positions.append(scanner.cursor.block_number)

        assert positions == sorted(positions)  # type: ignore[type-var]
        fetched = [arg for name, arg in chain.calls if name == "block_at"]
        assert len(fetched) == len(set(fetched))
        assert [n for batch in recorder.batches for n in batch] == list(range(101, 111))

    @pytest.mark.asyncio
    async def test_overlapping_cycle_is_skipped(self, chain: FakeChain) -> None:
        """Test a cycle started while another runs makes no chain calls."""
        chain.height = 501
        add_blocks(chain, 501)
        scanner = BlockScanner(chain, ScanCursor(500))
        entered = asyncio.Event()
        release = asyncio.Event()

        async def slow(blocks: list[Block]) -> None:
            entered.set()
            await release.wait()

        first = asyncio.create_task(scanner.run_cycle(1, slow))
        await asyncio.wait_for(entered.wait(), timeout=5)
        calls_before = len(chain.calls)

        skipped = await scanner.run_cycle(1, slow)

        assert skipped == []
        assert len(chain.calls) == calls_before
        assert scanner.ticks_skipped == 1
        assert scanner.cursor.busy

        release.set()
        await first
        assert scanner.cursor.block_number == 501
        assert not scanner.cursor.busy


class TestScanLoop:
    """Tests for start/stop of the scanning loop."""

    @pytest.mark.asyncio
    async def test_start_rejects_invalid_settings(self, chain: FakeChain) -> None:
        """Test interval and limit must be at least 1."""
        scanner = BlockScanner(chain)

        with pytest.raises(ValueError, match="interval_seconds"):
            scanner.start(0, 1, Recorder())
        with pytest.raises(ValueError, match="batch_limit"):
            scanner.start(1, 0, Recorder())
        assert not scanner.is_running

    @pytest.mark.asyncio
    async def test_ticks_until_stopped(self, chain: FakeChain) -> None:
        """Test the loop runs a cycle after each interval."""
        chain.height = 50
        scanner = BlockScanner(chain)

        scanner.start(1, 1, Recorder())
        assert scanner.is_running
        await asyncio.sleep(1.3)

        assert scanner.cursor.block_number == 50
        assert scanner.cycles_run == 1

        scanner.stop()
        await asyncio.wait_for(scanner.wait_closed(), timeout=5)
        assert not scanner.is_running

    @pytest.mark.asyncio
    async def test_stop_does_not_interrupt_cycle(self, chain: FakeChain) -> None:
        """Test a cycle in progress completes after stop()."""
        chain.height = 501
        add_blocks(chain, 501)
        scanner = BlockScanner(chain, ScanCursor(500))
        entered = asyncio.Event()
        release = asyncio.Event()

        async def slow(blocks: list[Block]) -> None:
            entered.set()
            await release.wait()

        scanner.start(1, 1, slow)
        await asyncio.wait_for(entered.wait(), timeout=5)

        scanner.stop()
        release.set()
        await asyncio.wait_for(scanner.wait_closed(), timeout=5)

        assert scanner.cursor.block_number == 501
        assert not scanner.is_running

    @pytest.mark.asyncio
    async def test_restart_replaces_loop(self, chain: FakeChain) -> None:
        """Test calling start again stops the previous loop."""
        scanner = BlockScanner(chain)
        scanner.start(60, 1, Recorder())
        first_loop = scanner._loop_task
        assert first_loop is not None

        scanner.start(60, 1, Recorder())

        await asyncio.wait_for(first_loop, timeout=5)
        assert first_loop.done()
        assert scanner.is_running

        scanner.stop()
        await asyncio.wait_for(scanner.wait_closed(), timeout=5)

    @pytest.mark.asyncio
    async def test_failed_cycle_is_logged(
        self, chain: FakeChain, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Test a cycle that raises is logged as soon as it finishes."""
        chain.height = 501
        chain.blocks[501] = Block(number=400, hash="0x" + "01" * 32)
        scanner = BlockScanner(chain, ScanCursor(500))

        scanner._tick(1, Recorder())
        (task,) = scanner._cycles
        await asyncio.wait_for(asyncio.gather(task, return_exceptions=True), timeout=5)
        await asyncio.sleep(0)

        assert task.exception() is not None
        assert any("Scan cycle failed" in r.message for r in caplog.records)
        assert not scanner._cycles
        assert not scanner.cursor.busy
        assert scanner.cursor.block_number == 500
