"""Tests for parsing helpers."""

from decimal import Decimal, localcontext

from balance_events.helpers.parsers import (
    AMOUNT_CONTEXT,
    is_empty_hex,
    parse_hex_int,
    scale_amount,
    to_block_param,
    wei_to_eth,
)


class TestParseHexInt:
    """Tests for parse_hex_int."""

    def test_hex_string(self) -> None:
        """Test parsing a hex quantity."""
        assert parse_hex_int("0xff") == 255

    def test_none_and_empty_use_default(self) -> None:
        """Test None and empty payloads fall back to the default."""
        assert parse_hex_int(None) == 0
        assert parse_hex_int("0x", default=7) == 7
        assert parse_hex_int("", default=3) == 3

    def test_int_passthrough(self) -> None:
        """Test already decoded ints are returned unchanged."""
        assert parse_hex_int(42) == 42


class TestToBlockParam:
    """Tests for to_block_param."""

    def test_number(self) -> None:
        """Test block numbers become hex quantities."""
        assert to_block_param(4660) == "0x1234"

    def test_tag(self) -> None:
        """Test tags are passed through."""
        assert to_block_param("latest") == "latest"


class TestScaleAmount:
    """Tests for scale_amount and wei_to_eth."""

    def test_six_decimals(self) -> None:
        """Test a 6-decimal token amount."""
        assert scale_amount(100_000_000, 6) == Decimal(100)

    def test_no_float_rounding(self) -> None:
        """Test 18-decimal amounts keep every digit."""
        assert scale_amount(1_000_000_000_000_000_001, 18) == Decimal(
            "1.000000000000000001"
        )

    def test_zero_decimals(self) -> None:
        """Test tokens without decimals."""
        assert scale_amount(5, 0) == Decimal(5)

    def test_wei_to_eth(self) -> None:
        """Test wei conversion."""
        assert wei_to_eth(10**18) == Decimal(1)
        assert wei_to_eth(10**15) == Decimal("0.001")
        assert wei_to_eth(None) is None


def test_is_empty_hex() -> None:
    """Test detection of empty call results."""
    assert is_empty_hex(None)
    assert is_empty_hex("")
    assert is_empty_hex("0x")
    assert not is_empty_hex("0x00")


class TestAmountPrecision:
    """Tests for amounts wider than the default decimal precision."""

    def test_scale_keeps_33_digits(self) -> None:
        """Test a 33-digit raw balance is scaled exactly."""
        raw = 123_456_789_012_345_678_901_234_567_890_123

        assert scale_amount(raw, 18) == Decimal("123456789012345.678901234567890123")

    def test_scale_max_uint256(self) -> None:
        """Test the largest uint256 survives scaling."""
        raw = 2**256 - 1

        assert scale_amount(raw, 18).scaleb(18, context=AMOUNT_CONTEXT) == raw

    def test_addition_under_amount_context(self) -> None:
        """Test pre/post arithmetic stays exact under AMOUNT_CONTEXT."""
        post = scale_amount(123_456_789_012_345_678_901_234_567_890_123, 18)
        amount = scale_amount(1, 18)

        with localcontext(AMOUNT_CONTEXT):
            assert (post + amount) - post == amount
