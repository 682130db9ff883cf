"""Tests for hex and fixed-point parsing utilities."""

import pytest

from src.helpers.constants import UINT256_MAX
from src.helpers.errors import ConversionError
from src.helpers.parsers import (
    decode_int256,
    format_units,
    format_units_float,
    parse_float,
    parse_hex_int,
    parse_optional_hex_int,
    to_hex_quantity,
)


class TestParseHexInt:
    """Tests for parse_hex_int function."""

    def test_parses_hex(self) -> None:
        """Test parsing a hex quantity."""
        assert parse_hex_int("0xff") == 255
        assert parse_hex_int("0x0") == 0

    def test_none_returns_default(self) -> None:
        """Test that None returns the default value."""
        assert parse_hex_int(None) == 0
        assert parse_hex_int(None, 42) == 42

    def test_invalid_hex_raises(self) -> None:
        """Test that a non-hex string raises ValueError."""
        with pytest.raises(ValueError):
            parse_hex_int("0xzz")

    def test_optional_keeps_none(self) -> None:
        """Test that parse_optional_hex_int keeps None."""
        assert parse_optional_hex_int(None) is None
        assert parse_optional_hex_int("0x10") == 16


class TestToHexQuantity:
    """Tests for to_hex_quantity function."""

    def test_encodes_quantity(self) -> None:
        """Test encoding of non-negative integers."""
        assert to_hex_quantity(0) == "0x0"
        assert to_hex_quantity(16_976_395) == "0x1030a0b"

    def test_negative_raises(self) -> None:
        """Test that a negative quantity raises ValueError."""
        with pytest.raises(ValueError, match="cannot be negative"):
            to_hex_quantity(-1)


class TestDecodeInt256:
    """Tests for decode_int256 function."""

    def test_positive_value(self) -> None:
        """Test decoding a positive oracle answer."""
        word = "0x" + f"{200_000_000_00:064x}"
        assert decode_int256(word) == 200_000_000_00

    def test_negative_value(self) -> None:
        """Test that the top bit is read as the sign."""
        assert decode_int256("0x" + "ff" * 32) == -1
        assert decode_int256("0x8" + "0" * 63) == -(2**255)

    def test_largest_positive_value(self) -> None:
        """Test that 2**255 - 1 stays positive."""
        assert decode_int256("0x7" + "f" * 63) == 2**255 - 1

    def test_without_prefix(self) -> None:
        """Test that the 0x prefix is optional."""
        assert decode_int256("00" * 31 + "2a") == 42

    @pytest.mark.parametrize("data", ["0x", "", "0x" + "00" * 31, "0x" + "00" * 64])
    def test_wrong_length_raises(self, data: str) -> None:
        """Test that anything but a single 32-byte word raises ConversionError."""
        with pytest.raises(ConversionError, match="32-byte word"):
            decode_int256(data)

    def test_invalid_hex_raises(self) -> None:
        """Test that non-hex characters raise ConversionError."""
        with pytest.raises(ConversionError, match="Invalid hex word"):
            decode_int256("0x" + "zz" * 32)


class TestFormatUnits:
    """Tests for format_units function."""

    @pytest.mark.parametrize(
        ("value", "decimals", "expected"),
        [
            (20_000_000_000, 9, "20.000000000"),
            (1, 18, "0.000000000000000001"),
            (10**18, 18, "1.000000000000000000"),
            (200_000_000_00, 8, "200.00000000"),
            (0, 8, "0.00000000"),
            (1234, 0, "1234"),
        ],
    )
    def test_formats_value(self, value: int, decimals: int, expected: str) -> None:
        """Test that the fraction is zero-padded to the number of decimals."""
        assert format_units(value, decimals) == expected

    def test_uint256_max_is_exact(self) -> None:
        """Test that the largest uint256 keeps every digit."""
        text = format_units(UINT256_MAX, 18)
        integer, fraction = text.split(".")

        assert int(integer + fraction) == UINT256_MAX

    @pytest.mark.parametrize("value", [-1, UINT256_MAX + 1])
    def test_value_out_of_range_raises(self, value: int) -> None:
        """Test that values outside uint256 raise ConversionError."""
        with pytest.raises(ConversionError, match="uint256"):
            format_units(value, 18)

    @pytest.mark.parametrize("decimals", [-1, 78])
    def test_invalid_decimals_raises(self, decimals: int) -> None:
        """Test that an invalid number of decimals raises ConversionError."""
        with pytest.raises(ConversionError, match="decimals"):
            format_units(1, decimals)


class TestParseFloat:
    """Tests for parse_float and format_units_float functions."""

    def test_parses_decimal_string(self) -> None:
        """Test parsing a formatted amount."""
        assert parse_float("200.00000000") == 200.0

    def test_invalid_string_raises(self) -> None:
        """Test that an invalid number raises ConversionError."""
        with pytest.raises(ConversionError, match="Cannot parse"):
            parse_float("not a number")

    def test_format_units_float(self) -> None:
        """Test formatting then parsing an amount."""
        assert format_units_float(1_500_000_000, 9) == 1.5
        assert format_units_float(20 * 10**9, 9) == 20.0
