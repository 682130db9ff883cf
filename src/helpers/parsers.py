"""Parsing utilities for hex quantities and fixed-point amounts."""

from src.helpers.constants import UINT256_MAX
from src.helpers.errors import ConversionError


def parse_hex_int(hex_value: str | None, default: int = 0) -> int:
    """Parse hex string to integer.

    Args:
        hex_value: Hex-encoded string or None
        default: Default value if hex_value is None

    Returns:
        int: Parsed integer value

    Example:
        >>> parse_hex_int("0xff")
        255
        >>> parse_hex_int(None, 0)
        0
    """
    if hex_value is None:
        return default
    return int(hex_value, 16)


def parse_optional_hex_int(hex_value: str | None) -> int | None:
    """Parse hex string to integer, keeping None as None.

    Example:
        >>> parse_optional_hex_int("0x10")
        16
        >>> parse_optional_hex_int(None) is None
        True
    """
    if hex_value is None:
        return None
    return int(hex_value, 16)


def to_hex_quantity(value: int) -> str:
    """Encode a non-negative integer as a JSON-RPC quantity.

    Example:
        >>> to_hex_quantity(4660)
        '0x1234'
    """
    if value < 0:
        msg = f"Quantity cannot be negative: {value}"
        raise ValueError(msg)
    return hex(value)


def decode_int256(hex_word: str) -> int:
    """Decode an ABI-encoded int256 return value (two's complement).

    Args:
        hex_word: 0x-prefixed hex string holding a single 32-byte word

    Returns:
        int: Signed integer value

    Raises:
        ConversionError: If the data is empty or not a single 32-byte word

    Example:
        >>> decode_int256("0x" + "00" * 31 + "2a")
        42
        >>> decode_int256("0x" + "ff" * 32)
        -1
    """
    data = hex_word.removeprefix("0x")
    if len(data) != 64:
        msg = f"Expected a 32-byte word, got {len(data) // 2} bytes"
        raise ConversionError(msg)

    try:
        value = int(data, 16)
    except ValueError as e:
        msg = f"Invalid hex word: {hex_word}"
        raise ConversionError(msg) from e

    if value >= 2**255:
        value -= 2**256
    return value


def format_units(value: int, decimals: int) -> str:
    """Format an unsigned fixed-point integer as a decimal string.

    The integer is never converted to a float: integer and fractional parts
    are split with divmod and the fraction is zero-padded to `decimals` digits.

    Args:
        value: Unsigned 256-bit integer amount in base units
        decimals: Number of decimals of the unit

    Returns:
        str: Decimal string with exactly `decimals` fractional digits

    Raises:
        ConversionError: If value does not fit in an unsigned 256-bit integer
            or decimals is out of range

    Example:
        >>> format_units(20_000_000_000, 9)
        '20.000000000'
        >>> format_units(20_000_000_000, 0)
        '20000000000'
    """
    if not 0 <= decimals <= 77:
        msg = f"Invalid number of decimals: {decimals}"
        raise ConversionError(msg)
    if not 0 <= value <= UINT256_MAX:
        msg = f"Value does not fit in uint256: {value}"
        raise ConversionError(msg)

    if decimals == 0:
        return str(value)

    integer, fraction = divmod(value, 10**decimals)
    return f"{integer}.{fraction:0{decimals}d}"


def parse_float(text: str) -> float:
    """Parse a decimal string into a float.

    Raises:
        ConversionError: If the string is not a valid number

    Example:
        >>> parse_float("200.00000000")
        200.0
    """
    try:
        return float(text)
    except ValueError as e:
        msg = f"Cannot parse {text!r} as a float"
        raise ConversionError(msg) from e


def format_units_float(value: int, decimals: int) -> float:
    """Format with format_units then parse the result as a float.

    Example:
        >>> format_units_float(1_500_000_000, 9)
        1.5
    """
    return parse_float(format_units(value, decimals))


__all__ = [
    "decode_int256",
    "format_units",
    "format_units_float",
    "parse_float",
    "parse_hex_int",
    "parse_optional_hex_int",
    "to_hex_quantity",
]
