"""Bounded-width numeric token parsing.

Every numeric field of a database line goes through :func:`parse_number`,
which takes an explicit :class:`NumericKind` instead of inferring the
result type. Integer kinds are range-checked against their bit width and
may be read as decimal or hexadecimal.
"""

from __future__ import annotations

import math
import re
import struct
from enum import Enum
from typing import Optional, Union

from dbc_decode.errors import ParseError


Number = Union[int, float]

_DECIMAL_INT = re.compile(r"^[+-]?[0-9]+$")
_HEX_INT = re.compile(r"^(?:0[xX])?[0-9a-fA-F]+$")
_DECIMAL_FLOAT = re.compile(r"^[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?$")
_WHITESPACE = re.compile(r"\s+")


class NumericKind(Enum):
    """Numeric result kinds with their bit width and signedness."""

    INT8 = ("int", 8, True)
    UINT8 = ("int", 8, False)
    INT16 = ("int", 16, True)
    UINT16 = ("int", 16, False)
    INT32 = ("int", 32, True)
    UINT32 = ("int", 32, False)
    INT64 = ("int", 64, True)
    UINT64 = ("int", 64, False)
    FLOAT32 = ("float", 32, True)
    FLOAT64 = ("float", 64, True)

    @property
    def is_integer(self) -> bool:
        return self.value[0] == "int"

    @property
    def bits(self) -> int:
        return self.value[1]

    @property
    def signed(self) -> bool:
        return self.value[2]

    @property
    def min_value(self) -> int:
        """Smallest value representable by an integer kind."""
        return -(1 << (self.bits - 1)) if self.signed else 0

    @property
    def max_value(self) -> int:
        """Largest value representable by an integer kind."""
        return (1 << (self.bits - 1)) - 1 if self.signed else (1 << self.bits) - 1


def parse_number(token: Optional[str], kind: NumericKind, hex: bool = False) -> Number:
    """Parse a numeric token as the given kind.

    Args:
        token: Text to parse. Surrounding whitespace is ignored.
        kind: Target numeric kind.
        hex: Read integer kinds as hexadecimal digits.

    Returns:
        An int for integer kinds, a float for float kinds.

    Raises:
        ParseError: If the token is empty, malformed or out of range for kind.
    """
    if token is None or not token.strip():
        raise ParseError(token or "", "Empty string")

    text = token.strip()

    if kind.is_integer:
        return _parse_integer(text, kind, hex)

    if hex:
        raise ParseError(text, f"Unsupported hex format for {kind.name}")

    return _parse_float(text, kind)


def try_parse_number(token: Optional[str], kind: NumericKind, hex: bool = False) -> Optional[Number]:
    """Like :func:`parse_number` but returns None instead of raising."""
    try:
        return parse_number(token, kind, hex)
    except ParseError:
        return None


def _parse_integer(text: str, kind: NumericKind, hex: bool) -> int:
    if hex:
        if not _HEX_INT.match(text):
            raise ParseError(text, "Invalid number format")
        value = int(text, 16)
        if value >> kind.bits:
            raise ParseError(text, f"Value out of range for {kind.name}")
        # Hex digits are a bit pattern; signed kinds read it as two's complement
        if kind.signed and value & (1 << (kind.bits - 1)):
            value -= 1 << kind.bits
        return value

    if not _DECIMAL_INT.match(text):
        raise ParseError(text, "Invalid number format")

    value = int(text, 10)
    if not (kind.min_value <= value <= kind.max_value):
        raise ParseError(text, f"Value out of range for {kind.name}")
    return value


def _parse_float(text: str, kind: NumericKind) -> float:
    if not _DECIMAL_FLOAT.match(text):
        raise ParseError(text, "Invalid number format")

    value = float(text)
    if math.isinf(value):
        raise ParseError(text, f"Value out of range for {kind.name}")

    if kind is NumericKind.FLOAT32:
        try:
            value = struct.unpack("<f", struct.pack("<f", value))[0]
        except OverflowError:
            raise ParseError(text, f"Value out of range for {kind.name}") from None

    return value


def hex_to_bytes(text: Optional[str]) -> bytes:
    """Convert a hex string such as ``"20 4E 64 00"`` to bytes.

    Whitespace is ignored, as are a surrounding pair of double quotes and a
    leading ``0x``. An odd number of digits is padded with a leading zero.
    """
    if not text:
        return b""

    digits = _WHITESPACE.sub("", text)
    if len(digits) >= 2 and digits[0] == '"' and digits[-1] == '"':
        digits = digits[1:-1]
    if digits[:2] in ("0x", "0X"):
        digits = digits[2:]

    if not digits:
        return b""

    for ch in digits:
        if ch not in "0123456789abcdefABCDEF":
            raise ParseError(ch, "Invalid number format")

    if len(digits) % 2:
        digits = "0" + digits

    return bytes.fromhex(digits)
