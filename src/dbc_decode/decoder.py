"""Bit-level signal decoding.

Converts a payload into the physical value of a single signal. Two bit
layouts are supported:

Little-endian (Intel)
    ``start_bit`` is the least significant bit of the field, counted from
    bit 0 of byte 0 upward. The field continues into the following bytes at
    increasing significance.

Big-endian (Motorola)
    ``start_bit`` is the most significant bit of the field, using the DBC
    numbering where bit 7 is the MSB of byte 0, bit 0 its LSB and bit 15 the
    MSB of byte 1. From there the field runs toward the LSB of the same byte
    and continues at bit 7 of the next byte ("sawtooth" order). Renumbering
    each byte MSB-first turns this into a contiguous run of
    ``bit_length`` positions, which is how it is walked here.

Fields wider than 64 bits count as a bad layout, since raw values are
resolved as 64-bit integers. Decoding never raises for a bad signal layout
or a short payload. Those
cases produce a :class:`RawExtraction` with a non-OK status, and
:func:`decode_signal` reports them as ``0.0``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Optional, Sequence, Union

if TYPE_CHECKING:
    from dbc_decode.definitions import SignalDefinition


Payload = Union[bytes, bytearray, memoryview, Sequence[int]]

SENTINEL_VALUE = 0.0

# Raw values are sign-extended into 64 bits
MAX_BIT_LENGTH = 64


class DecodeStatus(Enum):
    """Outcome of extracting a signal's raw bits."""

    OK = "ok"
    INVALID_GEOMETRY = "invalid_geometry"
    INSUFFICIENT_DATA = "insufficient_data"


@dataclass(frozen=True)
class RawExtraction:
    """Raw bits of a signal, or the reason they could not be read.

    Attributes:
        status: Whether extraction succeeded.
        raw: Unsigned field value, exactly ``bit_length`` bits wide.
        value: ``raw`` after two's-complement resolution for signed signals.
    """

    status: DecodeStatus
    raw: Optional[int] = None
    value: Optional[int] = None

    @property
    def ok(self) -> bool:
        return self.status is DecodeStatus.OK


def motorola_position(start_bit: int) -> int:
    """Map a DBC big-endian bit number to its MSB-first linear position."""
    return (start_bit // 8) * 8 + 7 - (start_bit % 8)


def has_valid_geometry(signal: SignalDefinition) -> bool:
    """True if the start bit is non-negative and the width is 1 to 64 bits."""
    return signal.start_bit >= 0 and 0 < signal.bit_length <= MAX_BIT_LENGTH


def required_length(signal: SignalDefinition) -> int:
    """Number of payload bytes needed to hold every bit of the signal."""
    if not has_valid_geometry(signal):
        return 0

    if signal.is_little_endian:
        last_bit = signal.start_bit + signal.bit_length - 1
        return last_bit // 8 + 1

    last_position = motorola_position(signal.start_bit) + signal.bit_length - 1
    return last_position // 8 + 1


def to_signed(raw: int, bit_length: int) -> int:
    """Interpret ``raw`` as a two's-complement number of ``bit_length`` bits."""
    if raw & (1 << (bit_length - 1)):
        return raw - (1 << bit_length)
    return raw


def _extract_little_endian(data: bytes, start_bit: int, bit_length: int) -> int:
    byte_index = start_bit // 8
    shift = start_bit % 8

    first_bits = min(8 - shift, bit_length)
    raw = (data[byte_index] >> shift) & ((1 << first_bits) - 1)
    consumed = first_bits

    # Whole bytes, then a partial last byte contributing its low bits
    while consumed < bit_length:
        byte_index += 1
        take = min(8, bit_length - consumed)
        raw |= (data[byte_index] & ((1 << take) - 1)) << consumed
        consumed += take

    return raw


def _extract_big_endian(data: bytes, start_bit: int, bit_length: int) -> int:
    first = motorola_position(start_bit)
    raw = 0

    for position in range(first, first + bit_length):
        bit = (data[position // 8] >> (7 - position % 8)) & 1
        raw = (raw << 1) | bit

    return raw


def extract_raw(signal: SignalDefinition, payload: Optional[Payload]) -> RawExtraction:
    """Extract the raw and sign-resolved integer value of a signal.

    Args:
        signal: Signal layout to read.
        payload: Frame data. ``None`` is treated as empty.

    Returns:
        A RawExtraction whose status tells a genuine value apart from a
        signal that could not be read.
    """
    if not has_valid_geometry(signal):
        return RawExtraction(DecodeStatus.INVALID_GEOMETRY)

    data = bytes(payload) if payload is not None else b""

    if not data or required_length(signal) > len(data):
        return RawExtraction(DecodeStatus.INSUFFICIENT_DATA)

    if signal.is_little_endian:
        raw = _extract_little_endian(data, signal.start_bit, signal.bit_length)
    else:
        raw = _extract_big_endian(data, signal.start_bit, signal.bit_length)

    value = to_signed(raw, signal.bit_length) if signal.is_signed else raw

    return RawExtraction(DecodeStatus.OK, raw=raw, value=value)


def scale(value: int, factor: float, offset: float) -> float:
    """Apply linear scaling in double precision."""
    return float(value) * factor + offset


def decode_signal_value(signal: SignalDefinition, payload: Optional[Payload]) -> Optional[float]:
    """Decode a signal's physical value, or None if it cannot be read."""
    extraction = extract_raw(signal, payload)
    if not extraction.ok:
        return None
    return scale(extraction.value, signal.factor, signal.offset)


def decode_signal(signal: SignalDefinition, payload: Optional[Payload]) -> float:
    """Decode a signal's physical value.

    Returns ``0.0`` when the signal layout is invalid or the payload is too
    short. Use :func:`decode_signal_value` to tell those cases apart from a
    genuine zero.
    """
    value = decode_signal_value(signal, payload)
    if value is None:
        return SENTINEL_VALUE
    return value
