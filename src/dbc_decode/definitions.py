"""Message and signal definitions."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from dbc_decode.decoder import (
    SENTINEL_VALUE,
    Payload,
    RawExtraction,
    decode_signal,
    extract_raw,
    scale,
)


class ByteOrder(Enum):
    """Bit layout convention of a signal."""

    LITTLE_ENDIAN = "little_endian"
    BIG_ENDIAN = "big_endian"

    @classmethod
    def from_digit(cls, digit: str) -> "ByteOrder":
        """Map the DBC order digit (``1`` Intel, ``0`` Motorola)."""
        if digit == "1":
            return cls.LITTLE_ENDIAN
        if digit == "0":
            return cls.BIG_ENDIAN
        raise ValueError(f"Unknown byte order digit: {digit!r}")


class Signedness(Enum):
    """Whether raw signal bits are two's complement."""

    UNSIGNED = "unsigned"
    SIGNED = "signed"


@dataclass
class SignalDefinition:
    """Layout and scaling of a single signal within a CAN message.

    The meaning of ``start_bit`` depends on ``byte_order``; see
    :mod:`dbc_decode.decoder`. ``minimum``, ``maximum``, ``unit`` and
    ``receiver`` are informational and never affect decoding.
    """

    name: str
    start_bit: int = 0
    bit_length: int = 0
    byte_order: ByteOrder = ByteOrder.LITTLE_ENDIAN
    signedness: Signedness = Signedness.UNSIGNED
    factor: float = 1.0
    offset: float = 0.0
    minimum: float = 0.0
    maximum: float = 0.0
    unit: str = ""
    receiver: str = ""

    @property
    def is_signed(self) -> bool:
        return self.signedness is Signedness.SIGNED

    @property
    def is_little_endian(self) -> bool:
        return self.byte_order is ByteOrder.LITTLE_ENDIAN

    def decode(self, data: Optional[Payload]) -> float:
        """Decode the signal's physical value from raw bytes."""
        return decode_signal(self, data)


@dataclass
class MessageDefinition:
    """A CAN message: arbitration ID, metadata and its signals in order.

    ``dlc`` is the declared payload length and is not checked against the
    data passed to :meth:`decode`.
    """

    arbitration_id: int
    name: str
    dlc: int = 0
    transmitter: str = ""
    signals: list[SignalDefinition] = field(default_factory=list)

    def add_signal(self, signal: SignalDefinition) -> None:
        """Append a signal to the message."""
        self.signals.append(signal)

    def get_signal(self, name: str) -> Optional[SignalDefinition]:
        """Get a signal by name; the last definition wins on duplicates."""
        found = None
        for signal in self.signals:
            if signal.name == name:
                found = signal
        return found

    def decode(self, data: Optional[Payload]) -> dict[str, float]:
        """Decode every signal into a name to physical value mapping."""
        values: dict[str, float] = {}
        for signal in self.signals:
            values[signal.name] = signal.decode(data)
        return values

    def decode_detailed(
        self,
        data: Optional[Payload],
    ) -> list[tuple[SignalDefinition, RawExtraction, float]]:
        """Decode every signal, keeping the raw extraction alongside.

        Failed extractions carry the ``0.0`` physical value reported by
        :meth:`decode`.
        """
        results = []
        for signal in self.signals:
            extraction = extract_raw(signal, data)
            if extraction.ok:
                physical = scale(extraction.value, signal.factor, signal.offset)
            else:
                physical = SENTINEL_VALUE
            results.append((signal, extraction, physical))
        return results
