"""Message registry keyed by arbitration ID."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Literal, Optional, TextIO, Union

from dbc_decode.decoder import Payload
from dbc_decode.definitions import MessageDefinition
from dbc_decode.errors import MessageNotFound
from dbc_decode.parser import DBCParser, LoadSummary


logger = logging.getLogger(__name__)

Source = Union[str, TextIO, Iterable[str]]


@dataclass
class DatabaseConfig:
    """Configuration for loading database text."""

    encoding: str = "cp1252"
    hex_ids: bool = False


@dataclass
class DecodedSignal:
    """A decoded signal with its raw bits and physical value."""

    name: str
    raw_value: Optional[int]
    physical_value: float
    unit: str
    quality: Literal["OK", "DECODE_ERROR"] = "OK"

    def __repr__(self) -> str:
        if self.quality != "OK":
            return f"{self.name}=<{self.quality}>"
        return f"{self.name}={self.physical_value:.3f}{self.unit}"


@dataclass
class DecodedMessage:
    """All signals of one decoded message."""

    arbitration_id: int
    name: str
    signals: dict[str, DecodedSignal] = field(default_factory=dict)
    raw_data: bytes = field(default_factory=bytes)

    def get(self, signal_name: str) -> Optional[DecodedSignal]:
        """Get a signal by name."""
        return self.signals.get(signal_name)

    def values(self) -> dict[str, float]:
        """Physical values by signal name."""
        return {name: sig.physical_value for name, sig in self.signals.items()}

    def __repr__(self) -> str:
        sig_str = ", ".join(repr(s) for s in self.signals.values())
        return f"{self.name}[{self.arbitration_id:#x}]: {sig_str}"


class Database:
    """Registry of message definitions that decodes payloads by ID.

    Definitions accumulate over repeated :meth:`load` calls; a message
    whose ID is already registered replaces the earlier definition.

    The registry is not synchronized. Loading while another thread loads
    or decodes on the same instance needs external locking.
    """

    def __init__(self, config: Optional[DatabaseConfig] = None) -> None:
        self._config = config or DatabaseConfig()
        self._messages: dict[int, MessageDefinition] = {}

    @property
    def config(self) -> DatabaseConfig:
        return self._config

    @property
    def messages(self) -> list[MessageDefinition]:
        """Registered messages ordered by arbitration ID."""
        return [self._messages[arb_id] for arb_id in sorted(self._messages)]

    @property
    def message_ids(self) -> set[int]:
        """Set of registered arbitration IDs."""
        return set(self._messages.keys())

    def __len__(self) -> int:
        return len(self._messages)

    def __contains__(self, arbitration_id: object) -> bool:
        return arbitration_id in self._messages

    def add_message(self, message: MessageDefinition) -> None:
        """Register a message, replacing any with the same ID."""
        self._messages[message.arbitration_id] = message

    def get_message(self, arbitration_id: int) -> Optional[MessageDefinition]:
        """Get the message for an arbitration ID."""
        return self._messages.get(arbitration_id)

    def get_message_by_name(self, name: str) -> Optional[MessageDefinition]:
        """Get a message by name."""
        for message in self._messages.values():
            if message.name == name:
                return message
        return None

    def clear(self) -> None:
        """Remove all registered messages."""
        self._messages.clear()

    def load(self, source: Source) -> LoadSummary:
        """Parse database text and register its messages.

        Args:
            source: The full text, an open text stream, or an iterable of lines.

        Returns:
            Counts of loaded messages and signals, plus any skipped lines.
        """
        lines = source.splitlines() if isinstance(source, str) else source

        parser = DBCParser(hex_ids=self._config.hex_ids)
        summary = parser.parse(lines, self._messages)

        logger.info(
            "Loaded %d messages, %d signals (%d lines skipped)",
            summary.messages,
            summary.signals,
            len(summary.diagnostics),
        )
        return summary

    def load_file(self, path: Union[str, Path]) -> LoadSummary:
        """Load a database file using the configured encoding.

        Raises:
            FileNotFoundError: If the file does not exist.
        """
        path = Path(path)
        logger.info("Loading %s", path)

        with path.open("r", encoding=self._config.encoding, errors="replace") as f:
            return self.load(f)

    def _lookup(self, arbitration_id: int) -> MessageDefinition:
        message = self._messages.get(arbitration_id)
        if message is None:
            raise MessageNotFound(arbitration_id)
        return message

    def decode_message(self, arbitration_id: int, data: Payload) -> dict[str, float]:
        """Decode a payload into physical values by signal name.

        Signals that cannot be read from the payload report ``0.0``.

        Raises:
            MessageNotFound: If no message is registered for the ID.
        """
        return self._lookup(arbitration_id).decode(data)

    def decode_message_detailed(self, arbitration_id: int, data: Payload) -> DecodedMessage:
        """Decode a payload keeping raw values and per-signal quality.

        Raises:
            MessageNotFound: If no message is registered for the ID.
        """
        message = self._lookup(arbitration_id)
        raw_data = bytes(data) if data is not None else b""

        signals: dict[str, DecodedSignal] = {}
        for signal, extraction, physical in message.decode_detailed(raw_data):
            signals[signal.name] = DecodedSignal(
                name=signal.name,
                raw_value=extraction.raw,
                physical_value=physical,
                unit=signal.unit,
                quality="OK" if extraction.ok else "DECODE_ERROR",
            )

        return DecodedMessage(
            arbitration_id=message.arbitration_id,
            name=message.name,
            signals=signals,
            raw_data=raw_data,
        )
