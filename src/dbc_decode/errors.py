"""Exception types raised by dbc_decode."""

from __future__ import annotations


class DBCDecodeError(Exception):
    """Base class for all dbc_decode errors."""


class ParseError(DBCDecodeError, ValueError):
    """A numeric or structural token could not be parsed."""

    def __init__(self, token: str, reason: str) -> None:
        self.token = token
        self.reason = reason
        super().__init__(f"{reason}: {token!r}")


class MessageNotFound(DBCDecodeError, KeyError):
    """No message definition is registered for an arbitration ID."""

    def __init__(self, arbitration_id: int) -> None:
        self.arbitration_id = arbitration_id
        super().__init__(arbitration_id)

    def __str__(self) -> str:
        return (
            f"Message ID {self.arbitration_id} "
            f"(0x{self.arbitration_id:X}) not found in DBC"
        )


class IncompleteDefinition(ParseError):
    """A definition line is missing a field or its name terminator."""
