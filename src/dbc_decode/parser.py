"""Line-oriented parser for the message and signal subset of DBC files.

Only two kinds of lines are understood::

    BO_ <id> <name>: <dlc> [<transmitter>]
     SG_ <name> : <start>|<length>@<order><sign> [(<factor>,<offset>)] [[<min>|<max>]] ["<unit>"] [<receivers>]

Everything else (VERSION, NS_, BU_, CM_, BA_, VAL_, ...) is skipped. A
signal line belongs to the most recent message line that parsed
successfully. A message line with a bad numeric field leaves no active
message, so its signals are dropped instead of landing on an unrelated
message. A message line that is merely incomplete is skipped without
changing the active message.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Iterable, MutableMapping, Optional

from dbc_decode.definitions import ByteOrder, MessageDefinition, SignalDefinition, Signedness
from dbc_decode.errors import IncompleteDefinition, ParseError
from dbc_decode.numeric import NumericKind, parse_number
from dbc_decode.text import trim, trim_and_split


logger = logging.getLogger(__name__)

MESSAGE_KEYWORD = "BO_"
SIGNAL_KEYWORD = "SG_"

# Lines that mention SG_ without defining a signal
_SIGNAL_REFERENCE_KEYWORDS = frozenset({
    "CM_",
    "BA_",
    "BA_REL_",
    "VAL_",
    "SIG_VALTYPE_",
    "SIG_GROUP_",
    "SG_MUL_VAL_",
})

_SIGNAL_KEYWORD_RE = re.compile(r"(?:^|\s)SG_(?=\s|$)")

_SIGNAL_TAIL_RE = re.compile(
    r"""^\s*
    (?:\((?P<scaling>[^)]*)\))?\s*
    (?:\[(?P<range>[^\]]*)\])?\s*
    (?:"(?P<unit>[^"]*)")?\s*
    (?P<receiver>.*?)\s*$""",
    re.VERBOSE,
)


@dataclass(frozen=True)
class ParseDiagnostic:
    """A line that was skipped while loading."""

    line_number: int
    line: str
    reason: str

    def __str__(self) -> str:
        return f"line {self.line_number}: {self.reason} ({self.line})"


@dataclass
class LoadSummary:
    """Counts and diagnostics from one load pass."""

    messages: int = 0
    signals: int = 0
    diagnostics: list[ParseDiagnostic] = field(default_factory=list)

    @property
    def has_diagnostics(self) -> bool:
        return bool(self.diagnostics)


def is_message_line(line: str) -> bool:
    """True if the line defines a message (first token is ``BO_``)."""
    tokens = trim_and_split(line)
    return bool(tokens) and tokens[0] == MESSAGE_KEYWORD


def is_signal_line(line: str) -> bool:
    """True if the line carries a ``SG_`` token and is not a reference to one."""
    tokens = trim_and_split(line)
    if SIGNAL_KEYWORD not in tokens:
        return False
    return tokens[0] not in _SIGNAL_REFERENCE_KEYWORDS


def parse_message_line(line: str, hex_ids: bool = False) -> MessageDefinition:
    """Build a message definition from a ``BO_`` line.

    Args:
        line: The raw line.
        hex_ids: Read the arbitration ID as hexadecimal digits.

    Raises:
        IncompleteDefinition: If the line is too short or has no name.
        ParseError: If a numeric field does not parse.
    """
    tokens = trim_and_split(line)
    if len(tokens) < 4 or tokens[0] != MESSAGE_KEYWORD:
        raise IncompleteDefinition(trim(line), "Incomplete message definition")

    arbitration_id = parse_number(tokens[1], NumericKind.UINT32, hex=hex_ids)

    name_token = tokens[2]
    index = 3
    colon = name_token.find(":")
    if colon == -1:
        # "Name : dlc" with a free-standing colon
        if tokens[3] != ":" or len(tokens) < 5:
            raise IncompleteDefinition(name_token, "Missing ':' after message name")
        name = name_token
        index = 4
    else:
        name = name_token[:colon]

    if not name:
        raise IncompleteDefinition(name_token, "Empty message name")

    dlc = parse_number(tokens[index], NumericKind.UINT8)
    transmitter = tokens[index + 1] if len(tokens) > index + 1 else ""

    return MessageDefinition(
        arbitration_id=arbitration_id,
        name=name,
        dlc=dlc,
        transmitter=transmitter,
    )


def parse_bit_descriptor(token: str) -> tuple[int, int, ByteOrder, Signedness]:
    """Parse ``<start>|<length>@<order><sign>``.

    Any ``-`` in the token marks the signal as signed.
    """
    pipe = token.find("|")
    at = token.find("@")
    if pipe == -1 or at == -1 or at < pipe:
        raise ParseError(token, "Malformed bit descriptor")

    start_bit = parse_number(token[:pipe], NumericKind.INT32)
    bit_length = parse_number(token[pipe + 1:at], NumericKind.INT32)

    try:
        byte_order = ByteOrder.from_digit(token[at + 1:at + 2])
    except ValueError:
        raise ParseError(token, "Unknown byte order") from None

    signedness = Signedness.SIGNED if "-" in token else Signedness.UNSIGNED

    return start_bit, bit_length, byte_order, signedness


def _parse_pair(text: Optional[str], delimiter: str) -> Optional[tuple[float, float]]:
    parts = trim_and_split(text, delimiter)
    if len(parts) != 2:
        return None
    try:
        return (
            parse_number(parts[0], NumericKind.FLOAT64),
            parse_number(parts[1], NumericKind.FLOAT64),
        )
    except ParseError:
        return None


def parse_signal_line(line: str) -> SignalDefinition:
    """Build a signal definition from a ``SG_`` line.

    The scaling pair, value range, unit and receivers are optional. A
    malformed scaling or range keeps the defaults rather than failing.

    Raises:
        ParseError: If the name, colon or bit descriptor is missing or the
            bit descriptor does not parse.
    """
    match = _SIGNAL_KEYWORD_RE.search(line)
    if match is None:
        raise ParseError(trim(line), "Missing SG_ keyword")

    body = line[match.end():]
    tokens = trim_and_split(body)

    if not tokens:
        raise ParseError(trim(line), "Incomplete signal definition")

    if tokens[0].endswith(":") and len(tokens[0]) > 1:
        name = tokens[0][:-1]
        descriptor_index = 1
    else:
        name = tokens[0]
        if len(tokens) < 2 or tokens[1] != ":":
            raise ParseError(trim(line), "Expected ':' after signal name")
        descriptor_index = 2

    if len(tokens) <= descriptor_index:
        raise ParseError(trim(line), "Missing bit descriptor")

    descriptor = tokens[descriptor_index]
    start_bit, bit_length, byte_order, signedness = parse_bit_descriptor(descriptor)

    signal = SignalDefinition(
        name=name,
        start_bit=start_bit,
        bit_length=bit_length,
        byte_order=byte_order,
        signedness=signedness,
    )

    tail = body.split(descriptor, 1)[1]
    fields = _SIGNAL_TAIL_RE.match(tail)

    scaling = _parse_pair(fields.group("scaling"), ",")
    if scaling is not None:
        signal.factor, signal.offset = scaling
    elif fields.group("scaling") is not None:
        logger.debug("Ignoring malformed scaling for %s: (%s)", name, fields.group("scaling"))

    value_range = _parse_pair(fields.group("range"), "|")
    if value_range is not None:
        signal.minimum, signal.maximum = value_range

    signal.unit = fields.group("unit") or ""
    signal.receiver = fields.group("receiver")

    return signal


class DBCParser:
    """Feeds lines into a message registry.

    Args:
        hex_ids: Read message arbitration IDs as hexadecimal digits.
    """

    def __init__(self, hex_ids: bool = False) -> None:
        self.hex_ids = hex_ids

    def parse(
        self,
        lines: Iterable[str],
        registry: MutableMapping[int, MessageDefinition],
    ) -> LoadSummary:
        """Parse lines, writing messages into ``registry``.

        A message replaces any existing entry with the same ID. Malformed
        lines are skipped and reported in the returned summary; parsing
        always continues with the next line.
        """
        summary = LoadSummary()
        active: Optional[MessageDefinition] = None

        for line_number, raw_line in enumerate(lines, start=1):
            line = trim(raw_line)
            if not line:
                continue

            if is_message_line(line):
                try:
                    message = parse_message_line(line, hex_ids=self.hex_ids)
                except IncompleteDefinition as e:
                    # Active message stays in place
                    self._report(summary, line_number, line, f"Skipped message: {e}")
                    continue
                except ParseError as e:
                    active = None
                    self._report(summary, line_number, line, f"Error parsing message: {e}")
                    continue

                registry[message.arbitration_id] = message
                active = message
                summary.messages += 1

            elif is_signal_line(line):
                if active is None:
                    logger.debug("Line %d: signal without active message dropped", line_number)
                    continue

                try:
                    signal = parse_signal_line(line)
                except ParseError as e:
                    self._report(summary, line_number, line, f"Error parsing signal: {e}")
                    continue

                active.add_signal(signal)
                summary.signals += 1

        return summary

    def _report(self, summary: LoadSummary, line_number: int, line: str, reason: str) -> None:
        diagnostic = ParseDiagnostic(line_number=line_number, line=line, reason=reason)
        summary.diagnostics.append(diagnostic)
        logger.warning("%s", diagnostic)
