"""dbc-decode - decode CAN payloads into physical values using DBC definitions.

    from dbc_decode import Database

    db = Database()
    db.load(open("vehicle.dbc").read())
    db.decode_message(100, bytes([0x20, 0x4E, 0x64, 0, 0, 0, 0, 0]))
    # {"RPM": 20000.0, "Temperature": 10.0}
"""

__version__ = "0.1.0"

from dbc_decode.definitions import ByteOrder, MessageDefinition, SignalDefinition, Signedness
from dbc_decode.decoder import DecodeStatus, decode_signal, extract_raw
from dbc_decode.database import Database, DatabaseConfig, DecodedMessage, DecodedSignal
from dbc_decode.errors import DBCDecodeError, IncompleteDefinition, MessageNotFound, ParseError
from dbc_decode.parser import LoadSummary, ParseDiagnostic

__all__ = [
    "ByteOrder",
    "MessageDefinition",
    "SignalDefinition",
    "Signedness",
    "DecodeStatus",
    "decode_signal",
    "extract_raw",
    "Database",
    "DatabaseConfig",
    "DecodedMessage",
    "DecodedSignal",
    "DBCDecodeError",
    "MessageNotFound",
    "ParseError",
    "IncompleteDefinition",
    "LoadSummary",
    "ParseDiagnostic",
]
