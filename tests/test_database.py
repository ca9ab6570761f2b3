"""Tests for the message database."""

import io
import logging
from pathlib import Path

import pytest

from dbc_decode.database import Database, DatabaseConfig, DecodedMessage
from dbc_decode.definitions import MessageDefinition, SignalDefinition
from dbc_decode.errors import DBCDecodeError, MessageNotFound


ENGINE_DBC = """
BO_ 100 Engine: 8 ECU
 SG_ RPM : 0|16@1+ (1,0) [0|8000] "rpm" Vector__XXX
 SG_ Temperature : 16|8@1+ (0.5,-40) [-40|87.5] "degC" Vector__XXX
"""


class TestDatabaseLoad:
    """Tests for loading database text."""

    def test_load_returns_summary(self, sample_dbc: str) -> None:
        db = Database()

        summary = db.load(sample_dbc)

        assert summary.messages == 3
        assert summary.signals == 6
        assert len(db) == 3
        assert db.message_ids == {100, 200, 300}

    def test_load_from_stream(self) -> None:
        db = Database()

        db.load(io.StringIO(ENGINE_DBC))

        assert 100 in db

    def test_load_from_lines(self) -> None:
        db = Database()

        db.load(["BO_ 7 Lines: 2 X\n", " SG_ A : 0|8@1+ (1,0)\n"])

        assert db.get_message(7).signals[0].name == "A"

    def test_load_empty(self) -> None:
        db = Database()

        summary = db.load("")

        assert len(db) == 0
        assert summary.messages == 0

    def test_load_never_raises_on_garbage(self) -> None:
        db = Database()

        summary = db.load("BO_ x y z\n SG_ ?? : ??\nBO_\n\x00\x01\nSG_ : :")

        assert len(db) == 0
        assert summary.has_diagnostics

    def test_loads_accumulate(self) -> None:
        db = Database()

        db.load(ENGINE_DBC)
        db.load("BO_ 200 Transmission: 8 Gateway\n SG_ Gear : 0|8@1+ (1,0)")

        assert db.message_ids == {100, 200}

    def test_later_load_overwrites_same_id(self) -> None:
        db = Database()

        db.load(ENGINE_DBC)
        db.load('BO_ 100 EngineV2: 4 ECU2\n SG_ Load : 0|8@1+ (0.5,0) [0|127.5] "%" X')

        message = db.get_message(100)
        assert message.name == "EngineV2"
        assert message.transmitter == "ECU2"
        assert [s.name for s in message.signals] == ["Load"]
        assert db.decode_message(100, bytes([0x10])) == {"Load": 8.0}

    def test_failed_message_line_leaves_cursor_clear_across_load(self) -> None:
        db = Database()

        db.load("BO_ abc Broken: 8 X\n SG_ Lost : 0|8@1+ (1,0)\n" + ENGINE_DBC)

        assert [s.name for s in db.get_message(100).signals] == ["RPM", "Temperature"]

    def test_diagnostics_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        db = Database()

        with caplog.at_level(logging.WARNING, logger="dbc_decode"):
            db.load("BO_ abc Broken: 8 X")

        assert any("Error parsing message" in r.getMessage() for r in caplog.records)

    def test_load_file(self, tmp_path: Path) -> None:
        path = tmp_path / "vehicle.dbc"
        text = 'BO_ 100 Engine: 8 ECU\n SG_ Oil : 0|8@1+ (1,-40) [-40|215] "°C" X\n'
        path.write_bytes(text.encode("cp1252"))

        db = Database()
        summary = db.load_file(path)

        assert summary.signals == 1
        assert db.get_message(100).signals[0].unit == "°C"

    def test_load_file_with_encoding(self, tmp_path: Path) -> None:
        path = tmp_path / "utf8.dbc"
        path.write_text('BO_ 1 M: 8 X\n SG_ S : 0|8@1+ (1,0) [0|1] "µs" X\n', encoding="utf-8")

        db = Database(DatabaseConfig(encoding="utf-8"))
        db.load_file(str(path))

        assert db.get_message(1).signals[0].unit == "µs"

    def test_load_file_missing(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            Database().load_file(tmp_path / "missing.dbc")

    def test_hex_ids_config(self) -> None:
        db = Database(DatabaseConfig(hex_ids=True))

        db.load("BO_ 64 Hex: 8 X\n SG_ A : 0|8@1+ (1,0)")

        assert 0x64 in db
        assert 64 not in db


class TestDatabaseRegistry:
    """Tests for registry accessors."""

    def test_messages_sorted_by_id(self, database: Database) -> None:
        assert [m.arbitration_id for m in database.messages] == [100, 200, 300]

    def test_get_message(self, database: Database) -> None:
        assert database.get_message(200).name == "Transmission"
        assert database.get_message(999) is None

    def test_get_message_by_name(self, database: Database) -> None:
        assert database.get_message_by_name("Chassis").arbitration_id == 300
        assert database.get_message_by_name("Nope") is None

    def test_add_message(self) -> None:
        db = Database()
        db.add_message(MessageDefinition(
            arbitration_id=0x10,
            name="Manual",
            signals=[SignalDefinition(name="A", bit_length=8)],
        ))

        assert db.decode_message(0x10, bytes([3])) == {"A": 3.0}

    def test_clear(self, database: Database) -> None:
        database.clear()

        assert len(database) == 0
        assert database.messages == []

    def test_default_config(self) -> None:
        config = Database().config

        assert config.encoding == "cp1252"
        assert config.hex_ids is False


class TestDecodeMessage:
    """Tests for decode_message()."""

    def test_engine_example(self) -> None:
        db = Database()
        db.load(ENGINE_DBC)

        values = db.decode_message(100, bytes([0x20, 0x4E, 0x64, 0, 0, 0, 0, 0]))

        assert values == {"RPM": 20000.0, "Temperature": 10.0}

    def test_multiple_messages(self, database: Database) -> None:
        values = database.decode_message(200, bytes([3, 0xC8, 0x00, 0, 0, 0, 0, 0]))

        assert values["Gear"] == 3.0
        assert values["Speed"] == pytest.approx(20.0)

    def test_big_endian_signed_message(self, database: Database) -> None:
        # SteeringAngle 0xFC18 = -1000, YawRate 0xFFE = -2
        data = bytes([0xFC, 0x18, 0xFF, 0xE0, 0, 0, 0, 0])

        values = database.decode_message(300, data)

        assert values["SteeringAngle"] == pytest.approx(-100.0)
        assert values["YawRate"] == pytest.approx(-0.1)

    def test_unknown_id_raises(self, database: Database) -> None:
        with pytest.raises(MessageNotFound) as exc_info:
            database.decode_message(999, bytes(8))

        assert exc_info.value.arbitration_id == 999
        assert "Message ID 999 (0x3E7) not found" in str(exc_info.value)

    def test_message_not_found_hierarchy(self) -> None:
        error = MessageNotFound(5)

        assert isinstance(error, DBCDecodeError)
        assert isinstance(error, KeyError)

    def test_unknown_id_on_empty_database(self) -> None:
        with pytest.raises(MessageNotFound):
            Database().decode_message(100, bytes(8))

    def test_short_payload_reports_sentinel(self, database: Database) -> None:
        values = database.decode_message(100, bytes([0x20, 0x4E]))

        assert values == {"RPM": 20000.0, "Temperature": 0.0}

    def test_oversized_signal_does_not_block_siblings(self) -> None:
        db = Database()
        db.load("BO_ 1 Wide: 8 X\n SG_ A : 0|8@1+ (1,0)\n SG_ W : 0|1100@1+ (1,0)")

        values = db.decode_message(1, bytes([0xFF] * 140))

        assert values == {"A": 255.0, "W": 0.0}

    def test_decode_is_repeatable(self, database: Database) -> None:
        data = bytes([0x12, 0x34, 0x56, 0x78, 0x9A, 0xBC, 0xDE, 0xF0])

        results = [database.decode_message(300, data) for _ in range(5)]

        assert all(r == results[0] for r in results)


class TestDecodeMessageDetailed:
    """Tests for decode_message_detailed()."""

    def test_detailed_values(self, database: Database) -> None:
        decoded = database.decode_message_detailed(100, bytes([0x20, 0x4E, 0x64, 0, 0, 0, 0, 0]))

        assert isinstance(decoded, DecodedMessage)
        assert decoded.name == "Engine"
        assert decoded.arbitration_id == 100
        assert decoded.raw_data == bytes([0x20, 0x4E, 0x64, 0, 0, 0, 0, 0])

        temperature = decoded.get("Temperature")
        assert temperature is not None
        assert temperature.raw_value == 0x64
        assert temperature.physical_value == 10.0
        assert temperature.unit == "degC"
        assert temperature.quality == "OK"
        assert decoded.values() == {"RPM": 20000.0, "Temperature": 10.0}

    def test_detailed_marks_unreadable_signals(self, database: Database) -> None:
        decoded = database.decode_message_detailed(100, [0x20, 0x4E])

        temperature = decoded.get("Temperature")
        assert temperature.quality == "DECODE_ERROR"
        assert temperature.raw_value is None
        assert temperature.physical_value == 0.0
        assert decoded.get("RPM").quality == "OK"
        assert "DECODE_ERROR" in repr(decoded)

    def test_detailed_unknown_id(self, database: Database) -> None:
        with pytest.raises(MessageNotFound):
            database.decode_message_detailed(1, bytes(8))
