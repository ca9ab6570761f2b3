"""Console-based visualization using Rich."""

from __future__ import annotations

from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from dbc_decode.database import Database, DecodedMessage
from dbc_decode.definitions import MessageDefinition, SignalDefinition
from dbc_decode.parser import LoadSummary


def _format_number(value: float) -> str:
    return f"{value:.10g}"


class ConsoleVisualizer:
    """Renders definitions and decoded messages to the console using Rich."""

    def __init__(self, console: Optional[Console] = None) -> None:
        self.console = console or Console()

    def print_load_summary(self, summary: LoadSummary, source: str = "") -> None:
        """Print the result of a load pass."""
        panel = Panel(
            f"Messages: {summary.messages}\n"
            f"Signals: {summary.signals}\n"
            f"Skipped lines: {len(summary.diagnostics)}",
            title=f"Loaded {escape(source)}" if source else "Load Summary",
        )
        self.console.print(panel)

    def _signal_layout(self, signal: SignalDefinition) -> str:
        order = "LE" if signal.is_little_endian else "BE"
        sign = "-" if signal.is_signed else "+"
        return f"{signal.start_bit}|{signal.bit_length} {order}{sign}"

    def print_message(self, message: MessageDefinition) -> None:
        """Print a message with a table of its signals."""
        table = Table(
            title=f"{escape(message.name)} [{message.arbitration_id:#x}] "
                  f"DLC={message.dlc} {escape(message.transmitter)}".rstrip(),
        )

        table.add_column("Signal", style="cyan")
        table.add_column("Layout")
        table.add_column("Factor", justify="right")
        table.add_column("Offset", justify="right")
        table.add_column("Range", justify="right")
        table.add_column("Unit")
        table.add_column("Receiver", style="dim")

        for signal in message.signals:
            table.add_row(
                escape(signal.name),
                self._signal_layout(signal),
                _format_number(signal.factor),
                _format_number(signal.offset),
                f"[{_format_number(signal.minimum)}|{_format_number(signal.maximum)}]",
                escape(signal.unit),
                escape(signal.receiver),
            )

        self.console.print(table)

    def print_database(self, database: Database) -> None:
        """Print every registered message."""
        for message in database.messages:
            self.print_message(message)

    def print_decoded(self, decoded: DecodedMessage) -> None:
        """Print a table of decoded signal values."""
        data_str = " ".join(f"{b:02X}" for b in decoded.raw_data)

        table = Table(title=f"{escape(decoded.name)} [{decoded.arbitration_id:#x}] {data_str}".rstrip())

        table.add_column("Signal", style="cyan")
        table.add_column("Raw", justify="right")
        table.add_column("Value", justify="right", style="green")
        table.add_column("Unit")

        for signal in decoded.signals.values():
            if signal.quality == "OK":
                raw = f"{signal.raw_value:#x}"
                value = _format_number(signal.physical_value)
            else:
                raw = "-"
                value = f"[red]{_format_number(signal.physical_value)} ({signal.quality})[/red]"
            table.add_row(escape(signal.name), raw, value, escape(signal.unit))

        self.console.print(table)
