"""Command-line interface for dbc-decode."""

import json
import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler

from dbc_decode import __version__
from dbc_decode.database import Database, DatabaseConfig
from dbc_decode.errors import MessageNotFound, ParseError
from dbc_decode.numeric import NumericKind, hex_to_bytes, parse_number
from dbc_decode.parser import LoadSummary
from dbc_decode.visualization.console import ConsoleVisualizer


console = Console()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _load_database(dbc_file: str, encoding: str, hex_ids: bool) -> tuple[Database, LoadSummary]:
    database = Database(DatabaseConfig(encoding=encoding, hex_ids=hex_ids))
    summary = database.load_file(Path(dbc_file))
    return database, summary


def _parse_arbitration_id(value: str) -> int:
    text = value.strip()
    if text[:2] in ("0x", "0X"):
        return parse_number(text, NumericKind.UINT32, hex=True)
    return parse_number(text, NumericKind.UINT32)


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Show debug diagnostics")
def main(verbose: bool) -> None:
    """dbc-decode - decode CAN payloads with DBC message definitions."""
    _configure_logging(verbose)


@main.command()
@click.argument("dbc_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--encoding", default="cp1252", show_default=True, help="DBC file encoding")
@click.option("--hex-ids", is_flag=True, help="Read message IDs in the file as hex")
def show(dbc_file: str, encoding: str, hex_ids: bool) -> None:
    """List the messages and signals defined in a DBC file."""
    database, summary = _load_database(dbc_file, encoding, hex_ids)
    visualizer = ConsoleVisualizer(console)

    visualizer.print_load_summary(summary, source=dbc_file)
    visualizer.print_database(database)


@main.command()
@click.argument("dbc_file", type=click.Path(exists=True, dir_okay=False))
@click.argument("arbitration_id")
@click.argument("payload")
@click.option("--encoding", default="cp1252", show_default=True, help="DBC file encoding")
@click.option("--hex-ids", is_flag=True, help="Read message IDs in the file as hex")
@click.option("--json", "as_json", is_flag=True, help="Print values as a JSON object")
def decode(
    dbc_file: str,
    arbitration_id: str,
    payload: str,
    encoding: str,
    hex_ids: bool,
    as_json: bool,
) -> None:
    """Decode PAYLOAD (hex bytes) sent with ARBITRATION_ID (decimal or 0x hex)."""
    try:
        arb_id = _parse_arbitration_id(arbitration_id)
    except ParseError as e:
        raise click.BadParameter(str(e), param_hint="ARBITRATION_ID")

    try:
        data = hex_to_bytes(payload)
    except ParseError as e:
        raise click.BadParameter(str(e), param_hint="PAYLOAD")

    database, _ = _load_database(dbc_file, encoding, hex_ids)

    try:
        decoded = database.decode_message_detailed(arb_id, data)
    except MessageNotFound as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(decoded.values()))
        return

    ConsoleVisualizer(console).print_decoded(decoded)


if __name__ == "__main__":
    main()
