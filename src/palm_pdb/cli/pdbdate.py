"""
pdbdate - DateBook Record Inspection Tool
=========================================

This module implements the command-line interface for the DateBook
record codec. It works on raw record files, one record per file, as
extracted from a PDB database by other tools.

Commands
--------
- **decode**: Show the decoded fields of records
- **check**: Verify that records re-encode to identical bytes
- **new**: Write a new default record

Usage Examples
--------------
Show a classic DateBook record:
    $ pdbdate decode record0.bin

Show Calendar records given as hex text:
    $ pdbdate decode --calendar --hex rec1.hex rec2.hex

Check that records survive a decode/encode cycle:
    $ pdbdate check --calendar record*.bin

Create a record for a given day:
    $ pdbdate new -o lunch.bin --date 2001-03-15 --description Lunch
"""

from datetime import date, datetime
from pathlib import Path
from typing import Optional
import logging
import sys

import click

from palm_pdb import __version__
from palm_pdb.config import CodecConfig
from palm_pdb.errors import PalmError
from palm_pdb.cli.errors import ExitCode, handle_cli_exception
from palm_pdb.datebook import (
    Event,
    Timezone,
    decode_event,
    encode_event,
    new_record_defaults,
)


# =============================================================================
# Helpers
# =============================================================================

def read_record(path: Path, hex_input: bool) -> bytes:
    """
    Read one raw record from a file.

    Raises:
        ValueError: If hex_input is set and the file is not valid hex
    """
    data = path.read_bytes()
    if hex_input:
        return bytes.fromhex(data.decode("ascii"))
    return data


def _format_offset(minutes: int) -> str:
    sign = "-" if minutes < 0 else "+"
    hours, mins = divmod(abs(minutes), 60)
    return f"UTC{sign}{hours:02d}:{mins:02d}"


def _format_timezone(timezone: Timezone) -> str:
    text = f"{timezone.name} ({_format_offset(timezone.utc_offset_minutes)}"
    if timezone.dst_extra_minutes:
        text += f", DST {timezone.dst_extra_minutes:+d} min"
    return text + f", country {timezone.country})"


def format_event(event: Event) -> list[str]:
    """Render an event as aligned "Label: value" lines."""
    lines = [
        f"Date:        {event.date}",
        f"Time:        {event.time}",
    ]
    if event.description is not None:
        lines.append(f"Description: {event.description}")
    if event.note is not None:
        lines.append(f"Note:        {event.note}")
    if event.location is not None:
        lines.append(f"Location:    {event.location}")
    if event.alarm is not None:
        lines.append(f"Alarm:       {event.alarm}")
    if event.repeat is not None:
        lines.append(f"Repeat:      {event.repeat.describe()}")
    if event.exceptions:
        lines.append(f"Exceptions:  {', '.join(str(d) for d in event.exceptions)}")
    if event.timezone is not None:
        lines.append(f"Time zone:   {_format_timezone(event.timezone)}")
    if event.when_changed:
        lines.append("Changed:     yes")
    if event.other_flags:
        lines.append(f"Other flags: 0x{event.other_flags:04X}")
    if event.other_data:
        lines.append(f"Other data:  {len(event.other_data)} bytes ({event.other_data.hex()})")
    return lines


def _first_difference(a: bytes, b: bytes) -> int:
    for index, (x, y) in enumerate(zip(a, b)):
        if x != y:
            return index
    return min(len(a), len(b))


# =============================================================================
# Main CLI Group
# =============================================================================

@click.group()
@click.version_option(__version__, "--version", "-V", prog_name="pdbdate")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx: click.Context, verbose: bool) -> None:
    """
    DateBook/Calendar record tool for PalmOS databases.

    Decode, verify and create raw DateBook ("date") and
    Calendar ("PDat") records.

    \b
    Commands:
      decode  Show decoded record fields
      check   Verify records re-encode unchanged
      new     Write a new default record
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")


calendar_option = click.option(
    "-c", "--calendar",
    is_flag=True,
    help="Records belong to a Calendar (PDat) database",
)
hex_option = click.option(
    "--hex",
    "hex_io",
    is_flag=True,
    help="Files hold hex text instead of raw bytes",
)
records_argument = click.argument(
    "record_files",
    nargs=-1,
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)


# =============================================================================
# Decode Command
# =============================================================================

@main.command("decode")
@records_argument
@calendar_option
@hex_option
@click.option("--strict", is_flag=True, help="Reject unknown repeat types and malformed time zones")
def cmd_decode(
    record_files: tuple[Path, ...],
    calendar: bool,
    hex_io: bool,
    strict: bool,
) -> None:
    """
    Show the decoded fields of each record file.

    A record that fails to decode is reported and the remaining files
    are still processed.

    \b
    Example:
      pdbdate decode --calendar record0.bin record1.bin
    """
    try:
        config = CodecConfig.from_env()
    except ValueError as e:
        handle_cli_exception(e)
    if strict:
        config = config.with_overrides(strict=True)
    failures = 0

    for path in record_files:
        click.echo(f"{path}:")
        try:
            event = decode_event(read_record(path, hex_io), calendar, config)
        except (PalmError, ValueError) as e:
            click.echo(f"  Error: {e}", err=True)
            failures += 1
            continue
        for line in format_event(event):
            click.echo(f"  {line}")

    if failures:
        click.echo(f"{failures} of {len(record_files)} records failed", err=True)
        sys.exit(ExitCode.CODEC_ERROR)


# =============================================================================
# Check Command
# =============================================================================

@main.command("check")
@records_argument
@calendar_option
@hex_option
def cmd_check(record_files: tuple[Path, ...], calendar: bool, hex_io: bool) -> None:
    """
    Verify that each record re-encodes to identical bytes.

    \b
    Example:
      pdbdate check record*.bin
    """
    try:
        config = CodecConfig.from_env()
    except ValueError as e:
        handle_cli_exception(e)
    failures = 0

    for path in record_files:
        try:
            data = read_record(path, hex_io)
            encoded = encode_event(decode_event(data, calendar, config), calendar, config)
        except (PalmError, ValueError) as e:
            click.echo(f"{path}: ERROR {e}")
            failures += 1
            continue

        if encoded == data:
            click.echo(f"{path}: OK ({len(data)} bytes)")
        else:
            offset = _first_difference(data, encoded)
            click.echo(f"{path}: MISMATCH at byte {offset} ({len(data)} -> {len(encoded)} bytes)")
            failures += 1

    if failures:
        sys.exit(ExitCode.CODEC_ERROR)


# =============================================================================
# New Command
# =============================================================================

@main.command("new")
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    required=True,
    help="Output record file (required)",
)
@click.option(
    "-d", "--date",
    "event_date",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    default=None,
    help="Event date, YYYY-MM-DD (default: today)",
)
@click.option("--description", default="", help="Event description")
@click.option("--note", default=None, help="Event note")
@click.option("--no-alarm", is_flag=True, help="Leave out the default 10-minute alarm")
@calendar_option
@hex_option
@click.pass_context
def cmd_new(
    ctx: click.Context,
    output: Path,
    event_date: Optional[datetime],
    description: str,
    note: Optional[str],
    no_alarm: bool,
    calendar: bool,
    hex_io: bool,
) -> None:
    """
    Write a new untimed record with the DateBook defaults.

    \b
    Examples:
      pdbdate new -o today.bin
      pdbdate new -o lunch.bin --date 2001-03-15 --description Lunch
    """
    try:
        today = event_date.date() if event_date is not None else date.today()
        event = new_record_defaults(today)
        event.description = description
        event.note = note
        if no_alarm:
            event.alarm = None

        data = encode_event(event, calendar, CodecConfig.from_env())
        if hex_io:
            output.write_text(data.hex() + "\n")
        else:
            output.write_bytes(data)
        click.echo(f"Created {output} ({len(data)} bytes)")

    except Exception as e:
        handle_cli_exception(e, verbose=ctx.obj.get("verbose", False), error_type="Encode")


if __name__ == "__main__":
    main()
