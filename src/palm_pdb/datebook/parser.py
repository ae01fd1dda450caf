"""
DateBook Record Parser
======================

This module decodes raw DateBook/Calendar record bytes into Event
objects.

The surrounding PDB layer (out of scope here) hands over each record's
raw data together with the database creator. decode_event() turns one
record into an Event; decode_records() and DatebookParser do the same for
a whole database, reporting failures per record so one corrupt record
never stops the others.

Usage Examples
--------------
Decoding a single record:
    >>> from palm_pdb.datebook import decode_event
    >>> event = decode_event(raw, calendar=True)
    >>> print(event.date, event.description)

Decoding every record of a database:
    >>> from palm_pdb.datebook import DatebookParser
    >>> parser = DatebookParser.for_creator(raw_records, "PDat")
    >>> for event in parser.events():
    ...     print(event.date, event.description)
    >>> for failure in parser.failures():
    ...     print(f"record {failure.index}: {failure.error}")
"""

from dataclasses import dataclass, field
from typing import Iterable, Optional, Union
import logging
import struct

from palm_pdb.config import CodecConfig, resolve_config
from palm_pdb.errors import RecordDecodeError, TruncatedRecordError
from palm_pdb.datebook.dates import PalmDate, TimeRange, unpack_exceptions
from palm_pdb.datebook.records import Alarm, Event, EventFlag, Repeat, Variant
from palm_pdb.datebook.text import split_text_fields
from palm_pdb.datebook.timezone import extract_timezone

# Logger for this module
logger = logging.getLogger(__name__)

# start_hour, start_minute, end_hour, end_minute, packed date, flags
FIXED_PREFIX = struct.Struct(">4BHH")


# =============================================================================
# Single Record
# =============================================================================

def decode_event(
    data: bytes,
    calendar: bool = False,
    config: Optional[CodecConfig] = None,
) -> Event:
    """
    Decode one record.

    Args:
        data: Raw record bytes
        calendar: True for Calendar ("PDat") databases, which add the
            location field and the time-zone extension
        config: Codec configuration (DEFAULT_CONFIG if None)

    Returns:
        The decoded Event

    Raises:
        TruncatedRecordError: If a fixed-size field is cut short
        TruncatedExceptionListError: If the exception list is cut short
        RecordDecodeError: For other malformed content (strict mode adds
            InvalidRepeatTypeError, InvalidAlarmUnitError and
            TimezoneExtensionError)
    """
    config = resolve_config(config)
    data = bytes(data)

    if len(data) < FIXED_PREFIX.size:
        raise TruncatedRecordError("fixed prefix", FIXED_PREFIX.size, len(data), 0)

    (start_hour, start_minute, end_hour, end_minute,
     raw_date, flags) = FIXED_PREFIX.unpack_from(data)
    offset = FIXED_PREFIX.size

    event = Event(
        date=PalmDate.from_packed(raw_date),
        time=TimeRange(start_hour, start_minute, end_hour, end_minute),
        when_changed=bool(flags & EventFlag.WHEN_CHANGED),
        other_flags=flags & EventFlag.other_mask(calendar),
    )
    logger.debug(f"Record {event.date} {event.time}, flags 0x{flags:04X}")

    if flags & EventFlag.ALARM:
        event.alarm = Alarm.from_bytes(data, offset, strict=config.strict)
        offset += Alarm.SIZE

    if flags & EventFlag.REPEAT:
        event.repeat = Repeat.from_bytes(data, offset, strict=config.strict)
        offset += Repeat.SIZE

    if flags & EventFlag.EXCEPTIONS:
        event.exceptions, consumed = unpack_exceptions(data, offset)
        offset += consumed

    present = (
        bool(flags & EventFlag.DESCRIPTION),
        bool(flags & EventFlag.NOTE),
        calendar and bool(flags & EventFlag.LOCATION),
    )
    (event.description, event.note, event.location), leftover = split_text_fields(
        data[offset:], present, config.text_encoding
    )

    if calendar:
        event.timezone, leftover = extract_timezone(leftover, config)

    event.other_data = leftover
    if leftover:
        logger.debug(f"Keeping {len(leftover)} bytes of opaque data")
    return event


# =============================================================================
# Whole Database
# =============================================================================

@dataclass
class RecordResult:
    """
    Outcome of decoding one record of a database.

    Exactly one of event and error is set.
    """
    index: int
    event: Optional[Event] = None
    error: Optional[RecordDecodeError] = None

    @property
    def ok(self) -> bool:
        """True if the record decoded."""
        return self.error is None


def decode_records(
    records: Iterable[bytes],
    calendar: bool = False,
    config: Optional[CodecConfig] = None,
) -> list[RecordResult]:
    """
    Decode a sequence of records, one result per record.

    A record that fails to decode is logged and reported in its result;
    the remaining records are still decoded.
    """
    results = []
    for index, data in enumerate(records):
        try:
            results.append(RecordResult(index, event=decode_event(data, calendar, config)))
        except RecordDecodeError as e:
            logger.warning(f"Record {index} failed to decode: {e}")
            results.append(RecordResult(index, error=e))
    return results


@dataclass
class DatebookParser:
    """
    Decoder for all records of a DateBook or Calendar database.

    Attributes:
        records: Raw record bytes, in database order
        calendar: True for Calendar ("PDat") databases
        config: Codec configuration
        results: One RecordResult per record (filled on construction)

    Example:
        >>> parser = DatebookParser(raw_records, calendar=True)
        >>> print(f"{len(parser.events())} events, {parser.error_count()} bad")
    """
    # Raw record data (not exposed in repr)
    records: list[bytes] = field(repr=False)

    calendar: bool = False
    config: Optional[CodecConfig] = None

    results: list[RecordResult] = field(default_factory=list, init=False)

    def __post_init__(self) -> None:
        """Decode the records after initialization."""
        self.records = list(self.records)
        self.results = decode_records(self.records, self.calendar, self.config)

    @classmethod
    def for_creator(
        cls,
        records: Iterable[bytes],
        creator: Union[str, bytes],
        config: Optional[CodecConfig] = None,
    ) -> "DatebookParser":
        """Create a parser, picking the variant from the creator code."""
        variant = Variant.from_creator(creator)
        return cls(records=list(records), calendar=variant.is_calendar, config=config)

    def events(self) -> list[Event]:
        """Events of the records that decoded."""
        return [result.event for result in self.results if result.ok]

    def failures(self) -> list[RecordResult]:
        """Results of the records that failed."""
        return [result for result in self.results if not result.ok]

    def error_count(self) -> int:
        """Number of records that failed."""
        return len(self.failures())

    def get_info(self) -> dict:
        """
        Summarize the database.

        Returns:
            Dictionary with record, repeating, alarm and failure counts
        """
        events = self.events()
        return {
            "variant": Variant.CALENDAR if self.calendar else Variant.CLASSIC,
            "total_records": len(self.results),
            "event_count": len(events),
            "repeating_count": sum(1 for event in events if event.is_repeating),
            "alarm_count": sum(1 for event in events if event.alarm is not None),
            "timezone_count": sum(1 for event in events if event.timezone is not None),
            "error_count": self.error_count(),
        }
