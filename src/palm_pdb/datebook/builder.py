"""
DateBook Record Builder
=======================

This module encodes Event objects back into the exact record layout the
DateBook and Calendar applications expect.

The flags word is never stored on the Event: it is rebuilt here from
which optional blocks are present, starting from Event.other_flags.

Usage
-----
Encoding a decoded record unchanged:

    >>> from palm_pdb.datebook import decode_event, encode_event
    >>> assert encode_event(decode_event(raw, True), True) == raw

Creating new records:

    >>> from datetime import date
    >>> from palm_pdb.datebook import DatebookBuilder
    >>> builder = DatebookBuilder(calendar=True)
    >>> builder.new_event(date.today(), description="Dentist")
    >>> raw_records = builder.build()
"""

from dataclasses import dataclass, field, replace
from datetime import date
from typing import Optional, TypeVar
import logging
import struct

from palm_pdb.config import CodecConfig, resolve_config
from palm_pdb.errors import InvalidFieldError
from palm_pdb.datebook.dates import PalmDate, TimeRange, pack_exceptions
from palm_pdb.datebook.records import Alarm, AlarmUnit, Event, EventFlag, Variant
from palm_pdb.datebook.text import join_text_fields
from palm_pdb.datebook.timezone import embed_timezone

# Logger for this module
logger = logging.getLogger(__name__)

T = TypeVar("T")

# Default alarm of a new record: 10 minutes before
DEFAULT_ALARM_ADVANCE = 10


# =============================================================================
# Single Record
# =============================================================================

def _drop_classic_field(name: str, value: Optional[T], strict: bool) -> Optional[T]:
    """
    Classic DateBook records cannot store a location or time zone.

    Returns None after logging, or raises in strict mode.
    """
    if not value:
        return None
    if strict:
        raise InvalidFieldError(name, value, "only Calendar records can store it")
    logger.warning(f"Dropping {name} from classic DateBook record")
    return None


def encode_event(
    event: Event,
    calendar: bool = False,
    config: Optional[CodecConfig] = None,
) -> bytes:
    """
    Encode one record.

    Optional blocks are written when present: alarm and repeat when not
    None, exceptions when non-empty, text fields when non-empty, time
    zone when not None (Calendar only). The alarm flag depends on the
    alarm's presence, not its advance, so an advance of -1 still sets it.

    Args:
        event: The event to encode
        calendar: True for Calendar ("PDat") databases
        config: Codec configuration (DEFAULT_CONFIG if None)

    Returns:
        Raw record bytes

    Raises:
        InvalidFieldError: If a value does not fit its wire field
    """
    config = resolve_config(config)

    recognized = EventFlag.recognized(calendar)
    other_flags = event.other_flags
    if isinstance(other_flags, bool) or not isinstance(other_flags, int) \
            or not 0 <= other_flags <= 0xFFFF:
        raise InvalidFieldError("other_flags", other_flags, "must be 0-0xFFFF")
    if other_flags & recognized:
        raise InvalidFieldError(
            "other_flags",
            other_flags,
            f"bits 0x{other_flags & recognized:04X} are set from the event fields",
        )

    flags = other_flags
    if event.when_changed:
        flags |= EventFlag.WHEN_CHANGED

    body = bytearray()

    if event.alarm is not None:
        flags |= EventFlag.ALARM
        body.extend(event.alarm.to_bytes())

    if event.repeat is not None:
        flags |= EventFlag.REPEAT
        body.extend(event.repeat.to_bytes())

    if event.exceptions:
        flags |= EventFlag.EXCEPTIONS
        body.extend(pack_exceptions(event.exceptions))

    location = event.location
    timezone = event.timezone
    if not calendar:
        location = _drop_classic_field("location", location, config.strict)
        timezone = _drop_classic_field("timezone", timezone, config.strict)

    text, (has_description, has_note, has_location) = join_text_fields(
        (event.description, event.note, location), config.text_encoding
    )
    if has_description:
        flags |= EventFlag.DESCRIPTION
    if has_note:
        flags |= EventFlag.NOTE
    if has_location:
        flags |= EventFlag.LOCATION
    body.extend(text)

    if timezone is not None:
        body.extend(embed_timezone(timezone, config))

    body.extend(bytes(event.other_data))

    prefix = event.time.to_bytes() + struct.pack(">HH", event.date.to_packed("date"), flags)
    logger.debug(f"Encoded record {event.date}: flags 0x{flags:04X}, {len(prefix) + len(body)} bytes")
    return prefix + bytes(body)


def new_record_defaults(today: date) -> Event:
    """
    A fresh record as the DateBook application creates it.

    The record is an untimed event on ``today`` with a 10-minute alarm,
    no repeat, no exceptions and an empty description. The current date
    is passed in rather than read from the clock.

    Args:
        today: The date to use (a datetime.date or datetime)
    """
    return Event(
        date=PalmDate.from_date(today),
        time=TimeRange.untimed(),
        alarm=Alarm(advance=DEFAULT_ALARM_ADVANCE, unit=AlarmUnit.MINUTES),
        repeat=None,
        exceptions=[],
        description="",
        note=None,
        location=None,
    )


# =============================================================================
# Database Builder
# =============================================================================

@dataclass
class DatebookBuilder:
    """
    Collects events and encodes them for one database.

    Attributes:
        calendar: True for Calendar ("PDat") databases
        config: Codec configuration
        events: Events in database order

    Example:
        >>> builder = DatebookBuilder.for_variant(Variant.CALENDAR)
        >>> builder.add_event(event).add_event(other_event)
        >>> raw_records = builder.build()
    """
    calendar: bool = False
    config: Optional[CodecConfig] = None
    events: list[Event] = field(default_factory=list)

    @classmethod
    def for_variant(cls, variant: Variant, config: Optional[CodecConfig] = None) -> "DatebookBuilder":
        """Create a builder for a variant."""
        return cls(calendar=variant.is_calendar, config=config)

    def add_event(self, event: Event) -> "DatebookBuilder":
        """
        Append an event.

        Returns:
            self, for method chaining
        """
        self.events.append(event)
        logger.debug(f"Added event {event.date} ({len(self.events)} total)")
        return self

    def new_event(self, today: date, **fields) -> Event:
        """
        Append and return a new default event.

        Args:
            today: Date of the event
            **fields: Event fields overriding the defaults
        """
        event = replace(new_record_defaults(today), **fields)
        self.add_event(event)
        return event

    def get_event_count(self) -> int:
        """Number of events collected."""
        return len(self.events)

    def build(self) -> list[bytes]:
        """Encode every event, in order."""
        return [encode_event(event, self.calendar, self.config) for event in self.events]
