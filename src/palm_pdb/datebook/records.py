"""
DateBook Record Type Definitions
================================

This module defines the data structures for PalmOS DateBook and Calendar
records, plus the codecs for the two fixed-size optional blocks (alarm and
repeat rule).

Record Structure Overview
-------------------------
    Offset  Size    Description
    ------  ----    -----------
    0       4       Start hour, start minute, end hour, end minute
    4       2       Packed date (big-endian)
    6       2       Flags word (big-endian)
    8       2       Alarm block            (if flag 0x4000)
    ...     8       Repeat block           (if flag 0x2000)
    ...     2+2n    Exception list         (if flag 0x0800)
    ...     var     Description, NUL-terminated (if flag 0x0400)
    ...     var     Note, NUL-terminated        (if flag 0x1000)
    ...     var     Location, NUL-terminated    (if flag 0x0200, Calendar only)
    ...     var     Time-zone extension "Bd00"  (Calendar only)
    ...     var     Anything else, kept as opaque data

Flags Word
----------
    Bit 15  when_changed
    Bit 14  alarm present
    Bit 13  repeat present
    Bit 12  note present
    Bit 11  exceptions present
    Bit 10  description present
    Bit 9   location present (Calendar databases only)
    Others  not interpreted; carried in Event.other_flags

Variants
--------
The classic DateBook application (creator "date") and the newer Calendar
application (creator "PDat") share the layout. The Calendar variant adds
the location field and the time-zone extension; in the classic variant
bit 9 is ordinary data.

Reference
---------
- PalmOS Datebook record layout: DateDB.h (PalmOS SDK)
"""

from dataclasses import dataclass, field
from enum import Enum, IntEnum, IntFlag
from typing import ClassVar, Optional, Union
import struct

from palm_pdb.errors import (
    InvalidAlarmUnitError,
    InvalidFieldError,
    InvalidRepeatTypeError,
    TruncatedRecordError,
)
from palm_pdb.datebook.dates import NO_END_DATE, PalmDate, TimeRange


# PDB type shared by both variants
DATABASE_TYPE = "DATA"


# =============================================================================
# Enumeration Types
# =============================================================================

class Variant(Enum):
    """
    Which application owns the database, identified by its creator code.

    The variant changes two field interpretations: flag bit 9 (location)
    and the time-zone extension are only recognized for CALENDAR.
    """
    CLASSIC = "date"
    CALENDAR = "PDat"

    @property
    def creator(self) -> str:
        """Four-character creator code."""
        return self.value

    @property
    def is_calendar(self) -> bool:
        """True for the Calendar ("PDat") variant."""
        return self is Variant.CALENDAR

    @property
    def default_name(self) -> str:
        """Database name the PalmOS application uses."""
        return "CalendarDB-PDat" if self is Variant.CALENDAR else "DatebookDB"

    @classmethod
    def from_creator(cls, creator: Union[str, bytes]) -> "Variant":
        """
        Pick the variant for a creator code.

        Anything other than "PDat" is treated as the classic DateBook.
        """
        if isinstance(creator, bytes):
            creator = creator.decode("latin-1")
        return cls.CALENDAR if creator == cls.CALENDAR.value else cls.CLASSIC


class EventFlag(IntFlag):
    """Bits of the record flags word that the codec interprets."""
    WHEN_CHANGED = 0x8000
    ALARM = 0x4000
    REPEAT = 0x2000
    NOTE = 0x1000
    EXCEPTIONS = 0x0800
    DESCRIPTION = 0x0400
    LOCATION = 0x0200       # Calendar variant only

    @classmethod
    def recognized(cls, calendar: bool) -> int:
        """Mask of the bits interpreted for a variant."""
        mask = 0xFC00
        if calendar:
            mask |= int(cls.LOCATION)
        return mask

    @classmethod
    def other_mask(cls, calendar: bool) -> int:
        """Mask of the bits carried opaquely in Event.other_flags."""
        return 0xFFFF & ~cls.recognized(calendar)


class AlarmUnit(IntEnum):
    """Unit of an alarm's advance count."""
    MINUTES = 0
    HOURS = 1
    DAYS = 2


class RepeatType(IntEnum):
    """Repeat block type byte."""
    NONE = 0
    DAILY = 1
    WEEKLY = 2
    MONTHLY_BY_DAY = 3
    MONTHLY_BY_DATE = 4
    YEARLY = 5


# Highest week number for a monthly-by-day repeat; 5 means "last week"
LAST_WEEK = 5


def _check_byte(field_name: str, value: int) -> int:
    """Reject values that do not fit an unsigned byte."""
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= 0xFF:
        raise InvalidFieldError(field_name, value, "must be a byte (0-255)")
    return value


# =============================================================================
# Alarm
# =============================================================================

@dataclass
class Alarm:
    """
    Alarm block (2 bytes).

    Structure:
        Offset  Size    Description
        0       1       Advance (signed)
        1       1       Unit (0 minutes, 1 hours, 2 days)

    The mere presence of an alarm makes the DateBook show its alarm icon.
    An advance of -1 keeps the icon but never rings, so an alarm that
    does not ring is still different from no alarm at all.
    """
    advance: int = 10
    unit: Union[AlarmUnit, int] = AlarmUnit.MINUTES

    SIZE: ClassVar[int] = 2
    NO_RING: ClassVar[int] = -1

    @property
    def rings(self) -> bool:
        """True unless advance is the -1 "icon only" marker."""
        return self.advance != self.NO_RING

    def to_bytes(self) -> bytes:
        """Serialize the alarm block."""
        if isinstance(self.advance, bool) or not isinstance(self.advance, int) \
                or not -128 <= self.advance <= 127:
            raise InvalidFieldError("alarm.advance", self.advance, "must be -128 to 127")
        _check_byte("alarm.unit", self.unit)
        return struct.pack(">bB", self.advance, self.unit)

    @classmethod
    def from_bytes(cls, data: bytes, offset: int = 0, strict: bool = False) -> "Alarm":
        """
        Parse an alarm block at offset.

        Unknown unit values are kept as plain ints unless strict is set.
        """
        if len(data) - offset < cls.SIZE:
            raise TruncatedRecordError("alarm", cls.SIZE, len(data) - offset, offset)

        advance, raw_unit = struct.unpack_from(">bB", data, offset)
        try:
            unit: Union[AlarmUnit, int] = AlarmUnit(raw_unit)
        except ValueError:
            if strict:
                raise InvalidAlarmUnitError(raw_unit, offset + 1)
            unit = raw_unit
        return cls(advance=advance, unit=unit)

    def __str__(self) -> str:
        if isinstance(self.unit, AlarmUnit):
            unit = self.unit.name.lower()
        else:
            unit = f"unit {self.unit}"
        if not self.rings:
            return "icon only (no ring)"
        return f"{self.advance} {unit} before"


# =============================================================================
# Repeat Rule
# =============================================================================

@dataclass
class Repeat:
    """
    Base class for repeat rules (8-byte repeat block).

    Structure:
        Offset  Size    Description
        0       1       Type (RepeatType)
        1       1       Padding
        2       2       End date, packed (0xFFFF = no end date)
        4       1       Frequency (every N days/weeks/months/years)
        5       1       Repeat-on (weekday mask or weeknum*7+daynum)
        6       1       Repeat start of week
        7       1       Unknown

    One subclass per type byte. Fields shared by every variant live here;
    ``unknown`` is carried through untouched.
    """
    frequency: int = 1
    end_date: Optional[PalmDate] = None
    unknown: int = 0

    SIZE: ClassVar[int] = 8
    TYPE: ClassVar[Optional[RepeatType]] = None

    def wire_type(self) -> int:
        """Type byte written to the repeat block."""
        if self.TYPE is None:
            raise InvalidFieldError("repeat.type", None, "use a Repeat subclass")
        return int(self.TYPE)

    def _pack_repeat_on(self) -> tuple[int, int]:
        """Return the (repeat_on, start_of_week) bytes for this variant."""
        return 0, 0

    def to_bytes(self) -> bytes:
        """Serialize the repeat block."""
        if self.end_date is None:
            end_raw = NO_END_DATE
        else:
            end_raw = self.end_date.to_packed("repeat.end_date")
        repeat_on, start_of_week = self._pack_repeat_on()

        return struct.pack(
            ">BxHBBBB",
            _check_byte("repeat.type", self.wire_type()),
            end_raw,
            _check_byte("repeat.frequency", self.frequency),
            repeat_on,
            start_of_week,
            _check_byte("repeat.unknown", self.unknown),
        )

    @classmethod
    def from_bytes(cls, data: bytes, offset: int = 0, strict: bool = False) -> "Repeat":
        """
        Parse a repeat block at offset, returning the matching subclass.

        Unknown type bytes give an UnknownRepeat unless strict is set.

        Raises:
            TruncatedRecordError: If fewer than 8 bytes remain
            InvalidRepeatTypeError: Unknown type byte in strict mode
        """
        if len(data) - offset < cls.SIZE:
            raise TruncatedRecordError("repeat", cls.SIZE, len(data) - offset, offset)

        type_code, end_raw, frequency, repeat_on, start_of_week, unknown = \
            struct.unpack_from(">BxHBBBB", data, offset)
        end_date = None if end_raw == NO_END_DATE else PalmDate.from_packed(end_raw)

        variant = REPEAT_VARIANTS.get(type_code)
        if variant is None:
            if strict:
                raise InvalidRepeatTypeError(type_code, offset)
            return UnknownRepeat(
                frequency=frequency,
                end_date=end_date,
                unknown=unknown,
                type_code=type_code,
                repeat_on=repeat_on,
                start_of_week=start_of_week,
            )
        return variant._from_wire(frequency, end_date, unknown, repeat_on, start_of_week)

    @classmethod
    def _from_wire(
        cls,
        frequency: int,
        end_date: Optional[PalmDate],
        unknown: int,
        repeat_on: int,
        start_of_week: int,
    ) -> "Repeat":
        """Build this variant from the raw block fields."""
        return cls(frequency=frequency, end_date=end_date, unknown=unknown)

    def describe(self) -> str:
        """Human-readable summary."""
        text = f"{self.TYPE.name.lower().replace('_', ' ')} every {self.frequency}"
        if self.end_date is not None:
            text += f" until {self.end_date}"
        return text


@dataclass
class NoRepeat(Repeat):
    """Type 0: a repeat block that does not repeat."""
    TYPE: ClassVar[Optional[RepeatType]] = RepeatType.NONE


@dataclass
class DailyRepeat(Repeat):
    """Type 1: every ``frequency`` days."""
    TYPE: ClassVar[Optional[RepeatType]] = RepeatType.DAILY


@dataclass
class WeeklyRepeat(Repeat):
    """
    Type 2: every ``frequency`` weeks on the selected weekdays.

    ``days`` has seven entries, Sunday first. ``start_of_week``
    (0 Sunday, 1 Monday) sets the phase of repeats every 2+ weeks.
    """
    TYPE: ClassVar[Optional[RepeatType]] = RepeatType.WEEKLY

    days: tuple[bool, ...] = (False,) * 7
    start_of_week: int = 0

    def _pack_repeat_on(self) -> tuple[int, int]:
        if len(self.days) != 7:
            raise InvalidFieldError("repeat.days", self.days, "must have 7 entries")
        mask = 0
        for i, active in enumerate(self.days):
            if active:
                mask |= 1 << i
        return mask, _check_byte("repeat.start_of_week", self.start_of_week)

    @classmethod
    def _from_wire(cls, frequency, end_date, unknown, repeat_on, start_of_week):
        days = tuple(bool(repeat_on & (1 << i)) for i in range(7))
        return cls(
            frequency=frequency,
            end_date=end_date,
            unknown=unknown,
            days=days,
            start_of_week=start_of_week,
        )

    def describe(self) -> str:
        names = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")
        on = ",".join(name for name, active in zip(names, self.days) if active)
        return f"{super().describe()} on {on or 'no days'}"


@dataclass
class MonthlyByDayRepeat(Repeat):
    """
    Type 3: e.g. "second Friday of every month".

    ``weeknum`` is 0 for the first week up to 5 for the last week;
    larger values are clamped to 5 when encoding. ``daynum`` is the
    weekday, 0 for Sunday.
    """
    TYPE: ClassVar[Optional[RepeatType]] = RepeatType.MONTHLY_BY_DAY

    weeknum: int = 0
    daynum: int = 0

    def _pack_repeat_on(self) -> tuple[int, int]:
        if isinstance(self.weeknum, bool) or not isinstance(self.weeknum, int) \
                or self.weeknum < 0:
            raise InvalidFieldError("repeat.weeknum", self.weeknum, "must be 0 or more")
        if isinstance(self.daynum, bool) or not isinstance(self.daynum, int) \
                or not 0 <= self.daynum <= 6:
            raise InvalidFieldError("repeat.daynum", self.daynum, "must be 0-6")
        return min(self.weeknum, LAST_WEEK) * 7 + self.daynum, 0

    @classmethod
    def _from_wire(cls, frequency, end_date, unknown, repeat_on, start_of_week):
        return cls(
            frequency=frequency,
            end_date=end_date,
            unknown=unknown,
            weeknum=repeat_on // 7,
            daynum=repeat_on % 7,
        )

    def describe(self) -> str:
        week = "last" if self.weeknum >= LAST_WEEK else f"week {self.weeknum + 1}"
        return f"{super().describe()} ({week}, day {self.daynum})"


@dataclass
class MonthlyByDateRepeat(Repeat):
    """Type 4: same date every ``frequency`` months."""
    TYPE: ClassVar[Optional[RepeatType]] = RepeatType.MONTHLY_BY_DATE


@dataclass
class YearlyRepeat(Repeat):
    """Type 5: same date every ``frequency`` years."""
    TYPE: ClassVar[Optional[RepeatType]] = RepeatType.YEARLY


@dataclass
class UnknownRepeat(Repeat):
    """
    Repeat block with a type byte this codec does not know.

    Produced only by the permissive decoder. The repeat-on and
    start-of-week bytes are kept raw so the block re-encodes unchanged.
    Type codes that have their own subclass are rejected on encode.
    """
    type_code: int = 0xFF
    repeat_on: int = 0
    start_of_week: int = 0

    def wire_type(self) -> int:
        type_code = _check_byte("repeat.type", self.type_code)
        if type_code in REPEAT_VARIANTS:
            raise InvalidFieldError(
                "repeat.type", type_code, f"use {REPEAT_VARIANTS[type_code].__name__} for this type"
            )
        return type_code

    def _pack_repeat_on(self) -> tuple[int, int]:
        return (
            _check_byte("repeat.repeat_on", self.repeat_on),
            _check_byte("repeat.start_of_week", self.start_of_week),
        )

    def describe(self) -> str:
        return f"unknown type {self.type_code} every {self.frequency}"


# Type byte -> variant class
REPEAT_VARIANTS: dict[int, type[Repeat]] = {
    RepeatType.NONE: NoRepeat,
    RepeatType.DAILY: DailyRepeat,
    RepeatType.WEEKLY: WeeklyRepeat,
    RepeatType.MONTHLY_BY_DAY: MonthlyByDayRepeat,
    RepeatType.MONTHLY_BY_DATE: MonthlyByDateRepeat,
    RepeatType.YEARLY: YearlyRepeat,
}


# =============================================================================
# Time Zone
# =============================================================================

@dataclass(frozen=True)
class DstBoundary:
    """
    Start or end of daylight saving time.

    ``daynum`` is the weekday (0 Sunday) and ``weeknum`` the week of the
    month (0 first .. 4 last), as for monthly-by-day repeats. London's
    "last Sunday of March" is hour=1, daynum=0, weeknum=4, month=3.
    """
    hour: int = 0
    daynum: int = 0
    weeknum: int = 0
    month: int = 0


@dataclass
class Timezone:
    """
    Per-event time zone carried in the Calendar "Bd00" extension.

    Attributes:
        name: Zone name, e.g. "London"
        country: PalmLocale.h country code
        utc_offset_minutes: Offset from UTC
        dst_extra_minutes: Extra offset while DST is in effect (0 or 60)
        custom: Created by the user (top bit of the flags byte)
        flags: The 7 reserved flag bits
        dst_start: When DST begins
        dst_end: When DST ends
    """
    name: str = ""
    country: int = 0
    utc_offset_minutes: int = 0
    dst_extra_minutes: int = 0
    custom: bool = False
    flags: int = 0
    dst_start: DstBoundary = field(default_factory=DstBoundary)
    dst_end: DstBoundary = field(default_factory=DstBoundary)


# =============================================================================
# Event
# =============================================================================

@dataclass
class Event:
    """
    One DateBook/Calendar record.

    Optional blocks are None (or empty) when absent; the flags word is
    rebuilt from them on encode. ``other_flags`` and ``other_data`` hold
    whatever the codec does not interpret so it can be written back
    unchanged.
    """
    date: PalmDate
    time: TimeRange = field(default_factory=TimeRange.untimed)
    when_changed: bool = False
    alarm: Optional[Alarm] = None
    repeat: Optional[Repeat] = None
    exceptions: list[PalmDate] = field(default_factory=list)
    description: Optional[str] = None
    note: Optional[str] = None
    location: Optional[str] = None
    timezone: Optional[Timezone] = None
    other_flags: int = 0
    other_data: bytes = b""

    @property
    def is_untimed(self) -> bool:
        """True for an all-day event."""
        return self.time.is_untimed

    @property
    def is_repeating(self) -> bool:
        """True if a repeat block is present."""
        return self.repeat is not None
