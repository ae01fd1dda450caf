"""
Date and Time Codecs
====================

PalmOS stores calendar dates as a single big-endian 16-bit word and
times of day as plain bytes.

Packed Date
-----------
    Bits 15-9   Year - 1904 (0-127, so 1904 to 2031)
    Bits  8-5   Month (1-12)
    Bits  4-0   Day (1-31)

The same packing is used for the event date, the repeat end date and
every exception date. A repeat end date of 0xFFFF means "no end date".

Time Range
----------
Four bytes: start hour, start minute, end hour, end minute. Untimed
(all-day) events store 0xFF in all four.

Exception List
--------------
    Offset  Size    Description
    0       2       Count (big-endian)
    2       2*n     Packed dates
"""

from dataclasses import dataclass
from datetime import date
from typing import Sequence
import struct

from palm_pdb.errors import InvalidFieldError, TruncatedExceptionListError, TruncatedRecordError


# =============================================================================
# Constants
# =============================================================================

EPOCH_YEAR = 1904           # Year 0 of the packed date
MAX_YEAR = EPOCH_YEAR + 0x7F
NO_END_DATE = 0xFFFF        # Repeat end date sentinel
UNTIMED = 0xFF              # Time byte sentinel for all-day events


# =============================================================================
# Packed Date
# =============================================================================

@dataclass(frozen=True)
class PalmDate:
    """
    A day/month/year triple as stored in a packed date word.

    Values are kept exactly as decoded, so a corrupt record with month 0
    or day 0 still round-trips. Use to_date() for a real calendar date.
    """
    day: int
    month: int
    year: int

    def to_packed(self, field_name: str = "date") -> int:
        """
        Pack into the 16-bit date word.

        Raises:
            InvalidFieldError: If a component does not fit its bit field
        """
        if not 0 <= self.day <= 0x1F:
            raise InvalidFieldError(f"{field_name}.day", self.day, "must be 0-31")
        if not 0 <= self.month <= 0x0F:
            raise InvalidFieldError(f"{field_name}.month", self.month, "must be 0-15")
        if not EPOCH_YEAR <= self.year <= MAX_YEAR:
            raise InvalidFieldError(
                f"{field_name}.year", self.year, f"must be {EPOCH_YEAR}-{MAX_YEAR}"
            )
        return self.day | (self.month << 5) | ((self.year - EPOCH_YEAR) << 9)

    @classmethod
    def from_packed(cls, raw: int) -> "PalmDate":
        """Unpack a 16-bit date word."""
        return cls(
            day=raw & 0x1F,
            month=(raw >> 5) & 0x0F,
            year=((raw >> 9) & 0x7F) + EPOCH_YEAR,
        )

    @classmethod
    def from_date(cls, value: date) -> "PalmDate":
        """Convert a datetime.date (or datetime)."""
        return cls(day=value.day, month=value.month, year=value.year)

    def to_date(self) -> date:
        """
        Convert to a datetime.date.

        Raises:
            ValueError: If the stored components are not a real date
        """
        return date(self.year, self.month, self.day)

    def __str__(self) -> str:
        return f"{self.year:04d}-{self.month:02d}-{self.day:02d}"


# =============================================================================
# Time Range
# =============================================================================

@dataclass(frozen=True)
class TimeRange:
    """
    Start and end time of an event.

    All four fields are 0xFF for an untimed event. Mixed states (some
    fields 0xFF) are kept as-is when decoding but never created by
    untimed().
    """
    start_hour: int = UNTIMED
    start_minute: int = UNTIMED
    end_hour: int = UNTIMED
    end_minute: int = UNTIMED

    SIZE = 4

    @classmethod
    def untimed(cls) -> "TimeRange":
        """An all-day event."""
        return cls(UNTIMED, UNTIMED, UNTIMED, UNTIMED)

    @property
    def is_untimed(self) -> bool:
        """True if all four bytes are the 0xFF sentinel."""
        return (self.start_hour, self.start_minute, self.end_hour, self.end_minute) == (
            UNTIMED, UNTIMED, UNTIMED, UNTIMED
        )

    def to_bytes(self) -> bytes:
        """Serialize to 4 bytes."""
        for name in ("start_hour", "start_minute", "end_hour", "end_minute"):
            value = getattr(self, name)
            if not isinstance(value, int) or not 0 <= value <= 0xFF:
                raise InvalidFieldError(f"time.{name}", value, "must be a byte (0-255)")
        return bytes((self.start_hour, self.start_minute, self.end_hour, self.end_minute))

    @classmethod
    def from_bytes(cls, data: bytes, offset: int = 0) -> "TimeRange":
        """Deserialize from 4 bytes at offset."""
        if len(data) - offset < cls.SIZE:
            raise TruncatedRecordError("time range", cls.SIZE, len(data) - offset, offset)
        return cls(*data[offset:offset + cls.SIZE])

    def __str__(self) -> str:
        if self.is_untimed:
            return "untimed"
        return (
            f"{self.start_hour:02d}:{self.start_minute:02d}-"
            f"{self.end_hour:02d}:{self.end_minute:02d}"
        )


# =============================================================================
# Exception List
# =============================================================================

def pack_exceptions(dates: Sequence[PalmDate]) -> bytes:
    """
    Serialize an exception list: count word followed by packed dates.

    Raises:
        InvalidFieldError: If there are more than 65535 dates or a date
            does not pack
    """
    if len(dates) > 0xFFFF:
        raise InvalidFieldError("exceptions", len(dates), "more than 65535 dates")

    result = bytearray(struct.pack(">H", len(dates)))
    for index, exception in enumerate(dates):
        result.extend(struct.pack(">H", exception.to_packed(f"exceptions[{index}]")))
    return bytes(result)


def unpack_exceptions(data: bytes, offset: int = 0) -> tuple[list[PalmDate], int]:
    """
    Parse an exception list starting at offset.

    Args:
        data: Record bytes
        offset: Offset of the count word

    Returns:
        Tuple of (dates, bytes_consumed)

    Raises:
        TruncatedRecordError: If the count word is cut short
        TruncatedExceptionListError: If fewer than count dates follow
    """
    available = len(data) - offset
    if available < 2:
        raise TruncatedRecordError("exception count", 2, available, offset)

    (count,) = struct.unpack_from(">H", data, offset)
    available -= 2
    if available < count * 2:
        raise TruncatedExceptionListError(count, available, offset + 2)

    words = struct.unpack_from(f">{count}H", data, offset + 2)
    return [PalmDate.from_packed(word) for word in words], 2 + count * 2
