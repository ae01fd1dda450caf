"""
Palm PDB Error Hierarchy
========================

This module defines the exception hierarchy for the record codecs.
All exceptions inherit from PalmError, allowing callers to catch all
codec-related errors with a single except clause if desired.

Exception Hierarchy
-------------------
PalmError (base)
├── RecordError (record codec)
│   ├── RecordDecodeError - bytes cannot be turned into an Event
│   │   ├── TruncatedRecordError - fixed-size field cut short
│   │   ├── TruncatedExceptionListError - fewer dates than declared
│   │   ├── InvalidRepeatTypeError - unknown repeat type (strict mode)
│   │   ├── InvalidAlarmUnitError - unknown alarm unit (strict mode)
│   │   └── TimezoneExtensionError - malformed "Bd00" block (strict mode)
│   └── RecordEncodeError - an Event cannot be turned into bytes
│       └── InvalidFieldError - value does not fit its wire field
└── AppInfoError (AppInfo block handling)

Decode errors are scoped to a single record. Batch decoding
(decode_records) reports them per record and keeps going, so one
corrupt record never hides its siblings.
"""

from typing import Any, Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class PalmError(Exception):
    """
    Base exception for all palm_pdb errors.

        try:
            event = decode_event(data)
        except PalmError as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Record Exceptions
# =============================================================================

class RecordError(PalmError):
    """Base exception for record codec errors."""
    pass


class RecordDecodeError(RecordError):
    """
    A record's bytes could not be decoded.

    Attributes:
        offset: Byte offset inside the record where decoding stopped
            (None when not applicable)
    """

    def __init__(self, message: str, offset: Optional[int] = None):
        self.offset = offset
        if offset is not None:
            message = f"{message} (at offset {offset})"
        super().__init__(message)


class TruncatedRecordError(RecordDecodeError):
    """
    Record ends before a fixed-size field is complete.

    Raised for the 8-byte prefix, the 2-byte alarm block, the 8-byte
    repeat block and the 2-byte exception count.
    """

    def __init__(
        self,
        field_name: str,
        needed: int,
        available: int,
        offset: Optional[int] = None,
    ):
        self.field_name = field_name
        self.needed = needed
        self.available = available
        super().__init__(
            f"record truncated in {field_name}: need {needed} bytes, "
            f"got {available}",
            offset=offset,
        )


class TruncatedExceptionListError(RecordDecodeError):
    """The exception list declares more dates than the record holds."""

    def __init__(self, count: int, available: int, offset: Optional[int] = None):
        self.count = count
        self.available = available
        super().__init__(
            f"exception list truncated: {count} dates need {count * 2} bytes, "
            f"got {available}",
            offset=offset,
        )


class InvalidRepeatTypeError(RecordDecodeError):
    """
    Unknown repeat type byte.

    Only raised in strict mode. The permissive decoder keeps the raw
    value in an UnknownRepeat instead.
    """

    def __init__(self, type_code: int, offset: Optional[int] = None):
        self.type_code = type_code
        super().__init__(f"invalid repeat type {type_code}", offset=offset)


class InvalidAlarmUnitError(RecordDecodeError):
    """Unknown alarm unit byte (strict mode only)."""

    def __init__(self, unit: int, offset: Optional[int] = None):
        self.unit = unit
        super().__init__(f"invalid alarm unit {unit}", offset=offset)


class TimezoneExtensionError(RecordDecodeError):
    """
    Trailing data carries the "Bd00" tag but the block is malformed.

    Only raised in strict mode. The permissive decoder leaves the bytes
    in Event.other_data untouched.
    """
    pass


class RecordEncodeError(RecordError):
    """An Event could not be encoded."""
    pass


class InvalidFieldError(RecordEncodeError):
    """
    A field value cannot be represented in its wire format.

    Raised instead of masking or truncating the value, which would
    silently write different bytes than the caller asked for.

    Attributes:
        field_name: Dotted name of the offending field (e.g. "alarm.unit")
        value: The rejected value
        reason: Why it was rejected
    """

    def __init__(self, field_name: str, value: Any, reason: str):
        self.field_name = field_name
        self.value = value
        self.reason = reason
        super().__init__(f"invalid {field_name} {value!r}: {reason}")


# =============================================================================
# AppInfo Exceptions
# =============================================================================

class AppInfoError(PalmError):
    """
    Invalid AppInfo block.

    Raised when the block is too short to hold the category portion
    or the start-of-week tail, or when start_of_week does not fit a byte.
    """
    pass
