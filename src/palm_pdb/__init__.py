"""
palm_pdb - PalmOS DateBook Record Codec
=======================================

This package reads and writes the records of PalmOS DateBook and
Calendar databases, the built-in calendars of the Palm handhelds.

Each record is a short, flag-driven byte blob: a fixed 8-byte prefix
(times, packed date, flags word) followed by optional alarm, repeat,
exception and text blocks, plus a time-zone extension in Calendar
databases. The codec turns these blobs into Event objects and back
without losing any bits it does not understand.

Main Components
---------------
- **datebook**: Record and AppInfo codecs
    Decode raw record bytes to Event objects and encode them back

- **config**: Codec settings (text encoding, strict mode)

- **cli**: The ``pdbdate`` inspection tool

The PDB container itself (header, record index) is handled elsewhere;
this package starts from raw record bytes.

Quick Start
-----------
    >>> from palm_pdb import decode_event, encode_event
    >>> event = decode_event(raw, calendar=False)
    >>> print(event.date, event.time, event.description)
    >>> assert encode_event(event) == raw

Or use the command-line tool:
    $ pdbdate decode record0.bin
    $ pdbdate check --calendar record*.bin
"""

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================

from palm_pdb.config import CodecConfig, DEFAULT_CONFIG
from palm_pdb.errors import (
    PalmError,
    RecordError,
    RecordDecodeError,
    TruncatedRecordError,
    TruncatedExceptionListError,
    InvalidRepeatTypeError,
    InvalidAlarmUnitError,
    TimezoneExtensionError,
    RecordEncodeError,
    InvalidFieldError,
    AppInfoError,
)

from palm_pdb.datebook import (
    Variant,
    PalmDate,
    TimeRange,
    Alarm,
    AlarmUnit,
    Repeat,
    RepeatType,
    Timezone,
    DstBoundary,
    Event,
    AppInfo,
    DatebookParser,
    DatebookBuilder,
    decode_event,
    decode_records,
    encode_event,
    new_record_defaults,
    parse_appinfo,
    pack_appinfo,
)

__all__ = [
    # Version info
    "__version__",
    # Configuration
    "CodecConfig",
    "DEFAULT_CONFIG",
    # Exception hierarchy
    "PalmError",
    "RecordError",
    "RecordDecodeError",
    "TruncatedRecordError",
    "TruncatedExceptionListError",
    "InvalidRepeatTypeError",
    "InvalidAlarmUnitError",
    "TimezoneExtensionError",
    "RecordEncodeError",
    "InvalidFieldError",
    "AppInfoError",
    # Data model
    "Variant",
    "PalmDate",
    "TimeRange",
    "Alarm",
    "AlarmUnit",
    "Repeat",
    "RepeatType",
    "Timezone",
    "DstBoundary",
    "Event",
    "AppInfo",
    # Codecs
    "DatebookParser",
    "DatebookBuilder",
    "decode_event",
    "decode_records",
    "encode_event",
    "new_record_defaults",
    "parse_appinfo",
    "pack_appinfo",
]
