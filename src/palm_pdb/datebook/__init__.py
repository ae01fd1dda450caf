"""
PalmOS DateBook and Calendar Records
====================================

This package decodes and encodes the records of PalmOS DateBook
("date" creator) and Calendar ("PDat" creator) databases, and the
non-category part of their AppInfo block.

Decoding keeps everything the codec does not interpret (unknown flag
bits, trailing bytes, the repeat rule's unknown byte, reserved time-zone
flags), so encode_event(decode_event(raw)) gives back the original bytes.

Quick Start
-----------
    >>> from palm_pdb.datebook import decode_event, encode_event
    >>> event = decode_event(raw, calendar=True)
    >>> event.description = "Lunch with Ann"
    >>> raw = encode_event(event, calendar=True)

Whole databases:

    >>> from palm_pdb.datebook import DatebookParser, Variant
    >>> parser = DatebookParser.for_creator(raw_records, "date")
    >>> print(parser.get_info())

Reference
---------
- PalmOS SDK: DateDB.h, PalmLocale.h
"""

# =============================================================================
# Public API Exports
# =============================================================================

# Dates and times
from palm_pdb.datebook.dates import (
    EPOCH_YEAR,
    NO_END_DATE,
    UNTIMED,
    PalmDate,
    TimeRange,
    pack_exceptions,
    unpack_exceptions,
)

# Record data structures
from palm_pdb.datebook.records import (
    # Enums
    Variant,
    EventFlag,
    AlarmUnit,
    RepeatType,
    # Data structures
    Alarm,
    Repeat,
    NoRepeat,
    DailyRepeat,
    WeeklyRepeat,
    MonthlyByDayRepeat,
    MonthlyByDateRepeat,
    YearlyRepeat,
    UnknownRepeat,
    DstBoundary,
    Timezone,
    Event,
    DATABASE_TYPE,
)

# Text fields and time-zone extension
from palm_pdb.datebook.text import split_text_fields, join_text_fields
from palm_pdb.datebook.timezone import (
    TIMEZONE_TAG,
    extract_timezone,
    embed_timezone,
)

# Parser
from palm_pdb.datebook.parser import (
    DatebookParser,
    RecordResult,
    decode_event,
    decode_records,
)

# Builder
from palm_pdb.datebook.builder import (
    DatebookBuilder,
    encode_event,
    new_record_defaults,
)

# AppInfo
from palm_pdb.datebook.appinfo import (
    AppInfo,
    CategoryCodec,
    OpaqueCategoryBlock,
    STANDARD_CATEGORY_SIZE,
    parse_appinfo,
    pack_appinfo,
)

__all__ = [
    # Dates and times
    "EPOCH_YEAR",
    "NO_END_DATE",
    "UNTIMED",
    "PalmDate",
    "TimeRange",
    "pack_exceptions",
    "unpack_exceptions",
    # Enums
    "Variant",
    "EventFlag",
    "AlarmUnit",
    "RepeatType",
    # Data structures
    "Alarm",
    "Repeat",
    "NoRepeat",
    "DailyRepeat",
    "WeeklyRepeat",
    "MonthlyByDayRepeat",
    "MonthlyByDateRepeat",
    "YearlyRepeat",
    "UnknownRepeat",
    "DstBoundary",
    "Timezone",
    "Event",
    "DATABASE_TYPE",
    # Text fields and time-zone extension
    "split_text_fields",
    "join_text_fields",
    "TIMEZONE_TAG",
    "extract_timezone",
    "embed_timezone",
    # Parser
    "DatebookParser",
    "RecordResult",
    "decode_event",
    "decode_records",
    # Builder
    "DatebookBuilder",
    "encode_event",
    "new_record_defaults",
    # AppInfo
    "AppInfo",
    "CategoryCodec",
    "OpaqueCategoryBlock",
    "STANDARD_CATEGORY_SIZE",
    "parse_appinfo",
    "pack_appinfo",
]
