"""
Calendar Time-Zone Extension
============================

The Calendar application stores a per-event time zone after the text
fields, in a block that older readers treat as opaque trailing data.

Block Structure
---------------
    Offset  Size    Description
    ------  ----    -----------
    0       4       Tag "Bd00"
    4       2       Body length (big-endian)
    6       2       UTC offset in minutes (signed)
    8       1       DST start hour
    9       1       DST start day of week (0 Sunday)
    10      1       DST start week of month (0 first .. 4 last)
    11      1       DST start month
    12      1       DST end hour
    13      1       DST end day of week
    14      1       DST end week of month
    15      1       DST end month
    16      2       DST extra minutes (signed)
    18      1       Country (PalmLocale.h code)
    19      1       Flags: bit 7 custom, bits 0-6 reserved
    20      var     Name, NUL-terminated

Detection is permissive: a missing tag, a body shorter than the fixed
fields or a length running past the end of the data all mean "no
extension", and the bytes stay in Event.other_data. Strict mode turns
the tagged-but-malformed cases into TimezoneExtensionError.
"""

from typing import Optional
import logging
import struct

from palm_pdb.config import CodecConfig, resolve_config
from palm_pdb.errors import InvalidFieldError, TimezoneExtensionError
from palm_pdb.datebook.records import DstBoundary, Timezone

# Logger for this module
logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

TIMEZONE_TAG = b"Bd00"
HEADER_SIZE = 6                                         # tag + length word
BODY_FIXED = struct.Struct(">h8Bh2B")                   # 14 bytes before the name
MIN_EXTENSION_SIZE = HEADER_SIZE + BODY_FIXED.size + 1  # name terminator included

CUSTOM_FLAG = 0x80
RESERVED_FLAGS_MASK = 0x7F


def _decline(reason: str, strict: bool) -> None:
    """Log why the block was not taken, or raise in strict mode."""
    if strict:
        raise TimezoneExtensionError(f"malformed time-zone extension: {reason}")
    logger.debug(f"No time-zone extension: {reason}")


# =============================================================================
# Decoding
# =============================================================================

def extract_timezone(
    data: bytes,
    config: Optional[CodecConfig] = None,
) -> tuple[Optional[Timezone], bytes]:
    """
    Look for a time-zone extension at the start of data.

    Args:
        data: Candidate opaque data (what is left after the text fields)
        config: Codec configuration

    Returns:
        Tuple of (timezone, remainder). When no valid block is found the
        result is (None, data) with data untouched.

    Raises:
        TimezoneExtensionError: Tagged but malformed block, strict mode only
    """
    config = resolve_config(config)

    if not data.startswith(TIMEZONE_TAG):
        return None, data

    if len(data) < MIN_EXTENSION_SIZE:
        _decline(f"{len(data)} bytes is shorter than {MIN_EXTENSION_SIZE}", config.strict)
        return None, data

    (length,) = struct.unpack_from(">H", data, len(TIMEZONE_TAG))
    if length < BODY_FIXED.size:
        _decline(f"declared length {length} < {BODY_FIXED.size}", config.strict)
        return None, data
    if HEADER_SIZE + length > len(data):
        _decline(
            f"declared length {length} exceeds {len(data) - HEADER_SIZE} available",
            config.strict,
        )
        return None, data

    body = data[HEADER_SIZE:HEADER_SIZE + length]
    (offset, start_hour, start_daynum, start_weeknum, start_month,
     end_hour, end_daynum, end_weeknum, end_month,
     dst_extra, country, flags) = BODY_FIXED.unpack_from(body)

    raw_name = body[BODY_FIXED.size:]
    if raw_name.endswith(b"\x00"):
        raw_name = raw_name[:-1]
    try:
        name = raw_name.decode(config.text_encoding)
    except UnicodeDecodeError as e:
        _decline(f"name is not valid {config.text_encoding}: {e}", config.strict)
        return None, data

    timezone = Timezone(
        name=name,
        country=country,
        utc_offset_minutes=offset,
        dst_extra_minutes=dst_extra,
        custom=bool(flags & CUSTOM_FLAG),
        flags=flags & RESERVED_FLAGS_MASK,
        dst_start=DstBoundary(start_hour, start_daynum, start_weeknum, start_month),
        dst_end=DstBoundary(end_hour, end_daynum, end_weeknum, end_month),
    )
    logger.debug(f"Extracted time zone '{name}' ({offset:+d} min)")
    return timezone, data[HEADER_SIZE + length:]


# =============================================================================
# Encoding
# =============================================================================

def _check_range(field_name: str, value: int, low: int, high: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or not low <= value <= high:
        raise InvalidFieldError(field_name, value, f"must be {low} to {high}")
    return value


def embed_timezone(timezone: Timezone, config: Optional[CodecConfig] = None) -> bytes:
    """
    Serialize a time-zone extension block, tag and length included.

    The flags byte is rebuilt from ``custom`` and the reserved bits.

    Raises:
        InvalidFieldError: If a field does not fit its wire format
    """
    config = resolve_config(config)

    byte_fields = []
    for label, boundary in (("dst_start", timezone.dst_start), ("dst_end", timezone.dst_end)):
        for part in ("hour", "daynum", "weeknum", "month"):
            byte_fields.append(
                _check_range(f"timezone.{label}.{part}", getattr(boundary, part), 0, 0xFF)
            )

    flags = _check_range("timezone.flags", timezone.flags, 0, RESERVED_FLAGS_MASK)
    if timezone.custom:
        flags |= CUSTOM_FLAG

    body = bytearray(BODY_FIXED.pack(
        _check_range("timezone.utc_offset_minutes", timezone.utc_offset_minutes, -32768, 32767),
        *byte_fields,
        _check_range("timezone.dst_extra_minutes", timezone.dst_extra_minutes, -32768, 32767),
        _check_range("timezone.country", timezone.country, 0, 0xFF),
        flags,
    ))
    try:
        body.extend(timezone.name.encode(config.text_encoding))
    except UnicodeEncodeError as e:
        raise InvalidFieldError(
            "timezone.name", timezone.name, f"not encodable as {config.text_encoding}"
        ) from e
    body.extend(b"\x00")

    if len(body) > 0xFFFF:
        raise InvalidFieldError("timezone.name", timezone.name, "block longer than 65535 bytes")

    return TIMEZONE_TAG + struct.pack(">H", len(body)) + bytes(body)
