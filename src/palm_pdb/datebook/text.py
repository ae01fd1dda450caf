"""
Text Field Codec
================

The description, note and location of a record follow the fixed-size
blocks as NUL-terminated strings, always in that order. Each is present
only when its flag bit is set, so the decoder needs the flags to know
which NUL-separated segment belongs to which field.

Whatever segments are left over are joined back with NUL and handed on
as candidate opaque data (which may hold a time-zone extension).
"""

from typing import Optional, Sequence
import logging

from palm_pdb.errors import InvalidFieldError, RecordDecodeError

# Logger for this module
logger = logging.getLogger(__name__)

# Wire order of the text fields
TEXT_FIELDS = ("description", "note", "location")

NUL = b"\x00"


def split_text_fields(
    data: bytes,
    present: Sequence[bool],
    encoding: str = "latin-1",
) -> tuple[list[Optional[str]], bytes]:
    """
    Split trailing record bytes into text fields.

    Args:
        data: Bytes following the exception list
        present: One flag per entry of TEXT_FIELDS
        encoding: Text codec

    Returns:
        Tuple of (values, leftover). values has one entry per flag: None
        when the flag is clear, otherwise the decoded text ("" if the
        record ran out of segments). leftover is the remaining segments
        joined with NUL.

    Raises:
        RecordDecodeError: If a present field is not valid in encoding
    """
    segments = data.split(NUL)
    values: list[Optional[str]] = []

    for name, flag in zip(TEXT_FIELDS, present):
        if not flag:
            values.append(None)
            continue
        if segments:
            raw = segments.pop(0)
        else:
            logger.debug(f"Record has no segment left for {name}")
            raw = b""
        try:
            values.append(raw.decode(encoding))
        except UnicodeDecodeError as e:
            raise RecordDecodeError(f"cannot decode {name} as {encoding}: {e}") from e

    return values, NUL.join(segments)


def join_text_fields(
    values: Sequence[Optional[str]],
    encoding: str = "latin-1",
) -> tuple[bytes, list[bool]]:
    """
    Serialize text fields, one NUL-terminated string per non-empty value.

    Args:
        values: One entry per TEXT_FIELDS; None or "" means absent
        encoding: Text codec

    Returns:
        Tuple of (bytes, present flags)

    Raises:
        InvalidFieldError: If a value contains NUL or cannot be encoded
    """
    result = bytearray()
    present = []

    for name, value in zip(TEXT_FIELDS, values):
        if not value:
            present.append(False)
            continue
        if "\x00" in value:
            raise InvalidFieldError(name, value, "text fields cannot contain NUL")
        try:
            encoded = value.encode(encoding)
        except UnicodeEncodeError as e:
            raise InvalidFieldError(name, value, f"not encodable as {encoding}") from e
        if NUL in encoded:
            raise InvalidFieldError(name, value, f"{encoding} encodes it with NUL bytes")
        result.extend(encoded)
        result.extend(NUL)
        present.append(True)

    return bytes(result), present
