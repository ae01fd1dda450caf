"""
DateBook AppInfo Block
======================

The AppInfo block of a DateBook/Calendar database starts with the
standard PalmOS category block and ends with the DateBook's own
settings.

Block Structure
---------------
    Offset  Size    Description
    ------  ----    -----------
    0       276     Standard category block (handled by a CategoryCodec)
    276     2       Padding
    278     1       Start of week (0 Sunday, 1 Monday)
    279     1       Padding (written on encode, not checked on decode)

Category handling belongs to the PDB layer. This module only needs to
know where the category block ends, so it talks to a CategoryCodec.
OpaqueCategoryBlock is the built-in one: it keeps the standard 276-byte
block as raw bytes.
"""

from dataclasses import dataclass, field
from typing import Any, Optional, Protocol
import logging
import struct

from palm_pdb.errors import AppInfoError

# Logger for this module
logger = logging.getLogger(__name__)

# renamed flags (2) + 16 labels of 16 bytes + 16 ids + last unique id + pad
STANDARD_CATEGORY_SIZE = 2 + 16 * 16 + 16 + 1 + 1

# Non-category tail as read: 2 pad bytes, start of week
TAIL_FORMAT = struct.Struct(">2xB")


# =============================================================================
# Category Collaborator
# =============================================================================

class CategoryCodec(Protocol):
    """Splits and rejoins the category part of an AppInfo block."""

    def split(self, data: bytes) -> tuple[Any, bytes]:
        """Return (categories, other bytes) for a raw AppInfo block."""
        ...

    def join(self, categories: Any, other: bytes) -> bytes:
        """Return the raw AppInfo block for categories plus other bytes."""
        ...


@dataclass(frozen=True)
class OpaqueCategoryBlock:
    """
    Category codec that keeps the category block as raw bytes.

    Attributes:
        size: Length of the category block (276 for the standard layout)
    """
    size: int = STANDARD_CATEGORY_SIZE

    def split(self, data: bytes) -> tuple[bytes, bytes]:
        if len(data) < self.size:
            raise AppInfoError(
                f"AppInfo block too short for categories: need {self.size} bytes, "
                f"got {len(data)}"
            )
        return bytes(data[:self.size]), bytes(data[self.size:])

    def join(self, categories: bytes, other: bytes) -> bytes:
        categories = bytes(categories)
        if len(categories) != self.size:
            raise AppInfoError(
                f"category block must be {self.size} bytes, got {len(categories)}"
            )
        return categories + other


# =============================================================================
# AppInfo
# =============================================================================

@dataclass
class AppInfo:
    """
    Database-wide DateBook settings.

    Attributes:
        categories: Category block as returned by the CategoryCodec
            (raw bytes for OpaqueCategoryBlock)
        start_of_week: 0 for Sunday, 1 for Monday
    """
    categories: Any = field(default_factory=lambda: bytes(STANDARD_CATEGORY_SIZE))
    start_of_week: int = 0


def parse_appinfo(data: bytes, categories: Optional[CategoryCodec] = None) -> AppInfo:
    """
    Decode an AppInfo block.

    Args:
        data: Raw AppInfo block
        categories: Category codec (OpaqueCategoryBlock if None)

    Raises:
        AppInfoError: If the block is too short
    """
    codec = categories if categories is not None else OpaqueCategoryBlock()
    category_block, other = codec.split(bytes(data))

    if len(other) < TAIL_FORMAT.size:
        raise AppInfoError(
            f"AppInfo tail too short: need {TAIL_FORMAT.size} bytes, got {len(other)}"
        )
    (start_of_week,) = TAIL_FORMAT.unpack_from(other)
    logger.debug(f"AppInfo start of week: {start_of_week}")
    return AppInfo(categories=category_block, start_of_week=start_of_week)


def pack_appinfo(appinfo: AppInfo, categories: Optional[CategoryCodec] = None) -> bytes:
    """
    Encode an AppInfo block.

    The tail is written as 00 00 <start_of_week> 00; the final pad byte
    has no counterpart in parse_appinfo().

    Raises:
        AppInfoError: If start_of_week does not fit a byte
    """
    codec = categories if categories is not None else OpaqueCategoryBlock()

    start_of_week = appinfo.start_of_week
    if isinstance(start_of_week, bool) or not isinstance(start_of_week, int) \
            or not 0 <= start_of_week <= 0xFF:
        raise AppInfoError(f"start_of_week must be a byte, got {start_of_week!r}")

    other = struct.pack(">2xBx", start_of_week)
    return codec.join(appinfo.categories, other)
