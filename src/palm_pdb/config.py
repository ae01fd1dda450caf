"""
Codec Configuration
===================

Settings shared by every record and AppInfo codec call. Configuration can
come from:
- Default values (defined here)
- Explicit CodecConfig(...) construction
- Environment variables (CodecConfig.from_env)

Codec functions take an optional ``config`` argument and fall back to
DEFAULT_CONFIG when it is None.
"""

from dataclasses import dataclass, replace
import codecs
import logging
import os

# Logger for this module
logger = logging.getLogger(__name__)

# Values accepted as "true" for boolean environment variables
_TRUE_VALUES = ("1", "true", "yes", "on")


@dataclass(frozen=True)
class CodecConfig:
    """
    Configuration for the datebook codecs.

    Attributes:
        text_encoding: Python codec used for description, note, location
            and time-zone names (default: "latin-1", which maps every byte
            to a character and back, so unknown bytes survive a round trip)
        strict: Turn permissive decode fallbacks into errors (default: False).
            Unknown repeat types, unknown alarm units and malformed
            time-zone blocks raise instead of being carried as raw values,
            and the encoder rejects classic-variant records that carry a
            location or time zone instead of dropping them.
    """

    text_encoding: str = "latin-1"
    strict: bool = False

    def __post_init__(self) -> None:
        # Fail at construction, not halfway through a record
        codecs.lookup(self.text_encoding)
        # Text fields are NUL-terminated; multi-byte codecs like UTF-16 emit NULs
        if b"\x00" in "A".encode(self.text_encoding):
            raise ValueError(
                f"text_encoding {self.text_encoding!r} writes NUL bytes for plain text"
            )

    # ═══════════════════════════════════════════════════════════════════════
    # FACTORY METHODS
    # ═══════════════════════════════════════════════════════════════════════

    @classmethod
    def from_env(cls) -> "CodecConfig":
        """
        Create CodecConfig from environment variables.

        Environment variables (all optional):
            PALM_PDB_TEXT_ENCODING: Text codec name (e.g. "cp1252")
            PALM_PDB_STRICT: "1", "true", "yes" or "on" enables strict mode

        Returns:
            CodecConfig with values from environment variables
        """
        config = cls()

        if encoding := os.environ.get("PALM_PDB_TEXT_ENCODING"):
            config = replace(config, text_encoding=encoding)

        if strict := os.environ.get("PALM_PDB_STRICT"):
            config = replace(config, strict=strict.strip().lower() in _TRUE_VALUES)

        logger.debug(f"Codec config from environment: {config}")
        return config

    def with_overrides(self, **kwargs) -> "CodecConfig":
        """Return a copy with the given fields replaced."""
        return replace(self, **kwargs)


# Used by every codec call that is not given an explicit config
DEFAULT_CONFIG = CodecConfig()


def resolve_config(config: "CodecConfig | None") -> CodecConfig:
    """Return config, or DEFAULT_CONFIG when it is None."""
    return DEFAULT_CONFIG if config is None else config
