"""
=============================================================================
ENCODER CONFIGURATION
=============================================================================

Centralized configuration for the content-coding middleware.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CONFIGURATION SOURCES                            │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Priority (highest to lowest):                                     │
    │                                                                      │
    │   1. Code                                                           │
    │      └── EncoderConfig(encodings=("gzip",), compress_level=9)      │
    │                                                                      │
    │   2. Environment variables                                          │
    │      └── HTTPENCODER_ENCODINGS=gzip,deflate                        │
    │                                                                      │
    │   3. Default values (in this dataclass)                            │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Only the built-in codings (see codings.BUILTIN_CODINGS) can be named
here. Custom codecs are passed to httpencoder.new() directly.

=============================================================================
"""

from dataclasses import dataclass
from typing import Dict, Tuple
import logging
import os

from .codings import BUILTIN_CODINGS, Decoder, Encoder


_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _split_names(value: str) -> Tuple[str, ...]:
    """ "gzip, Deflate,," → ("gzip", "deflate") """
    return tuple(name.strip().lower() for name in value.split(",") if name.strip())


@dataclass
class EncoderConfig:
    """
    Configuration for the content-coding middleware.

    Development:
        EncoderConfig(log_level="DEBUG")

    Bandwidth-starved clients:
        EncoderConfig(encodings=("gzip",), compress_level=9)

    Decode only:
        EncoderConfig(encodings=(), decodings=("gzip", "deflate"))
    """

    # ─────────────────────────────────────────────────────────────────────
    # CODINGS
    # ─────────────────────────────────────────────────────────────────────

    encodings: Tuple[str, ...] = ("gzip", "deflate")
    """
    Codings offered for responses. Empty = responses are never encoded.
    """

    decodings: Tuple[str, ...] = ("gzip", "deflate", "identity")
    """
    Codings accepted on request bodies. Empty = bodies are never decoded.
    """

    compress_level: int = 6
    """
    Compression level for gzip / deflate (1-9).
    1 = fastest, 9 = smallest output.
    """

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """
    Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
    DEBUG shows every negotiation result.
    """

    @classmethod
    def from_env(cls) -> "EncoderConfig":
        """
        Create configuration from environment variables.

            HTTPENCODER_ENCODINGS   Response codings (default: gzip,deflate)
            HTTPENCODER_DECODINGS   Request codings (default: gzip,deflate,identity)
            HTTPENCODER_LEVEL       Compression level (default: 6)
            HTTPENCODER_LOG_LEVEL   Logging level (default: INFO)

        An empty HTTPENCODER_ENCODINGS / HTTPENCODER_DECODINGS turns the
        corresponding stage off.
        """
        return cls(
            encodings=_split_names(os.getenv("HTTPENCODER_ENCODINGS", "gzip,deflate")),
            decodings=_split_names(os.getenv("HTTPENCODER_DECODINGS", "gzip,deflate,identity")),
            compress_level=int(os.getenv("HTTPENCODER_LEVEL", "6")),
            log_level=os.getenv("HTTPENCODER_LOG_LEVEL", "INFO"),
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        Called once at startup, so a typo in a coding name fails right
        away instead of silently never matching.

        Raises:
            ValueError: On an unknown coding, level or log level.
        """
        for name in (*self.encodings, *self.decodings):
            if name not in BUILTIN_CODINGS:
                known = ", ".join(sorted(BUILTIN_CODINGS))
                raise ValueError(f"Unknown coding: {name!r}. Must be one of: {known}.")

        if not 1 <= self.compress_level <= 9:
            raise ValueError(f"Invalid compress_level: {self.compress_level}. Must be 1-9.")

        if self.log_level.upper() not in _LOG_LEVELS:
            raise ValueError(f"Invalid log_level: {self.log_level}")

    def build_registries(self) -> Tuple[Dict[str, Encoder], Dict[str, Decoder]]:
        """Instantiate the configured codings as (encoders, decoders)."""
        encoders = {name: BUILTIN_CODINGS[name](self.compress_level) for name in self.encodings}
        decoders = {name: BUILTIN_CODINGS[name](self.compress_level) for name in self.decodings}
        return encoders, decoders

    def setup_logging(self) -> None:
        """Configure logging based on config."""
        level = getattr(logging, self.log_level.upper(), logging.INFO)

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

        logging.getLogger("httpencoder").setLevel(level)


# =============================================================================
# MODULE SUMMARY
# =============================================================================
#
# 1. Typed configuration with a dataclass
# 2. Environment variable support
# 3. Validation at startup (fail-fast)
# 4. Registries built from coding names
#
# PRODUCTION CHECKLIST:
# □ Keep compress_level at 5-6 unless CPU is idle
# □ Only advertise decodings your handlers can afford to inflate
# □ Use INFO or WARNING log level
# =============================================================================
