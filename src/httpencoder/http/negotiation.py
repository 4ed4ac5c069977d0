"""
=============================================================================
ACCEPT-ENCODING NEGOTIATION
=============================================================================

Picks the single encoder a response will be encoded with, given the
client's Accept-Encoding header and the encoders the middleware was built
with.

=============================================================================
HOW A CLIENT STATES ITS PREFERENCES
=============================================================================

    Accept-Encoding: br;q=1.0, gzip;q=0.8, *;q=0.1
                     ─┬ ──┬──  ──┬─ ──┬──
                      │   │      │    └── quality 0.8
                      │   │      └─────── encoding name
                      │   └────────────── quality 1.0 (the default)
                      └────────────────── encoding name

Quality values are between 0 and 1 with up to three decimals. We keep them
as integers in [0, 1000] (1.000 == 1000) so no float comparison is needed.

=============================================================================
THE SCANNER
=============================================================================

The header has been tokenized first (see headers.compact_and_lower), so it
has no whitespace and no uppercase. The scan alternates between two steps:

    ┌─────────────────────────────────────────────────────────────────────┐
    │   b"gzip;q=0.5,br"                                                  │
    │     ▲                                                                │
    │     │ 1. NAME: skip non-letters, take the run of a-z → "gzip"        │
    │     │                                                                │
    │         ▲                                                            │
    │         │ 2. QUALITY: skip to the next digit or ','                  │
    │         │    found '0' → skip "0." → read "5" → 500                  │
    │         │                                                            │
    │              ▲ cursor steps one byte, back to 1. → "br", q=1000      │
    └─────────────────────────────────────────────────────────────────────┘

Quality rules:
- No digit before the next ',' or the end   → 1000
- First digit is anything but '0'           → 1000
  ("q=1", "q=1.0", but also "q=9" and "q=1.234")
- First digit is '0'                        → skip two bytes ("0."),
  read up to three digits: "0.5" → 500, "0.25" → 250, "0.125" → 125

The lenient cases are deliberate and covered by tests; callers may depend
on them, so they are not "fixed" here.

=============================================================================
SELECTION
=============================================================================

Only names present in the registry count. A match replaces the current
best only when its quality is STRICTLY higher. The best starts at 0, so:

- "gzip;q=0" never selects gzip (0 is "not acceptable")
- on a tie, the first name listed wins

=============================================================================
"""

from dataclasses import dataclass
from typing import Generic, Mapping, Optional, Tuple, TypeVar
import logging

from .headers import is_alpha, is_digit


logger = logging.getLogger(__name__)


# Quality of a name with no explicit (or a non-zero-leading) q value
DEFAULT_QUALITY = 1000

_COMMA = ord(",")
_ZERO = ord("0")

T = TypeVar("T")


@dataclass(frozen=True)
class Negotiated(Generic[T]):
    """
    Result of a successful negotiation.

    Attributes:
        name:    Registry key that matched. This is the value announced in
                 the response's Content-Encoding header.
        encoder: The registered encoder.
        quality: Winning quality, 1..1000.
    """

    name: str
    encoder: T
    quality: int


def next_encoding_name(header: bytes, start: int) -> Tuple[str, int]:
    """
    Extract the next run of lowercase letters at or after ``start``.

    Returns:
        (name, position just past the name). The name is "" when the
        header has no more letters.
    """
    length = len(header)

    while start < length and not is_alpha(header[start]):
        start += 1

    end = start
    while end < length and is_alpha(header[end]):
        end += 1

    return header[start:end].decode("ascii"), end


def next_quality_value(header: bytes, pos: int) -> Tuple[int, int]:
    """
    Read the quality value that follows a name.

    Returns:
        (quality in [0, 1000], new position)
    """
    length = len(header)

    while pos < length and not is_digit(header[pos]) and header[pos] != _COMMA:
        pos += 1

    if pos >= length:
        return DEFAULT_QUALITY, pos

    # ',' and every digit but '0' mean "no fractional quality given"
    if header[pos] != _ZERO:
        return DEFAULT_QUALITY, pos

    # skip "0."
    pos += 2

    return parse_quality(header, pos)


def parse_quality(header: bytes, pos: int) -> Tuple[int, int]:
    """
    Read up to three digits as thousandths: b"5" → 500, b"125" → 125.

    Missing digits count as zero, the cursor only moves over digits.
    """
    quality = 0

    for _ in range(3):
        quality *= 10
        if pos < len(header) and is_digit(header[pos]):
            quality += header[pos] - _ZERO
            pos += 1

    return quality, pos


def negotiate(header: bytes, encoders: Mapping[str, T]) -> Optional[Negotiated[T]]:
    """
    Select the best encoder for a tokenized Accept-Encoding value.

    Args:
        header: Accept-Encoding value after tokenize().
        encoders: Registry of encoding name → encoder.

    Returns:
        The winning match, or None when no listed name is registered with
        a quality above zero.

    Example:
        >>> negotiate(b"a;q=0.5,b;q=0.8", {"a": enc_a, "b": enc_b}).name
        'b'
    """
    best: Optional[Negotiated[T]] = None
    best_quality = 0

    pos = 0
    while pos < len(header):
        name, pos = next_encoding_name(header, pos)
        quality, pos = next_quality_value(header, pos)

        if name in encoders and best_quality < quality:
            best = Negotiated(name=name, encoder=encoders[name], quality=quality)
            best_quality = quality

        pos += 1

    if best is None:
        logger.debug(f"No registered encoding in Accept-Encoding {header!r}")
    else:
        logger.debug(f"Negotiated {best.name!r} (q={best.quality}) from {header!r}")

    return best
