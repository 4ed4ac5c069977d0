"""
=============================================================================
CONTENT-CODING MIDDLEWARE (COMPOSER)
=============================================================================

Puts the two stages together around a handler:

    handler = new(encoders, decoders)(my_handler)

    ┌─────────────────────────────────────────────────────────────────────┐
    │  EncodeMiddleware          (outermost, sees the response last)      │
    │  ┌───────────────────────────────────────────────────────────────┐  │
    │  │  DecodeMiddleware                                             │  │
    │  │  ┌─────────────────────────────────────────────────────────┐  │  │
    │  │  │                    my_handler                           │  │  │
    │  │  └─────────────────────────────────────────────────────────┘  │  │
    │  └───────────────────────────────────────────────────────────────┘  │
    └─────────────────────────────────────────────────────────────────────┘

Each call to new() takes a read-only snapshot of both registries and owns
one BufferPool shared by its two stages. Changing the dicts you passed in
afterwards has no effect on handlers that were already built.

A stage whose registry is empty is left out entirely; new({}, {}) wraps a
handler in nothing at all.

=============================================================================
"""

from types import MappingProxyType
from typing import Callable, Mapping, Optional
import logging

from ..codings import Decoder, Encoder
from ..core.buffer_pool import BufferPool
from ..http.request import HTTPRequest
from ..http.writer import ResponseWriter
from .base import Handler, Middleware, MiddlewarePipeline
from .decode import DecodeMiddleware
from .encode import EncodeMiddleware


logger = logging.getLogger(__name__)


def build_pipeline(
    encoders: Optional[Mapping[str, Encoder]],
    decoders: Optional[Mapping[str, Decoder]],
) -> MiddlewarePipeline:
    """
    Build the encode → decode pipeline over frozen copies of the registries.

    Args:
        encoders: encoding token → Encoder, for responses
        decoders: encoding token → Decoder, for request bodies

    Returns:
        A MiddlewarePipeline holding zero, one or two stages.
    """
    encoders = MappingProxyType(dict(encoders or {}))
    decoders = MappingProxyType(dict(decoders or {}))
    pool = BufferPool()

    pipeline = MiddlewarePipeline()

    if encoders:
        pipeline.add(EncodeMiddleware(encoders, pool))
    else:
        logger.debug("No encoders registered, responses pass through unchanged")

    if decoders:
        pipeline.add(DecodeMiddleware(decoders, pool))
    else:
        logger.debug("No decoders registered, request bodies pass through unchanged")

    return pipeline


def new(
    encoders: Optional[Mapping[str, Encoder]] = None,
    decoders: Optional[Mapping[str, Decoder]] = None,
) -> Callable[[Handler], Handler]:
    """
    Create the content-coding middleware factory.

    Usage:
        encode_decode = new(
            encoders={"gzip": GzipCoding()},
            decoders={"gzip": GzipCoding(), "deflate": DeflateCoding()},
        )

        handler = encode_decode(my_handler)
        handler(writer, request)

    Returns:
        A function wrapping any Handler. It can be applied to as many
        handlers as you like; they share this factory's buffer pool.
    """
    pipeline = build_pipeline(encoders, decoders)
    return pipeline.wrap


class ContentCodingMiddleware(Middleware):
    """
    Both stages packaged as a single Middleware.

    For code that already assembles a MiddlewarePipeline:

        pipeline = MiddlewarePipeline()
        pipeline.add(ContentCodingMiddleware(default_encoders(), default_decoders()))
        handler = pipeline.wrap(router)
    """

    def __init__(
        self,
        encoders: Optional[Mapping[str, Encoder]] = None,
        decoders: Optional[Mapping[str, Decoder]] = None,
    ):
        self._pipeline = build_pipeline(encoders, decoders)

    def __call__(self, writer: ResponseWriter, request: HTTPRequest, next: Handler) -> None:
        self._pipeline.wrap(next)(writer, request)

    @property
    def stages(self) -> list:
        """The installed stages, outermost first."""
        return list(self._pipeline)


def from_config(config) -> Callable[[Handler], Handler]:
    """
    Create the middleware factory from an EncoderConfig.

    Usage:
        config = EncoderConfig.from_env()
        config.validate()
        handler = from_config(config)(my_handler)
    """
    encoders, decoders = config.build_registries()
    return new(encoders, decoders)
