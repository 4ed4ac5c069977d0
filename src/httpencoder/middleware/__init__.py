"""
=============================================================================
MIDDLEWARE MODULE
=============================================================================

The content-coding middleware and the pipeline it is built on.

    base      - Handler / Middleware contracts, MiddlewarePipeline
    decode    - DecodeMiddleware: request Content-Encoding
    encode    - EncodeMiddleware: response Accept-Encoding
    encoding  - new(): both stages around a handler

=============================================================================
"""

from .base import (
    Handler,
    Middleware,
    MiddlewarePipeline,
    ResponseHandler,
    from_response_handler,
)
from .decode import DecodeMiddleware
from .encode import CapturingWriter, EncodeMiddleware
from .encoding import ContentCodingMiddleware, build_pipeline, from_config, new

__all__ = [
    # Base classes
    "Handler",
    "ResponseHandler",
    "Middleware",
    "MiddlewarePipeline",
    "from_response_handler",

    # Stages
    "DecodeMiddleware",         # Request bodies
    "EncodeMiddleware",         # Response bodies
    "CapturingWriter",

    # Composer
    "new",
    "from_config",
    "build_pipeline",
    "ContentCodingMiddleware",
]
