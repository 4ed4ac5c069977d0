"""
=============================================================================
CORE MODULE
=============================================================================

Low-level building blocks the middleware stages share:

    BufferPool / Buffer  - pooled, growable byte buffers (one per stage
                           per request, always released)
    RequestContext       - cancellation flag threaded into codec calls

=============================================================================
"""

from .buffer_pool import Buffer, BufferPool
from .context import RequestContext

__all__ = [
    "Buffer",           # Growable bytearray-backed sink
    "BufferPool",       # Thread-safe pool of Buffers
    "RequestContext",   # Cancelable per-request context
]
