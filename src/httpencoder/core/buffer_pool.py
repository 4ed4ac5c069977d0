"""
=============================================================================
BUFFER POOL
=============================================================================

Reusable, growable byte buffers shared by every request the middleware
handles.

=============================================================================
WHY POOL BUFFERS?
=============================================================================

Both stages hold a WHOLE body in memory: the decode stage reads the request
body before decoding it, the encode stage captures the handler's response
before encoding it. Allocating a fresh buffer for each of those on every
request means the allocator keeps growing new bytearrays to the same sizes
over and over. A pool hands back a buffer that already grew once.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        BUFFER LIFECYCLE                             │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │     pool.get()            request uses it           pool.put()      │
    │   ┌──────────┐        ┌─────────────────────┐      ┌──────────┐     │
    │   │  reuse   │ ─────► │ write / read_from / │ ───► │  reset   │     │
    │   │  or new  │        │ getvalue            │      │ + return │     │
    │   └──────────┘        └─────────────────────┘      └──────────┘     │
    │                                                                      │
    │   ALWAYS through `with pool.buffer() as buf:` so the buffer goes    │
    │   back even when a codec raises halfway through.                    │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Rules:
- A buffer belongs to exactly one in-flight request while checked out.
- put() resets the length to zero; the allocation is kept.
- No size limit on the pool or on a buffer. Lifetimes are bounded by one
  request, so growth stops at the largest body actually seen.

=============================================================================
"""

from contextlib import contextmanager
from typing import BinaryIO, Iterator, List
import threading


class Buffer:
    """
    A growable byte buffer backed by a bytearray.

    Behaves like a write-only file for codecs (they only ever call
    ``write``), and like a byte container for the stages.
    """

    # Read the request stream in chunks this big
    READ_CHUNK_SIZE = 64 * 1024

    def __init__(self):
        self._data = bytearray()

    def write(self, data: bytes) -> int:
        """Append bytes, return how many were written (file protocol)."""
        self._data += data
        return len(data)

    def read_from(self, stream: BinaryIO) -> int:
        """
        Append everything ``stream`` yields until EOF.

        Returns the number of bytes read. Errors raised by the stream
        propagate to the caller.
        """
        total = 0
        while True:
            chunk = stream.read(self.READ_CHUNK_SIZE)
            if not chunk:
                return total
            self._data += chunk
            total += len(chunk)

    def getvalue(self) -> bytes:
        """Snapshot of the current contents."""
        return bytes(self._data)

    def reset(self) -> None:
        """Drop the contents, keep the buffer object for reuse."""
        del self._data[:]

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"<Buffer len={len(self._data)}>"


class BufferPool:
    """
    Thread-safe pool of Buffer objects.

    Worker threads serving different requests check buffers in and out
    concurrently, so the free list is guarded by a lock. It is the only
    state the middleware shares between requests.

    Usage:
        pool = BufferPool()

        with pool.buffer() as buf:
            buf.read_from(request.body)
            ...
        # buf is reset and back in the pool here, exception or not
    """

    def __init__(self):
        self._free: List[Buffer] = []
        self._lock = threading.Lock()

    def get(self) -> Buffer:
        """Check out a pooled buffer, or a new empty one if none is free."""
        with self._lock:
            if self._free:
                return self._free.pop()
        return Buffer()

    def put(self, buffer: Buffer) -> None:
        """Reset ``buffer`` and return it to the pool."""
        buffer.reset()
        with self._lock:
            self._free.append(buffer)

    @contextmanager
    def buffer(self) -> Iterator[Buffer]:
        """Scoped checkout: the buffer is released on every exit path."""
        buf = self.get()
        try:
            yield buf
        finally:
            self.put(buf)

    def __len__(self) -> int:
        """Number of idle buffers currently in the pool."""
        with self._lock:
            return len(self._free)
