"""
Cancelable per-request context.

Every HTTPRequest carries one. The middleware never looks at it; it only
threads it into each Decoder.decode / Encoder.encode call so a codec can
give up on a request the server has already abandoned (client went away,
worker shutting down).
"""

from typing import Optional
import threading

from ..errors import ContextCancelledError


class RequestContext:
    """
    A cancellation flag shared between the server and the codecs.

    Backed by a threading.Event, so it can be cancelled from another
    thread (e.g. the one that noticed the connection dropped) while a
    worker thread is busy encoding.
    """

    def __init__(self):
        self._cancelled = threading.Event()
        self._reason: Optional[str] = None

    def cancel(self, reason: str = "request context cancelled") -> None:
        """Mark the request as abandoned. Idempotent."""
        if not self._cancelled.is_set():
            self._reason = reason
            self._cancelled.set()

    @property
    def is_cancelled(self) -> bool:
        return self._cancelled.is_set()

    @property
    def reason(self) -> Optional[str]:
        return self._reason

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until cancelled or ``timeout`` elapses; True if cancelled."""
        return self._cancelled.wait(timeout)

    def raise_if_cancelled(self) -> None:
        """Raise ContextCancelledError once the context is cancelled."""
        if self._cancelled.is_set():
            raise ContextCancelledError(self._reason or "request context cancelled")

    def __repr__(self) -> str:
        state = "cancelled" if self.is_cancelled else "active"
        return f"<RequestContext {state}>"
