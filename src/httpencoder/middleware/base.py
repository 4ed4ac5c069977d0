"""
=============================================================================
BASE MIDDLEWARE INTERFACE
=============================================================================

Defines the handler and middleware contracts and the pipeline that chains
them (Chain of Responsibility).

=============================================================================
WRITER-STYLE HANDLERS
=============================================================================

A handler does not RETURN a response, it WRITES one:

    Handler = Callable[[ResponseWriter, HTTPRequest], None]

That is what lets the encode stage work: it hands the downstream handler a
capturing writer instead of the real one, inspects what was written, and
only then decides what reaches the client.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                 WRITER-STYLE MIDDLEWARE CHAIN                       │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   server ──(writer, request)──►┌──────────┐                          │
    │                                │  Encode  │ swaps writer for a       │
    │                                │  stage   │ CapturingWriter          │
    │                                └────┬─────┘                          │
    │                     (capture, request)                               │
    │                                ┌────▼─────┐                          │
    │                                │  Decode  │ swaps request.body for   │
    │                                │  stage   │ the decoded bytes        │
    │                                └────┬─────┘                          │
    │                     (capture, request)                               │
    │                                ┌────▼─────┐                          │
    │                                │ Handler  │ writes plain bytes       │
    │                                └──────────┘                          │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

A middleware short-circuits by writing its own response to `writer` and
not calling `next`.

=============================================================================
INTERVIEW QUESTIONS ABOUT MIDDLEWARE
=============================================================================

Q: "Why pass a writer instead of returning a response object?"
A: "A writer lets the server stream headers and body as they are produced,
   and a wrapper can substitute its own writer to observe or rewrite the
   output. Returning a value works too; from_response_handler bridges the
   two styles."

Q: "In what order do the middleware run?"
A: "First added is outermost: it sees the request first and the response
   last."

=============================================================================
"""

from abc import ABC, abstractmethod
from typing import Callable, Iterator, List
import logging

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse
from ..http.writer import ResponseWriter


logger = logging.getLogger(__name__)


# =============================================================================
# TYPE ALIASES
# =============================================================================

# A handler writes its response to the writer it is given.
Handler = Callable[[ResponseWriter, HTTPRequest], None]

# A handler in the "return a response" form.
ResponseHandler = Callable[[HTTPRequest], HTTPResponse]


class Middleware(ABC):
    """
    Abstract base class for middleware.

    =========================================================================
    THE MIDDLEWARE CONTRACT
    =========================================================================

        def __call__(self, writer, request, next) -> None

    - Call `next(writer, request)` to continue the chain, possibly with a
      different writer or a modified request.
    - Or write a response to `writer` yourself and skip `next`
      (short-circuit).

    =========================================================================
    """

    @abstractmethod
    def __call__(self, writer: ResponseWriter, request: HTTPRequest, next: Handler) -> None:
        """
        Process the request.

        Args:
            writer: Where the response must be written
            request: The incoming HTTP request
            next: The next handler in the chain
        """

    @property
    def name(self) -> str:
        """Get the middleware name for logging."""
        return self.__class__.__name__


class MiddlewarePipeline:
    """
    Chains multiple middleware together with a final handler.

    First added = outermost:

        pipeline = MiddlewarePipeline()
        pipeline.add(EncodeMiddleware(...))     # sees the response last
        pipeline.add(DecodeMiddleware(...))     # closest to the handler

        handler = pipeline.wrap(my_handler)
        handler(writer, request)
    """

    def __init__(self):
        self._middleware: List[Middleware] = []

    def add(self, middleware: Middleware) -> "MiddlewarePipeline":
        """Add middleware to the pipeline. Returns self for chaining."""
        self._middleware.append(middleware)
        logger.debug(f"Added middleware: {middleware.name}")
        return self

    def use(self, *middleware: Middleware) -> "MiddlewarePipeline":
        """Add several middleware at once."""
        for mw in middleware:
            self.add(mw)
        return self

    def wrap(self, handler: Handler) -> Handler:
        """
        Wrap a handler with all middleware in the pipeline.

        Given [MW1, MW2] and handler, the result calls
        MW1 → MW2 → handler. Wrapping runs in REVERSE so the first-added
        middleware ends up outermost.
        """
        current = handler

        for middleware in reversed(self._middleware):
            current = self._create_wrapped_handler(middleware, current)

        return current

    def _create_wrapped_handler(self, middleware: Middleware, next_handler: Handler) -> Handler:
        def wrapped(writer: ResponseWriter, request: HTTPRequest) -> None:
            middleware(writer, request, next_handler)

        return wrapped

    def __len__(self) -> int:
        return len(self._middleware)

    def __iter__(self) -> Iterator[Middleware]:
        return iter(self._middleware)


def from_response_handler(func: ResponseHandler) -> Handler:
    """
    Adapt a `request → HTTPResponse` function into a writer-style Handler.

    Usage:
        def hello(request: HTTPRequest) -> HTTPResponse:
            return ok("hello")

        handler = encoding.new(encoders, decoders)(from_response_handler(hello))
    """
    def handler(writer: ResponseWriter, request: HTTPRequest) -> None:
        func(request).write_to(writer)

    handler.__name__ = getattr(func, "__name__", "handler")
    handler.__doc__ = getattr(func, "__doc__", None)
    return handler
