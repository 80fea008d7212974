"""
Ownership plumbing shared by every context-scoped object.

``NativeContext`` exclusively owns one ``Z3_context``. ``Borrowed`` objects
hold a strong reference to their ``Context``, so a context cannot be
collected while anything derived from it is reachable. ``RefCounted``
objects additionally own one engine reference on their own handle, which is
dropped by a ``weakref.finalize`` exactly once: when the object is collected,
or earlier when its context is closed.
"""
from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Callable, Iterator

from z3 import z3core

from .errors import ContextMismatchError
from .lock import ENGINE_LOCK

if TYPE_CHECKING:
    from .context import Context

logger = logging.getLogger(__name__)


class NativeContext:
    """Holder for a raw context handle and its teardown/interrupt state.

    Kept separate from ``Context`` so finalizers can reference it without
    keeping the public object alive.
    """

    def __init__(self, handle: Any, error_handler: Any = None):
        self.handle = handle
        self.error_handler = error_handler
        self.closed = False
        self._signal = threading.Lock()
        self._in_flight = 0

    @contextmanager
    def interruptible(self) -> Iterator[None]:
        """Mark an operation that ``interrupt()`` is allowed to cancel."""
        with self._signal:
            self._in_flight += 1
        try:
            yield
        finally:
            with self._signal:
                self._in_flight -= 1

    def interrupt(self) -> bool:
        # Bypasses ENGINE_LOCK, which the interrupted call holds.
        with self._signal:
            if self.closed or self._in_flight == 0:
                return False
            z3core.Z3_interrupt(self.handle)
            return True

    def release(self) -> None:
        with self._signal:
            if self.closed:
                return
            self.closed = True
        with ENGINE_LOCK:
            logger.debug(f"delete context {self.handle.value:#x}")
            z3core.Z3_del_context(self.handle)


def release_handle(native: NativeContext, dec_ref: Callable[[Any, Any], None],
                   handle: Any) -> None:
    with ENGINE_LOCK:
        # Deleting the context already reclaimed every handle it issued.
        if native.closed:
            return
        ENGINE_LOCK.call(dec_ref, native.handle, handle)


class Borrowed:
    """Base for objects that are only meaningful inside one ``Context``."""

    def __init__(self, ctx: "Context"):
        self._ctx = ctx

    @property
    def ctx(self) -> "Context":
        """The owning context."""
        return self._ctx

    def _ctx_ref(self) -> Any:
        return self._ctx._ref()

    def _check_same_context(self, other: "Borrowed", what: str = "argument") -> None:
        if not isinstance(other, Borrowed):
            raise TypeError(f"{what} must be a context-scoped object, got {type(other).__name__}")
        if other._ctx is not self._ctx:
            raise ContextMismatchError(
                f"{what} belongs to a different context",
                {"expected": repr(self._ctx), "actual": repr(other._ctx)})


class RefCounted(Borrowed):
    """A borrowed object that also holds one engine reference on its handle.

    Subclasses provide ``_inc_ref`` and ``_dec_ref`` as static functions
    taking ``(context_handle, handle)``.
    """

    @staticmethod
    def _inc_ref(ctx_handle: Any, handle: Any) -> None:
        raise NotImplementedError

    @staticmethod
    def _dec_ref(ctx_handle: Any, handle: Any) -> None:
        raise NotImplementedError

    def __init__(self, ctx: "Context", handle: Any):
        super().__init__(ctx)
        ctx_handle = ctx._ref()
        ENGINE_LOCK.call(self._inc_ref, ctx_handle, handle)
        self._handle = handle
        self._finalizer = ctx._adopt(self, self._dec_ref, handle)

    def _ref(self) -> Any:
        self._ctx._ref()
        return self._handle

