"""
Process-wide serialization of native engine entry points.

Z3 is only mostly thread-safe: a few library-level initializers race when
entered from several threads at once. Every call into ``z3core`` therefore
goes through the single ``ENGINE_LOCK`` below. The one exception is
``Z3_interrupt``, which must be able to reach the engine while another
thread is blocked inside a check.
"""
import threading
from typing import Any, Callable

from z3.z3types import Z3Exception

from .errors import EngineError, NullHandleError


class GlobalLock:
    """Re-entrant guard around the native engine.

    The lock is re-entrant because handle finalizers may run during garbage
    collection while the same thread already holds it.

    Usage:
        >>> with ENGINE_LOCK:
        ...     a = ENGINE_LOCK.call(z3core.Z3_mk_int_sort, ctx)
        ...     b = ENGINE_LOCK.call(z3core.Z3_mk_bool_sort, ctx)
    """

    def __init__(self):
        self._lock = threading.RLock()

    def __enter__(self) -> "GlobalLock":
        self._lock.acquire()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self._lock.release()

    def call(self, fn: Callable[..., Any], *args: Any) -> Any:
        """Invoke a native entry point while holding the lock.

        Args:
            fn: ``z3core`` function to call
            *args: Arguments forwarded unchanged

        Returns:
            Whatever the entry point returns

        Raises:
            EngineError: If the engine reports an error code for the call
        """
        with self._lock:
            try:
                return fn(*args)
            except Z3Exception as exc:
                name = getattr(fn, "__name__", repr(fn))
                raise EngineError(f"{name}: {exc}", name) from exc


ENGINE_LOCK = GlobalLock()


def require_handle(handle: Any, what: str) -> Any:
    """Return ``handle`` unless it is null.

    Raises:
        NullHandleError: If the engine produced a null handle
    """
    if handle is None or not handle:
        raise NullHandleError(f"engine returned a null {what} handle", {"what": what})
    return handle
