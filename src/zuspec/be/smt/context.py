"""
The logical context: root of every other object's lifetime.
"""
from __future__ import annotations

import logging
import weakref
from typing import TYPE_CHECKING, Any, Callable, Dict, Optional, Sequence

from z3 import z3core

from .config import Config
from .errors import ContextClosedError, ContextMismatchError
from .handle import Borrowed, NativeContext, RefCounted, release_handle
from .lock import ENGINE_LOCK, require_handle
from .sort import EnumSort, Sort
from .symbol import Symbol, SymbolLike

if TYPE_CHECKING:
    from .ast import Ast, Bool
    from .datatype import DatatypeBuilder
    from .func_decl import FuncDecl
    from .solver import Optimize, Solver

logger = logging.getLogger(__name__)


def _ignore_native_error(ctx_handle, error_code) -> None:
    # Errors are read back through the error code after every call. Without
    # a handler installed the engine would terminate the process.
    return None


class Context:
    """Manager of all other engine objects.

    A context exclusively owns one native handle. Every object derived from
    it keeps it alive, so the handle is released only after all of them are
    gone. ``close()`` tears down deterministically: live derived objects
    first, then the context. Using a derived object afterwards raises
    ``ContextClosedError``.

    Apart from ``interrupt()``, a context must not be used from two threads
    at the same time.

    Example:
        >>> cfg = Config()
        >>> cfg.set_model_generation(True)
        >>> with Context(cfg) as ctx:
        ...     solver = ctx.solver()
        ...     x = Int.new_const(ctx, "x")
        ...     solver.assert_(x.gt(3))
        ...     solver.check()
    """

    def __init__(self, config: Optional[Config] = None):
        """Create a context from a configuration.

        Args:
            config: Options to apply; consumed by this call. Defaults to an
                empty configuration.

        Raises:
            ConfigError: If a key or value is rejected
            ConfigConsumedError: If ``config`` already created a context
        """
        if config is None:
            config = Config()
        with ENGINE_LOCK:
            cfg = config._consume()
            try:
                handle = require_handle(ENGINE_LOCK.call(z3core.Z3_mk_context_rc, cfg), "context")
            finally:
                ENGINE_LOCK.call(z3core.Z3_del_config, cfg)
            # The returned callback must stay alive as long as the handle.
            error_handler = z3core.Z3_set_error_handler(handle, _ignore_native_error)
        logger.debug(f"new context {handle.value:#x}")
        self._native = NativeContext(handle, error_handler)
        self._borrowers: Dict[int, weakref.ref] = {}
        self._symbols = weakref.WeakValueDictionary()
        self._finalizer = weakref.finalize(self, self._native.release)

    # Lifetime

    @property
    def closed(self) -> bool:
        return self._native.closed

    def _ref(self) -> Any:
        if self._native.closed:
            raise ContextClosedError("context has been closed")
        return self._native.handle

    def _adopt(self, obj: RefCounted, dec_ref: Callable[[Any, Any], None], handle: Any):
        """Track a reference-counted object and return its release finalizer."""
        finalizer = weakref.finalize(obj, release_handle, self._native, dec_ref, handle)
        # Keyed by identity: distinct wrappers of equal handles are all tracked.
        key = id(obj)
        borrowers = self._borrowers
        borrowers[key] = weakref.ref(obj, lambda _, key=key: borrowers.pop(key, None))
        return finalizer

    def _check_owned(self, obj: Borrowed, what: str = "argument") -> None:
        if not isinstance(obj, Borrowed):
            raise TypeError(f"{what} must be a context-scoped object, got {type(obj).__name__}")
        if obj.ctx is not self:
            raise ContextMismatchError(f"{what} belongs to a different context")

    def close(self) -> None:
        """Release every live derived handle, then the context itself.

        Calling ``close()`` more than once has no further effect.
        """
        if self._native.closed:
            return
        live = [obj for obj in (r() for r in list(self._borrowers.values())) if obj is not None]
        for obj in live:
            obj._finalizer()
        logger.debug(f"closing context with {len(live)} live derived object(s)")
        self._borrowers.clear()
        self._finalizer()

    def __enter__(self) -> "Context":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def interrupt(self) -> bool:
        """Request cancellation of the operation currently running on this context.

        Safe to call from any thread, including while another thread is
        blocked in a check. Cancellation is cooperative: the interrupted call
        still returns, typically with an UNKNOWN result. With nothing in
        flight this is a no-op, so it never affects a later check.

        Returns:
            True if an in-flight operation was signalled
        """
        signalled = self._native.interrupt()
        if signalled:
            logger.debug("interrupt forwarded to running operation")
        return signalled

    # Helpers for common constructions

    def symbol(self, value: SymbolLike) -> Symbol:
        """Return the interned symbol for an int or str."""
        if isinstance(value, Symbol):
            self._check_owned(value, "symbol")
            return value
        key = (type(value), value)
        sym = self._symbols.get(key)
        if sym is None:
            sym = Symbol._create(self, value)
            self._symbols[key] = sym
        return sym

    def bool_sort(self) -> Sort:
        return Sort.boolean(self)

    def int_sort(self) -> Sort:
        return Sort.integer(self)

    def real_sort(self) -> Sort:
        return Sort.real(self)

    def bitvector_sort(self, width: int) -> Sort:
        return Sort.bitvector(self, width)

    def array_sort(self, domain: Sort, range_sort: Sort) -> Sort:
        return Sort.array(self, domain, range_sort)

    def set_sort(self, element: Sort) -> Sort:
        return Sort.set_of(self, element)

    def uninterpreted_sort(self, name: SymbolLike) -> Sort:
        return Sort.uninterpreted(self, name)

    def enumeration_sort(self, name: SymbolLike, enum_names: Sequence[SymbolLike]) -> EnumSort:
        """Create an enumeration sort; see ``Sort.enumeration``."""
        return Sort.enumeration(self, name, enum_names)

    def func_decl(self, name: SymbolLike, domain: Sequence[Sort], range_sort: Sort) -> "FuncDecl":
        from .func_decl import FuncDecl
        return FuncDecl.new(self, name, domain, range_sort)

    def datatype_builder(self) -> "DatatypeBuilder":
        from .datatype import DatatypeBuilder
        return DatatypeBuilder(self)

    def solver(self) -> "Solver":
        from .solver import Solver
        return Solver(self)

    def optimize(self) -> "Optimize":
        from .solver import Optimize
        return Optimize(self)

    def forall_const(self, bounds: Sequence["Ast"], body: "Bool") -> "Bool":
        """Create a universal quantifier over constants.

        Example:
            >>> f = ctx.func_decl("f", [ctx.int_sort()], ctx.int_sort())
            >>> x = Int.new_const(ctx, "x")
            >>> solver.assert_(ctx.forall_const([x], x.eq(f.apply(x))))
        """
        from .ast import forall_const
        return forall_const(self, bounds, body)

    def __repr__(self) -> str:
        state = "closed" if self._native.closed else f"{self._native.handle.value:#x}"
        return f"Context({state})"
