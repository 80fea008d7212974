"""
Function and constant declarations.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional, Sequence, Tuple

from z3 import z3core

from .handle import RefCounted
from .lock import ENGINE_LOCK, require_handle
from .sort import Sort, sort_array
from .symbol import Symbol, SymbolLike

if TYPE_CHECKING:
    from .ast import Ast
    from .context import Context


def _decl_inc_ref(ctx_handle: Any, handle: Any) -> None:
    z3core.Z3_inc_ref(ctx_handle, z3core.Z3_func_decl_to_ast(ctx_handle, handle))


def _decl_dec_ref(ctx_handle: Any, handle: Any) -> None:
    z3core.Z3_dec_ref(ctx_handle, z3core.Z3_func_decl_to_ast(ctx_handle, handle))


class FuncDecl(RefCounted):
    """A declared function signature; a 0-ary declaration denotes a constant.

    The domain and range are recorded when the declaration is created so that
    ``apply`` can reject misapplication before reaching the engine.

    Attributes:
        domain: Argument sorts, in order
        range: Result sort
    """

    _inc_ref = staticmethod(_decl_inc_ref)
    _dec_ref = staticmethod(_decl_dec_ref)

    def __init__(self, ctx: "Context", handle: Any,
                 domain: Optional[Sequence[Sort]] = None, range_sort: Optional[Sort] = None):
        super().__init__(ctx, require_handle(handle, "function declaration"))
        with ENGINE_LOCK:
            if domain is None:
                ctx_ref = ctx._ref()
                size = ENGINE_LOCK.call(z3core.Z3_get_domain_size, ctx_ref, handle)
                domain = [Sort(ctx, ENGINE_LOCK.call(z3core.Z3_get_domain, ctx_ref, handle, i))
                          for i in range(size)]
            if range_sort is None:
                range_sort = Sort(ctx, ENGINE_LOCK.call(z3core.Z3_get_range, ctx._ref(), handle))
        self.domain: Tuple[Sort, ...] = tuple(domain)
        self.range: Sort = range_sort

    @classmethod
    def new(cls, ctx: "Context", name: SymbolLike, domain: Sequence[Sort], range_sort: Sort) -> "FuncDecl":
        """Declare an uninterpreted function.

        Args:
            ctx: Owning context
            name: Declaration name
            domain: Argument sorts; empty for a constant
            range_sort: Result sort

        Returns:
            FuncDecl scoped to ``ctx``
        """
        sym = Symbol.of(ctx, name)
        domain = list(domain)
        for i, s in enumerate(domain):
            ctx._check_owned(s, f"domain sort {i}")
        ctx._check_owned(range_sort, "range sort")
        with ENGINE_LOCK:
            handle = ENGINE_LOCK.call(
                z3core.Z3_mk_func_decl, ctx._ref(), sym._ref(), len(domain), sort_array(domain),
                range_sort._ref())
            return cls(ctx, handle, domain, range_sort)

    @property
    def arity(self) -> int:
        return len(self.domain)

    @property
    def name(self) -> Symbol:
        handle = ENGINE_LOCK.call(z3core.Z3_get_decl_name, self._ctx_ref(), self._ref())
        return Symbol.from_native(self._ctx, handle)

    def apply(self, *args: "Ast") -> "Ast":
        """Apply the declaration to arguments.

        Raises:
            SortMismatchError: On wrong arity or argument sort
        """
        from .ast import app
        return app(self, args)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FuncDecl):
            return NotImplemented
        if other._ctx is not self._ctx:
            return False
        return bool(ENGINE_LOCK.call(
            z3core.Z3_is_eq_func_decl, self._ctx_ref(), self._ref(), other._ref()))

    def __hash__(self) -> int:
        return hash((id(self._ctx), ENGINE_LOCK.call(
            z3core.Z3_get_func_decl_id, self._ctx_ref(), self._ref())))

    def __repr__(self) -> str:
        return f"FuncDecl({self.name}, arity={self.arity})"
