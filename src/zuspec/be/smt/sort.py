"""
Sorts: the type descriptors of the engine's logic.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING, Any, List, NamedTuple, Optional, Sequence, Tuple

from z3 import z3core
from z3 import z3types as native
from z3.z3consts import (
    Z3_ARRAY_SORT,
    Z3_BOOL_SORT,
    Z3_BV_SORT,
    Z3_DATATYPE_SORT,
    Z3_INT_SORT,
    Z3_REAL_SORT,
    Z3_UNINTERPRETED_SORT,
)

from .errors import DeclarationError
from .handle import RefCounted
from .lock import ENGINE_LOCK, require_handle
from .symbol import Symbol, SymbolLike

if TYPE_CHECKING:
    from .context import Context
    from .func_decl import FuncDecl

logger = logging.getLogger(__name__)


class SortKind(Enum):
    """Kind tag recorded for every sort."""
    BOOL = "bool"
    INT = "int"
    REAL = "real"
    BITVECTOR = "bitvector"
    ARRAY = "array"
    SET = "set"
    ENUMERATION = "enumeration"
    UNINTERPRETED = "uninterpreted"
    DATATYPE = "datatype"
    OTHER = "other"


_NATIVE_KINDS = {
    Z3_BOOL_SORT: SortKind.BOOL,
    Z3_INT_SORT: SortKind.INT,
    Z3_REAL_SORT: SortKind.REAL,
    Z3_BV_SORT: SortKind.BITVECTOR,
    Z3_ARRAY_SORT: SortKind.ARRAY,
    Z3_DATATYPE_SORT: SortKind.DATATYPE,
    Z3_UNINTERPRETED_SORT: SortKind.UNINTERPRETED,
}


def _sort_inc_ref(ctx_handle: Any, handle: Any) -> None:
    z3core.Z3_inc_ref(ctx_handle, z3core.Z3_sort_to_ast(ctx_handle, handle))


def _sort_dec_ref(ctx_handle: Any, handle: Any) -> None:
    z3core.Z3_dec_ref(ctx_handle, z3core.Z3_sort_to_ast(ctx_handle, handle))


class EnumSort(NamedTuple):
    """Result of ``Sort.enumeration``; lists are aligned with the input names."""
    sort: "Sort"
    constructors: Tuple["FuncDecl", ...]
    testers: Tuple["FuncDecl", ...]


def check_unique_names(names: Sequence[Symbol], what: str) -> None:
    """Reject a declaration whose names collide.

    Raises:
        DeclarationError: If two entries denote the same symbol
    """
    seen = set()
    for name in names:
        if name in seen:
            raise DeclarationError(f"duplicate {what} name '{name}'", {"name": str(name)})
        seen.add(name)


class Sort(RefCounted):
    """An immutable type descriptor scoped to a context.

    Equality is structural as reported by the engine; sorts from different
    contexts never compare equal.
    """

    _inc_ref = staticmethod(_sort_inc_ref)
    _dec_ref = staticmethod(_sort_dec_ref)

    def __init__(self, ctx: "Context", handle: Any, kind: Optional[SortKind] = None):
        super().__init__(ctx, require_handle(handle, "sort"))
        if kind is None:
            native_kind = ENGINE_LOCK.call(z3core.Z3_get_sort_kind, ctx._ref(), handle)
            kind = _NATIVE_KINDS.get(native_kind, SortKind.OTHER)
        self.kind = kind

    # Factories

    @classmethod
    def boolean(cls, ctx: "Context") -> "Sort":
        with ENGINE_LOCK:
            return cls(ctx, ENGINE_LOCK.call(z3core.Z3_mk_bool_sort, ctx._ref()), SortKind.BOOL)

    @classmethod
    def integer(cls, ctx: "Context") -> "Sort":
        with ENGINE_LOCK:
            return cls(ctx, ENGINE_LOCK.call(z3core.Z3_mk_int_sort, ctx._ref()), SortKind.INT)

    @classmethod
    def real(cls, ctx: "Context") -> "Sort":
        with ENGINE_LOCK:
            return cls(ctx, ENGINE_LOCK.call(z3core.Z3_mk_real_sort, ctx._ref()), SortKind.REAL)

    @classmethod
    def bitvector(cls, ctx: "Context", width: int) -> "Sort":
        """Create a bit-vector sort.

        Args:
            ctx: Owning context
            width: Positive bit width

        Raises:
            DeclarationError: If ``width`` is not a positive integer
        """
        if isinstance(width, bool) or not isinstance(width, int) or width <= 0:
            raise DeclarationError(f"bit-vector width must be a positive integer, got {width!r}")
        with ENGINE_LOCK:
            handle = ENGINE_LOCK.call(z3core.Z3_mk_bv_sort, ctx._ref(), width)
            return cls(ctx, handle, SortKind.BITVECTOR)

    @classmethod
    def array(cls, ctx: "Context", domain: "Sort", range_sort: "Sort") -> "Sort":
        ctx._check_owned(domain, "array domain")
        ctx._check_owned(range_sort, "array range")
        with ENGINE_LOCK:
            handle = ENGINE_LOCK.call(z3core.Z3_mk_array_sort, ctx._ref(), domain._ref(), range_sort._ref())
            return cls(ctx, handle, SortKind.ARRAY)

    @classmethod
    def set_of(cls, ctx: "Context", element: "Sort") -> "Sort":
        ctx._check_owned(element, "set element")
        with ENGINE_LOCK:
            handle = ENGINE_LOCK.call(z3core.Z3_mk_set_sort, ctx._ref(), element._ref())
            return cls(ctx, handle, SortKind.SET)

    @classmethod
    def uninterpreted(cls, ctx: "Context", name: SymbolLike) -> "Sort":
        sym = Symbol.of(ctx, name)
        with ENGINE_LOCK:
            handle = ENGINE_LOCK.call(z3core.Z3_mk_uninterpreted_sort, ctx._ref(), sym._ref())
            return cls(ctx, handle, SortKind.UNINTERPRETED)

    @classmethod
    def enumeration(cls, ctx: "Context", name: SymbolLike,
                    enum_names: Sequence[SymbolLike]) -> EnumSort:
        """Create an enumeration sort.

        Args:
            ctx: Owning context
            name: Name of the sort
            enum_names: Variant names, in order

        Returns:
            EnumSort with the sort, one 0-ary constructor per variant, and
            one tester per variant, both in the order of ``enum_names``

        Raises:
            DeclarationError: If ``enum_names`` is empty or contains duplicates

        Example:
            >>> colors, consts, testers = Sort.enumeration(ctx, "Color", ["Red", "Green", "Blue"])
            >>> red = consts[0].apply()
            >>> is_red = testers[0].apply(red)
        """
        from .func_decl import FuncDecl

        sym = Symbol.of(ctx, name)
        syms = [Symbol.of(ctx, n) for n in enum_names]
        if not syms:
            raise DeclarationError(f"enumeration '{sym}' needs at least one variant")
        check_unique_names(syms, "enumeration variant")

        num = len(syms)
        names = (native.Symbol * num)()
        for i, s in enumerate(syms):
            names[i] = s._ref()
        consts = (native.FuncDecl * num)()
        testers = (native.FuncDecl * num)()
        with ENGINE_LOCK:
            bool_sort = cls.boolean(ctx)
            handle = ENGINE_LOCK.call(
                z3core.Z3_mk_enumeration_sort, ctx._ref(), sym._ref(), num, names, consts, testers)
            # Signatures are passed in so every output handle is referenced
            # before the next call that returns a term.
            sort = cls(ctx, handle, SortKind.ENUMERATION)
            result = EnumSort(
                sort,
                tuple(FuncDecl(ctx, consts[i], (), sort) for i in range(num)),
                tuple(FuncDecl(ctx, testers[i], (sort,), bool_sort) for i in range(num)),
            )
        logger.debug(f"enumeration sort {sym} with {num} variants")
        return result

    # Queries

    @property
    def name(self) -> Symbol:
        handle = ENGINE_LOCK.call(z3core.Z3_get_sort_name, self._ctx_ref(), self._ref())
        return Symbol.from_native(self._ctx, handle)

    @property
    def bv_size(self) -> Optional[int]:
        """Bit width for bit-vector sorts, None otherwise."""
        if self.kind != SortKind.BITVECTOR:
            return None
        return ENGINE_LOCK.call(z3core.Z3_get_bv_sort_size, self._ctx_ref(), self._ref())

    @property
    def array_domain(self) -> Optional["Sort"]:
        if self.kind not in (SortKind.ARRAY, SortKind.SET):
            return None
        with ENGINE_LOCK:
            handle = ENGINE_LOCK.call(z3core.Z3_get_array_sort_domain, self._ctx_ref(), self._ref())
            return Sort(self._ctx, handle)

    @property
    def array_range(self) -> Optional["Sort"]:
        if self.kind not in (SortKind.ARRAY, SortKind.SET):
            return None
        with ENGINE_LOCK:
            handle = ENGINE_LOCK.call(z3core.Z3_get_array_sort_range, self._ctx_ref(), self._ref())
            return Sort(self._ctx, handle)

    @property
    def num_constructors(self) -> int:
        """Number of variants for enumeration and datatype sorts, 0 otherwise."""
        if self.kind not in (SortKind.ENUMERATION, SortKind.DATATYPE):
            return 0
        return ENGINE_LOCK.call(
            z3core.Z3_get_datatype_sort_num_constructors, self._ctx_ref(), self._ref())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Sort):
            return NotImplemented
        if other._ctx is not self._ctx:
            return False
        return bool(ENGINE_LOCK.call(z3core.Z3_is_eq_sort, self._ctx_ref(), self._ref(), other._ref()))

    def __hash__(self) -> int:
        return hash((id(self._ctx), ENGINE_LOCK.call(z3core.Z3_get_sort_id, self._ctx_ref(), self._ref())))

    def __repr__(self) -> str:
        return f"Sort({self.kind.value})"


def sort_array(sorts: List[Sort]):
    """Pack sorts into a native array for calls that take ``Z3_sort*``."""
    arr = (native.Sort * len(sorts))()
    for i, s in enumerate(sorts):
        arr[i] = s._ref()
    return arr
