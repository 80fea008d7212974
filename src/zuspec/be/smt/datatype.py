"""
Algebraic datatype construction.

A ``DatatypeBuilder`` records variants and realizes them against the engine
in a single batch when ``finish`` is called. Batching is required because a
field may refer to the datatype being declared (``SELF``), which cannot be
resolved until every variant is known.

Example:
    >>> int_sort = ctx.int_sort()
    >>> int_list = (
    ...     DatatypeBuilder(ctx)
    ...     .variant("Nil", [])
    ...     .variant("Cons", [("head", int_sort), ("tail", SELF)])
    ...     .finish("IntList"))
    >>> nil, cons = int_list.variants
    >>> cons.constructor.arity
    2
"""
from __future__ import annotations

import ctypes
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Sequence, Tuple, Union

from z3 import z3core
from z3 import z3types as native

from .errors import BuilderConsumedError, DeclarationError
from .func_decl import FuncDecl
from .lock import ENGINE_LOCK
from .sort import Sort, SortKind, check_unique_names
from .symbol import Symbol, SymbolLike

if TYPE_CHECKING:
    from .context import Context

logger = logging.getLogger(__name__)


class _SelfReference:
    """Placeholder field sort meaning "the datatype under construction"."""

    def __repr__(self) -> str:
        return "SELF"


SELF = _SelfReference()

FieldSort = Union[Sort, _SelfReference]


@dataclass(frozen=True)
class DatatypeVariant:
    """Constructor, tester, and accessors of one finished variant.

    Attributes:
        constructor: Builds a value of this variant; arity equals the field count
        tester: Unary predicate that holds for values of this variant
        accessors: One unary declaration per field, in declaration order
    """
    constructor: FuncDecl
    tester: FuncDecl
    accessors: Tuple[FuncDecl, ...]


@dataclass(frozen=True)
class DatatypeSort:
    """A finished algebraic datatype.

    Attributes:
        sort: The datatype sort
        variants: One entry per declared variant, in declaration order
    """
    sort: Sort
    variants: Tuple[DatatypeVariant, ...]

    def variant(self, name: SymbolLike) -> DatatypeVariant:
        """Look up a variant by constructor name.

        Raises:
            KeyError: If no variant has that name
        """
        sym = Symbol.of(self.sort.ctx, name)
        for v in self.variants:
            if v.constructor.name == sym:
                return v
        raise KeyError(str(sym))


@dataclass(frozen=True)
class _Declaration:
    name: Symbol
    fields: Tuple[Tuple[Symbol, FieldSort], ...]


class DatatypeBuilder:
    """Two-phase builder: declare variants, then ``finish`` exactly once.

    After ``finish`` the builder is consumed; every further call raises
    ``BuilderConsumedError``.
    """

    def __init__(self, ctx: "Context"):
        self._ctx = ctx
        self._decls: List[_Declaration] = []
        self._consumed = False

    @property
    def ctx(self) -> "Context":
        return self._ctx

    def _check_building(self) -> None:
        if self._consumed:
            raise BuilderConsumedError("datatype builder already finished")

    def variant(self, name: SymbolLike,
                fields: Sequence[Tuple[SymbolLike, FieldSort]] = ()) -> "DatatypeBuilder":
        """Record one variant.

        Args:
            name: Constructor name
            fields: Ordered ``(accessor name, sort)`` pairs; use ``SELF`` for
                a field of the datatype being built

        Returns:
            This builder, for chaining

        Raises:
            BuilderConsumedError: If ``finish`` was already called
            DeclarationError: If the variant or an accessor name is already declared
        """
        self._check_building()
        ctx = self._ctx
        sym = Symbol.of(ctx, name)
        recorded = []
        for field_name, field_sort in fields:
            if field_sort is not SELF:
                if not isinstance(field_sort, Sort):
                    raise TypeError(
                        f"field '{field_name}' must be a Sort or SELF, got {type(field_sort).__name__}")
                ctx._check_owned(field_sort, f"sort of field '{field_name}'")
            recorded.append((Symbol.of(ctx, field_name), field_sort))

        check_unique_names([d.name for d in self._decls] + [sym], "datatype variant")
        check_unique_names(
            [f for d in self._decls for f, _ in d.fields] + [f for f, _ in recorded],
            "datatype accessor")

        self._decls.append(_Declaration(sym, tuple(recorded)))
        return self

    def finish(self, name: SymbolLike) -> DatatypeSort:
        """Realize all recorded variants as one datatype sort.

        Args:
            name: Name of the datatype

        Returns:
            DatatypeSort whose ``variants`` follow declaration order

        Raises:
            BuilderConsumedError: If ``finish`` was already called
            DeclarationError: If no variant was declared
        """
        self._check_building()
        self._consumed = True
        ctx = self._ctx
        sym = Symbol.of(ctx, name)
        if not self._decls:
            raise DeclarationError(f"datatype '{sym}' needs at least one variant")

        num = len(self._decls)
        constructors = (native.Constructor * num)()
        with ENGINE_LOCK, ctx._native.interruptible():
            ctx_ref = ctx._ref()
            made = 0
            try:
                for i, decl in enumerate(self._decls):
                    constructors[i] = self._mk_constructor(ctx_ref, decl)
                    made += 1
                handle = ENGINE_LOCK.call(
                    z3core.Z3_mk_datatype, ctx_ref, sym._ref(), num, constructors)
                sort = Sort(ctx, handle, SortKind.DATATYPE)
            finally:
                for i in range(made):
                    ENGINE_LOCK.call(z3core.Z3_del_constructor, ctx_ref, constructors[i])
            variants = tuple(self._read_variant(sort, i, len(decl.fields))
                             for i, decl in enumerate(self._decls))

        logger.debug(f"datatype {sym} finished with {num} variants")
        return DatatypeSort(sort, variants)

    @staticmethod
    def _mk_constructor(ctx_ref, decl: _Declaration):
        n = len(decl.fields)
        field_names = (native.Symbol * n)()
        sorts = (native.Sort * n)()
        refs = (ctypes.c_uint * n)()
        for k, (field_name, field_sort) in enumerate(decl.fields):
            field_names[k] = field_name._ref()
            if field_sort is SELF:
                # A null sort with ref index 0 points back at the datatype itself.
                sorts[k] = None
                refs[k] = 0
            else:
                sorts[k] = field_sort._ref()
                refs[k] = 0
        recognizer = Symbol.of(decl.name.ctx, f"is-{decl.name}")
        return ENGINE_LOCK.call(
            z3core.Z3_mk_constructor, ctx_ref, decl.name._ref(), recognizer._ref(),
            n, field_names, sorts, refs)

    def _read_variant(self, sort: Sort, index: int, num_fields: int) -> DatatypeVariant:
        ctx = self._ctx
        ctx_ref = ctx._ref()
        s = sort._ref()
        constructor = FuncDecl(
            ctx, ENGINE_LOCK.call(z3core.Z3_get_datatype_sort_constructor, ctx_ref, s, index))
        tester = FuncDecl(
            ctx, ENGINE_LOCK.call(z3core.Z3_get_datatype_sort_recognizer, ctx_ref, s, index))
        accessors = tuple(
            FuncDecl(ctx, ENGINE_LOCK.call(
                z3core.Z3_get_datatype_sort_constructor_accessor, ctx_ref, s, index, k))
            for k in range(num_fields))
        return DatatypeVariant(constructor, tester, accessors)
