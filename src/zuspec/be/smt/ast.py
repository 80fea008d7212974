"""
Thin expression layer used to feed the solver and read models.

Only what is needed to build constraints over declared sorts and function
declarations is provided here: constants, numerals, equality, boolean
connectives, integer arithmetic and comparisons, function application and
universal quantification.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional, Sequence, Union

from z3 import z3core
from z3 import z3types as native
from z3.z3consts import Z3_L_FALSE, Z3_L_TRUE

from .errors import SortMismatchError
from .handle import RefCounted
from .lock import ENGINE_LOCK, require_handle
from .sort import Sort, SortKind
from .symbol import Symbol, SymbolLike

if TYPE_CHECKING:
    from .context import Context
    from .func_decl import FuncDecl


def _ast_inc_ref(ctx_handle: Any, handle: Any) -> None:
    z3core.Z3_inc_ref(ctx_handle, handle)


def _ast_dec_ref(ctx_handle: Any, handle: Any) -> None:
    z3core.Z3_dec_ref(ctx_handle, handle)


def ast_array(args: Sequence["Ast"]):
    arr = (native.Ast * len(args))()
    for i, a in enumerate(args):
        arr[i] = a._ref()
    return arr


class Ast(RefCounted):
    """A term of any sort."""

    _inc_ref = staticmethod(_ast_inc_ref)
    _dec_ref = staticmethod(_ast_dec_ref)

    def __init__(self, ctx: "Context", handle: Any):
        super().__init__(ctx, require_handle(handle, "ast"))

    @staticmethod
    def wrap(ctx: "Context", handle: Any) -> "Ast":
        """Wrap an engine term in the class matching its sort."""
        with ENGINE_LOCK:
            # Hold a reference on the new term while its sort is inspected.
            term = Ast(ctx, handle)
            cls = _TERM_CLASSES.get(term.sort.kind, Ast)
            if cls is Ast:
                return term
            return cls(ctx, handle)

    @property
    def sort(self) -> Sort:
        with ENGINE_LOCK:
            return Sort(self._ctx, ENGINE_LOCK.call(z3core.Z3_get_sort, self._ctx_ref(), self._ref()))

    def eq(self, other: "Ast") -> "Bool":
        """Build the equality ``self == other``."""
        self._check_same_context(other)
        with ENGINE_LOCK:
            return Bool(self._ctx, ENGINE_LOCK.call(
                z3core.Z3_mk_eq, self._ctx_ref(), self._ref(), other._ref()))

    def is_numeral(self) -> bool:
        return bool(ENGINE_LOCK.call(z3core.Z3_is_numeral_ast, self._ctx_ref(), self._ref()))

    def _numeral(self) -> Optional[int]:
        if not self.is_numeral():
            return None
        return int(ENGINE_LOCK.call(z3core.Z3_get_numeral_string, self._ctx_ref(), self._ref()))

    def __eq__(self, other: object) -> bool:
        # Structural identity, not a constraint; use eq() to build one.
        if not isinstance(other, Ast):
            return NotImplemented
        if other._ctx is not self._ctx:
            return False
        return bool(ENGINE_LOCK.call(z3core.Z3_is_eq_ast, self._ctx_ref(), self._ref(), other._ref()))

    def __hash__(self) -> int:
        return hash((id(self._ctx), ENGINE_LOCK.call(z3core.Z3_get_ast_id, self._ctx_ref(), self._ref())))

    def __repr__(self) -> str:
        return f"{type(self).__name__}(#{ENGINE_LOCK.call(z3core.Z3_get_ast_id, self._ctx_ref(), self._ref())})"


def const(ctx: "Context", name: SymbolLike, sort: Sort) -> Ast:
    """Create a constant of an arbitrary sort."""
    ctx._check_owned(sort, "constant sort")
    sym = Symbol.of(ctx, name)
    with ENGINE_LOCK:
        handle = ENGINE_LOCK.call(z3core.Z3_mk_const, ctx._ref(), sym._ref(), sort._ref())
        return Ast.wrap(ctx, handle)


class Bool(Ast):
    """A boolean term."""

    @classmethod
    def new_const(cls, ctx: "Context", name: SymbolLike) -> "Bool":
        return const(ctx, name, Sort.boolean(ctx))

    @classmethod
    def from_bool(cls, ctx: "Context", value: bool) -> "Bool":
        fn = z3core.Z3_mk_true if value else z3core.Z3_mk_false
        with ENGINE_LOCK:
            return cls(ctx, ENGINE_LOCK.call(fn, ctx._ref()))

    def as_bool(self) -> Optional[bool]:
        """Python value of a literal ``true``/``false``, None otherwise."""
        value = ENGINE_LOCK.call(z3core.Z3_get_bool_value, self._ctx_ref(), self._ref())
        if value == Z3_L_TRUE:
            return True
        if value == Z3_L_FALSE:
            return False
        return None

    def not_(self) -> "Bool":
        with ENGINE_LOCK:
            return Bool(self._ctx, ENGINE_LOCK.call(z3core.Z3_mk_not, self._ctx_ref(), self._ref()))

    def _nary(self, fn, others: Sequence["Bool"]) -> "Bool":
        args = [self, *others]
        for a in others:
            self._check_same_context(a)
        with ENGINE_LOCK:
            return Bool(self._ctx, ENGINE_LOCK.call(fn, self._ctx_ref(), len(args), ast_array(args)))

    def and_(self, *others: "Bool") -> "Bool":
        return self._nary(z3core.Z3_mk_and, others)

    def or_(self, *others: "Bool") -> "Bool":
        return self._nary(z3core.Z3_mk_or, others)

    def implies(self, other: "Bool") -> "Bool":
        self._check_same_context(other)
        with ENGINE_LOCK:
            return Bool(self._ctx, ENGINE_LOCK.call(
                z3core.Z3_mk_implies, self._ctx_ref(), self._ref(), other._ref()))


class Int(Ast):
    """An integer term."""

    @classmethod
    def new_const(cls, ctx: "Context", name: SymbolLike) -> "Int":
        return const(ctx, name, Sort.integer(ctx))

    @classmethod
    def from_int(cls, ctx: "Context", value: int) -> "Int":
        with ENGINE_LOCK:
            sort = Sort.integer(ctx)
            return cls(ctx, ENGINE_LOCK.call(z3core.Z3_mk_numeral, ctx._ref(), str(int(value)), sort._ref()))

    def as_int(self) -> Optional[int]:
        return self._numeral()

    def _coerce(self, other: Union["Int", int]) -> "Int":
        if isinstance(other, int) and not isinstance(other, bool):
            return Int.from_int(self._ctx, other)
        self._check_same_context(other)
        return other

    def _arith(self, fn, other: Union["Int", int]) -> "Int":
        args = [self, self._coerce(other)]
        with ENGINE_LOCK:
            return Int(self._ctx, ENGINE_LOCK.call(fn, self._ctx_ref(), 2, ast_array(args)))

    def _cmp(self, fn, other: Union["Int", int]) -> Bool:
        other = self._coerce(other)
        with ENGINE_LOCK:
            return Bool(self._ctx, ENGINE_LOCK.call(fn, self._ctx_ref(), self._ref(), other._ref()))

    def __add__(self, other):
        return self._arith(z3core.Z3_mk_add, other)

    def __sub__(self, other):
        return self._arith(z3core.Z3_mk_sub, other)

    def __mul__(self, other):
        return self._arith(z3core.Z3_mk_mul, other)

    def lt(self, other: Union["Int", int]) -> Bool:
        return self._cmp(z3core.Z3_mk_lt, other)

    def le(self, other: Union["Int", int]) -> Bool:
        return self._cmp(z3core.Z3_mk_le, other)

    def gt(self, other: Union["Int", int]) -> Bool:
        return self._cmp(z3core.Z3_mk_gt, other)

    def ge(self, other: Union["Int", int]) -> Bool:
        return self._cmp(z3core.Z3_mk_ge, other)


class BitVec(Ast):
    """A bit-vector term."""

    @classmethod
    def new_const(cls, ctx: "Context", name: SymbolLike, width: int) -> "BitVec":
        return const(ctx, name, Sort.bitvector(ctx, width))

    @classmethod
    def from_int(cls, ctx: "Context", value: int, width: int) -> "BitVec":
        with ENGINE_LOCK:
            sort = Sort.bitvector(ctx, width)
            return cls(ctx, ENGINE_LOCK.call(z3core.Z3_mk_numeral, ctx._ref(), str(int(value)), sort._ref()))

    @property
    def width(self) -> int:
        return self.sort.bv_size

    def as_int(self) -> Optional[int]:
        """Unsigned value of a bit-vector literal, None otherwise."""
        return self._numeral()


_TERM_CLASSES = {
    SortKind.BOOL: Bool,
    SortKind.INT: Int,
    SortKind.BITVECTOR: BitVec,
}


def app(decl: "FuncDecl", args: Sequence[Ast]) -> Ast:
    """Apply ``decl`` after checking arity and argument sorts.

    Raises:
        SortMismatchError: If the arity or any argument sort does not match
    """
    if len(args) != decl.arity:
        raise SortMismatchError(
            f"{decl.name} expects {decl.arity} argument(s), got {len(args)}",
            {"expected": decl.arity, "actual": len(args)})
    for i, (arg, expected) in enumerate(zip(args, decl.domain)):
        decl._check_same_context(arg, f"argument {i}")
        if arg.sort != expected:
            raise SortMismatchError(
                f"argument {i} of {decl.name} has sort {arg.sort.name}, expected {expected.name}",
                {"position": i})
    ctx = decl.ctx
    with ENGINE_LOCK:
        handle = ENGINE_LOCK.call(
            z3core.Z3_mk_app, ctx._ref(), decl._ref(), len(args), ast_array(list(args)))
        return Ast.wrap(ctx, handle)


def forall_const(ctx: "Context", bounds: Sequence[Ast], body: Bool) -> Bool:
    """Universally quantify ``body`` over the constants in ``bounds``."""
    for i, b in enumerate(bounds):
        ctx._check_owned(b, f"bound {i}")
    ctx._check_owned(body, "quantifier body")
    patterns = (native.Pattern * 0)()
    with ENGINE_LOCK:
        handle = ENGINE_LOCK.call(
            z3core.Z3_mk_forall_const, ctx._ref(), 0, len(bounds), ast_array(list(bounds)),
            0, patterns, body._ref())
        return Bool(ctx, handle)
