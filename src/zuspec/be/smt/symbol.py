"""
Symbols name sorts, declarations, and datatype variants.
"""
from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any, Union

from z3 import z3core
from z3.z3consts import Z3_INT_SYMBOL

from .errors import DeclarationError
from .handle import Borrowed
from .lock import ENGINE_LOCK

if TYPE_CHECKING:
    from .context import Context

SymbolLike = Union["Symbol", str, int]

# Z3_mk_int_symbol takes a signed C int.
MAX_INT_SYMBOL = 2**31 - 1


class SymbolKind(Enum):
    """Variant of a symbol."""
    INT = "int"
    STRING = "string"


class Symbol(Borrowed):
    """An engine-interned name or integer identifier.

    Symbols are not reference counted by the engine. Equal inputs within
    one context map to the same engine symbol, and ``Context.symbol``
    additionally returns the same Python object for them.

    Attributes:
        kind: Whether this is an integer or string symbol
        value: The integer or string the symbol was built from
    """

    def __init__(self, ctx: "Context", handle: Any, kind: SymbolKind, value: Union[int, str]):
        super().__init__(ctx)
        self._handle = handle
        self.kind = kind
        self.value = value

    @classmethod
    def of(cls, ctx: "Context", value: SymbolLike) -> "Symbol":
        """Create (or fetch the interned) symbol for ``value`` in ``ctx``.

        Args:
            ctx: Owning context
            value: A string, a non-negative integer, or an existing Symbol

        Returns:
            Symbol scoped to ``ctx``
        """
        return ctx.symbol(value)

    @classmethod
    def _create(cls, ctx: "Context", value: Union[int, str]) -> "Symbol":
        if isinstance(value, bool) or not isinstance(value, (int, str)):
            raise DeclarationError(
                f"symbol must be built from int or str, got {type(value).__name__}")
        # A null handle is valid here: the engine encodes "" as the null symbol.
        if isinstance(value, int):
            if not 0 <= value <= MAX_INT_SYMBOL:
                raise DeclarationError(
                    f"integer symbol must be in [0, {MAX_INT_SYMBOL}], got {value}",
                    {"value": value})
            handle = ENGINE_LOCK.call(z3core.Z3_mk_int_symbol, ctx._ref(), value)
            return cls(ctx, handle, SymbolKind.INT, value)
        handle = ENGINE_LOCK.call(z3core.Z3_mk_string_symbol, ctx._ref(), value)
        return cls(ctx, handle, SymbolKind.STRING, value)

    @classmethod
    def from_native(cls, ctx: "Context", handle: Any) -> "Symbol":
        """Decode a symbol returned by the engine (e.g. a declaration name)."""
        if not handle:
            return ctx.symbol("")
        with ENGINE_LOCK:
            ctx_ref = ctx._ref()
            if ENGINE_LOCK.call(z3core.Z3_get_symbol_kind, ctx_ref, handle) == Z3_INT_SYMBOL:
                value = ENGINE_LOCK.call(z3core.Z3_get_symbol_int, ctx_ref, handle)
            else:
                value = ENGINE_LOCK.call(z3core.Z3_get_symbol_string, ctx_ref, handle)
        return ctx.symbol(value)

    def _ref(self) -> Any:
        self._ctx._ref()
        return self._handle

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Symbol):
            return NotImplemented
        return other._ctx is self._ctx and other._handle.value == self._handle.value

    def __hash__(self) -> int:
        return hash((id(self._ctx), self._handle.value))

    def __str__(self) -> str:
        return str(self.value)

    def __repr__(self) -> str:
        return f"Symbol({self.value!r})"
