"""
Read-only valuation snapshots.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Any, List, Optional

from z3 import z3core
from z3 import z3types as native

from ..ast import Ast
from ..func_decl import FuncDecl
from ..handle import RefCounted
from ..lock import ENGINE_LOCK, require_handle

if TYPE_CHECKING:
    from ..context import Context


def _model_inc_ref(ctx_handle: Any, handle: Any) -> None:
    z3core.Z3_model_inc_ref(ctx_handle, handle)


def _model_dec_ref(ctx_handle: Any, handle: Any) -> None:
    z3core.Z3_model_dec_ref(ctx_handle, handle)


class Model(RefCounted):
    """Model for the constraints asserted into a solver or optimizer.

    Evaluation never changes engine state.
    """

    _inc_ref = staticmethod(_model_inc_ref)
    _dec_ref = staticmethod(_model_dec_ref)

    def __init__(self, ctx: "Context", handle: Any):
        super().__init__(ctx, require_handle(handle, "model"))

    def eval(self, term: Ast, completion: bool = True) -> Optional[Ast]:
        """Evaluate a term in this model.

        Args:
            term: Term from the same context
            completion: Assign default values to constants the model leaves open

        Returns:
            The resulting term, or None when the model yields no value
        """
        self._check_same_context(term, "term")
        out = (native.Ast * 1)()
        with ENGINE_LOCK:
            ok = ENGINE_LOCK.call(
                z3core.Z3_model_eval, self._ctx_ref(), self._ref(), term._ref(), completion, out)
            if not ok or not out[0]:
                return None
            return Ast.wrap(self._ctx, out[0])

    def get_const_interp(self, decl: FuncDecl) -> Optional[Ast]:
        """Value assigned to a constant declaration, None if unassigned."""
        self._check_same_context(decl, "declaration")
        with ENGINE_LOCK:
            handle = ENGINE_LOCK.call(
                z3core.Z3_model_get_const_interp, self._ctx_ref(), self._ref(), decl._ref())
            if handle is None or handle.value is None:
                return None
            return Ast.wrap(self._ctx, handle)

    def decls(self) -> List[FuncDecl]:
        """Constant declarations interpreted by this model."""
        with ENGINE_LOCK:
            ctx_ref = self._ctx_ref()
            n = ENGINE_LOCK.call(z3core.Z3_model_get_num_consts, ctx_ref, self._ref())
            return [FuncDecl(self._ctx, ENGINE_LOCK.call(
                        z3core.Z3_model_get_const_decl, ctx_ref, self._ref(), i))
                    for i in range(n)]

    def __len__(self) -> int:
        return ENGINE_LOCK.call(z3core.Z3_model_get_num_consts, self._ctx_ref(), self._ref())
