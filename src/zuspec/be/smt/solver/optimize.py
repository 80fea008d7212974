"""
Optimization queries bound to a context.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Optional, Sequence, Union

from z3 import z3core

from ..ast import Ast, Bool, ast_array
from ..errors import EngineError, ModelUnavailableError
from ..handle import RefCounted
from ..lock import ENGINE_LOCK, require_handle
from ..symbol import Symbol, SymbolLike
from .base import last_result_allows_model
from .model import Model
from .result import SolverResult

if TYPE_CHECKING:
    from ..context import Context

logger = logging.getLogger(__name__)


def _optimize_inc_ref(ctx_handle: Any, handle: Any) -> None:
    z3core.Z3_optimize_inc_ref(ctx_handle, handle)


def _optimize_dec_ref(ctx_handle: Any, handle: Any) -> None:
    z3core.Z3_optimize_dec_ref(ctx_handle, handle)


class Optimize(RefCounted):
    """Solver with soft constraints and minimize/maximize objectives."""

    _inc_ref = staticmethod(_optimize_inc_ref)
    _dec_ref = staticmethod(_optimize_dec_ref)

    def __init__(self, ctx: "Context"):
        with ENGINE_LOCK:
            handle = ENGINE_LOCK.call(z3core.Z3_mk_optimize, ctx._ref())
            super().__init__(ctx, require_handle(handle, "optimize"))
        self._last_result: Optional[SolverResult] = None

    @property
    def last_result(self) -> Optional[SolverResult]:
        return self._last_result

    def assert_(self, constraint: Bool) -> None:
        """Add a hard constraint."""
        self._check_same_context(constraint, "constraint")
        ENGINE_LOCK.call(z3core.Z3_optimize_assert, self._ctx_ref(), self._ref(), constraint._ref())

    def assert_soft(self, constraint: Bool, weight: Union[int, str] = 1,
                    group: Optional[SymbolLike] = None) -> int:
        """Add a soft constraint.

        Args:
            constraint: Boolean term that should hold if possible
            weight: Penalty for violating it (integer or decimal string)
            group: Optional name grouping soft constraints into one objective

        Returns:
            Index of the objective the constraint contributes to
        """
        self._check_same_context(constraint, "constraint")
        group_sym = Symbol.of(self._ctx, group if group is not None else "")
        return ENGINE_LOCK.call(
            z3core.Z3_optimize_assert_soft, self._ctx_ref(), self._ref(), constraint._ref(),
            str(weight), group_sym._ref())

    def maximize(self, term: Ast) -> int:
        """Add a maximization objective; returns its index."""
        self._check_same_context(term, "objective")
        return ENGINE_LOCK.call(z3core.Z3_optimize_maximize, self._ctx_ref(), self._ref(), term._ref())

    def minimize(self, term: Ast) -> int:
        """Add a minimization objective; returns its index."""
        self._check_same_context(term, "objective")
        return ENGINE_LOCK.call(z3core.Z3_optimize_minimize, self._ctx_ref(), self._ref(), term._ref())

    def check(self, assumptions: Sequence[Bool] = ()) -> SolverResult:
        """Check the hard constraints and optimize the objectives."""
        for i, a in enumerate(assumptions):
            self._check_same_context(a, f"assumption {i}")
        with self._ctx._native.interruptible():
            value = ENGINE_LOCK.call(
                z3core.Z3_optimize_check, self._ctx_ref(), self._ref(),
                len(assumptions), ast_array(list(assumptions)))
        self._last_result = SolverResult.from_lbool(value)
        logger.debug(f"optimize check: {self._last_result}")
        return self._last_result

    def get_model(self) -> Model:
        """Model of the last SAT (or UNKNOWN) check.

        Raises:
            ModelUnavailableError: If the last check produced no model
        """
        if not last_result_allows_model(self._last_result):
            raise ModelUnavailableError(
                f"no model available after check result {self._last_result}")
        try:
            with ENGINE_LOCK:
                handle = ENGINE_LOCK.call(z3core.Z3_optimize_get_model, self._ctx_ref(), self._ref())
                return Model(self._ctx, handle)
        except EngineError as exc:
            raise ModelUnavailableError(str(exc)) from exc

    def push(self) -> None:
        ENGINE_LOCK.call(z3core.Z3_optimize_push, self._ctx_ref(), self._ref())

    def pop(self) -> None:
        ENGINE_LOCK.call(z3core.Z3_optimize_pop, self._ctx_ref(), self._ref())
        self._last_result = None
