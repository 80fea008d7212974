"""
Incremental solver bound to a context.
"""
from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any, Optional, Sequence

from z3 import z3core

from ..ast import Bool, ast_array
from ..errors import EngineError, ModelUnavailableError
from ..handle import RefCounted
from ..lock import ENGINE_LOCK, require_handle
from .base import last_result_allows_model
from .model import Model
from .result import SolverResult

if TYPE_CHECKING:
    from ..context import Context

logger = logging.getLogger(__name__)


def _solver_inc_ref(ctx_handle: Any, handle: Any) -> None:
    z3core.Z3_solver_inc_ref(ctx_handle, handle)


def _solver_dec_ref(ctx_handle: Any, handle: Any) -> None:
    z3core.Z3_solver_dec_ref(ctx_handle, handle)


class Solver(RefCounted):
    """Incremental solver with push/pop assertion scopes.

    Example:
        >>> solver = Solver(ctx)
        >>> x = Int.new_const(ctx, "x")
        >>> solver.assert_(x.gt(10))
        >>> solver.check()
        <SolverResult.SAT: 'sat'>
    """

    _inc_ref = staticmethod(_solver_inc_ref)
    _dec_ref = staticmethod(_solver_dec_ref)

    def __init__(self, ctx: "Context"):
        with ENGINE_LOCK:
            handle = ENGINE_LOCK.call(z3core.Z3_mk_solver, ctx._ref())
            super().__init__(ctx, require_handle(handle, "solver"))
        self._last_result: Optional[SolverResult] = None

    @property
    def last_result(self) -> Optional[SolverResult]:
        return self._last_result

    def assert_(self, constraint: Bool) -> None:
        """Add a Boolean constraint to the current scope."""
        self._check_same_context(constraint, "constraint")
        ENGINE_LOCK.call(z3core.Z3_solver_assert, self._ctx_ref(), self._ref(), constraint._ref())

    def check(self) -> SolverResult:
        """Check satisfiability of the asserted constraints.

        May block for an arbitrary time; ``Context.interrupt()`` from another
        thread makes it return UNKNOWN.
        """
        return self._run_check(())

    def check_assumptions(self, assumptions: Sequence[Bool]) -> SolverResult:
        """Check satisfiability assuming additional Boolean literals."""
        for i, a in enumerate(assumptions):
            self._check_same_context(a, f"assumption {i}")
        return self._run_check(tuple(assumptions))

    def _run_check(self, assumptions: Sequence[Bool]) -> SolverResult:
        ctx = self._ctx
        start_time = time.time()
        with ctx._native.interruptible():
            if assumptions:
                value = ENGINE_LOCK.call(
                    z3core.Z3_solver_check_assumptions, self._ctx_ref(), self._ref(),
                    len(assumptions), ast_array(list(assumptions)))
            else:
                value = ENGINE_LOCK.call(z3core.Z3_solver_check, self._ctx_ref(), self._ref())
        elapsed_ms = (time.time() - start_time) * 1000
        self._last_result = SolverResult.from_lbool(value)
        logger.debug(f"solver check: {self._last_result} in {elapsed_ms:.2f}ms")
        return self._last_result

    def reason_unknown(self) -> str:
        return ENGINE_LOCK.call(z3core.Z3_solver_get_reason_unknown, self._ctx_ref(), self._ref())

    def get_model(self) -> Model:
        """Model of the last SAT (or UNKNOWN with a partial model) check.

        Raises:
            ModelUnavailableError: If the last check was UNSAT, no check ran,
                or the engine has no model after an UNKNOWN result
        """
        if not last_result_allows_model(self._last_result):
            raise ModelUnavailableError(
                f"no model available after check result {self._last_result}")
        try:
            with ENGINE_LOCK:
                handle = ENGINE_LOCK.call(z3core.Z3_solver_get_model, self._ctx_ref(), self._ref())
                return Model(self._ctx, handle)
        except EngineError as exc:
            raise ModelUnavailableError(str(exc)) from exc

    def push(self) -> None:
        """Push a new assertion scope."""
        ENGINE_LOCK.call(z3core.Z3_solver_push, self._ctx_ref(), self._ref())

    def pop(self, n: int = 1) -> None:
        """Pop ``n`` assertion scopes."""
        ENGINE_LOCK.call(z3core.Z3_solver_pop, self._ctx_ref(), self._ref(), n)
        self._last_result = None

    def num_scopes(self) -> int:
        return ENGINE_LOCK.call(z3core.Z3_solver_get_num_scopes, self._ctx_ref(), self._ref())

    def reset(self) -> None:
        """Remove all assertions and scopes."""
        ENGINE_LOCK.call(z3core.Z3_solver_reset, self._ctx_ref(), self._ref())
        self._last_result = None
