"""
Common interface of the stateful reasoning engines.
"""
from typing import TYPE_CHECKING, Optional, Protocol

from .result import SolverResult

if TYPE_CHECKING:
    from ..ast import Bool
    from .model import Model


class ReasoningEngine(Protocol):
    """Protocol shared by ``Solver`` and ``Optimize``.

    Both accept assertions inside push/pop scopes, run a check, and expose
    the model of the last satisfiable check.
    """

    def assert_(self, constraint: "Bool") -> None:
        """Add a constraint in the current scope.

        Args:
            constraint: Boolean term from the same context
        """
        ...

    def check(self) -> SolverResult:
        """Run one decision attempt.

        Returns:
            SAT, UNSAT, or UNKNOWN (also the result of an interrupted check)
        """
        ...

    def get_model(self) -> "Model":
        """Get the model of the last SAT (or UNKNOWN) check.

        Raises:
            ModelUnavailableError: If the last check produced no model
        """
        ...

    def push(self) -> None:
        """Push a new assertion scope."""
        ...

    def pop(self) -> None:
        """Pop the most recent assertion scope."""
        ...


def last_result_allows_model(result: Optional[SolverResult]) -> bool:
    return result in (SolverResult.SAT, SolverResult.UNKNOWN)
