"""
Check result types.
"""
from enum import Enum

from z3.z3consts import Z3_L_FALSE, Z3_L_TRUE


class SolverResult(Enum):
    """Result from SMT solver check."""
    SAT = "sat"
    UNSAT = "unsat"
    UNKNOWN = "unknown"

    @classmethod
    def from_lbool(cls, value: int) -> "SolverResult":
        """Map the engine's three-valued ``Z3_lbool`` to a result."""
        if value == Z3_L_TRUE:
            return cls.SAT
        if value == Z3_L_FALSE:
            return cls.UNSAT
        return cls.UNKNOWN

    def __str__(self) -> str:
        return self.value
