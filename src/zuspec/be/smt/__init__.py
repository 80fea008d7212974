"""
Context-scoped object model over the Z3 SMT engine.

Every object is derived from a ``Context`` and cannot outlive it. Native
handles are reference counted and released exactly once, all engine entry
points are serialized through one process-wide lock, and algebraic
datatypes are declared with a two-phase builder.
"""

__version__ = "0.1.0"

from .config import Config
from .context import Context
from .symbol import Symbol, SymbolKind
from .sort import Sort, SortKind, EnumSort
from .func_decl import FuncDecl
from .datatype import (
    SELF,
    DatatypeBuilder,
    DatatypeSort,
    DatatypeVariant,
)
from .ast import Ast, Bool, Int, BitVec
from .solver import (
    ReasoningEngine,
    SolverResult,
    Model,
    Solver,
    Optimize,
)
from .errors import (
    SmtError,
    ConfigError,
    EngineError,
    DeclarationError,
    SortMismatchError,
    ModelUnavailableError,
    InvariantViolation,
    NullHandleError,
    ContextClosedError,
    ContextMismatchError,
    BuilderConsumedError,
    ConfigConsumedError,
)

__all__ = [
    "Config",
    "Context",
    "Symbol",
    "SymbolKind",
    "Sort",
    "SortKind",
    "EnumSort",
    "FuncDecl",
    "SELF",
    "DatatypeBuilder",
    "DatatypeSort",
    "DatatypeVariant",
    "Ast",
    "Bool",
    "Int",
    "BitVec",
    "ReasoningEngine",
    "SolverResult",
    "Model",
    "Solver",
    "Optimize",
    "SmtError",
    "ConfigError",
    "EngineError",
    "DeclarationError",
    "SortMismatchError",
    "ModelUnavailableError",
    "InvariantViolation",
    "NullHandleError",
    "ContextClosedError",
    "ContextMismatchError",
    "BuilderConsumedError",
    "ConfigConsumedError",
]
