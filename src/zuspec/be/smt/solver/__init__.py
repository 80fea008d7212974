"""Stateful reasoning engines bound to a context."""

from .base import ReasoningEngine
from .result import SolverResult
from .model import Model
from .solver import Solver
from .optimize import Optimize

__all__ = [
    "ReasoningEngine",
    "SolverResult",
    "Model",
    "Solver",
    "Optimize",
]
