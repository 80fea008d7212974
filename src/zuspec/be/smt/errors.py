"""
Exception hierarchy for the SMT object model.

Errors fall into two groups:

- Recoverable failures caused by caller-supplied data (bad configuration,
  invalid declarations, misapplied function declarations, engine-reported
  error codes). These are returned to the caller as typed exceptions.
- Invariant violations (``InvariantViolation`` and subclasses). These signal
  misuse of the object model itself, such as touching an object whose
  context was torn down or reusing a finished datatype builder. Callers
  are not expected to recover from them.
"""
from typing import Any, Dict, Optional


class SmtError(Exception):
    """Base exception for all errors raised by this package.

    Attributes:
        context: Structured details about the failure
    """

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}


class ConfigError(SmtError):
    """Raised when a configuration key or value is rejected at context creation."""

    def __init__(self, message: str, key: str, value: str):
        super().__init__(message, {"key": key, "value": value})
        self.key = key
        self.value = value


class EngineError(SmtError):
    """Raised when the native engine reports an error code for a call."""

    def __init__(self, message: str, entry_point: str):
        super().__init__(message, {"entry_point": entry_point})
        self.entry_point = entry_point


class DeclarationError(SmtError, ValueError):
    """Raised for invalid sort, symbol, or datatype declaration input."""
    pass


class SortMismatchError(SmtError, TypeError):
    """Raised when a function declaration is applied to the wrong arguments."""
    pass


class ModelUnavailableError(SmtError):
    """Raised when a model is requested but the last check produced none."""
    pass


class InvariantViolation(SmtError):
    """Base class for misuse of the ownership or builder protocol."""
    pass


class NullHandleError(InvariantViolation):
    """The engine returned a null handle where a valid one is guaranteed."""
    pass


class ContextClosedError(InvariantViolation):
    """An object was used after its owning context was torn down."""
    pass


class ContextMismatchError(InvariantViolation):
    """Objects from two different contexts were combined."""
    pass


class BuilderConsumedError(InvariantViolation):
    """A datatype builder was used after ``finish()``."""
    pass


class ConfigConsumedError(InvariantViolation):
    """A configuration was modified or reused after creating a context."""
    pass
