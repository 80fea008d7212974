"""
Pre-context configuration.
"""
import logging
from typing import Dict, List, Mapping, Tuple

from z3 import z3core

from .errors import ConfigConsumedError, ConfigError, EngineError
from .lock import ENGINE_LOCK, require_handle

logger = logging.getLogger(__name__)

# Parameters accepted by Z3_mk_context_rc. The engine only prints a warning
# for anything else, so keys and values are checked here instead.
CONTEXT_PARAMS: Dict[str, str] = {
    "auto_config": "bool",
    "ctrl_c": "bool",
    "debug_ref_count": "bool",
    "dump_models": "bool",
    "encoding": "encoding",
    "model": "bool",
    "model_validate": "bool",
    "proof": "bool",
    "rlimit": "uint",
    "smtlib2_compliant": "bool",
    "stats": "bool",
    "timeout": "uint",
    "trace": "bool",
    "trace_file_name": "string",
    "type_check": "bool",
    "unsat_core": "bool",
    "well_sorted_check": "bool",
}

_ENCODINGS = ("unicode", "bmp", "ascii")


def _value_ok(kind: str, value: str) -> bool:
    if kind == "bool":
        return value in ("true", "false")
    if kind == "uint":
        return value.isdigit()
    if kind == "encoding":
        return value in _ENCODINGS
    return True


class Config:
    """Ordered key/value options used to create exactly one ``Context``.

    Example:
        >>> cfg = Config()
        >>> cfg.set_model_generation(True)
        >>> cfg.set_timeout_msec(5000)
        >>> ctx = Context(cfg)
    """

    def __init__(self):
        self._kvs: List[Tuple[str, str]] = []
        self._consumed = False

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, object]) -> "Config":
        """Build a configuration from a mapping, preserving its iteration order.

        Boolean values are rendered as ``true``/``false``; everything else
        with ``str()``.
        """
        cfg = cls()
        for key, value in mapping.items():
            if isinstance(value, bool):
                cfg.set_bool_param_value(key, value)
            else:
                cfg.set_param_value(key, str(value))
        return cfg

    @property
    def params(self) -> Tuple[Tuple[str, str], ...]:
        """All pairs in the order they were set."""
        return tuple(self._kvs)

    @property
    def consumed(self) -> bool:
        return self._consumed

    def set_param_value(self, key: str, value: str) -> None:
        """Record a configuration pair.

        Args:
            key: Context parameter name (e.g. ``"model"``)
            value: Value in the engine's string form

        Raises:
            ConfigConsumedError: If a context was already created from this config
        """
        self._check_mutable()
        self._kvs.append((str(key), str(value)))

    def set_bool_param_value(self, key: str, value: bool) -> None:
        self.set_param_value(key, "true" if value else "false")

    def set_proof_generation(self, enabled: bool) -> None:
        self.set_bool_param_value("proof", enabled)

    def set_model_generation(self, enabled: bool) -> None:
        self.set_bool_param_value("model", enabled)

    def set_debug_ref_count(self, enabled: bool) -> None:
        self.set_bool_param_value("debug_ref_count", enabled)

    def set_timeout_msec(self, ms: int) -> None:
        self.set_param_value("timeout", str(ms))

    def validate(self) -> None:
        """Check every pair against the known context parameters.

        Raises:
            ConfigError: For an unknown key or a malformed value
        """
        for key, value in self._kvs:
            kind = CONTEXT_PARAMS.get(key)
            if kind is None:
                raise ConfigError(f"unknown context parameter '{key}'", key, value)
            if not _value_ok(kind, value):
                raise ConfigError(
                    f"invalid value '{value}' for {kind} parameter '{key}'", key, value)

    def _check_mutable(self) -> None:
        if self._consumed:
            raise ConfigConsumedError("configuration already used to create a context")

    def _consume(self):
        """Validate, mark consumed, and build the native config object.

        The caller owns the returned handle and must release it with
        ``Z3_del_config`` while holding the engine lock.
        """
        self._check_mutable()
        self.validate()
        self._consumed = True
        with ENGINE_LOCK:
            cfg = require_handle(ENGINE_LOCK.call(z3core.Z3_mk_config), "config")
            try:
                for key, value in self._kvs:
                    logger.debug(f"config {key}={value}")
                    ENGINE_LOCK.call(z3core.Z3_set_param_value, cfg, key, value)
            except EngineError:
                ENGINE_LOCK.call(z3core.Z3_del_config, cfg)
                raise
        return cfg
