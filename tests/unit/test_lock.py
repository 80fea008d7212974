"""
Tests for the process-wide engine lock.
"""
import ctypes
import threading
import time

import pytest
from z3.z3types import Z3Exception

from zuspec.be.smt import EngineError, NullHandleError
from zuspec.be.smt.lock import ENGINE_LOCK, GlobalLock, require_handle


def test_call_returns_result():
    """Test that call forwards arguments and the return value."""
    lock = GlobalLock()
    assert lock.call(lambda a, b: a + b, 2, 3) == 5


def test_call_translates_engine_errors():
    """Engine failures surface as EngineError naming the entry point."""
    def Z3_fake_entry(arg):
        raise Z3Exception(b"invalid argument")

    with pytest.raises(EngineError) as exc_info:
        ENGINE_LOCK.call(Z3_fake_entry, 1)

    assert exc_info.value.entry_point == "Z3_fake_entry"
    assert "Z3_fake_entry" in str(exc_info.value)
    assert isinstance(exc_info.value.__cause__, Z3Exception)


def test_lock_is_reentrant():
    """Test nested acquisition from the same thread."""
    lock = GlobalLock()
    with lock:
        with lock:
            assert lock.call(lambda: 'inner') == 'inner'


def test_lock_serializes_threads():
    """Only one thread is inside the lock at a time."""
    lock = GlobalLock()
    active = []
    overlap = []

    def worker():
        for _ in range(20):
            with lock:
                active.append(1)
                if len(active) > 1:
                    overlap.append(True)
                time.sleep(0.0005)
                active.pop()

    threads = [threading.Thread(target=worker) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert overlap == []


def test_require_handle():
    """Null handles are rejected, live ones pass through."""
    with pytest.raises(NullHandleError):
        require_handle(None, 'sort')
    with pytest.raises(NullHandleError) as exc_info:
        require_handle(ctypes.c_void_p(None), 'sort')
    assert exc_info.value.context == {'what': 'sort'}

    live = ctypes.c_void_p(0x1000)
    assert require_handle(live, 'sort') is live
