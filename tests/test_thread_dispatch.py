"""Tests for the engine owner thread."""

import threading
import time
import pytest
from trackplayer.concurrency.worker import EngineWorker


def test_worker_start_stop():
    """Test worker thread start and stop."""
    worker = EngineWorker()

    worker.start()
    assert worker._thread is not None
    assert worker._thread.is_alive()
    assert worker.is_running

    worker.stop()
    assert worker._thread is None
    assert not worker.is_running


def test_worker_execute():
    """Commands run on the owner thread and return their result."""
    worker = EngineWorker()
    worker.start()

    assert worker.execute(lambda: 42) == 42
    assert worker.execute(worker.in_worker_thread) is True
    assert worker.in_worker_thread() is False

    worker.stop()


def test_worker_execute_with_error():
    """Test error handling in worker thread."""
    worker = EngineWorker()
    worker.start()

    def failing_function():
        raise ValueError("Test error")

    with pytest.raises(ValueError, match="Test error"):
        worker.execute(failing_function)

    # The thread survives a failing command
    assert worker.execute(lambda: "still alive") == "still alive"

    worker.stop()


def test_worker_execute_timeout():
    """Test command execution timeout."""
    worker = EngineWorker()
    worker.start()

    def slow_function():
        time.sleep(1.0)
        return 42

    with pytest.raises(TimeoutError):
        worker.execute(slow_function, timeout=0.1)

    worker.stop()


def test_worker_not_running():
    """Test executing before worker is started."""
    worker = EngineWorker()

    with pytest.raises(RuntimeError, match="not running"):
        worker.execute(lambda: 42)


def test_reentrant_execute_runs_inline():
    """A command that submits another command does not deadlock."""
    worker = EngineWorker()
    worker.start()

    def outer():
        return worker.execute(lambda: "inner") + "+outer"

    assert worker.execute(outer, timeout=1.0) == "inner+outer"

    worker.stop()


def test_concurrent_executions_are_serialized():
    """Commands from many threads never overlap."""
    worker = EngineWorker()
    worker.start()

    active = []
    overlaps = []
    results = []
    errors = []

    def task(value):
        active.append(value)
        if len(active) > 1:
            overlaps.append(tuple(active))
        time.sleep(0.001)
        active.remove(value)
        return value * 2

    def run_task(value):
        try:
            results.append(worker.execute(lambda: task(value)))
        except Exception as e:
            errors.append(e)

    threads = [threading.Thread(target=run_task, args=(i,)) for i in range(10)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    assert overlaps == []
    assert sorted(results) == [i * 2 for i in range(10)]

    worker.stop()
