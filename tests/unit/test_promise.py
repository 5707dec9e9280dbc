"""
Unit tests for MNSPromise and AsyncCallback.
"""

import threading
from concurrent.futures import ThreadPoolExecutor
from unittest.mock import Mock

import pytest

from mnsclient.exceptions import PromiseError, QueueNotExistError
from mnsclient.promise import AsyncCallback, MNSPromise, PromiseState


class TestDeferredPromise:
    """Test promises that run on wait()."""

    def test_nothing_runs_before_wait(self):
        operation = Mock(return_value="response")
        promise = MNSPromise(operation)

        assert promise.is_pending
        operation.assert_not_called()

        assert promise.wait() == "response"
        operation.assert_called_once()
        assert promise.state is PromiseState.RESOLVED
        assert promise.value == "response"
        assert promise.error is None

    def test_wait_twice_runs_once(self):
        operation = Mock(return_value=1)
        promise = MNSPromise(operation)

        promise.wait()
        promise.wait()

        operation.assert_called_once()

    def test_failure_is_reraised(self):
        error = QueueNotExistError("QueueNotExist", "gone")
        promise = MNSPromise(Mock(side_effect=error))

        with pytest.raises(QueueNotExistError):
            promise.wait()
        assert promise.is_failed
        assert promise.error is error
        assert promise.value is None

        # The stored error is raised again without re-running the request
        with pytest.raises(QueueNotExistError):
            promise.wait()

    def test_success_callback(self):
        callback = AsyncCallback(on_success=Mock(), on_failed=Mock())
        promise = MNSPromise(Mock(return_value="ok"), callback)

        promise.wait()

        callback.on_success.assert_called_once_with("ok")
        callback.on_failed.assert_not_called()

    def test_failure_callback(self):
        error = RuntimeError("boom")
        callback = AsyncCallback(on_success=Mock(), on_failed=Mock())
        promise = MNSPromise(Mock(side_effect=error), callback)

        with pytest.raises(RuntimeError):
            promise.wait()

        callback.on_failed.assert_called_once_with(error)
        callback.on_success.assert_not_called()

    def test_plain_callable_callback(self):
        seen = []
        promise = MNSPromise(lambda: "ok", seen.append)

        promise.wait()
        promise.wait()

        assert seen == ["ok"]

    def test_callback_error_does_not_change_outcome(self):
        def broken(_response):
            raise ValueError("observer bug")

        promise = MNSPromise(lambda: "ok", broken, name="SendMessageRequest")

        assert promise.wait() == "ok"
        assert promise.is_resolved

    def test_invalid_callback(self):
        with pytest.raises(TypeError):
            MNSPromise(lambda: None, callback="not callable")

    def test_repr(self):
        promise = MNSPromise(lambda: None, name="PeekMessageRequest")
        assert repr(promise) == "<MNSPromise PeekMessageRequest pending>"


class TestBackgroundPromise:
    """Test promises submitted to an executor."""

    def test_dispatch_runs_without_wait(self):
        done = threading.Event()
        callback = AsyncCallback(on_success=lambda _: done.set())

        with ThreadPoolExecutor(max_workers=1) as executor:
            promise = MNSPromise(lambda: "ok", callback)
            promise.dispatch(executor)
            assert done.wait(5)
            assert promise.wait(timeout=5) == "ok"

    def test_wait_does_not_run_a_second_time(self):
        operation = Mock(return_value="ok")

        with ThreadPoolExecutor(max_workers=1) as executor:
            promise = MNSPromise(operation)
            promise.dispatch(executor)
            promise.wait(timeout=5)

        operation.assert_called_once()

    def test_wait_timeout(self):
        release = threading.Event()

        with ThreadPoolExecutor(max_workers=1) as executor:
            promise = MNSPromise(lambda: release.wait(5), name="ReceiveMessageRequest")
            promise.dispatch(executor)
            with pytest.raises(PromiseError, match="did not complete"):
                promise.wait(timeout=0.05)
            assert promise.is_pending
            release.set()
            assert promise.wait(timeout=5) is True

    def test_double_dispatch(self):
        with ThreadPoolExecutor(max_workers=1) as executor:
            promise = MNSPromise(lambda: None)
            promise.dispatch(executor)
            with pytest.raises(PromiseError, match="already dispatched"):
                promise.dispatch(executor)
            promise.wait(timeout=5)

    def test_callback_fires_once_under_concurrent_waiters(self):
        calls = []
        lock = threading.Lock()

        def record(response):
            with lock:
                calls.append(response)

        with ThreadPoolExecutor(max_workers=4) as executor:
            promise = MNSPromise(lambda: "ok", record)
            promise.dispatch(executor)
            waiters = [executor.submit(promise.wait, 5) for _ in range(3)]
            assert [w.result(timeout=5) for w in waiters] == ["ok"] * 3

        assert calls == ["ok"]
