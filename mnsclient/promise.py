"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
mnsclient, a product of Garudex Labs

Async handle for requests dispatched without blocking the caller.

An MNSPromise wraps one pending operation and moves exactly once from
PENDING to RESOLVED (with the response) or FAILED (with the error).

Dispatch timing is explicit:
- deferred: nothing is sent until wait() is called; the request then runs on
  the waiting thread.
- background: the transport submits the promise to its thread pool right
  away; wait() joins it.

Either way the completion callback fires exactly once, on the thread that
resolves the promise, before wait() returns. It receives the response or the
error, never both.
"""

import threading
from concurrent.futures import Executor
from enum import Enum
from typing import Any, Callable, Optional, Union

from mnsclient.exceptions import PromiseError
from mnsclient.logging_config import get_logger

logger = get_logger(__name__)


class PromiseState(Enum):
    PENDING = "pending"
    RESOLVED = "resolved"
    FAILED = "failed"


class AsyncCallback:
    """
    Completion observer for an async request.

    Args:
        on_success: Called with the response when the request succeeds
        on_failed: Called with the exception when the request fails
    """

    def __init__(
        self,
        on_success: Optional[Callable[[Any], None]] = None,
        on_failed: Optional[Callable[[BaseException], None]] = None,
    ):
        self.on_success = on_success
        self.on_failed = on_failed

    def succeed(self, response: Any) -> None:
        if self.on_success is not None:
            self.on_success(response)

    def failed(self, error: BaseException) -> None:
        if self.on_failed is not None:
            self.on_failed(error)


CallbackLike = Union[AsyncCallback, Callable[[Any], None]]


def _as_callback(callback: Optional[CallbackLike]) -> Optional[AsyncCallback]:
    if callback is None or isinstance(callback, AsyncCallback):
        return callback
    if callable(callback):
        # A bare callable receives whichever outcome happens
        return AsyncCallback(on_success=callback, on_failed=callback)
    raise TypeError(f"callback must be AsyncCallback or callable, got {type(callback).__name__}")


class MNSPromise:
    """
    Future-like handle for one async request.

    Args:
        operation: Zero-argument callable performing the request
        callback: Optional AsyncCallback or callable notified on completion
        name: Operation name used in log events
    """

    def __init__(
        self,
        operation: Callable[[], Any],
        callback: Optional[CallbackLike] = None,
        name: str = "request",
    ):
        self._operation = operation
        self._callback = _as_callback(callback)
        self._name = name
        self._state = PromiseState.PENDING
        self._value: Any = None
        self._error: Optional[BaseException] = None
        self._started = False
        self._background = False
        self._start_lock = threading.Lock()
        self._done = threading.Event()

    # State

    @property
    def state(self) -> PromiseState:
        return self._state

    @property
    def is_pending(self) -> bool:
        return self._state is PromiseState.PENDING

    @property
    def is_resolved(self) -> bool:
        return self._state is PromiseState.RESOLVED

    @property
    def is_failed(self) -> bool:
        return self._state is PromiseState.FAILED

    @property
    def value(self) -> Any:
        """Response of a resolved promise; None otherwise."""
        return self._value

    @property
    def error(self) -> Optional[BaseException]:
        """Error of a failed promise; None otherwise."""
        return self._error

    # Dispatch

    def dispatch(self, executor: Executor) -> None:
        """
        Submit the operation to ``executor`` instead of waiting for wait().

        Raises:
            PromiseError: If the operation already started
        """
        with self._start_lock:
            if self._started or self._background:
                raise PromiseError(f"{self._name} already dispatched")
            self._background = True
        executor.submit(self._run)

    def _claim(self) -> bool:
        with self._start_lock:
            if self._started:
                return False
            self._started = True
            return True

    def _run(self) -> None:
        if not self._claim():
            return
        try:
            value = self._operation()
        except Exception as e:
            self._settle(PromiseState.FAILED, error=e)
        else:
            self._settle(PromiseState.RESOLVED, value=value)

    def _settle(self, state: PromiseState, value: Any = None, error: Optional[BaseException] = None) -> None:
        self._value = value
        self._error = error
        self._state = state
        try:
            self._notify()
        finally:
            self._done.set()

    def _notify(self) -> None:
        if self._callback is None:
            return
        try:
            if self._state is PromiseState.RESOLVED:
                self._callback.succeed(self._value)
            else:
                self._callback.failed(self._error)
        except Exception as e:
            # The outcome is already fixed; a broken observer must not change it
            logger.error(
                "async_callback_failed",
                operation=self._name,
                exception_type=type(e).__name__,
                exception_message=str(e),
                exc_info=True,
            )

    # Waiting

    def wait(self, timeout: Optional[float] = None) -> Any:
        """
        Block until the request completes.

        In deferred mode the first caller runs the request on its own thread.

        Args:
            timeout: Seconds to wait for a request running on another thread

        Returns:
            The response

        Raises:
            PromiseError: If ``timeout`` expires first
            Exception: The error the request failed with
        """
        if not self._done.is_set() and not self._background:
            self._run()
        if not self._done.wait(timeout):
            raise PromiseError(f"{self._name} did not complete within {timeout}s")
        if self._state is PromiseState.FAILED:
            raise self._error
        return self._value

    def __repr__(self) -> str:
        return f"<MNSPromise {self._name} {self._state.value}>"
