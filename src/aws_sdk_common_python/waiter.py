"""Waiters polling until a resource reaches a desired state."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any

import jmespath

from aws_sdk_common_python.config import AcceptorState, Matcher
from aws_sdk_common_python.emitter import PROCESS
from aws_sdk_common_python.exceptions import AwsException, WaiterFailure, WaiterState

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from aws_sdk_common_python.client import AwsClient
    from aws_sdk_common_python.command import Transaction
    from aws_sdk_common_python.config import Acceptor, WaiterConfig

logger = logging.getLogger(__name__)

_ACCEPTOR_STATES: dict[AcceptorState, WaiterState] = {
    AcceptorState.SUCCESS: WaiterState.ACCEPTED,
    AcceptorState.FAILURE: WaiterState.FAILED,
    AcceptorState.RETRY: WaiterState.POLLING,
}


class Waiter:
    """Poll a callable until it returns a truthy value.

    The callable receives the attempt number, starting at 1. Between attempts
    the waiter sleeps for config.delay. After config.max_attempts attempts
    without success the waiter times out.
    """

    def __init__(self, check: Callable[[int], Any], config: WaiterConfig) -> None:
        self._check = check
        self._config = config
        self._state = WaiterState.POLLING
        self._attempts = 0
        self._last_result: Any = None
        self._last_exception: BaseException | None = None

    @property
    def name(self) -> str:
        return getattr(self._check, "__name__", type(self._check).__name__)

    @property
    def config(self) -> WaiterConfig:
        return self._config

    @property
    def state(self) -> WaiterState:
        return self._state

    @property
    def attempts(self) -> int:
        return self._attempts

    def wait(self) -> None:
        """Block until the waiter reaches a terminal state.

        Raises:
            WaiterFailure: When the waiter failed or timed out.
        """
        while not self._state.is_terminal():
            self._attempts += 1
            self._state = self._attempt(self._attempts)
            logger.debug(
                "Waiter %s attempt %d of %d: %s",
                self.name,
                self._attempts,
                self._config.max_attempts,
                self._state.value,
            )
            if self._state.is_terminal():
                break
            if self._attempts >= self._config.max_attempts:
                self._state = WaiterState.TIMED_OUT
                break
            if self._config.before_wait is not None:
                self._config.before_wait(self._attempts)
            time.sleep(self._config.delay_seconds)

        if self._state is WaiterState.ACCEPTED:
            return

        if self._state is WaiterState.TIMED_OUT:
            msg = f"Waiter {self.name} timed out after {self._attempts} attempts"
        else:
            msg = f"Waiter {self.name} failed after {self._attempts} attempts"
        if self._last_exception is not None:
            msg = f"{msg}: {self._last_exception}"
        raise WaiterFailure(
            msg,
            state=self._state,
            attempts=self._attempts,
            last_result=self._last_result,
            last_exception=self._last_exception,
        )

    def _attempt(self, attempt: int) -> WaiterState:
        self._last_result = self._check(attempt)
        return WaiterState.ACCEPTED if self._last_result else WaiterState.POLLING


class ResourceWaiter(Waiter):
    """Execute an operation until one of the configured acceptors ends the wait.

    Acceptors are evaluated in order and the first match decides the next
    state. A service error that matches no acceptor fails the waiter.
    """

    def __init__(
        self,
        client: AwsClient,
        waiter_name: str,
        args: Mapping[str, Any],
        config: WaiterConfig,
    ) -> None:
        super().__init__(self._execute, config)
        self._client = client
        self._waiter_name = waiter_name
        self._args = dict(args)
        self._status_code: int | None = None

    @property
    def name(self) -> str:
        return self._waiter_name

    def _execute(self, attempt: int) -> Any:
        command = self._client.get_command(self._config.operation or "", self._args)
        command.emitter.on(PROCESS, self._capture_status)
        return self._client.execute(command)

    def _capture_status(self, transaction: Transaction) -> None:
        self._status_code = getattr(transaction.response, "status_code", None)

    def _attempt(self, attempt: int) -> WaiterState:
        self._status_code = None
        self._last_exception = None
        try:
            self._last_result = self._check(attempt)
        except AwsException as e:
            self._last_result = None
            self._last_exception = e
            self._status_code = e.status_code

        for acceptor in self._config.acceptors:
            if self._matches(acceptor):
                logger.debug(
                    "Waiter %s matched %s acceptor %s",
                    self.name,
                    acceptor.state.value,
                    acceptor.matcher.value,
                )
                return _ACCEPTOR_STATES[acceptor.state]

        if self._last_exception is not None:
            return WaiterState.FAILED
        return WaiterState.POLLING

    def _matches(self, acceptor: Acceptor) -> bool:
        exception = self._last_exception
        match acceptor.matcher:
            case Matcher.ERROR:
                if isinstance(acceptor.expected, bool):
                    return (exception is not None) is acceptor.expected
                return (
                    isinstance(exception, AwsException)
                    and exception.error_code == acceptor.expected
                )
            case Matcher.STATUS:
                return self._status_code == acceptor.expected
            case _ if exception is not None:
                return False
            case Matcher.PATH:
                return self._search(acceptor) == acceptor.expected
            case Matcher.PATH_ALL:
                values = self._search(acceptor)
                return (
                    isinstance(values, list)
                    and bool(values)
                    and all(v == acceptor.expected for v in values)
                )
            case Matcher.PATH_ANY:
                values = self._search(acceptor)
                return isinstance(values, list) and any(
                    v == acceptor.expected for v in values
                )
        return False  # pragma: no cover

    def _search(self, acceptor: Acceptor) -> Any:
        if not acceptor.argument:
            return self._last_result
        return jmespath.search(acceptor.argument, self._last_result)
