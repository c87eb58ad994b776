"""Exceptions for the AWS SDK common client.

Avoid any non-stdlib references in this module, it is at the bottom of the dependency chain.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from aws_sdk_common_python.command import StructuredError, Transaction


class AwsSdkError(Exception):
    """Base class for AWS SDK common exceptions"""


class ConfigurationError(AwsSdkError):
    """A required client option is missing or an option has an invalid value."""


class OperationNotFoundError(AwsSdkError):
    """The operation is not part of the service's API description."""

    def __init__(self, operation_name: str):
        super().__init__(f"Operation not found: {operation_name}")
        self.operation_name = operation_name


class PaginationUnsupportedError(AwsSdkError):
    """Raised when an operation's results have no pagination tokens."""


class NoResourceKeyError(AwsSdkError):
    """Raised when an operation has no result key to iterate over."""


class UnknownWaiterError(AwsSdkError):
    """Raised when a waiter name is not found in the API description."""

    def __init__(self, waiter_name: str, service_name: str | None = None):
        msg = f"Waiter not found: {waiter_name}"
        if service_name:
            msg = f"{msg} for {service_name}"
        super().__init__(msg)
        self.waiter_name = waiter_name


class TransportError(AwsSdkError):
    """A request failed at the transport level.

    When the service answered with an error status, ``response`` holds that
    response. Connection failures have no response.
    """

    def __init__(self, message: str, request: Any = None, response: Any = None):
        super().__init__(message)
        self.request = request
        self.response = response

    def get_url(self) -> str | None:
        """Return the URL of the failed request, if known."""
        return getattr(self.request, "url", None)


class AwsException(AwsSdkError):
    """The single exception type raised when executing a command.

    Wraps either an error reported by the service or any other failure that
    happened while the command was executing.

    Attributes:
        transaction: The transaction of the failed execution.
        previous: The underlying exception, also available as ``__cause__``.
    """

    def __init__(
        self,
        message: str,
        transaction: Transaction,
        previous: BaseException | None = None,
    ):
        super().__init__(message)
        self.transaction = transaction
        self.previous = previous
        if previous is not None:
            self.__cause__ = previous

    @property
    def aws_error(self) -> StructuredError | None:
        return self.transaction.context.aws_error

    @property
    def error_code(self) -> str | None:
        return self.aws_error.code if self.aws_error else None

    @property
    def error_type(self) -> str | None:
        return self.aws_error.type if self.aws_error else None

    @property
    def error_message(self) -> str | None:
        return self.aws_error.message if self.aws_error else None

    @property
    def request_url(self) -> str | None:
        request = self.transaction.request
        return getattr(request, "url", None) if request is not None else None

    @property
    def status_code(self) -> int | None:
        response = getattr(self.previous, "response", None)
        return getattr(response, "status_code", None)

    def build_logger_extras(self) -> dict:
        extras: dict = {"operationName": self.transaction.command.name}
        # preserve PascalCase to match the service's error documents
        if self.aws_error and not self.aws_error.is_empty():
            extras["Error"] = self.aws_error.to_dict()
        if self.status_code is not None:
            extras["HTTPStatusCode"] = self.status_code
        return extras


class WaiterState(Enum):
    """States of a waiter."""

    POLLING = "POLLING"
    ACCEPTED = "ACCEPTED"
    FAILED = "FAILED"
    TIMED_OUT = "TIMED_OUT"

    def is_terminal(self) -> bool:
        return self is not WaiterState.POLLING


class WaiterFailure(AwsSdkError):
    """A waiter reached the failed or timed-out terminal state.

    Attributes:
        state: Either WaiterState.FAILED or WaiterState.TIMED_OUT.
        attempts: Number of attempts made.
        last_result: Result of the last attempt, if it produced one.
        last_exception: Exception raised by the last attempt, if any.
    """

    def __init__(
        self,
        message: str,
        state: WaiterState,
        attempts: int,
        last_result: Any = None,
        last_exception: BaseException | None = None,
    ):
        super().__init__(message)
        self.state = state
        self.attempts = attempts
        self.last_result = last_result
        self.last_exception = last_exception

    def is_timeout(self) -> bool:
        return self.state is WaiterState.TIMED_OUT
