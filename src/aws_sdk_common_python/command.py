"""Commands, transactions and deferred results."""

from __future__ import annotations

from dataclasses import dataclass, field
from threading import Lock
from typing import TYPE_CHECKING, Any

from aws_sdk_common_python.emitter import Emitter

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping, MutableMapping

    from aws_sdk_common_python.client import AwsClient


@dataclass(frozen=True)
class StructuredError:
    """Error details a service reported for a failed request.

    Any field may be None when the error parser could not extract it.
    """

    code: str | None = None
    type: str | None = None
    message: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> StructuredError:
        """Create from an error parser result.

        Accepts the lower-case keys of this package as well as the PascalCase
        keys used by botocore error documents.
        """
        if not data:
            return cls()
        return cls(
            code=data.get("code", data.get("Code")),
            type=data.get("type", data.get("Type")),
            message=data.get("message", data.get("Message")),
        )

    def is_empty(self) -> bool:
        return self.code is None and self.type is None and self.message is None

    def to_dict(self) -> dict[str, str]:
        return {
            key: value
            for key, value in (
                ("Code", self.code),
                ("Type", self.type),
                ("Message", self.message),
            )
            if value is not None
        }


@dataclass
class TransactionContext:
    """Side-channel data of a single transaction."""

    aws_error: StructuredError | None = None
    extra: MutableMapping[str, Any] = field(default_factory=dict)


@dataclass
class Command:
    """One invocation of an operation, consumed by a single execute call."""

    name: str
    params: MutableMapping[str, Any] = field(default_factory=dict)
    emitter: Emitter = field(default_factory=Emitter)
    future: bool = False

    def __getitem__(self, key: str) -> Any:
        return self.params[key]

    def __contains__(self, key: object) -> bool:
        return key in self.params

    def get(self, key: str, default: Any = None) -> Any:
        return self.params.get(key, default)

    def to_dict(self) -> dict[str, Any]:
        return dict(self.params)


class Transaction:
    """State threaded through one execution attempt of a command.

    Once complete, exactly one of result or exception is meaningful.
    """

    def __init__(self, client: AwsClient, command: Command) -> None:
        self.client = client
        self.command = command
        self.context = TransactionContext()
        self.request: Any = None
        self.response: Any = None
        self.result: Any = None
        self.exception: BaseException | None = None
        self._complete = False

    def intercept(self, result: Any) -> None:
        """Complete the transaction with a result, discarding any exception."""
        self.result = result
        self.exception = None
        self._complete = True

    def fail(self, exception: BaseException) -> None:
        self.exception = exception
        self.result = None
        self._complete = True

    @property
    def is_complete(self) -> bool:
        return self._complete

    def __repr__(self) -> str:
        return (
            f"Transaction(command={self.command.name!r}, "
            f"complete={self._complete}, failed={self.exception is not None})"
        )


class FutureResult:
    """A command result that is materialized on demand.

    resolve forces the underlying response and returns the result. cancel is
    forwarded to the underlying response handle. Calling result() twice is only
    safe when the underlying handle materializes idempotently; the value of the
    first successful resolution is cached.
    """

    def __init__(
        self,
        resolve: Callable[[], Any],
        cancel: Callable[[], bool],
    ) -> None:
        self._resolve = resolve
        self._cancel = cancel
        self._lock = Lock()
        self._resolved = False
        self._value: Any = None

    def result(self) -> Any:
        """Block until the response is available and return the result."""
        with self._lock:
            if not self._resolved:
                self._value = self._resolve()
                self._resolved = True
            return self._value

    def cancel(self) -> bool:
        """Forward cancellation to the underlying response."""
        return self._cancel()

    def done(self) -> bool:
        return self._resolved
