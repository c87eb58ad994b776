"""Types and Protocols. Don't import anything other than exceptions here - the reason it exists is to avoid circular references."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from collections.abc import Mapping
    from concurrent.futures import Future

    from aws_sdk_common_python.command import Transaction


class LoggerInterface(Protocol):
    def debug(
        self, msg: object, *args: object, extra: Mapping[str, object] | None = None
    ) -> None: ...  # pragma: no cover

    def info(
        self, msg: object, *args: object, extra: Mapping[str, object] | None = None
    ) -> None: ...  # pragma: no cover

    def warning(
        self, msg: object, *args: object, extra: Mapping[str, object] | None = None
    ) -> None: ...  # pragma: no cover

    def error(
        self, msg: object, *args: object, extra: Mapping[str, object] | None = None
    ) -> None: ...  # pragma: no cover

    def exception(
        self, msg: object, *args: object, extra: Mapping[str, object] | None = None
    ) -> None: ...  # pragma: no cover


class WireRequest(Protocol):
    url: str


class WireResponse(Protocol):
    status_code: int
    headers: Mapping[str, str]
    content: bytes


class Signer(Protocol):
    """Authenticates a request with credentials."""

    def sign_request(self, request: Any, credentials: Any) -> Any: ...  # pragma: no cover


class Serializer(Protocol):
    """Converts the command of a transaction into a wire request."""

    def __call__(self, transaction: Transaction) -> WireRequest: ...  # pragma: no cover


class ErrorParser(Protocol):
    """Extracts code, type and message from a failed response."""

    def __call__(
        self, response: WireResponse
    ) -> Mapping[str, Any]: ...  # pragma: no cover


class ResultParser(Protocol):
    """Converts a successful response into the command result."""

    def __call__(self, transaction: Transaction) -> Any: ...  # pragma: no cover


class HttpTransport(Protocol):
    """Sends requests.

    When future is True the transport returns a Future of the response instead
    of the response.
    """

    def send(
        self, request: Any, future: bool = False
    ) -> WireResponse | Future[WireResponse]: ...  # pragma: no cover


class ServiceDescription(Protocol):
    """Description of a service API."""

    @property
    def operations(self) -> Mapping[str, Mapping[str, Any]]: ...  # pragma: no cover

    @property
    def service_full_name(self) -> str: ...  # pragma: no cover

    @property
    def service_name(self) -> str: ...  # pragma: no cover

    def get_paginator_config(
        self, name: str
    ) -> dict[str, Any]: ...  # pragma: no cover

    def get_waiter_config(self, name: str) -> dict[str, Any]: ...  # pragma: no cover
