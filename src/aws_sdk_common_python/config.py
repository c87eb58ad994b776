"""Configuration types."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from enum import StrEnum
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from aws_sdk_common_python.exceptions import AwsException, ConfigurationError

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from aws_sdk_common_python.types import (
        ErrorParser,
        HttpTransport,
        LoggerInterface,
        ResultParser,
        Serializer,
        ServiceDescription,
        Signer,
    )

logger = logging.getLogger(__name__)

# Order matters: the first missing option is the one reported.
REQUIRED_OPTIONS: tuple[str, ...] = (
    "api",
    "credentials",
    "client",
    "signature",
    "error_parser",
    "endpoint",
    "serializer",
)

OPTIONAL_OPTIONS: tuple[str, ...] = (
    "region",
    "defaults",
    "exception_class",
    "result_parser",
    "logger",
)

DEFAULT_WAITER_DELAY_SECONDS = 5
DEFAULT_WAITER_MAX_ATTEMPTS = 20


@dataclass(frozen=True)
class Duration:
    """Represents a duration stored as total seconds."""

    seconds: int = 0

    def __post_init__(self):
        if self.seconds < 0:
            msg = "Duration seconds must be positive"
            raise ConfigurationError(msg)

    def to_seconds(self) -> int:
        """Convert the duration to total seconds."""
        return self.seconds

    @classmethod
    def from_seconds(cls, value: float) -> Duration:
        """Create a Duration from total seconds, rounding fractions up."""
        return cls(seconds=math.ceil(value))

    @classmethod
    def from_minutes(cls, value: float) -> Duration:
        """Create a Duration from minutes, rounding fractions of a second up."""
        return cls(seconds=math.ceil(value * 60))


@dataclass(frozen=True)
class ClientConfig:
    """Construction options of an AwsClient.

    Args:
        api: Description of the service API (operations, paginators, waiters).
        credentials: Credentials handed to the signer.
        client: HTTP transport used to send requests.
        signature: Signer that authenticates serialized requests.
        error_parser: Callable extracting code, type and message from a failed response.
        endpoint: Base URL of the service.
        serializer: Callable turning a transaction into a wire request.
        region: Region the client talks to, if any.
        defaults: Parameters merged under the arguments of every command.
        exception_class: Callable (message, transaction, cause) producing the
            AwsException raised for failed commands. Usually an AwsException subclass.
        result_parser: Callable turning a transaction with a successful response
            into the command result. Defaults to decoding a JSON body.
        logger: Logger for client events. Defaults to the module logger.
    """

    api: ServiceDescription
    credentials: Any
    client: HttpTransport
    signature: Signer
    error_parser: ErrorParser
    endpoint: str
    serializer: Serializer
    region: str | None = None
    defaults: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    exception_class: Callable[..., AwsException] = AwsException
    result_parser: ResultParser | None = None
    logger: LoggerInterface | None = None

    @classmethod
    def from_dict(cls, config: Mapping[str, Any]) -> ClientConfig:
        """Validate a mapping of options and create the config.

        Raises:
            ConfigurationError: When a required option is missing, or
                exception_class does not produce AwsException instances.
        """
        for option in REQUIRED_OPTIONS:
            if config.get(option) is None:
                msg = f"{option} is a required option"
                raise ConfigurationError(msg)

        exception_class = config.get("exception_class") or AwsException
        if isinstance(exception_class, type):
            if not issubclass(exception_class, AwsException):
                msg = f"exception_class must extend AwsException, got {exception_class.__name__}"
                raise ConfigurationError(msg)
        elif not callable(exception_class):
            msg = "exception_class must be an AwsException subclass or a callable"
            raise ConfigurationError(msg)

        unknown = set(config) - set(REQUIRED_OPTIONS) - set(OPTIONAL_OPTIONS)
        if unknown:
            logger.debug("Ignoring unknown client options: %s", sorted(unknown))

        return cls(
            api=config["api"],
            credentials=config["credentials"],
            client=config["client"],
            signature=config["signature"],
            error_parser=config["error_parser"],
            endpoint=config["endpoint"],
            serializer=config["serializer"],
            region=config.get("region"),
            defaults=MappingProxyType(dict(config.get("defaults") or {})),
            exception_class=exception_class,
            result_parser=config.get("result_parser"),
            logger=config.get("logger"),
        )


def _as_tuple(value: str | list[str] | tuple[str, ...] | None) -> tuple[str, ...]:
    if not value:
        return ()
    if isinstance(value, str):
        return (value,)
    return tuple(value)


@dataclass(frozen=True)
class PaginatorConfig:
    """Pagination settings of one operation.

    Token and result keys may be a single name or a list of names. Output
    tokens, result keys and more_results are jmespath expressions evaluated
    against each page.

    Args:
        input_token: Request parameters receiving the previous page's tokens.
        output_token: Expressions locating the next page's tokens in a result.
        result_key: Expressions locating the items of a page.
        limit_key: Request parameter limiting the size of a page.
        more_results: Expression that is false on the last page.
        page_size: Value sent in limit_key on every request.
        limit: Maximum number of items a ResourceIterator yields.
    """

    input_token: tuple[str, ...] = ()
    output_token: tuple[str, ...] = ()
    result_key: tuple[str, ...] = ()
    limit_key: str | None = None
    more_results: str | None = None
    page_size: int | None = None
    limit: int | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> PaginatorConfig:
        return cls(
            input_token=_as_tuple(data.get("input_token")),
            output_token=_as_tuple(data.get("output_token")),
            result_key=_as_tuple(data.get("result_key")),
            limit_key=data.get("limit_key"),
            more_results=data.get("more_results"),
            page_size=data.get("page_size"),
            limit=data.get("limit"),
        )

    @property
    def is_paginated(self) -> bool:
        return bool(self.input_token) and bool(self.output_token)

    @property
    def has_result_key(self) -> bool:
        return bool(self.result_key)


class AcceptorState(StrEnum):
    """State an acceptor moves a waiter to when it matches."""

    SUCCESS = "success"
    FAILURE = "failure"
    RETRY = "retry"


class Matcher(StrEnum):
    PATH = "path"
    PATH_ALL = "pathAll"
    PATH_ANY = "pathAny"
    STATUS = "status"
    ERROR = "error"


@dataclass(frozen=True)
class Acceptor:
    state: AcceptorState
    matcher: Matcher
    expected: Any
    argument: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Acceptor:
        try:
            return cls(
                state=AcceptorState(data["state"]),
                matcher=Matcher(data["matcher"]),
                expected=data.get("expected"),
                argument=data.get("argument"),
            )
        except (KeyError, ValueError) as e:
            msg = f"Invalid waiter acceptor {dict(data)!r}: {e}"
            raise ConfigurationError(msg) from e


@dataclass(frozen=True)
class WaiterConfig:
    """Polling settings of a waiter.

    Args:
        operation: Operation executed on each attempt. Unused by callable waiters.
        acceptors: Acceptors evaluated in order after each attempt.
        max_attempts: Attempts made before the waiter times out.
        delay: Time slept between attempts.
        before_wait: Called with the attempt number before each sleep.
    """

    operation: str | None = None
    acceptors: tuple[Acceptor, ...] = ()
    max_attempts: int = DEFAULT_WAITER_MAX_ATTEMPTS
    delay: Duration = field(
        default_factory=lambda: Duration.from_seconds(DEFAULT_WAITER_DELAY_SECONDS)
    )
    before_wait: Callable[[int], None] | None = None

    @staticmethod
    def normalize(data: Mapping[str, Any]) -> dict[str, Any]:
        """Return waiter options with botocore camelCase keys renamed to snake_case.

        Within one mapping the snake_case key takes precedence.
        """
        options = dict(data)
        if "maxAttempts" in options:
            max_attempts = options.pop("maxAttempts")
            options.setdefault("max_attempts", max_attempts)
        return options

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> WaiterConfig:
        """Create from snake_case options or a botocore waiter definition."""
        data = cls.normalize(data)
        delay = data.get("delay", DEFAULT_WAITER_DELAY_SECONDS)
        if not isinstance(delay, Duration):
            delay = Duration.from_seconds(delay)
        max_attempts = data.get("max_attempts", DEFAULT_WAITER_MAX_ATTEMPTS)
        if max_attempts < 1:
            msg = f"max_attempts must be at least 1, got {max_attempts}"
            raise ConfigurationError(msg)
        return cls(
            operation=data.get("operation"),
            acceptors=tuple(
                a if isinstance(a, Acceptor) else Acceptor.from_dict(a)
                for a in data.get("acceptors", ())
            ),
            max_attempts=max_attempts,
            delay=delay,
            before_wait=data.get("before_wait"),
        )

    @property
    def delay_seconds(self) -> int:
        return self.delay.to_seconds()
