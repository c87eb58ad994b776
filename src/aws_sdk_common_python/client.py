"""Default AWS client implementation."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from botocore import xform_name  # type: ignore[import-untyped]

from aws_sdk_common_python.api import lcfirst, ucfirst
from aws_sdk_common_python.command import (
    Command,
    FutureResult,
    StructuredError,
    Transaction,
)
from aws_sdk_common_python.config import ClientConfig, PaginatorConfig, WaiterConfig
from aws_sdk_common_python.emitter import ERROR, INIT, PREPARED, PROCESS, Emitter
from aws_sdk_common_python.exceptions import (
    AwsException,
    NoResourceKeyError,
    OperationNotFoundError,
    PaginationUnsupportedError,
    TransportError,
)
from aws_sdk_common_python.logger import ClientLogger
from aws_sdk_common_python.paginator import ResourceIterator, ResultPaginator
from aws_sdk_common_python.waiter import ResourceWaiter, Waiter

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from aws_sdk_common_python.types import (
        HttpTransport,
        ServiceDescription,
        Signer,
    )

# Reserved command argument requesting deferred execution.
FUTURE_KEY = "@future"

# Responses with a status at or above this are failures.
ERROR_STATUS = 400


class AwsClient:
    """Client dispatching commands against a described service API.

    The client only orchestrates: serializing, signing, sending and error
    parsing are done by the collaborators passed in the configuration. See
    ClientConfig for the options.

    Raises:
        ConfigurationError: When a required option is missing.
    """

    def __init__(self, config: Mapping[str, Any] | ClientConfig) -> None:
        if not isinstance(config, ClientConfig):
            config = ClientConfig.from_dict(config)
        self._config = config
        self._emitter = Emitter()
        self._logger = ClientLogger.for_service(
            getattr(config.api, "service_name", ""), config.logger
        )
        self._method_names: dict[str, str] | None = None

    # region Accessors
    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def credentials(self) -> Any:
        return self._config.credentials

    @property
    def signature(self) -> Signer:
        return self._config.signature

    @property
    def endpoint(self) -> str:
        return self._config.endpoint

    @property
    def region(self) -> str | None:
        return self._config.region

    @property
    def api(self) -> ServiceDescription:
        return self._config.api

    @property
    def transport(self) -> HttpTransport:
        return self._config.client

    @property
    def defaults(self) -> Mapping[str, Any]:
        return self._config.defaults

    @property
    def emitter(self) -> Emitter:
        """The base interceptor chain copied into every new command."""
        return self._emitter

    # endregion Accessors

    # region Commands
    def get_command(self, name: str, args: Mapping[str, Any] | None = None) -> Command:
        """Create a command for an operation.

        The operation is looked up verbatim, then with its first letter
        capitalized. Arguments take precedence over the client defaults. The
        reserved "@future" argument marks the command for deferred execution
        and is not passed on as a parameter.

        Raises:
            OperationNotFoundError: When the API description has no such operation.
        """
        # Fail fast if the command cannot be found in the description.
        operations = self.api.operations
        if name not in operations:
            name = ucfirst(name)
            if name not in operations:
                raise OperationNotFoundError(name)

        params = dict(args or {})
        future = bool(params.pop(FUTURE_KEY, False))

        return Command(
            name=name,
            params={**self.defaults, **params},
            emitter=self._emitter.copy(),
            future=future,
        )

    def execute(self, command: Command) -> Any:
        """Execute a command.

        Returns the result of the command, or a FutureResult when the command
        is marked for deferred execution.

        Raises:
            AwsException: When anything goes wrong while executing the command.
        """
        return self._guard(command, lambda: self._execute(command))

    def _guard(self, command: Command, fn: Callable[[], Any]) -> Any:
        try:
            return fn()
        except AwsException:
            raise
        except Exception as e:
            # Wrap other uncaught exceptions for consistency
            self._logger.with_operation(command.name).exception(
                "Uncaught exception while executing %s", command.name
            )
            msg = (
                f"Uncaught exception while executing "
                f"{type(self).__name__}::{command.name} - {e}"
            )
            raise self._build_exception(msg, Transaction(self, command), e) from e

    def _execute(self, command: Command) -> Any:
        log = self._logger.with_operation(command.name)
        transaction = Transaction(self, command)

        command.emitter.emit(INIT, transaction)
        request = self.serialize_request(transaction)
        transaction.request = self.signature.sign_request(request, self.credentials)
        command.emitter.emit(PREPARED, transaction)

        log.debug(
            "Sending %s request to %s",
            command.name,
            getattr(transaction.request, "url", None),
        )
        try:
            if command.future:
                transaction.response = self.transport.send(
                    transaction.request, future=True
                )
            else:
                transaction.response = self.transport.send(transaction.request)
        except Exception as e:
            return self._handle_failure(transaction, e)

        if command.future:
            return self.create_future_result(transaction)
        return self._complete(transaction)

    def _complete(self, transaction: Transaction) -> Any:
        """Turn the received response into the transaction result."""
        try:
            response = transaction.response
            status_code = getattr(response, "status_code", 200)
            if status_code >= ERROR_STATUS:
                msg = f"Service responded with status code {status_code}"
                raise TransportError(
                    msg, request=transaction.request, response=response
                )
            transaction.intercept(self._parse_result(transaction))
            transaction.command.emitter.emit(PROCESS, transaction)
        except AwsException:
            raise
        except Exception as e:
            return self._handle_failure(transaction, e)
        return transaction.result

    def _handle_failure(self, transaction: Transaction, exception: Exception) -> Any:
        """Normalize a failure unless an error listener recovered from it."""
        transaction.fail(exception)
        transaction.command.emitter.emit(ERROR, transaction)
        if transaction.exception is None:
            self._logger.with_operation(transaction.command.name).debug(
                "Error listener recovered %s", transaction.command.name
            )
            return transaction.result

        error = self.create_command_exception(transaction)
        self._logger.with_operation(transaction.command.name).debug(
            "%s", error, extra=error.build_logger_extras()
        )
        raise error

    def _parse_result(self, transaction: Transaction) -> Any:
        if self._config.result_parser is not None:
            return self._config.result_parser(transaction)
        content = getattr(transaction.response, "content", None)
        if not content:
            return {}
        return json.loads(content)

    def serialize_request(self, transaction: Transaction) -> Any:
        """Create the wire request of a transaction with the configured serializer."""
        return self._config.serializer(transaction)

    def create_future_result(self, transaction: Transaction) -> FutureResult:
        """Wrap the deferred response of a transaction in a FutureResult."""
        deferred = transaction.response

        def resolve() -> Any:
            # Materializing the response populates the result.
            def _resolve() -> Any:
                try:
                    transaction.response = deferred.result()
                except Exception as e:
                    return self._handle_failure(transaction, e)
                return self._complete(transaction)

            return self._guard(transaction.command, _resolve)

        def cancel() -> bool:
            return deferred.cancel()

        return FutureResult(resolve, cancel)

    # endregion Commands

    # region Errors
    def create_command_exception(self, transaction: Transaction) -> AwsException:
        """Create the AwsException for a transaction that holds an exception.

        AwsExceptions are returned as-is. For failures that carry a service
        response, the parsed error is stored in transaction.context.aws_error.
        """
        exception = transaction.exception
        # Throw AWS exceptions as-is
        if isinstance(exception, AwsException):
            return exception

        url: str | None
        if isinstance(exception, TransportError) and exception.response is not None:
            url = exception.get_url()
            # Add the parsed response error to the exception.
            transaction.context.aws_error = self._parse_error(exception.response)
            aws_error = transaction.context.aws_error
            # Only use the AWS error code if the parser could parse the response.
            if not aws_error.type:
                service_error = str(exception)
            else:
                service_error = (
                    f"{aws_error.code or ''} ({aws_error.type or ''} error): "
                    f"{aws_error.message or ''}"
                ).strip()
        else:
            url = None
            transaction.context.aws_error = StructuredError()
            service_error = str(exception)

        msg = (
            f"Error executing {type(self).__name__}::"
            f'{lcfirst(transaction.command.name)}() on "{url or ""}"; {service_error}'
        )
        return self._build_exception(msg, transaction, exception)

    def _parse_error(self, response: Any) -> StructuredError:
        try:
            parsed = self._config.error_parser(response)
        except Exception:
            self._logger.exception("Unable to parse the error response")
            return StructuredError()
        return StructuredError.from_dict(parsed)

    def _build_exception(
        self, message: str, transaction: Transaction, cause: BaseException | None
    ) -> AwsException:
        error = self._config.exception_class(message, transaction, cause)
        if not isinstance(error, AwsException):
            self._logger.warning(
                "exception_class returned %s, using AwsException instead",
                type(error).__name__,
            )
            error = AwsException(message, transaction, cause)
        return error

    # endregion Errors

    # region Pagination and waiters
    def _paginator_config(
        self, name: str, config: Mapping[str, Any] | None
    ) -> PaginatorConfig:
        operation = self._operation_name(name)
        return PaginatorConfig.from_dict(
            {**self.api.get_paginator_config(operation), **(config or {})}
        )

    def get_paginator(
        self,
        name: str,
        args: Mapping[str, Any] | None = None,
        config: Mapping[str, Any] | None = None,
    ) -> ResultPaginator:
        """Iterate over the result pages of an operation.

        Raises:
            PaginationUnsupportedError: When the operation has no input or output token.
        """
        paginator_config = self._paginator_config(name, config)
        if paginator_config.is_paginated:
            return ResultPaginator(
                self, self._operation_name(name), args or {}, paginator_config
            )

        msg = (
            f"Results for the {name} operation of "
            f"{self.api.service_full_name} cannot be paginated."
        )
        raise PaginationUnsupportedError(msg)

    def get_iterator(
        self,
        name: str,
        args: Mapping[str, Any] | None = None,
        config: Mapping[str, Any] | None = None,
    ) -> ResourceIterator:
        """Iterate over the resources of all result pages of an operation.

        Raises:
            NoResourceKeyError: When the operation has no result key.
        """
        paginator_config = self._paginator_config(name, config)
        if paginator_config.has_result_key:
            return ResourceIterator(
                ResultPaginator(
                    self, self._operation_name(name), args or {}, paginator_config
                ),
                paginator_config,
            )

        msg = (
            f"There are no resources to iterate for the {name} operation of "
            f"{self.api.service_full_name}."
        )
        raise NoResourceKeyError(msg)

    def get_waiter(
        self,
        name: str,
        args: Mapping[str, Any] | None = None,
        config: Mapping[str, Any] | None = None,
    ) -> ResourceWaiter:
        """Create a waiter from the named waiter of the API description.

        Raises:
            UnknownWaiterError: When the service has no such waiter.
        """
        waiter_config = WaiterConfig.from_dict(
            {
                **WaiterConfig.normalize(self.api.get_waiter_config(name)),
                **WaiterConfig.normalize(config or {}),
            }
        )
        return ResourceWaiter(self, name, args or {}, waiter_config)

    def wait_until(
        self,
        name: str | Callable[[int], Any],
        args: Mapping[str, Any] | None = None,
        config: Mapping[str, Any] | None = None,
    ) -> None:
        """Block until a waiter accepts.

        name is either the name of a waiter in the API description, or a
        callable called with the attempt number until it returns a truthy
        value. For callables, args and config are merged into the waiter
        settings.

        Raises:
            WaiterFailure: When the waiter fails or times out.
        """
        waiter: Waiter
        if callable(name):
            options = {
                **WaiterConfig.normalize(args or {}),
                **WaiterConfig.normalize(config or {}),
            }
            waiter = Waiter(name, WaiterConfig.from_dict(options))
        else:
            waiter = self.get_waiter(name, args, config)
        waiter.wait()

    # endregion Pagination and waiters

    def _operation_name(self, name: str) -> str:
        if name in self.api.operations:
            return name
        canonical = ucfirst(name)
        return canonical if canonical in self.api.operations else name

    def __getattr__(self, name: str) -> Callable[..., Any]:
        """Expose operations as methods, e.g. client.list_buckets(Bucket="b")."""
        if name.startswith("_"):
            raise AttributeError(name)
        if self._method_names is None:
            self._method_names = {xform_name(op): op for op in self.api.operations}
        operation = self._method_names.get(name) or self._operation_name(name)
        if operation not in self.api.operations:
            msg = f"{type(self).__name__!r} object has no attribute {name!r}"
            raise AttributeError(msg)

        def _api_call(**kwargs: Any) -> Any:
            return self.execute(self.get_command(operation, kwargs))

        _api_call.__name__ = name
        return _api_call

    def close(self) -> None:
        """Release the transport's connections, if the transport can be closed."""
        close = getattr(self.transport, "close", None)
        if callable(close):
            close()

    def __enter__(self) -> AwsClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.api.service_full_name!r}, endpoint={self.endpoint!r})"
