"""Custom logging."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from aws_sdk_common_python.types import LoggerInterface

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping, MutableMapping


class ClientLogger(LoggerInterface):
    """Logger that adds client details to the extra fields of every record."""

    def __init__(
        self,
        logger: LoggerInterface,
        default_extra: Mapping[str, object],
    ) -> None:
        self._logger = logger
        self._default_extra = default_extra

    @classmethod
    def for_service(
        cls, service_name: str, logger: LoggerInterface | None = None
    ) -> ClientLogger:
        """Create a logger for a service client, defaulting to the package logger."""
        extra: MutableMapping[str, object] = {}
        if service_name:
            extra["serviceName"] = service_name
        return cls(
            logger=logger or logging.getLogger("aws_sdk_common_python.client"),
            default_extra=extra,
        )

    def with_operation(self, operation_name: str) -> ClientLogger:
        """Clone the logger with the operation name added to the extra fields."""
        # Use 'operationName' instead of 'name' as key because the stdlib LogRecord internally reserved 'name' parameter
        return ClientLogger(
            logger=self._logger,
            default_extra={**self._default_extra, "operationName": operation_name},
        )

    def get_logger(self) -> LoggerInterface:
        """Get the underlying logger."""
        return self._logger

    def debug(
        self, msg: object, *args: object, extra: Mapping[str, object] | None = None
    ) -> None:
        self._log(self._logger.debug, msg, *args, extra=extra)

    def info(
        self, msg: object, *args: object, extra: Mapping[str, object] | None = None
    ) -> None:
        self._log(self._logger.info, msg, *args, extra=extra)

    def warning(
        self, msg: object, *args: object, extra: Mapping[str, object] | None = None
    ) -> None:
        self._log(self._logger.warning, msg, *args, extra=extra)

    def error(
        self, msg: object, *args: object, extra: Mapping[str, object] | None = None
    ) -> None:
        self._log(self._logger.error, msg, *args, extra=extra)

    def exception(
        self, msg: object, *args: object, extra: Mapping[str, object] | None = None
    ) -> None:
        self._log(self._logger.exception, msg, *args, extra=extra)

    def _log(
        self,
        log_func: Callable,
        msg: object,
        *args: object,
        extra: Mapping[str, object] | None = None,
    ):
        merged_extra = {**self._default_extra, **(extra or {})}
        log_func(msg, *args, extra=merged_extra)
