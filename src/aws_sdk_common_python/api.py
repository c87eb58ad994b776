"""Service API descriptions."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from botocore.exceptions import DataNotFoundError  # type: ignore[import-untyped]
from botocore.loaders import Loader, create_loader  # type: ignore[import-untyped]

from aws_sdk_common_python.exceptions import UnknownWaiterError

if TYPE_CHECKING:
    from collections.abc import Mapping

logger = logging.getLogger(__name__)

PAGINATOR_KEYS: tuple[str, ...] = (
    "input_token",
    "output_token",
    "result_key",
    "limit_key",
    "more_results",
)


def ucfirst(name: str) -> str:
    return name[:1].upper() + name[1:]


def lcfirst(name: str) -> str:
    return name[:1].lower() + name[1:]


class ApiDescription:
    """Description of a service API in the botocore data format.

    Args:
        service: The service-2 document (metadata, operations, shapes).
        paginators: The paginators-1 document, if the service has one.
        waiters: The waiters-2 document, if the service has one.
    """

    def __init__(
        self,
        service: Mapping[str, Any],
        paginators: Mapping[str, Any] | None = None,
        waiters: Mapping[str, Any] | None = None,
    ) -> None:
        self._service = service
        self._metadata: Mapping[str, Any] = service.get("metadata", {})
        self._operations: dict[str, Mapping[str, Any]] = {
            ucfirst(name): shape
            for name, shape in service.get("operations", {}).items()
        }
        self._paginators: Mapping[str, Any] = (paginators or {}).get("pagination", {})
        self._waiters: Mapping[str, Any] = (waiters or {}).get("waiters", {})

    @classmethod
    def from_botocore(
        cls,
        service_name: str,
        api_version: str | None = None,
        loader: Loader | None = None,
    ) -> ApiDescription:
        """Load the description of a service shipped with botocore."""
        loader = loader or create_loader()
        service = loader.load_service_model(service_name, "service-2", api_version)
        api_version = service.get("metadata", {}).get("apiVersion", api_version)
        return cls(
            service,
            paginators=cls._load_optional(loader, service_name, "paginators-1", api_version),
            waiters=cls._load_optional(loader, service_name, "waiters-2", api_version),
        )

    @staticmethod
    def _load_optional(
        loader: Loader, service_name: str, type_name: str, api_version: str | None
    ) -> Mapping[str, Any] | None:
        try:
            return loader.load_service_model(service_name, type_name, api_version)
        except DataNotFoundError:
            logger.debug("No %s data for service %s", type_name, service_name)
            return None

    @property
    def service(self) -> Mapping[str, Any]:
        """The raw service document."""
        return self._service

    @property
    def metadata(self) -> Mapping[str, Any]:
        return self._metadata

    @property
    def operations(self) -> Mapping[str, Mapping[str, Any]]:
        return self._operations

    @property
    def service_name(self) -> str:
        return self._metadata.get("endpointPrefix") or self._metadata.get(
            "serviceId", ""
        )

    @property
    def service_full_name(self) -> str:
        return (
            self._metadata.get("serviceFullName")
            or self._metadata.get("serviceId")
            or self.service_name
        )

    @property
    def protocol(self) -> str | None:
        return self._metadata.get("protocol")

    @property
    def signing_name(self) -> str:
        return self._metadata.get("signingName") or self.service_name

    @property
    def api_version(self) -> str | None:
        return self._metadata.get("apiVersion")

    @property
    def waiter_names(self) -> list[str]:
        return sorted(self._waiters)

    def resolve_operation_name(self, name: str) -> str | None:
        """Return the canonical operation name, or None if there is no such operation.

        The name is looked up verbatim first, then with its first letter capitalized.
        """
        if name in self._operations:
            return name
        canonical = ucfirst(name)
        if canonical in self._operations:
            return canonical
        return None

    def has_paginator(self, name: str) -> bool:
        return name in self._paginators

    def get_paginator_config(self, name: str) -> dict[str, Any]:
        """Return the pagination settings of an operation.

        Every key is present; all are None when the operation does not paginate.
        """
        paginator = self._paginators.get(name, {})
        return {key: paginator.get(key) for key in PAGINATOR_KEYS}

    def get_waiter_config(self, name: str) -> dict[str, Any]:
        """Return the settings of a named waiter.

        Raises:
            UnknownWaiterError: When the service has no such waiter.
        """
        waiter = self._waiters.get(name) or self._waiters.get(ucfirst(name))
        if waiter is None:
            raise UnknownWaiterError(name, self.service_full_name)
        config: dict[str, Any] = {
            "operation": waiter.get("operation"),
            "acceptors": list(waiter.get("acceptors", [])),
        }
        # absent values fall back to the WaiterConfig defaults
        if waiter.get("delay") is not None:
            config["delay"] = waiter["delay"]
        if waiter.get("maxAttempts") is not None:
            config["max_attempts"] = waiter["maxAttempts"]
        return config

    def __repr__(self) -> str:
        return f"ApiDescription({self.service_full_name!r})"
