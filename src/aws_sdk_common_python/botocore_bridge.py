"""Concrete collaborators built on botocore, and a factory wiring them into an AwsClient."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING, Any

import boto3  # type: ignore
from botocore.auth import SigV4Auth  # type: ignore[import-untyped]
from botocore.awsrequest import (  # type: ignore[import-untyped]
    create_request_object,
    prepare_request_dict,
)
from botocore.exceptions import (  # type: ignore[import-untyped]
    ConnectionError as BotocoreConnectionError,
    HTTPClientError,
)
from botocore.httpsession import URLLib3Session  # type: ignore[import-untyped]
from botocore.model import ServiceModel  # type: ignore[import-untyped]
from botocore.parsers import (  # type: ignore[import-untyped]
    ResponseParserError,
    create_parser,
)
from botocore.serialize import create_serializer  # type: ignore[import-untyped]

from aws_sdk_common_python.api import ApiDescription
from aws_sdk_common_python.client import AwsClient
from aws_sdk_common_python.exceptions import ConfigurationError, TransportError

if TYPE_CHECKING:
    from concurrent.futures import Future

    from botocore.awsrequest import AWSRequest, AWSResponse  # type: ignore[import-untyped]

    from aws_sdk_common_python.command import Transaction

logger = logging.getLogger(__name__)


def _response_dict(response: AWSResponse) -> dict[str, Any]:
    return {
        "status_code": response.status_code,
        "headers": response.headers,
        "body": response.content,
    }


class SigV4Signer:
    """Sign requests with AWS Signature Version 4."""

    def __init__(self, signing_name: str, region: str) -> None:
        self.signing_name = signing_name
        self.region = region

    def sign_request(self, request: AWSRequest, credentials: Any) -> AWSRequest:
        if hasattr(credentials, "get_frozen_credentials"):
            credentials = credentials.get_frozen_credentials()
        SigV4Auth(credentials, self.signing_name, self.region).add_auth(request)
        return request


class BotocoreSerializer:
    """Serialize commands with the botocore serializer of the service protocol."""

    def __init__(self, service_model: ServiceModel, endpoint: str) -> None:
        self._service_model = service_model
        self._endpoint = endpoint
        self._serializer = create_serializer(
            service_model.protocol, include_validation=True
        )

    def __call__(self, transaction: Transaction) -> AWSRequest:
        operation_model = self._service_model.operation_model(transaction.command.name)
        request_dict = self._serializer.serialize_to_request(
            transaction.command.to_dict(), operation_model
        )
        prepare_request_dict(request_dict, endpoint_url=self._endpoint, context={})
        return create_request_object(request_dict)


class BotocoreErrorParser:
    """Parse error responses with the botocore parser of the service protocol.

    Returns a mapping with code, type and message keys. Responses botocore
    cannot parse yield an empty mapping.
    """

    def __init__(self, protocol: str) -> None:
        self._parser = create_parser(protocol)

    def __call__(self, response: AWSResponse) -> dict[str, Any]:
        try:
            parsed = self._parser.parse(_response_dict(response), None)
        except ResponseParserError:
            logger.warning(
                "Unable to parse error response with status %s", response.status_code
            )
            return {}
        error = parsed.get("Error") or {}
        return {
            "code": error.get("Code"),
            "type": error.get("Type"),
            "message": error.get("Message"),
        }


class BotocoreResultParser:
    """Parse successful responses into the operation's output shape."""

    def __init__(self, service_model: ServiceModel) -> None:
        self._service_model = service_model
        self._parser = create_parser(service_model.protocol)

    def __call__(self, transaction: Transaction) -> dict[str, Any]:
        operation_model = self._service_model.operation_model(transaction.command.name)
        return self._parser.parse(
            _response_dict(transaction.response), operation_model.output_shape
        )


class Urllib3Transport:
    """Send requests with the botocore urllib3 session.

    Deferred sends run on a thread pool. Connection failures raise
    TransportError without a response; error statuses are returned as
    regular responses.
    """

    def __init__(self, max_workers: int = 10, session: URLLib3Session | None = None):
        self._session = session or URLLib3Session()
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="aws-sdk-transport"
        )

    def send(
        self, request: AWSRequest, future: bool = False
    ) -> AWSResponse | Future[AWSResponse]:
        if future:
            return self._executor.submit(self._send, request)
        return self._send(request)

    def _send(self, request: AWSRequest) -> AWSResponse:
        prepared = request.prepare()
        try:
            response = self._session.send(prepared)
        except (HTTPClientError, BotocoreConnectionError) as e:
            logger.exception("Failed to send request to %s", prepared.url)
            raise TransportError(str(e), request=request) from e
        logger.debug(
            "Received status %s from %s", response.status_code, prepared.url
        )
        return response

    def close(self) -> None:
        self._executor.shutdown(wait=True)
        self._session.close()

    def __enter__(self) -> Urllib3Transport:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def create_client(
    service_name: str,
    region: str | None = None,
    endpoint: str | None = None,
    session: boto3.Session | None = None,
    api_version: str | None = None,
    **options: Any,
) -> AwsClient:
    """Create an AwsClient for a service shipped with botocore.

    Region and credentials come from the boto3 session. Any other client
    option (defaults, exception_class, logger, client...) may be passed as a
    keyword argument and takes precedence over the wired-in collaborators.

    Raises:
        ConfigurationError: When no region or endpoint can be determined, or
            no credentials are available.
    """
    session = session or boto3.Session(region_name=region)
    region = region or session.region_name
    api = ApiDescription.from_botocore(service_name, api_version)

    if endpoint is None:
        if not region:
            msg = f"A region or an endpoint is required to create a {service_name} client"
            raise ConfigurationError(msg)
        endpoint = f"https://{api.service_name}.{region}.amazonaws.com"

    service_model = ServiceModel(api.service, service_name=service_name)
    config: dict[str, Any] = {
        "api": api,
        "credentials": session.get_credentials(),
        "client": options.pop("client", None) or Urllib3Transport(),
        "signature": SigV4Signer(api.signing_name, region or ""),
        "error_parser": BotocoreErrorParser(service_model.protocol),
        "endpoint": endpoint,
        "serializer": BotocoreSerializer(service_model, endpoint),
        "region": region,
        "result_parser": BotocoreResultParser(service_model),
    }
    config.update(options)

    logger.debug(
        "Creating %s client with endpoint: '%s', region: '%s'",
        service_name,
        endpoint,
        region,
    )
    return AwsClient(config)
