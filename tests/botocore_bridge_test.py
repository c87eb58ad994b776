"""Tests for the botocore_bridge module."""

from concurrent.futures import Future
from unittest.mock import Mock, patch

import pytest
from botocore.exceptions import (  # type: ignore[import-untyped]
    ConnectTimeoutError,
    EndpointConnectionError,
    HTTPClientError,
)
from botocore.parsers import ResponseParserError  # type: ignore[import-untyped]

from aws_sdk_common_python.api import ApiDescription
from aws_sdk_common_python.botocore_bridge import (
    BotocoreErrorParser,
    BotocoreResultParser,
    BotocoreSerializer,
    SigV4Signer,
    Urllib3Transport,
    create_client,
)
from aws_sdk_common_python.client import AwsClient
from aws_sdk_common_python.command import Command, Transaction
from aws_sdk_common_python.exceptions import (
    AwsException,
    ConfigurationError,
    TransportError,
)
from tests.test_helpers import FakeResponse, create_api, create_config

# region Error parser


def test_error_parser_json():
    parser = BotocoreErrorParser("json")
    response = FakeResponse(
        status_code=400,
        content=b'{"__type":"com.amazon#ThrottlingException","message":"Rate exceeded"}',
    )

    error = parser(response)

    assert error["code"] == "ThrottlingException"
    assert error["message"] == "Rate exceeded"


def test_error_parser_query():
    """Test query protocol errors carry the error type."""
    parser = BotocoreErrorParser("query")
    body = (
        b"<ErrorResponse><Error><Type>Sender</Type><Code>Throttling</Code>"
        b"<Message>Rate exceeded</Message></Error><RequestId>req-1</RequestId>"
        b"</ErrorResponse>"
    )

    error = parser(FakeResponse(status_code=400, content=body))

    assert error == {"code": "Throttling", "type": "Sender", "message": "Rate exceeded"}


def test_error_parser_unparseable_response():
    """Test responses botocore can't parse give an empty error."""
    with patch("aws_sdk_common_python.botocore_bridge.create_parser") as create:
        create.return_value.parse.side_effect = ResponseParserError("bad body")
        parser = BotocoreErrorParser("query")

    assert parser(FakeResponse(status_code=500, content=b"<html>")) == {}


def test_error_parser_passes_response_fields():
    with patch("aws_sdk_common_python.botocore_bridge.create_parser") as create:
        create.return_value.parse.return_value = {}
        parser = BotocoreErrorParser("json")

    response = FakeResponse(status_code=404, headers={"h": "v"}, content=b"{}")
    assert parser(response) == {"code": None, "type": None, "message": None}
    create.assert_called_once_with("json")
    create.return_value.parse.assert_called_once_with(
        {"status_code": 404, "headers": {"h": "v"}, "body": b"{}"}, None
    )


# endregion Error parser

# region Result parser and serializer


def test_result_parser_uses_output_shape():
    service_model = Mock(protocol="json")
    operation_model = service_model.operation_model.return_value
    transaction = Transaction(Mock(), Command("ListThings"))
    transaction.response = FakeResponse(content=b'{"Things": []}')

    with patch("aws_sdk_common_python.botocore_bridge.create_parser") as create:
        create.return_value.parse.return_value = {"Things": []}
        parser = BotocoreResultParser(service_model)
        result = parser(transaction)

    assert result == {"Things": []}
    service_model.operation_model.assert_called_once_with("ListThings")
    create.return_value.parse.assert_called_once_with(
        {"status_code": 200, "headers": {}, "body": b'{"Things": []}'},
        operation_model.output_shape,
    )


def test_serializer_builds_request_object():
    service_model = Mock(protocol="json")
    operation_model = service_model.operation_model.return_value
    transaction = Transaction(Mock(), Command("ListThings", {"MaxResults": 1}))

    with (
        patch("aws_sdk_common_python.botocore_bridge.create_serializer") as create,
        patch("aws_sdk_common_python.botocore_bridge.prepare_request_dict") as prepare,
        patch(
            "aws_sdk_common_python.botocore_bridge.create_request_object"
        ) as create_request,
    ):
        serializer = BotocoreSerializer(service_model, "https://example.test")
        request = serializer(transaction)

    create.assert_called_once_with("json", include_validation=True)
    serialize = create.return_value.serialize_to_request
    serialize.assert_called_once_with({"MaxResults": 1}, operation_model)
    prepare.assert_called_once_with(
        serialize.return_value, endpoint_url="https://example.test", context={}
    )
    create_request.assert_called_once_with(serialize.return_value)
    assert request is create_request.return_value


# endregion Result parser and serializer

# region Signer


def test_signer_uses_frozen_credentials():
    credentials = Mock()
    request = Mock()

    with patch("aws_sdk_common_python.botocore_bridge.SigV4Auth") as auth:
        signed = SigV4Signer("example", "us-east-1").sign_request(request, credentials)

    assert signed is request
    auth.assert_called_once_with(
        credentials.get_frozen_credentials.return_value, "example", "us-east-1"
    )
    auth.return_value.add_auth.assert_called_once_with(request)


def test_signer_plain_credentials():
    credentials = object()
    with patch("aws_sdk_common_python.botocore_bridge.SigV4Auth") as auth:
        SigV4Signer("example", "eu-west-1").sign_request(Mock(), credentials)
    assert auth.call_args.args[0] is credentials


# endregion Signer

# region Transport


def test_transport_send():
    session = Mock()
    request = Mock()
    transport = Urllib3Transport(max_workers=1, session=session)
    try:
        response = transport.send(request)
    finally:
        transport.close()

    session.send.assert_called_once_with(request.prepare.return_value)
    assert response is session.send.return_value


def test_transport_send_future():
    session = Mock()
    transport = Urllib3Transport(max_workers=1, session=session)
    try:
        future = transport.send(Mock(), future=True)
        assert isinstance(future, Future)
        assert future.result(timeout=5) is session.send.return_value
    finally:
        transport.close()
    session.close.assert_called_once_with()


def test_transport_connection_failure():
    """Test HTTP client errors raise TransportError without a response."""
    session = Mock()
    session.send.side_effect = HTTPClientError(error="connection reset")
    request = Mock(url="https://example.test/")
    transport = Urllib3Transport(max_workers=1, session=session)
    try:
        with pytest.raises(TransportError) as exc_info:
            transport.send(request)
    finally:
        transport.close()

    error = exc_info.value
    assert error.request is request
    assert error.response is None
    assert error.get_url() == "https://example.test/"
    assert isinstance(error.__cause__, HTTPClientError)


@pytest.mark.parametrize(
    "exception",
    [
        EndpointConnectionError(endpoint_url="https://example.test/"),
        ConnectTimeoutError(endpoint_url="https://example.test/"),
    ],
)
def test_transport_endpoint_connection_failure(exception):
    """Test botocore connection errors raise TransportError with the request."""
    session = Mock()
    session.send.side_effect = exception
    request = Mock(url="https://example.test/")

    with Urllib3Transport(max_workers=1, session=session) as transport:
        with pytest.raises(TransportError) as exc_info:
            transport.send(request)

    assert exc_info.value.get_url() == "https://example.test/"
    assert exc_info.value.__cause__ is exception
    session.close.assert_called_once_with()


def test_client_connection_failure_is_normalized():
    """Test connection failures are normalized as request failures, not uncaught errors."""
    session = Mock()
    session.send.side_effect = EndpointConnectionError(
        endpoint_url="https://example.test/"
    )
    transport = Urllib3Transport(max_workers=1, session=session)
    client = AwsClient(
        create_config(
            client=transport,
            serializer=lambda transaction: Mock(url="https://example.test/ListThings"),
        )
    )

    with client, pytest.raises(AwsException) as exc_info:
        client.list_things()

    error = exc_info.value
    assert str(error).startswith('Error executing AwsClient::listThings() on ""; ')
    assert error.request_url == "https://example.test/ListThings"
    assert isinstance(error.__cause__, TransportError)
    session.close.assert_called_once_with()


# endregion Transport

# region create_client


@pytest.fixture
def from_botocore():
    with patch.object(ApiDescription, "from_botocore", return_value=create_api()) as f:
        yield f


def _session(region="us-west-2"):
    session = Mock(region_name=region)
    session.get_credentials.return_value = Mock(name="credentials")
    return session


def test_create_client(from_botocore):
    session = _session()
    transport = Mock()

    client = create_client("example", session=session, client=transport)

    assert isinstance(client, AwsClient)
    assert client.endpoint == "https://example.us-west-2.amazonaws.com"
    assert client.region == "us-west-2"
    assert client.transport is transport
    assert client.credentials is session.get_credentials.return_value
    assert isinstance(client.signature, SigV4Signer)
    assert client.signature.signing_name == "example"
    assert isinstance(client.config.error_parser, BotocoreErrorParser)
    assert isinstance(client.config.serializer, BotocoreSerializer)
    assert isinstance(client.config.result_parser, BotocoreResultParser)
    from_botocore.assert_called_once_with("example", None)


def test_create_client_explicit_region_and_endpoint(from_botocore):
    client = create_client(
        "example",
        region="eu-central-1",
        endpoint="http://localhost:4566",
        session=_session(),
        client=Mock(),
        api_version="2024-01-01",
    )

    assert client.region == "eu-central-1"
    assert client.endpoint == "http://localhost:4566"
    from_botocore.assert_called_once_with("example", "2024-01-01")


def test_create_client_options_override(from_botocore):
    client = create_client(
        "example", session=_session(), client=Mock(), defaults={"Owner": "me"}
    )
    assert dict(client.defaults) == {"Owner": "me"}


def test_create_client_requires_region_or_endpoint(from_botocore):
    with pytest.raises(ConfigurationError, match="region or an endpoint"):
        create_client("example", session=_session(region=None), client=Mock())


def test_create_client_requires_credentials(from_botocore):
    session = _session()
    session.get_credentials.return_value = None
    with pytest.raises(ConfigurationError, match="credentials is a required option"):
        create_client("example", session=session, client=Mock())


# endregion create_client
