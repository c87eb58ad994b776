"""Test helpers building clients with fake collaborators."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any
from unittest.mock import Mock

from aws_sdk_common_python.api import ApiDescription
from aws_sdk_common_python.client import AwsClient

ENDPOINT = "https://example.us-east-1.amazonaws.com"

SERVICE: dict[str, Any] = {
    "metadata": {
        "apiVersion": "2024-01-01",
        "endpointPrefix": "example",
        "protocol": "json",
        "serviceFullName": "Amazon Example Service",
        "serviceId": "Example",
        "signingName": "example",
    },
    "operations": {
        "ListThings": {"name": "ListThings"},
        "ListTags": {"name": "ListTags"},
        "DescribeThing": {"name": "DescribeThing"},
        "CreateThing": {"name": "CreateThing"},
    },
}

PAGINATORS: dict[str, Any] = {
    "pagination": {
        "ListThings": {
            "input_token": "NextToken",
            "output_token": "NextToken",
            "limit_key": "MaxResults",
            "result_key": "Things",
        },
        # paginated, but nothing to iterate over
        "ListTags": {
            "input_token": "Marker",
            "output_token": "NextMarker",
        },
    }
}

WAITERS: dict[str, Any] = {
    "version": 2,
    "waiters": {
        "ThingReady": {
            "operation": "DescribeThing",
            "delay": 2,
            "maxAttempts": 3,
            "acceptors": [
                {
                    "matcher": "path",
                    "argument": "Thing.Status",
                    "expected": "READY",
                    "state": "success",
                },
                {
                    "matcher": "path",
                    "argument": "Thing.Status",
                    "expected": "Failed",
                    "state": "failure",
                },
                {
                    "matcher": "error",
                    "expected": "ThingNotFound",
                    "state": "retry",
                },
            ],
        }
    },
}


@dataclass
class FakeRequest:
    url: str
    params: dict[str, Any] = field(default_factory=dict)
    signed: bool = False


@dataclass
class FakeResponse:
    status_code: int = 200
    headers: dict[str, str] = field(default_factory=dict)
    content: bytes = b""


def json_response(data: Any, status_code: int = 200) -> FakeResponse:
    return FakeResponse(status_code=status_code, content=json.dumps(data).encode())


class FakeSigner:
    def sign_request(self, request: FakeRequest, credentials: Any) -> FakeRequest:
        request.signed = True
        return request


def fake_serializer(transaction) -> FakeRequest:
    return FakeRequest(
        url=f"{ENDPOINT}/{transaction.command.name}",
        params=transaction.command.to_dict(),
    )


def create_api() -> ApiDescription:
    return ApiDescription(SERVICE, paginators=PAGINATORS, waiters=WAITERS)


def create_config(**overrides: Any) -> dict[str, Any]:
    transport = Mock()
    transport.send.return_value = json_response({})
    config: dict[str, Any] = {
        "api": create_api(),
        "credentials": {"access_key": "AKID", "secret_key": "secret"},
        "client": transport,
        "signature": FakeSigner(),
        "error_parser": Mock(return_value={}),
        "endpoint": ENDPOINT,
        "serializer": fake_serializer,
    }
    config.update(overrides)
    return config


def create_client(responses: list[Any] | None = None, **overrides: Any) -> AwsClient:
    """Create a client whose transport returns (or raises) the given responses in order."""
    config = create_config(**overrides)
    if responses is not None:
        config["client"].send.side_effect = responses
    return AwsClient(config)


def sent_params(client: AwsClient) -> list[dict[str, Any]]:
    """Return the parameters of every request the client's transport received."""
    return [c.args[0].params for c in client.transport.send.call_args_list]
