"""AWS SDK common client for Python."""

# Main client - used to execute commands against a service
from aws_sdk_common_python.api import ApiDescription
from aws_sdk_common_python.client import AwsClient
from aws_sdk_common_python.command import Command, FutureResult, Transaction

# Most common exceptions - users need to handle these exceptions
from aws_sdk_common_python.exceptions import (
    AwsException,
    AwsSdkError,
    ConfigurationError,
    OperationNotFoundError,
    WaiterFailure,
)

__all__ = [
    "ApiDescription",
    "AwsClient",
    "AwsException",
    "AwsSdkError",
    "Command",
    "ConfigurationError",
    "FutureResult",
    "OperationNotFoundError",
    "Transaction",
    "WaiterFailure",
]
