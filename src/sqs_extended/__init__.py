"""sqs_extended: SQS clients that keep large message payloads in S3."""

import importlib.metadata as importlib_metadata

from sqs_extended.aio import AsyncExtendedClient
from sqs_extended.client import ExtendedClient
from sqs_extended.config import (
    AttributeNaming,
    AwsManagedKey,
    CustomerKey,
    ExtendedClientConfig,
    WireFormat,
    validate_key_prefix,
)
from sqs_extended.errors import (
    AttributeSizeExceededError,
    InvalidArgumentError,
    InvalidKeyPrefixError,
    MalformedPointerError,
    PayloadNotFoundError,
    ReservedAttributeNameError,
    SqsExtendedError,
    TooManyAttributesError,
)
from sqs_extended.pointer import PointerCodec
from sqs_extended.stores import (
    AsyncPayloadStore,
    InMemoryPayloadStore,
    PayloadStore,
    S3PayloadStore,
    ThreadedPayloadStore,
)
from sqs_extended.types import BlobPointer


def _detect_version() -> str:
    """Return installed package version or a local fallback when metadata is unavailable."""
    try:
        return importlib_metadata.version("sqs-extended")
    except importlib_metadata.PackageNotFoundError:
        return "0.0.0+unknown"


__version__ = _detect_version()

__all__ = [
    "AsyncExtendedClient",
    "AsyncPayloadStore",
    "AttributeNaming",
    "AttributeSizeExceededError",
    "AwsManagedKey",
    "BlobPointer",
    "CustomerKey",
    "ExtendedClient",
    "ExtendedClientConfig",
    "InMemoryPayloadStore",
    "InvalidArgumentError",
    "InvalidKeyPrefixError",
    "MalformedPointerError",
    "PayloadNotFoundError",
    "PayloadStore",
    "PointerCodec",
    "ReservedAttributeNameError",
    "S3PayloadStore",
    "SqsExtendedError",
    "ThreadedPayloadStore",
    "TooManyAttributesError",
    "WireFormat",
    "validate_key_prefix",
]
