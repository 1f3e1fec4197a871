"""ExtendedClientConfig: behaviour settings for payload offloading."""

import re
from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Literal, cast

from sqs_extended.errors import InvalidKeyPrefixError
from sqs_extended.serde import (
    as_str_object_dict,
    bool_or_default,
    int_or_default,
    optional_string,
    string_or_default,
)

DEFAULT_PAYLOAD_SIZE_THRESHOLD = 262_144
MAX_QUEUE_ATTRIBUTES = 10
MAX_ALLOWED_ATTRIBUTES = MAX_QUEUE_ATTRIBUTES - 1
MAX_KEY_PREFIX_LENGTH = 1024 - 36

HandleEncoding = Literal["markers", "length-prefixed"]
_HANDLE_ENCODINGS = frozenset({"markers", "length-prefixed"})
_INVALID_KEY_PREFIX_CHARACTERS = re.compile(r"[^a-zA-Z0-9./_-]")


class AttributeNaming(Enum):
    """Which reserved attribute name is written on offloaded messages."""

    LEGACY = "legacy"
    CURRENT = "current"


@dataclass(frozen=True, slots=True)
class WireFormat:
    """Names and markers shared with other extended-client implementations.

    Both reserved attribute names are recognised on receive; only the one
    selected by ``AttributeNaming`` is written on send.
    """

    bucket_marker: str = "-..s3BucketName..-"
    key_marker: str = "-..s3Key..-"
    reserved_attribute_name: str = "ExtendedPayloadSize"
    legacy_reserved_attribute_name: str = "SQSLargePayloadSize"
    pointer_type_tag: str = "software.amazon.payloadoffloading.PayloadS3Pointer"
    legacy_pointer_type_tag: str = "com.amazon.sqs.javamessaging.MessageS3Pointer"

    def __post_init__(self) -> None:
        """Reject marker pairs that cannot be told apart."""
        if not self.bucket_marker or not self.key_marker:
            msg = "Handle markers must be non-empty."
            raise ValueError(msg)
        if self.bucket_marker == self.key_marker:
            msg = "Bucket and key markers must differ."
            raise ValueError(msg)

    @property
    def reserved_attribute_names(self) -> tuple[str, str]:
        """Return both reserved names, legacy first."""
        return (self.legacy_reserved_attribute_name, self.reserved_attribute_name)

    def attribute_name_for(self, naming: AttributeNaming) -> str:
        """Return the reserved attribute name written under ``naming``."""
        if naming is AttributeNaming.LEGACY:
            return self.legacy_reserved_attribute_name
        return self.reserved_attribute_name

    def to_dict(self) -> dict[str, object]:
        """Serialize the markers and names to a plain dictionary."""
        return {item.name: getattr(self, item.name) for item in fields(self)}

    @classmethod
    def from_dict(cls, value: Mapping[str, object]) -> "WireFormat":
        """Deserialize a wire format; absent keys keep their defaults."""
        defaults = cls()
        return cls(
            **{
                item.name: string_or_default(
                    value.get(item.name),
                    getattr(defaults, item.name),
                    field_name=f"WireFormat.{item.name}",
                )
                for item in fields(cls)
            }
        )


@dataclass(frozen=True, slots=True)
class AwsManagedKey:
    """SSE-KMS with the AWS managed key for S3."""

    def to_put_params(self) -> dict[str, str]:
        """Return ``put_object`` keyword arguments."""
        return {"ServerSideEncryption": "aws:kms"}

    def to_dict(self) -> dict[str, object]:
        """Serialize to a plain dictionary."""
        return {"type": "aws-managed-key"}


@dataclass(frozen=True, slots=True)
class CustomerKey:
    """SSE-KMS with a customer managed key."""

    kms_key_id: str

    def __post_init__(self) -> None:
        """Require a key identifier."""
        if not self.kms_key_id:
            msg = "CustomerKey.kms_key_id must be a non-empty string."
            raise ValueError(msg)

    def to_put_params(self) -> dict[str, str]:
        """Return ``put_object`` keyword arguments."""
        return {"ServerSideEncryption": "aws:kms", "SSEKMSKeyId": self.kms_key_id}

    def to_dict(self) -> dict[str, object]:
        """Serialize to a plain dictionary."""
        return {"type": "customer-key", "kms_key_id": self.kms_key_id}


ServerSideEncryption = AwsManagedKey | CustomerKey


def validate_key_prefix(prefix: str | None) -> str:
    """Trim and validate an object key prefix.

    Keys are ``prefix + uuid4()``, so the prefix leaves room for a 36-character
    UUID inside the 1024-character S3 key limit.
    """
    trimmed = (prefix or "").strip()
    if len(trimmed) > MAX_KEY_PREFIX_LENGTH:
        reason = f"length must not be greater than {MAX_KEY_PREFIX_LENGTH} characters"
        raise InvalidKeyPrefixError(trimmed, reason)
    if trimmed.startswith((".", "/")):
        raise InvalidKeyPrefixError(trimmed, "must not start with '.' or '/'")
    if ".." in trimmed:
        raise InvalidKeyPrefixError(trimmed, "must not contain '..'")
    if _INVALID_KEY_PREFIX_CHARACTERS.search(trimmed):
        reason = "allowed characters are letters, digits, '/', '_', '-', and '.'"
        raise InvalidKeyPrefixError(trimmed, reason)
    return trimmed


@dataclass(frozen=True, slots=True)
class ExtendedClientConfig:
    """Immutable settings for one extended client instance.

    The config describes *when* and *how* payloads move to the blob store.
    Which store is used is decided by the client wrapper: a store (or an S3
    client plus ``bucket_name``) enables offloading, no store means passthrough.
    """

    bucket_name: str | None = None
    payload_size_threshold: int = DEFAULT_PAYLOAD_SIZE_THRESHOLD
    always_through_s3: bool = False
    cleanup_payload: bool = True
    attribute_naming: AttributeNaming = AttributeNaming.LEGACY
    ignore_payload_not_found: bool = False
    key_prefix: str = ""
    max_allowed_attributes: int = MAX_ALLOWED_ATTRIBUTES
    handle_encoding: HandleEncoding = "markers"

    # S3 object settings
    server_side_encryption: ServerSideEncryption | None = None
    object_acl: str | None = None

    wire: WireFormat = field(default_factory=WireFormat)

    def __post_init__(self) -> None:
        """Validate ranges and normalize the key prefix."""
        if self.payload_size_threshold < 0:
            msg = "payload_size_threshold must be >= 0."
            raise ValueError(msg)
        if not 0 <= self.max_allowed_attributes < MAX_QUEUE_ATTRIBUTES:
            msg = f"max_allowed_attributes must be between 0 and {MAX_QUEUE_ATTRIBUTES - 1}."
            raise ValueError(msg)
        if self.handle_encoding not in _HANDLE_ENCODINGS:
            msg = f"Unknown handle_encoding {self.handle_encoding!r}. Expected markers/length-prefixed."
            raise ValueError(msg)
        if self.bucket_name is not None and not self.bucket_name:
            msg = "bucket_name must be a non-empty string or None."
            raise ValueError(msg)
        object.__setattr__(self, "key_prefix", validate_key_prefix(self.key_prefix))

    @property
    def reserved_attribute_name(self) -> str:
        """Return the reserved attribute name written on offloaded messages."""
        return self.wire.attribute_name_for(self.attribute_naming)

    def to_dict(self) -> dict[str, object]:
        """Serialize the config to a plain dictionary."""
        return {
            "bucket_name": self.bucket_name,
            "payload_size_threshold": self.payload_size_threshold,
            "always_through_s3": self.always_through_s3,
            "cleanup_payload": self.cleanup_payload,
            "attribute_naming": self.attribute_naming.value,
            "ignore_payload_not_found": self.ignore_payload_not_found,
            "key_prefix": self.key_prefix,
            "max_allowed_attributes": self.max_allowed_attributes,
            "handle_encoding": self.handle_encoding,
            "server_side_encryption": self.server_side_encryption.to_dict()
            if self.server_side_encryption is not None
            else None,
            "object_acl": self.object_acl,
            "wire": self.wire.to_dict(),
        }

    @classmethod
    def from_dict(cls, value: Mapping[str, object]) -> "ExtendedClientConfig":
        """Deserialize a config from a plain dictionary.

        ``use_legacy_reserved_attribute_name`` is accepted as an alias for
        ``attribute_naming`` so older settings files keep working.
        """
        handle_encoding = string_or_default(
            value.get("handle_encoding"),
            "markers",
            field_name="ExtendedClientConfig.handle_encoding",
        )
        if handle_encoding not in _HANDLE_ENCODINGS:
            msg = f"Unknown handle_encoding {handle_encoding!r}. Expected markers/length-prefixed."
            raise ValueError(msg)

        return cls(
            bucket_name=optional_string(value.get("bucket_name"), field_name="ExtendedClientConfig.bucket_name"),
            payload_size_threshold=int_or_default(
                value.get("payload_size_threshold"),
                DEFAULT_PAYLOAD_SIZE_THRESHOLD,
                field_name="ExtendedClientConfig.payload_size_threshold",
            ),
            always_through_s3=bool_or_default(
                value.get("always_through_s3"),
                False,
                field_name="ExtendedClientConfig.always_through_s3",
            ),
            cleanup_payload=bool_or_default(
                value.get("cleanup_payload"),
                True,
                field_name="ExtendedClientConfig.cleanup_payload",
            ),
            attribute_naming=_attribute_naming_from_dict(value),
            ignore_payload_not_found=bool_or_default(
                value.get("ignore_payload_not_found"),
                False,
                field_name="ExtendedClientConfig.ignore_payload_not_found",
            ),
            key_prefix=string_or_default(value.get("key_prefix"), "", field_name="ExtendedClientConfig.key_prefix"),
            max_allowed_attributes=int_or_default(
                value.get("max_allowed_attributes"),
                MAX_ALLOWED_ATTRIBUTES,
                field_name="ExtendedClientConfig.max_allowed_attributes",
            ),
            handle_encoding=cast("HandleEncoding", handle_encoding),
            server_side_encryption=_encryption_from_dict_value(value.get("server_side_encryption")),
            object_acl=optional_string(value.get("object_acl"), field_name="ExtendedClientConfig.object_acl"),
            wire=_wire_from_dict_value(value.get("wire")),
        )


def _attribute_naming_from_dict(value: Mapping[str, object]) -> AttributeNaming:
    """Resolve the naming tag from either the enum value or the legacy boolean flag."""
    raw = value.get("attribute_naming")
    if raw is not None:
        if not isinstance(raw, str):
            msg = "ExtendedClientConfig.attribute_naming must be a string."
            raise TypeError(msg)
        try:
            return AttributeNaming(raw)
        except ValueError:
            msg = f"Unknown attribute_naming {raw!r}. Expected legacy/current."
            raise ValueError(msg) from None

    use_legacy = bool_or_default(
        value.get("use_legacy_reserved_attribute_name"),
        True,
        field_name="ExtendedClientConfig.use_legacy_reserved_attribute_name",
    )
    return AttributeNaming.LEGACY if use_legacy else AttributeNaming.CURRENT


def _wire_from_dict_value(value: object) -> WireFormat:
    """Deserialize an optional wire format payload."""
    if value is None:
        return WireFormat()
    return WireFormat.from_dict(as_str_object_dict(value, field_name="ExtendedClientConfig.wire"))

def _encryption_from_dict_value(value: object) -> ServerSideEncryption | None:
    """Deserialize an optional server-side encryption payload."""
    if value is None:
        return None
    data = as_str_object_dict(value, field_name="ExtendedClientConfig.server_side_encryption")
    kind = data.get("type")
    if kind == "aws-managed-key":
        return AwsManagedKey()
    if kind == "customer-key":
        kms_key_id = data.get("kms_key_id")
        if not isinstance(kms_key_id, str):
            msg = "ExtendedClientConfig.server_side_encryption.kms_key_id must be a string."
            raise TypeError(msg)
        return CustomerKey(kms_key_id=kms_key_id)
    msg = f"Unknown server_side_encryption type {kind!r}. Expected aws-managed-key/customer-key."
    raise ValueError(msg)
