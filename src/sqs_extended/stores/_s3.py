"""S3PayloadStore: payload storage in Amazon S3 through a boto3 client."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from botocore.exceptions import ClientError

from sqs_extended.errors import InvalidArgumentError, PayloadNotFoundError

if TYPE_CHECKING:
    from sqs_extended.config import ExtendedClientConfig, ServerSideEncryption
    from sqs_extended.types import BlobPointer

logger = logging.getLogger(__name__)

_NOT_FOUND_CODES = frozenset({"NoSuchKey", "NotFound", "404"})


def is_not_found(exc: ClientError) -> bool:
    """Return whether a botocore error means the object does not exist."""
    return exc.response.get("Error", {}).get("Code") in _NOT_FOUND_CODES


class S3PayloadStore:
    """Blocking payload store backed by ``boto3.client("s3")``.

    Writes go to ``bucket_name`` with the configured server-side encryption and
    canned ACL. Reads and deletes use whatever bucket the pointer names.
    """

    def __init__(
        self,
        s3_client: Any,
        bucket_name: str,
        *,
        server_side_encryption: ServerSideEncryption | None = None,
        object_acl: str | None = None,
    ) -> None:
        """Initialize with a boto3 S3 client and the bucket new payloads go to."""
        if not bucket_name:
            msg = "bucket_name must be a non-empty string."
            raise InvalidArgumentError(msg)
        self._s3 = s3_client
        self._bucket_name = bucket_name
        self._server_side_encryption = server_side_encryption
        self._object_acl = object_acl

    @classmethod
    def from_config(cls, s3_client: Any, config: ExtendedClientConfig) -> S3PayloadStore:
        """Build a store from the bucket, encryption, and ACL settings in ``config``."""
        if config.bucket_name is None:
            msg = "bucket_name must be set to store payloads in S3."
            logger.error(msg)
            raise InvalidArgumentError(msg)
        return cls(
            s3_client,
            config.bucket_name,
            server_side_encryption=config.server_side_encryption,
            object_acl=config.object_acl,
        )

    @property
    def bucket_name(self) -> str:
        """Return the bucket new payloads are written to."""
        return self._bucket_name

    def put_payload(self, pointer: BlobPointer, payload: bytes) -> None:
        """Upload ``payload`` to ``pointer``."""
        params: dict[str, Any] = {
            "Bucket": pointer.bucket_name,
            "Key": pointer.key,
            "Body": payload,
            "ContentLength": len(payload),
        }
        if self._server_side_encryption is not None:
            params.update(self._server_side_encryption.to_put_params())
        if self._object_acl is not None:
            params["ACL"] = self._object_acl

        self._s3.put_object(**params)
        logger.info("S3 object created, Bucket name: %s, Object key: %s.", pointer.bucket_name, pointer.key)

    def get_payload(self, pointer: BlobPointer) -> bytes:
        """Download the payload at ``pointer``."""
        try:
            response = self._s3.get_object(Bucket=pointer.bucket_name, Key=pointer.key)
        except ClientError as exc:
            if is_not_found(exc):
                raise PayloadNotFoundError(pointer.bucket_name, pointer.key) from exc
            raise

        body = response["Body"]
        try:
            payload = body.read()
        finally:
            body.close()
        logger.info("S3 object read, Bucket name: %s, Object key: %s.", pointer.bucket_name, pointer.key)
        return payload

    def delete_payload(self, pointer: BlobPointer) -> None:
        """Delete the object at ``pointer``; S3 treats a missing key as deleted."""
        self._s3.delete_object(Bucket=pointer.bucket_name, Key=pointer.key)
        logger.info("S3 object deleted, Bucket name: %s, Object key: %s.", pointer.bucket_name, pointer.key)
