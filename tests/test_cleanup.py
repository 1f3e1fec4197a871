"""Tests for sqs_extended.cleanup."""

import pytest

from sqs_extended.cleanup import DeleteCleanup
from sqs_extended.config import ExtendedClientConfig
from sqs_extended.errors import InvalidArgumentError
from sqs_extended.pointer import PointerCodec
from sqs_extended.types import BlobPointer

POINTER = BlobPointer(bucket_name="payload-bucket", key="key-1")
AUGMENTED = PointerCodec().embed("receipt-1", POINTER)


def test_plain_handle_needs_no_cleanup() -> None:
    resolution = DeleteCleanup(ExtendedClientConfig()).resolve_delete("receipt-1")
    assert resolution.receipt_handle == "receipt-1"
    assert resolution.cleanup is None


def test_augmented_handle_schedules_cleanup() -> None:
    resolution = DeleteCleanup(ExtendedClientConfig()).resolve_delete(AUGMENTED)
    assert resolution.receipt_handle == "receipt-1"
    assert resolution.cleanup == POINTER


def test_cleanup_disabled_only_restores_handle() -> None:
    resolution = DeleteCleanup(ExtendedClientConfig(cleanup_payload=False)).resolve_delete(AUGMENTED)
    assert resolution.receipt_handle == "receipt-1"
    assert resolution.cleanup is None


def test_visibility_restores_handle() -> None:
    cleanup = DeleteCleanup(ExtendedClientConfig())
    assert cleanup.resolve_visibility(AUGMENTED) == "receipt-1"
    assert cleanup.resolve_visibility("receipt-2") == "receipt-2"


def test_length_prefixed_handles() -> None:
    config = ExtendedClientConfig(handle_encoding="length-prefixed")
    codec = PointerCodec.from_config(config)
    resolution = DeleteCleanup(config, codec).resolve_delete(codec.embed("receipt-1", POINTER))
    assert resolution.receipt_handle == "receipt-1"
    assert resolution.cleanup == POINTER


@pytest.mark.parametrize("handle", [None, ""])
def test_missing_handle_is_rejected(handle: str | None) -> None:
    cleanup = DeleteCleanup(ExtendedClientConfig())
    with pytest.raises(InvalidArgumentError):
        cleanup.resolve_delete(handle)
    with pytest.raises(InvalidArgumentError):
        cleanup.resolve_visibility(handle)
