"""InMemoryPayloadStore: dict-based payload storage for development and testing."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from sqs_extended.errors import PayloadNotFoundError
from sqs_extended.types import BlobPointer

if TYPE_CHECKING:
    from collections.abc import Mapping


def utc_now() -> datetime:
    """Return the current timezone-aware UTC timestamp."""
    return datetime.now(timezone.utc)


@dataclass(frozen=True, slots=True)
class PayloadEntry:
    """One stored payload and when it was written."""

    pointer: BlobPointer
    size: int
    created_at: datetime


class InMemoryPayloadStore:
    """In-memory payload store for development and testing.

    Payloads are keyed by ``(bucket_name, key)``, so pointers into buckets other
    than the default one behave like they would against S3.
    """

    def __init__(self, bucket_name: str = "in-memory") -> None:
        """Initialize an empty store that writes into ``bucket_name``."""
        if not bucket_name:
            msg = "bucket_name must be a non-empty string."
            raise ValueError(msg)
        self._bucket_name = bucket_name
        self._payloads: dict[tuple[str, str], bytes] = {}
        self._entries: dict[tuple[str, str], PayloadEntry] = {}

    @classmethod
    def from_preloaded(
        cls,
        payloads_by_key: Mapping[str, bytes],
        *,
        bucket_name: str = "in-memory",
    ) -> InMemoryPayloadStore:
        """Build a store whose bucket already holds ``payloads_by_key``."""
        store = cls(bucket_name)
        for key, payload in payloads_by_key.items():
            store.put_payload(BlobPointer(bucket_name=bucket_name, key=key), payload)
        return store

    @property
    def bucket_name(self) -> str:
        """Return the bucket new payloads are written to."""
        return self._bucket_name

    def put_payload(self, pointer: BlobPointer, payload: bytes) -> None:
        """Store a copy of ``payload`` at ``pointer``."""
        location = (pointer.bucket_name, pointer.key)
        self._payloads[location] = bytes(payload)
        self._entries[location] = PayloadEntry(pointer=pointer, size=len(payload), created_at=utc_now())

    def get_payload(self, pointer: BlobPointer) -> bytes:
        """Return the payload at ``pointer``."""
        payload = self._payloads.get((pointer.bucket_name, pointer.key))
        if payload is None:
            raise PayloadNotFoundError(pointer.bucket_name, pointer.key)
        return payload

    def has_payload(self, pointer: BlobPointer) -> bool:
        """Check whether a payload exists at ``pointer``."""
        return (pointer.bucket_name, pointer.key) in self._payloads

    def delete_payload(self, pointer: BlobPointer) -> None:
        """Delete the payload at ``pointer`` if present."""
        location = (pointer.bucket_name, pointer.key)
        self._payloads.pop(location, None)
        self._entries.pop(location, None)

    def list_payloads(self) -> tuple[PayloadEntry, ...]:
        """List stored payloads, oldest first."""
        return tuple(sorted(self._entries.values(), key=lambda entry: (entry.created_at, entry.pointer.key)))

    def __len__(self) -> int:
        return len(self._payloads)
