"""Payload storage backends."""

from sqs_extended.stores._memory import InMemoryPayloadStore, PayloadEntry
from sqs_extended.stores._s3 import S3PayloadStore
from sqs_extended.stores._store import AsyncPayloadStore, PayloadStore
from sqs_extended.stores._threaded import ThreadedPayloadStore

__all__ = [
    "AsyncPayloadStore",
    "InMemoryPayloadStore",
    "PayloadEntry",
    "PayloadStore",
    "S3PayloadStore",
    "ThreadedPayloadStore",
]
