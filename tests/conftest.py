"""Shared fakes for the queue client."""

from __future__ import annotations

import itertools
from typing import Any

import pytest

from sqs_extended.stores import InMemoryPayloadStore

QUEUE_URL = "https://sqs.us-east-1.amazonaws.com/123456789012/test-queue"


class RecordingSqsClient:
    """Blocking stand-in for ``boto3.client("sqs")`` that records every call.

    Sent messages are queued and handed back by ``receive_message`` with the
    attributes and body the queue would store.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.messages: list[dict[str, Any]] = []
        self.batch_delete_failures: list[str] = []
        self._ids = itertools.count(1)

    def calls_to(self, operation: str) -> list[dict[str, Any]]:
        return [kwargs for name, kwargs in self.calls if name == operation]

    def _enqueue(self, body: str, attributes: dict[str, Any] | None) -> str:
        number = next(self._ids)
        message: dict[str, Any] = {
            "MessageId": f"message-{number}",
            "ReceiptHandle": f"receipt-{number}",
            "Body": body,
        }
        if attributes:
            message["MessageAttributes"] = dict(attributes)
        self.messages.append(message)
        return message["MessageId"]

    def send_message(self, **kwargs: Any) -> dict[str, Any]:
        self.calls.append(("send_message", kwargs))
        return {"MessageId": self._enqueue(kwargs["MessageBody"], kwargs.get("MessageAttributes"))}

    def send_message_batch(self, **kwargs: Any) -> dict[str, Any]:
        self.calls.append(("send_message_batch", kwargs))
        successful = [
            {"Id": entry["Id"], "MessageId": self._enqueue(entry["MessageBody"], entry.get("MessageAttributes"))}
            for entry in kwargs["Entries"]
        ]
        return {"Successful": successful, "Failed": []}

    def receive_message(self, **kwargs: Any) -> dict[str, Any]:
        self.calls.append(("receive_message", kwargs))
        if not self.messages:
            return {"ResponseMetadata": {"HTTPStatusCode": 200}}
        messages, self.messages = self.messages, []
        return {"Messages": messages, "ResponseMetadata": {"HTTPStatusCode": 200}}

    def delete_message(self, **kwargs: Any) -> dict[str, Any]:
        self.calls.append(("delete_message", kwargs))
        return {}

    def delete_message_batch(self, **kwargs: Any) -> dict[str, Any]:
        self.calls.append(("delete_message_batch", kwargs))
        failed = [
            {"Id": entry["Id"], "SenderFault": True, "Code": "ReceiptHandleIsInvalid"}
            for entry in kwargs["Entries"]
            if entry["Id"] in self.batch_delete_failures
        ]
        failed_ids = {failure["Id"] for failure in failed}
        successful = [{"Id": entry["Id"]} for entry in kwargs["Entries"] if entry["Id"] not in failed_ids]
        return {"Successful": successful, "Failed": failed}

    def change_message_visibility(self, **kwargs: Any) -> dict[str, Any]:
        self.calls.append(("change_message_visibility", kwargs))
        return {}

    def change_message_visibility_batch(self, **kwargs: Any) -> dict[str, Any]:
        self.calls.append(("change_message_visibility_batch", kwargs))
        return {"Successful": [{"Id": entry["Id"]} for entry in kwargs["Entries"]], "Failed": []}

    def purge_queue(self, **kwargs: Any) -> dict[str, Any]:
        self.calls.append(("purge_queue", kwargs))
        return {}

    def get_queue_url(self, **kwargs: Any) -> dict[str, Any]:
        self.calls.append(("get_queue_url", kwargs))
        return {"QueueUrl": QUEUE_URL}


class AsyncRecordingSqsClient:
    """Awaitable facade over :class:`RecordingSqsClient`."""

    def __init__(self, sync: RecordingSqsClient) -> None:
        self.sync = sync

    def __getattr__(self, name: str) -> Any:
        operation = getattr(self.sync, name)

        async def call(**kwargs: Any) -> Any:
            return operation(**kwargs)

        return call


class RecordingPayloadStore(InMemoryPayloadStore):
    """In-memory store that records the order of store operations."""

    def __init__(self, bucket_name: str = "payload-bucket") -> None:
        super().__init__(bucket_name)
        self.operations: list[tuple[str, str]] = []

    def put_payload(self, pointer: Any, payload: bytes) -> None:
        self.operations.append(("put", pointer.key))
        super().put_payload(pointer, payload)

    def get_payload(self, pointer: Any) -> bytes:
        self.operations.append(("get", pointer.key))
        return super().get_payload(pointer)

    def delete_payload(self, pointer: Any) -> None:
        self.operations.append(("delete", pointer.key))
        super().delete_payload(pointer)


@pytest.fixture
def sqs() -> RecordingSqsClient:
    return RecordingSqsClient()


@pytest.fixture
def store() -> RecordingPayloadStore:
    return RecordingPayloadStore()
