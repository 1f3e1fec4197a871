"""Offload a large message with an in-memory payload store.

Runs without AWS: a small stand-in queue keeps sent messages in a list.
"""

import itertools
from typing import Any

from sqs_extended import ExtendedClient, ExtendedClientConfig, InMemoryPayloadStore

QUEUE_URL = "https://sqs.us-east-1.amazonaws.com/123456789012/demo"


class ListQueue:
    """Just enough of the SQS API for this demo."""

    def __init__(self) -> None:
        self.messages: list[dict[str, Any]] = []
        self._ids = itertools.count(1)

    def send_message(self, **kwargs: Any) -> dict[str, Any]:
        number = next(self._ids)
        self.messages.append(
            {
                "MessageId": str(number),
                "ReceiptHandle": f"receipt-{number}",
                "Body": kwargs["MessageBody"],
                "MessageAttributes": kwargs.get("MessageAttributes", {}),
            },
        )
        return {"MessageId": str(number)}

    def receive_message(self, **kwargs: Any) -> dict[str, Any]:
        messages, self.messages = self.messages, []
        return {"Messages": messages}

    def delete_message(self, **kwargs: Any) -> dict[str, Any]:
        print(f"  queue delete_message(ReceiptHandle={kwargs['ReceiptHandle']!r})")
        return {}


# ── Setup ──────────────────────────────────────────────────────────

queue = ListQueue()
store = InMemoryPayloadStore(bucket_name="demo-payloads")
client = ExtendedClient(queue, ExtendedClientConfig(key_prefix="demo/"), payload_store=store)

# ── Send ───────────────────────────────────────────────────────────

client.send_message(QueueUrl=QUEUE_URL, MessageBody="small message")
client.send_message(QueueUrl=QUEUE_URL, MessageBody="x" * 300_000)

print("[queue contents]")
for message in queue.messages:
    print(f"  body={message['Body'][:60]!r} attributes={list(message['MessageAttributes'])}")
print(f"  payloads stored = {len(store)}")

# ── Receive and delete ─────────────────────────────────────────────

print("\n[received]")
for message in client.receive_message(QueueUrl=QUEUE_URL)["Messages"]:
    print(f"  body length={len(message['Body'])}, handle={message['ReceiptHandle'][:48]}...")
    client.delete_message(QueueUrl=QUEUE_URL, ReceiptHandle=message["ReceiptHandle"])

print(f"\n  payloads stored after delete = {len(store)}")
