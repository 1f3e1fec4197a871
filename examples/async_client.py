"""AsyncExtendedClient with a blocking store run in worker threads.

Runs without AWS: the queue is an in-process asyncio stand-in.
"""

import asyncio
import itertools
from typing import Any

from sqs_extended import AsyncExtendedClient, ExtendedClientConfig, InMemoryPayloadStore, ThreadedPayloadStore

QUEUE_URL = "https://sqs.us-east-1.amazonaws.com/123456789012/demo"


class AsyncListQueue:
    """Just enough of an awaitable SQS client for this demo."""

    def __init__(self) -> None:
        self.messages: list[dict[str, Any]] = []
        self._ids = itertools.count(1)

    async def send_message_batch(self, **kwargs: Any) -> dict[str, Any]:
        for entry in kwargs["Entries"]:
            number = next(self._ids)
            self.messages.append(
                {
                    "MessageId": str(number),
                    "ReceiptHandle": f"receipt-{number}",
                    "Body": entry["MessageBody"],
                    "MessageAttributes": entry.get("MessageAttributes", {}),
                },
            )
        return {"Successful": [{"Id": entry["Id"]} for entry in kwargs["Entries"]], "Failed": []}

    async def receive_message(self, **kwargs: Any) -> dict[str, Any]:
        messages, self.messages = self.messages, []
        return {"Messages": messages}


async def main() -> None:
    store = InMemoryPayloadStore(bucket_name="demo-payloads")
    client = AsyncExtendedClient(
        AsyncListQueue(),
        ExtendedClientConfig(always_through_s3=True),
        payload_store=ThreadedPayloadStore(store),
    )

    await client.send_message_batch(
        QueueUrl=QUEUE_URL,
        Entries=[{"Id": str(index), "MessageBody": f"payload {index}"} for index in range(5)],
    )
    print(f"payloads stored = {len(store)}")

    response = await client.receive_message(QueueUrl=QUEUE_URL)
    print([message["Body"] for message in response["Messages"]])


if __name__ == "__main__":
    asyncio.run(main())
