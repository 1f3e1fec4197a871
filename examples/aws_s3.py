"""Use real SQS and S3 through boto3.

Requirements:
    pip install sqs-extended
    # Configure AWS credentials (e.g. aws configure, environment variables, or IAM role)
    export QUEUE_URL=... PAYLOAD_BUCKET=...
"""

import logging
import os

import boto3

from sqs_extended import AttributeNaming, CustomerKey, ExtendedClient, ExtendedClientConfig

logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

QUEUE_URL = os.environ["QUEUE_URL"]
KMS_KEY_ID = os.environ.get("PAYLOAD_KMS_KEY_ID")

config = ExtendedClientConfig(
    bucket_name=os.environ["PAYLOAD_BUCKET"],
    key_prefix="extended/",
    attribute_naming=AttributeNaming.CURRENT,
    server_side_encryption=CustomerKey(kms_key_id=KMS_KEY_ID) if KMS_KEY_ID else None,
)

# ── Setup ──────────────────────────────────────────────────────────

client = ExtendedClient(
    boto3.client("sqs"),
    config,
    s3_client=boto3.client("s3"),
)

# ── Send a batch: only the largest entries move to S3 ─────────────

response = client.send_message_batch(
    QueueUrl=QUEUE_URL,
    Entries=[
        {"Id": "small", "MessageBody": "hello"},
        {"Id": "medium", "MessageBody": "m" * 150_000},
        {"Id": "large", "MessageBody": "l" * 200_000},
    ],
)
print(f"sent: {[entry['Id'] for entry in response.get('Successful', [])]}")

# ── Receive, then delete (which also removes the S3 objects) ──────

received = client.receive_message(QueueUrl=QUEUE_URL, MaxNumberOfMessages=10, WaitTimeSeconds=5)
messages = received.get("Messages", [])
for message in messages:
    print(f"received {message['MessageId']}: {len(message['Body'])} characters")

if messages:
    client.delete_message_batch(
        QueueUrl=QUEUE_URL,
        Entries=[{"Id": str(index), "ReceiptHandle": m["ReceiptHandle"]} for index, m in enumerate(messages)],
    )
