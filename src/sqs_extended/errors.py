"""Typed errors for sqs_extended."""


class SqsExtendedError(Exception):
    """Base exception for all sqs_extended errors."""


class InvalidArgumentError(SqsExtendedError):
    """Raised for a missing or empty request, body, or entry list."""


class AttributeSizeExceededError(SqsExtendedError):
    """Raised when message attributes alone exceed the payload size threshold."""

    def __init__(self, size: int, threshold: int) -> None:
        """Initialize with the measured attribute size and the threshold."""
        self.size = size
        self.threshold = threshold
        super().__init__(
            f"Total size of message attributes is {size} bytes which is larger than the threshold of "
            f"{threshold} bytes. Consider including the payload in the message body instead of message attributes."
        )


class TooManyAttributesError(SqsExtendedError):
    """Raised when a message carries more attributes than an offloaded message may."""

    def __init__(self, count: int, maximum: int) -> None:
        """Initialize with the attribute count and the allowed maximum."""
        self.count = count
        self.maximum = maximum
        super().__init__(
            f"Number of message attributes [{count}] exceeds the maximum allowed for large-payload messages "
            f"[{maximum}]."
        )


class ReservedAttributeNameError(SqsExtendedError):
    """Raised when a message already defines a reserved attribute name."""

    def __init__(self, name: str) -> None:
        """Initialize with the colliding attribute name."""
        self.name = name
        super().__init__(f"Message attribute name {name} is reserved for use by the extended client.")


class MalformedPointerError(SqsExtendedError):
    """Raised when a message body cannot be read as a payload pointer."""

    def __init__(self, body: str, reason: str) -> None:
        """Initialize with the offending body and a short reason."""
        self.body = body
        self.reason = reason
        super().__init__(f"Failed to read the payload pointer from a message body: {reason}")


class PayloadNotFoundError(SqsExtendedError):
    """Raised by a payload store when the referenced object does not exist."""

    def __init__(self, bucket_name: str, key: str) -> None:
        """Initialize with the missing object's bucket and key."""
        self.bucket_name = bucket_name
        self.key = key
        super().__init__(f"Payload not found: bucket={bucket_name!r} key={key!r}")


class InvalidKeyPrefixError(SqsExtendedError):
    """Raised when a configured object key prefix is not safe to use."""

    def __init__(self, prefix: str, reason: str) -> None:
        """Initialize with the rejected prefix and the rule it breaks."""
        self.prefix = prefix
        self.reason = reason
        super().__init__(f"Invalid key prefix {prefix!r}: {reason}")
