"""ThresholdPolicy: decide whether a message must move to the blob store."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqs_extended.errors import (
    AttributeSizeExceededError,
    ReservedAttributeNameError,
    TooManyAttributesError,
)
from sqs_extended.sizing import attributes_size

if TYPE_CHECKING:
    from collections.abc import Mapping

    from sqs_extended.config import ExtendedClientConfig

logger = logging.getLogger(__name__)


class ThresholdPolicy:
    """Size and attribute rules for one client configuration."""

    def __init__(self, config: ExtendedClientConfig) -> None:
        """Initialize with the client configuration."""
        self._config = config

    @property
    def threshold(self) -> int:
        """Return the payload size threshold in bytes."""
        return self._config.payload_size_threshold

    def must_offload(self, total_size: int) -> bool:
        """Return whether a message of ``total_size`` bytes must be offloaded."""
        return self._config.always_through_s3 or total_size > self._config.payload_size_threshold

    def reserved_name_in(self, attributes: Mapping[str, object] | None) -> str | None:
        """Return the reserved attribute name present in ``attributes``, current name first."""
        if not attributes:
            return None
        wire = self._config.wire
        for name in (wire.reserved_attribute_name, wire.legacy_reserved_attribute_name):
            if name in attributes:
                return name
        return None

    def validate_attributes(self, attributes: Mapping[str, Mapping[str, object]] | None) -> None:
        """Check the constraints an offloadable message's attributes must meet.

        Attributes travel next to the pointer, so attributes that are too large
        on their own cannot be fixed by offloading the body.
        """
        size = attributes_size(attributes)
        if size > self._config.payload_size_threshold:
            error = AttributeSizeExceededError(size, self._config.payload_size_threshold)
            logger.error("%s", error)
            raise error

        count = len(attributes) if attributes else 0
        if count > self._config.max_allowed_attributes:
            error = TooManyAttributesError(count, self._config.max_allowed_attributes)
            logger.error("%s", error)
            raise error

        reserved = self.reserved_name_in(attributes)
        if reserved is not None:
            error = ReservedAttributeNameError(reserved)
            logger.error("%s", error)
            raise error
