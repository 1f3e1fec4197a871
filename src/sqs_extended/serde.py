"""Validation helpers shared by ``from_dict`` constructors."""

from collections.abc import Mapping


def as_str_object_dict(value: object, *, field_name: str) -> dict[str, object]:
    """Validate and normalize a mapping value into ``dict[str, object]``."""
    if not isinstance(value, Mapping):
        msg = f"{field_name} must be a mapping."
        raise TypeError(msg)
    return {str(key): item for key, item in value.items()}


def optional_string(value: object, *, field_name: str) -> str | None:
    """Validate an optional string field."""
    if value is None:
        return None
    if not isinstance(value, str):
        msg = f"{field_name} must be a string or None."
        raise TypeError(msg)
    return value


def string_or_default(value: object, default: str, *, field_name: str) -> str:
    """Validate a string field, falling back to ``default`` when absent."""
    result = optional_string(value, field_name=field_name)
    return default if result is None else result


def int_or_default(value: object, default: int, *, field_name: str) -> int:
    """Validate an integer field (rejects booleans), falling back to ``default`` when absent."""
    if value is None:
        return default
    if not isinstance(value, int) or isinstance(value, bool):
        msg = f"{field_name} must be an int."
        raise TypeError(msg)
    return value


def bool_or_default(value: object, default: bool, *, field_name: str) -> bool:
    """Validate a boolean field, falling back to ``default`` when absent."""
    if value is None:
        return default
    if not isinstance(value, bool):
        msg = f"{field_name} must be a bool."
        raise TypeError(msg)
    return value
