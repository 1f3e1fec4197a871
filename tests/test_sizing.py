"""Tests for sqs_extended.sizing."""

import pytest

from sqs_extended.sizing import attributes_size, body_size, message_size

# =============================================================================
# body_size
# =============================================================================


@pytest.mark.parametrize(
    ("body", "expected"),
    [
        pytest.param(None, 0, id="none"),
        pytest.param("", 0, id="empty"),
        pytest.param("hello", 5, id="ascii"),
        pytest.param("é", 2, id="two-byte"),
        pytest.param("€", 3, id="three-byte"),
        pytest.param("😀", 4, id="four-byte"),
        pytest.param(b"\x00\xff", 2, id="bytes"),
        pytest.param(bytearray(b"abc"), 3, id="bytearray"),
        pytest.param(memoryview(b"abcd"), 4, id="memoryview"),
    ],
)
def test_body_size(body: object, expected: int) -> None:
    assert body_size(body) == expected  # type: ignore[arg-type]


def test_body_size_matches_encoded_length_across_chunks() -> None:
    body = ("a" * 70_000) + ("ü" * 70_000) + "😀"
    assert body_size(body) == len(body.encode("utf-8"))


# =============================================================================
# attributes_size
# =============================================================================


def test_attributes_size_counts_name_type_and_value() -> None:
    attributes = {"color": {"DataType": "String", "StringValue": "blue"}}
    assert attributes_size(attributes) == len("color") + len("String") + len("blue")


def test_attributes_size_counts_binary_value() -> None:
    attributes = {"blob": {"DataType": "Binary", "BinaryValue": b"\x00" * 10}}
    assert attributes_size(attributes) == 4 + 6 + 10


def test_attributes_size_sums_all_attributes() -> None:
    attributes = {
        "a": {"DataType": "Number", "StringValue": "12"},
        "b": {"DataType": "String", "StringValue": "ünï"},
    }
    assert attributes_size(attributes) == (1 + 6 + 2) + (1 + 6 + 5)


@pytest.mark.parametrize("attributes", [None, {}])
def test_attributes_size_empty(attributes: object) -> None:
    assert attributes_size(attributes) == 0  # type: ignore[arg-type]


def test_message_size_is_body_plus_attributes() -> None:
    attributes = {"k": {"DataType": "String", "StringValue": "v"}}
    assert message_size("body", attributes) == 4 + 1 + 6 + 1
