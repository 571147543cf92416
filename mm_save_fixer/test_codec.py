"""Tests for the LZ4 block codec"""

import os

import pytest

from mm_save_fixer import codec
from mm_save_fixer.errors import CorruptDataError, OutputTooLargeError


@pytest.mark.parametrize("data", [
    b"",
    b"x",
    b'{"saveInfo":{"name":"Career Save"}}',
    b"abc" * 100_000,
    os.urandom(70_000),
])
def test_roundtrip(data):
    """Decompressing with the exact size gives back the input"""
    assert codec.decompress(codec.compress(data), len(data)) == data


def test_compressed_size_within_bound():
    data = os.urandom(10_000)
    assert len(codec.compress(data)) <= codec.bound(len(data))


def test_bound():
    assert codec.bound(0) == 16
    assert codec.bound(255) == 255 + 1 + 16
    with pytest.raises(OutputTooLargeError):
        codec.bound(codec.MAX_INPUT_SIZE + 1)


def test_wrong_expected_size_is_corrupt():
    """No partial or lenient acceptance of a different size"""
    data = b"Motorsport Manager " * 50
    compressed = codec.compress(data)

    with pytest.raises(CorruptDataError):
        codec.decompress(compressed, len(data) - 1)
    with pytest.raises(CorruptDataError):
        codec.decompress(compressed, len(data) + 1)


def test_garbage_is_corrupt():
    with pytest.raises(CorruptDataError) as excinfo:
        codec.decompress(b"\xff" * 32, 100, "career.sav")
    assert "career.sav" in str(excinfo.value)


def test_empty_block_must_be_zero_token():
    with pytest.raises(CorruptDataError):
        codec.decompress(b"\x10a", 0)
