"""Tests for the save file container (header + two LZ4 blocks)"""

import struct

import pytest

from mm_save_fixer import codec
from mm_save_fixer.config import HEADER_SIZE, SAVE_FILE_MAGIC, SUPPORTED_VERSION
from mm_save_fixer.container import SaveContainer, SaveHeader, build_container
from mm_save_fixer.errors import (
    CorruptDataError,
    InvalidFormatError,
    OutputTooLargeError,
    SaveFileNotFoundError,
    TooLargeError,
    UnsupportedVersionError,
)


def raw_save(info=b'{"a":1}', data=b'{"b":2}', **overrides):
    """A container image with header fields optionally overridden"""
    compressed_info = codec.compress(info)
    compressed_data = codec.compress(data)
    fields = {
        'magic': SAVE_FILE_MAGIC,
        'version': SUPPORTED_VERSION,
        'compressed_info_size': len(compressed_info),
        'decompressed_info_size': len(info),
        'compressed_data_size': len(compressed_data),
        'decompressed_data_size': len(data),
    }
    fields.update(overrides)
    header = struct.pack('<6i', *fields.values())
    return header + compressed_info + compressed_data


def test_read_valid_container():
    container = SaveContainer.from_bytes(raw_save(b'{"info":true}', b'{"data":[1,2,3]}'))
    assert container.info == b'{"info":true}'
    assert container.data == b'{"data":[1,2,3]}'
    assert container.header.version == SUPPORTED_VERSION


def test_build_then_read():
    image = build_container(b'{"i":"x"}', b'{"d":"y"}')
    header = SaveHeader.from_bytes(image)

    assert header.magic == SAVE_FILE_MAGIC
    assert header.decompressed_info_size == 9
    assert len(image) == HEADER_SIZE + header.total_compressed_size

    container = SaveContainer.from_bytes(image)
    assert (container.info, container.data) == (b'{"i":"x"}', b'{"d":"y"}')


def test_trailing_bytes_are_ignored():
    container = SaveContainer.from_bytes(raw_save() + b"\x00" * 10)
    assert container.data == b'{"b":2}'


def test_header_roundtrip():
    header = SaveHeader(SAVE_FILE_MAGIC, SUPPORTED_VERSION, 1, 2, 3, 4)
    assert SaveHeader.from_bytes(header.to_bytes()) == header


def test_bad_magic():
    with pytest.raises(InvalidFormatError) as excinfo:
        SaveContainer.from_bytes(raw_save(magic=1234), "career.sav")
    assert "career.sav" in str(excinfo.value)


@pytest.mark.parametrize("field", [
    'compressed_info_size',
    'decompressed_info_size',
    'compressed_data_size',
    'decompressed_data_size',
])
@pytest.mark.parametrize("value", [0, -5])
def test_non_positive_sizes(field, value):
    with pytest.raises(InvalidFormatError):
        SaveContainer.from_bytes(raw_save(**{field: value}))


def test_short_header():
    with pytest.raises(InvalidFormatError):
        SaveContainer.from_bytes(b"\x00" * (HEADER_SIZE - 1))


def test_truncated_blocks():
    with pytest.raises(InvalidFormatError):
        SaveContainer.from_bytes(raw_save()[:-1])


def test_unsupported_version():
    with pytest.raises(UnsupportedVersionError) as excinfo:
        SaveContainer.from_bytes(raw_save(version=3))
    assert "(3)" in str(excinfo.value)


def test_too_large():
    """The two decompressed sizes together may not exceed 4 GiB"""
    gib = 1024 * 1024 * 1024
    header = SaveHeader(SAVE_FILE_MAGIC, SUPPORTED_VERSION, 10, 3 * gib, 10, gib + 1)
    with pytest.raises(TooLargeError):
        header.validate()

    header = SaveHeader(SAVE_FILE_MAGIC, SUPPORTED_VERSION, 10, 2 * gib, 10, 2 * gib)
    header.validate()


def test_wrong_decompressed_size_is_corrupt():
    with pytest.raises(CorruptDataError):
        SaveContainer.from_bytes(raw_save(decompressed_data_size=6))


def test_header_field_overflow():
    header = SaveHeader(SAVE_FILE_MAGIC, SUPPORTED_VERSION, 1, 0x80000000, 1, 1)
    with pytest.raises(OutputTooLargeError):
        header.to_bytes()


def test_load_missing_file(tmp_path):
    with pytest.raises(SaveFileNotFoundError):
        SaveContainer.load(tmp_path / "missing.sav")
