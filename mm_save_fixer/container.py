"""
Container format of Motorsport Manager save files

A .sav file is a small fixed header followed by two LZ4 compressed
blocks:

- Header (24 bytes, six little-endian int32 values)
    magic, version,
    compressed_info_size, decompressed_info_size,
    compressed_data_size, decompressed_data_size
- Info block (compressed_info_size bytes) - JSON with the save's metadata
- Data block (compressed_data_size bytes) - JSON with the game state

This module reads and writes that container. It knows nothing about the
JSON inside the blocks.
"""

import logging
import struct
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from . import codec
from .config import (
    HEADER_FORMAT,
    HEADER_SIZE,
    MAX_DECOMPRESSED_SIZE,
    MAX_FIELD_VALUE,
    SAVE_FILE_MAGIC,
    SUPPORTED_VERSION,
)
from .errors import (
    InvalidFormatError,
    OutputTooLargeError,
    TooLargeError,
    UnsupportedVersionError,
)
from .file_io import read_file

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class SaveHeader:
    """Save file header structure"""
    magic: int
    version: int
    compressed_info_size: int
    decompressed_info_size: int
    compressed_data_size: int
    decompressed_data_size: int

    @classmethod
    def from_bytes(cls, data: bytes, source: str = "save file") -> 'SaveHeader':
        """Parse and validate a header"""
        if len(data) < HEADER_SIZE:
            raise InvalidFormatError(f"{source} is not a valid Motorsport Manager save file")

        header = cls(*struct.unpack_from(HEADER_FORMAT, data, 0))
        header.validate(source)
        return header

    def validate(self, source: str = "save file") -> None:
        """Check magic, sizes and version"""
        if self.magic != SAVE_FILE_MAGIC or min(
            self.compressed_info_size,
            self.decompressed_info_size,
            self.compressed_data_size,
            self.decompressed_data_size,
        ) <= 0:
            raise InvalidFormatError(f"{source} is not a valid Motorsport Manager save file")

        if self.version != SUPPORTED_VERSION:
            raise UnsupportedVersionError(
                f"{source} save file version ({self.version}) is unsupported"
            )

        if self.total_decompressed_size > MAX_DECOMPRESSED_SIZE:
            raise TooLargeError(f"{source} save file is too large")

    @property
    def total_decompressed_size(self) -> int:
        return self.decompressed_info_size + self.decompressed_data_size

    @property
    def total_compressed_size(self) -> int:
        return self.compressed_info_size + self.compressed_data_size

    def to_bytes(self) -> bytes:
        """Convert header back to bytes"""
        for value in (
            self.compressed_info_size,
            self.decompressed_info_size,
            self.compressed_data_size,
            self.decompressed_data_size,
        ):
            if value > MAX_FIELD_VALUE:
                raise OutputTooLargeError("output too large")

        return struct.pack(
            HEADER_FORMAT,
            self.magic,
            self.version,
            self.compressed_info_size,
            self.decompressed_info_size,
            self.compressed_data_size,
            self.decompressed_data_size,
        )


class SaveContainer:
    """
    The decompressed contents of a save file

    `info` and `data` are the two JSON texts as bytes. They are never
    modified; writing always builds new buffers.
    """

    def __init__(self, header: SaveHeader, info: bytes, data: bytes, source: str = "save file"):
        self.header = header
        self.info = info
        self.data = data
        self.source = source

    @classmethod
    def from_bytes(cls, raw: bytes, source: str = "save file") -> 'SaveContainer':
        """Validate the header and decompress both blocks"""
        header = SaveHeader.from_bytes(raw, source)

        info_start = HEADER_SIZE
        data_start = info_start + header.compressed_info_size
        data_end = data_start + header.compressed_data_size
        if len(raw) < data_end:
            raise InvalidFormatError(f"{source} is not a valid Motorsport Manager save file")

        view = memoryview(raw)
        info = codec.decompress(view[info_start:data_start], header.decompressed_info_size, source)
        data = codec.decompress(view[data_start:data_end], header.decompressed_data_size, source)

        log.debug(
            "Decompressed %s: info %d -> %d bytes, data %d -> %d bytes",
            source,
            header.compressed_info_size, len(info),
            header.compressed_data_size, len(data),
        )
        return cls(header, info, data, source)

    @classmethod
    def load(cls, filepath: Path) -> 'SaveContainer':
        """Read and decompress a save file"""
        filepath = Path(filepath)
        return cls.from_bytes(read_file(filepath), str(filepath))

    def get_statistics(self) -> dict:
        """Get container statistics"""
        return {
            'source': self.source,
            'version': self.header.version,
            'compressed_info_size': self.header.compressed_info_size,
            'decompressed_info_size': self.header.decompressed_info_size,
            'compressed_data_size': self.header.compressed_data_size,
            'decompressed_data_size': self.header.decompressed_data_size,
        }


def build_container(info: bytes, data: bytes, version: Optional[int] = None) -> bytes:
    """
    Compress both texts and assemble a complete save file image

    Raises:
        OutputTooLargeError: If any size does not fit the header fields
    """
    if len(info) > MAX_FIELD_VALUE or len(data) > MAX_FIELD_VALUE:
        raise OutputTooLargeError("output too large")

    compressed_info = codec.compress(info)
    compressed_data = codec.compress(data)

    header = SaveHeader(
        magic=SAVE_FILE_MAGIC,
        version=SUPPORTED_VERSION if version is None else version,
        compressed_info_size=len(compressed_info),
        decompressed_info_size=len(info),
        compressed_data_size=len(compressed_data),
        decompressed_data_size=len(data),
    )

    log.debug(
        "Built container: info %d -> %d bytes, data %d -> %d bytes",
        len(info), len(compressed_info), len(data), len(compressed_data),
    )
    return header.to_bytes() + compressed_info + compressed_data
