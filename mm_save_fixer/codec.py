"""
LZ4 block codec used by Motorsport Manager save files

The two payloads of a save are stored as raw LZ4 blocks (no frame, no
size prefix). Their decompressed sizes are stored in the container header,
so decompression always knows exactly how many bytes to expect.
"""

import lz4.block

from .errors import CompressionFailureError, CorruptDataError, OutputTooLargeError

# LZ4_MAX_INPUT_SIZE from lz4.h
MAX_INPUT_SIZE = 0x7E000000


def bound(size: int) -> int:
    """Worst case compressed size for `size` input bytes (LZ4_COMPRESSBOUND)"""
    if size < 0 or size > MAX_INPUT_SIZE:
        raise OutputTooLargeError("output too large")
    return size + size // 255 + 16


def compress(data: bytes) -> bytes:
    """Compress data into a single LZ4 block"""
    bound(len(data))
    try:
        compressed = lz4.block.compress(bytes(data), mode='default', store_size=False)
    except lz4.block.LZ4BlockError as e:
        raise CompressionFailureError("internal error: compression failure") from e

    if not compressed:
        raise CompressionFailureError("internal error: compression failure")
    return compressed


def decompress(data: bytes, expected_size: int, source: str = "save file") -> bytes:
    """
    Decompress an LZ4 block that must expand to exactly expected_size bytes

    Args:
        data: The compressed block
        expected_size: Decompressed size recorded alongside the block
        source: Name used in error messages (usually the file path)

    Raises:
        CorruptDataError: If the block is invalid or has a different size
    """
    if expected_size < 0:
        raise CorruptDataError(f"{source} is invalid or corrupted")

    # An empty block is a single zero token
    if expected_size == 0:
        if bytes(data) == b'\x00':
            return b''
        raise CorruptDataError(f"{source} is invalid or corrupted")

    try:
        result = lz4.block.decompress(bytes(data), uncompressed_size=expected_size)
    except lz4.block.LZ4BlockError as e:
        raise CorruptDataError(f"{source} is invalid or corrupted") from e

    if len(result) != expected_size:
        raise CorruptDataError(f"{source} is invalid or corrupted")
    return result
