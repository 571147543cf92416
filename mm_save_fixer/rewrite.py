"""
Building new save texts by splicing

The original info and data texts are never modified. A new buffer of the
exact output size is allocated and filled by copying the unchanged ranges
of the original around the few values that change (the save name and any
mCarID whose position was edited). Every byte outside those values is
identical to the input.
"""

import logging
from typing import Sequence

from .drivers import Driver
from .errors import InternalError

log = logging.getLogger(__name__)


class SpliceBuffer:
    """Fixed-size output buffer filled front to back"""

    def __init__(self, size: int):
        self.buffer = bytearray(size)
        self.pos = 0

    def copy(self, chunk) -> None:
        end = self.pos + len(chunk)
        if end > len(self.buffer):
            raise InternalError("internal error: copy out of memory")
        self.buffer[self.pos:end] = chunk
        self.pos = end

    def finish(self) -> bytes:
        if self.pos != len(self.buffer):
            raise InternalError("internal error: bad copy")
        return bytes(self.buffer)


def rewrite_info(info: bytes, name_offset: int, name_size: int, new_name: bytes) -> bytes:
    """Replace the save name, given as already-escaped JSON string contents"""
    source = memoryview(info)
    out = SpliceBuffer(len(info) - name_size + len(new_name))
    out.copy(source[:name_offset])
    out.copy(new_name)
    out.copy(source[name_offset + name_size:])

    log.debug("Info text %d -> %d bytes", len(info), len(out.buffer))
    return out.finish()


def rewritten_data_size(data_size: int, drivers: Sequence[Driver]) -> int:
    size = data_size
    for driver in drivers:
        size += len(driver.position.literal) - len(driver.original_position.literal)
    return size


def rewrite_data(data: bytes, drivers: Sequence[Driver]) -> bytes:
    """
    Write each changed driver's new mCarID into a copy of the data text

    `drivers` must be sorted by offset.
    """
    assert all(a.offset < b.offset for a, b in zip(drivers, drivers[1:]))

    source = memoryview(data)
    out = SpliceBuffer(rewritten_data_size(len(data), drivers))

    not_copied = 0
    for driver in drivers:
        if not driver.changed:
            continue
        out.copy(source[not_copied:driver.offset])
        out.copy(driver.position.literal)
        not_copied = driver.offset + len(driver.original_position.literal)
        log.debug(
            "mCarID at %d: %s -> %s",
            driver.offset, driver.original_position.literal, driver.position.literal,
        )
    out.copy(source[not_copied:])

    return out.finish()
