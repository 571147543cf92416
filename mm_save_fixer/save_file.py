"""
Motorsport Manager save file

Opening a save decompresses it once and finds the save name and the
player team's three drivers. Each driver's position can then be changed
and a new save written with the updated positions and a new save name.
Writing never touches the texts read from disk, so a SaveFile can be
written any number of times.
"""

import logging
from pathlib import Path
from typing import Tuple

from .config import FALLBACK_SAVE_NAME
from .container import SaveContainer, build_container
from .drivers import (
    Driver,
    DriverPosition,
    decode_json_string,
    encode_json_string,
    extract_drivers,
    find_save_name,
)
from .errors import InvalidPositionError
from .file_io import write_file_atomic
from .rewrite import rewrite_data, rewrite_info

log = logging.getLogger(__name__)


class DriverRef:
    """
    Handle to one of the three drivers of a SaveFile

    The name is read-only; the position can be changed. A DriverRef always
    refers to the same slot of the SaveFile that created it.
    """

    __slots__ = ('_save', '_index')

    def __init__(self, save: 'SaveFile', index: int):
        self._save = save
        self._index = index

    @property
    def _driver(self) -> Driver:
        return self._save._drivers[self._index]

    @property
    def index(self) -> int:
        return self._index

    @property
    def name(self) -> str:
        return self._driver.name

    @property
    def offset(self) -> int:
        return self._driver.offset

    @property
    def original_position(self) -> DriverPosition:
        return self._driver.original_position

    @property
    def position(self) -> DriverPosition:
        return self._driver.position

    @position.setter
    def position(self, value: DriverPosition) -> None:
        if not isinstance(value, DriverPosition):
            raise InvalidPositionError(f"invalid driver position: {value!r}")
        self._driver.position = value

    def __repr__(self):
        return f"DriverRef({self.name!r}, {self.position.name})"


class SaveFile:
    """
    A Motorsport Manager save opened for editing

    Usage:
        save = SaveFile.open('career.sav')
        first, second, third = save.drivers
        first.position, second.position = second.position, first.position
        save.write('career(fixed).sav', 'career (fixed)')
    """

    def __init__(self, container: SaveContainer):
        self.container = container
        self._save_name_offset, self._save_name_size = find_save_name(container.info)
        self._drivers: Tuple[Driver, ...] = tuple(extract_drivers(container.data))

    @classmethod
    def open(cls, filepath: Path) -> 'SaveFile':
        """Read, decompress and scan a save file"""
        return cls(SaveContainer.load(filepath))

    @classmethod
    def from_bytes(cls, raw: bytes, source: str = "save file") -> 'SaveFile':
        return cls(SaveContainer.from_bytes(raw, source))

    @property
    def source(self) -> str:
        return self.container.source

    @property
    def info(self) -> bytes:
        return self.container.info

    @property
    def data(self) -> bytes:
        return self.container.data

    @property
    def save_name(self) -> str:
        start = self._save_name_offset
        return decode_json_string(self.info[start:start + self._save_name_size])

    @property
    def save_name_span(self) -> Tuple[int, int]:
        """(offset, size) of the save name in the info text"""
        return self._save_name_offset, self._save_name_size

    @property
    def drivers(self) -> Tuple[DriverRef, DriverRef, DriverRef]:
        return tuple(DriverRef(self, i) for i in range(len(self._drivers)))

    def positions_are_unique(self) -> bool:
        """True when car 1, car 2 and reserve each have exactly one driver"""
        return sorted(d.position.literal for d in self._drivers) == sorted(
            p.literal for p in DriverPosition
        )

    def has_changes(self) -> bool:
        return any(d.changed for d in self._drivers)

    def changed_drivers(self):
        return [DriverRef(self, i) for i, d in enumerate(self._drivers) if d.changed]

    def reset_positions(self) -> None:
        for driver in self._drivers:
            driver.position = driver.original_position

    def build_texts(self, new_save_name: str) -> Tuple[bytes, bytes]:
        """The new (info, data) texts, uncompressed"""
        if not new_save_name:
            new_save_name = FALLBACK_SAVE_NAME
        info = rewrite_info(
            self.info,
            self._save_name_offset,
            self._save_name_size,
            encode_json_string(new_save_name),
        )
        data = rewrite_data(self.data, self._drivers)
        return info, data

    def to_bytes(self, new_save_name: str) -> bytes:
        """A complete new save file image"""
        info, data = self.build_texts(new_save_name)
        return build_container(info, data, self.container.header.version)

    def write(self, filepath: Path, new_save_name: str, allow_overwrite: bool = False) -> None:
        """
        Write a new save file with the current driver positions

        Args:
            filepath: Destination path
            new_save_name: Name shown for the save in the game
            allow_overwrite: Replace an existing file at filepath
        """
        image = self.to_bytes(new_save_name)
        write_file_atomic(image, Path(filepath), allow_overwrite)
        log.debug("Wrote %s (%d bytes)", filepath, len(image))
