"""
File access for save files

Reading is a plain whole-file read. Writing goes to a temporary file next
to the destination which is then renamed into place, so the destination
is either untouched or completely written.
"""

import logging
import os
from enum import Enum
from pathlib import Path

from .config import TEMP_SUFFIX
from .errors import SaveFileExistsError, SaveFileNotFoundError, SaveIOError

log = logging.getLogger(__name__)


class PathState(Enum):
    """What, if anything, is at a path"""
    DOES_NOT_EXIST = "does_not_exist"
    FILE = "file"
    FILE_READONLY = "file_readonly"
    DIRECTORY = "directory"


def query_path(filepath: Path) -> PathState:
    """Check what exists at a path"""
    path = Path(filepath)
    if path.is_dir():
        return PathState.DIRECTORY
    if path.exists():
        if not os.access(path, os.W_OK):
            return PathState.FILE_READONLY
        return PathState.FILE
    return PathState.DOES_NOT_EXIST


def read_file(filepath: Path) -> bytes:
    """Read a whole file"""
    path = Path(filepath)
    try:
        with open(path, 'rb') as f:
            return f.read()
    except FileNotFoundError as e:
        raise SaveFileNotFoundError(f'could not find file "{path}"') from e
    except OSError as e:
        raise SaveIOError(f'failed to open file "{path}": {e.strerror or e}') from e


def temp_path_for(filepath: Path) -> Path:
    path = Path(filepath)
    return path.with_name(path.name + TEMP_SUFFIX)


def write_file_atomic(data: bytes, filepath: Path, allow_overwrite: bool = False) -> None:
    """
    Write data to filepath via a temporary file and a rename

    Args:
        data: Complete file contents
        filepath: Destination path
        allow_overwrite: Replace an existing destination

    Raises:
        SaveFileExistsError: If the destination exists and allow_overwrite is False
        SaveIOError: On any other failure
    """
    path = Path(filepath)
    temp_path = temp_path_for(path)

    if not allow_overwrite and path.exists():
        raise SaveFileExistsError(f'file already exists "{path}"')

    try:
        # A stale temp file from an earlier failed write is overwritten
        with open(temp_path, 'wb') as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
    except OSError as e:
        raise SaveIOError(f'failed to create file "{temp_path}": {e.strerror or e}') from e

    log.debug("Wrote %d bytes to %s", len(data), temp_path)

    try:
        if allow_overwrite:
            os.replace(temp_path, path)
        else:
            if path.exists():
                _remove_quietly(temp_path)
                raise SaveFileExistsError(f'file already exists "{path}"')
            os.rename(temp_path, path)
    except FileExistsError as e:
        # os.rename refuses to replace on Windows
        _remove_quietly(temp_path)
        raise SaveFileExistsError(f'file already exists "{path}"') from e
    except OSError as e:
        raise SaveIOError(f'failed to write file "{path}": {e.strerror or e}') from e

    log.debug("Renamed %s to %s", temp_path, path)


def _remove_quietly(path: Path) -> None:
    try:
        os.remove(path)
    except OSError:
        log.debug("Could not remove temporary file %s", path)
