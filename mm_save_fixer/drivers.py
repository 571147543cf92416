"""
Finding the player team's drivers in the save data

The steps are:

1. Find "mPlayerTeam":{...,"$id":"<ID>",...} to learn the player team's id
2. Find every "mEmployeerTeam":{"$ref":"<ID>"} in the data text
3. Keep only the references whose enclosing object is the value of a
   "contract" key. Those objects are contracts of the team's employees and
   the object holding the contract is the employee.
4. Read mCarID, mFirstName and mLastName from the employee. Only drivers
   have an mCarID, and a team always has exactly three drivers.

The save name is found the same way in the info text, at
"saveInfo":{...,"name":"<NAME>",...}.
"""

import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, Optional, Tuple

from .config import (
    CAR_ID_KEY,
    CONTRACT_KEY,
    EMPLOYER_TEAM_REF_PREFIX,
    EMPLOYER_TEAM_REF_SUFFIX,
    FIRST_NAME_KEY,
    LAST_NAME_KEY,
    PLAYER_TEAM_OBJECT_START,
    SAVE_INFO_OBJECT_START,
    SAVE_NAME_KEY,
    TEAM_DRIVER_COUNT,
    TEAM_ID_KEY,
)
from .errors import (
    InvalidPositionError,
    MalformedTextError,
    MissingFieldError,
    TeamSizeMismatchError,
)
from .json_scan import (
    find_closing_quote,
    iter_sibling_key_values,
    lookup_value_in_object,
    rfind_opening_brace,
    string_between,
)

log = logging.getLogger(__name__)

_QUOTE = ord('"')
_POSITION_TERMINATORS = (ord(','), ord('}'))


class DriverPosition(Enum):
    """Which car a driver is assigned to, stored in the save as mCarID"""
    RESERVE = b'-1'
    CAR1 = b'0'
    CAR2 = b'1'

    @property
    def literal(self) -> bytes:
        """The mCarID value as written in the save"""
        return self.value

    @property
    def label(self) -> str:
        return {
            DriverPosition.RESERVE: "Reserve",
            DriverPosition.CAR1: "Car 1",
            DriverPosition.CAR2: "Car 2",
        }[self]


@dataclass
class Driver:
    """A driver found in the save data"""
    name: str
    position: DriverPosition
    original_position: DriverPosition
    offset: int  # Offset of the mCarID value in the data text

    @property
    def changed(self) -> bool:
        return self.position != self.original_position


def decode_json_string(raw: bytes) -> str:
    """
    Turn the contents of a JSON string (without quotes) into text

    Bytes that are not valid UTF-8 come out as U+FFFD. The result is only
    used for display; the save keeps the original bytes.
    """
    try:
        return json.loads('"' + raw.decode('utf-8', errors='replace') + '"')
    except ValueError as e:
        raise MalformedTextError("invalid save file") from e


def encode_json_string(text: str) -> bytes:
    """
    Turn text into the contents of a JSON string (without quotes)

    Undecodable bytes smuggled in as surrogates (file names, command line
    arguments) are written back as the raw bytes.
    """
    try:
        return json.dumps(text, ensure_ascii=False)[1:-1].encode('utf-8', errors='surrogateescape')
    except UnicodeEncodeError as e:
        raise MalformedTextError(f"invalid save name: {text!r}") from e


def _find_object_start(text: bytes, pattern: bytes) -> Optional[int]:
    """Offset of the opening brace at the end of `pattern`, if present"""
    key_start = text.find(pattern)
    if key_start < 0:
        return None
    return key_start + len(pattern) - 1


def _lookup_string_value(text: bytes, opening_brace: int, key: bytes) -> Optional[Tuple[int, int]]:
    """(opening quote, closing quote) of a string value in an object"""
    value_pos = lookup_value_in_object(text, opening_brace, key)
    if value_pos is None or text[value_pos] != _QUOTE:
        return None
    return value_pos, find_closing_quote(text, value_pos)


def find_save_name(info: bytes) -> Tuple[int, int]:
    """
    Locate the save name in the info text

    Returns:
        (offset, size) of the name, not including its quotes

    Raises:
        MissingFieldError: If there is no saveInfo object or no string name
    """
    brace = _find_object_start(info, SAVE_INFO_OBJECT_START)
    if brace is not None:
        quotes = _lookup_string_value(info, brace, SAVE_NAME_KEY)
        if quotes is not None:
            offset = quotes[0] + 1
            size = quotes[1] - offset
            log.debug("Save name at offset %d (%d bytes)", offset, size)
            return offset, size
    raise MissingFieldError("could not find save name in save file")


def get_player_team_id(data: bytes) -> bytes:
    """The "$id" of the player's team"""
    brace = _find_object_start(data, PLAYER_TEAM_OBJECT_START)
    if brace is not None:
        quotes = _lookup_string_value(data, brace, TEAM_ID_KEY)
        if quotes is not None:
            team_id = string_between(data, *quotes)
            log.debug("Player team id: %r", team_id)
            return team_id
    raise MissingFieldError("could not find player team data in save file")


def iter_employer_team_refs(data: bytes, team_id: bytes) -> Iterator[int]:
    """
    Offsets of every "mEmployeerTeam":{"$ref":"<team_id>"} in the data

    This is a plain substring search. The reference always has exactly
    this shape and the pattern does not turn up inside other strings.
    """
    pattern = EMPLOYER_TEAM_REF_PREFIX + team_id + EMPLOYER_TEAM_REF_SUFFIX
    start = 0
    while True:
        ref_pos = data.find(pattern, start)
        if ref_pos < 0:
            return
        yield ref_pos
        start = ref_pos + 1


def find_contract_key_offset(data: bytes, employer_ref_offset: int) -> Optional[int]:
    """
    Offset of the "contract" key whose object holds the employer reference

    Returns None when the object around the reference is not a contract.
    """
    if employer_ref_offset == 0:
        return None

    object_start = rfind_opening_brace(data, employer_ref_offset - 1, ord('{'))
    key_size = len(CONTRACT_KEY)
    if object_start > key_size and data[object_start - key_size:object_start] == CONTRACT_KEY:
        return object_start - key_size
    return None


def parse_driver_position(data: bytes, value_offset: int) -> DriverPosition:
    """Read an mCarID value: -1, 0 or 1 followed by ',' or '}'"""
    if value_offset + 2 >= len(data):
        raise MalformedTextError("invalid save file")

    if data[value_offset:value_offset + 2] == b'-1' and data[value_offset + 2] in _POSITION_TERMINATORS:
        return DriverPosition.RESERVE
    if data[value_offset + 1] in _POSITION_TERMINATORS:
        if data[value_offset] == ord('0'):
            return DriverPosition.CAR1
        if data[value_offset] == ord('1'):
            return DriverPosition.CAR2
    raise InvalidPositionError("invalid driver position in save file")


def parse_driver_name(data: bytes, value_offset: int) -> bytes:
    if data[value_offset] != _QUOTE:
        raise MalformedTextError("invalid driver name in save file")
    return string_between(data, value_offset, find_closing_quote(data, value_offset))


def maybe_get_driver(data: bytes, contract_key_offset: int) -> Optional[Driver]:
    """
    Read the driver fields from the employee that owns a contract

    Returns None for employees without an mCarID (they are not drivers).
    """
    car_id_pos = None
    first_name = None
    last_name = None

    for key, value_offset in iter_sibling_key_values(data, contract_key_offset):
        if key == CAR_ID_KEY:
            car_id_pos = value_offset
        elif key == FIRST_NAME_KEY:
            first_name = parse_driver_name(data, value_offset)
        elif key == LAST_NAME_KEY:
            last_name = parse_driver_name(data, value_offset)

        if car_id_pos is not None and first_name is not None and last_name is not None:
            break

    if car_id_pos is None or first_name is None or last_name is None:
        return None

    position = parse_driver_position(data, car_id_pos)
    return Driver(
        name=decode_json_string(first_name + b' ' + last_name),
        position=position,
        original_position=position,
        offset=car_id_pos,
    )


def extract_drivers(data: bytes) -> List[Driver]:
    """
    Find the player team's three drivers, sorted by mCarID offset

    Raises:
        MissingFieldError: If the player team cannot be found
        TeamSizeMismatchError: Unless exactly three drivers are found
    """
    team_id = get_player_team_id(data)

    drivers = []
    for ref_offset in iter_employer_team_refs(data, team_id):
        contract_key_offset = find_contract_key_offset(data, ref_offset)
        if contract_key_offset is None:
            continue
        driver = maybe_get_driver(data, contract_key_offset)
        if driver is not None:
            log.debug("Driver %s (%s) at offset %d", driver.name, driver.position.label, driver.offset)
            drivers.append(driver)

    if len(drivers) != TEAM_DRIVER_COUNT:
        raise TeamSizeMismatchError(
            f"unable to locate team's {TEAM_DRIVER_COUNT} drivers in save file (found {len(drivers)})"
        )

    drivers.sort(key=lambda d: d.offset)
    return drivers
