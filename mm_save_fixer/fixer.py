"""
Motorsport Manager Practice Driver Fixer

Sometimes Motorsport Manager mixes up which driver sits in which car,
and practice sessions end up with the wrong drivers. The fix is to set
each driver's car back by hand:

1. Open the save and read the player team's three drivers
2. Assign car 1, car 2 and reserve so each is held by exactly one driver
3. Write a new save (the original is left alone)
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional, Union

from .config import FALLBACK_SAVE_NAME, FIXED_SUFFIX, SAVE_EXTENSION
from .drivers import DriverPosition
from .errors import ErrorKind, InvalidPositionError, SaveFixerError
from .save_file import DriverRef, SaveFile

log = logging.getLogger(__name__)

DriverSelector = Union[str, int]


@dataclass
class DriverSummary:
    """Information about a driver for display"""
    index: int
    name: str
    position: DriverPosition
    original_position: DriverPosition


@dataclass
class FixResult:
    """Result of a fix operation"""
    success: bool
    output_file: Optional[Path]
    save_name: Optional[str]
    changed_drivers: List[str] = field(default_factory=list)
    error_kind: Optional[ErrorKind] = None
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


def suggested_output_path(original_path: Path) -> Path:
    """`career.sav` -> `career(fixed).sav` in the same folder"""
    original = Path(original_path)
    if original.suffix.lower() == SAVE_EXTENSION:
        return original.with_name(f"{original.stem}{FIXED_SUFFIX}{SAVE_EXTENSION}")
    return original.with_name(f"{original.name}{FIXED_SUFFIX}{SAVE_EXTENSION}")


def save_name_from_path(path: Path) -> str:
    """The name the game should show for a save written to `path`"""
    name = Path(path).name
    if name.lower().endswith(SAVE_EXTENSION):
        name = name[:-len(SAVE_EXTENSION)]
    return name or FALLBACK_SAVE_NAME


class PracticeDriverFixer:
    """
    Loads a save, reassigns the team's drivers and writes a fixed copy
    """

    def __init__(self, progress_callback: Optional[Callable[[str, int], None]] = None):
        """
        Initialize the fixer

        Args:
            progress_callback: Optional function(message, percent) for progress updates
        """
        self.progress_callback = progress_callback
        self.save_file: Optional[SaveFile] = None
        self.source_path: Optional[Path] = None

    def _report_progress(self, message: str, percent: int = -1):
        """Report progress to callback if set"""
        if self.progress_callback:
            self.progress_callback(message, percent)

    def _require_loaded(self) -> SaveFile:
        if self.save_file is None:
            raise ValueError("No save loaded. Call load first.")
        return self.save_file

    def load(self, path: Path) -> List[DriverSummary]:
        """
        Open a save file and find the team's drivers

        Raises:
            SaveFixerError: If the file cannot be read or is not a usable save
        """
        self._report_progress("Loading save file...", 0)
        self.source_path = Path(path)
        self.save_file = SaveFile.open(self.source_path)
        self._report_progress("Drivers found", 100)
        return self.get_drivers()

    def get_drivers(self) -> List[DriverSummary]:
        save = self._require_loaded()
        return [
            DriverSummary(
                index=d.index,
                name=d.name,
                position=d.position,
                original_position=d.original_position,
            )
            for d in save.drivers
        ]

    def get_save_name(self) -> str:
        return self._require_loaded().save_name

    def find_driver(self, selector: DriverSelector) -> DriverRef:
        """
        Look up a driver by 1-based number or by name

        Names match case-insensitively, on the full name or a unique
        part of it (usually the last name).
        """
        drivers = self._require_loaded().drivers

        if isinstance(selector, int) or str(selector).isdecimal():
            number = int(selector)
            if 1 <= number <= len(drivers):
                return drivers[number - 1]
            raise InvalidPositionError(f"no driver number {number} (use 1-{len(drivers)})")

        wanted = str(selector).strip().casefold()
        exact = [d for d in drivers if d.name.casefold() == wanted]
        if len(exact) == 1:
            return exact[0]

        partial = [d for d in drivers if wanted in d.name.casefold()]
        if len(partial) == 1:
            return partial[0]
        if not partial:
            raise InvalidPositionError(f"no driver matches '{selector}'")
        raise InvalidPositionError(f"'{selector}' matches more than one driver")

    def assign(
        self,
        car1: Optional[DriverSelector] = None,
        car2: Optional[DriverSelector] = None,
        reserve: Optional[DriverSelector] = None,
    ) -> Dict[str, DriverPosition]:
        """
        Set driver positions

        Drivers that are not named keep their position unless a named
        driver takes it, in which case they move to a position nobody
        holds. Naming one driver therefore swaps them with whoever had
        that seat.

        Raises:
            InvalidPositionError: If the result is not one driver per position
        """
        save = self._require_loaded()
        wanted = {
            DriverPosition.CAR1: car1,
            DriverPosition.CAR2: car2,
            DriverPosition.RESERVE: reserve,
        }

        assigned: Dict[int, DriverPosition] = {}
        for position, selector in wanted.items():
            if selector is None:
                continue
            driver = self.find_driver(selector)
            if driver.index in assigned:
                raise InvalidPositionError(f"{driver.name} cannot be assigned to more than one position")
            assigned[driver.index] = position

        claimed = set(assigned.values())
        unnamed = [d for d in save.drivers if d.index not in assigned]
        kept = {d.position for d in unnamed if d.position not in claimed}
        free = [p for p in DriverPosition if p not in claimed and p not in kept]
        for driver in unnamed:
            if driver.position in claimed and free:
                assigned[driver.index] = free.pop(0)

        previous = {d.index: d.position for d in save.drivers}
        for driver in save.drivers:
            if driver.index in assigned:
                driver.position = assigned[driver.index]

        if not save.positions_are_unique():
            for driver in save.drivers:
                driver.position = previous[driver.index]
            raise InvalidPositionError("each of car 1, car 2 and reserve needs exactly one driver")

        return {d.name: d.position for d in save.drivers}

    def swap_cars(self) -> None:
        """Exchange the car 1 and car 2 drivers"""
        save = self._require_loaded()
        for driver in save.drivers:
            if driver.position == DriverPosition.CAR1:
                driver.position = DriverPosition.CAR2
            elif driver.position == DriverPosition.CAR2:
                driver.position = DriverPosition.CAR1

    def fix(
        self,
        output_path: Path,
        save_name: Optional[str] = None,
        allow_overwrite: bool = False,
    ) -> FixResult:
        """
        Write the fixed save file

        Args:
            output_path: Path for the new save file
            save_name: Name shown in the game; derived from output_path if None
            allow_overwrite: Replace output_path if it exists

        Returns:
            FixResult with details about the write
        """
        save = self._require_loaded()
        output_path = Path(output_path)
        if save_name is None:
            save_name = save_name_from_path(output_path)
        elif not save_name:
            save_name = FALLBACK_SAVE_NAME

        warnings = []
        changed = [
            f"{d.name}: {d.original_position.label} -> {d.position.label}"
            for d in save.changed_drivers()
        ]
        if not changed:
            warnings.append("No driver positions were changed")

        self._report_progress("Writing fixed save...", 50)

        try:
            save.write(output_path, save_name, allow_overwrite)
        except SaveFixerError as e:
            log.debug("Writing %s failed", output_path, exc_info=True)
            return FixResult(
                success=False,
                output_file=None,
                save_name=save_name,
                changed_drivers=changed,
                error_kind=e.kind,
                errors=[str(e)],
                warnings=warnings,
            )

        self._report_progress("Fixed save written!", 100)

        return FixResult(
            success=True,
            output_file=output_path,
            save_name=save_name,
            changed_drivers=changed,
            warnings=warnings,
        )


def fix_save(
    input_path: str,
    output_path: Optional[str] = None,
    car1: Optional[DriverSelector] = None,
    car2: Optional[DriverSelector] = None,
    reserve: Optional[DriverSelector] = None,
    save_name: Optional[str] = None,
    allow_overwrite: bool = False,
    progress_callback: Optional[Callable[[str, int], None]] = None,
) -> FixResult:
    """
    Convenience function to reassign drivers and write a fixed save

    Args:
        input_path: Save file to read
        output_path: Where to write; defaults to `<name>(fixed).sav`
        car1, car2, reserve: Driver names or 1-based numbers
        save_name: Name shown in the game; derived from output_path if None
        allow_overwrite: Replace output_path if it exists
        progress_callback: Optional progress callback

    Returns:
        FixResult with details about the fix
    """
    fixer = PracticeDriverFixer(progress_callback)
    try:
        fixer.load(Path(input_path))
        fixer.assign(car1=car1, car2=car2, reserve=reserve)
    except SaveFixerError as e:
        return FixResult(
            success=False,
            output_file=None,
            save_name=save_name,
            error_kind=e.kind,
            errors=[str(e)],
        )

    if output_path is None:
        output_path = suggested_output_path(Path(input_path))
    return fixer.fix(Path(output_path), save_name, allow_overwrite)
