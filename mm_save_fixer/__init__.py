"""
Motorsport Manager Practice Driver Fixer

Fixes saves where the player team's drivers have ended up in the wrong
cars, by rewriting each driver's car assignment in a copy of the save.

Usage:
    # CLI
    python -m mm_save_fixer --show career.sav
    python -m mm_save_fixer career.sav --car1 Hamilton --car2 Bottas --reserve Russell

    # Python API
    from mm_save_fixer import fix_save
    result = fix_save('career.sav', car1='Hamilton', car2='Bottas')
"""

__version__ = '1.0.0'

from .drivers import Driver, DriverPosition
from .errors import ErrorKind, SaveFixerError
from .fixer import (
    PracticeDriverFixer,
    FixResult,
    fix_save,
    suggested_output_path,
    save_name_from_path,
)
from .save_file import DriverRef, SaveFile

__all__ = [
    'Driver',
    'DriverPosition',
    'DriverRef',
    'ErrorKind',
    'FixResult',
    'PracticeDriverFixer',
    'SaveFile',
    'SaveFixerError',
    'fix_save',
    'save_name_from_path',
    'suggested_output_path',
]
