"""
Motorsport Manager Save Fixer - Configuration

File format constants and user-facing defaults live here so the
reader, the rewriter and the command line agree on them.
"""

import os
from pathlib import Path

# ============================================================================
# CONTAINER FORMAT
# ============================================================================
# Header is six little-endian int32 values:
#   magic, version,
#   compressed_info_size, decompressed_info_size,
#   compressed_data_size, decompressed_data_size
# followed by the compressed info block and the compressed data block.

SAVE_FILE_MAGIC = 1932684653
SUPPORTED_VERSION = 4
HEADER_FORMAT = '<6i'
HEADER_SIZE = 24

MAX_DECOMPRESSED_SIZE = 4 * 1024 * 1024 * 1024
MAX_FIELD_VALUE = 0x7FFFFFFF

# ============================================================================
# JSON PATTERNS
# ============================================================================
# The game writes compact JSON (no optional whitespace), so these literals
# can be searched for directly.

SAVE_INFO_OBJECT_START = b'"saveInfo":{'
SAVE_NAME_KEY = b'name'

PLAYER_TEAM_OBJECT_START = b'"mPlayerTeam":{'
TEAM_ID_KEY = b'$id'

EMPLOYER_TEAM_REF_PREFIX = b'"mEmployeerTeam":{"$ref":"'
EMPLOYER_TEAM_REF_SUFFIX = b'"}'
CONTRACT_KEY = b'"contract":'

CAR_ID_KEY = b'mCarID'
FIRST_NAME_KEY = b'mFirstName'
LAST_NAME_KEY = b'mLastName'

TEAM_DRIVER_COUNT = 3

# ============================================================================
# FILES
# ============================================================================

SAVE_EXTENSION = '.sav'
FIXED_SUFFIX = '(fixed)'
TEMP_SUFFIX = '.mmsftmp'
FALLBACK_SAVE_NAME = 'Practice Driver Fixed Save'


def default_save_dir() -> Path:
    """Where Motorsport Manager keeps its saves, or the home directory"""
    home = Path.home()
    if os.name == 'nt':  # Windows
        base = Path(os.environ.get('USERPROFILE', str(home)))
    else:  # Linux/Mac (Proton prefixes and such mirror the Windows layout)
        base = home

    saves = base / "AppData" / "LocalLow" / "Playsport Games" / "Motorsport Manager" / "Cloud" / "Saves"
    if saves.exists():
        return saves
    return home
