"""
Atari DOS Disk Image Utility

A Python package for reading, writing, and checking Atari DOS 2.0S
(single density) and DOS 2.5 (enhanced density) .ATR disk images.
"""

from .constants import (
    ATR_HEADER_SIZE,
    DATA_SIZE,
    DIR_ENTRY_SIZE,
    FLAG_DELETED,
    FLAG_IN_USE,
    FLAG_LOCKED,
    MAX_DIR_ENTRIES,
    SECTOR_DIR,
    SECTOR_SIZE,
    SECTOR_VTOC,
    SECTOR_VTOC2,
)
from .exceptions import (
    AtrError,
    CorruptChainError,
    CorruptedDiskError,
    DirectoryFullError,
    DiskError,
    DiskFullError,
    DiskIOError,
    FileNotFoundError,
    GeometryUnrecognizedError,
    InvalidFilenameError,
    InvalidSectorZeroError,
)
from .models import (
    ENHANCED_DENSITY,
    SINGLE_DENSITY,
    DirectoryEntry,
    FileInfo,
    Geometry,
    SectorTrailer,
    geometry_for_size,
)
from .bitmap import Bitmap, allocate, free_chain, get_bitmap, put_bitmap
from .chain import decode, encode, sectors_needed, walk_chain
from .directory import find, find_empty_slot, read_entries, write_entry
from .disk import AtariDiskImage
from .creator import create_blank_image
from .verify import VerificationResult, check_disk, format_verification_result
from .formatter import OutputFormatter
from .utils import to_atari_name, to_external_name, validate_filename
from .commands import cmd_cat, cmd_check, cmd_create, cmd_delete, cmd_free, cmd_get, cmd_list, cmd_put

__version__ = "1.0.0"
