"""
The Atari DOS directory: 64 sixteen-byte entries in sectors 361-368.

Slots are numbered in storage order, eight per sector.  A file's slot
number is also the file number stamped into each of its data sectors.
"""

from typing import TYPE_CHECKING

from .constants import (
    DIR_ENTRY_SIZE,
    DIR_SECTORS,
    ENTRIES_PER_SECTOR,
    FLAG_DELETED,
    FLAG_IN_USE,
    MAX_DIR_ENTRIES,
    SECTOR_DIR,
)
from .exceptions import DirectoryFullError, FileNotFoundError
from .logging_config import get_logger
from .models import DirectoryEntry
from .utils import names_match, to_atari_name

if TYPE_CHECKING:
    from .disk import AtariDiskImage

log = get_logger(__name__)


def slot_location(slot: int) -> tuple[int, int]:
    """Return (sector, byte offset) of a directory slot."""
    if not 0 <= slot < MAX_DIR_ENTRIES:
        raise ValueError(f"Directory slot out of range: {slot}")
    return SECTOR_DIR + slot // ENTRIES_PER_SECTOR, (slot % ENTRIES_PER_SECTOR) * DIR_ENTRY_SIZE


def read_entries(disk: 'AtariDiskImage') -> list[DirectoryEntry]:
    """Read all 64 directory slots in storage order."""
    entries = []
    for i in range(DIR_SECTORS):
        data = disk.read_sector(SECTOR_DIR + i)
        for j in range(ENTRIES_PER_SECTOR):
            offset = j * DIR_ENTRY_SIZE
            entries.append(DirectoryEntry.from_bytes(
                data[offset:offset + DIR_ENTRY_SIZE],
                slot=i * ENTRIES_PER_SECTOR + j,
            ))
    return entries


def _store(disk: 'AtariDiskImage', entry: DirectoryEntry) -> None:
    sector, offset = slot_location(entry.slot)
    data = bytearray(disk.read_sector(sector))
    data[offset:offset + DIR_ENTRY_SIZE] = entry.to_bytes()
    disk.write_sector(sector, bytes(data))


def find(disk: 'AtariDiskImage', filename: str, delete: bool = False) -> DirectoryEntry:
    """
    Find the first in-use entry named filename (case-insensitive).

    With delete set, the entry is marked deleted on disk before it is
    returned.  Its sectors are not released here.
    """
    for entry in read_entries(disk):
        if entry.in_use and names_match(entry.name, entry.extension, filename):
            if delete:
                entry.flags = FLAG_DELETED
                _store(disk, entry)
                log.debug("Slot %d (%s) marked deleted", entry.slot, entry.full_name)
            return entry
    raise FileNotFoundError(f"File '{filename}' not found")


def find_empty_slot(disk: 'AtariDiskImage') -> int:
    """Return the first slot whose in-use flag is clear."""
    for entry in read_entries(disk):
        if not entry.in_use:
            return entry.slot
    raise DirectoryFullError("No free directory entries")


def write_entry(
    disk: 'AtariDiskImage', slot: int, filename: str, start_sector: int, sector_count: int
) -> DirectoryEntry:
    """Write a complete in-use entry into slot, replacing whatever was there."""
    name, ext = to_atari_name(filename)
    entry = DirectoryEntry(
        slot=slot,
        flags=FLAG_IN_USE,
        sector_count=sector_count,
        start_sector=start_sector,
        name=name,
        extension=ext,
    )
    _store(disk, entry)
    log.debug("Slot %d: %s, %d sectors from %d", slot, entry.full_name, sector_count, start_sector)
    return entry
