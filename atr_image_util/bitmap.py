"""
VTOC free-space bitmap for Atari DOS disks.

The bitmap holds one bit per sector, most significant bit first, with 1
meaning free.  Sectors 0-719 live in the VTOC (sector 360) at offset 10.
Enhanced density disks keep sectors 720-1023 in VTOC2 (sector 1024), which
also carries a copy of the VTOC bits for sectors 48-719.  DOS never reads
that copy back, so neither do we, but it is rewritten on every save.
"""

import struct
from typing import TYPE_CHECKING

from .chain import walk_chain
from .constants import (
    ED_BITMAP_SIZE,
    ED_BITMAP_START,
    SD_BITMAP_SIZE,
    SD_DISK_SIZE,
    SECTOR_VTOC,
    SECTOR_VTOC2,
    VTOC2_NUM_UNUSED,
    VTOC2_UPPER_BITMAP,
    VTOC_BITMAP,
    VTOC_DOS2_TYPE,
    VTOC_NUM_SECTS,
    VTOC_NUM_UNUSED,
    VTOC_TYPE,
)
from .exceptions import DiskFullError
from .logging_config import get_logger

if TYPE_CHECKING:
    from .disk import AtariDiskImage

log = get_logger(__name__)


class Bitmap:
    """In-memory copy of the free-space bitmap for sectors 0-1023."""

    def __init__(self, data: bytes | None = None):
        self.data = bytearray(ED_BITMAP_SIZE)
        if data is not None:
            self.data[:len(data)] = data
        # Filled in by get_bitmap(verify=True)
        self.problems: list[str] = []

    @staticmethod
    def _locate(sector: int) -> tuple[int, int]:
        return sector >> 3, 0x80 >> (sector & 7)

    def is_free(self, sector: int) -> bool:
        index, mask = self._locate(sector)
        return bool(self.data[index] & mask)

    def mark_used(self, sector: int) -> None:
        index, mask = self._locate(sector)
        self.data[index] &= ~mask & 0xFF

    def mark_free(self, sector: int) -> None:
        index, mask = self._locate(sector)
        self.data[index] |= mask

    def free_count(self, start: int = 0, stop: int = SD_DISK_SIZE) -> int:
        """Number of free sectors in range(start, stop)."""
        return sum(1 for sector in range(start, stop) if self.is_free(sector))

    def free_sectors(self, stop: int) -> list[int]:
        """All free sector numbers below stop, ascending."""
        return [sector for sector in range(1, stop) if self.is_free(sector)]


def _count_free_bits(data: bytes) -> int:
    return sum(bin(byte).count('1') for byte in data)


def get_bitmap(disk: 'AtariDiskImage', verify: bool = False) -> Bitmap:
    """
    Read the allocation bitmap from the VTOC (and VTOC2 on enhanced disks).

    With verify set, the stored counters are compared against the bitmap:
    the VTOC free count, the usable sector total, the DOS type code and, on
    enhanced disks, the VTOC2 free count.  Every check runs; mismatches are
    collected in the returned bitmap's ``problems`` list.
    """
    geometry = disk.geometry
    vtoc = disk.read_sector(SECTOR_VTOC)
    bitmap = Bitmap(vtoc[VTOC_BITMAP:VTOC_BITMAP + SD_BITMAP_SIZE])

    if verify:
        count = _count_free_bits(bitmap.data[:SD_BITMAP_SIZE])
        vtoc_count = struct.unpack_from('<H', vtoc, VTOC_NUM_UNUSED)[0]
        vtoc_total = struct.unpack_from('<H', vtoc, VTOC_NUM_SECTS)[0]

        log.info("Checking that VTOC unused count matches bitmap...")
        if count != vtoc_count:
            _problem(bitmap, f"VTOC free count mismatch: bitmap has {count} free, "
                             f"but VTOC count is {vtoc_count}")
        else:
            log.info("  It's OK (count is %d)", count)

        log.info("Checking that VTOC usable sector count is %d...", geometry.usable_sectors)
        if vtoc_total != geometry.usable_sectors:
            _problem(bitmap, f"VTOC usable sector count is {vtoc_total}, "
                             f"expected {geometry.usable_sectors}")
        else:
            log.info("  It's OK")

        log.info("Checking that VTOC type code is %d...", VTOC_DOS2_TYPE)
        if vtoc[VTOC_TYPE] != VTOC_DOS2_TYPE:
            _problem(bitmap, f"VTOC type code is {vtoc[VTOC_TYPE]}, expected {VTOC_DOS2_TYPE}")
        else:
            log.info("  It's OK")

    if geometry.has_vtoc2:
        vtoc2 = disk.read_sector(SECTOR_VTOC2)
        upper_size = ED_BITMAP_SIZE - SD_BITMAP_SIZE
        bitmap.data[SD_BITMAP_SIZE:] = vtoc2[VTOC2_UPPER_BITMAP:VTOC2_UPPER_BITMAP + upper_size]

        if verify:
            count = _count_free_bits(bitmap.data[SD_BITMAP_SIZE:])
            vtoc2_count = struct.unpack_from('<H', vtoc2, VTOC2_NUM_UNUSED)[0]
            log.info("Checking that VTOC2 unused count matches bitmap...")
            if count != vtoc2_count:
                _problem(bitmap, f"VTOC2 free count mismatch: bitmap has {count} free, "
                                 f"but VTOC2 count is {vtoc2_count}")
            else:
                log.info("  It's OK (count is %d)", count)

    return bitmap


def _problem(bitmap: Bitmap, message: str) -> None:
    log.warning("  ** %s", message)
    bitmap.problems.append(message)


def put_bitmap(disk: 'AtariDiskImage', bitmap: Bitmap) -> None:
    """Write the bitmap and recomputed free counts back to VTOC (and VTOC2)."""
    vtoc = bytearray(disk.read_sector(SECTOR_VTOC))
    vtoc[VTOC_BITMAP:VTOC_BITMAP + SD_BITMAP_SIZE] = bitmap.data[:SD_BITMAP_SIZE]
    base_free = _count_free_bits(bitmap.data[:SD_BITMAP_SIZE])
    struct.pack_into('<H', vtoc, VTOC_NUM_UNUSED, base_free)
    disk.write_sector(SECTOR_VTOC, bytes(vtoc))
    log.debug("VTOC saved, %d free", base_free)

    if disk.geometry.has_vtoc2:
        vtoc2 = bytearray(disk.read_sector(SECTOR_VTOC2))
        vtoc2[:ED_BITMAP_SIZE - ED_BITMAP_START] = bitmap.data[ED_BITMAP_START:]
        upper_free = _count_free_bits(bitmap.data[SD_BITMAP_SIZE:])
        struct.pack_into('<H', vtoc2, VTOC2_NUM_UNUSED, upper_free)
        disk.write_sector(SECTOR_VTOC2, bytes(vtoc2))
        log.debug("VTOC2 saved, %d free", upper_free)


def allocate(bitmap: Bitmap, count: int, limit: int) -> list[int]:
    """
    Take the first count free sectors below limit, lowest first.

    The bitmap is only changed when the whole request can be satisfied.
    """
    chosen = []
    for sector in range(1, limit):
        if len(chosen) == count:
            break
        if bitmap.is_free(sector):
            chosen.append(sector)

    if len(chosen) < count:
        raise DiskFullError(f"Need {count} sectors, only {len(chosen)} free")

    for sector in chosen:
        bitmap.mark_used(sector)
    log.debug("Allocated sectors %s", chosen)
    return chosen


def free_chain(disk: 'AtariDiskImage', bitmap: Bitmap, first_sector: int) -> list[int]:
    """
    Mark every sector of the chain starting at first_sector as free.

    Only the in-memory bitmap changes; sectors are freed regardless of their
    previous state.  Returns the sectors visited.
    """
    freed = []
    for sector, _data, _trailer in walk_chain(disk, first_sector):
        bitmap.mark_free(sector)
        freed.append(sector)
    log.debug("Freed %d sectors starting at %d", len(freed), first_sector)
    return freed
