"""
File storage as linked chains of data sectors.

Each data sector carries 125 bytes of file data followed by a trailer
holding the owning file number, the next sector of the chain (0 ends it)
and the number of valid bytes in this sector.
"""

from typing import TYPE_CHECKING, Iterator

from .constants import ATASCII_EOL, DATA_SIZE, SECTOR_SIZE
from .exceptions import CorruptChainError, DiskFullError
from .logging_config import get_logger
from .models import SectorTrailer

if TYPE_CHECKING:
    from .disk import AtariDiskImage

log = get_logger(__name__)

_EOL_TABLE = bytes(0x0A if b == ATASCII_EOL else b for b in range(256))


def sectors_needed(length: int) -> int:
    """Sectors required for length bytes; an empty file still takes one."""
    return max(1, (length + DATA_SIZE - 1) // DATA_SIZE)


def walk_chain(
    disk: 'AtariDiskImage', first_sector: int
) -> Iterator[tuple[int, bytes, SectorTrailer]]:
    """
    Yield (sector, data, trailer) for each sector of a chain.

    Traversal stops after the sector whose next pointer is 0.  A chain that
    leaves the disk, or visits more sectors than the disk has, raises
    CorruptChainError.
    """
    limit = disk.geometry.sector_count
    sector = first_sector
    visited = 0

    while True:
        if not 0 < sector < limit:
            raise CorruptChainError(f"Chain starting at {first_sector} reaches invalid sector {sector}")
        visited += 1
        if visited > limit:
            raise CorruptChainError(f"Chain starting at {first_sector} does not terminate")

        data = disk.read_sector(sector)
        trailer = SectorTrailer.from_sector(data)
        yield sector, data, trailer

        if trailer.next_sector == 0:
            return
        sector = trailer.next_sector


def decode(
    disk: 'AtariDiskImage', first_sector: int, translate_eol: bool = False
) -> Iterator[bytes]:
    """
    Lazily yield the valid bytes of each sector in a file's chain.

    With translate_eol, ATASCII end-of-line (0x9B) becomes '\\n'.
    """
    for _sector, data, trailer in walk_chain(disk, first_sector):
        chunk = data[:trailer.valid_bytes]
        if translate_eol:
            chunk = chunk.translate(_EOL_TABLE)
        yield chunk


def encode(
    disk: 'AtariDiskImage', content: bytes, file_number: int, sectors: list[int]
) -> int:
    """
    Write content across the pre-allocated sectors and return the first one.

    Every sector but the last holds a full 125 bytes; the last holds the
    remainder, which is 125 again when the length is an exact multiple.
    """
    count = sectors_needed(len(content))
    if len(sectors) < count:
        raise DiskFullError(f"Need {count} sectors, only {len(sectors)} allocated")

    remaining = len(content)
    for i in range(count):
        block = content[i * DATA_SIZE:(i + 1) * DATA_SIZE]
        last = (i + 1 == count)

        buffer = bytearray(SECTOR_SIZE)
        buffer[:len(block)] = block
        SectorTrailer(
            file_number=file_number,
            next_sector=0 if last else sectors[i + 1],
            byte_count=remaining if last else DATA_SIZE,
        ).pack_into(buffer)
        disk.write_sector(sectors[i], bytes(buffer))
        remaining -= DATA_SIZE

    log.debug("Wrote %d bytes as file %d in %d sectors from %d",
              len(content), file_number, count, sectors[0])
    return sectors[0]
