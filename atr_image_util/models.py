"""
Data model classes for Atari DOS disk image utilities.
"""

import struct
from dataclasses import dataclass

from .constants import (
    ATR_HEADER_SIZE,
    DATA_BYTES,
    DATA_FILE_NUM,
    DATA_NEXT_HIGH,
    DATA_NEXT_LOW,
    DATA_SIZE,
    DIR_ENTRY_SIZE,
    ED_DISK_SIZE,
    ED_IMAGE_SIZE,
    ED_USABLE_SECTORS,
    FLAG_DELETED,
    FLAG_IN_USE,
    FLAG_LOCKED,
    SD_DISK_SIZE,
    SD_IMAGE_SIZE,
    SD_USABLE_SECTORS,
    SECTOR_SIZE,
)
from .exceptions import DiskError, GeometryUnrecognizedError
from .utils import to_external_name


@dataclass(frozen=True)
class Geometry:
    """One of the two supported disk layouts."""
    name: str
    sector_count: int     # Sectors covered by the bitmap (largest sector + 1)
    usable_sectors: int   # Value the VTOC must carry in bytes 1-2
    image_size: int       # Data bytes after the ATR header
    has_vtoc2: bool

    @property
    def last_sector(self) -> int:
        """Highest sector number present in the image."""
        return self.image_size // SECTOR_SIZE


SINGLE_DENSITY = Geometry(
    name='single',
    sector_count=SD_DISK_SIZE,
    usable_sectors=SD_USABLE_SECTORS,
    image_size=SD_IMAGE_SIZE,
    has_vtoc2=False,
)

ENHANCED_DENSITY = Geometry(
    name='enhanced',
    sector_count=ED_DISK_SIZE,
    usable_sectors=ED_USABLE_SECTORS,
    image_size=ED_IMAGE_SIZE,
    has_vtoc2=True,
)

GEOMETRIES = {g.name: g for g in (SINGLE_DENSITY, ENHANCED_DENSITY)}


def geometry_for_size(data_size: int) -> Geometry:
    """Select the geometry whose sector data is exactly data_size bytes."""
    for geometry in GEOMETRIES.values():
        if geometry.image_size == data_size:
            return geometry
    expected = ', '.join(
        f"{ATR_HEADER_SIZE + g.image_size:,} bytes ({g.name} density)"
        for g in GEOMETRIES.values()
    )
    raise GeometryUnrecognizedError(
        f"Unknown disk size {data_size + ATR_HEADER_SIZE:,} bytes. Expected {expected}"
    )


@dataclass
class DirectoryEntry:
    """Represents a 16-byte Atari DOS directory entry."""
    slot: int           # 0-63, position in the directory
    flags: int          # Flag byte
    sector_count: int   # Sectors in file, as stored
    start_sector: int   # First sector of the chain
    name: str           # 8 chars, space-padded
    extension: str      # 3 chars, space-padded

    @classmethod
    def from_bytes(cls, data: bytes, slot: int = 0) -> 'DirectoryEntry':
        """Parse a 16-byte directory entry."""
        if len(data) != DIR_ENTRY_SIZE:
            raise DiskError(f"Invalid directory entry size: {len(data)}")

        flags, sector_count, start_sector = struct.unpack_from('<BHH', data, 0)
        return cls(
            slot=slot,
            flags=flags,
            sector_count=sector_count,
            start_sector=start_sector,
            name=data[5:13].decode('latin-1'),
            extension=data[13:16].decode('latin-1'),
        )

    def to_bytes(self) -> bytes:
        """Serialize to 16-byte directory entry."""
        data = bytearray(DIR_ENTRY_SIZE)
        struct.pack_into('<BHH', data, 0, self.flags, self.sector_count, self.start_sector)
        data[5:13] = self.name.encode('latin-1')[:8].ljust(8)
        data[13:16] = self.extension.encode('latin-1')[:3].ljust(3)
        return bytes(data)

    @property
    def in_use(self) -> bool:
        return bool(self.flags & FLAG_IN_USE)

    @property
    def deleted(self) -> bool:
        return bool(self.flags & FLAG_DELETED)

    @property
    def locked(self) -> bool:
        return bool(self.flags & FLAG_LOCKED)

    @property
    def full_name(self) -> str:
        """Return the lower-case external name, e.g. 'dos.sys'."""
        return to_external_name(self.name, self.extension)


@dataclass
class SectorTrailer:
    """The last three bytes of a data sector."""
    file_number: int   # 0-63, directory slot of the owning file
    next_sector: int   # 0 terminates the chain
    byte_count: int    # Valid data bytes in this sector

    @classmethod
    def from_sector(cls, data: bytes) -> 'SectorTrailer':
        """Decode the trailer of a 128-byte data sector."""
        if len(data) != SECTOR_SIZE:
            raise DiskError(f"Invalid sector size: {len(data)}")
        return cls(
            file_number=(data[DATA_FILE_NUM] >> 2) & 0x3F,
            next_sector=((data[DATA_NEXT_HIGH] & 0x03) << 8) | data[DATA_NEXT_LOW],
            byte_count=data[DATA_BYTES],
        )

    def pack_into(self, buffer: bytearray) -> None:
        """Write this trailer into bytes 125-127 of a sector buffer."""
        buffer[DATA_FILE_NUM] = ((self.file_number & 0x3F) << 2) | ((self.next_sector >> 8) & 0x03)
        buffer[DATA_NEXT_LOW] = self.next_sector & 0xFF
        buffer[DATA_BYTES] = self.byte_count

    @property
    def valid_bytes(self) -> int:
        """Byte count clamped to the data area."""
        return min(self.byte_count, DATA_SIZE)


@dataclass
class FileInfo:
    """One line of a directory listing, built fresh on every listing."""
    name: str
    slot: int
    locked: bool
    start_sector: int
    sector_count: int
    size: int           # Bytes found by walking the chain, -1 if unreadable

    @property
    def is_system(self) -> bool:
        return self.name.endswith('.sys')

    def attr_string(self) -> str:
        """Return ls-style flags, e.g. '-rw--' or '-r--s' for a locked .SYS file."""
        return '-r' + ('-' if self.locked else 'w') + '-' + ('s' if self.is_system else '-')
