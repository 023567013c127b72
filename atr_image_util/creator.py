"""
Disk image creation for Atari DOS disk images.

Provides a function to create blank, formatted DOS 2.0S (single density)
and DOS 2.5 (enhanced density) .ATR images.
"""

import struct
from typing import Literal

from .bitmap import Bitmap, put_bitmap
from .constants import (
    ATR_HEADER_SIZE,
    ATR_MAGIC,
    BOOT_SECTORS,
    DIR_SECTORS,
    SECTOR_DIR,
    SECTOR_SIZE,
    SECTOR_VTOC,
    VTOC_DOS2_TYPE,
    VTOC_NUM_SECTS,
    VTOC_TYPE,
)
from .disk import AtariDiskImage
from .exceptions import DiskError, GeometryUnrecognizedError
from .logging_config import get_logger
from .models import GEOMETRIES, Geometry

log = get_logger(__name__)


def _create_atr_header(geometry: Geometry) -> bytes:
    """Build the 16-byte ATR header: magic, size in paragraphs, sector size."""
    paragraphs = geometry.image_size // 16
    header = bytearray(ATR_HEADER_SIZE)
    struct.pack_into('<HHHB', header, 0,
                     ATR_MAGIC, paragraphs & 0xFFFF, SECTOR_SIZE, paragraphs >> 16)
    return bytes(header)


def _initial_bitmap(geometry: Geometry) -> Bitmap:
    """Everything free except sector 0, boot sectors, VTOC and directory."""
    bitmap = Bitmap()
    for sector in range(1, geometry.sector_count):
        bitmap.mark_free(sector)
    for sector in (*BOOT_SECTORS, SECTOR_VTOC, *range(SECTOR_DIR, SECTOR_DIR + DIR_SECTORS)):
        bitmap.mark_used(sector)
    return bitmap


def create_blank_image(
    path: str,
    density: Literal['single', 'enhanced'] = 'single'
) -> None:
    """
    Create a blank, formatted Atari DOS disk image.

    Args:
        path: Path for the new disk image file
        density: 'single' for DOS 2.0S (92,176 bytes) or 'enhanced' for
                 DOS 2.5 (133,136 bytes)

    Raises:
        GeometryUnrecognizedError: If density is not recognized
        DiskError: If creation fails
    """
    if density not in GEOMETRIES:
        raise GeometryUnrecognizedError(
            f"Invalid density: {density}. Use 'single' or 'enhanced'."
        )
    geometry = GEOMETRIES[density]

    try:
        with open(path, 'wb') as f:
            f.write(_create_atr_header(geometry))
            f.write(bytes(geometry.image_size))

            vtoc = bytearray(SECTOR_SIZE)
            vtoc[VTOC_TYPE] = VTOC_DOS2_TYPE
            struct.pack_into('<H', vtoc, VTOC_NUM_SECTS, geometry.usable_sectors)
            f.seek(ATR_HEADER_SIZE + (SECTOR_VTOC - 1) * SECTOR_SIZE)
            f.write(vtoc)
    except OSError as e:
        raise DiskError(f"Failed to create disk image: {e}") from e

    # Free counts and the VTOC2 mirror are filled in by the normal save path
    with AtariDiskImage(path, readonly=False) as disk:
        put_bitmap(disk, _initial_bitmap(geometry))

    log.info("Created %s density image %s", geometry.name, path)
