"""
Atari DOS 2.0S / 2.5 disk image handler.

Supports listing, reading, writing, deleting and checking files on .ATR
images of single density (720 sectors) and enhanced density (1040 sectors)
diskettes.
"""

import os
from typing import BinaryIO, Iterator

from . import bitmap as vtoc
from . import directory
from .chain import decode, encode, sectors_needed, walk_chain
from .constants import ATR_HEADER_SIZE, SECTOR_SIZE
from .exceptions import (
    CorruptChainError,
    DiskError,
    DiskIOError,
    FileNotFoundError,
    InvalidSectorZeroError,
)
from .logging_config import get_logger
from .models import DirectoryEntry, FileInfo, Geometry, geometry_for_size
from .utils import local_to_atari_name, to_external_name, validate_filename
from .verify import VerificationResult, check_disk

log = get_logger(__name__)


class AtariDiskImage:
    """An open .ATR image together with its geometry."""

    def __init__(self, image_path: str, readonly: bool = True):
        """Open the disk image and detect its geometry from the file size."""
        self.image_path = image_path
        self.readonly = readonly
        self._file: BinaryIO | None = None

        mode = 'rb' if readonly else 'r+b'
        try:
            self._file = open(image_path, mode)
            size = self._file.seek(0, os.SEEK_END)
        except OSError as e:
            self.close()
            raise DiskError(f"Cannot open disk image: {e}") from e

        try:
            self.geometry: Geometry = geometry_for_size(size - ATR_HEADER_SIZE)
        except DiskError:
            self.close()
            raise
        log.debug("Opened %s (%s density)", image_path, self.geometry.name)

    def close(self) -> None:
        """Close the disk image."""
        if self._file:
            if not self.readonly:
                self._file.flush()
            self._file.close()
            self._file = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    # -------------------------------------------------------------------------
    # Sector I/O
    # -------------------------------------------------------------------------

    def _seek(self, sector: int) -> BinaryIO:
        if self._file is None:
            raise DiskError("Disk image not open")
        if sector == 0:
            raise InvalidSectorZeroError("Requested sector 0")
        if not 0 < sector <= self.geometry.last_sector:
            raise DiskIOError(f"Sector {sector} is beyond the end of the disk")
        try:
            self._file.seek((sector - 1) * SECTOR_SIZE + ATR_HEADER_SIZE)
        except OSError as e:
            raise DiskIOError(f"Seek to sector {sector} failed: {e}") from e
        return self._file

    def read_sector(self, sector: int) -> bytes:
        """Read a single 128-byte sector (sectors are numbered from 1)."""
        handle = self._seek(sector)
        try:
            data = handle.read(SECTOR_SIZE)
        except OSError as e:
            raise DiskIOError(f"Failed to read sector {sector}: {e}") from e
        if len(data) < SECTOR_SIZE:
            raise DiskIOError(f"Short read on sector {sector}")
        return data

    def write_sector(self, sector: int, data: bytes) -> None:
        """Write a single 128-byte sector."""
        if self.readonly:
            raise DiskError("Disk image opened in read-only mode")
        if len(data) != SECTOR_SIZE:
            raise DiskError(f"Sector data must be {SECTOR_SIZE} bytes")
        handle = self._seek(sector)
        try:
            handle.write(data)
        except OSError as e:
            raise DiskIOError(f"Failed to write sector {sector}: {e}") from e

    # -------------------------------------------------------------------------
    # File operations (read)
    # -------------------------------------------------------------------------

    def list_files(self, include_system: bool = True) -> list[FileInfo]:
        """List in-use files sorted by name; .sys files only if include_system."""
        result = []
        for entry in directory.read_entries(self):
            if not entry.in_use:
                continue
            info = FileInfo(
                name=entry.full_name,
                slot=entry.slot,
                locked=entry.locked,
                start_sector=entry.start_sector,
                sector_count=entry.sector_count,
                size=self._chain_size(entry),
            )
            if include_system or not info.is_system:
                result.append(info)

        result.sort(key=lambda f: f.name)
        return result

    def _chain_size(self, entry: DirectoryEntry) -> int:
        try:
            return sum(t.valid_bytes for _s, _d, t in walk_chain(self, entry.start_sector))
        except CorruptChainError as e:
            log.warning("%s: %s", entry.full_name, e)
            return -1

    def read_file_stream(self, filename: str, translate_eol: bool = False) -> Iterator[bytes]:
        """Return a lazy iterator over the file's data, sector by sector."""
        entry = directory.find(self, filename)
        return decode(self, entry.start_sector, translate_eol)

    def read_file(self, filename: str, translate_eol: bool = False) -> bytes:
        """Read a whole file."""
        return b''.join(self.read_file_stream(filename, translate_eol))

    def copy_out(self, filename: str, dest_path: str, translate_eol: bool = False) -> int:
        """Copy a file to the local filesystem; returns bytes written."""
        stream = self.read_file_stream(filename, translate_eol)
        total = 0
        with open(dest_path, 'wb') as f:
            for chunk in stream:
                f.write(chunk)
                total += len(chunk)
        return total

    # -------------------------------------------------------------------------
    # File operations (write)
    # -------------------------------------------------------------------------

    def write_file(self, filename: str, data: bytes) -> DirectoryEntry:
        """
        Write a file to the disk, replacing any file of the same name.

        The old file is removed first.  Sector allocation happens in memory,
        so a full disk or directory is reported before any data is written.
        """
        if self.readonly:
            raise DiskError("Disk image opened in read-only mode")
        filename = to_external_name(*validate_filename(filename))

        try:
            self.delete_file(filename)
        except FileNotFoundError:
            pass

        bitmap = vtoc.get_bitmap(self)
        slot = directory.find_empty_slot(self)
        count = sectors_needed(len(data))
        sectors = vtoc.allocate(bitmap, count, self.geometry.sector_count)

        first = encode(self, data, slot, sectors)
        entry = directory.write_entry(self, slot, filename, first, count)
        vtoc.put_bitmap(self, bitmap)
        log.info("Wrote %s: %d bytes in %d sectors", entry.full_name, len(data), count)
        return entry

    def copy_in(self, source_path: str, filename: str | None = None) -> DirectoryEntry:
        """Copy a local file onto the disk, named after its basename by default."""
        if filename is None:
            filename = local_to_atari_name(source_path)
        with open(source_path, 'rb') as f:
            data = f.read()
        return self.write_file(filename, data)

    def delete_file(self, filename: str) -> list[int]:
        """
        Delete a file and release its sectors.

        The directory entry is marked deleted before the chain is walked, so
        a corrupt chain leaves the entry deleted but its sectors allocated.
        """
        if self.readonly:
            raise DiskError("Disk image opened in read-only mode")
        entry = directory.find(self, filename, delete=True)
        bitmap = vtoc.get_bitmap(self)
        freed = vtoc.free_chain(self, bitmap, entry.start_sector)
        vtoc.put_bitmap(self, bitmap)
        log.info("Deleted %s (%d sectors)", entry.full_name, len(freed))
        return freed

    # -------------------------------------------------------------------------
    # Space and consistency
    # -------------------------------------------------------------------------

    def free_sectors(self) -> int:
        """Number of free sectors according to the bitmap."""
        return vtoc.get_bitmap(self).free_count(0, self.geometry.sector_count)

    def free_bytes(self) -> int:
        return self.free_sectors() * SECTOR_SIZE

    def check(self) -> VerificationResult:
        """Run the consistency checker."""
        return check_disk(self)

