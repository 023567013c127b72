"""
Consistency checking for Atari DOS disk images.

Rebuilds sector ownership from the directory and compares it with the VTOC
bitmap.  Problems are reported, never repaired.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .bitmap import get_bitmap
from .chain import walk_chain
from .constants import (
    BOOT_SECTORS,
    DIR_SECTORS,
    RESERVED_OWNER,
    SECTOR_DIR,
    SECTOR_VTOC,
    SECTOR_VTOC2,
)
from .directory import read_entries
from .exceptions import AtrError
from .logging_config import get_logger

if TYPE_CHECKING:
    from .disk import AtariDiskImage

log = get_logger(__name__)


@dataclass
class VerificationResult:
    """Results from disk verification."""
    is_valid: bool = True
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    info: list[str] = field(default_factory=list)

    # Statistics
    files_checked: int = 0
    sectors_in_use: int = 0
    sectors_free: int = 0
    double_allocated: list[int] = field(default_factory=list)
    should_be_allocated: list[int] = field(default_factory=list)
    should_be_free: list[int] = field(default_factory=list)

    def add_error(self, message: str):
        """Add an error (disk is invalid)."""
        log.warning("  ** %s", message)
        self.errors.append(message)
        self.is_valid = False

    def add_warning(self, message: str):
        """Add a warning (disk usable but has issues)."""
        log.warning("  ** Warning: %s", message)
        self.warnings.append(message)

    def add_info(self, message: str):
        """Add informational message."""
        log.info(message)
        self.info.append(message)


def reserved_sectors(disk: 'AtariDiskImage') -> list[int]:
    """Sectors owned by DOS itself: sector 0, boot, VTOC(s), directory."""
    reserved = [0, *BOOT_SECTORS, SECTOR_VTOC]
    reserved.extend(range(SECTOR_DIR, SECTOR_DIR + DIR_SECTORS))
    if disk.geometry.has_vtoc2:
        reserved.append(SECTOR_VTOC2)
    return reserved


def build_shadow_map(
    disk: 'AtariDiskImage', result: VerificationResult
) -> dict[int, int | None]:
    """
    Replay every in-use directory entry and record who owns each sector.

    Returns a map from sector number (below the geometry's bitmap range) to
    the owning slot number, RESERVED_OWNER, or None when nothing claims it.
    """
    limit = disk.geometry.sector_count
    owner: dict[int, int | None] = dict.fromkeys(range(limit))
    names: dict[int, str] = {}

    for sector in reserved_sectors(disk):
        if sector < limit:
            owner[sector] = RESERVED_OWNER

    for entry in read_entries(disk):
        if not entry.in_use:
            continue

        filename = entry.full_name
        result.files_checked += 1
        result.add_info(f"Checking {filename} (file_no {entry.slot})")

        count = 0
        seen: set[int] = set()
        try:
            for sector, _data, _trailer in walk_chain(disk, entry.start_sector):
                if sector in seen:
                    result.add_error(f"Sector chain of {filename} loops back to sector {sector}")
                    break
                seen.add(sector)
                previous = owner[sector]
                if previous is not None:
                    holder = names.get(sector, 'reserved')
                    result.add_error(
                        f"Sector {sector} of {filename} already in use by {holder} ({previous})"
                    )
                    result.double_allocated.append(sector)
                owner[sector] = entry.slot
                names[sector] = filename
                count += 1
        except AtrError as e:
            result.add_error(f"Bad sector chain for {filename}: {e}")

        if count != entry.sector_count:
            result.add_warning(
                f"Size in directory ({entry.sector_count}) does not match size on disk "
                f"({count}) for file {filename}"
            )
        result.add_info(f"  Found {count} sectors")

    return owner


def check_disk(disk: 'AtariDiskImage') -> VerificationResult:
    """
    Verify an Atari DOS disk image for consistency.

    Every mismatch is collected; checking never stops early and nothing on
    the disk is modified.

    Args:
        disk: An open AtariDiskImage

    Returns:
        VerificationResult with findings
    """
    result = VerificationResult()
    owner = build_shadow_map(disk, result)

    result.sectors_in_use = sum(1 for o in owner.values() if o is not None)
    result.sectors_free = len(owner) - result.sectors_in_use
    result.add_info(f"{result.sectors_in_use} sectors in use, {result.sectors_free} sectors free")

    result.add_info("Checking VTOC...")
    bitmap = get_bitmap(disk, verify=True)
    for problem in bitmap.problems:
        result.add_error(problem)

    result.add_info("Compare VTOC bitmap with reconstructed bitmap from files...")
    for sector, holder in owner.items():
        allocated = not bitmap.is_free(sector)
        if allocated and holder is None:
            result.add_error(f"VTOC shows sector {sector} allocated, but it should be free")
            result.should_be_free.append(sector)
        elif not allocated and holder is not None:
            result.add_error(f"VTOC shows sector {sector} free, but it should be allocated")
            result.should_be_allocated.append(sector)

    return result


def format_verification_result(result: VerificationResult) -> str:
    """Format verification result as human-readable string."""
    lines = []

    if result.is_valid:
        lines.append("Disk check: PASSED")
    else:
        lines.append("Disk check: FAILED")

    lines.append("")

    if result.errors:
        lines.append(f"Errors ({len(result.errors)}):")
        for error in result.errors:
            lines.append(f"  ERROR: {error}")
        lines.append("")

    if result.warnings:
        lines.append(f"Warnings ({len(result.warnings)}):")
        for warning in result.warnings:
            lines.append(f"  WARNING: {warning}")
        lines.append("")

    lines.append("Summary:")
    lines.append(f"  Files checked: {result.files_checked}")
    lines.append(f"  Sectors in use: {result.sectors_in_use}")
    lines.append(f"  Sectors free: {result.sectors_free}")

    if result.double_allocated:
        lines.append(f"  Double-allocated sectors: {len(result.double_allocated)}")
    if result.should_be_allocated:
        lines.append(f"  Sectors that should be allocated: {len(result.should_be_allocated)}")
    if result.should_be_free:
        lines.append(f"  Sectors that should be free: {len(result.should_be_free)}")

    return '\n'.join(lines)
