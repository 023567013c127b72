"""
Output formatting for Atari DOS disk image utilities.
"""

import json
import sys

from .constants import SECTOR_SIZE
from .models import FileInfo

# Width of one name column in the short listing
COLUMN_WIDTH = 13
SCREEN_WIDTH = 80


class OutputFormatter:
    """Handle output formatting (text or JSON)."""

    def __init__(self, json_mode: bool = False):
        self.json_mode = json_mode

    def success(self, message: str, **data) -> None:
        """Output success message."""
        if self.json_mode:
            output = {"status": "success", "message": message, **data}
            print(json.dumps(output))
        else:
            print(message)

    def error(self, message: str) -> None:
        """Output error message."""
        if self.json_mode:
            output = {"status": "error", "message": message}
            print(json.dumps(output))
        else:
            print(f"Error: {message}", file=sys.stderr)

    def list_files(
        self,
        files: list[FileInfo],
        free_sectors: int,
        long: bool = False,
        single: bool = False
    ) -> None:
        """
        Output a directory listing.

        The default layout is names in columns ordered down then across,
        like ls.  long adds flags, byte size, sector count and totals;
        single prints one name per line.
        """
        if self.json_mode:
            output = {
                "status": "success",
                "files": [
                    {
                        "name": f.name,
                        "size": f.size,
                        "sectors": f.sector_count,
                        "start_sector": f.start_sector,
                        "locked": f.locked,
                    }
                    for f in files
                ],
                "free_sectors": free_sectors,
            }
            print(json.dumps(output))
        elif long:
            print()
            total_sectors = 0
            total_bytes = 0
            for f in files:
                print(f"{f.attr_string()} {f.size:6d} ({f.sector_count:3d}) {f.name:<13s}")
                total_sectors += f.sector_count
                total_bytes += max(f.size, 0)
            print(f"\n{len(files)} entries\n")
            print(f"{total_sectors} sectors, {total_bytes} bytes\n")
            self.free_space(free_sectors)
            print()
        elif single:
            for f in files:
                print(f.name)
        else:
            for line in format_columns([f.name for f in files]):
                print(line)

    def free_space(self, free_sectors: int) -> None:
        """Output the free-space report."""
        free_bytes = free_sectors * SECTOR_SIZE
        if self.json_mode:
            self.success(
                f"{free_sectors} free sectors, {free_bytes} free bytes",
                free_sectors=free_sectors,
                free_bytes=free_bytes
            )
        else:
            print(f"{free_sectors} free sectors, {free_bytes} free bytes")


def format_columns(names: list[str], width: int = SCREEN_WIDTH) -> list[str]:
    """Lay names out in columns, filling each column top to bottom."""
    cols = max(1, width // COLUMN_WIDTH)
    rows = (len(names) + cols - 1) // cols
    lines = []
    for y in range(rows):
        cells = []
        for x in range(cols):
            n = y + x * rows
            if n < len(names):
                cells.append(f"{names[n]:<12s}  ")
        lines.append(''.join(cells).rstrip())
    return lines
