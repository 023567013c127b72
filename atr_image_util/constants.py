"""
Constants for Atari DOS 2.0S / 2.5 disk image utilities.
"""

# ATR container
ATR_HEADER_SIZE = 16
ATR_MAGIC = 0x0296

# Sector geometry
SECTOR_SIZE = 128
SD_SECTORS_PER_TRACK = 18    # DOS 2.0S single density
ED_SECTORS_PER_TRACK = 26    # DOS 2.5 enhanced density
TRACKS = 40
SD_IMAGE_SIZE = TRACKS * SD_SECTORS_PER_TRACK * SECTOR_SIZE  # 92,160 bytes
ED_IMAGE_SIZE = TRACKS * ED_SECTORS_PER_TRACK * SECTOR_SIZE  # 133,120 bytes

# Largest sector covered by the bitmap + 1
SD_DISK_SIZE = 720
ED_DISK_SIZE = 1024

# Usable sector totals stored in the VTOC
SD_USABLE_SECTORS = 707
ED_USABLE_SECTORS = 1011

# Specific sectors
BOOT_SECTORS = (1, 2, 3)
SECTOR_VTOC = 0x168           # 360
SECTOR_VTOC2 = 0x400          # 1024
SECTOR_DIR = 0x169            # 361
DIR_SECTORS = 8

# Directory entries
DIR_ENTRY_SIZE = 16
ENTRIES_PER_SECTOR = SECTOR_SIZE // DIR_ENTRY_SIZE       # 8
MAX_DIR_ENTRIES = DIR_SECTORS * ENTRIES_PER_SECTOR       # 64

# Directory flag bits
FLAG_NEVER_USED = 0x00
FLAG_DELETED = 0x80
FLAG_IN_USE = 0x40
FLAG_LOCKED = 0x20
FLAG_DOS2 = 0x02
FLAG_OPENED = 0x01

# Data sector layout: 125 bytes of data, then a 3-byte trailer
DATA_SIZE = 125
DATA_FILE_NUM = 125    # Upper 6 bits; lower 2 bits are next-sector bits 9..8
DATA_NEXT_HIGH = 125
DATA_NEXT_LOW = 126
DATA_BYTES = 127

# VTOC layout
VTOC_TYPE = 0
VTOC_NUM_SECTS = 1
VTOC_NUM_UNUSED = 3
VTOC_BITMAP = 10
VTOC_DOS2_TYPE = 2

# Bitmap sizes in bytes
SD_BITMAP_SIZE = 90
ED_BITMAP_SIZE = 128

# VTOC2 layout: bytes 0-83 repeat bitmap bytes 6-89 (sectors 48-719),
# bytes 84-121 hold bitmap bytes 90-127 (sectors 720-1023)
ED_BITMAP_START = 6
VTOC2_UPPER_BITMAP = SD_BITMAP_SIZE - ED_BITMAP_START    # 84
VTOC2_NUM_UNUSED = 122

# ATASCII end-of-line
ATASCII_EOL = 0x9B

# Valid characters in an Atari DOS 8.3 name
VALID_FILENAME_CHARS = set("ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789")

# Owner marker used by the consistency checker for reserved sectors
RESERVED_OWNER = 64
