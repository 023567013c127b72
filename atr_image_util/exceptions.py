"""
Custom exceptions for Atari DOS disk image utilities.
"""


class AtrError(Exception):
    """Base exception for all ATR disk errors."""
    pass


class DiskError(AtrError):
    """Error reading/writing disk image."""
    pass


class DiskIOError(DiskError):
    """Seek, read or write on the backing image failed."""
    pass


class InvalidSectorZeroError(DiskError):
    """Sector 0 was addressed; it does not exist on an Atari disk."""
    pass


class GeometryUnrecognizedError(DiskError):
    """Image size matches neither single nor enhanced density."""
    pass


class DiskFullError(AtrError):
    """Not enough free sectors on disk."""
    pass


class DirectoryFullError(AtrError):
    """No free directory entries available."""
    pass


class InvalidFilenameError(AtrError):
    """Filename does not conform to Atari 8.3 format."""
    pass


class FileNotFoundError(AtrError):
    """File not found in disk image."""
    pass


class CorruptedDiskError(AtrError):
    """Disk structure is corrupted."""
    pass


class CorruptChainError(CorruptedDiskError):
    """Sector chain is cyclic or points outside the disk."""
    pass
