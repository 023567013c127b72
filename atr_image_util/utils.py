"""
Utility functions for Atari DOS disk image utilities.
"""

import os

from .constants import VALID_FILENAME_CHARS
from .exceptions import InvalidFilenameError


def to_atari_name(filename: str) -> tuple[str, str]:
    """
    Convert an external name to the directory's 8.3 form.

    Letters are upper-cased and both parts space-padded.  Anything past
    eight name characters or three extension characters is dropped, and
    everything between the name and the first '.' is skipped.

        'test.txt' -> ('TEST    ', 'TXT')
        'readme'   -> ('README  ', '   ')
    """
    if '.' in filename:
        name, ext = filename.split('.', 1)
    else:
        name, ext = filename, ''
    return name[:8].upper().ljust(8), ext[:3].upper().ljust(3)


def to_external_name(name: str, extension: str) -> str:
    """
    Convert an 8.3 directory name to lower-case dotted form.

    The dot is omitted when the extension is blank.
    """
    name = name.rstrip(' ').lower()
    ext = extension.rstrip(' ').lower()
    if ext:
        return f"{name}.{ext}"
    return name


def validate_filename(filename: str) -> tuple[str, str]:
    """
    Validate and parse an 8.3 filename for writing.
    Returns (name, extension) both uppercase and space-padded.
    Raises InvalidFilenameError if not valid 8.3 format.
    """
    filename = filename.upper().strip()

    if not filename:
        raise InvalidFilenameError("Filename cannot be empty")

    if '.' in filename:
        name, ext = filename.rsplit('.', 1)
    else:
        name, ext = filename, ''

    if len(name) > 8:
        raise InvalidFilenameError(f"Filename '{name}' exceeds 8 characters")
    if len(ext) > 3:
        raise InvalidFilenameError(f"Extension '{ext}' exceeds 3 characters")
    if not name:
        raise InvalidFilenameError("Filename cannot be empty")
    if not name[0].isalpha():
        raise InvalidFilenameError(f"Filename '{name}' must start with a letter")

    for char in name + ext:
        if char not in VALID_FILENAME_CHARS:
            raise InvalidFilenameError(f"Invalid character '{char}' in filename")

    return name.ljust(8), ext.ljust(3)


def names_match(stored_name: str, stored_ext: str, filename: str) -> bool:
    """
    Case-insensitive comparison of a directory name against a user name.

    The whole external name must match; a name too long for 8.3 matches nothing.
    """
    return to_external_name(stored_name, stored_ext) == filename.lower()


def local_to_atari_name(local_path: str) -> str:
    """Default on-disk name for a local file: its basename."""
    return os.path.basename(local_path.rstrip('/\\'))
