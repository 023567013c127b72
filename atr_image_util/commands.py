"""
Command handlers for Atari DOS disk image utilities.
"""

import os
import sys

from .creator import create_blank_image
from .disk import AtariDiskImage
from .exceptions import AtrError
from .formatter import OutputFormatter
from .utils import local_to_atari_name
from .verify import format_verification_result


def cmd_list(args, formatter: OutputFormatter) -> int:
    """Handle the 'ls' command."""
    try:
        with AtariDiskImage(args.image, readonly=True) as disk:
            files = disk.list_files(include_system=getattr(args, 'all', False))
            free = disk.free_sectors()
        formatter.list_files(
            files,
            free,
            long=getattr(args, 'long', False),
            single=getattr(args, 'single', False)
        )
        return 0

    except AtrError as e:
        formatter.error(str(e))
        return 1


def cmd_cat(args, formatter: OutputFormatter) -> int:
    """Handle the 'cat' command - write a file to stdout."""
    try:
        with AtariDiskImage(args.image, readonly=True) as disk:
            stream = disk.read_file_stream(args.name, translate_eol=getattr(args, 'eol', False))
            out = sys.stdout.buffer
            for chunk in stream:
                out.write(chunk)
            out.flush()
        return 0

    except AtrError as e:
        formatter.error(str(e))
        return 1


def cmd_get(args, formatter: OutputFormatter) -> int:
    """Handle the 'get' command - copy a file from the image."""
    local_name = getattr(args, 'local', None) or args.name
    if os.path.isdir(local_name):
        local_name = os.path.join(local_name, args.name)

    try:
        with AtariDiskImage(args.image, readonly=True) as disk:
            size = disk.copy_out(args.name, local_name)

        formatter.success(
            f"Copied {size:,} bytes",
            source=f"{args.image}:{args.name}",
            dest=local_name,
            bytes=size
        )
        return 0

    except AtrError as e:
        formatter.error(str(e))
        return 1
    except OSError as e:
        formatter.error(f"Filesystem error: {e}")
        return 1


def cmd_put(args, formatter: OutputFormatter) -> int:
    """Handle the 'put' command - copy a local file onto the image."""
    atari_name = getattr(args, 'name', None) or local_to_atari_name(args.local)

    try:
        with AtariDiskImage(args.image, readonly=False) as disk:
            entry = disk.copy_in(args.local, atari_name)

        formatter.success(
            f"Copied {args.local} to {entry.full_name} ({entry.sector_count} sectors)",
            source=args.local,
            dest=f"{args.image}:{entry.full_name}",
            sectors=entry.sector_count
        )
        return 0

    except AtrError as e:
        formatter.error(str(e))
        return 1
    except OSError as e:
        formatter.error(f"Filesystem error: {e}")
        return 1


def cmd_delete(args, formatter: OutputFormatter) -> int:
    """Handle the 'rm' command."""
    try:
        with AtariDiskImage(args.image, readonly=False) as disk:
            freed = disk.delete_file(args.name)

        formatter.success(
            f"Deleted {args.name}",
            deleted=f"{args.image}:{args.name}",
            sectors=len(freed)
        )
        return 0

    except AtrError as e:
        formatter.error(str(e))
        return 1


def cmd_free(args, formatter: OutputFormatter) -> int:
    """Handle the 'free' command."""
    try:
        with AtariDiskImage(args.image, readonly=True) as disk:
            free = disk.free_sectors()
        formatter.free_space(free)
        return 0

    except AtrError as e:
        formatter.error(str(e))
        return 1


def cmd_check(args, formatter: OutputFormatter) -> int:
    """Handle the 'check' command."""
    try:
        with AtariDiskImage(args.image, readonly=True) as disk:
            result = disk.check()

        if formatter.json_mode:
            formatter.success(
                "Check complete",
                valid=result.is_valid,
                errors=result.errors,
                warnings=result.warnings,
                files_checked=result.files_checked,
                sectors_in_use=result.sectors_in_use,
                sectors_free=result.sectors_free,
                double_allocated=result.double_allocated,
                should_be_allocated=result.should_be_allocated,
                should_be_free=result.should_be_free
            )
        else:
            print(format_verification_result(result))

        return 0 if result.is_valid else 1

    except AtrError as e:
        formatter.error(str(e))
        return 1


def cmd_create(args, formatter: OutputFormatter) -> int:
    """Handle the 'create' command."""
    output_path = args.image

    if os.path.exists(output_path) and not getattr(args, 'force', False):
        formatter.error(f"File already exists: {output_path}. Use --force to overwrite.")
        return 1

    density = getattr(args, 'density', 'single')
    try:
        create_blank_image(output_path, density)
        formatter.success(
            f"Created {density} density disk image: {output_path}",
            path=output_path,
            density=density
        )
        return 0

    except AtrError as e:
        formatter.error(str(e))
        return 1
