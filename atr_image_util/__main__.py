"""
Entry point for Atari DOS Disk Image Utility.

Allows running as: python -m atr_image_util
"""

import argparse
import sys

from . import __version__
from .commands import cmd_cat, cmd_check, cmd_create, cmd_delete, cmd_free, cmd_get, cmd_list, cmd_put
from .formatter import OutputFormatter
from .logging_config import level_from_flags, setup_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='atr_image_util',
        description='Atari DOS 2.0S / 2.5 diskette image (.ATR) utility'
    )

    # Global options
    parser.add_argument('--version', action='version',
                        version=f'%(prog)s {__version__}')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Show detailed output')
    parser.add_argument('-q', '--quiet', action='store_true',
                        help='Suppress non-essential output')
    parser.add_argument('--json', action='store_true', help='Output in JSON format')

    subparsers = parser.add_subparsers(dest='command', required=True)

    ls_parser = subparsers.add_parser('ls', help='Directory listing')
    ls_parser.add_argument('image', help='Disk image (.atr)')
    ls_parser.add_argument('-l', '--long', action='store_true',
                           help='Long listing with sizes and free space')
    ls_parser.add_argument('-a', '--all', action='store_true',
                           help='Show system (.SYS) files')
    ls_parser.add_argument('-1', '--single', action='store_true',
                           help='One name per line')

    cat_parser = subparsers.add_parser('cat', help='Type file to console')
    cat_parser.add_argument('image', help='Disk image (.atr)')
    cat_parser.add_argument('name', help='File name on the disk')
    cat_parser.add_argument('-e', '--eol', action='store_true',
                            help='Convert line endings from 0x9B to 0x0A')

    get_parser = subparsers.add_parser('get', help='Copy file from diskette')
    get_parser.add_argument('image', help='Disk image (.atr)')
    get_parser.add_argument('name', help='File name on the disk')
    get_parser.add_argument('local', nargs='?', help='Local file name (defaults to name)')

    put_parser = subparsers.add_parser('put', help='Copy file to diskette')
    put_parser.add_argument('image', help='Disk image (.atr)')
    put_parser.add_argument('local', help='Local file to copy')
    put_parser.add_argument('name', nargs='?', help='File name on the disk (defaults to basename)')

    rm_parser = subparsers.add_parser('rm', help='Delete a file')
    rm_parser.add_argument('image', help='Disk image (.atr)')
    rm_parser.add_argument('name', help='File name on the disk')

    free_parser = subparsers.add_parser('free', help='Print amount of free space')
    free_parser.add_argument('image', help='Disk image (.atr)')

    check_parser = subparsers.add_parser('check', help='Check filesystem consistency')
    check_parser.add_argument('image', help='Disk image (.atr)')

    create_parser = subparsers.add_parser('create', help='Create a new blank disk image')
    create_parser.add_argument('image', help='Output file path for new disk image')
    create_parser.add_argument('-d', '--density', choices=['single', 'enhanced'],
                               default='single',
                               help='single (DOS 2.0S, 720 sectors) or enhanced (DOS 2.5, 1040 sectors)')
    create_parser.add_argument('-f', '--force', action='store_true',
                               help='Overwrite existing file')

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    setup_logging(level=level_from_flags(args.verbose, args.quiet))

    formatter = OutputFormatter(json_mode=args.json)

    match args.command:
        case 'ls':
            return cmd_list(args, formatter)
        case 'cat':
            return cmd_cat(args, formatter)
        case 'get':
            return cmd_get(args, formatter)
        case 'put':
            return cmd_put(args, formatter)
        case 'rm':
            return cmd_delete(args, formatter)
        case 'free':
            return cmd_free(args, formatter)
        case 'check':
            return cmd_check(args, formatter)
        case 'create':
            return cmd_create(args, formatter)
        case _:
            formatter.error(f"Unknown command: {args.command}")
            return 1


if __name__ == '__main__':
    sys.exit(main())
