from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from appinfo.config import load_patch_config
from appinfo.converters import to_json
from appinfo.logging_utils import setup_logging
from appinfo.patches import fix_document
from appinfo.printer import render
from appinfo.reader import AppInfoReader

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='appinfo', description='Inspect and patch appinfo.vdf files.')
    parser.add_argument('--strict', action='store_true', help='Fail on malformed sections or node lists instead of stopping early')
    parser.add_argument('-v', '--verbose', action='count', default=0, help='More log output (-vv for debug)')
    parser.add_argument('--log-file', type=Path, help='Also write a debug log to this file')
    commands = parser.add_subparsers(dest='command', metavar='COMMAND')

    fix = commands.add_parser('fix', help="Patch appinfo.vdf to make Assassin's Creed 2 work.")
    fix.add_argument('input', type=Path, help='appinfo.vdf to read')
    fix.add_argument('output', type=Path, help='Where to write the patched file')
    fix.add_argument('--config', type=Path, help='JSON patch config (target app, container, node template)')

    show = commands.add_parser('print', help='Parse and print the contents of appinfo.vdf.')
    show.add_argument('input', type=Path, help='appinfo.vdf to read')
    show.add_argument('--format', choices=('text', 'json'), default='text', help='Output format')
    return parser


def _run_fix(args: argparse.Namespace) -> int:
    config = load_patch_config(args.config)
    document = AppInfoReader.read(args.input, strict=args.strict)
    patched = fix_document(document, config)
    written = patched.write(args.output)
    logger.info('Wrote %d bytes to %s', written, args.output)
    return 0


def _run_print(args: argparse.Namespace) -> int:
    document = AppInfoReader.read(args.input, strict=args.strict)
    if args.format == 'json':
        sys.stdout.write(to_json(document) + '\n')
    else:
        sys.stdout.write(render(document))
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    console_level = {0: logging.WARNING, 1: logging.INFO}.get(args.verbose, logging.DEBUG)
    setup_logging(console_level=console_level, file_path=args.log_file)
    if args.command is None:
        parser.print_help()
        return 0
    try:
        if args.command == 'fix':
            return _run_fix(args)
        return _run_print(args)
    except (OSError, ValueError) as exc:
        logger.error('%s failed: %s', args.command, exc)
        return 1


if __name__ == '__main__':
    raise SystemExit(main())
