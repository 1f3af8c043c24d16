#!/usr/bin/env python3
"""
dtms: microsecond-precision timestamp arithmetic from the command line

Usage:
    # Current time in the canonical form
    dtms now

    # Render a timestamp with another template
    dtms format "2015-08-08 10:10:10.123456" --format "d.m.Y H:i:s.u"

    # Relative offsets, microseconds included
    dtms modify "2015-08-08 10:10:10.123456" "+10 min +10 seconds +123456 micro"

    # Interval arithmetic
    dtms add "2015-08-08 10:10:10.123456" PT1.999999S
    dtms sub "2015-08-08 10:10:10.123456" -- -PT1.876544S

    # Signed difference
    dtms diff "2015-08-08 10:10:10.123456" "2015-08-08 10:10:05.654321"

Timestamps are 'now', ISO 8601 text, or text matching --input-format.
Naive timestamps take the configured timezone (--tz overrides it).
Put "--" before a negative interval so it is not read as an option.
"""

import argparse
import logging
import sys
from typing import List, Optional

from .config import DtmsConfig, load_config
from .errors import DtmsError
from .instant import Instant
from .interval import Interval

logger = logging.getLogger('dtms')


def _instant(text: str, args: argparse.Namespace, config: DtmsConfig) -> Instant:
    if args.input_format and text != 'now':
        return Instant.parse(text, args.input_format, config.tzinfo())
    return Instant(text, config.tzinfo())


def _render_interval(interval: Interval, template: Optional[str]) -> str:
    return interval.format(template) if template else str(interval)


def run(args: argparse.Namespace, config: DtmsConfig) -> str:
    """Execute one command and return its output line."""
    template = args.format or config.format

    if args.command == 'now':
        return Instant.now(config.tzinfo()).format(template)

    instant = _instant(args.time, args, config)

    if args.command == 'format':
        return instant.format(template)
    if args.command == 'modify':
        return instant.modify(args.offset).format(template)
    if args.command == 'add':
        return instant.add(Interval.parse(args.interval)).format(template)
    if args.command == 'sub':
        return instant.sub(Interval.parse(args.interval)).format(template)
    if args.command == 'diff':
        other = _instant(args.other, args, config)
        interval = instant.diff(other, absolute=args.absolute)
        return _render_interval(interval, args.interval_format or config.interval_format)

    raise ValueError(f"Unknown command: {args.command}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='dtms',
        description='dtms: microsecond-precision timestamp arithmetic',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    dtms now --format "U.u"
    dtms modify "2015-08-08 10:10:10.123456" "-999999 micro"
    dtms diff "2015-08-08 10:10:10.123456" "2015-08-18 10:10:05.654321" --interval-format "%RP%dDT%hH%iM%sS"
        """
    )
    parser.add_argument(
        '--config', '-c',
        help='Path to TOML configuration file'
    )
    parser.add_argument(
        '--tz',
        help='Timezone for naive timestamps (overrides config)'
    )
    parser.add_argument(
        '--input-format',
        help='Template for parsing timestamp arguments (default: ISO 8601)'
    )
    parser.add_argument(
        '--debug',
        action='store_true',
        help='Enable debug logging'
    )

    commands = parser.add_subparsers(dest='command', required=True)

    now = commands.add_parser('now', help='Print the current time')
    now.add_argument('--format', '-f', help='Output template')

    fmt = commands.add_parser('format', help='Render a timestamp')
    fmt.add_argument('time')
    fmt.add_argument('--format', '-f', help='Output template')

    modify = commands.add_parser('modify', help='Apply a relative offset')
    modify.add_argument('time')
    modify.add_argument('offset', help='e.g. "+1 day -10 min +250 micro"')
    modify.add_argument('--format', '-f', help='Output template')

    for name, verb in (('add', 'Add'), ('sub', 'Subtract')):
        cmd = commands.add_parser(name, help=f'{verb} an interval')
        cmd.add_argument('time')
        cmd.add_argument('interval', help='e.g. PT1.5S or -P1DT2H')
        cmd.add_argument('--format', '-f', help='Output template')

    diff = commands.add_parser('diff', help='Signed interval between two timestamps')
    diff.add_argument('time')
    diff.add_argument('other')
    diff.add_argument('--absolute', action='store_true', help='Drop the sign')
    diff.add_argument('--interval-format', help='%%-template for the interval')
    diff.set_defaults(format=None)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    config = load_config(args.config)
    if args.tz:
        config.timezone = args.tz

    logging.getLogger().setLevel(logging.DEBUG if args.debug else config.log_level)

    try:
        print(run(args, config))
    except DtmsError as e:
        logger.error(f"{args.command} failed: {e}")
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
