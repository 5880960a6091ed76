"""
MAF Machine - Command Line Interface
Analyze an exported activity list without the web dashboard.
"""

import argparse
import json
import logging
import os
import sys

from maf_machine.constants import (
    DEFAULT_AGE,
    DEFAULT_MODIFIER,
    DEFAULT_QUALIFYING_TOLERANCE,
    DEFAULT_UNITS,
    MAF_MODIFIERS,
    MODIFIER_DESCRIPTIONS,
    SUPPORTED_UNITS,
)
from maf_machine.data_manager import MAFDataManager
from maf_machine.report import build_report
from maf_machine.settings import AthleteSettings

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='maf-machine',
        description='MAF heart-rate training analysis for exported Strava runs.',
    )
    parser.add_argument('activities', help='JSON file with a list of Strava activity summaries')
    parser.add_argument('--streams', help='directory of <activity_id>.json stream files')
    parser.add_argument('--age', type=int, default=DEFAULT_AGE)
    modifier_help = '; '.join(f"{m:+d}: {text}" for m, text in MODIFIER_DESCRIPTIONS.items())
    parser.add_argument('--modifier', type=int, choices=MAF_MODIFIERS, default=DEFAULT_MODIFIER,
                        help=f"training-status adjustment to 180 - age ({modifier_help})")
    parser.add_argument('--units', choices=SUPPORTED_UNITS, default=DEFAULT_UNITS)
    parser.add_argument('--tolerance', type=int, default=DEFAULT_QUALIFYING_TOLERANCE,
                        help='bpm above the zone that still counts toward qualifying runs')
    parser.add_argument('--start-date', help='ignore runs before this ISO date')
    parser.add_argument('--exclude', nargs='*', default=[], metavar='ID', help='activity ids to exclude')
    parser.add_argument('--csv', metavar='DIR', help='also write a CSV export into DIR')
    parser.add_argument('--json', action='store_true', help='print JSON instead of the text report')
    parser.add_argument('-v', '--verbose', action='store_true')
    return parser


def load_activities(path):
    with open(path, encoding='utf-8') as f:
        data = json.load(f)
    if isinstance(data, dict):
        data = data.get('activities', [])
    if not isinstance(data, list):
        raise ValueError(f"{path} does not contain an activity list")
    return data


def load_streams(folder_path):
    """Read every <id>.json in the folder; unreadable files are skipped."""
    streams = {}
    if not folder_path:
        return streams
    for name in sorted(os.listdir(folder_path)):
        if not name.endswith('.json'):
            continue
        try:
            with open(os.path.join(folder_path, name), encoding='utf-8') as f:
                streams[name[:-5]] = json.load(f)
        except (OSError, ValueError) as exc:
            logger.warning("Skipping stream file %s: %s", name, exc)
    return streams


def main(argv=None):
    """CLI entry point."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s',
    )

    try:
        settings = AthleteSettings(
            age=args.age,
            modifier=args.modifier,
            units=args.units,
            qualifying_tolerance=args.tolerance,
            start_date=args.start_date,
        )
        payloads = load_activities(args.activities)
        streams = load_streams(args.streams)
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    manager = MAFDataManager(settings, excluded_ids=args.exclude)
    quiet = (lambda _text: None) if args.json else None
    manager.sync(payloads, streams, output_callback=quiet)

    if args.json:
        print(json.dumps(manager.to_payload(), indent=2))
    else:
        summary = manager.summary()
        for line in build_report(manager.activities, summary, manager.advice(summary=summary), settings):
            print(line)

    if args.csv:
        try:
            path = manager.export_csv(args.csv)
        except ValueError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
        if not args.json:
            print(f"\nSaved CSV: {path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
