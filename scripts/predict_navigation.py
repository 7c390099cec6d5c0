#!/usr/bin/env python3
"""
Chapter navigation command line.

    python scripts/predict_navigation.py predict https://example.com/novel/chapter-50
    python scripts/predict_navigation.py stats
    python scripts/predict_navigation.py prune --max-age-days 30
"""

import os
import sys
import json
import argparse

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from navigator.api import (
    get_default_engine,
    get_pattern_statistics,
    handle_next_chapter_request,
)
from navigator.config import DAY_MS, get_setting
from navigator.logging_config import DEBUG_LEVELS, logger, set_debug_level


def cmd_predict(args):
    status, body = handle_next_chapter_request({"url": args.url})
    print(json.dumps(body, indent=2, ensure_ascii=False))
    return 0 if status == 200 else 1


def cmd_stats(args):
    stats = get_pattern_statistics()
    print(json.dumps(stats, indent=2))
    if args.verbose:
        for pattern in get_default_engine().store.get_all_patterns():
            print(f"  {pattern.domain:<30} {pattern.template:<45} confidence={pattern.confidence:.2f}")
    return 0


def cmd_prune(args):
    max_age_days = args.max_age_days if args.max_age_days is not None else get_setting('pattern_max_age_days')[0]
    removed = get_default_engine().store.remove_stale_patterns(max_age_days * DAY_MS)
    print(f"Removed {len(removed)} stale patterns")
    for domain in removed:
        print(f"  - {domain}")
    return 0


def build_parser():
    parser = argparse.ArgumentParser(description='Predict next/previous chapter URLs and inspect learned patterns.')
    parser.add_argument('--debug-level', choices=list(DEBUG_LEVELS),
                        help='Override NAVIGATOR_DEBUG_LEVEL for this run.')
    subparsers = parser.add_subparsers(dest='command', required=True)

    predict = subparsers.add_parser('predict', help='Predict the neighbours of a chapter URL.')
    predict.add_argument('url', help='Chapter URL')
    predict.set_defaults(func=cmd_predict)

    stats = subparsers.add_parser('stats', help='Show learned pattern statistics.')
    stats.add_argument('-v', '--verbose', action='store_true', help='List every stored pattern.')
    stats.set_defaults(func=cmd_stats)

    prune = subparsers.add_parser('prune', help='Evict patterns that have not been used recently.')
    prune.add_argument('--max-age-days', type=int, help='Defaults to NAVIGATOR_PATTERN_MAX_AGE_DAYS.')
    prune.set_defaults(func=cmd_prune)
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    if args.debug_level:
        set_debug_level(args.debug_level)
    logger.debug(f"[CLI] Running command: {args.command}")
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
