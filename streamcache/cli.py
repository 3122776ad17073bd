"""
Cache maintenance CLI.

Usage:
    streamcache stats
    streamcache clear
    streamcache clear-bucket images
    streamcache --config config.yaml --base-dir /tmp/cache stats

Exit codes:
    0 - Success
    1 - Bad configuration, or the cache could not be cleared
        (I/O error or bad bucket name)
"""
import argparse
import logging
import sys
from typing import List, Optional

import yaml

from .config import CacheConfig, build_cache
from .logging_utils import add_logging_args, configure_logging, format_bytes, format_count, resolve_log_level

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="streamcache", description="Inspect and clear the web API cache")
    parser.add_argument("--config", metavar="PATH", help="YAML configuration file")
    parser.add_argument("--base-dir", metavar="PATH", help="Cache root (overrides config)")
    add_logging_args(parser)

    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("stats", help="Show cache size and entry counts")
    sub.add_parser("clear", help="Remove every cached entry")
    bucket = sub.add_parser("clear-bucket", help="Remove the entries of one bucket")
    bucket.add_argument("bucket", help="Bucket name, e.g. images")
    return parser.parse_args(argv)


def _load_config(args: argparse.Namespace) -> CacheConfig:
    config = CacheConfig(args.config)
    if args.base_dir:
        config.override_base_dir(args.base_dir)
    return config


def run(args: argparse.Namespace) -> int:
    try:
        config = _load_config(args)
    except (FileNotFoundError, ValueError, yaml.YAMLError) as e:
        configure_logging(level=resolve_log_level(args), log_file=args.log_file)
        logger.error(f"Failed to load configuration: {e}")
        return 1

    configure_logging(
        level=resolve_log_level(args, default=config.log_level),
        log_file=args.log_file or config.log_file,
    )
    cache = build_cache(config)

    if args.command == "stats":
        stats = cache.get_stats()
        logger.info(f"Cache root: {cache.base or '(disk cache disabled)'}")
        logger.info(f"Disk: {format_count(stats.total_entries, 'entry', 'entries')}, {format_bytes(stats.total_size)}")
        logger.info(f"Images in memory: {stats.image_cache_entries}")
        return 0

    try:
        if args.command == "clear":
            cache.clear_all()
        else:
            cache.clear_bucket(args.bucket)
    except (OSError, ValueError) as e:
        logger.error(f"Failed to clear cache: {e}")
        return 1
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    return run(parse_args(argv))


if __name__ == "__main__":
    sys.exit(main())
