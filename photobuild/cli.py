"""
Command Line Interface for the photo build.
"""

import argparse
import logging
from typing import List, Optional

from .build_config import BuildConfig
from .build_progress import BuildProgress
from .errors import ConfigError, DescriptorError
from .pipeline import Pipeline
from .reporter import Reporter


def setup_logging(verbose: bool) -> logging.Logger:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO

    logging.basicConfig(
        level=level,
        format='%(asctime)s [%(levelname)s] %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    logging.getLogger('PIL').setLevel(logging.WARNING)

    return logging.getLogger('photobuild')


def load_config(args: argparse.Namespace) -> BuildConfig:
    """Load the config file, then apply environment and CLI overrides."""
    config = BuildConfig.load(args.config).apply_env()

    if getattr(args, 'source', None):
        config.source = args.source
    if getattr(args, 'target', None):
        config.target = args.target
    if getattr(args, 'concurrency', None):
        config.variant_concurrency = args.concurrency

    return config


def cmd_build(args: argparse.Namespace) -> int:
    """Execute build command."""
    logger = setup_logging(args.verbose)

    try:
        config = load_config(args)
    except ConfigError as e:
        logger.error(str(e))
        return 1

    errors = config.validate()
    if errors:
        for error in errors:
            logger.error(error)
        return 1

    logger.info(f"Source: {config.cwd}")
    logger.info(f"Target: {config.target_folder}")
    logger.info(f"Transforms: {', '.join(t.key for t in config.transform_specs())}")

    progress = None
    if not args.quiet:
        progress = BuildProgress(show_files=args.show_files, logger=logger)

    try:
        result = Pipeline(config, logger).run(progress)
    except DescriptorError as e:
        logger.error(str(e))
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130

    stats = result.stats
    if not args.quiet:
        print()
        print(f"Photos: {stats.photos}")
        print(f"Files written: {stats.files_written} (cached: {stats.files_cached})")
        print(f"Originals copied: {stats.copies_done} (cached: {stats.copies_cached})")
        print(f"Without resolution: {stats.unresolved}")
        print(f"Errors: {stats.errors}")
        print(f"Time: {stats.elapsed_seconds:.1f}s")

    for detail in stats.error_details:
        logger.error(detail)

    return 0 if stats.clean else 1


def cmd_report(args: argparse.Namespace) -> int:
    """Execute report command."""
    logger = setup_logging(args.verbose)

    paths = args.manifest
    if not paths:
        try:
            config = load_config(args)
        except ConfigError as e:
            logger.error(str(e))
            return 1
        paths = [
            str(config.target_folder / config.albums_file),
            str(config.target_folder / config.events_file),
        ]

    try:
        gaps = Reporter().report_files(paths)
    except DescriptorError as e:
        logger.error(str(e))
        return 1

    return 0 if gaps == 0 or not args.strict else 1


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog='photobuild',
        description='Build resized photo variants and JSON manifests for the static site',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Workflow:
  1. Build:  python -m photobuild build --config build.json
  2. Report: python -m photobuild report --config build.json

Re-running a build is safe: existing variants and copies are reused.
"""
    )

    parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose logging')

    subparsers = parser.add_subparsers(dest='command', help='Command to run')

    # Build command
    build_parser = subparsers.add_parser('build', help='Generate variants and manifests')
    build_parser.add_argument('-c', '--config', default='build.json', help='Config file (default: build.json)')
    build_parser.add_argument('--source', help='Override source folder')
    build_parser.add_argument('--target', help='Override target folder')
    build_parser.add_argument('-j', '--concurrency', type=int, metavar='N',
                              help='Concurrent variant jobs')
    build_parser.add_argument('-q', '--quiet', action='store_true', help='Suppress progress output')
    build_parser.add_argument('--show-files', action='store_true',
                              help='Print each transform and copy as it finishes')
    build_parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose logging')

    # Report command
    report_parser = subparsers.add_parser('report', help='Report gaps in written manifests')
    report_parser.add_argument('-c', '--config', default='build.json', help='Config file (default: build.json)')
    report_parser.add_argument('-m', '--manifest', action='append',
                               help='Manifest file(s) to check instead of the configured ones')
    report_parser.add_argument('--target', help='Override target folder')
    report_parser.add_argument('--strict', action='store_true', help='Exit with 1 if any photo has gaps')
    report_parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose logging')

    return parser


def main(args: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    parsed_args = parser.parse_args(args)

    if not parsed_args.command:
        parser.print_help()
        return 1

    if parsed_args.command == 'build':
        return cmd_build(parsed_args)
    elif parsed_args.command == 'report':
        return cmd_report(parsed_args)

    return 1
