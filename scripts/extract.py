# WORKFLOW: Command-line entry point for extracting the CT cannabis datasets.
# Used by: Scheduled refresh jobs, manual exports (installed as `dank-extract`)
# Functions:
# 1. build_parser() - CLI flags (token, locations, datasets, cache, compression)
# 2. settings_from_args() - Overlay CLI flags on the DANK_* settings
# 3. main() - Configure logging, run the pipeline, print the produced files
#
# Extract flow: flags + env -> Settings -> pipeline.run() -> CSV/JSON/database files
# Exits non-zero when the database cannot be created or every dataset failed.

"""
Extract the Connecticut cannabis open-data datasets.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from core.config import AVAILABLE_DATASETS, Settings, settings  # noqa: E402
from core.logging_config import configure_logging  # noqa: E402
from etl.pipeline import run  # noqa: E402

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='dank-extract',
        description='Fetch, clean and export the CT cannabis open-data datasets',
    )
    parser.add_argument('-t', '--token', help='data.ct.gov app token')
    parser.add_argument('--root', help='Root directory for .dank data (default: .)')
    parser.add_argument('-o', '--output', help='Output directory for exports (default: .)')
    parser.add_argument('--db', help='Database file path or SQLAlchemy URL '
                                     '(default: .dank/dank-extract.duckdb)')
    parser.add_argument('-d', '--dataset', action='append', dest='datasets',
                        help=f'Datasets to fetch, repeatable or comma-separated '
                             f'({",".join(AVAILABLE_DATASETS)})')
    parser.add_argument('-n', '--no-fetch', action='store_true', help="Don't fetch data, use existing cache")
    parser.add_argument('-c', '--compress', action='store_true', help='Compress output files with zstd')
    parser.add_argument('-v', '--verbose', action='store_true', help='Verbose output')
    parser.add_argument('--max-cache-age', type=float,
                        help='Maximum age of cached data in hours before re-fetching (default: 24)')
    return parser


def _database_url(value: str) -> str:
    if "://" in value:
        return value
    return f"duckdb:///{value}"


def _split_datasets(values: List[str]) -> List[str]:
    names = []
    for value in values:
        names.extend(part.strip() for part in value.split(",") if part.strip())
    return names


def settings_from_args(args: argparse.Namespace, base: Settings = settings) -> Settings:
    """
    Overlay CLI flags on loaded settings.

    Args:
        args: Parsed CLI arguments
        base: Settings loaded from the environment

    Returns:
        New Settings instance for this run
    """
    update = {}
    if args.token is not None:
        update['app_token'] = args.token
    if args.root is not None:
        update['root_dir'] = args.root
    if args.output is not None:
        update['output_dir'] = args.output
    if args.db is not None:
        update['database_url'] = _database_url(args.db)
    if args.datasets:
        update['datasets'] = _split_datasets(args.datasets)
    if args.compress:
        update['compress'] = True
    if args.max_cache_age is not None:
        update['max_cache_age_hours'] = args.max_cache_age
    return base.model_copy(update=update)


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main extract function.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    run_settings = settings_from_args(args)
    configure_logging(run_settings.log_level, verbose=args.verbose)

    try:
        result = run(run_settings, no_fetch=args.no_fetch)
    except ValueError as e:
        logger.error(f"Invalid arguments: {e}")
        return 2
    except Exception as e:
        logger.error(f"Extraction failed: {e}")
        return 1

    for failed in result.failed:
        logger.error(f"Dataset {failed} failed")

    print("Output files:")
    for path in result.output_files:
        print(f"  {path}")

    if result.failed and not result.succeeded:
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
