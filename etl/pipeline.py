# WORKFLOW: Pipeline orchestration for the CT cannabis datasets.
# Used by: scripts/extract.py, tests
# Functions:
# 1. load_raw_records() - Socrata fetch (cache-aware) or cache-only load
# 2. parse_records() - Raw dicts -> dataset record models
# 3. export_records() - CSV + JSON files, optionally zstd-compressed
# 4. process_dataset() - fetch -> clean -> parse -> export -> load for one dataset
# 5. run() - All selected datasets against one relational store
#
# Pipeline flow: Socrata/cache -> cleaning pass (datasets with percentages) -> record models
#                -> CSV/JSON exports -> replace table in the store
# A failing dataset is logged and skipped; the remaining datasets still run.

"""
Pipeline orchestration for the CT cannabis datasets.
"""

import logging
from dataclasses import dataclass, field, replace
from datetime import timedelta
from pathlib import Path
from typing import Any, Dict, List, Optional

import httpx
from pydantic import BaseModel, ValidationError
from sqlalchemy.engine import make_url
from sqlalchemy.orm import Session

from core.config import Settings
from core.logging_config import get_event_logger
from db.loader import replace_table
from db.session import check_db_connection, configure_engine, dispose_engine, get_session_factory, init_db
from etl.cache import ensure_dank_dir, set_root
from etl.cleaning import clean_records
from etl.datasets import select_datasets
from etl.datasets.common import Dataset
from etl.export import compress_file, finalize_outputs, write_csv, write_json
from etl.measure import DEFAULT_ERROR_PATTERNS, ErrorPatterns
from etl.socrata import fetch_socrata, load_cached

logger = logging.getLogger(__name__)
events = get_event_logger(__name__)

_FILE_DATABASES = ("duckdb", "sqlite")


@dataclass
class RunResult:
    """Files produced by a run and the datasets that failed."""

    output_files: List[str] = field(default_factory=list)
    succeeded: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)


def error_patterns_for(settings: Settings) -> ErrorPatterns:
    """Default known-bad measurement patterns plus any configured extras."""
    return DEFAULT_ERROR_PATTERNS.extend(settings.extra_bad_literals, settings.extra_bad_prefixes)


def load_raw_records(
    dataset: Dataset,
    settings: Settings,
    no_fetch: bool = False,
    client: Optional[httpx.Client] = None,
) -> List[Dict[str, Any]]:
    """
    Load a dataset's raw records from the API or the cache.

    Args:
        dataset: Dataset to load
        settings: Run settings (token, cache age, page size, timeout)
        no_fetch: Only read the cache, whatever its age
        client: Optional httpx client

    Returns:
        List of raw records
    """
    config = dataset.socrata
    if no_fetch:
        records = load_cached(config)
        logger.info(f"Loaded {len(records)} {dataset.name} records from cache")
        return records

    if not config.batch_size and settings.batch_size:
        config = replace(config, batch_size=settings.batch_size)

    return fetch_socrata(
        config,
        app_token=settings.app_token,
        max_cache_age=timedelta(hours=settings.max_cache_age_hours),
        client=client,
        timeout=settings.request_timeout,
    )


def parse_records(
    dataset: Dataset,
    raw_records: List[Any],
    patterns: ErrorPatterns = DEFAULT_ERROR_PATTERNS,
) -> List[BaseModel]:
    """
    Validate raw records into the dataset's record model.

    Malformed records are logged and skipped.
    """
    records = []
    rejected = 0
    for item in raw_records:
        try:
            records.append(dataset.model.model_validate(item, context={"error_patterns": patterns}))
        except ValidationError as e:
            rejected += 1
            logger.warning(f"Skipping malformed {dataset.name} record: {e.error_count()} validation errors")

    if rejected:
        logger.warning(f"Rejected {rejected} of {len(raw_records)} {dataset.name} records")
    return records


def export_records(
    dataset: Dataset,
    records: List[BaseModel],
    output_dir: Path,
    compress: bool = False,
) -> List[Path]:
    """
    Write a dataset's CSV and JSON exports.

    Returns:
        Paths of the produced files (compressed paths when compress is set)
    """
    output_dir.mkdir(parents=True, exist_ok=True)
    csv_path = write_csv(
        output_dir / dataset.csv_filename,
        dataset.csv_columns,
        (dataset.csv_row(r) for r in records),
    )
    json_path = write_json(output_dir / dataset.json_filename, records)
    return finalize_outputs([csv_path, json_path], compress)


def process_dataset(
    dataset: Dataset,
    settings: Settings,
    db: Session,
    no_fetch: bool = False,
    compress: bool = False,
    client: Optional[httpx.Client] = None,
) -> List[Path]:
    """
    Fetch, clean, export and load one dataset.

    Args:
        dataset: Dataset to process
        settings: Run settings
        db: Database session for the relational store
        no_fetch: Only read the cache
        compress: zstd-compress the CSV and JSON exports
        client: Optional httpx client

    Returns:
        Paths of the exported files
    """
    logger.info(f"Processing {dataset.name} dataset")
    patterns = error_patterns_for(settings)

    raw_records = load_raw_records(dataset, settings, no_fetch=no_fetch, client=client)
    events.info("dataset_fetched", dataset=dataset.name, records=len(raw_records),
                source="cache" if no_fetch else "api")

    if dataset.percent_fields:
        result = clean_records(raw_records, dataset.percent_fields, patterns)
        logger.info(f"Cleaned {dataset.name}: {result.summary()}")
        events.info("dataset_cleaned", dataset=dataset.name, input=result.input_count,
                    kept=result.kept_count, removed=result.dropped_count)
        raw_records = result.kept

    records = parse_records(dataset, raw_records, patterns)
    files = export_records(dataset, records, Path(settings.output_dir), compress)

    loaded = replace_table(db, dataset.table, (dataset.db_row(r) for r in records))
    events.info("dataset_exported", dataset=dataset.name, records=len(records),
                rows_loaded=loaded, files=[str(f) for f in files])
    return files


def _database_file(database_url: str) -> Optional[Path]:
    url = make_url(database_url)
    if url.get_backend_name() in _FILE_DATABASES and url.database and url.database != ":memory:":
        return Path(url.database)
    return None


def run(settings: Settings, no_fetch: bool = False, client: Optional[httpx.Client] = None) -> RunResult:
    """
    Process every selected dataset into exports and the relational store.

    Args:
        settings: Run settings (datasets, locations, compression)
        no_fetch: Only read the cache
        client: Optional httpx client shared by all fetches

    Returns:
        RunResult with produced files and failed dataset names

    Raises:
        ValueError: If an unknown dataset is requested
        RuntimeError: If the relational store is unreachable after migration
        Exception: If the relational store cannot be created
    """
    datasets = select_datasets(settings.datasets)

    set_root(settings.root_dir)
    ensure_dank_dir()

    database_url = settings.resolved_database_url()
    configure_engine(database_url)
    init_db()
    if not check_db_connection():
        safe_url = make_url(database_url).render_as_string(hide_password=True)
        raise RuntimeError(f"Database connection check failed for {safe_url}")

    result = RunResult()
    SessionLocal = get_session_factory()
    with SessionLocal() as db:
        for dataset in datasets:
            try:
                files = process_dataset(dataset, settings, db, no_fetch=no_fetch,
                                        compress=settings.compress, client=client)
                result.output_files.extend(str(f) for f in files)
                result.succeeded.append(dataset.name)
            except Exception as e:
                logger.error(f"Error processing {dataset.name}: {e}")
                result.failed.append(dataset.name)

    dispose_engine()

    db_file = _database_file(database_url)
    if db_file is None:
        result.output_files.append(make_url(database_url).render_as_string(hide_password=True))
    elif settings.compress and db_file.exists():
        result.output_files.append(str(compress_file(db_file)))
        logger.info(f"Compressed database to {db_file}.zst")
    else:
        result.output_files.append(str(db_file))

    return result
