# WORKFLOW: Table loader for the relational store.
# Used by: Pipeline load step
# Functions:
# 1. replace_table() - Clear a table and bulk-insert fresh rows in one transaction
#
# Load flow: rows -> drop keyless rows -> de-duplicate on primary key -> DELETE -> INSERT -> commit
# Each run replaces the whole table, matching a full re-fetch of the dataset.

import logging
from typing import Any, Dict, Iterable

from sqlalchemy import delete, insert
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)


def replace_table(db: Session, model, rows: Iterable[Dict[str, Any]]) -> int:
    """
    Replace the contents of a table with the given rows.

    Args:
        db: Database session
        model: Declarative model class of the table
        rows: Row dictionaries keyed by column name

    Returns:
        Number of rows inserted
    """
    table = model.__table__
    key_names = [c.name for c in table.primary_key.columns]

    unique: Dict[tuple, Dict[str, Any]] = {}
    total = 0
    skipped = 0
    for row in rows:
        total += 1
        key = tuple(row.get(name) for name in key_names)
        if any(value is None or value == "" for value in key):
            skipped += 1
            continue
        unique[key] = row

    if skipped:
        logger.warning(f"Skipped {skipped} {table.name} rows without {', '.join(key_names)}")
    duplicates = total - skipped - len(unique)
    if duplicates:
        logger.warning(f"Dropped {duplicates} duplicate {table.name} rows (last one wins)")

    try:
        db.execute(delete(model))
        if unique:
            db.execute(insert(model), list(unique.values()))
        db.commit()
    except Exception as e:
        db.rollback()
        logger.error(f"Failed to load {table.name}: {e}")
        raise

    logger.info(f"Loaded {len(unique)} rows into {table.name}")
    return len(unique)
