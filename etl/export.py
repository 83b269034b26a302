# WORKFLOW: File exporters for cleaned dataset records.
# Used by: Pipeline export step
# Functions:
# 1. write_json() - Indented JSON array (measurements in structured form)
# 2. write_csv() - CSV with header row (measurements in flat form)
# 3. compress_file() - zstd-compress a file and remove the original
#
# Export flow: records -> JSON / CSV files in the output directory -> optional .zst

"""
File exporters for cleaned dataset records.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Iterable, List, Sequence, Union

import pandas as pd
import zstandard
from pydantic import BaseModel

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def write_json(path: PathLike, records: Iterable[Any]) -> Path:
    """
    Write records to a JSON file with pretty formatting.

    Args:
        path: Destination file
        records: pydantic models or plain JSON-serializable objects

    Returns:
        Path of the written file
    """
    path = Path(path)
    items = [
        r.model_dump(mode="json") if isinstance(r, BaseModel) else r
        for r in records
    ]
    try:
        with open(path, "w", encoding="utf-8") as f:
            json.dump(items, f, indent=2)
            f.write("\n")
    except OSError as e:
        logger.error(f"Failed to write JSON file {path}: {e}")
        raise

    logger.info(f"Wrote {len(items)} records to {path}")
    return path


def write_csv(path: PathLike, columns: Sequence[str], rows: Iterable[Sequence[Any]]) -> Path:
    """
    Write rows to a CSV file with a header row.

    Args:
        path: Destination file
        columns: Header names
        rows: Row values, in column order

    Returns:
        Path of the written file
    """
    path = Path(path)
    df = pd.DataFrame(list(rows), columns=list(columns), dtype=object)
    try:
        df.to_csv(path, index=False)
    except OSError as e:
        logger.error(f"Failed to write CSV file {path}: {e}")
        raise

    logger.info(f"Wrote {len(df)} rows to {path}")
    return path


def compress_file(path: PathLike) -> Path:
    """
    Compress a file with zstd and remove the original.

    Args:
        path: File to compress

    Returns:
        Path of the compressed file (original name + ".zst")
    """
    path = Path(path)
    target = path.with_name(path.name + ".zst")
    compressor = zstandard.ZstdCompressor()
    try:
        with open(path, "rb") as src, open(target, "wb") as dst:
            compressor.copy_stream(src, dst)
    except OSError as e:
        logger.error(f"Failed to compress {path}: {e}")
        raise

    os.remove(path)
    logger.debug(f"Compressed {path} to {target}")
    return target


def finalize_outputs(paths: List[Path], compress: bool) -> List[Path]:
    """Compress each path when requested and return the resulting paths."""
    if not compress:
        return list(paths)
    return [compress_file(p) for p in paths]
