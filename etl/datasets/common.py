# WORKFLOW: Shared pieces of the dataset definitions.
# Used by: Every module in etl/datasets, the pipeline
# Contents:
# 1. Dataset - descriptor wiring a Socrata endpoint to its record model, table and exports
# 2. parse_timestamp() - Socrata floating timestamps -> datetime
# 3. optional_float() / optional_int() - blank-tolerant numeric coercion for record models
# 4. Link - Socrata URL column shape ({"url": ..., "description": ...})

"""
Shared pieces of the dataset definitions.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Sequence, Type

from pydantic import BaseModel, model_validator

from etl.socrata import SocrataConfig

SOCRATA_BASE_URL = "https://data.ct.gov/resource"


@dataclass(frozen=True)
class Dataset:
    """Everything the pipeline needs to process one dataset."""

    name: str
    socrata: SocrataConfig
    model: Type[BaseModel]
    table: Any
    json_filename: str
    csv_filename: str
    csv_columns: Sequence[str]
    csv_row: Callable[[Any], List[Any]]
    db_row: Callable[[Any], Dict[str, Any]]
    percent_fields: Sequence[str] = ()


class Link(BaseModel):
    url: str = ""
    description: str = ""

    @model_validator(mode="before")
    @classmethod
    def accept_bare_url(cls, value):
        if isinstance(value, str):
            return {"url": value}
        return value


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """
    Parse a Socrata floating timestamp ("2023-01-07T00:00:00.000").

    Args:
        value: ISO 8601 string, possibly blank

    Returns:
        datetime, or None when blank or malformed
    """
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.strip().rstrip("Z"))
    except ValueError:
        return None


def optional_float(value: Any) -> Optional[float]:
    """Coerce blank strings to None and numeric strings to float."""
    if value is None:
        return None
    if isinstance(value, str):
        value = value.strip().replace(",", "").lstrip("$")
        if value == "":
            return None
    return float(value)


def optional_int(value: Any) -> Optional[int]:
    """Coerce blank strings to None and numeric strings ("12", "12.0") to int."""
    number = optional_float(value)
    if number is None:
        return None
    return int(number)
