# WORKFLOW: CT cannabis monthly tax revenue.
# Used by: Pipeline "tax" dataset
#
# Socrata documentation: https://dev.socrata.com/foundry/data.ct.gov/jey2-vq68

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, field_validator

from db.models import Tax
from etl.datasets.common import SOCRATA_BASE_URL, Dataset, optional_float, parse_timestamp
from etl.socrata import SocrataConfig

JSON_FILENAME = "us_ct_tax.json"
CSV_FILENAME = "us_ct_tax.csv"
URL = f"{SOCRATA_BASE_URL}/jey2-vq68.json"

SOCRATA_CONFIG = SocrataConfig(
    url=URL,
    cache_filename=JSON_FILENAME,
    order_by="period_end_date",
)

CSV_COLUMNS = [
    "period_end_date",
    "month",
    "year",
    "fiscal_year",
    "plant_material_tax",
    "edible_products_tax",
    "other_cannabis_tax",
    "total_tax",
]


class TaxRecord(BaseModel):
    period_end_date: str = ""
    month: str = ""
    year: str = ""
    fiscal_year: str = ""
    plant_material_tax: Optional[float] = None
    edible_products_tax: Optional[float] = None
    other_cannabis_tax: Optional[float] = None
    total_tax: Optional[float] = None

    @field_validator("month", "year", "fiscal_year", mode="before")
    @classmethod
    def stringify(cls, value):
        return "" if value is None else str(value)

    @field_validator("plant_material_tax", "edible_products_tax", "other_cannabis_tax", "total_tax", mode="before")
    @classmethod
    def parse_amount(cls, value):
        return optional_float(value)


def csv_row(record: TaxRecord) -> List[Any]:
    return [getattr(record, name) for name in CSV_COLUMNS]


def db_row(record: TaxRecord) -> Dict[str, Any]:
    row = {name: getattr(record, name) for name in CSV_COLUMNS}
    row["period_end_date"] = parse_timestamp(record.period_end_date)
    return row


DATASET = Dataset(
    name="tax",
    socrata=SOCRATA_CONFIG,
    model=TaxRecord,
    table=Tax,
    json_filename=JSON_FILENAME,
    csv_filename=CSV_FILENAME,
    csv_columns=CSV_COLUMNS,
    csv_row=csv_row,
    db_row=db_row,
)
