# WORKFLOW: CT cannabis weekly retail sales.
# Used by: Pipeline "sales" dataset
# The week-ending date arrives in a column Socrata names "unnamed_column".
#
# Socrata documentation: https://dev.socrata.com/foundry/data.ct.gov/ucaf-96h6

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from db.models import WeeklySales
from etl.datasets.common import SOCRATA_BASE_URL, Dataset, optional_float, optional_int, parse_timestamp
from etl.socrata import SocrataConfig

JSON_FILENAME = "us_ct_weekly_sales.json"
CSV_FILENAME = "us_ct_weekly_sales.csv"
URL = f"{SOCRATA_BASE_URL}/ucaf-96h6.json"

SOCRATA_CONFIG = SocrataConfig(
    url=URL,
    cache_filename=JSON_FILENAME,
    order_by="unnamed_column",
)

CSV_COLUMNS = [
    "week_ending",
    "adult_use",
    "medical",
    "total",
    "adult_use_products_sold",
    "medical_products_sold",
    "total_products_sold",
    "adult_use_avg_price",
    "medical_avg_price",
]


class WeeklySalesRecord(BaseModel):
    week_ending: str = Field("", alias="unnamed_column")
    adult_use: Optional[float] = None
    medical: Optional[float] = None
    total: Optional[float] = None
    adult_use_products_sold: Optional[int] = None
    medical_products_sold: Optional[int] = None
    total_products_sold: Optional[int] = None
    adult_use_avg_price: Optional[float] = Field(None, alias="adult_use_cannabis_average_product_price")
    medical_avg_price: Optional[float] = Field(None, alias="medical_marijuana_average_product_price")

    model_config = {"populate_by_name": True}

    @field_validator("adult_use", "medical", "total", "adult_use_avg_price", "medical_avg_price", mode="before")
    @classmethod
    def parse_amount(cls, value):
        return optional_float(value)

    @field_validator("adult_use_products_sold", "medical_products_sold", "total_products_sold", mode="before")
    @classmethod
    def parse_count(cls, value):
        return optional_int(value)


def csv_row(record: WeeklySalesRecord) -> List[Any]:
    return [getattr(record, name) for name in CSV_COLUMNS]


def db_row(record: WeeklySalesRecord) -> Dict[str, Any]:
    row = {name: getattr(record, name) for name in CSV_COLUMNS}
    row["week_ending"] = parse_timestamp(record.week_ending)
    return row


DATASET = Dataset(
    name="sales",
    socrata=SOCRATA_CONFIG,
    model=WeeklySalesRecord,
    table=WeeklySales,
    json_filename=JSON_FILENAME,
    csv_filename=CSV_FILENAME,
    csv_columns=CSV_COLUMNS,
    csv_row=csv_row,
    db_row=db_row,
)
