# WORKFLOW: CT cannabis license applications.
# Used by: Pipeline "applications" dataset
#
# Socrata documentation: https://dev.socrata.com/foundry/data.ct.gov/bqby-dyzr

from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from db.models import Application
from etl.datasets.common import SOCRATA_BASE_URL, Dataset, Link
from etl.socrata import SocrataConfig

JSON_FILENAME = "us_ct_applications.json"
CSV_FILENAME = "us_ct_applications.csv"
URL = f"{SOCRATA_BASE_URL}/bqby-dyzr.json"

SOCRATA_CONFIG = SocrataConfig(
    url=URL,
    cache_filename=JSON_FILENAME,
    batch_size=50000,
)

_TEXT_FIELDS = [
    "application_license_number",
    "application_credential_status",
    "status_reason",
    "sec_review_status",
    "initial_application_type",
    "how_selected",
    "name",
]

CSV_COLUMNS = _TEXT_FIELDS + ["documents_url"]


class ApplicationRecord(BaseModel):
    application_license_number: str = ""
    application_credential_status: str = ""
    status_reason: str = ""
    sec_review_status: str = ""
    initial_application_type: str = ""
    how_selected: str = ""
    name: str = ""
    documents: Optional[Link] = None

    @property
    def documents_url(self) -> str:
        return self.documents.url if self.documents else ""


def csv_row(record: ApplicationRecord) -> List[Any]:
    return [getattr(record, name) for name in _TEXT_FIELDS] + [record.documents_url]


def db_row(record: ApplicationRecord) -> Dict[str, Any]:
    row = {name: getattr(record, name) for name in _TEXT_FIELDS}
    row["documents_url"] = record.documents_url
    return row


DATASET = Dataset(
    name="applications",
    socrata=SOCRATA_CONFIG,
    model=ApplicationRecord,
    table=Application,
    json_filename=JSON_FILENAME,
    csv_filename=CSV_FILENAME,
    csv_columns=CSV_COLUMNS,
    csv_row=csv_row,
    db_row=db_row,
)
