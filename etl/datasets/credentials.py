# WORKFLOW: CT cannabis license credential counts by type and status.
# Used by: Pipeline "credentials" dataset
#
# Socrata documentation: https://dev.socrata.com/foundry/data.ct.gov/tjfe-s2x9

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from db.models import Credential
from etl.datasets.common import SOCRATA_BASE_URL, Dataset, optional_int
from etl.socrata import SocrataConfig

JSON_FILENAME = "us_ct_credentials.json"
CSV_FILENAME = "us_ct_credentials.csv"
URL = f"{SOCRATA_BASE_URL}/tjfe-s2x9.json"

SOCRATA_CONFIG = SocrataConfig(
    url=URL,
    cache_filename=JSON_FILENAME,
    batch_size=50000,
)

CSV_COLUMNS = ["credential_type", "status", "count"]


class CredentialRecord(BaseModel):
    credential_type: str = Field("", alias="credentialtype")
    status: str = ""
    count: Optional[int] = None

    model_config = {"populate_by_name": True}

    @field_validator("count", mode="before")
    @classmethod
    def parse_count(cls, value):
        return optional_int(value)


def csv_row(record: CredentialRecord) -> List[Any]:
    return [record.credential_type, record.status, record.count]


def db_row(record: CredentialRecord) -> Dict[str, Any]:
    return {
        "credential_type": record.credential_type,
        "status": record.status,
        "count": record.count,
    }


DATASET = Dataset(
    name="credentials",
    socrata=SOCRATA_CONFIG,
    model=CredentialRecord,
    table=Credential,
    json_filename=JSON_FILENAME,
    csv_filename=CSV_FILENAME,
    csv_columns=CSV_COLUMNS,
    csv_row=csv_row,
    db_row=db_row,
)
