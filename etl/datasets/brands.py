# WORKFLOW: CT cannabis brand registry (lab-tested products with cannabinoid/terpene profiles).
# Used by: Pipeline "brands" dataset, cleaning pass
# Contents:
# 1. BrandRecord - record model; every lab column is a Measure
# 2. MEASURE_FIELDS - lab columns, all percentages, all checked by the cleaning pass
# 3. csv_row() / db_row() - flat exports (empty and trace render blank / NULL)
#
# Socrata documentation: https://dev.socrata.com/foundry/data.ct.gov/egd5-wb6r

"""
CT cannabis brand registry.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from db.models import Brand
from etl.datasets.common import SOCRATA_BASE_URL, Dataset, Link, parse_timestamp
from etl.measure import Measure
from etl.socrata import SocrataConfig

JSON_FILENAME = "us_ct_brands.json"
CSV_FILENAME = "us_ct_brands.csv"
URL = f"{SOCRATA_BASE_URL}/egd5-wb6r.json"

SOCRATA_CONFIG = SocrataConfig(
    url=URL,
    cache_filename=JSON_FILENAME,
    order_by="registration_number",
)


class BrandRecord(BaseModel):
    brand_name: str = ""
    dosage_form: str = ""
    branding_entity: str = ""
    product_image: Optional[Link] = None
    label_image: Optional[Link] = None
    lab_analysis: Optional[Link] = None
    approval_date: str = ""
    registration_number: str = ""

    tetrahydrocannabinol_thc: Measure = Measure()
    tetrahydrocannabinol_acid_thca: Measure = Measure()
    cannabidiols_cbd: Measure = Measure()
    cannabidiol_acid_cbda: Measure = Measure()
    a_pinene: Measure = Measure()
    b_myrcene: Measure = Measure()
    b_caryophyllene: Measure = Measure()
    b_pinene: Measure = Measure()
    limonene: Measure = Measure()
    ocimene: Measure = Measure()
    linalool_lin: Measure = Measure()
    humulene_hum: Measure = Measure()
    cbg: Measure = Measure()
    cbg_a: Measure = Measure()
    cannabavarin_cbdv: Measure = Measure()
    cannabichromene_cbc: Measure = Measure()
    cannbinol_cbn: Measure = Measure()
    tetrahydrocannabivarin_thcv: Measure = Measure()
    a_bisabolol: Measure = Measure()
    a_phellandrene: Measure = Measure()
    a_terpinene: Measure = Measure()
    b_eudesmol: Measure = Measure()
    b_terpinene: Measure = Measure()
    fenchone: Measure = Measure()
    pulegol: Measure = Measure()
    borneol: Measure = Measure()
    isopulegol: Measure = Measure()
    carene: Measure = Measure()
    camphene: Measure = Measure()
    camphor: Measure = Measure()
    caryophyllene_oxide: Measure = Measure()
    cedrol: Measure = Measure()
    eucalyptol: Measure = Measure()
    geraniol: Measure = Measure()
    guaiol: Measure = Measure()
    geranyl_acetate: Measure = Measure()
    isoborneol: Measure = Measure()
    menthol: Measure = Measure()
    l_fenchone: Measure = Measure()
    nerol: Measure = Measure()
    sabinene: Measure = Measure()
    terpineol: Measure = Measure()
    terpinolene: Measure = Measure()
    trans_b_farnesene: Measure = Measure()
    valencene: Measure = Measure()
    a_cedrene: Measure = Measure()
    a_farnesene: Measure = Measure()
    b_farnesene: Measure = Measure()
    cis_nerolidol: Measure = Measure()
    fenchol: Measure = Measure()
    trans_nerolidol: Measure = Measure()

    market: str = ""
    chemotype: str = ""
    processing_technique: str = ""
    solvents_used: str = ""
    national_drug_code: str = ""


MEASURE_FIELDS = tuple(
    name for name, info in BrandRecord.model_fields.items() if info.annotation is Measure
)

_TEXT_HEAD = ["brand_name", "dosage_form", "branding_entity"]
_LINK_FIELDS = ["product_image", "label_image", "lab_analysis"]
_TEXT_TAIL = ["market", "chemotype", "processing_technique", "solvents_used", "national_drug_code"]

CSV_COLUMNS = (
    _TEXT_HEAD
    + ["product_image_url", "product_image_desc", "label_image_url", "label_image_desc",
       "lab_analysis_url", "lab_analysis_desc"]
    + ["approval_date", "registration_number"]
    + list(MEASURE_FIELDS)
    + _TEXT_TAIL
)


def _link_parts(link: Optional[Link]) -> List[str]:
    if link is None:
        return ["", ""]
    return [link.url, link.description]


def csv_row(record: BrandRecord) -> List[Any]:
    row: List[Any] = [getattr(record, name) for name in _TEXT_HEAD]
    for name in _LINK_FIELDS:
        row.extend(_link_parts(getattr(record, name)))
    row.extend([record.approval_date, record.registration_number])
    row.extend(getattr(record, name).as_csv() for name in MEASURE_FIELDS)
    row.extend(getattr(record, name) for name in _TEXT_TAIL)
    return row


def db_row(record: BrandRecord) -> Dict[str, Any]:
    row: Dict[str, Any] = {name: getattr(record, name) for name in _TEXT_HEAD + _TEXT_TAIL}
    for name in _LINK_FIELDS:
        url, description = _link_parts(getattr(record, name))
        row[f"{name}_url"] = url
        row[f"{name}_desc"] = description
    row["approval_date"] = parse_timestamp(record.approval_date)
    row["registration_number"] = record.registration_number
    for name in MEASURE_FIELDS:
        row[name] = getattr(record, name).as_sql_value()
    return row


DATASET = Dataset(
    name="brands",
    socrata=SOCRATA_CONFIG,
    model=BrandRecord,
    table=Brand,
    json_filename=JSON_FILENAME,
    csv_filename=CSV_FILENAME,
    csv_columns=CSV_COLUMNS,
    csv_row=csv_row,
    db_row=db_row,
    percent_fields=MEASURE_FIELDS,
)
