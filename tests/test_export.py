# WORKFLOW: Tests for the CSV / JSON / zstd exporters and dataset row builders.
# Used by: CI, development testing
# Test scenarios:
# 1. JSON export keeps the structured measurement form (trace marker, null)
# 2. CSV export flattens measurements (trace and empty blank, zero "0")
# 3. zstd compression replaces the original file
# 4. Row builders for every dataset

import csv
import json
from datetime import datetime

import pytest
import zstandard

from etl.datasets import DATASETS, select_datasets
from etl.datasets.applications import ApplicationRecord
from etl.datasets.brands import CSV_COLUMNS as BRAND_COLUMNS
from etl.datasets.brands import MEASURE_FIELDS, BrandRecord, csv_row, db_row
from etl.datasets.common import Link, optional_float, optional_int, parse_timestamp
from etl.datasets.credentials import CredentialRecord
from etl.datasets.sales import WeeklySalesRecord
from etl.datasets.tax import TaxRecord
from etl.export import compress_file, finalize_outputs, write_csv, write_json


def read_csv(path):
    with open(path, newline="", encoding="utf-8") as f:
        return list(csv.reader(f))


class TestWriters:
    def test_write_json(self, tmp_path, brand_raw):
        record = BrandRecord.model_validate(brand_raw)
        path = write_json(tmp_path / "brands.json", [record])

        text = path.read_text(encoding="utf-8")
        assert text.endswith("\n")
        data = json.loads(text)
        assert data[0]["tetrahydrocannabinol_thc"] == 0.5
        assert data[0]["cannabidiols_cbd"] == "<0.01"
        assert data[0]["cannabidiol_acid_cbda"] == 0
        assert data[0]["terpinolene"] is None
        assert data[0]["a_pinene"] is None
        assert data[0]["product_image"] == {"url": "https://example.org/img.png", "description": "Product"}

    def test_write_json_plain_objects(self, tmp_path):
        path = write_json(tmp_path / "plain.json", [{"a": 1}])
        assert json.loads(path.read_text()) == [{"a": 1}]

    def test_write_csv_header_only(self, tmp_path):
        path = write_csv(tmp_path / "empty.csv", ["a", "b"], [])
        assert read_csv(path) == [["a", "b"]]

    def test_write_csv_rows(self, tmp_path):
        path = write_csv(tmp_path / "rows.csv", ["a", "b"], [["x", "0.500000"], ["", None]])
        assert read_csv(path) == [["a", "b"], ["x", "0.500000"], ["", ""]]

    def test_compress_file(self, tmp_path):
        source = tmp_path / "data.csv"
        source.write_text("a,b\n1,2\n")

        target = compress_file(source)

        assert target.name == "data.csv.zst"
        assert not source.exists()
        decompressed = zstandard.ZstdDecompressor().decompressobj().decompress(target.read_bytes())
        assert decompressed == b"a,b\n1,2\n"

    def test_finalize_outputs(self, tmp_path):
        first = tmp_path / "a.json"
        first.write_text("[]")
        assert finalize_outputs([first], compress=False) == [first]
        assert finalize_outputs([first], compress=True) == [tmp_path / "a.json.zst"]


class TestBrandRows:
    def test_measure_fields(self):
        assert len(MEASURE_FIELDS) == 51
        assert "tetrahydrocannabinol_thc" in MEASURE_FIELDS
        assert "brand_name" not in MEASURE_FIELDS

    def test_csv_row(self, brand_raw):
        record = BrandRecord.model_validate(brand_raw)
        row = dict(zip(BRAND_COLUMNS, csv_row(record)))

        assert len(BRAND_COLUMNS) == len(csv_row(record))
        assert row["tetrahydrocannabinol_thc"] == "0.500000"
        assert row["tetrahydrocannabinol_acid_thca"] == "21.400000"
        assert row["cannabidiols_cbd"] == ""
        assert row["cannabidiol_acid_cbda"] == "0"
        assert row["b_myrcene"] == ""
        assert row["lab_analysis_url"] == "https://example.org/coa.pdf"
        assert row["lab_analysis_desc"] == "COA"

    def test_csv_file(self, tmp_path, brand_raw):
        record = BrandRecord.model_validate(brand_raw)
        path = write_csv(tmp_path / "brands.csv", BRAND_COLUMNS, [csv_row(record)])
        header, values = read_csv(path)
        row = dict(zip(header, values))
        assert row["cannabidiol_acid_cbda"] == "0"
        assert row["cannabidiols_cbd"] == ""
        assert row["brand_name"] == "Blue Dream"

    def test_db_row(self, brand_raw):
        record = BrandRecord.model_validate(brand_raw)
        row = db_row(record)

        assert row["registration_number"] == "BR-0001"
        assert row["approval_date"] == datetime(2023, 1, 7)
        assert row["tetrahydrocannabinol_thc"] == 0.5
        assert row["cannabidiols_cbd"] is None
        assert row["cannabidiol_acid_cbda"] == 0
        assert row["terpinolene"] is None
        assert row["product_image_url"] == "https://example.org/img.png"

    def test_missing_links(self):
        row = db_row(BrandRecord(registration_number="X"))
        assert row["label_image_url"] == ""
        assert row["approval_date"] is None


class TestOtherDatasets:
    def test_credentials_alias(self):
        record = CredentialRecord.model_validate({"credentialtype": "Retailer", "status": "Active", "count": "12"})
        assert record.credential_type == "Retailer"
        assert record.count == 12
        assert DATASETS["credentials"].db_row(record) == {
            "credential_type": "Retailer", "status": "Active", "count": 12,
        }

    def test_applications_documents(self):
        record = ApplicationRecord.model_validate({
            "application_license_number": "APP-1",
            "documents": {"url": "https://example.org/doc"},
        })
        assert record.documents_url == "https://example.org/doc"
        assert DATASETS["applications"].csv_row(record)[-1] == "https://example.org/doc"
        assert ApplicationRecord().documents_url == ""

    def test_sales_aliases_and_blanks(self):
        record = WeeklySalesRecord.model_validate({
            "unnamed_column": "2023-01-07T00:00:00.000",
            "adult_use": "1,234,567.89",
            "medical": "",
            "total_products_sold": "1500.0",
            "adult_use_cannabis_average_product_price": "$33.10",
        })
        assert record.adult_use == pytest.approx(1234567.89)
        assert record.medical is None
        assert record.total_products_sold == 1500
        assert record.adult_use_avg_price == pytest.approx(33.10)

        row = DATASETS["sales"].db_row(record)
        assert row["week_ending"] == datetime(2023, 1, 7)

    def test_tax_stringifies_periods(self):
        record = TaxRecord.model_validate({
            "period_end_date": "2023-03-31T00:00:00.000",
            "month": 3,
            "year": 2023,
            "fiscal_year": "2023",
            "total_tax": "1000.50",
        })
        assert record.month == "3"
        assert record.year == "2023"
        assert record.total_tax == 1000.5
        assert record.plant_material_tax is None

    def test_helpers(self):
        assert optional_float(" ") is None
        assert optional_float("$1,000") == 1000.0
        assert optional_int("12.0") == 12
        assert parse_timestamp("") is None
        assert parse_timestamp("garbage") is None
        assert Link.model_validate("https://x.org").url == "https://x.org"


class TestRegistry:
    def test_all_datasets_registered(self):
        assert list(DATASETS) == ["brands", "credentials", "applications", "sales", "tax"]

    def test_select_preserves_registry_order(self):
        selected = select_datasets(["Tax", " brands "])
        assert [d.name for d in selected] == ["brands", "tax"]

    def test_select_unknown(self):
        with pytest.raises(ValueError, match="Unknown datasets: bogus"):
            select_datasets(["brands", "bogus"])

    def test_only_brands_has_percent_fields(self):
        assert [d.name for d in DATASETS.values() if d.percent_fields] == ["brands"]
