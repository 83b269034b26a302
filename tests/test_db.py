# WORKFLOW: Tests for the relational store (schema, session helpers, loader).
# Used by: CI, development testing
# Test scenarios:
# 1. init_db creates every table idempotently
# 2. check_db_connection on a live and a broken engine
# 3. replace_table: full replace, duplicate keys (last wins), keyless rows, rollback
# 4. Session factory follows configure_engine()

import pytest
from sqlalchemy import create_engine, inspect, select
from sqlalchemy.exc import SQLAlchemyError

from db.loader import replace_table
from db.models import Brand, Credential, Tax
from db.session import (
    check_db_connection,
    configure_engine,
    dispose_engine,
    get_engine,
    get_session_factory,
    init_db,
)


def test_init_db_creates_tables():
    engine = create_engine("sqlite://")
    init_db(engine)
    init_db(engine)

    tables = set(inspect(engine).get_table_names())
    assert tables == {"ct_brands", "ct_credentials", "ct_applications", "ct_weekly_sales", "ct_tax"}

    index_names = {ix["name"] for ix in inspect(engine).get_indexes("ct_brands")}
    assert {"ct_brands_name", "ct_brands_date"} <= index_names


def test_brand_table_has_measure_columns():
    from etl.datasets.brands import MEASURE_FIELDS

    columns = set(Brand.__table__.columns.keys())
    assert set(MEASURE_FIELDS) <= columns


def test_check_db_connection():
    assert check_db_connection(create_engine("sqlite://"))


def test_check_db_connection_failure(tmp_path):
    missing = tmp_path / "no" / "such" / "dir" / "x.db"
    assert not check_db_connection(create_engine(f"sqlite:///{missing}"))


def test_configure_engine_and_session_factory(tmp_path):
    configure_engine(f"sqlite:///{tmp_path / 'store.db'}")
    init_db()
    assert str(get_engine().url).endswith("store.db")
    assert check_db_connection()

    SessionLocal = get_session_factory()
    with SessionLocal() as db:
        replace_table(db, Credential, [{"credential_type": "Retailer", "status": "Active", "count": 3}])

    dispose_engine()
    assert (tmp_path / "store.db").exists()


class TestReplaceTable:
    def test_replaces_existing_rows(self, db_session):
        replace_table(db_session, Credential, [
            {"credential_type": "Retailer", "status": "Active", "count": 1},
            {"credential_type": "Grower", "status": "Active", "count": 2},
        ])
        loaded = replace_table(db_session, Credential, [
            {"credential_type": "Retailer", "status": "Active", "count": 5},
        ])

        rows = db_session.execute(select(Credential.credential_type, Credential.count)).all()
        assert loaded == 1
        assert rows == [("Retailer", 5)]

    def test_duplicate_keys_last_wins(self, db_session):
        loaded = replace_table(db_session, Brand, [
            {"registration_number": "BR-1", "brand_name": "First", "tetrahydrocannabinol_thc": 10.0},
            {"registration_number": "BR-1", "brand_name": "Second", "tetrahydrocannabinol_thc": None},
            {"registration_number": "BR-2", "brand_name": "Other", "tetrahydrocannabinol_thc": 0},
        ])

        assert loaded == 2
        brand = db_session.get(Brand, "BR-1")
        assert brand.brand_name == "Second"
        assert brand.tetrahydrocannabinol_thc is None
        assert db_session.get(Brand, "BR-2").tetrahydrocannabinol_thc == 0

    def test_keyless_rows_skipped(self, db_session):
        loaded = replace_table(db_session, Tax, [
            {"period_end_date": None, "total_tax": 1.0},
            {"period_end_date": "", "total_tax": 2.0},
        ])
        assert loaded == 0
        assert db_session.execute(select(Tax)).first() is None

    def test_empty_rows_clear_table(self, db_session):
        replace_table(db_session, Credential, [{"credential_type": "A", "status": "B", "count": 1}])
        assert replace_table(db_session, Credential, []) == 0
        assert db_session.execute(select(Credential)).first() is None

    def test_rollback_on_error(self, db_session):
        replace_table(db_session, Credential, [{"credential_type": "A", "status": "B", "count": 1}])

        with pytest.raises(SQLAlchemyError):
            replace_table(db_session, Credential, [
                {"credential_type": "X", "status": "Y", "count": 1, "no_such_column": 1},
            ])

        # The failed load must not have cleared the table
        assert db_session.execute(select(Credential.credential_type)).scalars().all() == ["A"]
