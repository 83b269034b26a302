# WORKFLOW: Shared pytest fixtures for the dank-extract test suite.
# Used by: Every test module under tests/
# Fixtures:
# 1. dank_root - Point the .dank data directory at a temporary directory
# 2. db_engine / db_session - In-memory SQLite store with all tables created
# 3. brand_raw - Raw brand record as served by the Socrata API
# 4. test_settings - Settings isolated from the developer's environment
#
# Test database: SQLite in memory, one fresh schema per test.

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from core.config import Settings
from db.models import Base
from db.session import dispose_engine
from etl import cache


@pytest.fixture
def dank_root(tmp_path):
    """Use tmp_path as the data root and restore the previous root afterwards."""
    previous = cache._dank_root
    cache.set_root(tmp_path)
    yield tmp_path
    cache.set_root(previous)


@pytest.fixture
def db_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(db_engine):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(autouse=True)
def reset_engine():
    """Never leak a configured engine between tests."""
    yield
    dispose_engine()


@pytest.fixture
def test_settings(dank_root):
    return Settings(
        _env_file=None,
        root_dir=str(dank_root),
        output_dir=str(dank_root / "out"),
        database_url=f"sqlite:///{dank_root / 'store.db'}",
    )


@pytest.fixture
def brand_raw():
    return {
        "brand_name": "Blue Dream",
        "dosage_form": "Flower",
        "branding_entity": "Acme Grow LLC",
        "product_image": {"url": "https://example.org/img.png", "description": "Product"},
        "label_image": {"url": "https://example.org/label.png", "description": "Label"},
        "lab_analysis": {"url": "https://example.org/coa.pdf", "description": "COA"},
        "approval_date": "2023-01-07T00:00:00.000",
        "registration_number": "BR-0001",
        "tetrahydrocannabinol_thc": "0.5",
        "tetrahydrocannabinol_acid_thca": "21.4%",
        "cannabidiols_cbd": "TRC",
        "cannabidiol_acid_cbda": "0",
        "b_myrcene": "<LOQ",
        "limonene": "0.31",
        "terpinolene": "--",
        "market": "Adult-Use",
        "chemotype": "Type I",
    }
