"""Shared fixtures: a small source CSV with hand-checkable totals.

Providers: A Health (week 1 and 2), B Care (week 1 and 2), C Clinic (week 3 only).
Week 1 totals: enrollments 50, impressions 1300, revenue 1300, CVR sum 9.
Week 2 totals: enrollments 50, impressions 1200, revenue 1600, CVR sum 14.
"""

import pytest

from campaign_core import data as data_module
from campaign_core.data import row_from_record

SAMPLE_CSV = """Provider,Week,Enrollment count,Impressions,Revenue,CVR
A Health (X),1,10,100,500,5%
A Health (Y),2,20,200,"1,000",8%
B Care,1,40,"1,200",800,4.0%
B Care,2,30,"1,000",600,6.0%
,1,99,99,99,9%
C Clinic,3,5,5,5,5%
"""

SOURCE_NAME = "Healthcare Data - Health Summary.csv"


@pytest.fixture(autouse=True)
def _clear_load_cache():
    data_module.clear_cache()
    yield
    data_module.clear_cache()


@pytest.fixture
def make_rows():
    def _make(*records):
        return [row_from_record(r) for r in records]

    return _make


@pytest.fixture
def source_dir(tmp_path, monkeypatch):
    """Point source discovery at an empty temp directory."""
    monkeypatch.setattr(data_module, "DATA_DIR", tmp_path)
    return tmp_path


@pytest.fixture
def sample_csv(source_dir):
    path = source_dir / SOURCE_NAME
    path.write_text(SAMPLE_CSV, encoding="utf-8")
    return path
