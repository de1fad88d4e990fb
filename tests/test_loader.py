import json
from datetime import datetime, timedelta

import pandas as pd
import pytest

from cade.loader import CatalogError, frame_to_campaigns, load_catalog, load_sample_catalog
from conftest import NOW


def _write_json(tmp_path, records, name="catalog.json"):
    path = tmp_path / name
    path.write_text(json.dumps(records), encoding="utf-8")
    return str(path)


BASE = {
    "id": "a1",
    "title": "Village Library",
    "description": "Books for the village",
    "category": "education",
    "status": "active",
    "fundingGoal": 500000,
    "currentAmount": 125000,
    "createdAt": "2026-01-01T00:00:00",
    "endDate": "2026-02-01T00:00:00",
    "creator": {"id": "7", "displayName": "Nimal Perera", "rating": 4.2, "verificationStatus": "verified"},
    "location": {"country": "Sri Lanka", "state": "Central Province", "city": "Kandy"},
    "donorCount": 12,
    "tags": ["books", "library"],
    "trending": True,
}


# ============================================================================
# Sample catalog
# ============================================================================

def test_sample_catalog_shape():
    catalog = load_sample_catalog(now=NOW)
    assert len(catalog) == 18
    assert [c.id for c in catalog][:3] == ["1", "2", "3"]
    first = catalog[0]
    assert first.creator.display_name == "Priya Fernando"
    assert first.creator.verified is True
    assert first.location.city == "Moneragala"
    assert first.created_at == NOW - timedelta(days=22)
    assert first.end_date == NOW + timedelta(days=32)
    assert round(first.percent_funded, 1) == 71.2


def test_sample_catalog_has_one_expired_campaign():
    catalog = load_sample_catalog(now=NOW)
    assert [c.id for c in catalog if c.is_expired(NOW)] == ["5"]


# ============================================================================
# Formats
# ============================================================================

def test_load_nested_json(tmp_path):
    (c,) = load_catalog(_write_json(tmp_path, [BASE]))
    assert c.id == "a1"
    assert c.creator.display_name == "Nimal Perera"
    assert c.location.state == "Central Province"
    assert c.created_at == datetime(2026, 1, 1)
    assert c.tags == ("books", "library")
    assert c.trending is True and c.featured is False
    assert c.view_count == 0
    assert c.currency == "LKR"


def test_json_wrapper_object(tmp_path):
    out = load_catalog(_write_json(tmp_path, {"campaigns": [BASE]}))
    assert len(out) == 1


def test_load_flat_csv(tmp_path):
    path = tmp_path / "catalog.csv"
    pd.DataFrame([{
        "id": 42,
        "title": "Cricket Nets",
        "category": "Sports",
        "status": "active",
        "funding_goal": 90000,
        "current_amount": "",
        "creator_name": "Kasun",
        "city": "Galle",
        "created_at": "2026-01-02",
        "end_date": "2026-03-01",
        "featured": "yes",
        "tags": "cricket; youth",
    }]).to_csv(path, index=False)
    (c,) = load_catalog(str(path))
    assert c.id == "42"
    assert c.category == "sports"
    assert c.current_amount == 0.0
    assert c.creator.display_name == "Kasun"
    assert c.location.city == "Galle" and c.location.state is None
    assert c.featured is True
    assert c.tags == ("cricket", "youth")


def test_load_xlsx(tmp_path):
    path = tmp_path / "catalog.xlsx"
    pd.DataFrame([{
        "ID": "x1", "Title": "Clinic", "Category": "medical", "Status": "paused",
        "Funding Goal": 1000, "Current Amount": 10, "Created At": "2026-01-01", "End Date": "2026-01-20",
    }]).to_excel(path, index=False, engine="openpyxl")
    (c,) = load_catalog(str(path))
    assert (c.id, c.status, c.funding_goal) == ("x1", "paused", 1000.0)
    assert c.location is None


def test_timezone_aware_dates_become_naive_utc(tmp_path):
    rec = dict(BASE, createdAt="2026-01-01T05:30:00+05:30")
    (c,) = load_catalog(_write_json(tmp_path, [rec]))
    assert c.created_at == datetime(2026, 1, 1, 0, 0)


def test_relative_dates(tmp_path):
    rec = {k: v for k, v in BASE.items() if k not in ("createdAt", "endDate")}
    rec.update(createdDaysAgo=3, endsInDays=-1)
    (c,) = load_catalog(_write_json(tmp_path, [rec]), now=NOW)
    assert c.created_at == NOW - timedelta(days=3)
    assert c.is_expired(NOW)


def test_bad_numbers_degrade_to_defaults(tmp_path):
    rec = dict(BASE, donorCount="lots", currentAmount=None)
    (c,) = load_catalog(_write_json(tmp_path, [rec]))
    assert c.donor_count == 0
    assert c.current_amount == 0.0


def test_empty_catalog(tmp_path):
    assert load_catalog(_write_json(tmp_path, [])) == []
    assert frame_to_campaigns(pd.DataFrame()) == []


# ============================================================================
# Errors
# ============================================================================

def test_missing_required_column(tmp_path):
    rec = {k: v for k, v in BASE.items() if k != "fundingGoal"}
    with pytest.raises(CatalogError, match="Missing required column"):
        load_catalog(_write_json(tmp_path, [rec]))


def test_unknown_category(tmp_path):
    with pytest.raises(CatalogError, match="a1"):
        load_catalog(_write_json(tmp_path, [dict(BASE, category="gardening")]))


def test_unknown_status(tmp_path):
    with pytest.raises(CatalogError):
        load_catalog(_write_json(tmp_path, [dict(BASE, status="archived")]))


def test_missing_dates(tmp_path):
    with pytest.raises(CatalogError, match="createdAt/endDate"):
        load_catalog(_write_json(tmp_path, [dict(BASE, endDate="not a date")]))


def test_duplicate_ids(tmp_path):
    with pytest.raises(CatalogError, match="Duplicate"):
        load_catalog(_write_json(tmp_path, [BASE, dict(BASE, title="Copy")]))


def test_unsupported_extension(tmp_path):
    path = tmp_path / "catalog.txt"
    path.write_text("nope", encoding="utf-8")
    with pytest.raises(CatalogError, match="Unsupported"):
        load_catalog(str(path))


def test_missing_file(tmp_path):
    with pytest.raises(CatalogError, match="not found"):
        load_catalog(str(tmp_path / "absent.json"))
