from datetime import datetime, timedelta

import pytest

from cade.loader import load_sample_catalog
from cade.models import Campaign, Creator, Location

NOW = datetime(2026, 1, 15, 12, 0, 0)


def make_campaign(id="x", **overrides) -> Campaign:
    """Build a campaign with neutral defaults; override only what a test cares about."""
    fields = dict(
        id=id,
        title=f"Campaign {id}",
        description="",
        short_description="",
        category="community",
        status="active",
        funding_goal=100000,
        current_amount=0,
        creator=Creator(id="c1", display_name="Test Creator", rating=4.5),
        created_at=NOW - timedelta(days=10),
        end_date=NOW + timedelta(days=10),
        location=Location(country="Sri Lanka", state="Western Province", city="Colombo"),
    )
    fields.update(overrides)
    return Campaign(**fields)


def ids(campaigns):
    return [c.id for c in campaigns]


@pytest.fixture
def now():
    return NOW


@pytest.fixture(scope="session")
def catalog():
    return load_sample_catalog(now=NOW)
