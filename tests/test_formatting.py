from datetime import timedelta

import pytest

from cade.formatting import format_compact, format_currency, format_time_remaining
from conftest import NOW, make_campaign


def test_format_currency():
    assert format_currency(1250000) == "Rs.1,250,000.00"
    assert format_currency(99.5, "usd") == "$99.50"
    assert format_currency(10, "LKR", show_code=True) == "Rs.10.00 LKR"
    assert format_currency(10, "JPY") == "10.00 JPY"


@pytest.mark.parametrize("amount,text", [
    (950, "950"), (1500, "1.5K"), (3500000, "3.5M"), (2000000, "2M"), (-1500, "-1.5K"),
])
def test_format_compact(amount, text):
    assert format_compact(amount) == text


def test_format_time_remaining():
    assert format_time_remaining(NOW - timedelta(minutes=1), NOW) == "Ended"
    assert format_time_remaining(NOW + timedelta(days=1, hours=2), NOW) == "1 day left"
    assert format_time_remaining(NOW + timedelta(days=5), NOW) == "5 days left"
    assert format_time_remaining(NOW + timedelta(hours=3), NOW) == "3 hours left"
    assert format_time_remaining(NOW + timedelta(seconds=30), NOW) == "1 minute left"


def test_campaign_derived_values():
    c = make_campaign(funding_goal=200, current_amount=250, end_date=NOW + timedelta(days=3, hours=5))
    assert c.percent_funded == 125.0
    assert c.is_fully_funded
    assert c.days_remaining(NOW) == 3
    assert make_campaign(funding_goal=0, current_amount=10).percent_funded == 0.0
    assert make_campaign(end_date=NOW - timedelta(days=1)).days_remaining(NOW) == 0
