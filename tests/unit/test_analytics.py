"""
Unit tests for Analytics.

Covers:
    - link_status buckets at each day boundary
    - summary totals and per-status counts, always derived from the store
"""

from datetime import datetime, timedelta, timezone

import pytest

from shortlink_platform.analytics.analytics import STATUSES, Analytics
from shortlink_platform.models import Link
from shortlink_platform.storage.storage import Storage

NOW = datetime(2025, 6, 30, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def analytics(storage):
    return Analytics(storage=storage)


def _link(clicks, days_ago=None, hours_ago=0):
    link = Link.new("abc123", "https://example.com", now=NOW - timedelta(days=90))
    link.clicks = clicks
    if days_ago is not None:
        link.last_clicked = NOW - timedelta(days=days_ago, hours=hours_ago)
    return link


def test_never_clicked(analytics):
    s = analytics.link_status(_link(0), now=NOW)
    assert s.status == "inactive"
    assert s.description == "Never been clicked"
    assert s.days_since_last_click is None


@pytest.mark.parametrize(
    "days,hours,status",
    [
        (0, 3, "very-active"),
        (1, 23, "very-active"),
        (2, 0, "active"),
        (7, 12, "active"),
        (8, 0, "dormant"),
        (30, 0, "dormant"),
        (31, 0, "inactive-old"),
        (400, 0, "inactive-old"),
    ],
)
def test_status_buckets(analytics, days, hours, status):
    s = analytics.link_status(_link(5, days_ago=days, hours_ago=hours), now=NOW)
    assert s.status == status
    assert s.days_since_last_click == days


def test_descriptions(analytics):
    assert analytics.link_status(_link(5, days_ago=0), now=NOW).description == "Clicked today (5 total)"
    assert analytics.link_status(_link(5, days_ago=3), now=NOW).description == "Clicked 3 days ago"
    assert analytics.link_status(_link(5, days_ago=45), now=NOW).description == "Last click was 45 days ago"


def test_clicks_without_timestamp_is_old(analytics):
    s = analytics.link_status(_link(3), now=NOW)
    assert s.status == "inactive-old"
    assert s.days_since_last_click is None


def test_future_click_clamps_to_zero(analytics):
    link = _link(1)
    link.last_clicked = NOW + timedelta(minutes=5)
    assert analytics.link_status(link, now=NOW).days_since_last_click == 0


def test_status_to_dict_uses_camel_case(analytics):
    data = analytics.link_status(_link(2, days_ago=3), now=NOW).to_dict()
    assert data == {
        "status": "active",
        "label": "Active",
        "description": "Clicked 3 days ago",
        "daysSinceLastClick": 3,
    }


def test_summary_empty(analytics):
    assert analytics.summary(now=NOW) == {
        "total_links": 0,
        "total_clicks": 0,
        "by_status": {s: 0 for s in STATUSES},
    }


def test_summary_is_fresh_each_call(storage: Storage, analytics):
    storage.create_link(Link.new("aaaaaa", "https://a.com", now=NOW))
    storage.create_link(Link.new("bbbbbb", "https://b.com", now=NOW))
    storage.record_click("aaaaaa", NOW)
    storage.record_click("aaaaaa", NOW)

    first = analytics.summary(now=NOW)
    assert first["total_links"] == 2
    assert first["total_clicks"] == 2
    assert first["by_status"]["very-active"] == 1
    assert first["by_status"]["inactive"] == 1

    storage.record_click("bbbbbb", NOW - timedelta(days=10))
    storage.delete_link("aaaaaa")
    second = analytics.summary(now=NOW)
    assert second["total_links"] == 1
    assert second["total_clicks"] == 1
    assert second["by_status"]["dormant"] == 1
