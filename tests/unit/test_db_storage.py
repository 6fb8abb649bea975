from datetime import datetime, timezone

import psycopg
import psycopg.rows
import pytest

from shortlink_platform.errors import StoreUnavailableError
from shortlink_platform.models import Link
from shortlink_platform.storage.db_storage import SCHEMA_SQL, DBStorage

T0 = datetime(2025, 1, 1, tzinfo=timezone.utc)

ROW = {
    "id": "0b6d7a3e-1111-2222-3333-444455556666",
    "short_code": "abc123",
    "target_url": "https://x.com",
    "clicks": 0,
    "last_clicked": None,
    "created_at": T0,
    "updated_at": T0,
}


class DummyCursor:
    def __init__(self, results=None, rowcount=1, error=None, log=None):
        # results is a list of dicts or tuples
        self._results = results or []
        self.rowcount = rowcount
        self._index = 0
        self._error = error
        self.log = log if log is not None else []

    def execute(self, query, params=None):
        self.log.append((query, params))
        if self._error is not None:
            raise self._error
        return self

    def fetchone(self):
        if self._results and self._index < len(self._results):
            row = self._results[self._index]
            self._index += 1
            return row
        return None

    def fetchall(self):
        rows = self._results[self._index:]
        self._index = len(self._results)
        return rows

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        return False


class DummyConnection:
    def __init__(self, results=None, rowcount=1, error=None):
        self.results = results
        self.rowcount = rowcount
        self.error = error
        self.autocommit = False
        self.closed = False
        self.queries = []
        self.row_factories = []

    def cursor(self, row_factory=None):
        self.row_factories.append(row_factory)
        return DummyCursor(results=self.results, rowcount=self.rowcount, error=self.error, log=self.queries)

    def close(self):
        self.closed = True


@pytest.fixture
def connect(monkeypatch):
    """Install a DummyConnection factory; returns a setter for the next connection."""
    holder = {}

    def _install(**kwargs):
        conn = DummyConnection(**kwargs)
        holder["conn"] = conn
        monkeypatch.setattr("psycopg.connect", lambda dsn: conn)
        return conn

    return _install


# ---------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------

def test_get_link(connect):
    conn = connect(results=[ROW])
    link = DBStorage("fake").get_link("abc123")
    assert link.short_code == "abc123"
    assert link.target_url == "https://x.com"
    assert link.clicks == 0
    assert conn.row_factories == [psycopg.rows.dict_row]
    assert conn.autocommit is True
    assert conn.closed is True


def test_get_link_missing(connect):
    connect(results=[])
    assert DBStorage("fake").get_link("nope42") is None


def test_create_link_inserted(connect):
    conn = connect(rowcount=1)
    link = Link.new("abc123", "https://x.com", now=T0)
    assert DBStorage("fake").create_link(link) is True
    query, params = conn.queries[0]
    assert "ON CONFLICT (short_code) DO NOTHING" in query
    assert params[:4] == (link.id, "abc123", "https://x.com", 0)


def test_create_link_duplicate(connect):
    connect(rowcount=0)
    assert DBStorage("fake").create_link(Link.new("abc123", "https://x.com")) is False


def test_code_exists(connect):
    connect(results=[(True,)])
    assert DBStorage("fake").code_exists("abc123") is True
    connect(results=[(False,)])
    assert DBStorage("fake").code_exists("abc123") is False


def test_record_click_increments_in_sql(connect):
    clicked = dict(ROW, clicks=1, last_clicked=T0, updated_at=T0)
    conn = connect(results=[clicked])
    updated = DBStorage("fake").record_click("abc123", T0)
    assert updated.clicks == 1
    assert updated.last_clicked == T0
    query, params = conn.queries[0]
    assert "clicks = clicks + 1" in query
    assert params == (T0, T0, "abc123")


def test_record_click_missing(connect):
    connect(results=[])
    assert DBStorage("fake").record_click("nope42", T0) is None


def test_delete_link(connect):
    connect(rowcount=1)
    assert DBStorage("fake").delete_link("abc123") is True
    connect(rowcount=0)
    assert DBStorage("fake").delete_link("abc123") is False


def test_list_links_orders_newest_first(connect):
    conn = connect(results=[ROW, dict(ROW, short_code="def456")])
    links = DBStorage("fake").list_links()
    assert [l.short_code for l in links] == ["abc123", "def456"]
    assert "ORDER BY created_at DESC" in conn.queries[0][0]


def test_aggregates(connect):
    connect(results=[(7,)])
    assert DBStorage("fake").count_links() == 7
    connect(results=[(42,)])
    assert DBStorage("fake").sum_clicks() == 42


def test_ensure_schema(connect):
    conn = connect()
    DBStorage("fake").ensure_schema()
    assert conn.queries[0][0] == SCHEMA_SQL


def test_query_error_becomes_store_unavailable(connect):
    conn = connect(error=psycopg.OperationalError("server closed the connection"))
    with pytest.raises(StoreUnavailableError) as ei:
        DBStorage("fake").get_link("abc123")
    assert isinstance(ei.value.__cause__, psycopg.OperationalError)
    assert conn.closed is True


def test_connect_error_becomes_store_unavailable(monkeypatch):
    def boom(dsn):
        raise psycopg.OperationalError("connection refused")

    monkeypatch.setattr("psycopg.connect", boom)
    with pytest.raises(StoreUnavailableError):
        DBStorage("fake").count_links()
