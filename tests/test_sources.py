"""Tests for portfolio sources."""

from datetime import date
from pathlib import Path

import httpx
import pytest

from propfolio.exceptions import NotFoundError, SourceError
from propfolio.models import UserProfile
from propfolio.sources import DuckDBPortfolioSource, RestPortfolioSource
from propfolio.storage import Storage

from conftest import make_property

TABLES = {
    "users": [{"id": "u1", "email": "owner@example.com", "subscription_tier": "pro"}],
    "properties": [
        {
            "id": "p1",
            "user_id": "u1",
            "street": "5 Rose Ave",
            "suburb": "Subiaco",
            "state": "WA",
            "postcode": "6008",
            "property_type": "House",
            "bedrooms": 4,
            "purchase_price": 700000,
            "purchase_date": "2019-07-01",
            "current_loan_amount": "500000.00",
            "created_at": "2024-01-01T00:00:00+00:00",
        }
    ],
    "value_history": [
        {"id": "v1", "property_id": "p1", "value": 700000, "date_recorded": "2019-07-01", "source": "Purchase"},
        {"id": "v2", "property_id": "p1", "value": 820000, "date_recorded": "2023-07-01", "source": None},
    ],
    "cashflow": [
        {"id": "c1", "property_id": "p1", "month": "2023-03", "rent_income": 2600, "rent_frequency": "monthly"},
        {
            "id": "c2",
            "property_id": "p1",
            "effective_from": "2024-01-01",
            "rent_income": 650,
            "rent_frequency": "weekly",
            "mortgage_payment": 2900,
        },
    ],
}


def _source(tables: dict, requests: list | None = None, status: int = 200) -> RestPortfolioSource:
    def handler(request: httpx.Request) -> httpx.Response:
        if requests is not None:
            requests.append(request)
        table = request.url.path.rsplit("/", 1)[-1]
        if status != 200:
            return httpx.Response(status, text="permission denied")
        return httpx.Response(200, json=tables.get(table, []))

    client = httpx.Client(transport=httpx.MockTransport(handler))
    return RestPortfolioSource("https://db.example.com/", "anon-key", client=client)


class TestRestPortfolioSource:
    """Tests for the PostgREST source using a mock transport."""

    def test_fetch_builds_sorted_snapshot(self) -> None:
        requests: list[httpx.Request] = []
        snapshot = _source(TABLES, requests).fetch("u1")

        assert snapshot.user.is_pro
        assert [p.id for p in snapshot.properties] == ["p1"]
        prop = snapshot.properties[0]
        assert prop.purchase_date == date(2019, 7, 1)
        assert prop.current_loan_amount == 500000
        assert prop.interest_rate is None
        assert [v.id for v in snapshot.valuations_for("p1")] == ["v2", "v1"]
        configs = snapshot.cashflows_for("p1")
        assert [c.id for c in configs] == ["c2", "c1"]
        assert configs[1].effective_from == date(2023, 3, 1)

        assert len(requests) == 4
        assert requests[0].headers["apikey"] == "anon-key"
        assert requests[0].headers["Authorization"] == "Bearer anon-key"
        assert requests[0].url.params["id"] == "eq.u1"
        assert requests[2].url.params["property_id"] == "in.(p1)"
        assert str(requests[1].url).startswith("https://db.example.com/rest/v1/properties")

    def test_user_without_properties_skips_child_tables(self) -> None:
        requests: list[httpx.Request] = []
        snapshot = _source({"users": TABLES["users"]}, requests).fetch("u1")
        assert snapshot.properties == []
        assert len(requests) == 2

    def test_missing_user(self) -> None:
        with pytest.raises(NotFoundError):
            _source({}).fetch("u1")

    def test_http_error_status(self) -> None:
        with pytest.raises(SourceError, match="HTTP 401"):
            _source(TABLES, status=401).fetch("u1")

    def test_malformed_row(self) -> None:
        tables = dict(TABLES, properties=[{"id": "p1", "user_id": "u1"}])
        with pytest.raises(SourceError, match="Malformed"):
            _source(tables).fetch("u1")

    def test_requires_url_and_key(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("PROPFOLIO_URL", raising=False)
        monkeypatch.delenv("PROPFOLIO_API_KEY", raising=False)
        source = RestPortfolioSource()
        assert source.source_name == "rest"
        with pytest.raises(SourceError):
            source.fetch("u1")


    def test_non_json_body(self) -> None:
        client = httpx.Client(
            transport=httpx.MockTransport(lambda request: httpx.Response(200, text="<html>gateway</html>"))
        )
        source = RestPortfolioSource("https://db.example.com", "anon-key", client=client)
        with pytest.raises(SourceError, match="invalid JSON"):
            source.fetch("u1")

    def test_same_date_rows_ordered_by_entry_time(self) -> None:
        requests: list[httpx.Request] = []
        _source(TABLES, requests).fetch("u1")
        assert requests[2].url.params["order"] == "date_recorded.desc,created_at.desc"
        assert requests[3].url.params["order"] == "effective_from.desc,created_at.desc"

    def test_rent_frequency_normalized(self) -> None:
        row = dict(TABLES["cashflow"][1], rent_frequency="Weekly")
        snapshot = _source(dict(TABLES, cashflow=[row])).fetch("u1")
        assert snapshot.cashflows_for("p1")[0].rent_frequency == "weekly"

    def test_unknown_rent_frequency(self) -> None:
        row = dict(TABLES["cashflow"][1], rent_frequency="fortnightly")
        with pytest.raises(SourceError, match="rent_frequency"):
            _source(dict(TABLES, cashflow=[row])).fetch("u1")


class TestDuckDBPortfolioSource:
    def test_fetch_from_storage(self, tmp_path: Path) -> None:
        storage = Storage(tmp_path / "test.duckdb")
        storage.save_user(UserProfile(id="user-1", email=""))
        storage.save_property(make_property("p1"))
        source = DuckDBPortfolioSource(storage)

        snapshot = source.fetch("user-1")

        assert source.source_name == "duckdb"
        assert [p.id for p in snapshot.properties] == ["p1"]
        storage.close()
