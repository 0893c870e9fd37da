"""Tests for portfolio value history, summary totals and the engine."""

from datetime import date

import pytest

from propfolio.metrics import PortfolioEngine, portfolio_value_series, property_metrics, summarize_portfolio
from propfolio.models import CashflowTotals, PortfolioSnapshot, UserProfile

from conftest import make_property, make_valuation


class TestValueSeries:
    """Tests for the forward-filled portfolio value series."""

    def test_two_property_example(self) -> None:
        a = make_property("A", 500000, date(2020, 1, 1))
        b = make_property("B", 300000, date(2021, 1, 1))
        holdings = [(a, []), (b, [make_valuation("B", 320000, date(2022, 1, 1))])]

        series = portfolio_value_series(holdings)

        assert [(p.date, p.total_value) for p in series] == [
            (date(2020, 1, 1), 500000),
            (date(2021, 1, 1), 800000),
            (date(2022, 1, 1), 820000),
        ]

    def test_empty_portfolio(self) -> None:
        assert portfolio_value_series([]) == []

    def test_one_point_per_distinct_date(self) -> None:
        a = make_property("A", 400000, date(2020, 1, 1))
        b = make_property("B", 300000, date(2020, 1, 1))
        holdings = [
            (a, [make_valuation("A", 420000, date(2021, 1, 1))]),
            (b, [make_valuation("B", 310000, date(2021, 1, 1))]),
        ]
        series = portfolio_value_series(holdings)
        assert [p.date for p in series] == [date(2020, 1, 1), date(2021, 1, 1)]
        assert series[-1].total_value == 730000

    def test_forward_fill_keeps_latest_known_value(self) -> None:
        a = make_property("A", 500000, date(2020, 1, 1))
        b = make_property("B", 300000, date(2020, 6, 1))
        holdings = [
            (a, [make_valuation("A", 550000, date(2021, 1, 1))]),
            (b, [make_valuation("B", 350000, date(2022, 1, 1))]),
        ]
        values = {p.date: p.total_value for p in portfolio_value_series(holdings)}
        # A stays at its 2021 valuation when B is revalued in 2022
        assert values[date(2022, 1, 1)] == 550000 + 350000
        assert values[date(2021, 1, 1)] == 550000 + 300000
        assert values[date(2020, 6, 1)] == 500000 + 300000

    def test_dates_ascending(self) -> None:
        a = make_property("A", 1, date(2022, 1, 1))
        b = make_property("B", 1, date(2019, 1, 1))
        series = portfolio_value_series([(a, []), (b, [])])
        assert [p.date for p in series] == sorted(p.date for p in series)


class TestSummary:
    """Tests for portfolio summary totals."""

    def test_totals_are_sums_of_per_property_metrics(self) -> None:
        as_of = date(2023, 1, 1)
        a = make_property("A", 500000, date(2021, 1, 1), current_loan_amount=400000)
        b = make_property("B", 300000, date(2022, 1, 1), current_loan_amount=None)
        metrics = [
            property_metrics(a, [make_valuation("A", 600000, date(2022, 6, 1))], as_of,
                             CashflowTotals(monthly_income=2500, monthly_expenses=2000)),
            property_metrics(b, [make_valuation("B", 330000, date(2022, 12, 1))], as_of,
                             CashflowTotals(monthly_income=1800, monthly_expenses=2100)),
        ]

        s = summarize_portfolio(metrics, as_of)

        assert s.property_count == 2
        assert s.total_value == 930000
        assert s.total_debt == 400000
        assert s.total_equity == 530000
        assert s.total_equity + s.total_debt == pytest.approx(s.total_value)
        assert s.average_lvr == pytest.approx(400000 / 930000 * 100)
        assert s.cashflow.monthly_income == 4300
        assert s.cashflow.monthly_expenses == 4100
        assert s.cashflow.monthly_net == 200
        assert s.cashflow.annual_net == pytest.approx(2400)
        assert s.cashflow.weekly_net == pytest.approx(200 * 12 / 52)
        assert s.properties_with_cashflow == 2
        assert s.total_invested == 800000
        assert s.total_equity_growth == 130000
        assert s.total_return_percentage == pytest.approx(130000 / 800000 * 100)

    def test_growth_average_is_unweighted(self) -> None:
        as_of = date(2023, 1, 1)
        # 20% on a 500k property held 2 years, 10% on a 300k property held 1 year
        a = make_property("A", 500000, date(2021, 1, 1))
        b = make_property("B", 300000, date(2022, 1, 1))
        metrics = [
            property_metrics(a, [make_valuation("A", 600000, date(2022, 6, 1))], as_of),
            property_metrics(b, [make_valuation("B", 330000, date(2022, 12, 1))], as_of),
        ]

        s = summarize_portfolio(metrics, as_of)

        assert s.average_growth_percentage == pytest.approx(15.0)
        assert s.average_holding_years == pytest.approx(1.5)
        assert s.annualized_growth_rate == pytest.approx(10.0)
        assert s.properties_with_cashflow == 0

    def test_empty_portfolio_is_all_zero(self) -> None:
        s = summarize_portfolio([], date(2024, 1, 1))
        assert s.property_count == 0
        assert s.total_value == 0
        assert s.total_debt == 0
        assert s.total_equity == 0
        assert s.average_lvr == 0
        assert s.average_growth_percentage == 0
        assert s.annualized_growth_rate == 0
        assert s.total_return_percentage == 0
        assert s.cashflow.monthly_net == 0

    def test_purchased_today_has_no_annualized_growth(self) -> None:
        today = date(2024, 1, 1)
        prop = make_property("A", 500000, today)
        s = summarize_portfolio([property_metrics(prop, [make_valuation("A", 510000, today)], today)], today)
        assert s.average_holding_years == 0
        assert s.annualized_growth_rate == 0


class TestPortfolioEngine:
    """Tests for the engine over a snapshot."""

    def test_property_metrics_in_snapshot_order(self, two_property_snapshot: PortfolioSnapshot) -> None:
        metrics = PortfolioEngine().property_metrics(two_property_snapshot, as_of=date(2024, 1, 1))
        assert [m.property.id for m in metrics] == ["A", "B"]
        assert metrics[0].current_value == 500000
        assert metrics[1].current_value == 320000
        assert metrics[0].has_cashflow is True
        assert metrics[1].has_cashflow is False

    def test_summary_matches_elementwise_sums(self, two_property_snapshot: PortfolioSnapshot) -> None:
        engine = PortfolioEngine()
        as_of = date(2024, 1, 1)
        metrics = engine.property_metrics(two_property_snapshot, as_of)
        s = engine.summary(two_property_snapshot, as_of)
        assert s.total_value == sum(m.current_value for m in metrics)
        assert s.total_debt == sum(m.current_loan for m in metrics)
        assert s.cashflow.monthly_income == pytest.approx(sum(m.cashflow.monthly_income for m in metrics))
        assert s.cashflow.monthly_expenses == pytest.approx(sum(m.cashflow.monthly_expenses for m in metrics))
        assert s.total_equity + s.total_debt == pytest.approx(s.total_value)
        # A: 500/wk rent; 1800 + 100 + 200 + 50 expenses
        assert s.cashflow.monthly_income == pytest.approx(500 * 52 / 12)
        assert s.cashflow.monthly_expenses == pytest.approx(2150)
        assert s.properties_with_cashflow == 1

    def test_value_series(self, two_property_snapshot: PortfolioSnapshot) -> None:
        series = PortfolioEngine().value_series(two_property_snapshot)
        assert [p.total_value for p in series] == [500000, 800000, 820000]

    def test_compare_sorting(self, two_property_snapshot: PortfolioSnapshot) -> None:
        engine = PortfolioEngine()
        by_value = engine.compare(two_property_snapshot, sort_by="value", descending=True, as_of=date(2024, 1, 1))
        assert [m.property.id for m in by_value] == ["A", "B"]
        by_growth = engine.compare(two_property_snapshot, sort_by="growth_percent", descending=True,
                                   as_of=date(2024, 1, 1))
        assert [m.property.id for m in by_growth] == ["B", "A"]
        by_address = engine.compare(two_property_snapshot, sort_by="address", as_of=date(2024, 1, 1))
        assert [m.property.id for m in by_address] == ["A", "B"]

    def test_compare_rejects_unknown_field(self, two_property_snapshot: PortfolioSnapshot) -> None:
        with pytest.raises(ValueError):
            PortfolioEngine().compare(two_property_snapshot, sort_by="yield")

    def test_empty_snapshot(self) -> None:
        snapshot = PortfolioSnapshot(user=UserProfile(id="u", email=""), properties=[])
        engine = PortfolioEngine()
        assert engine.property_metrics(snapshot) == []
        assert engine.value_series(snapshot) == []
        assert engine.summary(snapshot).total_value == 0
