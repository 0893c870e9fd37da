"""CLI for the propfolio property portfolio tracker."""

from __future__ import annotations

from dataclasses import replace
from datetime import date
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")

import typer
from rich.console import Console
from rich.table import Table

from .config import (
    get_logging_settings,
    get_remote_settings,
    get_storage_settings,
    get_tier_limits,
    load_config,
)
from .exceptions import PropfolioError
from .formatters import (
    format_currency,
    format_date,
    format_percentage,
    format_signed_currency,
    format_signed_percentage,
)
from .logging import get_logger, setup_logging
from .metrics import SORT_KEYS, PortfolioEngine, cashflow_history
from .models import CashflowTotals, PortfolioSnapshot, UserProfile
from .sources import DuckDBPortfolioSource, PortfolioSource, RestPortfolioSource
from .storage import (
    Storage,
    cashflow_filename,
    export_cashflow_csv,
    export_json,
    export_portfolio_csv,
    portfolio_filename,
)
from .tiers import ensure_can_add_property, require_feature
from .validation import build_cashflow, build_property, build_valuation, purchase_valuation

app = typer.Typer(
    name="propfolio",
    help="Track investment properties: valuations, cashflow, equity and LVR.",
)
console = Console()
logger = get_logger(__name__)


def _user_option() -> Any:
    return typer.Option(..., "--user", "-u", envvar="PROPFOLIO_USER", help="User id")


def _remote_option() -> Any:
    return typer.Option(False, "--remote", help="Read from the remote store instead of local DuckDB")


@app.callback()
def main(
    ctx: typer.Context,
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to config.yaml"),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Override log level"),
) -> None:
    """Load configuration and set up logging."""
    try:
        cfg = load_config(config_path)
        settings = get_logging_settings(cfg)
        get_tier_limits(cfg)
    except (FileNotFoundError, PropfolioError) as e:
        _fail(str(e))
    setup_logging(log_level or settings.level, settings.format_type)
    ctx.obj = cfg


def _config(ctx: typer.Context) -> dict[str, Any]:
    return ctx.obj or {}


def _get_storage(ctx: typer.Context) -> Storage:
    return Storage(get_storage_settings(_config(ctx)).db_path)


def _get_output_dir(ctx: typer.Context) -> Path:
    return get_storage_settings(_config(ctx)).output_dir


def _fail(message: str) -> None:
    console.print(f"[red]{message}[/red]")
    raise typer.Exit(1)


def _load_snapshot(ctx: typer.Context, user_id: str, remote: bool) -> PortfolioSnapshot:
    storage = None
    if remote:
        rs = get_remote_settings(_config(ctx))
        source: PortfolioSource = RestPortfolioSource(rs.base_url, rs.api_key, timeout=rs.timeout_seconds)
    else:
        storage = _get_storage(ctx)
        source = DuckDBPortfolioSource(storage)
    try:
        return source.fetch(user_id)
    except PropfolioError as e:
        _fail(str(e))
    finally:
        if storage:
            storage.close()


def _print_cashflow(title: str, totals: CashflowTotals) -> None:
    table = Table(title=title)
    table.add_column("", style="dim")
    table.add_column("Weekly", justify="right")
    table.add_column("Monthly", justify="right")
    table.add_column("Annual", justify="right")
    table.add_row(
        "Income",
        format_currency(totals.weekly_income),
        format_currency(totals.monthly_income),
        format_currency(totals.annual_income),
    )
    table.add_row(
        "Expenses",
        format_currency(totals.weekly_expenses),
        format_currency(totals.monthly_expenses),
        format_currency(totals.annual_expenses),
    )
    style = "green" if totals.monthly_net >= 0 else "red"
    table.add_row(
        "Net",
        f"[{style}]{format_signed_currency(totals.weekly_net)}[/{style}]",
        f"[{style}]{format_signed_currency(totals.monthly_net)}[/{style}]",
        f"[{style}]{format_signed_currency(totals.annual_net)}[/{style}]",
    )
    console.print(table)


@app.command("add-user")
def add_user(
    ctx: typer.Context,
    user_id: str = typer.Argument(..., help="User id"),
    email: str = typer.Option(..., "--email", "-e"),
    tier: str = typer.Option("free", "--tier", help="free or pro"),
) -> None:
    """Register a user profile in the local store."""
    if tier not in ("free", "pro"):
        _fail("Tier must be 'free' or 'pro'.")
    storage = _get_storage(ctx)
    storage.save_user(UserProfile(id=user_id, email=email, subscription_tier=tier))
    storage.close()
    console.print(f"[green]Saved user {user_id} ({tier})[/green]")


@app.command("set-tier")
def set_tier(
    ctx: typer.Context,
    user_id: str = typer.Argument(..., help="User id"),
    tier: str = typer.Argument(..., help="free or pro"),
) -> None:
    """Change a user's subscription tier."""
    if tier not in ("free", "pro"):
        _fail("Tier must be 'free' or 'pro'.")
    storage = _get_storage(ctx)
    try:
        storage.set_tier(user_id, tier)
    except PropfolioError as e:
        _fail(str(e))
    finally:
        storage.close()
    console.print(f"[green]{user_id} is now on the {tier} tier[/green]")


@app.command("add-property")
def add_property(
    ctx: typer.Context,
    user_id: str = _user_option(),
    street: str = typer.Option(..., "--street"),
    suburb: str = typer.Option(..., "--suburb"),
    state: str = typer.Option(..., "--state", help="NSW, VIC, QLD, SA, WA, TAS, NT or ACT"),
    postcode: str = typer.Option(..., "--postcode"),
    property_type: str = typer.Option("House", "--type", help="House, Apartment or Townhouse"),
    purchase_price: str = typer.Option(..., "--price"),
    purchase_date: str = typer.Option(..., "--date", help="YYYY-MM-DD or DD/MM/YYYY"),
    bedrooms: Optional[int] = typer.Option(None, "--bedrooms"),
    initial_loan: Optional[str] = typer.Option(None, "--initial-loan"),
    current_loan: Optional[str] = typer.Option(None, "--loan"),
    interest_rate: Optional[str] = typer.Option(None, "--rate", help="Interest rate (%)"),
    lender: Optional[str] = typer.Option(None, "--lender"),
) -> None:
    """Add a property; its purchase is recorded as the first valuation."""
    storage = _get_storage(ctx)
    try:
        user = storage.get_user(user_id)
        ensure_can_add_property(user, storage.count_properties(user_id), get_tier_limits(_config(ctx)))
        prop = build_property(
            user_id=user_id,
            street=street,
            suburb=suburb,
            state=state,
            postcode=postcode,
            property_type=property_type,
            purchase_price=purchase_price,
            purchase_date=purchase_date,
            bedrooms=bedrooms,
            initial_loan_amount=initial_loan,
            current_loan_amount=current_loan,
            interest_rate=interest_rate,
            lender_name=lender,
        )
        storage.save_property(prop)
        storage.save_valuation(purchase_valuation(prop))
    except PropfolioError as e:
        _fail(str(e))
    finally:
        storage.close()
    logger.info("Added property %s for %s", prop.id, user_id)
    console.print(f"[green]Added {prop.address}[/green]")
    console.print(f"  ID: {prop.id}")


@app.command("add-valuation")
def add_valuation(
    ctx: typer.Context,
    property_id: str = typer.Argument(..., help="Property id"),
    value: str = typer.Option(..., "--value"),
    date_recorded: str = typer.Option(date.today().isoformat(), "--date", help="YYYY-MM-DD or DD/MM/YYYY"),
    source: Optional[str] = typer.Option(None, "--source", help="e.g. Bank valuation, Agent appraisal"),
) -> None:
    """Record a valuation for a property."""
    storage = _get_storage(ctx)
    try:
        prop = storage.get_property(property_id)
        entry = build_valuation(prop, value, date_recorded, source)
        storage.save_valuation(entry)
    except PropfolioError as e:
        _fail(str(e))
    finally:
        storage.close()
    console.print(
        f"[green]Recorded {format_currency(entry.value)} on {format_date(entry.date_recorded)} "
        f"for {prop.address}[/green]"
    )


@app.command("add-cashflow")
def add_cashflow(
    ctx: typer.Context,
    property_id: str = typer.Argument(..., help="Property id"),
    effective_from: str = typer.Option(date.today().isoformat(), "--effective-from", help="Rates apply from this date"),
    rent: Optional[str] = typer.Option(None, "--rent"),
    frequency: Optional[str] = typer.Option(None, "--frequency", help="weekly or monthly"),
    mortgage: Optional[str] = typer.Option(None, "--mortgage", help="Monthly mortgage payment"),
    insurance: Optional[str] = typer.Option(None, "--insurance", help="Annual insurance"),
    rates_strata: Optional[str] = typer.Option(None, "--rates-strata", help="Quarterly rates/strata"),
    other: Optional[str] = typer.Option(None, "--other", help="Other monthly expenses"),
    notes: Optional[str] = typer.Option(None, "--notes"),
) -> None:
    """Add a cashflow configuration; it replaces the previous one from its effective date."""
    storage = _get_storage(ctx)
    try:
        prop = storage.get_property(property_id)
        config = build_cashflow(
            prop.id,
            effective_from,
            rent_income=rent,
            rent_frequency=frequency,
            mortgage_payment=mortgage,
            insurance_annual=insurance,
            rates_strata_quarterly=rates_strata,
            other_expenses=other,
            notes=notes,
        )
        storage.save_cashflow(config)
    except PropfolioError as e:
        _fail(str(e))
    finally:
        storage.close()
    console.print(f"[green]Cashflow configuration saved for {prop.address}[/green]")
    console.print(f"  ID: {config.id}")


@app.command("edit-cashflow")
def edit_cashflow(
    ctx: typer.Context,
    config_id: str = typer.Argument(..., help="Cashflow entry id (see 'cashflow')"),
    effective_from: Optional[str] = typer.Option(None, "--effective-from"),
    rent: Optional[str] = typer.Option(None, "--rent"),
    frequency: Optional[str] = typer.Option(None, "--frequency", help="weekly or monthly"),
    mortgage: Optional[str] = typer.Option(None, "--mortgage", help="Monthly mortgage payment"),
    insurance: Optional[str] = typer.Option(None, "--insurance", help="Annual insurance"),
    rates_strata: Optional[str] = typer.Option(None, "--rates-strata", help="Quarterly rates/strata"),
    other: Optional[str] = typer.Option(None, "--other", help="Other monthly expenses"),
    notes: Optional[str] = typer.Option(None, "--notes"),
) -> None:
    """Correct an existing cashflow configuration. Options not given keep their current value."""
    storage = _get_storage(ctx)
    try:
        current = storage.get_cashflow(config_id)
        edited = build_cashflow(
            current.property_id,
            effective_from or current.effective_from,
            rent_income=rent if rent is not None else current.rent_income,
            rent_frequency=frequency or current.rent_frequency,
            mortgage_payment=mortgage if mortgage is not None else current.mortgage_payment,
            insurance_annual=insurance if insurance is not None else current.insurance_annual,
            rates_strata_quarterly=rates_strata if rates_strata is not None else current.rates_strata_quarterly,
            other_expenses=other if other is not None else current.other_expenses,
            notes=notes if notes is not None else current.notes,
        )
        storage.update_cashflow(replace(edited, id=current.id))
    except PropfolioError as e:
        _fail(str(e))
    finally:
        storage.close()
    console.print(f"[green]Cashflow entry {config_id} updated[/green]")


@app.command("delete-cashflow")
def delete_cashflow(
    ctx: typer.Context,
    config_id: str = typer.Argument(..., help="Cashflow entry id (see 'cashflow')"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt"),
) -> None:
    """Delete a cashflow configuration; the previous one becomes active again."""
    if not yes and not typer.confirm(f"Delete cashflow entry {config_id}?"):
        raise typer.Exit(0)
    storage = _get_storage(ctx)
    try:
        storage.delete_cashflow(config_id)
    except PropfolioError as e:
        _fail(str(e))
    finally:
        storage.close()
    console.print(f"[green]Cashflow entry {config_id} deleted[/green]")


@app.command()
def properties(
    ctx: typer.Context,
    user_id: str = _user_option(),
    remote: bool = _remote_option(),
) -> None:
    """List properties with current value, growth, equity and LVR."""
    snapshot = _load_snapshot(ctx, user_id, remote)
    metrics = PortfolioEngine().property_metrics(snapshot)
    if not metrics:
        console.print("[yellow]No properties yet. Add one with 'add-property'.[/yellow]")
        return

    table = Table(title=f"Properties ({snapshot.user.email or snapshot.user.id})")
    table.add_column("ID", style="dim")
    table.add_column("Address", style="cyan")
    table.add_column("Type", style="dim")
    table.add_column("Purchased", justify="right")
    table.add_column("Value", justify="right")
    table.add_column("Growth", justify="right")
    table.add_column("Equity", justify="right")
    table.add_column("LVR", justify="right")
    for m in metrics:
        p = m.property
        table.add_row(
            p.id[:8],
            p.address,
            p.property_type,
            f"{format_date(p.purchase_date)} @ {format_currency(p.purchase_price)}",
            format_currency(m.current_value),
            f"{format_signed_currency(m.growth)} ({format_signed_percentage(m.growth_percentage)})",
            format_currency(m.equity),
            format_percentage(m.lvr, 1),
        )
    console.print(table)


@app.command()
def summary(
    ctx: typer.Context,
    user_id: str = _user_option(),
    remote: bool = _remote_option(),
) -> None:
    """Portfolio totals, performance and combined cashflow."""
    snapshot = _load_snapshot(ctx, user_id, remote)
    s = PortfolioEngine().summary(snapshot)

    table = Table(title="Portfolio Summary")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Properties", str(s.property_count))
    table.add_row("Total value", format_currency(s.total_value))
    table.add_row("Total debt", format_currency(s.total_debt))
    table.add_row("Total equity", format_currency(s.total_equity))
    table.add_row("Average LVR", format_percentage(s.average_lvr, 1))
    table.add_row("Total invested", format_currency(s.total_invested))
    table.add_row("Equity growth", format_signed_currency(s.total_equity_growth))
    table.add_row("Total return", format_signed_percentage(s.total_return_percentage))
    table.add_row("Average capital growth", format_signed_percentage(s.average_growth_percentage))
    table.add_row("Annualized growth", format_signed_percentage(s.annualized_growth_rate))
    table.add_row("Average holding period", f"{s.average_holding_years:.1f} yrs")
    console.print(table)

    if s.properties_with_cashflow:
        noun = "property" if s.properties_with_cashflow == 1 else "properties"
        _print_cashflow(f"Combined cashflow ({s.properties_with_cashflow} {noun})", s.cashflow)


@app.command()
def cashflow(
    ctx: typer.Context,
    property_id: str = typer.Argument(..., help="Property id"),
    user_id: str = _user_option(),
    remote: bool = _remote_option(),
    export: bool = typer.Option(False, "--export", help="Export configurations to CSV (pro)"),
) -> None:
    """Current cashflow of a property and its configuration history."""
    snapshot = _load_snapshot(ctx, user_id, remote)
    prop = next((p for p in snapshot.properties if p.id == property_id), None)
    if prop is None:
        _fail(f"Property not found: {property_id}")
    configs = snapshot.cashflows_for(prop.id)
    if not configs:
        console.print("[yellow]No cashflow configured. Add one with 'add-cashflow'.[/yellow]")
        return

    _print_cashflow(f"Cashflow: {prop.address}", PortfolioEngine().cashflow(snapshot, prop.id))

    table = Table(title="Configuration history")
    table.add_column("ID", style="dim")
    table.add_column("Effective from")
    table.add_column("Income", justify="right")
    table.add_column("Expenses", justify="right")
    table.add_column("Net", justify="right")
    for config, (effective, totals) in zip(reversed(configs), cashflow_history(configs)):
        table.add_row(
            config.id,
            format_date(effective),
            format_currency(totals.monthly_income),
            format_currency(totals.monthly_expenses),
            format_signed_currency(totals.monthly_net),
        )
    console.print(table)

    if export:
        try:
            require_feature(snapshot.user, "csv_export", get_tier_limits(_config(ctx)))
        except PropfolioError as e:
            _fail(str(e))
        path = export_cashflow_csv(configs, _get_output_dir(ctx) / cashflow_filename(prop.address))
        console.print(f"  CSV: {path}")


@app.command()
def history(
    ctx: typer.Context,
    user_id: str = _user_option(),
    remote: bool = _remote_option(),
) -> None:
    """Total portfolio value at every purchase and valuation date (pro)."""
    snapshot = _load_snapshot(ctx, user_id, remote)
    try:
        require_feature(snapshot.user, "advanced_dashboard", get_tier_limits(_config(ctx)))
    except PropfolioError as e:
        _fail(str(e))

    series = PortfolioEngine().value_series(snapshot)
    if not series:
        console.print("[yellow]No value history yet.[/yellow]")
        return
    table = Table(title="Portfolio Value Over Time")
    table.add_column("Date")
    table.add_column("Total Value", justify="right")
    table.add_column("Change", justify="right")
    previous: Optional[float] = None
    for point in series:
        change = "" if previous is None else format_signed_currency(point.total_value - previous)
        table.add_row(format_date(point.date), format_currency(point.total_value), change)
        previous = point.total_value
    console.print(table)


@app.command()
def compare(
    ctx: typer.Context,
    user_id: str = _user_option(),
    remote: bool = _remote_option(),
    sort_by: str = typer.Option("address", "--sort", "-s", help=f"One of: {', '.join(SORT_KEYS)}"),
    descending: bool = typer.Option(False, "--desc", help="Sort descending"),
) -> None:
    """Side-by-side property comparison (pro)."""
    if sort_by not in SORT_KEYS:
        _fail(f"Unknown sort field {sort_by!r}; choose from {', '.join(SORT_KEYS)}")
    snapshot = _load_snapshot(ctx, user_id, remote)
    try:
        require_feature(snapshot.user, "advanced_dashboard", get_tier_limits(_config(ctx)))
    except PropfolioError as e:
        _fail(str(e))

    rows = PortfolioEngine().compare(snapshot, sort_by=sort_by, descending=descending)
    table = Table(title="Property Comparison")
    table.add_column("Property", style="cyan")
    table.add_column("Value", justify="right")
    table.add_column("Growth ($)", justify="right")
    table.add_column("Growth (%)", justify="right")
    table.add_column("LVR", justify="right")
    table.add_column("Equity", justify="right")
    table.add_column("Net CF/mo", justify="right")
    for m in rows:
        table.add_row(
            f"{m.property.street}\n[dim]{m.property.short_address}[/dim]",
            format_currency(m.current_value),
            format_signed_currency(m.growth),
            format_signed_percentage(m.growth_percentage),
            format_percentage(m.lvr, 1),
            format_currency(m.equity),
            format_signed_currency(m.cashflow.monthly_net) if m.has_cashflow else "",
        )
    console.print(table)


@app.command()
def export(
    ctx: typer.Context,
    user_id: str = _user_option(),
    remote: bool = _remote_option(),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Output directory"),
    json_too: bool = typer.Option(False, "--json", help="Also write a full JSON export"),
) -> None:
    """Export per-property metrics to CSV (pro)."""
    snapshot = _load_snapshot(ctx, user_id, remote)
    try:
        require_feature(snapshot.user, "csv_export", get_tier_limits(_config(ctx)))
    except PropfolioError as e:
        _fail(str(e))
    if not snapshot.properties:
        console.print("[yellow]No data to export.[/yellow]")
        raise typer.Exit(1)

    engine = PortfolioEngine()
    metrics = engine.property_metrics(snapshot)
    out_dir = output or _get_output_dir(ctx)
    csv_path = export_portfolio_csv(metrics, out_dir / portfolio_filename())
    console.print(f"[green]Exported {len(metrics)} properties[/green]")
    console.print(f"  CSV:  {csv_path}")
    if json_too:
        json_path = export_json(
            engine.summary(snapshot),
            metrics,
            engine.value_series(snapshot),
            out_dir / f"portfolio-{date.today().isoformat()}.json",
        )
        console.print(f"  JSON: {json_path}")


if __name__ == "__main__":
    app()
