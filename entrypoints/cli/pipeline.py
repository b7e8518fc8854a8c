from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import typer

from zipreach.domain.affordability import default_inputs
from zipreach.domain.mortgage import (
    calculate_full_monthly_payment,
    calculate_max_home_price,
    get_effective_max_price,
)
from zipreach.pipelines.core import build_data, run_commute, run_nationwide
from zipreach.services.results import format_currency, visible_markers

app = typer.Typer(help="zipreach: affordable ZIP codes nationwide or within a commute zone.")


def _inputs(
    income: Optional[float],
    down_payment: Optional[float],
    rate: Optional[float],
    term: Optional[int],
    debts: float,
    spending: float,
):
    overrides = {"monthly_debts": debts}
    if down_payment is not None:
        overrides["down_payment_pct"] = down_payment
    if rate is not None:
        overrides["interest_rate"] = rate
    if term is not None:
        overrides["loan_term_years"] = term
    if spending > 0:
        overrides["monthly_spending"] = spending
        overrides["include_spending"] = True
    return default_inputs(annual_income=income, **overrides)


IncomeOpt = typer.Option(..., "--income", help="Gross annual household income ($)")
DownOpt = typer.Option(None, "--down", help="Down payment, percent of price (3-50)")
RateOpt = typer.Option(None, "--rate", help="Interest rate, percent (e.g. 6.5)")
TermOpt = typer.Option(None, "--term", help="Loan term in years (15 or 30)")
DebtsOpt = typer.Option(0.0, "--debts", help="Other monthly debt payments ($)")
SpendingOpt = typer.Option(0.0, "--spending", help="Monthly living spending ($); enables cash-flow checks")


@app.command("max-price")
def max_price_cmd(
    income: float = IncomeOpt,
    down: Optional[float] = DownOpt,
    rate: Optional[float] = RateOpt,
    term: Optional[int] = TermOpt,
    debts: float = DebtsOpt,
    manual: Optional[float] = typer.Option(None, "--manual", help="Manual max price override ($)"),
) -> None:
    """
    Max home price under the front-end DTI limit, with its monthly breakdown.
    """
    inputs = _inputs(income, down, rate, term, debts, 0.0)
    if manual is not None:
        inputs = inputs.model_copy(update={"manual_max_price": manual, "use_manual_max_price": True})

    price = calculate_max_home_price(inputs)
    pay = calculate_full_monthly_payment(price, inputs)
    typer.echo(f"Max home price:   {format_currency(price)}")
    typer.echo(f"Effective budget: {format_currency(get_effective_max_price(inputs))}")
    typer.echo(
        f"Monthly: {format_currency(pay.total)} "
        f"(P&I {format_currency(pay.principal)}, tax {format_currency(pay.tax)}, "
        f"ins {format_currency(pay.insurance)}, PMI {format_currency(pay.pmi)}, HOA {format_currency(pay.hoa)})"
    )


@app.command("nationwide")
def nationwide_cmd(
    income: float = IncomeOpt,
    down: Optional[float] = DownOpt,
    rate: Optional[float] = RateOpt,
    term: Optional[int] = TermOpt,
    debts: float = DebtsOpt,
    spending: float = SpendingOpt,
    top: int = typer.Option(10, help="How many states to print"),
) -> None:
    """
    Rank states by share of affordable + stretch ZIPs and write reports to data/reports.
    """
    result = run_nationwide(_inputs(income, down, rate, term, debts, spending))
    for s in result.states[:top]:
        typer.echo(
            f"{s.state}  {s.state_name:<22} {s.pct_affordable:>3}%  "
            f"({s.affordable_count} affordable, {s.stretch_count} stretch / {s.total_zips})  "
            f"median {format_currency(s.median_home_value)}"
        )


@app.command("commute")
def commute_cmd(
    isochrone: Path = typer.Option(..., "--isochrone", help="GeoJSON isochrone polygon"),
    income: float = IncomeOpt,
    down: Optional[float] = DownOpt,
    rate: Optional[float] = RateOpt,
    term: Optional[int] = TermOpt,
    debts: float = DebtsOpt,
    spending: float = SpendingOpt,
    hide_unaffordable: bool = typer.Option(False, "--hide-unaffordable"),
) -> None:
    """
    Classify every ZIP inside a commute-zone polygon.
    """
    result = run_commute(_inputs(income, down, rate, term, debts, spending), isochrone)
    markers = visible_markers(result.markers, show_unaffordable=not hide_unaffordable)
    typer.echo(
        f"{result.stats.zip_count} ZIPs in zone, median home {format_currency(result.stats.median_home_value)}, "
        f"median rent {format_currency(result.stats.median_rent)}"
    )
    typer.echo(json.dumps([{"zip": m.zip, "tier": m.tier} for m in markers], indent=2))


@app.command("build-data")
def build_data_cmd(
    zhvi: Optional[Path] = typer.Option(None, help="Zillow ZHVI ZIP-level CSV"),
    zori: Optional[Path] = typer.Option(None, help="Zillow ZORI ZIP-level CSV"),
    gazetteer: Optional[Path] = typer.Option(None, help="Census ZCTA Gazetteer .txt"),
    out_dir: Path = typer.Option(Path("data"), help="Where to write the JSON tables"),
) -> None:
    """
    Build housing-data.json and zip-centroids.json from downloaded source files.
    """
    written = build_data(zhvi, zori, gazetteer, out_dir=out_dir)
    for kind, path in written.items():
        typer.echo(f"{kind}: {path}")


if __name__ == "__main__":
    app()
