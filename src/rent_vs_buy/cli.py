from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict
from pathlib import Path
from typing import Optional

import typer

from .costs import buying_costs, renting_costs
from .data_sources import CensusACSClient, LocationDataAssembler, ZipCodeTable
from .model import compare_scenarios, yearly_view
from .rates import resolve_rates
from .schemas import LocationStats, ResolvedRates, ScenarioInputs

app = typer.Typer(help="Compare net worth from buying a home versus renting.")


def _default_census_key() -> Optional[str]:
    return os.environ.get("CENSUS_API_KEY")


def _default_zip_data() -> Optional[Path]:
    path = os.environ.get("RENT_VS_BUY_ZIP_DATA")
    return Path(path) if path else None


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _check_inputs(home_price: float, down_payment: float) -> None:
    if home_price <= 0:
        raise typer.BadParameter("home price must be positive", param_hint="--price")
    if not 0 <= down_payment <= 100:
        raise typer.BadParameter(
            "down payment must be between 0 and 100 percent", param_hint="--down"
        )


def _load_location(
    zip_code: Optional[str],
    zip_data: Optional[Path],
    census_api_key: Optional[str],
    use_census: bool,
) -> Optional[LocationStats]:
    if not zip_code:
        return None
    assembler = LocationDataAssembler(
        table=ZipCodeTable.from_path(zip_data) if zip_data else None,
        acs_client=CensusACSClient(api_key=census_api_key) if use_census else None,
    )
    location = assembler.lookup(zip_code)
    if location is None:
        typer.echo(f"No market data for ZIP {zip_code}; using horizon defaults.", err=True)
    return location


def _echo_rates(rates: ResolvedRates) -> None:
    typer.echo(f"Rate source: {rates.source}")
    typer.echo(f"Home appreciation: {rates.home_appreciation_rate:.2f}%/yr")
    typer.echo(f"Rent growth: {rates.rent_growth_rate:.2f}%/yr")
    typer.echo(f"Investment return: {rates.investment_return_rate:.2f}%/yr")


@app.command()
def run(
    price: float = typer.Option(..., help="Home purchase price."),
    rent: float = typer.Option(..., help="Current monthly rent."),
    down: float = typer.Option(20.0, help="Down payment, percent of price."),
    interest_rate: float = typer.Option(7.0, help="Mortgage rate, annual percent."),
    loan_term: int = typer.Option(30, help="Mortgage term in years."),
    horizon: int = typer.Option(30, help="Years to compare over."),
    property_tax: Optional[float] = typer.Option(
        None, help="Property tax, annual percent (defaults to the ZIP's state or 1.0)."
    ),
    home_insurance: float = typer.Option(1200.0, help="Home insurance per year."),
    hoa: float = typer.Option(150.0, help="HOA fee per month."),
    maintenance: float = typer.Option(1.0, help="Maintenance, annual percent of value."),
    renter_insurance: float = typer.Option(240.0, help="Renter insurance per year."),
    appreciation: float = typer.Option(3.0, help="Home appreciation, annual percent."),
    rent_growth: float = typer.Option(3.5, help="Rent growth, annual percent."),
    investment_return: float = typer.Option(7.0, help="Investment return, annual percent."),
    use_input_rates: bool = typer.Option(
        False, help="Use the growth rates above instead of resolved assumptions."
    ),
    zip_code: Optional[str] = typer.Option(None, "--zip", help="5-digit ZIP code."),
    zip_data: Optional[Path] = typer.Option(
        default_factory=_default_zip_data,
        help="ZIP data JSON (env RENT_VS_BUY_ZIP_DATA if omitted).",
    ),
    census: bool = typer.Option(False, help="Fall back to the Census ACS API for ZIPs."),
    census_api_key: Optional[str] = typer.Option(
        default_factory=_default_census_key,
        help="Census API key (env CENSUS_API_KEY if omitted).",
    ),
    show_timeline: bool = typer.Option(
        False, help="If set, dump the yearly net-worth timeline as JSON."
    ),
) -> None:
    """
    Run the month-by-month simulation and summarize who comes out ahead.
    """
    _check_inputs(price, down)
    location = _load_location(zip_code, zip_data, census_api_key, census)
    if property_tax is None:
        property_tax = location.property_tax_rate if location else 1.0

    inputs = ScenarioInputs(
        home_price=price,
        down_payment_percent=down,
        monthly_rent=rent,
        interest_rate=interest_rate,
        loan_term_years=loan_term,
        time_horizon_years=horizon,
        property_tax_rate=property_tax,
        home_insurance_annual=home_insurance,
        hoa_monthly=hoa,
        maintenance_rate=maintenance,
        renter_insurance_annual=renter_insurance,
        home_appreciation_rate=appreciation,
        rent_growth_rate=rent_growth,
        investment_return_rate=investment_return,
    )
    rates = ResolvedRates.from_inputs(inputs) if use_input_rates else None
    result = compare_scenarios(inputs, location=location, rates=rates)

    if location:
        typer.echo(f"Location: {location.city or 'ZIP'} {location.state} {location.zip_code}")
        typer.echo(f"Median home price: ${location.median_home_price:,.0f}")
        typer.echo(f"Average rent: ${location.average_rent:,.0f}")
        typer.echo("")
    _echo_rates(result.rates)
    typer.echo("")
    typer.echo(f"First-month cost of owning: ${buying_costs(inputs).total:,.0f}")
    typer.echo(f"First-month cost of renting: ${renting_costs(inputs, 1).total:,.0f}")
    typer.echo("")
    typer.echo(f"Buyer net worth after {horizon} years: ${result.final_buyer_net_worth:,.0f}")
    typer.echo(f"Renter net worth after {horizon} years: ${result.final_renter_net_worth:,.0f}")
    typer.echo(f"Total interest paid: ${result.total_interest_paid:,.0f}")
    typer.echo(f"Better outcome: {result.better_option}")
    if result.break_even_month:
        years = result.break_even_month / 12
        typer.echo(
            f"Break-even month: {result.break_even_month} (~{years:.1f} years)"
        )

    if show_timeline:
        payload = [asdict(point) for point in yearly_view(result.snapshots)]
        typer.echo(json.dumps(payload, indent=2))


@app.command()
def rates(
    horizon: int = typer.Option(30, help="Years to compare over."),
    zip_code: Optional[str] = typer.Option(None, "--zip", help="5-digit ZIP code."),
    zip_data: Optional[Path] = typer.Option(
        default_factory=_default_zip_data,
        help="ZIP data JSON (env RENT_VS_BUY_ZIP_DATA if omitted).",
    ),
) -> None:
    """
    Show the growth assumptions a simulation would use.
    """
    location = _load_location(zip_code, zip_data, None, False)
    _echo_rates(resolve_rates(horizon, location))


@app.command()
def costs(
    price: float = typer.Option(..., help="Home purchase price."),
    rent: float = typer.Option(..., help="Current monthly rent."),
    down: float = typer.Option(20.0, help="Down payment, percent of price."),
    interest_rate: float = typer.Option(7.0, help="Mortgage rate, annual percent."),
    loan_term: int = typer.Option(30, help="Mortgage term in years."),
    property_tax: float = typer.Option(1.0, help="Property tax, annual percent."),
    home_insurance: float = typer.Option(1200.0, help="Home insurance per year."),
    hoa: float = typer.Option(150.0, help="HOA fee per month."),
    maintenance: float = typer.Option(1.0, help="Maintenance, annual percent of value."),
    renter_insurance: float = typer.Option(240.0, help="Renter insurance per year."),
) -> None:
    """
    Print the first-month cost breakdown for owning and renting.
    """
    _check_inputs(price, down)
    inputs = ScenarioInputs(
        home_price=price,
        down_payment_percent=down,
        monthly_rent=rent,
        interest_rate=interest_rate,
        loan_term_years=loan_term,
        property_tax_rate=property_tax,
        home_insurance_annual=home_insurance,
        hoa_monthly=hoa,
        maintenance_rate=maintenance,
        renter_insurance_annual=renter_insurance,
    )
    buying = buying_costs(inputs)
    renting = renting_costs(inputs, 1)

    typer.echo("Owning:")
    typer.echo(f"  Mortgage: ${buying.mortgage:,.0f}")
    typer.echo(f"  Property tax: ${buying.property_tax:,.0f}")
    typer.echo(f"  Insurance: ${buying.insurance:,.0f}")
    typer.echo(f"  HOA: ${buying.hoa:,.0f}")
    typer.echo(f"  Maintenance: ${buying.maintenance:,.0f}")
    typer.echo(f"  Total: ${buying.total:,.0f}")
    typer.echo("Renting:")
    typer.echo(f"  Rent: ${renting.monthly_rent:,.0f}")
    typer.echo(f"  Insurance: ${renting.insurance:,.0f}")
    typer.echo(f"  Total: ${renting.total:,.0f}")


@app.command("zip-data")
def build_zip_data(
    home_csv: Path = typer.Argument(..., help="Zillow ZHVI ZIP-level CSV."),
    rent_csv: Path = typer.Argument(..., help="Zillow ZORI ZIP-level CSV."),
    output: Path = typer.Argument(..., help="Where to write the ZIP JSON table."),
) -> None:
    """
    Merge Zillow home value and rent CSVs into the ZIP lookup table.
    """
    table = ZipCodeTable.from_zillow_csvs(home_csv, rent_csv)
    table.save(output)
    trends = sum(
        1 for zip_code in table.records if table.lookup(zip_code).has_market_trends
    )
    typer.echo(f"Wrote {len(table)} ZIP codes ({trends} with growth rates) to {output}")


if __name__ == "__main__":
    app()
