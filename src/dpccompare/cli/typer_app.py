"""
dpccompare Typer CLI Application

Command-line front end for the cost comparison, county resolution and
drug pricing services.
"""

from __future__ import annotations

import asyncio
import sys
from enum import Enum
from pathlib import Path
from typing import Any

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from dpccompare import __version__
from dpccompare.cli.error_handler import handle_cli_error
from dpccompare.cli.json_formatter import format_success_output
from dpccompare.config.loader import get_config, reload_config
from dpccompare.config.models.settings import Settings
from dpccompare.core.comparison.factory import (
    create_comparison_service,
    create_drug_pricing_client,
    create_geo_resolver,
)
from dpccompare.core.comparison.models import ComparisonInput, ComparisonOptions, ComparisonResult
from dpccompare.services.drug_pricing.nadac import DrugPricing
from dpccompare.services.geo.resolver import CountyResolution, GeoResolver
from dpccompare.services.marketplace.states import get_marketplace_info
from dpccompare.shared.errors import DpcCompareError
from dpccompare.shared.logging import setup_structured_logger

console = Console()


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


app = typer.Typer(
    name="dpccompare",
    help="Compare traditional health insurance with Direct Primary Care plus catastrophic coverage.",
    add_completion=False,
    rich_markup_mode="rich",
    no_args_is_help=True,
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"dpccompare {__version__}")
        raise typer.Exit


@app.callback()
def main(
    ctx: typer.Context,
    log_level: LogLevel | None = typer.Option(
        None,
        "--log-level",
        case_sensitive=False,
        help="Override the configured log level",
    ),
    config: Path | None = typer.Option(
        None,
        "--config",
        help="TOML configuration file",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """Load settings and configure logging before any command runs."""
    try:
        settings = reload_config(config) if config else get_config()
    except DpcCompareError as e:
        raise typer.Exit(handle_cli_error(e, "main-callback")) from e

    setup_structured_logger(
        level=log_level.value if log_level else settings.logging.level,
        log_file=settings.logging.file,
        use_rich_console=settings.logging.rich_console,
    )
    ctx.obj = settings


def _echo_json(payload: bytes) -> None:
    sys.stdout.write(payload.decode("utf-8") + "\n")


def _money(amount: float) -> str:
    return f"${amount:,.2f}"


# compare


async def _run_compare(
    settings: Settings,
    profile: ComparisonInput,
    options: ComparisonOptions,
) -> ComparisonResult:
    async with create_comparison_service(settings) as service:
        return await service.compare(profile, options)


def _render_comparison(result: ComparisonResult) -> None:
    table = Table(title="Annual Cost Comparison")
    table.add_column("", style="bold")
    table.add_column("Traditional", justify="right")
    table.add_column("DPC + Catastrophic", justify="right")

    traditional = result.breakdown.traditional
    dpc = result.breakdown.dpc
    table.add_row("Monthly premium / fee", _money(result.traditional_premium), _money(result.dpc_monthly_fee))
    table.add_row("Catastrophic premium (annual)", "-", _money(result.catastrophic_premium))
    table.add_row("Deductible", _money(result.traditional_deductible), _money(result.catastrophic_deductible))
    table.add_row("Copays", _money(traditional.copays), _money(dpc.copays))
    table.add_row("Prescriptions", _money(traditional.prescriptions), _money(dpc.prescriptions))
    table.add_row(
        "Total annual",
        _money(result.traditional_total_annual),
        _money(result.dpc_total_annual),
        style="bold",
    )
    table.add_row(
        "Data source",
        result.data_source.traditional.value,
        result.data_source.catastrophic.value,
        style="dim",
    )
    console.print(table)

    color = "green" if result.annual_savings > 0 else "yellow"
    console.print(
        f"[{color}]Annual savings with DPC: {_money(result.annual_savings)} "
        f"({result.percentage_savings:.1f}%)[/{color}]"
    )
    console.print(f"Recommended: [bold]{result.recommended_plan.value}[/bold]")
    console.print(f"Marketplace: {result.data_source.marketplace_name} ({result.data_source.marketplace_type.value})")
    if result.data_source.api_unavailable_reason:
        console.print(f"[dim]Estimates used: {result.data_source.api_unavailable_reason}[/dim]")


@app.command("compare")
def compare_command(
    ctx: typer.Context,
    age: int = typer.Option(..., "--age", help="Age of the applicant"),
    zip_code: str = typer.Option(..., "--zip", help="5-digit ZIP code"),
    state: str = typer.Option(..., "--state", help="Two-letter state code"),
    chronic: list[str] | None = typer.Option(
        None,
        "--chronic",
        help="Chronic condition (repeat for several)",
    ),
    visits: int = typer.Option(0, "--visits", help="Expected doctor visits per year"),
    prescriptions: int = typer.Option(0, "--prescriptions", help="Regular monthly prescriptions"),
    income: float | None = typer.Option(None, "--income", help="Household income for subsidy estimates"),
    year: int | None = typer.Option(None, "--year", help="Plan year (default: current year)"),
    no_api: bool = typer.Option(False, "--no-api", help="Use static estimates only"),
    json_output: bool = typer.Option(False, "--json", help="Output results in JSON format"),
) -> None:
    """
    Compare annual costs of traditional insurance and DPC + catastrophic coverage.

    Examples:
        dpccompare compare --age 35 --zip 27701 --state NC --visits 4

        dpccompare compare --age 52 --zip 90210 --state CA --chronic diabetes --json
    """
    settings: Settings = ctx.obj
    try:
        profile = ComparisonInput(
            age=age,
            zip_code=zip_code,
            state=state,
            chronic_conditions=chronic or [],
            annual_doctor_visits=visits,
            prescription_count=prescriptions,
        )
        options = ComparisonOptions(
            income=income,
            year=year,
            use_api_data=False if no_api else None,
        )
        result = asyncio.run(_run_compare(settings, profile, options))
    except (DpcCompareError, ValidationError) as e:
        raise typer.Exit(handle_cli_error(e, "compare", json_output=json_output)) from e

    if json_output:
        _echo_json(format_success_output("compare", result))
    else:
        _render_comparison(result)


# resolve-county


async def _run_resolve(resolver: GeoResolver, zip_code: str, state: str | None) -> CountyResolution:
    try:
        return await resolver.resolve_county(zip_code, state_hint=state)
    finally:
        await resolver.close()


@app.command("resolve-county")
def resolve_county_command(
    ctx: typer.Context,
    zip_code: str = typer.Argument(..., help="ZIP code to resolve"),
    state: str | None = typer.Option(None, "--state", help="State used when the ZIP prefix is unknown"),
    offline: bool = typer.Option(False, "--offline", help="Skip the live Census geocoder"),
    json_output: bool = typer.Option(False, "--json", help="Output results in JSON format"),
) -> None:
    """Resolve a ZIP code to its county FIPS code."""
    settings: Settings = ctx.obj
    resolver = GeoResolver() if offline else create_geo_resolver(settings)
    state_hint = state.strip().upper() if state else None

    try:
        resolution = asyncio.run(_run_resolve(resolver, zip_code, state_hint))
    except DpcCompareError as e:
        raise typer.Exit(handle_cli_error(e, "resolve-county", json_output=json_output)) from e

    if json_output:
        _echo_json(
            format_success_output(
                "resolve-county",
                {"zip_code": zip_code, "county_fips": resolution.county_fips, "tier": resolution.tier},
            )
        )
        return

    console.print(f"ZIP {zip_code} -> county [bold]{resolution.county_fips}[/bold] ({resolution.tier.value})")


# drug-price


async def _run_drug_search(
    settings: Settings,
    term: str,
    limit: int,
    by_ndc: bool,
) -> list[DrugPricing]:
    client = create_drug_pricing_client(settings)
    try:
        if by_ndc:
            drug = await client.lookup_by_ndc(term)
            return [drug] if drug is not None else []
        result = await client.search_drugs(term, limit=limit)
        return result.drugs
    finally:
        await client.close()


def _render_drugs(drugs: list[DrugPricing]) -> None:
    table = Table(title="NADAC Drug Pricing")
    table.add_column("NDC")
    table.add_column("Drug")
    table.add_column("Type")
    table.add_column("Per unit", justify="right")
    table.add_column("30-day retail", justify="right")
    table.add_column("90-day retail", justify="right")
    table.add_column("Effective")

    for drug in drugs:
        table.add_row(
            drug.ndc,
            drug.drug_name,
            "Generic" if drug.is_generic else "Brand",
            f"${drug.nadac_per_unit:.4f}/{drug.pricing_unit}",
            _money(drug.estimated_30_day_retail),
            _money(drug.estimated_90_day_retail),
            drug.effective_date,
        )
    console.print(table)


@app.command("drug-price")
def drug_price_command(
    ctx: typer.Context,
    term: str = typer.Argument(..., help="Drug name fragment, or an NDC with --ndc"),
    limit: int = typer.Option(10, "--limit", min=1, max=500, help="Maximum number of results"),
    ndc: bool = typer.Option(False, "--ndc", help="Look up a single NDC instead of searching"),
    json_output: bool = typer.Option(False, "--json", help="Output results in JSON format"),
) -> None:
    """Look up wholesale drug costs and retail estimates from NADAC."""
    settings: Settings = ctx.obj
    try:
        drugs = asyncio.run(_run_drug_search(settings, term, limit, ndc))
    except DpcCompareError as e:
        raise typer.Exit(handle_cli_error(e, "drug-price", json_output=json_output)) from e

    if json_output:
        _echo_json(format_success_output("drug-price", {"search_term": term, "drugs": drugs}))
        return

    if not drugs:
        console.print(f"[yellow]No NADAC pricing found for {term!r}[/yellow]")
        return
    _render_drugs(drugs)


# status


def _status_data(settings: Settings, state: str | None) -> dict[str, Any]:
    marketplace = settings.api.marketplace
    data: dict[str, Any] = {
        "version": __version__,
        "marketplace_api_configured": marketplace.is_configured,
        "use_api_data": settings.comparison.use_api_data,
        "census_daily_budget": settings.api.census.max_daily_requests,
        "cache_ttl": settings.cache.model_dump(),
    }
    if state:
        info = get_marketplace_info(state)
        data["state"] = {
            "state": state.upper(),
            "marketplace_type": info.type,
            "marketplace_name": info.name,
            "supports_api": info.supports_api,
            "website": info.website,
            "reason": info.reason,
        }
    return data


@app.command("status")
def status_command(
    ctx: typer.Context,
    state: str | None = typer.Option(None, "--state", help="Show marketplace details for a state"),
    json_output: bool = typer.Option(False, "--json", help="Output results in JSON format"),
) -> None:
    """Show configuration and marketplace availability."""
    settings: Settings = ctx.obj
    data = _status_data(settings, state)

    if json_output:
        _echo_json(format_success_output("status", data))
        return

    table = Table(title="dpccompare status", show_header=False)
    table.add_column("Setting", style="bold")
    table.add_column("Value")
    table.add_row("Version", data["version"])
    table.add_row("Healthcare.gov API", "configured" if data["marketplace_api_configured"] else "not configured")
    table.add_row("Live data enabled", str(data["use_api_data"]))
    table.add_row("Census daily budget", str(data["census_daily_budget"]))
    for name, ttl in data["cache_ttl"].items():
        table.add_row(f"Cache TTL ({name})", f"{ttl}s")
    if "state" in data:
        info = data["state"]
        table.add_row("State", info["state"])
        table.add_row("Marketplace", f"{info['marketplace_name']} ({info['marketplace_type'].value})")
        table.add_row("Live plan data", "available" if info["supports_api"] else "estimates only")
        if info["reason"]:
            table.add_row("Note", info["reason"])
    console.print(table)


if __name__ == "__main__":
    app()
