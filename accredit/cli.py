"""
ACCREDIT CLI - operator commands for credential verification

Runs the same verification entry points as the HTTP API.  Without
``--coach-id`` the attempt uses a temporary coach id, so nothing is written
to the coach records or the credential cache.
"""
import json

import click
from rich.console import Console
from rich.table import Table

from accredit.config import get_config
from accredit.models import TEMP_COACH_PREFIX, VerificationResult
from accredit.storage import SqlStorage
from accredit.utils import get_logger, setup_logging
from accredit.verification import get_service

console = Console()
logger = get_logger(__name__)

_DEFAULT_COACH_ID = f"{TEMP_COACH_PREFIX}cli"


def _run(status: str, as_json: bool, verify, *args, **kwargs) -> VerificationResult:
    """Call a verification entry point, with a spinner unless printing JSON"""
    if as_json:
        return verify(*args, **kwargs)
    with console.status(status):
        return verify(*args, **kwargs)


def _show(result: VerificationResult, as_json: bool) -> None:
    """Print a verdict as JSON or as a rich table"""
    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        return

    if result.verified:
        console.print(f"\n[bold green]✓ Verified[/bold green] ({result.confidence}% confidence)")
    elif result.pending_manual_review:
        console.print(f"\n[bold yellow]… Pending manual review[/bold yellow] ({result.confidence}% confidence)")
    else:
        console.print(f"\n[bold red]✗ Not verified[/bold red] ({result.confidence}% confidence)")

    table = Table(title="Verification Result")
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="magenta")

    if result.match_details is not None:
        for field, value in result.match_details.to_dict().items():
            table.add_row(field, value)
    if result.failure is not None:
        table.add_row("failureCode", result.failure.value)
    if result.reason:
        table.add_row("reason", result.reason)

    console.print(table)


# ═══════════════════════════════════════════════════════════════════
# MAIN CLI GROUP
# ═══════════════════════════════════════════════════════════════════

@click.group()
@click.version_option(version='0.1.0')
def main():
    """
    ACCREDIT - Coach credential verification

    Checks EMCC and ICF accreditations against the bodies' public directories.
    """
    config = get_config()
    setup_logging(config.log_level, config.log_file)


# ═══════════════════════════════════════════════════════════════════
# EMCC COMMANDS
# ═══════════════════════════════════════════════════════════════════

@main.command()
@click.argument('full_name')
@click.argument('eia_number')
@click.option('--level', help='Claimed EMCC award level')
@click.option('--country', help='Country shown in the EMCC directory')
@click.option('--coach-id', default=_DEFAULT_COACH_ID, show_default=True, help='Coach record to update')
@click.option('--json', 'as_json', is_flag=True, help='Print the verdict as JSON')
def emcc(full_name, eia_number, level, country, coach_id, as_json):
    """Verify an EMCC accreditation by EIA number"""
    result = _run(
        "[bold green]Checking EMCC directory...", as_json,
        get_service().verify_emcc_reference, coach_id, full_name, eia_number, level=level, country=country)
    _show(result, as_json)


@main.command('emcc-url')
@click.argument('full_name')
@click.argument('profile_url')
@click.option('--level', help='Claimed EMCC award level')
@click.option('--coach-id', default=_DEFAULT_COACH_ID, show_default=True, help='Coach record to update')
@click.option('--json', 'as_json', is_flag=True, help='Print the verdict as JSON')
def emcc_url(full_name, profile_url, level, coach_id, as_json):
    """Verify an EMCC accreditation from a directory search URL"""
    result = _run(
        "[bold green]Fetching EMCC search results...", as_json,
        get_service().verify_emcc_url, coach_id, full_name, profile_url, level=level)
    _show(result, as_json)


# ═══════════════════════════════════════════════════════════════════
# ICF COMMANDS
# ═══════════════════════════════════════════════════════════════════

@main.command('icf-url')
@click.argument('full_name')
@click.argument('profile_url')
@click.option('--location', required=True, help='City, Country as shown on the ICF profile')
@click.option('--level', required=True, type=click.Choice(['ACC', 'PCC', 'MCC', 'ACTC'], case_sensitive=False),
              help='Claimed ICF credential')
@click.option('--coach-id', default=_DEFAULT_COACH_ID, show_default=True, help='Coach record to update')
@click.option('--json', 'as_json', is_flag=True, help='Print the verdict as JSON')
def icf_url(full_name, profile_url, location, level, coach_id, as_json):
    """Verify an ICF credential from a directory search URL"""
    result = _run(
        "[bold green]Fetching ICF search results...", as_json,
        get_service().verify_icf_url, coach_id, full_name, profile_url, location=location, level=level.upper())
    _show(result, as_json)


@main.command()
@click.argument('full_name')
@click.option('--level', required=True, type=click.Choice(['ACC', 'PCC', 'MCC'], case_sensitive=False),
              help='Claimed ICF credential')
@click.option('--country', help='Country, used to key the credential cache')
@click.option('--coach-id', default=_DEFAULT_COACH_ID, show_default=True, help='Coach record to update')
@click.option('--json', 'as_json', is_flag=True, help='Print the verdict as JSON')
def icf(full_name, level, country, coach_id, as_json):
    """Verify an ICF credential by searching the directory by name"""
    result = _run(
        "[bold green]Searching ICF directory...", as_json,
        get_service().verify_icf_name, coach_id, full_name, level=level.upper(), country=country)
    _show(result, as_json)


# ═══════════════════════════════════════════════════════════════════
# DATABASE COMMANDS
# ═══════════════════════════════════════════════════════════════════

@main.command('init-db')
def init_db():
    """Create the credential cache and coach tables"""
    config = get_config()
    if not config.database_url:
        console.print("[yellow]ACCREDIT_DATABASE_URL is not set - using in-memory storage, nothing to create[/yellow]")
        return

    with console.status("[bold green]Creating tables..."):
        SqlStorage(config.database_url).create_all_tables()
    console.print("\n[green]✓ Database initialised[/green]")


# ═══════════════════════════════════════════════════════════════════
# ENTRY POINT
# ═══════════════════════════════════════════════════════════════════

if __name__ == '__main__':
    main()
