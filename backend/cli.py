"""
Gaon Zaika CLI.

Command-line interface for operational tasks: delivery assignment,
admin accounts, seeding and health checks.
"""

import sys
import time

import typer
from rich.console import Console
from rich.table import Table

app = typer.Typer(
    name="gaon-zaika",
    help="Gaon Zaika food delivery backend CLI",
    add_completion=False,
)
console = Console()

API_VERSION = "1.0.0"


# =============================================================================
# Delivery Commands
# =============================================================================

@app.command()
def assign_deliveries():
    """Run one delivery assignment sweep and show the outcome per order."""
    from rest_api.services.assignment_sweeper import run_sweep_once
    from shared.config.constants import AssignmentOutcome

    summary = run_sweep_once()
    if not summary.scanned:
        console.print("[yellow]No unassigned orders out for delivery[/yellow]")
        return

    table = Table(title="Delivery Assignment Sweep")
    table.add_column("Order", style="cyan")
    table.add_column("Outcome", style="green")
    table.add_column("Courier", style="magenta")
    table.add_column("Distance (km)", style="yellow")

    for result in summary.results:
        table.add_row(
            str(result.order_id),
            result.outcome,
            str(result.delivery_person_id) if result.delivery_person_id else "-",
            f"{result.distance_km:.2f}" if result.distance_km is not None else "-",
        )

    console.print(table)
    assigned = summary.count(AssignmentOutcome.ASSIGNED)
    console.print(f"[green]✓ Assigned {assigned} of {summary.scanned} orders[/green]")


# =============================================================================
# Database Commands
# =============================================================================

@app.command()
def create_admin(
    email: str = typer.Option(..., prompt=True, help="Admin email"),
    name: str = typer.Option("Admin", help="Display name"),
    password: str = typer.Option(..., prompt=True, hide_input=True, confirmation_prompt=True),
):
    """Create an admin account."""
    from sqlalchemy import select

    from rest_api.models import Admin, Base
    from shared.config.constants import ADMIN_PERMISSIONS
    from shared.infrastructure.db import engine, get_db_context, safe_commit
    from shared.security.password import hash_password

    if len(password) < 6:
        console.print("[red]✗ Password must be at least 6 characters[/red]")
        raise typer.Exit(1)

    Base.metadata.create_all(bind=engine)
    email = email.strip().lower()
    with get_db_context() as db:
        if db.scalar(select(Admin.id).where(Admin.email == email)):
            console.print(f"[red]✗ Admin already exists: {email}[/red]")
            raise typer.Exit(1)

        db.add(
            Admin(
                name=name,
                email=email,
                password_hash=hash_password(password),
                permissions=list(ADMIN_PERMISSIONS),
                email_verified=True,
            )
        )
        safe_commit(db)

    console.print(f"[green]✓ Admin created: {email}[/green]")


@app.command()
def seed(
    sample: bool = typer.Option(True, "--sample/--no-sample", help="Include demo restaurants and couriers"),
    force: bool = typer.Option(False, "--force", "-f", help="Allow seeding in production"),
):
    """Create tables, the default admin and (optionally) demo data."""
    from rest_api.models import Base
    from rest_api.seed import seed as seed_database
    from shared.config.settings import settings
    from shared.infrastructure.db import engine, get_db_context

    if settings.environment == "production" and not force:
        console.print("[red]Cannot seed production without --force[/red]")
        raise typer.Exit(1)

    console.print(f"[blue]Seeding database for: {settings.environment}[/blue]")
    Base.metadata.create_all(bind=engine)
    with get_db_context() as db:
        seed_database(db, sample_data=sample)
    console.print("[green]✓ Seeding complete[/green]")


# =============================================================================
# Health Commands
# =============================================================================

@app.command()
def health(
    url: str = typer.Option("http://localhost:8000/api/health", help="REST API health URL"),
):
    """Check database connectivity and the running API."""
    import httpx
    from sqlalchemy import text
    from sqlalchemy.exc import SQLAlchemyError

    from shared.infrastructure.db import get_db_context

    table = Table(title="Service Health")
    table.add_column("Service", style="cyan")
    table.add_column("Status", style="green")
    table.add_column("Response Time", style="yellow")

    start = time.time()
    try:
        with get_db_context() as db:
            db.execute(text("SELECT 1"))
        table.add_row("Database", "✓ Healthy", f"{(time.time() - start) * 1000:.0f}ms")
    except SQLAlchemyError as e:
        table.add_row("Database", f"✗ {type(e).__name__}", "-")

    start = time.time()
    try:
        response = httpx.get(url, timeout=5.0)
        elapsed = (time.time() - start) * 1000
        if response.status_code == 200:
            table.add_row("REST API", "✓ Healthy", f"{elapsed:.0f}ms")
        else:
            table.add_row("REST API", f"✗ Status {response.status_code}", f"{elapsed:.0f}ms")
    except httpx.HTTPError as e:
        table.add_row("REST API", f"✗ {type(e).__name__}", "-")

    console.print(table)


@app.command()
def version():
    """Show version information."""
    table = Table(title="Gaon Zaika Version")
    table.add_column("Component", style="cyan")
    table.add_column("Version", style="green")

    table.add_row("API", API_VERSION)
    table.add_row("Python", sys.version.split()[0])

    console.print(table)


if __name__ == "__main__":
    app()
