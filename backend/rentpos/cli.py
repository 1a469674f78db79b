# Overview: Flask CLI command groups for bootstrap and employee administration.

# backend/rentpos/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init
#   Idempotent bootstrap: creates tables, default catalog and default employees.
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Employee inspection/bootstrap:
# - python -m flask employees list
#   List all employees with their positions.
# - python -m flask employees create --username jane_doe --name "Jane Doe" --password "Password123!" --position Cashier
#   Create an employee (prompts if options are omitted).

import click
from flask.cli import with_appcontext

from .errors import ValidationError
from .extensions import db
from .models.employees import POSITIONS
from .seed import DEFAULT_EMPLOYEES, DEFAULT_PASSWORD, seed_catalog, seed_employees
from .services import employee_service


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init')
@with_appcontext
def init_system():
    """
    Initialize the store: schema, default catalog and default employees.

    Creates:
    - Grocery, electronics and clothing products
    - Movie, book and equipment rentals
    - Employees: harry_admin (Admin), debra_cashier (Cashier)
    - All passwords default to: "Password123!"

    SECURITY: Change passwords immediately in production!
    """
    click.echo("START Initializing store...")

    db.create_all()
    click.echo("PASS Schema ready")

    products, rentals = seed_catalog()
    click.echo(f"PASS Catalog: {products} products and {rentals} rental products created")

    click.echo("\nUSERS Creating default employees...")
    try:
        created = seed_employees()
    except ValidationError as e:
        click.echo(f"FAIL Could not create default employees: {e.message}")
        return
    for employee in created:
        click.echo(f"PASS Created employee: {employee.username} ({employee.position})")
    if not created:
        click.echo("WARN  Default employees already exist, skipping...")

    click.echo("\n" + "="*60)
    click.echo("DONE Store Initialized Successfully!")
    click.echo("="*60)
    click.echo("\nDefault Credentials (CHANGE IN PRODUCTION!):")
    for username, _, position in DEFAULT_EMPLOYEES:
        click.echo(f"   {username:<15} / {DEFAULT_PASSWORD}   ({position})")
    click.echo("")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """
    DANGER: Drop all tables and recreate schema.

    This will DELETE ALL DATA!
    """
    if not yes:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)

    click.echo("DELETE  Dropping all tables...")
    db.drop_all()

    click.echo("BUILD  Creating all tables...")
    db.create_all()

    click.echo("PASS Database reset complete. Run 'python -m flask system init' to initialize.")


# =============================================================================
# EMPLOYEE COMMANDS
# =============================================================================

@click.group('employees')
def employees_group():
    """Employee inspection and bootstrap commands."""


@employees_group.command('create')
@click.option('--username', prompt=True, help='Username')
@click.option('--name', prompt=True, help='Full name')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
@click.option('--position', type=click.Choice(list(POSITIONS)), prompt=True, help='Position')
@with_appcontext
def create_employee_cli(username, name, password, position):
    """
    Create a new employee.

    Password must meet strength requirements:
    - Minimum 8 characters
    - At least one uppercase letter
    - At least one lowercase letter
    - At least one digit
    - At least one special character
    """
    try:
        employee = employee_service.create_employee(username, name, password, position)
    except ValidationError as e:
        raise click.ClickException(e.message)

    click.echo(f"PASS Created employee: {employee.username} ({employee.position}, ID: {employee.id})")


@employees_group.command('list')
@with_appcontext
def list_employees_cli():
    """List all employees with their positions."""
    employees = employee_service.list_employees()

    if not employees:
        click.echo("No employees found.")
        return

    click.echo("\n" + "="*70)
    click.echo(f"{'ID':<5} {'Username':<20} {'Name':<30} {'Position'}")
    click.echo("="*70)

    for employee in employees:
        click.echo(f"{employee.id:<5} {employee.username:<20} {employee.name:<30} {employee.position}")

    click.echo("="*70 + "\n")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(employees_group)
