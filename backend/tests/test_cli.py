"""CLI bootstrap commands."""

from rentpos.extensions import db
from rentpos.models import Employee, Product, RentalProduct


def test_system_init_is_idempotent(app):
    runner = app.test_cli_runner()

    result = runner.invoke(args=["system", "init"])
    assert result.exit_code == 0, result.output
    assert "DONE Store Initialized Successfully!" in result.output

    result = runner.invoke(args=["system", "init"])
    assert result.exit_code == 0
    assert "0 products and 0 rental products created" in result.output

    assert db.session.query(Product).count() == 18
    assert db.session.query(RentalProduct).count() == 11
    positions = {e.username: e.position for e in db.session.query(Employee)}
    assert positions == {"harry_admin": "Admin", "debra_cashier": "Cashier"}


def test_employees_create_and_list(app):
    runner = app.test_cli_runner()

    result = runner.invoke(args=[
        "employees", "create",
        "--username", "jane_doe",
        "--name", "Jane Doe",
        "--password", "Password123!",
        "--position", "Cashier",
    ])
    assert result.exit_code == 0, result.output

    result = runner.invoke(args=["employees", "list"])
    assert "jane_doe" in result.output


def test_employees_create_rejects_weak_password(app):
    runner = app.test_cli_runner()
    result = runner.invoke(args=[
        "employees", "create",
        "--username", "jane_doe",
        "--name", "Jane Doe",
        "--password", "weak",
        "--position", "Cashier",
    ])
    assert result.exit_code != 0
    assert "at least 8 characters" in result.output
