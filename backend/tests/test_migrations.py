"""Alembic migrations build the same schema as the models."""

import sqlalchemy as sa
from flask_migrate import downgrade, upgrade

from rentpos import create_app
from rentpos.extensions import db
from rentpos.models import Product, RentalProduct
from rentpos.seed import seed_catalog


def _migrated_app(tmp_path):
    return create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': f"sqlite:///{tmp_path / 'migrated.db'}",
        'BCRYPT_ROUNDS': 4,
    })


def test_upgrade_matches_models(tmp_path):
    app = _migrated_app(tmp_path)
    with app.app_context():
        upgrade()

        inspector = sa.inspect(db.engine)
        tables = set(inspector.get_table_names()) - {"alembic_version"}
        assert tables == set(db.metadata.tables)

        for table in db.metadata.sorted_tables:
            columns = {column["name"] for column in inspector.get_columns(table.name)}
            assert columns == set(table.columns.keys()), table.name

        db.session.remove()
        db.engine.dispose()


def test_seed_runs_on_migrated_schema(tmp_path):
    app = _migrated_app(tmp_path)
    with app.app_context():
        upgrade()

        assert seed_catalog() == (18, 11)
        assert db.session.query(Product).count() == 18
        assert db.session.get(RentalProduct, "1010").created_at is not None

        db.session.remove()
        downgrade(revision="base")
        assert set(sa.inspect(db.engine).get_table_names()) <= {"alembic_version"}
        db.engine.dispose()
