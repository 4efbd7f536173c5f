from __future__ import annotations

import importlib.util
from pathlib import Path
from types import ModuleType

import sqlalchemy as sa
from alembic.migration import MigrationContext
from alembic.operations import Operations

import school_records.db.models  # noqa: F401
from school_records.db import Base

VERSIONS_DIR = Path(__file__).resolve().parents[1] / "db" / "migrations" / "versions"


def load_migration(name: str) -> ModuleType:
    spec = importlib.util.spec_from_file_location(name, VERSIONS_DIR / f"{name}.py")
    assert spec is not None and spec.loader is not None
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def run(engine: sa.Engine, step) -> None:
    with engine.begin() as conn:
        context = MigrationContext.configure(conn)
        with Operations.context(context):
            step()


def test_initial_migration_matches_models(tmp_path) -> None:
    engine = sa.create_engine(f"sqlite:///{tmp_path / 'migrated.db'}")
    migration = load_migration("20250301_000001_initial_schema")
    assert migration.down_revision is None

    run(engine, migration.upgrade)

    inspector = sa.inspect(engine)
    assert set(inspector.get_table_names()) == set(Base.metadata.tables)
    for table in Base.metadata.sorted_tables:
        reflected = {column["name"] for column in inspector.get_columns(table.name)}
        assert reflected == {column.name for column in table.columns}, table.name

    assert {item["name"] for item in inspector.get_unique_constraints("streams")} == {
        "uq_streams_name",
        "uq_streams_teacherId",
    }
    student_fks = {item["name"] for item in inspector.get_foreign_keys("students")}
    assert "fk_students_streamId_streams" in student_fks

    run(engine, migration.downgrade)

    assert sa.inspect(engine).get_table_names() == []
