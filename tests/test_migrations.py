import importlib.util
from pathlib import Path

from alembic.migration import MigrationContext
from alembic.operations import Operations
from sqlalchemy import create_engine, inspect

from app.database.database import Base

VERSIONS = Path(__file__).resolve().parent.parent / "app" / "database" / "migrations" / "versions"


def load_revisions():
    modules = {}
    for path in VERSIONS.glob("*.py"):
        spec = importlib.util.spec_from_file_location(f"revision_{path.stem}", path)
        module = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(module)
        modules[module.revision] = module

    ordered, down = [], None
    while len(ordered) < len(modules):
        module = next(m for m in modules.values() if m.down_revision == down)
        ordered.append(module)
        down = module.revision
    return ordered


def test_revisions_form_a_single_chain():
    revisions = load_revisions()

    assert revisions[0].down_revision is None
    assert [m.revision for m in revisions] == ["3854834d3c61", "392349af8917", "a71c4091cc61"]


def test_upgrade_matches_models():
    engine = create_engine("sqlite://")
    with engine.begin() as conn:
        with Operations.context(MigrationContext.configure(conn)):
            for module in load_revisions():
                module.upgrade()
        inspector = inspect(conn)

        for table in Base.metadata.sorted_tables:
            migrated = {column["name"] for column in inspector.get_columns(table.name)}
            assert migrated == set(table.columns.keys()), table.name

        assert inspector.get_pk_constraint("friends")["constrained_columns"] == ["user_id", "friend_id"]


def test_downgrade_drops_everything():
    engine = create_engine("sqlite://")
    with engine.begin() as conn:
        with Operations.context(MigrationContext.configure(conn)):
            revisions = load_revisions()
            for module in revisions:
                module.upgrade()
            for module in reversed(revisions):
                module.downgrade()

        assert inspect(conn).get_table_names() == []
