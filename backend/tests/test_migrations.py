from pathlib import Path

from arena.core.database import Base

INITIAL_MIGRATION = Path(__file__).resolve().parents[1] / "alembic" / "versions" / "202610190001_initial.py"


def test_initial_migration_creates_every_model_index():
    source = INITIAL_MIGRATION.read_text()

    for table in Base.metadata.sorted_tables:
        assert f'"{table.name}"' in source
        for index in table.indexes:
            assert f'op.create_index("{index.name}", "{table.name}"' in source, index.name
