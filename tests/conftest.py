import os
from pathlib import Path

import pytest
from alembic import command
from alembic.config import Config

ROOT = Path(__file__).resolve().parent.parent

# Module-level setup: ensure env var is set before test modules import `feecalc`.
data_dir = ROOT / "data"
data_dir.mkdir(exist_ok=True)
test_db_path = data_dir / "test.db"
if test_db_path.exists():
    test_db_path.unlink()

test_db_url = f"sqlite:///{test_db_path.as_posix()}"
os.environ["DATABASE_URL"] = test_db_url

# Run alembic migrations once at import time so `feecalc` imports see the schema.
cfg = Config(str(ROOT / "alembic.ini"))
cfg.set_main_option("script_location", str(ROOT / "alembic"))
cfg.set_main_option("sqlalchemy.url", test_db_url)
command.upgrade(cfg, "head")


@pytest.fixture(scope="session", autouse=True)
def prepare_test_db():
    """Session-scoped fixture available to tests; cleanup happens after session."""
    yield
    from feecalc.db import engine

    engine.dispose()
    for suffix in ("", "-wal", "-shm"):
        p = Path(f"{test_db_path}{suffix}")
        if p.exists():
            p.unlink()
