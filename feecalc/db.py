from pathlib import Path

from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, create_engine

from . import config

# Base dir = repository root (one level above the package)
BASE_DIR = Path(__file__).resolve().parent.parent

DATA_DIR = BASE_DIR / "data"

# DATABASE_URL overrides the default sqlite file (tests point it at a
# throwaway db). Relative sqlite paths are resolved against the repository
# root so the working directory does not matter.
if config.DATABASE_URL:
    DATABASE_URL = config.DATABASE_URL
else:
    DATA_DIR.mkdir(parents=True, exist_ok=True)
    DATABASE_URL = f"sqlite:///{(DATA_DIR / 'feecalc.db').as_posix()}"

if DATABASE_URL.startswith("sqlite:///"):
    p = Path(DATABASE_URL.replace("sqlite:///", "", 1))
    if not p.is_absolute():
        p = (BASE_DIR / p).resolve()
    p.parent.mkdir(parents=True, exist_ok=True)
    DATABASE_URL = f"sqlite:///{p.as_posix()}"

connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}
engine = create_engine(DATABASE_URL, echo=False, connect_args=connect_args)


@event.listens_for(Engine, "connect")
def _set_sqlite_pragma(dbapi_connection, connection_record):
    if not type(dbapi_connection).__module__.startswith("sqlite3"):
        return
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL;")
    cursor.execute("PRAGMA foreign_keys=ON;")
    cursor.close()


def init_db():
    SQLModel.metadata.create_all(engine)
