from sqlmodel import Session

from feecalc.db import engine, init_db
from feecalc.store import replace_tariffs
from feecalc.tariffs import REFERENCE_TARIFFS

init_db()
with Session(engine) as s:
    rows = replace_tariffs(s, REFERENCE_TARIFFS)
print("seeded", rows, "tariff rows")
