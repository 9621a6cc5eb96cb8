from fastapi import APIRouter, HTTPException
from sqlmodel import Session

from ..db import engine
from ..store import TariffDataError, load_tariff_snapshot, replace_tariffs
from ..tariffs import TariffSnapshot
from .schemas import TariffReplaceResponse

router = APIRouter(prefix="/api/v1/tariffs", tags=["tariffs"])


@router.get("/", response_model=TariffSnapshot)
def get_tariffs():
    with Session(engine) as session:
        try:
            return load_tariff_snapshot(session)
        except TariffDataError as exc:
            raise HTTPException(status_code=500, detail=str(exc))


@router.put("/", response_model=TariffReplaceResponse)
def put_tariffs(payload: TariffSnapshot):
    with Session(engine) as session:
        rows = replace_tariffs(session, payload)
    return {"rows": rows}
