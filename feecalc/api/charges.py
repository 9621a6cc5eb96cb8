import logging
from typing import List

from fastapi import APIRouter, HTTPException
from sqlmodel import Session

from ..audit import AuditFinding, audit_charges
from ..batches import run_in_batches
from ..billing import InvalidUnitDataError, MissingTariffError, ReferenceData
from ..db import engine
from ..periods import parse_period
from ..schemas import ChargeRecord
from ..store import TariffDataError, list_charge_records, load_tariff_snapshot, save_charge_records
from .schemas import AuditRequest, CalculationRequest, CommitResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/charges", tags=["charges"])


def _reference(payload: CalculationRequest) -> ReferenceData:
    tariffs = payload.reference.tariffs
    if tariffs is None:
        with Session(engine) as session:
            try:
                tariffs = load_tariff_snapshot(session)
            except TariffDataError as exc:
                logger.error("stored tariffs unusable: %s", exc)
                raise HTTPException(status_code=500, detail="stored tariff data is invalid")
    return ReferenceData(water_readings=payload.reference.water_readings, tariffs=tariffs)


def _calculate(payload: CalculationRequest, strict: bool) -> List[ChargeRecord]:
    reference = _reference(payload)
    try:
        return run_in_batches(payload.period, payload.inputs, reference, strict=strict)
    except MissingTariffError as exc:
        raise HTTPException(status_code=409, detail={"unit_id": exc.unit_id, "missing": exc.missing})
    except InvalidUnitDataError as exc:
        raise HTTPException(status_code=422, detail=str(exc))


@router.post("/calculate", response_model=List[ChargeRecord])
def calculate_charges(payload: CalculationRequest, strict: bool = False):
    return _calculate(payload, strict)


@router.post("/commit", response_model=CommitResponse)
def commit_charges(payload: CalculationRequest, strict: bool = False):
    records = _calculate(payload, strict)
    with Session(engine) as session:
        keys = save_charge_records(session, records)
    logger.info("stored %d charge records for %s", len(keys), payload.period)
    return {"written": len(keys), "keys": keys}


@router.get("/", response_model=List[ChargeRecord])
def list_charges(period: str):
    try:
        parse_period(period)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    with Session(engine) as session:
        return list_charge_records(session, period)


@router.post("/audit", response_model=List[AuditFinding])
def audit(payload: AuditRequest):
    return audit_charges(payload.records, payload.water_readings)
