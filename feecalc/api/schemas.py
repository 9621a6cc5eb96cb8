from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from ..billing import CalculationInput
from ..periods import parse_period
from ..schemas import ChargeRecord, WaterReading
from ..tariffs import TariffSnapshot


class ReferencePayload(BaseModel):
    water_readings: List[WaterReading] = []
    tariffs: Optional[TariffSnapshot] = Field(
        None, description="Tariff snapshot to price against; the stored set when omitted"
    )


class CalculationRequest(BaseModel):
    period: str = Field(..., description="Billing period, YYYY-MM")
    inputs: List[CalculationInput] = []
    reference: ReferencePayload = ReferencePayload()

    @field_validator("period")
    @classmethod
    def check_period(cls, v: str) -> str:
        parse_period(v)
        return v


class CommitResponse(BaseModel):
    written: int
    keys: List[str]


class AuditRequest(BaseModel):
    records: List[ChargeRecord]
    water_readings: List[WaterReading] = []


class TariffReplaceResponse(BaseModel):
    rows: int
