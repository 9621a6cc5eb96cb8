import json
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Optional

from sqlalchemy import Column, Numeric, Text
from sqlmodel import Field, SQLModel

from .schemas import ChargeRecord


def DecimalColumn(scale: int = 4, precision: int = 18, nullable: bool = True):
    return Column(Numeric(precision, scale), nullable=nullable)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TariffService(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    key: str = Field(nullable=False, index=True)  # Apartment / Business Apartment / KIOS
    fee_per_m2: Decimal = Field(sa_column=DecimalColumn(nullable=False))
    vat_percent: Decimal = Field(sa_column=DecimalColumn(nullable=False))
    valid_from: date
    valid_to: Optional[date] = None
    # rows are read back in this order so "first match wins" is stable
    sort_order: int = Field(default=0)


class TariffParking(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    tier: str = Field(nullable=False, index=True)
    price_per_unit: Decimal = Field(sa_column=DecimalColumn(nullable=False))
    vat_percent: Decimal = Field(sa_column=DecimalColumn(nullable=False))
    valid_from: date
    valid_to: Optional[date] = None
    sort_order: int = Field(default=0)


class TariffWater(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    segment: str = Field(default="residential", nullable=False)
    from_m3: Decimal = Field(sa_column=DecimalColumn(nullable=False))
    to_m3: Optional[Decimal] = Field(default=None, sa_column=DecimalColumn())
    unit_price: Decimal = Field(sa_column=DecimalColumn(nullable=False))
    vat_percent: Decimal = Field(sa_column=DecimalColumn(nullable=False))
    valid_from: date
    valid_to: Optional[date] = None
    sort_order: int = Field(default=0)


class Charge(SQLModel, table=True):
    # "{period}_{unit_id}"; recalculating a unit overwrites its row
    key: str = Field(primary_key=True)
    period: str = Field(nullable=False, index=True)
    unit_id: str = Field(nullable=False, index=True)
    owner_name: str
    phone: str = ""
    email: str = ""
    area_m2: float = 0.0

    service_net: int = 0
    service_vat: int = 0
    service_total: int = 0

    car_count: int = 0
    compact_car_count: int = 0
    moto_count: int = 0
    bicycle_count: int = 0
    parking_net: int = 0
    parking_vat: int = 0
    parking_total: int = 0

    water_m3: float = 0.0
    water_net: int = 0
    water_vat: int = 0
    water_total: int = 0

    adjustments: int = 0
    total_due: int = 0
    data_gaps: Optional[str] = Field(default=None, sa_column=Column("data_gaps", Text, nullable=True))
    created_at: datetime = Field(default_factory=_utcnow)

    @classmethod
    def from_record(cls, rec: ChargeRecord) -> "Charge":
        values = rec.model_dump(exclude={"data_gaps"})
        return cls(key=rec.key, data_gaps=json.dumps(rec.data_gaps), **values)

    def to_record(self) -> ChargeRecord:
        values = self.model_dump(exclude={"key", "created_at", "data_gaps"})
        return ChargeRecord(data_gaps=json.loads(self.data_gaps) if self.data_gaps else [], **values)
