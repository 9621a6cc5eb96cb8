from __future__ import annotations

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .periods import parse_period


class UnitKind(str, Enum):
    apartment = "Apartment"
    kiosk = "KIOS"


class Occupancy(str, Enum):
    owner = "Owner"
    rented = "Rent"
    business = "Business"


class VehicleType(str, Enum):
    car = "car"
    compact_car = "car_a"
    motorbike = "motorbike"
    ebike = "ebike"  # billed together with motorbikes
    bicycle = "bicycle"


class ParkingSlot(str, Enum):
    primary = "primary"
    secondary = "secondary"
    waitlisted = "waitlisted"


def _check_period(value: str) -> str:
    parse_period(value)
    return value


class FrozenModel(BaseModel):
    model_config = ConfigDict(frozen=True, from_attributes=True)


class Unit(FrozenModel):
    unit_id: str
    owner_id: str
    kind: UnitKind = UnitKind.apartment
    area_m2: Decimal = Field(..., ge=0, description="Floor area in m2")
    occupancy: Occupancy = Occupancy.owner

    @property
    def is_business(self) -> bool:
        return self.kind == UnitKind.kiosk or self.occupancy == Occupancy.business


class Owner(FrozenModel):
    owner_id: str
    name: str
    phone: str = ""
    email: str = ""


class Vehicle(FrozenModel):
    vehicle_id: str
    unit_id: str
    type: VehicleType
    is_active: bool = True
    start_date: date
    parking_slot: Optional[ParkingSlot] = None
    plate: Optional[str] = None


class WaterReading(FrozenModel):
    unit_id: str
    period: str
    consumption_m3: Decimal = Field(..., ge=0)

    @field_validator("period")
    @classmethod
    def check_period(cls, v: str) -> str:
        return _check_period(v)


class Adjustment(FrozenModel):
    unit_id: str
    period: str
    amount: int = Field(..., description="positive = surcharge, negative = credit")
    description: str = ""

    @field_validator("period")
    @classmethod
    def check_period(cls, v: str) -> str:
        return _check_period(v)


class FeeBreakdown(FrozenModel):
    net: int = 0
    vat: int = 0
    gross: int = 0
    # tariff keys that were needed but not configured
    missing: List[str] = []


class VehicleCounts(FrozenModel):
    car: int = 0
    compact_car: int = 0
    moto: int = 0
    bicycle: int = 0


class ParkingBreakdown(FeeBreakdown):
    counts: VehicleCounts = VehicleCounts()


class WaterBreakdown(FeeBreakdown):
    usage_m3: Decimal = Decimal("0")
    has_reading: bool = False


class ChargeRecord(FrozenModel):
    period: str
    unit_id: str
    owner_name: str
    phone: str
    email: str
    area_m2: float

    service_net: int
    service_vat: int
    service_total: int

    car_count: int
    compact_car_count: int
    moto_count: int
    bicycle_count: int
    parking_net: int
    parking_vat: int
    parking_total: int

    water_m3: float
    water_net: int
    water_vat: int
    water_total: int

    adjustments: int
    total_due: int
    data_gaps: List[str] = []

    @property
    def key(self) -> str:
        return f"{self.period}_{self.unit_id}"
