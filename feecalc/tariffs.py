"""Tariff variants and the immutable snapshot the fee engine prices against.

Each tariff kind is its own model with a ``kind`` discriminator so raw rows
coming from storage or an API payload are validated into exactly one
variant. The engine never reads tariffs from anywhere but a
``TariffSnapshot`` passed in by the caller.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Tuple, Union

from pydantic import Field, TypeAdapter, model_validator

from .schemas import FrozenModel, Occupancy, Unit, UnitKind


class ServiceTariffKey(str, Enum):
    apartment = "Apartment"
    business_apartment = "Business Apartment"
    kiosk = "KIOS"


class ParkingTier(str, Enum):
    car = "Car"
    compact_car = "Car-A"
    moto_first_two = "Moto12"
    moto_beyond_two = "Moto34"
    bicycle = "Bicycle"


class WaterSegment(str, Enum):
    residential = "residential"
    commercial = "commercial"


class _TariffBase(FrozenModel):
    vat_percent: Decimal = Field(..., ge=0, le=100)
    valid_from: date
    valid_to: Optional[date] = None

    @model_validator(mode="after")
    def check_window(self):
        if self.valid_to is not None and self.valid_to < self.valid_from:
            raise ValueError("valid_to is before valid_from")
        return self

    def is_valid_on(self, day: date) -> bool:
        return self.valid_from <= day and (self.valid_to is None or day <= self.valid_to)


class ServiceTariff(_TariffBase):
    kind: Literal["service"] = "service"
    key: ServiceTariffKey
    fee_per_m2: Decimal = Field(..., ge=0)


class ParkingTariff(_TariffBase):
    kind: Literal["parking"] = "parking"
    tier: ParkingTier
    price_per_unit: Decimal = Field(..., ge=0)


class WaterTariff(_TariffBase):
    kind: Literal["water"] = "water"
    segment: WaterSegment = WaterSegment.residential
    from_m3: Decimal = Field(..., ge=0)
    to_m3: Optional[Decimal] = None  # None = open-ended
    unit_price: Decimal = Field(..., ge=0)

    @model_validator(mode="after")
    def check_band(self):
        if self.to_m3 is not None and self.to_m3 < self.from_m3:
            raise ValueError("to_m3 is below from_m3")
        return self


Tariff = Annotated[
    Union[ServiceTariff, ParkingTariff, WaterTariff], Field(discriminator="kind")
]

_tariff_adapter: TypeAdapter = TypeAdapter(Tariff)


def parse_tariff(raw: Dict[str, Any]):
    """Validate one raw tariff row into its variant (raises ValidationError)."""
    return _tariff_adapter.validate_python(raw)


def service_key_for(unit: Unit) -> ServiceTariffKey:
    if unit.kind == UnitKind.kiosk:
        return ServiceTariffKey.kiosk
    if unit.occupancy == Occupancy.business:
        return ServiceTariffKey.business_apartment
    return ServiceTariffKey.apartment


class TariffSnapshot(FrozenModel):
    service: Tuple[ServiceTariff, ...] = ()
    parking: Tuple[ParkingTariff, ...] = ()
    water: Tuple[WaterTariff, ...] = ()

    @classmethod
    def from_rows(cls, rows: List[Dict[str, Any]]) -> "TariffSnapshot":
        service, parking, water = [], [], []
        for raw in rows:
            t = parse_tariff(raw)
            if t.kind == "service":
                service.append(t)
            elif t.kind == "parking":
                parking.append(t)
            else:
                water.append(t)
        return cls(service=tuple(service), parking=tuple(parking), water=tuple(water))

    def rows(self) -> List[Dict[str, Any]]:
        return [t.model_dump(mode="json") for t in (*self.service, *self.parking, *self.water)]

    def effective_on(self, day: date) -> "TariffSnapshot":
        """Keep only the rows whose validity window contains ``day``."""
        return TariffSnapshot(
            service=tuple(t for t in self.service if t.is_valid_on(day)),
            parking=tuple(t for t in self.parking if t.is_valid_on(day)),
            water=tuple(t for t in self.water if t.is_valid_on(day)),
        )

    # lookups: first match wins when several versions are present

    def service_for(self, key: ServiceTariffKey) -> Optional[ServiceTariff]:
        return next((t for t in self.service if t.key == key), None)

    def parking_for(self, tier: ParkingTier) -> Optional[ParkingTariff]:
        return next((t for t in self.parking if t.tier == tier), None)

    def residential_bands(self) -> List[WaterTariff]:
        bands = [t for t in self.water if t.segment == WaterSegment.residential]
        return sorted(bands, key=lambda t: t.from_m3)

    def commercial_rate(self) -> Optional[WaterTariff]:
        flat = next(
            (t for t in self.water if t.segment == WaterSegment.commercial and t.to_m3 is None),
            None,
        )
        if flat is not None:
            return flat
        # no dedicated commercial row: the open residential band is the business rate
        return next((t for t in self.residential_bands() if t.to_m3 is None), None)


_REF_FROM = date(2025, 1, 1)

REFERENCE_TARIFFS = TariffSnapshot(
    service=(
        ServiceTariff(key=ServiceTariffKey.apartment, fee_per_m2=3500, vat_percent=10, valid_from=_REF_FROM),
        ServiceTariff(key=ServiceTariffKey.business_apartment, fee_per_m2=5000, vat_percent=10, valid_from=_REF_FROM),
        ServiceTariff(key=ServiceTariffKey.kiosk, fee_per_m2=11000, vat_percent=10, valid_from=_REF_FROM),
    ),
    parking=(
        ParkingTariff(tier=ParkingTier.car, price_per_unit=860000, vat_percent=8, valid_from=_REF_FROM),
        ParkingTariff(tier=ParkingTier.compact_car, price_per_unit=800000, vat_percent=8, valid_from=_REF_FROM),
        ParkingTariff(tier=ParkingTier.moto_first_two, price_per_unit=60000, vat_percent=8, valid_from=_REF_FROM),
        ParkingTariff(tier=ParkingTier.moto_beyond_two, price_per_unit=80000, vat_percent=8, valid_from=_REF_FROM),
        ParkingTariff(tier=ParkingTier.bicycle, price_per_unit=30000, vat_percent=8, valid_from=_REF_FROM),
    ),
    water=(
        WaterTariff(from_m3=0, to_m3=10, unit_price=9310, vat_percent=5, valid_from=_REF_FROM),
        WaterTariff(from_m3=11, to_m3=20, unit_price=10843, vat_percent=5, valid_from=_REF_FROM),
        WaterTariff(from_m3=21, to_m3=30, unit_price=17524, vat_percent=5, valid_from=_REF_FROM),
        WaterTariff(from_m3=31, to_m3=None, unit_price=29571, vat_percent=5, valid_from=_REF_FROM),
        WaterTariff(
            segment=WaterSegment.commercial,
            from_m3=0,
            to_m3=None,
            unit_price=31050,
            vat_percent=5,
            valid_from=_REF_FROM,
        ),
    ),
)
