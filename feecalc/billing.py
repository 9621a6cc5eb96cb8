import logging
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from . import config
from .money import ZERO, apply_vat, to_decimal
from .periods import period_bounds
from .schemas import (
    Adjustment,
    ChargeRecord,
    FeeBreakdown,
    FrozenModel,
    Owner,
    ParkingBreakdown,
    ParkingSlot,
    Unit,
    Vehicle,
    VehicleCounts,
    VehicleType,
    WaterBreakdown,
    WaterReading,
)
from .tariffs import ParkingTier, TariffSnapshot, service_key_for

logger = logging.getLogger(__name__)

ReadingIndex = Dict[Tuple[str, str], WaterReading]


class InvalidUnitDataError(ValueError):
    pass


class MissingTariffError(LookupError):
    def __init__(self, unit_id: str, missing: Sequence[str]):
        self.unit_id = unit_id
        self.missing = list(missing)
        super().__init__(f"unit {unit_id}: missing tariff(s) {', '.join(self.missing)}")


class CalculationInput(FrozenModel):
    """One unit to bill. Callers must have joined unit, owner and vehicles already."""

    unit: Unit
    owner: Owner
    vehicles: List[Vehicle] = []
    adjustments: List[Adjustment] = []


class ReferenceData(FrozenModel):
    water_readings: List[WaterReading] = []
    tariffs: TariffSnapshot = TariffSnapshot()


def _check_unit(unit: Unit) -> None:
    # models built with model_construct() skip field validation
    if unit.area_m2 is None or unit.area_m2 < 0:
        raise InvalidUnitDataError(
            f"invalid unit data: unit {unit.unit_id} has area {unit.area_m2!r}"
        )


# -- service ----------------------------------------------------------------


def calc_service_fee(unit: Unit, tariffs: TariffSnapshot) -> FeeBreakdown:
    _check_unit(unit)
    key = service_key_for(unit)
    tariff = tariffs.service_for(key)
    if tariff is None:
        return FeeBreakdown(missing=[f"tariff:service:{key.value}"])
    amounts = apply_vat(to_decimal(unit.area_m2) * tariff.fee_per_m2, tariff.vat_percent)
    return FeeBreakdown(**amounts._asdict())


# -- parking ----------------------------------------------------------------


def is_billable(vehicle: Vehicle, period_end: date) -> bool:
    return (
        vehicle.is_active
        and vehicle.start_date <= period_end
        and vehicle.parking_slot != ParkingSlot.waitlisted
    )


def count_vehicles(vehicles: Iterable[Vehicle], period: str) -> VehicleCounts:
    _, period_end = period_bounds(period)
    billable = [v for v in vehicles if is_billable(v, period_end)]
    return VehicleCounts(
        car=sum(1 for v in billable if v.type == VehicleType.car),
        compact_car=sum(1 for v in billable if v.type == VehicleType.compact_car),
        moto=sum(1 for v in billable if v.type in (VehicleType.motorbike, VehicleType.ebike)),
        bicycle=sum(1 for v in billable if v.type == VehicleType.bicycle),
    )


def calc_parking_fee(
    vehicles: Iterable[Vehicle], period: str, tariffs: TariffSnapshot
) -> ParkingBreakdown:
    counts = count_vehicles(vehicles, period)
    # two-wheelers are progressive: the first two at Moto12, the rest at Moto34
    lines = [
        (ParkingTier.car, counts.car),
        (ParkingTier.compact_car, counts.compact_car),
        (ParkingTier.moto_first_two, min(2, counts.moto)),
        (ParkingTier.moto_beyond_two, max(0, counts.moto - 2)),
        (ParkingTier.bicycle, counts.bicycle),
    ]

    net = ZERO
    absent = []
    missing = []
    for tier, qty in lines:
        tariff = tariffs.parking_for(tier)
        if tariff is None:
            absent.append(tier.value)
            if qty:
                missing.append(f"tariff:parking:{tier.value}")
            continue
        net += qty * tariff.price_per_unit
    if absent:
        logger.warning("parking tariffs not configured: %s", ", ".join(absent))

    # one VAT rate for the whole parking line, taken from the car tariff
    car_tariff = tariffs.parking_for(ParkingTier.car)
    vat_percent = car_tariff.vat_percent if car_tariff is not None else config.DEFAULT_PARKING_VAT
    amounts = apply_vat(net, vat_percent)
    return ParkingBreakdown(**amounts._asdict(), counts=counts, missing=missing)


# -- water ------------------------------------------------------------------


def index_readings(readings: Iterable[WaterReading]) -> ReadingIndex:
    index: ReadingIndex = {}
    for r in readings:
        index.setdefault((r.unit_id, r.period), r)
    return index


def find_water_reading(
    unit_id: str, period: str, readings: Union[ReadingIndex, Iterable[WaterReading]]
) -> Optional[WaterReading]:
    if isinstance(readings, Mapping):
        return readings.get((unit_id, period))
    return next((r for r in readings if r.unit_id == unit_id and r.period == period), None)


def _tiered_net(usage: Decimal, bands) -> Decimal:
    """Walk the bands absorbing usage up to each band's upper bound.

    A band holds ``to_m3 - previous to_m3`` cubic metres, so usage that lands
    exactly on a bound stays in the lower band. Usage left over after the last
    bounded band is billed at the open band, if there is one.
    """
    net = ZERO
    remaining = usage
    absorbed = ZERO
    for band in bands:
        if remaining <= 0:
            break
        if band.to_m3 is None:
            take = remaining
        else:
            take = min(remaining, max(ZERO, band.to_m3 - absorbed))
            absorbed = band.to_m3
        net += take * band.unit_price
        remaining -= take
    if remaining > 0:
        logger.debug("%s m3 beyond the last water band left unbilled", remaining)
    return net


def calc_water_fee(
    unit: Unit,
    period: str,
    readings: Union[ReadingIndex, Iterable[WaterReading]],
    tariffs: TariffSnapshot,
) -> WaterBreakdown:
    reading = find_water_reading(unit.unit_id, period, readings)
    if reading is None:
        return WaterBreakdown()

    usage = reading.consumption_m3
    if usage <= 0:
        return WaterBreakdown(has_reading=True)

    if unit.is_business:
        rate = tariffs.commercial_rate()
        if rate is None:
            return WaterBreakdown(usage_m3=usage, has_reading=True, missing=["tariff:water:commercial"])
        amounts = apply_vat(usage * rate.unit_price, rate.vat_percent)
        return WaterBreakdown(**amounts._asdict(), usage_m3=usage, has_reading=True)

    bands = tariffs.residential_bands()
    if not bands:
        return WaterBreakdown(usage_m3=usage, has_reading=True, missing=["tariff:water:residential"])
    amounts = apply_vat(_tiered_net(usage, bands), bands[0].vat_percent)
    return WaterBreakdown(**amounts._asdict(), usage_m3=usage, has_reading=True)


# -- adjustments ------------------------------------------------------------


def sum_adjustments(adjustments: Iterable[Adjustment]) -> int:
    # already tax-settled, no VAT
    return sum((int(a.amount) for a in adjustments), 0)


# -- orchestration ----------------------------------------------------------


def resolve_tariffs(tariffs: TariffSnapshot, period: str, reference: Optional[str] = None) -> TariffSnapshot:
    """Narrow the snapshot to the rows valid for ``period``.

    ``reference`` is ``none`` (keep every row, first match wins),
    ``period_start`` or ``period_end``.
    """
    reference = reference or config.TARIFF_REFERENCE_DATE
    if reference == "none":
        return tariffs
    first, last = period_bounds(period)
    if reference == "period_start":
        return tariffs.effective_on(first)
    if reference == "period_end":
        return tariffs.effective_on(last)
    raise ValueError(f"unknown tariff reference date {reference!r}")


def calculate_charge(
    period: str,
    item: CalculationInput,
    readings: Union[ReadingIndex, Iterable[WaterReading]],
    tariffs: TariffSnapshot,
    strict: bool = False,
) -> ChargeRecord:
    unit, owner = item.unit, item.owner

    service = calc_service_fee(unit, tariffs)
    parking = calc_parking_fee(item.vehicles, period, tariffs)
    water = calc_water_fee(unit, period, readings, tariffs)
    adjustments_total = sum_adjustments(item.adjustments)

    missing = service.missing + parking.missing + water.missing
    if strict and missing:
        logger.error("unit %s aborted, missing tariffs: %s", unit.unit_id, ", ".join(missing))
        raise MissingTariffError(unit.unit_id, missing)
    gaps = list(missing)
    if not water.has_reading:
        gaps.append(f"water_reading:{period}")

    return ChargeRecord(
        period=period,
        unit_id=unit.unit_id,
        owner_name=owner.name,
        phone=owner.phone,
        email=owner.email,
        area_m2=float(unit.area_m2),
        service_net=service.net,
        service_vat=service.vat,
        service_total=service.gross,
        car_count=parking.counts.car,
        compact_car_count=parking.counts.compact_car,
        moto_count=parking.counts.moto,
        bicycle_count=parking.counts.bicycle,
        parking_net=parking.net,
        parking_vat=parking.vat,
        parking_total=parking.gross,
        water_m3=float(water.usage_m3),
        water_net=water.net,
        water_vat=water.vat,
        water_total=water.gross,
        adjustments=adjustments_total,
        # not floored: credits may exceed charges
        total_due=service.gross + parking.gross + water.gross + adjustments_total,
        data_gaps=gaps,
    )


def calculate_charges_batch(
    period: str,
    inputs: Sequence[CalculationInput],
    reference: ReferenceData,
    strict: bool = False,
    tariff_reference: Optional[str] = None,
) -> List[ChargeRecord]:
    """Price every input for ``period``, one record per input in input order.

    Pure: no I/O, no shared state, identical inputs give identical records.
    Duplicated units produce duplicated records.
    """
    period_bounds(period)
    tariffs = resolve_tariffs(reference.tariffs, period, tariff_reference)
    readings = index_readings(reference.water_readings)
    return [calculate_charge(period, item, readings, tariffs, strict=strict) for item in inputs]
