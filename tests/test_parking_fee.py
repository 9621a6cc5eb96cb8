import logging
from datetime import date

from feecalc.billing import calc_parking_fee, count_vehicles
from feecalc.schemas import ParkingSlot, Vehicle, VehicleType
from feecalc.tariffs import REFERENCE_TARIFFS, ParkingTier

PERIOD = "2025-02"


def make_vehicle(n, vtype, start=date(2024, 6, 1), active=True, slot=ParkingSlot.primary):
    return Vehicle(
        vehicle_id=f"V{n}",
        unit_id="A101",
        type=vtype,
        is_active=active,
        start_date=start,
        parking_slot=slot,
    )


def without_tier(*tiers):
    return REFERENCE_TARIFFS.model_copy(
        update={"parking": tuple(t for t in REFERENCE_TARIFFS.parking if t.tier not in tiers)}
    )


def test_two_wheelers_are_priced_progressively():
    vehicles = [make_vehicle(i, VehicleType.motorbike) for i in range(3)]
    fee = calc_parking_fee(vehicles, PERIOD, REFERENCE_TARIFFS)
    assert fee.counts.moto == 3
    assert fee.net == 2 * 60000 + 80000


def test_ebikes_share_the_motorbike_bucket():
    vehicles = [
        make_vehicle(1, VehicleType.motorbike),
        make_vehicle(2, VehicleType.ebike),
        make_vehicle(3, VehicleType.ebike),
        make_vehicle(4, VehicleType.motorbike),
    ]
    fee = calc_parking_fee(vehicles, PERIOD, REFERENCE_TARIFFS)
    assert fee.counts.moto == 4
    assert fee.net == 2 * 60000 + 2 * 80000


def test_mixed_vehicles_single_vat_rate():
    vehicles = [
        make_vehicle(1, VehicleType.car),
        make_vehicle(2, VehicleType.compact_car),
        make_vehicle(3, VehicleType.motorbike),
        make_vehicle(4, VehicleType.bicycle),
    ]
    fee = calc_parking_fee(vehicles, PERIOD, REFERENCE_TARIFFS)
    assert fee.net == 860000 + 800000 + 60000 + 30000
    assert fee.vat == 140000
    assert fee.gross == 1890000


def test_waitlisted_car_is_not_billed():
    fee = calc_parking_fee([make_vehicle(1, VehicleType.car, slot=ParkingSlot.waitlisted)], PERIOD, REFERENCE_TARIFFS)
    assert fee.counts.car == 0
    assert (fee.net, fee.vat, fee.gross) == (0, 0, 0)


def test_secondary_and_unassigned_slots_are_billed():
    vehicles = [
        make_vehicle(1, VehicleType.car, slot=ParkingSlot.secondary),
        make_vehicle(2, VehicleType.car, slot=None),
    ]
    assert count_vehicles(vehicles, PERIOD).car == 2


def test_inactive_and_future_vehicles_are_excluded():
    vehicles = [
        make_vehicle(1, VehicleType.car, active=False),
        make_vehicle(2, VehicleType.car, start=date(2025, 3, 1)),
        make_vehicle(3, VehicleType.car, start=date(2025, 2, 28)),
    ]
    counts = count_vehicles(vehicles, PERIOD)
    assert counts.car == 1


def test_missing_tier_is_skipped_and_logged(caplog):
    vehicles = [make_vehicle(i, VehicleType.motorbike) for i in range(3)]
    with caplog.at_level(logging.WARNING, logger="feecalc.billing"):
        fee = calc_parking_fee(vehicles, PERIOD, without_tier(ParkingTier.moto_beyond_two))
    assert fee.net == 2 * 60000
    assert fee.missing == ["tariff:parking:Moto34"]
    assert "Moto34" in caplog.text


def test_absent_tier_without_vehicles_is_not_a_gap():
    fee = calc_parking_fee([make_vehicle(1, VehicleType.car)], PERIOD, without_tier(ParkingTier.bicycle))
    assert fee.net == 860000
    assert fee.missing == []


def test_vat_falls_back_to_eight_percent_without_car_tariff():
    vehicles = [make_vehicle(i, VehicleType.motorbike) for i in range(2)]
    fee = calc_parking_fee(vehicles, PERIOD, without_tier(ParkingTier.car))
    assert fee.net == 120000
    assert fee.vat == 9600
    assert fee.gross == 129600


def test_no_vehicles_is_zero():
    fee = calc_parking_fee([], PERIOD, REFERENCE_TARIFFS)
    assert (fee.net, fee.vat, fee.gross) == (0, 0, 0)
