from decimal import Decimal

import pytest

from feecalc.billing import calc_water_fee, find_water_reading, index_readings
from feecalc.schemas import Occupancy, Unit, UnitKind, WaterReading
from feecalc.tariffs import REFERENCE_TARIFFS, WaterSegment

PERIOD = "2025-03"


def make_unit(kind=UnitKind.apartment, occupancy=Occupancy.owner, unit_id="A101"):
    return Unit(unit_id=unit_id, owner_id="O1", kind=kind, area_m2=70, occupancy=occupancy)


def reading(m3, unit_id="A101", period=PERIOD):
    return WaterReading(unit_id=unit_id, period=period, consumption_m3=m3)


@pytest.mark.parametrize(
    "m3,net,vat,gross",
    [
        (10, 93100, 4655, 97755),
        (11, 103943, 5197, 109140),
        (35, 524625, 26231, 550856),
    ],
)
def test_residential_usage_is_tiered(m3, net, vat, gross):
    fee = calc_water_fee(make_unit(), PERIOD, [reading(m3)], REFERENCE_TARIFFS)
    assert (fee.net, fee.vat, fee.gross) == (net, vat, gross)
    assert fee.usage_m3 == Decimal(m3)


def test_rented_apartment_stays_residential():
    fee = calc_water_fee(make_unit(occupancy=Occupancy.rented), PERIOD, [reading(10)], REFERENCE_TARIFFS)
    assert fee.net == 93100


def test_kiosk_pays_flat_commercial_rate():
    fee = calc_water_fee(make_unit(kind=UnitKind.kiosk), PERIOD, [reading(45)], REFERENCE_TARIFFS)
    assert (fee.net, fee.vat, fee.gross) == (1397250, 69862, 1467112)


def test_business_occupancy_pays_flat_rate():
    fee = calc_water_fee(make_unit(occupancy=Occupancy.business), PERIOD, [reading(2)], REFERENCE_TARIFFS)
    assert fee.net == 62100


def test_commercial_falls_back_to_open_residential_band():
    tariffs = REFERENCE_TARIFFS.model_copy(
        update={"water": tuple(t for t in REFERENCE_TARIFFS.water if t.segment != WaterSegment.commercial)}
    )
    fee = calc_water_fee(make_unit(kind=UnitKind.kiosk), PERIOD, [reading(45)], tariffs)
    assert fee.net == 45 * 29571
    assert fee.missing == []


def test_no_water_tariffs_at_all():
    tariffs = REFERENCE_TARIFFS.model_copy(update={"water": ()})
    fee = calc_water_fee(make_unit(), PERIOD, [reading(5)], tariffs)
    assert fee.gross == 0
    assert fee.missing == ["tariff:water:residential"]

    fee = calc_water_fee(make_unit(kind=UnitKind.kiosk), PERIOD, [reading(5)], tariffs)
    assert fee.gross == 0
    assert fee.missing == ["tariff:water:commercial"]


def test_missing_reading_is_zero_and_flagged():
    fee = calc_water_fee(make_unit(), PERIOD, [reading(12, period="2025-02")], REFERENCE_TARIFFS)
    assert (fee.net, fee.vat, fee.gross) == (0, 0, 0)
    assert fee.has_reading is False


def test_zero_usage_is_zero_but_has_reading():
    fee = calc_water_fee(make_unit(), PERIOD, [reading(0)], REFERENCE_TARIFFS)
    assert fee.gross == 0
    assert fee.has_reading is True


def test_first_reading_for_unit_and_period_wins():
    readings = [reading(10), reading(20)]
    assert find_water_reading("A101", PERIOD, readings).consumption_m3 == 10
    assert find_water_reading("A101", PERIOD, index_readings(readings)).consumption_m3 == 10
    assert find_water_reading("B202", PERIOD, readings) is None
