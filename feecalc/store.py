"""Storage adapter: tariff rows in, charge records out.

The fee engine never touches a session; these helpers sit on the caller's
side of that boundary.
"""

import logging
from typing import Iterable, List

from pydantic import ValidationError
from sqlalchemy import delete
from sqlmodel import Session, select

from .models import Charge, TariffParking, TariffService, TariffWater
from .schemas import ChargeRecord
from .tariffs import TariffSnapshot, parse_tariff

logger = logging.getLogger(__name__)


class TariffDataError(ValueError):
    """A stored tariff row failed validation."""


def _validated(kind: str, row) -> object:
    raw = row.model_dump(exclude={"id", "sort_order"})
    raw["kind"] = kind
    try:
        return parse_tariff(raw)
    except ValidationError as exc:
        raise TariffDataError(f"tariff{kind} row {row.id} is invalid: {exc}") from exc


def load_tariff_snapshot(session: Session) -> TariffSnapshot:
    service = session.exec(select(TariffService).order_by(TariffService.sort_order, TariffService.id)).all()
    parking = session.exec(select(TariffParking).order_by(TariffParking.sort_order, TariffParking.id)).all()
    water = session.exec(select(TariffWater).order_by(TariffWater.sort_order, TariffWater.id)).all()
    return TariffSnapshot(
        service=tuple(_validated("service", r) for r in service),
        parking=tuple(_validated("parking", r) for r in parking),
        water=tuple(_validated("water", r) for r in water),
    )


def replace_tariffs(session: Session, snapshot: TariffSnapshot) -> int:
    """Swap the stored tariff set for ``snapshot`` in one transaction."""
    session.execute(delete(TariffService))
    session.execute(delete(TariffParking))
    session.execute(delete(TariffWater))

    count = 0
    for i, t in enumerate(snapshot.service):
        session.add(
            TariffService(
                key=t.key.value,
                fee_per_m2=t.fee_per_m2,
                vat_percent=t.vat_percent,
                valid_from=t.valid_from,
                valid_to=t.valid_to,
                sort_order=i,
            )
        )
        count += 1
    for i, t in enumerate(snapshot.parking):
        session.add(
            TariffParking(
                tier=t.tier.value,
                price_per_unit=t.price_per_unit,
                vat_percent=t.vat_percent,
                valid_from=t.valid_from,
                valid_to=t.valid_to,
                sort_order=i,
            )
        )
        count += 1
    for i, t in enumerate(snapshot.water):
        session.add(
            TariffWater(
                segment=t.segment.value,
                from_m3=t.from_m3,
                to_m3=t.to_m3,
                unit_price=t.unit_price,
                vat_percent=t.vat_percent,
                valid_from=t.valid_from,
                valid_to=t.valid_to,
                sort_order=i,
            )
        )
        count += 1
    session.commit()
    logger.info("replaced tariff set with %d rows", count)
    return count


def save_charge_records(session: Session, records: Iterable[ChargeRecord]) -> List[str]:
    """Upsert records by ``{period}_{unit_id}``; returns the keys written."""
    keys = []
    for rec in records:
        session.merge(Charge.from_record(rec))
        keys.append(rec.key)
    session.commit()
    return keys


def list_charge_records(session: Session, period: str) -> List[ChargeRecord]:
    rows = session.exec(select(Charge).where(Charge.period == period).order_by(Charge.unit_id)).all()
    return [r.to_record() for r in rows]
