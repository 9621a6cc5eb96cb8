"""Post-run checks that surface the zero-filled gaps the engine lets through."""

from enum import Enum
from typing import Iterable, List, Optional

from .billing import index_readings
from .periods import previous_period
from .schemas import ChargeRecord, FrozenModel, Unit, WaterReading


class AuditIssue(str, Enum):
    zero_service_fee = "zero_service_fee"
    no_water_usage = "no_water_usage"
    missing_reference = "missing_reference"
    negative_total = "negative_total"


class AuditFinding(FrozenModel):
    key: str
    unit_id: str
    issue: AuditIssue
    detail: str = ""


def find_missing_water_readings(
    period: str, units: Iterable[Unit], readings: Iterable[WaterReading]
) -> List[str]:
    """Unit ids with no reading for ``period``, in unit order."""
    index = index_readings(readings)
    return [u.unit_id for u in units if (u.unit_id, period) not in index]


def audit_charges(
    records: Iterable[ChargeRecord], readings: Optional[Iterable[WaterReading]] = None
) -> List[AuditFinding]:
    index = index_readings(readings or [])
    findings: List[AuditFinding] = []
    for rec in records:
        if rec.service_total == 0:
            findings.append(
                AuditFinding(key=rec.key, unit_id=rec.unit_id, issue=AuditIssue.zero_service_fee)
            )
        if rec.water_m3 == 0:
            detail = ""
            prev = previous_period(rec.period)
            if (rec.unit_id, rec.period) not in index and (rec.unit_id, prev) in index:
                detail = f"reading for {prev} present, {rec.period} missing"
            findings.append(
                AuditFinding(
                    key=rec.key, unit_id=rec.unit_id, issue=AuditIssue.no_water_usage, detail=detail
                )
            )
        if rec.data_gaps:
            findings.append(
                AuditFinding(
                    key=rec.key,
                    unit_id=rec.unit_id,
                    issue=AuditIssue.missing_reference,
                    detail=", ".join(rec.data_gaps),
                )
            )
        if rec.total_due < 0:
            findings.append(
                AuditFinding(
                    key=rec.key,
                    unit_id=rec.unit_id,
                    issue=AuditIssue.negative_total,
                    detail=str(rec.total_due),
                )
            )
    return findings
