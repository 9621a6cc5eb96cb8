import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Iterator, List, Optional, Sequence

from . import config
from .billing import CalculationInput, ReferenceData, calculate_charges_batch
from .schemas import ChargeRecord

logger = logging.getLogger(__name__)


def chunked(items: Sequence, size: int) -> Iterator[Sequence]:
    if size < 1:
        raise ValueError("batch size must be at least 1")
    for start in range(0, len(items), size):
        yield items[start : start + size]


def run_in_batches(
    period: str,
    inputs: Sequence[CalculationInput],
    reference: ReferenceData,
    batch_size: Optional[int] = None,
    max_workers: Optional[int] = None,
    strict: bool = False,
) -> List[ChargeRecord]:
    """Split ``inputs`` into batches and price them on a thread pool.

    Units are independent, so batches need no coordination; results are
    put back together in input order. The first failing batch is logged
    and its exception re-raised.
    """
    batches = list(chunked(list(inputs), batch_size or config.CALC_BATCH_SIZE))
    if not batches:
        return []

    results: List[Optional[List[ChargeRecord]]] = [None] * len(batches)
    with ThreadPoolExecutor(max_workers=max_workers or config.CALC_MAX_WORKERS) as pool:
        futures = {
            pool.submit(calculate_charges_batch, period, batch, reference, strict): i
            for i, batch in enumerate(batches)
        }
        for fut in as_completed(futures):
            i = futures[fut]
            try:
                results[i] = fut.result()
            except Exception:
                unit_ids = [item.unit.unit_id for item in batches[i]]
                logger.exception(
                    "batch %d/%d failed for period %s (units %s)",
                    i + 1,
                    len(batches),
                    period,
                    ", ".join(unit_ids),
                )
                raise

    records = [rec for batch in results for rec in batch]
    logger.info("priced %d units in %d batches for %s", len(records), len(batches), period)
    return records
