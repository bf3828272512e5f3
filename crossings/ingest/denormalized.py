"""Crossing Times — Denormalized Variant.

Writes each reading as one flat `crossing_times` row, labels inline,
conflicting on (facility_id, cardinal_direction, time_stamp).
"""

from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple
from zoneinfo import ZoneInfo

from crossings.core.errors import FactWriteFailed, StoreWriteFailed
from crossings.core.logging import get_logger
from crossings.ingest.store import Store
from crossings.ingest.time_normalizer import normalize_timestamp
from crossings.models.fact_models import CrossingTime
from crossings.models.raw_models import RawReading

logger = get_logger("ingest.denormalized")

CROSSING_TIME_CONFLICT_KEY = ("facility_id", "cardinal_direction", "time_stamp")


def build_crossing_time_rows(
    readings: Iterable[RawReading],
    reference: datetime,
    tz: Optional[ZoneInfo] = None,
) -> Tuple[List[Dict[str, Any]], int]:
    """Map raw readings to crossing_times rows. Returns (rows, dropped)."""
    rows: Dict[tuple, Dict[str, Any]] = {}
    dropped = 0
    for raw in readings:
        time_stamp = normalize_timestamp(raw.time_stamp, reference, tz)
        if time_stamp is None:
            dropped += 1
            continue
        row = raw.model_dump()
        row["time_stamp"] = time_stamp
        # Unique key columns are never NULL
        row["cardinal_direction"] = raw.cardinal_direction or ""
        row["facility_modifier"] = raw.facility_modifier or ""
        rows.setdefault(tuple(row[c] for c in CROSSING_TIME_CONFLICT_KEY), row)

    if dropped:
        logger.warning(f"Dropped {dropped} readings with unparseable timestamps")
    return list(rows.values()), dropped


def write_crossing_times(store: Store, rows: List[Dict[str, Any]]) -> int:
    try:
        written = store.upsert(CrossingTime, rows, CROSSING_TIME_CONFLICT_KEY)
    except StoreWriteFailed as e:
        raise FactWriteFailed(str(e)) from e
    logger.info(
        f"Submitted {len(rows)} crossing_times rows ({written} new)",
        extra={"table": CrossingTime.__tablename__, "rows": len(rows)},
    )
    return written
