"""Crossing Times — Fact Assembler.

Replaces the label fields of each fact candidate with resolved dimension
ids and writes the rows. One unresolvable candidate aborts the whole
batch: vocabulary drift upstream should fail loudly, not thin the data.
"""

from typing import Any, Dict, Iterable, List, Optional, Tuple

from crossings.core.errors import (
    DimensionResolutionIncomplete,
    FactWriteFailed,
    StoreWriteFailed,
)
from crossings.core.logging import get_logger
from crossings.ingest.dimension_resolver import ResolvedDimensions
from crossings.ingest.store import Store
from crossings.models.candidate_models import FactCandidate, normalize_key
from crossings.models.fact_models import TrafficStatusReading

logger = get_logger("ingest.facts")

FACT_CONFLICT_KEY = ("facility_id", "route_id", "cardinal_direction_id", "time_stamp")


def _lookup(table: Dict[str, int], dimension: str, value: Optional[str]) -> int:
    if value is None:
        raise DimensionResolutionIncomplete(dimension, value)
    try:
        return table[normalize_key(value)]
    except KeyError:
        raise DimensionResolutionIncomplete(dimension, value) from None


def assemble_facts(
    candidates: Iterable[FactCandidate],
    resolved: ResolvedDimensions,
) -> Tuple[List[Dict[str, Any]], int]:
    """Build fact rows from candidates.

    Candidates without a timestamp are dropped and counted. Later
    candidates sharing a conflict key with an earlier one are ignored.

    Returns:
        (rows, dropped) where dropped counts timestamp-less candidates.

    Raises:
        DimensionResolutionIncomplete: if any candidate cannot be resolved.
    """
    rows: Dict[tuple, Dict[str, Any]] = {}
    dropped = 0

    for candidate in candidates:
        if candidate.time_stamp is None:
            dropped += 1
            continue

        facility_key = (candidate.facility_id, candidate.facility_modifier)
        if facility_key not in resolved.facilities:
            raise DimensionResolutionIncomplete("facility", facility_key)
        if candidate.route_id not in resolved.routes:
            raise DimensionResolutionIncomplete("route", candidate.route_id)

        row = candidate.to_row(
            {
                "cardinal_direction_id": _lookup(
                    resolved.cardinal_directions,
                    "cardinal direction",
                    candidate.cardinal_direction,
                ),
                "travel_direction_id": _lookup(
                    resolved.travel_directions,
                    "travel direction",
                    candidate.travel_direction,
                ),
                "informational_text_id": _lookup(
                    resolved.informational_texts,
                    "informational text",
                    candidate.informational_text,
                ),
            }
        )
        rows.setdefault(tuple(row[column] for column in FACT_CONFLICT_KEY), row)

    if dropped:
        logger.warning(f"Dropped {dropped} readings with unparseable timestamps")
    return list(rows.values()), dropped


def write_facts(store: Store, rows: List[Dict[str, Any]]) -> int:
    """Upsert fact rows, ignoring rows whose conflict key already exists."""
    try:
        written = store.upsert(TrafficStatusReading, rows, FACT_CONFLICT_KEY)
    except StoreWriteFailed as e:
        raise FactWriteFailed(str(e)) from e
    logger.info(
        f"Submitted {len(rows)} fact rows ({written} new)",
        extra={"table": TrafficStatusReading.__tablename__, "rows": len(rows)},
    )
    return written
