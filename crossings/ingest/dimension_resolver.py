"""Crossing Times — Dimension Resolver.

For each dimension: dedup the batch's candidates by natural key, upsert
with ignore-on-conflict, then re-read every row matching the candidate
keys. The re-read is unconditional because rows that already existed are
not reported back by the conflict-ignoring insert.
"""

from typing import Dict, Iterable, List, Optional, Tuple, Type

from sqlmodel import SQLModel

from crossings.core.errors import DimensionResolutionIncomplete
from crossings.core.logging import get_logger
from crossings.ingest.store import Store
from crossings.models.candidate_models import (
    FacilityCandidate,
    PartitionedReading,
    RouteCandidate,
    normalize_key,
)
from crossings.models.dimension_models import (
    CardinalDirection,
    Facility,
    InformationalText,
    Route,
    TravelDirection,
)

logger = get_logger("ingest.dimensions")


class ResolvedDimensions:
    """Natural key → surrogate id lookups for one batch."""

    def __init__(self):
        self.facilities: Dict[Tuple[int, str], int] = {}
        self.routes: Dict[int, int] = {}
        self.cardinal_directions: Dict[str, int] = {}
        self.travel_directions: Dict[str, int] = {}
        self.informational_texts: Dict[str, int] = {}

    def counts(self) -> Dict[str, int]:
        return {
            Facility.__tablename__: len(self.facilities),
            Route.__tablename__: len(self.routes),
            CardinalDirection.__tablename__: len(self.cardinal_directions),
            TravelDirection.__tablename__: len(self.travel_directions),
            InformationalText.__tablename__: len(self.informational_texts),
        }


class DimensionResolver:
    """Resolves candidate dimension records to stored ids.

    With `commit_each` set, every table is committed as soon as it is
    resolved instead of waiting for the caller's single commit.
    """

    def __init__(self, store: Store, commit_each: bool = False):
        self.store = store
        self.commit_each = commit_each

    def _done(self, table: str, resolved: int) -> None:
        if self.commit_each:
            self.store.commit()
        logger.info(
            f"Resolved {resolved} {table} rows",
            extra={"table": table, "rows": resolved},
        )

    # ── Facilities ──

    def resolve_facilities(
        self, candidates: Iterable[FacilityCandidate]
    ) -> Dict[Tuple[int, str], int]:
        unique: Dict[Tuple[int, str], FacilityCandidate] = {}
        for candidate in candidates:
            unique.setdefault(candidate.natural_key, candidate)
        if not unique:
            return {}

        self.store.upsert(
            Facility,
            [c.model_dump() for c in unique.values()],
            ["facility_id", "facility_modifier"],
        )
        fetched = self.store.select(
            Facility, Facility.facility_id.in_(sorted({key[0] for key in unique}))
        )
        lookup = {(row.facility_id, row.facility_modifier): row.id for row in fetched}

        for key in unique:
            if key not in lookup:
                raise DimensionResolutionIncomplete("facility", key)

        resolved = {key: lookup[key] for key in unique}
        self._done(Facility.__tablename__, len(resolved))
        return resolved

    # ── Routes ──

    def resolve_routes(self, candidates: Iterable[RouteCandidate]) -> Dict[int, int]:
        unique: Dict[tuple, RouteCandidate] = {}
        for candidate in candidates:
            unique.setdefault(candidate.natural_key, candidate)
        if not unique:
            return {}

        route_ids = {c.route_id for c in unique.values()}
        # Rows sharing a route_id past the first are dropped by the conflict key
        self.store.upsert(Route, [c.model_dump() for c in unique.values()], ["route_id"])
        fetched = self.store.select(Route, Route.route_id.in_(sorted(route_ids)))
        lookup = {row.route_id: row.id for row in fetched}

        for route_id in route_ids:
            if route_id not in lookup:
                raise DimensionResolutionIncomplete("route", route_id)

        resolved = {route_id: lookup[route_id] for route_id in route_ids}
        self._done(Route.__tablename__, len(resolved))
        return resolved

    # ── Label Dimensions ──

    def _resolve_labels(
        self,
        model: Type[SQLModel],
        dimension: str,
        value_column: str,
        key_column: str,
        values: Iterable[Optional[str]],
    ) -> Dict[str, int]:
        unique: Dict[str, str] = {}
        for value in values:
            if value is None:
                continue
            unique.setdefault(normalize_key(value), value)
        if not unique:
            return {}

        rows = [{value_column: value, key_column: key} for key, value in unique.items()]
        self.store.upsert(model, rows, [key_column])
        fetched = self.store.select(model, getattr(model, key_column).in_(list(unique)))
        lookup = {normalize_key(getattr(row, key_column)): row.id for row in fetched}

        for key, value in unique.items():
            if key not in lookup:
                raise DimensionResolutionIncomplete(dimension, value)

        resolved = {key: lookup[key] for key in unique}
        self._done(model.__tablename__, len(resolved))
        return resolved

    def resolve_cardinal_directions(self, values: Iterable[Optional[str]]) -> Dict[str, int]:
        return self._resolve_labels(
            CardinalDirection, "cardinal direction", "direction", "direction_key", values
        )

    def resolve_travel_directions(self, values: Iterable[Optional[str]]) -> Dict[str, int]:
        return self._resolve_labels(
            TravelDirection, "travel direction", "direction", "direction_key", values
        )

    def resolve_informational_texts(
        self, values: Iterable[Optional[str]]
    ) -> Dict[str, int]:
        return self._resolve_labels(
            InformationalText, "informational text", "text", "text_key", values
        )

    # ── Batch ──

    def resolve_all(self, partitions: List[PartitionedReading]) -> ResolvedDimensions:
        """Resolve every dimension referenced by the batch."""
        resolved = ResolvedDimensions()
        resolved.facilities = self.resolve_facilities(p.facility for p in partitions)
        resolved.routes = self.resolve_routes(p.route for p in partitions)
        resolved.cardinal_directions = self.resolve_cardinal_directions(
            p.cardinal_direction for p in partitions
        )
        resolved.travel_directions = self.resolve_travel_directions(
            p.travel_direction for p in partitions
        )
        resolved.informational_texts = self.resolve_informational_texts(
            p.informational_text for p in partitions
        )
        return resolved
