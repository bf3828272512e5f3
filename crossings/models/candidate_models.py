"""Crossing Times — Candidate Records.

What the partitioner derives from one raw reading before anything touches
the store. Dimension labels on the fact are still plain strings here.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict


def normalize_key(value: str) -> str:
    """Matching key for label dimensions: trimmed and lower-cased."""
    return value.strip().lower()


class FacilityCandidate(BaseModel):
    model_config = ConfigDict(frozen=True)

    facility_id: int
    xcm_facility_id: Optional[int] = None
    facility_modifier: str = ""
    crossing_display_name: Optional[str] = None

    @property
    def natural_key(self) -> Tuple[int, str]:
        return (self.facility_id, self.facility_modifier)


class RouteCandidate(BaseModel):
    model_config = ConfigDict(frozen=True)

    route_id: int
    route_name: Optional[str] = None
    facility_id: int
    facility_modifier: str = ""

    @property
    def natural_key(self) -> Tuple[int, Optional[str], int, str]:
        """In-batch dedup key. The store conflicts on route_id alone."""
        return (self.route_id, self.route_name, self.facility_id, self.facility_modifier)


class FactCandidate(BaseModel):
    """A fact row whose dimension references are still raw labels."""

    model_config = ConfigDict(frozen=True)

    facility_id: int
    facility_modifier: str = ""
    route_id: int
    cardinal_direction: Optional[str] = None
    travel_direction: Optional[str] = None
    informational_text: Optional[str] = None
    time_stamp: Optional[datetime] = None
    is_crossing_closed: Optional[bool] = None
    route_speed: Optional[float] = None
    route_travel_time: Optional[float] = None
    route_speed_hist: Optional[List[Any]] = None
    route_travel_time_hist: Optional[List[Any]] = None
    speed_status_message: Optional[str] = None
    time_status_message: Optional[str] = None
    is_data_available: Optional[bool] = None

    def to_row(self, dimension_ids: Dict[str, int]) -> Dict[str, Any]:
        """Swap the label fields for their resolved ids."""
        row = self.model_dump(
            exclude={"cardinal_direction", "travel_direction", "informational_text"}
        )
        row.update(dimension_ids)
        return row


class PartitionedReading(BaseModel):
    """Zero-or-one candidate per dimension plus exactly one fact candidate."""

    model_config = ConfigDict(frozen=True)

    facility: FacilityCandidate
    route: RouteCandidate
    cardinal_direction: Optional[str] = None
    travel_direction: Optional[str] = None
    informational_text: Optional[str] = None
    fact: FactCandidate
