"""Crossing Times — Raw Reading Partitioner.

Splits one raw reading into dimension candidates and a fact candidate.
Pure: no I/O, and the same input always yields equal output.
"""

from datetime import datetime
from typing import Iterable, List, Optional
from zoneinfo import ZoneInfo

from crossings.ingest.time_normalizer import normalize_timestamp
from crossings.models.candidate_models import (
    FacilityCandidate,
    FactCandidate,
    PartitionedReading,
    RouteCandidate,
)
from crossings.models.raw_models import RawReading


def _label(value: Optional[str]) -> Optional[str]:
    """Blank labels carry no dimension candidate."""
    if value is None or not value.strip():
        return None
    return value


def partition_reading(
    raw: RawReading,
    reference: datetime,
    tz: Optional[ZoneInfo] = None,
) -> PartitionedReading:
    """Derive the candidate records for a single reading."""
    modifier = raw.facility_modifier or ""
    cardinal = _label(raw.cardinal_direction)
    travel = _label(raw.travel_direction)
    # No advisory is still an advisory value: the empty message row
    text = raw.informational_text or ""

    facility = FacilityCandidate(
        facility_id=raw.facility_id,
        xcm_facility_id=raw.xcm_facility_id,
        facility_modifier=modifier,
        crossing_display_name=raw.crossing_display_name,
    )
    route = RouteCandidate(
        route_id=raw.route_id,
        route_name=raw.route_name,
        facility_id=raw.facility_id,
        facility_modifier=modifier,
    )
    fact = FactCandidate(
        facility_id=raw.facility_id,
        facility_modifier=modifier,
        route_id=raw.route_id,
        cardinal_direction=cardinal,
        travel_direction=travel,
        informational_text=text,
        time_stamp=normalize_timestamp(raw.time_stamp, reference, tz),
        is_crossing_closed=raw.is_crossing_closed,
        route_speed=raw.route_speed,
        route_travel_time=raw.route_travel_time,
        route_speed_hist=raw.route_speed_hist,
        route_travel_time_hist=raw.route_travel_time_hist,
        speed_status_message=raw.speed_status_message,
        time_status_message=raw.time_status_message,
        is_data_available=raw.is_data_available,
    )
    return PartitionedReading(
        facility=facility,
        route=route,
        cardinal_direction=cardinal,
        travel_direction=travel,
        informational_text=text,
        fact=fact,
    )


def partition_readings(
    readings: Iterable[RawReading],
    reference: datetime,
    tz: Optional[ZoneInfo] = None,
) -> List[PartitionedReading]:
    return [partition_reading(raw, reference, tz) for raw in readings]
