"""Crossing Times — Reading Query Routes.

Read path for the dashboard: the most recent readings of one crossing.
"""

from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlmodel import Session, and_, select

from crossings.database import get_session
from crossings.ingest.time_normalizer import format_store_timestamp
from crossings.models.dimension_models import (
    CardinalDirection,
    Facility,
    InformationalText,
    TravelDirection,
)
from crossings.models.fact_models import TrafficStatusReading
from crossings.core.logging import get_logger

logger = get_logger("api.readings")

router = APIRouter(tags=["Readings"])


@router.get("/readings")
async def get_readings(
    crossing: str = Query(..., description="Crossing display name, e.g. Holland Tunnel"),
    before: Optional[datetime] = Query(None, description="Latest instant to include"),
    limit: int = Query(100, ge=1, le=1000),
    session: Session = Depends(get_session),
):
    """Newest-first readings for a crossing at or before `before`."""
    before = before or datetime.now(timezone.utc)
    if before.tzinfo is None:
        before = before.replace(tzinfo=timezone.utc)
    before = before.astimezone(timezone.utc)

    query = (
        select(
            TrafficStatusReading,
            Facility.crossing_display_name,
            CardinalDirection.direction,
            TravelDirection.direction,
            InformationalText.text,
        )
        .join(
            Facility,
            and_(
                Facility.facility_id == TrafficStatusReading.facility_id,
                Facility.facility_modifier == TrafficStatusReading.facility_modifier,
            ),
        )
        .join(
            CardinalDirection,
            CardinalDirection.id == TrafficStatusReading.cardinal_direction_id,
        )
        .join(
            TravelDirection,
            TravelDirection.id == TrafficStatusReading.travel_direction_id,
        )
        .join(
            InformationalText,
            InformationalText.id == TrafficStatusReading.informational_text_id,
        )
        .where(
            Facility.crossing_display_name == crossing,
            TrafficStatusReading.time_stamp <= before,
        )
        .order_by(TrafficStatusReading.time_stamp.desc())  # type: ignore
        .limit(limit)
    )
    results = session.exec(query).all()

    return {
        "status": "success",
        "count": len(results),
        "readings": [
            {
                "crossing_display_name": display_name,
                "facility_id": reading.facility_id,
                "facility_modifier": reading.facility_modifier,
                "route_id": reading.route_id,
                "cardinal_direction": cardinal,
                "travel_direction": travel,
                "informational_text": text,
                "time_stamp": format_store_timestamp(reading.time_stamp),
                "route_speed": reading.route_speed,
                "route_travel_time": reading.route_travel_time,
                "is_crossing_closed": reading.is_crossing_closed,
                "is_data_available": reading.is_data_available,
            }
            for reading, display_name, cardinal, travel, text in results
        ],
    }
