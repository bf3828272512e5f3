"""Crossing Times — Fact Tables.

TrafficStatusReading is the normalized fact. CrossingTime is the single
denormalized table written by the `denormalized` schema variant.
"""

from datetime import datetime, timezone
from typing import Any, List, Optional

from sqlalchemy import JSON, Column, DateTime, func
from sqlmodel import SQLModel, Field, UniqueConstraint


class TrafficStatusReading(SQLModel, table=True):
    """One reading per facility × route × cardinal direction × minute.

    The conflict key leaves out travel direction and informational text,
    so variants that differ only in those columns collapse to one row.
    """

    __tablename__ = "traffic_status_readings"
    __table_args__ = (
        UniqueConstraint(
            "facility_id",
            "route_id",
            "cardinal_direction_id",
            "time_stamp",
            name="uq_traffic_status_reading",
        ),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    facility_id: int = Field(index=True)
    facility_modifier: str = Field(default="")
    route_id: int = Field(index=True)
    cardinal_direction_id: int = Field(foreign_key="cardinal_directions.id")
    travel_direction_id: int = Field(foreign_key="travel_directions.id")
    informational_text_id: int = Field(foreign_key="informational_texts.id")
    time_stamp: datetime = Field(
        sa_column=Column(DateTime(timezone=True), nullable=False, index=True)
    )
    is_crossing_closed: Optional[bool] = Field(default=None)
    route_speed: Optional[float] = Field(default=None)
    route_travel_time: Optional[float] = Field(default=None)
    route_speed_hist: Optional[List[Any]] = Field(default=None, sa_column=Column(JSON))
    route_travel_time_hist: Optional[List[Any]] = Field(
        default=None, sa_column=Column(JSON)
    )
    speed_status_message: Optional[str] = Field(default=None)
    time_status_message: Optional[str] = Field(default=None)
    is_data_available: Optional[bool] = Field(default=None)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column_kwargs={"server_default": func.now()},
    )


class CrossingTime(SQLModel, table=True):
    """Flat copy of a reading with labels inline."""

    __tablename__ = "crossing_times"
    __table_args__ = (
        UniqueConstraint(
            "facility_id",
            "cardinal_direction",
            "time_stamp",
            name="uq_crossing_time",
        ),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    facility_id: int = Field(index=True)
    xcm_facility_id: Optional[int] = Field(default=None)
    facility_modifier: str = Field(default="")
    cardinal_direction: str = Field(default="")
    travel_direction: Optional[str] = Field(default=None)
    crossing_display_name: Optional[str] = Field(default=None, index=True)
    is_crossing_closed: Optional[bool] = Field(default=None)
    route_id: Optional[int] = Field(default=None)
    route_speed: Optional[float] = Field(default=None)
    route_travel_time: Optional[float] = Field(default=None)
    route_speed_hist: Optional[List[Any]] = Field(default=None, sa_column=Column(JSON))
    route_travel_time_hist: Optional[List[Any]] = Field(
        default=None, sa_column=Column(JSON)
    )
    route_name: Optional[str] = Field(default=None)
    time_stamp: datetime = Field(
        sa_column=Column(DateTime(timezone=True), nullable=False, index=True)
    )
    informational_text: Optional[str] = Field(default=None)
    speed_status_message: Optional[str] = Field(default=None)
    time_status_message: Optional[str] = Field(default=None)
    is_data_available: Optional[bool] = Field(default=None)
