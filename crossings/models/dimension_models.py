"""Crossing Times — Dimension Tables.

Rows are created on first sighting of a natural key and never updated.
Label dimensions keep the received value and match on a normalized key
column (lower-cased, trimmed).
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Column, Text, func
from sqlmodel import SQLModel, Field, UniqueConstraint


class Facility(SQLModel, table=True):
    """A crossing facility span.

    Several spans (upper/lower levels) share a facility_id, so the modifier
    is part of the key. A missing modifier is stored as "".
    """

    __tablename__ = "facilities"
    __table_args__ = (
        UniqueConstraint("facility_id", "facility_modifier", name="uq_facility"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    facility_id: int = Field(index=True, description="Upstream facility id")
    xcm_facility_id: Optional[int] = Field(default=None)
    facility_modifier: str = Field(default="", description="Span modifier or ''")
    crossing_display_name: Optional[str] = Field(default=None)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column_kwargs={"server_default": func.now()},
    )


class Route(SQLModel, table=True):
    """A measured route through a facility. route_id alone is the conflict key."""

    __tablename__ = "routes"
    __table_args__ = (UniqueConstraint("route_id", name="uq_route"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    route_id: int = Field(index=True)
    route_name: Optional[str] = Field(default=None)
    facility_id: int = Field(index=True)
    facility_modifier: str = Field(default="")
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column_kwargs={"server_default": func.now()},
    )


class CardinalDirection(SQLModel, table=True):
    __tablename__ = "cardinal_directions"
    __table_args__ = (
        UniqueConstraint("direction_key", name="uq_cardinal_direction"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    direction: str = Field(description="Label as first received")
    direction_key: str = Field(index=True, description="Lower-cased, trimmed label")
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column_kwargs={"server_default": func.now()},
    )


class TravelDirection(SQLModel, table=True):
    __tablename__ = "travel_directions"
    __table_args__ = (UniqueConstraint("direction_key", name="uq_travel_direction"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    direction: str = Field(description="Label as first received")
    direction_key: str = Field(index=True, description="Lower-cased, trimmed label")
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column_kwargs={"server_default": func.now()},
    )


class InformationalText(SQLModel, table=True):
    """Free-text advisory message. Grows with every distinct message seen."""

    __tablename__ = "informational_texts"
    __table_args__ = (UniqueConstraint("text_key", name="uq_informational_text"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    text: str = Field(sa_column=Column(Text, nullable=False))
    text_key: str = Field(sa_column=Column(Text, nullable=False, index=True))
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column_kwargs={"server_default": func.now()},
    )
