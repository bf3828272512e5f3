"""Crossing Times — Raw Upstream Reading Schema.

One object of the crossing-times JSON array. Aliases carry the upstream
camelCase names, including the feed's own `infomationalText` misspelling.
The trailing color fields are not declared and are dropped on validation.
"""

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class RawReading(BaseModel):
    """A single crossing reading exactly as the feed reports it."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    facility_id: int = Field(alias="facilityId")
    xcm_facility_id: Optional[int] = Field(default=None, alias="xcmFacilityId")
    facility_modifier: Optional[str] = Field(default=None, alias="facilityModifier")
    cardinal_direction: Optional[str] = Field(default=None, alias="cardinalDirection")
    travel_direction: Optional[str] = Field(default=None, alias="travelDirection")
    crossing_display_name: Optional[str] = Field(
        default=None, alias="crossingDisplayName"
    )
    is_crossing_closed: Optional[bool] = Field(default=None, alias="isCrossingClosed")
    route_id: int = Field(alias="routeId")
    route_speed: Optional[float] = Field(default=None, alias="routeSpeed")
    route_travel_time: Optional[float] = Field(default=None, alias="routeTravelTime")
    route_speed_hist: Optional[List[Any]] = Field(default=None, alias="routeSpeedHist")
    route_travel_time_hist: Optional[List[Any]] = Field(
        default=None, alias="routeTravelTimeHist"
    )
    route_name: Optional[str] = Field(default=None, alias="routeName")
    time_stamp: Optional[str] = Field(default=None, alias="timeStamp")
    informational_text: Optional[str] = Field(default=None, alias="infomationalText")
    speed_status_message: Optional[str] = Field(
        default=None, alias="speedStatusMessage"
    )
    time_status_message: Optional[str] = Field(default=None, alias="timeStatusMessage")
    is_data_available: Optional[bool] = Field(default=None, alias="isDataAvailable")
