"""
Shared fixtures: an in-memory SQLite store and upstream feed payloads.
"""

from datetime import datetime, timezone

import httpx
import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from crossings.connectors.crossing_times.client import CrossingFeedClient
from crossings.models import dimension_models, fact_models  # noqa: F401

# 00:10 UTC on Jan 2 is still 19:10 on Jan 1 in New York (EST, UTC-5)
REFERENCE = datetime(2024, 1, 2, 0, 10, tzinfo=timezone.utc)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def reference():
    return REFERENCE


@pytest.fixture
def make_reading():
    """Factory for upstream reading objects, camelCase as the feed sends them."""

    def _make(**overrides):
        reading = {
            "facilityId": 1,
            "xcmFacilityId": 4001,
            "facilityModifier": None,
            "cardinalDirection": "westbound",
            "travelDirection": "inbound",
            "crossingDisplayName": "Holland Tunnel",
            "isCrossingClosed": False,
            "routeId": 101,
            "routeSpeed": 23.5,
            "routeTravelTime": 7,
            "routeSpeedHist": [22, 24, 23],
            "routeTravelTimeHist": [8, 7, 7],
            "routeName": "Holland Tunnel NJ to NY",
            "timeStamp": "6:45 PM",
            "infomationalText": "",
            "speedStatusMessage": "Normal",
            "timeStatusMessage": "Normal",
            "isDataAvailable": True,
            "speedColor": "#3aa537",
            "timeColor": "#3aa537",
            "speedHistColor": "#d8d8d8",
            "timeHistColor": "#d8d8d8",
        }
        reading.update(overrides)
        return reading

    return _make


@pytest.fixture
def feed_payload(make_reading):
    return [
        make_reading(),
        make_reading(
            cardinalDirection="eastbound",
            travelDirection="outbound",
            routeId=102,
            routeName="Holland Tunnel NY to NJ",
        ),
        make_reading(
            facilityId=2,
            xcmFacilityId=4002,
            facilityModifier="Upper Level",
            crossingDisplayName="George Washington Bridge",
            routeId=201,
            routeName="GWB Upper Level NJ to NY",
            cardinalDirection="Eastbound ",
            infomationalText="Right lane closed for maintenance",
        ),
    ]


@pytest.fixture
def make_client():
    """Build a feed client whose HTTP calls are answered by `handler`."""

    def _make(handler):
        return CrossingFeedClient(
            feed_url="https://feed.test/crossingtimesapi.json",
            transport=httpx.MockTransport(handler),
        )

    return _make


@pytest.fixture
def json_client(make_client):
    """Feed client that serves a fixed JSON body with status 200."""

    def _make(payload):
        return make_client(lambda request: httpx.Response(200, json=payload))

    return _make
