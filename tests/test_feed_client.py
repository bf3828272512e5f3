"""
Unit tests for the upstream feed client.
"""

import asyncio

import httpx
import pytest

from crossings.connectors.crossing_times.client import parse_feed
from crossings.core.errors import FeedMalformed, FeedUnavailable


class TestParseFeed:
    def test_valid_payload(self, feed_payload):
        readings = parse_feed(feed_payload)
        assert [r.route_id for r in readings] == [101, 102, 201]

    def test_rejects_non_array(self):
        with pytest.raises(FeedMalformed):
            parse_feed({"readings": []})

    def test_rejects_record_missing_required_field(self, make_reading):
        reading = make_reading()
        del reading["routeId"]
        with pytest.raises(FeedMalformed):
            parse_feed([reading])


class TestCrossingFeedClient:
    def test_fetch_readings(self, json_client, feed_payload):
        client = json_client(feed_payload)
        readings = asyncio.run(client.fetch_readings())
        assert len(readings) == 3
        assert readings[2].facility_modifier == "Upper Level"

    def test_requests_configured_url(self, make_client):
        seen = []

        def handler(request):
            seen.append(str(request.url))
            return httpx.Response(200, json=[])

        asyncio.run(make_client(handler).fetch_readings())
        assert seen == ["https://feed.test/crossingtimesapi.json"]

    def test_non_2xx_is_feed_unavailable(self, make_client):
        client = make_client(lambda request: httpx.Response(503, text="down"))
        with pytest.raises(FeedUnavailable) as exc_info:
            asyncio.run(client.fetch_readings())
        assert exc_info.value.status_code == 503

    def test_transport_error_is_feed_unavailable(self, make_client):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(FeedUnavailable):
            asyncio.run(make_client(handler).fetch_readings())

    def test_non_json_body_is_feed_malformed(self, make_client):
        client = make_client(lambda request: httpx.Response(200, text="<html></html>"))
        with pytest.raises(FeedMalformed):
            asyncio.run(client.fetch_readings())
