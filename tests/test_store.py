"""
Unit tests for store upsert/select primitives.
"""

from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError
from sqlmodel import select

from crossings.core.errors import StoreReadFailed, StoreWriteFailed
from crossings.ingest.store import Store
from crossings.models.dimension_models import CardinalDirection, Route


class TestUpsert:
    def test_ignore_duplicates_keeps_existing_row(self, session):
        store = Store(session)
        store.upsert(
            CardinalDirection,
            [{"direction": "Westbound", "direction_key": "westbound"}],
            ["direction_key"],
        )
        store.upsert(
            CardinalDirection,
            [{"direction": "WESTBOUND", "direction_key": "westbound"}],
            ["direction_key"],
        )
        rows = session.exec(select(CardinalDirection)).all()
        assert len(rows) == 1
        assert rows[0].direction == "Westbound"

    def test_update_on_conflict_when_not_ignoring(self, session):
        store = Store(session)
        row = {"route_id": 7, "route_name": "Old", "facility_id": 1, "facility_modifier": ""}
        store.upsert(Route, [row], ["route_id"])
        store.upsert(Route, [{**row, "route_name": "New"}], ["route_id"], ignore_duplicates=False)
        session.expire_all()
        assert session.exec(select(Route)).one().route_name == "New"

    def test_batches_large_inputs(self, session):
        store = Store(session, batch_size=2)
        rows = [
            {"direction": f"Label {i}", "direction_key": f"label {i}"} for i in range(5)
        ]
        store.upsert(CardinalDirection, rows, ["direction_key"])
        assert len(session.exec(select(CardinalDirection)).all()) == 5

    def test_empty_rows_is_noop(self, session):
        assert Store(session).upsert(CardinalDirection, [], ["direction_key"]) == 0

    def test_database_error_raises_store_write_failed(self, session):
        store = Store(session)
        with patch.object(
            session, "execute", side_effect=OperationalError("INSERT", {}, Exception("locked"))
        ):
            with pytest.raises(StoreWriteFailed):
                store.upsert(
                    CardinalDirection,
                    [{"direction": "Westbound", "direction_key": "westbound"}],
                    ["direction_key"],
                )


class TestSelect:
    def test_filters_rows(self, session):
        store = Store(session)
        store.upsert(
            CardinalDirection,
            [
                {"direction": "Westbound", "direction_key": "westbound"},
                {"direction": "Eastbound", "direction_key": "eastbound"},
            ],
            ["direction_key"],
        )
        rows = store.select(
            CardinalDirection, CardinalDirection.direction_key.in_(["eastbound"])
        )
        assert [r.direction for r in rows] == ["Eastbound"]

    def test_database_error_raises_store_read_failed(self, session):
        store = Store(session)
        with patch.object(
            session, "exec", side_effect=OperationalError("SELECT", {}, Exception("gone"))
        ):
            with pytest.raises(StoreReadFailed):
                store.select(CardinalDirection)
