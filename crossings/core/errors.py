"""Crossing Times — Ingestion Error Taxonomy.

Every failure the pipeline can surface. All of them abort the run except
TimestampUnparseable, which normalize_timestamp recovers per record.
"""

from typing import Optional


class IngestionError(Exception):
    """Base class for pipeline failures."""


class FeedUnavailable(IngestionError):
    """Network failure or non-2xx response from the upstream feed."""

    def __init__(self, message: str, status_code: int = 0):
        self.status_code = status_code
        super().__init__(message)


class FeedMalformed(IngestionError):
    """Feed body is not JSON, not an array, or a record has the wrong shape."""


class TimestampUnparseable(IngestionError):
    """A reading's time-of-day string could not be parsed."""

    def __init__(self, value: Optional[str]):
        self.value = value
        super().__init__(f"Unparseable time of day: {value!r}")


class StoreWriteFailed(IngestionError):
    """An upsert against the store errored."""


class StoreReadFailed(IngestionError):
    """A post-upsert fetch-back against the store errored."""


class DimensionResolutionIncomplete(IngestionError):
    """A candidate could not be matched to a stored dimension row."""

    def __init__(self, dimension: str, value: object):
        self.dimension = dimension
        self.value = value
        super().__init__(f"No {dimension} row resolves {value!r}")


class FactWriteFailed(StoreWriteFailed):
    """The fact table upsert errored."""
