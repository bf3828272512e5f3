"""Crossing Times — Ingestion Pipeline Orchestrator.

Runs one stateless unit of work:
  fetch → partition → resolve dimensions → assemble facts → commit

Stages only move forward. Any fatal error sends the run straight to
FAILED; nothing is retried here.
"""

import time
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional
from zoneinfo import ZoneInfo

from pydantic import BaseModel
from sqlmodel import Session

from crossings.config import settings
from crossings.connectors.crossing_times.client import CrossingFeedClient
from crossings.core.errors import IngestionError
from crossings.core.logging import get_logger
from crossings.ingest.denormalized import build_crossing_time_rows, write_crossing_times
from crossings.ingest.dimension_resolver import DimensionResolver, ResolvedDimensions
from crossings.ingest.fact_assembler import assemble_facts, write_facts
from crossings.ingest.partitioner import partition_readings
from crossings.ingest.store import Store
from crossings.models.raw_models import RawReading

logger = get_logger("ingest.pipeline")

SCHEMA_VARIANTS = ("normalized", "denormalized")


class PipelineStage(str, Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    PARTITIONING = "partitioning"
    RESOLVING_DIMENSIONS = "resolving_dimensions"
    ASSEMBLING_FACTS = "assembling_facts"
    COMMITTING = "committing"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


_NEXT_STAGE: Dict[PipelineStage, PipelineStage] = {
    PipelineStage.IDLE: PipelineStage.FETCHING,
    PipelineStage.FETCHING: PipelineStage.PARTITIONING,
    PipelineStage.PARTITIONING: PipelineStage.RESOLVING_DIMENSIONS,
    PipelineStage.RESOLVING_DIMENSIONS: PipelineStage.ASSEMBLING_FACTS,
    PipelineStage.ASSEMBLING_FACTS: PipelineStage.COMMITTING,
    PipelineStage.COMMITTING: PipelineStage.SUCCEEDED,
}


class IngestionOutcome(BaseModel):
    """Summary of one pipeline invocation."""

    status: str = "succeeded"
    """Either "succeeded" or "failed"."""
    stage: PipelineStage = PipelineStage.IDLE
    failed_stage: Optional[PipelineStage] = None
    variant: str = "normalized"
    reference_time: str = ""
    readings_fetched: int = 0
    readings_dropped: int = 0
    dimension_rows: Dict[str, int] = {}
    facts_submitted: int = 0
    facts_inserted: int = 0
    error_type: Optional[str] = None
    error: Optional[str] = None
    duration_ms: int = 0

    @property
    def succeeded(self) -> bool:
        return self.status == "succeeded"


class IngestionRun:
    """A single pass of the pipeline over one feed snapshot."""

    def __init__(
        self,
        session: Session,
        client: Optional[CrossingFeedClient] = None,
        reference: Optional[datetime] = None,
        variant: Optional[str] = None,
        atomic: Optional[bool] = None,
    ):
        self.variant = variant or settings.schema_variant
        if self.variant not in SCHEMA_VARIANTS:
            raise ValueError(
                f"Unknown schema variant '{self.variant}', expected one of {SCHEMA_VARIANTS}"
            )
        self.store = Store(session)
        self.client = client or CrossingFeedClient()
        self.reference = reference or datetime.now(timezone.utc)
        self.atomic = settings.atomic_commit if atomic is None else atomic
        self.tz = ZoneInfo(settings.feed_timezone)
        self.stage = PipelineStage.IDLE
        self.outcome = IngestionOutcome(
            variant=self.variant, reference_time=self.reference.isoformat()
        )

    def _advance(self, stage: PipelineStage) -> None:
        expected = _NEXT_STAGE.get(self.stage)
        if stage != expected:
            raise RuntimeError(f"Illegal stage transition {self.stage.value} → {stage.value}")
        self.stage = stage
        self.outcome.stage = stage
        logger.info("Stage entered", extra={"stage": stage.value})

    def _fail(self, error: Exception) -> None:
        self.outcome.failed_stage = self.stage
        self.stage = PipelineStage.FAILED
        self.outcome.stage = PipelineStage.FAILED
        self.outcome.status = "failed"
        self.outcome.error_type = type(error).__name__
        self.outcome.error = str(error)
        logger.error(
            f"Pipeline failed: {self.outcome.error_type}: {error}",
            extra={"stage": self.outcome.failed_stage.value},
        )

    async def execute(self) -> IngestionOutcome:
        """Run every stage; fatal ingestion errors yield a failed outcome."""
        started = time.monotonic()
        logger.info(
            f"Starting ingestion ({self.variant}, atomic={self.atomic}) "
            f"at reference {self.reference.isoformat()}"
        )
        try:
            self._advance(PipelineStage.FETCHING)
            try:
                readings = await self.client.fetch_readings()
            finally:
                await self.client.close()
            self.outcome.readings_fetched = len(readings)

            if self.variant == "denormalized":
                self._run_denormalized(readings)
            else:
                self._run_normalized(readings)

            self._advance(PipelineStage.SUCCEEDED)
        except IngestionError as e:
            self.store.rollback()
            self._fail(e)
        except Exception as e:
            self.store.rollback()
            self._fail(e)
            raise
        finally:
            self.outcome.duration_ms = int((time.monotonic() - started) * 1000)

        logger.info(
            f"Ingestion {self.outcome.status}: {self.outcome.readings_fetched} fetched, "
            f"{self.outcome.readings_dropped} dropped, "
            f"{self.outcome.facts_inserted}/{self.outcome.facts_submitted} facts new",
            extra={"duration_ms": self.outcome.duration_ms},
        )
        return self.outcome

    def _run_normalized(self, readings: List[RawReading]) -> None:
        self._advance(PipelineStage.PARTITIONING)
        partitions = partition_readings(readings, self.reference, self.tz)

        self._advance(PipelineStage.RESOLVING_DIMENSIONS)
        resolver = DimensionResolver(self.store, commit_each=not self.atomic)
        resolved: ResolvedDimensions = resolver.resolve_all(partitions)
        self.outcome.dimension_rows = resolved.counts()

        self._advance(PipelineStage.ASSEMBLING_FACTS)
        rows, dropped = assemble_facts((p.fact for p in partitions), resolved)
        self.outcome.readings_dropped = dropped
        self.outcome.facts_submitted = len(rows)

        self._advance(PipelineStage.COMMITTING)
        self.outcome.facts_inserted = write_facts(self.store, rows)
        self.store.commit()

    def _run_denormalized(self, readings: List[RawReading]) -> None:
        self._advance(PipelineStage.PARTITIONING)
        rows, dropped = build_crossing_time_rows(readings, self.reference, self.tz)
        self.outcome.readings_dropped = dropped

        # No dimension tables in this variant
        self._advance(PipelineStage.RESOLVING_DIMENSIONS)
        self._advance(PipelineStage.ASSEMBLING_FACTS)
        self.outcome.facts_submitted = len(rows)

        self._advance(PipelineStage.COMMITTING)
        self.outcome.facts_inserted = write_crossing_times(self.store, rows)
        self.store.commit()


async def run_ingestion(
    session: Session,
    client: Optional[CrossingFeedClient] = None,
    reference: Optional[datetime] = None,
    variant: Optional[str] = None,
) -> IngestionOutcome:
    """Execute one ingestion pass."""
    return await IngestionRun(session, client, reference, variant).execute()
