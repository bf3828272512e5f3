"""Crossing Times — Ingestion Trigger Route."""

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session

from crossings.database import get_session
from crossings.ingest.pipeline import run_ingestion
from crossings.core.logging import get_logger

logger = get_logger("api.ingest")

router = APIRouter(tags=["Ingestion"])


@router.api_route("/fetch-and-store", methods=["GET", "POST"])
async def fetch_and_store(session: Session = Depends(get_session)):
    """Run one ingestion pass against the upstream feed.

    200 when the batch was stored, 500 otherwise. Takes no payload.
    """
    try:
        outcome = await run_ingestion(session=session)
    except Exception as e:
        logger.error(f"Ingestion crashed: {e}")
        raise HTTPException(status_code=500, detail=f"Error fetching or processing data: {e}")

    if not outcome.succeeded:
        raise HTTPException(
            status_code=500,
            detail=f"Error upserting data: {outcome.error_type}: {outcome.error}",
        )

    return {
        "status": "success",
        "message": "Data upserted successfully",
        "outcome": outcome.model_dump(mode="json"),
    }
