"""Scorecard lookup endpoint."""

from fastapi import APIRouter, HTTPException, status

from brandscope.core.exceptions import ScorecardNotFoundError
from brandscope.services.scorecard_store import ScorecardStore

router = APIRouter()


@router.get("/{scorecard_id}")
async def get_scorecard(scorecard_id: str) -> dict:
    """Get a stored scorecard from Redis."""
    store = ScorecardStore()
    try:
        scorecard = await store.require(scorecard_id)
    except ScorecardNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message) from e

    return scorecard.to_payload()
