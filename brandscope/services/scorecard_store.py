"""Scorecard store backed by Redis."""

from __future__ import annotations

import json
import logging

from pydantic import ValidationError
from redis.asyncio import Redis

from brandscope.config import settings
from brandscope.core.exceptions import InvalidScorecardTransitionError, ScorecardNotFoundError
from brandscope.core.redis import get_redis_client
from brandscope.schemas.scorecard import GenerationStep, Scorecard, ScorecardStatus

logger = logging.getLogger(__name__)

SCORECARD_KEY_PREFIX = "scorecard"

_ALLOWED_TRANSITIONS: dict[str, set[str]] = {
    "generating": {"generating", "completed", "failed"},
    "completed": set(),
    "failed": set(),
}


def check_transition(scorecard_id: str, current: str, target: str) -> None:
    """Raise unless ``current -> target`` is a legal status change."""
    if target not in _ALLOWED_TRANSITIONS.get(current, set()):
        raise InvalidScorecardTransitionError(scorecard_id, current, target)


class ScorecardStore:
    """Store and fetch scorecards as JSON documents with a TTL."""

    def __init__(self, redis_client: Redis | None = None) -> None:
        self.redis = redis_client or get_redis_client()
        self.ttl_seconds = settings.scorecard_ttl_seconds

    @staticmethod
    def _key(scorecard_id: str) -> str:
        return f"{SCORECARD_KEY_PREFIX}:{scorecard_id}"

    async def get(self, scorecard_id: str) -> Scorecard | None:
        raw = await self.redis.get(self._key(scorecard_id))
        if raw is None:
            return None
        try:
            return Scorecard.model_validate(json.loads(raw))
        except (json.JSONDecodeError, ValidationError):
            logger.warning("Invalid scorecard payload in Redis", extra={"scorecard_id": scorecard_id})
            return None

    async def require(self, scorecard_id: str) -> Scorecard:
        scorecard = await self.get(scorecard_id)
        if scorecard is None:
            raise ScorecardNotFoundError(scorecard_id)
        return scorecard

    async def save(self, scorecard: Scorecard) -> Scorecard:
        """Write a scorecard, refusing to move a stored one out of a terminal state."""
        existing = await self.get(scorecard.id)
        if existing is not None:
            check_transition(scorecard.id, existing.status, scorecard.status)
        await self.redis.set(
            self._key(scorecard.id),
            json.dumps(scorecard.to_payload()),
            ex=self.ttl_seconds,
        )
        return scorecard

    async def start(self, scorecard_id: str, brand_name: str) -> Scorecard:
        return await self.save(Scorecard(id=scorecard_id, brand_name=brand_name))

    async def append_progress(self, scorecard_id: str, step: GenerationStep) -> None:
        scorecard = await self.get(scorecard_id)
        if scorecard is None or scorecard.status != "generating":
            return
        scorecard.generation_progress.append(step)
        await self.save(scorecard)

    async def set_status(
        self,
        scorecard_id: str,
        status: ScorecardStatus,
    ) -> Scorecard:
        scorecard = await self.require(scorecard_id)
        check_transition(scorecard_id, scorecard.status, status)
        scorecard.status = status
        return await self.save(scorecard)
