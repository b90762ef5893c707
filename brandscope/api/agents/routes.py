"""Agent and workflow endpoints."""

from __future__ import annotations

import asyncio
import json
import logging
import re
from collections.abc import AsyncIterator
from typing import Any

from fastapi import APIRouter, HTTPException, status
from fastapi.responses import StreamingResponse
from pydantic import ValidationError

from brandscope.core.exceptions import AgentNotFoundError
from brandscope.schemas.scorecard import (
    AgentGenerateRequest,
    AgentGenerateResponse,
    BrandAnalysisRequest,
    GenerationStep,
    utc_now_iso,
)
from brandscope.services.registry import AgentEndpoint, get_agent_registry, get_workflows

logger = logging.getLogger(__name__)

router = APIRouter()

MISSING_BRAND_DETAIL = 'brandName is required (or a user message naming the brand as: brand "X")'

_BRAND_IN_MESSAGE_RE = re.compile(r"brand\s*[:=]?\s*[\"“']([^\"”']+)[\"”']", re.IGNORECASE)


def parse_brand_name(payload: AgentGenerateRequest) -> str | None:
    """Return ``brandName``, or the quoted brand in the last user message."""
    if payload.brand_name and payload.brand_name.strip():
        return payload.brand_name.strip()
    for message in reversed(payload.messages):
        if message.role != "user":
            continue
        match = _BRAND_IN_MESSAGE_RE.search(message.content)
        return match.group(1).strip() if match else None
    return None


def _resolve_agent(name: str) -> AgentEndpoint:
    try:
        return get_agent_registry()[name]
    except KeyError:
        error = AgentNotFoundError(name)
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=error.message) from error


def _to_analysis_request(payload: AgentGenerateRequest) -> BrandAnalysisRequest:
    brand_name = parse_brand_name(payload)
    if not brand_name:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=MISSING_BRAND_DETAIL,
        )
    try:
        return BrandAnalysisRequest(
            brand_name=brand_name,
            brand_context=payload.brand_context,
            brand_url=payload.brand_url,
            additional_identifiers=payload.additional_identifiers,
            subreddits=payload.subreddits,
            max_competitors=payload.max_competitors,
        )
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=e.errors(include_url=False, include_context=False),
        ) from e


@router.get("/agents", summary="List agents")
async def list_agents() -> dict[str, list[dict[str, Any]]]:
    return {"agents": [agent.describe() for agent in get_agent_registry().values()]}


@router.get("/workflows", summary="List workflows")
async def list_workflows() -> dict[str, list[dict[str, Any]]]:
    return {"workflows": [workflow.describe() for workflow in get_workflows()]}


@router.post("/agents/{name}/generate", response_model=AgentGenerateResponse)
async def generate(name: str, payload: AgentGenerateRequest) -> AgentGenerateResponse:
    """Run an agent's workflow and return its final output."""
    agent = _resolve_agent(name)
    request = _to_analysis_request(payload)
    logger.info("Agent generate requested", extra={"agent": name, "brand": request.brand_name})

    output = await agent.run(request, None)
    body = output.model_dump(mode="json", by_alias=True)
    return AgentGenerateResponse(object=body, text=json.dumps(body))


@router.post("/agents/{name}/stream", summary="Stream agent progress as NDJSON")
async def stream(name: str, payload: AgentGenerateRequest) -> StreamingResponse:
    """Run an agent's workflow, streaming one JSON line per progress event.

    The last line has ``step == "complete"`` and carries the output, or
    ``step == "error"`` when the run raised.
    """
    agent = _resolve_agent(name)
    request = _to_analysis_request(payload)
    logger.info("Agent stream requested", extra={"agent": name, "brand": request.brand_name})

    queue: asyncio.Queue[dict[str, Any] | None] = asyncio.Queue()

    async def on_progress(step: GenerationStep) -> None:
        await queue.put(step.to_payload())

    async def produce() -> None:
        try:
            output = await agent.run(request, on_progress)
            await queue.put(
                {
                    "step": "complete",
                    "status": "completed",
                    "message": "Workflow completed",
                    "timestamp": utc_now_iso(),
                    "output": output.model_dump(mode="json", by_alias=True),
                }
            )
        except Exception as e:
            logger.exception("Agent stream failed", extra={"agent": name})
            await queue.put(
                {
                    "step": "error",
                    "status": "failed",
                    "message": str(e),
                    "timestamp": utc_now_iso(),
                }
            )
        finally:
            await queue.put(None)

    async def lines() -> AsyncIterator[str]:
        task = asyncio.create_task(produce())
        try:
            while True:
                item = await queue.get()
                if item is None:
                    break
                yield json.dumps(item) + "\n"
        finally:
            if not task.done():
                task.cancel()

    return StreamingResponse(lines(), media_type="application/x-ndjson")
