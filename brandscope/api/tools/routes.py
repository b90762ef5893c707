"""Tool registry endpoints."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Body, HTTPException, status
from pydantic import ValidationError

from brandscope.core.exceptions import ToolNotFoundError
from brandscope.services.registry import get_tool_registry

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", summary="List tools")
async def list_tools() -> dict[str, list[dict[str, Any]]]:
    return {"tools": [tool.describe() for tool in get_tool_registry().values()]}


@router.post("/{tool_id}/execute", summary="Execute one tool")
async def execute_tool(tool_id: str, payload: dict[str, Any] = Body(...)) -> dict[str, Any]:
    """Validate the body against the tool's input schema and run it.

    Accepts the input directly or wrapped as ``{"context": {...}}``.
    """
    tool = get_tool_registry().get(tool_id)
    if tool is None:
        error = ToolNotFoundError(tool_id)
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=error.message)

    raw_input = payload["context"] if isinstance(payload.get("context"), dict) else payload
    try:
        data = tool.input_schema.model_validate(raw_input)
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=e.errors(include_url=False, include_context=False),
        ) from e

    logger.info("Tool execution requested", extra={"tool": tool_id})
    result = await tool.execute(data)
    return result.model_dump(mode="json", by_alias=True)
