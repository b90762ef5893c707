"""API router aggregator."""

from fastapi import APIRouter

from brandscope.api.agents.routes import router as agents_router
from brandscope.api.scorecards.routes import router as scorecards_router
from brandscope.api.tools.routes import router as tools_router

api_router = APIRouter()

api_router.include_router(agents_router, tags=["Agents"])
api_router.include_router(tools_router, prefix="/tools", tags=["Tools"])
api_router.include_router(scorecards_router, prefix="/scorecards", tags=["Scorecards"])
