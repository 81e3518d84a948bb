"""Health check endpoint."""

from fastapi import APIRouter

from market_digest.api.response import success_response
from market_digest.llm.providers import PerplexityProvider

router = APIRouter(tags=["System"])


@router.get("/health")
async def health_check() -> dict:
    """Return system health status and whether the upstream key is set."""
    return success_response(
        {
            "status": "ok",
            "insights_configured": PerplexityProvider().is_configured,
        }
    )
