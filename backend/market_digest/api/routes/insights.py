"""Market insight endpoints.

Provides:
- GET /insights: today's validated insights, as the digest would render them

An empty list is a normal outcome; the digest omits the section.
"""

from fastapi import APIRouter

from market_digest.api.response import InsightsResponse, success_response
from market_digest.services import insight_service

router = APIRouter(tags=["Insights"])


@router.get("/insights", response_model=InsightsResponse)
async def get_insights() -> dict:
    """Fetch and validate today's market insights."""
    insights = await insight_service.fetch_market_insights()
    return success_response(
        {
            "insights": [insight.model_dump() for insight in insights],
            "count": len(insights),
        }
    )
