"""Response envelope helpers for consistent API responses."""

from typing import Any

from pydantic import BaseModel

from market_digest.models.insight import ValidatedInsight


class ErrorDetail(BaseModel):
    """Error detail structure."""

    code: str
    message: str


class InsightsPayload(BaseModel):
    """Data section of the insights response."""

    insights: list[ValidatedInsight]
    count: int


class InsightsResponse(BaseModel):
    """Envelope returned by GET /api/insights."""

    data: InsightsPayload | None = None
    error: ErrorDetail | None = None


def success_response(data: Any) -> dict[str, Any]:
    """Create a success response envelope."""
    return {"data": data, "error": None}
