"""FastAPI application setup."""

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

from fastapi import FastAPI

from market_digest.api.routes import health, insights

app = FastAPI(
    title="Market Digest API",
    description="Validated market insights for the daily digest email",
    version="1.0.0",
)

# Register routes
app.include_router(health.router)
app.include_router(insights.router, prefix="/api")
