"""Daily market digest: insight extraction and source validation."""
