"""ReelScout FastAPI application package."""
