"""FastAPI integration points for the access core."""
