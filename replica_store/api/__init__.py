"""HTTP API package (FastAPI) for the replica store runtime."""
