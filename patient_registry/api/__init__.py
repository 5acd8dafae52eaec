"""HTTP transport for the Patient Registry (FastAPI)."""
