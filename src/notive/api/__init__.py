"""HTTP API layer (FastAPI routers, schemas, dependencies)."""
