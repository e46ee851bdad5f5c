"""HTTP surface (FastAPI routers) for Solar Rank Intelligence."""
