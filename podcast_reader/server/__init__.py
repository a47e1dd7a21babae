"""HTTP server: FastAPI app and the in-memory transcript session store."""
