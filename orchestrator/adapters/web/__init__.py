"""Web adapter: FastAPI routes over the engine."""
