"""API Layer - FastAPI routers, shared dependencies and global error handlers."""
