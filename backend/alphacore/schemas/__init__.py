"""API Schemas - pydantic request/response models for every route."""
