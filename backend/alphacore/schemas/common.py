"""Shared schema helpers."""

from pydantic import BaseModel, ConfigDict


class ORMModel(BaseModel):
    """Response model readable straight from ORM rows."""
    model_config = ConfigDict(from_attributes=True)


def blank_to_none(v):
    """Form inputs send "" for a cleared optional field."""
    if isinstance(v, str) and not v.strip():
        return None
    return v
