"""Shared Pydantic base models for ranking inputs and configuration."""

from pydantic import BaseModel, ConfigDict


class StrictBaseModel(BaseModel):
    """Frozen model that rejects unknown fields.

    Instances are hashable, so documents can be held in sets and used as
    dictionary keys by callers without copying.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")
