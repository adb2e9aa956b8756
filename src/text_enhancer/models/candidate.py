"""Model candidates tried by the fallback loop."""

from __future__ import annotations

from pydantic import BaseModel, Field


class SamplingParameters(BaseModel):
    temperature: float = Field(default=0.3, ge=0.0, le=2.0)
    max_tokens: int = Field(default=2000, ge=1)
    top_p: float = Field(default=0.8, gt=0.0, le=1.0)
    frequency_penalty: float = 0.1
    presence_penalty: float = 0.0


class ModelCandidate(BaseModel):
    """One entry in an ordered fallback list; position encodes preference."""

    model_id: str = Field(min_length=1)
    sampling: SamplingParameters = Field(default_factory=SamplingParameters)

    model_config = {"frozen": True, "protected_namespaces": ()}
