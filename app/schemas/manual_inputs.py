"""
app/schemas/manual_inputs.py

Request/response schemas for manual override persistence.

Field names follow the persisted document (``manualDecValues`` etc.) so the
same JSON moves between the API, the local store and the exported file.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ManualInputsPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    manual_dec_values: dict[str, Optional[float]] = Field(default_factory=dict, alias="manualDecValues")
    manual_new_fr_values: dict[str, Optional[float]] = Field(default_factory=dict, alias="manualNewFrValues")
    manual_new_fr_names: dict[str, str] = Field(default_factory=dict, alias="manualNewFrNames")


class OverrideCountsResponse(BaseModel):
    existing: int = Field(..., ge=0)
    new_entities: int = Field(..., ge=0)
    renamed: int = Field(..., ge=0)


class ManualInputsSaveResponse(BaseModel):
    saved: bool
    counts: OverrideCountsResponse
