"""Design models for stored A2UI message batches."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class StoredDesign(BaseModel):
    """One exported design: a complete, validated message batch."""

    id: str
    name: str
    messages: list[dict[str, Any]]
    updated_at: datetime

    @staticmethod
    def display_name(design_id: str) -> str:
        return design_id.replace("_", " ")


# Design ids become file names under DESIGNS_DIR
DESIGN_ID_PATTERN = r"^[A-Za-z0-9_.-]+$"


class SaveDesignRequest(BaseModel):
    """What the client sends to POST /api/designs."""

    model_config = {"extra": "forbid"}

    # Defaults to the surfaceId of the batch's createSurface message
    id: str | None = Field(default=None, min_length=1, max_length=200, pattern=DESIGN_ID_PATTERN)
    messages: list[Any]


class ValidationErrorItem(BaseModel):
    path: str
    message: str
    kind: str


class DesignRejectedResponse(BaseModel):
    """Returned with 422 when a design batch fails validation."""

    detail: str = "Invalid A2UI messages"
    errors: list[ValidationErrorItem]


class PreviewWarning(BaseModel):
    code: str
    message: str


class DesignPreviewResponse(BaseModel):
    """What GET /api/designs/{id}/preview returns."""

    surface_id: str
    renderable: bool
    tree: dict[str, Any] | None
    outline: str
    warnings: list[PreviewWarning] = Field(default_factory=list)


class DataBinding(BaseModel):
    path: str
    current_value: Any
    bound_to: str


class DesignBindingsResponse(BaseModel):
    """What GET /api/designs/{id}/bindings returns."""

    design_id: str
    bindings: list[DataBinding]
