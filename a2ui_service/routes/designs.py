"""Design routes — list, save, get, preview, bindings."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse

from a2ui.kernel.processor import BatchRejected, import_batch
from a2ui.kernel.renderer import render_text, render_tree
from a2ui.kernel.surface import Surface
from a2ui.kernel.types import ValidationError
from a2ui.kernel.validator import validate
from a2ui_service.deps import get_design_storage, new_store
from a2ui_service.models.design import (
    DESIGN_ID_PATTERN,
    DesignBindingsResponse,
    DesignPreviewResponse,
    DesignRejectedResponse,
    PreviewWarning,
    SaveDesignRequest,
    StoredDesign,
    ValidationErrorItem,
)
from a2ui_service.services.design_store import DesignStorage, create_surface_ids, design_id_for, is_valid_design_id

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/designs", tags=["designs"])


def _rejected(errors: list[ValidationError]) -> JSONResponse:
    body = DesignRejectedResponse(errors=[ValidationErrorItem(**e.to_dict()) for e in errors])
    return JSONResponse(status_code=422, content=body.model_dump())


async def _load(storage: DesignStorage, design_id: str) -> StoredDesign:
    design = await storage.get(design_id)
    if design is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Design not found.")
    return design


def _fold(design: StoredDesign) -> Surface:
    """
    Fold a stored design into a fresh store and return the surface it is
    keyed by. Referential problems are kept; they surface as preview warnings.
    """
    store = new_store()
    import_batch(store, design.messages)
    surface = store.get_surface(design.id)
    if surface is None:
        raise BatchRejected([ValidationError(path="messages", message=f"Batch leaves no surface '{design.id}'")])
    return surface


def _design_id_errors(messages: list, requested: str | None) -> list[ValidationError]:
    """A design holds exactly one surface, and its id must be usable as a file name."""
    found = create_surface_ids(messages)
    surface_ids = sorted({surface_id for _, surface_id in found})
    if len(surface_ids) > 1:
        return [ValidationError(path="messages", message=f"A design holds one surface, found {surface_ids}")]

    index, surface_id = found[0]
    if not is_valid_design_id(surface_id):
        return [
            ValidationError(
                path=f"messages[{index}].createSurface.surfaceId",
                message=f"Surface id '{surface_id}' must match {DESIGN_ID_PATTERN}",
            )
        ]
    if requested and requested != surface_id:
        return [ValidationError(path="id", message=f"Design id '{requested}' must match createSurface '{surface_id}'")]

    store = new_store()
    import_batch(store, messages)
    if surface_id not in store:
        return [ValidationError(path="messages", message=f"Batch leaves no surface '{surface_id}'")]
    return []


def _surface_warnings(surface: Surface) -> list[PreviewWarning]:
    warnings: list[PreviewWarning] = []
    if not surface.is_renderable:
        warnings.append(
            PreviewWarning(code="MISSING_ROOT", message=f"no '{surface.root_component_id}' component")
        )
    for parent_id, child_id in surface.components.dangling_references():
        warnings.append(
            PreviewWarning(code="DANGLING_CHILD", message=f"'{parent_id}' references missing child '{child_id}'")
        )
    return warnings


@router.get("", status_code=200)
async def list_designs(storage: DesignStorage = Depends(get_design_storage)) -> list[StoredDesign]:
    """List every stored design."""
    return await storage.list_all()


@router.post(
    "",
    status_code=201,
    responses={422: {"model": DesignRejectedResponse}},
)
async def save_design(
    req: SaveDesignRequest,
    storage: DesignStorage = Depends(get_design_storage),
):
    """
    Validate a complete exported batch and store it.

    The batch must pass full validation (structural and referential) and
    describe exactly one surface whose id is a valid design id; on failure
    nothing is stored and every error is returned.
    """
    errors = validate(req.messages, complete=True) or _design_id_errors(req.messages, req.id)
    if errors:
        logger.info("designs: rejected batch with %d errors", len(errors))
        return _rejected(errors)

    design = await storage.put(design_id_for(req.messages, ""), req.messages)
    return JSONResponse(status_code=status.HTTP_201_CREATED, content=design.model_dump(mode="json"))


@router.get("/{design_id}", status_code=200)
async def get_design(design_id: str, storage: DesignStorage = Depends(get_design_storage)) -> StoredDesign:
    """Get a single design by id."""
    return await _load(storage, design_id)


@router.get(
    "/{design_id}/preview",
    status_code=200,
    responses={422: {"model": DesignRejectedResponse}},
)
async def preview_design(design_id: str, storage: DesignStorage = Depends(get_design_storage)):
    """
    Fold the design into a fresh store and return the fully resolved tree.

    Design tokens and data bindings are resolved; clock templates use the
    server's current time.
    """
    design = await _load(storage, design_id)
    try:
        surface = _fold(design)
    except BatchRejected as e:
        logger.warning("designs: stored design %s no longer validates", design_id)
        return _rejected(e.errors)

    return DesignPreviewResponse(
        surface_id=surface.surface_id,
        renderable=surface.is_renderable,
        tree=render_tree(surface),
        outline=render_text(surface),
        warnings=_surface_warnings(surface),
    )


@router.get(
    "/{design_id}/bindings",
    status_code=200,
    responses={422: {"model": DesignRejectedResponse}},
)
async def design_bindings(design_id: str, storage: DesignStorage = Depends(get_design_storage)):
    """Every `${/path}` data binding in the design with its default value."""
    design = await _load(storage, design_id)
    try:
        surface = _fold(design)
    except BatchRejected as e:
        return _rejected(e.errors)
    return DesignBindingsResponse(design_id=design_id, bindings=surface.data_bindings())
