"""Material endpoints: CRUD, FIFO lots and stock reconciliation."""

from fastapi import APIRouter, Depends, Query, Response, status

from warehouse.api.dependencies import (
    get_inspect_lots_use_case,
    get_manage_materials_use_case,
    get_recalculate_stock_use_case,
    get_scope,
)
from warehouse.application.dto.requests import CreateMaterialRequest, UpdateMaterialRequest
from warehouse.application.dto.responses import (
    ErrorResponse,
    FifoPreviewResponse,
    MaterialListResponse,
    MaterialLotsResponse,
    MaterialResponse,
    RecalculateAllResponse,
    RecalculateStockResponse,
    material_response,
)
from warehouse.application.use_cases import (
    InspectLotsUseCase,
    ManageMaterialsUseCase,
    RecalculateStockUseCase,
)
from warehouse.core.entities.tenancy import Scope

router = APIRouter(prefix="/api/materials", tags=["materials"])


@router.post(
    "",
    response_model=MaterialResponse,
    status_code=status.HTTP_201_CREATED,
    responses={404: {"model": ErrorResponse}},
)
async def create_material(
    request: CreateMaterialRequest,
    scope: Scope = Depends(get_scope),
    use_case: ManageMaterialsUseCase = Depends(get_manage_materials_use_case),
) -> MaterialResponse:
    """Register a material with zero stock."""
    material = await use_case.create(scope, request)
    return material_response(material)


@router.get("", response_model=MaterialListResponse)
async def list_materials(
    category_id: int | None = None,
    search: str | None = Query(default=None, description="Name contains"),
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    scope: Scope = Depends(get_scope),
    use_case: ManageMaterialsUseCase = Depends(get_manage_materials_use_case),
) -> MaterialListResponse:
    """List materials visible to the caller."""
    materials = await use_case.list(
        scope, category_id=category_id, search=search, limit=limit, offset=offset
    )
    return MaterialListResponse(
        items=[material_response(m) for m in materials],
        total=offset + len(materials),
        limit=limit,
        offset=offset,
        has_more=len(materials) == limit,
    )


@router.post("/recalculate", response_model=RecalculateAllResponse)
async def recalculate_all(
    scope: Scope = Depends(get_scope),
    use_case: RecalculateStockUseCase = Depends(get_recalculate_stock_use_case),
) -> RecalculateAllResponse:
    """Recompute the cached stock of every material from its ledger."""
    repairs = await use_case.execute_all(scope)
    return use_case.to_all_response(repairs)


@router.get(
    "/{material_id}",
    response_model=MaterialResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_material(
    material_id: int,
    scope: Scope = Depends(get_scope),
    use_case: ManageMaterialsUseCase = Depends(get_manage_materials_use_case),
) -> MaterialResponse:
    material = await use_case.get(scope, material_id)
    return material_response(material)


@router.patch(
    "/{material_id}",
    response_model=MaterialResponse,
    responses={404: {"model": ErrorResponse}},
)
async def update_material(
    material_id: int,
    request: UpdateMaterialRequest,
    scope: Scope = Depends(get_scope),
    use_case: ManageMaterialsUseCase = Depends(get_manage_materials_use_case),
) -> MaterialResponse:
    """Update descriptive fields; stock only changes through movements."""
    material = await use_case.update(scope, material_id, request)
    return material_response(material)


@router.delete(
    "/{material_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def delete_material(
    material_id: int,
    scope: Scope = Depends(get_scope),
    use_case: ManageMaterialsUseCase = Depends(get_manage_materials_use_case),
) -> Response:
    """Delete a material that has no movements."""
    await use_case.delete(scope, material_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/{material_id}/lots",
    response_model=MaterialLotsResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_material_lots(
    material_id: int,
    scope: Scope = Depends(get_scope),
    use_case: InspectLotsUseCase = Depends(get_inspect_lots_use_case),
) -> MaterialLotsResponse:
    """Open FIFO lots of a material, oldest first."""
    lots = await use_case.resolve_lots(scope, material_id)
    return use_case.to_lots_response(material_id, lots)


@router.get(
    "/{material_id}/fifo-preview",
    response_model=FifoPreviewResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def preview_exit(
    material_id: int,
    quantity: int = Query(..., description="Units to issue"),
    scope: Scope = Depends(get_scope),
    use_case: InspectLotsUseCase = Depends(get_inspect_lots_use_case),
) -> FifoPreviewResponse:
    """Show how an exit would be split across lots without writing it."""
    allocations = await use_case.preview_exit(scope, material_id, quantity)
    return use_case.to_preview_response(material_id, quantity, allocations)


@router.post(
    "/{material_id}/recalculate",
    response_model=RecalculateStockResponse,
    responses={404: {"model": ErrorResponse}},
)
async def recalculate_material(
    material_id: int,
    scope: Scope = Depends(get_scope),
    use_case: RecalculateStockUseCase = Depends(get_recalculate_stock_use_case),
) -> RecalculateStockResponse:
    """Recompute one material's cached stock from its ledger."""
    stock = await use_case.execute(scope, material_id)
    return use_case.to_response(material_id, stock)
