"""Reference data endpoints.

Categories, suppliers, employees, third parties and cost centers share the
same CRUD shape, so one router is built per kind.
"""

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel

from warehouse.api.dependencies import get_manage_references_use_case, get_scope
from warehouse.application.dto.requests import (
    CategoryRequest,
    CostCenterRequest,
    EmployeeRequest,
    SupplierRequest,
    ThirdPartyRequest,
)
from warehouse.application.dto.responses import ErrorResponse
from warehouse.application.use_cases import ManageReferencesUseCase
from warehouse.core.entities.reference import REFERENCE_MODELS, ReferenceEntity, ReferenceKind
from warehouse.core.entities.tenancy import Scope


def build_reference_router(
    kind: ReferenceKind,
    path: str,
    request_model: type[BaseModel],
) -> APIRouter:
    """Create the CRUD router for one reference kind."""
    entity_model = REFERENCE_MODELS[kind]
    router = APIRouter(prefix=f"/api/{path}", tags=["references"])

    @router.post(
        "",
        response_model=entity_model,
        status_code=status.HTTP_201_CREATED,
        responses={409: {"model": ErrorResponse}},
        name=f"create_{kind.label}",
    )
    async def create(
        request: request_model,  # type: ignore[valid-type]
        scope: Scope = Depends(get_scope),
        use_case: ManageReferencesUseCase = Depends(get_manage_references_use_case),
    ) -> ReferenceEntity:
        return await use_case.create(scope, kind, request)

    @router.get("", response_model=list[entity_model], name=f"list_{kind.label}")  # type: ignore[valid-type]
    async def list_all(
        active_only: bool = False,
        search: str | None = None,
        scope: Scope = Depends(get_scope),
        use_case: ManageReferencesUseCase = Depends(get_manage_references_use_case),
    ) -> list[ReferenceEntity]:
        return await use_case.list(scope, kind, active_only=active_only, search=search)

    @router.get(
        "/{entity_id}",
        response_model=entity_model,
        responses={404: {"model": ErrorResponse}},
        name=f"get_{kind.label}",
    )
    async def get(
        entity_id: int,
        scope: Scope = Depends(get_scope),
        use_case: ManageReferencesUseCase = Depends(get_manage_references_use_case),
    ) -> ReferenceEntity:
        return await use_case.get(scope, kind, entity_id)

    @router.put(
        "/{entity_id}",
        response_model=entity_model,
        responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
        name=f"update_{kind.label}",
    )
    async def update(
        entity_id: int,
        request: request_model,  # type: ignore[valid-type]
        scope: Scope = Depends(get_scope),
        use_case: ManageReferencesUseCase = Depends(get_manage_references_use_case),
    ) -> ReferenceEntity:
        return await use_case.update(scope, kind, entity_id, request)

    @router.delete(
        "/{entity_id}",
        status_code=status.HTTP_204_NO_CONTENT,
        responses={404: {"model": ErrorResponse}},
        name=f"delete_{kind.label}",
    )
    async def delete(
        entity_id: int,
        scope: Scope = Depends(get_scope),
        use_case: ManageReferencesUseCase = Depends(get_manage_references_use_case),
    ) -> Response:
        await use_case.delete(scope, kind, entity_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return router


categories_router = build_reference_router(ReferenceKind.CATEGORY, "categories", CategoryRequest)
suppliers_router = build_reference_router(ReferenceKind.SUPPLIER, "suppliers", SupplierRequest)
employees_router = build_reference_router(ReferenceKind.EMPLOYEE, "employees", EmployeeRequest)
third_parties_router = build_reference_router(
    ReferenceKind.THIRD_PARTY, "third-parties", ThirdPartyRequest
)
cost_centers_router = build_reference_router(
    ReferenceKind.COST_CENTER, "cost-centers", CostCenterRequest
)
