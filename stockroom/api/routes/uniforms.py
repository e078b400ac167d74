"""Uniform inventory and issuance endpoints."""

from datetime import date, datetime

from fastapi import APIRouter, Depends, Query, status

from stockroom.api.dependencies import get_actor_id, get_uniform_service
from stockroom.api.serializers import (
    issued_record_response,
    uniform_category_response,
    uniform_movement_response,
    uniform_response,
)
from stockroom.application.dto.requests import (
    AddUniformRequest,
    CreateUniformCategoryRequest,
    IssueUniformRequest,
    RestockUniformRequest,
    UpdateIssuedRecordRequest,
    UpdateUniformRequest,
)
from stockroom.application.dto.responses import (
    ErrorResponse,
    IssuedRecordResponse,
    IssueUniformResponse,
    UniformCategoryResponse,
    UniformChangeResponse,
    UniformItemResponse,
    UniformMovementResponse,
)
from stockroom.core.entities import (
    IssuedRecord,
    IssuedRecordDetails,
    IssuedRecordUpdate,
    MovementType,
    UniformItem,
    UniformItemUpdate,
)
from stockroom.core.services import UniformLedgerService

router = APIRouter(prefix="/api/uniforms", tags=["uniforms"])


async def _uniform_response(
    service: UniformLedgerService, item: UniformItem
) -> UniformItemResponse:
    known = {c.name for c in await service.list_categories()}
    return uniform_response(item, category_exists=item.category in known)


def _record_response(record: IssuedRecord, item: UniformItem) -> IssuedRecordResponse:
    return issued_record_response(
        IssuedRecordDetails(
            record=record, uniform_name=item.name, uniform_category=item.category
        )
    )


# Categories


@router.get("/categories", response_model=list[UniformCategoryResponse])
async def list_categories(
    service: UniformLedgerService = Depends(get_uniform_service),
) -> list[UniformCategoryResponse]:
    return [uniform_category_response(c) for c in await service.list_categories()]


@router.post(
    "/categories",
    response_model=UniformCategoryResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def create_category(
    request: CreateUniformCategoryRequest,
    service: UniformLedgerService = Depends(get_uniform_service),
) -> UniformCategoryResponse:
    return uniform_category_response(await service.add_category(request.name))


@router.delete(
    "/categories/{category_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}},
)
async def delete_category(
    category_id: int,
    service: UniformLedgerService = Depends(get_uniform_service),
) -> None:
    """Delete a category. Uniforms in it show as uncategorized."""
    await service.delete_category(category_id)


# Items


@router.get("/items", response_model=list[UniformItemResponse])
async def list_uniforms(
    service: UniformLedgerService = Depends(get_uniform_service),
) -> list[UniformItemResponse]:
    return [
        uniform_response(d.item, category_exists=d.category_exists)
        for d in await service.list_uniforms()
    ]


@router.post(
    "/items",
    response_model=UniformChangeResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
)
async def add_uniform(
    request: AddUniformRequest,
    actor_id: str | None = Depends(get_actor_id),
    service: UniformLedgerService = Depends(get_uniform_service),
) -> UniformChangeResponse:
    item, movement = await service.add_uniform(
        name=request.name,
        category=request.category,
        total_quantity=request.total_quantity,
        min_quantity=request.min_quantity,
        actor_id=actor_id,
    )
    return UniformChangeResponse(
        uniform=await _uniform_response(service, item),
        movement=uniform_movement_response(movement),
    )


@router.get(
    "/items/{uniform_id}",
    response_model=UniformItemResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_uniform(
    uniform_id: int,
    service: UniformLedgerService = Depends(get_uniform_service),
) -> UniformItemResponse:
    return await _uniform_response(service, await service.get_uniform(uniform_id))


@router.patch(
    "/items/{uniform_id}",
    response_model=UniformItemResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_uniform(
    uniform_id: int,
    request: UpdateUniformRequest,
    service: UniformLedgerService = Depends(get_uniform_service),
) -> UniformItemResponse:
    update = UniformItemUpdate(**request.model_dump(exclude_unset=True))
    item = await service.update_uniform(uniform_id, update)
    return await _uniform_response(service, item)


@router.delete(
    "/items/{uniform_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}},
)
async def delete_uniform(
    uniform_id: int,
    service: UniformLedgerService = Depends(get_uniform_service),
) -> None:
    await service.delete_uniform(uniform_id)


@router.post(
    "/items/{uniform_id}/restock",
    response_model=UniformChangeResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def restock(
    uniform_id: int,
    request: RestockUniformRequest,
    actor_id: str | None = Depends(get_actor_id),
    service: UniformLedgerService = Depends(get_uniform_service),
) -> UniformChangeResponse:
    item, movement = await service.restock(
        uniform_id, request.quantity, notes=request.notes, actor_id=actor_id
    )
    return UniformChangeResponse(
        uniform=await _uniform_response(service, item),
        movement=uniform_movement_response(movement),
    )


@router.get(
    "/items/{uniform_id}/movements", response_model=list[UniformMovementResponse]
)
async def uniform_movements(
    uniform_id: int,
    limit: int | None = Query(default=None, ge=1),
    movement_type: MovementType | None = None,
    start: datetime | None = None,
    end: datetime | None = None,
    service: UniformLedgerService = Depends(get_uniform_service),
) -> list[UniformMovementResponse]:
    movements = await service.list_movements(
        uniform_id=uniform_id,
        limit=limit,
        movement_type=movement_type,
        start=start,
        end=end,
    )
    return [uniform_movement_response(m) for m in movements]


@router.get("/movements", response_model=list[UniformMovementResponse])
async def recent_movements(
    limit: int | None = Query(default=None, ge=1),
    movement_type: MovementType | None = None,
    search: str | None = Query(default=None, description="Matches uniform name or notes"),
    start: datetime | None = None,
    end: datetime | None = None,
    service: UniformLedgerService = Depends(get_uniform_service),
) -> list[UniformMovementResponse]:
    filters = {"movement_type": movement_type, "search": search, "start": start, "end": end}
    if limit is None and all(v is None for v in filters.values()):
        movements = await service.list_movements(**filters)
    else:
        movements = await service.list_movements(limit=limit, **filters)
    return [uniform_movement_response(m) for m in movements]


# Issuances


@router.get("/issuances", response_model=list[IssuedRecordResponse])
async def list_issuances(
    start_date: date | None = None,
    end_date: date | None = None,
    service: UniformLedgerService = Depends(get_uniform_service),
) -> list[IssuedRecordResponse]:
    """Issuance records, optionally within an inclusive date range."""
    records = await service.list_issued_records(start_date=start_date, end_date=end_date)
    return [issued_record_response(r) for r in records]


@router.post(
    "/issuances",
    response_model=IssueUniformResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)
async def issue_uniform(
    request: IssueUniformRequest,
    actor_id: str | None = Depends(get_actor_id),
    service: UniformLedgerService = Depends(get_uniform_service),
) -> IssueUniformResponse:
    """Issue uniforms to a student. 409 when remaining stock is short."""
    record, item = await service.issue_uniform(
        student_name=request.student_name,
        uniform_id=request.uniform_id,
        quantity=request.quantity,
        issue_date=request.issue_date,
        actor_id=actor_id,
    )
    return IssueUniformResponse(
        record=_record_response(record, item),
        uniform=await _uniform_response(service, item),
    )


@router.patch(
    "/issuances/{record_id}",
    response_model=IssuedRecordResponse,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)
async def update_issuance(
    record_id: int,
    request: UpdateIssuedRecordRequest,
    actor_id: str | None = Depends(get_actor_id),
    service: UniformLedgerService = Depends(get_uniform_service),
) -> IssuedRecordResponse:
    """Edit a record. A changed quantity adjusts the uniform's remaining stock."""
    update = IssuedRecordUpdate(**request.model_dump(exclude_unset=True))
    record = await service.update_issued_record(record_id, update, actor_id=actor_id)
    item = await service.get_uniform(record.uniform_id)
    return _record_response(record, item)


@router.delete(
    "/issuances/{record_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}},
)
async def delete_issuance(
    record_id: int,
    actor_id: str | None = Depends(get_actor_id),
    service: UniformLedgerService = Depends(get_uniform_service),
) -> None:
    """Delete a record and restore its quantity to the uniform."""
    await service.delete_issued_record(record_id, actor_id=actor_id)
