"""Entity to response DTO conversion, with display fallbacks applied."""

from stockroom.application.dto.responses import (
    ActivityLogResponse,
    CategoryBreakdownResponse,
    CategoryResponse,
    DashboardStatsResponse,
    IssuedRecordResponse,
    StockItemResponse,
    StockMovementResponse,
    UniformCategoryResponse,
    UniformItemResponse,
    UniformMovementResponse,
)
from stockroom.config import get_settings
from stockroom.core.entities import (
    ActivityLogEntry,
    Category,
    DashboardStats,
    IssuedRecordDetails,
    StockItem,
    StockItemDetails,
    StockMovementDetails,
    UniformCategory,
    UniformItem,
    UniformItemDetails,
    UniformMovement,
)


def category_response(category: Category) -> CategoryResponse:
    return CategoryResponse(
        id=category.id,
        name=category.name,
        description=category.description,
        color=category.color,
        created_at=category.created_at,
    )


def stock_item_response(
    item: StockItem, category: Category | None = None
) -> StockItemResponse:
    details = StockItemDetails(item=item, category=category)
    return StockItemResponse(
        id=item.id,
        name=item.name,
        category_id=item.category_id,
        category_name=details.category_name(get_settings().ledger.uncategorized_label),
        category_color=category.color if category else None,
        quantity=item.quantity,
        total_added=item.total_added,
        issued=item.issued,
        min_quantity=item.min_quantity,
        status=item.status.value,
        person_responsible=item.person_responsible,
        notes=item.notes,
        created_by=item.created_by,
        created_at=item.created_at,
        updated_at=item.updated_at,
    )


def stock_details_response(details: StockItemDetails) -> StockItemResponse:
    return stock_item_response(details.item, details.category)


def stock_movement_response(details: StockMovementDetails) -> StockMovementResponse:
    movement = details.movement
    return StockMovementResponse(
        id=movement.id,
        item_id=movement.item_id,
        item_name=details.display_item_name(get_settings().ledger.deleted_item_label),
        category_name=details.category_name,
        category_color=details.category_color,
        movement_type=movement.movement_type.value,
        quantity_delta=movement.quantity_delta,
        previous_quantity=movement.previous_quantity,
        new_quantity=movement.new_quantity,
        notes=movement.notes,
        performed_by=movement.performed_by,
        created_at=movement.created_at,
    )


def activity_response(entry: ActivityLogEntry) -> ActivityLogResponse:
    return ActivityLogResponse(**entry.model_dump())


def dashboard_response(stats: DashboardStats) -> DashboardStatsResponse:
    return DashboardStatsResponse(
        total_items=stats.total_items,
        in_stock=stats.in_stock,
        low_stock=stats.low_stock,
        out_of_stock=stats.out_of_stock,
        recently_added=[stock_item_response(item) for item in stats.recently_added],
        recently_issued=[stock_movement_response(m) for m in stats.recently_issued],
        category_breakdown=[
            CategoryBreakdownResponse(**b.model_dump()) for b in stats.category_breakdown
        ],
    )


def uniform_category_response(category: UniformCategory) -> UniformCategoryResponse:
    return UniformCategoryResponse(
        id=category.id, name=category.name, created_at=category.created_at
    )


def uniform_response(
    item: UniformItem, category_exists: bool = True
) -> UniformItemResponse:
    details = UniformItemDetails(item=item, category_exists=category_exists)
    return UniformItemResponse(
        id=item.id,
        name=item.name,
        category=details.category_name(get_settings().ledger.uncategorized_label),
        total_quantity=item.total_quantity,
        remaining_quantity=item.remaining_quantity,
        issued=item.issued,
        min_quantity=item.min_quantity,
        status=item.status.value,
        stock_percentage=round(item.stock_percentage, 2),
        created_at=item.created_at,
        updated_at=item.updated_at,
    )


def uniform_movement_response(movement: UniformMovement) -> UniformMovementResponse:
    return UniformMovementResponse(
        id=movement.id,
        uniform_id=movement.uniform_id,
        movement_type=movement.movement_type.value,
        quantity_delta=movement.quantity_delta,
        previous_quantity=movement.previous_quantity,
        new_quantity=movement.new_quantity,
        notes=movement.notes,
        performed_by=movement.performed_by,
        created_at=movement.created_at,
    )


def issued_record_response(
    details: IssuedRecordDetails,
) -> IssuedRecordResponse:
    ledger = get_settings().ledger
    record = details.record
    return IssuedRecordResponse(
        id=record.id,
        student_name=record.student_name,
        uniform_id=record.uniform_id,
        uniform_name=details.uniform_name or ledger.deleted_item_label,
        uniform_category=details.uniform_category or ledger.uncategorized_label,
        quantity_taken=record.quantity_taken,
        issue_date=record.issue_date,
        created_at=record.created_at,
    )
