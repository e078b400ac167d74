"""Abstract interface for uniform storage."""

from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import Any

from stockroom.core.entities.ledger import MovementType, QuantityChange
from stockroom.core.entities.uniform import (
    IssuedRecord,
    IssuedRecordDetails,
    UniformCategory,
    UniformItem,
    UniformMovement,
)


class IUniformStore(ABC):
    """Interface for uniform items, categories, movements and issuance records."""

    @abstractmethod
    async def create_category(self, category: UniformCategory) -> UniformCategory:
        """Create a uniform category. Raises DuplicateCategoryError on a name clash."""
        pass

    @abstractmethod
    async def list_categories(self) -> list[UniformCategory]:
        pass

    @abstractmethod
    async def delete_category(self, category_id: int) -> bool:
        pass

    @abstractmethod
    async def create_uniform(
        self, item: UniformItem, initial: QuantityChange
    ) -> tuple[UniformItem, UniformMovement]:
        """Insert a uniform item and its initial movement in one transaction."""
        pass

    @abstractmethod
    async def get_uniform(self, uniform_id: int) -> UniformItem | None:
        pass

    @abstractmethod
    async def list_uniforms(self) -> list[UniformItem]:
        """List uniform items, newest first."""
        pass

    @abstractmethod
    async def update_uniform(
        self, uniform_id: int, changes: dict[str, Any]
    ) -> UniformItem:
        """Apply a partial field update. Never writes a movement."""
        pass

    @abstractmethod
    async def delete_uniform(self, uniform_id: int) -> bool:
        """Delete a uniform item. Movements and issuance records are kept."""
        pass

    @abstractmethod
    async def apply_quantity_change(
        self, uniform_id: int, change: QuantityChange
    ) -> tuple[UniformItem, UniformMovement]:
        """Compare-and-set remaining_quantity and record the movement atomically."""
        pass

    @abstractmethod
    async def list_movements(
        self,
        uniform_id: int | None = None,
        limit: int | None = None,
        movement_type: MovementType | None = None,
        search: str | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[UniformMovement]:
        pass

    @abstractmethod
    async def create_record(self, record: IssuedRecord) -> IssuedRecord:
        pass

    @abstractmethod
    async def get_record(self, record_id: int) -> IssuedRecord | None:
        pass

    @abstractmethod
    async def update_record(
        self,
        record_id: int,
        changes: dict[str, Any],
        expected_quantity: int | None = None,
    ) -> IssuedRecord:
        """
        Patch a record.

        With expected_quantity the write only applies while quantity_taken
        still equals it; otherwise StaleRecordError is raised.
        """
        pass

    @abstractmethod
    async def delete_record(
        self, record_id: int, expected_quantity: int | None = None
    ) -> bool:
        """Delete a record, conditioned like update_record. False if it is gone."""
        pass

    @abstractmethod
    async def list_records(
        self, start_date: date | None = None, end_date: date | None = None
    ) -> list[IssuedRecordDetails]:
        """List issuance records in an inclusive date range, newest first."""
        pass
