"""Request DTOs for API endpoints.

Pydantic v2 models for API request parsing. Quantities are accepted as
plain integers; range checks belong to the ledger so that they surface as
VALIDATION_ERROR responses with a 400 status.
"""

from pydantic import BaseModel, ConfigDict, Field

# --- Stock categories ---


class CreateCategoryRequest(BaseModel):
    """Request to create a stock category."""

    name: str = Field(..., description="Unique category name", examples=["Stationery"])
    description: str | None = Field(default=None, description="Free-form description")
    color: str | None = Field(
        default=None,
        description="Display colour (defaults to #3B82F6)",
        examples=["#10B981"],
    )


class UpdateCategoryRequest(BaseModel):
    """Partial category update. Omitted fields are left unchanged."""

    model_config = ConfigDict(extra="forbid")

    name: str | None = None
    description: str | None = None
    color: str | None = None


# --- Stock items ---


class AddStockItemRequest(BaseModel):
    """Request to add a stock item with its opening quantity."""

    name: str = Field(..., description="Item name", examples=["Shirt"])
    quantity: int = Field(default=0, description="Opening quantity")
    category_id: int | None = Field(default=None, description="Category ID")
    min_quantity: int | None = Field(
        default=None,
        description="Reorder threshold (defaults to LEDGER_DEFAULT_MIN_QUANTITY)",
    )
    person_responsible: str | None = None
    notes: str | None = None


class UpdateStockItemRequest(BaseModel):
    """
    Partial stock item update.

    Setting quantity overwrites the on-hand count without recording a
    movement.
    """

    model_config = ConfigDict(extra="forbid")

    name: str | None = None
    category_id: int | None = None
    quantity: int | None = None
    min_quantity: int | None = None
    person_responsible: str | None = None
    notes: str | None = None


class StockQuantityRequest(BaseModel):
    """Quantity to issue or return."""

    quantity: int = Field(..., description="Units to move (must be > 0)", examples=[5])
    notes: str | None = Field(default=None, description="Movement notes")


# --- Uniforms ---


class CreateUniformCategoryRequest(BaseModel):
    """Request to create a uniform category."""

    name: str = Field(..., examples=["Summer"])


class AddUniformRequest(BaseModel):
    """Request to add a uniform item."""

    name: str = Field(..., examples=["Polo Shirt (M)"])
    category: str = Field(..., description="Uniform category name")
    total_quantity: int = Field(default=0, description="Opening stock")
    min_quantity: int | None = None


class UpdateUniformRequest(BaseModel):
    """Partial uniform update. Quantity fields override without a movement."""

    model_config = ConfigDict(extra="forbid")

    name: str | None = None
    category: str | None = None
    min_quantity: int | None = None
    total_quantity: int | None = None
    remaining_quantity: int | None = None


class RestockUniformRequest(BaseModel):
    """Quantity to add to a uniform's stock."""

    quantity: int = Field(..., examples=[20])
    notes: str | None = None


class IssueUniformRequest(BaseModel):
    """Request to issue uniforms to a student."""

    student_name: str = Field(..., examples=["Jane Doe"])
    uniform_id: int
    quantity: int = Field(..., examples=[2])
    issue_date: str = Field(
        ..., description="Issue date (YYYY-MM-DD)", examples=["2024-09-02"]
    )


class UpdateIssuedRecordRequest(BaseModel):
    """Partial issuance record update."""

    model_config = ConfigDict(extra="forbid")

    student_name: str | None = None
    quantity_taken: int | None = None
    issue_date: str | None = Field(default=None, description="YYYY-MM-DD")
