"""Material and stock movement schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, model_validator

from tailorshop.models.material import MaterialType, MaterialUnit
from tailorshop.models.stock import MovementType


class MaterialCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    type: MaterialType
    color: Optional[str] = None
    quantity: float = Field(default=0, ge=0)
    unit: MaterialUnit
    cost_per_unit: float = Field(default=0, ge=0)
    supplier: Optional[str] = None
    low_stock_threshold: Optional[float] = Field(default=None, ge=0)
    description: Optional[str] = None
    sku: Optional[str] = Field(default=None, max_length=64)


class MaterialUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    type: Optional[MaterialType] = None
    color: Optional[str] = None
    quantity: Optional[float] = Field(default=None, ge=0)
    unit: Optional[MaterialUnit] = None
    cost_per_unit: Optional[float] = Field(default=None, ge=0)
    supplier: Optional[str] = None
    low_stock_threshold: Optional[float] = Field(default=None, ge=0)
    description: Optional[str] = None
    sku: Optional[str] = Field(default=None, max_length=64)


class MaterialResponse(BaseModel):
    id: str
    name: str
    type: MaterialType
    color: Optional[str] = None
    quantity: float
    unit: MaterialUnit
    cost_per_unit: float
    supplier: Optional[str] = None
    low_stock_threshold: float
    description: Optional[str] = None
    sku: str
    is_low_stock: bool
    is_deleted: bool = False
    deleted_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class StockAdjustmentRequest(BaseModel):
    """Manual stock adjustment.

    IN adds ``quantity``, OUT removes it, ADJUSTMENT sets the stock level to
    ``quantity``, so only ADJUSTMENT accepts zero.
    """

    type: MovementType
    quantity: float = Field(..., ge=0)
    reason: Optional[str] = Field(default=None, max_length=100)
    notes: Optional[str] = Field(default=None, max_length=255)

    @model_validator(mode="after")
    def require_positive_movement(self) -> "StockAdjustmentRequest":
        if self.type != MovementType.ADJUSTMENT and self.quantity <= 0:
            raise ValueError(f"{self.type.value} quantity must be greater than zero")
        return self


class StockMovementResponse(BaseModel):
    """Stock movement response schema."""

    id: int
    material_id: str
    type: MovementType
    quantity: float
    reason: str
    reference: Optional[str] = None
    performed_by: Optional[int] = None
    date: datetime

    model_config = {"from_attributes": True}
