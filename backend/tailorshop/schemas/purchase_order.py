"""Purchase order schemas."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from tailorshop.models.purchase_order import POPaymentStatus, POStatus
from tailorshop.models.transaction import PaymentMethod


class PurchaseOrderItemCreate(BaseModel):
    material_id: str = Field(..., min_length=1, max_length=24)
    quantity: float = Field(..., gt=0)
    unit_cost: float = Field(..., ge=0)


class PurchaseOrderItemResponse(BaseModel):
    id: int
    material_id: str
    quantity: float
    unit_cost: float
    total: float

    model_config = {"from_attributes": True}


class PurchaseOrderCreate(BaseModel):
    """Purchase order creation schema. Orders start as Draft."""

    supplier_id: str
    items: List[PurchaseOrderItemCreate] = Field(..., min_length=1)
    expected_date: Optional[datetime] = None
    notes: Optional[str] = None


class PurchaseOrderStatusUpdate(BaseModel):
    status: POStatus


class PurchaseOrderPayRequest(BaseModel):
    payment_method: PaymentMethod = PaymentMethod.BANK_TRANSFER


class PurchaseOrderResponse(BaseModel):
    id: str
    supplier_id: str
    total_amount: float
    status: POStatus
    payment_status: POPaymentStatus
    order_date: datetime
    expected_date: Optional[datetime] = None
    received_date: Optional[datetime] = None
    notes: Optional[str] = None
    created_by: Optional[int] = None
    items: List[PurchaseOrderItemResponse] = []
    is_deleted: bool = False
    deleted_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
