"""Order schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from tailorshop.models.order import OrderStatus, PaymentStatus
from tailorshop.models.transaction import PaymentMethod


class MaterialUsedItem(BaseModel):
    """A material reserved by an order."""

    material_id: str = Field(..., min_length=1, max_length=24)
    quantity: float = Field(..., gt=0)

    model_config = {"from_attributes": True}


class OrderCreate(BaseModel):
    """Order creation schema."""

    customer_id: str
    style_id: str
    delivery_date: datetime
    fit_on_date: Optional[datetime] = None
    price: float = Field(..., ge=0)
    discount: float = Field(default=0, ge=0)
    description: Optional[str] = None
    status: OrderStatus = OrderStatus.PENDING
    measurement_snapshot: Dict[str, str] = Field(default_factory=dict)
    materials_used: List[MaterialUsedItem] = Field(default_factory=list)


class OrderUpdate(BaseModel):
    """Partial order update.

    ``materials_used`` replaces the whole list when present; omit it to keep
    the current reservation lines.
    """

    customer_id: Optional[str] = None
    style_id: Optional[str] = None
    delivery_date: Optional[datetime] = None
    fit_on_date: Optional[datetime] = None
    price: Optional[float] = Field(default=None, ge=0)
    discount: Optional[float] = Field(default=None, ge=0)
    description: Optional[str] = None
    status: Optional[OrderStatus] = None
    measurement_snapshot: Optional[Dict[str, str]] = None
    materials_used: Optional[List[MaterialUsedItem]] = None


class OrderResponse(BaseModel):
    """Order response schema."""

    id: str
    customer_id: str
    style_id: str
    order_date: datetime
    fit_on_date: Optional[datetime] = None
    delivery_date: datetime
    price: float
    discount: float
    description: Optional[str] = None
    status: OrderStatus
    payment_status: PaymentStatus
    payment_method: Optional[str] = None
    transaction_id: Optional[str] = None
    measurement_snapshot: Dict[str, str] = {}
    materials_used: List[MaterialUsedItem] = []
    is_deleted: bool = False
    deleted_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class OrderTrackResponse(BaseModel):
    """Public status projection for customers tracking an order."""

    id: str
    status: OrderStatus
    delivery_date: datetime
    price: float
    description: Optional[str] = None
    style_name: Optional[str] = None
    customer_name: Optional[str] = None
    image: Optional[str] = None


class OrderPaymentRequest(BaseModel):
    """Manually record payment for an order."""

    payment_method: PaymentMethod = PaymentMethod.CASH
    transaction_id: Optional[str] = Field(default=None, max_length=100)
