"""Ledger transaction and summary schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Dict, Optional

from pydantic import BaseModel, Field

from tailorshop.models.transaction import PaymentMethod, TransactionType


class TransactionCreate(BaseModel):
    type: TransactionType
    category: str = Field(..., min_length=1, max_length=100)
    amount: float = Field(..., ge=0)
    reference: Optional[str] = Field(default=None, max_length=255)
    description: Optional[str] = None
    payment_method: PaymentMethod = PaymentMethod.CASH
    date: Optional[datetime] = None


class TransactionResponse(BaseModel):
    id: str
    type: TransactionType
    category: str
    amount: float
    reference: Optional[str] = None
    description: Optional[str] = None
    payment_method: PaymentMethod
    date: datetime
    recorded_by: Optional[int] = None
    is_deleted: bool = False
    deleted_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class FinanceSummary(BaseModel):
    """Totals over the (optionally bounded) ledger."""

    total_income: float
    total_expense: float
    net_profit: float
    # {"INCOME": {"Sales": 120.0}, "EXPENSE": {"Procurement": 40.0}}
    breakdown: Dict[str, Dict[str, float]]
