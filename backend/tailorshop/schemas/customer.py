"""Customer schemas."""

from datetime import datetime
from typing import Dict, Optional

from pydantic import BaseModel, Field


class CustomerCreate(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    nic: str = Field(..., min_length=1, max_length=50)
    phone: str = Field(..., min_length=1, max_length=50)
    email: str = Field(..., min_length=3, max_length=255)
    address: str = Field(..., min_length=1, max_length=500)


class CustomerUpdate(BaseModel):
    first_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    nic: Optional[str] = Field(default=None, min_length=1, max_length=50)
    phone: Optional[str] = Field(default=None, min_length=1, max_length=50)
    email: Optional[str] = Field(default=None, min_length=3, max_length=255)
    address: Optional[str] = Field(default=None, min_length=1, max_length=500)


class CustomerResponse(BaseModel):
    id: str
    first_name: str
    last_name: str
    nic: str
    phone: str
    email: str
    address: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class MeasurementHistoryResponse(BaseModel):
    id: int
    order_id: Optional[str] = None
    date: datetime
    measurements: Dict[str, str]
    notes: Optional[str] = None

    model_config = {"from_attributes": True}
