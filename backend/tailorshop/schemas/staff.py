"""Employee and job assignment schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from tailorshop.models.staff import JobStatus


class EmployeeCreate(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    nic: str = Field(..., min_length=1, max_length=50)
    address: str = Field(..., min_length=1, max_length=500)
    phone: str = Field(..., min_length=1, max_length=50)
    email: EmailStr
    category: str = Field(..., min_length=1, max_length=100)
    start_date: datetime
    salary: float = Field(..., ge=0)
    status: str = Field(default="Active", max_length=50)


class EmployeeUpdate(BaseModel):
    first_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    nic: Optional[str] = Field(default=None, min_length=1, max_length=50)
    address: Optional[str] = Field(default=None, min_length=1, max_length=500)
    phone: Optional[str] = Field(default=None, min_length=1, max_length=50)
    email: Optional[EmailStr] = None
    category: Optional[str] = Field(default=None, min_length=1, max_length=100)
    start_date: Optional[datetime] = None
    salary: Optional[float] = Field(default=None, ge=0)
    status: Optional[str] = Field(default=None, max_length=50)


class EmployeeResponse(BaseModel):
    id: str
    first_name: str
    last_name: str
    nic: str
    address: str
    phone: str
    email: str
    category: str
    start_date: datetime
    salary: float
    status: str
    is_deleted: bool = False
    created_at: datetime

    model_config = {"from_attributes": True}


class JobCreate(BaseModel):
    """Assign an order to an employee."""

    order_id: str
    employee_id: str
    assigned_date: Optional[datetime] = None
    deadline: datetime
    details: Optional[str] = None
    status: JobStatus = JobStatus.PENDING


class JobUpdate(BaseModel):
    order_id: Optional[str] = None
    employee_id: Optional[str] = None
    assigned_date: Optional[datetime] = None
    deadline: Optional[datetime] = None
    details: Optional[str] = None
    status: Optional[JobStatus] = None


class JobResponse(BaseModel):
    id: str
    order_id: str
    employee_id: str
    employee_name: Optional[str] = None
    assigned_date: datetime
    deadline: datetime
    details: Optional[str] = None
    status: JobStatus
    is_deleted: bool = False
    created_at: datetime

    model_config = {"from_attributes": True}
