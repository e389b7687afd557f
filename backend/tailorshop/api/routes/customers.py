"""Customer routes."""

from fastapi import APIRouter, Request, status

from tailorshop.core.exceptions import CustomerNotFound
from tailorshop.core.rate_limit import limiter
from tailorshop.core.rbac import CurrentUser
from tailorshop.db.session import DbSession
from tailorshop.models.customer import Customer, MeasurementHistoryEntry
from tailorshop.schemas.customer import (
    CustomerCreate,
    CustomerResponse,
    CustomerUpdate,
    MeasurementHistoryResponse,
)

router = APIRouter()


def _get_customer(db, customer_id: str) -> Customer:
    customer = (
        db.query(Customer)
        .filter(Customer.id == customer_id, Customer.not_deleted())
        .first()
    )
    if customer is None:
        raise CustomerNotFound(customer_id)
    return customer


@router.get("/", response_model=list[CustomerResponse])
@limiter.limit("60/minute")
def list_customers(request: Request, db: DbSession, current_user: CurrentUser):
    return (
        db.query(Customer)
        .filter(Customer.not_deleted())
        .order_by(Customer.created_at.desc())
        .limit(500)
        .all()
    )


@router.get("/{customer_id}", response_model=CustomerResponse)
@limiter.limit("60/minute")
def get_customer(request: Request, customer_id: str, db: DbSession, current_user: CurrentUser):
    return _get_customer(db, customer_id)


@router.get("/{customer_id}/measurements", response_model=list[MeasurementHistoryResponse])
@limiter.limit("60/minute")
def get_measurement_history(request: Request, customer_id: str, db: DbSession, current_user: CurrentUser):
    """Measurement history for a customer, newest first."""
    _get_customer(db, customer_id)
    return (
        db.query(MeasurementHistoryEntry)
        .filter(MeasurementHistoryEntry.customer_id == customer_id)
        .order_by(MeasurementHistoryEntry.date.desc(), MeasurementHistoryEntry.id.desc())
        .all()
    )


@router.post("/", response_model=CustomerResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("30/minute")
def create_customer(request: Request, customer_data: CustomerCreate, db: DbSession, current_user: CurrentUser):
    customer = Customer(**customer_data.model_dump())
    db.add(customer)
    db.commit()
    db.refresh(customer)
    return customer


@router.put("/{customer_id}", response_model=CustomerResponse)
@limiter.limit("30/minute")
def update_customer(
    request: Request,
    customer_id: str,
    customer_data: CustomerUpdate,
    db: DbSession,
    current_user: CurrentUser,
):
    customer = _get_customer(db, customer_id)
    for field, value in customer_data.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(customer, field, value)
    db.commit()
    db.refresh(customer)
    return customer
