"""Finance ledger routes."""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Query, Request, status

from tailorshop.api.deps import CurrentActor
from tailorshop.core.rate_limit import limiter
from tailorshop.core.rbac import RequireAdmin, RequireManager
from tailorshop.db.session import DbSession
from tailorshop.schemas.finance import FinanceSummary, TransactionCreate, TransactionResponse
from tailorshop.services.finance_service import FinanceService

router = APIRouter()


@router.get("/transactions", response_model=list[TransactionResponse])
@limiter.limit("60/minute")
def list_transactions(request: Request, db: DbSession, current_user: RequireManager):
    return FinanceService(db).list()


@router.get("/transactions/trash", response_model=list[TransactionResponse])
@limiter.limit("60/minute")
def list_deleted_transactions(request: Request, db: DbSession, current_user: RequireManager):
    return FinanceService(db).trash()


@router.post("/transactions", response_model=TransactionResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("30/minute")
def create_transaction(
    request: Request, transaction_data: TransactionCreate, db: DbSession,
    current_user: RequireManager, actor: CurrentActor,
):
    return FinanceService(db, actor=actor).create(transaction_data)


@router.get("/summary", response_model=FinanceSummary)
@limiter.limit("60/minute")
def get_summary(
    request: Request,
    db: DbSession,
    current_user: RequireManager,
    start_date: Optional[datetime] = Query(None),
    end_date: Optional[datetime] = Query(None),
):
    """Income, expense and net profit with a per-category breakdown."""
    return FinanceService(db).summary(start_date, end_date)


@router.delete("/transactions/{transaction_id}")
@limiter.limit("30/minute")
def delete_transaction(
    request: Request, transaction_id: str, db: DbSession,
    current_user: RequireManager, actor: CurrentActor,
):
    FinanceService(db, actor=actor).soft_delete(transaction_id)
    return {"message": "Transaction moved to trash"}


@router.put("/transactions/{transaction_id}/restore", response_model=TransactionResponse)
@limiter.limit("30/minute")
def restore_transaction(
    request: Request, transaction_id: str, db: DbSession,
    current_user: RequireManager, actor: CurrentActor,
):
    return FinanceService(db, actor=actor).restore(transaction_id)


@router.delete("/transactions/{transaction_id}/force")
@limiter.limit("30/minute")
def force_delete_transaction(
    request: Request, transaction_id: str, db: DbSession,
    current_user: RequireAdmin, actor: CurrentActor,
):
    FinanceService(db, actor=actor).force_delete(transaction_id)
    return {"message": "Transaction permanently deleted"}
