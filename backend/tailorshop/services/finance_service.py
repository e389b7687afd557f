"""Flat income/expense ledger and profit summary."""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from tailorshop.core.exceptions import TransactionNotFound
from tailorshop.models.transaction import Transaction, TransactionType
from tailorshop.schemas.finance import FinanceSummary, TransactionCreate
from tailorshop.services.audit_service import audit_after_commit
from tailorshop.services.post_commit import Actor


class FinanceService:
    def __init__(self, db: Session, actor: Optional[Actor] = None):
        self.db = db
        self.actor = actor or Actor()

    def list(self) -> List[Transaction]:
        return (
            self.db.query(Transaction)
            .filter(Transaction.not_deleted())
            .order_by(Transaction.date.desc())
            .all()
        )

    def trash(self) -> List[Transaction]:
        return (
            self.db.query(Transaction)
            .filter(Transaction.only_deleted())
            .order_by(Transaction.deleted_at.desc())
            .all()
        )

    def create(self, data: TransactionCreate) -> Transaction:
        values = data.model_dump(exclude_none=True)
        transaction = Transaction(**values, recorded_by=self.actor.user_id)
        self.db.add(transaction)
        self.db.commit()
        self._audit("CREATE_TRANSACTION", transaction.id, {
            "type": data.type.value,
            "category": data.category,
            "amount": data.amount,
        })
        return transaction

    def summary(
        self,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> FinanceSummary:
        """Income, expense and net profit, with a per-category breakdown."""
        query = self.db.query(
            Transaction.type,
            Transaction.category,
            func.coalesce(func.sum(Transaction.amount), 0.0),
        ).filter(Transaction.not_deleted())
        if start_date is not None:
            query = query.filter(Transaction.date >= start_date)
        if end_date is not None:
            query = query.filter(Transaction.date <= end_date)

        breakdown: dict[str, dict[str, float]] = {t.value: {} for t in TransactionType}
        for tx_type, category, total in query.group_by(Transaction.type, Transaction.category):
            breakdown[TransactionType(tx_type).value][category] = float(total)

        income = sum(breakdown[TransactionType.INCOME.value].values())
        expense = sum(breakdown[TransactionType.EXPENSE.value].values())
        return FinanceSummary(
            total_income=income,
            total_expense=expense,
            net_profit=income - expense,
            breakdown=breakdown,
        )

    def soft_delete(self, transaction_id: str) -> None:
        transaction = (
            self.db.query(Transaction)
            .filter(Transaction.id == transaction_id, Transaction.not_deleted())
            .first()
        )
        if transaction is None:
            raise TransactionNotFound(transaction_id)
        transaction.soft_delete()
        self.db.commit()
        self._audit("DELETE_TRANSACTION", transaction_id)

    def restore(self, transaction_id: str) -> Transaction:
        transaction = (
            self.db.query(Transaction)
            .filter(Transaction.id == transaction_id, Transaction.only_deleted())
            .first()
        )
        if transaction is None:
            raise TransactionNotFound(transaction_id)
        transaction.restore()
        self.db.commit()
        self._audit("RESTORE_TRANSACTION", transaction_id)
        return transaction

    def force_delete(self, transaction_id: str) -> None:
        transaction = self.db.query(Transaction).filter(Transaction.id == transaction_id).first()
        if transaction is None:
            raise TransactionNotFound(transaction_id)
        self.db.delete(transaction)
        self.db.commit()
        self._audit("FORCE_DELETE_TRANSACTION", transaction_id)

    def _audit(self, action: str, transaction_id: str, details: Optional[dict] = None) -> None:
        audit_after_commit(self.db, self.actor, action, "Transaction", transaction_id, details)
