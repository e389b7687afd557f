"""Employees and job assignment.

A job hands an order to an employee with a deadline. The assigned employee
is told about it after commit, both when the job is created and when it is
moved to someone else.
"""

import logging
from functools import partial
from typing import List, Optional

from sqlalchemy.orm import Session

from tailorshop.core.exceptions import EmployeeNotFound, JobNotFound, OrderNotFound
from tailorshop.models.order import Order
from tailorshop.models.staff import Employee, Job
from tailorshop.schemas.staff import EmployeeCreate, EmployeeUpdate, JobCreate, JobUpdate
from tailorshop.services.audit_service import audit_after_commit
from tailorshop.services.notification_service import Contact, OrderNotice, OrderNotifier
from tailorshop.services.post_commit import Actor, AfterCommit, best_effort

logger = logging.getLogger(__name__)


class EmployeeService:
    def __init__(self, db: Session, actor: Optional[Actor] = None):
        self.db = db
        self.actor = actor or Actor()

    def list(self) -> List[Employee]:
        return (
            self.db.query(Employee)
            .filter(Employee.not_deleted())
            .order_by(Employee.first_name, Employee.last_name)
            .all()
        )

    def trash(self) -> List[Employee]:
        return (
            self.db.query(Employee)
            .filter(Employee.only_deleted())
            .order_by(Employee.deleted_at.desc())
            .all()
        )

    def get(self, employee_id: str) -> Employee:
        employee = (
            self.db.query(Employee)
            .filter(Employee.id == employee_id, Employee.not_deleted())
            .first()
        )
        if employee is None:
            raise EmployeeNotFound(employee_id)
        return employee

    def create(self, data: EmployeeCreate) -> Employee:
        employee = Employee(**data.model_dump())
        self.db.add(employee)
        self.db.commit()
        self._audit("CREATE", employee.id, {
            "name": employee.full_name,
            "email": employee.email,
            "category": employee.category,
        })
        return employee

    def update(self, employee_id: str, data: EmployeeUpdate) -> Employee:
        employee = self.get(employee_id)
        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        for field, value in changes.items():
            setattr(employee, field, value)
        self.db.commit()
        self._audit("UPDATE", employee_id, {"fields": sorted(changes)})
        return employee

    def soft_delete(self, employee_id: str) -> None:
        employee = self.get(employee_id)
        employee.soft_delete()
        self.db.commit()
        self._audit("DELETE", employee_id)

    def restore(self, employee_id: str) -> Employee:
        employee = (
            self.db.query(Employee)
            .filter(Employee.id == employee_id, Employee.only_deleted())
            .first()
        )
        if employee is None:
            raise EmployeeNotFound(employee_id)
        employee.restore()
        self.db.commit()
        self._audit("RESTORE", employee_id)
        return employee

    def force_delete(self, employee_id: str) -> None:
        """Remove an employee for good, together with their job cards."""
        employee = self.db.query(Employee).filter(Employee.id == employee_id).first()
        if employee is None:
            raise EmployeeNotFound(employee_id)
        try:
            self.db.query(Job).filter(Job.employee_id == employee_id).delete(synchronize_session=False)
            self.db.delete(employee)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self._audit("FORCE_DELETE", employee_id)

    def _audit(self, action: str, employee_id: str, details: Optional[dict] = None) -> None:
        audit_after_commit(self.db, self.actor, action, "Employee", employee_id, details)


class JobService:
    def __init__(
        self,
        db: Session,
        actor: Optional[Actor] = None,
        notifier: Optional[OrderNotifier] = None,
        after_commit: Optional[AfterCommit] = None,
    ):
        self.db = db
        self.actor = actor or Actor()
        self.notifier = notifier
        self.after_commit = after_commit if after_commit is not None else AfterCommit()

    def list(self, employee_id: Optional[str] = None, order_id: Optional[str] = None) -> List[Job]:
        query = self.db.query(Job).filter(Job.not_deleted())
        if employee_id is not None:
            query = query.filter(Job.employee_id == employee_id)
        if order_id is not None:
            query = query.filter(Job.order_id == order_id)
        return query.order_by(Job.created_at.desc()).all()

    def trash(self) -> List[Job]:
        return (
            self.db.query(Job)
            .filter(Job.only_deleted())
            .order_by(Job.deleted_at.desc())
            .all()
        )

    def get(self, job_id: str) -> Job:
        job = self.db.query(Job).filter(Job.id == job_id, Job.not_deleted()).first()
        if job is None:
            raise JobNotFound(job_id)
        return job

    def create(self, data: JobCreate) -> Job:
        try:
            self._require_order(data.order_id)
            self._require_employee(data.employee_id)
            values = data.model_dump(exclude_none=True)
            job = Job(**values)
            self.db.add(job)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(f"Order {job.order_id} assigned to employee {job.employee_id}")
        self._queue_assignment_notice(job)
        self._audit("CREATE", job.id, {
            "order": job.order_id,
            "employee": job.employee_id,
            "status": job.status.value,
        })
        return job

    def update(self, job_id: str, data: JobUpdate) -> Job:
        try:
            job = self.get(job_id)
            previous_employee = job.employee_id
            changes = data.model_dump(exclude_unset=True, exclude_none=True)

            if changes.get("order_id", job.order_id) != job.order_id:
                self._require_order(changes["order_id"])
            if changes.get("employee_id", job.employee_id) != job.employee_id:
                self._require_employee(changes["employee_id"])
            for field, value in changes.items():
                setattr(job, field, value)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        if job.employee_id != previous_employee:
            logger.info(f"Job {job_id} reassigned from {previous_employee} to {job.employee_id}")
            self._queue_assignment_notice(job)
        self._audit("UPDATE", job_id, {"status": job.status.value, "employee": job.employee_id})
        return job

    def soft_delete(self, job_id: str) -> None:
        job = self.get(job_id)
        job.soft_delete()
        self.db.commit()
        self._audit("DELETE", job_id)

    def restore(self, job_id: str) -> Job:
        job = self.db.query(Job).filter(Job.id == job_id, Job.only_deleted()).first()
        if job is None:
            raise JobNotFound(job_id)
        job.restore()
        self.db.commit()
        self._audit("RESTORE", job_id)
        return job

    def force_delete(self, job_id: str) -> None:
        job = self.db.query(Job).filter(Job.id == job_id).first()
        if job is None:
            raise JobNotFound(job_id)
        self.db.delete(job)
        self.db.commit()
        self._audit("FORCE_DELETE", job_id)

    def _require_order(self, order_id: str) -> None:
        exists = (
            self.db.query(Order.id)
            .filter(Order.id == order_id, Order.not_deleted())
            .first()
        )
        if exists is None:
            raise OrderNotFound(order_id)

    def _require_employee(self, employee_id: str) -> None:
        exists = (
            self.db.query(Employee.id)
            .filter(Employee.id == employee_id, Employee.not_deleted())
            .first()
        )
        if exists is None:
            raise EmployeeNotFound(employee_id)

    def _queue_assignment_notice(self, job: Job) -> None:
        if self.notifier is None:
            return
        with best_effort(f"job_assigned notice for job {job.id}"):
            employee = self.db.get(Employee, job.employee_id)
            order = self.db.get(Order, job.order_id)
            if employee is None or order is None:
                return
            contact = Contact(employee.full_name, employee.email, employee.phone)
            notice = OrderNotice(
                order_id=order.id,
                status=order.status.value,
                price=order.price,
                delivery_date=order.delivery_date,
                description=order.description,
            )
            self.after_commit.defer(
                f"job_assigned {job.id}", partial(self.notifier.job_assigned, contact, notice),
            )

    def _audit(self, action: str, job_id: str, details: Optional[dict] = None) -> None:
        audit_after_commit(self.db, self.actor, action, "Job", job_id, details)
