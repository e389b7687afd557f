"""Employee and job assignment routes."""

from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Request, status

from tailorshop.api.deps import CurrentActor, Notifier
from tailorshop.core.rate_limit import limiter
from tailorshop.core.rbac import CurrentUser, RequireAdmin, RequireManager
from tailorshop.db.session import DbSession
from tailorshop.schemas.staff import (
    EmployeeCreate,
    EmployeeResponse,
    EmployeeUpdate,
    JobCreate,
    JobResponse,
    JobUpdate,
)
from tailorshop.services.staff_service import EmployeeService, JobService

employees_router = APIRouter()
jobs_router = APIRouter()


# ==================== EMPLOYEES ====================

@employees_router.get("/", response_model=list[EmployeeResponse])
@limiter.limit("60/minute")
def list_employees(request: Request, db: DbSession, current_user: RequireManager):
    return EmployeeService(db).list()


@employees_router.get("/trash", response_model=list[EmployeeResponse])
@limiter.limit("60/minute")
def list_deleted_employees(request: Request, db: DbSession, current_user: RequireManager):
    return EmployeeService(db).trash()


@employees_router.get("/{employee_id}", response_model=EmployeeResponse)
@limiter.limit("60/minute")
def get_employee(request: Request, employee_id: str, db: DbSession, current_user: RequireManager):
    return EmployeeService(db).get(employee_id)


@employees_router.post("/", response_model=EmployeeResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("30/minute")
def create_employee(
    request: Request, employee_data: EmployeeCreate, db: DbSession,
    current_user: RequireManager, actor: CurrentActor,
):
    return EmployeeService(db, actor=actor).create(employee_data)


@employees_router.put("/{employee_id}", response_model=EmployeeResponse)
@limiter.limit("30/minute")
def update_employee(
    request: Request, employee_id: str, employee_data: EmployeeUpdate, db: DbSession,
    current_user: RequireManager, actor: CurrentActor,
):
    return EmployeeService(db, actor=actor).update(employee_id, employee_data)


@employees_router.delete("/{employee_id}")
@limiter.limit("30/minute")
def delete_employee(
    request: Request, employee_id: str, db: DbSession, current_user: RequireManager, actor: CurrentActor,
):
    EmployeeService(db, actor=actor).soft_delete(employee_id)
    return {"message": "Employee removed"}


@employees_router.put("/{employee_id}/restore", response_model=EmployeeResponse)
@limiter.limit("30/minute")
def restore_employee(
    request: Request, employee_id: str, db: DbSession, current_user: RequireManager, actor: CurrentActor,
):
    return EmployeeService(db, actor=actor).restore(employee_id)


@employees_router.delete("/{employee_id}/force")
@limiter.limit("30/minute")
def force_delete_employee(
    request: Request, employee_id: str, db: DbSession, current_user: RequireAdmin, actor: CurrentActor,
):
    """Delete an employee and their job cards for good."""
    EmployeeService(db, actor=actor).force_delete(employee_id)
    return {"message": "Employee permanently deleted"}


# ==================== JOBS ====================

@jobs_router.get("/", response_model=list[JobResponse])
@limiter.limit("60/minute")
def list_jobs(
    request: Request, db: DbSession, current_user: CurrentUser,
    employee_id: Optional[str] = None, order_id: Optional[str] = None,
):
    return JobService(db).list(employee_id=employee_id, order_id=order_id)


@jobs_router.get("/trash", response_model=list[JobResponse])
@limiter.limit("60/minute")
def list_deleted_jobs(request: Request, db: DbSession, current_user: RequireManager):
    return JobService(db).trash()


@jobs_router.get("/{job_id}", response_model=JobResponse)
@limiter.limit("60/minute")
def get_job(request: Request, job_id: str, db: DbSession, current_user: CurrentUser):
    return JobService(db).get(job_id)


@jobs_router.post("/", response_model=JobResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("30/minute")
def create_job(
    request: Request,
    job_data: JobCreate,
    background_tasks: BackgroundTasks,
    db: DbSession,
    current_user: RequireManager,
    actor: CurrentActor,
    notifier: Notifier,
):
    """Assign an order to an employee and tell them about it."""
    service = JobService(db, actor=actor, notifier=notifier)
    job = service.create(job_data)
    background_tasks.add_task(service.after_commit.run)
    return job


@jobs_router.put("/{job_id}", response_model=JobResponse)
@limiter.limit("30/minute")
def update_job(
    request: Request,
    job_id: str,
    job_data: JobUpdate,
    background_tasks: BackgroundTasks,
    db: DbSession,
    actor: CurrentActor,
    notifier: Notifier,
):
    """Update a job. Moving it to another employee notifies the new assignee."""
    service = JobService(db, actor=actor, notifier=notifier)
    job = service.update(job_id, job_data)
    background_tasks.add_task(service.after_commit.run)
    return job


@jobs_router.delete("/{job_id}")
@limiter.limit("30/minute")
def delete_job(
    request: Request, job_id: str, db: DbSession, current_user: RequireManager, actor: CurrentActor,
):
    JobService(db, actor=actor).soft_delete(job_id)
    return {"message": "Job moved to trash"}


@jobs_router.put("/{job_id}/restore", response_model=JobResponse)
@limiter.limit("30/minute")
def restore_job(
    request: Request, job_id: str, db: DbSession, current_user: RequireManager, actor: CurrentActor,
):
    return JobService(db, actor=actor).restore(job_id)


@jobs_router.delete("/{job_id}/force")
@limiter.limit("30/minute")
def force_delete_job(
    request: Request, job_id: str, db: DbSession, current_user: RequireAdmin, actor: CurrentActor,
):
    JobService(db, actor=actor).force_delete(job_id)
    return {"message": "Job permanently deleted"}
