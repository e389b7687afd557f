"""Material and stock routes."""

from fastapi import APIRouter, Request, status

from tailorshop.api.deps import CurrentActor
from tailorshop.core.rate_limit import limiter
from tailorshop.core.rbac import CurrentUser, RequireAdmin, RequireManager
from tailorshop.db.session import DbSession
from tailorshop.schemas.material import (
    MaterialCreate,
    MaterialResponse,
    MaterialUpdate,
    StockAdjustmentRequest,
    StockMovementResponse,
)
from tailorshop.services.material_service import MaterialService

router = APIRouter()


@router.get("/", response_model=list[MaterialResponse])
@limiter.limit("60/minute")
def list_materials(request: Request, db: DbSession, current_user: CurrentUser):
    return MaterialService(db).list()


@router.get("/trash", response_model=list[MaterialResponse])
@limiter.limit("60/minute")
def list_deleted_materials(request: Request, db: DbSession, current_user: CurrentUser):
    return MaterialService(db).trash()


@router.get("/{material_id}", response_model=MaterialResponse)
@limiter.limit("60/minute")
def get_material(request: Request, material_id: str, db: DbSession, current_user: CurrentUser):
    return MaterialService(db).get(material_id)


@router.post("/", response_model=MaterialResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("30/minute")
def create_material(request: Request, material_data: MaterialCreate, db: DbSession, actor: CurrentActor):
    """Create a material. Opening stock is logged as an IN movement."""
    return MaterialService(db, actor=actor).create(material_data)


@router.put("/{material_id}", response_model=MaterialResponse)
@limiter.limit("30/minute")
def update_material(
    request: Request, material_id: str, material_data: MaterialUpdate, db: DbSession, actor: CurrentActor,
):
    return MaterialService(db, actor=actor).update(material_id, material_data)


@router.post("/{material_id}/adjust", response_model=MaterialResponse)
@limiter.limit("30/minute")
def adjust_stock(
    request: Request,
    material_id: str,
    adjustment: StockAdjustmentRequest,
    db: DbSession,
    actor: CurrentActor,
):
    """Manual stock adjustment (IN, OUT, or set absolute level)."""
    return MaterialService(db, actor=actor).adjust(
        material_id,
        adjustment.type,
        adjustment.quantity,
        reason=adjustment.reason,
        notes=adjustment.notes,
    )


@router.get("/{material_id}/movements", response_model=list[StockMovementResponse])
@limiter.limit("60/minute")
def list_movements(request: Request, material_id: str, db: DbSession, current_user: CurrentUser):
    """Movement history for a material, newest first."""
    return MaterialService(db).movements(material_id)


@router.delete("/{material_id}")
@limiter.limit("30/minute")
def delete_material(
    request: Request, material_id: str, db: DbSession, current_user: RequireManager, actor: CurrentActor,
):
    MaterialService(db, actor=actor).soft_delete(material_id)
    return {"message": "Material moved to trash"}


@router.put("/{material_id}/restore", response_model=MaterialResponse)
@limiter.limit("30/minute")
def restore_material(
    request: Request, material_id: str, db: DbSession, current_user: RequireManager, actor: CurrentActor,
):
    return MaterialService(db, actor=actor).restore(material_id)


@router.delete("/{material_id}/force")
@limiter.limit("30/minute")
def force_delete_material(
    request: Request, material_id: str, db: DbSession, current_user: RequireAdmin, actor: CurrentActor,
):
    MaterialService(db, actor=actor).force_delete(material_id)
    return {"message": "Material permanently deleted"}
