"""Style catalogue and item-type (measurement template) routes."""

from fastapi import APIRouter, Request, status

from tailorshop.core.exceptions import BusinessRuleError, ItemTypeNotFound, StyleNotFound
from tailorshop.core.rate_limit import limiter
from tailorshop.core.rbac import CurrentUser, RequireManager
from tailorshop.db.session import DbSession
from tailorshop.models.catalog import ItemType, Style
from tailorshop.schemas.catalog import (
    ItemTypeCreate,
    ItemTypeResponse,
    ItemTypeUpdate,
    StyleCreate,
    StyleResponse,
)

styles_router = APIRouter()
item_types_router = APIRouter()


# ==================== STYLES ====================

@styles_router.get("/", response_model=list[StyleResponse])
@limiter.limit("60/minute")
def list_styles(request: Request, db: DbSession, current_user: CurrentUser):
    return db.query(Style).filter(Style.not_deleted()).order_by(Style.name).all()


@styles_router.get("/{style_id}", response_model=StyleResponse)
@limiter.limit("60/minute")
def get_style(request: Request, style_id: str, db: DbSession, current_user: CurrentUser):
    style = db.query(Style).filter(Style.id == style_id, Style.not_deleted()).first()
    if style is None:
        raise StyleNotFound(style_id)
    return style


@styles_router.post("/", response_model=StyleResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("30/minute")
def create_style(request: Request, style_data: StyleCreate, db: DbSession, current_user: RequireManager):
    style = Style(**style_data.model_dump())
    db.add(style)
    db.commit()
    db.refresh(style)
    return style


# ==================== ITEM TYPES ====================

def _require_unique_name(db, name: str, exclude_id: str = None) -> None:
    query = db.query(ItemType.id).filter(ItemType.name == name)
    if exclude_id:
        query = query.filter(ItemType.id != exclude_id)
    if query.first() is not None:
        raise BusinessRuleError(f"Item type already exists: {name}")


@item_types_router.get("/", response_model=list[ItemTypeResponse])
@limiter.limit("60/minute")
def list_item_types(request: Request, db: DbSession, current_user: CurrentUser):
    return db.query(ItemType).filter(ItemType.not_deleted()).order_by(ItemType.name).all()


@item_types_router.get("/{item_type_id}", response_model=ItemTypeResponse)
@limiter.limit("60/minute")
def get_item_type(request: Request, item_type_id: str, db: DbSession, current_user: CurrentUser):
    item_type = db.query(ItemType).filter(ItemType.id == item_type_id, ItemType.not_deleted()).first()
    if item_type is None:
        raise ItemTypeNotFound(item_type_id)
    return item_type


@item_types_router.post("/", response_model=ItemTypeResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("30/minute")
def create_item_type(request: Request, item_type_data: ItemTypeCreate, db: DbSession, current_user: RequireManager):
    """Create a measurement template. ``name`` matches a style category."""
    _require_unique_name(db, item_type_data.name)
    item_type = ItemType(**item_type_data.model_dump())
    db.add(item_type)
    db.commit()
    db.refresh(item_type)
    return item_type


@item_types_router.put("/{item_type_id}", response_model=ItemTypeResponse)
@limiter.limit("30/minute")
def update_item_type(
    request: Request,
    item_type_id: str,
    item_type_data: ItemTypeUpdate,
    db: DbSession,
    current_user: RequireManager,
):
    item_type = db.query(ItemType).filter(ItemType.id == item_type_id, ItemType.not_deleted()).first()
    if item_type is None:
        raise ItemTypeNotFound(item_type_id)

    changes = item_type_data.model_dump(exclude_unset=True, exclude_none=True)
    if "name" in changes:
        _require_unique_name(db, changes["name"], exclude_id=item_type_id)
    for field, value in changes.items():
        setattr(item_type, field, list(value) if field == "fields" else value)
    db.commit()
    db.refresh(item_type)
    return item_type
