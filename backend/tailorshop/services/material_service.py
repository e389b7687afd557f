"""Material catalogue operations that touch stock levels."""

import logging
import time
from typing import List, Optional

from sqlalchemy.orm import Session

from tailorshop.core.config import settings
from tailorshop.core.exceptions import BusinessRuleError, MaterialNotFound
from tailorshop.models.material import Material
from tailorshop.models.stock import MovementType, StockMovement
from tailorshop.schemas.material import MaterialCreate, MaterialUpdate
from tailorshop.services.audit_service import audit_after_commit
from tailorshop.services.inventory_service import StockLedger
from tailorshop.services.post_commit import Actor

logger = logging.getLogger(__name__)


def generate_sku() -> str:
    return f"MAT-{int(time.time() * 1000)}"


class MaterialService:
    def __init__(self, db: Session, actor: Optional[Actor] = None):
        self.db = db
        self.actor = actor or Actor()
        self.ledger = StockLedger(db)

    def list(self) -> List[Material]:
        return self.db.query(Material).filter(Material.not_deleted()).order_by(Material.name).all()

    def trash(self) -> List[Material]:
        return (
            self.db.query(Material)
            .filter(Material.only_deleted())
            .order_by(Material.deleted_at.desc())
            .all()
        )

    def get(self, material_id: str, include_deleted: bool = False) -> Material:
        query = self.db.query(Material).filter(Material.id == material_id)
        if not include_deleted:
            query = query.filter(Material.not_deleted())
        material = query.first()
        if material is None:
            raise MaterialNotFound(material_id)
        return material

    def create(self, data: MaterialCreate) -> Material:
        sku = data.sku or generate_sku()
        try:
            self._require_unique_sku(sku)
            material = Material(
                name=data.name,
                type=data.type,
                color=data.color,
                quantity=data.quantity,
                unit=data.unit,
                cost_per_unit=data.cost_per_unit,
                supplier=data.supplier,
                low_stock_threshold=(
                    data.low_stock_threshold
                    if data.low_stock_threshold is not None
                    else settings.default_low_stock_threshold
                ),
                description=data.description,
                sku=sku,
            )
            self.db.add(material)
            self.db.flush()
            self.ledger.record_initial_stock(material, self.actor.user_id)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self._audit("CREATE", material.id, {"name": material.name, "sku": sku})
        return material

    def update(self, material_id: str, data: MaterialUpdate) -> Material:
        """Edit a material. A quantity change is logged as one IN/OUT movement."""
        try:
            material = self.get(material_id)
            changes = data.model_dump(exclude_unset=True, exclude_none=True)
            new_quantity = changes.pop("quantity", None)

            if "sku" in changes and changes["sku"] != material.sku:
                self._require_unique_sku(changes["sku"])
            for field, value in changes.items():
                setattr(material, field, value)

            if new_quantity is not None:
                self.ledger.record_manual_change(material, new_quantity, self.actor.user_id)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self._audit("UPDATE", material_id, {"fields": sorted(data.model_dump(exclude_unset=True))})
        return material

    def adjust(
        self,
        material_id: str,
        mode: MovementType,
        quantity: float,
        reason: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Material:
        try:
            material = self.ledger.adjust(
                material_id, mode, quantity, reason=reason, reference=notes,
                user_id=self.actor.user_id,
            )
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self._audit("ADJUST", material_id, {"type": MovementType(mode).value, "quantity": quantity})
        return material

    def movements(self, material_id: str) -> List[StockMovement]:
        self.get(material_id, include_deleted=True)
        return self.ledger.movements(material_id)

    def soft_delete(self, material_id: str) -> None:
        material = self.get(material_id)
        material.soft_delete()
        self.db.commit()
        self._audit("DELETE", material_id)

    def restore(self, material_id: str) -> Material:
        material = (
            self.db.query(Material)
            .filter(Material.id == material_id, Material.only_deleted())
            .first()
        )
        if material is None:
            raise MaterialNotFound(material_id)
        material.restore()
        self.db.commit()
        self._audit("RESTORE", material_id)
        return material

    def force_delete(self, material_id: str) -> None:
        """Remove a material and its movement history for good.

        Order lines that still reference it become stale; reverting them later
        skips the missing material.
        """
        material = self.get(material_id, include_deleted=True)
        self.db.delete(material)
        self.db.commit()
        logger.info(f"Material {material_id} permanently deleted")
        self._audit("FORCE_DELETE", material_id)

    def _require_unique_sku(self, sku: str) -> None:
        if self.db.query(Material.id).filter(Material.sku == sku).first() is not None:
            raise BusinessRuleError(f"SKU already exists: {sku}")

    def _audit(self, action: str, material_id: str, details: Optional[dict] = None) -> None:
        audit_after_commit(self.db, self.actor, action, "Material", material_id, details)
