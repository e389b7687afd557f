"""Stock ledger: every change to a material's quantity goes through here.

Each operation pairs the quantity change with exactly one StockMovement row
per material touched. None of the methods commit; the caller owns the unit
of work and either commits everything or rolls everything back.

Quantities are never written back from a value read earlier in the
request. Relative changes run as ``UPDATE ... SET quantity = quantity + :delta``
guarded by ``quantity + :delta >= 0``, so the database applies concurrent
changes one after the other (a row lock on PostgreSQL, the write lock on
SQLite). Absolute levels are set with a compare-and-set on the level that
was read, retried when another request got there first.
"""

import logging
from typing import Iterable, List, NamedTuple, Optional, Tuple

from sqlalchemy import update
from sqlalchemy.orm import Session

from tailorshop.core.exceptions import (
    InsufficientStockError,
    InvalidInputError,
    MaterialNotFound,
    NegativeStockError,
    StockChangedError,
)
from tailorshop.models.material import Material
from tailorshop.models.stock import MovementReason, MovementType, StockMovement

logger = logging.getLogger(__name__)

# Compare-and-set attempts before an absolute level change gives up
SET_LEVEL_ATTEMPTS = 3


class MaterialLine(NamedTuple):
    """A (material, quantity) pair detached from any ORM row."""

    material_id: str
    quantity: float


def as_lines(items: Iterable) -> List[MaterialLine]:
    """Copy anything with ``material_id``/``quantity`` attributes into plain lines."""
    return [MaterialLine(item.material_id, float(item.quantity)) for item in items]


def order_reference(order_id: str) -> str:
    return f"Order #{order_id}"


class StockLedger:
    """Quantity mutations paired with append-only movement records."""

    def __init__(self, db: Session):
        self.db = db

    def _reload(self, material_id: str) -> Optional[Material]:
        """Current row for ``material_id``, overwriting any stale copy in the session."""
        return self.db.get(Material, material_id, populate_existing=True)

    def _shift(self, material_id: str, delta: float) -> Optional[Material]:
        """Add ``delta`` to the quantity in one statement.

        Returns the refreshed material, or None when no row matched: the
        material does not exist or the change would take it below zero.
        """
        self.db.flush()
        result = self.db.execute(
            update(Material)
            .where(Material.id == material_id, Material.quantity + delta >= 0)
            .values(quantity=Material.quantity + delta)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            return None
        return self._reload(material_id)

    def _set_level(self, material_id: str, new_quantity: float) -> Optional[Tuple[Material, float]]:
        """Set an absolute quantity. Returns the material and the level it replaced."""
        self.db.flush()
        for _ in range(SET_LEVEL_ATTEMPTS):
            material = self._reload(material_id)
            if material is None:
                return None
            old_quantity = material.quantity
            if old_quantity == new_quantity:
                return material, old_quantity
            result = self.db.execute(
                update(Material)
                .where(Material.id == material_id, Material.quantity == old_quantity)
                .values(quantity=new_quantity)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 1:
                return self._reload(material_id), old_quantity
            logger.info(f"Stock level of material {material_id} moved underneath an update, retrying")
        raise StockChangedError(material.name)

    def _record(
        self,
        material: Material,
        movement_type: MovementType,
        quantity: float,
        reason: str,
        reference: Optional[str],
        user_id: Optional[int],
    ) -> StockMovement:
        movement = StockMovement(
            material_id=material.id,
            type=movement_type,
            quantity=quantity,
            reason=reason,
            reference=reference,
            performed_by=user_id,
        )
        self.db.add(movement)
        return movement

    # ===== ORDER RESERVATIONS =====

    def deduct(self, lines: Iterable[MaterialLine], order_id: str, user_id: Optional[int] = None) -> None:
        """Take each line's quantity out of stock for an order.

        Raises MaterialNotFound or InsufficientStockError on the first line
        that cannot be satisfied. Lines already processed are undone when the
        caller rolls back.
        """
        reference = order_reference(order_id)
        for line in lines:
            material = self._shift(line.material_id, -line.quantity)
            if material is None:
                current = self._reload(line.material_id)
                if current is None:
                    raise MaterialNotFound(line.material_id, f"Material not found: {line.material_id}")
                raise InsufficientStockError(
                    current.id, current.name, current.quantity, line.quantity,
                )
            self._record(
                material, MovementType.OUT, line.quantity,
                MovementReason.ORDER_CREATION, reference, user_id,
            )

    def revert(self, lines: Iterable[MaterialLine], order_id: str, user_id: Optional[int] = None) -> None:
        """Put each line's quantity back into stock.

        Materials that no longer exist are skipped: a stale reference must
        not block a cancellation or a permanent delete.
        """
        reference = order_reference(order_id)
        for line in lines:
            material = self._shift(line.material_id, line.quantity)
            if material is None:
                logger.warning(
                    f"Skipping stock reversal for missing material {line.material_id} ({reference})"
                )
                continue
            self._record(
                material, MovementType.IN, line.quantity,
                MovementReason.ORDER_REVERSAL, reference, user_id,
            )

    # ===== MANUAL CHANGES =====

    def adjust(
        self,
        material_id: str,
        mode: MovementType,
        quantity: float,
        reason: Optional[str] = None,
        reference: Optional[str] = None,
        user_id: Optional[int] = None,
    ) -> Material:
        """Apply a manual stock change.

        IN adds ``quantity``, OUT subtracts it and ADJUSTMENT sets the level to
        ``quantity`` outright. The movement logged for an ADJUSTMENT carries the
        realized direction (IN/OUT) and magnitude; an ADJUSTMENT to the current
        level is logged as a zero-quantity ADJUSTMENT.
        """
        logged_type = MovementType(mode)
        logged_quantity = quantity
        if logged_type != MovementType.ADJUSTMENT and quantity <= 0:
            raise InvalidInputError(f"{logged_type.value} quantity must be greater than zero")

        if logged_type == MovementType.ADJUSTMENT:
            if quantity < 0:
                current = self._reload(material_id)
                if current is None:
                    raise MaterialNotFound(material_id)
                raise NegativeStockError(current.name)
            changed = self._set_level(material_id, quantity)
            if changed is None:
                raise MaterialNotFound(material_id)
            material, old_quantity = changed
            diff = quantity - old_quantity
            if diff > 0:
                logged_type = MovementType.IN
            elif diff < 0:
                logged_type = MovementType.OUT
            logged_quantity = abs(diff)
        else:
            delta = quantity if logged_type == MovementType.IN else -quantity
            material = self._shift(material_id, delta)
            if material is None:
                current = self._reload(material_id)
                if current is None:
                    raise MaterialNotFound(material_id)
                raise NegativeStockError(current.name)

        self._record(
            material, logged_type, logged_quantity,
            reason or MovementReason.MANUAL_ADJUSTMENT, reference or "Stock Take", user_id,
        )
        return material

    def record_manual_change(
        self, material: Material, new_quantity: float, user_id: Optional[int] = None,
    ) -> Optional[StockMovement]:
        """Set quantity from a material edit, logging the delta. No-op when unchanged."""
        if new_quantity < 0:
            raise NegativeStockError(material.name)
        changed = self._set_level(material.id, new_quantity)
        if changed is None:
            raise MaterialNotFound(material.id)
        material, old_quantity = changed
        diff = new_quantity - old_quantity
        if diff == 0:
            return None
        return self._record(
            material,
            MovementType.IN if diff > 0 else MovementType.OUT,
            abs(diff),
            MovementReason.MANUAL_UPDATE,
            "Material Edit",
            user_id,
        )

    def record_initial_stock(self, material: Material, user_id: Optional[int] = None) -> Optional[StockMovement]:
        """Log the opening balance of a newly created material."""
        if not material.quantity:
            return None
        return self._record(
            material, MovementType.IN, material.quantity,
            MovementReason.INITIAL_STOCK, "Material Created", user_id,
        )

    def receive(
        self, material_id: str, quantity: float, reference: str, user_id: Optional[int] = None,
    ) -> bool:
        """Add delivered goods to stock. Returns False when the material is gone."""
        material = self._shift(material_id, quantity)
        if material is None:
            logger.warning(f"Skipping receipt for missing material {material_id} ({reference})")
            return False
        self._record(
            material, MovementType.IN, quantity,
            MovementReason.PURCHASE_RECEIVED, reference, user_id,
        )
        return True

    # ===== QUERIES =====

    def movements(self, material_id: str) -> List[StockMovement]:
        """Movement history for a material, newest first."""
        return (
            self.db.query(StockMovement)
            .filter(StockMovement.material_id == material_id)
            .order_by(StockMovement.date.desc(), StockMovement.id.desc())
            .all()
        )

    def low_stock(self, material_ids: Iterable[str]) -> List[Material]:
        """Materials among ``material_ids`` at or below their threshold."""
        ids = list(dict.fromkeys(material_ids))
        if not ids:
            return []
        materials = self.db.query(Material).filter(Material.id.in_(ids)).all()
        return [m for m in materials if m.quantity <= m.low_stock_threshold]
