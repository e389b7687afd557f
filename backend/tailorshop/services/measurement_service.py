"""Measurement snapshot validation and per-customer measurement history."""

import logging
from datetime import datetime, timezone
from typing import Dict, Optional

from sqlalchemy.orm import Session

from tailorshop.core.exceptions import InvalidMeasurementFieldError
from tailorshop.models.catalog import ItemType, Style
from tailorshop.models.customer import MeasurementHistoryEntry

logger = logging.getLogger(__name__)

# Free-text key accepted on every snapshot regardless of the template
NOTES_FIELD = "Notes"


def template_for_style(db: Session, style_id: Optional[str]) -> Optional[ItemType]:
    """Resolve style -> category -> item type. None when any link is missing."""
    if not style_id:
        return None
    style = db.query(Style).filter(Style.id == style_id).first()
    if style is None:
        return None
    return db.query(ItemType).filter(ItemType.name == style.category).first()


def validate_snapshot(db: Session, style_id: Optional[str], snapshot: Dict[str, str]) -> None:
    """Reject snapshot keys the style's item type does not define.

    Missing fields are fine (partial snapshots are allowed). With no item
    type configured for the style's category every key is accepted.
    """
    item_type = template_for_style(db, style_id)
    if item_type is None:
        return

    allowed = list(item_type.fields or [])
    for key in snapshot:
        if key != NOTES_FIELD and key not in allowed:
            raise InvalidMeasurementFieldError(key, allowed)


def upsert_history(
    db: Session,
    customer_id: str,
    order_id: str,
    measurements: Dict[str, str],
    notes: Optional[str] = None,
) -> MeasurementHistoryEntry:
    """Record ``measurements`` for an order in the customer's history.

    An existing entry for the same order is updated in place (new
    measurements and date, notes kept); otherwise a new entry is appended.
    """
    entry = (
        db.query(MeasurementHistoryEntry)
        .filter(
            MeasurementHistoryEntry.customer_id == customer_id,
            MeasurementHistoryEntry.order_id == order_id,
        )
        .first()
    )
    now = datetime.now(timezone.utc)
    if entry is not None:
        entry.measurements = dict(measurements)
        entry.date = now
        return entry

    entry = MeasurementHistoryEntry(
        customer_id=customer_id,
        order_id=order_id,
        measurements=dict(measurements),
        notes=notes,
        date=now,
    )
    db.add(entry)
    return entry
