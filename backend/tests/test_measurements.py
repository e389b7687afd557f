"""Tests for measurement snapshot validation and history."""

import pytest

from tailorshop.core.exceptions import InvalidMeasurementFieldError
from tailorshop.models.catalog import Style
from tailorshop.models.customer import MeasurementHistoryEntry
from tailorshop.services.measurement_service import (
    template_for_style,
    upsert_history,
    validate_snapshot,
)


class TestTemplateLookup:
    def test_style_category_resolves_item_type(self, db_session, style, shirt_template):
        assert template_for_style(db_session, style.id).id == shirt_template.id

    def test_missing_links_resolve_to_none(self, db_session):
        other = Style(name="Sarong", category="Other")
        db_session.add(other)
        db_session.commit()

        assert template_for_style(db_session, other.id) is None
        assert template_for_style(db_session, "e" * 24) is None
        assert template_for_style(db_session, None) is None


class TestValidateSnapshot:
    def test_partial_snapshot_allowed(self, db_session, style):
        validate_snapshot(db_session, style.id, {"Neck": "15"})

    def test_unknown_field_names_field_and_allowed_set(self, db_session, style):
        with pytest.raises(InvalidMeasurementFieldError) as exc_info:
            validate_snapshot(db_session, style.id, {"Neck": "15", "Waist": "32"})

        assert exc_info.value.field == "Waist"
        assert exc_info.value.allowed == ["Neck", "Chest", "Sleeve"]
        assert str(exc_info.value) == (
            "Invalid measurement field: Waist. Allowed fields: Neck, Chest, Sleeve"
        )

    def test_notes_field_allowed(self, db_session, style):
        validate_snapshot(db_session, style.id, {"Notes": "long arms"})

    def test_template_edit_applies_to_next_validation(self, db_session, style, shirt_template):
        shirt_template.fields = ["Neck", "Chest", "Sleeve", "Cuff"]
        db_session.commit()

        validate_snapshot(db_session, style.id, {"Cuff": "9"})


class TestHistory:
    def test_upsert_appends_then_updates(self, db_session, customer):
        first = upsert_history(db_session, customer.id, "1" * 24, {"Neck": "15"}, notes="first fitting")
        db_session.commit()

        again = upsert_history(db_session, customer.id, "1" * 24, {"Neck": "15.5"}, notes="ignored")
        db_session.commit()

        assert again.id == first.id
        assert again.measurements == {"Neck": "15.5"}
        assert again.notes == "first fitting"
        assert db_session.query(MeasurementHistoryEntry).count() == 1

    def test_separate_orders_get_separate_entries(self, db_session, customer):
        upsert_history(db_session, customer.id, "1" * 24, {"Neck": "15"})
        upsert_history(db_session, customer.id, "2" * 24, {"Neck": "16"})
        db_session.commit()

        assert sorted(e.order_id for e in customer.measurement_history) == ["1" * 24, "2" * 24]

    def test_non_string_values_rejected(self, db_session, customer):
        with pytest.raises(ValueError):
            MeasurementHistoryEntry(customer_id=customer.id, order_id="3" * 24, measurements={"Neck": 15})
