"""Tests for OrderService: stock reservation, measurements and post-commit work."""

import asyncio
from collections import defaultdict

import pytest

from tailorshop.core.exceptions import (
    AlreadyPaidError,
    CustomerNotFound,
    InsufficientStockError,
    InvalidMeasurementFieldError,
    MaterialNotFound,
    OrderNotFound,
)
from tailorshop.models.audit import AuditLogEntry
from tailorshop.models.catalog import Style
from tailorshop.models.customer import Customer, MeasurementHistoryEntry
from tailorshop.models.order import Order, OrderMaterial, OrderStatus, PaymentStatus
from tailorshop.models.stock import MovementReason, MovementType, StockMovement
from tailorshop.models.transaction import PaymentMethod, Transaction, TransactionType
from tailorshop.schemas.order import OrderCreate, OrderPaymentRequest, OrderUpdate
from tailorshop.services.inventory_service import order_reference
from tailorshop.services.material_service import MaterialService
from tailorshop.services.order_service import OrderService


@pytest.fixture
def service(db_session, actor, notifier):
    return OrderService(db_session, actor=actor, notifier=notifier)


@pytest.fixture
def new_order(customer, style, delivery_date):
    """Build an OrderCreate for the shared customer and style."""
    def _build(**overrides):
        data = {
            "customer_id": customer.id,
            "style_id": style.id,
            "delivery_date": delivery_date,
            "price": 5000,
            "description": "Linen shirt",
        }
        data.update(overrides)
        return OrderCreate(**data)
    return _build


def order_movements(db_session, order_id):
    return (
        db_session.query(StockMovement)
        .filter(StockMovement.reference == order_reference(order_id))
        .order_by(StockMovement.id)
        .all()
    )


def net_reserved(db_session, order_id):
    """OUT minus IN per material for movements referencing the order."""
    totals = defaultdict(float)
    for movement in order_movements(db_session, order_id):
        sign = 1 if movement.type == MovementType.OUT else -1
        totals[movement.material_id] += sign * movement.quantity
    return {material_id: qty for material_id, qty in totals.items() if qty}


def run_after_commit(service):
    asyncio.run(service.after_commit.run())


# ============== Reservation scenarios ==============


class TestReservation:
    def test_pending_order_deducts_stock(self, db_session, service, new_order, fabric):
        order = service.create(new_order(
            status=OrderStatus.PENDING,
            materials_used=[{"material_id": fabric.id, "quantity": 10}],
        ))

        assert fabric.quantity == 90
        movements = order_movements(db_session, order.id)
        assert len(movements) == 1
        assert movements[0].type == MovementType.OUT
        assert movements[0].quantity == 10
        assert movements[0].reason == MovementReason.ORDER_CREATION
        assert movements[0].material_id == fabric.id

    def test_cancelling_reverts_reservation(self, db_session, service, new_order, fabric):
        order = service.create(new_order(materials_used=[{"material_id": fabric.id, "quantity": 10}]))

        service.update(order.id, OrderUpdate(status=OrderStatus.CANCELLED))

        assert fabric.quantity == 100
        movements = order_movements(db_session, order.id)
        assert [m.type for m in movements] == [MovementType.OUT, MovementType.IN]
        assert movements[1].quantity == 10
        assert movements[1].reason == MovementReason.ORDER_REVERSAL

    def test_draft_order_does_not_touch_stock(self, db_session, service, new_order, fabric):
        order = service.create(new_order(
            status=OrderStatus.DRAFT,
            materials_used=[{"material_id": fabric.id, "quantity": 10}],
        ))

        assert fabric.quantity == 100
        assert order_movements(db_session, order.id) == []
        assert len(order.materials_used) == 1

    def test_force_delete_pending_order_restores_stock(self, db_session, service, new_order, fabric):
        order = service.create(new_order(materials_used=[{"material_id": fabric.id, "quantity": 10}]))
        order_id = order.id
        assert fabric.quantity == 90

        service.force_delete(order_id)

        assert fabric.quantity == 100
        assert db_session.query(Order).filter(Order.id == order_id).first() is None
        assert order_id not in [o.id for o in service.list()]
        assert order_id not in [o.id for o in service.trash()]
        assert db_session.query(OrderMaterial).filter(OrderMaterial.order_id == order_id).count() == 0

    def test_draft_to_pending_deducts(self, db_session, service, new_order, fabric):
        order = service.create(new_order(
            status=OrderStatus.DRAFT,
            materials_used=[{"material_id": fabric.id, "quantity": 10}],
        ))

        service.update(order.id, OrderUpdate(status=OrderStatus.PENDING))

        assert fabric.quantity == 90
        assert net_reserved(db_session, order.id) == {fabric.id: 10}

    def test_reserved_status_change_keeps_single_deduction(self, db_session, service, new_order, fabric):
        order = service.create(new_order(materials_used=[{"material_id": fabric.id, "quantity": 10}]))

        service.update(order.id, OrderUpdate(status=OrderStatus.CUTTING))
        service.update(order.id, OrderUpdate(status=OrderStatus.STITCHING))

        assert fabric.quantity == 90
        assert len(order_movements(db_session, order.id)) == 1

    def test_materials_change_with_reserved_status_change_does_not_double_count(
        self, db_session, service, new_order, fabric, buttons,
    ):
        order = service.create(new_order(materials_used=[{"material_id": fabric.id, "quantity": 10}]))

        service.update(order.id, OrderUpdate(
            status=OrderStatus.CUTTING,
            materials_used=[
                {"material_id": fabric.id, "quantity": 15},
                {"material_id": buttons.id, "quantity": 2},
            ],
        ))

        assert fabric.quantity == 85
        assert buttons.quantity == 3
        assert net_reserved(db_session, order.id) == {fabric.id: 15, buttons.id: 2}

    def test_materials_change_on_draft_order_is_not_reserved(self, db_session, service, new_order, fabric):
        order = service.create(new_order(status=OrderStatus.DRAFT))

        service.update(order.id, OrderUpdate(materials_used=[{"material_id": fabric.id, "quantity": 30}]))

        assert fabric.quantity == 100
        assert [(m.material_id, m.quantity) for m in order.materials_used] == [(fabric.id, 30)]

    def test_cancel_then_reinstate_with_new_materials(self, db_session, service, new_order, fabric, buttons):
        order = service.create(new_order(materials_used=[{"material_id": fabric.id, "quantity": 10}]))
        service.update(order.id, OrderUpdate(status=OrderStatus.CANCELLED))

        service.update(order.id, OrderUpdate(
            status=OrderStatus.PENDING,
            materials_used=[{"material_id": buttons.id, "quantity": 4}],
        ))

        assert fabric.quantity == 100
        assert buttons.quantity == 1
        assert net_reserved(db_session, order.id) == {buttons.id: 4}

    def test_net_reservation_matches_lines_across_updates(
        self, db_session, service, new_order, fabric, buttons,
    ):
        order = service.create(new_order(materials_used=[{"material_id": fabric.id, "quantity": 5}]))
        service.update(order.id, OrderUpdate(materials_used=[{"material_id": fabric.id, "quantity": 8}]))
        service.update(order.id, OrderUpdate(status=OrderStatus.TRIAL))
        service.update(order.id, OrderUpdate(materials_used=[
            {"material_id": fabric.id, "quantity": 3},
            {"material_id": buttons.id, "quantity": 1},
        ]))

        expected = {line.material_id: line.quantity for line in order.materials_used}
        assert net_reserved(db_session, order.id) == expected
        assert fabric.quantity == 97
        assert buttons.quantity == 4


# ============== Failures leave no residue ==============


class TestAtomicity:
    def test_second_line_shortfall_rolls_back_first(self, db_session, service, new_order, fabric, buttons):
        with pytest.raises(InsufficientStockError) as exc_info:
            service.create(new_order(materials_used=[
                {"material_id": fabric.id, "quantity": 10},
                {"material_id": buttons.id, "quantity": 50},
            ]))

        assert "Pearl Buttons" in str(exc_info.value)
        assert fabric.quantity == 100
        assert buttons.quantity == 5
        assert db_session.query(Order).count() == 0
        assert db_session.query(StockMovement).count() == 0

    def test_unknown_measurement_field_rejected(self, db_session, service, new_order, fabric):
        with pytest.raises(InvalidMeasurementFieldError) as exc_info:
            service.create(new_order(
                measurement_snapshot={"Unknown": "1"},
                materials_used=[{"material_id": fabric.id, "quantity": 10}],
            ))

        assert "Unknown" in str(exc_info.value)
        assert exc_info.value.field == "Unknown"
        assert db_session.query(Order).count() == 0
        assert fabric.quantity == 100
        assert db_session.query(MeasurementHistoryEntry).count() == 0

    def test_missing_material_on_deduct_fails(self, db_session, service, new_order):
        with pytest.raises(MaterialNotFound):
            service.create(new_order(materials_used=[{"material_id": "0" * 24, "quantity": 1}]))
        assert db_session.query(Order).count() == 0

    def test_failed_update_restores_previous_reservation(self, db_session, service, new_order, fabric):
        order = service.create(new_order(materials_used=[{"material_id": fabric.id, "quantity": 10}]))

        with pytest.raises(CustomerNotFound):
            service.update(order.id, OrderUpdate(
                customer_id="f" * 24,
                materials_used=[{"material_id": fabric.id, "quantity": 40}],
            ))

        assert fabric.quantity == 90
        assert [(m.material_id, m.quantity) for m in order.materials_used] == [(fabric.id, 10)]
        assert len(order_movements(db_session, order.id)) == 1

    def test_insufficient_stock_on_update_keeps_order_unchanged(self, db_session, service, new_order, fabric):
        order = service.create(new_order(
            status=OrderStatus.DRAFT,
            materials_used=[{"material_id": fabric.id, "quantity": 500}],
        ))

        with pytest.raises(InsufficientStockError):
            service.update(order.id, OrderUpdate(status=OrderStatus.PENDING))

        assert order.status == OrderStatus.DRAFT
        assert fabric.quantity == 100

    def test_unknown_customer_or_style_rejected(self, db_session, service, new_order):
        with pytest.raises(CustomerNotFound):
            service.create(new_order(customer_id="a" * 24))
        assert db_session.query(Order).count() == 0


# ============== Soft delete / restore / force delete ==============


class TestDeletion:
    def test_soft_delete_keeps_stock_reserved(self, db_session, service, new_order, fabric):
        order = service.create(new_order(materials_used=[{"material_id": fabric.id, "quantity": 10}]))

        service.soft_delete(order.id)

        assert fabric.quantity == 90
        assert order.id in [o.id for o in service.trash()]
        assert order.id not in [o.id for o in service.list()]
        with pytest.raises(OrderNotFound):
            service.get(order.id)

    def test_restore_does_not_touch_stock(self, db_session, service, new_order, fabric):
        order = service.create(new_order(materials_used=[{"material_id": fabric.id, "quantity": 10}]))
        service.soft_delete(order.id)

        restored = service.restore(order.id)

        assert restored.is_deleted is False
        assert fabric.quantity == 90
        assert len(order_movements(db_session, order.id)) == 1

    def test_restore_requires_trashed_order(self, service, new_order):
        order = service.create(new_order())
        with pytest.raises(OrderNotFound):
            service.restore(order.id)

    def test_soft_then_force_delete_reverts_once(self, db_session, service, new_order, fabric):
        order = service.create(new_order(materials_used=[{"material_id": fabric.id, "quantity": 10}]))
        order_id = order.id

        service.soft_delete(order_id)
        service.force_delete(order_id)

        assert fabric.quantity == 100
        movements = order_movements(db_session, order_id)
        assert [m.type for m in movements] == [MovementType.OUT, MovementType.IN]

    def test_force_delete_cancelled_order_does_not_credit_stock(self, db_session, service, new_order, fabric):
        order = service.create(new_order(materials_used=[{"material_id": fabric.id, "quantity": 10}]))
        service.update(order.id, OrderUpdate(status=OrderStatus.CANCELLED))
        assert fabric.quantity == 100

        service.force_delete(order.id)

        assert fabric.quantity == 100

    def test_force_delete_unknown_order(self, service):
        with pytest.raises(OrderNotFound):
            service.force_delete("b" * 24)


class TestMissingMaterials:
    """Reversal is forgiving about removed materials while deduction is strict."""

    def test_revert_skips_force_deleted_material(self, db_session, service, new_order, fabric, buttons, actor):
        order = service.create(new_order(materials_used=[
            {"material_id": fabric.id, "quantity": 10},
            {"material_id": buttons.id, "quantity": 1},
        ]))
        fabric_id = fabric.id
        MaterialService(db_session, actor=actor).force_delete(fabric_id)

        service.update(order.id, OrderUpdate(status=OrderStatus.CANCELLED))

        assert order.status == OrderStatus.CANCELLED
        assert buttons.quantity == 5
        assert net_reserved(db_session, order.id) == {}

    def test_soft_deleted_material_is_still_reservable(self, db_session, service, new_order, fabric, actor):
        MaterialService(db_session, actor=actor).soft_delete(fabric.id)

        service.create(new_order(materials_used=[{"material_id": fabric.id, "quantity": 10}]))

        assert fabric.quantity == 90


# ============== Measurements ==============


class TestMeasurements:
    def test_snapshot_round_trip(self, db_session, service, new_order, customer):
        snapshot = {"Neck": "15.5", "Chest": "40"}

        order = service.create(new_order(measurement_snapshot=snapshot))

        assert order.measurement_snapshot == snapshot
        entries = [e for e in customer.measurement_history if e.order_id == order.id]
        assert len(entries) == 1
        assert entries[0].measurements == snapshot
        assert entries[0].notes == "Linen shirt"

    def test_updating_snapshot_updates_same_history_entry(self, db_session, service, new_order, customer):
        order = service.create(new_order(measurement_snapshot={"Neck": "15"}))

        service.update(order.id, OrderUpdate(measurement_snapshot={"Neck": "16", "Sleeve": "25"}))

        entries = (
            db_session.query(MeasurementHistoryEntry)
            .filter(MeasurementHistoryEntry.order_id == order.id)
            .all()
        )
        assert len(entries) == 1
        assert entries[0].measurements == {"Neck": "16", "Sleeve": "25"}
        assert order.measurement_snapshot == {"Neck": "16", "Sleeve": "25"}

    def test_reassigned_order_records_history_for_new_customer(
        self, db_session, service, new_order, customer,
    ):
        other = Customer(
            first_name="Kamala",
            last_name="Silva",
            nic="885551234V",
            phone="+94772223333",
            email="kamala@example.com",
            address="4 Temple Road, Kandy",
        )
        db_session.add(other)
        db_session.commit()
        order = service.create(new_order(measurement_snapshot={"Neck": "15"}))

        service.update(order.id, OrderUpdate(customer_id=other.id, measurement_snapshot={"Neck": "16"}))

        entries = {
            e.customer_id: e.measurements
            for e in db_session.query(MeasurementHistoryEntry)
            .filter(MeasurementHistoryEntry.order_id == order.id)
        }
        # The earlier entry is kept under the original customer
        assert entries == {customer.id: {"Neck": "15"}, other.id: {"Neck": "16"}}

    def test_notes_key_always_allowed(self, service, new_order):
        order = service.create(new_order(measurement_snapshot={"Neck": "15", "Notes": "loose fit"}))
        assert order.measurement_snapshot["Notes"] == "loose fit"

    def test_style_without_template_accepts_any_field(self, db_session, service, new_order):
        style = Style(name="Custom Kurta", category="Kurta", base_price=0)
        db_session.add(style)
        db_session.commit()

        order = service.create(new_order(style_id=style.id, measurement_snapshot={"Anything": "1"}))

        assert order.measurement_snapshot == {"Anything": "1"}

    def test_empty_snapshot_writes_no_history(self, db_session, service, new_order):
        service.create(new_order())
        assert db_session.query(MeasurementHistoryEntry).count() == 0


# ============== Post-commit work ==============


class TestNotifications:
    def test_created_notice_queued_and_sent(self, service, new_order, notifier, customer):
        order = service.create(new_order())

        assert service.after_commit.labels == [f"order_created {order.id}"]
        assert notifier.calls == []
        run_after_commit(service)

        kind, contact, notice = notifier.calls[0]
        assert kind == "order_created"
        assert contact.email == customer.email
        assert notice.order_id == order.id
        assert notice.status == "Pending"

    def test_draft_creation_sends_nothing(self, service, new_order, notifier):
        service.create(new_order(status=OrderStatus.DRAFT))
        run_after_commit(service)
        assert notifier.calls == []

    def test_status_notices(self, service, new_order, notifier):
        order = service.create(new_order(status=OrderStatus.DRAFT))

        service.update(order.id, OrderUpdate(status=OrderStatus.PENDING))
        service.update(order.id, OrderUpdate(status=OrderStatus.CUTTING))
        service.update(order.id, OrderUpdate(status=OrderStatus.READY))
        service.update(order.id, OrderUpdate(price=6000))
        run_after_commit(service)

        assert notifier.kinds() == ["order_created", "order_status_changed", "order_ready"]

    def test_low_stock_alert_goes_to_admins(self, service, new_order, notifier, buttons, admin_user):
        service.create(new_order(materials_used=[{"material_id": buttons.id, "quantity": 3}]))
        run_after_commit(service)

        alerts = [call for call in notifier.calls if call[0] == "low_stock"]
        assert len(alerts) == 1
        _, alert, admins = alerts[0]
        assert alert.material_id == buttons.id
        assert alert.quantity == 2
        assert [a.email for a in admins] == [admin_user.email]

    def test_notifier_failure_does_not_fail_operation(self, db_session, actor, new_order, fabric, failing_notifier):
        failing = failing_notifier
        service = OrderService(db_session, actor=actor, notifier=failing)
        order = service.create(new_order(materials_used=[{"material_id": fabric.id, "quantity": 95}]))

        run_after_commit(service)

        assert failing.kinds() == ["order_created", "low_stock"]
        assert db_session.query(Order).filter(Order.id == order.id).count() == 1
        assert fabric.quantity == 5

    def test_audit_entries_written(self, db_session, service, new_order, actor):
        order = service.create(new_order())
        service.update(order.id, OrderUpdate(status=OrderStatus.MEASURED))

        entries = (
            db_session.query(AuditLogEntry)
            .filter(AuditLogEntry.entity_id == order.id)
            .order_by(AuditLogEntry.id)
            .all()
        )
        assert [e.action for e in entries] == ["CREATE", "UPDATE"]
        assert entries[0].entity_type == "Order"
        assert entries[0].user_id == actor.user_id
        assert entries[1].details["status"] == "Measured"


# ============== Payments and tracking ==============


class TestPaymentsAndTracking:
    def test_record_payment_books_income(self, db_session, service, new_order):
        order = service.create(new_order(price=5000, discount=500))

        service.record_payment(order.id, OrderPaymentRequest(payment_method=PaymentMethod.CARD))

        assert order.payment_status == PaymentStatus.PAID
        income = db_session.query(Transaction).one()
        assert income.type == TransactionType.INCOME
        assert income.category == "Sales"
        assert income.amount == 4500
        assert income.reference == order_reference(order.id)

    def test_double_payment_rejected(self, db_session, service, new_order):
        order = service.create(new_order())
        service.record_payment(order.id, OrderPaymentRequest())

        with pytest.raises(AlreadyPaidError):
            service.record_payment(order.id, OrderPaymentRequest())
        assert db_session.query(Transaction).count() == 1

    def test_track_returns_public_projection(self, service, new_order, style):
        order = service.create(new_order())

        tracked = service.track(order.id)

        assert tracked["id"] == order.id
        assert tracked["status"] == OrderStatus.PENDING
        assert tracked["customer_name"] == "Nimal"
        assert tracked["style_name"] == style.name
        assert tracked["image"] == style.image
        assert "measurement_snapshot" not in tracked

    @pytest.mark.parametrize("order_id", ["not-an-id", "123", "z" * 24, ""])
    def test_track_malformed_id_is_not_found(self, service, order_id):
        with pytest.raises(OrderNotFound):
            service.track(order_id)

    def test_track_hides_trashed_orders(self, service, new_order):
        order = service.create(new_order())
        service.soft_delete(order.id)
        with pytest.raises(OrderNotFound):
            service.track(order.id)
