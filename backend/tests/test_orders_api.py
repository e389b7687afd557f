"""API tests for order routes."""

from tailorshop.models.material import Material
from tailorshop.models.order import Order
from tailorshop.models.stock import MovementType, StockMovement

API = "/api/v1/orders"


def order_payload(customer, style, delivery_date, **overrides):
    payload = {
        "customer_id": customer.id,
        "style_id": style.id,
        "delivery_date": delivery_date.isoformat(),
        "price": 4800,
        "description": "Wedding shirt",
    }
    payload.update(overrides)
    return payload


class TestOrderEndpoints:
    def test_create_order_reserves_stock(self, client, db_session, auth_headers, customer, style, fabric, delivery_date):
        response = client.post(
            f"{API}/",
            json=order_payload(
                customer, style, delivery_date,
                materials_used=[{"material_id": fabric.id, "quantity": 10}],
                measurement_snapshot={"Neck": "15", "Chest": "40"},
            ),
            headers=auth_headers,
        )

        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "Pending"
        assert data["payment_status"] == "Pending"
        assert data["materials_used"] == [{"material_id": fabric.id, "quantity": 10.0}]
        assert data["measurement_snapshot"] == {"Neck": "15", "Chest": "40"}
        assert len(data["id"]) == 24
        assert db_session.get(Material, fabric.id).quantity == 90

    def test_create_sends_confirmation_in_background(
        self, client, auth_headers, customer, style, delivery_date, notifier,
    ):
        response = client.post(f"{API}/", json=order_payload(customer, style, delivery_date), headers=auth_headers)

        assert response.status_code == 201
        assert notifier.kinds() == ["order_created"]

    def test_insufficient_stock(self, client, db_session, auth_headers, customer, style, buttons, delivery_date):
        response = client.post(
            f"{API}/",
            json=order_payload(
                customer, style, delivery_date,
                materials_used=[{"material_id": buttons.id, "quantity": 6}],
            ),
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json() == {
            "detail": "Insufficient stock for material: Pearl Buttons",
            "kind": "business_rule",
        }
        assert db_session.query(Order).count() == 0

    def test_invalid_measurement_field(self, client, db_session, auth_headers, customer, style, delivery_date):
        response = client.post(
            f"{API}/",
            json=order_payload(customer, style, delivery_date, measurement_snapshot={"Unknown": "1"}),
            headers=auth_headers,
        )

        assert response.status_code == 400
        body = response.json()
        assert body["kind"] == "validation"
        assert "Unknown" in body["detail"]
        assert db_session.query(Order).count() == 0

    def test_non_positive_quantity_rejected(self, client, auth_headers, customer, style, fabric, delivery_date):
        response = client.post(
            f"{API}/",
            json=order_payload(
                customer, style, delivery_date,
                materials_used=[{"material_id": fabric.id, "quantity": 0}],
            ),
            headers=auth_headers,
        )
        assert response.status_code == 422

    def test_missing_required_field(self, client, auth_headers, customer, style):
        response = client.post(
            f"{API}/",
            json={"customer_id": customer.id, "style_id": style.id, "price": 100},
            headers=auth_headers,
        )
        assert response.status_code == 422

    def test_get_and_list(self, client, auth_headers, customer, style, delivery_date):
        created = client.post(f"{API}/", json=order_payload(customer, style, delivery_date), headers=auth_headers).json()

        listed = client.get(f"{API}/", headers=auth_headers)
        fetched = client.get(f"{API}/{created['id']}", headers=auth_headers)

        assert [o["id"] for o in listed.json()] == [created["id"]]
        assert fetched.status_code == 200
        assert fetched.json()["description"] == "Wedding shirt"

    def test_get_unknown_order(self, client, auth_headers):
        response = client.get(f"{API}/{'a' * 24}", headers=auth_headers)
        assert response.status_code == 404
        assert response.json() == {"detail": "Order not found", "kind": "not_found"}

    def test_update_cancel_releases_stock(self, client, db_session, auth_headers, customer, style, fabric, delivery_date):
        created = client.post(
            f"{API}/",
            json=order_payload(
                customer, style, delivery_date,
                materials_used=[{"material_id": fabric.id, "quantity": 10}],
            ),
            headers=auth_headers,
        ).json()

        response = client.put(f"{API}/{created['id']}", json={"status": "Cancelled"}, headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["status"] == "Cancelled"
        assert db_session.get(Material, fabric.id).quantity == 100
        types = [m.type for m in db_session.query(StockMovement).order_by(StockMovement.id)]
        assert types == [MovementType.OUT, MovementType.IN]

    def test_update_to_ready_notifies(self, client, auth_headers, customer, style, delivery_date, notifier):
        created = client.post(f"{API}/", json=order_payload(customer, style, delivery_date), headers=auth_headers).json()

        client.put(f"{API}/{created['id']}", json={"status": "Ready"}, headers=auth_headers)

        assert notifier.kinds() == ["order_created", "order_ready"]

    def test_payment(self, client, auth_headers, customer, style, delivery_date):
        created = client.post(
            f"{API}/", json=order_payload(customer, style, delivery_date, discount=800), headers=auth_headers,
        ).json()

        paid = client.post(f"{API}/{created['id']}/payments", json={"payment_method": "Card"}, headers=auth_headers)
        again = client.post(f"{API}/{created['id']}/payments", json={}, headers=auth_headers)

        assert paid.status_code == 200
        assert paid.json()["payment_status"] == "Paid"
        assert paid.json()["payment_method"] == "Card"
        assert again.status_code == 400
        assert again.json()["kind"] == "business_rule"


class TestTrashLifecycle:
    def test_soft_delete_restore_and_force(
        self, client, db_session, auth_headers, manager_headers, admin_headers,
        customer, style, fabric, delivery_date,
    ):
        created = client.post(
            f"{API}/",
            json=order_payload(
                customer, style, delivery_date,
                materials_used=[{"material_id": fabric.id, "quantity": 10}],
            ),
            headers=auth_headers,
        ).json()
        order_id = created["id"]

        assert client.delete(f"{API}/{order_id}", headers=manager_headers).status_code == 200
        assert db_session.get(Material, fabric.id).quantity == 90
        trash = client.get(f"{API}/trash", headers=auth_headers).json()
        assert [o["id"] for o in trash] == [order_id]
        assert trash[0]["is_deleted"] is True
        assert client.get(f"{API}/{order_id}", headers=auth_headers).status_code == 404

        restored = client.put(f"{API}/{order_id}/restore", headers=manager_headers)
        assert restored.status_code == 200
        assert restored.json()["is_deleted"] is False

        assert client.delete(f"{API}/{order_id}/force", headers=admin_headers).status_code == 200
        db_session.expire_all()
        assert db_session.get(Material, fabric.id).quantity == 100
        assert client.get(f"{API}/", headers=auth_headers).json() == []
        assert client.get(f"{API}/trash", headers=auth_headers).json() == []


class TestTracking:
    def test_track_is_public(self, client, auth_headers, customer, style, delivery_date):
        created = client.post(
            f"{API}/",
            json=order_payload(customer, style, delivery_date, measurement_snapshot={"Neck": "15"}),
            headers=auth_headers,
        ).json()

        response = client.get(f"{API}/track/{created['id']}")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "Pending"
        assert data["customer_name"] == "Nimal"
        assert data["style_name"] == "Slim Fit Shirt"
        assert data["image"] == "/img/slim.png"
        assert "measurement_snapshot" not in data
        assert "customer_id" not in data

    def test_track_malformed_id(self, client):
        response = client.get(f"{API}/track/not-a-valid-id")
        assert response.status_code == 404
        assert response.json()["kind"] == "not_found"

    def test_track_unknown_id(self, client):
        assert client.get(f"{API}/track/{'0' * 24}").status_code == 404
