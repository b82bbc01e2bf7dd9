from thrifthub.enums.order_status import OrderStatus
from thrifthub.enums.user_role import UserRole
from thrifthub.utils.dates import today


def test_admin_routes_reject_students(client, factory):
    headers = factory.auth_headers(factory.create_user())

    assert client.get("/admin/users", headers=headers).status_code == 403
    assert client.get("/admin/orders", headers=headers).status_code == 403
    assert client.get("/admin/analytics/overview", headers=headers).status_code == 403


def test_update_order_status(client, factory):
    admin = factory.create_admin()
    order = factory.create_order(factory.create_user(), factory.create_zone())

    response = client.patch(f"/admin/orders/{order.id}/status", json={"status": "processing"}, headers=factory.auth_headers(admin))

    assert response.status_code == 200
    assert response.json()["message"] == "Status updated to processing"
    assert response.json()["data"]["status"] == "processing"


def test_update_order_status_errors(client, factory):
    headers = factory.auth_headers(factory.create_admin())
    delivered = factory.create_order(factory.create_user(), factory.create_zone(), status=OrderStatus.DELIVERED)

    assert client.patch("/admin/orders/999/status", json={"status": "processing"}, headers=headers).status_code == 404
    assert client.patch(f"/admin/orders/{delivered.id}/status", json={"status": "processing"}, headers=headers).status_code == 409

    invalid = client.patch(f"/admin/orders/{delivered.id}/status", json={"status": "shipped"}, headers=headers)
    assert invalid.status_code == 400
    assert invalid.json()["error"]["details"][0]["field"] == "status"


def test_admin_lists_users_by_role(client, factory):
    admin = factory.create_admin()
    factory.create_user()
    factory.create_user(role=UserRole.RIDER)

    response = client.get("/admin/users", params={"role": "student"}, headers=factory.auth_headers(admin))

    assert response.json()["pagination"]["total"] == 1


def test_admin_cannot_deactivate_self(client, factory):
    admin = factory.create_admin()

    response = client.patch(f"/admin/users/{admin.id}", json={"is_active": False}, headers=factory.auth_headers(admin))

    assert response.status_code == 409


def test_create_rider_promotes_user(client, factory):
    admin = factory.create_admin()
    user = factory.create_user()
    zone = factory.create_zone()
    headers = factory.auth_headers(admin)

    response = client.post("/admin/riders", json={"user_id": user.id, "zone_id": zone.id}, headers=headers)

    assert response.status_code == 201
    assert response.json()["data"]["is_available"] is True
    factory.session.refresh(user)
    assert user.role == UserRole.RIDER
    assert client.post("/admin/riders", json={"user_id": user.id, "zone_id": zone.id}, headers=headers).status_code == 409


def test_rider_toggles_own_availability(client, factory):
    zone = factory.create_zone()
    rider = factory.create_rider(zone)
    someone_else = factory.create_rider(zone)

    response = client.patch(f"/admin/riders/{rider.id}/availability", json={"is_available": False}, headers=factory.auth_headers(factory.user_of(rider)))
    assert response.status_code == 200
    assert response.json()["data"]["is_available"] is False
    assert response.json()["message"] == "Rider is now offline"

    forbidden = client.patch(f"/admin/riders/{rider.id}/availability", json={"is_available": True}, headers=factory.auth_headers(factory.user_of(someone_else)))
    assert forbidden.status_code == 403


def test_analytics_overview(client, factory):
    admin = factory.create_admin()
    customer = factory.create_user()
    zone = factory.create_zone(delivery_fee="5.00")
    factory.create_order(customer, zone, lines=[(factory.create_product(price="45.00"), 1)], status=OrderStatus.PROCESSING)
    factory.create_order(customer, zone, lines=[(factory.create_product(price="95.00"), 1)], status=OrderStatus.CANCELLED)

    data = client.get("/admin/analytics/overview", headers=factory.auth_headers(admin)).json()["data"]

    assert data["total_revenue"] == 50.0
    assert data["total_orders"] == 1
    assert data["total_users"] == 2
    assert data["orders_by_status"]["cancelled"] == 1
    assert data["orders_by_status"]["pending"] == 0


def test_sales_analytics(client, factory):
    admin = factory.create_admin()
    customer = factory.create_user()
    zone = factory.create_zone(delivery_fee="5.00")
    bestseller = factory.create_product(title="Denim jacket", price="45.00", stock=10)
    factory.create_order(customer, zone, lines=[(bestseller, 2)], status=OrderStatus.DELIVERED)
    factory.create_order(customer, zone, lines=[(factory.create_product(price="15.00"), 1)], status=OrderStatus.PROCESSING)
    factory.create_order(customer, zone, status=OrderStatus.PENDING)

    response = client.get("/admin/analytics/sales", params={"group_by": "monthly"}, headers=factory.auth_headers(admin))

    data = response.json()["data"]
    assert data["summary"] == {"total_sales": 115.0, "total_orders": 2, "average_order_value": 57.5}
    assert len(data["sales_data"]) == 1
    assert data["sales_data"][0]["date"] == today().strftime("%Y-%m")
    assert data["top_products"][0]["title"] == "Denim jacket"
    assert data["top_products"][0]["quantity_sold"] == 2


def test_sales_analytics_rejects_inverted_range(client, factory):
    response = client.get(
        "/admin/analytics/sales",
        params={"date_from": "2026-05-10", "date_to": "2026-05-01"},
        headers=factory.auth_headers(factory.create_admin()),
    )
    assert response.status_code == 400


def test_generate_embeddings(client, factory, embedding_api):
    admin = factory.create_admin()
    factory.create_product(images=[{"image_url": "https://cdn.thrifthub.test/a.jpg", "is_primary": True}])
    factory.create_product()

    response = client.post("/admin/ai/generate-embeddings", headers=factory.auth_headers(admin))

    assert response.json()["data"] == {"processed": 1, "failed": 0, "errors": []}
    assert embedding_api.inputs == ["image:https://cdn.thrifthub.test/a.jpg"]
