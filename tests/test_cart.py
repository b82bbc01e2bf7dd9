def test_empty_cart_is_created_on_first_read(client, factory):
    user = factory.create_user()

    response = client.get("/cart", headers=factory.auth_headers(user))

    assert response.status_code == 200
    assert response.json()["data"]["items"] == []
    assert response.json()["data"]["total"] == 0


def test_adding_same_product_merges_quantity(client, factory):
    user = factory.create_user()
    product = factory.create_product(price="25.50", stock=5)
    headers = factory.auth_headers(user)

    client.post("/cart/items", json={"product_id": product.id, "quantity": 1}, headers=headers)
    response = client.post("/cart/items", json={"product_id": product.id, "quantity": 2}, headers=headers)

    assert response.status_code == 201
    cart = response.json()["data"]
    assert len(cart["items"]) == 1
    assert cart["items"][0]["quantity"] == 3
    assert cart["total"] == 76.5
    assert cart["total_items"] == 3


def test_add_beyond_stock_conflicts(client, factory):
    user = factory.create_user()
    product = factory.create_product(stock=1)

    response = client.post("/cart/items", json={"product_id": product.id, "quantity": 2}, headers=factory.auth_headers(user))

    assert response.status_code == 409


def test_update_and_remove_item(client, factory):
    user = factory.create_user()
    product = factory.create_product(price="10.00", stock=4)
    headers = factory.auth_headers(user)
    item_id = client.post("/cart/items", json={"product_id": product.id}, headers=headers).json()["data"]["items"][0]["id"]

    response = client.patch(f"/cart/items/{item_id}", json={"quantity": 4}, headers=headers)
    assert response.json()["data"]["total"] == 40.0

    response = client.patch(f"/cart/items/{item_id}", json={"quantity": 0}, headers=headers)
    assert response.status_code == 400

    response = client.delete(f"/cart/items/{item_id}", headers=headers)
    assert response.json()["data"]["items"] == []


def test_cannot_touch_someone_elses_item(client, factory):
    owner = factory.create_user()
    other = factory.create_user()
    product = factory.create_product()
    item_id = client.post("/cart/items", json={"product_id": product.id}, headers=factory.auth_headers(owner)).json()["data"]["items"][0]["id"]

    response = client.patch(f"/cart/items/{item_id}", json={"quantity": 2}, headers=factory.auth_headers(other))

    assert response.status_code == 404
