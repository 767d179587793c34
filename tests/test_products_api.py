"""Integration tests for the catalog endpoints."""

from conftest import bearer

PRODUCTS_URL = "/api/v1/products"


class TestLookup:
    def test_get_product(self, client, make_product):
        product = make_product(name="Teapot", price="30.00", image="teapot.png", in_stock=False)

        response = client.get(f"{PRODUCTS_URL}/{product.id}")
        assert response.status_code == 200
        data = response.json()
        assert data["id"] == product.id
        assert data["name"] == "Teapot"
        assert data["price"] == 30.0
        assert data["image"] == "teapot.png"
        assert data["inStock"] is False

    def test_unknown_product(self, client):
        response = client.get(f"{PRODUCTS_URL}/12345")
        assert response.status_code == 404

    def test_list_products(self, client, make_product):
        make_product(name="A")
        make_product(name="B", in_stock=False)

        names = [p["name"] for p in client.get(PRODUCTS_URL).json()]
        assert names == ["A", "B"]

        in_stock = client.get(PRODUCTS_URL, params={"only_in_stock": True}).json()
        assert [p["name"] for p in in_stock] == ["A"]


class TestAdminWrites:
    def test_create_requires_admin(self, client):
        payload = {"name": "Kettle", "price": 45.0}
        assert client.post(PRODUCTS_URL, json=payload).status_code == 401
        assert client.post(PRODUCTS_URL, json=payload, headers=bearer(1)).status_code == 403

    def test_admin_creates_product(self, client, admin_headers):
        response = client.post(
            PRODUCTS_URL,
            json={"name": "Kettle", "price": 45.0, "inStock": True},
            headers=admin_headers,
        )
        assert response.status_code == 201
        assert response.json()["name"] == "Kettle"

    def test_delete_unused_product(self, client, admin_headers, make_product):
        product = make_product()
        response = client.delete(f"{PRODUCTS_URL}/{product.id}", headers=admin_headers)
        assert response.status_code == 204
        assert client.get(f"{PRODUCTS_URL}/{product.id}").status_code == 404

    def test_delete_product_in_a_cart_conflicts(self, client, admin_headers, make_product):
        product = make_product()
        client.post(
            "/api/v1/cart",
            json={"productId": product.id, "quantity": 1},
            headers=bearer(1),
        )

        response = client.delete(f"{PRODUCTS_URL}/{product.id}", headers=admin_headers)
        assert response.status_code == 409
        assert response.json()["detail"] == "Product is in use by one or more carts"
