import pytest

from models.store import Category, Product, StoredFile, SubCategory
from services.cache import CacheKeys
from services.products import discount_percentage, first_image_id, parse_images


@pytest.fixture
def catalogue(seed):
    seed(
        Category(id=1, name="Spices", category_url="spices"),
        SubCategory(id=10, name="Whole", category_name="Spices"),
        StoredFile(id=3, file_path="/uploads/", file_name="cumin.jpg"),
    )
    return seed(
        Product(
            product_id=1,
            product_code="CUM",
            name="Cumin",
            category_id=1,
            sub_category_id=10,
            price=100,
            special_price=75,
            images="3,4",
            checkout_page="1",
            created_at=100,
        ),
        Product(product_id=2, product_code="SAF", name="Saffron", category_id=1, price=300, created_at=300),
        Product(product_id=3, product_code="CAR", name="Cardamom", price=50, checkout_page="true", created_at=200),
        Product(product_id=4, product_code="OLD", name="Discontinued", price=10, status=0),
        Product(product_id=5, product_code="SAF-5", name="Saffron 5g", parent_product_id=2, price=40, created_at=50),
        Product(product_id=6, product_code="SAF-1", name="Saffron 1g", parent_product_id=2, price=12, created_at=60),
    )


@pytest.mark.parametrize(
    "price, special, expected",
    [(100, 75, 25), (30, 20, 33), (9, 6, 33), (8, 7, 13), (100, None, None), (100, 120, None)],
)
def test_discount_percentage(price, special, expected):
    assert discount_percentage(price, special) == expected


def test_image_parsing():
    assert parse_images("[7, 8]") == [7, 8]
    assert parse_images("7,8") == "7,8"
    assert first_image_id("7,8") == 7
    assert first_image_id([9]) == 9
    assert first_image_id(None) is None


def test_list_hides_inactive_and_child_products(api, catalogue):
    body = api.get("/api/products").json()

    assert body["success"] is True
    assert [p["product_id"] for p in body["data"]["products"]] == [1, 2, 3]
    assert body["data"]["pagination"] == {"total_items": 3}

    cumin = body["data"]["products"][0]
    assert cumin["category_name"] == "Spices"
    assert cumin["subcategory_name"] == "Whole"
    assert cumin["discount_percentage"] == 25
    assert cumin["image_url"] == "/uploads/cumin.jpg"


def test_list_pagination_and_sorting(api, catalogue):
    body = api.get("/api/products", params={"page": 2, "limit": 2, "sort": "price", "order": "desc"}).json()

    assert [p["name"] for p in body["data"]["products"]] == ["Cardamom"]
    assert body["data"]["pagination"] == {
        "current_page": 2,
        "total_pages": 2,
        "total_items": 3,
        "items_per_page": 2,
    }


def test_list_includes_children_on_request(api, catalogue):
    body = api.get("/api/products", params={"include_children": "true"}).json()
    assert len(body["data"]["products"]) == 5


@pytest.mark.parametrize(
    "params, message",
    [
        ({"sort": "colour"}, "Invalid sort field"),
        ({"order": "sideways"}, "Invalid order parameter"),
        ({"page": 1, "limit": 101}, "Invalid pagination parameters"),
        ({"page": 0, "limit": 10}, "Invalid pagination parameters"),
    ],
)
def test_list_rejects_bad_parameters(api, catalogue, params, message):
    response = api.get("/api/products", params=params)
    assert response.status_code == 400
    assert response.json() == {"success": False, "error": message}


def test_list_is_served_from_cache_until_invalidated(api, catalogue, seed):
    first = api.get("/api/products").json()
    seed(Product(product_id=7, product_code="PEP", name="Pepper", price=5))

    assert api.get("/api/products").json() == first

    response = api.post("/api/products/updates", json={"type": "product_created", "data": {"product_id": 7}})
    assert response.status_code == 200
    assert response.json()["invalidated"] >= 1

    refreshed = api.get("/api/products").json()
    assert [p["product_id"] for p in refreshed["data"]["products"]] == [1, 2, 3, 7]


def test_unrelated_update_notice_leaves_cache(api, catalogue, cache):
    api.get("/api/products")
    response = api.post("/api/products/updates", json={"type": "order_created", "data": {}})

    assert response.json()["invalidated"] == 0
    assert cache.stats()["size"] == 1


def test_get_product(api, catalogue, cache):
    response = api.get("/api/products/1")

    assert response.status_code == 200
    assert response.json()["data"]["name"] == "Cumin"
    assert cache.has(CacheKeys.product_by_id(1))


def test_missing_product_is_remembered(api, catalogue, cache, seed):
    response = api.get("/api/products/99")
    assert response.status_code == 404
    assert response.json() == {"success": False, "error": "Product not found"}

    seed(Product(product_id=99, product_code="NEW", name="Sumac", price=8))
    assert api.get("/api/products/99").status_code == 404


def test_invalid_product_id(api):
    response = api.get("/api/products/0")
    assert response.status_code == 400
    assert response.json()["error"] == "Invalid product ID"


def test_child_products_cheapest_first(api, catalogue):
    body = api.get("/api/products/2/children").json()
    assert body["count"] == 2
    assert [c["name"] for c in body["children"]] == ["Saffron 1g", "Saffron 5g"]


def test_featured_products_newest_first(api, catalogue):
    body = api.get("/api/products/featured", params={"limit": 2}).json()
    assert [p["product_id"] for p in body["data"]] == [2, 3]


@pytest.mark.parametrize(
    "params, message",
    [
        ({"limit": 0}, "Invalid limit parameter. Must be between 1 and 50"),
        ({"limit": 51}, "Invalid limit parameter. Must be between 1 and 50"),
        ({"lang": "fr"}, "Invalid language parameter. Must be en or ar"),
    ],
)
def test_featured_products_validation(api, params, message):
    response = api.get("/api/products/featured", params=params)
    assert response.status_code == 400
    assert response.json()["error"] == message


def test_checkout_page_products(api, catalogue):
    body = api.get("/api/products/checkout-page").json()
    assert [p["product_id"] for p in body["data"]] == [3, 1]


def test_products_by_category(api, catalogue):
    body = api.get("/api/products/category/1").json()

    assert [p["product_id"] for p in body["data"]["products"]] == [1, 2]
    assert body["data"]["pagination"]["total_items"] == 2


def test_products_by_category_rejects_bad_language(api, catalogue):
    response = api.get("/api/products/category/1", params={"lang": "de"})
    assert response.status_code == 400


def test_get_file(api, catalogue):
    assert api.get("/api/files/3").json()["data"]["file_name"] == "cumin.jpg"

    missing = api.get("/api/files/42")
    assert missing.status_code == 404
    assert missing.json()["error"] == "File not found"


def test_file_lookup_is_cached(api, catalogue, cache):
    api.get("/api/files/3")
    assert cache.get(CacheKeys.image(3))["data"]["file_path"] == "/uploads/"
