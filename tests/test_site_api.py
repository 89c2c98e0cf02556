from catalog_site import schemas
from catalog_site.core.errors import StorageFault
from catalog_site.db.memory import MemoryStorage


class FailingStorage(MemoryStorage):
    def list_categories(self):
        raise StorageFault("snapshot directory is read-only")

    def list_settings(self):
        raise RuntimeError("settings table exploded")


def _catalog(storage):
    acids = storage.create_category(schemas.CategoryCreate(name="Acids"))
    bases = storage.create_category(schemas.CategoryCreate(name="Bases"))
    hcl = storage.create_product(schemas.ProductCreate(name="HCl", description="Hydrochloric acid", category_id=acids.id))
    storage.create_product(schemas.ProductCreate(name="NaOH", description="Caustic soda", category_id=bases.id))
    storage.create_product(schemas.ProductCreate(name="Mystery", description=""))
    storage.create_product_image(schemas.ProductImageCreate(product_id=hcl.id, image_url="/hcl-side.jpg", order=0))
    storage.create_product_image(
        schemas.ProductImageCreate(product_id=hcl.id, image_url="/hcl-front.jpg", is_main=True, order=1)
    )
    return storage


def test_public_categories(client, storage):
    _catalog(storage)

    response = client.get("/api/categories")
    assert response.status_code == 200
    assert [category["name"] for category in response.json()] == ["Acids", "Bases"]
    assert client.get("/api/categories/2").json()["name"] == "Bases"

    missing = client.get("/api/categories/9")
    assert missing.status_code == 404
    assert missing.json() == {"message": "Category not found"}


def test_product_listing_includes_category_and_main_image(client, storage):
    _catalog(storage)

    products = client.get("/api/products").json()
    assert [product["name"] for product in products] == ["HCl", "NaOH", "Mystery"]

    hcl = products[0]
    assert hcl["category"] == {"id": 1, "name": "Acids"}
    assert hcl["mainImage"] == "/hcl-front.jpg"
    assert products[1]["mainImage"] is None
    assert products[2]["category"] is None


def test_product_listing_filters_by_category(client, storage):
    _catalog(storage)

    response = client.get("/api/products", params={"categoryId": 2})
    assert [product["name"] for product in response.json()] == ["NaOH"]
    assert client.get("/api/products", params={"categoryId": 7}).json() == []


def test_product_detail(client, storage):
    _catalog(storage)

    detail = client.get("/api/products/1").json()
    assert detail["category"] == {"id": 1, "name": "Acids"}
    assert [image["imageUrl"] for image in detail["images"]] == ["/hcl-side.jpg", "/hcl-front.jpg"]

    missing = client.get("/api/products/99")
    assert missing.status_code == 404
    assert missing.json() == {"message": "Product not found"}


def test_public_hero_images_hide_inactive(client, storage):
    storage.create_hero_image(schemas.HeroImageCreate(image_url="/h/b.jpg", order=2))
    storage.create_hero_image(schemas.HeroImageCreate(image_url="/h/hidden.jpg", order=1, is_active=False))
    storage.create_hero_image(schemas.HeroImageCreate(image_url="/h/a.jpg", order=0))

    images = client.get("/api/hero-images").json()
    assert [image["imageUrl"] for image in images] == ["/h/a.jpg", "/h/b.jpg"]


def test_settings_are_a_flat_mapping(client, storage):
    storage.upsert_setting("company_name", "Acme")
    storage.upsert_setting("company_fax", None)

    assert client.get("/api/settings").json() == {"company_name": "Acme", "company_fax": None}


def test_contact_submission(client, storage):
    response = client.post(
        "/api/contact",
        json={
            "name": "Ravi",
            "email": "ravi@example.com",
            "phone": "9876543210",
            "message": "Need a quote for 200L",
            "requestCallBack": True,
        },
    )

    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "new"
    assert body["requestCallBack"] is True
    assert storage.list_contact_requests()[0].message == "Need a quote for 200L"


def test_contact_submission_is_validated(client, storage):
    response = client.post("/api/contact", json={"name": "R", "email": "not-an-email", "phone": "123"})

    assert response.status_code == 400
    message = response.json()["message"]
    assert message.startswith("Validation error")
    assert "email" in message
    assert storage.list_contact_requests() == []


def test_api_responses_are_not_cached(client):
    response = client.get("/api/categories")
    assert response.headers["Cache-Control"] == "no-cache, no-store, must-revalidate"
    assert response.headers["Pragma"] == "no-cache"
    assert response.headers["Expires"] == "0"

    assert "Pragma" not in client.get("/health").headers


def test_unknown_route_is_json(client):
    response = client.get("/api/does-not-exist")
    assert response.status_code == 404
    assert response.json() == {"message": "Not Found"}


def test_storage_fault_is_hidden_in_production(make_client):
    with make_client(storage=FailingStorage()) as client:
        response = client.get("/api/categories")
    assert response.status_code == 500
    assert response.json() == {"message": "Internal Server Error"}


def test_storage_fault_detail_in_development(make_client):
    with make_client(storage=FailingStorage(), environment="development") as client:
        response = client.get("/api/categories")
    assert response.status_code == 500
    assert response.json() == {"message": "snapshot directory is read-only"}


def test_unexpected_error_becomes_json_500(make_client):
    with make_client(storage=FailingStorage(), raise_server_exceptions=False) as client:
        response = client.get("/api/settings")
    assert response.status_code == 500
    assert response.json() == {"message": "Internal Server Error"}


def test_default_content_is_seeded(make_client):
    storage = MemoryStorage()
    with make_client(storage=storage, seed_default_content=True) as client:
        site_settings = client.get("/api/settings").json()
        hero_images = client.get("/api/hero-images").json()

    assert "company_name" in site_settings
    assert len(hero_images) == 3


def test_admin_user_is_bootstrapped_from_settings(make_client):
    storage = MemoryStorage()
    with make_client(storage=storage, admin_username="owner", admin_password="owner-password") as client:
        response = client.post("/api/login", json={"username": "owner", "password": "owner-password"})
    assert response.status_code == 200
    assert response.json()["user"]["role"] == "super_admin"


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}
