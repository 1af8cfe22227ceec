import os

# Settings are read once at import time; point them at an in-memory DB first.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-secret"
os.environ.pop("ADMIN_EMAIL", None)
os.environ.pop("ADMIN_PASSWORD", None)

from types import SimpleNamespace  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlmodel import SQLModel, Session  # noqa: E402

from app.core.security import create_access_token, hash_password  # noqa: E402
from app.database import engine, get_session  # noqa: E402
from app.main import app  # noqa: E402
from app.models.product import (  # noqa: E402
    Brand,
    Category,
    Product,
    ProductImage,
    ProductVariant,
)
from app.models.review import Review  # noqa: E402
from app.models.user import User  # noqa: E402

ADDRESS = {
    "first_name": "Taro",
    "last_name": "Yamada",
    "address1": "1-2-3 Jingumae",
    "city": "Shibuya-ku",
    "province": "Tokyo",
    "country": "JP",
    "zip": "150-0001",
    "phone": "03-1234-5678",
}


@pytest.fixture
def session():
    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        yield session
    SQLModel.metadata.drop_all(engine)


@pytest.fixture
def client(session):
    def get_session_override():
        return session

    app.dependency_overrides[get_session] = get_session_override
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def catalog(session):
    """
    Small catalog:
      - cpu:   5000 JPY, 10 in stock, featured, primary image, specs
      - gpu:   6000 JPY, 5 in stock, one 8GB variant at 6500 (3 in stock)
      - ssd:   3000 JPY, out of stock
      - draft: hidden from the storefront
    """
    cpu_cat = Category(name_en="CPUs", name_jp="プロセッサー", slug="cpu", sort_order=1)
    gpu_cat = Category(name_en="Graphics Cards", name_jp="グラフィックボード", slug="gpu", sort_order=2)
    ssd_cat = Category(name_en="Storage", name_jp="ストレージ", slug="storage", sort_order=3)
    amd = Brand(name="AMD")
    nvidia = Brand(name="NVIDIA")
    session.add_all([cpu_cat, gpu_cat, ssd_cat, amd, nvidia])
    session.commit()

    cpu = Product(
        sku="CPU-7600",
        name_en="Ryzen 5 7600",
        name_jp="ライゼン 5 7600",
        description_en="6-core desktop processor",
        description_jp="6コアのデスクトッププロセッサー",
        short_description_en="6 cores",
        short_description_jp="6コア",
        specifications_json='{"cores": 6, "socket": "AM5"}',
        price=5000,
        inventory_quantity=10,
        category_id=cpu_cat.id,
        brand_id=amd.id,
        is_featured=True,
    )
    gpu = Product(
        sku="GPU-4060",
        name_en="GeForce RTX 4060",
        name_jp="ジーフォース RTX 4060",
        price=6000,
        inventory_quantity=5,
        category_id=gpu_cat.id,
        brand_id=nvidia.id,
    )
    ssd = Product(
        sku="SSD-1TB",
        name_en="NVMe SSD 1TB",
        name_jp="NVMe SSD 1TB",
        price=3000,
        inventory_quantity=0,
        category_id=ssd_cat.id,
    )
    draft = Product(
        sku="CPU-DRAFT",
        name_en="Unreleased CPU",
        name_jp="未発売CPU",
        price=9000,
        inventory_quantity=1,
        category_id=cpu_cat.id,
        brand_id=amd.id,
        status="draft",
    )
    session.add_all([cpu, gpu, ssd, draft])
    session.commit()

    variant = ProductVariant(
        product_id=gpu.id,
        sku="GPU-4060-8G",
        name_en="8GB",
        name_jp="8GB",
        price=6500,
        inventory_quantity=3,
    )
    image = ProductImage(
        product_id=cpu.id,
        image_url="https://cdn.example.com/cpu-7600.jpg",
        alt_text_en="Ryzen box",
        alt_text_jp="ライゼンの箱",
        is_primary=True,
    )
    session.add_all([variant, image])
    session.commit()

    return SimpleNamespace(
        cpu_id=cpu.id,
        gpu_id=gpu.id,
        ssd_id=ssd.id,
        draft_id=draft.id,
        variant_id=variant.id,
        cpu_category_id=cpu_cat.id,
        gpu_category_id=gpu_cat.id,
        amd_id=amd.id,
    )


@pytest.fixture
def make_user(session):
    def _make(
        email: str = "taro@example.com",
        password: str = "secret123",
        role: str = "customer",
        is_active: bool = True,
        first_name: str = "Taro",
        last_name: str = "Yamada",
    ) -> User:
        user = User(
            email=email,
            password_hash=hash_password(password),
            role=role,
            is_active=is_active,
            first_name=first_name,
            last_name=last_name,
        )
        session.add(user)
        session.commit()
        session.refresh(user)
        return user

    return _make


@pytest.fixture
def auth_headers():
    def _headers(user: User) -> dict[str, str]:
        token = create_access_token(user.id, user.email, user.role)
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def add_review(session):
    def _add(product_id: int, rating: int = 5, published: bool = True, user_id: int | None = None) -> Review:
        review = Review(
            product_id=product_id,
            user_id=user_id,
            rating=rating,
            title="Great",
            comment="Runs cool",
            reviewer_name="Taro",
            reviewer_email="taro@example.com",
            is_published=published,
        )
        session.add(review)
        session.commit()
        session.refresh(review)
        return review

    return _add


@pytest.fixture
def fill_cart(client):
    """Add a line to a (new or given) cart and return the session token."""

    def _fill(product_id: int, quantity: int = 1, token: str | None = None, variant_id: int | None = None, headers=None):
        headers = dict(headers or {})
        if token:
            headers["X-Session-Token"] = token
        body = {"product_id": product_id, "quantity": quantity}
        if variant_id is not None:
            body["variant_id"] = variant_id
        resp = client.post("/api/cart/items", json=body, headers=headers)
        assert resp.status_code == 200, resp.text
        return resp.json()["sessionToken"]

    return _fill


@pytest.fixture
def checkout(client):
    def _checkout(token: str, payment_method: str = "cod", headers=None, **extra):
        body = {
            "email": "taro@example.com",
            "shipping": ADDRESS,
            "payment_method": payment_method,
            **extra,
        }
        headers = {**(headers or {}), "X-Session-Token": token}
        return client.post("/api/orders", json=body, headers=headers)

    return _checkout
