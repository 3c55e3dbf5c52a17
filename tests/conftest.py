"""
Fixtures compartidas.

- Base de datos SQLite en memoria (StaticPool: una sola conexión compartida)
- Redis reemplazado por fakeredis en cada test
- Clientes HTTP independientes (cada uno con su propia cookie de sesión)
"""
import os
import sys
import uuid
from decimal import Decimal

# Agregar app al path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'app'))

# Configuración de pruebas (antes de importar la app)
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENV"] = "development"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["SCHEDULER_ENABLED"] = "false"
os.environ["CSRF_ENABLED"] = "true"
os.environ["LOG_LEVEL"] = "WARNING"

import fakeredis
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from main import app
from core import redis_service
from core.database import Base, get_db
from core.security import hash_password
from models import User, UserRole, Category, Product, Vendor, VendorStatus, BusinessType


engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

DEFAULT_PASSWORD = "Password123"


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(autouse=True)
def fake_redis(monkeypatch):
    """Redis en memoria, limpio en cada test"""
    client = fakeredis.FakeRedis(decode_responses=True)
    monkeypatch.setattr(redis_service, "redis_client", client)
    return client


@pytest.fixture
def db():
    """Fixture para base de datos de prueba"""
    Base.metadata.create_all(bind=engine)
    app.dependency_overrides[get_db] = override_get_db
    session = TestingSessionLocal()
    yield session
    session.close()
    app.dependency_overrides.clear()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    """Fixture para cliente HTTP (sin sesión)"""
    return TestClient(app)


# ==================== HELPERS ====================

def create_user(db, email, role=UserRole.CUSTOMER, password=DEFAULT_PASSWORD, phone=None, is_active=True):
    user = User(
        id=uuid.uuid4(),
        email=email,
        hashed_password=hash_password(password),
        first_name="Test",
        last_name=role.value.capitalize(),
        phone=phone,
        role=role,
        is_active=is_active
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def login(client, email, password=DEFAULT_PASSWORD):
    """Login y guardar el token CSRF en los headers del cliente"""
    response = client.post("/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.json()
    client.headers["X-CSRF-Token"] = response.json()["data"]["csrf_token"]
    return response


def create_category(db, name, slug, parent=None, sort_order=0, is_active=True):
    category = Category(
        name=name,
        slug=slug,
        parent_id=parent.id if parent else None,
        sort_order=sort_order,
        is_active=is_active
    )
    db.add(category)
    db.commit()
    db.refresh(category)
    return category


def create_vendor(db, user, status=VendorStatus.APPROVED, business_name="Tech Solutions Inc."):
    vendor = Vendor(
        user_id=user.id,
        business_name=business_name,
        business_type=BusinessType.CORPORATION,
        business_address={
            "street": "123 Business Street",
            "city": "New York",
            "state": "NY",
            "zip_code": "10001",
            "country": "USA"
        },
        contact_email="contact@techsolutions.com",
        contact_phone="+12025550123",
        status=status,
        commission_rate=Decimal("15.50"),
        payment_info={
            "account_type": "bank",
            "account_number": "****1234",
            "routing_number": "021000021",
            "account_holder": business_name
        },
        is_active=status == VendorStatus.APPROVED
    )
    db.add(vendor)
    db.commit()
    db.refresh(vendor)
    return vendor


def create_product(db, vendor, category, sku, slug=None, price="100.00", compare_price=None,
                   stock_quantity=50, low_stock_threshold=10, is_active=True, is_featured=False,
                   name=None, description="A product description"):
    product = Product(
        name=name or f"Product {sku}",
        slug=slug or sku.lower(),
        description=description,
        short_description="Short description",
        sku=sku,
        price=Decimal(price),
        compare_price=Decimal(compare_price) if compare_price else None,
        stock_quantity=stock_quantity,
        low_stock_threshold=low_stock_threshold,
        is_active=is_active,
        is_featured=is_featured,
        vendor_id=vendor.id,
        category_id=category.id
    )
    db.add(product)
    db.commit()
    db.refresh(product)
    return product


# ==================== USUARIOS AUTENTICADOS ====================

@pytest.fixture
def admin_user(db):
    return create_user(db, "admin@test.com", role=UserRole.ADMIN)


@pytest.fixture
def customer_user(db):
    return create_user(db, "customer@test.com")


@pytest.fixture
def admin_client(db, admin_user):
    """Cliente con sesión de administrador"""
    c = TestClient(app)
    login(c, admin_user.email)
    return c


@pytest.fixture
def customer_client(db, customer_user):
    """Cliente con sesión de cliente normal"""
    c = TestClient(app)
    login(c, customer_user.email)
    return c


@pytest.fixture
def vendor_owner(db):
    return create_user(db, "vendor@test.com", role=UserRole.VENDOR)


@pytest.fixture
def approved_vendor(db, vendor_owner):
    return create_vendor(db, vendor_owner)
