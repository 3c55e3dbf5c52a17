"""
Tests del flujo de solicitudes de vendedor.
"""
import pytest
from fastapi.testclient import TestClient

from main import app
from models import Vendor, VendorStatus, UserRole
from conftest import create_category, create_product, create_user, create_vendor, login


APPLICATION = {
    "business_name": "Tech Solutions Inc.",
    "business_type": "corporation",
    "tax_id": "TAX-123",
    "business_address": {
        "street": "123 Business Street",
        "city": "New York",
        "state": "NY",
        "zip_code": "10001",
        "country": "USA"
    },
    "contact_email": "contact@techsolutions.com",
    "contact_phone": "+12025550123",
    "commission_rate": 15.5,
    "payment_info": {
        "account_type": "bank",
        "account_number": "****1234",
        "routing_number": "021000021",
        "account_holder": "Tech Solutions Inc."
    }
}


@pytest.fixture
def vendor_client(db, vendor_owner):
    """Cliente con la sesión del usuario que solicita ser vendedor"""
    c = TestClient(app)
    login(c, vendor_owner.email)
    return c


@pytest.fixture
def pending_vendor(db, vendor_owner):
    return create_vendor(db, vendor_owner, status=VendorStatus.PENDING)


@pytest.fixture
def approved_vendor_other(db):
    return create_vendor(
        db,
        create_user(db, "second@test.com", role=UserRole.VENDOR),
        business_name="Second Shop"
    )


@pytest.fixture
def pending_vendor_other(db):
    return create_vendor(
        db,
        create_user(db, "pending@test.com", role=UserRole.VENDOR),
        status=VendorStatus.PENDING,
        business_name="Pending Shop"
    )


# ==================== SOLICITUD ====================

class TestApplication:

    def test_enviar_solicitud(self, vendor_client, vendor_owner):
        response = vendor_client.post("/vendors/application", json=APPLICATION)

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["status"] == "pending"
        assert data["is_active"] is False
        assert data["approved_at"] is None
        assert data["user_id"] == str(vendor_owner.id)
        assert data["commission_rate"] == 15.5

    def test_segunda_solicitud(self, vendor_client):
        vendor_client.post("/vendors/application", json=APPLICATION)
        response = vendor_client.post("/vendors/application", json=APPLICATION)

        assert response.status_code == 409
        assert response.json()["message"] == "User already has a vendor account"

    def test_comision_fuera_de_rango(self, vendor_client):
        response = vendor_client.post("/vendors/application", json={**APPLICATION, "commission_rate": 101})
        assert response.status_code == 400

    def test_tipo_de_negocio_invalido(self, vendor_client):
        response = vendor_client.post("/vendors/application", json={**APPLICATION, "business_type": "guild"})
        assert response.status_code == 400

    def test_solicitud_requiere_sesion(self, client):
        assert client.post("/vendors/application", json=APPLICATION).status_code == 401

    def test_mi_solicitud(self, vendor_client, pending_vendor):
        response = vendor_client.get("/vendors/application/my")

        assert response.status_code == 200
        assert response.json()["data"]["id"] == str(pending_vendor.id)

    def test_mi_solicitud_inexistente(self, vendor_client):
        response = vendor_client.get("/vendors/application/my")

        assert response.status_code == 404
        assert response.json()["message"] == "Vendor application not found"

    def test_editar_solicitud_pendiente(self, vendor_client, pending_vendor):
        response = vendor_client.patch("/vendors/application/my", json={"business_name": "New Name LLC"})

        assert response.status_code == 200
        assert response.json()["data"]["business_name"] == "New Name LLC"
        assert response.json()["data"]["business_type"] == "corporation"

    def test_no_se_edita_despues_de_revision(self, db, vendor_client, vendor_owner):
        create_vendor(db, vendor_owner, status=VendorStatus.APPROVED)

        response = vendor_client.patch("/vendors/application/my", json={"business_name": "Other"})
        assert response.status_code == 400
        assert response.json()["message"] == "Cannot update application after review"


# ==================== REVISIÓN (ADMIN) ====================

class TestReview:

    def test_solicitudes_pendientes(self, db, admin_client, pending_vendor, approved_vendor_other):
        response = admin_client.get("/vendors/applications/pending")

        assert response.status_code == 200
        assert [v["id"] for v in response.json()["data"]] == [str(pending_vendor.id)]

    def test_pendientes_requiere_admin(self, customer_client):
        assert customer_client.get("/vendors/applications/pending").status_code == 403

    def test_aprobar(self, admin_client, pending_vendor):
        response = admin_client.post(f"/vendors/applications/{pending_vendor.id}/approve", json={})
        data = response.json()["data"]

        assert response.status_code == 200
        assert data["status"] == "approved"
        assert data["is_active"] is True
        assert data["approved_at"] is not None
        assert data["commission_rate"] == 15.5

    def test_aprobar_con_comision(self, admin_client, pending_vendor):
        response = admin_client.post(
            f"/vendors/applications/{pending_vendor.id}/approve",
            json={"commission_rate": 12, "admin_notes": "Welcome aboard"}
        )
        assert response.json()["data"]["commission_rate"] == 12.0

    def test_aprobar_con_comision_cero(self, admin_client, pending_vendor):
        response = admin_client.post(
            f"/vendors/applications/{pending_vendor.id}/approve",
            json={"commission_rate": 0}
        )
        assert response.status_code == 200
        assert response.json()["data"]["commission_rate"] == 0.0

    def test_comision_de_aprobacion_mayor_a_50(self, admin_client, pending_vendor):
        response = admin_client.post(
            f"/vendors/applications/{pending_vendor.id}/approve",
            json={"commission_rate": 60}
        )
        assert response.status_code == 400

    def test_aprobar_dos_veces(self, admin_client, pending_vendor):
        admin_client.post(f"/vendors/applications/{pending_vendor.id}/approve", json={})
        response = admin_client.post(f"/vendors/applications/{pending_vendor.id}/approve", json={})

        assert response.status_code == 400
        assert response.json()["error"] == "INVALID_VENDOR_STATUS"

    def test_aprobar_inexistente(self, admin_client):
        response = admin_client.post(
            "/vendors/applications/00000000-0000-0000-0000-000000000001/approve", json={}
        )
        assert response.status_code == 404

    def test_rechazar_elimina_la_solicitud(self, db, admin_client, vendor_client, pending_vendor):
        response = admin_client.post(
            f"/vendors/applications/{pending_vendor.id}/reject",
            json={"reason": "Missing tax documentation"}
        )

        assert response.status_code == 200
        assert response.json()["message"] == "Vendor application rejected. Reason: Missing tax documentation"

        db.expire_all()
        assert db.query(Vendor).count() == 0

        # Puede volver a solicitar desde cero
        response = vendor_client.post("/vendors/application", json=APPLICATION)
        assert response.status_code == 201

    def test_rechazo_con_motivo_corto(self, admin_client, pending_vendor):
        response = admin_client.post(
            f"/vendors/applications/{pending_vendor.id}/reject",
            json={"reason": "No"}
        )
        assert response.status_code == 400

    def test_no_se_rechaza_un_aprobado(self, admin_client, approved_vendor):
        response = admin_client.post(
            f"/vendors/applications/{approved_vendor.id}/reject",
            json={"reason": "Changed our mind about it"}
        )
        assert response.status_code == 400


# ==================== CICLO DE VIDA ====================

class TestLifecycle:

    def test_suspender_y_reactivar(self, admin_client, approved_vendor):
        response = admin_client.post(f"/vendors/{approved_vendor.id}/suspend")
        assert response.status_code == 200
        assert response.json()["data"]["status"] == "suspended"
        assert response.json()["data"]["is_active"] is False

        response = admin_client.post(f"/vendors/{approved_vendor.id}/reactivate")
        assert response.status_code == 200
        assert response.json()["data"]["status"] == "approved"
        assert response.json()["data"]["is_active"] is True

    def test_no_se_suspende_un_pendiente(self, admin_client, pending_vendor):
        response = admin_client.post(f"/vendors/{pending_vendor.id}/suspend")
        assert response.status_code == 400
        assert response.json()["message"] == "Can only suspend approved vendors"

    def test_no_se_reactiva_un_aprobado(self, admin_client, approved_vendor):
        response = admin_client.post(f"/vendors/{approved_vendor.id}/reactivate")
        assert response.status_code == 400

    def test_suspender_requiere_admin(self, customer_client, approved_vendor):
        assert customer_client.post(f"/vendors/{approved_vendor.id}/suspend").status_code == 403

    def test_obtener_vendedor(self, admin_client, approved_vendor):
        response = admin_client.get(f"/vendors/{approved_vendor.id}")
        assert response.status_code == 200
        assert response.json()["data"]["business_name"] == approved_vendor.business_name

    def test_obtener_vendedor_inexistente(self, admin_client):
        response = admin_client.get("/vendors/00000000-0000-0000-0000-000000000001")
        assert response.status_code == 404
        assert response.json()["message"] == "Vendor not found"


# ==================== LISTADO Y ESTADÍSTICAS ====================

class TestVendorListing:

    def test_listado_con_cantidad_de_productos(self, db, admin_client, approved_vendor, pending_vendor_other):
        category = create_category(db, "Books", "books")
        create_product(db, approved_vendor, category, "BOOK-1")
        create_product(db, approved_vendor, category, "BOOK-2", is_active=False)

        response = admin_client.get("/vendors")
        counts = {v["id"]: v["product_count"] for v in response.json()["data"]}

        assert counts == {str(approved_vendor.id): 2, str(pending_vendor_other.id): 0}

    def test_listado_filtrado_por_estado(self, admin_client, approved_vendor, pending_vendor_other):
        response = admin_client.get("/vendors", params={"status": "pending"})
        assert [v["id"] for v in response.json()["data"]] == [str(pending_vendor_other.id)]

    def test_estadisticas(self, db, admin_client, approved_vendor, pending_vendor_other):
        create_vendor(
            db, create_user(db, "third@test.com", role=UserRole.VENDOR), status=VendorStatus.SUSPENDED
        )

        data = admin_client.get("/vendors/stats").json()["data"]
        assert data == {
            "total": 3,
            "pending": 1,
            "approved": 1,
            "suspended": 1,
            "active_percentage": 33.33
        }

    def test_estadisticas_sin_vendedores(self, admin_client):
        data = admin_client.get("/vendors/stats").json()["data"]
        assert data["total"] == 0
        assert data["active_percentage"] == 0
