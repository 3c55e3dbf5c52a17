"""
Tests de seguridad para validar autorizaciones, sesiones y CSRF.
Ejecutar con: pytest tests/test_security.py -v
"""
from fastapi.testclient import TestClient

from main import app
from core.redis_service import SessionService
from models import UserRole
from conftest import create_user, login


# ==================== TESTS DE AUTORIZACIÓN ====================

class TestAuthorizationSecurity:
    """Tests para validar autorización en rutas protegidas"""

    def test_ruta_publica_sin_autenticacion(self, client):
        """Las rutas públicas deben ser accesibles sin sesión"""
        response = client.get("/")
        assert response.status_code == 200

    def test_health_check_sin_autenticacion(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}

    def test_ruta_protegida_sin_sesion(self, client):
        """Rutas protegidas deben retornar 401 sin sesión"""
        response = client.get("/users/profile")
        assert response.status_code == 401
        assert response.json()["success"] is False
        assert response.json()["error"] == "AUTHENTICATION_REQUIRED"

    def test_ruta_protegida_con_sesion_invalida(self, client):
        """Una cookie con un id de sesión inexistente es rechazada"""
        client.cookies.set("session_id", "sesion-que-no-existe")
        response = client.get("/users/profile")
        assert response.status_code == 401

    def test_catalogo_de_categorias_requiere_sesion(self, client):
        response = client.get("/categories/tree")
        assert response.status_code == 401

    def test_admin_endpoint_con_usuario_normal(self, customer_client):
        """Usuario normal no puede acceder a endpoints de admin"""
        response = customer_client.get("/vendors/stats")
        assert response.status_code == 403
        assert response.json()["error"] == "INSUFFICIENT_ROLE"

    def test_admin_endpoint_con_admin(self, admin_client):
        response = admin_client.get("/vendors/stats")
        assert response.status_code == 200

    def test_usuario_desactivado_pierde_la_sesion(self, db, customer_client, customer_user):
        customer_user.is_active = False
        db.commit()

        response = customer_client.get("/users/profile")
        assert response.status_code == 401


class TestProductManagement:
    """Tests de seguridad en gestión de productos"""

    def test_crear_producto_sin_autenticacion(self, client):
        response = client.post("/products", json={"name": "Test"})
        assert response.status_code == 401

    def test_crear_producto_usuario_normal(self, customer_client):
        response = customer_client.post("/products", json={"name": "Test"})
        assert response.status_code in (400, 403)

    def test_eliminar_producto_usuario_normal(self, customer_client):
        response = customer_client.delete("/products/00000000-0000-0000-0000-000000000001")
        assert response.status_code == 403


# ==================== TESTS DE SESIÓN ====================

class TestSessionSecurity:
    """La sesión vive en Redis y la cookie solo lleva el id"""

    def test_cookie_de_sesion_httponly(self, db, client, customer_user):
        response = client.post(
            "/auth/login",
            json={"email": customer_user.email, "password": "Password123"}
        )
        set_cookie = response.headers["set-cookie"]
        assert "session_id=" in set_cookie
        assert "HttpOnly" in set_cookie
        assert "samesite=lax" in set_cookie.lower()
        assert "Max-Age=3600" in set_cookie

    def test_sesion_guarda_usuario_y_csrf(self, db, client, customer_user):
        response = login(client, customer_user.email)
        session_id = client.cookies.get("session_id")

        session = SessionService.get_session(session_id)
        assert session["user_id"] == str(customer_user.id)
        assert session["email"] == customer_user.email
        assert session["csrf_token"] == response.json()["data"]["csrf_token"]

    def test_expiracion_deslizante(self, db, client, customer_user, fake_redis):
        login(client, customer_user.email)
        key = f"sess:{client.cookies.get('session_id')}"

        fake_redis.expire(key, 10)
        response = client.get("/users/profile")

        assert response.status_code == 200
        assert fake_redis.ttl(key) > 10
        assert "session_id=" in response.headers["set-cookie"]

    def test_login_descarta_sesion_anonima(self, db, client, customer_user):
        client.get("/auth/csrf-token")
        anonymous_id = client.cookies.get("session_id")

        login(client, customer_user.email)

        assert SessionService.get_session(anonymous_id) is None
        assert client.cookies.get("session_id") != anonymous_id

    def test_logout_destruye_la_sesion(self, db, customer_client):
        session_id = customer_client.cookies.get("session_id")

        response = customer_client.post("/auth/logout")
        assert response.status_code == 200
        assert SessionService.get_session(session_id) is None

        customer_client.cookies.set("session_id", session_id)
        assert customer_client.get("/users/profile").status_code == 401

    def test_logout_borra_la_cookie(self, db, customer_client):
        response = customer_client.post("/auth/logout")
        assert response.status_code == 200

        set_cookies = response.headers.get_list("set-cookie")
        assert len(set_cookies) == 1
        assert "Max-Age=0" in set_cookies[0]

        assert not customer_client.cookies.get("session_id")
        assert customer_client.get("/users/profile").status_code == 401


# ==================== TESTS DE CSRF ====================

class TestCSRFProtection:
    """Peticiones mutantes con sesión requieren X-CSRF-Token"""

    def test_post_sin_header_csrf_rechazado(self, customer_client):
        del customer_client.headers["X-CSRF-Token"]
        response = customer_client.patch("/users/profile", json={"first_name": "Nuevo"})
        assert response.status_code == 403
        assert response.json()["error"] == "CSRF_VALIDATION_FAILED"

    def test_post_con_header_csrf_incorrecto(self, customer_client):
        customer_client.headers["X-CSRF-Token"] = "token-falso"
        response = customer_client.patch("/users/profile", json={"first_name": "Nuevo"})
        assert response.status_code == 403

    def test_post_con_header_csrf_correcto(self, customer_client):
        response = customer_client.patch("/users/profile", json={"first_name": "Nuevo"})
        assert response.status_code == 200

    def test_get_no_requiere_csrf(self, customer_client):
        del customer_client.headers["X-CSRF-Token"]
        assert customer_client.get("/users/profile").status_code == 200

    def test_login_exento_de_csrf(self, db, client, customer_user):
        client.get("/auth/csrf-token")
        response = client.post(
            "/auth/login",
            json={"email": customer_user.email, "password": "Password123"}
        )
        assert response.status_code == 200

    def test_sesion_anonima_requiere_csrf(self, db, client):
        client.get("/auth/csrf-token")
        response = client.post("/auth/logout")
        assert response.status_code == 403

    def test_csrf_token_reutiliza_el_de_la_sesion(self, customer_client):
        session_token = customer_client.headers["X-CSRF-Token"]
        response = customer_client.get("/auth/csrf-token")
        assert response.json()["data"]["csrf_token"] == session_token


# ==================== TESTS DE RATE LIMIT ====================

class TestLoginRateLimit:

    def test_login_limitado_a_5_intentos_por_minuto(self, db, client):
        create_user(db, "victim@test.com")

        for _ in range(5):
            response = client.post(
                "/auth/login",
                json={"email": "victim@test.com", "password": "WrongPass1"}
            )
            assert response.status_code == 401

        response = client.post(
            "/auth/login",
            json={"email": "victim@test.com", "password": "Password123"}
        )
        assert response.status_code == 429
        assert response.json()["error"] == "TOO_MANY_REQUESTS"


class TestSQLInjection:
    """Tests de protección contra SQL injection"""

    def test_search_con_sql_injection(self, client):
        response = client.get("/products", params={"search": "'; DROP TABLE products; --"})
        assert response.status_code == 200
        assert response.json()["data"]["products"] == []

    def test_filter_con_sql_injection(self, client):
        response = client.get("/products", params={"category": "1 OR 1=1"})
        assert response.status_code == 200
        assert response.json()["data"]["pagination"]["total"] == 0


def test_admin_no_se_puede_registrar_publicamente(db):
    response = TestClient(app).post("/auth/register", json={
        "email": "evil@test.com",
        "password": "Password123",
        "first_name": "Evil",
        "last_name": "Admin",
        "role": UserRole.ADMIN.value
    })
    assert response.status_code == 400
    assert response.json()["error"] == "VALIDATION_ERROR"
