"""
Tests del perfil de usuario.
"""
from conftest import create_user


class TestProfile:

    def test_obtener_perfil(self, customer_client, customer_user):
        response = customer_client.get("/users/profile")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["id"] == str(customer_user.id)
        assert data["email"] == "customer@test.com"
        assert data["role"] == "customer"

    def test_actualizar_solo_campos_enviados(self, customer_client):
        response = customer_client.patch("/users/profile", json={"first_name": "María"})

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["first_name"] == "María"
        assert data["last_name"] == "Customer"

    def test_actualizar_email_normalizado(self, customer_client):
        response = customer_client.patch("/users/profile", json={"email": " New@Test.com"})
        assert response.status_code == 200
        assert response.json()["data"]["email"] == "new@test.com"

    def test_email_de_otro_usuario(self, db, customer_client):
        create_user(db, "taken@test.com")
        response = customer_client.patch("/users/profile", json={"email": "taken@test.com"})

        assert response.status_code == 409
        assert response.json()["message"] == "Email already exists"

    def test_mismo_email_no_es_conflicto(self, customer_client):
        response = customer_client.patch("/users/profile", json={"email": "customer@test.com"})
        assert response.status_code == 200

    def test_telefono_de_otro_usuario(self, db, customer_client):
        create_user(db, "phone@test.com", phone="5551234567")
        response = customer_client.patch("/users/profile", json={"phone": "5551234567"})

        assert response.status_code == 409
        assert response.json()["message"] == "Phone already exists"

    def test_nombre_vacio(self, customer_client):
        response = customer_client.patch("/users/profile", json={"first_name": "   "})
        assert response.status_code == 400
