"""
Tests for the auth blueprint: register, login and ``/auth/me``.
"""

PASSWORD = "correct-horse-battery"


class TestRegister:
    def test_register_creates_user(self, client):
        response = client.post(
            "/auth/register",
            json={
                "email": "ada@example.org",
                "password": PASSWORD,
                "firstName": "Ada",
                "lastName": "Lovelace",
            },
        )

        assert response.status_code == 201
        body = response.get_json()
        assert body["email"] == "ada@example.org"
        assert body["role"] == "USER"
        assert "password" not in body

    def test_register_validates_fields(self, client):
        response = client.post(
            "/auth/register",
            json={"email": "not-an-email", "password": "short"},
        )

        assert response.status_code == 400
        error = response.get_json()["error"]
        assert error["kind"] == "validation_error"
        assert set(error["details"]) >= {"email", "password", "firstName"}

    def test_register_duplicate_email(self, client, regular_user):
        response = client.post(
            "/auth/register",
            json={"email": regular_user.email, "password": PASSWORD, "firstName": "Dup"},
        )
        assert response.status_code == 409
        assert response.get_json()["error"]["kind"] == "conflict"


class TestLogin:
    def test_login_and_me(self, client, regular_user):
        response = client.post(
            "/auth/login", json={"email": regular_user.email, "password": PASSWORD}
        )
        assert response.status_code == 200
        body = response.get_json()
        assert body["token_type"] == "bearer"
        assert body["user"]["id"] == regular_user.id

        me = client.get(
            "/auth/me", headers={"Authorization": f"Bearer {body['access_token']}"}
        )
        assert me.status_code == 200
        assert me.get_json()["email"] == regular_user.email

    def test_bad_password(self, client, regular_user):
        response = client.post(
            "/auth/login", json={"email": regular_user.email, "password": "nope-nope"}
        )
        assert response.status_code == 401
        assert response.get_json()["error"]["kind"] == "authentication_error"

    def test_empty_password_is_a_validation_error(self, client):
        response = client.post("/auth/login", json={"email": "a@b.org", "password": ""})
        assert response.status_code == 400


class TestMe:
    def test_anonymous_is_401(self, client):
        response = client.get("/auth/me")
        assert response.status_code == 401

    def test_garbage_token_is_401_with_reason(self, client):
        response = client.get("/auth/me", headers={"Authorization": "Bearer garbage"})
        assert response.status_code == 401
        assert response.get_json()["error"]["message"] == "Invalid access token."
