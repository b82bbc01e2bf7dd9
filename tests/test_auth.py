from tests.factories import DEFAULT_PASSWORD


def register(client, **overrides):
    payload = {
        "email": "Kwame.Asante@st.ug.edu.gh",
        "password": "secret123",
        "first_name": "Kwame",
        "last_name": "Asante",
        "phone": "0241234567",
    }
    payload.update(overrides)
    return client.post("/auth/register", json=payload)


def test_register_issues_tokens_and_cookies(client):
    response = register(client)

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["data"]["user"]["email"] == "kwame.asante@st.ug.edu.gh"
    assert body["data"]["user"]["role"] == "student"
    assert body["data"]["access_token"]
    assert "accessToken" in response.cookies
    assert "refreshToken" in response.cookies


def test_register_requires_student_email(client):
    response = register(client, email="kwame@gmail.com")

    assert response.status_code == 400
    error = response.json()["error"]
    assert error["code"] == "VALIDATION_ERROR"
    assert error["details"] == [{"field": "email", "message": "Must be a valid .edu.gh email address"}]


def test_register_rejects_duplicate_email(client):
    register(client)
    response = register(client)

    assert response.status_code == 409
    assert response.json()["error"]["code"] == "CONFLICT"


def test_login_with_wrong_password(client, factory):
    user = factory.create_user()
    response = client.post("/auth/login", json={"email": user.email, "password": "nope-nope"})

    assert response.status_code == 401
    assert response.json() == {"success": False, "error": {"code": "UNAUTHORIZED", "message": "Invalid email or password"}}


def test_login_then_me_with_bearer_token(client, factory):
    user = factory.create_user()
    login = client.post("/auth/login", json={"email": user.email, "password": DEFAULT_PASSWORD})
    token = login.json()["data"]["access_token"]

    response = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 200
    assert response.json()["data"]["id"] == user.id


def test_me_accepts_session_cookie(client, factory):
    user = factory.create_user()
    client.post("/auth/login", json={"email": user.email, "password": DEFAULT_PASSWORD})

    response = client.get("/auth/me")

    assert response.status_code == 200
    assert response.json()["data"]["email"] == user.email


def test_me_without_credentials(client):
    response = client.get("/auth/me")
    assert response.status_code == 401


def test_inactive_account_is_forbidden(client, factory):
    user = factory.create_user(is_active=False)
    response = client.get("/auth/me", headers=factory.auth_headers(user))
    assert response.status_code == 403


def test_refresh_token_in_body(client, factory):
    user = factory.create_user()
    refresh_token = client.post("/auth/login", json={"email": user.email, "password": DEFAULT_PASSWORD}).json()["data"]["refresh_token"]
    client.cookies.clear()

    response = client.post("/auth/refresh", json={"refresh_token": refresh_token})

    assert response.status_code == 200
    assert response.json()["data"]["user"]["id"] == user.id


def test_access_token_cannot_refresh(client, factory):
    user = factory.create_user()
    access_token = client.post("/auth/login", json={"email": user.email, "password": DEFAULT_PASSWORD}).json()["data"]["access_token"]
    client.cookies.clear()

    response = client.post("/auth/refresh", json={"refresh_token": access_token})

    assert response.status_code == 401


def test_update_profile(client, factory):
    user = factory.create_user()
    response = client.patch("/auth/profile", json={"first_name": "  Abena ", "phone": "+233241234567"}, headers=factory.auth_headers(user))

    assert response.status_code == 200
    assert response.json()["data"]["first_name"] == "Abena"
    assert response.json()["data"]["phone"] == "+233241234567"


def test_update_profile_rejects_bad_phone(client, factory):
    user = factory.create_user()
    response = client.patch("/auth/profile", json={"phone": "12ab"}, headers=factory.auth_headers(user))

    assert response.status_code == 400
    assert response.json()["error"]["details"][0]["field"] == "phone"
