def test_register_login_and_me(client, register):
    alice = register("alice")

    me = client.get("/auth/me", headers=alice["headers"])

    assert me.status_code == 200
    assert me.json()["username"] == "alice"
    assert me.json()["email"] == "alice@example.com"
    assert "hashed_password" not in me.json()


def test_duplicate_registration_is_rejected(client, register):
    register("alice")

    response = client.post(
        "/auth/register",
        json={"username": "alice2", "email": "alice@example.com", "password": "Secret123"},
    )

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


def test_short_password_is_a_validation_error(client):
    response = client.post(
        "/auth/register", json={"username": "dave", "email": "dave@example.com", "password": "short"}
    )

    assert response.status_code == 400
    assert response.json()["error"]["details"][0]["field"].endswith("password")


def test_wrong_password(client, register):
    register("alice")

    response = client.post("/auth/login", json={"email": "alice@example.com", "password": "WrongPass1"})

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "UNAUTHORIZED"
