REGISTRATION = {
    "name": "Ada Lovelace",
    "username": "ada",
    "email": "ada@example.com",
    "password": "analytical-engine",
    "gender": "F",
    "dob": "1815-12-10",
}


async def test_register_login_logout(client):
    resp = await client.post("/auth/register", json=REGISTRATION)
    assert resp.status_code == 201
    user_id = resp.json()["userId"]

    resp = await client.post(
        "/auth/login", json={"username": "ada", "password": "analytical-engine"}
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["userId"] == user_id
    headers = {"Authorization": f"Bearer {body['token']}"}

    resp = await client.get(f"/users/{user_id}", headers=headers)
    assert resp.status_code == 200
    assert resp.json()["profileType"] == "Public"

    resp = await client.post("/auth/logout", headers=headers)
    assert resp.status_code == 200
    assert resp.json() == {"message": "Logged out successfully."}

    resp = await client.get(f"/users/{user_id}", headers=headers)
    assert resp.status_code == 401


async def test_register_duplicate_username(client):
    assert (await client.post("/auth/register", json=REGISTRATION)).status_code == 201

    resp = await client.post(
        "/auth/register", json={**REGISTRATION, "email": "other@example.com"}
    )

    assert resp.status_code == 409
    assert "Username already taken" in resp.json()["message"]


async def test_register_duplicate_email(client):
    assert (await client.post("/auth/register", json=REGISTRATION)).status_code == 201

    resp = await client.post("/auth/register", json={**REGISTRATION, "username": "ada2"})

    assert resp.status_code == 409
    assert "Email already registered" in resp.json()["message"]


async def test_login_wrong_password(client):
    await client.post("/auth/register", json=REGISTRATION)

    resp = await client.post("/auth/login", json={"username": "ada", "password": "nope"})

    assert resp.status_code == 401
    assert resp.json() == {"message": "Invalid username or password."}


async def test_garbage_token_rejected(client):
    resp = await client.get("/relationships/pending", headers={"Authorization": "Bearer not-a-jwt"})
    assert resp.status_code == 401


async def test_health(client):
    resp = await client.get("/health")
    assert resp.json() == {"status": "ok"}
