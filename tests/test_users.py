"""
User and authentication endpoint tests — registration, login, the bearer
token check on /api/me, and the administrative /api/usuarios CRUD.

Passwords must never appear in any response, so several tests assert on
the exact set of keys returned for a user.
"""
from datetime import timedelta

import pytest
from httpx import AsyncClient

from blog.security import create_access_token

PUBLIC_USER_KEYS = {"id", "nombre", "email", "createdAt", "updatedAt"}


async def _register(client: AsyncClient, email="ana@example.com", password="secret123", name="Ana"):
    return await client.post("/api/registro", json={
        "nombre": name,
        "email": email,
        "password": password,
    })


async def _login(client: AsyncClient, email="ana@example.com", password="secret123"):
    return await client.post("/api/login", json={"email": email, "password": password})


# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_register(async_client: AsyncClient):
    resp = await _register(async_client)
    assert resp.status_code == 201
    body = resp.json()
    assert body["success"] is True
    user = body["user"]
    assert set(user) == PUBLIC_USER_KEYS
    assert user["nombre"] == "Ana"
    assert user["email"] == "ana@example.com"


@pytest.mark.asyncio
async def test_register_lowercases_email(async_client: AsyncClient):
    resp = await _register(async_client, email="Ana.Perez@Example.COM")
    assert resp.json()["user"]["email"] == "ana.perez@example.com"


@pytest.mark.asyncio
async def test_register_duplicate_email_differing_only_in_case(async_client: AsyncClient):
    assert (await _register(async_client, email="dup@example.com")).status_code == 201

    resp = await _register(async_client, email="DUP@Example.com", name="Other")
    assert resp.status_code == 400
    assert resp.json()["success"] is False

    users = (await async_client.get("/api/usuarios")).json()["usuarios"]
    assert len(users) == 1


@pytest.mark.asyncio
@pytest.mark.parametrize("email", ["plainaddress", "no-at.example.com", "a@nodot", "a b@example.com", "@example.com"])
async def test_register_rejects_malformed_email(async_client: AsyncClient, email):
    resp = await _register(async_client, email=email)
    assert resp.status_code == 400
    assert "email" in resp.json()["error"]


@pytest.mark.asyncio
async def test_register_rejects_short_password(async_client: AsyncClient):
    resp = await _register(async_client, password="12345")
    assert resp.status_code == 400
    assert "password" in resp.json()["error"]


@pytest.mark.asyncio
@pytest.mark.parametrize("missing", ["nombre", "email", "password"])
async def test_register_requires_fields(async_client: AsyncClient, missing):
    payload = {"nombre": "Ana", "email": "ana@example.com", "password": "secret123"}
    del payload[missing]
    resp = await async_client.post("/api/registro", json=payload)
    assert resp.status_code == 400


# ---------------------------------------------------------------------------
# Login
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_login_success(async_client: AsyncClient):
    await _register(async_client)

    resp = await _login(async_client, email="ANA@example.com")
    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert set(body["user"]) == PUBLIC_USER_KEYS
    assert body["user"]["email"] == "ana@example.com"
    assert body["token"]


@pytest.mark.asyncio
async def test_login_wrong_password_and_unknown_email_look_the_same(async_client: AsyncClient):
    await _register(async_client)

    wrong_password = await _login(async_client, password="not-the-password")
    unknown_email = await _login(async_client, email="nobody@example.com")

    assert wrong_password.status_code == 401
    assert unknown_email.status_code == 401
    assert wrong_password.json() == unknown_email.json()
    assert wrong_password.json()["success"] is False


@pytest.mark.asyncio
async def test_login_requires_fields(async_client: AsyncClient):
    resp = await async_client.post("/api/login", json={"email": "ana@example.com"})
    assert resp.status_code == 400


# ---------------------------------------------------------------------------
# Token-protected profile
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_me_with_login_token(async_client: AsyncClient):
    await _register(async_client)
    token = (await _login(async_client)).json()["token"]

    resp = await async_client.get("/api/me", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 200
    assert resp.json()["user"]["email"] == "ana@example.com"


@pytest.mark.asyncio
async def test_me_without_token(async_client: AsyncClient):
    resp = await async_client.get("/api/me")
    assert resp.status_code == 401
    assert resp.json()["success"] is False


@pytest.mark.asyncio
async def test_me_with_forged_token(async_client: AsyncClient):
    resp = await async_client.get("/api/me", headers={"Authorization": "Bearer not.a.token"})
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_me_with_expired_token(async_client: AsyncClient):
    user_id = (await _register(async_client)).json()["user"]["id"]
    token = create_access_token(user_id, expires_delta=timedelta(minutes=-1))
    resp = await async_client.get("/api/me", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_me_after_user_deleted(async_client: AsyncClient):
    user_id = (await _register(async_client)).json()["user"]["id"]
    token = (await _login(async_client)).json()["token"]
    await async_client.delete(f"/api/usuarios/{user_id}")

    resp = await async_client.get("/api/me", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401


# ---------------------------------------------------------------------------
# Administrative CRUD
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_list_users_empty(async_client: AsyncClient):
    resp = await async_client.get("/api/usuarios")
    assert resp.status_code == 200
    assert resp.json() == {"success": True, "usuarios": []}


@pytest.mark.asyncio
async def test_create_and_list_users_newest_first(async_client: AsyncClient):
    ids = []
    for i in range(3):
        resp = await async_client.post("/api/usuarios", json={
            "nombre": f"User {i}",
            "email": f"user{i}@example.com",
            "password": "secret123",
        })
        assert resp.status_code == 201
        assert set(resp.json()["usuario"]) == PUBLIC_USER_KEYS
        ids.append(resp.json()["usuario"]["id"])

    users = (await async_client.get("/api/usuarios")).json()["usuarios"]
    assert [u["id"] for u in users] == list(reversed(ids))
    assert all(set(u) == PUBLIC_USER_KEYS for u in users)


@pytest.mark.asyncio
async def test_get_user(async_client: AsyncClient):
    user_id = (await _register(async_client)).json()["user"]["id"]
    resp = await async_client.get(f"/api/usuarios/{user_id}")
    assert resp.status_code == 200
    assert resp.json()["usuario"]["nombre"] == "Ana"


@pytest.mark.asyncio
async def test_user_not_found(async_client: AsyncClient):
    resp = await async_client.get("/api/usuarios/99999")
    assert resp.status_code == 404
    assert resp.json() == {"success": False, "error": "User not found"}


@pytest.mark.asyncio
async def test_update_user_name_and_email(async_client: AsyncClient):
    user_id = (await _register(async_client)).json()["user"]["id"]

    resp = await async_client.put(f"/api/usuarios/{user_id}", json={
        "nombre": "Ana Maria",
        "email": "AnaMaria@Example.com",
    })
    assert resp.status_code == 200
    user = resp.json()["usuario"]
    assert user["nombre"] == "Ana Maria"
    assert user["email"] == "anamaria@example.com"

    # Password untouched: the old one still works with the new email.
    assert (await _login(async_client, email="anamaria@example.com")).status_code == 200


@pytest.mark.asyncio
async def test_update_user_password(async_client: AsyncClient):
    user_id = (await _register(async_client)).json()["user"]["id"]
    await async_client.put(f"/api/usuarios/{user_id}", json={
        "nombre": "Ana",
        "email": "ana@example.com",
        "password": "brand-new-pass",
    })

    assert (await _login(async_client)).status_code == 401
    assert (await _login(async_client, password="brand-new-pass")).status_code == 200


@pytest.mark.asyncio
async def test_update_user_keeps_own_email(async_client: AsyncClient):
    user_id = (await _register(async_client)).json()["user"]["id"]
    resp = await async_client.put(f"/api/usuarios/{user_id}", json={
        "nombre": "Renamed",
        "email": "ana@example.com",
    })
    assert resp.status_code == 200


@pytest.mark.asyncio
async def test_update_user_email_taken_by_other(async_client: AsyncClient):
    await _register(async_client, email="first@example.com")
    second_id = (await _register(async_client, email="second@example.com")).json()["user"]["id"]

    resp = await async_client.put(f"/api/usuarios/{second_id}", json={
        "nombre": "Second",
        "email": "FIRST@example.com",
    })
    assert resp.status_code == 400
    assert resp.json()["success"] is False


@pytest.mark.asyncio
async def test_update_user_requires_name_and_email(async_client: AsyncClient):
    user_id = (await _register(async_client)).json()["user"]["id"]
    resp = await async_client.put(f"/api/usuarios/{user_id}", json={"nombre": "Only name"})
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_update_user_short_password(async_client: AsyncClient):
    user_id = (await _register(async_client)).json()["user"]["id"]
    resp = await async_client.put(f"/api/usuarios/{user_id}", json={
        "nombre": "Ana",
        "email": "ana@example.com",
        "password": "123",
    })
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_update_nonexistent_user(async_client: AsyncClient):
    resp = await async_client.put("/api/usuarios/99999", json={
        "nombre": "Ghost",
        "email": "ghost@example.com",
    })
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_update_nonexistent_user_validates_body_first(async_client: AsyncClient):
    resp = await async_client.put("/api/usuarios/99999", json={"email": "ghost@example.com"})
    assert resp.status_code == 400
    assert "nombre" in resp.json()["error"]


@pytest.mark.asyncio
async def test_delete_user(async_client: AsyncClient):
    user_id = (await _register(async_client)).json()["user"]["id"]

    resp = await async_client.delete(f"/api/usuarios/{user_id}")
    assert resp.status_code == 200
    assert (await async_client.get(f"/api/usuarios/{user_id}")).status_code == 404


@pytest.mark.asyncio
async def test_delete_nonexistent_user(async_client: AsyncClient):
    resp = await async_client.delete("/api/usuarios/99999")
    assert resp.status_code == 404


# ---------------------------------------------------------------------------
# Metrics endpoint
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_metrics_endpoint(async_client: AsyncClient):
    await _register(async_client)
    article_ids = []
    for i in range(2):
        resp = await async_client.post("/api/articulos", data={
            "titulo": f"Metric {i}", "contenido": "C", "autor": "Ana",
        })
        article_ids.append(resp.json()["articulo"]["id"])
    for i in range(3):
        await async_client.post("/api/comentarios", json={
            "articulo_id": article_ids[0], "nombre": "Reader", "comentario": f"c{i}",
        })

    resp = await async_client.get("/api/metricas")
    assert resp.status_code == 200
    metrics = resp.json()["metricas"]
    assert metrics["articulos"] == 2
    assert metrics["comentarios"] == 3
    assert metrics["usuarios"] == 1
    assert metrics["comentarios_por_articulo"] == 1.5
    assert set(metrics["cache"]) == {"hits", "misses", "hit_rate"}
