# tests/test_api_auth.py
import pytest
from conftest import PASSWORD, signup

from famfin.security import ADMIN_ROLE
from famfin.services import users as users_service


def test_healthz(client):
    r = client.get("/healthz")
    assert r.status_code == 200
    assert r.text == "ok"


@pytest.mark.parametrize(
    "method,path",
    [
        ("get", "/bank-accounts"),
        ("get", "/cards"),
        ("get", "/categories"),
        ("get", "/transactions"),
        ("post", "/transactions"),
        ("get", "/goals"),
        ("get", "/budgets"),
        ("get", "/family"),
        ("post", "/family/share"),
        ("get", "/roles"),
        ("get", "/auth/me"),
    ],
)
def test_unauthenticated_calls_get_401(client, method, path):
    r = getattr(client, method)(path)
    assert r.status_code == 401
    assert "error" in r.json()


def test_signup_signin_signout(client):
    user = signup(client)
    assert user["email"] == "ana@home.net"
    assert user["roleName"] == "User"
    assert "hashedPassword" not in user

    assert client.get("/auth/me").json()["id"] == user["id"]

    client.post("/auth/signout")
    assert client.get("/auth/me").status_code == 401

    bad = client.post("/auth/signin", json={"email": "ana@home.net", "password": "nope"})
    assert bad.status_code == 401
    assert bad.json() == {"error": "Invalid email or password"}

    ok = client.post("/auth/signin", json={"email": "ANA@home.net", "password": PASSWORD})
    assert ok.status_code == 200
    assert client.get("/auth/me").status_code == 200


def test_signup_validation_and_duplicates(client):
    short = client.post(
        "/auth/signup", json={"name": "Ana", "email": "ana@home.net", "password": "123"}
    )
    assert short.status_code == 400
    assert "error" in short.json()

    signup(client)
    dup = client.post(
        "/auth/signup", json={"name": "Ana B", "email": "ana@home.net", "password": PASSWORD}
    )
    assert dup.status_code == 400
    assert "already exists" in dup.json()["error"]


def test_users_endpoints_are_admin_only(make_client, session):
    regular = make_client()
    signup(regular)
    assert regular.get("/users").status_code == 403

    admin_role = users_service.get_role_by_name(session, ADMIN_ROLE)
    users_service.create_user(
        session, "Root", "root@home.net", PASSWORD, role_id=admin_role.id
    )
    admin = make_client()
    r = admin.post("/auth/signin", json={"email": "root@home.net", "password": PASSWORD})
    assert r.status_code == 200

    listed = admin.get("/users")
    assert listed.status_code == 200
    assert {u["email"] for u in listed.json()} == {"ana@home.net", "root@home.net"}

    created = admin.post(
        "/users",
        json={"name": "Bruno", "email": "bruno@home.net", "password": PASSWORD},
    )
    assert created.status_code == 201
    assert created.json()["roleName"] == "User"

    roles = {r["name"]: r["userCount"] for r in admin.get("/roles").json()}
    assert roles == {"Admin": 1, "User": 2}
