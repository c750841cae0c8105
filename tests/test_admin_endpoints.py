import json

import pytest

from wastewise.auth.session import ADMIN_COOKIE_NAME, USER_COOKIE_NAME

from conftest import ADMIN


def _admin_login(client, email=ADMIN.email, password=ADMIN.password):
    return client.post("/admin/auth/login", json={"email": email, "password": password})


def test_admin_login_sets_session_cookie(client):
    r = _admin_login(client)
    assert r.status_code == 200
    assert r.json() == {
        "admin": {"id": 1, "email": "root@example.com", "name": "Root Admin"},
        "message": "Admin login successful",
    }
    set_cookie = r.headers["set-cookie"].lower()
    assert set_cookie.startswith(f"{ADMIN_COOKIE_NAME}=")
    assert "httponly" in set_cookie
    assert "max-age=28800" in set_cookie
    assert "adm1n!pass" not in set_cookie


def test_admin_login_then_check(client):
    _admin_login(client)
    r = client.get("/admin/auth/check")
    assert r.status_code == 200
    assert r.json() == {
        "isAuthenticated": True,
        "isAdmin": True,
        "admin": {"id": 1, "email": "root@example.com", "name": "Root Admin"},
    }


@pytest.mark.parametrize(
    "email,password",
    [
        ("", ""),
        (ADMIN.email, ""),
        (ADMIN.email, ADMIN.password[:-1]),
        (ADMIN.email.upper(), ADMIN.password),
        ("someone@example.com", ADMIN.password),
    ],
)
def test_admin_login_rejects_non_matching_pairs(client, email, password):
    r = _admin_login(client, email=email, password=password)
    assert r.status_code == 401
    assert r.json() == {"error": "Invalid admin credentials"}
    assert "set-cookie" not in r.headers


def test_admin_login_missing_fields(client):
    r = client.post("/admin/auth/login", json={"email": ADMIN.email})
    assert r.status_code == 422


def test_user_credentials_do_not_open_admin_session(client, registered):
    assert _admin_login(client, email="a@x.com", password="secret").status_code == 401


def test_admin_logout(client):
    _admin_login(client)
    r = client.post("/admin/auth/logout")
    assert r.status_code == 200
    assert r.json()["success"] is True
    r = client.get("/admin/auth/check")
    assert r.status_code == 401
    assert r.json() == {"isAuthenticated": False, "isAdmin": False}


def test_admin_check_with_unparseable_cookie(client):
    client.cookies.set(ADMIN_COOKIE_NAME, "{broken")
    assert client.get("/admin/auth/check").status_code == 401


def test_admin_check_trusts_unsigned_cookie_payload(client):
    forged = json.dumps({"id": 42, "email": "forged@example.com", "name": "Forged"})
    client.cookies.set(ADMIN_COOKIE_NAME, forged)
    r = client.get("/admin/auth/check")
    assert r.status_code == 200
    assert r.json()["admin"]["email"] == "forged@example.com"


def test_user_and_admin_sessions_are_independent(client, registered):
    client.post("/auth/login", json={"email": "a@x.com", "password": "secret"})
    _admin_login(client)
    assert client.cookies.get(USER_COOKIE_NAME)
    assert client.cookies.get(ADMIN_COOKIE_NAME)

    client.post("/admin/auth/logout")
    assert client.get("/admin/auth/check").status_code == 401
    assert client.get("/auth/check").status_code == 200


@pytest.mark.parametrize("raw", ['{"id": Infinity}', '{"id": 1e400}', "[" * 2000])
def test_admin_check_with_hostile_cookie_is_401(client, raw):
    client.cookies.set(ADMIN_COOKIE_NAME, raw)
    r = client.get("/admin/auth/check")
    assert r.status_code == 401
    assert r.json() == {"isAuthenticated": False, "isAdmin": False}
    assert client.get("/admin", follow_redirects=False).status_code == 303
