from fastapi import Depends

from wastewise.auth.session import ADMIN_COOKIE_NAME
from wastewise.permissions import require_admin, require_user

from conftest import ADMIN


def _add_probe_routes(app):
    @app.get("/probe/user")
    def probe_user(user=Depends(require_user)):
        return {"kind": user.kind.value, "id": user.id}

    @app.get("/probe/admin")
    def probe_admin(admin=Depends(require_admin)):
        return {"kind": admin.kind.value, "id": admin.id}


def test_require_user_gates_api_routes(app, client, registered):
    _add_probe_routes(app)
    assert client.get("/probe/user").status_code == 401

    client.post("/auth/login", json={"email": "a@x.com", "password": "secret"})
    assert client.get("/probe/user").json() == {"kind": "user", "id": registered.id}
    # A user session is not an admin session.
    assert client.get("/probe/admin").status_code == 401


def test_require_admin_gates_api_routes(app, client):
    _add_probe_routes(app)
    assert client.get("/probe/admin").status_code == 401

    client.post("/admin/auth/login", json={"email": ADMIN.email, "password": ADMIN.password})
    assert client.get("/probe/admin").json() == {"kind": "admin", "id": ADMIN.id}
    assert client.get("/probe/user").status_code == 401


def test_garbage_admin_cookie_is_401_not_500(app, client):
    _add_probe_routes(app)
    client.cookies.set(ADMIN_COOKIE_NAME, "][")
    assert client.get("/probe/admin").status_code == 401
