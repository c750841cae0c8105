import sys
from pathlib import Path as _Path
sys.path.insert(0, str(_Path(__file__).resolve().parents[1] / "src"))

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from wastewise.app import create_app
from wastewise.auth.admins import AdminCredential
from wastewise.auth.passwords import hash_password
from wastewise.config import Settings

ADMIN = AdminCredential(id=1, email="root@example.com", password="Adm1n!pass", name="Root Admin")


@pytest.fixture()
def accounts_path(tmp_path: Path) -> Path:
    return tmp_path / "data" / "accounts.yml"


@pytest.fixture()
def settings(tmp_path: Path, accounts_path: Path) -> Settings:
    return Settings(
        secret_key="test-secret",
        accounts_path=accounts_path,
        admins=(ADMIN,),
        data_dir=tmp_path / "data",
    )


@pytest.fixture()
def app(settings):
    return create_app(settings)


@pytest.fixture()
def store(app):
    # Same instance the app uses, so writes invalidate its read cache.
    return app.state.accounts


@pytest.fixture()
def registered(store):
    """Account a@x.com / secret."""
    return store.create(email="a@x.com", name="Alice", password_hash=hash_password("secret"))


@pytest.fixture()
def client(app):
    with TestClient(app) as c:
        yield c
