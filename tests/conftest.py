import pytest
from fastapi.testclient import TestClient

from app.config import Settings
from app.db import Database

API = "/api/v1"


@pytest.fixture
def test_settings(tmp_path):
    return Settings(
        _env_file=None,
        secret_key="test-secret",
        database_path=str(tmp_path / "test.db"),
    )


@pytest.fixture
def client(test_settings):
    from app.main import create_app

    app = create_app(test_settings)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def db(tmp_path):
    database = Database(str(tmp_path / "store.db")).connect()
    database.init_schema()
    yield database
    database.close()


def _signup_and_login(client, email="a@x.com", pw="p1", nickname="A") -> dict:
    resp = client.post(f"{API}/auth/signup", json={"nickname": nickname, "email": email, "pw": pw})
    assert resp.status_code == 201
    resp = client.post(f"{API}/auth/login", json={"email": email, "pw": pw})
    assert resp.status_code == 200
    return {"Authorization": f"Bearer {resp.json()['jwttoken']}"}


@pytest.fixture
def login(client):
    """Sign a user up, log in, and return the bearer headers."""
    return lambda **kwargs: _signup_and_login(client, **kwargs)


@pytest.fixture
def auth_headers(login):
    return login()
