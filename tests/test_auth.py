from datetime import datetime, timedelta, timezone

from jose import jwt

from app.auth.utils import create_token, decode_token, hash_password, verify_password

API = "/api/v1"

ROUNDS = 50
KEY_BYTES = 32


def test_password_hash():
    password = "testpassword123"
    hashed, salt = hash_password(password, ROUNDS, KEY_BYTES)
    assert hashed != password
    assert len(bytes.fromhex(hashed)) == KEY_BYTES
    assert verify_password(password, salt, hashed, ROUNDS)
    assert not verify_password("wrong", salt, hashed, ROUNDS)


def test_password_hash_uses_fresh_salt():
    first, salt1 = hash_password("same", ROUNDS, KEY_BYTES)
    second, salt2 = hash_password("same", ROUNDS, KEY_BYTES)
    assert salt1 != salt2
    assert first != second


def test_jwt_token():
    token = create_token("abc123", "a@x.com", "secret")
    payload = decode_token(token, "secret")
    assert payload["sub"] == "abc123"
    assert payload["email"] == "a@x.com"
    assert payload["exp"] - payload["iat"] == 24 * 60 * 60


def test_invalid_token():
    assert decode_token("invalid", "secret") is None
    assert decode_token("", "secret") is None
    assert decode_token(create_token("abc123", "a@x.com", "other"), "secret") is None


def test_expired_token():
    token = create_token("abc123", "a@x.com", "secret", expire_minutes=-1)
    assert decode_token(token, "secret") is None


def test_signup(client):
    resp = client.post(f"{API}/auth/signup", json={"nickname": "A", "email": "a@x.com", "pw": "p1"})
    assert resp.status_code == 201
    assert resp.json() == {"message": "User registered"}


def test_signup_duplicate_email(client):
    body = {"nickname": "A", "email": "dup@x.com", "pw": "p1"}
    assert client.post(f"{API}/auth/signup", json=body).status_code == 201
    resp = client.post(f"{API}/auth/signup", json={**body, "nickname": "B"})
    assert resp.status_code == 400
    assert resp.json() == {"error": "Email already exists"}


def test_signup_missing_fields(client):
    resp = client.post(f"{API}/auth/signup", json={"nickname": "A", "email": "a@x.com"})
    assert resp.status_code == 400
    assert "error" in resp.json()

    resp = client.post(f"{API}/auth/signup", json={"nickname": "", "email": "a@x.com", "pw": "p1"})
    assert resp.status_code == 400


def test_password_is_not_stored_in_clear(client):
    client.post(f"{API}/auth/signup", json={"nickname": "A", "email": "a@x.com", "pw": "p1"})
    row = client.app.state.db.conn.execute("SELECT * FROM users WHERE email = ?", ("a@x.com",)).fetchone()
    assert row["password_hash"] != "p1"
    assert row["password_salt"]


def test_login(client):
    client.post(f"{API}/auth/signup", json={"nickname": "A", "email": "a@x.com", "pw": "p1"})
    resp = client.post(f"{API}/auth/login", json={"email": "a@x.com", "pw": "p1"})
    assert resp.status_code == 200
    token = resp.json()["jwttoken"]
    claims = jwt.get_unverified_claims(token)
    assert claims["email"] == "a@x.com"


def test_login_invalid_is_indistinguishable(client):
    client.post(f"{API}/auth/signup", json={"nickname": "A", "email": "a@x.com", "pw": "p1"})

    wrong_pw = client.post(f"{API}/auth/login", json={"email": "a@x.com", "pw": "nope"})
    unknown = client.post(f"{API}/auth/login", json={"email": "noexist@x.com", "pw": "p1"})

    assert wrong_pw.status_code == 401
    assert unknown.status_code == 401
    assert wrong_pw.json() == unknown.json()

    empty_known = client.post(f"{API}/auth/login", json={"email": "a@x.com", "pw": ""})
    empty_unknown = client.post(f"{API}/auth/login", json={"email": "noexist@x.com", "pw": ""})

    assert empty_known.status_code == 401
    assert empty_unknown.status_code == 401
    assert empty_known.json() == empty_unknown.json() == wrong_pw.json()


def test_login_missing_fields_is_401(client):
    client.post(f"{API}/auth/signup", json={"nickname": "A", "email": "a@x.com", "pw": "p1"})

    for body in ({"email": "a@x.com"}, {"pw": "p1"}, {}):
        resp = client.post(f"{API}/auth/login", json=body)
        assert resp.status_code == 401
        assert resp.json() == {"error": "Invalid email or password"}


def test_profile(client, auth_headers):
    resp = client.get(f"{API}/auth/users", headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json() == {"nickname": "A", "email": "a@x.com"}


def test_profile_unknown_user(client):
    token = create_token("deadbeef", "ghost@x.com", "test-secret")
    resp = client.get(f"{API}/auth/users", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 404


def test_update_nickname(client, auth_headers):
    resp = client.post(f"{API}/auth/nickname", json={"nickname": "Renamed"}, headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json() == {"nickname": "Renamed"}

    profile = client.get(f"{API}/auth/users", headers=auth_headers).json()
    assert profile["nickname"] == "Renamed"


def test_update_nickname_requires_body(client, auth_headers):
    resp = client.post(f"{API}/auth/nickname", json={}, headers=auth_headers)
    assert resp.status_code == 400


def test_missing_token_is_401(client):
    resp = client.get(f"{API}/auth/users")
    assert resp.status_code == 401
    assert resp.headers["www-authenticate"] == "Bearer"
    assert "error" in resp.json()


def test_non_bearer_scheme_is_401(client):
    resp = client.get(f"{API}/auth/users", headers={"Authorization": "Basic abc"})
    assert resp.status_code == 401


def test_bad_token_is_403(client):
    resp = client.get(f"{API}/auth/users", headers={"Authorization": "Bearer not-a-token"})
    assert resp.status_code == 403


def test_expired_token_is_403(client, login):
    headers = login()
    token = headers["Authorization"].split(" ", 1)[1]
    claims = jwt.get_unverified_claims(token)
    expired = jwt.encode(
        {**claims, "exp": datetime.now(timezone.utc) - timedelta(minutes=1)},
        "test-secret",
        algorithm="HS256",
    )
    resp = client.get(f"{API}/auth/users", headers={"Authorization": f"Bearer {expired}"})
    assert resp.status_code == 403


def test_token_signed_with_other_secret_is_403(client):
    token = create_token("abc", "a@x.com", "another-secret")
    resp = client.get(f"{API}/auth/users", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 403
