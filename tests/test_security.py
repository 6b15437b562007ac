from types import SimpleNamespace

from calendar_api.app.core import security
from calendar_api.app.core.config import settings


USER = SimpleNamespace(id=7, email="jane@example.com", name="Jane", role="user")


def test_access_token_carries_identity_claims():
    token = security.issue_access_token(USER, session_id=3)
    claims = security.decode_access_token(token)
    assert claims is not None
    assert {k: claims[k] for k in ("email", "id", "name", "role", "sid")} == {
        "email": "jane@example.com",
        "id": 7,
        "name": "Jane",
        "role": "user",
        "sid": 3,
    }
    assert claims["exp"] - claims["iat"] == settings.access_token_expire_minutes * 60


def test_refresh_token_lifetime_and_uniqueness():
    first = security.issue_refresh_token(USER, session_id=3)
    second = security.issue_refresh_token(USER, session_id=3)
    assert first != second
    claims = security.decode_refresh_token(first)
    assert claims["exp"] - claims["iat"] == settings.refresh_token_expire_minutes * 60


def test_tokens_are_not_interchangeable():
    access = security.issue_access_token(USER)
    refresh = security.issue_refresh_token(USER)
    assert security.decode_refresh_token(access) is None
    assert security.decode_access_token(refresh) is None


def test_expired_token_is_rejected():
    token = security.encode_token({"id": 1}, settings.jwt_secret, expires_in=-10)
    assert security.decode_access_token(token) is None


def test_tampered_token_is_rejected():
    token = security.issue_access_token(USER)
    header, payload, signature = token.split(".")
    forged = security.encode_token({"id": 99}, "another-secret", expires_in=60).split(".")[1]
    assert security.decode_access_token(f"{header}.{forged}.{signature}") is None
    assert security.decode_access_token("not-a-token") is None
    assert security.decode_access_token("a.b.c") is None


def test_token_without_exp_is_rejected():
    token = security.encode_token({"id": 1}, settings.jwt_secret, expires_in=60)
    header, _, _ = token.split(".")
    payload = security._b64_url_encode(b'{"id":1}')
    signature = security._b64_url_encode(security._sign(f"{header}.{payload}".encode(), settings.jwt_secret))
    assert security.decode_access_token(f"{header}.{payload}.{signature}") is None


def test_password_hash_roundtrip():
    hashed = security.hash_password("Str0ng!Pass")
    assert hashed != "Str0ng!Pass"
    assert security.verify_password("Str0ng!Pass", hashed)
    assert not security.verify_password("wrong", hashed)
    assert not security.verify_password("Str0ng!Pass", "garbage")


def test_password_hashes_are_salted():
    assert security.hash_password("Str0ng!Pass") != security.hash_password("Str0ng!Pass")


def test_extract_token():
    assert security.extract_token(None) is None
    assert security.extract_token("") is None
    assert security.extract_token("abc.def.ghi") == "abc.def.ghi"
    assert security.extract_token("Bearer abc.def.ghi") == "abc.def.ghi"
    assert security.extract_token("bearer   abc") == "abc"
