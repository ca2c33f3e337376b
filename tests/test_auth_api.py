"""HTTP-level tests for register, login, refresh rotation, logout and profile."""

import asyncio
from datetime import timedelta

from bson import ObjectId

from conftest import auth_header, register, use_refresh_cookie
from services.token_service import TokenService


def _login(client, email="jo@example.com", password="secret1"):
    return client.post("/api/v1/auth/login", json={"email": email, "password": password})


def test_register_returns_user_token_and_scoped_cookie(client) -> None:
    r = register(client)

    assert r.status_code == 201
    body = r.json()
    assert body["success"] is True
    assert body["message"] == "User registered successfully"
    assert body["data"]["user"]["name"] == "Jo Lee"
    assert body["data"]["user"]["email"] == "jo@example.com"
    assert set(body["data"]["user"]) == {"id", "name", "email"}
    assert body["data"]["accessToken"]

    assert r.cookies.get("refreshToken")
    set_cookie = r.headers["set-cookie"].lower()
    assert "httponly" in set_cookie
    assert "samesite=strict" in set_cookie
    assert "path=/api/v1/auth" in set_cookie
    assert f"max-age={30 * 24 * 60 * 60}" in set_cookie
    # Not production, so no Secure flag over plain http.
    assert "; secure" not in set_cookie


def test_register_never_leaks_password_or_hash(client) -> None:
    r = register(client)
    text = r.text

    assert "secret1" not in text
    assert "password" not in text.lower()
    assert "$2b$" not in text


def test_register_duplicate_email_any_casing_is_rejected(client) -> None:
    assert register(client).status_code == 201

    r = register(client, name="Jo Again", email="  JO@Example.COM ")

    assert r.status_code == 400
    assert r.json() == {
        "success": False,
        "message": "User with this email already exists",
        "error": "DUPLICATE_EMAIL",
    }


def test_register_missing_fields_is_validation_error(client) -> None:
    r = client.post("/api/v1/auth/register", json={"email": "jo@example.com"})

    assert r.status_code == 400
    body = r.json()
    assert body["success"] is False
    assert body["error"] == "VALIDATION_ERROR"
    assert "name" in body["message"]
    assert "password" in body["message"]


def test_register_rejects_bad_email_and_short_name(client) -> None:
    bad_email = register(client, email="not-an-email")
    short_name = register(client, name="J")
    short_password = register(client, password="12345")

    assert bad_email.status_code == 400
    assert short_name.status_code == 400
    assert short_password.status_code == 400


def test_register_rejects_password_over_bcrypt_byte_limit(client) -> None:
    # 40 characters, 80 bytes in UTF-8.
    r = register(client, password="é" * 40)

    assert r.status_code == 400
    assert r.json()["error"] == "VALIDATION_ERROR"
    assert "password" in r.json()["message"]


def test_register_accepts_multibyte_password_within_limit(client) -> None:
    r = register(client, password="é" * 36)

    assert r.status_code == 201
    assert _login(client, password="é" * 36).status_code == 200


def test_login_scenario_wrong_then_right_password(client) -> None:
    registered = register(client)
    registration_cookie = registered.cookies.get("refreshToken")

    wrong = _login(client, password="secret2")
    assert wrong.status_code == 401
    assert wrong.json()["error"] == "INVALID_CREDENTIALS"

    ok = _login(client)
    assert ok.status_code == 200
    assert ok.json()["message"] == "Login successful"
    assert ok.json()["data"]["accessToken"]
    login_cookie = ok.cookies.get("refreshToken")
    assert login_cookie
    assert login_cookie != registration_cookie


def test_login_failures_are_indistinguishable(client) -> None:
    register(client)

    wrong_password = _login(client, password="nope-nope")
    unknown_email = _login(client, email="nobody@example.com")

    assert wrong_password.status_code == unknown_email.status_code == 401
    assert wrong_password.json() == unknown_email.json()
    assert "refreshToken" not in wrong_password.cookies
    assert "refreshToken" not in unknown_email.cookies


def test_login_is_case_insensitive_on_email(client) -> None:
    register(client)

    r = _login(client, email="JO@EXAMPLE.COM")

    assert r.status_code == 200


def test_login_missing_password_is_validation_error(client) -> None:
    r = client.post("/api/v1/auth/login", json={"email": "jo@example.com"})

    assert r.status_code == 400
    assert r.json()["error"] == "VALIDATION_ERROR"


def test_refresh_issues_new_access_token_and_rotates_cookie(client) -> None:
    r1 = register(client).cookies.get("refreshToken")
    use_refresh_cookie(client, r1)

    r = client.post("/api/v1/auth/refresh")

    assert r.status_code == 200
    body = r.json()
    assert body["message"] == "Token refreshed successfully"
    assert set(body["data"]) == {"accessToken"}
    r2 = r.cookies.get("refreshToken")
    assert r2 and r2 != r1

    profile = client.get("/api/v1/auth/profile", headers=auth_header(body["data"]["accessToken"]))
    assert profile.status_code == 200


def test_refresh_token_is_single_use(client) -> None:
    r1 = register(client).cookies.get("refreshToken")

    use_refresh_cookie(client, r1)
    first = client.post("/api/v1/auth/refresh")
    r2 = first.cookies.get("refreshToken")

    use_refresh_cookie(client, r1)
    second = client.post("/api/v1/auth/refresh")

    assert first.status_code == 200
    assert second.status_code == 401
    assert second.json()["error"] == "INVALID_TOKEN"

    # The rotated token is still the live one.
    use_refresh_cookie(client, r2)
    assert client.post("/api/v1/auth/refresh").status_code == 200


def test_login_invalidates_previous_refresh_token(client) -> None:
    registration_token = register(client).cookies.get("refreshToken")
    _login(client)

    use_refresh_cookie(client, registration_token)
    r = client.post("/api/v1/auth/refresh")

    assert r.status_code == 401
    assert r.json()["error"] == "INVALID_TOKEN"


def test_refresh_without_cookie_is_unauthenticated(client) -> None:
    use_refresh_cookie(client, None)

    r = client.post("/api/v1/auth/refresh")

    assert r.status_code == 401
    assert r.json()["error"] == "UNAUTHENTICATED"


def test_refresh_with_garbage_or_access_token_is_invalid(client) -> None:
    access_token = register(client).json()["data"]["accessToken"]

    use_refresh_cookie(client, "not.a.jwt")
    garbage = client.post("/api/v1/auth/refresh")
    use_refresh_cookie(client, access_token)
    wrong_kind = client.post("/api/v1/auth/refresh")

    assert garbage.status_code == 401
    assert garbage.json()["error"] == "INVALID_TOKEN"
    assert wrong_kind.status_code == 401
    assert wrong_kind.json()["error"] == "INVALID_TOKEN"


def test_logout_invalidates_refresh_token_and_clears_cookie(client) -> None:
    token = register(client).cookies.get("refreshToken")
    use_refresh_cookie(client, token)

    r = client.post("/api/v1/auth/logout")

    assert r.status_code == 200
    assert r.json()["success"] is True
    assert r.json()["message"] == "Logout successful"
    set_cookie = r.headers["set-cookie"].lower()
    assert "refreshtoken=" in set_cookie
    assert "max-age=0" in set_cookie

    use_refresh_cookie(client, token)
    assert client.post("/api/v1/auth/refresh").status_code == 401


def test_logout_is_idempotent(client) -> None:
    token = register(client).cookies.get("refreshToken")

    use_refresh_cookie(client, None)
    no_cookie = client.post("/api/v1/auth/logout")
    use_refresh_cookie(client, token)
    first = client.post("/api/v1/auth/logout")
    use_refresh_cookie(client, token)
    again = client.post("/api/v1/auth/logout")
    use_refresh_cookie(client, "garbage")
    garbage = client.post("/api/v1/auth/logout")

    for r in (no_cookie, first, again, garbage):
        assert r.status_code == 200
        assert r.json()["success"] is True


def test_profile_returns_identity_without_secrets(client) -> None:
    access_token = register(client).json()["data"]["accessToken"]

    r = client.get("/api/v1/auth/profile", headers=auth_header(access_token))

    assert r.status_code == 200
    user = r.json()["data"]["user"]
    assert set(user) == {"id", "name", "email"}
    assert user["email"] == "jo@example.com"


def test_profile_without_or_with_malformed_header_is_unauthenticated(client) -> None:
    access_token = register(client).json()["data"]["accessToken"]

    missing = client.get("/api/v1/auth/profile")
    wrong_scheme = client.get("/api/v1/auth/profile", headers={"Authorization": f"Token {access_token}"})
    empty = client.get("/api/v1/auth/profile", headers={"Authorization": "Bearer "})

    for r in (missing, wrong_scheme, empty):
        assert r.status_code == 401
        assert r.json()["error"] == "UNAUTHENTICATED"


def test_profile_with_bad_signature_is_invalid_token(client) -> None:
    refresh_token = register(client).cookies.get("refreshToken")

    garbage = client.get("/api/v1/auth/profile", headers=auth_header("abc.def.ghi"))
    # A refresh token is signed with the other secret.
    wrong_kind = client.get("/api/v1/auth/profile", headers=auth_header(refresh_token))

    assert garbage.json()["error"] == "INVALID_TOKEN"
    assert wrong_kind.json()["error"] == "INVALID_TOKEN"
    assert garbage.status_code == wrong_kind.status_code == 401


def test_profile_with_expired_token_is_token_expired(client, test_settings) -> None:
    user_id = register(client).json()["data"]["user"]["id"]
    expired = TokenService(test_settings).issue_access_token(user_id, expires_delta=timedelta(seconds=-5))

    r = client.get("/api/v1/auth/profile", headers=auth_header(expired))

    assert r.status_code == 401
    assert r.json()["error"] == "TOKEN_EXPIRED"


def test_profile_for_deleted_user_is_unauthenticated(client, database) -> None:
    body = register(client).json()["data"]
    users = database.get_collection("users")
    asyncio.run(users.delete_one({"_id": ObjectId(body["user"]["id"])}))

    r = client.get("/api/v1/auth/profile", headers=auth_header(body["accessToken"]))

    assert r.status_code == 401
    assert r.json()["error"] == "UNAUTHENTICATED"
