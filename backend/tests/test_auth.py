import pytest

from jot.api.routes import auth as auth_routes
from jot.services.email import EmailDeliveryError
from jot.services.rate_limit import RateLimitRule
from jot.services.signup import find_code


def test_signup_flow_sets_session_cookie(client, email_sender, fixed_otp):
    send_response = client.post("/api/auth/send-otp", json={"email": "New.User@Example.com"})
    assert send_response.status_code == 200
    assert send_response.json() == {"message": "OTP sent successfully"}
    assert email_sender.sent[0]["to"] == "new.user@example.com"
    assert fixed_otp in email_sender.sent[0]["body"]

    verify_response = client.post(
        "/api/auth/verify-otp",
        json={"email": "new.user@example.com", "otp": fixed_otp},
    )
    assert verify_response.status_code == 200
    assert verify_response.json()["message"] == "OTP verified. Continue to create your password."

    signup_response = client.post(
        "/api/auth/signup",
        json={
            "email": "new.user@example.com",
            "password": "secret123",
            "fullName": "New User",
            "mobileNumber": "+15550100",
        },
    )
    assert signup_response.status_code == 201
    assert signup_response.json() == {"message": "User created successfully", "email": "new.user@example.com"}

    set_cookie = signup_response.headers["set-cookie"].lower()
    assert set_cookie.startswith("token=")
    assert "httponly" in set_cookie
    assert "max-age=604800" in set_cookie
    assert "path=/" in set_cookie
    assert "samesite=lax" in set_cookie
    assert "; secure" not in set_cookie

    me_response = client.get("/api/auth/me")
    assert me_response.status_code == 200
    assert me_response.json() == {
        "email": "new.user@example.com",
        "fullName": "New User",
        "mobileNumber": "+15550100",
        "profilePictureUrl": "",
    }


def test_wrong_codes_walk_down_to_maximum_attempts(client, fixed_otp):
    email = "a@example.com"
    assert client.post("/api/auth/send-otp", json={"email": email}).status_code == 200

    expected = [
        "Invalid code. 2 attempt(s) left.",
        "Invalid code. 1 attempt(s) left.",
        "Maximum attempts reached. Please request a new code.",
        "OTP not found or expired",
    ]
    submitted = ["000000", "000000", "000000", fixed_otp]
    for otp, message in zip(submitted, expected):
        response = client.post("/api/auth/verify-otp", json={"email": email, "otp": otp})
        assert response.status_code == 400
        assert response.json()["error"] == message


def test_signup_before_verification_is_rejected(client):
    assert client.post("/api/auth/send-otp", json={"email": "early@example.com"}).status_code == 200

    response = client.post("/api/auth/signup", json={"email": "early@example.com", "password": "secret123"})

    assert response.status_code == 400
    assert response.json()["error"] == "Email not verified. Please verify OTP first."
    assert "set-cookie" not in response.headers


def test_signup_rejects_short_password(client):
    response = client.post("/api/auth/signup", json={"email": "short@example.com", "password": "12345"})

    assert response.status_code == 400
    assert response.json()["error"] == "Password must be at least 6 characters"


def test_duplicate_signup_conflicts_even_with_verified_code(client, signup_user, fixed_otp):
    signup_user("taken@example.com")
    assert client.post("/api/auth/send-otp", json={"email": "taken@example.com"}).status_code == 200
    assert (
        client.post("/api/auth/verify-otp", json={"email": "taken@example.com", "otp": fixed_otp}).status_code == 200
    )

    response = client.post("/api/auth/signup", json={"email": "TAKEN@example.com", "password": "another123"})

    assert response.status_code == 409
    assert response.json()["error"] == "User already exists with this email"


@pytest.mark.parametrize(
    ("payload", "message"),
    [
        ({}, "email is required"),
        ({"email": "not-an-email"}, None),
        ({"email": 42}, None),
    ],
)
def test_send_otp_rejects_missing_or_invalid_email(client, email_sender, payload, message):
    response = client.post("/api/auth/send-otp", json=payload)

    assert response.status_code == 400
    if message:
        assert response.json()["error"] == message
    assert email_sender.sent == []


def test_verify_otp_requires_code(client):
    response = client.post("/api/auth/verify-otp", json={"email": "a@example.com"})

    assert response.status_code == 400
    assert response.json()["error"] == "otp is required"


def test_send_otp_reports_unconfigured_transport(client, email_sender):
    email_sender.configured = False

    response = client.post("/api/auth/send-otp", json={"email": "a@example.com"})

    assert response.status_code == 500
    assert response.json()["error"] == "Email transport not configured"


def test_send_otp_reports_delivery_failure(client, email_sender):
    email_sender.error = EmailDeliveryError("SMTP authentication failed")

    response = client.post("/api/auth/send-otp", json={"email": "a@example.com"})

    assert response.status_code == 500
    body = response.json()
    assert body["error"] == "Failed to send OTP: SMTP authentication failed"
    assert body["details"] == {"reason": "SMTP authentication failed"}


def test_login_logout_round_trip(client, signup_user):
    signup_user("login@example.com", password="secret123")
    client.post("/api/auth/logout")
    client.cookies.clear()
    assert client.get("/api/auth/me").status_code == 401

    bad = client.post("/api/auth/login", json={"email": "login@example.com", "password": "wrong-pass"})
    assert bad.status_code == 401
    assert bad.json()["error"] == "Invalid email or password"

    good = client.post("/api/auth/login", json={"email": "Login@Example.com", "password": "secret123"})
    assert good.status_code == 200
    assert good.json()["email"] == "login@example.com"
    assert client.get("/api/auth/me").status_code == 200

    logout = client.post("/api/auth/logout")
    assert logout.status_code == 200
    assert 'token=""' in logout.headers["set-cookie"] or "max-age=0" in logout.headers["set-cookie"].lower()


def test_bearer_token_is_accepted_without_cookie(client, signup_user):
    signup_user("bearer@example.com")
    token = client.cookies.get("token")
    client.cookies.clear()

    response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 200
    assert response.json()["email"] == "bearer@example.com"


def test_tampered_cookie_is_rejected(client):
    client.cookies.set("token", "not-a-jwt")

    response = client.get("/api/auth/me")

    assert response.status_code == 401
    assert response.json()["error"] == "Invalid or expired token"


def test_send_otp_is_rate_limited(client, monkeypatch):
    monkeypatch.setitem(auth_routes.RATE_LIMITS, "send_otp", RateLimitRule("auth.send_otp", 2, 300))

    responses = [client.post("/api/auth/send-otp", json={"email": "burst@example.com"}) for _ in range(3)]

    assert [response.status_code for response in responses] == [200, 200, 429]
    limited = responses[-1]
    assert limited.json()["error"].startswith("Too many requests.")
    assert int(limited.headers["Retry-After"]) >= 1

    other_email = client.post("/api/auth/send-otp", json={"email": "calm@example.com"})
    assert other_email.status_code == 200


@pytest.mark.parametrize("submitted", ["1234567890123", " 123456 "])
def test_any_non_matching_code_counts_as_an_attempt(client, db, fixed_otp, submitted):
    assert client.post("/api/auth/send-otp", json={"email": "a@example.com"}).status_code == 200

    response = client.post("/api/auth/verify-otp", json={"email": "a@example.com", "otp": submitted})

    assert response.status_code == 400
    assert response.json()["error"] == "Invalid code. 2 attempt(s) left."
    assert find_code(db, "a@example.com").attempts == 1
