from storefront.models.otp import OTP
from storefront.models.users import Role, User
from storefront.utils.security import decode_access_token, verify_password

from conftest import DEFAULT_PASSWORD, auth_headers

REGISTRATION = {
    "email": "new@example.com",
    "display_name": "New Buyer",
    "phone_number": "010-1234-5678",
    "password": "secret123",
}


def register(client, **overrides):
    return client.post("/api/account/register", json={**REGISTRATION, **overrides})


def test_register_creates_unverified_user_and_sends_otp(client, db, sender):
    response = register(client)

    assert response.status_code == 200
    user = db.query(User).filter(User.email == "new@example.com").one()
    assert user.is_email_verified is False
    assert user.role == Role.BUYER
    assert user.phone_number == "01012345678"
    assert sender.last_code("new@example.com", "email_verification") is not None


def test_register_duplicate_email(client, buyer):
    response = register(client, email=buyer.email)

    assert response.status_code == 409
    assert response.json()["message"] == "Email address is already in use"


def test_register_rejects_password_without_digit(client):
    response = register(client, password="password")

    assert response.status_code == 400
    assert response.json()["error_type"] == "DirectoryError"


def test_register_role_selection(client, db):
    register(client, role="seller")
    register(client, email="admin-wannabe@example.com", role="Admin")

    assert db.query(User).filter(User.email == "new@example.com").one().role == Role.SELLER
    assert db.query(User).filter(User.email == "admin-wannabe@example.com").one().role == Role.BUYER


def test_register_invalid_body(client):
    response = register(client, email="not-an-email")

    assert response.status_code == 422
    assert response.json()["error_type"] == "ValidationError"


def test_verify_email_then_login(client, sender):
    register(client)
    code = sender.last_code("new@example.com")

    response = client.post("/api/account/verify-email", json={"email": "new@example.com", "otp_code": code})
    assert response.status_code == 200
    body = response.json()
    assert body["email"] == "new@example.com"
    assert decode_access_token(body["token"])["sub"] == "new@example.com"

    response = client.post("/api/account/login", json={"email": "new@example.com", "password": "secret123"})
    assert response.status_code == 200
    assert response.json()["display_name"] == "New Buyer"


def test_verify_email_wrong_code(client, sender):
    register(client)
    code = sender.last_code("new@example.com")
    wrong = "000000" if code != "000000" else "111111"

    response = client.post("/api/account/verify-email", json={"email": "new@example.com", "otp_code": wrong})

    assert response.status_code == 400
    assert response.json()["error_type"] == "InvalidOTPError"
    assert response.json()["details"]["attempts_remaining"] == 4


def test_verify_email_already_verified(client, buyer):
    response = client.post("/api/account/verify-email", json={"email": buyer.email, "otp_code": "123456"})

    assert response.status_code == 400
    assert response.json()["message"] == "Email is already verified"


def test_login_requires_verified_email(client, make_user):
    user = make_user(email="pending@example.com", verified=False)

    response = client.post("/api/account/login", json={"email": user.email, "password": DEFAULT_PASSWORD})

    assert response.status_code == 401


def test_login_bad_password(client, buyer):
    response = client.post("/api/account/login", json={"email": buyer.email, "password": "wrong999"})

    assert response.status_code == 401
    assert response.json()["message"] == "Invalid email or password"


def test_login_records_last_login(client, db, buyer):
    client.post("/api/account/login", json={"email": "BUYER@example.com", "password": DEFAULT_PASSWORD})

    db.refresh(buyer)
    assert buyer.last_login_at is not None


def test_resend_verification_rate_limited(client, make_user, clock):
    user = make_user(email="pending@example.com", verified=False)

    first = client.post("/api/account/resend-verification-otp", json={"email": user.email})
    clock.advance(seconds=10)
    second = client.post("/api/account/resend-verification-otp", json={"email": user.email})

    assert first.status_code == 200
    assert second.status_code == 429
    assert second.headers["retry-after"] == "50"


def test_resend_verification_unknown_email(client, sender):
    response = client.post("/api/account/resend-verification-otp", json={"email": "ghost@example.com"})

    assert response.status_code == 200
    assert sender.sent == []


def test_resend_verification_already_verified(client, buyer):
    response = client.post("/api/account/resend-verification-otp", json={"email": buyer.email})

    assert response.status_code == 400


def test_forgot_password_does_not_reveal_accounts(client, db, buyer, sender):
    known = client.post("/api/account/forgot-password", json={"email": buyer.email})
    unknown = client.post("/api/account/forgot-password", json={"email": "ghost@example.com"})

    assert known.status_code == unknown.status_code == 200
    assert known.json() == unknown.json()
    assert [m["email"] for m in sender.sent] == [buyer.email]
    assert db.query(OTP).filter(OTP.email == "ghost@example.com").count() == 0


def test_password_reset_flow(client, db, buyer, sender):
    client.post("/api/account/forgot-password", json={"email": buyer.email})
    code = sender.last_code(buyer.email, "password_reset")

    response = client.post("/api/account/verify-otp", json={"email": buyer.email, "otp_code": code})
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    token = body["reset_token"]

    response = client.post("/api/account/reset-password", json={
        "email": buyer.email, "reset_token": token, "new_password": "NewPass1"})
    assert response.status_code == 200

    response = client.post("/api/account/reset-password", json={
        "email": buyer.email, "reset_token": token, "new_password": "NewPass2"})
    assert response.status_code == 400
    assert response.json()["error_type"] == "InvalidResetTokenError"

    db.refresh(buyer)
    assert verify_password("NewPass1", buyer.hashed_password)
    login = client.post("/api/account/login", json={"email": buyer.email, "password": "NewPass1"})
    assert login.status_code == 200


def test_verify_otp_locked(client, buyer, sender):
    client.post("/api/account/forgot-password", json={"email": buyer.email})
    code = sender.last_code(buyer.email)
    wrong = "000000" if code != "000000" else "111111"

    for _ in range(5):
        client.post("/api/account/verify-otp", json={"email": buyer.email, "otp_code": wrong})
    response = client.post("/api/account/verify-otp", json={"email": buyer.email, "otp_code": code})

    assert response.status_code == 400
    assert response.json()["error_type"] == "OTPLockedError"


def test_resend_otp_is_generic_for_unknown_email(client, buyer, clock):
    unknown = client.post("/api/account/resend-otp", json={"email": "ghost@example.com"})
    known = client.post("/api/account/resend-otp", json={"email": buyer.email})

    assert unknown.json() == known.json()
    assert client.post("/api/account/resend-otp", json={"email": buyer.email}).status_code == 429
    clock.advance(seconds=60)
    assert client.post("/api/account/resend-otp", json={"email": buyer.email}).status_code == 200


def test_me_and_token(client, buyer):
    response = client.get("/api/account/me", headers=auth_headers(buyer))
    assert response.status_code == 200
    assert response.json()["email"] == buyer.email

    response = client.get("/api/account/token", headers=auth_headers(buyer))
    payload = decode_access_token(response.json())
    assert payload["uid"] == buyer.id
    assert payload["roles"] == [Role.BUYER]


def test_me_requires_token(client):
    assert client.get("/api/account/me").status_code == 401
    assert client.get("/api/account/me", headers={"Authorization": "Bearer junk"}).status_code == 401


def test_email_exists(client, buyer):
    assert client.get("/api/account/email-exists", params={"email": buyer.email}).json() is True
    assert client.get("/api/account/email-exists", params={"email": "ghost@example.com"}).json() is False


def test_profile_round_trip(client, buyer):
    response = client.put("/api/account/profile", headers=auth_headers(buyer),
                          json={"display_name": "  Renamed  ", "phone_number": "+201001234567"})
    assert response.status_code == 200

    profile = client.get("/api/account/profile", headers=auth_headers(buyer)).json()
    assert profile == {"display_name": "Renamed", "email": buyer.email, "phone_number": "+201001234567"}


def test_logout(client, buyer):
    response = client.post("/api/account/logout", headers=auth_headers(buyer))
    assert response.status_code == 200
