import logging

import pytest
from fastapi import APIRouter
from fastapi.testclient import TestClient

from storefront.exceptions import (
    AuthenticationError,
    BaseCustomException,
    ConflictError,
    DispatchError,
    EmailError,
    InvalidOTPError,
    InvalidResetTokenError,
    OTPError,
    OTPLockedError,
    OTPNotFoundError,
    RateLimitError,
    TokenError,
    convert_to_http_exception,
    handle_database_error,
)
from storefront.main import app
from storefront.utils.logger import get_logger, setup_logger


def test_custom_exceptions():
    """Status codes and payloads of the exception hierarchy"""
    auth_error = AuthenticationError("Test auth error")
    assert auth_error.status_code == 401
    assert auth_error.message == "Test auth error"

    conflict = ConflictError("Email address is already in use", details={"email": "a@x.com"})
    assert conflict.status_code == 409
    assert conflict.details == {"email": "a@x.com"}

    assert RateLimitError().status_code == 429
    assert DispatchError().status_code == 500


@pytest.mark.parametrize("error_class", [OTPNotFoundError, InvalidOTPError, OTPLockedError])
def test_otp_errors_share_a_base(error_class):
    error = error_class()
    assert isinstance(error, OTPError)
    assert isinstance(error, TokenError)
    assert error.status_code == 400


def test_reset_token_error_is_not_an_otp_error():
    error = InvalidResetTokenError()
    assert not isinstance(error, OTPError)
    assert error.message == "Invalid or expired reset token"


def test_dispatch_error_is_an_email_error():
    assert issubclass(DispatchError, EmailError)
    assert issubclass(EmailError, BaseCustomException)


def test_convert_to_http_exception():
    http_exc = convert_to_http_exception(InvalidOTPError(details={"attempts_remaining": 2}))

    assert http_exc.status_code == 400
    assert http_exc.detail == {
        "message": "Invalid OTP code",
        "error_type": "InvalidOTPError",
        "details": {"attempts_remaining": 2},
    }


def test_handle_database_error():
    db_error = handle_database_error(Exception("Connection failed"), "test_operation")

    assert db_error.status_code == 500
    assert db_error.details["operation"] == "test_operation"
    assert "Connection failed" in db_error.details["original_error"]


def test_unexpected_errors_render_as_json():
    router = APIRouter()

    @router.get("/__boom")
    def boom():
        raise RuntimeError("kaboom")

    app.include_router(router)
    client = TestClient(app, raise_server_exceptions=False)

    response = client.get("/__boom")

    assert response.status_code == 500
    assert response.json()["error_type"] == "InternalServerError"
    assert response.json()["details"]["original_error"] == "kaboom"


def test_module_loggers_are_children_of_the_app_logger():
    logger = get_logger("otp")
    assert logger.name == "storefront.otp"
    assert logger.parent is logging.getLogger("storefront")


def test_setup_logger_does_not_duplicate_handlers():
    first = setup_logger("storefront.test_setup")
    count = len(first.handlers)
    second = setup_logger("storefront.test_setup")
    assert second is first
    assert len(second.handlers) == count
