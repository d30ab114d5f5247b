from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront.database import get_db
from storefront.models.otp import OTPPurpose
from storefront.schemas.message import Message
from storefront.schemas.otp import (
    EmailRequest,
    OTPVerificationResponse,
    ResetPasswordRequest,
    VerifyOTPRequest,
)
from storefront.services import auth as auth_service
from storefront.services.otp import OTPService, get_otp_service
from storefront.utils.logger import get_logger

logger = get_logger("otp_routes")

router = APIRouter(prefix="/api/account", tags=["password-reset"])

# Identical for known and unknown emails
RESET_REQUESTED_MESSAGE = "If the email exists, an OTP has been sent"


@router.post("/forgot-password", response_model=Message)
def forgot_password(
    data: EmailRequest,
    db: Session = Depends(get_db),
    otp_service: OTPService = Depends(get_otp_service),
):
    """
    Request a password reset OTP

    The response never reveals whether the account exists.
    """
    logger.info(f"Password reset requested for email: {data.email}")
    auth_service.request_password_reset(db, otp_service, data.email)
    return {"message": RESET_REQUESTED_MESSAGE}


@router.post("/resend-otp", response_model=Message)
def resend_otp(
    data: EmailRequest,
    otp_service: OTPService = Depends(get_otp_service),
):
    """
    Resend the password reset OTP, rate limited to one per cooldown window
    """
    otp_service.resend(data.email, OTPPurpose.PASSWORD_RESET)
    return {"message": RESET_REQUESTED_MESSAGE}


@router.post("/verify-otp", response_model=OTPVerificationResponse)
def verify_otp(
    data: VerifyOTPRequest,
    otp_service: OTPService = Depends(get_otp_service),
):
    """
    Exchange a password reset OTP for a short-lived reset token
    """
    logger.info(f"Password reset OTP verification for email: {data.email}")
    otp = otp_service.verify(data.email, OTPPurpose.PASSWORD_RESET, data.otp_code)
    return {"success": True, "message": "OTP verified successfully", "reset_token": otp.reset_token}


@router.post("/reset-password", response_model=Message)
def reset_password(
    data: ResetPasswordRequest,
    otp_service: OTPService = Depends(get_otp_service),
):
    """
    Set a new password using the reset token from verify-otp
    """
    otp_service.complete_reset(data.email, data.reset_token, data.new_password)
    return {"message": "Password has been reset successfully"}
