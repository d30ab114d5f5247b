from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from storefront.database import get_db
from storefront.models.users import User
from storefront.repositories.users import UserDirectory
from storefront.schemas.message import Message
from storefront.schemas.otp import EmailRequest, VerifyOTPRequest
from storefront.schemas.users import (
    LoginRequest,
    ProfileOut,
    ProfileUpdate,
    RegisterRequest,
    UserToken,
)
from storefront.services import auth as auth_service
from storefront.services.auth import get_current_user
from storefront.services.otp import OTPService, get_otp_service
from storefront.utils import security
from storefront.utils.logger import get_logger

logger = get_logger("account_routes")

router = APIRouter(prefix="/api/account", tags=["account"])


@router.post("/register", response_model=Message)
def register(
    data: RegisterRequest,
    db: Session = Depends(get_db),
    otp_service: OTPService = Depends(get_otp_service),
):
    """
    Create an account and email a verification OTP
    """
    logger.info(f"Registration attempt for email: {data.email}")
    auth_service.register_user(db, otp_service, data)
    return {"message": "Registration successful. Please check your email to verify your account."}


@router.post("/verify-email", response_model=UserToken)
def verify_email(
    data: VerifyOTPRequest,
    db: Session = Depends(get_db),
    otp_service: OTPService = Depends(get_otp_service),
):
    """
    Confirm the account's email with the OTP and sign the user in
    """
    logger.info(f"Email verification attempt for: {data.email}")
    user, token = auth_service.verify_email(db, otp_service, data.email, data.otp_code)
    return {"display_name": user.display_name, "email": user.email, "token": token}


@router.post("/resend-verification-otp", response_model=Message)
def resend_verification_otp(
    data: EmailRequest,
    db: Session = Depends(get_db),
    otp_service: OTPService = Depends(get_otp_service),
):
    """
    Send a fresh verification OTP (at most once per cooldown window)
    """
    auth_service.resend_verification(db, otp_service, data.email)
    return {"message": "If the email exists, a verification OTP has been sent"}


@router.post("/login", response_model=UserToken)
def login(data: LoginRequest, db: Session = Depends(get_db)):
    logger.info(f"Login attempt for email: {data.email}")
    user, token = auth_service.login(db, data.email, data.password)
    return {"display_name": user.display_name, "email": user.email, "token": token}


@router.post("/logout", response_model=Message)
def logout(current_user: User = Depends(get_current_user)):
    """
    Tokens are stateless; the client discards its copy
    """
    logger.info(f"Logout for: {current_user.email}")
    return {"message": "Logged out successfully"}


@router.get("/me", response_model=UserToken)
def read_current_user(current_user: User = Depends(get_current_user)):
    return {
        "display_name": current_user.display_name,
        "email": current_user.email,
        "token": security.create_user_token(current_user),
    }


@router.get("/token", response_model=str)
def refresh_token(current_user: User = Depends(get_current_user)):
    return security.create_user_token(current_user)


@router.get("/email-exists", response_model=bool)
def email_exists(email: str = Query(...), db: Session = Depends(get_db)):
    return UserDirectory(db).find_by_email(email) is not None


@router.get("/profile", response_model=ProfileOut)
def get_profile(current_user: User = Depends(get_current_user)):
    return current_user


@router.put("/profile", response_model=ProfileOut)
def update_profile(
    data: ProfileUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    logger.info(f"Profile update for: {current_user.email}")
    return auth_service.update_profile(db, current_user, data)
