from typing import Optional, Tuple

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from storefront.database import get_db
from storefront.models.otp import OTPPurpose
from storefront.models.users import User, Role
from storefront.repositories.users import UserDirectory, normalize_email
from storefront.schemas.users import RegisterRequest, ProfileUpdate
from storefront.services.otp import OTPService, IssuedOTP
from storefront.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    ValidationError,
    handle_database_error,
)
from storefront.utils import security
from storefront.utils.clock import utcnow
from storefront.utils.logger import get_logger

logger = get_logger("auth")

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/account/login")


def get_current_user(
    db: Session = Depends(get_db),
    token: str = Depends(oauth2_scheme)
) -> User:
    """
    Get current user from JWT token

    Raises:
        AuthenticationError: If token is invalid or user not found
    """
    payload = security.decode_access_token(token)
    if payload is None:
        logger.warning("Invalid token: Could not decode token")
        raise AuthenticationError("Could not validate credentials")

    email: str = payload.get("sub")
    if email is None:
        logger.warning("Invalid token: No email in payload")
        raise AuthenticationError("Could not validate credentials")

    user = UserDirectory(db).find_by_email(email)
    if user is None or not user.is_active:
        logger.warning(f"User not found or inactive for email: {email}")
        raise AuthenticationError("Could not validate credentials")
    return user


def require_roles(*roles: str):
    """Dependency factory admitting only users holding one of ``roles``."""
    def checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in roles:
            logger.warning(f"Access denied for {current_user.email}: requires {roles}")
            raise AuthorizationError("You are not authorized to perform this action")
        return current_user
    return checker


def resolve_role(requested: Optional[str]) -> str:
    """Map a self-selected role onto Buyer/Seller, defaulting to Buyer."""
    if requested:
        for role in Role.SELF_ASSIGNABLE:
            if role.lower() == requested.strip().lower():
                return role
    return Role.BUYER


def authenticate_user(db: Session, email: str, password: str) -> Optional[User]:
    """
    Authenticate user with email and password

    Returns:
        User object if authentication successful, None otherwise
    """
    user = UserDirectory(db).find_by_email(email)
    if not user:
        logger.warning(f"Authentication failed: User not found for email {email}")
        return None
    if not security.verify_password(password, user.hashed_password):
        logger.warning(f"Authentication failed: Invalid password for email {email}")
        return None
    return user


def register_user(db: Session, otp_service: OTPService, data: RegisterRequest) -> Tuple[User, IssuedOTP]:
    """
    Create an unverified account and send its email verification OTP

    Raises:
        ConflictError: If the email is already registered
        DirectoryError: If the password violates the policy
    """
    directory = UserDirectory(db)
    if directory.find_by_email(data.email):
        logger.warning(f"Registration failed: Email already registered {data.email}")
        raise ConflictError("Email address is already in use")

    try:
        user = directory.create(
            email=data.email,
            display_name=data.display_name,
            phone_number=data.phone_number,
            password=data.password,
            role=resolve_role(data.role),
        )
    except SQLAlchemyError as e:
        db.rollback()
        raise handle_database_error(e, "create user")

    issued = otp_service.issue(user.email, OTPPurpose.EMAIL_VERIFICATION, user.display_name)
    if not issued.dispatched:
        logger.error(f"Verification OTP for {user.email} was not delivered")
    return user, issued


def login(db: Session, email: str, password: str, now=utcnow) -> Tuple[User, str]:
    """
    Check credentials and return the user with a fresh session token

    Raises:
        AuthenticationError: Bad credentials, inactive account or unverified email
    """
    user = authenticate_user(db, email, password)
    if not user:
        raise AuthenticationError("Invalid email or password")
    if not user.is_active:
        logger.warning(f"Login failed: Inactive user {email}")
        raise AuthenticationError("Inactive user")
    if not user.is_email_verified:
        logger.warning(f"Login failed: Email not verified for {email}")
        raise AuthenticationError("Please verify your email address before logging in")

    user.last_login_at = now()
    db.commit()
    logger.info(f"Login successful for email: {user.email}")
    return user, security.create_user_token(user)


def verify_email(db: Session, otp_service: OTPService, email: str, otp_code: str) -> Tuple[User, str]:
    """
    Confirm an account's email with its verification OTP

    Raises:
        ValidationError: If the user is missing or already verified
        OTPError: If the code is rejected
    """
    user = UserDirectory(db).find_by_email(email)
    if user is None:
        raise ValidationError("User not found")
    if user.is_email_verified:
        raise ValidationError("Email is already verified")

    otp_service.verify(email, OTPPurpose.EMAIL_VERIFICATION, otp_code)

    user.is_email_verified = True
    db.commit()
    db.refresh(user)
    logger.info(f"Email verified successfully for: {user.email}")
    return user, security.create_user_token(user)


def resend_verification(db: Session, otp_service: OTPService, email: str) -> None:
    """
    Send a new verification OTP; silent for unknown emails

    Raises:
        ValidationError: If the email is already verified
        RateLimitError: Within the resend cooldown
    """
    user = UserDirectory(db).find_by_email(email)
    if user is None:
        logger.info(f"Verification resend requested for non-existent email: {email}")
        return
    if user.is_email_verified:
        raise ValidationError("Email is already verified")
    otp_service.resend(email, OTPPurpose.EMAIL_VERIFICATION)


def request_password_reset(db: Session, otp_service: OTPService, email: str) -> bool:
    """
    Issue a password reset OTP when the account exists

    Returns:
        bool: whether an OTP was issued. Callers must not reveal it.
    """
    user = UserDirectory(db).find_by_email(email)
    if not user:
        logger.info(f"Password reset requested for non-existent email: {normalize_email(email)}")
        return False
    otp_service.issue(user.email, OTPPurpose.PASSWORD_RESET)
    return True


def update_profile(db: Session, user: User, data: ProfileUpdate) -> User:
    user.display_name = data.display_name.strip()
    user.phone_number = data.phone_number
    return UserDirectory(db).update(user)
