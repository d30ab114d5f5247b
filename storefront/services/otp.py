import math
from datetime import timedelta
from typing import NamedTuple, Optional, Union

from fastapi import Depends
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError
from sqlalchemy.exc import SQLAlchemyError

from storefront.config import settings
from storefront.database import get_db
from storefront.models.otp import OTP, OTPPurpose
from storefront.models.users import User
from storefront.repositories.otp import OTPRepository
from storefront.repositories.users import UserDirectory, normalize_email
from storefront.exceptions import (
    DatabaseError,
    DirectoryError,
    DispatchError,
    EmailError,
    InvalidOTPError,
    InvalidResetTokenError,
    OTPLockedError,
    OTPNotFoundError,
    RateLimitError,
    handle_database_error,
)
from storefront.utils import security
from storefront.utils.clock import Clock, get_clock, utcnow
from storefront.utils.email import EmailSender, get_email_sender
from storefront.utils.logger import get_logger

logger = get_logger("otp")

# Attempts at re-reading an OTP row after another request changed it first
MAX_CONFLICT_RETRIES = 3


class IssuedOTP(NamedTuple):
    otp: OTP
    dispatched: bool
    dispatch_error: Optional[DispatchError] = None


class OTPService:
    """
    Issues, verifies and redeems one-time codes.

    Each OTP row moves through active -> locked -> used/expired. A password
    reset OTP additionally mints a short-lived reset token on success, which
    ``complete_reset`` redeems exactly once.
    """

    def __init__(self, otps: OTPRepository, users: UserDirectory, sender: EmailSender,
                 now: Clock = utcnow):
        self.otps = otps
        self.users = users
        self.sender = sender
        self.now = now

    @property
    def db(self) -> Session:
        return self.otps.db

    def issue(self, email: str, purpose: Union[OTPPurpose, str], display_name: Optional[str] = None) -> IssuedOTP:
        """
        Replace any active OTP for (email, purpose) with a fresh one and email it.

        The new record is committed before the email goes out; a failed
        dispatch is reported on the result, never rolled back.
        """
        purpose = OTPPurpose(purpose)
        email = normalize_email(email)
        now = self.now()
        code = security.generate_otp(settings.OTP_LENGTH)

        try:
            superseded = self.otps.invalidate_all(email, purpose, now)
            otp = self.otps.add(OTP(
                email=email,
                code_hash=security.hash_otp(code),
                purpose=purpose,
                issued_at=now,
                expires_at=now + timedelta(minutes=settings.OTP_EXPIRE_MINUTES),
                is_used=False,
                failed_attempts=0,
                locked_until=None,
            ))
        except SQLAlchemyError as e:
            self.db.rollback()
            raise handle_database_error(e, "issue OTP")

        logger.info(f"OTP issued for email: {email}, purpose: {purpose.value}, superseded: {superseded}")
        return self._dispatch(otp, code, display_name)

    def _dispatch(self, otp: OTP, code: str, display_name: Optional[str]) -> IssuedOTP:
        try:
            if otp.purpose == OTPPurpose.EMAIL_VERIFICATION:
                self.sender.send_verification_otp(otp.email, code, display_name or otp.email)
            else:
                self.sender.send_password_reset_otp(otp.email, code)
        except EmailError as e:
            error = DispatchError(details={"email": otp.email, "purpose": otp.purpose.value, "reason": e.message})
            logger.error(f"OTP email dispatch failed for {otp.email}: {e.message}")
            return IssuedOTP(otp=otp, dispatched=False, dispatch_error=error)
        return IssuedOTP(otp=otp, dispatched=True)

    def resend(self, email: str, purpose: Union[OTPPurpose, str]) -> Optional[IssuedOTP]:
        """
        Issue a new OTP unless the previous one is younger than the cooldown.

        Unknown accounts get ``None`` and no side effect, so callers can answer
        with the same success message either way.

        Raises:
            RateLimitError: If the last OTP was issued within the cooldown window
        """
        purpose = OTPPurpose(purpose)
        email = normalize_email(email)

        user = self.users.find_by_email(email)
        if user is None:
            logger.info(f"OTP resend requested for non-existent email: {email}")
            return None

        latest = self.otps.get_latest(email, purpose)
        if latest is not None:
            elapsed = (self.now() - latest.issued_at).total_seconds()
            cooldown = settings.OTP_RESEND_COOLDOWN_SECONDS
            if elapsed < cooldown:
                logger.warning(f"OTP resend rate limited for email: {email}, purpose: {purpose.value}")
                raise RateLimitError(
                    f"Please wait {cooldown} seconds before requesting a new OTP",
                    details={"retry_after_seconds": math.ceil(cooldown - elapsed)},
                )

        return self.issue(email, purpose, user.display_name)

    def verify(self, email: str, purpose: Union[OTPPurpose, str], code: str) -> OTP:
        """
        Check a submitted code against the active OTP for (email, purpose).

        Returns:
            The OTP, now marked used. For password resets it carries
            ``reset_token`` and ``reset_token_expires_at``.

        Raises:
            OTPNotFoundError: No active OTP, or the code matched but has expired
            OTPLockedError: The OTP is locked after too many failures
            InvalidOTPError: The code does not match
        """
        purpose = OTPPurpose(purpose)
        email = normalize_email(email)

        for attempt in range(1, MAX_CONFLICT_RETRIES + 1):
            try:
                return self._verify_once(email, purpose, code)
            except StaleDataError:
                self.db.rollback()
                logger.warning(f"Concurrent update on OTP for {email}, retrying ({attempt}/{MAX_CONFLICT_RETRIES})")
            except SQLAlchemyError as e:
                self.db.rollback()
                raise handle_database_error(e, "verify OTP")

        raise DatabaseError("OTP verification failed after repeated conflicts",
                            details={"email": email, "purpose": purpose.value})

    def _verify_once(self, email: str, purpose: OTPPurpose, code: str) -> OTP:
        now = self.now()
        otp = self.otps.get_active(email, purpose)

        if otp is None:
            logger.warning(f"OTP verification failed: no active OTP for {email}, purpose {purpose.value}")
            raise OTPNotFoundError()

        if otp.is_locked(now):
            logger.warning(f"OTP verification rejected: OTP locked for {email}")
            raise OTPLockedError(details={"locked_until": otp.locked_until.isoformat()})

        if not security.verify_otp_hash(code, otp.code_hash):
            otp.failed_attempts += 1
            if otp.failed_attempts >= settings.OTP_MAX_FAILED_ATTEMPTS:
                otp.locked_until = now + timedelta(minutes=settings.OTP_LOCKOUT_MINUTES)
                logger.warning(f"OTP locked for {email} after {otp.failed_attempts} failed attempts")
            self.otps.update(otp)
            logger.warning(f"OTP verification failed: wrong code for {email}")
            raise InvalidOTPError(details={
                "attempts_remaining": max(0, settings.OTP_MAX_FAILED_ATTEMPTS - otp.failed_attempts)
            })

        # Expiry is checked only after a match, and reported like a missing OTP
        if otp.is_expired(now):
            logger.warning(f"OTP verification failed: OTP expired for {email}")
            raise OTPNotFoundError()

        if purpose == OTPPurpose.PASSWORD_RESET:
            otp.reset_token = security.generate_reset_token()
            otp.reset_token_expires_at = now + timedelta(minutes=settings.RESET_TOKEN_EXPIRE_MINUTES)
        otp.is_used = True
        self.otps.update(otp)

        logger.info(f"OTP verified successfully for email: {email}, purpose: {purpose.value}")
        return otp

    def complete_reset(self, email: str, reset_token: str, new_password: str) -> User:
        """
        Redeem a reset token and change the account password.

        The token is cleared in the same commit as the password change.

        Raises:
            InvalidResetTokenError: Unknown token, other email, or expired
            DirectoryError: Account missing or password rejected by policy
        """
        email = normalize_email(email)
        now = self.now()

        otp = self.otps.get_by_reset_token(reset_token)
        if otp is None or otp.email != email or otp.is_reset_token_expired(now):
            logger.warning(f"Password reset rejected: invalid or expired reset token for {email}")
            raise InvalidResetTokenError()

        user = self.users.find_by_email(email)
        if user is None:
            logger.warning(f"Password reset rejected: user not found for {email}")
            raise DirectoryError("User not found")

        otp.reset_token = None
        otp.reset_token_expires_at = None
        try:
            self.users.reset_password(user, new_password)
        except DirectoryError:
            self.db.rollback()
            raise
        except SQLAlchemyError as e:
            self.db.rollback()
            raise handle_database_error(e, "reset password")

        logger.info(f"Password reset completed for {email}")
        return user


def get_otp_service(
    db: Session = Depends(get_db),
    sender: EmailSender = Depends(get_email_sender),
    now: Clock = Depends(get_clock),
) -> OTPService:
    return OTPService(OTPRepository(db), UserDirectory(db), sender, now)
