import enum
from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime, Boolean, Enum, Index

from storefront.database import Base
from storefront.utils.clock import utcnow


class OTPPurpose(str, enum.Enum):
    EMAIL_VERIFICATION = "email_verification"
    PASSWORD_RESET = "password_reset"


class OTP(Base):
    __tablename__ = "otps"
    __table_args__ = (
        Index("ix_otps_email_purpose", "email", "purpose"),
    )

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), nullable=False)
    code_hash = Column(String(64), nullable=False)  # sha256 hex digest, never the raw code
    purpose = Column(Enum(OTPPurpose, native_enum=False, length=32), nullable=False)
    issued_at = Column(DateTime, default=utcnow, nullable=False)
    expires_at = Column(DateTime, nullable=False)
    is_used = Column(Boolean, default=False, nullable=False)
    superseded_at = Column(DateTime, nullable=True)  # Set when a newer OTP replaces this one
    failed_attempts = Column(Integer, default=0, nullable=False)
    locked_until = Column(DateTime, nullable=True)
    reset_token = Column(String(128), unique=True, index=True, nullable=True)
    reset_token_expires_at = Column(DateTime, nullable=True)
    version = Column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self):
        return f"<OTP {self.email} {self.purpose.value} {'ACTIVE' if self.is_active else 'INERT'}>"

    @property
    def is_active(self) -> bool:
        return not self.is_used and self.superseded_at is None

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at

    def is_locked(self, now: datetime) -> bool:
        return self.locked_until is not None and self.locked_until > now

    def is_reset_token_expired(self, now: datetime) -> bool:
        return self.reset_token_expires_at is None or now >= self.reset_token_expires_at
