"""
OTP Repository

Persistence for one-time codes. Lookups return ORM instances attached to the
caller's session; writes are committed by ``add``/``update``/``delete``.
"""
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from storefront.models.otp import OTP, OTPPurpose


class OTPRepository:
    """Repository for OTP records keyed by (email, purpose)"""

    def __init__(self, db: Session):
        self.db = db

    def _for(self, email: str, purpose: OTPPurpose):
        return self.db.query(OTP).filter(OTP.email == email, OTP.purpose == purpose)

    def get_active(self, email: str, purpose: OTPPurpose) -> Optional[OTP]:
        """Most recent OTP that is neither used nor superseded (it may be expired)."""
        return (
            self._for(email, purpose)
            .filter(OTP.is_used.is_(False), OTP.superseded_at.is_(None))
            .order_by(OTP.issued_at.desc(), OTP.id.desc())
            .first()
        )

    def get_latest(self, email: str, purpose: OTPPurpose) -> Optional[OTP]:
        return (
            self._for(email, purpose)
            .order_by(OTP.issued_at.desc(), OTP.id.desc())
            .first()
        )

    def get_by_reset_token(self, reset_token: str) -> Optional[OTP]:
        if not reset_token:
            return None
        return self.db.query(OTP).filter(OTP.reset_token == reset_token).first()

    def count_active(self, email: str, purpose: OTPPurpose) -> int:
        return (
            self._for(email, purpose)
            .filter(OTP.is_used.is_(False), OTP.superseded_at.is_(None))
            .count()
        )

    def invalidate_all(self, email: str, purpose: OTPPurpose, now: datetime) -> int:
        """
        Mark every active OTP for (email, purpose) as superseded.

        Rows are updated through the ORM so each one bumps its version and a
        concurrent verification against a superseded row fails on flush.
        Changes are flushed, not committed.
        """
        active = (
            self._for(email, purpose)
            .filter(OTP.is_used.is_(False), OTP.superseded_at.is_(None))
            .all()
        )
        for otp in active:
            otp.superseded_at = now
        self.db.flush()
        return len(active)

    def add(self, otp: OTP) -> OTP:
        self.db.add(otp)
        self.db.commit()
        self.db.refresh(otp)
        return otp

    def update(self, otp: OTP) -> OTP:
        self.db.add(otp)
        self.db.commit()
        return otp

    def delete(self, otp: OTP) -> None:
        self.db.delete(otp)
        self.db.commit()

    def delete_for_email(self, email: str) -> int:
        deleted = self.db.query(OTP).filter(OTP.email == email).delete(synchronize_session=False)
        self.db.flush()
        return deleted
