"""
User directory

Account lookups and credential changes. Password policy violations and
missing accounts surface as ``DirectoryError``.
"""
from typing import List, Optional

from sqlalchemy.orm import Session

from storefront.exceptions import DirectoryError
from storefront.models.users import User, Role
from storefront.utils import security
from storefront.utils.logger import get_logger

logger = get_logger("user_directory")


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


class UserDirectory:
    def __init__(self, db: Session):
        self.db = db

    def find_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == normalize_email(email)).first()

    def get(self, user_id: int) -> Optional[User]:
        return self.db.get(User, user_id)

    def list(self) -> List[User]:
        return self.db.query(User).order_by(User.id).all()

    def count(self) -> int:
        return self.db.query(User).count()

    def _check_password(self, password: str) -> None:
        errors = security.password_policy_errors(password)
        if errors:
            raise DirectoryError(", ".join(errors), details={"errors": errors})

    def create(self, email: str, display_name: str, password: str,
               phone_number: Optional[str] = None, role: str = Role.BUYER,
               is_email_verified: bool = False) -> User:
        self._check_password(password)
        user = User(
            email=normalize_email(email),
            display_name=display_name,
            phone_number=phone_number,
            hashed_password=security.get_password_hash(password),
            role=role,
            is_active=True,
            is_email_verified=is_email_verified,
        )
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        logger.info(f"User created: {user.email} ({user.role})")
        return user

    def assign_role(self, user: User, role: str) -> User:
        if role not in Role.ALL:
            raise DirectoryError(f"Unknown role: {role}")
        user.role = role
        self.db.commit()
        return user

    def reset_password(self, user: User, new_password: str) -> User:
        if user is None:
            raise DirectoryError("User not found")
        self._check_password(new_password)
        user.hashed_password = security.get_password_hash(new_password)
        self.db.commit()
        logger.info(f"Password reset for user {user.email}")
        return user

    def update(self, user: User) -> User:
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        return user

    def delete(self, user: User) -> None:
        self.db.delete(user)
        self.db.commit()
