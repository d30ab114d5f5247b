from sqlalchemy import Column, Integer, String, Boolean, DateTime

from storefront.database import Base
from storefront.utils.clock import utcnow


class Role:
    ADMIN = "Admin"
    BUYER = "Buyer"
    SELLER = "Seller"

    ALL = (ADMIN, BUYER, SELLER)
    SELF_ASSIGNABLE = (BUYER, SELLER)


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    display_name = Column(String(100), nullable=False)
    phone_number = Column(String(20), nullable=True)
    role = Column(String(20), default=Role.BUYER, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    is_email_verified = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    last_login_at = Column(DateTime, nullable=True)

    def __repr__(self):
        return f"<User {self.email}>"
