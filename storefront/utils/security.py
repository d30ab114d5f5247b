import hashlib
import hmac
import secrets
import string
from datetime import timedelta
from typing import List, Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from storefront.config import settings
from storefront.utils.clock import utcnow

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=12,  # Adjust rounds as needed (default is 12)
    bcrypt__ident="2b"  # Use the modern bcrypt variant
)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def password_policy_errors(password: str) -> List[str]:
    """Return the list of policy violations for a candidate password."""
    errors = []
    if not password or len(password) < settings.PASSWORD_MIN_LENGTH:
        errors.append(f"Password must be at least {settings.PASSWORD_MIN_LENGTH} characters long")
    if not any(ch.isdigit() for ch in password or ""):
        errors.append("Password must contain at least one digit")
    return errors


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None):
    to_encode = data.copy()
    if expires_delta:
        expire = utcnow() + expires_delta
    else:
        expire = utcnow() + timedelta(minutes=15)
    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
    return encoded_jwt


def decode_access_token(token: str):
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        return payload
    except JWTError:
        return None


def create_user_token(user) -> str:
    """Session token carrying the user's email, id and roles."""
    return create_access_token(
        data={"sub": user.email, "uid": user.id, "roles": [user.role]},
        expires_delta=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    )


# One-time codes

def generate_otp(length: int = 6) -> str:
    return "".join(secrets.choice(string.digits) for _ in range(length))


def hash_otp(code: str) -> str:
    return hashlib.sha256(code.encode()).hexdigest()


def verify_otp_hash(code: str, code_hash: str) -> bool:
    if not code or not code_hash:
        return False
    return hmac.compare_digest(hash_otp(code), code_hash)


def generate_reset_token() -> str:
    return secrets.token_urlsafe(48)
