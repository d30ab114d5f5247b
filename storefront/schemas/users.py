from datetime import datetime
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from typing import Optional
import re


def _clean_phone(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v

    # Remove any spaces, dashes, or parentheses
    cleaned_number = re.sub(r'[\s\-\(\)]', '', v)

    digits = cleaned_number[1:] if cleaned_number.startswith('+') else cleaned_number
    if not digits.isdigit():
        raise ValueError("Phone number can only contain digits (and a leading +)")
    if len(digits) < 10 or len(digits) > 15:
        raise ValueError("Phone number must be between 10 and 15 digits")
    return cleaned_number


class RegisterRequest(BaseModel):
    email: EmailStr
    display_name: str = Field(min_length=2, max_length=100)
    phone_number: str
    password: str
    role: Optional[str] = None  # "Buyer" or "Seller"; anything else registers a Buyer

    @field_validator('display_name')
    @classmethod
    def strip_display_name(cls, v):
        v = v.strip()
        if len(v) < 2:
            raise ValueError("Display name must be at least 2 characters")
        return v

    @field_validator('phone_number')
    @classmethod
    def validate_phone(cls, v):
        return _clean_phone(v)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class UserToken(BaseModel):
    """Returned after login and successful email verification"""
    display_name: str
    email: str
    token: str


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    display_name: str
    phone_number: Optional[str] = None
    role: str
    is_active: bool
    is_email_verified: bool
    created_at: datetime
    last_login_at: Optional[datetime] = None


class ProfileOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    display_name: str
    email: str
    phone_number: Optional[str] = None


class ProfileUpdate(BaseModel):
    display_name: str = Field(min_length=2, max_length=100)
    phone_number: Optional[str] = None

    @field_validator('phone_number')
    @classmethod
    def validate_phone(cls, v):
        return _clean_phone(v)


class AdminUserUpdate(BaseModel):
    display_name: Optional[str] = Field(default=None, min_length=2, max_length=100)
    phone_number: Optional[str] = None
    role: Optional[str] = None
    is_email_verified: Optional[bool] = None
    is_active: Optional[bool] = None

    @field_validator('phone_number')
    @classmethod
    def validate_phone(cls, v):
        return _clean_phone(v)
