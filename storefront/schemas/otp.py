from pydantic import BaseModel, EmailStr, Field
from typing import Optional


class EmailRequest(BaseModel):
    """Body for forgot-password and resend endpoints"""
    email: EmailStr


class VerifyOTPRequest(BaseModel):
    email: EmailStr
    otp_code: str = Field(min_length=1, max_length=12)


class OTPVerificationResponse(BaseModel):
    success: bool
    message: str
    reset_token: Optional[str] = None


class ResetPasswordRequest(BaseModel):
    email: EmailStr
    reset_token: str = Field(min_length=1)
    new_password: str
