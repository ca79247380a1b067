"""
storefront/schemas/auth.py - Pydantic models for magic-login.
"""
from typing import Optional

from pydantic import BaseModel, EmailStr, Field


class MagicLoginRequest(BaseModel):
    email: EmailStr = Field(..., description="Giriş linkinin gönderileceği e-posta")


class MagicLoginResponse(BaseModel):
    success: bool = True
    message: str
    # Sadece development ortamında dolu döner
    loginUrl: Optional[str] = None
