"""
Pydantic models for registration and login.
"""

from typing import Any, Optional

from pydantic import BaseModel, EmailStr

from .user import UserCreate, UserPublic
from .vendor import Vendor


class RegisterRequest(UserCreate):
    """Registration payload.

    ``vendor`` is kept as a raw mapping: an invalid vendor payload does
    not reject the registration, the profile is created from defaults
    instead.  Supplying it at all makes the account a vendor account.
    """

    vendor: Optional[dict[str, Any]] = None


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class AuthResponse(BaseModel):
    user: UserPublic
    token: str
    vendor_profile: Optional[Vendor] = None
