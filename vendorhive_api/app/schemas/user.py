"""
Pydantic models for user data.

``User`` mirrors the stored document and therefore includes the
password hash; it never leaves the service layer.  Everything returned
through the API uses ``UserPublic``, which has no ``password`` field.
"""

from datetime import datetime
from typing import Literal, Optional, Union

from pydantic import BaseModel, EmailStr, Field

Role = Literal["user", "vendor"]


class UserBase(BaseModel):
    name: str = Field(..., min_length=2, examples=["Jane Doe"])
    username: str = Field(..., min_length=3, examples=["janedoe"])
    email: EmailStr = Field(..., examples=["jane@example.com"])
    role: Role = "user"
    profile_image: Optional[str] = None
    phone: Optional[str] = None
    bio: Optional[str] = None
    location: Optional[str] = None


class UserCreate(UserBase):
    """Schema for creating a user.

    The repository stores ``password`` as given, so callers hash it
    first.
    """

    password: str = Field(..., min_length=6)


class UserUpdate(BaseModel):
    """Profile fields a user may change about themselves."""

    name: Optional[str] = Field(None, min_length=2)
    username: Optional[str] = Field(None, min_length=3)
    email: Optional[EmailStr] = None
    profile_image: Optional[str] = None
    phone: Optional[str] = None
    bio: Optional[str] = None
    location: Optional[str] = None


class UserAccountUpdate(UserUpdate):
    """Internal update that may also change the role or password hash."""

    role: Optional[Role] = None
    password: Optional[str] = None


class UserPublic(BaseModel):
    # Users written before integer ids existed only have an ObjectId,
    # which is exposed here as its hex string.
    id: Union[int, str]
    name: str
    username: str
    email: str
    role: Role = "user"
    profile_image: Optional[str] = None
    phone: Optional[str] = None
    bio: Optional[str] = None
    location: Optional[str] = None
    joined_at: Optional[datetime] = None

    model_config = {
        "from_attributes": True,
    }


class User(UserPublic):
    """A stored user, password hash included."""

    password: str

    def public(self) -> UserPublic:
        return UserPublic.model_validate(self.model_dump(exclude={"password"}))


class PasswordChange(BaseModel):
    current_password: str
    new_password: str = Field(..., min_length=6)
