"""
Business logic for user accounts.

``UserService`` registers and authenticates users and lets them edit
their own profile.  Registering with vendor data (or with the
``vendor`` role) always produces a vendor profile: when the supplied
vendor payload does not validate, a default profile is created instead
so the account is usable straight away.
"""

import logging
from typing import Any, Optional

from pydantic import ValidationError

from ..core.config import Settings
from ..core.security import create_user_token, hash_password, verify_password
from ..schemas.auth import AuthResponse, LoginRequest, RegisterRequest
from ..schemas.user import PasswordChange, User, UserAccountUpdate, UserCreate, UserUpdate
from ..schemas.vendor import Vendor, VendorCreate
from ..storage import Storage, StorageError
from ..storage.repository import DEFAULT_VENDOR_CATEGORY, DEFAULT_VENDOR_DESCRIPTION, default_business_name

logger = logging.getLogger(__name__)


def _default_vendor_data(user: User) -> dict[str, Any]:
    return {
        "business_name": default_business_name(user.name),
        "category": DEFAULT_VENDOR_CATEGORY,
        "description": DEFAULT_VENDOR_DESCRIPTION,
    }


class UserService:
    """Registration, login and profile management."""

    @classmethod
    async def register(cls, storage: Storage, data: RegisterRequest, config: Settings) -> AuthResponse:
        """Create an account and return it with a fresh token.

        Raises ``ValueError`` when the e-mail or username is taken.
        """
        if await storage.get_user_by_email(data.email):
            raise ValueError("Email already in use")
        if await storage.get_user_by_username(data.username):
            raise ValueError("Username already taken")

        role = "vendor" if data.vendor is not None else data.role
        logger.info("Registering user %s with role %s", data.username, role)
        user_data = data.model_dump(exclude={"vendor", "password", "role"})
        user = await storage.create_user(
            UserCreate(**user_data, role=role, password=hash_password(data.password))
        )

        vendor_profile = None
        if user.role == "vendor":
            vendor_profile = await cls._create_vendor_profile(storage, user, data.vendor)
            if vendor_profile is None:
                user = await storage.update_user(user.id, UserAccountUpdate(role="user")) or user

        return AuthResponse(user=user.public(), token=create_user_token(user, config), vendor_profile=vendor_profile)

    @classmethod
    async def _create_vendor_profile(
        cls, storage: Storage, user: User, payload: Optional[dict[str, Any]]
    ) -> Optional[Vendor]:
        try:
            vendor_data = VendorCreate.model_validate({**(payload or _default_vendor_data(user)), "user_id": user.id})
        except ValidationError as e:
            logger.warning("Invalid vendor data for user %s, using defaults: %s", user.id, e.errors())
            vendor_data = VendorCreate(**_default_vendor_data(user), user_id=user.id)
        try:
            return await storage.create_vendor(vendor_data)
        except StorageError as e:
            # The caller downgrades the account to a plain user.
            logger.error("Failed to create vendor profile for user %s: %s", user.id, e)
            return None

    @classmethod
    async def authenticate(cls, storage: Storage, email: str, password: str) -> Optional[User]:
        """Return the user if ``password`` matches, otherwise ``None``."""
        user = await storage.get_user_by_email(email)
        if user is None or not verify_password(password, user.password):
            return None
        return user

    @classmethod
    async def login(cls, storage: Storage, data: LoginRequest, config: Settings) -> Optional[AuthResponse]:
        user = await cls.authenticate(storage, data.email, data.password)
        if user is None:
            logger.info("Failed login for %s", data.email)
            return None
        vendor_profile = None
        if user.role == "vendor":
            vendor_profile = await storage.get_vendor_by_user_id(user.id)
        return AuthResponse(user=user.public(), token=create_user_token(user, config), vendor_profile=vendor_profile)

    @classmethod
    async def update_profile(cls, storage: Storage, current_user: User, data: UserUpdate) -> Optional[User]:
        """Apply profile changes, keeping e-mail and username unique."""
        if data.email and data.email != current_user.email:
            existing = await storage.get_user_by_email(data.email)
            if existing and existing.id != current_user.id:
                raise ValueError("Email already in use")
        if data.username and data.username != current_user.username:
            existing = await storage.get_user_by_username(data.username)
            if existing and existing.id != current_user.id:
                raise ValueError("Username already taken")
        return await storage.update_user(current_user.id, data)

    @classmethod
    async def change_password(cls, storage: Storage, current_user: User, data: PasswordChange) -> bool:
        """Replace the password; ``False`` if the current one is wrong."""
        if not verify_password(data.current_password, current_user.password):
            return False
        await storage.update_user(current_user.id, UserAccountUpdate(password=hash_password(data.new_password)))
        logger.info("Password changed for user %s", current_user.id)
        return True
