"""
Simple configuration management.

The ``Settings`` dataclass reads configuration directly from
environment variables.  Defaults are provided for all fields so the
API starts with the in‑memory storage backend and no external
services.  Set ``STORAGE_BACKEND=mongodb`` together with
``MONGODB_URI`` to persist data in MongoDB.
"""

import os
from dataclasses import dataclass


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes"}


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = os.getenv("PROJECT_NAME", "VendorHive API")
    api_version: str = os.getenv("API_VERSION", "1.0.0")
    debug: bool = _env_flag("DEBUG")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_file: str = os.getenv("LOG_FILE", "")
    secret_key: str = os.getenv("SECRET_KEY", "change_me")
    access_token_expire_minutes: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24)))

    # Which storage facade to build at startup: ``memory`` or ``mongodb``.
    # The choice is made once in ``create_app`` and never changes for the
    # lifetime of the process.
    storage_backend: str = os.getenv("STORAGE_BACKEND", "memory")
    mongodb_uri: str = os.getenv("MONGODB_URI", "mongodb://localhost:27017")
    mongodb_database: str = os.getenv("MONGODB_DATABASE", "vendorhive")
    mongodb_timeout_ms: int = int(os.getenv("MONGODB_TIMEOUT_MS", "5000"))

    # ``max`` scans the highest existing ``id`` and adds one (racy under
    # concurrent inserts); ``counter`` allocates from an atomically
    # incremented counter document.
    id_strategy: str = os.getenv("ID_STRATEGY", "max")

    # When enabled, an unresolvable user reference is an error instead of
    # silently binding to the most recently joined user.
    strict_user_resolution: bool = _env_flag("STRICT_USER_RESOLUTION")

    # When enabled, ``update_booking_status`` rejects moves that are not in
    # the booking transition table.  Off by default: the repository
    # overwrites the status unconditionally and callers enforce the rules.
    enforce_booking_transitions: bool = _env_flag("ENFORCE_BOOKING_TRANSITIONS")


# Instantiate settings once so other modules can import it without
# repeatedly reading environment variables.  Because the dataclass
# computes values at instantiation time, environment variables should
# be set before importing this module.
settings = Settings()
