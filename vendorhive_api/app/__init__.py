"""
Application package initializer.

This package contains the main entrypoint for the API and all of its
submodules.  The storage layer (``storage``) holds the entity
repository and its backends; each domain (auth, users, vendors,
services, bookings, reviews) has a service in ``services`` and a
router in ``api/v1/endpoints``.  Versioning is handled by grouping
routers under the ``api/<version>/`` hierarchy.
"""

from .main import app  # noqa: F401
