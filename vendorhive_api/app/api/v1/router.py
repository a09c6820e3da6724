"""
Top‑level router for version 1 of the API.

This router aggregates domain‑specific routers (auth, users, vendors,
etc.) under a unified prefix.  When new endpoints are added or when
new domains are introduced, update this file to include their routers.
"""

from fastapi import APIRouter

from .endpoints import (
    auth,
    users,
    vendors,
    services,
    bookings,
    reviews,
    health,
)

# Create a router for version 1 and include sub‑routers for each domain.
router = APIRouter()

router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(users.router, prefix="/users", tags=["users"])
router.include_router(vendors.router, prefix="/vendors", tags=["vendors"])
router.include_router(services.router, prefix="/services", tags=["services"])
router.include_router(bookings.router, prefix="/bookings", tags=["bookings"])
# The reviews router defines its own "/reviews" path internally.
router.include_router(reviews.router, tags=["reviews"])
router.include_router(health.router, prefix="/health", tags=["health"])
