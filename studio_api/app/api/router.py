"""
Top‑level router for the studio API.

This router aggregates the resource routers.  Dashboard resources sit
under ``/api/admin`` whatever the caller's role; each route checks the
access policy itself.  When a new resource is added, include its
router here.
"""

from fastapi import APIRouter

from .endpoints import auth, bookings, contact, gallery, packages, users

router = APIRouter()

router.include_router(bookings.router, prefix="/api/admin/booking", tags=["bookings"])
router.include_router(packages.router, prefix="/api/admin/package", tags=["packages"])
router.include_router(gallery.router, prefix="/api/admin/gallery", tags=["gallery"])
router.include_router(users.router, prefix="/api/admin/users", tags=["users"])
router.include_router(contact.admin_router, prefix="/api/admin/contact", tags=["contact"])
router.include_router(contact.public_router, prefix="/api/contact", tags=["contact"])
# The auth router defines both ``/api/auth/*`` and the ``/dashboard``
# redirect, so it is included without a prefix.
router.include_router(auth.router, tags=["auth"])
