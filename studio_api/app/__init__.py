"""
Application package initializer.

This package contains the main entrypoint for the API and all of its
submodules.  Each studio resource (bookings, packages, gallery, users,
contact messages) has a service in ``services`` and a router in
``api/endpoints``.  Cross-cutting pieces such as configuration, the
document store, session handling and the access policy live in
``core``.
"""

from .main import app  # noqa: F401
