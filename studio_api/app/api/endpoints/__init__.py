"""
Resource-specific endpoint modules.

Each module exposes a ``router`` (an ``APIRouter``) that is included by
``api.router``.
"""
