"""
HTTP routes.

``router`` in ``api.router`` aggregates the per-resource routers found in
``api.endpoints``.  Admin dashboard resources are mounted under
``/api/admin``; sign-in and the public contact form live next to them.
"""
