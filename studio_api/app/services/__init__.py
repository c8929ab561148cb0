"""
Service layer.

Each service encapsulates the business rules of one studio resource and
talks to ``core.store``.  Services raise the errors from
``core.exceptions`` (and ``PermissionError`` for record-level denials);
mapping those to HTTP responses is the job of the endpoints.
"""
