"""
Core infrastructure shared by every studio resource: settings,
logging, the SQLite-backed document store, session tokens and the
access policy.
"""
