"""
Simple configuration management.

The ``Settings`` dataclass reads configuration directly from
environment variables.  Defaults are provided for all fields so the
API can run locally without any setup; in a deployment override at
least ``SECRET_KEY`` and the ``OAUTH_*`` values.
"""

import os
from dataclasses import dataclass


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = os.getenv("PROJECT_NAME", "Studio API")
    api_version: str = os.getenv("API_VERSION", "1.0.0")
    debug: bool = os.getenv("DEBUG", "false").lower() in {"1", "true", "yes"}
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_file: str = os.getenv("LOG_FILE", "")

    # Signing key for session tokens and the OAuth state cookie.
    secret_key: str = os.getenv("SECRET_KEY", "change_me")
    session_expire_minutes: int = int(os.getenv("SESSION_EXPIRE_MINUTES", str(60 * 24 * 30)))
    session_cookie_name: str = os.getenv("SESSION_COOKIE_NAME", "session")
    cookie_secure: bool = os.getenv("COOKIE_SECURE", "false").lower() in {"1", "true", "yes"}

    # Path to the SQLite file holding the document collections.  A
    # relative path is resolved against the project root by ``core.db``.
    database_url: str = os.getenv("DATABASE_URL", "studio.db")

    # OAuth 2.0 identity provider.  The defaults point at Google, which
    # is what the studio signs in with.
    oauth_client_id: str = os.getenv("OAUTH_CLIENT_ID", "")
    oauth_client_secret: str = os.getenv("OAUTH_CLIENT_SECRET", "")
    oauth_redirect_uri: str = os.getenv("OAUTH_REDIRECT_URI", "http://localhost:8000/api/auth/callback")
    oauth_authorize_url: str = os.getenv("OAUTH_AUTHORIZE_URL", "https://accounts.google.com/o/oauth2/v2/auth")
    oauth_token_url: str = os.getenv("OAUTH_TOKEN_URL", "https://oauth2.googleapis.com/token")
    oauth_userinfo_url: str = os.getenv("OAUTH_USERINFO_URL", "https://openidconnect.googleapis.com/v1/userinfo")
    oauth_scope: str = os.getenv("OAUTH_SCOPE", "openid email profile")
    oauth_timeout: float = float(os.getenv("OAUTH_TIMEOUT", "10"))


# Instantiate settings once so other modules can import it without
# repeatedly reading environment variables.  Environment variables must
# be set before importing this module.
settings = Settings()
