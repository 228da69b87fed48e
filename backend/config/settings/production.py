"""
Production settings.

Security-hardened settings for deployed environments.
All secrets are read from environment variables.
"""

from .base import *  # noqa: F403
from .base import settings

DEBUG = False

if settings.SECRET_KEY.startswith("django-insecure") or settings.JWT_SECRET.startswith("change-me"):
    raise RuntimeError("SECRET_KEY and JWT_SECRET must be set in production")

# Security settings
SECURE_SSL_REDIRECT = True
SECURE_HSTS_SECONDS = 31536000  # 1 year
SECURE_HSTS_INCLUDE_SUBDOMAINS = True
SECURE_HSTS_PRELOAD = True
SECURE_PROXY_SSL_HEADER = ("HTTP_X_FORWARDED_PROTO", "https")
