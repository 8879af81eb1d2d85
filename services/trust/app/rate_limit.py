"""
Global slowapi rate limiter.

Imported by the report and social-graph routers for per-endpoint limits.
Mounted onto app.state in main.py so slowapi middleware can find it.

Storage: Redis via REDIS_URL.  Tests set REDIS_URL=memory:// to use the
in-process backend.
"""
from slowapi import Limiter
from slowapi.util import get_remote_address

from app.config import get_settings

_settings = get_settings()

limiter = Limiter(key_func=get_remote_address, storage_uri=_settings.redis_url)

REPORT_RATE_LIMIT = _settings.report_rate_limit
SOCIAL_RATE_LIMIT = _settings.social_rate_limit
