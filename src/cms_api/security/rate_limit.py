"""Rate limiting configuration for administration and login endpoints."""

from slowapi import Limiter
from slowapi.util import get_remote_address

from cms_api.config import get_settings

_settings = get_settings()

# In-memory storage unless a shared backend (e.g. redis://) is configured
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[f"{_settings.rate_limit_default}/minute"],
    storage_uri=_settings.rate_limit_storage_uri or "memory://",
    enabled=_settings.rate_limit_enabled,
)

AUTH_LOGIN_LIMIT = f"{_settings.rate_limit_auth_login}/minute"
ADMIN_MODIFY_LIMIT = f"{_settings.rate_limit_admin_modify}/minute"
