# eduauth/core/ratelimit.py
from slowapi import Limiter
from slowapi.util import get_remote_address

from eduauth.core.config import settings

# limite por IP de cliente; storage em memória (um processo), ou RATE_LIMIT_STORAGE_URI (ex.: redis://)
limiter = Limiter(key_func=get_remote_address, storage_uri=settings.RATE_LIMIT_STORAGE_URI)
