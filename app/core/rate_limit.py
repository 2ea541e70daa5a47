"""
Per-client request limits (slowapi), keyed by remote address
"""
from slowapi import Limiter
from slowapi.util import get_remote_address

limiter = Limiter(key_func=get_remote_address)

AUTH_LIMIT = "10/minute"
GEOCODING_LIMIT = "30/minute"
