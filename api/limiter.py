"""
Rate limiter shared by the EduGen routers.
Kept in its own module so routes and api.main can import it without a cycle.
"""
from slowapi import Limiter
from slowapi.util import get_remote_address

# Per client IP; the AI rewrite and PDF rendering are the expensive calls
REWRITE_LIMIT = "20/minute"
GENERATE_LIMIT = "10/minute"
HEALTH_LIMIT = "10/minute"

limiter = Limiter(key_func=get_remote_address)
