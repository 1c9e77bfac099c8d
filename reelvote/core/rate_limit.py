"""Rate limiting configuration."""
import os
from slowapi import Limiter
from slowapi.util import get_remote_address


def get_client_ip(request):
    """Get client IP for rate limiting, considering proxies."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        # X-Forwarded-For can contain multiple IPs, take the first one
        return forwarded.split(",")[0].strip()

    return get_remote_address(request)


# Uses Redis if REDIS_URL is set, falls back to memory for local dev
limiter = Limiter(
    key_func=get_client_ip,
    default_limits=["300/minute"],
    storage_uri=os.getenv("REDIS_URL", "memory://"),
    strategy="fixed-window"
)

# Venue WiFi puts most of the audience behind one NAT address, so the public
# limits are sized for a full room rather than a single device.
RATE_LIMITS = {
    "register": "600/minute",
    "token_lookup": "300/minute",
    "vote": "1200/minute",
    "stats": "600/minute",

    "admin_read": "200/minute",
    "admin_write": "200/minute",
}
