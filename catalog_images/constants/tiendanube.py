"""Constants for Tiendanube catalog operations."""


class TNHeader:
    """Tiendanube request header names."""
    AUTHENTICATION = "Authentication"
    USER_AGENT = "User-Agent"
    CONTENT_TYPE = "Content-Type"


class TNStatus:
    """HTTP statuses the retry policy cares about."""
    TOO_MANY_REQUESTS = 429


class TNDefaults:
    """Defaults observed against the live API."""
    PER_PAGE = 200
    CONCURRENCY_LIMIT = 5
    MAX_RETRIES = 3
    RETRY_INITIAL_DELAY = 2.0
    RETRY_MULTIPLIER = 2
