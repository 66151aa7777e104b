"""Typed errors raised across the fetch, provider and player layers"""

from typing import Optional


class StreamflixError(Exception):
    """Base class for all StreamFlix errors"""


class NetworkError(StreamflixError):
    """A fetch failed or returned a non-success status"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class RetryExhausted(StreamflixError):
    """Retry policy used up; wraps the error of the final attempt"""

    def __init__(self, last_error: Exception, attempts: int):
        super().__init__(f"Gave up after {attempts} attempts: {last_error}")
        self.last_error = last_error
        self.attempts = attempts


class NoTemplateForMode(StreamflixError):
    """Provider has no URL template for the requested content mode"""

    def __init__(self, provider_key: str, mode: str):
        super().__init__(f"Provider '{provider_key}' has no template for mode '{mode}'")
        self.provider_key = provider_key
        self.mode = mode


class UnknownProvider(NoTemplateForMode):
    """Provider key is not in the provider table"""

    def __init__(self, provider_key: str, mode: str = ""):
        StreamflixError.__init__(self, f"Unknown provider '{provider_key}'")
        self.provider_key = provider_key
        self.mode = mode


class AllProvidersExhausted(StreamflixError):
    """Every provider in the session order failed to load"""

    def __init__(self, attempted: list):
        super().__init__(
            f"All providers failed to load ({', '.join(attempted) or 'none attempted'})"
        )
        self.attempted = attempted


class AccessDenied(StreamflixError):
    """Player referrer/token validation failed"""
