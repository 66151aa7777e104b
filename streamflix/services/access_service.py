"""Single-use player access tokens

The token handed to the player is an anti-hotlinking measure, not a
security boundary: anyone who can load the main site can mint one.
"""

import secrets
import time
from typing import Dict, Iterable, Optional
from urllib.parse import urlparse

from ..config import settings
from ..exceptions import AccessDenied
from .log_service import log_service


class AccessService:
    """Issue, validate and clear ephemeral player tokens"""

    def __init__(self, ttl_seconds: Optional[int] = None, clock=time.monotonic):
        self.ttl_seconds = ttl_seconds or settings.ACCESS_TOKEN_TTL_SECONDS
        self._clock = clock
        self._tokens: Dict[str, float] = {}

    def issue(self) -> str:
        """Create a token to pass along when opening the player"""
        token = secrets.token_urlsafe(16)
        self._tokens[token] = self._clock() + self.ttl_seconds
        return token

    def consume(self, token: Optional[str]) -> bool:
        """Remove `token`; True if it existed and had not expired"""
        if not token:
            return False
        expires_at = self._tokens.pop(token, None)
        return expires_at is not None and expires_at > self._clock()

    def validate(
        self,
        token: Optional[str],
        referrer: Optional[str],
        host: Optional[str],
        allowed_hosts: Optional[Iterable[str]] = None,
    ):
        """
        Let the player initialise, or raise AccessDenied.

        Passes when the player is served from an allowed host, when the
        token is valid, or when the referrer is an allowed host. The token
        is cleared either way.
        """
        allowed = set(allowed_hosts or settings.allowed_player_hosts)
        token_ok = self.consume(token)

        if host in allowed or token_ok:
            return

        if referrer:
            referrer_host = urlparse(referrer).hostname
            if referrer_host in allowed:
                return

        log_service.info(f"Player access denied (host={host}, referrer={referrer})")
        raise AccessDenied("This content can only be accessed from the main site.")

    def purge_expired(self) -> int:
        """Drop tokens that were never used"""
        now = self._clock()
        expired = [token for token, expires_at in self._tokens.items() if expires_at <= now]
        for token in expired:
            del self._tokens[token]
        return len(expired)

    def __len__(self) -> int:
        return len(self._tokens)


# Global access service instance
access_service = AccessService()
