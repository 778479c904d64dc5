"""Revoked-token store.

Access tokens are stateless, so logging out means remembering the
token's ``jti`` until it would have expired anyway.  The store is an
injected dependency backed by the Django cache (Redis in production),
so revocations are shared across workers and expire on their own.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

import structlog
from django.conf import settings
from django.core.cache import BaseCache, cache as default_cache
from django.utils.module_loading import import_string

from shared.domain.clock import Clock, SystemClock

logger = structlog.get_logger(__name__)


class ITokenBlacklist(ABC):
    @abstractmethod
    def revoke(self, jti: str, expires_at: datetime) -> None:
        """Mark the token identified by *jti* as revoked until *expires_at*."""

    @abstractmethod
    def is_revoked(self, jti: str) -> bool:
        """Return ``True`` if *jti* has been revoked."""


class CacheTokenBlacklist(ITokenBlacklist):
    key_prefix = "auth:revoked:"

    def __init__(self, cache: Optional[BaseCache] = None, clock: Optional[Clock] = None) -> None:
        self._cache = cache or default_cache
        self._clock = clock or SystemClock()

    def revoke(self, jti: str, expires_at: datetime) -> None:
        ttl = int((expires_at - self._clock.now()).total_seconds())
        if ttl <= 0:
            return
        self._cache.set(self._key(jti), True, timeout=ttl)
        logger.info("auth.token_revoked", jti=jti, ttl=ttl)

    def is_revoked(self, jti: str) -> bool:
        return bool(self._cache.get(self._key(jti)))

    def _key(self, jti: str) -> str:
        return f"{self.key_prefix}{jti}"


def get_token_blacklist() -> ITokenBlacklist:
    """Build the blacklist configured by ``TOKEN_BLACKLIST_CLASS``."""
    dotted_path = getattr(settings, "TOKEN_BLACKLIST_CLASS", "modules.core.tokens.CacheTokenBlacklist")
    return import_string(dotted_path)()
