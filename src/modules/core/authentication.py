"""SimpleJWT authentication that honours revoked tokens."""

from __future__ import annotations

from typing import Optional

import structlog
from rest_framework_simplejwt.authentication import JWTAuthentication
from rest_framework_simplejwt.exceptions import InvalidToken
from rest_framework_simplejwt.settings import api_settings

from modules.core.tokens import ITokenBlacklist, get_token_blacklist

logger = structlog.get_logger(__name__)


class BlacklistAwareJWTAuthentication(JWTAuthentication):
    """Reject access tokens whose ``jti`` was revoked through logout."""

    def __init__(self, *args, blacklist: Optional[ITokenBlacklist] = None, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._blacklist = blacklist or get_token_blacklist()

    def get_validated_token(self, raw_token: bytes):
        token = super().get_validated_token(raw_token)
        jti = token.get(api_settings.JTI_CLAIM)
        if jti and self._blacklist.is_revoked(str(jti)):
            logger.warning("auth.revoked_token_rejected", jti=str(jti))
            raise InvalidToken("Token has been revoked.")
        return token
