import time
from datetime import datetime, timezone as dt_timezone
from typing import Any, Dict

import structlog
from django.core.cache import cache
from django.db import connections
from django.http import HttpRequest, JsonResponse
from django.utils import timezone
from rest_framework import status
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.settings import api_settings

from modules.core.tokens import get_token_blacklist

logger = structlog.get_logger()


def health_check(request: HttpRequest) -> JsonResponse:
    services: Dict[str, Dict[str, Any]] = {}
    overall_healthy = True

    try:
        start = time.monotonic()
        conn = connections["default"]
        conn.ensure_connection()
        with conn.cursor() as cursor:
            cursor.execute("SELECT 1")
            cursor.fetchone()
        services["database"] = {
            "status": "up",
            "response_time_ms": round((time.monotonic() - start) * 1000, 2),
        }
    except Exception:
        services["database"] = {"status": "down"}
        overall_healthy = False
        logger.error("health_check.database_down")

    try:
        start = time.monotonic()
        cache.set("_health_check", "ok", 10)
        if cache.get("_health_check") != "ok":
            raise ConnectionError("Cache read failed")
        services["cache"] = {
            "status": "up",
            "response_time_ms": round((time.monotonic() - start) * 1000, 2),
        }
    except Exception:
        services["cache"] = {"status": "down"}
        overall_healthy = False
        logger.error("health_check.cache_down")

    label = "healthy" if overall_healthy else "unhealthy"
    logger.info("health_check.completed", status=label)

    return JsonResponse(
        {"status": label, "timestamp": timezone.now().isoformat(), "services": services},
        status=200 if overall_healthy else 503,
    )


class LogoutView(APIView):
    """Revoke the access token used to authenticate this request.

    The token stays revoked until its own ``exp`` claim, after which it
    would be rejected anyway.
    """

    permission_classes = [IsAuthenticated]

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.blacklist = get_token_blacklist()

    def post(self, request) -> Response:
        token = request.auth
        if token is None or api_settings.JTI_CLAIM not in token:
            raise ValidationError("Logout requires a bearer token.", code="not_token_authenticated")

        jti = str(token[api_settings.JTI_CLAIM])
        expires_at = datetime.fromtimestamp(token["exp"], tz=dt_timezone.utc)
        self.blacklist.revoke(jti, expires_at)
        logger.info("auth.logout", user_id=request.user.pk)
        return Response(status=status.HTTP_204_NO_CONTENT)
