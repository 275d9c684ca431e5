import time
from typing import Any, Callable, Dict

import structlog
from django.core.cache import cache
from django.db import connections
from django.http import HttpRequest, JsonResponse
from django.utils import timezone
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from modules.core.identity import Actor

logger = structlog.get_logger()


def _probe_database() -> None:
    with connections["default"].cursor() as cursor:
        cursor.execute("SELECT 1")
        cursor.fetchone()


def _probe_cache() -> None:
    cache.set("_health_check", "ok", 10)
    if cache.get("_health_check") != "ok":
        raise ConnectionError("Cache read failed")


def _timed_probe(probe: Callable[[], None]) -> Dict[str, Any]:
    start = time.monotonic()
    probe()
    return {
        "status": "up",
        "response_time_ms": round((time.monotonic() - start) * 1000, 2),
    }


def health_check(request: HttpRequest) -> JsonResponse:
    """Report database and cache reachability (public, unauthenticated)."""
    services: Dict[str, Dict[str, Any]] = {}
    for name, probe in (("database", _probe_database), ("cache", _probe_cache)):
        try:
            services[name] = _timed_probe(probe)
        except Exception as exc:  # any backend failure means "down"
            services[name] = {"status": "down"}
            logger.error("health_check.failure", service=name, error=str(exc))

    healthy = all(service["status"] == "up" for service in services.values())
    logger.info("health_check.completed", status="healthy" if healthy else "unhealthy")

    return JsonResponse(
        {
            "status": "healthy" if healthy else "unhealthy",
            "timestamp": timezone.now().isoformat(),
            "services": services,
        },
        status=200 if healthy else 503,
    )


class MeView(APIView):
    """Identity and role of the authenticated caller."""

    permission_classes = [IsAuthenticated]

    def get(self, request: Request) -> Response:
        actor = Actor.from_user(request.user)
        return Response(
            {
                "user_id": actor.user_id,
                "username": request.user.get_username(),
                "role": actor.role.value,
            }
        )
