"""
Module routes/health.py
Rôle:
- Endpoints de santé (service OK + ping du backend de jeu).

Intégrations:
- settings: nom d'app + URL du backend.
- backend_client: lecture du catalogue d'épreuves comme sonde de disponibilité.
"""
from fastapi import APIRouter
import time

from arena_setup.config.settings import settings
from arena_setup.services import backend_client
from arena_setup.services.backend_client import RemoteUnavailable, call_remote

router = APIRouter(prefix="/health", tags=["health"])

@router.get("")
async def health():
    """Renvoie un OK minimal avec le nom de service configuré."""
    return {"ok": True, "service": settings.APP_NAME}

@router.get("/backend")
async def health_backend():
    """
    Vérifie la disponibilité du backend de jeu en mesurant une latence simple
    (lecture du catalogue d'épreuves).
    """
    t0 = time.perf_counter()
    try:
        events = await call_remote(backend_client.CLIENT.list_events)
        dt = time.perf_counter() - t0
        return {
            "ok": True,
            "backend_url": settings.BACKEND_URL,
            "latency_s": round(dt, 3),
            "events": len(events),
        }
    except RemoteUnavailable as e:
        dt = time.perf_counter() - t0
        return {
            "ok": False,
            "backend_url": settings.BACKEND_URL,
            "latency_s": round(dt, 3),
            "error": str(e),
        }
