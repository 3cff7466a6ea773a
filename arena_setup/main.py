"""
Application FastAPI — Point d'entrée
====================================

Rôle
----
- Instancie l'app FastAPI, configure le CORS pour le front,
- Monte les routeurs (préparation de partie + santé),
- Affiche la configuration backend et la liste des routes au démarrage.

Notes
-----
- Garder `settings.ALLOWED_ORIGINS` en phase avec les URLs du front.
- ⚠️ Le middleware CORS doit être ajouté AVANT les include_router.
"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from arena_setup.routes.health import router as health_router
from arena_setup.routes.setup import router as setup_router

from arena_setup.config.settings import settings

# --- App FastAPI principale  ---
app = FastAPI(title=settings.APP_NAME)

# ===========================
# CORS (dev: permissif)
# ===========================
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ===========================
# Montage des routers
# ===========================
app.include_router(setup_router)
app.include_router(health_router)

# --- Racine utile pour "ping" simple (sans /health) ---
@app.get("/")
async def root():
    """Ping basique : permet de vérifier que l'app tourne (sans appel au backend)."""
    return {"ok": True, "service": "arena-setup"}

# --- Hook de démarrage ---
@app.on_event("startup")
async def list_routes():
    """
    Au démarrage:
    - affiche l'URL du backend de jeu ciblé,
    - liste les routes (path + méthodes) dans la console (diagnostic).
    """
    print("== Backend config ==", settings.BACKEND_URL, settings.HTTP_CONNECT_TIMEOUT, settings.HTTP_READ_TIMEOUT)
    print("== Registered routes ==")
    for r in app.routes:
        methods = getattr(r, "methods", None)
        print(getattr(r, "path", r), methods or "")
