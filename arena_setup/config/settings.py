"""
Configuration de l'application (Settings)
=========================================

Rôle
----
- Centraliser les paramètres du service de préparation de partie
  (nom, URL du backend de jeu, timeouts HTTP, bornes de configuration).
- Les valeurs par défaut conviennent pour un environnement de dev local.
- Les variables peuvent être surchargées via un fichier `.env` ou l'environnement.

Intégrations
------------
- `pydantic-settings` charge automatiquement les variables d'env et `.env`.
- Les services/routers importent `from arena_setup.config.settings import settings`.

Bonnes pratiques
----------------
- `BACKEND_URL` pointe par défaut vers le backend de jeu local (http://localhost:8001).
- `DATA_DIR` calcule un chemin relatif au repo : `<repo>/arena_setup/data`.

Exemples de `.env`
------------------
APP_NAME="Arena Setup (Staging)"
BACKEND_URL="http://game-backend:8001"
HTTP_READ_TIMEOUT=20
PLAYER_COUNT_DEFAULT=150
"""
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict
import os


class Settings(BaseSettings):
    # Nom du service (apparaît dans /health)
    APP_NAME: str = "Arena Setup Backend"
    # Backend de jeu (génération joueurs, épreuves, création de partie, groupes, célébrités)
    BACKEND_URL: str = "http://localhost:8001"
    HTTP_CONNECT_TIMEOUT: float = 5.0
    HTTP_READ_TIMEOUT: float = 30.0
    # Nombre de tentatives pour les appels idempotents (GET + génération)
    HTTP_RETRIES: int = 3

    # Répertoire des fichiers de données (pool de noms pour la génération locale)
    DATA_DIR: str = os.path.join(os.path.dirname(os.path.dirname(__file__)), "data")

    # Bornes du nombre de joueurs configurable sur l'écran de préparation
    PLAYER_COUNT_MIN: int = 20
    PLAYER_COUNT_MAX: int = 1000
    PLAYER_COUNT_DEFAULT: int = 100

    # Épreuves
    RANDOM_EVENT_COUNT: int = 8
    DEFAULT_EVENT_DURATION: int = 300  # secondes, si survival_time_max absent
    KILL_REQUIRED_THRESHOLD: float = 0.7

    # Frontends autorisés (CORS)
    ALLOWED_ORIGINS: List[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


# Instance unique importable partout : `settings`
settings = Settings()
