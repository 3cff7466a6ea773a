"""
Service: backend_client.py
- Centralise les appels HTTP vers le backend de jeu (génération de joueurs, catalogue
  d'épreuves, création de partie, groupes pré-configurés, célébrités, anciens gagnants).
- Toute défaillance réseau / HTTP / JSON est remontée sous une seule forme: `RemoteUnavailable`.

Retries:
- Appels idempotents (GET + génération de joueurs): retries avec backoff exponentiel.
- Création de partie et application des groupes: jamais rejoués (pas de double création).
"""
import logging
from functools import partial
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple
from uuid import uuid4

import anyio
import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from arena_setup.config.settings import settings

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT: Tuple[float, float] = (settings.HTTP_CONNECT_TIMEOUT, settings.HTTP_READ_TIMEOUT)

GENERATE_PLAYERS_PATH = "/api/games/generate-players"
EVENTS_PATH = "/api/games/events/available"
CREATE_GAME_PATH = "/api/games/create"
APPLY_GROUPS_PATH = "/api/games/{game_id}/groups/apply-preconfigured"
OWNED_CELEBRITIES_PATH = "/api/celebrities/owned"
PAST_WINNERS_PATH = "/api/statistics/winners"


class RemoteUnavailable(RuntimeError):
    """Erreur encapsulant un échec de communication avec le backend de jeu."""


class BackendClient:
    """
    Client HTTP centralisé pour le backend de jeu.
    - Deux sessions: une avec retries (lectures, génération), une sans (soumissions).
    - Journalise chaque requête avec un identifiant de corrélation.
    """

    def __init__(
        self,
        base_url: str,
        *,
        session: Optional[requests.Session] = None,
        submit_session: Optional[requests.Session] = None,
        timeout: Tuple[float, float] = DEFAULT_TIMEOUT,
        retries: int = settings.HTTP_RETRIES,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.session = session or self._build_session(retries)
        self.submit_session = submit_session or self._build_session(0)
        self.timeout = timeout

    @staticmethod
    def _build_session(retries: int) -> requests.Session:
        session = requests.Session()
        retry = Retry(
            total=retries,
            backoff_factor=0.5,
            status_forcelist=(429, 500, 502, 503, 504),
            allowed_methods=frozenset({"GET", "POST"}),
            respect_retry_after_header=True,
            raise_on_status=False,
        )
        adapter = HTTPAdapter(max_retries=retry)
        session.mount("http://", adapter)
        session.mount("https://", adapter)
        return session

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def _request(
        self,
        method: str,
        path: str,
        *,
        request_id: str,
        session: Optional[requests.Session] = None,
        params: Optional[Dict[str, Any]] = None,
        payload: Optional[Dict[str, Any]] = None,
    ) -> Any:
        url = self._url(path)
        http = session or self.session
        try:
            logger.debug(
                "Backend request start",
                extra={"backend_url": url, "backend_method": method, "backend_request_id": request_id},
            )
            response = http.request(method, url, params=params, json=payload, timeout=self.timeout)
            response.raise_for_status()
        except requests.Timeout as exc:
            logger.warning(
                "Backend request timeout",
                extra={"backend_url": url, "backend_request_id": request_id},
            )
            raise RemoteUnavailable(f"{method} {path} timed out") from exc
        except requests.RequestException as exc:
            logger.error(
                "Backend request failed",
                exc_info=True,
                extra={"backend_url": url, "backend_request_id": request_id},
            )
            raise RemoteUnavailable(f"{method} {path} failed") from exc

        try:
            data = response.json()
        except ValueError as exc:
            logger.error(
                "Invalid JSON payload from backend",
                exc_info=True,
                extra={"backend_url": url, "backend_request_id": request_id},
            )
            raise RemoteUnavailable(f"{method} {path} returned invalid JSON") from exc
        logger.debug("Backend request success", extra={"backend_request_id": request_id})
        return data

    @staticmethod
    def _expect_list(data: Any, what: str) -> List[Dict[str, Any]]:
        if not isinstance(data, list):
            raise RemoteUnavailable(f"{what}: expected a JSON array, got {type(data).__name__}")
        return [item for item in data if isinstance(item, dict)]

    @staticmethod
    def _expect_object(data: Any, what: str) -> Dict[str, Any]:
        if not isinstance(data, dict):
            raise RemoteUnavailable(f"{what}: expected a JSON object, got {type(data).__name__}")
        return data

    # ------------------------------------------------------------------
    # Collaborateurs distants
    # ------------------------------------------------------------------
    def generate_players(self, count: int) -> List[Dict[str, Any]]:
        data = self._request(
            "POST",
            GENERATE_PLAYERS_PATH,
            params={"count": count},
            request_id=f"players-{uuid4().hex}",
        )
        return self._expect_list(data, "generate-players")

    def list_events(self) -> List[Dict[str, Any]]:
        data = self._request("GET", EVENTS_PATH, request_id=f"events-{uuid4().hex}")
        return self._expect_list(data, "events")

    def create_game(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        data = self._request(
            "POST",
            CREATE_GAME_PATH,
            payload=payload,
            session=self.submit_session,
            request_id=f"create-{uuid4().hex}",
        )
        return self._expect_object(data, "create-game")

    def apply_preconfigured_groups(self, game_id: Any) -> Dict[str, Any]:
        data = self._request(
            "POST",
            APPLY_GROUPS_PATH.format(game_id=game_id),
            session=self.submit_session,
            request_id=f"groups-{uuid4().hex}",
        )
        return self._expect_object(data, "apply-groups")

    def owned_celebrities(self, owned_ids: Iterable[Any]) -> List[Dict[str, Any]]:
        ids = [str(i) for i in owned_ids]
        if not ids:
            return []
        data = self._request(
            "GET",
            OWNED_CELEBRITIES_PATH,
            params={"ids": ",".join(ids)},
            request_id=f"celebrities-{uuid4().hex}",
        )
        return self._expect_list(data, "owned-celebrities")

    def past_winners(self) -> List[Dict[str, Any]]:
        data = self._request("GET", PAST_WINNERS_PATH, request_id=f"winners-{uuid4().hex}")
        return self._expect_list(data, "past-winners")


CLIENT = BackendClient(settings.BACKEND_URL)


async def call_remote(func: Callable[..., Any], *args: Any) -> Any:
    """Exécute un appel bloquant du client dans un thread worker (la boucle reste libre)."""
    return await anyio.to_thread.run_sync(partial(func, *args))
