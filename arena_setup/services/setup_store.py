"""
Setup store registry
====================

Une entrée par visite de l'écran de préparation: l'agrégat `SessionConfig` et les
composants qui le mutent (roster, catalogue, célébrités, lancement).
Les instances vivent en mémoire; `drop_setup` correspond à la sortie de l'écran.
"""
from __future__ import annotations

from dataclasses import dataclass
from threading import RLock
from typing import Any, Dict, Iterable, Optional
from uuid import uuid4

import anyio

from arena_setup.services import backend_client
from arena_setup.services.celebrity_directory import CelebrityDirectory
from arena_setup.services.event_catalog import EventCatalog
from arena_setup.services.launch_orchestrator import LaunchOrchestrator
from arena_setup.services.roster_manager import RosterManager
from arena_setup.services.session_config import SessionConfig

_SETUPS: Dict[str, "SetupScreen"] = {}
_LOCK = RLock()


@dataclass
class SetupScreen:
    config: SessionConfig
    roster: RosterManager
    catalog: EventCatalog
    celebrities: CelebrityDirectory
    launcher: LaunchOrchestrator

    @property
    def setup_id(self) -> str:
        return self.config.setup_id

    async def enter(self) -> None:
        """Chargements d'entrée d'écran (catalogue, célébrités, anciens gagnants) en parallèle."""
        async with anyio.create_task_group() as tg:
            tg.start_soon(self.catalog.load)
            tg.start_soon(self.celebrities.load)

    def release(self) -> None:
        """Libère la remise d'exécution éventuellement conservée pour cette partie."""
        game_id = self.config.game_id
        if game_id is not None:
            self.launcher.consumer.pop(game_id)


def build_setup(
    setup_id: str,
    budget: int,
    owned_celebrity_ids: Iterable[Any] = (),
    *,
    client: Any = None,
    consumer: Any = None,
) -> SetupScreen:
    """Assemble un écran de préparation sans l'enregistrer."""
    client = client or backend_client.CLIENT
    config = SessionConfig(setup_id=setup_id, budget=budget, owned_celebrity_ids=list(owned_celebrity_ids))
    catalog = EventCatalog(config, client=client)
    return SetupScreen(
        config=config,
        roster=RosterManager(config, client=client),
        catalog=catalog,
        celebrities=CelebrityDirectory(config, client=client),
        launcher=LaunchOrchestrator(config, catalog, client=client, consumer=consumer),
    )


def create_setup(
    budget: int,
    owned_celebrity_ids: Iterable[Any] = (),
    *,
    setup_id: Optional[str] = None,
    player_count: Optional[int] = None,
    game_mode: Optional[str] = None,
    client: Any = None,
    consumer: Any = None,
) -> SetupScreen:
    """
    Crée et enregistre une nouvelle session de préparation (vide).
    KeyError si `game_mode` est inconnu; rien n'est enregistré dans ce cas.
    """
    sid = (setup_id or uuid4().hex).strip() or uuid4().hex
    screen = build_setup(sid, budget, owned_celebrity_ids, client=client, consumer=consumer)
    if player_count is not None:
        screen.config.set_player_count(player_count)
    if game_mode:
        screen.config.set_game_mode(game_mode)
    with _LOCK:
        _SETUPS[sid] = screen
    return screen


def get_setup(setup_id: str) -> Optional[SetupScreen]:
    with _LOCK:
        return _SETUPS.get(setup_id)


def drop_setup(setup_id: str) -> bool:
    """Retire la session (sortie d'écran) et sa remise d'exécution. True si elle existait."""
    with _LOCK:
        screen = _SETUPS.pop(setup_id, None)
    if screen is None:
        return False
    screen.release()
    return True
