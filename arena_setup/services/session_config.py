"""
Service: session_config.py
Rôle:
- Agrégat unique de configuration d'une visite de l'écran de préparation:
  mode, nombre de joueurs visé, roster, catalogue, sélection ordonnée, politique d'ordre,
  budget, célébrités possédées et, après soumission, l'id de partie distante.

Cycle de vie:
- créé vide à l'entrée de l'écran (setup_store.create_setup),
- muté uniquement via RosterManager / EventCatalog / CelebrityDirectory / LaunchOrchestrator,
- figé (FinalizedConfig) à la soumission, puis abandonné à la sortie de l'écran.

Journal:
- `log_event(kind, payload)` garde une trace en mémoire (diagnostic), bornée.
"""
from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from arena_setup.config.settings import settings
from arena_setup.models.celebrity import CelebrityRecord
from arena_setup.models.event import Event
from arena_setup.models.player import Player, RecordId
from arena_setup.services import cost_model

MAX_LOG_EVENTS = 500

STAGE_SETUP = "setup"
STAGE_EXECUTION = "execution"


def clamp_player_count(count: int) -> int:
    return max(settings.PLAYER_COUNT_MIN, min(settings.PLAYER_COUNT_MAX, int(count)))


@dataclass
class SessionConfig:
    setup_id: str
    budget: int
    owned_celebrity_ids: List[RecordId] = field(default_factory=list)

    game_mode: str = cost_model.DEFAULT_MODE
    player_count: int = settings.PLAYER_COUNT_DEFAULT
    preserve_event_order: bool = True

    players: List[Player] = field(default_factory=list)
    events: List[Event] = field(default_factory=list)
    selection: List[RecordId] = field(default_factory=list)
    celebrities: List[CelebrityRecord] = field(default_factory=list)
    past_winners: List[CelebrityRecord] = field(default_factory=list)

    fallback_used: bool = False
    catalog_load_failed: bool = False
    game_id: Optional[RecordId] = None
    stage: str = STAGE_SETUP
    log: List[Dict[str, Any]] = field(default_factory=list)

    def set_player_count(self, count: int) -> int:
        self.player_count = clamp_player_count(count)
        return self.player_count

    def set_game_mode(self, mode: str) -> None:
        """Change le mode; KeyError si le mode n'existe pas."""
        cost_model.base_cost(mode)
        self.game_mode = mode

    def owns_celebrity(self, celebrity_id: Any) -> bool:
        return str(celebrity_id) in {str(i) for i in self.owned_celebrity_ids}

    def log_event(self, kind: str, payload: Optional[Dict[str, Any]] = None) -> None:
        self.log.append({"kind": kind, "payload": payload or {}, "ts": time.time()})
        if len(self.log) > MAX_LOG_EVENTS:
            del self.log[: len(self.log) - MAX_LOG_EVENTS]
