"""
Models / launch.py
Rôle:
- Instantanés immuables produits au lancement d'une partie.

Champs:
- FinalizedConfig: configuration figée au moment de la soumission (corps de la requête
  de création dérivé de cet objet).
- LaunchOptions: métadonnées transmises au consommateur d'exécution.
- ExecutionHandoff: paquet complet remis à l'étape d'exécution.
"""
from typing import Any, Dict, Tuple

from pydantic import BaseModel, ConfigDict

from arena_setup.models.event import Event
from arena_setup.models.player import Player, RecordId


class FinalizedConfig(BaseModel):
    game_mode: str
    preserve_event_order: bool
    players: Tuple[Player, ...]
    selected_event_ids: Tuple[RecordId, ...]

    model_config = ConfigDict(frozen=True)

    def creation_payload(self) -> Dict[str, Any]:
        """Corps de `POST /api/games/create`."""
        return {
            "player_count": len(self.players),
            "game_mode": self.game_mode,
            "selected_events": list(self.selected_event_ids),
            "all_players": [p.submission_record() for p in self.players],
            "preserve_event_order": self.preserve_event_order,
        }


class LaunchOptions(BaseModel):
    preserve_event_order: bool
    game_mode: str
    selected_event_ids: Tuple[RecordId, ...]
    game_id: RecordId

    model_config = ConfigDict(frozen=True)


class ExecutionHandoff(BaseModel):
    roster: Tuple[Player, ...]
    events: Tuple[Event, ...]
    options: LaunchOptions

    model_config = ConfigDict(frozen=True)
