"""
Service: execution_handoff.py
Rôle:
- Consommateur d'exécution par défaut: reçoit la configuration finalisée
  (roster, épreuves ordonnées, options) et la conserve par id de partie,
  le temps que l'étape d'exécution la récupère.

Interface attendue par LaunchOrchestrator:
- consumer.receive(roster, ordered_events, options) -> ExecutionHandoff
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from threading import RLock
from typing import Any, Dict, Optional, Sequence

from arena_setup.models.event import Event
from arena_setup.models.launch import ExecutionHandoff, LaunchOptions
from arena_setup.models.player import Player

logger = logging.getLogger(__name__)


@dataclass
class HandoffRegistry:
    _lock: RLock = field(default_factory=RLock, init=False, repr=False)
    handoffs: Dict[str, ExecutionHandoff] = field(default_factory=dict)

    def receive(
        self,
        roster: Sequence[Player],
        ordered_events: Sequence[Event],
        options: LaunchOptions,
    ) -> ExecutionHandoff:
        handoff = ExecutionHandoff(roster=tuple(roster), events=tuple(ordered_events), options=options)
        with self._lock:
            self.handoffs[str(options.game_id)] = handoff
        logger.info(
            "Execution handoff received",
            extra={"game_id": options.game_id, "players": len(roster), "events": len(ordered_events)},
        )
        return handoff

    def get(self, game_id: Any) -> Optional[ExecutionHandoff]:
        with self._lock:
            return self.handoffs.get(str(game_id))

    def pop(self, game_id: Any) -> Optional[ExecutionHandoff]:
        with self._lock:
            return self.handoffs.pop(str(game_id), None)


HANDOFFS = HandoffRegistry()
