"""
Service: event_catalog.py
Rôle:
- Charger le catalogue d'épreuves distant et le normaliser (Event).
- Gérer la sélection ordonnée (ordre = ordre de toggle, sans doublon).

Normalisation:
- category = type distant ("autre" si absent)
- duration = survival_time_max ou DEFAULT_EVENT_DURATION
- difficulty bornée à 1..5, elimination_rate bornée à [0, 1]
- kill_required = elimination_rate > KILL_REQUIRED_THRESHOLD (informatif)

Remarques:
- En cas d'échec de chargement, le catalogue devient vide: aucun jeu de données
  intégré n'est substitué (un catalogue vide bloque le lancement).
- La politique d'ordre ("mon ordre" / "finales à la fin") n'est qu'une métadonnée
  transmise à la création: la sélection n'est jamais réordonnée localement.
"""
from __future__ import annotations

import logging
import random
from typing import Any, Dict, Iterable, List, Optional

from pydantic import ValidationError

from arena_setup.config.settings import settings
from arena_setup.models.event import Event
from arena_setup.models.player import RecordId
from arena_setup.services import backend_client
from arena_setup.services.backend_client import RemoteUnavailable, call_remote
from arena_setup.services.session_config import SessionConfig

logger = logging.getLogger(__name__)

DEFAULT_CATEGORY = "autre"


def _clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


def normalize_event(record: Dict[str, Any]) -> Optional[Event]:
    """Fiche distante → Event, ou None si la fiche est inexploitable."""
    event_id = record.get("id")
    if event_id is None:
        logger.warning("Skipping event without id", extra={"event_name": record.get("name")})
        return None
    try:
        rate = _clamp(float(record.get("elimination_rate") or 0.0), 0.0, 1.0)
        difficulty = int(_clamp(int(record.get("difficulty") or 1), 1, 5))
        kind = str(record.get("type") or DEFAULT_CATEGORY)
        return Event(
            id=event_id,
            name=str(record.get("name") or f"Épreuve {event_id}"),
            type=kind,
            category=kind,
            difficulty=difficulty,
            elimination_rate=rate,
            is_final=bool(record.get("is_final", False)),
            description=str(record.get("description") or ""),
            duration=int(record.get("survival_time_max") or settings.DEFAULT_EVENT_DURATION),
            kill_required=rate > settings.KILL_REQUIRED_THRESHOLD,
            decor=record.get("decor"),
            death_animations=record.get("death_animations"),
            special_mechanics=record.get("special_mechanics"),
        )
    except (TypeError, ValueError, ValidationError):
        logger.warning("Skipping malformed event", exc_info=True, extra={"event_id": event_id})
        return None


class EventCatalog:
    def __init__(self, config: SessionConfig, client: Any = None) -> None:
        self.config = config
        self.client = client or backend_client.CLIENT

    @property
    def events(self) -> List[Event]:
        return self.config.events

    @property
    def selection(self) -> List[RecordId]:
        """Sélection courante, dans l'ordre de toggle (copie)."""
        return list(self.config.selection)

    async def load(self) -> int:
        """Recharge le catalogue distant; retourne le nombre d'épreuves chargées."""
        try:
            raw = await call_remote(self.client.list_events)
        except RemoteUnavailable:
            logger.error(
                "Event catalog unavailable, catalog left empty",
                exc_info=True,
                extra={"setup_id": self.config.setup_id},
            )
            self.config.events = []
            self.config.catalog_load_failed = True
            self.config.log_event("catalog_load_failed")
            return 0

        events = [e for e in (normalize_event(r) for r in raw) if e is not None]
        self.config.events = events
        self.config.catalog_load_failed = False
        self.config.log_event("catalog_loaded", {"count": len(events)})
        logger.info("Event catalog loaded", extra={"setup_id": self.config.setup_id, "count": len(events)})
        return len(events)

    def categorize(self) -> Dict[str, List[Event]]:
        """Regroupe les épreuves par catégorie (ordre de première apparition)."""
        groups: Dict[str, List[Event]] = {}
        for event in self.config.events:
            groups.setdefault(event.category or DEFAULT_CATEGORY, []).append(event)
        return groups

    def get(self, event_id: Any) -> Optional[Event]:
        target = str(event_id)
        for event in self.config.events:
            if str(event.id) == target:
                return event
        return None

    def is_selected(self, event_id: Any) -> bool:
        target = str(event_id)
        return any(str(i) == target for i in self.config.selection)

    def toggle(self, event_id: Any) -> bool:
        """
        Ajoute l'épreuve en fin de sélection si absente, la retire sinon.
        Retourne True si l'épreuve est sélectionnée après l'appel.
        KeyError si l'épreuve est inconnue du catalogue (et non sélectionnée).
        """
        target = str(event_id)
        if self.is_selected(target):
            self.config.selection = [i for i in self.config.selection if str(i) != target]
            self.config.log_event("event_unselected", {"event_id": event_id})
            return False

        event = self.get(target)
        if event is None:
            raise KeyError(event_id)
        self.config.selection.append(event.id)
        self.config.log_event("event_selected", {"event_id": event.id})
        return True

    def random_select(self, rng: Optional[random.Random] = None) -> List[RecordId]:
        """Remplace la sélection par un tirage uniforme sans doublon de min(8, taille) épreuves."""
        rng = rng or random.Random()
        k = min(settings.RANDOM_EVENT_COUNT, len(self.config.events))
        self.config.selection = [e.id for e in rng.sample(self.config.events, k)]
        self.config.log_event("events_random_selected", {"count": k})
        return list(self.config.selection)

    def resolve(self, event_ids: Iterable[Any]) -> List[Event]:
        """Ids → épreuves complètes dans l'ordre donné (ids inconnus ignorés)."""
        resolved: List[Event] = []
        for event_id in event_ids:
            event = self.get(event_id)
            if event is not None:
                resolved.append(event)
        return resolved
