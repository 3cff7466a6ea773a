"""
Service: roster_manager.py
Rôle:
- Construire et muter le roster de la session de préparation.

Opérations:
- generate(count): remplacement complet du roster par `count` joueurs générés à distance,
  ou synthétisés localement si le service est indisponible (jamais de roster partiel).
- add_player(record): ajout d'un joueur personnalisé (défauts complétés, origin=custom).
- convert_celebrity(source): célébrité / ancien gagnant → joueur (idempotent par celebrity_id).
- remove(player_id), clear().

Concurrence:
- Chaque appel à generate() capture une époque croissante; seul le résultat de l'appel le
  plus récent est appliqué, les résultats périmés sont ignorés.
"""
from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

from pydantic import ValidationError

from arena_setup.models.celebrity import CelebrityRecord
from arena_setup.models.player import (
    CELEBRITY_UNIFORM,
    Player,
    PlayerOrigin,
    Portrait,
    Role,
    display_number,
)
from arena_setup.services import backend_client
from arena_setup.services.backend_client import RemoteUnavailable, call_remote
from arena_setup.services.player_factory import FACTORY, PlayerFactory, new_player_id
from arena_setup.services.session_config import SessionConfig

logger = logging.getLogger(__name__)

REVEAL_BATCH = 20

# Champs repris d'une fiche distante / personnalisée (le reste est imposé)
_PROFILE_FIELDS = ("name", "nationality", "gender", "age", "role", "stats", "portrait", "uniform", "biography")

_CATEGORY_ROLES = {
    "Sportifs": Role.SPORTIF,
    "Scientifiques": Role.INTELLIGENT,
}


def role_for_category(category: Optional[str]) -> Role:
    """Rôle dérivé de la catégorie de célébrité (défaut: normal)."""
    return _CATEGORY_ROLES.get(category or "", Role.NORMAL)


def _profile(record: Dict[str, Any]) -> Dict[str, Any]:
    return {k: record[k] for k in _PROFILE_FIELDS if record.get(k) is not None}


@dataclass
class GenerationResult:
    players: List[Player]
    fallback_used: bool
    applied: bool
    epoch: int


class RosterManager:
    def __init__(
        self,
        config: SessionConfig,
        client: Any = None,
        factory: Optional[PlayerFactory] = None,
    ) -> None:
        self.config = config
        self.client = client or backend_client.CLIENT
        self.factory = factory or FACTORY
        self._epoch = 0

    @property
    def players(self) -> List[Player]:
        return self.config.players

    # ------------------------------------------------------------------
    # Génération
    # ------------------------------------------------------------------
    def _normalize_generated(self, raw: List[Dict[str, Any]], count: int) -> List[Player]:
        """Fiches distantes → joueurs (ids réémis si absents/dupliqués, numéros 001..count)."""
        if len(raw) != count:
            raise RemoteUnavailable(f"generate-players returned {len(raw)} records, expected {count}")
        seen = set()
        players: List[Player] = []
        for position, record in enumerate(raw, start=1):
            pid = str(record.get("id") or "")
            if not pid or pid in seen:
                pid = new_player_id()
            seen.add(pid)
            try:
                players.append(
                    Player(
                        id=pid,
                        number=display_number(position),
                        origin=PlayerOrigin.GENERATED,
                        **_profile(record),
                    )
                )
            except ValidationError as exc:
                raise RemoteUnavailable(f"invalid generated player at position {position}") from exc
        return players

    async def generate(
        self,
        count: int,
        *,
        progress: Optional[Callable[[int], None]] = None,
        rng: Optional[random.Random] = None,
    ) -> GenerationResult:
        if count < 0:
            raise ValueError("count must be >= 0")
        self._epoch += 1
        epoch = self._epoch

        fallback = False
        try:
            raw = await call_remote(self.client.generate_players, count)
            players = self._normalize_generated(raw, count)
        except RemoteUnavailable:
            logger.warning(
                "Remote player generation unavailable, using local fallback",
                exc_info=True,
                extra={"setup_id": self.config.setup_id, "count": count, "epoch": epoch},
            )
            players = self.factory.synthesize(count, rng)
            fallback = True

        if epoch != self._epoch:
            logger.info(
                "Discarding stale generation result",
                extra={"setup_id": self.config.setup_id, "epoch": epoch, "latest_epoch": self._epoch},
            )
            return GenerationResult(players=players, fallback_used=fallback, applied=False, epoch=epoch)

        self.config.players = players
        self.config.fallback_used = fallback
        self.config.log_event("players_generated", {"count": count, "fallback": fallback, "epoch": epoch})
        if progress:
            for revealed in range(REVEAL_BATCH, count, REVEAL_BATCH):
                progress(revealed)
            progress(count)
        return GenerationResult(players=players, fallback_used=fallback, applied=True, epoch=epoch)

    # ------------------------------------------------------------------
    # Mutations manuelles
    # ------------------------------------------------------------------
    def _next_number(self) -> str:
        return display_number(len(self.config.players) + 1)

    def add_player(self, record: Dict[str, Any]) -> Player:
        """
        Ajoute un joueur personnalisé.
        - id neuf et numéro suivant imposés, cycle de vie réinitialisé.
        - stats / portrait / tenue par défaut si absents (tenue verte "Standard").
        Lève ValidationError si la fiche est inexploitable (ex: nom manquant).
        """
        player = Player(
            id=new_player_id(),
            number=self._next_number(),
            origin=PlayerOrigin.CUSTOM,
            **_profile(record),
        )
        self.config.players.append(player)
        self.config.log_event("player_added", {"player_id": player.id, "name": player.name})
        return player

    def find_by_celebrity(self, celebrity_id: Any) -> Optional[Player]:
        target = str(celebrity_id)
        for player in self.config.players:
            if player.celebrity_id is not None and str(player.celebrity_id) == target:
                return player
        return None

    def convert_celebrity(
        self,
        source: CelebrityRecord,
        *,
        past_winner: bool = False,
        rng: Optional[random.Random] = None,
    ) -> Tuple[Player, bool]:
        """
        Convertit une célébrité (ou un ancien gagnant) en joueur du roster.
        Retourne (joueur, ajouté); si la célébrité est déjà présente, aucun ajout.
        """
        existing = self.find_by_celebrity(source.id)
        if existing is not None:
            return existing, False

        rng = rng or random.Random()
        default_wins = 1 if past_winner else 0
        player = Player(
            id=new_player_id(),
            number=self._next_number(),
            name=source.name,
            nationality=source.nationality,
            gender=rng.choice(["M", "F"]),
            age=25 + rng.randrange(20),
            role=role_for_category(source.category),
            stats=source.stats.model_copy(),
            portrait=Portrait(),
            uniform=CELEBRITY_UNIFORM.model_copy(),
            origin=PlayerOrigin.CELEBRITY,
            celebrity_id=source.id,
            category=source.category,
            stars=source.stars,
            wins=source.wins or default_wins,
            biography=source.biography,
        )
        self.config.players.append(player)
        self.config.log_event(
            "celebrity_added",
            {"player_id": player.id, "celebrity_id": source.id, "past_winner": past_winner},
        )
        return player, True

    def remove(self, player_id: str) -> Player:
        """Retire un joueur (KeyError si inconnu)."""
        for index, player in enumerate(self.config.players):
            if player.id == player_id:
                del self.config.players[index]
                self.config.log_event("player_removed", {"player_id": player_id})
                return player
        raise KeyError(player_id)

    def clear(self) -> int:
        removed = len(self.config.players)
        self.config.players = []
        self.config.log_event("roster_cleared", {"removed": removed})
        return removed
