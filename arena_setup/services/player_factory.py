"""
Service: player_factory.py
Rôle:
- Synthèse locale de joueurs quand le service distant de génération est indisponible.
- Tirage aléatoire nom / nationalité / genre / rôle / stats / portrait.

Fichier source:
- data/player_pool.json → {"nationalities": {nat: {first_names: {M,F}, last_names}},
                           "roles": {role: poids}, "skin_colors", "hairstyles", ...}

Remarque:
- La numérotation est séquentielle (position 1..n → "001".."n").
- `rng` injectable pour des tirages reproductibles (tests).
"""
import random
from pathlib import Path
from typing import Any, Dict, List, Optional
from uuid import uuid4

import orjson

from arena_setup.config.settings import settings
from arena_setup.models.player import (
    Player,
    PlayerOrigin,
    PlayerStats,
    Portrait,
    Role,
    display_number,
)

POOL_PATH = Path(settings.DATA_DIR) / "player_pool.json"

_MINIMAL_POOL: Dict[str, Any] = {
    "nationalities": {
        "Coréenne": {
            "first_names": {"M": ["Gi-hun"], "F": ["Sae-byeok"]},
            "last_names": ["Seong", "Kang"],
        }
    },
    "roles": {"normal": 1.0},
}


def new_player_id() -> str:
    """Identifiant unique de joueur (hex uuid4)."""
    return uuid4().hex


def _stats_for_role(role: Role, rng: random.Random) -> PlayerStats:
    """Stats 0..100 biaisées selon le rôle."""
    def r(lo: int, hi: int) -> int:
        return rng.randint(lo, hi)

    if role == Role.SPORTIF:
        return PlayerStats(intelligence=r(30, 70), force=r(70, 100), agilite=r(70, 100))
    if role == Role.INTELLIGENT:
        return PlayerStats(intelligence=r(75, 100), force=r(20, 60), agilite=r(30, 70))
    if role == Role.ZERO:
        return PlayerStats(intelligence=r(5, 30), force=r(5, 30), agilite=r(5, 30))
    if role == Role.BRUTE:
        return PlayerStats(intelligence=r(10, 40), force=r(80, 100), agilite=r(30, 60))
    if role == Role.PEUREUX:
        return PlayerStats(intelligence=r(40, 70), force=r(10, 40), agilite=r(60, 95))
    return PlayerStats(intelligence=r(30, 80), force=r(30, 80), agilite=r(30, 80))


class PlayerFactory:
    """Générateur local de joueurs (pool de noms chargé depuis le JSON de données)."""

    def __init__(self, pool_path: Path = POOL_PATH):
        self.pool_path = pool_path
        self.pool: Dict[str, Any] = {}
        self.load()

    def load(self) -> None:
        """Charge le pool; repli sur un pool minimal si le fichier est absent."""
        if self.pool_path.exists():
            self.pool = orjson.loads(self.pool_path.read_bytes())
        else:
            self.pool = dict(_MINIMAL_POOL)

    def _pick_role(self, rng: random.Random) -> Role:
        weights: Dict[str, float] = self.pool.get("roles") or {"normal": 1.0}
        names = list(weights.keys())
        picked = rng.choices(names, weights=[float(weights[n]) for n in names], k=1)[0]
        try:
            return Role(picked)
        except ValueError:
            return Role.NORMAL

    def _portrait(self, rng: random.Random) -> Portrait:
        base = Portrait()
        return Portrait(
            face_shape=rng.choice(self.pool.get("face_shapes") or [base.face_shape]),
            skin_color=rng.choice(self.pool.get("skin_colors") or [base.skin_color]),
            hairstyle=rng.choice(self.pool.get("hairstyles") or [base.hairstyle]),
            hair_color=rng.choice(self.pool.get("hair_colors") or [base.hair_color]),
        )

    def random_player(self, position: int, rng: Optional[random.Random] = None) -> Player:
        """Tire un joueur complet à la position `position` (1-based)."""
        rng = rng or random.Random()
        nationalities: Dict[str, Any] = self.pool["nationalities"]
        nationality = rng.choice(sorted(nationalities.keys()))
        names = nationalities[nationality]
        gender = rng.choice(["M", "F"])
        first = rng.choice(names["first_names"][gender])
        last = rng.choice(names["last_names"])
        role = self._pick_role(rng)
        return Player(
            id=new_player_id(),
            number=display_number(position),
            name=f"{first} {last}",
            nationality=nationality,
            gender=gender,
            age=rng.randint(18, 65),
            role=role,
            stats=_stats_for_role(role, rng),
            portrait=self._portrait(rng),
            origin=PlayerOrigin.GENERATED,
        )

    def synthesize(self, count: int, rng: Optional[random.Random] = None) -> List[Player]:
        """Génère exactement `count` joueurs numérotés 001..count."""
        rng = rng or random.Random()
        return [self.random_player(i, rng) for i in range(1, count + 1)]


FACTORY = PlayerFactory()
