"""
Service: cost_model.py
Rôle:
- Calcul du coût d'une partie et de sa faisabilité budgétaire (fonctions pures, entiers).

Barème:
- base: constante par mode ("standard" = 100 000)
- joueurs: 100 par joueur du roster
- épreuves: 5 000 par épreuve sélectionnée
"""
from dataclasses import dataclass
from typing import Any, Dict

DEFAULT_MODE = "standard"

GAME_MODES: Dict[str, Dict[str, Any]] = {
    "standard": {
        "name": "Standard",
        "cost": 100_000,
        "description": "Jeu classique avec épreuves variées",
    },
}

PLAYER_UNIT_COST = 100
EVENT_UNIT_COST = 5_000


def base_cost(mode: str) -> int:
    """Coût fixe du mode (KeyError si mode inconnu)."""
    return int(GAME_MODES[mode]["cost"])


def player_cost(roster_size: int) -> int:
    return roster_size * PLAYER_UNIT_COST


def event_cost(selected_count: int) -> int:
    return selected_count * EVENT_UNIT_COST


def total_cost(mode: str, roster_size: int, selected_count: int) -> int:
    return base_cost(mode) + player_cost(roster_size) + event_cost(selected_count)


def affordable(total: int, budget: int) -> bool:
    """Borne incluse: un budget égal au coût suffit."""
    return budget >= total


def shortfall(total: int, budget: int) -> int:
    return max(0, total - budget)


@dataclass(frozen=True)
class CostBreakdown:
    mode: str
    base: int
    players: int
    events: int
    total: int
    budget: int
    affordable: bool
    shortfall: int


def breakdown(mode: str, roster_size: int, selected_count: int, budget: int) -> CostBreakdown:
    total = total_cost(mode, roster_size, selected_count)
    return CostBreakdown(
        mode=mode,
        base=base_cost(mode),
        players=player_cost(roster_size),
        events=event_cost(selected_count),
        total=total,
        budget=budget,
        affordable=affordable(total, budget),
        shortfall=shortfall(total, budget),
    )
