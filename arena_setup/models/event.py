"""
Models / event.py
Rôle:
- Définir l'épreuve normalisée telle qu'exposée par le catalogue de préparation.

Notes:
- `category` est dérivée du `type` distant.
- Les bornes (`difficulty` 1..5, `elimination_rate` 0..1) sont garanties par la
  normalisation du catalogue; le modèle les revalide.
- `kill_required` est purement informatif (taux d'élimination > seuil).
"""
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from arena_setup.models.player import RecordId


class Event(BaseModel):
    """Épreuve disponible pour la partie."""
    id: RecordId
    name: str
    type: str
    category: str
    difficulty: int = Field(ge=1, le=5)
    elimination_rate: float = Field(ge=0.0, le=1.0)
    is_final: bool = False
    description: str = ""
    duration: int = 300
    kill_required: bool = False
    decor: Optional[Any] = None
    death_animations: Optional[Any] = None
    special_mechanics: Optional[Any] = None

    model_config = ConfigDict(frozen=True)
