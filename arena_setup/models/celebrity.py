"""
Models / celebrity.py
Rôle:
- Fiche d'une célébrité possédée ou d'un ancien gagnant (même forme côté API).
- Les champs descriptifs à null côté distant reprennent leur valeur par défaut.
"""
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from arena_setup.models.player import PlayerStats, RecordId

# champs dont un null distant retombe sur la valeur par défaut
_NULLABLE_DEFAULTS = ("category", "stars", "nationality", "stats", "biography")


class CelebrityRecord(BaseModel):
    id: RecordId
    name: str
    category: str = ""
    stars: int = 0
    nationality: str = "Inconnue"
    stats: PlayerStats = Field(default_factory=PlayerStats)
    wins: Optional[int] = None
    biography: str = ""

    model_config = ConfigDict(extra="allow")

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if not (k in _NULLABLE_DEFAULTS and v is None)}
        return data
