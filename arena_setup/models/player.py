"""
Models / player.py
Rôle:
- Schéma unique d'un joueur du roster, quelle que soit son origine
  (généré, personnalisé, célébrité / ancien gagnant).

Notes:
- `origin` est le discriminant; les convertisseurs remplissent les valeurs par défaut,
  les consommateurs n'ont jamais à distinguer les formes.
- La stat d'agilité s'appelle `agilité` côté API (alias pydantic).
- `submission_record()` produit la fiche envoyée au service de création de partie.
"""
from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Les services distants renvoient des ids entiers ou chaînes; on conserve le type d'origine.
RecordId = Union[int, str]


class Role(str, Enum):
    NORMAL = "normal"
    SPORTIF = "sportif"
    INTELLIGENT = "intelligent"
    ZERO = "zero"
    BRUTE = "brute"
    PEUREUX = "peureux"


class PlayerOrigin(str, Enum):
    GENERATED = "generated"
    CUSTOM = "custom"
    CELEBRITY = "celebrity"


class PlayerStats(BaseModel):
    intelligence: int = 50
    force: int = 50
    agilite: int = Field(default=50, alias="agilité")

    model_config = ConfigDict(populate_by_name=True, extra="allow")


class Portrait(BaseModel):
    face_shape: str = "Ovale"
    skin_color: str = "#F4B980"
    hairstyle: str = "Cheveux courts"
    hair_color: str = "#2C1B18"
    eye_color: str = "#654321"
    eye_shape: str = "Amande"

    model_config = ConfigDict(extra="allow")


class Uniform(BaseModel):
    """Tenue; le défaut (vert) distingue les joueurs personnalisés."""
    style: str = "Standard"
    color: str = "#00FF00"
    pattern: str = "Uni"

    model_config = ConfigDict(extra="allow")


# Tenue appliquée aux célébrités et anciens gagnants
CELEBRITY_UNIFORM = Uniform(style="Classic", color="Rouge", pattern="Uni")


def display_number(position: int) -> str:
    """Numéro d'affichage zéro-paddé sur 3 chiffres minimum (1 -> "001")."""
    return str(position).zfill(3)


class Player(BaseModel):
    """Joueur du roster (schéma unifié)."""
    id: str
    number: str
    name: str
    nationality: str = "Inconnue"
    gender: str = "M"
    age: Optional[int] = None
    role: Role = Role.NORMAL
    stats: PlayerStats = Field(default_factory=PlayerStats)
    portrait: Portrait = Field(default_factory=Portrait)
    uniform: Uniform = Field(default_factory=Uniform)

    origin: PlayerOrigin = PlayerOrigin.GENERATED
    celebrity_id: Optional[RecordId] = None
    category: Optional[str] = None
    stars: Optional[int] = None
    wins: Optional[int] = None
    biography: Optional[str] = None

    # cycle de vie (toujours réinitialisé à la création)
    alive: bool = True
    kills: int = 0
    betrayals: int = 0
    survived_events: int = 0
    total_score: int = 0

    @field_validator("role", mode="before")
    @classmethod
    def _coerce_role(cls, value: Any) -> Any:
        # rôle inconnu côté serveur -> "normal"
        if isinstance(value, Role):
            return value
        try:
            return Role(str(value))
        except ValueError:
            return Role.NORMAL

    @property
    def is_custom(self) -> bool:
        return self.origin != PlayerOrigin.GENERATED

    def submission_record(self) -> Dict[str, Any]:
        """Champs transmis au service de création de partie (`all_players`)."""
        return {
            "name": self.name,
            "nationality": self.nationality,
            "gender": self.gender,
            "role": self.role.value,
            "stats": self.stats.model_dump(by_alias=True),
            "portrait": self.portrait.model_dump(),
            "uniform": self.uniform.model_dump(),
            "isCustom": self.is_custom,
        }
