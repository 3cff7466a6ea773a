"""
Service: celebrity_directory.py
Rôle:
- Charger, à l'entrée de l'écran, les célébrités possédées et les anciens gagnants.
- Seuls les anciens gagnants possédés sont proposés à la conversion.

Notes:
- Échec distant → liste vide (journalisé), jamais bloquant.
- Les fiches invalides sont ignorées individuellement.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List

import anyio
from pydantic import ValidationError

from arena_setup.models.celebrity import CelebrityRecord
from arena_setup.services import backend_client
from arena_setup.services.backend_client import RemoteUnavailable, call_remote
from arena_setup.services.session_config import SessionConfig

logger = logging.getLogger(__name__)


def _parse_records(raw: List[Dict[str, Any]]) -> List[CelebrityRecord]:
    records: List[CelebrityRecord] = []
    for item in raw:
        try:
            records.append(CelebrityRecord.model_validate(item))
        except ValidationError:
            logger.warning("Skipping invalid celebrity record", extra={"celebrity_id": item.get("id")})
    return records


class CelebrityDirectory:
    def __init__(self, config: SessionConfig, client: Any = None) -> None:
        self.config = config
        self.client = client or backend_client.CLIENT

    async def load_owned(self) -> int:
        if not self.config.owned_celebrity_ids:
            self.config.celebrities = []
            return 0
        try:
            raw = await call_remote(self.client.owned_celebrities, list(self.config.owned_celebrity_ids))
        except RemoteUnavailable:
            logger.error("Owned celebrities unavailable", exc_info=True, extra={"setup_id": self.config.setup_id})
            self.config.celebrities = []
            return 0
        self.config.celebrities = _parse_records(raw)
        return len(self.config.celebrities)

    async def load_winners(self) -> int:
        try:
            raw = await call_remote(self.client.past_winners)
        except RemoteUnavailable:
            logger.error("Past winners unavailable", exc_info=True, extra={"setup_id": self.config.setup_id})
            self.config.past_winners = []
            return 0
        self.config.past_winners = _parse_records(raw)
        return len(self.config.past_winners)

    async def load(self) -> None:
        async with anyio.create_task_group() as tg:
            tg.start_soon(self.load_owned)
            tg.start_soon(self.load_winners)

    def owned_winners(self) -> List[CelebrityRecord]:
        return [w for w in self.config.past_winners if self.config.owns_celebrity(w.id)]

    def find_celebrity(self, celebrity_id: Any) -> CelebrityRecord:
        """Célébrité possédée (KeyError si absente)."""
        target = str(celebrity_id)
        for record in self.config.celebrities:
            if str(record.id) == target:
                return record
        raise KeyError(celebrity_id)

    def find_winner(self, winner_id: Any) -> CelebrityRecord:
        """Ancien gagnant possédé (KeyError si absent ou non possédé)."""
        target = str(winner_id)
        for record in self.owned_winners():
            if str(record.id) == target:
                return record
        raise KeyError(winner_id)
