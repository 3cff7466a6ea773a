"""
Service: launch_orchestrator.py
Rôle:
- Orchestration du lancement d'une partie depuis la configuration de préparation.

Machine à états:
    IDLE → VALIDATING → SUBMITTING → AWAITING_GROUPS → READY
                            └──────→ FAILED (réessai possible)

- VALIDATING: relit l'état courant (pas de cache). Toutes les raisons d'échec sont
  remontées ensemble: insufficient_funds / no_players / no_events_selected.
  Échec → retour IDLE sans mutation.
- SUBMITTING: requête de création construite depuis un instantané figé (FinalizedConfig).
  Échec → FAILED + SubmissionFailed; roster / sélection / catalogue inchangés.
- AWAITING_GROUPS: application des groupes pré-configurés, au mieux (échec journalisé).
- READY: épreuves résolues dans l'ordre de sélection (ids inconnus ignorés), remise au
  consommateur d'exécution, passage à l'étape d'exécution. Terminal.
  Une erreur inattendue après la création (groupes, remise) → FAILED + SubmissionFailed,
  game_id et étape remis à leur valeur d'avant soumission.

Une demande de lancement pendant SUBMITTING / AWAITING_GROUPS (ou après READY) lève
LaunchInProgress.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import Any, List, Optional

from arena_setup.models.launch import ExecutionHandoff, FinalizedConfig, LaunchOptions
from arena_setup.services import backend_client, cost_model
from arena_setup.services.backend_client import RemoteUnavailable, call_remote
from arena_setup.services.event_catalog import EventCatalog
from arena_setup.services.execution_handoff import HANDOFFS
from arena_setup.services.session_config import STAGE_EXECUTION, STAGE_SETUP, SessionConfig

logger = logging.getLogger(__name__)

REASON_INSUFFICIENT_FUNDS = "insufficient_funds"
REASON_NO_PLAYERS = "no_players"
REASON_NO_EVENTS = "no_events_selected"


class LaunchState(str, Enum):
    IDLE = "IDLE"
    VALIDATING = "VALIDATING"
    SUBMITTING = "SUBMITTING"
    AWAITING_GROUPS = "AWAITING_GROUPS"
    READY = "READY"
    FAILED = "FAILED"


class ValidationFailed(RuntimeError):
    """Préconditions de lancement non remplies (une raison par condition)."""

    def __init__(self, reasons: List[str], shortfall: int = 0) -> None:
        super().__init__(", ".join(reasons))
        self.reasons = list(reasons)
        self.shortfall = shortfall


class SubmissionFailed(RuntimeError):
    """La création de partie a échoué; l'état local est intact, réessai possible."""


class LaunchInProgress(RuntimeError):
    """Lancement déjà en cours (ou déjà abouti)."""


_BUSY_STATES = (LaunchState.SUBMITTING, LaunchState.AWAITING_GROUPS, LaunchState.READY)


class LaunchOrchestrator:
    def __init__(
        self,
        config: SessionConfig,
        catalog: EventCatalog,
        client: Any = None,
        consumer: Any = None,
    ) -> None:
        self.config = config
        self.catalog = catalog
        self.client = client or backend_client.CLIENT
        self.consumer = consumer or HANDOFFS
        self.state = LaunchState.IDLE
        self.last_error: Optional[str] = None
        self.applied_groups: Any = None

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------
    def cost(self) -> cost_model.CostBreakdown:
        return cost_model.breakdown(
            self.config.game_mode,
            len(self.config.players),
            len(self.config.selection),
            self.config.budget,
        )

    def validate(self) -> List[str]:
        """Raisons bloquantes, calculées sur l'état courant (liste vide = lançable)."""
        reasons: List[str] = []
        if not self.cost().affordable:
            reasons.append(REASON_INSUFFICIENT_FUNDS)
        if not self.config.players:
            reasons.append(REASON_NO_PLAYERS)
        # une sélection qui ne correspond à aucune épreuve chargée ne vaut rien
        if not self.catalog.resolve(self.config.selection):
            reasons.append(REASON_NO_EVENTS)
        return reasons

    def _finalize(self) -> FinalizedConfig:
        return FinalizedConfig(
            game_mode=self.config.game_mode,
            preserve_event_order=self.config.preserve_event_order,
            players=tuple(p.model_copy(deep=True) for p in self.config.players),
            selected_event_ids=tuple(self.config.selection),
        )

    # ------------------------------------------------------------------
    # Lancement
    # ------------------------------------------------------------------
    async def launch(self) -> ExecutionHandoff:
        if self.state in _BUSY_STATES:
            raise LaunchInProgress(f"launch already {self.state.value.lower()}")

        self.state = LaunchState.VALIDATING
        reasons = self.validate()
        if reasons:
            self.state = LaunchState.IDLE
            shortfall = self.cost().shortfall
            logger.info(
                "Launch blocked by validation",
                extra={"setup_id": self.config.setup_id, "reasons": reasons},
            )
            raise ValidationFailed(reasons, shortfall=shortfall)

        finalized = self._finalize()
        self.state = LaunchState.SUBMITTING
        self.last_error = None
        game_id = await self._submit(finalized)

        try:
            self.config.game_id = game_id
            self.state = LaunchState.AWAITING_GROUPS
            await self._apply_groups(game_id)
            handoff = self._hand_off(finalized, game_id)
        except Exception as exc:
            # la configuration locale reste celle d'avant la soumission
            self.config.game_id = None
            self.config.stage = STAGE_SETUP
            self._fail(f"launch aborted after creation: {exc}")
            raise SubmissionFailed("execution handoff failed") from exc

        self.state = LaunchState.READY
        return handoff

    async def _submit(self, finalized: FinalizedConfig) -> Any:
        try:
            response = await call_remote(self.client.create_game, finalized.creation_payload())
        except RemoteUnavailable as exc:
            self._fail(str(exc))
            raise SubmissionFailed("game creation failed") from exc

        game_id = response.get("id")
        if game_id is None:
            self._fail("game creation response without id")
            raise SubmissionFailed("game creation response without id")

        self.config.log_event("game_created", {"game_id": game_id, "players": len(finalized.players)})
        logger.info("Game created", extra={"setup_id": self.config.setup_id, "game_id": game_id})
        return game_id

    def _fail(self, message: str) -> None:
        self.state = LaunchState.FAILED
        self.last_error = message
        self.config.log_event("game_creation_failed", {"error": message})
        logger.error("Game creation failed", extra={"setup_id": self.config.setup_id, "error": message})

    async def _apply_groups(self, game_id: Any) -> None:
        """Groupes pré-configurés: au mieux, un échec n'empêche jamais READY."""
        try:
            data = await call_remote(self.client.apply_preconfigured_groups, game_id)
        except RemoteUnavailable:
            logger.info(
                "No preconfigured groups applied",
                exc_info=True,
                extra={"setup_id": self.config.setup_id, "game_id": game_id},
            )
            return
        self.applied_groups = data.get("applied_groups")
        logger.info(
            "Preconfigured groups applied",
            extra={"game_id": game_id, "applied_groups": self.applied_groups},
        )

    def _hand_off(self, finalized: FinalizedConfig, game_id: Any) -> ExecutionHandoff:
        ordered_events = self.catalog.resolve(finalized.selected_event_ids)
        options = LaunchOptions(
            preserve_event_order=finalized.preserve_event_order,
            game_mode=finalized.game_mode,
            selected_event_ids=finalized.selected_event_ids,
            game_id=game_id,
        )
        handoff = self.consumer.receive(list(finalized.players), ordered_events, options)
        self.config.stage = STAGE_EXECUTION
        self.config.log_event("execution_started", {"game_id": game_id, "events": len(ordered_events)})
        return handoff
