"""
Routes de préparation de partie (écran de configuration).

Objectifs :
- Créer / lire / abandonner une session de préparation (entrée / sortie d'écran).
- Composer le roster (génération, ajouts personnalisés, célébrités, anciens gagnants).
- Composer la sélection d'épreuves (toggle, tirage aléatoire, rechargement du catalogue).
- Exposer le coût et déclencher le lancement (création distante + remise à l'exécution).
"""
from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field, ValidationError

from arena_setup.models.event import Event
from arena_setup.models.player import Player, RecordId
from arena_setup.services.launch_orchestrator import (
    LaunchInProgress,
    SubmissionFailed,
    ValidationFailed,
)
from arena_setup.services.setup_store import SetupScreen, create_setup, drop_setup, get_setup

router = APIRouter(prefix="/setup", tags=["setup"])


# ---------------------------------------------------------------------------
# Modèles Pydantic
# ---------------------------------------------------------------------------
class SetupCreatePayload(BaseModel):
    budget: int = Field(..., ge=0, description="Argent disponible sur le compte")
    owned_celebrities: List[RecordId] = Field(default_factory=list, description="Ids des célébrités possédées")
    setup_id: Optional[str] = Field(None, description="Identifiant imposé (sinon auto)")
    player_count: Optional[int] = Field(None, description="Nombre de joueurs visé (borné 20..1000)")
    game_mode: Optional[str] = None


class ConfigPatchPayload(BaseModel):
    player_count: Optional[int] = None
    game_mode: Optional[str] = None
    preserve_event_order: Optional[bool] = None


class GeneratePayload(BaseModel):
    count: Optional[int] = Field(None, description="Nombre de joueurs (sinon la valeur configurée)")


class CustomPlayerPayload(BaseModel):
    name: str = Field(..., min_length=1)
    nationality: Optional[str] = None
    gender: Optional[str] = None
    age: Optional[int] = None
    role: Optional[str] = None
    stats: Optional[Dict[str, Any]] = None
    portrait: Optional[Dict[str, Any]] = None
    uniform: Optional[Dict[str, Any]] = None
    biography: Optional[str] = None


class SetupSnapshotResponse(BaseModel):
    setup_id: str
    stage: str
    game_mode: str
    player_count: int
    preserve_event_order: bool
    budget: int
    players: List[Player]
    fallback_used: bool
    events_by_category: Dict[str, List[Event]]
    catalog_load_failed: bool
    selection: List[RecordId]
    cost: Dict[str, Any]
    launch_state: str
    blocking_reasons: List[str]
    game_id: Optional[RecordId] = None


class GenerateResponse(BaseModel):
    count: int
    fallback_used: bool
    applied: bool
    players: List[Player]


class PlayerResponse(BaseModel):
    player: Player
    added: bool = True
    roster_size: int


class ToggleResponse(BaseModel):
    event_id: RecordId
    selected: bool
    selection: List[RecordId]


class SelectionResponse(BaseModel):
    selection: List[RecordId]


class LaunchResponse(BaseModel):
    ok: bool
    state: str
    game_id: RecordId
    events: List[Event]
    players_count: int
    options: Dict[str, Any]
    applied_groups: Optional[Any] = None


# ---------------------------------------------------------------------------
# Helpers internes
# ---------------------------------------------------------------------------
def _screen(setup_id: str) -> SetupScreen:
    screen = get_setup(setup_id)
    if screen is None:
        raise HTTPException(status_code=404, detail="setup_not_found")
    return screen


def _snapshot(screen: SetupScreen) -> SetupSnapshotResponse:
    config = screen.config
    return SetupSnapshotResponse(
        setup_id=config.setup_id,
        stage=config.stage,
        game_mode=config.game_mode,
        player_count=config.player_count,
        preserve_event_order=config.preserve_event_order,
        budget=config.budget,
        players=config.players,
        fallback_used=config.fallback_used,
        events_by_category=screen.catalog.categorize(),
        catalog_load_failed=config.catalog_load_failed,
        selection=screen.catalog.selection,
        cost=asdict(screen.launcher.cost()),
        launch_state=screen.launcher.state.value,
        blocking_reasons=screen.launcher.validate(),
        game_id=config.game_id,
    )


def _set_mode(screen: SetupScreen, mode: str) -> None:
    try:
        screen.config.set_game_mode(mode)
    except KeyError as exc:
        raise HTTPException(status_code=422, detail=f"unknown_game_mode: {mode}") from exc


# ---------------------------------------------------------------------------
# Session de préparation
# ---------------------------------------------------------------------------
@router.post("", response_model=SetupSnapshotResponse)
async def setup_create(payload: SetupCreatePayload) -> SetupSnapshotResponse:
    """Entrée d'écran: crée la session puis charge catalogue, célébrités et gagnants."""
    try:
        screen = create_setup(
            payload.budget,
            payload.owned_celebrities,
            setup_id=payload.setup_id,
            player_count=payload.player_count,
            game_mode=payload.game_mode,
        )
    except KeyError as exc:
        raise HTTPException(status_code=422, detail=f"unknown_game_mode: {payload.game_mode}") from exc
    await screen.enter()
    return _snapshot(screen)


@router.get("/{setup_id}", response_model=SetupSnapshotResponse)
async def setup_state(setup_id: str) -> SetupSnapshotResponse:
    return _snapshot(_screen(setup_id))


@router.delete("/{setup_id}")
async def setup_discard(setup_id: str):
    """Sortie d'écran: la configuration est abandonnée."""
    if not drop_setup(setup_id):
        raise HTTPException(status_code=404, detail="setup_not_found")
    return {"ok": True, "setup_id": setup_id}


@router.patch("/{setup_id}/config", response_model=SetupSnapshotResponse)
async def setup_configure(setup_id: str, payload: ConfigPatchPayload) -> SetupSnapshotResponse:
    screen = _screen(setup_id)
    if payload.player_count is not None:
        screen.config.set_player_count(payload.player_count)
    if payload.game_mode is not None:
        _set_mode(screen, payload.game_mode)
    if payload.preserve_event_order is not None:
        screen.config.preserve_event_order = payload.preserve_event_order
    return _snapshot(screen)


@router.get("/{setup_id}/cost")
async def setup_cost(setup_id: str) -> Dict[str, Any]:
    return asdict(_screen(setup_id).launcher.cost())


# ---------------------------------------------------------------------------
# Roster
# ---------------------------------------------------------------------------
@router.post("/{setup_id}/players/generate", response_model=GenerateResponse)
async def players_generate(
    setup_id: str,
    payload: Optional[GeneratePayload] = None,
) -> GenerateResponse:
    """Remplace le roster par `count` joueurs (génération distante ou repli local)."""
    screen = _screen(setup_id)
    if payload is not None and payload.count is not None:
        screen.config.set_player_count(payload.count)
    result = await screen.roster.generate(screen.config.player_count)
    return GenerateResponse(
        count=len(result.players),
        fallback_used=result.fallback_used,
        applied=result.applied,
        players=result.players,
    )


@router.post("/{setup_id}/players", response_model=PlayerResponse)
async def players_add(setup_id: str, payload: CustomPlayerPayload) -> PlayerResponse:
    screen = _screen(setup_id)
    try:
        player = screen.roster.add_player(payload.model_dump(exclude_none=True))
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=exc.errors(include_url=False)) from exc
    return PlayerResponse(player=player, roster_size=len(screen.config.players))


@router.delete("/{setup_id}/players/{player_id}")
async def players_remove(setup_id: str, player_id: str):
    screen = _screen(setup_id)
    try:
        screen.roster.remove(player_id)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail="player_not_found") from exc
    return {"ok": True, "roster_size": len(screen.config.players)}


@router.delete("/{setup_id}/players")
async def players_clear(setup_id: str):
    removed = _screen(setup_id).roster.clear()
    return {"ok": True, "removed": removed}


# ---------------------------------------------------------------------------
# Célébrités & anciens gagnants
# ---------------------------------------------------------------------------
@router.get("/{setup_id}/celebrities")
async def celebrities_list(setup_id: str) -> Dict[str, Any]:
    """Célébrités possédées + anciens gagnants possédés, avec indicateur de sélection."""
    screen = _screen(setup_id)

    def _entry(record) -> Dict[str, Any]:
        data = record.model_dump(by_alias=True)
        data["selected"] = screen.roster.find_by_celebrity(record.id) is not None
        return data

    return {
        "celebrities": [_entry(c) for c in screen.config.celebrities],
        "winners": [_entry(w) for w in screen.celebrities.owned_winners()],
    }


@router.post("/{setup_id}/celebrities/{celebrity_id}", response_model=PlayerResponse)
async def celebrities_add(setup_id: str, celebrity_id: str) -> PlayerResponse:
    screen = _screen(setup_id)
    try:
        record = screen.celebrities.find_celebrity(celebrity_id)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail="celebrity_not_owned") from exc
    player, added = screen.roster.convert_celebrity(record)
    return PlayerResponse(player=player, added=added, roster_size=len(screen.config.players))


@router.post("/{setup_id}/winners/{winner_id}", response_model=PlayerResponse)
async def winners_add(setup_id: str, winner_id: str) -> PlayerResponse:
    screen = _screen(setup_id)
    try:
        record = screen.celebrities.find_winner(winner_id)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail="winner_not_owned") from exc
    player, added = screen.roster.convert_celebrity(record, past_winner=True)
    return PlayerResponse(player=player, added=added, roster_size=len(screen.config.players))


# ---------------------------------------------------------------------------
# Épreuves
# ---------------------------------------------------------------------------
@router.post("/{setup_id}/events/reload")
async def events_reload(setup_id: str):
    screen = _screen(setup_id)
    count = await screen.catalog.load()
    return {"ok": not screen.config.catalog_load_failed, "count": count}


@router.post("/{setup_id}/events/random", response_model=SelectionResponse)
async def events_random(setup_id: str) -> SelectionResponse:
    return SelectionResponse(selection=_screen(setup_id).catalog.random_select())


@router.post("/{setup_id}/events/{event_id}/toggle", response_model=ToggleResponse)
async def events_toggle(setup_id: str, event_id: str) -> ToggleResponse:
    screen = _screen(setup_id)
    try:
        selected = screen.catalog.toggle(event_id)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail="event_not_found") from exc
    return ToggleResponse(event_id=event_id, selected=selected, selection=screen.catalog.selection)


# ---------------------------------------------------------------------------
# Lancement
# ---------------------------------------------------------------------------
@router.post("/{setup_id}/launch", response_model=LaunchResponse)
async def setup_launch(setup_id: str) -> LaunchResponse:
    """Valide, crée la partie distante, applique les groupes puis remet à l'exécution."""
    screen = _screen(setup_id)
    try:
        handoff = await screen.launcher.launch()
    except ValidationFailed as exc:
        raise HTTPException(
            status_code=422,
            detail={"reasons": exc.reasons, "shortfall": exc.shortfall},
        ) from exc
    except LaunchInProgress as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except SubmissionFailed as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc

    return LaunchResponse(
        ok=True,
        state=screen.launcher.state.value,
        game_id=handoff.options.game_id,
        events=list(handoff.events),
        players_count=len(handoff.roster),
        options=handoff.options.model_dump(),
        applied_groups=screen.launcher.applied_groups,
    )


@router.get("/{setup_id}/handoff")
async def setup_handoff(setup_id: str):
    """Configuration finalisée remise à l'étape d'exécution."""
    screen = _screen(setup_id)
    game_id = screen.config.game_id
    handoff = screen.launcher.consumer.get(game_id) if game_id is not None else None
    if handoff is None:
        raise HTTPException(status_code=404, detail="handoff_not_found")
    return handoff.model_dump(mode="json", by_alias=True)
