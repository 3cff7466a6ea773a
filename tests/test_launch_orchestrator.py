import asyncio
import copy
from types import SimpleNamespace

import pytest

from arena_setup.services.backend_client import RemoteUnavailable
from arena_setup.services.event_catalog import EventCatalog
from arena_setup.services.execution_handoff import HandoffRegistry
from arena_setup.services.launch_orchestrator import (
    REASON_INSUFFICIENT_FUNDS,
    REASON_NO_EVENTS,
    REASON_NO_PLAYERS,
    LaunchInProgress,
    LaunchOrchestrator,
    LaunchState,
    SubmissionFailed,
    ValidationFailed,
)
from arena_setup.services.roster_manager import RosterManager


@pytest.fixture
def consumer():
    return HandoffRegistry()


@pytest.fixture
def parts(config, client_stub, consumer):
    catalog = EventCatalog(config, client=client_stub)
    asyncio.run(catalog.load())
    roster = RosterManager(config, client=client_stub)
    launcher = LaunchOrchestrator(config, catalog, client=client_stub, consumer=consumer)
    return roster, catalog, launcher


def _ready_config(parts):
    roster, catalog, _ = parts
    asyncio.run(roster.generate(20))
    for event_id in ("3", "1", "2"):
        catalog.toggle(event_id)


def test_validation_reports_all_reasons(parts, config):
    _, _, launcher = parts
    config.budget = 0

    with pytest.raises(ValidationFailed) as excinfo:
        asyncio.run(launcher.launch())

    assert excinfo.value.reasons == [REASON_INSUFFICIENT_FUNDS, REASON_NO_PLAYERS, REASON_NO_EVENTS]
    assert excinfo.value.shortfall == 100_000
    assert launcher.state == LaunchState.IDLE


def test_no_players_blocks_regardless_of_budget_and_selection(parts, config):
    _, catalog, launcher = parts
    catalog.toggle("1")

    with pytest.raises(ValidationFailed) as excinfo:
        asyncio.run(launcher.launch())

    assert excinfo.value.reasons == [REASON_NO_PLAYERS]


def test_validation_reads_live_state(parts, config):
    _, catalog, launcher = parts
    _ready_config(parts)
    assert launcher.validate() == []

    for event_id in list(catalog.selection):
        catalog.toggle(event_id)

    assert launcher.validate() == [REASON_NO_EVENTS]


def test_successful_launch_hands_off_in_selection_order(parts, config, client_stub, consumer):
    _, _, launcher = parts
    _ready_config(parts)

    handoff = asyncio.run(launcher.launch())

    assert launcher.state == LaunchState.READY
    assert [e.id for e in handoff.events] == [3, 1, 2]
    assert handoff.options.game_id == "game-42"
    assert handoff.options.selected_event_ids == (3, 1, 2)
    assert handoff.options.preserve_event_order is True
    assert len(handoff.roster) == 20
    assert consumer.get("game-42") is handoff
    assert config.game_id == "game-42"
    assert config.stage == "execution"
    assert launcher.applied_groups == ["G1"]

    payload = client_stub.create_game.call_args.args[0]
    assert payload["player_count"] == 20
    assert payload["game_mode"] == "standard"
    assert payload["selected_events"] == [3, 1, 2]
    assert payload["preserve_event_order"] is True
    assert set(payload["all_players"][0]) == {
        "name", "nationality", "gender", "role", "stats", "portrait", "uniform", "isCustom",
    }
    client_stub.apply_preconfigured_groups.assert_called_once_with("game-42")


def test_handoff_drops_events_missing_from_catalog(parts, config):
    _, catalog, launcher = parts
    _ready_config(parts)
    config.selection.append(999)

    handoff = asyncio.run(launcher.launch())

    assert [e.id for e in handoff.events] == [3, 1, 2]
    assert handoff.options.selected_event_ids == (3, 1, 2, 999)


def test_submission_failure_leaves_state_untouched(parts, config, client_stub):
    _, _, launcher = parts
    _ready_config(parts)
    client_stub.create_game.side_effect = RemoteUnavailable("refused")
    before = (
        copy.deepcopy(config.players),
        list(config.selection),
        copy.deepcopy(config.events),
    )

    with pytest.raises(SubmissionFailed):
        asyncio.run(launcher.launch())

    assert launcher.state == LaunchState.FAILED
    assert (config.players, config.selection, config.events) == before
    assert config.game_id is None
    client_stub.apply_preconfigured_groups.assert_not_called()


def test_retry_after_failure(parts, client_stub):
    _, _, launcher = parts
    _ready_config(parts)
    client_stub.create_game.side_effect = [RemoteUnavailable("refused"), {"id": 77}]

    with pytest.raises(SubmissionFailed):
        asyncio.run(launcher.launch())
    handoff = asyncio.run(launcher.launch())

    assert handoff.options.game_id == 77
    assert launcher.state == LaunchState.READY


def test_creation_without_id_is_a_submission_failure(parts, client_stub):
    _, _, launcher = parts
    _ready_config(parts)
    client_stub.create_game.return_value = {"status": "ok"}

    with pytest.raises(SubmissionFailed):
        asyncio.run(launcher.launch())
    assert launcher.state == LaunchState.FAILED


def test_group_failure_still_reaches_ready(parts, client_stub):
    _, _, launcher = parts
    _ready_config(parts)
    client_stub.apply_preconfigured_groups.side_effect = RemoteUnavailable("no groups")

    asyncio.run(launcher.launch())

    assert launcher.state == LaunchState.READY
    assert launcher.applied_groups is None


@pytest.mark.parametrize("busy", [LaunchState.SUBMITTING, LaunchState.AWAITING_GROUPS, LaunchState.READY])
def test_reentrant_launch_is_rejected(parts, client_stub, busy):
    _, _, launcher = parts
    _ready_config(parts)
    launcher.state = busy

    with pytest.raises(LaunchInProgress):
        asyncio.run(launcher.launch())
    client_stub.create_game.assert_not_called()


def test_consumer_failure_after_creation_is_recoverable(config, client_stub):
    registry = HandoffRegistry()
    calls = []

    def flaky_receive(roster, events, options):
        calls.append(options.game_id)
        if len(calls) == 1:
            raise RuntimeError("execution stage not ready")
        return registry.receive(roster, events, options)

    catalog = EventCatalog(config, client=client_stub)
    asyncio.run(catalog.load())
    roster = RosterManager(config, client=client_stub)
    launcher = LaunchOrchestrator(
        config, catalog, client=client_stub, consumer=SimpleNamespace(receive=flaky_receive)
    )
    _ready_config((roster, catalog, launcher))

    with pytest.raises(SubmissionFailed):
        asyncio.run(launcher.launch())

    assert launcher.state == LaunchState.FAILED
    assert config.game_id is None
    assert config.stage == "setup"

    handoff = asyncio.run(launcher.launch())

    assert launcher.state == LaunchState.READY
    assert registry.get("game-42") is handoff
    assert calls == ["game-42", "game-42"]
