import asyncio
import random
import threading

import pytest
from pydantic import ValidationError

from arena_setup.models.celebrity import CelebrityRecord
from arena_setup.models.player import PlayerOrigin, Role
from arena_setup.services.backend_client import RemoteUnavailable
from arena_setup.services.roster_manager import RosterManager, role_for_category

from conftest import player_record


@pytest.fixture
def roster(config, client_stub):
    return RosterManager(config, client=client_stub)


def _assert_well_formed(players, count):
    assert len(players) == count
    assert len({p.id for p in players}) == count
    assert [p.number for p in players] == [str(i).zfill(3) for i in range(1, count + 1)]


def test_generate_remote_path(roster, config):
    result = asyncio.run(roster.generate(30))

    assert result.applied is True
    assert result.fallback_used is False
    _assert_well_formed(config.players, 30)
    assert all(p.origin == PlayerOrigin.GENERATED for p in config.players)
    assert config.players[0].stats.agilite == 55


def test_generate_fallback_path(roster, config, client_stub):
    client_stub.generate_players.side_effect = RemoteUnavailable("down")

    result = asyncio.run(roster.generate(45, rng=random.Random(1)))

    assert result.fallback_used is True
    assert config.fallback_used is True
    _assert_well_formed(config.players, 45)
    assert all(p.alive and p.kills == 0 and p.total_score == 0 for p in config.players)


def test_generate_wrong_count_falls_back(roster, config, client_stub):
    client_stub.generate_players.side_effect = lambda count: [player_record(i) for i in range(count - 1)]

    result = asyncio.run(roster.generate(25))

    assert result.fallback_used is True
    _assert_well_formed(config.players, 25)


def test_generate_reissues_duplicate_ids(roster, config, client_stub):
    client_stub.generate_players.side_effect = lambda count: [dict(player_record(0)) for _ in range(count)]

    asyncio.run(roster.generate(5))

    _assert_well_formed(config.players, 5)


def test_generate_replaces_roster(roster, config):
    roster.add_player({"name": "Custom"})
    asyncio.run(roster.generate(20))

    assert len(config.players) == 20
    assert all(p.origin == PlayerOrigin.GENERATED for p in config.players)


def test_generate_reports_progress(roster):
    seen = []
    asyncio.run(roster.generate(50, progress=seen.append))

    assert seen == [20, 40, 50]


def test_stale_generation_is_discarded(config, client_stub):
    gate = threading.Event()
    started = threading.Event()

    def slow_then_fast(count):
        if count == 30:
            started.set()
            gate.wait(5)
        return [player_record(i) for i in range(count)]

    client_stub.generate_players.side_effect = slow_then_fast
    roster = RosterManager(config, client=client_stub)

    async def scenario():
        first = asyncio.create_task(roster.generate(30))
        while not started.is_set():
            await asyncio.sleep(0.01)
        second = await roster.generate(20)
        gate.set()
        return await first, second

    first, second = asyncio.run(scenario())

    assert second.applied is True
    assert first.applied is False
    assert len(config.players) == 20


def test_add_player_fills_defaults(roster, config):
    asyncio.run(roster.generate(20))

    player = roster.add_player({"name": "Ali", "nationality": "Pakistanaise", "kills": 12})

    assert player.number == "021"
    assert player.origin == PlayerOrigin.CUSTOM
    assert player.is_custom is True
    assert player.kills == 0
    assert player.uniform.color == "#00FF00"
    assert player.stats.intelligence == 50
    assert player.portrait.face_shape == "Ovale"
    assert config.players[-1] is player


def test_add_player_requires_name(roster):
    with pytest.raises(ValidationError):
        roster.add_player({"nationality": "Française"})


@pytest.mark.parametrize(
    "category,expected",
    [
        ("Sportifs", Role.SPORTIF),
        ("Scientifiques", Role.INTELLIGENT),
        ("Musiciens", Role.NORMAL),
        (None, Role.NORMAL),
    ],
)
def test_role_for_category(category, expected):
    assert role_for_category(category) == expected


def test_convert_celebrity_is_idempotent(roster, config):
    star = CelebrityRecord(id=7, name="Usain", category="Sportifs", stars=5, nationality="Jamaïcaine")

    player, added = roster.convert_celebrity(star)
    again, added_again = roster.convert_celebrity(star)

    assert added is True
    assert added_again is False
    assert again.id == player.id
    assert len(config.players) == 1
    assert player.role == Role.SPORTIF
    assert player.origin == PlayerOrigin.CELEBRITY
    assert player.celebrity_id == 7
    assert player.uniform.style == "Classic"
    assert player.wins == 0
    assert 25 <= player.age < 45


def test_convert_past_winner_defaults_one_win(roster):
    winner = CelebrityRecord(id="w1", name="Gi-hun", category="Anciens gagnants")

    player, _ = roster.convert_celebrity(winner, past_winner=True)

    assert player.wins == 1
    assert player.role == Role.NORMAL


def test_remove_and_clear(roster, config):
    first = roster.add_player({"name": "A"})
    roster.add_player({"name": "B"})

    roster.remove(first.id)
    assert [p.name for p in config.players] == ["B"]

    with pytest.raises(KeyError):
        roster.remove("unknown")

    assert roster.clear() == 1
    assert config.players == []


def test_submission_record_uses_wire_names(roster):
    player = roster.add_player({"name": "Kim", "stats": {"intelligence": 90, "force": 10, "agilité": 30}})

    record = player.submission_record()

    assert record["isCustom"] is True
    assert record["stats"] == {"intelligence": 90, "force": 10, "agilité": 30}
    assert record["role"] == "normal"
