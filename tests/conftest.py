from types import SimpleNamespace
from unittest.mock import Mock

import pytest

from arena_setup.services.session_config import SessionConfig


def event_record(event_id, *, type_="Classiques", rate=0.5, is_final=False, **extra):
    record = {
        "id": event_id,
        "name": f"Épreuve {event_id}",
        "type": type_,
        "difficulty": 3,
        "elimination_rate": rate,
        "description": "Une épreuve.",
        "is_final": is_final,
    }
    record.update(extra)
    return record


def player_record(index):
    return {
        "id": f"remote-{index}",
        "name": f"Joueur {index}",
        "nationality": "Coréenne",
        "gender": "F" if index % 2 else "M",
        "role": "normal",
        "stats": {"intelligence": 40, "force": 60, "agilité": 55},
    }


@pytest.fixture
def client_stub():
    """Client backend factice: chaque appel distant est un Mock."""
    return SimpleNamespace(
        generate_players=Mock(side_effect=lambda count: [player_record(i) for i in range(count)]),
        list_events=Mock(return_value=[event_record(i) for i in range(1, 21)]),
        create_game=Mock(return_value={"id": "game-42"}),
        apply_preconfigured_groups=Mock(return_value={"applied_groups": ["G1"]}),
        owned_celebrities=Mock(return_value=[]),
        past_winners=Mock(return_value=[]),
    )


@pytest.fixture
def config():
    return SessionConfig(setup_id="test-setup", budget=1_000_000)
