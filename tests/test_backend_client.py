from unittest.mock import Mock

import pytest
import requests

from arena_setup.services.backend_client import BackendClient, RemoteUnavailable


def _response(payload=None, *, status=200, invalid_json=False):
    response = Mock()
    response.status_code = status
    if status >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(f"{status} error")
    if invalid_json:
        response.json.side_effect = ValueError("not json")
    else:
        response.json.return_value = payload
    return response


@pytest.fixture
def sessions():
    return Mock(spec=requests.Session), Mock(spec=requests.Session)


@pytest.fixture
def client(sessions):
    read, submit = sessions
    return BackendClient("http://backend:8001/", session=read, submit_session=submit)


def test_generate_players_posts_count(client, sessions):
    read, _ = sessions
    read.request.return_value = _response([{"name": "A"}, {"name": "B"}])

    players = client.generate_players(2)

    assert players == [{"name": "A"}, {"name": "B"}]
    method, url = read.request.call_args.args
    assert method == "POST"
    assert url == "http://backend:8001/api/games/generate-players"
    assert read.request.call_args.kwargs["params"] == {"count": 2}


def test_create_game_uses_submit_session(client, sessions):
    read, submit = sessions
    submit.request.return_value = _response({"id": "g1"})

    assert client.create_game({"player_count": 1}) == {"id": "g1"}
    read.request.assert_not_called()
    assert submit.request.call_args.kwargs["json"] == {"player_count": 1}


def test_apply_groups_formats_game_id(client, sessions):
    _, submit = sessions
    submit.request.return_value = _response({"applied_groups": []})

    client.apply_preconfigured_groups(12)

    assert submit.request.call_args.args[1] == "http://backend:8001/api/games/12/groups/apply-preconfigured"


@pytest.mark.parametrize(
    "side_effect,response",
    [
        (requests.Timeout("slow"), None),
        (requests.ConnectionError("refused"), None),
        (None, _response(status=503)),
        (None, _response(invalid_json=True)),
        (None, _response({"not": "a list"})),
    ],
)
def test_list_events_failures_raise_remote_unavailable(client, sessions, side_effect, response):
    read, _ = sessions
    if side_effect is not None:
        read.request.side_effect = side_effect
    else:
        read.request.return_value = response

    with pytest.raises(RemoteUnavailable):
        client.list_events()


def test_owned_celebrities_without_ids_skips_call(client, sessions):
    read, _ = sessions

    assert client.owned_celebrities([]) == []
    read.request.assert_not_called()


def test_owned_celebrities_sends_ids(client, sessions):
    read, _ = sessions
    read.request.return_value = _response([{"id": 1, "name": "Star"}])

    assert client.owned_celebrities([1, "b"]) == [{"id": 1, "name": "Star"}]
    assert read.request.call_args.kwargs["params"] == {"ids": "1,b"}
