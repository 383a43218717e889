import re

import pytest

from app import games
from cities import add_to_production_queue
from hex_math import coord_key, hex_distance
from models import GamePhase


@pytest.fixture
def client(api_client):
    return api_client


@pytest.fixture
def game_id(client):
    """Create a sample game for testing."""
    response = client.post('/api/game/new', json={'seed': 42})
    assert response.status_code == 200
    return response.json['game_id']


def _human_unit(game_id, unit_type):
    game = games[game_id]
    return next(u for u in game.get_player_units('player1') if u.type == unit_type)


def test_health(client):
    response = client.get('/api/health')
    assert response.status_code == 200
    assert response.json['status'] == 'ok'


def test_new_game(client):
    """Test POST /api/game/new creates a game with a valid game_id."""
    response = client.post('/api/game/new', json={'seed': 42})
    assert response.status_code == 200
    uuid_pattern = r'^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$'
    assert re.match(uuid_pattern, response.json['game_id']) is not None


def test_new_game_without_body(client):
    response = client.post('/api/game/new')
    assert response.status_code == 200


def test_new_game_rejects_bad_parameters(client):
    assert client.post('/api/game/new', json={'seed': 'abc'}).status_code == 400
    assert client.post('/api/game/new', json={'width': 3, 'height': 10}).status_code == 400


def test_new_game_rejects_maps_where_armies_do_not_fit(client):
    games_before = len(games)
    overlapping = client.post('/api/game/new', json={'width': 6, 'height': 6})
    assert overlapping.status_code == 400
    assert 'overlap' in overlapping.json['error']
    assert client.post('/api/game/new', json={'width': 6, 'height': 20}).status_code == 400
    assert len(games) == games_before


def test_get_game_state(client, game_id):
    """Test GET /api/game/<game_id>/state returns valid game state."""
    response = client.get(f'/api/game/{game_id}/state')
    assert response.status_code == 200
    data = response.json

    assert data['game_id'] == game_id
    assert data['turn'] == 1
    assert data['phase'] == 'player_turn'
    assert data['current_player'] == 'player1'
    assert len(data['players']) == 2
    assert len(data['units']) == 8
    assert len(data['map']['cells']) == 20 * 15


def test_custom_map_size(client):
    game_id = client.post('/api/game/new', json={'width': 10, 'height': 8, 'seed': 3}).json['game_id']
    data = client.get(f'/api/game/{game_id}/state').json
    assert (data['map']['width'], data['map']['height']) == (10, 8)
    assert len(data['map']['cells']) == 80


def test_unknown_game(client):
    assert client.get('/api/game/nope/state').status_code == 404
    assert client.post('/api/game/nope/end_turn').status_code == 404
    assert client.get('/api/game/nope/log').status_code == 404


def test_move(client, game_id):
    unit = _human_unit(game_id, 'warrior')
    coords = client.get(f'/api/game/{game_id}/movable/{unit.id}').json['coords']
    assert coords
    q, r = (int(v) for v in coords[0].split(','))

    response = client.post(f'/api/game/{game_id}/move', json={'unit_id': unit.id, 'to': {'q': q, 'r': r}})

    assert response.status_code == 200
    assert response.json['success'] is True
    assert response.json['to'] == {'q': q, 'r': r}
    assert unit.position == (q, r)


def test_move_accepts_a_coordinate_key(client, game_id):
    unit = _human_unit(game_id, 'warrior')
    key = client.get(f'/api/game/{game_id}/movable/{unit.id}').json['coords'][0]

    response = client.post(f'/api/game/{game_id}/move', json={'unit_id': unit.id, 'to': key})

    assert response.status_code == 200
    assert coord_key(unit.position) == key


def test_move_rejects_a_malformed_key(client, game_id):
    unit = _human_unit(game_id, 'warrior')
    for bad in ('a,b', '3', {'q': 1}):
        response = client.post(f'/api/game/{game_id}/move', json={'unit_id': unit.id, 'to': bad})
        assert response.status_code == 400


def test_illegal_move(client, game_id):
    unit = _human_unit(game_id, 'warrior')
    response = client.post(f'/api/game/{game_id}/move', json={'unit_id': unit.id, 'to': {'q': 15, 'r': 0}})
    assert response.status_code == 400
    assert response.json['success'] is False


def test_move_validation(client, game_id):
    unit = _human_unit(game_id, 'warrior')
    assert client.post(f'/api/game/{game_id}/move', json={'unit_id': unit.id}).status_code == 400
    response = client.post(f'/api/game/{game_id}/move', data='not json', content_type='application/json')
    assert response.status_code == 400


def test_cannot_move_enemy_unit(client, game_id):
    enemy = games[game_id].get_player_units('player2')[0]
    response = client.post(f'/api/game/{game_id}/move',
                           json={'unit_id': enemy.id, 'to': {'q': enemy.position[0], 'r': enemy.position[1] + 1}})
    assert response.status_code == 409


def test_attack_out_of_range(client, game_id):
    attacker = _human_unit(game_id, 'warrior')
    defender = games[game_id].get_player_units('player2')[0]
    response = client.post(f'/api/game/{game_id}/attack',
                           json={'attacker_id': attacker.id, 'defender_id': defender.id})
    assert response.status_code == 400


def test_attack(client, game_id):
    game = games[game_id]
    attacker = _human_unit(game_id, 'warrior')
    defender = game.get_player_units('player2')[0]
    # Stage the enemy next to the attacker
    target = next(p for p in game.get_movable_coords(attacker.id)
                  if hex_distance(p, attacker.position) == 1)
    game.state.relocate_unit(defender, target)

    response = client.post(f'/api/game/{game_id}/attack',
                           json={'attacker_id': attacker.id, 'defender_id': defender.id})

    assert response.status_code == 200
    data = response.json
    assert data['defender_id'] == defender.id
    assert data['defender_damage'] > 0
    assert data['phase'] == 'player_turn'
    assert data['winner'] is None


def test_found_city_and_queue(client, game_id):
    settler = _human_unit(game_id, 'settler')
    response = client.post(f'/api/game/{game_id}/found', json={'settler_id': settler.id})
    assert response.status_code == 200
    city = response.json
    assert city['is_capital'] is True
    assert city['population'] == 1

    response = client.post(f'/api/game/{game_id}/production', json={'city_id': city['id'], 'item_type': 'archer'})
    assert response.status_code == 200
    queue = response.json['production_queue']
    assert [e['type'] for e in queue] == ['archer']

    bad = client.post(f'/api/game/{game_id}/production', json={'city_id': city['id'], 'item_type': 'tank'})
    assert bad.status_code == 400

    response = client.delete(f"/api/game/{game_id}/production/{city['id']}/{queue[0]['id']}")
    assert response.status_code == 200
    assert response.json['production_queue'] == []
    assert client.delete(f"/api/game/{game_id}/production/{city['id']}/{queue[0]['id']}").status_code == 404


def test_non_settler_cannot_found(client, game_id):
    warrior = _human_unit(game_id, 'warrior')
    response = client.post(f'/api/game/{game_id}/found', json={'settler_id': warrior.id})
    assert response.status_code == 400


def test_cannot_manage_enemy_city(client, game_id):
    game = games[game_id]
    settler = next(u for u in game.get_player_units('player2') if u.type == 'settler')
    city = game.found_city(settler.id)
    response = client.post(f'/api/game/{game_id}/production', json={'city_id': city.id, 'item_type': 'warrior'})
    assert response.status_code == 409
    entry = add_to_production_queue(game.state, city.id, 'warrior')
    assert client.delete(f'/api/game/{game_id}/production/{city.id}/{entry.id}').status_code == 409


def test_end_turn_runs_ai(client, game_id):
    response = client.post(f'/api/game/{game_id}/end_turn')
    assert response.status_code == 200
    data = response.json
    assert data['turn'] == 2
    assert data['phase'] == 'player_turn'
    assert data['current_player'] == 'player1'


def test_actions_locked_outside_human_turn(client, game_id):
    game = games[game_id]
    game.state.phase = GamePhase.GAME_OVER
    unit = _human_unit(game_id, 'warrior')
    response = client.post(f'/api/game/{game_id}/move', json={'unit_id': unit.id, 'to': {'q': 0, 'r': 0}})
    assert response.status_code == 409
    assert client.post(f'/api/game/{game_id}/end_turn').status_code == 409


def test_attackable(client, game_id):
    unit = _human_unit(game_id, 'archer')
    response = client.get(f'/api/game/{game_id}/attackable/{unit.id}')
    assert response.status_code == 200
    assert response.json['coords'] == []
    assert client.get(f'/api/game/{game_id}/attackable/u999').status_code == 404


def test_player_units(client, game_id):
    response = client.get(f'/api/game/{game_id}/units/player2')
    assert response.status_code == 200
    assert {u['type'] for u in response.json['units']} == {'warrior', 'archer', 'cavalry', 'settler'}


def test_log(client, game_id):
    response = client.get(f'/api/game/{game_id}/log')
    assert response.status_code == 200
    data = response.json
    assert data['game_log'] == ['Game started! Your turn.']
    assert data['log'][0]['event'].startswith('Game started')
