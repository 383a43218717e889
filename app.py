from flask import Flask, request, jsonify
from flask_cors import CORS
from dataclasses import asdict
from datetime import datetime, timezone
from typing import Dict, Optional, Tuple

from game import Game
from hex_math import coord_key, parse_coord_key
from models import GamePhase
from state import get_game_summary, serialize_city, serialize_unit

app = Flask(__name__)
CORS(app)  # Enable CORS for all routes
games: Dict[str, Game] = {}  # In-memory storage for running games


def _position_json(position: Tuple[int, int]) -> Dict[str, int]:
    return {'q': position[0], 'r': position[1]}


def _get_game(game_id: str) -> Optional[Game]:
    return games.get(game_id)


def _parse_destination(target) -> Optional[Tuple[int, int]]:
    """Accept either {"q": .., "r": ..} or the "q,r" keys the highlight routes return."""
    try:
        if isinstance(target, str):
            return parse_coord_key(target)
        if isinstance(target, dict):
            return int(target['q']), int(target['r'])
    except (KeyError, ValueError, TypeError):
        return None
    return None


def _human_turn_error(game: Game):
    """Error response if the human player may not act right now, else None."""
    if game.phase != GamePhase.PLAYER_TURN:
        return jsonify({'error': f'Not your turn (phase is {game.phase.value})'}), 409
    return None


def _owned_by_current_player(game: Game, player_id: str) -> bool:
    current = game.get_current_player()
    return current is not None and current.id == player_id


@app.route('/api/health', methods=['GET'])
def health():
    """Liveness check."""
    return jsonify({'status': 'ok', 'timestamp': datetime.now(timezone.utc).isoformat()})


@app.route('/api/game/new', methods=['POST'])
def new_game():
    """Create a new game, optionally with map size and seed."""
    try:
        data = request.get_json(silent=True) or {}

        try:
            width = int(data['width']) if data.get('width') is not None else None
            height = int(data['height']) if data.get('height') is not None else None
            seed = int(data['seed']) if data.get('seed') is not None else None
        except (ValueError, TypeError):
            return jsonify({'error': 'width, height and seed must be integers'}), 400

        # Over HTTP the AI turn runs inside the end_turn request, unpaced
        game = Game(ai_delay=0)
        try:
            game.init_game(width, height, seed)
        except ValueError as e:
            # Map too small for both starting armies
            return jsonify({'error': str(e)}), 400
        games[game.state.game_id] = game

        return jsonify({'game_id': game.state.game_id})

    except Exception as e:
        return jsonify({'error': f'Failed to create game: {str(e)}'}), 500


@app.route('/api/game/<game_id>/state', methods=['GET'])
def get_game_state(game_id: str):
    """Retrieve the current game state for the given game ID."""
    game = _get_game(game_id)
    if not game:
        return jsonify({'error': 'Game not found'}), 404
    return jsonify(get_game_summary(game.state))


@app.route('/api/game/<game_id>/move', methods=['POST'])
def move(game_id: str):
    """Move one of the current player's units."""
    game = _get_game(game_id)
    if not game:
        return jsonify({'error': 'Game not found'}), 404

    error = _human_turn_error(game)
    if error:
        return error

    data = request.get_json(silent=True)
    if data is None:
        return jsonify({'error': 'Invalid JSON data'}), 400

    unit_id = data.get('unit_id')
    target = data.get('to')
    if not unit_id or target is None:
        return jsonify({'error': 'Move needs unit_id and to: {q, r} or "q,r"'}), 400

    unit = game.get_unit(unit_id)
    if not unit or not _owned_by_current_player(game, unit.player_id):
        return jsonify({'error': f'Unit {unit_id} is not yours to command'}), 409

    destination = _parse_destination(target)
    if destination is None:
        return jsonify({'error': 'to must be {q, r} or a "q,r" key with integer q and r'}), 400

    result = game.move_unit(unit_id, destination)
    body = {
        'unit_id': result.unit_id,
        'from': _position_json(result.from_position),
        'to': _position_json(result.to_position),
        'success': result.success,
        'movement_cost': result.movement_cost,
    }
    return jsonify(body), (200 if result.success else 400)


@app.route('/api/game/<game_id>/attack', methods=['POST'])
def attack(game_id: str):
    """Attack an enemy unit."""
    game = _get_game(game_id)
    if not game:
        return jsonify({'error': 'Game not found'}), 404

    error = _human_turn_error(game)
    if error:
        return error

    data = request.get_json(silent=True) or {}
    attacker_id = data.get('attacker_id')
    defender_id = data.get('defender_id')
    if not attacker_id or not defender_id:
        return jsonify({'error': 'Attack needs attacker_id and defender_id'}), 400

    attacker = game.get_unit(attacker_id)
    if not attacker or not _owned_by_current_player(game, attacker.player_id):
        return jsonify({'error': f'Unit {attacker_id} is not yours to command'}), 409

    result = game.attack_unit(attacker_id, defender_id)
    if result is None:
        return jsonify({'error': 'Attack not allowed'}), 400

    body = asdict(result)
    body['phase'] = game.phase.value
    body['winner'] = game.state.winner
    return jsonify(body)


@app.route('/api/game/<game_id>/found', methods=['POST'])
def found(game_id: str):
    """Found a city with a settler."""
    game = _get_game(game_id)
    if not game:
        return jsonify({'error': 'Game not found'}), 404

    error = _human_turn_error(game)
    if error:
        return error

    data = request.get_json(silent=True) or {}
    settler_id = data.get('settler_id')
    settler = game.get_unit(settler_id) if settler_id else None
    if not settler or not _owned_by_current_player(game, settler.player_id):
        return jsonify({'error': f'Unit {settler_id} is not yours to command'}), 409

    city = game.found_city(settler_id)
    if city is None:
        return jsonify({'error': 'City cannot be founded here'}), 400
    return jsonify(serialize_city(city))


@app.route('/api/game/<game_id>/production', methods=['POST'])
def queue_production(game_id: str):
    """Add an item to a city's production queue."""
    game = _get_game(game_id)
    if not game:
        return jsonify({'error': 'Game not found'}), 404

    error = _human_turn_error(game)
    if error:
        return error

    data = request.get_json(silent=True) or {}
    city = game.state.cities.get(data.get('city_id', ''))
    if not city or not _owned_by_current_player(game, city.player_id):
        return jsonify({'error': 'City is not yours to manage'}), 409

    entry = game.add_to_production_queue(city.id, data.get('item_type', ''))
    if entry is None:
        return jsonify({'error': f"Unknown item type: {data.get('item_type')}"}), 400
    return jsonify(serialize_city(city))


@app.route('/api/game/<game_id>/production/<city_id>/<item_id>', methods=['DELETE'])
def unqueue_production(game_id: str, city_id: str, item_id: str):
    """Remove an item from a city's production queue."""
    game = _get_game(game_id)
    if not game:
        return jsonify({'error': 'Game not found'}), 404

    error = _human_turn_error(game)
    if error:
        return error

    city = game.state.cities.get(city_id)
    if not city or not _owned_by_current_player(game, city.player_id):
        return jsonify({'error': 'City is not yours to manage'}), 409

    if not game.remove_from_production_queue(city_id, item_id):
        return jsonify({'error': f'Item {item_id} is not queued'}), 404
    return jsonify(serialize_city(city))


@app.route('/api/game/<game_id>/end_turn', methods=['POST'])
def end_turn(game_id: str):
    """End the human player's turn; the AI turn is played before responding."""
    try:
        game = _get_game(game_id)
        if not game:
            return jsonify({'error': 'Game not found'}), 404

        error = _human_turn_error(game)
        if error:
            return error

        game.end_turn()
        return jsonify(get_game_summary(game.state))

    except Exception as e:
        return jsonify({'error': f'Failed to end turn: {str(e)}'}), 500


@app.route('/api/game/<game_id>/movable/<unit_id>', methods=['GET'])
def movable(game_id: str, unit_id: str):
    """Hexes a unit can move to, for highlighting."""
    game = _get_game(game_id)
    if not game:
        return jsonify({'error': 'Game not found'}), 404
    if not game.get_unit(unit_id):
        return jsonify({'error': f'Unit {unit_id} not found'}), 404
    return jsonify({'unit_id': unit_id,
                    'coords': sorted(coord_key(p) for p in game.get_movable_coords(unit_id))})


@app.route('/api/game/<game_id>/attackable/<unit_id>', methods=['GET'])
def attackable(game_id: str, unit_id: str):
    """Hexes a unit can attack, for highlighting."""
    game = _get_game(game_id)
    if not game:
        return jsonify({'error': 'Game not found'}), 404
    if not game.get_unit(unit_id):
        return jsonify({'error': f'Unit {unit_id} not found'}), 404
    return jsonify({'unit_id': unit_id,
                    'coords': sorted(coord_key(p) for p in game.get_attackable_coords(unit_id))})


@app.route('/api/game/<game_id>/units/<player_id>', methods=['GET'])
def player_units(game_id: str, player_id: str):
    game = _get_game(game_id)
    if not game:
        return jsonify({'error': 'Game not found'}), 404
    return jsonify({'player_id': player_id,
                    'units': [serialize_unit(u) for u in game.get_player_units(player_id)]})


@app.route('/api/game/<game_id>/log', methods=['GET'])
def get_game_log(game_id: str):
    """Retrieve the full game log for analysis."""
    game = _get_game(game_id)
    if not game:
        return jsonify({'error': 'Game not found'}), 404

    return jsonify({
        'game_id': game_id,
        'turn': game.state.turn,
        'phase': game.phase.value,
        'log': game.state.log,
        'game_log': game.state.game_log,
    })


if __name__ == '__main__':
    app.run(debug=True)
