"""
End-of-turn processing for the hex strategy engine.
Handles city ticks, player rotation, unit resets and turn advancement.

Sequence, run once per end_turn call:
- Advance the cities of the player ending the turn (production, growth, yield)
- Pass control to the next player
- Reset every unit's movement points and attack/fortify flags
- Increment the turn counter when control wraps back to the first player
- Clear the selection
"""

from typing import Dict, List

from cities import process_city_turn
from models import GamePhase
from state import GameState, add_game_message, log_event


def process_player_cities(game_state: GameState, player_id: str) -> List[str]:
    """
    Run the end-of-turn tick for every city of one player.

    Returns:
        IDs of the cities processed
    """
    processed = []
    for city in game_state.get_player_cities(player_id):
        process_city_turn(game_state, city)
        processed.append(city.id)
    return processed


def reset_units(game_state: GameState) -> None:
    """Restore every unit on the map, whichever player owns it."""
    for unit in game_state.units.values():
        unit.movement_points = unit.stats.movement
        unit.has_attacked = False
        unit.is_fortified = False


def end_turn(game_state: GameState) -> Dict:
    """
    Finish the current player's turn and hand control to the next player.

    Does nothing before the game starts or after it ends.

    Args:
        game_state: Current game state

    Returns:
        Dictionary with results: {'ended': bool, 'cities_processed': list,
        'next_player': str or None, 'turn': int}
    """
    results = {
        'ended': False,
        'cities_processed': [],
        'next_player': None,
        'turn': game_state.turn,
    }

    if not game_state.is_active():
        log_event(game_state, f"End turn ignored during {game_state.phase.value} phase",
                  error_type="validation_error")
        return results

    outgoing = game_state.get_current_player()
    results['cities_processed'] = process_player_cities(game_state, outgoing.id)

    next_index = (game_state.current_player_index + 1) % len(game_state.players)
    next_player = game_state.players[next_index]
    game_state.current_player_index = next_index

    reset_units(game_state)

    if next_index == 0:
        game_state.turn += 1

    game_state.selected_unit_id = None
    game_state.selected_city_id = None
    game_state.phase = GamePhase.AI_TURN if next_player.is_ai else GamePhase.PLAYER_TURN

    log_event(game_state, f"Player {outgoing.id} ended the turn, {next_player.id} to act",
              previous_player=outgoing.id, next_player=next_player.id)
    if not next_player.is_ai:
        add_game_message(game_state, f"Turn {game_state.turn}: your move.")

    results['ended'] = True
    results['next_player'] = next_player.id
    results['turn'] = game_state.turn
    return results
