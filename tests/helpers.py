"""Builders for small hand-made game states used across the test suite."""

from typing import Dict, Optional, Tuple

from game import Game
from models import GameMap, GamePhase, Hex
from state import DEFAULT_CONFIG, GameState, create_players, create_unit

HUMAN = "player1"
AI = "player2"


def make_grid(width: int = 10, height: int = 10, terrain: str = "plains",
              overrides: Optional[Dict[Tuple[int, int], str]] = None) -> GameMap:
    """Parallelogram map with q in [0, width) and r in [0, height)."""
    cells = {}
    for q in range(width):
        for r in range(height):
            cells[(q, r)] = Hex(q=q, r=r, terrain=terrain)
    for position, override in (overrides or {}).items():
        cells[position] = Hex(q=position[0], r=position[1], terrain=override)
    return GameMap(width=width, height=height, cells=cells)


def make_state(game_map: Optional[GameMap] = None) -> GameState:
    """Empty game in the human player's turn on a plains grid."""
    return GameState(
        game_id="test",
        map=game_map or make_grid(),
        players=create_players(),
        phase=GamePhase.PLAYER_TURN,
        config=dict(DEFAULT_CONFIG),
    )


def add_unit(game_state: GameState, unit_type: str, player_id: str,
             position: Tuple[int, int], health: Optional[int] = None):
    unit = create_unit(game_state, unit_type, player_id, position)
    if health is not None:
        unit.health = health
    return unit


def make_game(game_state: Optional[GameState] = None, ai_enabled: bool = True) -> Game:
    """Controller with an unpaced AI."""
    return Game(game_state or make_state(), ai_enabled=ai_enabled, ai_delay=0,
                config=dict(DEFAULT_CONFIG))
