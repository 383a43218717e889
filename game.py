"""
Game controller for the hex strategy engine.

A Game owns exactly one GameState and is the only surface through which the
UI layers and the AI player act on it. Rule modules receive the state
explicitly, so several games can run side by side.
"""

import time
import uuid
from typing import Any, Callable, Dict, List, Optional, Set, Tuple

from ai import AIPlayer
from cities import add_to_production_queue, found_city, remove_from_production_queue
from models import City, CombatResult, GamePhase, MoveResult, Player, ProductionQueueItem, Unit
from movement import get_movable_coords, get_movable_positions, move_unit
from resolution import attack_unit, get_attackable_coords
from state import GameState, add_game_message, create_players, initialize_game, load_config, log_event
from upkeep import end_turn


class Game:
    """Action and query surface over one game."""

    def __init__(self, game_state: Optional[GameState] = None, ai_enabled: bool = True,
                 ai_delay: Optional[float] = None, sleep: Callable[[float], Any] = time.sleep,
                 config: Optional[Dict[str, Any]] = None):
        """
        Args:
            game_state: Existing state to control; an empty setup-phase state if None
            ai_enabled: Play AI turns automatically when control passes to the AI
            ai_delay: Pause between AI unit actions (config ai_delay if None)
            sleep: Function used for the pause, injectable for tests
            config: Config dict (load_config() if None)
        """
        self.config = config if config is not None else load_config()
        if game_state is None:
            game_state = GameState(game_id=str(uuid.uuid4()), players=create_players(),
                                   config=self.config)
        self.state = game_state
        self.ai_enabled = ai_enabled
        delay = self.config.get('ai_delay', 0.3) if ai_delay is None else ai_delay
        self.ai = AIPlayer(self, delay=delay, sleep=sleep)
        self._ai_running = False
        self._init_args: Tuple[Optional[int], Optional[int], Optional[int]] = (None, None, None)

    # --- Lifecycle ---

    def init_game(self, width: Optional[int] = None, height: Optional[int] = None,
                  seed: Optional[int] = None) -> GameState:
        """Start a new game, replacing the current state."""
        self._init_args = (width, height, seed)
        self.state = initialize_game(width, height, seed=seed, config=self.config)
        return self.state

    def restart(self) -> GameState:
        """Start over with the same map size and seed as the last init_game."""
        width, height, seed = self._init_args
        return self.init_game(width, height, seed)

    # --- Actions ---

    def select_unit(self, unit_id: Optional[str]) -> bool:
        if unit_id is not None and unit_id not in self.state.units:
            return False
        self.state.selected_unit_id = unit_id
        return True

    def select_city(self, city_id: Optional[str]) -> bool:
        if city_id is not None and city_id not in self.state.cities:
            return False
        self.state.selected_city_id = city_id
        return True

    def move_unit(self, unit_id: str, destination: Tuple[int, int]) -> MoveResult:
        return move_unit(self.state, unit_id, destination)

    def attack_unit(self, attacker_id: str, defender_id: str) -> Optional[CombatResult]:
        return attack_unit(self.state, attacker_id, defender_id)

    def found_city(self, settler_id: str) -> Optional[City]:
        return found_city(self.state, settler_id)

    def add_to_production_queue(self, city_id: str, item_type: str) -> Optional[ProductionQueueItem]:
        return add_to_production_queue(self.state, city_id, item_type)

    def remove_from_production_queue(self, city_id: str, item_id: str) -> bool:
        return remove_from_production_queue(self.state, city_id, item_id)

    def end_turn(self) -> Dict:
        """
        End the current player's turn. When control passes to the AI and AI
        play is enabled, the AI turn is played before this returns.
        """
        results = end_turn(self.state)
        if (results['ended'] and self.ai_enabled and not self._ai_running
                and self.state.phase == GamePhase.AI_TURN):
            self.run_ai_turn()
        return results

    def run_ai_turn(self) -> None:
        self._ai_running = True
        try:
            self.ai.execute_turn()
        finally:
            self._ai_running = False

    def add_message(self, message: str) -> None:
        """Show a message to the player in the recent-messages log."""
        add_game_message(self.state, message)

    def log_event(self, event: str, **kwargs) -> None:
        log_event(self.state, event, **kwargs)

    # --- Queries ---

    @property
    def phase(self) -> GamePhase:
        return self.state.phase

    def get_current_player(self) -> Optional[Player]:
        return self.state.get_current_player()

    def get_player_units(self, player_id: str) -> List[Unit]:
        return self.state.get_player_units(player_id)

    def get_player_cities(self, player_id: str) -> List[City]:
        return self.state.get_player_cities(player_id)

    def get_unit(self, unit_id: str) -> Optional[Unit]:
        return self.state.get_unit(unit_id)

    def get_all_units(self) -> List[Unit]:
        return list(self.state.units.values())

    def get_unit_at_coord(self, position: Tuple[int, int]) -> Optional[Unit]:
        return self.state.get_unit_at_position(tuple(position))

    def get_city_at_coord(self, position: Tuple[int, int]) -> Optional[City]:
        return self.state.get_city_at_position(tuple(position))

    def get_movable_coords(self, unit_id: str) -> Set[Tuple[int, int]]:
        return get_movable_coords(self.state, unit_id)

    def get_movable_positions(self, unit_id: str) -> List[Tuple[int, int]]:
        return get_movable_positions(self.state, unit_id)

    def get_attackable_coords(self, unit_id: str) -> Set[Tuple[int, int]]:
        return get_attackable_coords(self.state, unit_id)
