"""
Rule-based AI player for the hex strategy engine.

Acts only through the game controller's public actions and queries. Each
unit attacks the weakest enemy in range if it can, then walks towards the
nearest enemy with whatever movement it has left.
"""

import time
from typing import Any, Callable, List, Optional, Tuple

from hex_math import hex_distance
from models import GamePhase, Unit


class AIPlayer:
    """
    Plays the AI side's turn, one unit at a time.

    The pause between unit actions only paces the turn for a watching
    player; pass delay=0 or a no-op sleep to run it synchronously.
    """

    def __init__(self, game: Any, delay: float = 0.3, sleep: Callable[[float], Any] = time.sleep):
        self.game = game
        self.delay = delay
        self.sleep = sleep

    def _pause(self) -> None:
        if self.delay > 0:
            self.sleep(self.delay)

    def execute_turn(self) -> None:
        """Act with every unit of the current AI player, then end the turn."""
        current_player = self.game.get_current_player()
        if not current_player or not current_player.is_ai:
            return

        unit_ids = [u.id for u in self.game.get_player_units(current_player.id)]
        for unit_id in unit_ids:
            if self.game.phase != GamePhase.AI_TURN:
                break
            unit = self.game.get_unit(unit_id)
            if not unit:
                continue  # Destroyed earlier this turn

            self.execute_unit_action(unit)
            self._pause()

        self._pause()
        if self.game.phase == GamePhase.AI_TURN:
            self.game.end_turn()

    def execute_unit_action(self, unit: Unit) -> None:
        if not unit.has_attacked:
            self.try_attack(unit)
            unit = self.game.get_unit(unit.id)
            if not unit:
                return

        if unit.movement_points > 0 and self.game.phase == GamePhase.AI_TURN:
            self.try_move(unit)

    def get_enemies(self, unit: Unit) -> List[Unit]:
        return [u for u in self.game.get_all_units() if u.player_id != unit.player_id]

    def try_attack(self, unit: Unit) -> bool:
        """
        Attack the lowest-health enemy in range; the first one found wins ties.

        Returns:
            True if an attack was made
        """
        attackable = self.game.get_attackable_coords(unit.id)
        targets = [e for e in self.get_enemies(unit) if e.position in attackable]
        if not targets:
            return False

        target = min(targets, key=lambda e: e.health)
        result = self.game.attack_unit(unit.id, target.id)
        if result:
            self.game.add_message(f"The AI's {unit.type} attacked your {target.type}!")
        return result is not None

    def find_nearest_enemy(self, unit: Unit) -> Optional[Unit]:
        enemies = self.get_enemies(unit)
        if not enemies:
            return None
        return min(enemies, key=lambda e: hex_distance(unit.position, e.position))

    def try_move(self, unit: Unit) -> bool:
        """
        Step to the reachable hex closest to the nearest enemy.

        Candidates are scanned in the order the reachability search found
        them; the first one found wins ties.

        Returns:
            True if the unit moved
        """
        nearest = self.find_nearest_enemy(unit)
        if not nearest:
            return False

        movable = self.game.get_movable_positions(unit.id)
        if not movable:
            return False

        best: Tuple[int, int] = min(movable, key=lambda pos: hex_distance(pos, nearest.position))
        result = self.game.move_unit(unit.id, best)
        if result.success:
            self.game.log_event(f"AI moved {unit.id} towards {nearest.id}",
                                unit_id=unit.id, target_id=nearest.id)
            self.game.add_message(f"The AI's {unit.type} moved.")
        return result.success
