"""
Tests for upkeep.py functionality
"""

import unittest

from cities import add_to_production_queue, found_city
from models import GamePhase
from state import create_unit
from tests.helpers import AI, HUMAN, make_state
from upkeep import end_turn, process_player_cities, reset_units


class TestUpkeep(unittest.TestCase):

    def setUp(self):
        """Set up test fixtures."""
        self.game_state = make_state()
        self.warrior = create_unit(self.game_state, 'warrior', HUMAN, (2, 2))
        self.enemy = create_unit(self.game_state, 'cavalry', AI, (7, 7))

    def test_end_turn_hands_control_to_ai(self):
        """Ending the human turn starts the AI turn without advancing the turn counter."""
        results = end_turn(self.game_state)

        self.assertTrue(results['ended'])
        self.assertEqual(results['next_player'], AI)
        self.assertEqual(results['turn'], 1)
        self.assertEqual(self.game_state.current_player_index, 1)
        self.assertEqual(self.game_state.phase, GamePhase.AI_TURN)
        self.assertEqual(self.game_state.turn, 1)

    def test_turn_increments_on_wrap(self):
        """The turn counter goes up when control returns to the first player."""
        end_turn(self.game_state)
        results = end_turn(self.game_state)

        self.assertEqual(results['next_player'], HUMAN)
        self.assertEqual(self.game_state.turn, 2)
        self.assertEqual(self.game_state.current_player_index, 0)
        self.assertEqual(self.game_state.phase, GamePhase.PLAYER_TURN)

    def test_turn_counter_never_decreases(self):
        turns = []
        for _ in range(7):
            end_turn(self.game_state)
            turns.append(self.game_state.turn)
        self.assertEqual(turns, sorted(turns))
        self.assertEqual(self.game_state.turn, 4)

    def test_all_units_reset(self):
        """Units of both players are restored, not only the next player's."""
        self.warrior.movement_points = 0
        self.warrior.has_attacked = True
        self.warrior.is_fortified = True
        self.enemy.movement_points = 1
        self.enemy.has_attacked = True

        end_turn(self.game_state)

        self.assertEqual(self.warrior.movement_points, 2)
        self.assertFalse(self.warrior.has_attacked)
        self.assertFalse(self.warrior.is_fortified)
        self.assertEqual(self.enemy.movement_points, 4)
        self.assertFalse(self.enemy.has_attacked)

    def test_reset_units_restores_archetype_movement(self):
        self.warrior.movement_points = 0
        reset_units(self.game_state)
        self.assertEqual(self.warrior.movement_points, self.warrior.stats.movement)

    def test_selection_cleared(self):
        self.game_state.selected_unit_id = self.warrior.id
        self.game_state.selected_city_id = 'c1'
        end_turn(self.game_state)
        self.assertIsNone(self.game_state.selected_unit_id)
        self.assertIsNone(self.game_state.selected_city_id)

    def test_outgoing_player_cities_processed(self):
        settler = create_unit(self.game_state, 'settler', HUMAN, (5, 5))
        city = found_city(self.game_state, settler.id)
        add_to_production_queue(self.game_state, city.id, 'settler')

        results = end_turn(self.game_state)

        self.assertEqual(results['cities_processed'], [city.id])
        self.assertEqual(city.production_queue[0].progress, 20)
        self.assertEqual(city.population, 2)

    def test_other_player_cities_wait(self):
        settler = create_unit(self.game_state, 'settler', AI, (5, 5))
        city = found_city(self.game_state, settler.id)

        results = end_turn(self.game_state)

        self.assertEqual(results['cities_processed'], [])
        self.assertEqual(city.growth_progress, 0)
        self.assertEqual(process_player_cities(self.game_state, AI), [city.id])

    def test_ignored_outside_play(self):
        for phase in (GamePhase.SETUP, GamePhase.GAME_OVER):
            self.game_state.phase = phase
            results = end_turn(self.game_state)
            self.assertFalse(results['ended'])
            self.assertIsNone(results['next_player'])
            self.assertEqual(self.game_state.current_player_index, 0)
            self.assertEqual(self.game_state.turn, 1)
            self.assertEqual(self.game_state.phase, phase)

    def test_events_logged(self):
        end_turn(self.game_state)
        entry = self.game_state.log[-1]
        self.assertEqual(entry['previous_player'], HUMAN)
        self.assertEqual(entry['next_player'], AI)

    def test_player_message_on_human_turn(self):
        end_turn(self.game_state)
        end_turn(self.game_state)
        self.assertEqual(self.game_state.game_log[-1], "Turn 2: your move.")


if __name__ == '__main__':
    unittest.main()
