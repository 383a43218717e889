"""
Game state management for the hex strategy engine.
Implements the game state store, config loading, game setup, the event log
and serialization for API responses.

Players: a human player and an AI opponent, fixed for the whole game
Units: warrior, archer, cavalry and settler per player at game start
Map: 20x15 hexes by default, axial coordinate system
"""

from __future__ import annotations
import uuid
import json
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple, Optional

from hex_math import coord_key
from map_gen import generate_map, get_spawn_points, is_on_map
from models import (
    City, GameMap, GamePhase, Player, Unit, UNIT_STATS, DEFAULT_PLAYERS,
)

DEFAULT_CONFIG: Dict[str, Any] = {
    'map_width': 20,
    'map_height': 15,
    'water_ratio': 0.15,
    'mountain_ratio': 0.10,
    'forest_ratio': 0.15,
    'ai_delay': 0.3,
    'base_damage': 30,
    'retaliation_factor': 0.5,
    'city_work_radius': 2,
    'game_log_size': 20,
}


class ActionRejected(Exception):
    """Raised inside a rule when an action's preconditions are not met."""
    pass


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load config.json (next to this module unless a path is given), falling
    back to defaults for any missing key or a missing/invalid file.
    """
    config = dict(DEFAULT_CONFIG)
    if config_path is None:
        config_path = os.path.join(os.path.dirname(__file__), 'config.json')
    try:
        with open(config_path, 'r') as f:
            config.update(json.load(f))
    except (FileNotFoundError, json.JSONDecodeError):
        # Use defaults if config file is missing or invalid
        pass
    return config


@dataclass
class GameState:
    """
    Complete game state containing all game information.

    Units and cities are kept in insertion-ordered dicts keyed by id, so
    iteration order is creation order.
    """
    game_id: str  # Unique game identifier
    map: GameMap = field(default_factory=lambda: GameMap(width=0, height=0))
    units: Dict[str, Unit] = field(default_factory=dict)
    cities: Dict[str, City] = field(default_factory=dict)
    players: List[Player] = field(default_factory=list)
    current_player_index: int = 0
    phase: GamePhase = GamePhase.SETUP
    turn: int = 1  # Current turn number (starts at 1)
    selected_unit_id: Optional[str] = None
    selected_city_id: Optional[str] = None
    winner: Optional[str] = None
    log: List[Dict[str, Any]] = field(default_factory=list)  # Structured event log
    game_log: List[str] = field(default_factory=list)  # Recent player-facing messages
    config: Dict[str, Any] = field(default_factory=lambda: dict(DEFAULT_CONFIG))
    id_counters: Dict[str, int] = field(default_factory=dict)

    def next_id(self, prefix: str) -> str:
        """Generate the next id for `prefix` ('u' units, 'c' cities, 'q' queue items)."""
        self.id_counters[prefix] = self.id_counters.get(prefix, 0) + 1
        return f"{prefix}{self.id_counters[prefix]}"

    def get_player_by_id(self, player_id: str) -> Optional[Player]:
        """Get a player by their ID."""
        for player in self.players:
            if player.id == player_id:
                return player
        return None

    def get_current_player(self) -> Optional[Player]:
        if not self.players:
            return None
        return self.players[self.current_player_index]

    def get_unit(self, unit_id: str) -> Optional[Unit]:
        return self.units.get(unit_id)

    def get_unit_at_position(self, position: Tuple[int, int]) -> Optional[Unit]:
        """Get the unit at a specific position, if any."""
        for unit in self.units.values():
            if unit.position == position:
                return unit
        return None

    def get_city_at_position(self, position: Tuple[int, int]) -> Optional[City]:
        """Get the city at a specific position, if any."""
        for city in self.cities.values():
            if city.position == position:
                return city
        return None

    def get_player_units(self, player_id: str) -> List[Unit]:
        return [u for u in self.units.values() if u.player_id == player_id]

    def get_player_cities(self, player_id: str) -> List[City]:
        return [c for c in self.cities.values() if c.player_id == player_id]

    def place_unit(self, unit: Unit) -> None:
        """
        Add a unit to the game and mark its cell as occupied.

        Raises:
            ActionRejected: If the position has no cell or already holds a unit
        """
        cell = self.map.get_cell(unit.position)
        if not cell:
            raise ActionRejected(f"No cell at {unit.position}")
        occupant = self.get_unit_at_position(unit.position)
        if occupant:
            raise ActionRejected(f"{unit.position} is already held by {occupant.id}")
        self.units[unit.id] = unit
        cell.unit_id = unit.id

    def relocate_unit(self, unit: Unit, position: Tuple[int, int]) -> None:
        """Move a unit, keeping the cells' occupancy in sync."""
        old_cell = self.map.get_cell(unit.position)
        if old_cell and old_cell.unit_id == unit.id:
            old_cell.unit_id = None
        unit.position = position
        new_cell = self.map.get_cell(position)
        if new_cell:
            new_cell.unit_id = unit.id

    def remove_unit(self, unit_id: str) -> Optional[Unit]:
        """Remove a unit from the game entirely."""
        unit = self.units.pop(unit_id, None)
        if unit:
            cell = self.map.get_cell(unit.position)
            if cell and cell.unit_id == unit_id:
                cell.unit_id = None
            if self.selected_unit_id == unit_id:
                self.selected_unit_id = None
        return unit

    def is_active(self) -> bool:
        """True while turns are being played."""
        return self.phase in (GamePhase.PLAYER_TURN, GamePhase.AI_TURN)


def log_event(game_state: GameState, event: str, **kwargs) -> None:
    """
    Add an event to the game state log.

    Args:
        game_state: Current game state
        event: Description of the event
        **kwargs: Additional event data to include
    """
    log_entry = {
        'turn': game_state.turn,
        'phase': game_state.phase.value,
        'event': event,
        **kwargs
    }
    game_state.log.append(log_entry)


def add_game_message(game_state: GameState, message: str) -> None:
    """Append a player-facing message, keeping only the most recent ones."""
    limit = game_state.config.get('game_log_size', DEFAULT_CONFIG['game_log_size'])
    game_state.game_log.append(message)
    if len(game_state.game_log) > limit:
        del game_state.game_log[:-limit]


def create_unit(game_state: GameState, unit_type: str, player_id: str,
                position: Tuple[int, int]) -> Unit:
    """
    Create a new full-health unit and place it on the map.

    Args:
        game_state: Game to add the unit to
        unit_type: Key into UNIT_STATS
        player_id: Owner of the unit
        position: Starting position as (q, r)

    Returns:
        The placed Unit
    """
    stats = UNIT_STATS[unit_type]
    unit = Unit(
        id=game_state.next_id('u'),
        type=unit_type,
        player_id=player_id,
        position=position,
        health=stats.max_health,
        movement_points=stats.movement,
    )
    game_state.place_unit(unit)
    return unit


def create_players() -> List[Player]:
    return [Player(id=pid, name=name, is_ai=is_ai, color=color)
            for pid, name, is_ai, color in DEFAULT_PLAYERS]


def get_starting_layout(width: int, height: int) -> List[List[Tuple[str, Tuple[int, int]]]]:
    """
    Starting army of each player as (unit type, position) pairs.

    Player 1 spawns bottom-left and spreads right/up, player 2 spawns
    top-right and spreads left/down.
    """
    layouts = []
    for index, (base_q, base_r) in enumerate(get_spawn_points(width, height)):
        step = 1 if index == 0 else -1
        layouts.append([
            ('warrior', (base_q, base_r)),
            ('archer', (base_q + step, base_r)),
            ('cavalry', (base_q, base_r - step)),
            ('settler', (base_q - step, base_r)),
        ])
    return layouts


def validate_map_size(width: int, height: int) -> None:
    """
    Raises:
        ValueError: If the starting armies would leave the map or share a hex
    """
    positions = [position for layout in get_starting_layout(width, height)
                 for _, position in layout]
    off_map = [position for position in positions if not is_on_map(position, width, height)]
    if off_map:
        raise ValueError(f"A {width}x{height} map has no room for starting units at {off_map}")
    if len(set(positions)) != len(positions):
        raise ValueError(f"On a {width}x{height} map the starting armies overlap")


def create_initial_units(game_state: GameState) -> List[Unit]:
    """Create each player's starting army around its spawn anchor."""
    units = []
    layouts = get_starting_layout(game_state.map.width, game_state.map.height)
    for player, layout in zip(game_state.players, layouts):
        for unit_type, position in layout:
            units.append(create_unit(game_state, unit_type, player.id, position))
    return units


def initialize_game(width: Optional[int] = None, height: Optional[int] = None,
                    seed: Optional[int] = None,
                    config: Optional[Dict[str, Any]] = None) -> GameState:
    """
    Initialize a new game state with two players, a generated map and
    starting units. The human player moves first.

    Args:
        width: Map width (config map_width if None)
        height: Map height (config map_height if None)
        seed: Random seed for map generation (wall-clock if None)
        config: Config dict (load_config() if None)

    Returns:
        New GameState in the player_turn phase

    Raises:
        ValueError: If the starting armies do not fit on the map
    """
    if config is None:
        config = load_config()
    if width is None:
        width = config['map_width']
    if height is None:
        height = config['map_height']
    validate_map_size(width, height)

    game_map = generate_map(
        width, height,
        water_ratio=config['water_ratio'],
        mountain_ratio=config['mountain_ratio'],
        forest_ratio=config['forest_ratio'],
        seed=seed,
    )

    game_state = GameState(
        game_id=str(uuid.uuid4()),
        map=game_map,
        players=create_players(),
        config=config,
    )
    create_initial_units(game_state)

    game_state.phase = GamePhase.PLAYER_TURN
    log_event(game_state, f"Game started on a {width}x{height} map", seed=seed)
    add_game_message(game_state, "Game started! Your turn.")
    return game_state


def serialize_unit(unit: Unit) -> Dict[str, Any]:
    return {
        'id': unit.id,
        'type': unit.type,
        'player_id': unit.player_id,
        'position': {'q': unit.position[0], 'r': unit.position[1]},
        'health': unit.health,
        'max_health': unit.stats.max_health,
        'movement_points': unit.movement_points,
        'has_attacked': unit.has_attacked,
        'is_fortified': unit.is_fortified,
    }


def serialize_city(city: City) -> Dict[str, Any]:
    return {
        'id': city.id,
        'name': city.name,
        'player_id': city.player_id,
        'position': {'q': city.position[0], 'r': city.position[1]},
        'population': city.population,
        'resources': {
            'food': city.resources.food,
            'production': city.resources.production,
            'gold': city.resources.gold,
        },
        'production_queue': [
            {
                'id': entry.id,
                'type': entry.item.type,
                'name': entry.item.name,
                'cost': entry.item.cost,
                'progress': entry.progress,
            }
            for entry in city.production_queue
        ],
        'is_capital': city.is_capital,
        'growth_progress': city.growth_progress,
    }


def get_game_summary(game_state: GameState) -> Dict[str, Any]:
    """
    Get a summary of the current game state for API responses.

    Args:
        game_state: Current game state

    Returns:
        JSON-ready dictionary; map cells keyed by "q,r"
    """
    current = game_state.get_current_player()
    return {
        'game_id': game_state.game_id,
        'turn': game_state.turn,
        'phase': game_state.phase.value,
        'current_player': current.id if current else None,
        'winner': game_state.winner,
        'selected_unit_id': game_state.selected_unit_id,
        'selected_city_id': game_state.selected_city_id,
        'players': [
            {'id': p.id, 'name': p.name, 'is_ai': p.is_ai, 'color': p.color}
            for p in game_state.players
        ],
        'units': [serialize_unit(u) for u in game_state.units.values()],
        'cities': [serialize_city(c) for c in game_state.cities.values()],
        'map': {
            'width': game_state.map.width,
            'height': game_state.map.height,
            'cells': {
                coord_key(position): {
                    'terrain': cell.terrain,
                    'unit_id': cell.unit_id,
                    'city_id': cell.city_id,
                }
                for position, cell in game_state.map.cells.items()
            },
        },
        'game_log': list(game_state.game_log),
    }
