"""
Unit movement for the hex strategy engine.

move_unit checks the straight hex distance against the unit's remaining
movement points. Terrain movement cost is only applied by the reachability
query get_movable_coords, which callers use to pick legal destinations.
"""

from collections import deque
from typing import Dict, List, Set, Tuple

from hex_math import get_hex_neighbors, hex_distance
from models import MoveResult, TERRAIN_PROPERTIES, Unit
from state import ActionRejected, GameState, log_event


def validate_move(unit: Unit, destination: Tuple[int, int], game_state: GameState) -> int:
    """
    Validate a move and return its movement cost.

    Raises:
        ActionRejected: If the destination is missing, impassable, occupied
            or further away than the unit's remaining movement points
    """
    if not game_state.is_active():
        raise ActionRejected(f"Cannot move during {game_state.phase.value} phase")

    cell = game_state.map.get_cell(destination)
    if not cell:
        raise ActionRejected(f"Destination {destination} is outside the map")

    if not TERRAIN_PROPERTIES[cell.terrain].passable:
        raise ActionRejected(f"Destination {destination} is impassable {cell.terrain}")

    occupant = game_state.get_unit_at_position(destination)
    if occupant and occupant.id != unit.id:
        raise ActionRejected(f"Destination {destination} is occupied by {occupant.id}")

    distance = hex_distance(unit.position, destination)
    if distance > unit.movement_points:
        raise ActionRejected(
            f"Destination {destination} is {distance} hexes away, "
            f"unit has {unit.movement_points} movement points"
        )
    return distance


def move_unit(game_state: GameState, unit_id: str, destination: Tuple[int, int]) -> MoveResult:
    """
    Move a unit to `destination`, spending movement points equal to the hex distance.

    Args:
        game_state: Current game state
        unit_id: Unit to move
        destination: Target hex as (q, r)

    Returns:
        MoveResult; success is False and nothing changes when the move is illegal
    """
    destination = tuple(destination)
    unit = game_state.get_unit(unit_id)
    if not unit:
        log_event(game_state, f"Move rejected: unit {unit_id} not found", error_type="validation_error")
        return MoveResult(unit_id=unit_id, from_position=(0, 0), to_position=destination,
                          success=False, movement_cost=0)

    origin = unit.position
    try:
        cost = validate_move(unit, destination, game_state)
    except ActionRejected as e:
        log_event(game_state, f"Move rejected for unit {unit_id}: {e}", error_type="validation_error")
        return MoveResult(unit_id=unit_id, from_position=origin, to_position=destination,
                          success=False, movement_cost=0)

    game_state.relocate_unit(unit, destination)
    unit.movement_points -= cost

    log_event(game_state, f"Unit {unit_id} moved from {origin} to {destination}",
              unit_id=unit_id, movement_cost=cost, movement_points=unit.movement_points)
    return MoveResult(unit_id=unit_id, from_position=origin, to_position=destination,
                      success=True, movement_cost=cost)


def get_reachable_costs(game_state: GameState, unit: Unit) -> Dict[Tuple[int, int], int]:
    """
    Cheapest terrain-weighted cost to every hex the unit can reach this turn.

    Breadth-first search limited by the unit's movement points. Impassable or
    missing cells prune the branch; occupied cells cannot be passed through.
    The origin is included with cost 0.

    Args:
        game_state: Current game state (not modified)
        unit: Unit to search from

    Returns:
        Dict of (q, r) -> cost, in discovery order
    """
    occupied = {u.position for u in game_state.units.values()}
    origin = unit.position
    budget = unit.movement_points

    best: Dict[Tuple[int, int], int] = {origin: 0}
    queue = deque([(origin, 0)])

    while queue:
        current, cost = queue.popleft()
        if cost > best[current]:
            continue  # A cheaper route was found after this entry was queued
        if current != origin and current in occupied:
            continue
        if cost >= budget:
            continue

        for neighbor in get_hex_neighbors(current):
            cell = game_state.map.get_cell(neighbor)
            if not cell:
                continue
            terrain = TERRAIN_PROPERTIES[cell.terrain]
            if not terrain.passable:
                continue

            new_cost = cost + terrain.movement_cost
            if new_cost <= budget and new_cost < best.get(neighbor, new_cost + 1):
                best[neighbor] = new_cost
                queue.append((neighbor, new_cost))

    return best


def get_movable_positions(game_state: GameState, unit_id: str) -> List[Tuple[int, int]]:
    """
    Hexes the unit can legally end its move on this turn, in the order the
    search first reached them.

    Excludes the origin and every occupied hex. Pure: never modifies state.

    Args:
        game_state: Current game state
        unit_id: Unit to query

    Returns:
        List of (q, r) coordinates; empty for an unknown unit
    """
    unit = game_state.get_unit(unit_id)
    if not unit:
        return []

    occupied = {u.position for u in game_state.units.values()}
    return [
        position for position in get_reachable_costs(game_state, unit)
        if position != unit.position and position not in occupied
    ]


def get_movable_coords(game_state: GameState, unit_id: str) -> Set[Tuple[int, int]]:
    """Set form of get_movable_positions, for membership checks."""
    return set(get_movable_positions(game_state, unit_id))
