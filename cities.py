"""
City founding and the city economy for the hex strategy engine.

Each end of turn a city of the player ending the turn advances its
production queue, grows, then recomputes its yield from surrounding terrain.
"""

from typing import Optional, Tuple

from hex_math import get_hex_neighbors, hexes_in_range
from models import (
    City, CityResources, CITY_NAMES, PRODUCTION_ITEMS, ProductionQueueItem,
    TERRAIN_PROPERTIES, get_growth_threshold,
)
from state import (
    ActionRejected, DEFAULT_CONFIG, GameState, add_game_message, create_unit, log_event,
)

BASE_FOOD = 2
BASE_PRODUCTION = 2
BASE_GOLD = 1


def calculate_city_resources(game_state: GameState, city: City) -> CityResources:
    """
    Calculate a city's per-turn yield.

    Base yield plus the food and production of every hex within the work
    radius that is not itself a city hex, so the city's own hex never counts.

    Args:
        game_state: Current game state
        city: City to calculate for

    Returns:
        New CityResources
    """
    radius = game_state.config.get('city_work_radius', DEFAULT_CONFIG['city_work_radius'])
    resources = CityResources(food=BASE_FOOD, production=BASE_PRODUCTION, gold=BASE_GOLD)

    for position in hexes_in_range(city.position, radius):
        cell = game_state.map.get_cell(position)
        if not cell or cell.city_id:
            continue
        terrain = TERRAIN_PROPERTIES[cell.terrain]
        resources.food += terrain.food
        resources.production += terrain.production

    return resources


def pick_city_name(game_state: GameState) -> str:
    return CITY_NAMES[len(game_state.cities) % len(CITY_NAMES)]


def validate_found_city(game_state: GameState, settler_id: str) -> None:
    """
    Raises:
        ActionRejected: If the unit cannot found a city where it stands
    """
    if not game_state.is_active():
        raise ActionRejected(f"Cannot found a city during {game_state.phase.value} phase")

    settler = game_state.get_unit(settler_id)
    if not settler:
        raise ActionRejected(f"Unit {settler_id} not found")

    if settler.type != 'settler':
        raise ActionRejected(f"Unit {settler_id} is a {settler.type}, only settlers found cities")

    if game_state.get_city_at_position(settler.position):
        raise ActionRejected(f"A city already stands at {settler.position}")


def found_city(game_state: GameState, settler_id: str) -> Optional[City]:
    """
    Found a city where a settler stands, consuming the settler.

    The player's first city becomes its capital.

    Args:
        game_state: Current game state
        settler_id: Settler unit founding the city

    Returns:
        The new City, or None if founding is not allowed
    """
    try:
        validate_found_city(game_state, settler_id)
    except ActionRejected as e:
        log_event(game_state, f"City founding rejected: {e}", error_type="validation_error")
        return None

    settler = game_state.units[settler_id]
    is_capital = not game_state.get_player_cities(settler.player_id)

    city = City(
        id=game_state.next_id('c'),
        name=pick_city_name(game_state),
        player_id=settler.player_id,
        position=settler.position,
        population=1,
        is_capital=is_capital,
        growth_progress=0,
    )
    game_state.cities[city.id] = city

    cell = game_state.map.get_cell(city.position)
    if cell:
        cell.city_id = city.id

    game_state.remove_unit(settler_id)
    city.resources = calculate_city_resources(game_state, city)

    log_event(game_state, f"Player {city.player_id} founded {city.name} at {city.position}",
              city_id=city.id, player_id=city.player_id, is_capital=is_capital)
    add_game_message(game_state, f"{city.name} was founded{' as the capital' if is_capital else ''}.")
    return city


def add_to_production_queue(game_state: GameState, city_id: str, item_type: str) -> Optional[ProductionQueueItem]:
    """
    Append an item to the end of a city's production queue.

    Returns:
        The queued item, or None for an unknown city or item type, or
        outside active play
    """
    city = game_state.cities.get(city_id)
    item = PRODUCTION_ITEMS.get(item_type)
    if not city or not item or not game_state.is_active():
        log_event(game_state, f"Cannot queue {item_type} in city {city_id}", error_type="validation_error")
        return None

    entry = ProductionQueueItem(id=game_state.next_id('q'), item=item, progress=0)
    city.production_queue.append(entry)
    log_event(game_state, f"{city.name} queued {item.name}", city_id=city_id, item_id=entry.id)
    return entry


def remove_from_production_queue(game_state: GameState, city_id: str, item_id: str) -> bool:
    """
    Remove an item from a city's production queue. Its progress is lost.

    Returns:
        True if the item was removed
    """
    city = game_state.cities.get(city_id)
    if not city or not game_state.is_active():
        return False

    for index, entry in enumerate(city.production_queue):
        if entry.id == item_id:
            del city.production_queue[index]
            log_event(game_state, f"{city.name} removed {entry.item.name} from its queue",
                      city_id=city_id, item_id=item_id)
            return True
    return False


def find_spawn_position(game_state: GameState, city: City) -> Optional[Tuple[int, int]]:
    """First neighbor of the city, in direction order, that is on the map, passable and empty."""
    for position in get_hex_neighbors(city.position):
        cell = game_state.map.get_cell(position)
        if not cell or not TERRAIN_PROPERTIES[cell.terrain].passable:
            continue
        if game_state.get_unit_at_position(position):
            continue
        return position
    return None


def advance_production(game_state: GameState, city: City) -> Optional[str]:
    """
    Put one turn of production into the head of the queue.

    A completed item spawns its unit next to the city and leaves the queue.
    If every neighbor is blocked the item still leaves the queue, without a
    unit.

    Returns:
        ID of the spawned unit, if any
    """
    if not city.production_queue:
        return None

    head = city.production_queue[0]
    head.progress += city.resources.production
    if head.progress < head.item.cost:
        return None

    city.production_queue.pop(0)
    position = find_spawn_position(game_state, city)
    if position is None:
        log_event(game_state, f"{city.name} completed {head.item.name} but had no free tile",
                  city_id=city.id, item_id=head.id)
        return None

    unit = create_unit(game_state, head.item.type, city.player_id, position)
    log_event(game_state, f"{city.name} completed {head.item.name} at {position}",
              city_id=city.id, unit_id=unit.id)
    add_game_message(game_state, f"{city.name} finished building a {head.item.name}.")
    return unit.id


def advance_growth(game_state: GameState, city: City) -> bool:
    """
    Add the city's food to its growth progress; grow by one when the
    threshold is reached.

    Returns:
        True if the population grew
    """
    city.growth_progress += city.resources.food
    if city.growth_progress >= get_growth_threshold(city.population):
        city.population += 1
        city.growth_progress = 0
        log_event(game_state, f"{city.name} grew to population {city.population}",
                  city_id=city.id, population=city.population)
        return True
    return False


def process_city_turn(game_state: GameState, city: City) -> None:
    """End-of-turn tick for one city: production, growth, then yield recompute."""
    advance_production(game_state, city)
    advance_growth(game_state, city)
    city.resources = calculate_city_resources(game_state, city)
