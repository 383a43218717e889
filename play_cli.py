"""
CLI play mode for the hex strategy engine.

Human vs AI on a generated hex map. ASCII renderer, command entry, AI turn
display, full game loop.

Usage: python play_cli.py [--seed N] [--width W] [--height H]
"""

import argparse
import random
from typing import List, Optional

from game import Game
from map_gen import print_map_stats
from models import GamePhase, PRODUCTION_ITEMS, get_growth_threshold

TERRAIN_CHAR = {
    "plains": ".",
    "hills": "n",
    "mountains": "^",
    "water": "~",
    "forest": "T",
    "desert": ":",
}

UNIT_CHAR = {
    "warrior": "w",
    "archer": "a",
    "cavalry": "c",
    "settler": "s",
    "worker": "k",
}

HELP_TEXT = """Commands:
  units                    list your units
  cities                   list your cities
  moves <unit>             show where a unit can move
  move <unit> <q> <r>      move a unit
  attack <unit> <target>   attack an enemy unit
  found <settler>          found a city
  queue <city> <item>      add warrior/archer/cavalry/settler/worker to a city's queue
  unqueue <city> <item_id> remove an item from a city's queue
  map                      terrain statistics
  end                      end your turn
  quit                     leave the game"""


# ---------------------------------------------------------------------------
# ASCII Hex Renderer
# ---------------------------------------------------------------------------


def render_board(game: Game, human_id: str) -> List[str]:
    """
    Render the board as text lines. Own units are upper case, enemy units
    lower case; cities show as '@' (own) or '&' (enemy) when empty.
    """
    state = game.state
    display = {}
    for pos, cell in state.map.cells.items():
        display[pos] = TERRAIN_CHAR.get(cell.terrain, "?")

    for city in state.cities.values():
        display[city.position] = "@" if city.player_id == human_id else "&"

    for unit in state.units.values():
        char = UNIT_CHAR.get(unit.type, "?")
        display[unit.position] = char.upper() if unit.player_id == human_id else char

    lines = []
    for r in range(state.map.height):
        r_offset = r // 2
        indent = " " if r % 2 else ""
        row = [display.get((q, r), " ") for q in range(-r_offset, state.map.width - r_offset)]
        lines.append(f"{r:3d} {indent}" + " ".join(row))
    return lines


def show_status(game: Game, human_id: str) -> None:
    state = game.state
    print()
    print(f"=== Turn {state.turn} ===")
    for line in render_board(game, human_id):
        print(line)
    print()
    for message in state.game_log[-5:]:
        print(f"  > {message}")


def describe_units(game: Game, player_id: str) -> List[str]:
    lines = []
    for unit in game.get_player_units(player_id):
        flags = " (attacked)" if unit.has_attacked else ""
        lines.append(f"  {unit.id:5} {unit.type:8} at ({unit.position[0]},{unit.position[1]}) "
                     f"hp {unit.health}/{unit.stats.max_health} mp {unit.movement_points}{flags}")
    return lines or ["  (no units)"]


def describe_cities(game: Game, player_id: str) -> List[str]:
    lines = []
    for city in game.get_player_cities(player_id):
        capital = " [capital]" if city.is_capital else ""
        lines.append(f"  {city.id:5} {city.name}{capital} pop {city.population} "
                     f"growth {city.growth_progress}/{get_growth_threshold(city.population)} "
                     f"food {city.resources.food} prod {city.resources.production} gold {city.resources.gold}")
        for entry in city.production_queue:
            lines.append(f"        {entry.id:5} {entry.item.name} {entry.progress}/{entry.item.cost}")
    return lines or ["  (no cities)"]


# ---------------------------------------------------------------------------
# Command handling
# ---------------------------------------------------------------------------


def handle_command(game: Game, human_id: str, raw: str) -> Optional[str]:
    """
    Execute one command line for the human player.

    Returns:
        Text to show, or None when the command ends the session ("quit")
    """
    parts = raw.strip().split()
    if not parts:
        return ""
    command, args = parts[0].lower(), parts[1:]

    if command == "quit":
        return None
    if command == "help":
        return HELP_TEXT
    if command == "units":
        return "\n".join(describe_units(game, human_id))
    if command == "cities":
        return "\n".join(describe_cities(game, human_id))
    if command == "map":
        print_map_stats(game.state.map)
        return ""

    if game.phase != GamePhase.PLAYER_TURN:
        return "It is not your turn."

    if command == "end":
        game.end_turn()
        return "Turn ended."

    if command in ("moves", "move", "attack", "found") and args:
        unit = game.get_unit(args[0])
        if not unit or unit.player_id != human_id:
            return f"You have no unit {args[0]}."

        if command == "moves":
            coords = sorted(game.get_movable_coords(unit.id))
            return "  " + " ".join(f"({q},{r})" for q, r in coords) if coords else "  Nowhere to go."

        if command == "move" and len(args) == 3:
            try:
                destination = (int(args[1]), int(args[2]))
            except ValueError:
                return "Coordinates must be integers."
            if destination not in game.get_movable_coords(unit.id):
                return f"{unit.id} cannot reach {destination}."
            result = game.move_unit(unit.id, destination)
            return f"{unit.id} moved to {destination}." if result.success else "Move failed."

        if command == "attack" and len(args) == 2:
            target = game.get_unit(args[1])
            if not target or target.position not in game.get_attackable_coords(unit.id):
                return f"{unit.id} cannot attack {args[1]}."
            result = game.attack_unit(unit.id, target.id)
            if not result:
                return "Attack failed."
            text = f"Dealt {result.defender_damage}, took {result.attacker_damage}."
            if result.defender_killed:
                text += f" {target.id} destroyed!"
            if result.attacker_killed:
                text += f" {unit.id} was lost!"
            return text

        if command == "found":
            city = game.found_city(unit.id)
            if not city:
                return "A city cannot be founded here."
            game.select_city(city.id)
            return f"{city.name} founded at {city.position}."

    if command in ("queue", "unqueue") and len(args) == 2:
        city = game.state.cities.get(args[0])
        if not city or city.player_id != human_id:
            return f"You have no city {args[0]}."
        if command == "queue":
            if args[1] not in PRODUCTION_ITEMS:
                return f"Choose one of: {', '.join(PRODUCTION_ITEMS)}."
            entry = game.add_to_production_queue(city.id, args[1])
            return f"{city.name} will build {entry.item.name} ({entry.id})."
        removed = game.remove_from_production_queue(city.id, args[1])
        return "Removed." if removed else f"{args[1]} is not queued."

    return "Unknown command. Type 'help'."


# ---------------------------------------------------------------------------
# Main Game Loop
# ---------------------------------------------------------------------------


def main():
    parser = argparse.ArgumentParser(description="Play the hex strategy game against the AI.")
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--width", type=int, default=None)
    parser.add_argument("--height", type=int, default=None)
    args = parser.parse_args()

    print("=" * 50)
    print("  HEX STRATEGY  -  CLI Play Mode")
    print("=" * 50)

    seed = args.seed if args.seed is not None else random.randint(0, 99999)
    print(f"\nMap seed: {seed}")

    game = Game()
    try:
        game.init_game(args.width, args.height, seed)
    except ValueError as e:
        parser.error(str(e))
    human_id = game.get_current_player().id
    print(HELP_TEXT)

    while game.phase != GamePhase.GAME_OVER:
        show_status(game, human_id)
        output = handle_command(game, human_id, input("> "))
        if output is None:
            break
        if output:
            print(output)

    print("\n" + "=" * 50)
    if game.state.winner == human_id:
        print("  VICTORY! The enemy has been wiped out.")
    elif game.state.winner:
        print("  DEFEAT. Your forces have been destroyed.")
    else:
        print("  Game abandoned.")
    print(f"  Final turn: {game.state.turn}")
    print("=" * 50)


if __name__ == "__main__":
    main()
