"""
Combat resolution for the hex strategy engine.

Both sides take damage in one exchange: the defender from the attack, the
attacker from retaliation at reduced weight, at any range.
"""

import math
from typing import Optional, Set, Tuple

from hex_math import hex_distance
from models import CombatResult, GamePhase, TERRAIN_PROPERTIES, Unit, VictoryCondition
from state import (
    ActionRejected, DEFAULT_CONFIG, GameState, add_game_message, log_event,
)


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values (Python's round() is banker's rounding)."""
    return int(math.floor(value + 0.5))


def get_attack_range(unit: Unit) -> int:
    """Melee units (range 0) still reach adjacent hexes."""
    return max(unit.stats.range, 1)


def get_terrain_defense_bonus(game_state: GameState, position: Tuple[int, int]) -> float:
    cell = game_state.map.get_cell(position)
    if not cell:
        return 0
    return TERRAIN_PROPERTIES[cell.terrain].defense_bonus


def calculate_damage(attacker: Unit, defender: Unit, terrain_bonus: float,
                     base_damage: float = 30, retaliation_factor: float = 0.5) -> Tuple[int, int]:
    """
    Calculate the damage exchanged in one attack.

    Combat power scales with remaining health; the defender's power also
    scales with the terrain defense bonus of its hex.

    Args:
        attacker: Attacking unit
        defender: Defending unit
        terrain_bonus: Defense bonus of the defender's terrain
        base_damage: Damage dealt at equal power
        retaliation_factor: Weight of the defender's counter-damage

    Returns:
        (defender_damage, attacker_damage)
    """
    attacker_stats = attacker.stats
    defender_stats = defender.stats

    attack_power = attacker_stats.attack * (attacker.health / attacker_stats.max_health)
    defense_power = (defender_stats.defense * (1 + terrain_bonus)
                     * (defender.health / defender_stats.max_health))

    defender_damage = round_half_up(base_damage * (attack_power / defense_power))
    attacker_damage = round_half_up(base_damage * (defense_power / attack_power) * retaliation_factor)
    return defender_damage, attacker_damage


def validate_attack(attacker: Unit, defender: Unit, game_state: GameState) -> None:
    """
    Validate an attack.

    Raises:
        ActionRejected: If the attack is not allowed
    """
    if not game_state.is_active():
        raise ActionRejected(f"Cannot attack during {game_state.phase.value} phase")

    if attacker.has_attacked:
        raise ActionRejected(f"Unit {attacker.id} has already attacked this turn")

    if attacker.stats.attack <= 0:
        raise ActionRejected(f"Unit {attacker.id} ({attacker.type}) cannot attack")

    if attacker.player_id == defender.player_id:
        raise ActionRejected(f"Unit {attacker.id} cannot attack friendly unit {defender.id}")

    distance = hex_distance(attacker.position, defender.position)
    if distance > get_attack_range(attacker):
        raise ActionRejected(
            f"Target {defender.id} is {distance} hexes away, range is {get_attack_range(attacker)}"
        )


def check_game_over(game_state: GameState) -> Optional[str]:
    """
    Check the domination victory condition and end the game if it is met.

    The first player found with no units left loses; the other player wins.

    Returns:
        Winner player ID if the game ended, None otherwise
    """
    for player in game_state.players:
        if not game_state.get_player_units(player.id):
            winner = next((p for p in game_state.players if p.id != player.id), None)
            game_state.phase = GamePhase.GAME_OVER
            game_state.winner = winner.id if winner else None
            log_event(game_state, f"Game Over: {game_state.winner} is victorious!",
                      winner_id=game_state.winner, loser_id=player.id,
                      victory_type=VictoryCondition.DOMINATION.value)
            add_game_message(game_state, f"Game over! {winner.name if winner else 'Nobody'} wins.")
            return game_state.winner
    return None


def attack_unit(game_state: GameState, attacker_id: str, defender_id: str) -> Optional[CombatResult]:
    """
    Resolve an attack between two units.

    Units reduced to 0 health or less are removed. A surviving attacker is
    marked as having attacked and loses its remaining movement points.

    Args:
        game_state: Current game state
        attacker_id: Attacking unit
        defender_id: Defending unit

    Returns:
        CombatResult, or None when the attack is not allowed
    """
    attacker = game_state.get_unit(attacker_id)
    defender = game_state.get_unit(defender_id)
    if not attacker or not defender:
        log_event(game_state, f"Attack rejected: unit {attacker_id if not attacker else defender_id} not found",
                  error_type="validation_error")
        return None

    try:
        validate_attack(attacker, defender, game_state)
    except ActionRejected as e:
        log_event(game_state, f"Attack rejected for unit {attacker_id}: {e}", error_type="validation_error")
        return None

    terrain_bonus = get_terrain_defense_bonus(game_state, defender.position)
    defender_damage, attacker_damage = calculate_damage(
        attacker, defender, terrain_bonus,
        base_damage=game_state.config.get('base_damage', DEFAULT_CONFIG['base_damage']),
        retaliation_factor=game_state.config.get('retaliation_factor', DEFAULT_CONFIG['retaliation_factor']),
    )

    defender_health = defender.health - defender_damage
    attacker_health = attacker.health - attacker_damage
    defender_killed = defender_health <= 0
    attacker_killed = attacker_health <= 0

    result = CombatResult(
        attacker_id=attacker_id,
        defender_id=defender_id,
        attacker_damage=attacker.health if attacker_killed else attacker_damage,
        defender_damage=defender.health if defender_killed else defender_damage,
        defender_killed=defender_killed,
        attacker_killed=attacker_killed,
    )

    log_event(game_state, f"Unit {attacker_id} ({attacker.type}) attacked {defender_id} ({defender.type}): "
                          f"dealt {result.defender_damage}, took {result.attacker_damage}",
              attacker_id=attacker_id, defender_id=defender_id, terrain_bonus=terrain_bonus,
              defender_damage=result.defender_damage, attacker_damage=result.attacker_damage)

    if defender_killed:
        game_state.remove_unit(defender_id)
        log_event(game_state, f"Unit {defender_id} was destroyed", unit_id=defender_id)
        add_game_message(game_state, f"{defender.player_id}'s {defender.type} was destroyed!")
    else:
        defender.health = defender_health

    if attacker_killed:
        game_state.remove_unit(attacker_id)
        log_event(game_state, f"Unit {attacker_id} was destroyed", unit_id=attacker_id)
        add_game_message(game_state, f"{attacker.player_id}'s {attacker.type} was destroyed!")
    else:
        attacker.health = attacker_health
        attacker.has_attacked = True
        attacker.movement_points = 0

    game_state.selected_unit_id = None
    check_game_over(game_state)
    return result


def get_attackable_coords(game_state: GameState, unit_id: str) -> Set[Tuple[int, int]]:
    """
    Positions of enemy units the unit can attack right now. Pure.

    Args:
        game_state: Current game state
        unit_id: Attacking unit

    Returns:
        Set of (q, r) coordinates; empty if the unit is unknown, has already
        attacked or cannot attack at all
    """
    unit = game_state.get_unit(unit_id)
    if not unit or unit.has_attacked or unit.stats.attack <= 0:
        return set()

    attack_range = get_attack_range(unit)
    return {
        target.position for target in game_state.units.values()
        if target.player_id != unit.player_id
        and hex_distance(unit.position, target.position) <= attack_range
    }
