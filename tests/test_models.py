"""Tests for the static rule tables and model helpers."""

import math

from models import (
    CITY_NAMES, Hex, PRODUCTION_ITEMS, TERRAIN_PROPERTIES, UNIT_STATS, get_growth_threshold,
)
from tests.helpers import HUMAN, add_unit, make_state


def test_only_mountains_are_impassable():
    impassable = [name for name, props in TERRAIN_PROPERTIES.items() if not props.passable]
    assert impassable == ['mountains']
    assert math.isinf(TERRAIN_PROPERTIES['mountains'].movement_cost)


def test_terrain_yields():
    assert (TERRAIN_PROPERTIES['plains'].food, TERRAIN_PROPERTIES['plains'].production) == (2, 1)
    assert (TERRAIN_PROPERTIES['hills'].food, TERRAIN_PROPERTIES['hills'].production) == (1, 2)
    assert TERRAIN_PROPERTIES['desert'].defense_bonus == -0.1


def test_every_production_item_spawns_a_known_unit():
    for item in PRODUCTION_ITEMS.values():
        assert item.type in UNIT_STATS
    assert PRODUCTION_ITEMS['warrior'].cost == 40


def test_only_combat_units_can_attack():
    attackers = {name for name, stats in UNIT_STATS.items() if stats.attack > 0}
    assert attackers == {'warrior', 'archer', 'cavalry'}


def test_growth_threshold_grows_with_population():
    thresholds = [get_growth_threshold(p) for p in range(1, 8)]
    assert thresholds[0] == 27
    assert thresholds == sorted(set(thresholds))


def test_city_names_unique():
    assert len(CITY_NAMES) == len(set(CITY_NAMES))


def test_hex_position():
    assert Hex(q=3, r=-1, terrain='plains').position == (3, -1)


def test_unit_stats_lookup():
    state = make_state()
    unit = add_unit(state, 'cavalry', HUMAN, (1, 1))
    assert unit.stats is UNIT_STATS['cavalry']
    assert unit.movement_points == 4
