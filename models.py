# Models for game elements: map cells, units, players, cities and the static rule tables

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Tuple, Optional, Dict


class GamePhase(Enum):
    SETUP = "setup"
    PLAYER_TURN = "player_turn"
    AI_TURN = "ai_turn"
    GAME_OVER = "game_over"


class VictoryCondition(Enum):
    DOMINATION = "domination"  # Eliminate every enemy unit (the only one checked)
    SCIENCE = "science"
    CULTURE = "culture"


@dataclass(frozen=True)
class TerrainProperties:
    """Static properties of one terrain kind."""
    movement_cost: float  # math.inf for impassable terrain
    defense_bonus: float  # Fraction added to the defender's combat power
    food: int
    production: int
    passable: bool
    color: str


TERRAIN_PROPERTIES: Dict[str, TerrainProperties] = {
    'plains': TerrainProperties(movement_cost=1, defense_bonus=0, food=2, production=1,
                                passable=True, color='#90EE90'),
    'hills': TerrainProperties(movement_cost=2, defense_bonus=0.25, food=1, production=2,
                               passable=True, color='#D2B48C'),
    'mountains': TerrainProperties(movement_cost=math.inf, defense_bonus=0.5, food=0, production=0,
                                   passable=False, color='#808080'),
    'water': TerrainProperties(movement_cost=1, defense_bonus=0, food=2, production=0,
                               passable=True, color='#4169E1'),
    'forest': TerrainProperties(movement_cost=2, defense_bonus=0.15, food=1, production=2,
                                passable=True, color='#228B22'),
    'desert': TerrainProperties(movement_cost=1, defense_bonus=-0.1, food=0, production=1,
                                passable=True, color='#F4A460'),
}


@dataclass(frozen=True)
class UnitStats:
    """Archetype stats shared by every unit of one type."""
    max_health: int
    attack: int
    defense: int
    movement: int
    range: int  # 0 means melee
    sight: int


UNIT_STATS: Dict[str, UnitStats] = {
    'warrior': UnitStats(max_health=100, attack=25, defense=20, movement=2, range=0, sight=2),
    'archer': UnitStats(max_health=70, attack=20, defense=10, movement=2, range=2, sight=3),
    'cavalry': UnitStats(max_health=90, attack=22, defense=15, movement=4, range=0, sight=3),
    'settler': UnitStats(max_health=50, attack=0, defense=5, movement=2, range=0, sight=2),
    'worker': UnitStats(max_health=50, attack=0, defense=5, movement=2, range=0, sight=1),
}


@dataclass(frozen=True)
class ProductionItem:
    """Something a city can build."""
    type: str  # Unit archetype spawned on completion
    name: str
    cost: int  # Production needed
    icon: str


PRODUCTION_ITEMS: Dict[str, ProductionItem] = {
    'warrior': ProductionItem(type='warrior', name='Warrior', cost=40, icon='W'),
    'archer': ProductionItem(type='archer', name='Archer', cost=50, icon='A'),
    'cavalry': ProductionItem(type='cavalry', name='Cavalry', cost=60, icon='C'),
    'settler': ProductionItem(type='settler', name='Settler', cost=80, icon='S'),
    'worker': ProductionItem(type='worker', name='Worker', cost=35, icon='K'),
}

CITY_NAMES: List[str] = [
    'Ashford', 'Brightwater', 'Cinderfall', 'Dunmore', 'Eastmarch',
    'Fairhaven', 'Greystone', 'Highgarden', 'Ironwood', 'Juniper',
    'Kingsbridge', 'Lakeshore', 'Millbrook', 'Northwatch', 'Oakheart',
    'Pinecrest', 'Queensport', 'Redcliff', 'Stonehelm', 'Thornbury',
]


def get_growth_threshold(population: int) -> int:
    """Food needed for a city of `population` to grow by one."""
    return 15 + population * 10 + population * population * 2


@dataclass
class Hex:
    """Represents a map hex with axial coordinates and terrain type."""
    q: int  # Axial coordinate q
    r: int  # Axial coordinate r
    terrain: str  # Key into TERRAIN_PROPERTIES
    unit_id: Optional[str] = None  # Unit standing here, if any
    city_id: Optional[str] = None  # City built here, if any

    @property
    def position(self) -> Tuple[int, int]:
        return (self.q, self.r)


@dataclass
class GameMap:
    """Generated hex grid. Cells are created once and never removed."""
    width: int
    height: int
    cells: Dict[Tuple[int, int], Hex] = field(default_factory=dict)

    def get_cell(self, position: Tuple[int, int]) -> Optional[Hex]:
        return self.cells.get(position)


@dataclass
class Unit:
    """
    A unit on the map. Movement points and the attack/fortify flags are
    restored at every end of turn; the unit is removed when health reaches 0.
    """
    id: str
    type: str  # Key into UNIT_STATS
    player_id: str
    position: Tuple[int, int]
    health: int
    movement_points: int
    has_attacked: bool = False
    is_fortified: bool = False

    @property
    def stats(self) -> UnitStats:
        return UNIT_STATS[self.type]


@dataclass
class Player:
    id: str
    name: str
    is_ai: bool
    color: str


@dataclass
class CityResources:
    """Per-turn yield of a city."""
    food: int = 2
    production: int = 2
    gold: int = 1


@dataclass
class ProductionQueueItem:
    id: str
    item: ProductionItem
    progress: int = 0


@dataclass
class City:
    """
    A founded city. The first city of a player is its capital; the flag is
    set once at founding and never reassigned.
    """
    id: str
    name: str
    player_id: str
    position: Tuple[int, int]
    population: int = 1
    resources: CityResources = field(default_factory=CityResources)
    production_queue: List[ProductionQueueItem] = field(default_factory=list)
    is_capital: bool = False
    growth_progress: int = 0


@dataclass
class MoveResult:
    unit_id: str
    from_position: Tuple[int, int]
    to_position: Tuple[int, int]
    success: bool
    movement_cost: int


@dataclass
class CombatResult:
    """Outcome of one attack. A killed side reports its pre-combat health as damage."""
    attacker_id: str
    defender_id: str
    attacker_damage: int
    defender_damage: int
    defender_killed: bool
    attacker_killed: bool


DEFAULT_PLAYERS: List[Tuple[str, str, bool, str]] = [
    ('player1', 'Player', False, '#3B82F6'),
    ('player2', 'AI', True, '#EF4444'),
]
