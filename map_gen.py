"""
Map generation module for the hex strategy engine.
Implements seeded procedural hex map generation with axial coordinates.
"""

import time
from typing import Dict, Tuple, List, Optional

from hex_math import get_hex_neighbors
from models import GameMap, Hex

SMOOTHING_ITERATIONS = 2


class SeededRandom:
    """
    Linear congruential generator. Same seed, same sequence, so a pinned seed
    reproduces a map exactly.
    """

    def __init__(self, seed: int):
        self.seed = seed

    def next(self) -> float:
        self.seed = (self.seed * 1103515245 + 12345) & 0x7fffffff
        return self.seed / 0x7fffffff


def get_spawn_points(width: int, height: int) -> List[Tuple[int, int]]:
    """
    Spawn anchors for the two players.

    Args:
        width: Map width in columns
        height: Map height in rows

    Returns:
        [player 1 anchor (bottom-left), player 2 anchor (top-right)]
    """
    return [(2, height - 3), (width - 3, 2)]


def is_on_map(position: Tuple[int, int], width: int, height: int) -> bool:
    """True if a map generated at width x height has a cell at `position`."""
    q, r = position
    if not 0 <= r < height:
        return False
    r_offset = r // 2
    return -r_offset <= q < width - r_offset


def roll_terrain(random: SeededRandom, water_ratio: float, mountain_ratio: float,
                 forest_ratio: float) -> str:
    """Pick a terrain for one cell. Hills and desert each consume a fresh draw."""
    roll = random.next()
    if roll < water_ratio:
        return 'water'
    if roll < water_ratio + mountain_ratio:
        return 'mountains'
    if roll < water_ratio + mountain_ratio + forest_ratio:
        return 'forest'
    if random.next() < 0.3:
        return 'hills'
    if random.next() < 0.1:
        return 'desert'
    return 'plains'


def get_neighbor_terrains(cells: Dict[Tuple[int, int], Hex], position: Tuple[int, int]) -> List[str]:
    """Terrains of the existing neighbors of `position`, in direction order."""
    terrains = []
    for neighbor in get_hex_neighbors(position):
        cell = cells.get(neighbor)
        if cell:
            terrains.append(cell.terrain)
    return terrains


def smooth_terrain(cells: Dict[Tuple[int, int], Hex], iterations: int = SMOOTHING_ITERATIONS) -> None:
    """
    Pull isolated cells towards the terrain that dominates around them.

    Mountains and forest never change. A cell converts when one terrain holds
    at least 3 of its neighbors. Each iteration reads the grid as it was before
    the iteration started.

    Args:
        cells: Map cells, modified in place
        iterations: Number of smoothing passes
    """
    for _ in range(iterations):
        changes: List[Tuple[Tuple[int, int], str]] = []

        for position, cell in cells.items():
            if cell.terrain in ('mountains', 'forest'):
                continue

            neighbors = get_neighbor_terrains(cells, position)
            if not neighbors:
                continue

            terrain_counts: Dict[str, int] = {}
            for terrain in neighbors:
                terrain_counts[terrain] = terrain_counts.get(terrain, 0) + 1

            # First terrain to reach the highest count wins ties
            max_count = 0
            dominant = cell.terrain
            for terrain, count in terrain_counts.items():
                if count > max_count:
                    max_count = count
                    dominant = terrain

            if max_count >= 3 and dominant != cell.terrain:
                changes.append((position, dominant))

        for position, terrain in changes:
            cells[position].terrain = terrain


def ensure_area_passable(cells: Dict[Tuple[int, int], Hex], center: Tuple[int, int]) -> None:
    """Turn water and mountains on `center` and its 6 neighbors into plains."""
    for position in [center] + get_hex_neighbors(center):
        cell = cells.get(position)
        if cell and cell.terrain in ('water', 'mountains'):
            cell.terrain = 'plains'


def generate_map(
    width: int,
    height: int,
    water_ratio: float = 0.15,
    mountain_ratio: float = 0.10,
    forest_ratio: float = 0.15,
    seed: Optional[int] = None
) -> GameMap:
    """
    Generate a procedural hex map.

    Rows are laid out with a column shift of floor(r/2) so the map keeps a
    roughly rectangular footprint under the axial skew.

    Args:
        width: Number of cells per row
        height: Number of rows
        water_ratio: Share of water on the first roll
        mountain_ratio: Share of mountains on the first roll
        forest_ratio: Share of forest on the first roll
        seed: Random seed for reproducible generation; wall-clock if None

    Returns:
        GameMap with width * height cells
    """
    if seed is None:
        seed = int(time.time() * 1000)
    random = SeededRandom(seed)

    cells: Dict[Tuple[int, int], Hex] = {}
    for r in range(height):
        r_offset = r // 2
        for q in range(-r_offset, width - r_offset):
            terrain = roll_terrain(random, water_ratio, mountain_ratio, forest_ratio)
            cells[(q, r)] = Hex(q=q, r=r, terrain=terrain)

    smooth_terrain(cells, SMOOTHING_ITERATIONS)

    # Initial units must never start stranded
    for spawn in get_spawn_points(width, height):
        ensure_area_passable(cells, spawn)

    return GameMap(width=width, height=height, cells=cells)


def get_terrain_counts(game_map: GameMap) -> Dict[str, int]:
    """Count cells per terrain kind."""
    terrain_counts: Dict[str, int] = {}
    for hex_obj in game_map.cells.values():
        terrain_counts[hex_obj.terrain] = terrain_counts.get(hex_obj.terrain, 0) + 1
    return terrain_counts


def print_map_stats(game_map: GameMap) -> None:
    """
    Print detailed statistics about the generated map.

    Args:
        game_map: Generated map
    """
    terrain_counts = get_terrain_counts(game_map)
    total = len(game_map.cells)

    print("\n" + "="*50)
    print("MAP STATISTICS")
    print("="*50)
    print(f"Total hexes: {total}")
    print(f"Map size: {game_map.width}x{game_map.height} hexes")
    print("-"*30)

    for terrain, count in sorted(terrain_counts.items()):
        percentage = (count / total) * 100 if total else 0.0
        print(f"{terrain:12}: {count:3d} hexes ({percentage:5.1f}%)")

    print("="*50)


if __name__ == "__main__":
    print_map_stats(generate_map(20, 15, seed=42))
