"""
Hex coordinate math for the hex strategy engine.
Axial (q, r) coordinates; positions are plain (q, r) tuples so they can be
used directly as dict and set keys.
"""

from typing import List, Tuple

# 6 directions: (1,0), (1,-1), (0,-1), (-1,0), (-1,1), (0,1)
HEX_DIRECTIONS: List[Tuple[int, int]] = [
    (1, 0), (1, -1), (0, -1),
    (-1, 0), (-1, 1), (0, 1),
]


def hex_distance(a: Tuple[int, int], b: Tuple[int, int]) -> int:
    """
    Calculate distance between two hexes using axial coordinates.

    Args:
        a: First hex as (q, r)
        b: Second hex as (q, r)

    Returns:
        Number of hex steps between a and b
    """
    dq = a[0] - b[0]
    dr = a[1] - b[1]
    return (abs(dq) + abs(dq + dr) + abs(dr)) // 2


def get_hex_neighbors(coord: Tuple[int, int]) -> List[Tuple[int, int]]:
    """
    Get the 6 neighboring hex coordinates in direction order.

    Args:
        coord: Center hex as (q, r)

    Returns:
        List of (q, r) coordinates for neighboring hexes
    """
    q, r = coord
    return [(q + dq, r + dr) for dq, dr in HEX_DIRECTIONS]


def hexes_in_range(center: Tuple[int, int], radius: int) -> List[Tuple[int, int]]:
    """
    Get every hex within `radius` steps of `center`, center included.

    Args:
        center: Center hex as (q, r)
        radius: Maximum hex distance (inclusive)

    Returns:
        List of (q, r) coordinates, ordered by q then r offset
    """
    results = []
    for dq in range(-radius, radius + 1):
        # r bounds depend on q to keep the hexagonal shape
        r_min = max(-radius, -dq - radius)
        r_max = min(radius, -dq + radius)
        for dr in range(r_min, r_max + 1):
            results.append((center[0] + dq, center[1] + dr))
    return results


def coord_key(coord: Tuple[int, int]) -> str:
    """Canonical string key "q,r" for a coordinate (JSON object keys)."""
    return f"{coord[0]},{coord[1]}"


def parse_coord_key(key: str) -> Tuple[int, int]:
    """Parse a "q,r" key back into a (q, r) tuple."""
    q, r = key.split(',')
    return (int(q), int(r))
