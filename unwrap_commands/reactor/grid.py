"""地图网格坐标（如 "D12"）。"""

from __future__ import annotations

import math

from ..schemas.event import Position

GRID_CELL_SIZE = 146.3


def column_letters(index: int) -> str:
    """0 -> A, 25 -> Z, 26 -> AA"""
    letters = ""
    n = index + 1
    while n > 0:
        n, rem = divmod(n - 1, 26)
        letters = chr(ord("A") + rem) + letters
    return letters


def position_to_grid(position: Position, world_size: float) -> str:
    if world_size <= 0:
        return "A0"
    cells = max(1, math.ceil(world_size / GRID_CELL_SIZE))
    half = world_size / 2.0

    nx = (position.x + half) / world_size
    nz = 1.0 - (position.z + half) / world_size

    col = min(max(int(nx * cells), 0), cells - 1)
    row = min(max(int(nz * cells), 0), cells - 1)
    return f"{column_letters(col)}{row}"
