"""
Grid Memory
Persistent partial map of the grid, merged from each tick's visible cells.
"""

from __future__ import annotations

from typing import Iterable, Iterator, List, Optional, Set, Tuple

import numpy as np

from .cells import CellContent, GridCell, Occupancy
from .geometry import in_bounds


class GridMemory:
    def __init__(self, width: int, height: int):
        if width <= 0 or height <= 0:
            raise ValueError(f"Grid dimensions must be positive, got {width}x{height}")
        self.width = width
        self.height = height
        self.grid_dims = (width, height)
        # Indexed [x][y].
        self.cells: List[List[GridCell]] = [
            [GridCell(x, y) for y in range(height)] for x in range(width)
        ]
        self._tank_cells: Set[Tuple[int, int]] = set()

    def in_bounds(self, x: int, y: int) -> bool:
        return in_bounds((x, y), self.width, self.height)

    def cell(self, x: int, y: int) -> GridCell:
        if not self.in_bounds(x, y):
            raise IndexError(f"Cell ({x}, {y}) outside {self.width}x{self.height} grid")
        return self.cells[x][y]

    def __iter__(self) -> Iterator[GridCell]:
        for column in self.cells:
            yield from column

    def is_blocked(self, x: int, y: int) -> bool:
        return self.cells[x][y].blocked

    def is_terrain_blocked(self, x: int, y: int) -> bool:
        return self.cells[x][y].terrain_blocked

    def update(
        self,
        visible: Iterable[Tuple[int, int, CellContent]],
        own_id: Optional[int] = None,
    ) -> None:
        """Merge one tick of visible cells into the map."""
        self._clear_tanks(own_id)

        for x, y, content in visible:
            cell = self.cell(x, y)
            if not cell.seen:
                cell.seen = True
                cell.content = content
                cell.blocked = content.blocks
                cell.confirmed = not content.is_tank
            elif (
                content.kind is Occupancy.DESTROYED_TANK
                and cell.content.kind is not Occupancy.DESTROYED_TANK
            ):
                # Destruction is recorded even after first sight.
                cell.content = content
                cell.blocked = True
                cell.confirmed = True
            elif content.is_terrain and not cell.content.is_terrain:
                cell.content = content
                cell.blocked = True
                cell.confirmed = True
            elif content.is_tank and not cell.content.is_terrain:
                cell.content = content
                cell.blocked = True

            if cell.content.is_tank:
                self._tank_cells.add(cell.pos)

    def _clear_tanks(self, own_id: Optional[int]) -> None:
        """Tanks are transient: drop last tick's tank positions before merging."""
        for x, y in self._tank_cells:
            cell = self.cells[x][y]
            if not cell.content.is_tank:
                continue
            if own_id is not None and cell.content.owner_id == own_id:
                # Ground we stood on is known ground.
                cell.confirmed = True
            cell.content = CellContent.empty()
            cell.blocked = False
            cell.seen = cell.confirmed
        self._tank_cells = set()

    def seen_mask(self) -> np.ndarray:
        mask = np.zeros(self.grid_dims, dtype=bool)
        for cell in self:
            mask[cell.x, cell.y] = cell.seen
        return mask

    def unseen_cells(self) -> np.ndarray:
        """(N, 2) array of unseen coordinates, in x-major order."""
        return np.argwhere(~self.seen_mask())

    def count(self, kind: Occupancy) -> int:
        return sum(1 for cell in self if cell.seen and cell.content.kind is kind)
