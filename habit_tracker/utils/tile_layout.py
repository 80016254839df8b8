"""Tile layout engine: arranges a user's open goals as dashboard tiles.

Layouts are computed on a logical grid four columns wide and converted to
pixel rectangles at the end. Every pixel edge is derived by flooring a grid
line, so neighbouring tiles share edges and never overlap.

* 1-3 goals use fixed splits of the viewport.
* 4-6 goals use hand-made patterns that fill their grid exactly.
* 7+ goals get a size per index, are packed with a column heightmap and then
  grown to fill leftover holes.
"""
import math
from enum import Enum
from typing import NamedTuple, Optional

from habit_tracker.models.goal import GoalWithTodayStatus
from habit_tracker.models.layout import TileLayoutResult, TileRect


GRID_COLS = 4
MIN_CELL_HEIGHT = 48  # minimum tappable tile height in pixels
GAP_FILL_ITERATIONS = 3


class TileSize(Enum):
    """Tile size classes as (columns, rows)."""

    SMALL = (1, 1)
    MEDIUM_W = (2, 1)
    MEDIUM_T = (1, 2)
    WIDE = (2, 2)
    LARGE = (4, 2)

    @property
    def cols(self) -> int:
        return self.value[0]

    @property
    def rows(self) -> int:
        return self.value[1]

    @property
    def area(self) -> int:
        return self.cols * self.rows


DOWNGRADES: dict[TileSize, Optional[TileSize]] = {
    TileSize.LARGE: TileSize.WIDE,
    TileSize.WIDE: TileSize.MEDIUM_W,
    TileSize.MEDIUM_W: TileSize.SMALL,
    TileSize.MEDIUM_T: TileSize.SMALL,
    TileSize.SMALL: None,
}

UPGRADES: dict[TileSize, Optional[TileSize]] = {
    TileSize.SMALL: TileSize.MEDIUM_W,
    TileSize.MEDIUM_W: TileSize.WIDE,
    TileSize.MEDIUM_T: TileSize.WIDE,
    TileSize.WIDE: TileSize.LARGE,
    TileSize.LARGE: None,
}


class Placement(NamedTuple):
    """A tile placed on the logical grid."""

    col: int
    row: int
    cols: int
    rows: int


# (size, col, row) per goal index
PREDEFINED_PATTERNS: dict[int, list[tuple[TileSize, int, int]]] = {
    # [AABB]
    # [AABB]
    # [CCDD]
    # [CCDD]
    4: [
        (TileSize.WIDE, 0, 0),
        (TileSize.WIDE, 2, 0),
        (TileSize.WIDE, 0, 2),
        (TileSize.WIDE, 2, 2),
    ],
    # [AABC]
    # [AABC]
    # [DDEE]
    5: [
        (TileSize.WIDE, 0, 0),
        (TileSize.MEDIUM_T, 2, 0),
        (TileSize.MEDIUM_T, 3, 0),
        (TileSize.MEDIUM_W, 0, 2),
        (TileSize.MEDIUM_W, 2, 2),
    ],
    # [AABB]
    # [AABB]
    # [CCDD]
    # [EEFF]
    6: [
        (TileSize.WIDE, 0, 0),
        (TileSize.WIDE, 2, 0),
        (TileSize.MEDIUM_W, 0, 2),
        (TileSize.MEDIUM_W, 2, 2),
        (TileSize.MEDIUM_W, 0, 3),
        (TileSize.MEDIUM_W, 2, 3),
    ],
}


def assign_tile_sizes(count: int) -> list[TileSize]:
    """
    Assign a size class to each goal index.

    Index 0 is the hero tile (2x2, or a 4x2 banner above eight goals); the
    rest follow a fixed modulo pattern.
    """
    sizes = []
    for index in range(count):
        if index == 0:
            sizes.append(TileSize.WIDE if count <= 8 else TileSize.LARGE)
        elif index % 5 == 1:
            sizes.append(TileSize.WIDE)
        elif index % 5 == 3:
            sizes.append(TileSize.MEDIUM_W)
        elif index % 3 == 0:
            sizes.append(TileSize.MEDIUM_T)
        else:
            sizes.append(TileSize.SMALL)
    return sizes


def find_best_position(
    heightmap: list[int],
    occupied: set[tuple[int, int]],
    tile_cols: int,
    tile_rows: int,
) -> Optional[tuple[int, int]]:
    """
    Find the (col, row) that keeps the tile's bottom edge lowest.

    The candidate row for a column offset is the tallest column it spans.
    Ties go to the leftmost offset.
    """
    best: Optional[tuple[int, int]] = None
    best_bottom = math.inf

    for col in range(len(heightmap) - tile_cols + 1):
        row = max(heightmap[col:col + tile_cols])

        blocked = any(
            (r, c) in occupied
            for r in range(row, row + tile_rows)
            for c in range(col, col + tile_cols)
        )
        if blocked:
            continue

        if row + tile_rows < best_bottom:
            best_bottom = row + tile_rows
            best = (col, row)

    return best


def pack_tiles(sizes: list[TileSize], grid_cols: int = GRID_COLS) -> list[Placement]:
    """Greedy heightmap packing, one placement per size in order."""
    heightmap = [0] * grid_cols
    occupied: set[tuple[int, int]] = set()
    placements: list[Placement] = []

    for size in sizes:
        current: Optional[TileSize] = size
        position = None

        while current is not None:
            position = find_best_position(heightmap, occupied, current.cols, current.rows)
            if position is not None:
                break
            current = DOWNGRADES[current]

        if current is None:
            current = TileSize.SMALL
            position = find_best_position(heightmap, occupied, 1, 1)

        if position is None:
            continue

        col, row = position
        for r in range(row, row + current.rows):
            for c in range(col, col + current.cols):
                occupied.add((r, c))
        for c in range(col, col + current.cols):
            heightmap[c] = max(heightmap[c], row + current.rows)
        placements.append(Placement(col, row, current.cols, current.rows))

    return placements


def _total_rows(placements: list[Placement]) -> int:
    return max((p.row + p.rows for p in placements), default=0)


def fill_gaps_and_repack(
    initial_sizes: list[TileSize],
    grid_cols: int = GRID_COLS,
    max_iterations: int = GAP_FILL_ITERATIONS,
) -> tuple[list[Placement], int]:
    """
    Pack, then grow tiles into the holes of the bounding box and pack again.

    Tiles are upgraded from the last one backward, one size class each, as
    long as the added area fits in the remaining empty cells.

    Returns:
        Final placements and the number of grid rows they use
    """
    sizes = list(initial_sizes)

    for _ in range(max_iterations):
        placements = pack_tiles(sizes, grid_cols)
        total_rows = _total_rows(placements)
        empty_cells = grid_cols * total_rows - sum(p.cols * p.rows for p in placements)

        if empty_cells <= 0:
            return placements, total_rows

        changed = False
        for index in range(len(sizes) - 1, -1, -1):
            if empty_cells <= 0:
                break
            upgraded = UPGRADES[sizes[index]]
            if upgraded is None:
                continue
            gained = upgraded.area - sizes[index].area
            if gained <= empty_cells:
                sizes[index] = upgraded
                empty_cells -= gained
                changed = True

        if not changed:
            return placements, total_rows

    placements = pack_tiles(sizes, grid_cols)
    return placements, _total_rows(placements)


def _grid_rect(
    goal: GoalWithTodayStatus,
    placement: Placement,
    cell_width: float,
    cell_height: float,
) -> TileRect:
    x = math.floor(placement.col * cell_width)
    y = math.floor(placement.row * cell_height)
    return TileRect(
        goal_id=goal.id,
        x=x,
        y=y,
        width=math.floor((placement.col + placement.cols) * cell_width) - x,
        height=math.floor((placement.row + placement.rows) * cell_height) - y,
        goal=goal,
    )


def _layout_few(
    goals: list[GoalWithTodayStatus],
    width: float,
    height: float,
) -> list[TileRect]:
    if len(goals) == 1:
        return [_grid_rect(goals[0], Placement(0, 0, 1, 1), width, height)]

    if len(goals) == 2:
        # Equal halves; an odd pixel stays unused at the bottom
        half = math.floor(height / 2)
        return [
            TileRect(
                goal_id=goal.id,
                x=0,
                y=index * half,
                width=math.floor(width),
                height=half,
                goal=goal,
            )
            for index, goal in enumerate(goals)
        ]

    # Weakest goal gets the full-width top half
    weakest, left, right = sorted(goals, key=lambda goal: goal.completion_rate)
    cell_width = width / 2
    cell_height = height / 2
    return [
        _grid_rect(weakest, Placement(0, 0, 2, 1), cell_width, cell_height),
        _grid_rect(left, Placement(0, 1, 1, 1), cell_width, cell_height),
        _grid_rect(right, Placement(1, 1, 1, 1), cell_width, cell_height),
    ]


def _layout_predefined(
    goals: list[GoalWithTodayStatus],
    width: float,
    height: float,
) -> list[TileRect]:
    pattern = PREDEFINED_PATTERNS[len(goals)]
    placements = [Placement(col, row, size.cols, size.rows) for size, col, row in pattern]
    cell_width = width / GRID_COLS
    cell_height = height / _total_rows(placements)
    return [
        _grid_rect(goal, placement, cell_width, cell_height)
        for goal, placement in zip(goals, placements)
    ]


def _layout_packed(
    goals: list[GoalWithTodayStatus],
    width: float,
    height: float,
) -> TileLayoutResult:
    placements, total_rows = fill_gaps_and_repack(assign_tile_sizes(len(goals)))

    cell_width = width / GRID_COLS
    cell_height = max(height / total_rows, MIN_CELL_HEIGHT)

    result = TileLayoutResult()
    for goal, placement in zip(goals, placements):
        tile = _grid_rect(goal, placement, cell_width, cell_height)
        if tile.bottom > height:
            result.overflow_count += 1
            continue
        result.tiles.append(tile)

    result.overflow_count += len(goals) - len(placements)
    return result


def layout(
    goals: list[GoalWithTodayStatus],
    width: float,
    height: float,
) -> TileLayoutResult:
    """
    Lay out the goals that have no log for the day as dashboard tiles.

    Args:
        goals: Goals scheduled for the day, with completion rate and today's log
        width: Viewport width in pixels
        height: Viewport height in pixels

    Returns:
        Non-overlapping tiles plus the count of goals that did not fit
    """
    active = [goal for goal in goals if goal.today_log is None]

    if not active:
        return TileLayoutResult()
    if len(active) <= 3:
        return TileLayoutResult(tiles=_layout_few(active, width, height))
    if len(active) in PREDEFINED_PATTERNS:
        return TileLayoutResult(tiles=_layout_predefined(active, width, height))
    return _layout_packed(active, width, height)
