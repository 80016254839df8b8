"""Dashboard tile layout models."""
from pydantic import BaseModel

from habit_tracker.models.goal import GoalWithTodayStatus


class TileRect(BaseModel):
    """Pixel rectangle assigned to one goal."""

    goal_id: str
    x: int
    y: int
    width: int
    height: int
    goal: GoalWithTodayStatus

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height


class TileLayoutResult(BaseModel):
    """Tiles to render plus the number of goals that did not fit the viewport."""

    tiles: list[TileRect] = []
    overflow_count: int = 0
