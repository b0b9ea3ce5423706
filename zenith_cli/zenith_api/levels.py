"""Level curve shared by the completion engine and the profile display."""
from dataclasses import dataclass

POINTS_PER_LEVEL = 100


def level_for_points(points: int) -> int:
    """Level is always derived from points, never stored on its own."""
    return max(points, 0) // POINTS_PER_LEVEL + 1


@dataclass(frozen=True)
class LevelProgress:
    level: int
    points: int
    points_in_current_level: int
    points_for_next_level: int
    progress: float
    streak: int = 0


def level_progress(points: int, streak: int = 0) -> LevelProgress:
    """Project raw points into the numbers the profile screen shows."""
    points = max(points, 0)
    level = level_for_points(points)
    in_level = points - (level - 1) * POINTS_PER_LEVEL
    return LevelProgress(
        level=level,
        points=points,
        points_in_current_level=in_level,
        points_for_next_level=level * POINTS_PER_LEVEL,
        progress=in_level / POINTS_PER_LEVEL,
        streak=streak,
    )
