"""Level calculation from experience points.

Forty levels grouped under nine titles. The last level, BİLGE HAKAN, is
reached at 3500 points and has no next level.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from typing import Any

# (threshold, title) per level, level number = index + 1
LEVEL_THRESHOLDS: tuple[tuple[int, str], ...] = (
    (0, "ACEMİ"),
    (90, "ACEMİ"),
    (179, "ACEMİ"),
    (269, "ACEMİ"),
    (359, "ACEMİ"),
    (449, "TECRÜBELİ"),
    (538, "TECRÜBELİ"),
    (628, "TECRÜBELİ"),
    (718, "TECRÜBELİ"),
    (808, "TECRÜBELİ"),
    (897, "OLGUN"),
    (987, "OLGUN"),
    (1077, "OLGUN"),
    (1167, "OLGUN"),
    (1256, "OLGUN"),
    (1346, "SAVAŞÇI"),
    (1436, "SAVAŞÇI"),
    (1526, "SAVAŞÇI"),
    (1615, "SAVAŞÇI"),
    (1705, "SAVAŞÇI"),
    (1795, "KUMANDAN"),
    (1885, "KUMANDAN"),
    (1974, "KUMANDAN"),
    (2064, "KUMANDAN"),
    (2154, "KUMANDAN"),
    (2244, "ALBAY"),
    (2333, "ALBAY"),
    (2423, "ALBAY"),
    (2513, "ALBAY"),
    (2603, "ALBAY"),
    (2692, "MAREŞAL"),
    (2782, "MAREŞAL"),
    (2872, "MAREŞAL"),
    (2962, "MAREŞAL"),
    (3051, "MAREŞAL"),
    (3141, "SADRAZAM"),
    (3231, "SADRAZAM"),
    (3321, "SADRAZAM"),
    (3410, "SADRAZAM"),
    (3500, "BİLGE HAKAN"),
)

MAX_LEVEL = len(LEVEL_THRESHOLDS)


@dataclass(frozen=True, slots=True)
class LevelInfo:
    """Level reached for a given amount of experience.

    Attributes:
        level: 1-based level number.
        title: Rank title for the level.
        current_threshold: Points at which this level starts.
        points_for_next_level: Points at which the next level starts,
            None at the maximum level.
        progress: Percentage (0-100) towards the next level.
    """

    level: int
    title: str
    current_threshold: int
    points_for_next_level: int | None
    progress: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def calculate_level_info(points: int) -> LevelInfo:
    """Compute the level, title and progress for an experience total."""
    points = max(0, points)

    max_threshold, max_title = LEVEL_THRESHOLDS[-1]
    if points >= max_threshold:
        return LevelInfo(
            level=MAX_LEVEL,
            title=max_title,
            current_threshold=max_threshold,
            points_for_next_level=None,
            progress=100,
        )

    index = 0
    for i, (threshold, _title) in enumerate(LEVEL_THRESHOLDS):
        if points >= threshold:
            index = i
        else:
            break

    current, title = LEVEL_THRESHOLDS[index]
    next_threshold = LEVEL_THRESHOLDS[index + 1][0]
    progress = min(100, math.floor((points - current) / (next_threshold - current) * 100))

    return LevelInfo(
        level=index + 1,
        title=title,
        current_threshold=current,
        points_for_next_level=next_threshold,
        progress=progress,
    )
