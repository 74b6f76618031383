"""
Circle record data structures for CircleFit.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List


class Side(Enum):
    """Tray side a group of circles is anchored to."""
    LEFT = "left"
    RIGHT = "right"


@dataclass(frozen=True)
class CircleRecord:
    """Represents a single circle with its input position."""

    diameter: float
    original_index: int
    group_key: str = ""
    side: Side = Side.LEFT

    @property
    def radius(self) -> float:
        return self.diameter / 2


@dataclass
class CircleGroup:
    """All circles sharing one group key, packed together on one side."""

    key: str
    side: Side
    circles: List[CircleRecord] = field(default_factory=list)

    @property
    def largest_diameter(self) -> float:
        """Diameter of the biggest circle, 0 for an empty group."""
        return max((c.diameter for c in self.circles), default=0.0)

    def sorted_circles(self) -> List[CircleRecord]:
        """Circles largest first; equal diameters keep input order."""
        return sorted(self.circles, key=lambda c: -c.diameter)
