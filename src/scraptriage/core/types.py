from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Tuple


class Action(str, Enum):
    """Suggested disposition for an inventory stack."""

    KEEP = "KEEP"
    MAYBE = "MAYBE"
    RECYCLE = "RECYCLE"


@dataclass(frozen=True)
class Region:
    """Axis-aligned slot rectangle in source pixel coordinates."""

    x: int
    y: int
    width: int
    height: int

    @property
    def right(self) -> int:
        """Exclusive right edge."""
        return self.x + self.width

    @property
    def bottom(self) -> int:
        """Exclusive bottom edge."""
        return self.y + self.height

    @property
    def area(self) -> int:
        return self.width * self.height

    @property
    def aspect(self) -> float:
        """width / height ratio."""
        return self.width / max(1, self.height)

    @property
    def rect(self) -> Tuple[int, int, int, int]:
        """(x, y, w, h) rectangle in pixels."""
        return self.x, self.y, self.width, self.height

    @property
    def center(self) -> Tuple[float, float]:
        """Center of the region in pixels (cx, cy)."""
        return self.x + self.width / 2.0, self.y + self.height / 2.0


@dataclass(frozen=True)
class ResolvedItem:
    name: str
    quantity: int = 1


@dataclass(frozen=True)
class ClassifiedItem:
    name: str
    quantity: int
    action: Action
    reason: str
    category: str

    def to_dict(self) -> Dict[str, object]:
        return {
            "name": self.name,
            "quantity": self.quantity,
            "action": self.action.value,
            "reason": self.reason,
            "category": self.category,
        }
