from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Literal, Tuple

DifferenceType = Literal["spacing", "margin", "color", "font"]
Priority = Literal["high", "medium", "low"]
Rgb = Tuple[int, int, int]

DIFFERENCE_TYPES: Tuple[str, ...] = ("spacing", "margin", "color", "font")
PRIORITIES: Tuple[str, ...] = ("high", "medium", "low")


@dataclass(frozen=True)
class WhitespaceRegion:
    x: int
    y: int
    width: int
    height: int


@dataclass(frozen=True)
class MarginProfile:
    left: int
    right: int
    top: int
    bottom: int
    has_content: bool = True


@dataclass(frozen=True)
class ColorSample:
    x: int
    y: int
    color1: Rgb
    color2: Rgb


@dataclass(frozen=True)
class Location:
    x: float
    y: float
    width: float
    height: float

    def scaled(self, sx: float, sy: float) -> "Location":
        return Location(self.x * sx, self.y * sy, self.width * sx, self.height * sy)

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}


@dataclass(frozen=True)
class Comment:
    id: str
    text: str
    timestamp: str

    def to_dict(self) -> Dict[str, str]:
        return {"id": self.id, "text": self.text, "timestamp": self.timestamp}


@dataclass
class DesignDifference:
    id: str
    type: DifferenceType
    description: str
    location: Location
    priority: Priority
    comments: List[Comment] = field(default_factory=list)

    def to_dict(self) -> Dict[str, object]:
        return {
            "id": self.id,
            "type": self.type,
            "description": self.description,
            "location": self.location.to_dict(),
            "priority": self.priority,
            "comments": [comment.to_dict() for comment in self.comments],
        }


@dataclass
class RawDifference:
    """Difference in native pixel space, before display mapping."""

    type: DifferenceType
    description: str
    x: int
    y: int
    width: int
    height: int
    priority: Priority = "medium"

    @property
    def x1(self) -> int:
        return self.x + self.width

    @property
    def y1(self) -> int:
        return self.y + self.height

    def union(self, other: "RawDifference") -> "RawDifference":
        x0 = min(self.x, other.x)
        y0 = min(self.y, other.y)
        return RawDifference(
            type=self.type,
            description=self.description,
            x=x0,
            y=y0,
            width=max(self.x1, other.x1) - x0,
            height=max(self.y1, other.y1) - y0,
            priority=_higher_priority(self.priority, other.priority),
        )

    def clip(self, width: int, height: int) -> "RawDifference":
        x0 = max(0, min(self.x, width))
        y0 = max(0, min(self.y, height))
        x1 = max(0, min(self.x1, width))
        y1 = max(0, min(self.y1, height))
        return RawDifference(self.type, self.description, x0, y0, x1 - x0, y1 - y0, self.priority)


def _higher_priority(a: Priority, b: Priority) -> Priority:
    return a if PRIORITIES.index(a) <= PRIORITIES.index(b) else b
