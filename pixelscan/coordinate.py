"""Immutable integer pixel position."""

from dataclasses import dataclass

__all__ = ["Coordinate"]


@dataclass(frozen=True, order=True)
class Coordinate:
    """Signed ``(x, y)`` position. Ordered by x, then y."""
    x: int
    y: int

    def translated(self, dx: int, dy: int) -> "Coordinate":
        return Coordinate(self.x + dx, self.y + dy)

    def __iter__(self):
        yield self.x
        yield self.y
