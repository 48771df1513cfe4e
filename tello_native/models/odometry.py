import math
from dataclasses import dataclass

MIN_DISTANCE = 20
MAX_DISTANCE = 500
MIN_ROTATION = 1
MAX_ROTATION = 3600    # degrees, ten full turns


def _clamp(value, lo, hi):
    return max(lo, min(hi, value))


@dataclass
class Odometry:
    """
    Dead-reckoning position estimate built only from commanded motions.

    Body-frame motions are rotated by the current heading (radians, counter
    clockwise positive) before they are added to x / y. Distances are clamped
    to the range the vehicle accepts for relative moves.
    """

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    rot: float = 0.0

    def translate(self, dx: float, dy: float) -> None:
        self.x += dx * math.cos(self.rot) - dy * math.sin(self.rot)
        self.y += dx * math.sin(self.rot) + dy * math.cos(self.rot)

    def reset(self) -> None:
        self.x = self.y = self.z = self.rot = 0.0

    def up(self, distance: int) -> None:
        self.z += _clamp(distance, MIN_DISTANCE, MAX_DISTANCE)

    def down(self, distance: int) -> None:
        self.z -= _clamp(distance, MIN_DISTANCE, MAX_DISTANCE)

    def forward(self, distance: int) -> None:
        self.translate(0.0, _clamp(distance, MIN_DISTANCE, MAX_DISTANCE))

    def back(self, distance: int) -> None:
        self.translate(0.0, -_clamp(distance, MIN_DISTANCE, MAX_DISTANCE))

    def left(self, distance: int) -> None:
        self.translate(-_clamp(distance, MIN_DISTANCE, MAX_DISTANCE), 0.0)

    def right(self, distance: int) -> None:
        self.translate(_clamp(distance, MIN_DISTANCE, MAX_DISTANCE), 0.0)

    def cw(self, degrees: int) -> None:
        self.rot -= math.radians(_clamp(degrees, MIN_ROTATION, MAX_ROTATION))

    def ccw(self, degrees: int) -> None:
        self.rot += math.radians(_clamp(degrees, MIN_ROTATION, MAX_ROTATION))

    @property
    def heading_degrees(self) -> float:
        """Heading folded into [0, 360)."""
        return math.degrees(self.rot) % 360.0
