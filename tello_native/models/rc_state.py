from __future__ import annotations

import time
from typing import Dict, Tuple

from tello_native.models.stick_range import StickRange

# centre 1024, ±660 span, 11 bits per axis on the wire
TELLO_STICK_RANGE = StickRange(364, 1024, 1684)
AXIS_MASK = 0x7FF

StickParameters = Tuple[float, float, float, float, bool]


def pack_stick_axes(pitch: float, nick: float, roll: float, yaw: float, fast: bool,
                    stick_range: StickRange = TELLO_STICK_RANGE) -> int:
    """
    Pack the four axes and the speed flag into the 45-bit stick word.

        bits  0-10  roll   (left / right)
        bits 11-21  nick   (forward / back)
        bits 22-32  pitch  (up / down)
        bits 33-43  yaw    (turn)
        bit  44     fast
    """
    return ((stick_range.scale(roll) & AXIS_MASK)
            | (stick_range.scale(nick) & AXIS_MASK) << 11
            | (stick_range.scale(pitch) & AXIS_MASK) << 22
            | (stick_range.scale(yaw) & AXIS_MASK) << 33
            | (1 if fast else 0) << 44)


def stick_axes_bytes(packed: int) -> bytes:
    """The packed stick word as the 6 little-endian bytes sent on the wire."""
    return packed.to_bytes(6, "little")


class RCState:
    """
    Remote-control state polled by the Drone and sent as stick commands.

    Keyboard helpers snap an axis to -1, 0 or +1; the analog setters take any
    value in [-1, 1] (game pads, joysticks, autopilots).
    """

    START_ENGINES_DURATION = 0.35   # seconds the engine-start combination is held
    START_ENGINES_PARAMETERS: StickParameters = (-1.0, -1.0, -1.0, 1.0, True)

    def __init__(self) -> None:
        self.left_right = 0.0
        self.forward_back = 0.0
        self.up_down = 0.0
        self.rotation = 0.0
        self.fast = False
        self._start_engines_at = None

    # ----- engine start -------------------------------------------------
    def start_engines(self) -> None:
        """Arm the one-shot engine start (both sticks down and inward)."""
        self._start_engines_at = time.time()

    def is_starting_engines(self) -> bool:
        if self._start_engines_at is None:
            return False
        if time.time() - self._start_engines_at < self.START_ENGINES_DURATION:
            return True
        self._start_engines_at = None
        return False

    # ----- keyboard helpers ----------------------------------------------
    def go_left(self) -> None:
        self.left_right = -1.0

    def go_right(self) -> None:
        self.left_right = 1.0

    def stop_left_right(self) -> None:
        self.left_right = 0.0

    def go_forward(self) -> None:
        self.forward_back = 1.0

    def go_back(self) -> None:
        self.forward_back = -1.0

    def stop_forward_back(self) -> None:
        self.forward_back = 0.0

    def go_up(self) -> None:
        self.up_down = 1.0

    def go_down(self) -> None:
        self.up_down = -1.0

    def stop_up_down(self) -> None:
        self.up_down = 0.0

    def go_cw(self) -> None:
        self.rotation = 1.0

    def go_ccw(self) -> None:
        self.rotation = -1.0

    def stop_turn(self) -> None:
        self.rotation = 0.0

    # ----- analog setters ------------------------------------------------
    def go_left_right(self, value: float) -> None:
        self.left_right = self._checked("left_right", value)

    def go_forward_back(self, value: float) -> None:
        self.forward_back = self._checked("forward_back", value)

    def go_up_down(self, value: float) -> None:
        self.up_down = self._checked("up_down", value)

    def turn(self, value: float) -> None:
        self.rotation = self._checked("turn", value)

    # ----- encoder -------------------------------------------------------
    def get_stick_parameter(self) -> StickParameters:
        """(pitch, nick, roll, yaw, fast) as consumed by Drone.send_stick()."""
        if self.is_starting_engines():
            return self.START_ENGINES_PARAMETERS
        return (self.up_down, self.forward_back, self.left_right, self.rotation, self.fast)

    def pack(self) -> int:
        return pack_stick_axes(*self.get_stick_parameter())

    def get_control_state(self) -> Dict[str, float]:
        return {
            "left_right":   self.left_right,
            "forward_back": self.forward_back,
            "up_down":      self.up_down,
            "turn":         self.rotation,
            "fast":         self.fast,
        }

    @staticmethod
    def _checked(axis: str, value: float) -> float:
        if not -1.0 <= value <= 1.0:
            raise ValueError(f"{axis} must be within [-1.0, 1.0], got {value}")
        return float(value)
