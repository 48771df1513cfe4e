from dataclasses import dataclass


@dataclass(frozen=True)
class StickRange:
    """Raw protocol limits of one stick axis."""
    min_val: int   # e.g. 364
    mid_val: int   # e.g. 1024
    max_val: int   # e.g. 1684

    def scale(self, value: float) -> int:
        """
        Map a normalised [-1 … +1] value to raw protocol units.

        Truncates toward zero like the firmware's reference encoder.
        """
        if value >= 0:
            return int(self.mid_val + value * (self.max_val - self.mid_val))
        return int(self.mid_val + value * (self.mid_val - self.min_val))
