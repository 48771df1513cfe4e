"""Tests for dead-reckoning odometry."""

import math

import pytest

from tello_native.models.odometry import Odometry


def rounded(odo):
    return round(odo.x), round(odo.y)


class TestOdometry:
    """Commanded-motion integration."""

    def test_forward_cw_forward(self):
        odo = Odometry()
        odo.forward(100)
        odo.cw(90)
        odo.forward(100)
        assert rounded(odo) == (100, 100)

    def test_forward_ccw_forward(self):
        odo = Odometry()
        odo.forward(100)
        odo.ccw(90)
        odo.forward(100)
        assert rounded(odo) == (-100, 100)

    def test_square_closes(self):
        """Four sides and four right turns end at the origin."""
        odo = Odometry()
        for _ in range(4):
            odo.forward(100)
            odo.cw(90)
        assert rounded(odo) == (0, 0)
        assert math.cos(odo.rot) == pytest.approx(1.0)

    def test_go_back_again(self):
        """Out along a diagonal and back along the same path."""
        odo = Odometry()
        odo.forward(100)
        odo.cw(45)
        odo.forward(100)
        odo.cw(180)
        odo.forward(100)
        odo.ccw(45)
        odo.forward(100)
        assert rounded(odo) == (0, 0)

    def test_lateral_moves(self):
        odo = Odometry()
        odo.right(50)
        odo.left(20)
        odo.back(30)
        assert rounded(odo) == (30, -30)

    def test_vertical(self):
        odo = Odometry()
        odo.up(100)
        odo.down(40)
        assert odo.z == 60

    def test_distance_clamped(self):
        """Distances are clamped to [20, 500]."""
        odo = Odometry()
        odo.forward(5)
        assert rounded(odo) == (0, 20)
        odo.forward(900)
        assert rounded(odo) == (0, 520)

    def test_rotation_clamped(self):
        """A zero turn still counts as the minimum of one degree."""
        odo = Odometry()
        odo.ccw(0)
        assert odo.heading_degrees == pytest.approx(1.0)

    def test_reset(self):
        odo = Odometry()
        odo.forward(100)
        odo.up(50)
        odo.cw(30)
        odo.reset()
        assert (odo.x, odo.y, odo.z, odo.rot) == (0.0, 0.0, 0.0, 0.0)
