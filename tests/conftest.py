"""Shared fixtures: a loopback UDP socket playing the vehicle's part."""

import socket
import struct
import time

import pytest

from tello_native.services.drone import Drone


class FakeTello:
    """Command-port end of the link, bound on 127.0.0.1."""

    def __init__(self):
        self.sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        self.sock.bind(("127.0.0.1", 0))
        self.sock.settimeout(1.0)
        self.peer = None

    @property
    def port(self):
        return self.sock.getsockname()[1]

    def recv(self, timeout=1.0):
        self.sock.settimeout(timeout)
        data, self.peer = self.sock.recvfrom(2048)
        return data

    def recv_frame(self, timeout=1.0):
        return parse_frame(self.recv(timeout))

    def assert_silent(self, timeout=0.2):
        self.sock.settimeout(timeout)
        with pytest.raises(socket.timeout):
            self.sock.recvfrom(2048)

    def send_to(self, port, data):
        self.sock.sendto(bytes(data), ("127.0.0.1", port))

    def close(self):
        self.sock.close()


def parse_frame(data):
    """Split an outbound frame into its header fields and payload."""
    assert data[0] == 0xCC
    (length,) = struct.unpack_from("<H", data, 1)
    cmd, seq = struct.unpack_from("<HH", data, 5)
    return {
        "size": length >> 3,
        "type": data[4],
        "cmd": cmd,
        "seq": seq,
        "payload": data[9:-2],
        "raw": data,
    }


def poll_until(drone, timeout=1.0):
    """Poll until the drone yields a message; None if nothing arrived in time."""
    deadline = time.time() + timeout
    while time.time() < deadline:
        msg = drone.poll()
        if msg is not None:
            return msg
        time.sleep(0.005)
    return None


def free_udp_port():
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    sock.bind(("127.0.0.1", 0))
    port = sock.getsockname()[1]
    sock.close()
    return port


@pytest.fixture
def fake_tello():
    fake = FakeTello()
    yield fake
    fake.close()


@pytest.fixture
def drone(fake_tello):
    d = Drone("127.0.0.1", fake_tello.port, 0, video_read_timeout=0.2)
    # keep the stick heartbeat out of the way unless a test asks for it
    d._last_stick_ts = time.time() + 3600
    yield d
    d.stop()
