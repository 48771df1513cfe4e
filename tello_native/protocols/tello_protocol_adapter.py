import logging
import socket
import threading
from typing import Final, Optional

from tello_native.protocols.constants import (
    DEFAULT_CONTROL_PORT,
    DEFAULT_DRONE_IP,
    MAX_DATAGRAM,
)
from tello_native.protocols.packet import SequenceCounter, UdpCommand, encode_command

logger = logging.getLogger(__name__)


class TelloProtocolAdapter:
    """
    Owns the command socket: frames outbound commands, draws sequence
    numbers, and performs non-blocking reads of inbound datagrams.

    Sends are fire-and-forget. Failures are logged and reported as False;
    nothing is retried.
    """

    DEFAULT_DRONE_IP: Final = DEFAULT_DRONE_IP
    DEFAULT_PORT:     Final = DEFAULT_CONTROL_PORT

    def __init__(
        self,
        drone_ip: str = DEFAULT_DRONE_IP,
        control_port: int = DEFAULT_PORT,
        local_port: int = DEFAULT_PORT,
        *,
        sequence: Optional[SequenceCounter] = None,
        debug: bool = False,
    ) -> None:
        self.drone_ip = drone_ip
        self.control_port = control_port
        self.sequence = sequence or SequenceCounter()
        self.debug_packets = debug
        self._pkt_counter = 0

        self._sock_lock = threading.Lock()
        self.sock = self._create_socket(local_port)

    def _create_socket(self, local_port: int) -> socket.socket:
        sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.bind(("0.0.0.0", local_port))
        sock.setblocking(False)
        sock.connect((self.drone_ip, self.control_port))
        logger.debug("[tello] command socket *:%d -> %s:%d",
                     sock.getsockname()[1], self.drone_ip, self.control_port)
        return sock

    @property
    def local_port(self) -> int:
        return self.sock.getsockname()[1]

    # ------------------------------------------------------------------ #
    def send(self, command: UdpCommand) -> bool:
        with self._sock_lock:
            packet = encode_command(command, self.sequence)
            ok = self._send_locked(packet)
        if ok and self.debug_packets:
            self._dump(command, packet)
        return ok

    def send_raw(self, data: bytes) -> bool:
        with self._sock_lock:
            return self._send_locked(bytes(data))

    def _send_locked(self, data: bytes) -> bool:
        try:
            self.sock.send(data)
            return True
        except OSError as e:
            logger.warning("[tello] send to %s:%d failed: %s", self.drone_ip, self.control_port, e)
            return False

    def receive(self) -> Optional[bytes]:
        """One non-blocking read; None when nothing is waiting."""
        with self._sock_lock:
            try:
                return self.sock.recv(MAX_DATAGRAM)
            except BlockingIOError:
                return None
            except OSError as e:
                logger.debug("[tello] command socket read failed: %s", e)
                return None

    # ------------------------------------------------------------------ #
    def toggle_debug(self) -> bool:
        """Toggle hex dumps of outbound packets."""
        self.debug_packets = not self.debug_packets
        return self.debug_packets

    def _dump(self, command: UdpCommand, packet: bytes) -> None:
        self._pkt_counter += 1
        seq = int.from_bytes(packet[7:9], "little")
        logger.debug("[tello] Packet #%d %s(0x%04x) type=0x%02x seq=%d: %s",
                     self._pkt_counter, command.cmd.name, command.cmd_id, int(command.pkt_type), seq,
                     packet.hex(" "))

    def stop(self) -> None:
        try:
            self.sock.close()
        except OSError:
            pass
