import logging
import threading
import time
from typing import Optional

from tello_native.exceptions import ReceiverTakenError
from tello_native.utils.dropping_queue import DroppingQueue

logger = logging.getLogger(__name__)


class MessagePump:
    """
    Drives `Drone.poll()` from a background thread and hands every message it
    yields to a single consumer through a `DroppingQueue`.

    The queue can be taken exactly once. A consumer that stops draining it
    only loses the oldest messages; the poll cadence (and with it the stick
    heartbeat) is never held up.
    """

    def __init__(self, drone, rate: float = 35.0, max_queue_size: int = 256) -> None:
        if rate <= 0:
            raise ValueError(f"poll rate must be positive, got {rate}")
        self.drone = drone
        self.poll_interval = 1.0 / rate
        self.messages = DroppingQueue(maxsize=max_queue_size)

        self._receiver_taken = False
        self._taken_lock = threading.Lock()
        self._running = threading.Event()
        self._pump_thread: Optional[threading.Thread] = None

    # ────────── lifecycle ────────── #
    def start(self) -> None:
        if self._pump_thread and self._pump_thread.is_alive():
            return

        self._running.set()
        self._pump_thread = threading.Thread(
            target=self._pump_loop, name="TelloMessagePump", daemon=True
        )
        self._pump_thread.start()
        logger.info("[pump] polling at %.1f Hz", 1.0 / self.poll_interval)

    def stop(self) -> None:
        self._running.clear()
        if self._pump_thread and self._pump_thread.is_alive():
            self._pump_thread.join(timeout=1.0)
        self._pump_thread = None

    def is_running(self) -> bool:
        return self._running.is_set()

    # ────────── stream access ────────── #
    def take_receiver(self) -> DroppingQueue:
        """Return the message queue. Only the first caller gets it."""
        with self._taken_lock:
            if self._receiver_taken:
                raise ReceiverTakenError("message receiver was already taken")
            self._receiver_taken = True
        return self.messages

    # ────────── pump loop ────────── #
    def _pump_loop(self) -> None:
        try:
            while self._running.is_set():
                try:
                    msg = self.drone.poll()
                except OSError as e:
                    logger.warning("[pump] poll failed: %s", e)
                    msg = None
                if msg is not None:
                    self.messages.put(msg)
                time.sleep(self.poll_interval)
        except Exception:
            logger.exception("[pump] poll loop crashed")
        finally:
            self._running.clear()

        logger.info("[pump] stopped (dropped %d messages)", self.messages.dropped)
