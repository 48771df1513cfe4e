import queue


class DroppingQueue(queue.Queue):
    """
    Bounded queue that never blocks producers: when full, the oldest item is
    discarded to make room for the new one.

    The number of discarded items is kept in `dropped` so consumers that fall
    behind can tell how much they missed.
    """

    def __init__(self, maxsize: int = 0) -> None:
        super().__init__(maxsize)
        self.dropped = 0

    def put(self, item, block=True, timeout=None):
        # Drop-oldest and enqueue happen under the queue's own mutex, so
        # concurrent producers never see queue.Full.
        with self.mutex:
            if self.maxsize > 0 and self._qsize() >= self.maxsize:
                self._get()
                self.dropped += 1
                # dropped items must not keep join() waiting
                if self.unfinished_tasks > 0:
                    self.unfinished_tasks -= 1

            self._put(item)
            self.unfinished_tasks += 1
            self.not_empty.notify()

    def put_nowait(self, item):
        self.put(item, block=False)
