"""
Task Scheduler - Cancellable background tasks.

Runs periodic and delayed callbacks on daemon threads (green threads when the
server runs under eventlet). A cancelled task never invokes its callback again.
"""

import logging
import threading
from typing import Callable

logger = logging.getLogger(__name__)


class ScheduledTask:
    """Handle for a scheduled callback."""

    def __init__(self, name: str, callback: Callable[[], None], interval: float, repeat: bool):
        self.name = name
        self.callback = callback
        self.interval = interval
        self.repeat = repeat
        self._stop_event = threading.Event()
        self._thread = threading.Thread(target=self._run, name=name, daemon=True)

    def start(self) -> 'ScheduledTask':
        self._thread.start()
        return self

    def cancel(self) -> None:
        """Stop the task; safe to call more than once and from the task itself."""
        self._stop_event.set()

    @property
    def cancelled(self) -> bool:
        return self._stop_event.is_set()

    def is_alive(self) -> bool:
        return self._thread.is_alive()

    def join(self, timeout: float = None) -> None:
        if self._thread is not threading.current_thread():
            self._thread.join(timeout)

    def _run(self):
        # wait() returns True once cancelled, so the callback never runs after cancel()
        while not self._stop_event.wait(self.interval):
            try:
                self.callback()
            except Exception as e:
                logger.error(f"Error in scheduled task {self.name}: {e}")
            if not self.repeat:
                break

    def __repr__(self) -> str:
        return f"ScheduledTask(name={self.name!r}, interval={self.interval}, repeat={self.repeat}, cancelled={self.cancelled})"


class TaskScheduler:
    """Creates and starts ScheduledTask instances."""

    def call_every(self, interval: float, callback: Callable[[], None], name: str = 'periodic') -> ScheduledTask:
        """Run `callback` every `interval` seconds until cancelled."""
        logger.debug(f"Scheduling periodic task {name} every {interval}s")
        return ScheduledTask(name, callback, interval, repeat=True).start()

    def call_later(self, delay: float, callback: Callable[[], None], name: str = 'delayed') -> ScheduledTask:
        """Run `callback` once after `delay` seconds unless cancelled first."""
        logger.debug(f"Scheduling delayed task {name} in {delay}s")
        return ScheduledTask(name, callback, delay, repeat=False).start()
