"""
Status channel: one notification slot with an auto-clear timer.

Only one message is visible at a time. Each publish cancels the previous timer and
starts a new one, and every expiry callback carries the generation it was armed for,
so an older timer firing late cannot clear a newer message.
"""

import threading  # default timer implementation and state lock
from dataclasses import dataclass  # message record
from typing import Callable, Optional  # type hints

from loguru import logger  # console logger

# Allowed notification kinds
KINDS = ('success', 'error', 'info')


@dataclass(frozen=True)
class StatusMessage:
	message: str  # text shown to the user
	kind: str  # success | error | info
	generation: int  # publish sequence number


class StatusChannel:

	def __init__(self, duration_s: float = 3.0, timer_factory: Callable = threading.Timer):
		self.duration_s = duration_s  # auto-clear delay
		self._timer_factory = timer_factory  # injectable for tests
		self._lock = threading.Lock()  # guards message, timer and generation together
		self._current: Optional[StatusMessage] = None
		self._timer = None  # the single owned timer handle
		self._generation = 0

	@property
	def current(self) -> Optional[StatusMessage]:
		return self._current

	def publish(self, message: str, kind: str = 'success') -> StatusMessage:
		"""Replace the visible notification and restart the auto-clear timer."""
		if kind not in KINDS:
			raise ValueError(f"Unknown status kind: {kind}")
		with self._lock:
			self._generation += 1
			status = StatusMessage(message=message, kind=kind, generation=self._generation)
			self._current = status
			if self._timer is not None:
				self._timer.cancel()  # the old timer must not outlive its message
			timer = self._timer_factory(self.duration_s, self._expire, args=(status.generation,))
			timer.daemon = True  # never keep the process alive for a notification
			self._timer = timer
			timer.start()
		log = logger.warning if kind == 'error' else logger.info
		log(f"[Status] {kind}: {message}")
		return status

	def clear(self) -> None:
		with self._lock:
			if self._timer is not None:
				self._timer.cancel()
			self._timer = None
			self._current = None

	def _expire(self, generation: int) -> None:
		with self._lock:
			if generation != self._generation:
				return  # stale
			self._current = None
			self._timer = None
