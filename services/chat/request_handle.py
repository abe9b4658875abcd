"""Handle for one in-flight streaming request."""

from __future__ import annotations

import asyncio
from typing import Optional
from uuid import uuid4


class RequestHandle:
	"""Own the cancellation signal of a single generation request.

	A handle starts alive. Once it is cancelled or retired it stays inert:
	the session checks `alive` before applying anything the request produces,
	so late chunks from a superseded request are dropped.
	"""

	def __init__(self, message_id: str) -> None:
		self.request_id = uuid4().hex
		self.message_id = message_id
		self._alive = True
		self._cancelled = False
		self._task: Optional[asyncio.Task] = None

	@property
	def alive(self) -> bool:
		return self._alive

	@property
	def cancelled(self) -> bool:
		return self._cancelled

	def attach(self, task: asyncio.Task) -> None:
		self._task = task

	def cancel(self) -> bool:
		"""Mark the request inert and ask the transport task to stop."""
		if not self._alive:
			return False
		self._alive = False
		self._cancelled = True
		if self._task is not None and not self._task.done():
			self._task.cancel()
		return True

	def retire(self) -> None:
		"""Mark the request finished; nothing it yields afterwards is applied."""
		self._alive = False

	async def wait(self) -> None:
		"""Wait for the transport task to settle without raising its cancellation."""
		if self._task is not None:
			await asyncio.wait({self._task})
