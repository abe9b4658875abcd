"""Chat session domain models for streaming conversations."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Literal
from uuid import uuid4

Role = Literal["user", "assistant"]


class SessionStatus(str, Enum):
	"""Lifecycle of the request currently owned by a chat session."""

	IDLE = "idle"
	SENDING = "sending"
	STREAMING = "streaming"
	COMPLETED = "completed"
	CANCELLED = "cancelled"
	FAILED = "failed"


@dataclass
class ChatMessage:
	"""One transcript entry; assistant messages are filled in as chunks arrive."""

	role: Role
	content: str
	id: str = field(default_factory=lambda: uuid4().hex)
	created_at: float = field(default_factory=lambda: time.time())
	streaming: bool = False

	def to_dict(self) -> Dict[str, Any]:
		return {
			"id": self.id,
			"role": self.role,
			"content": self.content,
			"createdAt": self.created_at,
			"streaming": self.streaming,
		}


@dataclass
class MedicationList:
	"""Medications collected for a drug interaction check."""

	list_id: str
	names: list[str] = field(default_factory=list)
	report: str | None = None

	def to_dict(self) -> Dict[str, Any]:
		return {"list_id": self.list_id, "medications": list(self.names), "report": self.report}
