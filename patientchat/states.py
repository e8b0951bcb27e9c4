from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict


class SessionState(Enum):
    IDLE = "idle"
    AWAITING_REPLY = "awaiting_reply"


class Role(Enum):
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class QAEntry:
    question: str
    answer: str


def _utc_now() -> str:
    return datetime.now(timezone.utc).replace(tzinfo=None).isoformat() + "Z"


@dataclass(frozen=True)
class Message:
    sender: str
    text: str
    role: Role
    order: int
    timestamp: str = field(default_factory=_utc_now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sender": self.sender,
            "text": self.text,
            "role": self.role.value,
            "order": self.order,
            "timestamp": self.timestamp,
        }


@dataclass
class SessionMetrics:
    turn_count: int = 0
    matched_replies: int = 0
    default_replies: int = 0
    rejected_submissions: int = 0
