from __future__ import annotations

import random
import threading
from typing import Any, Callable, Dict, List, Optional, Tuple

from loguru import logger

from .matcher import QATable, best_match
from .scheduler import ReplyDelay, ScheduledTask, Scheduler
from .states import Message, Role, SessionMetrics, SessionState


class ConversationSession:
    """Chat state for one panel: message history plus one in-flight reply.

    `submit` appends the user's message, resolves the answer right away and
    schedules its delivery. The scheduled task is tied to its turn and is
    ignored once that turn has been delivered or cancelled. While a reply is
    outstanding further submissions are ignored, so at most one delivery is
    ever pending.
    """

    def __init__(
        self,
        qa_table: QATable,
        default_response: str,
        user_name: str,
        scheduler: Scheduler,
        delay: Optional[ReplyDelay] = None,
        rng: Optional[random.Random] = None,
        assistant_name: str = "Ava",
        on_reply: Optional[Callable[[Message], None]] = None,
        session_id: str = "",
    ) -> None:
        self._qa_table = qa_table
        self.default_response = default_response
        self.user_name = user_name
        self.assistant_name = assistant_name
        self.scheduler = scheduler
        self.delay = delay or ReplyDelay()
        self.rng = rng or random.Random()
        self.on_reply = on_reply
        self.id = session_id or user_name
        self.state = SessionState.IDLE
        self.metrics = SessionMetrics()
        self._history: List[Message] = []
        self._pending_answer: Optional[str] = None
        self._pending_task: Optional[ScheduledTask] = None
        self._turn = 0
        # timer-backed schedulers call deliver_reply from another thread
        self._lock = threading.RLock()

    @property
    def qa_table(self) -> QATable:
        return self._qa_table

    @property
    def history(self) -> Tuple[Message, ...]:
        with self._lock:
            return tuple(self._history)

    @property
    def is_awaiting_reply(self) -> bool:
        return self.state == SessionState.AWAITING_REPLY

    def submit(self, text: str) -> bool:
        with self._lock:
            if not (text or "").strip():
                self._reject("empty")
                return False
            if self.state == SessionState.AWAITING_REPLY:
                self._reject("awaiting_reply")
                return False

            self._append(self.user_name, text, Role.USER)
            result = best_match(text, self._qa_table)
            if result is None:
                self._pending_answer = self.default_response
                self.metrics.default_replies += 1
            else:
                self._pending_answer = result.answer
                self.metrics.matched_replies += 1
            self.metrics.turn_count += 1
            self._turn += 1
            self.state = SessionState.AWAITING_REPLY

            wait = self.delay.sample(self.rng)
            logger.info(
                f"chat_submit | session={self.id} t={self.metrics.turn_count} "
                f"key={result.key if result else '<default>'!r} "
                f"score={result.score if result else 0} delay={wait:.2f}s"
            )
            # bound to this turn so a stale task cannot deliver a later reply
            self._pending_task = self.scheduler.schedule(wait, lambda turn=self._turn: self._deliver(turn))
            return True

    def deliver_reply(self) -> Optional[Message]:
        return self._deliver(self._turn)

    def _deliver(self, turn: int) -> Optional[Message]:
        with self._lock:
            if turn != self._turn:
                logger.debug(f"chat_reply_stale | session={self.id} turn={turn} current={self._turn}")
                return None
            if self.state != SessionState.AWAITING_REPLY or self._pending_answer is None:
                logger.debug(f"chat_reply_ignored | session={self.id} state={self.state.value}")
                return None
            message = self._append(self.assistant_name, self._pending_answer, Role.ASSISTANT)
            if self._pending_task is not None:
                self._pending_task.cancel()
            self._pending_answer = None
            self._pending_task = None
            self.state = SessionState.IDLE
            logger.info(f"chat_reply | session={self.id} order={message.order} len={len(message.text)}")
        if self.on_reply is not None:
            self.on_reply(message)
        return message

    def cancel_pending(self) -> bool:
        with self._lock:
            if self.state != SessionState.AWAITING_REPLY:
                return False
            if self._pending_task is not None:
                self._pending_task.cancel()
            self._pending_task = None
            self._pending_answer = None
            self.state = SessionState.IDLE
            logger.info(f"chat_reply_cancelled | session={self.id}")
            return True

    def transcript(self) -> List[Dict[str, Any]]:
        return [m.to_dict() for m in self.history]

    def _append(self, sender: str, text: str, role: Role) -> Message:
        message = Message(sender=sender, text=text, role=role, order=len(self._history))
        self._history.append(message)
        return message

    def _reject(self, reason: str) -> None:
        self.metrics.rejected_submissions += 1
        logger.debug(f"chat_submit_rejected | session={self.id} reason={reason}")
