"""
Tests for ConversationSession driven by a ManualScheduler.
"""

import random

import pytest

from patientchat.matcher import QATable
from patientchat.scheduler import ManualScheduler, ReplyDelay
from patientchat.session import ConversationSession
from patientchat.states import Role, SessionState


class TestSubmit:
    def test_initial_state(self, session):
        assert session.state == SessionState.IDLE
        assert session.history == ()
        assert not session.is_awaiting_reply

    @pytest.mark.parametrize("text", ["", "   ", "\n\t"])
    def test_blank_submission_is_noop(self, session, scheduler, text):
        assert session.submit(text) is False
        assert session.history == ()
        assert session.state == SessionState.IDLE
        assert scheduler.pending == []
        assert session.metrics.rejected_submissions == 1

    def test_submit_appends_user_message_and_schedules(self, session, scheduler):
        assert session.submit("Is my fatigue from the medication?") is True
        assert session.state == SessionState.AWAITING_REPLY
        assert len(session.history) == 1
        msg = session.history[0]
        assert msg.role == Role.USER
        assert msg.sender == "Sarah"
        assert msg.text == "Is my fatigue from the medication?"
        assert msg.order == 0
        assert len(scheduler.pending) == 1

    def test_second_submit_while_awaiting_is_noop(self, session, scheduler):
        assert session.submit("hello") is True
        assert session.submit("again") is False
        assert [m.text for m in session.history] == ["hello"]
        assert len(scheduler.pending) == 1

    def test_reply_not_delivered_before_delay(self, session, scheduler):
        session.submit("hello")
        scheduler.advance(1.19)
        assert session.is_awaiting_reply
        assert len(session.history) == 1

    def test_reply_delivered_within_jitter_window(self, session, scheduler):
        session.submit("hello")
        scheduler.advance(2.0)
        assert session.state == SessionState.IDLE
        assert len(session.history) == 2


class TestDelivery:
    def test_matched_answer_delivered(self, session, scheduler):
        session.submit("Is my fatigue from the medication?")
        scheduler.run_all()
        reply = session.history[-1]
        assert reply.role == Role.ASSISTANT
        assert reply.sender == "Ava"
        assert reply.text == "It may be the hormone therapy."
        assert reply.order == 1
        assert session.metrics.matched_replies == 1

    def test_default_answer_delivered(self, session, scheduler):
        session.submit("What's the weather today?")
        scheduler.run_all()
        assert session.history[-1].text == session.default_response
        assert session.metrics.default_replies == 1

    def test_hello_again_scenario(self, session, scheduler):
        session.submit("hello")
        session.submit("again")
        assert sum(1 for m in session.history if m.role == Role.USER) == 1
        scheduler.run_all()
        assert session.state == SessionState.IDLE
        assert session.submit("again") is True
        assert [m.text for m in session.history][:2] == ["hello", session.default_response]
        assert session.history[2].text == "again"

    def test_duplicate_delivery_is_ignored(self, session, scheduler):
        session.submit("fatigue")
        first = session.deliver_reply()
        assert first is not None
        assert session.deliver_reply() is None
        # the scheduled task is cancelled once the reply is out
        assert scheduler.run_all() == 0
        assert len(session.history) == 2
        assert session.state == SessionState.IDLE

    def test_deliver_while_idle_is_noop(self, session):
        assert session.deliver_reply() is None
        assert session.history == ()

    def test_on_reply_hook(self, fatigue_table, scheduler):
        seen = []
        s = ConversationSession(fatigue_table, "d", "Sarah", scheduler, on_reply=seen.append)
        s.submit("fatigue")
        scheduler.run_all()
        assert [m.text for m in seen] == ["It may be the hormone therapy."]

    def test_qa_table_is_read_only(self, session, fatigue_table):
        assert session.qa_table is fatigue_table
        with pytest.raises(AttributeError):
            session.qa_table = QATable.empty()

    def test_stale_task_after_manual_delivery_is_ignored(self, session, scheduler):
        session.submit("fatigue")
        stale = scheduler.pending[0]
        session.deliver_reply()
        assert stale.cancelled
        session.submit("weather today")
        stale.run()
        assert session.is_awaiting_reply
        assert len(session.history) == 3
        scheduler.run_all()
        assert [m.text for m in session.history][2:] == ["weather today", session.default_response]

    def test_stale_callback_does_not_deliver_next_turn(self, session, scheduler):
        session.submit("fatigue")
        first = scheduler.pending[0]
        session.cancel_pending()
        session.submit("weather today")
        # force the old callback even though its handle was cancelled
        first._callback()
        assert session.is_awaiting_reply
        assert len(session.history) == 2
        assert scheduler.advance(2.0) == 1
        assert session.history[-1].text == session.default_response
        assert session.state == SessionState.IDLE


class TestHistory:
    def test_history_only_grows_and_orders_are_sequential(self, session, scheduler):
        lengths = [len(session.history)]
        for text in ["hello", "again", "", "fatigue", "medication please"]:
            session.submit(text)
            lengths.append(len(session.history))
            scheduler.run_all()
            lengths.append(len(session.history))
        assert lengths == sorted(lengths)
        assert [m.order for m in session.history] == list(range(len(session.history)))

    def test_history_is_snapshot(self, session, scheduler):
        snap = session.history
        session.submit("hello")
        assert snap == ()
        assert isinstance(session.history, tuple)

    def test_roles_alternate(self, session, scheduler):
        for text in ["a", "b", "c"]:
            session.submit(text)
            scheduler.run_all()
        roles = [m.role for m in session.history]
        assert roles == [Role.USER, Role.ASSISTANT] * 3

    def test_transcript(self, session, scheduler):
        session.submit("fatigue")
        scheduler.run_all()
        rows = session.transcript()
        assert [r["role"] for r in rows] == ["user", "assistant"]
        assert rows[0]["sender"] == "Sarah"
        assert rows[1]["timestamp"].endswith("Z")


class TestCancel:
    def test_cancel_pending(self, session, scheduler):
        session.submit("hello")
        assert session.cancel_pending() is True
        assert session.state == SessionState.IDLE
        assert scheduler.run_all() == 0
        assert len(session.history) == 1

    def test_cancel_when_idle(self, session):
        assert session.cancel_pending() is False


def test_delay_uses_injected_rng(fatigue_table):
    scheduler = ManualScheduler()
    s = ConversationSession(
        fatigue_table, "d", "Sarah", scheduler, delay=ReplyDelay(1.0, 1.0), rng=random.Random(3)
    )
    s.submit("hi")
    expected = 1.0 + random.Random(3).random()
    assert scheduler.pending[0].due == pytest.approx(expected)
