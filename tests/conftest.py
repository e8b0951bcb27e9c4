"""
Pytest configuration for patientchat tests.

Puts the project root on the Python path so the flat-layout package and
run_chat import without an editable install, and provides shared fixtures.
"""
import json
import random
import sys
from pathlib import Path

import pytest

project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from patientchat.matcher import QATable
from patientchat.scheduler import ManualScheduler, ReplyDelay
from patientchat.session import ConversationSession
from patientchat.states import QAEntry


DEFAULT = "Could you tell me a bit more?"


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def fatigue_table():
    return QATable.from_entries([QAEntry("fatigue medication", "It may be the hormone therapy.")])


@pytest.fixture
def session(fatigue_table, scheduler):
    return ConversationSession(
        qa_table=fatigue_table,
        default_response=DEFAULT,
        user_name="Sarah",
        scheduler=scheduler,
        delay=ReplyDelay(base=1.2, jitter=0.8),
        rng=random.Random(7),
    )


@pytest.fixture
def qa_doc_path(tmp_path):
    doc = {
        "sarah": [{"q": "Is my fatigue from the medication?", "a": "Likely the hormone therapy."}],
        "michael": [{"question": "What is my recurrence risk?", "answer": "Roughly 15-30% at five years."}],
    }
    path = tmp_path / "qa.json"
    path.write_text(json.dumps(doc), encoding="utf-8")
    return path
