"""Streamlit session-state helpers shared by the app pages.

They take any mutable mapping, so `st.session_state` in the app and a plain
dict in tests behave the same.
"""

from __future__ import annotations

import time
from typing import MutableMapping, Optional

from loguru import logger

from .config import Settings, configure_logging
from .panels import Panel, PanelCoordinator
from .scheduler import ManualScheduler, ReplyDelay


COORDINATOR_KEY = "coordinator"


def input_key(panel: Panel) -> str:
    return f"chat_input_{panel.id}"


def ensure_coordinator(state: MutableMapping, settings: Optional[Settings] = None) -> PanelCoordinator:
    """Return the per-browser-session coordinator, building it on first use."""
    coordinator = state.get(COORDINATOR_KEY)
    if coordinator is not None:
        return coordinator
    settings = settings or Settings.from_env()
    configure_logging(settings.log_level)
    logger.info(f"ui_start | qa_source={settings.qa_source}")
    coordinator = PanelCoordinator.from_source(
        settings.qa_source,
        # tasks fire from the page's rerun loop, against wall-clock time
        scheduler_factory=lambda: ManualScheduler(clock=time.monotonic),
        timeout=settings.fetch_timeout,
        delay=ReplyDelay(settings.reply_base_delay, settings.reply_jitter),
        assistant_name=settings.assistant_name,
    )
    state[COORDINATOR_KEY] = coordinator
    return coordinator


def submit_input(state: MutableMapping, panel: Panel) -> bool:
    # only an accepted question clears the text box
    key = input_key(panel)
    accepted = panel.submit(state.get(key, ""))
    if accepted:
        state[key] = ""
    return accepted
