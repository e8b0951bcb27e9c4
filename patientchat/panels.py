from __future__ import annotations

import random
from pathlib import Path
from typing import Callable, Dict, Iterator, List, Mapping, Optional, Tuple, Union

from loguru import logger

from .matcher import QATable
from .profiles import PROFILES, PatientProfile
from .qa_loader import load_qa_lists
from .scheduler import ReplyDelay, Scheduler
from .session import ConversationSession
from .states import Message, QAEntry


class Panel:
    def __init__(self, panel_id: str, profile: PatientProfile, session: ConversationSession) -> None:
        self.id = panel_id
        self.profile = profile
        self.session = session

    @property
    def qa_table(self) -> QATable:
        return self.session.qa_table

    @property
    def default_response(self) -> str:
        return self.profile.default_response

    @property
    def history(self) -> Tuple[Message, ...]:
        return self.session.history

    @property
    def is_awaiting_reply(self) -> bool:
        return self.session.is_awaiting_reply

    def submit(self, text: str) -> bool:
        return self.session.submit(text)

    def __repr__(self) -> str:
        return f"Panel(id={self.id!r}, profile={self.profile.key!r}, qa={len(self.qa_table)})"


class PanelCoordinator:
    """Owns the two independent panels (left and right).

    Each panel gets its own table, session and random source; nothing
    mutable is shared between them.
    """

    def __init__(self, panels: List[Panel]) -> None:
        if len(panels) != 2:
            raise ValueError(f"expected exactly two panels, got {len(panels)}")
        ids = [p.id for p in panels]
        if len(set(ids)) != 2:
            raise ValueError(f"panel ids must be distinct: {ids}")
        self._panels: Dict[str, Panel] = {p.id: p for p in panels}

    @classmethod
    def from_qa_lists(
        cls,
        qa_lists: Mapping[str, List[QAEntry]],
        scheduler_factory: Callable[[], Scheduler],
        profiles: Optional[Mapping[str, PatientProfile]] = None,
        delay: Optional[ReplyDelay] = None,
        assistant_name: str = "Ava",
        seed: Optional[int] = None,
        on_reply: Optional[Callable[[str, Message], None]] = None,
    ) -> "PanelCoordinator":
        profiles = profiles or PROFILES
        panels: List[Panel] = []
        for i, (panel_id, profile) in enumerate(profiles.items()):
            table = QATable.from_entries(qa_lists.get(profile.key, []))
            rng = random.Random(None if seed is None else seed + i)
            hook = None
            if on_reply is not None:
                hook = lambda msg, _pid=panel_id: on_reply(_pid, msg)
            session = ConversationSession(
                qa_table=table,
                default_response=profile.default_response,
                user_name=profile.first_name,
                scheduler=scheduler_factory(),
                delay=delay,
                rng=rng,
                assistant_name=assistant_name,
                on_reply=hook,
                session_id=panel_id,
            )
            panels.append(Panel(panel_id, profile, session))
            logger.info(f"panel_ready | panel={panel_id} profile={profile.key} qa_entries={len(table)}")
        return cls(panels)

    @classmethod
    def from_source(
        cls,
        source: Union[str, Path],
        scheduler_factory: Callable[[], Scheduler],
        profiles: Optional[Mapping[str, PatientProfile]] = None,
        timeout: float = 10.0,
        **kwargs,
    ) -> "PanelCoordinator":
        profiles = profiles or PROFILES
        qa_lists = load_qa_lists(source, [p.key for p in profiles.values()], timeout=timeout)
        return cls.from_qa_lists(qa_lists, scheduler_factory, profiles=profiles, **kwargs)

    @property
    def panels(self) -> Iterator[Panel]:
        return iter(self._panels.values())

    @property
    def panel_ids(self) -> List[str]:
        return list(self._panels)

    def panel(self, panel_id: str) -> Panel:
        try:
            return self._panels[panel_id]
        except KeyError:
            raise KeyError(f"unknown panel: {panel_id!r}") from None

    def submit(self, panel_id: str, text: str) -> bool:
        return self.panel(panel_id).submit(text)
