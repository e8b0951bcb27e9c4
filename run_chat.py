from __future__ import annotations

import argparse
import asyncio
import json
from pathlib import Path
from typing import List, Optional

from loguru import logger

from patientchat.config import Settings, configure_logging
from patientchat.panels import Panel, PanelCoordinator
from patientchat.scheduler import AsyncioScheduler, ReplyDelay
from patientchat.states import Message


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Chat with one patient panel from the terminal")
    p.add_argument("--panel", type=str, choices=["left", "right"], default="left", help="left = Sarah, right = Michael")
    p.add_argument("--qa-source", type=str, help="Path or URL of the Q&A JSON document (overrides PATIENTCHAT_QA_SOURCE)")
    p.add_argument("--question", action="append", default=[], help="Ask this question and exit (repeatable)")
    p.add_argument("--no-delay", action="store_true", help="Deliver replies immediately")
    p.add_argument("--log-level", type=str, help="Log level (default from PATIENTCHAT_LOG_LEVEL)")
    p.add_argument("--transcript", type=str, help="Write the JSON transcript here on exit")
    return p.parse_args(argv)


async def ask(panel: Panel, question: str, replies: "asyncio.Queue[Message]") -> Optional[Message]:
    if not panel.submit(question):
        return None
    return await replies.get()


async def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    settings = Settings.from_env()
    configure_logging(args.log_level or settings.log_level)

    replies: "asyncio.Queue[Message]" = asyncio.Queue()
    delay = ReplyDelay.none() if args.no_delay else ReplyDelay(settings.reply_base_delay, settings.reply_jitter)
    coordinator = PanelCoordinator.from_source(
        args.qa_source or settings.qa_source,
        scheduler_factory=AsyncioScheduler,
        timeout=settings.fetch_timeout,
        delay=delay,
        assistant_name=settings.assistant_name,
        on_reply=lambda _pid, msg: replies.put_nowait(msg),
    )
    panel = coordinator.panel(args.panel)
    logger.info(f"cli_chat_start | panel={panel.id} profile={panel.profile.name} qa_entries={len(panel.qa_table)}")

    if args.question:
        for q in args.question:
            msg = await ask(panel, q, replies)
            print(f"{panel.profile.first_name}: {q}")
            print(f"{msg.sender}: {msg.text}\n" if msg else "(ignored: empty question)\n")
    else:
        print(f"Chatting as {panel.profile.name}. Empty line or Ctrl-D to quit.")
        while True:
            try:
                q = await asyncio.to_thread(input, f"{panel.profile.first_name}> ")
            except EOFError:
                break
            if not q.strip():
                break
            msg = await ask(panel, q, replies)
            if msg:
                print(f"{msg.sender}: {msg.text}")

    if args.transcript:
        Path(args.transcript).write_text(
            json.dumps(panel.session.transcript(), ensure_ascii=False, indent=2), encoding="utf-8"
        )
        logger.info(f"cli_transcript_saved | path={args.transcript}")


if __name__ == "__main__":
    asyncio.run(main())
