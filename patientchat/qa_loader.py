"""Loads the canned Q&A document shared by both panels.

The document is a JSON object with one list per profile key, e.g.

    {"sarah": [{"q": "...", "a": "..."}], "michael": [{"question": "...", "answer": "..."}]}

It is read once at startup. Any failure degrades to an empty list for the
affected profile(s) so the panel keeps working with its default reply.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Iterable, List, Union

import requests
from loguru import logger

from .states import QAEntry


class DataLoadError(Exception):
    """The Q&A document could not be fetched or parsed."""


def _is_url(source: str) -> bool:
    return source.startswith("http://") or source.startswith("https://")


def fetch_document(source: Union[str, Path], timeout: float = 10.0) -> Dict[str, Any]:
    src = str(source)
    try:
        if _is_url(src):
            resp = requests.get(src, timeout=timeout)
            resp.raise_for_status()
            doc = resp.json()
        else:
            doc = json.loads(Path(src).read_text(encoding="utf-8"))
    except (OSError, ValueError, requests.RequestException) as e:
        raise DataLoadError(f"{src}: {e}") from e
    if not isinstance(doc, dict):
        raise DataLoadError(f"{src}: expected a JSON object, got {type(doc).__name__}")
    return doc


def parse_entries(raw: Any) -> List[QAEntry]:
    if not isinstance(raw, list):
        raise DataLoadError(f"expected a list of records, got {type(raw).__name__}")
    entries: List[QAEntry] = []
    skipped = 0
    for rec in raw:
        if not isinstance(rec, dict):
            skipped += 1
            continue
        q = rec.get("question", rec.get("q"))
        a = rec.get("answer", rec.get("a"))
        if not isinstance(q, str) or not isinstance(a, str):
            skipped += 1
            continue
        entries.append(QAEntry(question=q, answer=a))
    if skipped:
        logger.warning(f"qa_records_skipped | count={skipped}")
    return entries


def load_qa_lists(
    source: Union[str, Path],
    keys: Iterable[str],
    timeout: float = 10.0,
) -> Dict[str, List[QAEntry]]:
    keys = list(keys)
    try:
        doc = fetch_document(source, timeout=timeout)
    except DataLoadError as e:
        logger.warning(f"qa_load_failed | source={source} | {e}")
        return {k: [] for k in keys}

    out: Dict[str, List[QAEntry]] = {}
    for key in keys:
        try:
            out[key] = parse_entries(doc.get(key, []))
        except DataLoadError as e:
            logger.warning(f"qa_load_failed | source={source} key={key} | {e}")
            out[key] = []
        else:
            logger.info(f"qa_loaded | source={source} key={key} entries={len(out[key])}")
    return out
