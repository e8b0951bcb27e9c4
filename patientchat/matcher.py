"""Bag-of-words matcher over a canned question/answer table.

A query is scored against every stored question by counting the distinct
tokens they share. The highest score wins; on a tie the question registered
first wins. A best score of zero means "no match" and the caller's default
reply is used instead.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, Iterator, Mapping, Optional, Tuple

from loguru import logger

from .states import QAEntry


_SPLIT = re.compile(r"\W+")


def normalize(text: str) -> str:
    return (text or "").strip().lower()


def tokenize(text: str) -> FrozenSet[str]:
    return frozenset(t for t in _SPLIT.split(normalize(text)) if t)


def score(query_tokens: FrozenSet[str], key_tokens: FrozenSet[str]) -> int:
    return len(query_tokens & key_tokens)


class QATable(Mapping[str, str]):
    """Read-only, insertion-ordered mapping of normalized question -> answer.

    Built once from a sequence of entries. A question that normalizes to an
    existing key replaces its answer but keeps the key's original position.
    """

    def __init__(self, answers: Dict[str, str]) -> None:
        self._answers: Dict[str, str] = {normalize(k): v for k, v in answers.items()}
        self._tokens: Dict[str, FrozenSet[str]] = {k: tokenize(k) for k in self._answers}

    @classmethod
    def from_entries(cls, entries: Iterable[QAEntry]) -> "QATable":
        answers: Dict[str, str] = {}
        duplicates = 0
        for entry in entries:
            key = normalize(entry.question)
            if key in answers:
                duplicates += 1
            answers[key] = entry.answer
        if duplicates:
            logger.debug(f"qa_table_duplicates | overridden={duplicates}")
        return cls(answers)

    @classmethod
    def empty(cls) -> "QATable":
        return cls({})

    def __getitem__(self, key: str) -> str:
        return self._answers[normalize(key)]

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and normalize(key) in self._answers

    def __iter__(self) -> Iterator[str]:
        return iter(self._answers)

    def __len__(self) -> int:
        return len(self._answers)

    def __repr__(self) -> str:
        return f"QATable(size={len(self)})"

    def keyed_tokens(self) -> Iterator[Tuple[str, FrozenSet[str]]]:
        return iter(self._tokens.items())


@dataclass(frozen=True)
class MatchResult:
    key: str
    answer: str
    score: int


def best_match(query: str, table: QATable) -> Optional[MatchResult]:
    query_tokens = tokenize(query)
    if not query_tokens:
        return None
    best_key: Optional[str] = None
    best_score = 0
    for key, key_tokens in table.keyed_tokens():
        s = score(query_tokens, key_tokens)
        # strict comparison keeps the earliest key on ties
        if s > best_score:
            best_score = s
            best_key = key
    if best_key is None:
        return None
    return MatchResult(key=best_key, answer=table[best_key], score=best_score)


def match(query: str, table: QATable, default: str) -> str:
    result = best_match(query, table)
    return result.answer if result is not None else default
