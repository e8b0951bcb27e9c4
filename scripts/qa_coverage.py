from __future__ import annotations

import json
import sys
from pathlib import Path as _PathForSys
from typing import Any, Dict, List

from loguru import logger

# Ensure the project root is on sys.path when run from scripts/
_pkg_root = str(_PathForSys(__file__).resolve().parents[1])
if _pkg_root not in sys.path:
    sys.path.insert(0, _pkg_root)

from patientchat.config import Settings, configure_logging
from patientchat.matcher import QATable, best_match
from patientchat.profiles import PROFILES
from patientchat.qa_loader import load_qa_lists


# ==========================
# Configuration (edit here)
# ==========================
ROOT = _PathForSys(__file__).resolve().parents[1]
RESULTS_DIR = ROOT / "qa_coverage"
RESULT_FILE = RESULTS_DIR / "coverage.json"

# Probe questions per profile key; each profile's example question is added too
PROBES: Dict[str, List[str]] = {
    "sarah": [
        "Why am I so tired all the time?",
        "Is the cancer back?",
        "What should I tell my children?",
        "I can't pay my bills",
        "What's the weather today?",
    ],
    "michael": [
        "What are my odds of recurrence?",
        "Should I worry about my CEA?",
        "Does exercise reduce risk?",
        "When is my next colonoscopy?",
        "What's the weather today?",
    ],
}


def probe(table: QATable, questions: List[str]) -> List[Dict[str, Any]]:
    rows = []
    for q in questions:
        result = best_match(q, table)
        rows.append(
            {
                "question": q,
                "matched": result.key if result else None,
                "score": result.score if result else 0,
            }
        )
    return rows


def main() -> None:
    settings = Settings.from_env()
    configure_logging("DEBUG")

    qa_lists = load_qa_lists(settings.qa_source, [p.key for p in PROFILES.values()], timeout=settings.fetch_timeout)
    report: Dict[str, Any] = {"source": settings.qa_source, "profiles": {}}
    for profile in PROFILES.values():
        table = QATable.from_entries(qa_lists[profile.key])
        rows = probe(table, PROBES.get(profile.key, []) + [profile.example])
        defaults = sum(1 for r in rows if r["matched"] is None)
        report["profiles"][profile.key] = {"entries": len(table), "defaults": defaults, "probes": rows}
        for r in rows:
            logger.info(f"probe | profile={profile.key} score={r['score']} matched={r['matched']!r} | q={r['question']!r}")
        logger.info(f"coverage | profile={profile.key} probes={len(rows)} default_replies={defaults}")

    RESULTS_DIR.mkdir(parents=True, exist_ok=True)
    RESULT_FILE.write_text(json.dumps(report, ensure_ascii=False, indent=2), encoding="utf-8")
    logger.info(f"Wrote coverage report to {RESULT_FILE}")


if __name__ == "__main__":
    main()
