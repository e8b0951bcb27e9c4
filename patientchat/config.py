from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv
from loguru import logger


ROOT = Path(__file__).resolve().parents[1]
DEFAULT_QA_SOURCE = ROOT / "data" / "qa.json"
LOG_FORMAT = "{time:HH:mm:ss} | {level} | {message}"


def load_env() -> None:
    # project-local .env first, then the working directory
    for env_path in (ROOT / ".env", Path.cwd() / ".env"):
        if env_path.is_file():
            load_dotenv(dotenv_path=str(env_path), override=False)
            break


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"config_invalid | {name}={raw!r}; using {default}")
        return default


def _env_positive(name: str, default: float) -> float:
    value = _env_float(name, default)
    if value <= 0:
        logger.warning(f"config_invalid | {name}={value}; must be positive, using {default}")
        return default
    return value


@dataclass(frozen=True)
class Settings:
    qa_source: str = str(DEFAULT_QA_SOURCE)
    reply_base_delay: float = 1.2
    reply_jitter: float = 0.8
    assistant_name: str = "Ava"
    log_level: str = "INFO"
    fetch_timeout: float = 10.0

    @classmethod
    def from_env(cls) -> "Settings":
        load_env()
        return cls(
            qa_source=os.getenv("PATIENTCHAT_QA_SOURCE") or str(DEFAULT_QA_SOURCE),
            reply_base_delay=max(0.0, _env_float("PATIENTCHAT_REPLY_BASE_DELAY", 1.2)),
            reply_jitter=max(0.0, _env_float("PATIENTCHAT_REPLY_JITTER", 0.8)),
            assistant_name=os.getenv("PATIENTCHAT_ASSISTANT_NAME") or "Ava",
            log_level=(os.getenv("PATIENTCHAT_LOG_LEVEL") or "INFO").upper(),
            fetch_timeout=_env_positive("PATIENTCHAT_FETCH_TIMEOUT", 10.0),
        )


def configure_logging(level: str = "INFO") -> None:
    logger.remove()
    logger.add(sys.stdout, level=level.upper(), colorize=True, format=LOG_FORMAT)
