"""Runtime configuration for the ledger CLI, read from the environment."""
import logging
import os
from dataclasses import dataclass

LOG_LEVEL_ENV = "LEDGER_LOG_LEVEL"
WORKERS_ENV = "LEDGER_WORKERS"


@dataclass(frozen=True)
class LedgerConfig:
    log_level: int = logging.WARNING
    num_workers: int = 1


def load_config() -> LedgerConfig:
    return LedgerConfig(
        log_level=_get_log_level(LOG_LEVEL_ENV, logging.WARNING),
        num_workers=max(1, _get_int(WORKERS_ENV, 1)),
    )


def _get_int(key: str, default: int) -> int:
    value = os.getenv(key)
    if value is None or value == "":
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_log_level(key: str, default: int) -> int:
    value = os.getenv(key)
    if value is None or value.strip() == "":
        return default
    value = value.strip().upper()
    if value.isdigit():
        return int(value)
    level = logging.getLevelName(value)
    return level if isinstance(level, int) else default
