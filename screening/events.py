"""
Event callbacks used in place of a process wide logger.

Filters, ingestors and assertions accept an optional ``on_event(event, fields)``
callable. The outer layers pass ``log_event``, which forwards to ``logging``.
"""
import logging
from typing import Any, Callable, Dict, Optional

EventCallback = Callable[[str, Dict[str, Any]], None]

logger = logging.getLogger("passcheck")

_LEVELS = {
    "error": logging.ERROR,
    "warning": logging.WARNING,
    "filter_created": logging.INFO,
    "ingest_started": logging.INFO,
    "ingest_finished": logging.INFO,
    "policy_registered": logging.INFO,
    "policy_rebuilt": logging.INFO,
}


def ignore_event(event: str, fields: Dict[str, Any]) -> None:
    pass


def log_event(event: str, fields: Dict[str, Any]) -> None:
    """Default sink: one log record per event, fields rendered as key=value"""
    level = _LEVELS.get(event, logging.DEBUG)
    if not logger.isEnabledFor(level):
        return
    rendered = " ".join(f"{key}={value!r}" for key, value in fields.items())
    logger.log(level, "%s %s", event, rendered)


def emitter(on_event: Optional[EventCallback]) -> EventCallback:
    return on_event if on_event is not None else ignore_event
