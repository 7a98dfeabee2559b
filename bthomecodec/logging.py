import logging
import threading
from collections import deque
from typing import Any, Deque, Dict, List, Optional

LOGGER_NAME = "bthomecodec"

# Key material and payload bytes never reach the ring buffer.
REDACTED_FIELDS = frozenset({
    "key",
    "encryption_key",
    "plaintext",
    "ciphertext",
    "mic",
    "payload",
    "unknown_payload",
    "address",
})
REDACTED = "***"


def redact(details: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    if not details:
        return {}
    return {name: REDACTED if name in REDACTED_FIELDS else value for name, value in details.items()}


class RingBufferHandler(logging.Handler):
    """Keeps the most recent codec events as plain dicts for diagnostics."""

    def __init__(self, max_entries: int = 200):
        super().__init__()
        self.max_entries = max_entries
        self._events: Deque[Dict[str, Any]] = deque(maxlen=max_entries)
        self._lock = threading.Lock()

    def emit(self, record: logging.LogRecord) -> None:
        event = {
            "event": record.getMessage(),
            "level": record.levelname,
            "logger": record.name,
            "ts": record.created,
            "details": redact(getattr(record, "details", None)),
        }
        with self._lock:
            self._events.append(event)

    def get_events(self) -> List[Dict[str, Any]]:
        with self._lock:
            return list(self._events)

    def clear(self) -> None:
        with self._lock:
            self._events.clear()


def create_logger(name: str, ring_size: int, level: int | str = logging.INFO) -> logging.Logger:
    """Install a ring buffer on ``name`` once; later calls return the configured logger."""
    logger = logging.getLogger(name)
    if any(isinstance(h, RingBufferHandler) for h in logger.handlers):
        return logger
    logger.setLevel(level)
    handler = RingBufferHandler(max_entries=ring_size)
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
    logger.addHandler(handler)
    logger.propagate = False
    return logger


def get_logger(name: str = LOGGER_NAME) -> logging.Logger:
    """Return the package logger (or a child of it), installing the ring buffer on first use."""
    from bthomecodec.config import get_settings

    settings = get_settings()
    root = create_logger(LOGGER_NAME, settings.log_ring_size, settings.log_level)
    if name == LOGGER_NAME:
        return root
    return root.getChild(name.removeprefix(f"{LOGGER_NAME}."))


def _ring_handler() -> Optional[RingBufferHandler]:
    for handler in logging.getLogger(LOGGER_NAME).handlers:
        if isinstance(handler, RingBufferHandler):
            return handler
    return None


def recent_events() -> List[Dict[str, Any]]:
    handler = _ring_handler()
    return handler.get_events() if handler else []
