"""
Structured JSON logging for correction observability.

Provides structured logging with trace IDs for correlating logs across a
correction batch, context managers for batch stages and backend calls, and a
bounded in-process audit log used by the orchestrator and preserver.
"""

import json
import logging
import sys
import time
from collections import deque
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, datetime
from typing import Any

# Context variables for trace correlation
trace_id_var: ContextVar[str | None] = ContextVar("trace_id", default=None)
stage_var: ContextVar[str | None] = ContextVar("stage", default=None)

LEVEL_ORDER = {"debug": 0, "info": 1, "warning": 2, "error": 3}

_STDLIB_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


# -----------------------------------------------------------------------------
# JSON Formatter
# -----------------------------------------------------------------------------


class JSONFormatter(logging.Formatter):
    """
    Format log records as single-line JSON.

    Output format:
    {"timestamp": "...", "level": "INFO", "message": "...", "trace_id": "...", ...}
    """

    EXTRA_KEYS = (
        "event",
        "duration_ms",
        "provider",
        "model",
        "call_type",
        "issue_type",
        "attempt",
        "snapshot_id",
        "corrections_applied",
        "corrections_failed",
    )

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        trace_id = trace_id_var.get()
        if trace_id:
            log_data["trace_id"] = trace_id

        stage = stage_var.get()
        if stage:
            log_data["stage"] = stage

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key in self.EXTRA_KEYS:
            if hasattr(record, key):
                log_data[key] = getattr(record, key)

        return json.dumps(log_data)


def configure_logging(json_format: bool = True, level: str = "INFO") -> None:
    """
    Configure logging for production or local development.

    Args:
        json_format: If True, use JSON format. If False, use human-readable format.
        level: Log level (DEBUG, INFO, WARNING, ERROR)
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(getattr(logging, level.upper()))

    if json_format:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s"))

    root_logger.addHandler(handler)

    # Reduce noise from SDK transports
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("openai").setLevel(logging.WARNING)
    logging.getLogger("anthropic").setLevel(logging.WARNING)


# -----------------------------------------------------------------------------
# Audit Log
# -----------------------------------------------------------------------------


class AuditLog:
    """
    Bounded, level-filtered record of component activity.

    Entries at or above `level` are kept (oldest dropped past `capacity`)
    and forwarded to the given stdlib logger.

    Usage:
        audit = AuditLog(logging.getLogger(__name__), level="info", capacity=500)
        audit.record("warning", "Correction attempt failed", retry=2)
        audit.entries()  # [{"level": "warning", "message": ..., "retry": 2, "timestamp": ...}]
    """

    def __init__(self, logger: logging.Logger, level: str = "info", capacity: int = 500):
        self._logger = logger
        self._threshold = LEVEL_ORDER.get(level, LEVEL_ORDER["info"])
        self._entries: deque[dict[str, Any]] = deque(maxlen=capacity)

    def record(self, level: str, message: str, **fields: Any) -> None:
        """Record a message if it passes the configured level."""
        if LEVEL_ORDER.get(level, LEVEL_ORDER["info"]) < self._threshold:
            return

        entry: dict[str, Any] = {"level": level, "message": message}
        entry.update(fields)
        entry["timestamp"] = datetime.now(UTC).isoformat()
        self._entries.append(entry)

        extra = {k: v for k, v in fields.items() if k in JSONFormatter.EXTRA_KEYS}
        self._logger.log(_STDLIB_LEVELS.get(level, logging.INFO), message, extra=extra)

    def entries(self) -> list[dict[str, Any]]:
        return list(self._entries)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


# -----------------------------------------------------------------------------
# Context Managers
# -----------------------------------------------------------------------------


@contextmanager
def log_stage(stage: str, trace_id: str | None = None):
    """
    Context manager for stage-level logging.

    Logs stage start and end with duration, automatically tracks timing.

    Usage:
        with log_stage("correction_batch", trace_id=batch_id):
            # ... stage logic ...
    """
    trace_token = trace_id_var.set(trace_id) if trace_id else None
    stage_token = stage_var.set(stage)

    start_time = time.time()
    logger = logging.getLogger("content_fix.stage")

    logger.info(f"Stage {stage} started", extra={"event": "stage_start"})

    try:
        yield
        duration_ms = int((time.time() - start_time) * 1000)
        logger.info(
            f"Stage {stage} completed",
            extra={"event": "stage_complete", "duration_ms": duration_ms},
        )
    except Exception as e:
        duration_ms = int((time.time() - start_time) * 1000)
        logger.error(
            f"Stage {stage} failed: {e}",
            extra={"event": "stage_failed", "duration_ms": duration_ms},
            exc_info=True,
        )
        raise
    finally:
        stage_var.reset(stage_token)
        if trace_token is not None:
            trace_id_var.reset(trace_token)


@contextmanager
def log_llm_call(provider: str, model: str, call_type: str):
    """
    Context manager for backend call instrumentation.

    Logs call start and end with timing. Failures are logged and re-raised.

    Usage:
        with log_llm_call("openai", "gpt-4o-mini", "correction"):
            text = provider.generate(prompt, options)
    """
    start_time = time.time()
    logger = logging.getLogger("content_fix.llm")

    logger.debug(
        f"LLM call started: {provider}/{model} for {call_type}",
        extra={"event": "llm_call_start", "provider": provider, "model": model, "call_type": call_type},
    )

    try:
        yield

        duration_ms = int((time.time() - start_time) * 1000)
        logger.info(
            f"LLM call completed: {provider}/{model} ({duration_ms}ms)",
            extra={
                "event": "llm_call_complete",
                "provider": provider,
                "model": model,
                "call_type": call_type,
                "duration_ms": duration_ms,
            },
        )
    except Exception as e:
        duration_ms = int((time.time() - start_time) * 1000)
        logger.warning(
            f"LLM call failed: {provider}/{model} - {e}",
            extra={
                "event": "llm_call_failed",
                "provider": provider,
                "model": model,
                "call_type": call_type,
                "duration_ms": duration_ms,
            },
        )
        raise
