"""
Canonical log lines for journal runs and spreadsheet imports.

A journal build, a report pass or an import collects its record counts,
step timings and outcome on one WideEvent and logs it as a single JSON
line through structlog. Failed runs, slow runs and runs that rejected a
file or skipped duplicates are always logged; other runs are sampled at
Config.WIDE_EVENT_SAMPLE_RATE.
"""

import random
import time
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import structlog

from evjournal.config import Config

structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer(),
    ],
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

# Journal metrics that bypass sampling when truthy
CRITICAL_EVENTS = (
    "import_rejected",
    "duplicates_skipped",
)

SLOW_RUN_MS = 1000


class WideEvent:
    """
    Context of one journal run, logged once when the run ends.

    The trace id ties the lines of one vehicle or one import code together.
    """

    def __init__(self, operation: str, request_id: Optional[str] = None, trace_id: Optional[str] = None):
        self.operation = operation
        self.context: Dict[str, Any] = {
            "operation": operation,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "start_time": time.time(),
            "request_id": request_id or str(uuid.uuid4()),
        }

        if trace_id:
            self.context["trace_id"] = trace_id

        self.logger = structlog.get_logger()

    def add_context(self, **kwargs) -> "WideEvent":
        self.context.update(kwargs)
        return self

    def add_business_metric(self, key: str, value: Any) -> "WideEvent":
        """Record a count or total under business_metrics (charges_processed, parsed_rows...)."""
        self.context.setdefault("business_metrics", {})[key] = value
        return self

    def add_error(self, error: Exception, **kwargs) -> "WideEvent":
        self.context["error"] = {
            "type": type(error).__name__,
            "message": str(error),
            "details": kwargs,
        }
        self.context["success"] = False
        return self

    def mark_success(self) -> "WideEvent":
        self.context["success"] = True
        return self

    def mark_failure(self, reason: str) -> "WideEvent":
        self.context["success"] = False
        self.context["failure_reason"] = reason
        return self

    @contextmanager
    def timer(self, step: str):
        """Time one step of the run into performance_breakdown as <step>_ms."""
        start = time.time()
        try:
            yield
        finally:
            duration_ms = (time.time() - start) * 1000
            self.context.setdefault("performance_breakdown", {})[f"{step}_ms"] = round(duration_ms, 2)

    def set_duration(self) -> "WideEvent":
        if "start_time" in self.context:
            duration_ms = (time.time() - self.context["start_time"]) * 1000
            self.context["duration_ms"] = round(duration_ms, 2)
            del self.context["start_time"]
        return self

    def should_emit(self, sample_rate: float = Config.WIDE_EVENT_SAMPLE_RATE,
                    slow_threshold_ms: float = SLOW_RUN_MS) -> bool:
        if not self.context.get("success", True):
            return True

        if self.context.get("duration_ms", 0) > slow_threshold_ms:
            return True

        business_metrics = self.context.get("business_metrics", {})
        if any(business_metrics.get(event) for event in CRITICAL_EVENTS):
            return True

        return random.random() < sample_rate

    def emit(self, level: str = "info", force: bool = False) -> None:
        """Log the event as <operation>_complete unless sampled out."""
        self.set_duration()

        if not force and not self.should_emit():
            return

        log_method = getattr(self.logger, level, self.logger.info)
        log_method(f"{self.operation}_complete", **self.context)


@contextmanager
def track_operation(operation: str, force: bool = False, **initial_context):
    """
    Wrap a journal run in a WideEvent.

    Exceptions are recorded on the event, logged at error level and re-raised.
    """
    event = WideEvent(operation)
    event.add_context(**initial_context)

    try:
        yield event
        event.mark_success()
    except Exception as e:
        event.add_error(e)
        event.mark_failure(str(e))
        raise
    finally:
        failed = not event.context.get("success", True)
        event.emit(level="error" if failed else "info", force=force or failed)


def log_import_event(
    import_code: str,
    record_kind: str,
    success: bool,
    **kwargs,
) -> None:
    """Log the outcome of a charges or trips spreadsheet import."""
    event = WideEvent(f"{record_kind}_import", trace_id=import_code)
    event.add_context(import_code=import_code, **kwargs)

    if success:
        event.mark_success()
    else:
        event.add_business_metric("import_rejected", True)
        event.mark_failure(kwargs.get("error", "Unknown error"))

    event.emit(force=True)
