"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pythonjsonlogger import jsonlogger

from smartspend_gateway.config import settings


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s")
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_simulation(
    request_id: str,
    strategy: str,
    debt_count: int,
    months: Optional[int],
    warning: Optional[str],
    duration_ms: float,
) -> None:
    """Log structured payoff simulation outcome"""
    logging.info(
        "Payoff simulation completed",
        extra={
            "request_id": request_id,
            "step": "simulation_complete",
            "strategy": strategy,
            "debt_count": debt_count,
            "months": months,
            "warning": warning,
            "duration_ms": duration_ms,
        },
    )


def log_habit_detection(
    request_id: str,
    transaction_count: int,
    skipped_count: int,
    pattern_count: int,
    duration_ms: float,
) -> None:
    """Log structured habit detection outcome"""
    logging.info(
        "Habit detection completed",
        extra={
            "request_id": request_id,
            "step": "habit_detection_complete",
            "transaction_count": transaction_count,
            "skipped_count": skipped_count,
            "pattern_count": pattern_count,
            "duration_ms": duration_ms,
        },
    )


def log_reminder(request_id: str, habit_id: Optional[str], duration_ms: float) -> None:
    """Log structured reminder evaluation outcome"""
    logging.info(
        "Reminder evaluation completed",
        extra={
            "request_id": request_id,
            "step": "reminder_complete",
            "reminder_outcome": "due" if habit_id else "none",
            "habit_id": habit_id,
            "duration_ms": duration_ms,
        },
    )
