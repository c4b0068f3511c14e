"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict
from pythonjsonlogger import jsonlogger


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = "pizzeria-gateway"


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)

    # httpx logs every request line at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


def log_pix_generated(
    request_id: str,
    order_id: str,
    tx_id: str,
    provider: str,
    duration_ms: float,
) -> None:
    """Log structured PIX generation outcome"""
    logging.info(
        "PIX generated",
        extra={
            "request_id": request_id,
            "order_id": order_id,
            "tx_id": tx_id,
            "step": "pix_generated",
            "provider": provider,
            "duration_ms": duration_ms,
        },
    )


def log_provider_failure(order_id: str, tx_id: str, stage: str, error: str) -> None:
    """Log a payment provider failure that triggered the static fallback"""
    logging.warning(
        "Payment provider failed, falling back to static PIX",
        extra={
            "order_id": order_id,
            "tx_id": tx_id,
            "step": "provider_fallback",
            "stage": stage,
            "error": error,
        },
    )
