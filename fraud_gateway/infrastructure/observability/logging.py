"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict

from pythonjsonlogger import jsonlogger


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def __init__(self, *args: Any, service_name: str = "fraud-gateway", **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.service_name = service_name

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = self.service_name


def setup_logging(level: str = "INFO", service_name: str = "fraud-gateway") -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s",
        service_name=service_name,
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_analysis(
    request_id: str,
    transaction_id: str,
    user_id: str,
    risk_score: float,
    risk_level: str,
    recommendation: str,
    indicator_count: int,
    duration_ms: float,
) -> None:
    """Log structured analysis outcome for offline review"""
    logging.getLogger("fraud_gateway.analysis").info(
        "Fraud analysis completed",
        extra={
            "request_id": request_id,
            "transaction_id": transaction_id,
            "user_id": user_id,
            "step": "analysis_complete",
            "risk_score": risk_score,
            "risk_level": risk_level,
            "recommendation": recommendation,
            "indicator_count": indicator_count,
            "duration_ms": duration_ms,
        },
    )
