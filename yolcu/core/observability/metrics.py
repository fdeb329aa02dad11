"""Structured logging for observability and metrics collection."""

import json
import logging
import os
from datetime import datetime, timezone
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


def log_metric(
    event_type: str,
    value: Optional[float] = None,
    labels: Optional[Dict[str, str]] = None,
    **kwargs: Any,
) -> None:
    """
    Log structured metrics for observability.

    Args:
        event_type: Type of metric event (e.g., 'counter_increment', 'histogram_record')
        value: Numeric value for histograms/gauges
        labels: Key-value pairs for metric labels
        **kwargs: Additional fields to include in the log
    """
    log_data: Dict[str, Any] = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "event_type": event_type,
        "instance_id": os.getenv("INSTANCE_ID", "unknown"),
        "service": "yolcu-chat-backend",
    }

    if value is not None:
        log_data["value"] = value

    if labels:
        log_data["labels"] = labels

    log_data.update(kwargs)

    logger.info(json.dumps(log_data, default=str))


def log_counter_increment(
    name: str,
    value: float = 1,
    labels: Optional[Dict[str, str]] = None,
    **kwargs: Any,
) -> None:
    """Log a counter increment event."""
    log_metric(
        event_type="counter_increment",
        value=value,
        counter_name=name,
        labels=labels,
        **kwargs,
    )


def log_histogram_record(
    name: str, value: float, labels: Optional[Dict[str, str]] = None, **kwargs: Any
) -> None:
    """Log a histogram record event."""
    log_metric(
        event_type="histogram_record",
        histogram_name=name,
        value=value,
        labels=labels,
        **kwargs,
    )


def log_connection_event(event: str, service: str, **kwargs: Any) -> None:
    """Log connection-related events."""
    log_metric(
        event_type="connection_event", connection_event=event, service=service, **kwargs
    )
