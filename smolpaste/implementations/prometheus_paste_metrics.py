"""Prometheus-based paste metrics implementation."""

from __future__ import annotations

from prometheus_client import Counter

from smolpaste.enums import OperationStatus, PasteOperation
from smolpaste.logging_utils import create_service_logger
from smolpaste.protocols import PasteMetricsProtocol

logger = create_service_logger("metrics.prometheus")


class PrometheusPasteMetrics(PasteMetricsProtocol):
    """Prometheus-based implementation of paste metrics collection."""

    def __init__(self, paste_operations_counter: Counter) -> None:
        """
        Initialize Prometheus paste metrics.

        Args:
            paste_operations_counter: Counter labelled by operation and status
        """
        self.paste_operations = paste_operations_counter

    def record_operation(self, operation: PasteOperation, status: OperationStatus) -> None:
        try:
            self.paste_operations.labels(operation=operation.value, status=status.value).inc()
        except Exception as e:
            logger.error(f"Error recording paste operation metric: {e}")
