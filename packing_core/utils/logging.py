"""Structured logging for rule evaluation and replica merge."""

import logging
from typing import Any

from packing_core.models.diagnostics import Diagnostic

logger = logging.getLogger(__name__)


class StructuredPackingLogger:
    """Structured logger for engine runs and diagnostics."""

    def log_compute(
        self,
        trip_id: str,
        rules: int,
        entries: int,
        diagnostics: int,
        latency_ms: float,
    ) -> None:
        """Log one packing list computation."""
        log_data: dict[str, Any] = {
            "trip_id": trip_id,
            "rules": rules,
            "entries": entries,
            "diagnostics": diagnostics,
            "latency_ms": round(latency_ms, 2),
        }
        logger.info(f"Packing list computed: trip={trip_id}", extra={"structured": log_data})

    def log_diagnostic(self, diagnostic: Diagnostic, entity_type: str | None = None) -> None:
        """Log a non-fatal diagnostic."""
        log_data: dict[str, Any] = {
            "kind": diagnostic.kind.value,
            "code": diagnostic.code,
            "entity_ids": diagnostic.entity_ids,
            **diagnostic.details,
        }
        if entity_type:
            log_data["entity_type"] = entity_type

        logger.warning(
            f"{diagnostic.kind.value}: {diagnostic.message}", extra={"structured": log_data}
        )
