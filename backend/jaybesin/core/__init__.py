"""
Core business rules
- Stage registry, shipment record model, tracking resolver,
  container aggregation and message templates.
- No I/O; everything here is pure over its inputs.
"""

from jaybesin.core.stages import LOGISTICS_STAGES, progress_percent, stage_index
from jaybesin.core.shipment_record import (
    CargoItem, Shipment, ShipmentValidationError, compute_totals,
)
from jaybesin.core.tracking import TrackingResult, TrackingStatus, resolve
from jaybesin.core.containers import ContainerGroup, aggregate

__all__ = [
    "LOGISTICS_STAGES",
    "progress_percent",
    "stage_index",
    "CargoItem",
    "Shipment",
    "ShipmentValidationError",
    "compute_totals",
    "TrackingResult",
    "TrackingStatus",
    "resolve",
    "ContainerGroup",
    "aggregate",
]
