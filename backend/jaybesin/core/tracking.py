"""
Tracking resolver: maps a customer's query to one shipment.

Matching precedence (case-insensitive, first strategy with a hit wins):
  1. exact tracking number
  2. consignee name contains the query
  3. exact container id
Within a strategy the most recently created shipment wins.
"""

import enum
from dataclasses import dataclass, field

from jaybesin.core.shipment_record import Shipment
from jaybesin.core.stages import StageStep, progress_percent, stage_timeline


class TrackingStatus(str, enum.Enum):
    IDLE = "idle"
    FOUND = "found"
    NOT_FOUND = "not_found"


class MatchStrategy(str, enum.Enum):
    TRACKING_NUMBER = "tracking_number"
    CONSIGNEE_NAME = "consignee_name"
    CONTAINER_ID = "container_id"


@dataclass
class TrackingResult:
    status: TrackingStatus
    shipment: Shipment | None = None
    matched_by: MatchStrategy | None = None
    progress: int = 0
    timeline: list[StageStep] = field(default_factory=list)

    @classmethod
    def idle(cls) -> "TrackingResult":
        return cls(status=TrackingStatus.IDLE)

    @classmethod
    def not_found(cls) -> "TrackingResult":
        return cls(status=TrackingStatus.NOT_FOUND)

    @classmethod
    def found(cls, shipment: Shipment, matched_by: MatchStrategy) -> "TrackingResult":
        return cls(
            status=TrackingStatus.FOUND,
            shipment=shipment,
            matched_by=matched_by,
            progress=progress_percent(shipment.status),
            timeline=stage_timeline(shipment.status),
        )


def _norm(value: str | None) -> str:
    return (value or "").strip().lower()


def resolve(query: str | None, shipments: list[Shipment]) -> TrackingResult:
    """Pure lookup; an empty query means nothing has been searched yet."""
    needle = _norm(query)
    if not needle:
        return TrackingResult.idle()

    newest_first = sorted(shipments, key=lambda s: s.sort_key, reverse=True)

    strategies = (
        (MatchStrategy.TRACKING_NUMBER, lambda s: _norm(s.tracking_number) == needle),
        (MatchStrategy.CONSIGNEE_NAME, lambda s: needle in _norm(s.consignee_name)),
        (MatchStrategy.CONTAINER_ID, lambda s: _norm(s.container_id) == needle),
    )
    for strategy, matches in strategies:
        for shipment in newest_first:
            if matches(shipment):
                return TrackingResult.found(shipment, strategy)

    return TrackingResult.not_found()


def search(query: str | None, shipments: list[Shipment]) -> list[Shipment]:
    """Admin CRM filter: substring on tracking number, consignee or container."""
    needle = _norm(query)
    if not needle:
        return list(shipments)
    return [
        s for s in shipments
        if needle in _norm(s.tracking_number)
        or needle in _norm(s.consignee_name)
        or needle in _norm(s.container_id)
    ]
