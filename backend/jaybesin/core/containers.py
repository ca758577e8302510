"""
Container aggregation: per-container rollups for manifests,
plus the admin overview counters. Recomputed on every call, never stored.
"""

import math
from dataclasses import dataclass, field

from jaybesin.core.shipment_record import Shipment


@dataclass
class ContainerGroup:
    id: str
    items: list[Shipment] = field(default_factory=list)
    total_vol: float = 0.0
    total_cost: float = 0.0
    count: int = 0


@dataclass(frozen=True)
class DashboardStats:
    active_packages: int
    total_volume: float
    total_revenue: float
    inbox_count: int
    container_count: int


def aggregate(shipments: list[Shipment]) -> list[ContainerGroup]:
    """
    Group shipments by exact container id.
    Shipments without a container id are left out. Output order is not
    meaningful.
    """
    members: dict[str, list[Shipment]] = {}
    for shipment in shipments:
        if not shipment.container_id:
            continue
        members.setdefault(shipment.container_id, []).append(shipment)

    return [
        ContainerGroup(
            id=container_id,
            items=group,
            total_vol=math.fsum(s.total_volume for s in group),
            total_cost=math.fsum(s.total_cost for s in group),
            count=len(group),
        )
        for container_id, group in members.items()
    ]


def find_group(container_id: str, shipments: list[Shipment]) -> ContainerGroup | None:
    for group in aggregate(shipments):
        if group.id == container_id:
            return group
    return None


def dashboard_stats(shipments: list[Shipment], message_count: int = 0) -> DashboardStats:
    return DashboardStats(
        active_packages=len(shipments),
        total_volume=math.fsum(s.total_volume for s in shipments),
        total_revenue=math.fsum(s.total_cost for s in shipments),
        inbox_count=message_count,
        container_count=len({s.container_id for s in shipments if s.container_id}),
    )
