"""Tests for container aggregation and the dashboard counters."""

import pytest

from jaybesin.core.containers import aggregate, dashboard_stats, find_group


@pytest.fixture
def shipments(make_shipment):
    return [
        make_shipment("JB-CN-000001", container_id="CN-001", cbms=(1.0,), rate_per_cbm=100),
        make_shipment("JB-CN-000002", container_id="CN-001", cbms=(2.0,), rate_per_cbm=100),
        make_shipment("JB-CN-000003", container_id="CN-001", cbms=(1.5, 1.5), rate_per_cbm=100),
        make_shipment("JB-CN-000004", container_id="CN-002", cbms=(4.0,), rate_per_cbm=100,
                      shipping_fee=20),
        make_shipment("JB-CN-000005", container_id="", cbms=(9.0,)),
    ]


def _as_set(groups):
    return {(g.id, g.count, round(g.total_vol, 6), round(g.total_cost, 6)) for g in groups}


class TestAggregate:
    def test_groups_by_container(self, shipments):
        groups = {g.id: g for g in aggregate(shipments)}
        assert set(groups) == {"CN-001", "CN-002"}
        assert groups["CN-001"].count == 3
        assert groups["CN-001"].total_vol == pytest.approx(6.0)
        assert groups["CN-001"].total_cost == pytest.approx(600.0)
        assert groups["CN-002"].total_cost == pytest.approx(420.0)

    def test_unassigned_left_out(self, shipments):
        members = [s.tracking_number for g in aggregate(shipments) for s in g.items]
        assert "JB-CN-000005" not in members

    def test_idempotent(self, shipments):
        assert _as_set(aggregate(shipments)) == _as_set(aggregate(shipments))
        assert _as_set(aggregate(list(reversed(shipments)))) == _as_set(aggregate(shipments))

    def test_empty_input(self):
        assert aggregate([]) == []

    def test_find_group(self, shipments):
        assert find_group("CN-002", shipments).count == 1
        assert find_group("CN-404", shipments) is None


class TestDashboardStats:
    def test_counters(self, shipments):
        stats = dashboard_stats(shipments, message_count=3)
        assert stats.active_packages == 5
        assert stats.total_volume == pytest.approx(19.0)
        assert stats.inbox_count == 3
        assert stats.container_count == 2
