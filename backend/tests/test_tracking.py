"""Tests for the tracking resolver."""

import pytest

from jaybesin.core.tracking import MatchStrategy, TrackingStatus, resolve, search


@pytest.fixture
def shipments(make_shipment):
    return [
        make_shipment("JB-CN-100203", "Kwame Mensah", "MSCU1234567", age_days=10),
        make_shipment("JB-CN-200300", "Ama Owusu", "MSCU1234567", age_days=5),
        make_shipment("JB-CN-300400", "Kwame Mensah Jnr", "", age_days=1),
    ]


class TestResolve:
    def test_tracking_number_case_insensitive(self, shipments):
        result = resolve("jb-cn-100203", shipments)
        assert result.status == TrackingStatus.FOUND
        assert result.shipment.tracking_number == "JB-CN-100203"
        assert result.matched_by == MatchStrategy.TRACKING_NUMBER

    def test_not_found(self, shipments):
        result = resolve("nonexistent", shipments)
        assert result.status == TrackingStatus.NOT_FOUND
        assert result.shipment is None

    @pytest.mark.parametrize("query", ["", "   ", None])
    def test_empty_query_is_idle(self, shipments, query):
        assert resolve(query, shipments).status == TrackingStatus.IDLE

    def test_name_match_prefers_newest(self, shipments):
        result = resolve("kwame", shipments)
        assert result.matched_by == MatchStrategy.CONSIGNEE_NAME
        assert result.shipment.tracking_number == "JB-CN-300400"

    def test_container_match_prefers_newest(self, shipments):
        result = resolve("mscu1234567", shipments)
        assert result.matched_by == MatchStrategy.CONTAINER_ID
        assert result.shipment.tracking_number == "JB-CN-200300"

    def test_tracking_number_beats_name(self, make_shipment):
        older = make_shipment("JB-CN-111111", "Kofi", age_days=30)
        newer = make_shipment("JB-CN-222222", "jb-cn-111111 trading", age_days=0)
        result = resolve("JB-CN-111111", [newer, older])
        assert result.shipment is older
        assert result.matched_by == MatchStrategy.TRACKING_NUMBER

    def test_found_carries_progress_and_timeline(self, make_shipment):
        shipment = make_shipment("JB-CN-555555", status="Arrived at TEMA Port")
        result = resolve("JB-CN-555555", [shipment])
        assert result.progress == 70
        assert result.timeline[6].current

    def test_tracking_number_is_exact(self, shipments):
        assert resolve("JB-CN-1002", shipments).status == TrackingStatus.NOT_FOUND

    def test_input_order_does_not_matter(self, shipments):
        first = resolve("kwame", shipments).shipment
        second = resolve("kwame", list(reversed(shipments))).shipment
        assert first is second


class TestSearch:
    def test_substring_on_any_field(self, shipments):
        assert len(search("cn-", shipments)) == 3
        assert [s.tracking_number for s in search("owusu", shipments)] == ["JB-CN-200300"]
        assert len(search("MSCU", shipments)) == 2

    def test_empty_query_returns_all(self, shipments):
        assert len(search("", shipments)) == 3
