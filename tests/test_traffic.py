"""
Tests for traffic scoring and the TomTom flow-segment client.
"""
import asyncio
import random

import httpx
import pytest

from adwise.core.errors import TrafficLookupError
from adwise.services.traffic_service import (
    FLOW_SEGMENT_PATH,
    IMPRESSION_RANGES,
    TrafficClient,
    classify_ratio,
    score_traffic,
)


class TestClassifyRatio:
    @pytest.mark.parametrize(
        "ratio,tier",
        [
            (0.0, "high"),
            (0.49, "high"),
            (0.5, "medium"),
            (0.74, "medium"),
            (0.75, "low"),
            (1.0, "low"),
            (1.4, "low"),
        ],
    )
    def test_thresholds(self, ratio, tier):
        assert classify_ratio(ratio) == tier


class TestScoreTraffic:
    def test_impressions_fall_in_tier_range(self):
        rng = random.Random(42)
        for current, free_flow, tier in [(10, 50, "high"), (30, 50, "medium"), (45, 50, "low")]:
            for _ in range(50):
                score = score_traffic(current, free_flow, rng=rng)
                low, high = IMPRESSION_RANGES[tier]
                assert score.tier == tier
                assert low <= score.daily_impressions < high

    @pytest.mark.parametrize("free_flow", [0, -5, None])
    def test_non_positive_free_flow_uses_divisor_one(self, free_flow):
        score = score_traffic(0.3, free_flow, rng=random.Random(1))
        assert score.speed_ratio == pytest.approx(0.3)
        assert score.tier == "high"

    def test_custom_ranges(self):
        ranges = {"high": (1, 2), "medium": (2, 3), "low": (3, 4)}
        assert score_traffic(60, 60, ranges=ranges).daily_impressions == 3


def _transport(payload, status_code=200, seen=None):
    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        return httpx.Response(status_code, json=payload)

    return httpx.MockTransport(handler)


class TestTrafficClient:
    def test_lookup_parses_flow_segment(self):
        seen = []
        payload = {
            "flowSegmentData": {
                "currentSpeed": 20,
                "freeFlowSpeed": 50,
                "roadName": "Outer Ring Road",
                "confidence": 0.93,
            }
        }
        client = TrafficClient(
            api_key="tt-key",
            base_url="https://api.tomtom.test",
            transport=_transport(payload, seen=seen),
            rng=random.Random(7),
        )

        report = asyncio.run(client.lookup(12.97, 77.59))

        assert report.traffic_score == "high"
        assert 15000 <= report.daily_impressions < 25000
        assert report.speed_ratio == 40
        assert report.road_name == "Outer Ring Road"
        assert report.confidence == 0.93
        request = seen[0]
        assert request.url.path == FLOW_SEGMENT_PATH
        assert request.url.params["point"] == "12.97,77.59"
        assert request.url.params["key"] == "tt-key"

    def test_missing_speeds_default(self):
        client = TrafficClient(api_key="tt-key", transport=_transport({"flowSegmentData": {}}))
        report = asyncio.run(client.lookup(1.0, 2.0))
        assert report.current_speed == 0
        assert report.free_flow_speed == 1
        assert report.traffic_score == "high"
        assert report.road_name == "Unknown"

    def test_error_status_raises(self):
        client = TrafficClient(api_key="tt-key", transport=_transport({"error": "Forbidden"}, status_code=403))
        with pytest.raises(TrafficLookupError):
            asyncio.run(client.lookup(1.0, 2.0))

    def test_missing_key_raises(self):
        client = TrafficClient(api_key="")
        assert not client.configured
        with pytest.raises(TrafficLookupError):
            asyncio.run(client.lookup(1.0, 2.0))

    def test_missing_coordinates_raise_bad_request(self):
        client = TrafficClient(api_key="tt-key", transport=_transport({}))
        with pytest.raises(TrafficLookupError) as exc_info:
            asyncio.run(client.lookup(None, 2.0))
        assert exc_info.value.details["status"] == 400

    def test_transport_failure_raises(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = TrafficClient(api_key="tt-key", transport=httpx.MockTransport(handler))
        with pytest.raises(TrafficLookupError):
            asyncio.run(client.lookup(1.0, 2.0))
