"""
Traffic scoring for billboard locations.

A lower current/free-flow speed ratio means more congestion, which means more
eyes on the billboard. The tier thresholds are fixed; the impressions table
is a policy parameter.
"""
import logging
import random
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional, Tuple

import httpx

from adwise.core.config import settings
from adwise.core.errors import TrafficLookupError
from adwise.database.models import TrafficTier

logger = logging.getLogger(__name__)

HIGH_TRAFFIC_RATIO = 0.5
MEDIUM_TRAFFIC_RATIO = 0.75

# [low, high) daily impressions per tier
IMPRESSION_RANGES: Dict[str, Tuple[int, int]] = {
    TrafficTier.high.value: (15000, 25000),
    TrafficTier.medium.value: (5000, 15000),
    TrafficTier.low.value: (1000, 5000),
}

FLOW_SEGMENT_PATH = "/traffic/services/4/flowSegmentData/relative0/10/json"


@dataclass
class TrafficScore:
    tier: str
    daily_impressions: int
    speed_ratio: float


@dataclass
class TrafficReport:
    traffic_score: str
    daily_impressions: int
    current_speed: float
    free_flow_speed: float
    speed_ratio: int  # percent
    road_name: str
    confidence: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def classify_ratio(ratio: float) -> str:
    if ratio < HIGH_TRAFFIC_RATIO:
        return TrafficTier.high.value
    if ratio < MEDIUM_TRAFFIC_RATIO:
        return TrafficTier.medium.value
    return TrafficTier.low.value


def score_traffic(
    current_speed: float,
    free_flow_speed: float,
    rng: Optional[random.Random] = None,
    ranges: Optional[Dict[str, Tuple[int, int]]] = None,
) -> TrafficScore:
    """Map a speed reading to a traffic tier and a sampled impressions estimate."""
    rng = rng or random.Random()
    ranges = ranges or IMPRESSION_RANGES
    divisor = free_flow_speed if free_flow_speed and free_flow_speed > 0 else 1
    ratio = (current_speed or 0) / divisor
    tier = classify_ratio(ratio)
    low, high = ranges[tier]
    impressions = rng.randrange(low, high)
    return TrafficScore(tier=tier, daily_impressions=impressions, speed_ratio=ratio)


class TrafficClient:
    """TomTom flow-segment lookup that turns live speeds into a traffic score."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        rng: Optional[random.Random] = None,
    ):
        self.api_key = settings.TOMTOM_API_KEY if api_key is None else api_key
        self.base_url = (base_url or settings.TOMTOM_BASE_URL).rstrip("/")
        self.timeout = timeout or settings.TRAFFIC_TIMEOUT_SECONDS
        self.transport = transport
        self.rng = rng

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    async def lookup(self, latitude: Optional[float], longitude: Optional[float]) -> TrafficReport:
        if not self.api_key:
            raise TrafficLookupError("TOMTOM_API_KEY is not configured")
        if latitude is None or longitude is None:
            raise TrafficLookupError("Latitude and longitude are required", details={"status": 400})

        logger.info("Fetching traffic data for lat=%s lon=%s", latitude, longitude)
        params = {"point": f"{latitude},{longitude}", "key": self.api_key}
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.get(f"{self.base_url}{FLOW_SEGMENT_PATH}", params=params)
        except httpx.HTTPError as exc:
            logger.error("TomTom request failed: %s", exc)
            raise TrafficLookupError(f"TomTom request failed: {exc}") from exc

        if response.status_code >= 400:
            logger.error("TomTom API error: %s %s", response.status_code, response.text)
            raise TrafficLookupError(f"TomTom API error: {response.status_code}")

        flow = response.json().get("flowSegmentData") or {}
        current_speed = flow.get("currentSpeed") or 0
        free_flow_speed = flow.get("freeFlowSpeed") or 1
        score = score_traffic(current_speed, free_flow_speed, rng=self.rng)

        logger.info(
            "Calculated traffic metrics: tier=%s impressions=%s ratio=%.2f",
            score.tier,
            score.daily_impressions,
            score.speed_ratio,
        )
        return TrafficReport(
            traffic_score=score.tier,
            daily_impressions=score.daily_impressions,
            current_speed=current_speed,
            free_flow_speed=free_flow_speed,
            speed_ratio=round(score.speed_ratio * 100),
            road_name=flow.get("roadName") or "Unknown",
            confidence=flow.get("confidence") or 0,
        )
