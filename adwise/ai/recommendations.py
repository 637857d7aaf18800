"""
Billboard recommendations: one prompt, one response, JSON parsing with a
deterministic fallback when the model's output cannot be parsed.
"""
import json
import logging
import re
from typing import Any, Dict, List, Optional

import openai
from langchain_core.messages import HumanMessage, SystemMessage

from adwise.ai.config import FALLBACK_MATCH_SCORE, TOP_N
from adwise.ai.models import get_llm
from adwise.ai.prompts import get_system_prompt, get_user_prompt
from adwise.core.errors import RecommendationError

logger = logging.getLogger(__name__)

JSON_FENCE = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```")
JSON_OBJECT = re.compile(r"\{[\s\S]*\}")


def billboard_to_dict(billboard: Any) -> Dict[str, Any]:
    return {
        "id": billboard.id,
        "owner_id": billboard.owner_id,
        "title": billboard.title,
        "description": billboard.description,
        "location": billboard.location,
        "latitude": billboard.latitude,
        "longitude": billboard.longitude,
        "width": billboard.width,
        "height": billboard.height,
        "price_per_month": billboard.price_per_month,
        "daily_impressions": billboard.daily_impressions,
        "traffic_score": billboard.traffic_score,
        "image_url": billboard.image_url,
        "is_available": billboard.is_available,
    }


def parse_recommendations(content: str) -> Optional[Dict[str, Any]]:
    """Pull the JSON object out of a model reply, fenced or bare."""
    if not content:
        return None
    match = JSON_FENCE.search(content) or JSON_OBJECT.search(content)
    raw = match.group(1) if match and match.groups() else (match.group(0) if match else content)
    try:
        parsed = json.loads(raw)
    except (json.JSONDecodeError, TypeError):
        return None
    if not isinstance(parsed, dict) or not isinstance(parsed.get("recommendations"), list):
        return None
    return parsed


def fallback_recommendations(billboards: List[Any], budget: Optional[float], top_n: int = TOP_N) -> Dict[str, Any]:
    """Top billboards by daily impressions within budget."""
    within_budget = [b for b in billboards if not budget or b.price_per_month <= budget]
    ranked = sorted(within_budget, key=lambda b: b.daily_impressions or 0, reverse=True)[:top_n]
    return {
        "recommendations": [
            {
                "billboard_id": b.id,
                "title": b.title,
                "match_score": FALLBACK_MATCH_SCORE,
                "reason": (
                    f"Good value billboard at ₹{b.price_per_month}/month with "
                    f"{b.daily_impressions or 'unknown'} daily impressions"
                ),
                "highlights": [f"{b.traffic_score or 'Unknown'} traffic area", f"{b.width}m x {b.height}m size"],
                "trade_offs": [],
            }
            for b in ranked
        ],
        "summary": "Recommendations based on best value within your budget",
    }


def enrich_recommendations(recommendations: List[Dict[str, Any]], billboards: List[Any]) -> List[Dict[str, Any]]:
    by_id = {str(b.id): b for b in billboards}
    enriched = []
    for rec in recommendations:
        if not isinstance(rec, dict):
            continue
        billboard = by_id.get(str(rec.get("billboard_id")))
        enriched.append({**rec, "billboard": billboard_to_dict(billboard) if billboard else None})
    return enriched


class RecommendationService:
    def __init__(self, llm: Optional[Any] = None):
        self._llm = llm

    def _get_llm(self):
        if self._llm is None:
            try:
                self._llm = get_llm()
            except RuntimeError as e:
                raise RecommendationError(str(e), status_code=503) from e
        return self._llm

    async def _ask_model(self, billboards, budget, preferred_traffic, location_preference) -> str:
        messages = [
            SystemMessage(content=get_system_prompt()),
            HumanMessage(content=get_user_prompt(billboards, budget, preferred_traffic, location_preference, TOP_N)),
        ]
        try:
            response = await self._get_llm().ainvoke(messages)
        except openai.RateLimitError as e:
            logger.warning("AI gateway rate limited: %s", e)
            raise RecommendationError("Rate limit exceeded. Please try again later.", status_code=429) from e
        except openai.APIStatusError as e:
            logger.error("AI gateway error: %s %s", e.status_code, e)
            if e.status_code == 402:
                raise RecommendationError("AI credits exhausted. Please add credits to continue.", status_code=402) from e
            raise RecommendationError("AI service error") from e
        except openai.APIError as e:
            logger.error("AI gateway unreachable: %s", e)
            raise RecommendationError("AI service error") from e

        content = response.content
        return content if isinstance(content, str) else json.dumps(content)

    async def recommend(
        self,
        billboards: List[Any],
        budget: Optional[float] = None,
        preferred_traffic: Optional[str] = None,
        location_preference: Optional[str] = None,
    ) -> Dict[str, Any]:
        if not billboards:
            return {
                "success": True,
                "recommendations": [],
                "summary": "",
                "message": "No billboards available at the moment",
            }

        logger.info("Requesting AI recommendations over %d billboards", len(billboards))
        content = await self._ask_model(billboards, budget, preferred_traffic, location_preference)
        parsed = parse_recommendations(content)
        if parsed is None:
            logger.warning("Failed to parse AI response; using impressions-based fallback")
            parsed = fallback_recommendations(billboards, budget)

        return {
            "success": True,
            "recommendations": enrich_recommendations(parsed["recommendations"], billboards),
            "summary": parsed.get("summary") or "",
        }
