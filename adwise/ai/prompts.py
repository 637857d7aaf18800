"""
Prompts for billboard recommendations
"""
import json
from typing import Any, Dict, List, Optional

SYSTEM_PROMPT = """You are an expert billboard advertising consultant for AdWise.
Your job is to recommend the best billboards based on the advertiser's requirements.

Consider these factors when making recommendations:
1. Budget fit - recommend billboards within or close to budget
2. Traffic score - match with advertiser's preference (high traffic for brand awareness, medium for balanced campaigns, low for cost-effective local reach)
3. Daily impressions - higher is generally better for reach
4. Billboard size - larger billboards have more impact but cost more
5. Location relevance - if specified

Always explain WHY each billboard is a good match."""

RESPONSE_FORMAT = """{
  "recommendations": [
    {
      "billboard_id": 1,
      "title": "billboard title",
      "match_score": 85,
      "reason": "Brief explanation of why this is recommended",
      "highlights": ["Key benefit 1", "Key benefit 2"],
      "trade_offs": ["Any potential downsides"]
    }
  ],
  "summary": "Brief overall summary of recommendations"
}"""


def get_system_prompt() -> str:
    return SYSTEM_PROMPT


def summarize_billboard(billboard: Any) -> Dict[str, Any]:
    return {
        "id": billboard.id,
        "title": billboard.title,
        "location": billboard.location,
        "size": f"{billboard.width}m x {billboard.height}m",
        "price": billboard.price_per_month,
        "impressions": billboard.daily_impressions or "Unknown",
        "traffic": billboard.traffic_score or "Unknown",
    }


def get_user_prompt(
    billboards: List[Any],
    budget: Optional[float],
    preferred_traffic: Optional[str],
    location_preference: Optional[str],
    top_n: int = 3,
) -> str:
    summary = json.dumps([summarize_billboard(b) for b in billboards], indent=2)
    return f"""Here are the available billboards:
{summary}

Advertiser requirements:
- Budget: ₹{budget or 'No limit'} per month
- Preferred traffic level: {preferred_traffic or 'Any'}
- Location preference: {location_preference or 'No preference'}

Please recommend the top {top_n} billboards that best match these requirements. For each recommendation:
1. Explain why it's a good match
2. Highlight key benefits
3. Note any trade-offs

Format your response as JSON with this structure:
{RESPONSE_FORMAT}"""
