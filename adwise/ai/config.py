"""
AI configuration and environment variables
"""
from adwise.core.config import settings

AI_API_KEY = settings.AI_API_KEY
AI_BASE_URL = settings.AI_BASE_URL
LLM_MODEL = settings.AI_MODEL
LLM_TEMPERATURE = 0.7
MAX_REQUESTS_PER_MINUTE = settings.AI_MAX_REQUESTS_PER_MINUTE

# How many billboards the model is asked to pick
TOP_N = 3
FALLBACK_MATCH_SCORE = 70

# Feature flag
AI_ENABLED = AI_API_KEY is not None and len(AI_API_KEY) > 0


def check_ai_enabled():
    """Check if AI features are enabled"""
    if not AI_ENABLED:
        raise RuntimeError("AI recommendations are disabled. Set AI_API_KEY in the environment to enable them.")
    return True
