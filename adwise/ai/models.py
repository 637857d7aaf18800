"""
LLM factory and model configuration
"""
import logging

from langchain_openai import ChatOpenAI

from adwise.ai.config import AI_API_KEY, AI_BASE_URL, LLM_MODEL, LLM_TEMPERATURE, check_ai_enabled

logger = logging.getLogger(__name__)


def get_llm(temperature: float = LLM_TEMPERATURE):
    """
    Factory function to create a ChatOpenAI instance pointed at the
    configured OpenAI-compatible gateway.
    """
    check_ai_enabled()

    model = ChatOpenAI(
        model=LLM_MODEL,
        temperature=temperature,
        api_key=AI_API_KEY,
        base_url=AI_BASE_URL,
        timeout=30,
        max_retries=1,
    )
    logger.info("Initialized LLM: %s (temp=%s)", LLM_MODEL, temperature)
    return model
