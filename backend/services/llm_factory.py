"""Factory for provider clients and their model candidate lists."""
import logging
from typing import List, Optional

from config import LLM_PROVIDER, GEMINI_MODELS, GROQ_MODELS
from services.gemini_client import GeminiClient
from services.llm_client import BaseLLMClient, GroqClient

logger = logging.getLogger(__name__)

GEMINI = "gemini"
GROQ = "groq"
SUPPORTED_PROVIDERS = (GEMINI, GROQ)


def _resolve(provider: Optional[str]) -> str:
    provider = (provider or LLM_PROVIDER).lower()
    if provider not in SUPPORTED_PROVIDERS:
        raise ValueError(f"Unsupported LLM provider: {provider}")
    return provider


def create_llm_client(provider: Optional[str] = None, api_key: Optional[str] = None) -> BaseLLMClient:
    """
    Create the generation client for a provider.

    Args:
        provider: "gemini" or "groq" (defaults to LLM_PROVIDER)
        api_key: Optional explicit key, otherwise read from the environment

    Raises:
        ValueError: If the provider is unknown or its API key is missing
    """
    provider = _resolve(provider)
    logger.info(f"Creating LLM client: {provider}")

    if provider == GROQ:
        return GroqClient(api_key=api_key)

    return GeminiClient(api_key=api_key)


def default_models(provider: Optional[str] = None) -> List[str]:
    """Model candidates for a provider, in priority order."""
    provider = _resolve(provider)
    return list(GROQ_MODELS if provider == GROQ else GEMINI_MODELS)
