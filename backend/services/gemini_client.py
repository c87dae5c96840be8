"""Google Gemini API client."""
import logging
import time
from typing import Optional

from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from config import GEMINI_API_KEY, GEMINI_MAX_OUTPUT_TOKENS
from services.llm_client import (
    BaseLLMClient,
    LLMResponse,
    RATE_LIMIT_ERROR,
    SERVICE_UNAVAILABLE,
    AUTHENTICATION_ERROR,
    API_ERROR,
    UNKNOWN_ERROR,
)

logger = logging.getLogger(__name__)


class GeminiClient(BaseLLMClient):
    """Async client for the Gemini generate-content API.

    One instance is constructed by the process entry point and shared by
    every request; it holds nothing but the SDK client and its settings.
    """

    provider_name = "gemini"

    def __init__(self, api_key: Optional[str] = None, temperature: Optional[float] = None):
        """
        Initialize Gemini client.

        Args:
            api_key: Gemini API key (defaults to GEMINI_API_KEY from environment)
            temperature: Optional sampling temperature; provider default when None
        """
        self.api_key = api_key or GEMINI_API_KEY
        if not self.api_key:
            raise ValueError("GEMINI_API_KEY must be provided or set in environment")

        self.temperature = temperature
        self.client = genai.Client(api_key=self.api_key)
        logger.info("GeminiClient initialized successfully")

    async def generate(
        self,
        model: str,
        prompt: str,
        system_instruction: Optional[str] = None,
        max_tokens: Optional[int] = GEMINI_MAX_OUTPUT_TOKENS
    ) -> LLMResponse:
        """
        Generate content for a flattened prompt.

        Raises:
            LLMClientError: Structured error with code, message, and details
        """
        start_time = time.time()

        config = types.GenerateContentConfig(
            system_instruction=system_instruction,
            max_output_tokens=max_tokens,
            temperature=self.temperature,
        )

        try:
            logger.debug(f"Generating content with model: {model}")
            response = await self.client.aio.models.generate_content(
                model=model,
                contents=prompt,
                config=config,
            )
        except genai_errors.APIError as e:
            if e.code == 429:
                code = RATE_LIMIT_ERROR
            elif e.code == 503:
                code = SERVICE_UNAVAILABLE
            elif e.code in (401, 403):
                code = AUTHENTICATION_ERROR
            else:
                code = API_ERROR
            raise self._error(
                code, f"Gemini API error: {str(e)}", model, start_time, e,
                status_code=e.code, status=e.status
            )
        except Exception as e:
            raise self._error(
                UNKNOWN_ERROR,
                f"Unexpected error during generation: {str(e)}",
                model, start_time, e,
                error_type=type(e).__name__
            )

        latency_ms = int((time.time() - start_time) * 1000)
        usage = getattr(response, "usage_metadata", None)
        tokens_input = (getattr(usage, "prompt_token_count", None) or 0) if usage else 0
        tokens_output = (getattr(usage, "candidates_token_count", None) or 0) if usage else 0

        logger.info(
            f"Generated response: model={model}, "
            f"input_tokens={tokens_input}, output_tokens={tokens_output}, "
            f"latency={latency_ms}ms"
        )

        return LLMResponse(
            text=response.text or "",
            tokens_input=tokens_input,
            tokens_output=tokens_output,
            latency_ms=latency_ms,
            model_used=model
        )
