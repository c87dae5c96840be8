"""LLM client abstractions and the Groq API client."""
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Dict, Any
from groq import AsyncGroq
from groq import RateLimitError, AuthenticationError, APIError, APITimeoutError, APIStatusError
import logging

from config import GROQ_API_KEY, MAX_OUTPUT_TOKENS

logger = logging.getLogger(__name__)

# Structured error codes shared by every provider client
RATE_LIMIT_ERROR = "RATE_LIMIT_ERROR"
SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
AUTHENTICATION_ERROR = "AUTHENTICATION_ERROR"
TIMEOUT_ERROR = "TIMEOUT_ERROR"
API_ERROR = "API_ERROR"
UNKNOWN_ERROR = "UNKNOWN_ERROR"


@dataclass
class LLMResponse:
    """Response from LLM generation."""
    text: str
    tokens_input: int
    tokens_output: int
    latency_ms: int
    model_used: str


@dataclass
class LLMError:
    """Structured error response from LLM operations."""
    code: str
    message: str
    details: Dict[str, Any]


class LLMClientError(Exception):
    """Custom exception for LLM client errors with structured error information."""

    def __init__(self, error: LLMError):
        self.error = error
        super().__init__(error.message)


class BaseLLMClient(ABC):
    """Provider-agnostic text generation client."""

    provider_name = "base"

    @abstractmethod
    async def generate(
        self,
        model: str,
        prompt: str,
        system_instruction: Optional[str] = None,
        max_tokens: Optional[int] = MAX_OUTPUT_TOKENS
    ) -> LLMResponse:
        """
        Generate a reply for a flattened prompt.

        Raises:
            LLMClientError: Structured error with code, message, and details
        """

    def _error(
        self,
        code: str,
        message: str,
        model: str,
        start_time: float,
        original: Exception,
        **details: Any
    ) -> LLMClientError:
        """Build, log and return a structured error for a failed call."""
        latency_ms = int((time.time() - start_time) * 1000)
        error = LLMError(
            code=code,
            message=message,
            details={
                "model": model,
                "latency_ms": latency_ms,
                "original_error": str(original),
                **details
            }
        )
        logger.error(
            f"{self.provider_name} {code}: model={model}, latency={latency_ms}ms, error={original}",
            extra={"error_code": error.code, "error_details": error.details}
        )
        return LLMClientError(error)


class GroqClient(BaseLLMClient):
    """Client for interfacing with Groq API for text generation."""

    provider_name = "groq"

    def __init__(self, api_key: Optional[str] = None):
        """
        Initialize LLM client with Groq API key.

        Args:
            api_key: Groq API key (defaults to GROQ_API_KEY from environment)
        """
        self.api_key = api_key or GROQ_API_KEY
        if not self.api_key:
            raise ValueError("GROQ_API_KEY must be provided or set in environment")

        self.client = AsyncGroq(api_key=self.api_key)
        logger.info("GroqClient initialized successfully")

    async def generate(
        self,
        model: str,
        prompt: str,
        system_instruction: Optional[str] = None,
        max_tokens: Optional[int] = MAX_OUTPUT_TOKENS
    ) -> LLMResponse:
        """
        Generate response using Groq API.

        Args:
            model: Model name (e.g. llama-3.3-70b-versatile)
            prompt: Flattened conversation prompt
            system_instruction: Optional system message sent ahead of the prompt
            max_tokens: Maximum tokens to generate

        Returns:
            LLMResponse with text, token counts, and latency

        Raises:
            LLMClientError: Structured error with code, message, and details
        """
        start_time = time.time()

        messages = []
        if system_instruction:
            messages.append({"role": "system", "content": system_instruction})
        messages.append({"role": "user", "content": prompt})

        try:
            logger.debug(f"Generating response with model: {model}")

            response = await self.client.chat.completions.create(
                model=model,
                messages=messages,
                max_tokens=max_tokens,
                temperature=0.7
            )
        except RateLimitError as e:
            raise self._error(
                RATE_LIMIT_ERROR,
                "Rate limit exceeded. Please try again in a few moments.",
                model, start_time, e,
                retry_after=60
            )
        except AuthenticationError as e:
            raise self._error(
                AUTHENTICATION_ERROR,
                "Authentication failed. Please check your API key.",
                model, start_time, e
            )
        except APITimeoutError as e:
            raise self._error(
                TIMEOUT_ERROR, "Request timed out. Please try again.", model, start_time, e
            )
        except APIStatusError as e:
            code = SERVICE_UNAVAILABLE if e.status_code == 503 else API_ERROR
            raise self._error(
                code, f"Groq API error: {str(e)}", model, start_time, e,
                status_code=e.status_code
            )
        except APIError as e:
            raise self._error(API_ERROR, f"Groq API error: {str(e)}", model, start_time, e)
        except Exception as e:
            raise self._error(
                UNKNOWN_ERROR,
                f"Unexpected error during generation: {str(e)}",
                model, start_time, e,
                error_type=type(e).__name__
            )

        latency_ms = int((time.time() - start_time) * 1000)
        text = response.choices[0].message.content or ""
        tokens_input = response.usage.prompt_tokens
        tokens_output = response.usage.completion_tokens

        logger.info(
            f"Generated response: model={model}, "
            f"input_tokens={tokens_input}, output_tokens={tokens_output}, "
            f"latency={latency_ms}ms"
        )

        return LLMResponse(
            text=text,
            tokens_input=tokens_input,
            tokens_output=tokens_output,
            latency_ms=latency_ms,
            model_used=model
        )
