"""
Conversation orchestration with bounded retry and model fallback.

The orchestrator walks an explicit (model index, attempt index) state:

- success                      -> Success(text)
- retryable, attempts remain   -> sleep 2^attempt * base delay, same model
- retryable, attempts used up  -> next model, no wait
- non-retryable                -> Failure(original error), no other model
- every model exhausted        -> Failure(MODELS_UNAVAILABLE)

Failures are returned as an OrchestrationResult, never raised.
"""
import asyncio
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, List, Optional, Sequence

from config import MAX_ATTEMPTS_PER_MODEL, RETRY_BASE_DELAY
from models.conversation import Turn
from services.llm_client import (
    BaseLLMClient,
    LLMClientError,
    LLMError,
    RATE_LIMIT_ERROR,
    SERVICE_UNAVAILABLE,
    UNKNOWN_ERROR,
)
from services.prompt_builder import SYSTEM_INSTRUCTION, build_prompt

logger = logging.getLogger(__name__)

MODELS_UNAVAILABLE = "MODELS_UNAVAILABLE"
MODELS_UNAVAILABLE_MESSAGE = "All models are currently unavailable. Please try again later."
EMPTY_REPLY_FALLBACK = "I'm sorry, I couldn't generate a response. Please try again."

# Provider wording that marks a transient failure
RETRYABLE_MARKERS = ("503", "429", "UNAVAILABLE", "RESOURCE_EXHAUSTED", "high demand")
RETRYABLE_CODES = {RATE_LIMIT_ERROR, SERVICE_UNAVAILABLE}

SleepFn = Callable[[float], Awaitable[None]]


def is_retryable(error: Exception) -> bool:
    """
    Classify a provider failure as transient.

    Structured codes win when the client supplied one; otherwise the error
    text is matched against RETRYABLE_MARKERS.
    """
    texts = [str(error)]
    if isinstance(error, LLMClientError):
        if error.error.code in RETRYABLE_CODES:
            return True
        texts.append(str(error.error.details.get("original_error", "")))
    return any(marker in text for text in texts for marker in RETRYABLE_MARKERS)


@dataclass
class RetryPolicy:
    """Per-model retry budget and backoff schedule."""
    max_attempts: int = MAX_ATTEMPTS_PER_MODEL
    base_delay: float = RETRY_BASE_DELAY
    classify: Callable[[Exception], bool] = is_retryable

    def backoff_delay(self, attempt: int) -> float:
        """Seconds to wait after a failed attempt (0-indexed)."""
        return (2 ** attempt) * self.base_delay


@dataclass
class OrchestrationResult:
    """Tagged outcome of one orchestration: either text or error is set."""
    text: Optional[str] = None
    error: Optional[LLMError] = None
    model_used: Optional[str] = None
    calls: int = 0
    cause: Optional[Exception] = None
    failed_models: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.error is None


def _fatal_error(error: Exception, model: str) -> LLMError:
    if isinstance(error, LLMClientError):
        return error.error
    return LLMError(
        code=UNKNOWN_ERROR,
        message=str(error) or type(error).__name__,
        details={"model": model, "error_type": type(error).__name__}
    )


class ChatOrchestrator:
    """Turns a conversation into a single provider reply."""

    def __init__(
        self,
        llm_client: BaseLLMClient,
        models: Sequence[str],
        retry_policy: Optional[RetryPolicy] = None,
        sleep: SleepFn = asyncio.sleep,
        system_instruction: str = SYSTEM_INSTRUCTION,
        token_counter: Optional[Callable[[str], int]] = None
    ):
        """
        Args:
            llm_client: Provider client, owned by the caller
            models: Model candidates in priority order
            retry_policy: Retry budget and classifier (defaults to RetryPolicy())
            sleep: Awaitable sleep used between attempts
            system_instruction: Fixed instruction sent with every prompt
            token_counter: Optional prompt token estimator used for logging
        """
        if not models:
            raise ValueError("At least one model candidate is required")

        self.llm_client = llm_client
        self.models = list(models)
        self.retry_policy = retry_policy or RetryPolicy()
        self.sleep = sleep
        self.system_instruction = system_instruction
        self.token_counter = token_counter

    async def reply(self, turns: Sequence[Turn]) -> OrchestrationResult:
        """
        Produce the assistant's next reply for a conversation.

        Args:
            turns: Non-empty conversation, oldest first

        Returns:
            OrchestrationResult holding either the reply text or an LLMError
        """
        if not turns:
            raise ValueError("Conversation must contain at least one turn")

        prompt = build_prompt(turns)
        if self.token_counter:
            logger.info(
                f"Built prompt from {len(turns)} turns "
                f"(~{self.token_counter(prompt)} tokens)"
            )
        return await self.generate(prompt)

    async def generate(self, prompt: str) -> OrchestrationResult:
        """Run the retry/fallback loop for an already flattened prompt."""
        policy = self.retry_policy
        model_index = 0
        attempt = 0
        calls = 0
        failed_models: List[str] = []

        while model_index < len(self.models):
            model = self.models[model_index]
            calls += 1
            try:
                response = await self.llm_client.generate(
                    model=model,
                    prompt=prompt,
                    system_instruction=self.system_instruction
                )
            except Exception as e:
                if not policy.classify(e):
                    logger.error(f"Model {model} failed with non-retryable error: {e}")
                    return OrchestrationResult(
                        error=_fatal_error(e, model),
                        calls=calls,
                        cause=e,
                        failed_models=failed_models
                    )

                if attempt < policy.max_attempts - 1:
                    delay = policy.backoff_delay(attempt)
                    logger.warning(
                        f"Model {model} attempt {attempt + 1} failed ({e}), "
                        f"retrying in {int(delay * 1000)}ms..."
                    )
                    await self.sleep(delay)
                    attempt += 1
                    continue

                logger.warning(f"Model {model} exhausted retries, trying next model...")
                failed_models.append(model)
                model_index += 1
                attempt = 0
                continue

            text = response.text if response.text and response.text.strip() else EMPTY_REPLY_FALLBACK
            return OrchestrationResult(
                text=text,
                model_used=model,
                calls=calls,
                failed_models=failed_models
            )

        logger.error(f"All models unavailable after {calls} calls: {failed_models}")
        return OrchestrationResult(
            error=LLMError(
                code=MODELS_UNAVAILABLE,
                message=MODELS_UNAVAILABLE_MESSAGE,
                details={"models": failed_models, "calls": calls}
            ),
            calls=calls,
            failed_models=failed_models
        )
