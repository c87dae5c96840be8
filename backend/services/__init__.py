"""Services for FitCoach AI chat backend."""
from .llm_client import BaseLLMClient, GroqClient, LLMResponse, LLMError, LLMClientError
from .gemini_client import GeminiClient
from .llm_factory import create_llm_client, default_models
from .prompt_builder import SYSTEM_INSTRUCTION, build_prompt
from .chat_orchestrator import ChatOrchestrator, OrchestrationResult, RetryPolicy, is_retryable
from .session_summary import SessionSummary, summarize_session, extract_topics
from .report_builder import ReportBuilder
from .chat_session import ChatSession

__all__ = ['BaseLLMClient', 'GroqClient', 'GeminiClient', 'LLMResponse', 'LLMError', 'LLMClientError', 'create_llm_client', 'default_models', 'SYSTEM_INSTRUCTION', 'build_prompt', 'ChatOrchestrator', 'OrchestrationResult', 'RetryPolicy', 'is_retryable', 'SessionSummary', 'summarize_session', 'extract_topics', 'ReportBuilder', 'ChatSession']
