"""LLM-driven summarization services."""

from inbox_briefing.core.interfaces import SummarizationFailed

from .capabilities import GET_UNREAD_EMAILS, SUBMIT_SUMMARY, EmailCache
from .llm import GeminiClient, LLMError
from .observer import LoggingObserver
from .policy import GenerationPolicy, cooperative_policy, forced_policy
from .session import run_session
from .summarizer import MAX_ATTEMPTS, SummarizationService

__all__ = [
    "EmailCache",
    "GET_UNREAD_EMAILS",
    "GeminiClient",
    "GenerationPolicy",
    "LLMError",
    "LoggingObserver",
    "MAX_ATTEMPTS",
    "SUBMIT_SUMMARY",
    "SummarizationFailed",
    "SummarizationService",
    "cooperative_policy",
    "forced_policy",
    "run_session",
]
