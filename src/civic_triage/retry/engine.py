"""
Retry engine for inference calls.

This module implements the RetryEngine, which drives a BaseLLMClient
through a bounded number of attempts with a fixed backoff schedule.

Retry Policy:
    - Up to `max_attempts` attempts (default 4)
    - Delay before attempt N: delays_ms[N-1] (default 0, 2s, 4s, 8s)
    - Retry on RetryableInferenceError (429, 503, transport failures)
    - InferenceFatal propagates immediately
    - Budget spent: raise InferenceExhausted with the last error detail

The loop is an explicit state machine over AttemptState: every transition
either returns a response, raises a fatal error, or produces the next state.

Usage:
    engine = RetryEngine(llm_client, RetryPolicy())
    response, metadata = await engine.execute(inference_request)
"""

import asyncio
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

import structlog

from civic_triage.llm.base_client import BaseLLMClient
from civic_triage.llm.exceptions import (
    InferenceFatal,
    LLMConnectionError,
    LLMRateLimitError,
    RetryableInferenceError,
)
from civic_triage.models.llm_models import InferenceRequest, InferenceResponse
from civic_triage.monitoring.metrics import inference_attempts_total
from civic_triage.retry.exceptions import InferenceExhausted
from civic_triage.retry.metadata import RetryMetadata
from civic_triage.retry.policy import RetryPolicy

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class AttemptState:
    """
    Position of the retry loop.
    
    Attributes:
        attempt: Attempts already made (0 before the first one)
        last_error: Detail of the most recent retryable failure
    """
    
    attempt: int = 0
    last_error: Optional[str] = None
    
    def exhausted(self, policy: RetryPolicy) -> bool:
        return self.attempt >= policy.max_attempts
    
    def failed(self, error: str) -> "AttemptState":
        """State after the next attempt failed with a retryable error."""
        return AttemptState(attempt=self.attempt + 1, last_error=error)


def _outcome_label(error: RetryableInferenceError) -> str:
    if isinstance(error, LLMRateLimitError):
        return "rate_limited"
    if isinstance(error, LLMConnectionError):
        return "network_error"
    return "overloaded"


class RetryEngine:
    """
    Bounded retry around a single-attempt inference client.
    
    Attributes:
        llm_client: Client performing one attempt per call
        policy: Attempt budget and backoff schedule
    """
    
    def __init__(
        self,
        llm_client: BaseLLMClient,
        policy: Optional[RetryPolicy] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """
        Initialize retry engine.
        
        Args:
            llm_client: LLM client for generation
            policy: Retry policy (default: 4 attempts, 0/2/4/8 s)
            sleep: Coroutine used for backoff delays (tests inject a recorder)
        """
        self.llm_client = llm_client
        self.policy = policy or RetryPolicy()
        self._sleep = sleep
        
        logger.info(
            "RetryEngine initialized",
            max_attempts=self.policy.max_attempts,
            delays_ms=list(self.policy.delays_ms),
        )
    
    async def execute(
        self, request: InferenceRequest
    ) -> tuple[InferenceResponse, RetryMetadata]:
        """
        Run the inference request under the retry policy.
        
        Args:
            request: Inference request, sent unchanged on every attempt
        
        Returns:
            Tuple of (successful response, retry metadata)
        
        Raises:
            InferenceFatal: Non-retryable failure (no further attempts)
            InferenceExhausted: Every attempt failed with a retryable error
        """
        start_time = time.perf_counter()
        state = AttemptState()
        failures: list[dict] = []
        total_delay_ms = 0
        
        while not state.exhausted(self.policy):
            attempt = state.attempt + 1
            delay = self.policy.delay_before(attempt)
            if delay > 0:
                logger.info("Waiting before retry", attempt=attempt, delay_seconds=delay)
                await self._sleep(delay)
                total_delay_ms += int(delay * 1000)
            
            logger.info(
                "Calling inference API",
                model=request.model,
                attempt=attempt,
                max_attempts=self.policy.max_attempts,
            )
            
            try:
                response = await self.llm_client.generate(request)
            except RetryableInferenceError as e:
                inference_attempts_total.labels(outcome=_outcome_label(e)).inc()
                failures.append(
                    {"attempt": attempt, "error_type": type(e).__name__, "error": e.message}
                )
                state = state.failed(e.message)
                logger.warning(
                    "Inference attempt failed",
                    attempt=attempt,
                    error_type=type(e).__name__,
                    status_code=e.status_code,
                    will_retry=not state.exhausted(self.policy),
                )
                continue
            except InferenceFatal as e:
                inference_attempts_total.labels(outcome="fatal").inc()
                logger.error(
                    "Inference failed with non-retryable error",
                    attempt=attempt,
                    error=e.message,
                )
                raise
            
            inference_attempts_total.labels(outcome="success").inc()
            metadata = RetryMetadata(
                total_attempts=attempt,
                total_latency_ms=int((time.perf_counter() - start_time) * 1000),
                total_delay_ms=total_delay_ms,
                failures=failures,
            )
            logger.info(
                "Inference succeeded",
                attempt=attempt,
                total_latency_ms=metadata.total_latency_ms,
            )
            return response, metadata
        
        metadata = RetryMetadata(
            total_attempts=state.attempt,
            total_latency_ms=int((time.perf_counter() - start_time) * 1000),
            total_delay_ms=total_delay_ms,
            failures=failures,
        )
        logger.error(
            "Inference attempts exhausted",
            attempts=state.attempt,
            last_error=state.last_error,
        )
        raise InferenceExhausted(
            attempts=state.attempt,
            last_error=state.last_error or "unknown error",
            retry_metadata=metadata,
        )
