"""
Abstract base client for multimodal LLM inference.

Defines the interface that inference client implementations must adhere to.
This abstraction lets the retry engine and orchestrator work against any
backend, and lets tests substitute a scripted client.
"""

from abc import ABC, abstractmethod
import structlog

from civic_triage.models.llm_models import InferenceRequest, InferenceResponse


logger = structlog.get_logger(__name__)


class BaseLLMClient(ABC):
    """
    Abstract base class for LLM inference clients.
    
    Responsibilities:
    - Send ONE generation request per call (text + inlined image)
    - Classify failures as retryable (RetryableInferenceError) or fatal (InferenceFatal)
    - Provide a health check
    
    Does NOT handle:
    - Prompt construction (that's PromptBuilder's job)
    - Retries and backoff (that's RetryEngine's job)
    - Extracting/validating the answer (that's ValidationPipeline's job)
    """
    
    def __init__(self, base_url: str, timeout: float = 60.0, **kwargs):
        """
        Initialize base client.
        
        Args:
            base_url: Base URL of the inference API
            timeout: Request timeout in seconds
            **kwargs: Additional provider-specific config
        """
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.extra_config = kwargs
        
        logger.info(
            "Initialized LLM client",
            client_class=self.__class__.__name__,
            base_url=self.base_url,
            timeout=timeout,
        )
    
    @abstractmethod
    async def generate(self, request: InferenceRequest) -> InferenceResponse:
        """
        Perform a single inference attempt.
        
        Args:
            request: Standardized inference request
            
        Returns:
            InferenceResponse wrapping the decoded JSON envelope
            
        Raises:
            LLMRateLimitError: 429
            LLMOverloadedError: 503
            LLMConnectionError / LLMTimeoutError: Transport failures
            InferenceFatal: Any other non-2xx status, or a non-object body
        """
        pass
    
    @abstractmethod
    async def health_check(self) -> bool:
        """
        Check if the inference API is reachable and the credentials work.
        
        Returns:
            True if healthy, False otherwise
            
        Note:
            This should NOT raise exceptions - return False on error.
        """
        pass
    
    async def close(self):
        """
        Close client connections and cleanup resources.
        
        Default implementation does nothing.
        """
        logger.debug("Closing LLM client", client_class=self.__class__.__name__)
    
    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"base_url={self.base_url}, "
            f"timeout={self.timeout}s)"
        )
