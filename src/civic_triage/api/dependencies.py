"""
FastAPI dependency injection for Civic Triage.

Provides singleton instances of expensive resources (HTTP clients, prompt
builder, validator) and factory functions for per-request components.

Cached getters take no arguments so that lru_cache can key them; they read
configuration through get_settings().
"""

from functools import lru_cache

from fastapi import Depends

from civic_triage.config import Settings, settings
from civic_triage.llm.base_client import BaseLLMClient
from civic_triage.llm.gemini_client import GeminiClient
from civic_triage.llm.image_fetcher import ImageFetcher
from civic_triage.llm.prompt_builder import PromptBuilder
from civic_triage.orchestrator import ClassificationPipeline
from civic_triage.persistence.report_repository import ReportRepository
from civic_triage.persistence.supabase_client import SupabaseRestClient
from civic_triage.persistence.taxonomy_loader import TaxonomyLoader
from civic_triage.retry.engine import RetryEngine
from civic_triage.retry.policy import RetryPolicy
from civic_triage.validation.pipeline import ValidationPipeline


@lru_cache()
def get_settings() -> Settings:
    """
    Get settings singleton.
    
    Returns:
        Settings instance
    """
    return settings


@lru_cache()
def get_supabase_client() -> SupabaseRestClient:
    """
    Get singleton Supabase REST client with connection pooling.
    
    Returns:
        SupabaseRestClient instance
    """
    config = get_settings()
    return SupabaseRestClient(
        base_url=config.SUPABASE_URL,
        service_role_key=config.SUPABASE_SERVICE_ROLE_KEY,
        timeout=config.STORE_TIMEOUT,
    )


@lru_cache()
def get_llm_client() -> BaseLLMClient:
    """
    Get singleton LLM client with connection pooling.
    
    Uses @lru_cache to ensure only one client instance is created.
    
    Returns:
        GeminiClient instance
    """
    config = get_settings()
    return GeminiClient(
        api_key=config.GEMINI_API_KEY,
        base_url=config.GEMINI_BASE_URL,
        timeout=config.GEMINI_TIMEOUT,
        model=config.GEMINI_MODEL,
    )


@lru_cache()
def get_image_fetcher() -> ImageFetcher:
    """Get singleton image fetcher."""
    config = get_settings()
    return ImageFetcher(
        timeout=config.IMAGE_FETCH_TIMEOUT,
        default_mime_type=config.DEFAULT_IMAGE_MIME_TYPE,
    )


@lru_cache()
def get_prompt_builder() -> PromptBuilder:
    """
    Get singleton prompt builder.
    
    Loads the Jinja2 template and response schema once and reuses them
    across requests.
    
    Returns:
        PromptBuilder instance
    """
    config = get_settings()
    return PromptBuilder(
        templates_dir=config.PROMPT_TEMPLATES_DIR,
        default_model=config.GEMINI_MODEL,
        default_temperature=config.LLM_TEMPERATURE,
        default_top_p=config.LLM_TOP_P,
        default_max_tokens=config.LLM_MAX_TOKENS,
    )


@lru_cache()
def get_validation_pipeline() -> ValidationPipeline:
    """
    Get singleton validation pipeline.
    
    Returns:
        ValidationPipeline instance
    """
    return ValidationPipeline()


def get_retry_engine(
    llm_client: BaseLLMClient = Depends(get_llm_client),
    config: Settings = Depends(get_settings),
) -> RetryEngine:
    """
    Create retry engine with injected dependencies.
    
    Note: RetryEngine is NOT cached because it's lightweight and stateless.
    
    Args:
        llm_client: LLM client singleton (injected)
        config: Application settings (injected)
    
    Returns:
        RetryEngine instance
    """
    return RetryEngine(llm_client=llm_client, policy=RetryPolicy.from_settings(config))


def get_taxonomy_loader(
    client: SupabaseRestClient = Depends(get_supabase_client),
) -> TaxonomyLoader:
    """Create a taxonomy loader (no caching of the taxonomy itself)."""
    return TaxonomyLoader(client)


def get_classification_pipeline(
    taxonomy_loader: TaxonomyLoader = Depends(get_taxonomy_loader),
    prompt_builder: PromptBuilder = Depends(get_prompt_builder),
    image_fetcher: ImageFetcher = Depends(get_image_fetcher),
    retry_engine: RetryEngine = Depends(get_retry_engine),
    validator: ValidationPipeline = Depends(get_validation_pipeline),
) -> ClassificationPipeline:
    """
    Create the classification pipeline from its (mostly cached) components.
    
    Returns:
        ClassificationPipeline instance
    """
    return ClassificationPipeline(
        taxonomy_loader=taxonomy_loader,
        prompt_builder=prompt_builder,
        image_fetcher=image_fetcher,
        retry_engine=retry_engine,
        validator=validator,
    )


def get_report_repository(
    client: SupabaseRestClient = Depends(get_supabase_client),
) -> ReportRepository:
    """Create a report repository over the shared Supabase client."""
    return ReportRepository(client)
