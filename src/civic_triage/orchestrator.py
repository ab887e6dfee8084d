"""
Classification pipeline orchestrator.

Sequences one analyze-report request:
    taxonomy snapshot -> prompt -> image fetch -> inference (with retry)
    -> extraction -> validation/normalization

All-or-nothing: any stage failure propagates as a PipelineError subclass
and no partial classification is returned.
"""

import time

import structlog

from civic_triage.exceptions import PipelineError
from civic_triage.llm.image_fetcher import ImageFetcher
from civic_triage.llm.prompt_builder import PromptBuilder
from civic_triage.models.classification import ClassificationOutcome, ClassificationRequest
from civic_triage.monitoring.metrics import classifications_total
from civic_triage.persistence.taxonomy_loader import TaxonomyLoader
from civic_triage.retry.engine import RetryEngine
from civic_triage.validation.pipeline import ValidationContext, ValidationPipeline

logger = structlog.get_logger(__name__)


class ClassificationPipeline:
    """
    Orchestrates the analyze-report flow.
    
    Attributes:
        taxonomy_loader: Loads the per-request category snapshot
        prompt_builder: Renders the prompt and builds the inference request
        image_fetcher: Downloads the citizen's photo
        retry_engine: Runs inference under the retry policy
        validator: Extracts and normalizes the model answer
    """
    
    def __init__(
        self,
        taxonomy_loader: TaxonomyLoader,
        prompt_builder: PromptBuilder,
        image_fetcher: ImageFetcher,
        retry_engine: RetryEngine,
        validator: ValidationPipeline,
    ):
        self.taxonomy_loader = taxonomy_loader
        self.prompt_builder = prompt_builder
        self.image_fetcher = image_fetcher
        self.retry_engine = retry_engine
        self.validator = validator
    
    async def classify(self, request: ClassificationRequest) -> ClassificationOutcome:
        """
        Classify one submitted photo.
        
        Args:
            request: image URL and optional description
        
        Returns:
            ClassificationOutcome with the validated result and audit data
        
        Raises:
            PipelineError: any stage failure (taxonomy, image fetch,
                inference, extraction, validation)
        """
        start_time = time.perf_counter()
        
        try:
            categories = await self.taxonomy_loader.load()
            prompt = self.prompt_builder.build(categories, request.description)
            image = await self.image_fetcher.fetch(request.image_url)
            inference_request = self.prompt_builder.build_inference_request(prompt, image)
            response, retry_metadata = await self.retry_engine.execute(inference_request)
            
            parsed = self.validator.parse_envelope(response.envelope)
            context = ValidationContext()
            classification = self.validator.validate(parsed, categories, context)
        except PipelineError as e:
            classifications_total.labels(outcome="failed").inc()
            logger.error(
                "Classification failed",
                error_type=type(e).__name__,
                error=e.message,
                details=e.details,
            )
            raise
        
        duration_ms = int((time.perf_counter() - start_time) * 1000)
        
        if classification.is_valid_report:
            classifications_total.labels(outcome="valid").inc()
            logger.info(
                "Valid report",
                category=classification.category_name,
                severity=classification.severity,
                confidence=classification.confidence,
                priority=classification.suggested_priority.value,
                due_date_days=classification.due_date_days,
                attempts=retry_metadata.total_attempts,
                duration_ms=duration_ms,
            )
        else:
            classifications_total.labels(outcome="rejected").inc()
            logger.info(
                "Rejected report",
                rejection_reason=classification.rejection_reason,
                ai_description=classification.ai_description,
                attempts=retry_metadata.total_attempts,
                duration_ms=duration_ms,
            )
        
        return ClassificationOutcome(
            classification=classification,
            attempts=retry_metadata.total_attempts,
            categories_count=len(categories),
            overrides=context.overrides,
            processing_duration_ms=duration_ms,
        )
