"""
Prompt builder for classification requests.

Responsible for:
- Loading and rendering the Jinja2 classification template
- Embedding the per-request category snapshot (details, valid ids, valid names)
- Switching between the mismatch-check block and the no-description block
- Loading the JSON response schema sent to the model
- Constructing complete InferenceRequest objects

Rendering is pure: the same categories and description always produce the
same prompt text.
"""

import json
from pathlib import Path
from typing import Optional, Sequence
from jinja2 import Environment, FileSystemLoader, TemplateNotFound
import structlog

from civic_triage.models.llm_models import ImagePayload, InferenceRequest
from civic_triage.models.taxonomy import Category


logger = structlog.get_logger(__name__)

DEFAULT_TEMPLATES_DIR = Path(__file__).parent / "templates"
PROMPT_TEMPLATE_NAME = "classification_prompt.txt"
SCHEMA_FILE_NAME = "classification_schema.json"


def has_description(description: Optional[str]) -> bool:
    """True when the citizen description is non-empty after stripping whitespace."""
    return bool(description and description.strip())


class PromptBuilder:
    """
    Build classification prompts and inference requests.
    
    Handles:
    - Template rendering (Jinja2)
    - Category snapshot embedding
    - JSON Schema inclusion
    """
    
    def __init__(
        self,
        templates_dir: Optional[Path] = None,
        schema_path: Optional[Path] = None,
        default_model: str = "gemini-3-flash-preview",
        default_temperature: float = 0.1,
        default_top_p: float = 0.95,
        default_max_tokens: int = 8192,
    ):
        """
        Initialize prompt builder.
        
        Args:
            templates_dir: Directory containing the prompt template (default: packaged templates)
            schema_path: Path to the response JSON Schema (default: packaged schema)
            default_model: Default model name
            default_temperature: Default temperature
            default_top_p: Default nucleus sampling threshold
            default_max_tokens: Default max output tokens
        """
        self.templates_dir = Path(templates_dir) if templates_dir else DEFAULT_TEMPLATES_DIR
        self.schema_path = Path(schema_path) if schema_path else self.templates_dir / SCHEMA_FILE_NAME
        self.default_model = default_model
        self.default_temperature = default_temperature
        self.default_top_p = default_top_p
        self.default_max_tokens = default_max_tokens
        
        # Load Jinja2 environment
        self.jinja_env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            trim_blocks=True,
            lstrip_blocks=True,
            autoescape=False  # We're generating prompts, not HTML
        )
        
        try:
            self.template = self.jinja_env.get_template(PROMPT_TEMPLATE_NAME)
            logger.info("Loaded prompt template", templates_dir=str(self.templates_dir))
        except TemplateNotFound as e:
            logger.error("Failed to load prompt template", error=str(e))
            raise
        
        try:
            with open(self.schema_path, 'r', encoding='utf-8') as f:
                self.response_schema = json.load(f)
            logger.info("Loaded response schema", schema_path=str(self.schema_path))
        except (OSError, json.JSONDecodeError) as e:
            logger.error("Failed to load response schema", error=str(e), path=str(self.schema_path))
            raise
    
    def build(self, categories: Sequence[Category], description: Optional[str]) -> str:
        """
        Render the classification prompt.
        
        Args:
            categories: Taxonomy snapshot for this request (non-empty)
            description: Citizen description; blank or None selects the
                no-description block
            
        Returns:
            Rendered prompt text
        """
        valid_ids = ", ".join(str(c.id) for c in categories)
        valid_names = ", ".join(f'"{c.name}"' for c in categories)
        
        rendered = self.template.render(
            categories=categories,
            valid_ids=valid_ids,
            valid_names=valid_names,
            description=description if has_description(description) else None,
        ).strip()
        
        logger.debug(
            "Prompt built",
            categories_count=len(categories),
            has_description=has_description(description),
            prompt_length=len(rendered),
        )
        return rendered
    
    def build_inference_request(
        self,
        prompt: str,
        image: ImagePayload,
        model: Optional[str] = None,
    ) -> InferenceRequest:
        """
        Build the complete InferenceRequest (prompt + image + generation config + schema).
        
        Args:
            prompt: Rendered prompt (see build)
            image: Fetched image payload
            model: Override default model
            
        Returns:
            InferenceRequest reused unchanged for every retry attempt
        """
        return InferenceRequest(
            prompt=prompt,
            image=image,
            model=model or self.default_model,
            temperature=self.default_temperature,
            top_p=self.default_top_p,
            max_tokens=self.default_max_tokens,
            response_schema=self.response_schema,
        )
