"""
Validation Pipeline: multi-stage validator/normalizer.

Coordinates all 4 stages:
- Stage 1: Extract answer text + JSON parse (hard fail)
- Stage 2: Category resolution against the taxonomy snapshot (hard fail)
- Stage 3: Numeric normalization (hard fail on unusable numbers)
- Stage 4: Flag consistency (never fails)

The result is either a fully populated ClassificationResult or a typed
ValidationError; no partially filled record ever leaves this module.
No I/O happens here.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Sequence

from ..models.classification import ClassificationResult
from ..models.taxonomy import Category
from ..monitoring.metrics import normalizer_overrides_total
from .stage1_extract import Stage1Extract
from .stage2_category import Stage2CategoryResolution
from .stage3_normalize import Stage3Normalize
from .stage4_consistency import Stage4Consistency

logger = logging.getLogger(__name__)


@dataclass
class ValidationContext:
    """
    Context passed through the validation pipeline.
    
    Collects the names of fields whose final value differs from what the
    model returned.
    """
    overrides: list[str] = field(default_factory=list)


class ValidationPipeline:
    """
    Multi-stage validation pipeline orchestrator.
    """
    
    def __init__(self):
        self.stage1 = Stage1Extract()
        self.stage2 = Stage2CategoryResolution()
        self.stage3 = Stage3Normalize()
        self.stage4 = Stage4Consistency()
    
    def parse_envelope(self, envelope: dict) -> dict:
        """
        Run Stage 1 on a raw model envelope.
        
        Raises:
            EmptyModelOutput, MalformedJSON
        """
        return self.stage1.validate(envelope)
    
    def validate(
        self,
        parsed: dict,
        categories: Sequence[Category],
        context: ValidationContext | None = None,
    ) -> ClassificationResult:
        """
        Normalize parsed model output into a ClassificationResult.
        
        Steps, in order:
        1. resolve the category (id, then case-insensitive name)
        2. copy name/group from the stored category
        3-6. severity, confidence, due date, priority
        7-9. validity flags, rejection reason, mismatch override
        
        Args:
            parsed: Model output (Stage 1 result)
            categories: Taxonomy snapshot for this request
            context: Optional context collecting overridden field names
            
        Returns:
            Validated ClassificationResult
            
        Raises:
            InvalidCategory: Stage 2
            InvalidFieldValue: Stage 3
        """
        category = self.stage2.validate(parsed, categories)
        numbers = self.stage3.validate(parsed, category)
        flags = self.stage4.validate(parsed)
        
        ai_description = parsed.get("ai_description")
        if ai_description is None:
            ai_description = ""
        elif not isinstance(ai_description, str):
            ai_description = str(ai_description)
        
        result = ClassificationResult(
            category_id=category.id,
            category_name=category.name,
            category_group=category.category_group,
            severity=numbers["severity"],
            confidence=numbers["confidence"],
            ai_description=ai_description,
            due_date_days=numbers["due_date_days"],
            suggested_priority=numbers["suggested_priority"],
            is_valid_report=flags["is_valid_report"],
            rejection_reason=flags["rejection_reason"],
            image_matches_description=flags["image_matches_description"],
        )
        
        overrides = self._diff(parsed, result)
        for name in overrides:
            normalizer_overrides_total.labels(field=name).inc()
        if context is not None:
            context.overrides.extend(overrides)
        
        if overrides:
            logger.info(
                f"Normalizer overrode {len(overrides)} field(s): {', '.join(overrides)}"
            )
        return result
    
    @staticmethod
    def _diff(parsed: dict, result: ClassificationResult) -> list[str]:
        final = result.model_dump(mode="json")
        changed = []
        for name, value in final.items():
            if name == "ai_description":
                continue
            raw: Any = parsed.get(name)
            if isinstance(value, bool) or isinstance(raw, bool):
                same = raw is value
            else:
                same = raw == value
            if not same:
                changed.append(name)
        return changed
