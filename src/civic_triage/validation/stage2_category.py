"""
Stage 2: Category resolution.

Map the model's category choice onto the request's taxonomy snapshot.
The model is asked for an id, but ids get invented; a case-insensitive
name match is accepted as a fallback. Anything else is a hard failure.
"""

import math
from typing import Any, Optional, Sequence

import structlog

from civic_triage.models.taxonomy import Category
from civic_triage.monitoring.metrics import validation_failures_total
from .exceptions import InvalidCategory

logger = structlog.get_logger(__name__)


def coerce_category_id(value: Any) -> Optional[int]:
    """
    Interpret a model-supplied category_id as an int, if possible.
    
    Accepts ints, integral floats (3.0) and numeric strings ("3").
    Booleans and everything else yield None.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) and value.is_integer() else None
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


class Stage2CategoryResolution:
    """
    Stage 2 validator: resolve the category against the snapshot.
    
    Raises InvalidCategory when neither id nor name matches (hard fail).
    """
    
    def validate(self, parsed: dict, categories: Sequence[Category]) -> Category:
        """
        Resolve the category.
        
        Args:
            parsed: Model output (Stage 1 result)
            categories: Taxonomy snapshot for this request
            
        Returns:
            The stored Category the classification belongs to
            
        Raises:
            InvalidCategory: No category matches by id or by name
        """
        raw_id = parsed.get("category_id")
        category_id = coerce_category_id(raw_id)
        
        if category_id is not None:
            for category in categories:
                if category.id == category_id:
                    return category
        
        raw_name = parsed.get("category_name")
        if isinstance(raw_name, str) and raw_name:
            wanted = raw_name.lower()
            for category in categories:
                if category.name.lower() == wanted:
                    logger.warning(
                        "Category resolved by name",
                        returned_id=raw_id,
                        returned_name=raw_name,
                        resolved_id=category.id,
                    )
                    return category
        
        valid_ids = [c.id for c in categories]
        validation_failures_total.labels(
            stage="stage2", error_type="invalid_category"
        ).inc()
        raise InvalidCategory(
            f"AI returned invalid category_id: {raw_id}. "
            f"Valid IDs: {', '.join(str(i) for i in valid_ids)}",
            invalid_value=raw_id,
            expected_values=valid_ids,
        )
