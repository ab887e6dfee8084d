"""
Stage 4: Flag consistency.

Make the validity flags agree with each other:
- non-boolean flags fall back to FAIL_OPEN_DEFAULT
- an invalid report always has a rejection reason, a valid one never does
- an image that mismatches its description always makes the report invalid
"""

from typing import Any, Optional

# Used for any validity flag the model did not return as a JSON boolean
FAIL_OPEN_DEFAULT = True

GENERIC_REJECTION_REASON = "Report flagged as invalid by AI analysis."
MISMATCH_REJECTION_REASON = "Image does not match the provided description."


def coerce_flag(value: Any) -> bool:
    """Booleans pass through; anything else (including "false") becomes FAIL_OPEN_DEFAULT."""
    if isinstance(value, bool):
        return value
    return FAIL_OPEN_DEFAULT


def coerce_reason(value: Any) -> Optional[str]:
    """A non-blank string reason, or None."""
    if isinstance(value, str) and value.strip():
        return value
    return None


class Stage4Consistency:
    """
    Stage 4: never fails, only rewrites the three validity fields.
    """
    
    def validate(self, parsed: dict) -> dict:
        """
        Args:
            parsed: Model output (Stage 1 result)
        
        Returns:
            Dict with is_valid_report, rejection_reason, image_matches_description
        """
        is_valid = coerce_flag(parsed.get("is_valid_report"))
        matches = coerce_flag(parsed.get("image_matches_description"))
        reason = coerce_reason(parsed.get("rejection_reason"))
        
        if not is_valid and reason is None:
            reason = GENERIC_REJECTION_REASON
        if is_valid:
            reason = None
        
        if not matches:
            is_valid = False
            if reason is None:
                reason = MISMATCH_REJECTION_REASON
        
        return {
            "is_valid_report": is_valid,
            "rejection_reason": reason,
            "image_matches_description": matches,
        }
