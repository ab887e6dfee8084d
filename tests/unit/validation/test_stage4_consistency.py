"""
Unit tests for Stage 4: validity flag consistency.
"""

import pytest

from civic_triage.validation.stage4_consistency import (
    FAIL_OPEN_DEFAULT,
    GENERIC_REJECTION_REASON,
    MISMATCH_REJECTION_REASON,
    Stage4Consistency,
)


class TestStage4Consistency:
    
    def setup_method(self):
        self.stage4 = Stage4Consistency()
    
    def test_valid_report_drops_reason(self):
        result = self.stage4.validate({
            "is_valid_report": True,
            "rejection_reason": "leftover text",
            "image_matches_description": True,
        })
        assert result == {
            "is_valid_report": True,
            "rejection_reason": None,
            "image_matches_description": True,
        }
    
    def test_invalid_report_keeps_model_reason(self):
        result = self.stage4.validate({
            "is_valid_report": False,
            "rejection_reason": "Image shows a sandwich.",
            "image_matches_description": True,
        })
        assert result["is_valid_report"] is False
        assert result["rejection_reason"] == "Image shows a sandwich."
    
    @pytest.mark.parametrize("reason", [None, "", "   "])
    def test_invalid_report_without_reason_gets_generic_reason(self, reason):
        result = self.stage4.validate({
            "is_valid_report": False,
            "rejection_reason": reason,
            "image_matches_description": True,
        })
        assert result["rejection_reason"] == GENERIC_REJECTION_REASON
    
    def test_mismatch_forces_rejection(self):
        """A 'valid' report whose image mismatches becomes invalid with the mismatch reason."""
        result = self.stage4.validate({
            "is_valid_report": True,
            "rejection_reason": None,
            "image_matches_description": False,
        })
        assert result == {
            "is_valid_report": False,
            "rejection_reason": MISMATCH_REJECTION_REASON,
            "image_matches_description": False,
        }
    
    def test_mismatch_keeps_existing_reason(self):
        result = self.stage4.validate({
            "is_valid_report": False,
            "rejection_reason": "Description mentions a pothole but image shows a cat.",
            "image_matches_description": False,
        })
        assert result["rejection_reason"] == "Description mentions a pothole but image shows a cat."
    
    @pytest.mark.parametrize("flag", ["false", 0, None, "no"])
    def test_non_boolean_flags_fail_open(self, flag):
        result = self.stage4.validate({
            "is_valid_report": flag,
            "rejection_reason": None,
            "image_matches_description": flag,
        })
        assert FAIL_OPEN_DEFAULT is True
        assert result["is_valid_report"] is True
        assert result["image_matches_description"] is True
        assert result["rejection_reason"] is None
    
    def test_missing_fields(self):
        result = self.stage4.validate({})
        assert result == {
            "is_valid_report": True,
            "rejection_reason": None,
            "image_matches_description": True,
        }
