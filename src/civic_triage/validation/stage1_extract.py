"""
Stage 1: Response extraction and JSON parse.

Pull the answer text out of the generateContent envelope, strip markdown
code fences and parse it into a dict. Hard-fail stage: an empty answer or
non-object JSON aborts the request.
"""

import json
import re
import structlog

from civic_triage.monitoring.metrics import validation_failures_total
from .exceptions import EmptyModelOutput, MalformedJSON

logger = structlog.get_logger(__name__)

_LEADING_FENCE = re.compile(r"^```(?:json)?\s*", re.IGNORECASE)
_TRAILING_FENCE = re.compile(r"\s*```$")


def strip_code_fences(text: str) -> str:
    """Remove a leading ```json / ``` fence and a trailing ``` fence."""
    text = _LEADING_FENCE.sub("", text.strip())
    text = _TRAILING_FENCE.sub("", text)
    return text.strip()


class Stage1Extract:
    """
    Stage 1 validator: envelope -> answer text -> dict.
    
    Part selection:
    1. the first part that has text and is not flagged `thought`
    2. otherwise the last part (scanning backwards) with any text
    """
    
    def extract(self, envelope: dict) -> str:
        """
        Extract the answer text from a model response envelope.
        
        Args:
            envelope: Decoded generateContent response body
            
        Returns:
            Answer text with code fences stripped
            
        Raises:
            EmptyModelOutput: No part carries text
        """
        parts = self._parts(envelope)
        
        raw_text = next(
            (p["text"] for p in parts if p.get("text") and not p.get("thought")),
            None,
        )
        if raw_text is None:
            raw_text = next((p["text"] for p in reversed(parts) if p.get("text")), None)
        
        if not raw_text or not isinstance(raw_text, str):
            validation_failures_total.labels(stage="stage1", error_type="empty_output").inc()
            logger.error(
                "Model returned no text",
                candidates=len(envelope.get("candidates") or []),
                parts=len(parts),
                finish_reason=self._finish_reason(envelope),
            )
            raise EmptyModelOutput(
                "Model returned an empty response",
                details={"parts": len(parts), "finish_reason": self._finish_reason(envelope)},
            )
        
        logger.debug("Stage 1: extracted model text", text_preview=raw_text[:400])
        return strip_code_fences(raw_text)
    
    def parse(self, content: str) -> dict:
        """
        Parse the answer text as a single JSON object.
        
        Raises:
            MalformedJSON: Not valid JSON, or valid JSON that is not an object
        """
        try:
            parsed = json.loads(content)
        except json.JSONDecodeError as e:
            validation_failures_total.labels(stage="stage1", error_type="malformed_json").inc()
            raise MalformedJSON(
                f"Failed to parse model JSON: {e.msg}. Raw: {content[:500]}",
                raw_content=content,
                parse_error=f"{e.msg} at line {e.lineno} col {e.colno}",
            ) from e
        
        if not isinstance(parsed, dict):
            validation_failures_total.labels(stage="stage1", error_type="not_json_object").inc()
            raise MalformedJSON(
                f"Model response is not a JSON object (got {type(parsed).__name__}). "
                f"Raw: {content[:500]}",
                raw_content=content,
                parse_error=f"Expected object, got {type(parsed).__name__}",
            )
        
        logger.debug(f"Stage 1: Successfully parsed JSON with {len(parsed)} top-level keys")
        return parsed
    
    def validate(self, envelope: dict) -> dict:
        """Extract then parse."""
        return self.parse(self.extract(envelope))
    
    @staticmethod
    def _parts(envelope: dict) -> list[dict]:
        candidates = envelope.get("candidates") or []
        if not isinstance(candidates, list) or not candidates:
            return []
        first = candidates[0] if isinstance(candidates[0], dict) else {}
        content = first.get("content") or {}
        parts = content.get("parts") if isinstance(content, dict) else None
        if not isinstance(parts, list):
            return []
        return [p for p in parts if isinstance(p, dict)]
    
    @staticmethod
    def _finish_reason(envelope: dict) -> str | None:
        candidates = envelope.get("candidates") or []
        if isinstance(candidates, list) and candidates and isinstance(candidates[0], dict):
            return candidates[0].get("finishReason")
        return None
