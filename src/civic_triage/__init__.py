"""
Civic Triage - municipal issue classification service.

Takes a citizen-submitted photo plus optional description and produces a
normalized, schema-safe classification record:
- Category resolved against the live taxonomy (never invented by the model)
- Severity, confidence and due date clamped server-side
- Rejection of non-municipal, mismatched or low-quality submissions

Architecture: FastAPI orchestrator + Gemini vision inference + multi-stage validation
"""

__version__ = "0.1.0"
