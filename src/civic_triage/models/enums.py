"""
Enumerations for Civic Triage data models.

All enums are closed taxonomies - no values outside these sets are permitted.
"""

from enum import Enum


class PriorityEnum(str, Enum):
    """
    Suggested dispatch priority.
    
    Derived purely from severity on the server side; the model's own
    suggestion is never trusted.
    """
    
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"
    
    @classmethod
    def from_severity(cls, severity: int) -> "PriorityEnum":
        """Map severity 1-5 to priority (1-2 low, 3 medium, 4 high, 5 critical)."""
        if severity <= 2:
            return cls.LOW
        if severity == 3:
            return cls.MEDIUM
        if severity == 4:
            return cls.HIGH
        return cls.CRITICAL


class ReportStatus(str, Enum):
    """Initial status of a stored report."""
    
    OPEN = "open"
    REJECTED = "rejected"
