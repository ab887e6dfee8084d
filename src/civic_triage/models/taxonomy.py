"""
Taxonomy models.

Categories are owned by the store; the core only reads them. The list fetched
at request start is the sole source of truth for that request.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class Category(BaseModel):
    """A municipal issue category with its response-time window (days)."""
    
    model_config = ConfigDict(frozen=True, extra="ignore")
    
    id: int = Field(..., description="Unique category identifier")
    name: str = Field(..., description="Display name, e.g. 'Pothole'")
    example_issues: str = Field(default="", description="Free-text examples shown to the model")
    category_group: str = Field(..., description="Department/group the category belongs to")
    min_response_days: int = Field(..., ge=0, description="Fastest allowed resolution window")
    max_response_days: int = Field(..., ge=0, description="Slowest allowed resolution window")
    
    @field_validator("example_issues", mode="before")
    @classmethod
    def _null_examples(cls, value):
        return "" if value is None else value

    @model_validator(mode="after")
    def _check_window(self) -> "Category":
        if self.min_response_days > self.max_response_days:
            raise ValueError(
                f"min_response_days ({self.min_response_days}) must be <= "
                f"max_response_days ({self.max_response_days})"
            )
        return self
