"""
Taxonomy loader: fetches the active category snapshot for one request.

The snapshot is never cached; every classification reads the categories
table afresh so edits made by administrators apply to the next request.
"""

from pydantic import ValidationError as PydanticValidationError
import structlog

from civic_triage.models.taxonomy import Category
from civic_triage.persistence.exceptions import EmptyTaxonomy, StoreError, TaxonomyUnavailable
from civic_triage.persistence.supabase_client import SupabaseRestClient


logger = structlog.get_logger(__name__)

CATEGORY_COLUMNS = "id,name,example_issues,category_group,min_response_days,max_response_days"


class TaxonomyLoader:
    """Load active categories, ordered by id ascending."""
    
    def __init__(self, client: SupabaseRestClient):
        self.client = client
    
    async def load(self) -> list[Category]:
        """
        Fetch the current taxonomy snapshot.
        
        Returns:
            Non-empty list of active categories, ordered by id
            
        Raises:
            TaxonomyUnavailable: Store error, or rows that fail Category validation
            EmptyTaxonomy: No active categories
        """
        try:
            rows = await self.client.select(
                "categories",
                columns=CATEGORY_COLUMNS,
                filters={"is_active": "eq.true"},
                order="id.asc",
            )
        except StoreError as e:
            raise TaxonomyUnavailable(
                f"Failed to fetch categories: {e.message}",
                details=e.details,
            ) from e
        
        if not rows:
            raise EmptyTaxonomy("No active categories found in database")
        
        try:
            categories = [Category.model_validate(row) for row in rows]
        except PydanticValidationError as e:
            raise TaxonomyUnavailable(
                f"Categories table returned {e.error_count()} invalid field(s)",
                details={"errors": [err["msg"] for err in e.errors()]},
            ) from e
        
        categories.sort(key=lambda c: c.id)
        logger.info("Fetched active categories", count=len(categories))
        return categories
