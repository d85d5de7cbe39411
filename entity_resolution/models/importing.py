"""Models for tabular article imports"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from entity_resolution.models.article import (
    CanonicalArticle,
    CanonicalSupplier,
    NutritionInfo,
)
from entity_resolution.models.decisions import DuplicateCandidate, MappingResult


class ImportCandidate(BaseModel):
    """One import row after transformation, before the completeness and duplicate checks"""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "Tomaten passiert",
                "supplier_id": "sup-1",
                "supplier_name": "Metro AG",
                "bundle_price": 12.9,
                "category": "Tomaten",
            }
        }
    )

    name: str = ""
    supplier_id: Optional[str] = None
    supplier_name: Optional[str] = None
    supplier_article_number: Optional[str] = None
    category: str = ""
    bundle_unit: str = "Stück"
    bundle_price: float = 0.0
    content: float = 1.0
    content_unit: str = "Stück"
    price_per_unit: float = 0.0
    vat_rate: float = 19.0
    allergens: List[str] = Field(default_factory=list)
    additives: List[str] = Field(default_factory=list)
    ingredients: str = ""
    nutrition: Optional[NutritionInfo] = None

    @property
    def missing_fields(self) -> List[str]:
        """Required values that are empty (a zero bundle price counts as missing)"""
        missing = []
        if not self.name.strip():
            missing.append("name")
        if not self.supplier_id:
            missing.append("supplier")
        if not self.bundle_price:
            missing.append("bundle_price")
        return missing

    @property
    def is_complete(self) -> bool:
        return not self.missing_fields

    def to_duplicate_candidate(self) -> DuplicateCandidate:
        return DuplicateCandidate(
            name=self.name,
            supplier_id=self.supplier_id,
            supplier_name=self.supplier_name,
            article_number=self.supplier_article_number or None,
        )

    def to_article(self, article_id: str) -> CanonicalArticle:
        return CanonicalArticle(
            id=article_id,
            supplier_id=self.supplier_id,
            **self.model_dump(exclude={"supplier_id", "supplier_name"}),
        )


class SkipReason(str, Enum):
    EMPTY_ROW = "empty_row"
    MISSING_FIELDS = "missing_fields"
    DUPLICATE_IN_BATCH = "duplicate_in_batch"
    DUPLICATE_IN_STORE = "duplicate_in_store"


class SkippedRow(BaseModel):
    """A source row that did not become an article"""

    row_index: int = Field(..., description="0-based index into the source rows")
    reason: SkipReason
    name: str = ""
    detail: str = ""


class StoreSnapshot(BaseModel):
    """Articles and suppliers read from the record store before a run"""

    articles: List[CanonicalArticle] = Field(default_factory=list)
    suppliers: List[CanonicalSupplier] = Field(default_factory=list)


class ImportResult(BaseModel):
    """Outcome of one import run"""

    mapping: MappingResult
    missing_required: List[str] = Field(
        default_factory=list,
        description="Required fields neither mapped nor defaulted; no rows are processed while non-empty",
    )
    articles: List[CanonicalArticle] = Field(default_factory=list)
    new_suppliers: List[CanonicalSupplier] = Field(default_factory=list)
    skipped: List[SkippedRow] = Field(default_factory=list)
    total_rows: int = 0

    @property
    def imported_count(self) -> int:
        return len(self.articles)

    @property
    def skipped_count(self) -> int:
        return len(self.skipped)

    @property
    def new_supplier_count(self) -> int:
        return len(self.new_suppliers)

    def skipped_by_reason(self, reason: SkipReason) -> List[SkippedRow]:
        return [row for row in self.skipped if row.reason == reason]
