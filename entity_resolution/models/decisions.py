"""Result values produced by the resolution engine"""

from enum import Enum
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from entity_resolution.models.article import CanonicalArticle, MergedLineItem


class FieldMapping(BaseModel):
    """Assignment of one import target field to a source header"""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "target_field": "name",
                "source_header": "Artikelname",
                "confidence_score": 100.0,
            }
        }
    )

    target_field: str = Field(..., description="Target field id")
    source_header: Optional[str] = Field(
        None, description="Mapped header, or None when the field is unmapped"
    )
    confidence_score: float = Field(default=0.0, ge=0.0, le=100.0)

    @property
    def is_mapped(self) -> bool:
        return self.source_header is not None


class NutritionClusterOption(BaseModel):
    """Synthetic header standing in for every column that looks like a nutrient"""

    headers: List[str] = Field(..., min_length=1, description="Constituent source headers")

    @property
    def label(self) -> str:
        return f"[Nährwertfelder: {', '.join(self.headers)}]"


class MappingResult(BaseModel):
    """Output of one field-mapping run"""

    mappings: List[FieldMapping] = Field(default_factory=list)
    nutrition_cluster: Optional[NutritionClusterOption] = None

    def get(self, target_field: str) -> Optional[FieldMapping]:
        for mapping in self.mappings:
            if mapping.target_field == target_field:
                return mapping
        return None

    def header_for(self, target_field: str) -> Optional[str]:
        mapping = self.get(target_field)
        return mapping.source_header if mapping else None

    def as_dict(self) -> dict:
        """Target field -> mapped header (None when unmapped)"""
        return {m.target_field: m.source_header for m in self.mappings}


class SupplierMatch(str, Enum):
    EXACT = "exact"
    PROGRESSIVE = "progressive"


class UnresolvedReason(str, Enum):
    NO_TOKENS = "no_tokens"
    NO_MATCH = "no_match"
    AMBIGUOUS = "ambiguous"


class Resolved(BaseModel):
    """The free text identifies exactly one known supplier"""

    kind: Literal["resolved"] = "resolved"
    supplier_id: str
    supplier_name: str
    matched_by: SupplierMatch
    word_count: Optional[int] = Field(
        None, description="Number of leading words needed (progressive matches only)"
    )


class Unresolved(BaseModel):
    """No single supplier could be identified"""

    kind: Literal["unresolved"] = "unresolved"
    reason: UnresolvedReason


SupplierResolution = Annotated[Union[Resolved, Unresolved], Field(discriminator="kind")]


class MatchStrategy(str, Enum):
    ARTICLE_NUMBER = "article_number"
    OCR_NAME = "ocr_name"
    MANUAL = "manual"


class UnlinkReason(str, Enum):
    NO_MATCH = "no_match"
    AMBIGUOUS = "ambiguous"


class Linked(BaseModel):
    """The line item refers to exactly one canonical article"""

    kind: Literal["linked"] = "linked"
    article_id: str
    matched_by: MatchStrategy
    merged: MergedLineItem
    ocr_name_to_record: Optional[str] = Field(
        None,
        description="Raw OCR name the caller should append to the article's OCR name history",
    )


class Unlinked(BaseModel):
    """No unambiguous canonical article was found"""

    kind: Literal["unlinked"] = "unlinked"
    reason: UnlinkReason
    candidate_ids: List[str] = Field(
        default_factory=list, description="Competing article ids when the match was ambiguous"
    )


LinkDecision = Annotated[Union[Linked, Unlinked], Field(discriminator="kind")]


class DuplicateMatch(str, Enum):
    NAME = "name"
    ARTICLE_NUMBER = "article_number"
    NONE = "none"


class DuplicateCandidate(BaseModel):
    """A record about to be accepted: an import row or a manually entered article"""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "Tomaten passiert",
                "supplier_id": "sup-1",
                "article_number": "X1",
                "exclude_id": None,
            }
        }
    )

    id: Optional[str] = None
    name: str
    supplier_id: Optional[str] = None
    supplier_name: Optional[str] = None
    article_number: Optional[str] = None
    exclude_id: Optional[str] = Field(
        None, description="Id of the record being edited; never reported as its own duplicate"
    )

    @classmethod
    def from_article(
        cls, article: CanonicalArticle, exclude_self: bool = False
    ) -> "DuplicateCandidate":
        return cls(
            id=article.id,
            name=article.name,
            supplier_id=article.supplier_id,
            article_number=article.supplier_article_number,
            exclude_id=article.id if exclude_self else None,
        )


class DuplicateVerdict(BaseModel):
    """Outcome of a duplicate check"""

    is_duplicate: bool = False
    matched_on: DuplicateMatch = DuplicateMatch.NONE
    conflicting_record: Optional[Union[CanonicalArticle, DuplicateCandidate]] = None
    in_batch: bool = Field(
        default=False, description="True when the conflict is with a record accepted earlier in this run"
    )
