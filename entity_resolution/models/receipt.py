"""Models for the receipt review flow"""

from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel, Field

from entity_resolution.models.article import CanonicalArticle, ScannedLineItem
from entity_resolution.models.decisions import Linked, Resolved, Unlinked, Unresolved


class ReviewState(str, Enum):
    IDLE = "idle"
    INITIALIZING = "initializing"
    LINKING = "linking"
    EDITING = "editing"


class Receipt(BaseModel):
    """OCR output for one paper receipt"""

    supplier_name: Optional[str] = Field(None, description="Supplier as read from the receipt header")
    items: List[ScannedLineItem] = Field(default_factory=list)


class ReviewLine(BaseModel):
    """A line item under review together with its current link decision"""

    item: ScannedLineItem
    decision: Optional[Union[Linked, Unlinked]] = None

    @property
    def is_linked(self) -> bool:
        return isinstance(self.decision, Linked)


class CommitPlan(BaseModel):
    """Records to persist when a receipt review is committed"""

    supplier_id: Optional[str] = None
    supplier_resolution: Optional[Union[Resolved, Unresolved]] = None
    updated_articles: List[CanonicalArticle] = Field(default_factory=list)
    new_articles: List[CanonicalArticle] = Field(default_factory=list)
    incomplete_lines: List[int] = Field(
        default_factory=list, description="Indexes of lines left out because required values are missing"
    )

    @property
    def articles(self) -> List[CanonicalArticle]:
        return [*self.updated_articles, *self.new_articles]
