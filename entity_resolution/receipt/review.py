"""Receipt review session: supplier resolution, auto-linking, editing and commit"""

import logging
import uuid
from typing import Callable, Dict, List, Optional

from entity_resolution.config.config_loader import get_default_config
from entity_resolution.matching.article_linker import (
    link_article,
    merge_line_item,
    record_ocr_name,
)
from entity_resolution.matching.category_index import (
    CategoryIndex,
    category_from_longest_word,
    suggest_for_index,
)
from entity_resolution.matching.supplier_resolver import resolve_supplier
from entity_resolution.models.article import (
    CanonicalArticle,
    CanonicalSupplier,
    MergedLineItem,
    ScannedLineItem,
)
from entity_resolution.models.configs import ResolutionConfig
from entity_resolution.models.decisions import (
    Linked,
    MatchStrategy,
    Resolved,
    Unlinked,
    UnlinkReason,
)
from entity_resolution.models.receipt import CommitPlan, Receipt, ReviewLine, ReviewState

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS = {
    ReviewState.IDLE: {ReviewState.INITIALIZING},
    ReviewState.INITIALIZING: {ReviewState.LINKING, ReviewState.IDLE},
    ReviewState.LINKING: {ReviewState.EDITING, ReviewState.IDLE},
    ReviewState.EDITING: {ReviewState.LINKING, ReviewState.IDLE},
}

# Merged values that belong to the purchase, not to the article
SCAN_ONLY_FIELDS = {"linked_article_id", "raw_ocr_name", "quantity", "unit_price", "total_price"}


class InvalidTransition(RuntimeError):
    """Raised when a session operation is called in a state that does not allow it"""


def prepare_item(item: ScannedLineItem) -> ScannedLineItem:
    """
    Fill the fields OCR leaves implicit.

    The raw OCR name and the display name default to each other, and a missing unit
    price is derived from the line total and the quantity.
    """
    updates = {}
    if not item.raw_ocr_name and item.name:
        updates["raw_ocr_name"] = item.name
    if not item.name and item.raw_ocr_name:
        updates["name"] = item.raw_ocr_name
    if not item.unit_price and item.total_price and item.quantity:
        updates["unit_price"] = round(item.total_price / item.quantity, 4)
    return item.model_copy(update=updates) if updates else item


class ReceiptReviewSession:
    """
    One review of one scanned receipt.

    IDLE -> INITIALIZING -> LINKING -> EDITING -> IDLE. Choosing another supplier while
    editing goes back through LINKING. Line edits are only accepted while EDITING, so
    automatic linking never runs on top of a user edit.
    """

    def __init__(
        self,
        config: Optional[ResolutionConfig] = None,
        id_factory: Optional[Callable[[], str]] = None,
    ):
        self.config = config or get_default_config()
        self.id_factory = id_factory or (lambda: str(uuid.uuid4()))

        self.state = ReviewState.IDLE
        self.suppliers: List[CanonicalSupplier] = []
        self.catalog: List[CanonicalArticle] = []
        self.supplier_resolution = None
        self.supplier_id: Optional[str] = None
        self.lines: List[ReviewLine] = []

    def _transition(self, target: ReviewState) -> None:
        if target not in ALLOWED_TRANSITIONS[self.state]:
            raise InvalidTransition(f"Cannot go from {self.state.value} to {target.value}")
        logger.debug("Review session %s -> %s", self.state.value, target.value)
        self.state = target

    def _require(self, state: ReviewState, operation: str) -> None:
        if self.state != state:
            raise InvalidTransition(f"{operation} requires state {state.value}, not {self.state.value}")

    def _article(self, article_id: str) -> Optional[CanonicalArticle]:
        for article in self.catalog:
            if article.id == article_id:
                return article
        return None

    def _manual_link(self, item: ScannedLineItem, article: CanonicalArticle) -> Linked:
        ocr_name = item.raw_ocr_name or None
        if ocr_name in article.ocr_name_history:
            ocr_name = None
        return Linked(
            article_id=article.id,
            matched_by=MatchStrategy.MANUAL,
            merged=merge_line_item(item, article),
            ocr_name_to_record=ocr_name,
        )

    def _link_all(self) -> None:
        """Link every line that has no link yet"""
        for index, line in enumerate(self.lines):
            if line.is_linked:
                continue
            if line.item.linked_article_id:
                article = self._article(line.item.linked_article_id)
                if article is not None:
                    line.decision = self._manual_link(line.item, article)
                    continue
            decision = link_article(line.item, self.supplier_id, self.catalog)
            if isinstance(decision, Linked):
                line.item = line.item.model_copy(
                    update={"linked_article_id": decision.article_id, "name": decision.merged.name}
                )
            else:
                logger.debug("Line %d not linked: %s", index, decision.reason.value)
            line.decision = decision

    def _unlink_other_suppliers(self) -> None:
        """Drop automatic links to articles that do not belong to the current supplier"""
        for index, line in enumerate(self.lines):
            if not line.is_linked or line.decision.matched_by == MatchStrategy.MANUAL:
                continue
            article = self._article(line.decision.article_id)
            if article is not None and article.supplier_id == self.supplier_id:
                continue
            logger.debug("Line %d unlinked from %s after supplier change", index, line.decision.article_id)
            line.item = line.item.model_copy(
                update={"linked_article_id": None, "name": line.item.raw_ocr_name or line.item.name}
            )
            line.decision = None

    def open(
        self,
        receipt: Receipt,
        suppliers: List[CanonicalSupplier],
        catalog: List[CanonicalArticle],
    ) -> "ReceiptReviewSession":
        """
        Start reviewing a receipt.

        Args:
            receipt: OCR output
            suppliers: Known suppliers
            catalog: Snapshot of canonical articles

        Returns:
            self, in state EDITING

        Raises:
            InvalidTransition: If the session is not IDLE
        """
        self._transition(ReviewState.INITIALIZING)
        try:
            self.suppliers = list(suppliers)
            self.catalog = list(catalog)
            self.lines = [ReviewLine(item=prepare_item(item)) for item in receipt.items]

            self.supplier_resolution = None
            self.supplier_id = None
            if receipt.supplier_name:
                self.supplier_resolution = resolve_supplier(receipt.supplier_name, self.suppliers)
                if isinstance(self.supplier_resolution, Resolved):
                    self.supplier_id = self.supplier_resolution.supplier_id
                else:
                    logger.info(
                        "Supplier %r not resolved: %s",
                        receipt.supplier_name,
                        self.supplier_resolution.reason.value,
                    )

            self._transition(ReviewState.LINKING)
            self._link_all()
        except Exception:
            self.state = ReviewState.IDLE
            raise

        self._transition(ReviewState.EDITING)
        return self

    def select_supplier(self, supplier_id: str) -> None:
        """
        Set the receipt supplier by hand and re-link the lines.

        Automatic links to articles of another supplier are dropped first; manual links
        are kept. Every unlinked line is then linked against the new supplier.

        Raises:
            InvalidTransition: If the session is not EDITING
            ValueError: If the supplier is unknown
        """
        self._require(ReviewState.EDITING, "select_supplier")
        if not any(s.id == supplier_id for s in self.suppliers):
            raise ValueError(f"Unknown supplier id: {supplier_id}")

        self._transition(ReviewState.LINKING)
        self.supplier_id = supplier_id
        self._unlink_other_suppliers()
        self._link_all()
        self._transition(ReviewState.EDITING)

    def update_item(self, index: int, **changes) -> ReviewLine:
        """
        Edit one line.

        Setting linked_article_id links the line to that article by hand; setting it
        to None removes the link.

        Args:
            index: Line index
            **changes: ScannedLineItem fields to change

        Returns:
            The updated ReviewLine

        Raises:
            InvalidTransition: If the session is not EDITING
            IndexError: If there is no such line
            ValueError: If a field or the linked article is unknown
        """
        self._require(ReviewState.EDITING, "update_item")
        line = self.lines[index]

        unknown = set(changes) - set(ScannedLineItem.model_fields)
        if unknown:
            raise ValueError(f"Unknown line item fields: {sorted(unknown)}")

        item = ScannedLineItem(**{**line.item.model_dump(), **changes})

        if "linked_article_id" in changes:
            if item.linked_article_id is None:
                line.decision = Unlinked(reason=UnlinkReason.NO_MATCH)
            else:
                article = self._article(item.linked_article_id)
                if article is None:
                    raise ValueError(f"Unknown article id: {item.linked_article_id}")
                if "name" not in changes:
                    item = item.model_copy(update={"name": article.name})
                line.decision = self._manual_link(item, article)
        elif line.is_linked:
            article = self._article(line.decision.article_id)
            if article is not None:
                line.decision = line.decision.model_copy(
                    update={"merged": merge_line_item(item, article)}
                )

        line.item = item
        return line

    def is_complete(self, line: ReviewLine) -> bool:
        """A line can be saved when it has a name, a unit, a positive price and a supplier"""
        if not self.supplier_id:
            return False
        if line.is_linked:
            merged = line.decision.merged
            return bool(merged.name.strip()) and bool(merged.bundle_unit) and merged.unit_price > 0
        name = line.item.name or line.item.raw_ocr_name or ""
        return bool(name.strip()) and line.item.unit_price > 0

    def _suggest_category(self, name: str) -> str:
        categories = self.config.categories
        by_word = category_from_longest_word(name, categories.static)
        if by_word:
            return by_word
        index = CategoryIndex.from_articles(self.catalog, categories.static)
        return suggest_for_index(name, index, categories)

    def _updated_article(self, line: ReviewLine, article: CanonicalArticle) -> CanonicalArticle:
        merged = merge_line_item(line.item, article)
        updates = {
            field: getattr(merged, field)
            for field in MergedLineItem.model_fields
            if field not in SCAN_ONLY_FIELDS
        }
        updates["name"] = (line.item.name or "").strip() or article.name
        updates["content"] = line.item.content or article.content
        if merged.unit_price:
            updates["bundle_price"] = merged.unit_price
            updates["price_per_unit"] = round(merged.unit_price / (updates["content"] or 1), 4)

        updated = article.model_copy(update=updates)
        return record_ocr_name(updated, line.item.raw_ocr_name)

    def _new_article(self, line: ReviewLine) -> CanonicalArticle:
        item = line.item
        defaults = self.config.defaults
        name = (item.name or item.raw_ocr_name or "").strip()
        content = item.content or defaults.content

        return CanonicalArticle(
            id=self.id_factory(),
            name=name,
            supplier_id=self.supplier_id,
            supplier_article_number=item.article_number or None,
            ocr_name_history=[item.raw_ocr_name] if item.raw_ocr_name else [],
            category=item.category or self._suggest_category(name),
            bundle_unit=item.bundle_unit or defaults.bundle_unit,
            bundle_price=item.unit_price,
            bundle_ean_code=item.bundle_ean_code or "",
            content=content,
            content_unit=item.content_unit or defaults.content_unit,
            content_ean_code=item.content_ean_code or "",
            price_per_unit=round(item.unit_price / (content or 1), 4),
            vat_rate=item.vat_rate if item.vat_rate is not None else defaults.vat_rate,
            allergens=item.allergens or [],
            additives=item.additives or [],
            ingredients=item.ingredients or "",
            nutrition=item.nutrition,
            notes=item.notes or "",
        )

    def commit(self) -> CommitPlan:
        """
        Finish the review and build the records to persist.

        Complete linked lines update their article (scan values override master values
        where set, the raw OCR name is added to the OCR name history). Complete unlinked
        lines become new articles whose history starts with their raw OCR name. A
        linked line whose article has disappeared from the catalog becomes a new
        article as well. Incomplete lines are reported and left out.

        Returns:
            CommitPlan

        Raises:
            InvalidTransition: If the session is not EDITING
        """
        self._require(ReviewState.EDITING, "commit")

        updated: Dict[str, CanonicalArticle] = {}
        new_articles: List[CanonicalArticle] = []
        incomplete: List[int] = []

        for index, line in enumerate(self.lines):
            if not self.is_complete(line):
                incomplete.append(index)
                continue

            article = self._article(line.decision.article_id) if line.is_linked else None
            if article is None:
                if line.is_linked:
                    logger.warning(
                        "Linked article %s not found, creating a new article",
                        line.decision.article_id,
                    )
                new_articles.append(self._new_article(line))
                continue

            # Several lines may link to the same article; later lines build on earlier ones
            base = updated.get(article.id, article)
            updated[article.id] = self._updated_article(line, base)

        plan = CommitPlan(
            supplier_id=self.supplier_id,
            supplier_resolution=self.supplier_resolution,
            updated_articles=list(updated.values()),
            new_articles=new_articles,
            incomplete_lines=incomplete,
        )
        self._transition(ReviewState.IDLE)
        logger.info(
            "Receipt committed: %d updated, %d new, %d incomplete",
            len(plan.updated_articles),
            len(plan.new_articles),
            len(plan.incomplete_lines),
        )
        return plan

    def cancel(self) -> None:
        """Discard the review"""
        self._require(ReviewState.EDITING, "cancel")
        self._transition(ReviewState.IDLE)
        self.lines = []
