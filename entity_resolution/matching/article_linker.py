"""Linking scanned receipt lines to canonical articles"""

import logging
from typing import List, Optional, Union

from entity_resolution.matching.normalizer import normalize
from entity_resolution.models.article import (
    CanonicalArticle,
    MergedLineItem,
    ScannedLineItem,
)
from entity_resolution.models.decisions import (
    Linked,
    MatchStrategy,
    Unlinked,
    UnlinkReason,
)

logger = logging.getLogger(__name__)

# Descriptive fields where a non-empty scan value overrides the master record
MASTER_FIELDS = (
    "category",
    "bundle_unit",
    "bundle_ean_code",
    "content_unit",
    "content_ean_code",
    "vat_rate",
    "allergens",
    "additives",
    "ingredients",
    "nutrition",
    "notes",
)


def _has_value(value) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, (list, tuple, set)):
        return len(value) > 0
    return True


def match_by_article_number(
    article_number: str, supplier_id: str, catalog: List[CanonicalArticle]
) -> List[CanonicalArticle]:
    """Articles of the supplier with exactly this article number (case-sensitive)"""
    return [
        article
        for article in catalog
        if article.supplier_id == supplier_id
        and article.supplier_article_number == article_number
    ]


def match_by_ocr_name(
    raw_ocr_name: str, supplier_id: str, catalog: List[CanonicalArticle]
) -> List[CanonicalArticle]:
    """Articles of the supplier that were already seen under this OCR name"""
    needle = normalize(raw_ocr_name)
    if not needle:
        return []
    return [
        article
        for article in catalog
        if article.supplier_id == supplier_id
        and needle in {normalize(name) for name in article.ocr_name_history}
    ]


def merge_line_item(item: ScannedLineItem, article: CanonicalArticle) -> MergedLineItem:
    """
    Merge a scanned line with the master data of its linked article.

    Descriptive fields come from the article unless the scan carries a non-empty
    value. Price and quantity always come from the scan. Name, content and supplier
    article number come from the article when it has them.

    Args:
        item: Scanned line item
        article: Linked canonical article

    Returns:
        MergedLineItem
    """
    merged = {
        "linked_article_id": article.id,
        "name": article.name or item.name or item.raw_ocr_name or "",
        "raw_ocr_name": item.raw_ocr_name,
        "supplier_id": article.supplier_id,
        "supplier_article_number": article.supplier_article_number or item.article_number,
        "content": article.content or item.content or 1.0,
        "quantity": item.quantity,
        "unit_price": item.unit_price,
        "total_price": item.total_price,
    }

    for field in MASTER_FIELDS:
        scan_value = getattr(item, field)
        merged[field] = scan_value if _has_value(scan_value) else getattr(article, field)

    return MergedLineItem(**merged)


def link_article(
    item: ScannedLineItem,
    resolved_supplier_id: Optional[str],
    catalog: List[CanonicalArticle],
) -> Union[Linked, Unlinked]:
    """
    Find the one canonical article a scanned line refers to.

    Strategies run in order; the first that yields exactly one article links it,
    one that yields none falls through, and one that yields several stops with
    Unlinked(AMBIGUOUS) rather than guessing:

    1. supplier + article number (case-sensitive exact)
    2. supplier + normalized raw OCR name found in the article's OCR name history

    Args:
        item: Scanned line item
        resolved_supplier_id: Supplier of the receipt (linking is scoped to it)
        catalog: Snapshot of canonical articles

    Returns:
        Linked or Unlinked
    """
    if not resolved_supplier_id:
        return Unlinked(reason=UnlinkReason.NO_MATCH)

    strategies = []
    if _has_value(item.article_number):
        strategies.append(
            (
                MatchStrategy.ARTICLE_NUMBER,
                lambda: match_by_article_number(item.article_number, resolved_supplier_id, catalog),
            )
        )
    if _has_value(item.raw_ocr_name):
        strategies.append(
            (
                MatchStrategy.OCR_NAME,
                lambda: match_by_ocr_name(item.raw_ocr_name, resolved_supplier_id, catalog),
            )
        )

    for strategy, find in strategies:
        candidates = find()

        if len(candidates) > 1:
            logger.warning(
                "Ambiguous %s match for %r: %s",
                strategy.value,
                item.raw_ocr_name or item.article_number,
                [c.id for c in candidates],
            )
            return Unlinked(
                reason=UnlinkReason.AMBIGUOUS,
                candidate_ids=[c.id for c in candidates],
            )

        if len(candidates) == 1:
            article = candidates[0]
            logger.debug("Linked %r to %s via %s", item.raw_ocr_name, article.id, strategy.value)
            ocr_name = item.raw_ocr_name if _has_value(item.raw_ocr_name) else None
            if ocr_name in article.ocr_name_history:
                ocr_name = None
            return Linked(
                article_id=article.id,
                matched_by=strategy,
                merged=merge_line_item(item, article),
                ocr_name_to_record=ocr_name,
            )

    return Unlinked(reason=UnlinkReason.NO_MATCH)


def record_ocr_name(article: CanonicalArticle, ocr_name: Optional[str]) -> CanonicalArticle:
    """
    Return a copy of the article with the OCR name appended to its history.

    Args:
        article: Canonical article
        ocr_name: Raw OCR name returned by a Linked decision

    Returns:
        Updated copy (the same article if the name is empty or already known)
    """
    if not _has_value(ocr_name) or ocr_name in article.ocr_name_history:
        return article
    return article.model_copy(
        update={"ocr_name_history": [*article.ocr_name_history, ocr_name]}
    )
