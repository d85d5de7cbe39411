"""Progressive word-by-word supplier resolution for receipt headers"""

import logging
from typing import List, Union

from entity_resolution.matching.normalizer import normalize
from entity_resolution.models.article import CanonicalSupplier
from entity_resolution.models.decisions import (
    Resolved,
    SupplierMatch,
    Unresolved,
    UnresolvedReason,
)

logger = logging.getLogger(__name__)


def find_exact_supplier(
    free_text: str, suppliers: List[CanonicalSupplier]
) -> Union[CanonicalSupplier, None]:
    """Return the first supplier whose name equals the text, ignoring case"""
    needle = free_text.strip().lower()
    for supplier in suppliers:
        if supplier.name.strip().lower() == needle:
            return supplier
    return None


def resolve_supplier(
    free_text: str, suppliers: List[CanonicalSupplier]
) -> Union[Resolved, Unresolved]:
    """
    Resolve a free-text supplier name (as read from a receipt) to a known supplier.

    An exact case-insensitive name match wins immediately. Otherwise the text is
    split into words and the search term grows one leading word at a time: the first
    term contained in exactly one supplier name resolves; a term contained in none
    stops the search (a longer term can only match fewer names); a term still shared
    by several names after the last word is ambiguous.

    Args:
        free_text: Supplier text from the receipt, e.g. "Metro AG Frischedienst"
        suppliers: Known suppliers

    Returns:
        Resolved or Unresolved
    """
    exact = find_exact_supplier(free_text, suppliers)
    if exact is not None:
        return Resolved(
            supplier_id=exact.id,
            supplier_name=exact.name,
            matched_by=SupplierMatch.EXACT,
        )

    # Punctuation-only tokens ("&", "-") would match every name
    words = [word for word in free_text.lower().split() if normalize(word)]
    if not words:
        return Unresolved(reason=UnresolvedReason.NO_TOKENS)

    normalized_names = [(supplier, normalize(supplier.name)) for supplier in suppliers]

    for word_count in range(1, len(words) + 1):
        search_term = normalize(" ".join(words[:word_count]))
        matches = [s for s, name in normalized_names if search_term in name]

        if len(matches) == 1:
            logger.debug(
                "Supplier %r resolved with %d word(s): %s", free_text, word_count, matches[0].name
            )
            return Resolved(
                supplier_id=matches[0].id,
                supplier_name=matches[0].name,
                matched_by=SupplierMatch.PROGRESSIVE,
                word_count=word_count,
            )

        if not matches:
            logger.debug("No supplier contains %r", search_term)
            return Unresolved(reason=UnresolvedReason.NO_MATCH)

        logger.debug("%d suppliers contain %r, widening search", len(matches), search_term)

    logger.info("Supplier %r is ambiguous after all %d words", free_text, len(words))
    return Unresolved(reason=UnresolvedReason.AMBIGUOUS)
