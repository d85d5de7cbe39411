"""Exact duplicate detection for imported and manually entered articles"""

import logging
from typing import Dict, Iterable, List, Optional, Tuple, Union

from entity_resolution.models.article import CanonicalArticle, CanonicalSupplier
from entity_resolution.models.decisions import (
    DuplicateCandidate,
    DuplicateMatch,
    DuplicateVerdict,
)

logger = logging.getLogger(__name__)

Record = Union[CanonicalArticle, DuplicateCandidate]


def _fold(value: Optional[str]) -> str:
    return (value or "").strip().lower()


def _record_fields(record: Record) -> Tuple[Optional[str], str, Optional[str], Optional[str], Optional[str]]:
    """(id, name, supplier_id, supplier_name, article_number) of a batch or store record"""
    if isinstance(record, CanonicalArticle):
        return record.id, record.name, record.supplier_id, None, record.supplier_article_number
    return record.id, record.name, record.supplier_id, record.supplier_name, record.article_number


def same_supplier(
    supplier_id_a: Optional[str],
    supplier_name_a: Optional[str],
    supplier_id_b: Optional[str],
    supplier_name_b: Optional[str],
    supplier_names: Optional[Dict[str, str]] = None,
) -> bool:
    """
    Compare the suppliers of two records.

    Ids are compared when both records have one. Otherwise the supplier names are
    compared case-insensitively, resolving a missing name through supplier_names.

    Args:
        supplier_id_a: Supplier id of the first record
        supplier_name_a: Supplier name of the first record
        supplier_id_b: Supplier id of the second record
        supplier_name_b: Supplier name of the second record
        supplier_names: Supplier id -> supplier name

    Returns:
        True if both records belong to the same supplier
    """
    if supplier_id_a and supplier_id_b:
        return supplier_id_a == supplier_id_b

    supplier_names = supplier_names or {}
    name_a = _fold(supplier_name_a or supplier_names.get(supplier_id_a or ""))
    name_b = _fold(supplier_name_b or supplier_names.get(supplier_id_b or ""))
    return bool(name_a) and name_a == name_b


def _find(
    candidate: DuplicateCandidate,
    records: Iterable[Record],
    match_on: DuplicateMatch,
    supplier_names: Dict[str, str],
) -> Optional[Record]:
    if match_on == DuplicateMatch.ARTICLE_NUMBER:
        needle = _fold(candidate.article_number)
    else:
        needle = _fold(candidate.name)
    if not needle:
        return None

    for record in records:
        record_id, name, supplier_id, supplier_name, article_number = _record_fields(record)

        if candidate.exclude_id is not None and record_id == candidate.exclude_id:
            continue

        value = article_number if match_on == DuplicateMatch.ARTICLE_NUMBER else name
        if _fold(value) != needle:
            continue

        if same_supplier(
            candidate.supplier_id,
            candidate.supplier_name,
            supplier_id,
            supplier_name,
            supplier_names,
        ):
            return record

    return None


def check_duplicate(
    candidate: DuplicateCandidate,
    batch: List[DuplicateCandidate],
    store: List[CanonicalArticle],
    suppliers: Optional[List[CanonicalSupplier]] = None,
) -> DuplicateVerdict:
    """
    Check whether a candidate collides with an accepted or stored record.

    Article-number matches (case-insensitive, same supplier) are reported before name
    matches (case-insensitive, same supplier). The current batch is searched before
    the store. The record whose id equals candidate.exclude_id is never reported.

    Args:
        candidate: Record about to be accepted
        batch: Candidates already accepted in this run
        store: Stored articles
        suppliers: Known suppliers, used to compare by supplier name when an id is missing

    Returns:
        DuplicateVerdict
    """
    supplier_names = {s.id: s.name for s in (suppliers or [])}

    for match_on in (DuplicateMatch.ARTICLE_NUMBER, DuplicateMatch.NAME):
        for records, in_batch in ((batch, True), (store, False)):
            conflict = _find(candidate, records, match_on, supplier_names)
            if conflict is not None:
                logger.info(
                    "Duplicate of %r on %s (%s)",
                    candidate.name,
                    match_on.value,
                    "batch" if in_batch else "store",
                )
                return DuplicateVerdict(
                    is_duplicate=True,
                    matched_on=match_on,
                    conflicting_record=conflict,
                    in_batch=in_batch,
                )

    return DuplicateVerdict()
