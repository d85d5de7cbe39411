"""Article import: header mapping, row transformation and duplicate filtering"""

import logging
import uuid
from typing import Callable, Dict, Iterable, List, Optional

from entity_resolution.config.config_loader import get_default_config
from entity_resolution.importing.loader import CellValue
from entity_resolution.importing.transformer import RowTransformer
from entity_resolution.matching.category_index import CategoryIndex
from entity_resolution.matching.duplicate_guard import check_duplicate
from entity_resolution.matching.field_mapper import map_headers, missing_required_fields
from entity_resolution.models.configs import ResolutionConfig
from entity_resolution.models.decisions import (
    DuplicateCandidate,
    FieldMapping,
    MappingResult,
)
from entity_resolution.models.importing import (
    ImportResult,
    SkippedRow,
    SkipReason,
    StoreSnapshot,
)

logger = logging.getLogger(__name__)


def apply_overrides(
    mapping: MappingResult,
    overrides: Dict[str, Optional[str]],
    source_headers: List[str],
) -> MappingResult:
    """
    Apply user corrections to a proposed mapping.

    Args:
        mapping: Proposed mapping
        overrides: Target field -> chosen header, or None to leave the field unmapped
        source_headers: Headers of the import file

    Returns:
        New MappingResult; user-chosen headers carry confidence 100

    Raises:
        ValueError: If a chosen header does not exist or is chosen for two fields
    """
    if not overrides:
        return mapping

    allowed = set(source_headers)
    if mapping.nutrition_cluster is not None:
        allowed.add(mapping.nutrition_cluster.label)

    mappings: List[FieldMapping] = []
    for current in mapping.mappings:
        if current.target_field not in overrides:
            mappings.append(current)
            continue

        header = overrides[current.target_field]
        if header is None:
            mappings.append(FieldMapping(target_field=current.target_field))
        elif header not in allowed:
            raise ValueError(f"Unknown header for {current.target_field}: {header!r}")
        elif header == current.source_header:
            mappings.append(current)
        else:
            mappings.append(
                FieldMapping(
                    target_field=current.target_field,
                    source_header=header,
                    confidence_score=100.0,
                )
            )

    used = [m.source_header for m in mappings if m.is_mapped]
    duplicated = sorted({h for h in used if used.count(h) > 1})
    if duplicated:
        raise ValueError(f"Headers assigned to more than one field: {duplicated}")

    return MappingResult(mappings=mappings, nutrition_cluster=mapping.nutrition_cluster)


def _is_empty_row(row: Dict[str, CellValue]) -> bool:
    return all(value is None or str(value).strip() == "" for value in row.values())


def import_articles(
    headers: List[str],
    rows: Iterable[Dict[str, CellValue]],
    store_snapshot: Optional[StoreSnapshot] = None,
    config: Optional[ResolutionConfig] = None,
    defaults: Optional[Dict[str, str]] = None,
    overrides: Optional[Dict[str, Optional[str]]] = None,
    id_factory: Optional[Callable[[], str]] = None,
) -> ImportResult:
    """
    Import articles from decoded table rows.

    The field mapper runs once for the headers. When a required field is neither
    mapped nor defaulted, no rows are processed and the result lists the missing
    fields. Otherwise every row is transformed; empty rows and incomplete candidates
    are skipped, and each remaining candidate is checked against the articles accepted
    so far in this run and against the stored articles before it is accepted.

    Args:
        headers: Source headers
        rows: Source rows (header -> cell text or number); may be wrapped in a progress bar
        store_snapshot: Stored articles and suppliers
        config: Resolution config (defaults to the packaged config)
        defaults: User default per target field; for supplier_article_number this is
            the pattern used to derive article numbers from names
        overrides: User corrections to the proposed mapping
        id_factory: Id generator for new articles and suppliers

    Returns:
        ImportResult
    """
    config = config or get_default_config()
    store_snapshot = store_snapshot or StoreSnapshot()
    defaults = defaults or {}
    id_factory = id_factory or (lambda: str(uuid.uuid4()))

    mapping = map_headers(headers, config)
    mapping = apply_overrides(mapping, overrides or {}, headers)

    missing = missing_required_fields(mapping, config.required_fields, defaults)
    if missing:
        logger.warning("Import blocked, required fields missing: %s", missing)
        return ImportResult(mapping=mapping, missing_required=missing)

    transformer = RowTransformer(
        mapping=mapping,
        config=config,
        suppliers=store_snapshot.suppliers,
        defaults=defaults,
        category_index=CategoryIndex.from_articles(
            store_snapshot.articles, config.categories.static
        ),
        id_factory=id_factory,
    )

    accepted = []
    batch: List[DuplicateCandidate] = []
    skipped: List[SkippedRow] = []
    total_rows = 0

    for row_index, row in enumerate(rows):
        total_rows += 1

        if _is_empty_row(row):
            skipped.append(SkippedRow(row_index=row_index, reason=SkipReason.EMPTY_ROW))
            continue

        candidate = transformer.transform(row)

        if not candidate.is_complete:
            logger.info("Row %d skipped, missing %s", row_index, candidate.missing_fields)
            skipped.append(
                SkippedRow(
                    row_index=row_index,
                    reason=SkipReason.MISSING_FIELDS,
                    name=candidate.name,
                    detail=", ".join(candidate.missing_fields),
                )
            )
            continue

        verdict = check_duplicate(
            candidate.to_duplicate_candidate(),
            batch,
            store_snapshot.articles,
            suppliers=[*store_snapshot.suppliers, *transformer.new_suppliers],
        )
        if verdict.is_duplicate:
            skipped.append(
                SkippedRow(
                    row_index=row_index,
                    reason=SkipReason.DUPLICATE_IN_BATCH
                    if verdict.in_batch
                    else SkipReason.DUPLICATE_IN_STORE,
                    name=candidate.name,
                    detail=f"same {verdict.matched_on.value}",
                )
            )
            continue

        article = candidate.to_article(id_factory())
        accepted.append(article)
        batch.append(DuplicateCandidate.from_article(article))

    # Suppliers created only for skipped rows are not kept
    referenced = {article.supplier_id for article in accepted}
    new_suppliers = [s for s in transformer.new_suppliers if s.id in referenced]

    logger.info(
        "Import finished: %d imported, %d skipped, %d new suppliers",
        len(accepted),
        len(skipped),
        len(new_suppliers),
    )

    return ImportResult(
        mapping=mapping,
        articles=accepted,
        new_suppliers=new_suppliers,
        skipped=skipped,
        total_rows=total_rows,
    )
