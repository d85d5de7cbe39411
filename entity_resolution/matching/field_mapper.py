"""Greedy source-header to target-field mapping for article imports"""

import logging
from typing import Dict, List, Optional

from entity_resolution.matching.normalizer import normalize, similarity
from entity_resolution.models.configs import ResolutionConfig, ScoringConfig
from entity_resolution.models.decisions import (
    FieldMapping,
    MappingResult,
    NutritionClusterOption,
)

logger = logging.getLogger(__name__)


def score_pair(
    normalized_header: str, normalized_synonym: str, scoring: ScoringConfig
) -> float:
    """
    Score one normalized header against one normalized synonym.

    - exact match: scoring.exact_score
    - one contains the other: containment_weight * shorter / longer
    - otherwise: similarity_weight * ratio, if ratio > similarity_threshold

    Args:
        normalized_header: Normalized source header
        normalized_synonym: Normalized synonym term
        scoring: Scoring constants

    Returns:
        Score between 0 and scoring.exact_score
    """
    if not normalized_header or not normalized_synonym:
        return 0.0

    if normalized_header == normalized_synonym:
        return scoring.exact_score

    if normalized_synonym in normalized_header or normalized_header in normalized_synonym:
        shorter = min(len(normalized_header), len(normalized_synonym))
        longer = max(len(normalized_header), len(normalized_synonym))
        return scoring.containment_weight * shorter / longer

    ratio = similarity(normalized_header, normalized_synonym)
    if ratio > scoring.similarity_threshold:
        return scoring.similarity_weight * ratio

    return 0.0


def score_header(header: str, synonyms: List[str], scoring: ScoringConfig) -> float:
    """Best score of a raw header over all synonyms of one field"""
    normalized_header = normalize(header)
    best = 0.0
    for synonym in synonyms:
        best = max(best, score_pair(normalized_header, normalize(synonym), scoring))
    return best


def detect_nutrition_cluster(
    source_headers: List[str], vocabulary: List[str]
) -> Optional[NutritionClusterOption]:
    """
    Collect every header that contains a nutrition term.

    Args:
        source_headers: Headers of the import file
        vocabulary: Nutrition terms in all supported locales

    Returns:
        NutritionClusterOption, or None if no header looks like a nutrient
    """
    terms = [t for t in (normalize(term) for term in vocabulary) if t]
    members = [
        header
        for header in source_headers
        if any(term in normalize(header) for term in terms)
    ]
    if not members:
        return None
    return NutritionClusterOption(headers=members)


def map_fields(
    target_fields: List[str],
    synonyms: Dict[str, List[str]],
    source_headers: List[str],
    scoring: Optional[ScoringConfig] = None,
    nutrition_field: Optional[str] = None,
    nutrition_vocabulary: Optional[List[str]] = None,
) -> MappingResult:
    """
    Map import target fields to source headers.

    Fields are resolved one by one in the given priority order; each takes the
    best-scoring header that no earlier field has claimed. A header scoring at or
    below the acceptance threshold leaves the field unmapped. Ties go to the header
    that appears first. Nothing is renegotiated afterwards.

    Headers that look like nutrients are bundled into a single NutritionClusterOption.
    For the nutrition field they compete only through that cluster (scored with the
    best of its members); every other field may still claim them individually.

    Args:
        target_fields: Target field ids, most important first
        synonyms: Target field id -> synonym terms
        source_headers: Headers of the import file
        scoring: Scoring constants (defaults to ScoringConfig())
        nutrition_field: Target field id that may take the nutrition cluster
        nutrition_vocabulary: Terms used to detect nutrition columns

    Returns:
        MappingResult with one FieldMapping per target field
    """
    scoring = scoring or ScoringConfig()

    # Unique headers, first occurrence wins
    headers: List[str] = list(dict.fromkeys(source_headers))

    cluster = None
    if nutrition_field and nutrition_vocabulary:
        cluster = detect_nutrition_cluster(headers, nutrition_vocabulary)
        if cluster:
            logger.debug("Nutrition cluster detected: %s", cluster.headers)

    used: set = set()
    mappings: List[FieldMapping] = []

    for field in target_fields:
        field_synonyms = synonyms.get(field, [])
        best_header: Optional[str] = None
        best_score = 0.0

        is_cluster_field = cluster is not None and field == nutrition_field
        candidates = [
            h
            for h in headers
            if h not in used and not (is_cluster_field and h in cluster.headers)
        ]

        for header in candidates:
            score = score_header(header, field_synonyms, scoring)
            if score > best_score:
                best_score = score
                best_header = header

        if is_cluster_field and cluster.label not in used:
            cluster_score = max(
                score_header(member, field_synonyms, scoring) for member in cluster.headers
            )
            if cluster_score > best_score:
                best_score = cluster_score
                best_header = cluster.label

        if best_header is not None and best_score > scoring.acceptance_threshold:
            used.add(best_header)
            mappings.append(
                FieldMapping(
                    target_field=field,
                    source_header=best_header,
                    confidence_score=min(best_score, 100.0),
                )
            )
            logger.debug("Mapped %s -> %r (%.1f)", field, best_header, best_score)
        else:
            mappings.append(FieldMapping(target_field=field))
            logger.debug("No header for %s (best score %.1f)", field, best_score)

    return MappingResult(mappings=mappings, nutrition_cluster=cluster)


def map_headers(
    source_headers: List[str],
    config: ResolutionConfig,
    target_fields: Optional[List[str]] = None,
) -> MappingResult:
    """
    Map headers using a ResolutionConfig.

    Args:
        source_headers: Headers of the import file
        config: Resolution configuration (synonyms, scoring, nutrition vocabulary)
        target_fields: Priority order to use instead of config.field_priority

    Returns:
        MappingResult
    """
    return map_fields(
        target_fields=target_fields if target_fields is not None else config.field_priority,
        synonyms=config.synonyms,
        source_headers=source_headers,
        scoring=config.scoring,
        nutrition_field=config.nutrition.field,
        nutrition_vocabulary=config.nutrition.vocabulary,
    )


def missing_required_fields(
    result: MappingResult,
    required_fields: List[str],
    defaults: Optional[Dict[str, str]] = None,
) -> List[str]:
    """
    List required fields that are neither mapped nor given a default value.

    Args:
        result: Mapping result (possibly edited by the user)
        required_fields: Field ids that must be populated
        defaults: User-supplied default values per field

    Returns:
        Required field ids still missing (empty list means the import may run)
    """
    defaults = defaults or {}
    missing = []
    for field in required_fields:
        mapping = result.get(field)
        if mapping is not None and mapping.is_mapped:
            continue
        if str(defaults.get(field, "") or "").strip():
            continue
        missing.append(field)
    return missing
