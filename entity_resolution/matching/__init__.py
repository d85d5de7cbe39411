"""Matching primitives: normalization, header mapping, supplier/article resolution"""

from .article_linker import link_article, merge_line_item, record_ocr_name
from .category_index import (
    CategoryIndex,
    category_from_longest_word,
    suggest_category,
    suggest_for_index,
)
from .duplicate_guard import check_duplicate, same_supplier
from .field_mapper import (
    detect_nutrition_cluster,
    map_fields,
    map_headers,
    missing_required_fields,
    score_header,
)
from .normalizer import normalize, normalized_equals, similarity
from .supplier_resolver import find_exact_supplier, resolve_supplier

__all__ = [
    # Normalization
    "normalize",
    "normalized_equals",
    "similarity",
    # Field mapping
    "map_fields",
    "map_headers",
    "score_header",
    "detect_nutrition_cluster",
    "missing_required_fields",
    # Suppliers
    "find_exact_supplier",
    "resolve_supplier",
    # Articles
    "link_article",
    "merge_line_item",
    "record_ocr_name",
    "check_duplicate",
    "same_supplier",
    # Categories
    "CategoryIndex",
    "suggest_category",
    "suggest_for_index",
    "category_from_longest_word",
]
