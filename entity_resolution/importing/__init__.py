"""Tabular article import"""

from entity_resolution.importing.loader import get_table_stats, load_table
from entity_resolution.importing.pipeline import apply_overrides, import_articles
from entity_resolution.importing.transformer import (
    RowTransformer,
    extract_nutrition,
    generate_article_number,
    parse_german_number,
    parse_vat_rate,
    split_list,
)

__all__ = [
    "load_table",
    "get_table_stats",
    "import_articles",
    "apply_overrides",
    "RowTransformer",
    "parse_german_number",
    "parse_vat_rate",
    "split_list",
    "generate_article_number",
    "extract_nutrition",
]
