"""Category index built from the current article set, plus category suggestion"""

import logging
import unicodedata
from collections import Counter
from typing import Dict, Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from entity_resolution.matching.normalizer import similarity
from entity_resolution.models.article import CanonicalArticle
from entity_resolution.models.configs import CategoryConfig

logger = logging.getLogger(__name__)


def _sort_key(name: str) -> str:
    # German collation: umlauts sort with their base letter
    decomposed = unicodedata.normalize("NFKD", name)
    return "".join(c for c in decomposed if not unicodedata.combining(c)).casefold()


class CategoryEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    is_custom: bool = False
    usage_count: int = 0


class CategoryStats(BaseModel):
    total: int
    static: int
    custom: int
    used: int
    unused: int


class CategoryIndex(BaseModel):
    """
    Immutable snapshot of static and custom categories with usage counts.

    Build a new index with from_articles() whenever the article set changes; the index
    itself is never updated in place.
    """

    model_config = ConfigDict(frozen=True)

    entries: List[CategoryEntry] = Field(default_factory=list)

    @classmethod
    def from_articles(
        cls, articles: Iterable[CanonicalArticle], static_categories: Iterable[str]
    ) -> "CategoryIndex":
        """
        Build the index from articles and the built-in category list.

        Static categories come first, then custom ones (used by an article but not
        built in), each group sorted alphabetically.

        Args:
            articles: Current articles
            static_categories: Built-in category names

        Returns:
            CategoryIndex
        """
        usage = Counter(article.category for article in articles if article.category)
        static = list(dict.fromkeys(static_categories))

        entries = [
            CategoryEntry(name=name, is_custom=False, usage_count=usage.get(name, 0))
            for name in sorted(static, key=_sort_key)
        ]
        custom = [name for name in usage if name not in static]
        entries.extend(
            CategoryEntry(name=name, is_custom=True, usage_count=usage[name])
            for name in sorted(custom, key=_sort_key)
        )
        return cls(entries=entries)

    def _entry(self, name: str) -> Optional[CategoryEntry]:
        for entry in self.entries:
            if entry.name == name:
                return entry
        return None

    @property
    def all_categories(self) -> List[str]:
        return [entry.name for entry in self.entries]

    @property
    def static_categories(self) -> List[str]:
        return [entry.name for entry in self.entries if not entry.is_custom]

    @property
    def custom_categories(self) -> List[str]:
        return [entry.name for entry in self.entries if entry.is_custom]

    @property
    def used_categories(self) -> List[str]:
        return [entry.name for entry in self.entries if entry.usage_count > 0]

    def usage_count(self, name: str) -> int:
        entry = self._entry(name)
        return entry.usage_count if entry else 0

    def exists(self, name: str) -> bool:
        return self._entry(name) is not None

    def is_custom(self, name: str) -> bool:
        entry = self._entry(name)
        return entry.is_custom if entry else False

    def filter(self, term: str, limit: int = 10) -> List[str]:
        """Categories containing the term (case-insensitive), at most limit of them"""
        needle = term.lower()
        return [name for name in self.all_categories if needle in name.lower()][:limit]

    def stats(self) -> CategoryStats:
        total = len(self.entries)
        used = len(self.used_categories)
        custom = len(self.custom_categories)
        return CategoryStats(
            total=total,
            static=total - custom,
            custom=custom,
            used=used,
            unused=total - used,
        )


def suggest_category(
    article_name: str,
    custom_categories: List[str],
    rules: Dict[str, List[str]],
    threshold: float = 0.7,
) -> str:
    """
    Suggest a category for an article name.

    Custom categories are tried first: the first one whose similarity to the lowercased
    name exceeds the threshold wins. Otherwise the first rule with a keyword contained
    in the name wins.

    Args:
        article_name: Article name
        custom_categories: User-defined categories in preference order
        rules: Category -> keywords, in priority order
        threshold: Minimum similarity for a custom category

    Returns:
        Suggested category, or "" when nothing fits
    """
    name = article_name.lower()
    if not name.strip():
        return ""

    for category in custom_categories:
        if similarity(name, category.lower()) > threshold:
            logger.debug("Custom category %r suggested for %r", category, article_name)
            return category

    for category, keywords in rules.items():
        if any(keyword.lower() in name for keyword in keywords):
            return category

    return ""


def suggest_for_index(article_name: str, index: CategoryIndex, config: CategoryConfig) -> str:
    """suggest_category using the custom categories of an index and the configured rules"""
    return suggest_category(
        article_name,
        index.custom_categories,
        config.rules,
        config.custom_similarity_threshold,
    )


def longest_word(text: str) -> str:
    """Longest whitespace-separated word (the first one on ties)"""
    words = text.split()
    if not words:
        return ""
    return max(words, key=len)


def category_from_longest_word(article_name: str, static_categories: List[str]) -> Optional[str]:
    """
    Match the longest word of a name against the built-in categories.

    Args:
        article_name: Article name, e.g. "Kartoffeln mehlig"
        static_categories: Built-in category names

    Returns:
        The category equal to the longest word (ignoring case), or None
    """
    word = longest_word(article_name).lower()
    if not word:
        return None
    for category in static_categories:
        if category.lower() == word:
            return category
    return None
