"""Unit tests for the category index and category suggestion"""

import pytest

from entity_resolution.matching.category_index import (
    CategoryIndex,
    category_from_longest_word,
    longest_word,
    suggest_category,
    suggest_for_index,
)
from entity_resolution.models.article import CanonicalArticle


@pytest.fixture
def index():
    articles = [
        CanonicalArticle(id="1", name="Karotten", supplier_id="s1", category="Gemüse"),
        CanonicalArticle(id="2", name="Lauch", supplier_id="s1", category="Gemüse"),
        CanonicalArticle(id="3", name="Oliven", supplier_id="s1", category="Feinkost"),
        CanonicalArticle(id="4", name="Brötchen", supplier_id="s1", category="Backwaren"),
        CanonicalArticle(id="5", name="Sonstiges", supplier_id="s1"),
    ]
    return CategoryIndex.from_articles(articles, ["Obst", "Gemüse", "Äpfel"])


class TestCategoryIndex:
    @pytest.mark.unit
    def test_static_first_then_custom_each_alphabetical(self, index):
        assert index.all_categories == ["Äpfel", "Gemüse", "Obst", "Backwaren", "Feinkost"]
        assert index.static_categories == ["Äpfel", "Gemüse", "Obst"]
        assert index.custom_categories == ["Backwaren", "Feinkost"]

    @pytest.mark.unit
    def test_usage(self, index):
        assert index.usage_count("Gemüse") == 2
        assert index.usage_count("Obst") == 0
        assert index.usage_count("Unbekannt") == 0
        assert index.used_categories == ["Gemüse", "Backwaren", "Feinkost"]

    @pytest.mark.unit
    def test_lookup(self, index):
        assert index.exists("Feinkost")
        assert not index.exists("feinkost")
        assert index.is_custom("Feinkost")
        assert not index.is_custom("Obst")
        assert not index.is_custom("Unbekannt")

    @pytest.mark.unit
    def test_filter(self, index):
        assert index.filter("KOST") == ["Feinkost"]
        assert index.filter("e", limit=2) == ["Äpfel", "Gemüse"]

    @pytest.mark.unit
    def test_stats(self, index):
        stats = index.stats()

        assert stats.total == 5
        assert stats.static == 3
        assert stats.custom == 2
        assert stats.used == 3
        assert stats.unused == 2

    @pytest.mark.unit
    def test_index_is_immutable(self, index):
        with pytest.raises(Exception):
            index.entries = []


class TestSuggestCategory:
    @pytest.mark.unit
    def test_keyword_rule(self, config):
        assert suggest_category("Tomaten passiert", [], config.categories.rules) == "Tomaten"
        assert suggest_category("Spaghetti No. 5", [], config.categories.rules) == "Nudeln"

    @pytest.mark.unit
    def test_custom_category_first(self, config):
        rules = config.categories.rules
        assert suggest_category("feinkosst", ["Feinkost"], rules) == "Feinkost"

    @pytest.mark.unit
    def test_rule_order_decides(self, config):
        # "Käse" is listed before "Butter"
        assert suggest_category("Käse mit Butter", [], config.categories.rules) == "Käse"

    @pytest.mark.unit
    def test_nothing_fits(self, config):
        assert suggest_category("Servietten weiß", [], config.categories.rules) == ""
        assert suggest_category("", ["Feinkost"], config.categories.rules) == ""

    @pytest.mark.unit
    def test_suggest_for_index(self, index, config):
        assert suggest_for_index("Backware", index, config.categories) == "Backwaren"


class TestLongestWord:
    @pytest.mark.unit
    def test_longest_word(self):
        assert longest_word("Bio Kartoffeln mehlig") == "Kartoffeln"
        assert longest_word("") == ""

    @pytest.mark.unit
    def test_category_from_longest_word(self, config):
        static = config.categories.static

        assert category_from_longest_word("Kartoffeln mehlig", static) == "Kartoffeln"
        assert category_from_longest_word("bio TOMATEN", static) == "Tomaten"
        assert category_from_longest_word("Frische Kartoffeln festkochend", static) is None
        assert category_from_longest_word("", static) is None
