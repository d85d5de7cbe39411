"""Unit tests for linking scanned receipt lines to canonical articles"""

import pytest

from entity_resolution.matching.article_linker import (
    link_article,
    merge_line_item,
    record_ocr_name,
)
from entity_resolution.models.article import CanonicalArticle, ScannedLineItem
from entity_resolution.models.decisions import (
    Linked,
    MatchStrategy,
    Unlinked,
    UnlinkReason,
)


class TestLinkArticle:
    @pytest.mark.unit
    def test_link_by_article_number(self, catalog):
        item = ScannedLineItem(
            raw_ocr_name="TOMATEN PASS. 6X",
            article_number="X1",
            quantity=2,
            unit_price=11.5,
        )

        decision = link_article(item, "s1", catalog)

        assert isinstance(decision, Linked)
        assert decision.article_id == "a1"
        assert decision.matched_by == MatchStrategy.ARTICLE_NUMBER
        # Price and quantity from the scan, master data from the catalog
        assert decision.merged.unit_price == 11.5
        assert decision.merged.quantity == 2
        assert decision.merged.category == "Konserven"
        assert decision.merged.vat_rate == 7
        assert decision.merged.name == "Tomaten passiert"
        assert decision.merged.linked_article_id == "a1"
        assert decision.ocr_name_to_record == "TOMATEN PASS. 6X"

    @pytest.mark.unit
    def test_article_number_is_scoped_to_supplier(self, catalog):
        item = ScannedLineItem(article_number="X1", unit_price=1.0)

        decision = link_article(item, "s3", catalog)

        assert isinstance(decision, Linked)
        assert decision.article_id == "a3"

    @pytest.mark.unit
    def test_article_number_is_case_sensitive(self, catalog):
        item = ScannedLineItem(article_number="x1", unit_price=1.0)

        decision = link_article(item, "s1", catalog)

        assert isinstance(decision, Unlinked)
        assert decision.reason == UnlinkReason.NO_MATCH

    @pytest.mark.unit
    def test_falls_through_to_ocr_name(self, catalog):
        item = ScannedLineItem(raw_ocr_name="tom pass 500 g", article_number="UNKNOWN")

        decision = link_article(item, "s1", catalog)

        assert isinstance(decision, Linked)
        assert decision.article_id == "a1"
        assert decision.matched_by == MatchStrategy.OCR_NAME

    @pytest.mark.unit
    def test_known_ocr_name_is_not_recorded_again(self, catalog):
        item = ScannedLineItem(raw_ocr_name="BUTTER 250G", unit_price=1.99)

        decision = link_article(item, "s1", catalog)

        assert isinstance(decision, Linked)
        assert decision.article_id == "a2"
        assert decision.ocr_name_to_record is None

    @pytest.mark.unit
    def test_ambiguous_article_number_does_not_fall_through(self, catalog):
        catalog = catalog + [
            CanonicalArticle(
                id="a4",
                name="Tomaten passiert Bio",
                supplier_id="s1",
                supplier_article_number="X1",
            )
        ]
        # The OCR name alone would identify a1
        item = ScannedLineItem(raw_ocr_name="TOM PASS 500G", article_number="X1")

        decision = link_article(item, "s1", catalog)

        assert isinstance(decision, Unlinked)
        assert decision.reason == UnlinkReason.AMBIGUOUS
        assert sorted(decision.candidate_ids) == ["a1", "a4"]

    @pytest.mark.unit
    def test_ambiguous_ocr_name(self, catalog):
        catalog = catalog + [
            CanonicalArticle(
                id="a5",
                name="Tomaten passiert 1kg",
                supplier_id="s1",
                ocr_name_history=["Tom. Pass. 500g"],
            )
        ]
        item = ScannedLineItem(raw_ocr_name="TOM PASS 500G")

        decision = link_article(item, "s1", catalog)

        assert isinstance(decision, Unlinked)
        assert decision.reason == UnlinkReason.AMBIGUOUS

    @pytest.mark.unit
    def test_no_match(self, catalog):
        item = ScannedLineItem(raw_ocr_name="KRAEUTER MIX", unit_price=3.5)

        decision = link_article(item, "s1", catalog)

        assert isinstance(decision, Unlinked)
        assert decision.reason == UnlinkReason.NO_MATCH
        assert decision.candidate_ids == []

    @pytest.mark.unit
    def test_unresolved_supplier_never_links(self, catalog):
        item = ScannedLineItem(raw_ocr_name="TOM PASS 500G", article_number="X1")

        decision = link_article(item, None, catalog)

        assert isinstance(decision, Unlinked)
        assert decision.reason == UnlinkReason.NO_MATCH


class TestMergeLineItem:
    @pytest.mark.unit
    def test_scan_override_wins(self, catalog):
        item = ScannedLineItem(
            raw_ocr_name="TOM PASS 500G",
            unit_price=1.2,
            category="Tomaten",
            vat_rate=19,
            allergens=["Senf"],
        )

        merged = merge_line_item(item, catalog[0])

        assert merged.category == "Tomaten"
        assert merged.vat_rate == 19
        assert merged.allergens == ["Senf"]
        assert merged.bundle_unit == "Karton"
        assert merged.content_unit == "Dose"

    @pytest.mark.unit
    def test_empty_override_keeps_master_value(self, catalog):
        item = ScannedLineItem(raw_ocr_name="TOM PASS 500G", category="  ", allergens=[])

        merged = merge_line_item(item, catalog[0])

        assert merged.category == "Konserven"
        assert merged.allergens == ["Sellerie"]

    @pytest.mark.unit
    def test_zero_vat_is_an_override(self, catalog):
        item = ScannedLineItem(raw_ocr_name="TOM PASS 500G", vat_rate=0)
        assert merge_line_item(item, catalog[0]).vat_rate == 0

    @pytest.mark.unit
    def test_price_never_comes_from_catalog(self, catalog):
        item = ScannedLineItem(raw_ocr_name="TOM PASS 500G")

        merged = merge_line_item(item, catalog[0])

        assert merged.unit_price == 0.0
        assert merged.quantity == 1.0


class TestRecordOcrName:
    @pytest.mark.unit
    def test_appends_new_name(self, catalog):
        updated = record_ocr_name(catalog[0], "TOMATEN PASS. 6X")

        assert updated.ocr_name_history == ["TOM PASS 500G", "TOMATEN PASS. 6X"]
        assert catalog[0].ocr_name_history == ["TOM PASS 500G"]

    @pytest.mark.unit
    def test_known_or_empty_name_is_ignored(self, catalog):
        assert record_ocr_name(catalog[0], "TOM PASS 500G") is catalog[0]
        assert record_ocr_name(catalog[0], None) is catalog[0]
        assert record_ocr_name(catalog[0], "") is catalog[0]
