"""Unit tests for text normalization and similarity"""

import pytest

from entity_resolution.matching.normalizer import normalize, normalized_equals, similarity


class TestNormalize:
    @pytest.mark.unit
    def test_lowercases_and_strips_punctuation(self):
        assert normalize("Artikel-Nr.") == "artikelnr"
        assert normalize("artikel nr") == "artikelnr"

    @pytest.mark.unit
    def test_keeps_accented_letters_and_digits(self):
        assert normalize("Nährwerte (pro 100g)") == "nährwertepro100g"
        assert normalize("Stück_Preis") == "stückpreis"

    @pytest.mark.unit
    def test_empty_result(self):
        assert normalize("") == ""
        assert normalize(" - & / ") == ""

    @pytest.mark.unit
    def test_rejects_non_string(self):
        with pytest.raises(TypeError):
            normalize(None)
        with pytest.raises(TypeError):
            normalize(42)

    @pytest.mark.unit
    def test_normalized_equals(self):
        assert normalized_equals("MwSt.-Satz", "mwst satz")
        assert not normalized_equals("MwSt", "Steuer")


class TestSimilarity:
    @pytest.mark.unit
    @pytest.mark.parametrize("value", ["", "a", "gebindepreis", "nährwerte"])
    def test_identity(self, value):
        assert similarity(value, value) == 1.0

    @pytest.mark.unit
    def test_both_empty(self):
        assert similarity("", "") == 1.0

    @pytest.mark.unit
    def test_one_empty(self):
        assert similarity("abc", "") == 0.0

    @pytest.mark.unit
    def test_ratio(self):
        # kitten -> sitting needs 3 edits
        assert similarity("kitten", "sitting") == pytest.approx(4 / 7)

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "a,b",
        [("lieferant", "lieferamt"), ("menge", "gebindemenge"), ("abc", "xyz")],
    )
    def test_symmetric(self, a, b):
        assert similarity(a, b) == similarity(b, a)

    @pytest.mark.unit
    def test_rejects_non_string(self):
        with pytest.raises(TypeError):
            similarity("abc", None)
