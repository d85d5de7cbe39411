"""Unit tests for exact duplicate detection"""

import pytest

from entity_resolution.matching.duplicate_guard import check_duplicate, same_supplier
from entity_resolution.models.decisions import DuplicateCandidate, DuplicateMatch


@pytest.mark.unit
def test_second_row_with_same_name_is_batch_duplicate():
    first = DuplicateCandidate(name="Tomaten passiert", supplier_id="s1")
    second = DuplicateCandidate(name="TOMATEN PASSIERT", supplier_id="s1")

    assert not check_duplicate(first, [], []).is_duplicate

    verdict = check_duplicate(second, [first], [])

    assert verdict.is_duplicate
    assert verdict.matched_on == DuplicateMatch.NAME
    assert verdict.in_batch
    assert verdict.conflicting_record == first


@pytest.mark.unit
def test_same_name_other_supplier_is_not_duplicate(catalog):
    candidate = DuplicateCandidate(name="Butter", supplier_id="s3")
    assert not check_duplicate(candidate, [], catalog).is_duplicate


@pytest.mark.unit
def test_article_number_match_ignores_case_and_name(catalog):
    candidate = DuplicateCandidate(name="Passata", supplier_id="s1", article_number="x1")

    verdict = check_duplicate(candidate, [], catalog)

    assert verdict.is_duplicate
    assert verdict.matched_on == DuplicateMatch.ARTICLE_NUMBER
    assert verdict.conflicting_record.id == "a1"
    assert not verdict.in_batch


@pytest.mark.unit
def test_article_number_is_reported_before_name(catalog):
    # Same name as a2, same article number as a1
    candidate = DuplicateCandidate(name="Butter", supplier_id="s1", article_number="X1")

    verdict = check_duplicate(candidate, [], catalog)

    assert verdict.matched_on == DuplicateMatch.ARTICLE_NUMBER
    assert verdict.conflicting_record.id == "a1"


@pytest.mark.unit
def test_record_is_never_its_own_duplicate(catalog):
    candidate = DuplicateCandidate.from_article(catalog[0], exclude_self=True)

    verdict = check_duplicate(candidate, [], catalog)

    assert not verdict.is_duplicate
    assert verdict.matched_on == DuplicateMatch.NONE
    assert verdict.conflicting_record is None


@pytest.mark.unit
def test_renamed_record_still_collides_with_others(catalog):
    edited = catalog[0].model_copy(update={"name": "Butter", "supplier_article_number": "T9"})
    candidate = DuplicateCandidate.from_article(edited, exclude_self=True)

    verdict = check_duplicate(candidate, [], catalog)

    assert verdict.is_duplicate
    assert verdict.matched_on == DuplicateMatch.NAME
    assert verdict.conflicting_record.id == "a2"


@pytest.mark.unit
def test_supplier_name_resolves_against_suppliers(catalog, suppliers):
    candidate = DuplicateCandidate(name="butter", supplier_name="METRO AG")

    assert not check_duplicate(candidate, [], catalog).is_duplicate

    verdict = check_duplicate(candidate, [], catalog, suppliers=suppliers)
    assert verdict.is_duplicate
    assert verdict.matched_on == DuplicateMatch.NAME


@pytest.mark.unit
def test_batch_is_checked_before_store(catalog):
    accepted = DuplicateCandidate(id="new-1", name="Butter", supplier_id="s1")
    candidate = DuplicateCandidate(name="Butter", supplier_id="s1")

    verdict = check_duplicate(candidate, [accepted], catalog)

    assert verdict.in_batch
    assert verdict.conflicting_record.id == "new-1"


@pytest.mark.unit
def test_blank_name_and_number_never_match(catalog):
    candidate = DuplicateCandidate(name="  ", supplier_id="s1", article_number="")
    assert not check_duplicate(candidate, [], catalog).is_duplicate


@pytest.mark.unit
def test_same_supplier():
    names = {"s1": "Metro AG"}

    assert same_supplier("s1", None, "s1", None)
    assert not same_supplier("s1", None, "s2", None)
    assert same_supplier("s1", None, None, "metro ag", names)
    assert not same_supplier(None, None, None, None, names)
