"""Integration tests for the SQLAlchemy record store (in-memory SQLite)"""

import pytest
from sqlalchemy import inspect

from entity_resolution.database.connection import (
    check_connection,
    get_database_url,
    get_db_session,
    get_engine,
)
from entity_resolution.database.models import ArticleRecord, drop_all_tables
from entity_resolution.database.store import RecordStore, sanitize_for_db
from entity_resolution.models.article import CanonicalArticle, NutritionInfo


@pytest.fixture
def store(test_engine):
    return RecordStore(test_engine)


@pytest.mark.integration
def test_connection_and_tables(test_engine):
    assert check_connection(test_engine)

    tables = inspect(test_engine).get_table_names()
    assert "suppliers" in tables
    assert "articles" in tables


@pytest.mark.integration
def test_save_and_list(store, catalog, suppliers):
    result = store.save(articles=catalog, suppliers=suppliers)

    assert result.success
    assert result.inserted == 6
    assert result.updated == 0

    assert [s.name for s in store.list_suppliers()] == [
        "Hamberger Großmarkt",
        "Metro AG",
        "Metro AG Frischedienst Nord",
    ]
    assert [a.name for a in store.list_articles(supplier_id="s1")] == ["Butter", "Tomaten passiert"]

    tomatoes = next(a for a in store.list_articles() if a.id == "a1")
    assert tomatoes.ocr_name_history == ["TOM PASS 500G"]
    assert tomatoes.allergens == ["Sellerie"]
    assert tomatoes.vat_rate == 7.0


@pytest.mark.integration
def test_save_updates_by_id(store, catalog, suppliers):
    store.save(articles=catalog, suppliers=suppliers)

    butter = catalog[1].model_copy(
        update={"bundle_price": 2.5, "ocr_name_history": ["BUTTER 250G", "BUTTER 250 G"]}
    )
    result = store.save(articles=[butter])

    assert result.success
    assert result.inserted == 0
    assert result.updated == 1

    (stored,) = [a for a in store.list_articles() if a.id == "a2"]
    assert stored.bundle_price == 2.5
    assert stored.ocr_name_history == ["BUTTER 250G", "BUTTER 250 G"]


@pytest.mark.integration
def test_nutrition_round_trip(store, suppliers):
    article = CanonicalArticle(
        id="n1",
        name="Äpfel Elstar",
        supplier_id="s3",
        nutrition=NutritionInfo(calories=52, sugar=10.4),
    )

    store.save(articles=[article], suppliers=suppliers)

    snapshot = store.snapshot()
    (stored,) = snapshot.articles
    assert stored.nutrition.calories == 52.0
    assert stored.nutrition.sugar == pytest.approx(10.4)
    assert len(snapshot.suppliers) == 3


@pytest.mark.integration
def test_failed_save_writes_nothing(store, suppliers):
    article = CanonicalArticle(id="d1", name="Essig", supplier_id="s1")

    # Same primary key twice in one save
    result = store.save(articles=[article, article.model_copy()], suppliers=suppliers)

    assert not result.success
    assert result.errors
    assert store.list_suppliers() == []
    with get_db_session(store.engine) as session:
        assert session.query(ArticleRecord).count() == 0


@pytest.mark.integration
def test_save_reports_database_errors(store, catalog):
    drop_all_tables(store.engine)

    result = store.save(articles=catalog)

    assert not result.success
    assert len(result.errors) == 1


@pytest.mark.unit
def test_sanitize_for_db():
    assert sanitize_for_db("Tomaten\x00passiert") == "Tomatenpassiert"
    assert sanitize_for_db(None) is None


@pytest.mark.integration
def test_sqlite_engine_enforces_foreign_keys():
    engine = get_engine(url="sqlite://")
    try:
        with engine.connect() as conn:
            assert conn.exec_driver_sql("PRAGMA foreign_keys").scalar() == 1
    finally:
        engine.dispose()


@pytest.mark.integration
def test_check_connection_logs_failure(tmp_path, caplog):
    engine = get_engine(url=f"sqlite:///{tmp_path / 'missing' / 'store.db'}")

    with caplog.at_level("ERROR", logger="entity_resolution.database.connection"):
        assert not check_connection(engine)

    assert "Database connection to" in caplog.text
    engine.dispose()


@pytest.mark.unit
def test_database_url_from_environment(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "postgresql://chef:secret@db/kitchen")
    assert get_database_url() == "postgresql+psycopg://chef:secret@db/kitchen"

    monkeypatch.setenv("DATABASE_URL", "")
    assert get_database_url() == "sqlite:///entity_resolution.db"
