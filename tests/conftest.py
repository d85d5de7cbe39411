"""Shared fixtures: packaged config, suppliers, a small catalog and an in-memory database"""

import itertools

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from entity_resolution.config.config_loader import get_default_config
from entity_resolution.database.models import create_all_tables, drop_all_tables
from entity_resolution.models.article import CanonicalArticle, CanonicalSupplier


@pytest.fixture
def config():
    return get_default_config()


@pytest.fixture
def id_factory():
    """Deterministic ids: id-1, id-2, ..."""
    counter = itertools.count(1)
    return lambda: f"id-{next(counter)}"


@pytest.fixture
def suppliers():
    return [
        CanonicalSupplier(id="s1", name="Metro AG"),
        CanonicalSupplier(id="s2", name="Metro AG Frischedienst Nord"),
        CanonicalSupplier(id="s3", name="Hamberger Großmarkt"),
    ]


@pytest.fixture
def catalog():
    return [
        CanonicalArticle(
            id="a1",
            name="Tomaten passiert",
            supplier_id="s1",
            supplier_article_number="X1",
            ocr_name_history=["TOM PASS 500G"],
            category="Konserven",
            bundle_unit="Karton",
            bundle_price=12.9,
            content=6,
            content_unit="Dose",
            vat_rate=7,
            allergens=["Sellerie"],
        ),
        CanonicalArticle(
            id="a2",
            name="Butter",
            supplier_id="s1",
            supplier_article_number="B7",
            ocr_name_history=["BUTTER 250G"],
            category="Butter",
            bundle_price=1.89,
        ),
        CanonicalArticle(
            id="a3",
            name="Tomaten gehackt",
            supplier_id="s3",
            supplier_article_number="X1",
            ocr_name_history=["TOM GEH 400G"],
            category="Konserven",
        ),
    ]


@pytest.fixture
def test_engine():
    """In-memory SQLite engine shared across connections"""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_all_tables(engine)

    yield engine

    drop_all_tables(engine)
    engine.dispose()
