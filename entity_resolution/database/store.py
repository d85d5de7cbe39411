"""Record store: read snapshots of suppliers/articles and upsert accepted records"""

import logging
from typing import List, Optional

from pydantic import BaseModel, Field
from sqlalchemy import Engine, select

from entity_resolution.database.connection import get_db_session, get_engine
from entity_resolution.database.models import ArticleRecord, SupplierRecord
from entity_resolution.models.article import CanonicalArticle, CanonicalSupplier
from entity_resolution.models.importing import StoreSnapshot

logger = logging.getLogger(__name__)

ARTICLE_COLUMNS = [
    "name",
    "supplier_id",
    "supplier_article_number",
    "ocr_name_history",
    "category",
    "bundle_unit",
    "bundle_price",
    "bundle_ean_code",
    "content",
    "content_unit",
    "content_ean_code",
    "price_per_unit",
    "vat_rate",
    "allergens",
    "additives",
    "ingredients",
    "nutrition",
    "notes",
]


class SaveResult(BaseModel):
    """Outcome of RecordStore.save"""

    success: bool = True
    inserted: int = 0
    updated: int = 0
    errors: List[str] = Field(default_factory=list)


def sanitize_for_db(text: str | None) -> str | None:
    """
    Sanitize text for PostgreSQL storage.
    Removes NUL bytes which PostgreSQL text fields cannot contain.
    """
    if text is None:
        return None
    return text.replace("\x00", "")


def _article_values(article: CanonicalArticle) -> dict:
    data = article.model_dump(include=set(ARTICLE_COLUMNS))
    return {key: sanitize_for_db(value) if isinstance(value, str) else value for key, value in data.items()}


def _to_article(record: ArticleRecord) -> CanonicalArticle:
    return CanonicalArticle(
        id=record.id,
        **{column: getattr(record, column) for column in ARTICLE_COLUMNS},
    )


class RecordStore:
    """
    SQLAlchemy-backed store for suppliers and articles.

    Reads return pydantic snapshots; nothing returned is attached to a session.
    """

    def __init__(self, engine: Optional[Engine] = None):
        self.engine = engine or get_engine()

    def list_suppliers(self) -> List[CanonicalSupplier]:
        with get_db_session(self.engine) as session:
            records = session.execute(select(SupplierRecord).order_by(SupplierRecord.name)).scalars()
            return [CanonicalSupplier(id=r.id, name=r.name) for r in records]

    def list_articles(self, supplier_id: Optional[str] = None) -> List[CanonicalArticle]:
        """
        List stored articles.

        Args:
            supplier_id: Only articles of this supplier when given

        Returns:
            List of CanonicalArticle ordered by name
        """
        stmt = select(ArticleRecord).order_by(ArticleRecord.name)
        if supplier_id is not None:
            stmt = stmt.where(ArticleRecord.supplier_id == supplier_id)

        with get_db_session(self.engine) as session:
            return [_to_article(record) for record in session.execute(stmt).scalars()]

    def snapshot(self) -> StoreSnapshot:
        """All suppliers and articles, for one import run or receipt review"""
        return StoreSnapshot(articles=self.list_articles(), suppliers=self.list_suppliers())

    def save(
        self,
        articles: Optional[List[CanonicalArticle]] = None,
        suppliers: Optional[List[CanonicalSupplier]] = None,
    ) -> SaveResult:
        """
        Insert or update records by id, all in one transaction.

        Suppliers are written before articles so new articles can reference new
        suppliers. If anything fails nothing is written.

        Args:
            articles: Articles to upsert
            suppliers: Suppliers to upsert

        Returns:
            SaveResult with counts, or success=False and the error
        """
        articles = articles or []
        suppliers = suppliers or []
        inserted = 0
        updated = 0

        try:
            with get_db_session(self.engine) as session:
                for supplier in suppliers:
                    existing = session.get(SupplierRecord, supplier.id)
                    if existing is None:
                        session.add(SupplierRecord(id=supplier.id, name=sanitize_for_db(supplier.name)))
                        inserted += 1
                    else:
                        existing.name = sanitize_for_db(supplier.name)
                        updated += 1

                session.flush()

                for article in articles:
                    values = _article_values(article)
                    existing = session.get(ArticleRecord, article.id)
                    if existing is None:
                        session.add(ArticleRecord(id=article.id, **values))
                        inserted += 1
                    else:
                        for column, value in values.items():
                            setattr(existing, column, value)
                        updated += 1
        except Exception as e:
            logger.error("Saving %d articles / %d suppliers failed: %s", len(articles), len(suppliers), e)
            return SaveResult(success=False, errors=[str(e)])

        logger.info("Saved records: %d inserted, %d updated", inserted, updated)
        return SaveResult(success=True, inserted=inserted, updated=updated)
