"""SQLAlchemy database models for suppliers and articles"""

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    Engine,
    Float,
    ForeignKey,
    Index,
    String,
    Text,
)
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()


class SupplierRecord(Base):
    """Suppliers"""

    __tablename__ = "suppliers"

    id = Column(String(64), primary_key=True)
    name = Column(String(255), nullable=False)

    created_at = Column(DateTime, default=func.now(), nullable=False)
    last_updated = Column(DateTime, default=func.now(), onupdate=func.now())

    # Relationships
    articles = relationship("ArticleRecord", back_populates="supplier")

    # Indexes
    __table_args__ = (Index("idx_supplier_name", "name"),)


class ArticleRecord(Base):
    """Articles (master data)"""

    __tablename__ = "articles"

    id = Column(String(64), primary_key=True)
    name = Column(String(255), nullable=False)
    supplier_id = Column(String(64), ForeignKey("suppliers.id"), nullable=False)
    supplier_article_number = Column(String(100))

    # Raw OCR names seen on receipts: ["TOM PASS 500G", ...]
    ocr_name_history = Column(JSON, nullable=False, default=list)

    category = Column(String(255), default="")
    bundle_unit = Column(String(50), default="Stück")
    bundle_price = Column(Float, default=0.0)
    bundle_ean_code = Column(String(50), default="")
    content = Column(Float, default=1.0)
    content_unit = Column(String(50), default="Stück")
    content_ean_code = Column(String(50), default="")
    price_per_unit = Column(Float, default=0.0)
    vat_rate = Column(Float, default=19.0)

    allergens = Column(JSON, nullable=False, default=list)
    additives = Column(JSON, nullable=False, default=list)
    ingredients = Column(Text, default="")
    # {"calories": 52.0, "protein": 0.3, ...} or NULL
    nutrition = Column(JSON)
    notes = Column(Text, default="")

    created_at = Column(DateTime, default=func.now(), nullable=False)
    last_updated = Column(DateTime, default=func.now(), onupdate=func.now())

    # Relationships
    supplier = relationship("SupplierRecord", back_populates="articles")

    # Indexes
    __table_args__ = (
        Index("idx_article_supplier", "supplier_id"),
        Index("idx_article_name", "name"),
        Index("idx_article_number", "supplier_id", "supplier_article_number"),
    )


def create_all_tables(engine: Engine) -> None:
    """Create all tables"""
    Base.metadata.create_all(engine)


def drop_all_tables(engine: Engine) -> None:
    """Drop all tables"""
    Base.metadata.drop_all(engine)
