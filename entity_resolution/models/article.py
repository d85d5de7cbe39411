"""Pydantic models for articles, suppliers and scanned receipt lines"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class NutritionInfo(BaseModel):
    """Nutrition values per 100 g / 100 ml"""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "calories": 52.0,
                "kilojoules": 218.0,
                "protein": 0.3,
                "fat": 0.2,
                "carbohydrates": 14.0,
                "fiber": 2.4,
                "sugar": 10.0,
                "salt": 0.0,
            }
        }
    )

    calories: float = 0.0
    kilojoules: float = 0.0
    protein: float = 0.0
    fat: float = 0.0
    carbohydrates: float = 0.0
    fiber: float = 0.0
    sugar: float = 0.0
    salt: float = 0.0
    alcohol: Optional[float] = None


class CanonicalSupplier(BaseModel):
    """A supplier as stored in the record store"""

    model_config = ConfigDict(json_schema_extra={"example": {"id": "sup-1", "name": "Metro AG"}})

    id: str = Field(..., description="Supplier id")
    name: str = Field(..., description="Supplier display name")


class CanonicalArticle(BaseModel):
    """An article as stored in the record store (master data)"""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "art-1",
                "name": "Tomaten passiert",
                "supplier_id": "sup-1",
                "supplier_article_number": "X1",
                "ocr_name_history": ["TOM PASS 500G"],
                "category": "Konserven",
                "bundle_unit": "Karton",
                "bundle_price": 12.9,
                "content": 6,
                "content_unit": "Dose",
                "vat_rate": 7,
            }
        }
    )

    id: str = Field(..., description="Article id")
    name: str = Field(..., description="Article name")
    supplier_id: str = Field(..., description="Owning supplier id")
    supplier_article_number: Optional[str] = Field(
        None, description="Article number in the supplier's catalog"
    )
    ocr_name_history: List[str] = Field(
        default_factory=list, description="Raw OCR names under which this article was seen on receipts"
    )

    # Descriptive / master fields
    category: str = ""
    bundle_unit: str = "Stück"
    bundle_price: float = 0.0
    bundle_ean_code: str = ""
    content: float = 1.0
    content_unit: str = "Stück"
    content_ean_code: str = ""
    price_per_unit: float = 0.0
    vat_rate: float = 19.0
    allergens: List[str] = Field(default_factory=list)
    additives: List[str] = Field(default_factory=list)
    ingredients: str = ""
    nutrition: Optional[NutritionInfo] = None
    notes: str = ""

    @field_validator("ocr_name_history")
    @classmethod
    def dedupe_history(cls, value: List[str]) -> List[str]:
        # Ordered set semantics
        seen: List[str] = []
        for name in value:
            if name and name not in seen:
                seen.append(name)
        return seen


class ScannedLineItem(BaseModel):
    """
    A line item read from a paper receipt by OCR.

    Descriptive fields are optional overrides: when set to a non-empty value they win
    over the linked article's master data. Price and quantity always come from the scan.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "raw_ocr_name": "TOM PASS 500G",
                "article_number": "X1",
                "quantity": 2,
                "unit_price": 1.45,
                "total_price": 2.9,
            }
        }
    )

    raw_ocr_name: Optional[str] = Field(None, description="Name exactly as read by OCR")
    name: Optional[str] = Field(None, description="Edited display name")
    article_number: Optional[str] = Field(None, description="Supplier article number printed on the receipt")
    supplier_id: Optional[str] = None
    quantity: float = Field(default=1.0, description="Purchased quantity")
    unit_price: float = Field(default=0.0, description="Price per purchased unit")
    total_price: Optional[float] = Field(None, description="Line total as printed")
    linked_article_id: Optional[str] = None

    category: Optional[str] = None
    bundle_unit: Optional[str] = None
    bundle_ean_code: Optional[str] = None
    content: Optional[float] = None
    content_unit: Optional[str] = None
    content_ean_code: Optional[str] = None
    vat_rate: Optional[float] = None
    allergens: Optional[List[str]] = None
    additives: Optional[List[str]] = None
    ingredients: Optional[str] = None
    nutrition: Optional[NutritionInfo] = None
    notes: Optional[str] = None


class MergedLineItem(BaseModel):
    """A scanned line item after merging with the linked article's master data"""

    linked_article_id: str
    name: str
    raw_ocr_name: Optional[str] = None
    supplier_id: str
    supplier_article_number: Optional[str] = None
    quantity: float
    unit_price: float
    total_price: Optional[float] = None

    category: str = ""
    bundle_unit: str = "Stück"
    bundle_ean_code: str = ""
    content: float = 1.0
    content_unit: str = "Stück"
    content_ean_code: str = ""
    vat_rate: float = 19.0
    allergens: List[str] = Field(default_factory=list)
    additives: List[str] = Field(default_factory=list)
    ingredients: str = ""
    nutrition: Optional[NutritionInfo] = None
    notes: str = ""
