"""Models for the resolution config file"""

from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ScoringConfig(BaseModel):
    """Header scoring constants used by the field mapper"""

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "exact_score": 100,
                "containment_weight": 80,
                "similarity_weight": 60,
                "similarity_threshold": 0.7,
                "acceptance_threshold": 30,
            }
        },
    )

    exact_score: float = Field(default=100.0, description="Score for an exact normalized match")
    containment_weight: float = Field(
        default=80.0, description="Weight applied to the length ratio when one string contains the other"
    )
    similarity_weight: float = Field(
        default=60.0, description="Weight applied to the edit-distance similarity ratio"
    )
    similarity_threshold: float = Field(
        default=0.7, ge=0.0, le=1.0, description="Minimum similarity ratio that earns a score"
    )
    acceptance_threshold: float = Field(
        default=30.0, ge=0.0, le=100.0, description="A header is accepted only above this score"
    )


class NutritionConfig(BaseModel):
    """Nutrition target field and the per-nutrient vocabulary in both locales"""

    model_config = ConfigDict(frozen=True)

    field: str = Field(default="nutrition_info", description="Target field id of the nutrition cluster")
    nutrients: Dict[str, List[str]] = Field(
        default_factory=dict, description="Nutrient name -> header terms that indicate it"
    )

    @property
    def vocabulary(self) -> List[str]:
        """Flattened vocabulary used to detect nutrition columns"""
        terms: List[str] = []
        for nutrient_terms in self.nutrients.values():
            for term in nutrient_terms:
                if term not in terms:
                    terms.append(term)
        return terms


class ImportDefaults(BaseModel):
    """Values applied to imported articles when a column is missing or empty"""

    model_config = ConfigDict(frozen=True)

    bundle_unit: str = "Stück"
    content_unit: str = "Stück"
    vat_rate: float = 19.0
    content: float = 1.0


class CategoryConfig(BaseModel):
    """Static categories and keyword rules for category suggestion"""

    model_config = ConfigDict(frozen=True)

    custom_similarity_threshold: float = Field(default=0.7, ge=0.0, le=1.0)
    static: List[str] = Field(default_factory=list, description="Built-in category names")
    rules: Dict[str, List[str]] = Field(
        default_factory=dict,
        description="Category -> keywords; first category whose keyword occurs in the name wins",
    )


class ResolutionConfig(BaseModel):
    """Complete resolution configuration"""

    model_config = ConfigDict(frozen=True)

    field_priority: List[str] = Field(..., description="Import target fields, most important first")
    required_fields: List[str] = Field(default_factory=list)
    synonyms: Dict[str, List[str]] = Field(..., description="Target field id -> synonym terms")
    nutrition: NutritionConfig = Field(default_factory=NutritionConfig)
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    defaults: ImportDefaults = Field(default_factory=ImportDefaults)
    categories: CategoryConfig = Field(default_factory=CategoryConfig)

    @field_validator("synonyms")
    @classmethod
    def synonyms_not_empty(cls, value: Dict[str, List[str]]) -> Dict[str, List[str]]:
        for field, terms in value.items():
            if not terms:
                raise ValueError(f"Synonym list for '{field}' is empty")
            if any(not term.strip() for term in terms):
                raise ValueError(f"Synonym list for '{field}' contains a blank term")
        return value

    def synonyms_for(self, field: str) -> List[str]:
        """
        Get the synonym terms for a target field.

        Args:
            field: Target field id

        Returns:
            List of synonym terms (empty if the field has none)
        """
        return list(self.synonyms.get(field, []))
