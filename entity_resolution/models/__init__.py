"""Pydantic models for records, decisions and configuration"""

from entity_resolution.models.article import (
    CanonicalArticle,
    CanonicalSupplier,
    MergedLineItem,
    NutritionInfo,
    ScannedLineItem,
)
from entity_resolution.models.configs import (
    CategoryConfig,
    ImportDefaults,
    NutritionConfig,
    ResolutionConfig,
    ScoringConfig,
)
from entity_resolution.models.decisions import (
    DuplicateCandidate,
    DuplicateMatch,
    DuplicateVerdict,
    FieldMapping,
    LinkDecision,
    Linked,
    MappingResult,
    MatchStrategy,
    NutritionClusterOption,
    Resolved,
    SupplierMatch,
    SupplierResolution,
    Unlinked,
    UnlinkReason,
    Unresolved,
    UnresolvedReason,
)
from entity_resolution.models.importing import (
    ImportCandidate,
    ImportResult,
    SkippedRow,
    SkipReason,
    StoreSnapshot,
)
from entity_resolution.models.receipt import CommitPlan, Receipt, ReviewLine, ReviewState

__all__ = [
    # Records
    "CanonicalArticle",
    "CanonicalSupplier",
    "NutritionInfo",
    "ScannedLineItem",
    "MergedLineItem",
    # Config models
    "ResolutionConfig",
    "ScoringConfig",
    "NutritionConfig",
    "ImportDefaults",
    "CategoryConfig",
    # Decisions
    "FieldMapping",
    "MappingResult",
    "NutritionClusterOption",
    "SupplierMatch",
    "UnresolvedReason",
    "Resolved",
    "Unresolved",
    "SupplierResolution",
    "MatchStrategy",
    "UnlinkReason",
    "Linked",
    "Unlinked",
    "LinkDecision",
    "DuplicateMatch",
    "DuplicateCandidate",
    "DuplicateVerdict",
    # Import models
    "ImportCandidate",
    "ImportResult",
    "SkippedRow",
    "SkipReason",
    "StoreSnapshot",
    # Receipt models
    "Receipt",
    "ReviewLine",
    "ReviewState",
    "CommitPlan",
]
