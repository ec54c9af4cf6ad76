from .core_models import (
    AgentType,
    CoverageType,
    DescriptionType,
    DateType,
    TitleTypeSlug,
    IdentifierKind,
    IdentifierType,
    RelationType,
    FunderIdentifierType,
    KeywordVocabulary,
    UploadErrorKind,
    Affiliation,
    PersonAuthor,
    InstitutionAuthor,
    PersonContributor,
    InstitutionContributor,
    Title,
    Description,
    DateEntry,
    PolygonPoint,
    SpatialTemporalCoverage,
    RelatedIdentifier,
    FundingReference,
    ControlledKeyword,
    MslLaboratory,
    ResourceSubmission,
    FieldError,
    DroppedEntry,
    ValidationReport,
    NormalizationResult,
)
from .reference_models import (
    ResourceTypeReference,
    TitleTypeReference,
)

__all__ = [
    "AgentType",
    "CoverageType",
    "DescriptionType",
    "DateType",
    "TitleTypeSlug",
    "IdentifierKind",
    "IdentifierType",
    "RelationType",
    "FunderIdentifierType",
    "KeywordVocabulary",
    "UploadErrorKind",
    "Affiliation",
    "PersonAuthor",
    "InstitutionAuthor",
    "PersonContributor",
    "InstitutionContributor",
    "Title",
    "Description",
    "DateEntry",
    "PolygonPoint",
    "SpatialTemporalCoverage",
    "RelatedIdentifier",
    "FundingReference",
    "ControlledKeyword",
    "MslLaboratory",
    "ResourceSubmission",
    "FieldError",
    "DroppedEntry",
    "ValidationReport",
    "NormalizationResult",
    "ResourceTypeReference",
    "TitleTypeReference",
]
