"""Data models for the curation pipeline."""

from datetime import date
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


# ----------------------------------------------------------------------
# ENUMERATIONS
# ----------------------------------------------------------------------

class AgentType(str, Enum):
    """Kinds of authors and contributors."""
    PERSON = "person"
    INSTITUTION = "institution"


class CoverageType(str, Enum):
    """Geometry of a spatial coverage entry."""
    POINT = "point"
    BOX = "box"
    POLYGON = "polygon"


class DescriptionType(str, Enum):
    """Description types, stored in kebab-case."""
    ABSTRACT = "abstract"
    METHODS = "methods"
    SERIES_INFORMATION = "series-information"
    TABLE_OF_CONTENTS = "table-of-contents"
    TECHNICAL_INFO = "technical-info"
    OTHER = "other"


class DateType(str, Enum):
    """Date types, stored in kebab-case."""
    ACCEPTED = "accepted"
    AVAILABLE = "available"
    COLLECTED = "collected"
    COPYRIGHTED = "copyrighted"
    CREATED = "created"
    ISSUED = "issued"
    SUBMITTED = "submitted"
    UPDATED = "updated"
    VALID = "valid"
    WITHDRAWN = "withdrawn"
    OTHER = "other"


class TitleTypeSlug(str, Enum):
    """Kebab-case forms of the title types."""
    MAIN_TITLE = "main-title"
    ALTERNATIVE_TITLE = "alternative-title"
    SUBTITLE = "subtitle"
    TRANSLATED_TITLE = "translated-title"
    OTHER = "other"


class IdentifierKind(str, Enum):
    """Coarse classification of a raw identifier string."""
    DOI = "DOI"
    HANDLE = "Handle"
    URL = "URL"
    OTHER = "Other"


class IdentifierType(str, Enum):
    """Persistent identifier types accepted for related identifiers."""
    ARK = "ARK"
    ARXIV = "arXiv"
    BIBCODE = "bibcode"
    CSTR = "CSTR"
    DOI = "DOI"
    EAN13 = "EAN13"
    EISSN = "EISSN"
    HANDLE = "Handle"
    IGSN = "IGSN"
    ISBN = "ISBN"
    ISSN = "ISSN"
    ISTC = "ISTC"
    LISSN = "LISSN"
    LSID = "LSID"
    PMID = "PMID"
    PURL = "PURL"
    RRID = "RRID"
    UPC = "UPC"
    URL = "URL"
    URN = "URN"
    W3ID = "w3id"


class RelationType(str, Enum):
    """DataCite relation type vocabulary."""
    IS_CITED_BY = "IsCitedBy"
    CITES = "Cites"
    IS_SUPPLEMENT_TO = "IsSupplementTo"
    IS_SUPPLEMENTED_BY = "IsSupplementedBy"
    IS_CONTINUED_BY = "IsContinuedBy"
    CONTINUES = "Continues"
    IS_DESCRIBED_BY = "IsDescribedBy"
    DESCRIBES = "Describes"
    HAS_METADATA = "HasMetadata"
    IS_METADATA_FOR = "IsMetadataFor"
    HAS_VERSION = "HasVersion"
    IS_VERSION_OF = "IsVersionOf"
    IS_NEW_VERSION_OF = "IsNewVersionOf"
    IS_PREVIOUS_VERSION_OF = "IsPreviousVersionOf"
    IS_PART_OF = "IsPartOf"
    HAS_PART = "HasPart"
    IS_PUBLISHED_IN = "IsPublishedIn"
    IS_REFERENCED_BY = "IsReferencedBy"
    REFERENCES = "References"
    IS_DOCUMENTED_BY = "IsDocumentedBy"
    DOCUMENTS = "Documents"
    IS_COMPILED_BY = "IsCompiledBy"
    COMPILES = "Compiles"
    IS_VARIANT_FORM_OF = "IsVariantFormOf"
    IS_ORIGINAL_FORM_OF = "IsOriginalFormOf"
    IS_IDENTICAL_TO = "IsIdenticalTo"
    IS_REVIEWED_BY = "IsReviewedBy"
    REVIEWS = "Reviews"
    IS_DERIVED_FROM = "IsDerivedFrom"
    IS_SOURCE_OF = "IsSourceOf"
    IS_REQUIRED_BY = "IsRequiredBy"
    REQUIRES = "Requires"
    IS_OBSOLETED_BY = "IsObsoletedBy"
    OBSOLETES = "Obsoletes"
    IS_COLLECTED_BY = "IsCollectedBy"
    COLLECTS = "Collects"
    IS_TRANSLATION_OF = "IsTranslationOf"
    HAS_TRANSLATION = "HasTranslation"


class FunderIdentifierType(str, Enum):
    """Identifier schemes for funding organisations."""
    ROR = "ROR"
    CROSSREF = "Crossref Funder ID"
    ISNI = "ISNI"
    GRID = "GRID"
    OTHER = "Other"


class KeywordVocabulary(str, Enum):
    """GCMD vocabularies a controlled keyword may come from."""
    SCIENCE = "science"
    PLATFORMS = "platforms"
    INSTRUMENTS = "instruments"


class UploadErrorKind(str, Enum):
    """Reasons an XML upload is rejected before parsing."""
    FILE_MISSING = "file_missing"
    EMPTY_FILE = "empty_file"
    FILE_TOO_LARGE = "file_too_large"
    INVALID_TYPE = "invalid_type"
    MALFORMED_XML = "malformed_xml"

    @property
    def category(self) -> str:
        if self in (UploadErrorKind.FILE_MISSING, UploadErrorKind.EMPTY_FILE):
            return "missing"
        if self is UploadErrorKind.FILE_TOO_LARGE:
            return "size"
        if self is UploadErrorKind.INVALID_TYPE:
            return "type"
        return "content"


# ----------------------------------------------------------------------
# SUBMISSION MODELS
# ----------------------------------------------------------------------

TIME_PATTERN = r"^([01][0-9]|2[0-3]):[0-5][0-9](:[0-5][0-9])?$"
EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"
URL_PATTERN = r"^https?://\S+$"


class CamelModel(BaseModel):
    """Base model exposing camelCase wire names."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class Affiliation(CamelModel):
    """Affiliation of an author or contributor."""
    value: str = Field(min_length=1, max_length=255)
    ror_id: Optional[str] = Field(default=None, max_length=255)


class PersonAuthor(CamelModel):
    type: Literal["person"] = "person"
    position: int = Field(ge=0)
    orcid: Optional[str] = Field(default=None, max_length=255)
    first_name: Optional[str] = Field(default=None, max_length=255)
    last_name: Optional[str] = Field(default=None, max_length=255)
    email: Optional[str] = Field(default=None, max_length=255, pattern=EMAIL_PATTERN)
    website: Optional[str] = Field(default=None, max_length=255, pattern=URL_PATTERN)
    is_contact: bool = False
    affiliations: List[Affiliation] = Field(default_factory=list)


class InstitutionAuthor(CamelModel):
    type: Literal["institution"] = "institution"
    position: int = Field(ge=0)
    institution_name: Optional[str] = Field(default=None, max_length=255)
    ror_id: Optional[str] = Field(default=None, max_length=255)
    affiliations: List[Affiliation] = Field(default_factory=list)


class PersonContributor(CamelModel):
    type: Literal["person"] = "person"
    position: int = Field(ge=0)
    roles: List[Annotated[str, Field(min_length=1, max_length=255)]] = Field(default_factory=list)
    orcid: Optional[str] = Field(default=None, max_length=255)
    first_name: Optional[str] = Field(default=None, max_length=255)
    last_name: Optional[str] = Field(default=None, max_length=255)
    affiliations: List[Affiliation] = Field(default_factory=list)


class InstitutionContributor(CamelModel):
    type: Literal["institution"] = "institution"
    position: int = Field(ge=0)
    roles: List[Annotated[str, Field(min_length=1, max_length=255)]] = Field(default_factory=list)
    institution_name: Optional[str] = Field(default=None, max_length=255)
    affiliations: List[Affiliation] = Field(default_factory=list)


Author = Annotated[Union[PersonAuthor, InstitutionAuthor], Field(discriminator="type")]
Contributor = Annotated[Union[PersonContributor, InstitutionContributor], Field(discriminator="type")]


class Title(CamelModel):
    title: str = Field(min_length=1, max_length=255)
    title_type: str = Field(min_length=1)


class Description(CamelModel):
    description_type: DescriptionType
    description: str = Field(min_length=1)


class DateEntry(CamelModel):
    date_type: DateType
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    date_information: Optional[str] = Field(default=None, max_length=255)


class PolygonPoint(BaseModel):
    """Single vertex of a coverage polygon."""
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)


class SpatialTemporalCoverage(CamelModel):
    type: CoverageType = CoverageType.POINT
    lat_min: Optional[float] = Field(default=None, ge=-90, le=90)
    lat_max: Optional[float] = Field(default=None, ge=-90, le=90)
    lon_min: Optional[float] = Field(default=None, ge=-180, le=180)
    lon_max: Optional[float] = Field(default=None, ge=-180, le=180)
    polygon_points: List[PolygonPoint] = Field(default_factory=list)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    start_time: Optional[str] = Field(default=None, pattern=TIME_PATTERN)
    end_time: Optional[str] = Field(default=None, pattern=TIME_PATTERN)
    timezone: Optional[str] = Field(default=None, max_length=100)
    description: Optional[str] = None


class RelatedIdentifier(CamelModel):
    identifier: str = Field(min_length=1)
    identifier_type: IdentifierType
    relation_type: RelationType
    position: int = Field(default=0, ge=0)


class FundingReference(CamelModel):
    funder_name: str = Field(min_length=1)
    funder_identifier: Optional[str] = None
    funder_identifier_type: Optional[FunderIdentifierType] = None
    award_number: Optional[str] = None
    award_uri: Optional[str] = None
    award_title: Optional[str] = None
    position: int = Field(default=0, ge=0)


class ControlledKeyword(BaseModel):
    """GCMD keyword as submitted by the thesaurus picker."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(min_length=1, max_length=512)
    text: str = Field(min_length=1, max_length=255)
    path: str = Field(min_length=1)
    language: Optional[str] = Field(default=None, max_length=10)
    scheme: Optional[str] = Field(default=None, max_length=255)
    scheme_uri: Optional[str] = Field(default=None, max_length=512, alias="schemeURI")
    vocabulary_type: KeywordVocabulary = Field(alias="vocabularyType")


class MslLaboratory(BaseModel):
    """Multi-scale laboratory reference."""
    identifier: str = Field(min_length=1)
    name: str = Field(min_length=1)
    affiliation_name: Optional[str] = None
    affiliation_ror: Optional[str] = None


class ResourceSubmission(CamelModel):
    """Complete normalized resource submission."""
    resource_id: Optional[int] = None
    doi: Optional[str] = Field(default=None, max_length=255)
    year: int = Field(ge=1000, le=9999)
    resource_type: int
    version: Optional[str] = Field(default=None, max_length=50)
    language: Optional[str] = None
    titles: List[Title] = Field(default_factory=list)
    licenses: List[str] = Field(default_factory=list)
    authors: List[Author] = Field(default_factory=list)
    contributors: List[Contributor] = Field(default_factory=list)
    descriptions: List[Description] = Field(default_factory=list)
    dates: List[DateEntry] = Field(default_factory=list)
    free_keywords: List[Annotated[str, Field(max_length=255)]] = Field(default_factory=list)
    gcmd_keywords: List[ControlledKeyword] = Field(default_factory=list)
    spatial_temporal_coverages: List[SpatialTemporalCoverage] = Field(default_factory=list)
    related_identifiers: List[RelatedIdentifier] = Field(default_factory=list)
    funding_references: List[FundingReference] = Field(default_factory=list)
    msl_laboratories: List[MslLaboratory] = Field(default_factory=list)


# ----------------------------------------------------------------------
# VALIDATION RESULT MODELS
# ----------------------------------------------------------------------

class FieldError(BaseModel):
    """Single validation message attached to a dotted field path."""
    field: str
    message: str


class DroppedEntry(BaseModel):
    """Record of an entry removed during normalization."""
    collection: str
    index: int
    reason: str


class ValidationReport(BaseModel):
    """All validation errors of one submission, keyed by field path."""
    errors: Dict[str, List[str]] = Field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    @property
    def error_count(self) -> int:
        return sum(len(messages) for messages in self.errors.values())

    def add(self, field: str, message: str) -> None:
        self.errors.setdefault(field, []).append(message)

    def extend(self, errors: List[FieldError]) -> None:
        for error in errors:
            self.add(error.field, error.message)

    def merge(self, other: "ValidationReport") -> None:
        for field, messages in other.errors.items():
            for message in messages:
                self.add(field, message)

    def first_message(self) -> Optional[str]:
        for messages in self.errors.values():
            if messages:
                return messages[0]
        return None

    def to_response(self) -> Dict[str, Any]:
        """Laravel-style 422 body: summary message plus the error bag."""
        first = self.first_message() or "The given data was invalid."
        remaining = self.error_count - 1
        if remaining > 0:
            noun = "error" if remaining == 1 else "errors"
            first = f"{first} (and {remaining} more {noun})"
        return {"message": first, "errors": {k: list(v) for k, v in self.errors.items()}}


class NormalizationResult(BaseModel):
    """Normalized payload plus the entries that were dropped on the way."""
    data: Dict[str, Any]
    dropped: List[DroppedEntry] = Field(default_factory=list)
