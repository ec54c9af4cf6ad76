"""Editor-facing builders: resource type lookup, curation query, citation, dates."""

from .resource_types import ResourceTypeLookup, get_resource_type_lookup, reset_resource_type_lookup
from .query_builder import (
    JSON_ENCODED_COLLECTIONS,
    build_curation_query_from_resource,
    parse_curation_query,
)
from .citation import build_citation, read_creator_name
from .dates import serialize_date_entry, parse_date_entry, build_date_time, parse_date_time

__all__ = [
    "ResourceTypeLookup",
    "get_resource_type_lookup",
    "reset_resource_type_lookup",
    "JSON_ENCODED_COLLECTIONS",
    "build_curation_query_from_resource",
    "parse_curation_query",
    "build_citation",
    "read_creator_name",
    "serialize_date_entry",
    "parse_date_entry",
    "build_date_time",
    "parse_date_time",
]
