"""
Parsing of model replies into structured recommendations.
"""
from sf50.parsing.recommendation_parser import (
    EXTRACTION_RULES,
    FieldOutcome,
    Recommendation,
    collapse_whitespace,
    extract_fields,
    parse_noa_response,
)

__all__ = [
    "EXTRACTION_RULES",
    "FieldOutcome",
    "Recommendation",
    "collapse_whitespace",
    "extract_fields",
    "parse_noa_response",
]
