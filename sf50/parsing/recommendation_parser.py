"""
Recommendation extractor for model replies.

The model is asked to answer in a one-line template:

    Recommendation: NOA 702 – Promotion | LAC: 5 CFR 335.103.
    Clarifications: Effective date? Competitive certificate number?
    Required SF-50 fields: Position title, pay plan, grade.
    OPM NOA Remarks: Permanent promotion from GS-12 Step 5 to GS-13 Step 1.

Replies only loosely follow it, so extraction is a list of independent
rules. Each rule looks for one section and reports a FieldOutcome; a rule
that finds nothing leaves its field empty and never stops the others.
Extracted codes are taken verbatim and are not checked against any code table.
"""
import re
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator

from sf50.utils.logger import get_logger

logger = get_logger("parsing.recommendation_parser")


class Recommendation(BaseModel):
    """Structured result of parsing one model reply."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    noa_code: str = Field("", alias="noa", description="Numeric NOA code, empty if not found")
    label: str = Field("", description="Action name tied to the code")
    legal_authority_code: Optional[str] = Field(None, alias="lac", description="Legal Authority Code, if given")
    clarifications: List[str] = Field(
        default_factory=list,
        description="Questions still to ask, each ending with '?'"
    )
    required_fields: Optional[List[str]] = Field(
        None,
        alias="requiredSF50Fields",
        description="SF-50 fields implicated by the action"
    )
    remarks_text: Optional[str] = Field(
        None,
        alias="opmRemarks",
        description="Suggested OPM NOA remarks, whitespace-normalized"
    )
    remark_codes: Optional[List[str]] = Field(None, alias="remarkCodes", description="Remark codes, if named")

    @model_validator(mode="after")
    def check_code_and_label(self) -> "Recommendation":
        if bool(self.noa_code) != bool(self.label):
            raise ValueError("noa_code and label must both be set or both be empty")
        return self


@dataclass(frozen=True)
class FieldOutcome:
    """Result of one extraction rule.

    ``rule`` is "primary" or "fallback" for the pattern that matched and
    None when the section was not found.
    """
    field: str
    value: Any = None
    rule: Optional[str] = None

    @property
    def matched(self) -> bool:
        return self.rule is not None


# ============================================================================
# Patterns
# ============================================================================

_NOA_PATTERN = re.compile(
    r"NOA\s+(\d+)\s*[–—-]\s*([^|.\n]+?)(?:\s*\||\.|\n|\Z)",
    re.IGNORECASE,
)

# A period followed by a digit belongs to a citation such as "5 CFR 335.103".
_LAC_PATTERN = re.compile(r"LAC:\s*([^?\n]+?)\s*(?:\.(?!\d)|\?|\n|\Z)", re.IGNORECASE)

_CLARIFICATIONS_PATTERN = re.compile(
    r"(?i:clarifications?):\s*(.*?)\s*(?=Required\b|OPM NOA Remarks)",
    re.DOTALL,
)
_CLARIFICATIONS_FALLBACK = re.compile(
    r"(?i:clarifications?):\s*([^.]+?)\s*(?=\.|OPM NOA Remarks|\Z)"
)

_FIELDS_PATTERN = re.compile(
    r"Required SF-50(?:\s+fields?)?:\s*(.*?)\s*OPM NOA Remarks",
    re.IGNORECASE | re.DOTALL,
)
_FIELDS_FALLBACK = re.compile(
    r"Required SF-50(?:\s+fields?)?:\s*(.*?)(?:\.\s*(?:OPM|\Z)|\Z)",
    re.IGNORECASE | re.DOTALL,
)

_REMARKS_PATTERN = re.compile(
    r"OPM NOA Remarks:\s*(.*?)(?:\n[ \t]*\n|\n[A-Z][a-z]+:|\Z)",
    re.DOTALL,
)

_REMARK_CODES_PATTERN = re.compile(r"remark codes?:\s*([^.]+?)(?:\.|\Z)", re.IGNORECASE)

_QUESTION_SPLIT = re.compile(r"\?+")
_LIST_SPLIT = re.compile(r"[,;]")
_AND_SPLIT = re.compile(r"\s+and\s+", re.IGNORECASE)
_CODE_SPLIT = re.compile(r"[,;]|\band\b", re.IGNORECASE)
_LEADING_CONJUNCTION = re.compile(r"^(?:and|or)\s+", re.IGNORECASE)
_TRAILING_PERIOD = re.compile(r"\.\s*$")
_CONJUNCTIONS = {"and", "or"}


# ============================================================================
# Text helpers
# ============================================================================

def collapse_whitespace(text: str) -> str:
    """Collapse runs of whitespace (including newlines) to single spaces."""
    return re.sub(r"\s+", " ", text).strip()


def split_questions(text: str) -> List[str]:
    """Split a clarifications section into questions that each end with one '?'."""
    questions = []
    for fragment in _QUESTION_SPLIT.split(text):
        fragment = collapse_whitespace(fragment).rstrip(". ")
        if not any(ch.isalnum() for ch in fragment):
            continue
        questions.append(fragment + "?")
    return questions


def split_fields(text: str) -> List[str]:
    """Split a required-fields section into clean field names."""
    text = _TRAILING_PERIOD.sub("", collapse_whitespace(text))

    fragments = _LIST_SPLIT.split(text)
    if len(fragments) == 1 and " and " in text.lower():
        fragments = _AND_SPLIT.split(text)

    fields = []
    for fragment in fragments:
        fragment = _TRAILING_PERIOD.sub("", fragment.strip()).strip()
        fragment = _LEADING_CONJUNCTION.sub("", fragment)
        if len(fragment) < 2 or fragment.lower() in _CONJUNCTIONS:
            continue
        fields.append(fragment)
    return fields


# ============================================================================
# Extraction rules
# ============================================================================

def extract_noa(response: str) -> FieldOutcome:
    """NOA code and label, e.g. 'NOA 702 – Promotion'."""
    match = _NOA_PATTERN.search(response)
    if match:
        code, label = match.group(1).strip(), match.group(2).strip()
        if code and label:
            return FieldOutcome("noa", (code, label), "primary")
    return FieldOutcome("noa")


def extract_legal_authority(response: str) -> FieldOutcome:
    match = _LAC_PATTERN.search(response)
    if match and match.group(1).strip():
        return FieldOutcome("legal_authority_code", match.group(1).strip(), "primary")
    return FieldOutcome("legal_authority_code")


def extract_clarifications(response: str) -> FieldOutcome:
    """
    Clarifying questions.

    The section runs until the 'Required' marker, or until the remarks
    marker if that comes first. When neither marker follows, or the
    section yields no questions, a looser pattern stops at the first
    period instead.
    """
    match = _CLARIFICATIONS_PATTERN.search(response)
    if match:
        questions = split_questions(match.group(1))
        if questions:
            return FieldOutcome("clarifications", questions, "primary")

    match = _CLARIFICATIONS_FALLBACK.search(response)
    if match:
        questions = split_questions(match.group(1))
        if questions:
            return FieldOutcome("clarifications", questions, "fallback")

    return FieldOutcome("clarifications")


def extract_required_fields(response: str) -> FieldOutcome:
    match = _FIELDS_PATTERN.search(response)
    rule = "primary"
    if not match:
        match = _FIELDS_FALLBACK.search(response)
        rule = "fallback"
    if not match:
        return FieldOutcome("required_fields")
    return FieldOutcome("required_fields", split_fields(match.group(1)), rule)


def extract_remarks(response: str) -> FieldOutcome:
    match = _REMARKS_PATTERN.search(response)
    if match:
        remarks = collapse_whitespace(match.group(1))
        if remarks:
            return FieldOutcome("remarks_text", remarks, "primary")
    return FieldOutcome("remarks_text")


def extract_remark_codes(response: str) -> FieldOutcome:
    match = _REMARK_CODES_PATTERN.search(response)
    if match:
        codes = [c.strip() for c in _CODE_SPLIT.split(match.group(1))]
        codes = [c for c in codes if c]
        if codes:
            return FieldOutcome("remark_codes", codes, "primary")
    return FieldOutcome("remark_codes")


EXTRACTION_RULES: Tuple[Callable[[str], FieldOutcome], ...] = (
    extract_noa,
    extract_legal_authority,
    extract_clarifications,
    extract_required_fields,
    extract_remarks,
    extract_remark_codes,
)


def extract_fields(response: str) -> List[FieldOutcome]:
    """Run every extraction rule over the reply; none depends on another."""
    response = response or ""
    return [rule(response) for rule in EXTRACTION_RULES]


def parse_noa_response(response: str) -> Recommendation:
    """
    Parse a model reply into a Recommendation.

    Never raises; sections that cannot be found are left empty.

    Args:
        response: The model's plain-text answer

    Returns:
        Recommendation with whatever sections were found
    """
    outcomes = extract_fields(response)

    values = {}
    for outcome in outcomes:
        if outcome.matched:
            values[outcome.field] = outcome.value
        else:
            logger.debug(f"No match for section '{outcome.field}'")

    noa_code, label = values.pop("noa", ("", ""))
    recommendation = Recommendation(noa_code=noa_code, label=label, **values)

    logger.info(
        f"Parsed reply: noa={recommendation.noa_code or '-'}, "
        f"clarifications={len(recommendation.clarifications)}, "
        f"fields={len(recommendation.required_fields or [])}, "
        f"matched={[o.field for o in outcomes if o.matched]}"
    )
    return recommendation
