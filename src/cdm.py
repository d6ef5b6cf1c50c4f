from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel
from typing import Any, List, Optional

# Canonical Data Model (CDM) for a parsed X12 interchange.
# The tree is strictly ISA -> GS -> ST; every node owns its children and
# nothing points back up.

LINE_TERMINATORS = ('\r', '\n')


class CdmModel(BaseModel):
    """Base for every CDM node: snake_case in Python, camelCase on the wire."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DelimiterSet(CdmModel):
    """The four structural characters of one interchange."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    element: str = '*'
    segment: str = '~'
    component: str = ':'
    repetition: str = '^'

    @model_validator(mode='after')
    def _check_distinct(self) -> 'DelimiterSet':
        chars = [self.element, self.segment, self.component, self.repetition]
        for name, char in zip(('element', 'segment', 'component', 'repetition'), chars):
            if len(char) != 1:
                raise ValueError(f"Delimiter {char!r} must be a single character.")
            # Only the segment terminator may be a line break.
            if char.isspace() and not (name == 'segment' and char in LINE_TERMINATORS):
                raise ValueError(f"Delimiter {char!r} must not be whitespace.")
        if len(set(chars)) != len(chars):
            raise ValueError(f"Delimiters must be distinct, got {chars}.")
        return self


class CdmParseError(CdmModel):
    """A parse-time failure surfaced to the caller instead of being raised."""
    message: str
    segment_id: Optional[str] = None


class Segment(CdmModel):
    """Represents a single EDI segment."""
    segment_id: str
    elements: List[str] = Field(default_factory=list)

    def get_element(self, position: int) -> Optional[str]:
        """Retrieves the raw value of an element by its position (1-based index)."""
        if 1 <= position <= len(self.elements):
            return self.elements[position - 1]
        return None

    def value(self, position: int) -> Optional[str]:
        """Trimmed element value; empty or missing elements come back as None."""
        raw = self.get_element(position)
        if raw is None:
            return None
        raw = raw.strip()
        return raw or None


class TransactionTrailer(CdmModel):
    segment_count: int = 0
    control_number: Optional[str] = None


class GroupTrailer(CdmModel):
    number_of_transactions: int = 0
    control_number: Optional[str] = None


class InterchangeTrailer(CdmModel):
    number_of_groups: int = 0
    control_number: Optional[str] = None


class CdmTransaction(CdmModel):
    """One ST..SE span. `segments` holds everything between ST and SE."""
    transaction_set_id: Optional[str] = None
    control_number: Optional[str] = None
    implementation_convention: Optional[str] = None
    segments: List[Segment] = Field(default_factory=list)
    trailer: Optional[TransactionTrailer] = None
    parsed: Optional[Any] = None


class CdmFunctionalGroup(CdmModel):
    functional_id: Optional[str] = None
    sender_code: Optional[str] = None
    receiver_code: Optional[str] = None
    date: Optional[str] = None
    time: Optional[str] = None
    control_number: Optional[str] = None
    responsible_agency: Optional[str] = None
    version: Optional[str] = None
    transactions: List[CdmTransaction] = Field(default_factory=list)
    trailer: Optional[GroupTrailer] = None


class CdmInterchange(CdmModel):
    auth_info_qualifier: Optional[str] = None
    auth_info: Optional[str] = None
    security_info_qualifier: Optional[str] = None
    security_info: Optional[str] = None
    sender_id_qualifier: Optional[str] = None
    sender_id: Optional[str] = None
    receiver_id_qualifier: Optional[str] = None
    receiver_id: Optional[str] = None
    date: Optional[str] = None
    time: Optional[str] = None
    repetition_separator: Optional[str] = None
    control_version_number: Optional[str] = None
    control_number: Optional[str] = None
    ack_requested: Optional[str] = None
    usage_indicator: Optional[str] = None
    component_separator: Optional[str] = None
    groups: List[CdmFunctionalGroup] = Field(default_factory=list)
    trailer: Optional[InterchangeTrailer] = None


class ParseResult(CdmModel):
    """Top-level outcome of a parse: partial structure plus diagnostics."""
    delimiters: DelimiterSet = Field(default_factory=DelimiterSet)
    interchanges: List[CdmInterchange] = Field(default_factory=list)
    errors: List[CdmParseError] = Field(default_factory=list)
    orphan_segments: List[Segment] = Field(default_factory=list)

    def transactions(self) -> List[CdmTransaction]:
        """All transaction sets in document order."""
        return [
            transaction
            for interchange in self.interchanges
            for group in interchange.groups
            for transaction in group.transactions
        ]
