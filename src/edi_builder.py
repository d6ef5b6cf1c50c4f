import logging
from datetime import date, datetime, timezone
from typing import Callable, Iterable, List, Optional, Union

from pydantic import BaseModel

from cdm import DelimiterSet, Segment
from document_inputs import PartyId
from document_registry import ID_QUALIFIERS, functional_id_for

logger = logging.getLogger(__name__)

ElementValue = Union[str, int, float, None]


# --- Formatting helpers ---
def format_date(value: Optional[Union[date, datetime]], short: bool = False) -> str:
    """CCYYMMDD (or YYMMDD when short); empty for a missing date."""
    if value is None:
        return ''
    return value.strftime('%y%m%d' if short else '%Y%m%d')


def format_time(value: Optional[Union[date, datetime]]) -> str:
    """HHMM; a plain date has no time component and renders as midnight."""
    if value is None:
        return ''
    if isinstance(value, datetime):
        return value.strftime('%H%M')
    return '0000'


def format_number(value: Optional[float]) -> str:
    """Whole numbers without a decimal point, others as the shortest repr."""
    if value is None:
        return ''
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def format_amount(value: Optional[float]) -> str:
    return f"{(value or 0):.2f}"


def scrub(text: str, reserved: Iterable[str]) -> str:
    """Replace every reserved delimiter character in `text` with a space."""
    for char in reserved:
        text = text.replace(char, ' ')
    return text


class SegmentBuilder:
    """
    Ordered segment accumulator. Keeps the running segment count needed for
    the SE trailer and renders the body with the configured delimiters.
    """

    def __init__(self, delimiters: Optional[DelimiterSet] = None):
        self.delimiters = delimiters or DelimiterSet()
        self.segments: List[Segment] = []

    def add_segment(self, segment_id: str, *elements: ElementValue) -> 'SegmentBuilder':
        values = [self._render_value(element) for element in elements]
        while values and values[-1] == '':
            values.pop()
        self.segments.append(Segment(segment_id=segment_id, elements=values))
        return self

    @property
    def segment_count(self) -> int:
        return len(self.segments)

    def to_string(self) -> str:
        return render_segments(self.segments, self.delimiters)

    def _render_value(self, element: ElementValue) -> str:
        if element is None:
            return ''
        if isinstance(element, float):
            text = format_number(element)
        else:
            text = str(element)
        # Structural characters inside data would split the element.
        return scrub(text, (self.delimiters.element, self.delimiters.segment))


def render_segment(segment: Segment, delimiters: DelimiterSet) -> str:
    return delimiters.element.join([segment.segment_id, *segment.elements])


def render_segments(segments: List[Segment], delimiters: DelimiterSet) -> str:
    """Every segment, the last one included, ends with exactly one terminator."""
    if not segments:
        return ''
    return delimiters.segment.join(render_segment(s, delimiters) for s in segments) + delimiters.segment


# --- Envelope ---
class EnvelopeOptions(BaseModel):
    auth_qualifier: str = '00'
    auth_info: str = ''
    security_qualifier: str = '00'
    security_info: str = ''
    control_version: str = '00401'
    gs_version: str = '004010'
    responsible_agency: str = 'X'
    ack_requested: str = '0'
    usage_indicator: str = 'P'  # P=Production, T=Test


def _fixed(value: Optional[str], width: int) -> str:
    return (value or '')[:width].ljust(width)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class EnvelopeWriter:
    """Builds ISA/GS headers and GE/IEA trailers around one transaction set."""

    def __init__(
        self,
        allocator,
        options: Optional[EnvelopeOptions] = None,
        delimiters: Optional[DelimiterSet] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.allocator = allocator
        self.options = options or EnvelopeOptions()
        self.delimiters = delimiters or DelimiterSet()
        self.clock = clock or _utc_now
        self.reserved = (self.delimiters.element, self.delimiters.segment, self.delimiters.component)

    def _field(self, value: Optional[str], width: Optional[int] = None) -> str:
        text = scrub(value or '', self.reserved)
        return _fixed(text, width) if width else text

    def isa(self, sender: PartyId, receiver: PartyId) -> str:
        now = self.clock()
        opts = self.options
        for role, party in (('sender', sender), ('receiver', receiver)):
            if party.qualifier and party.qualifier not in ID_QUALIFIERS:
                logger.warning(f"ISA {role} id qualifier '{party.qualifier}' is not a recognized code.")
        elements = [
            'ISA',
            self._field(opts.auth_qualifier, 2),
            self._field(opts.auth_info, 10),
            self._field(opts.security_qualifier, 2),
            self._field(opts.security_info, 10),
            self._field(sender.qualifier or 'ZZ', 2),
            self._field(sender.id, 15),
            self._field(receiver.qualifier or 'ZZ', 2),
            self._field(receiver.id, 15),
            now.strftime('%y%m%d'),
            now.strftime('%H%M'),
            self.delimiters.repetition,
            self._field(opts.control_version, 5),
            self.allocator.allocate('interchange'),
            self._field(opts.ack_requested, 1),
            self._field(opts.usage_indicator, 1),
            self.delimiters.component,
        ]
        return self.delimiters.element.join(elements)

    def gs(self, functional_id: str, sender: PartyId, receiver: PartyId) -> str:
        now = self.clock()
        return self.delimiters.element.join([
            'GS',
            self._field(functional_id),
            self._field(sender.id),
            self._field(receiver.id),
            now.strftime('%Y%m%d'),
            now.strftime('%H%M'),
            self.allocator.allocate('group'),
            self._field(self.options.responsible_agency),
            self._field(self.options.gs_version),
        ])

    def ge(self, transaction_count: int, control_number: str) -> str:
        return self.delimiters.element.join(['GE', str(transaction_count), control_number])

    def iea(self, group_count: int, control_number: str) -> str:
        return self.delimiters.element.join(['IEA', str(group_count), control_number])

    def wrap(self, transaction: str, transaction_set_id: str, sender: PartyId, receiver: PartyId) -> str:
        """Envelope one rendered transaction set; only single-transaction envelopes are produced."""
        functional_id = functional_id_for(transaction_set_id)
        isa = self.isa(sender, receiver)
        gs = self.gs(functional_id, sender, receiver)

        isa_control_number = isa.split(self.delimiters.element)[13]
        gs_control_number = gs.split(self.delimiters.element)[6]

        ge = self.ge(1, gs_control_number)
        iea = self.iea(1, isa_control_number)
        term = self.delimiters.segment
        logger.debug(f"Wrapped {transaction_set_id} in ISA {isa_control_number} / GS {gs_control_number} ({functional_id}).")
        return f"{isa}{term}{gs}{term}{transaction}{ge}{term}{iea}{term}"
