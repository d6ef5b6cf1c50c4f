import logging
import re
from typing import Dict, List, Optional

from pydantic import ValidationError

from cdm import (
    CdmFunctionalGroup,
    CdmInterchange,
    CdmParseError,
    CdmTransaction,
    DelimiterSet,
    GroupTrailer,
    InterchangeTrailer,
    LINE_TERMINATORS,
    ParseResult,
    Segment,
    TransactionTrailer,
)
from document_parsers import dispatch_transaction
from document_registry import get_document_type

logger = logging.getLogger(__name__)

# Fixed ISA offsets. ISA is 16 fixed-width elements, so these characters
# always land at the same place in a well-formed header.
ISA_ELEMENT_OFFSET = 3
ISA_REPETITION_OFFSET = 82
ISA_COMPONENT_OFFSET = 104
ISA_SEGMENT_OFFSET = 105
ISA_MIN_LENGTH = 106

_LEADING_INT = re.compile(r'^\s*[-+]?\d+')


def _to_int(value: Optional[str]) -> int:
    """parseInt-style: leading digits win, anything unparseable is 0."""
    if not value:
        return 0
    match = _LEADING_INT.match(value)
    return int(match.group()) if match else 0


def _clean(value: Optional[str]) -> Optional[str]:
    return value.strip() if value is not None else None


# --- Delimiter Resolver ---
def resolve_delimiters(edi_string: str, overrides: Optional[Dict[str, str]] = None) -> DelimiterSet:
    base = DelimiterSet(**(overrides or {}))
    clean_edi = edi_string.lstrip()
    if not clean_edi.startswith('ISA') or len(clean_edi) <= ISA_ELEMENT_OFFSET:
        return base

    # Sniffed characters in priority order; the element separator wins collisions.
    sniffed = {'element': clean_edi[ISA_ELEMENT_OFFSET]}
    if len(clean_edi) >= ISA_MIN_LENGTH:
        sniffed['segment'] = clean_edi[ISA_SEGMENT_OFFSET]
        sniffed['component'] = clean_edi[ISA_COMPONENT_OFFSET]
        repetition = clean_edi[ISA_REPETITION_OFFSET]
        # 004010 and earlier carry the standards id ('U') here, not a separator.
        if not repetition.isalnum() and not repetition.isspace():
            sniffed['repetition'] = repetition
    else:
        logger.warning(f"ISA header is only {len(clean_edi)} characters; keeping default component/segment delimiters.")

    try:
        delimiters = DelimiterSet(**{**base.model_dump(), **sniffed})
    except ValidationError:
        delimiters = _merge_one_by_one(base, sniffed)
    logger.debug(f"Delimiters detected: Element='{delimiters.element}', Segment={delimiters.segment!r}, Component='{delimiters.component}', Repetition='{delimiters.repetition}'")
    return delimiters


def _merge_one_by_one(base: DelimiterSet, sniffed: Dict[str, str]) -> DelimiterSet:
    """Take each sniffed character that keeps the set valid; keep the base value for the rest."""
    merged = base.model_dump()
    for name, char in sniffed.items():
        candidate = {**merged, name: char}
        try:
            DelimiterSet(**candidate)
        except ValidationError as e:
            logger.warning(f"Sniffed ISA {name} delimiter {char!r} is unusable ({e.errors()[0]['msg']}); keeping {merged[name]!r}.")
            continue
        merged = candidate
    return DelimiterSet(**merged)


# --- Segment Tokenizer ---
def tokenize(edi_string: str, delimiters: DelimiterSet) -> List[Segment]:
    if delimiters.segment in LINE_TERMINATORS:
        edi_content = edi_string.replace('\r\n', '\n').replace('\r', '\n')
        terminator = '\n'
    else:
        edi_content = edi_string.replace('\r', '').replace('\n', '')
        terminator = delimiters.segment
    segments: List[Segment] = []
    for raw_segment in edi_content.split(terminator):
        if not raw_segment.strip():
            continue
        parts = raw_segment.split(delimiters.element)
        segments.append(Segment(segment_id=parts[0].strip(), elements=parts[1:]))
    return segments


# --- Envelope header/trailer readers ---
def _read_isa(segment: Segment) -> CdmInterchange:
    v = lambda pos: _clean(segment.get_element(pos))
    return CdmInterchange(
        auth_info_qualifier=v(1),
        auth_info=v(2),
        security_info_qualifier=v(3),
        security_info=v(4),
        sender_id_qualifier=v(5),
        sender_id=v(6),
        receiver_id_qualifier=v(7),
        receiver_id=v(8),
        date=v(9),
        time=v(10),
        repetition_separator=v(11),
        control_version_number=v(12),
        control_number=v(13),
        ack_requested=v(14),
        usage_indicator=v(15),  # P=Production, T=Test
        component_separator=v(16),
    )


def _read_gs(segment: Segment) -> CdmFunctionalGroup:
    v = lambda pos: _clean(segment.get_element(pos))
    return CdmFunctionalGroup(
        functional_id=v(1),
        sender_code=v(2),
        receiver_code=v(3),
        date=v(4),
        time=v(5),
        control_number=v(6),
        responsible_agency=v(7),
        version=v(8),
    )


def _read_st(segment: Segment) -> CdmTransaction:
    return CdmTransaction(
        transaction_set_id=_clean(segment.get_element(1)),
        control_number=_clean(segment.get_element(2)),
        implementation_convention=_clean(segment.get_element(3)),
    )


class EdiParser:
    """
    Single forward pass over the segment stream that rebuilds the
    ISA -> GS -> ST nesting, then dispatches every transaction set to its
    document reader. Never raises for malformed partner data.
    """

    def __init__(self, edi_string: str, delimiter_overrides: Optional[Dict[str, str]] = None):
        self.edi_string = edi_string or ''
        self.delimiter_overrides = delimiter_overrides or {}

    def parse(self) -> ParseResult:
        result = ParseResult()
        try:
            result.delimiters = resolve_delimiters(self.edi_string, self.delimiter_overrides)
            segments = tokenize(self.edi_string, result.delimiters)
            logger.debug(f"Tokenized {len(segments)} segments.")
            self._build_envelopes(segments, result)
            self._dispatch_transactions(result)
        except Exception as e:
            logger.error(f"Critical error parsing EDI: {str(e)}", exc_info=True)
            result.errors.append(CdmParseError(message=str(e)))

        transaction_count = len(result.transactions())
        logger.info(
            f"Parsed {len(result.interchanges)} interchange(s), {transaction_count} transaction set(s), "
            f"{len(result.errors)} error(s), {len(result.orphan_segments)} orphan segment(s)."
        )
        return result

    def _build_envelopes(self, segments: List[Segment], result: ParseResult) -> None:
        current_interchange: Optional[CdmInterchange] = None
        current_group: Optional[CdmFunctionalGroup] = None
        current_transaction: Optional[CdmTransaction] = None

        for segment in segments:
            segment_id = segment.segment_id

            if segment_id == 'ISA':
                current_interchange = _read_isa(segment)
                result.interchanges.append(current_interchange)

            elif segment_id == 'IEA':
                if current_interchange is not None:
                    current_interchange.trailer = InterchangeTrailer(
                        number_of_groups=_to_int(segment.get_element(1)),
                        control_number=_clean(segment.get_element(2)),
                    )
                else:
                    self._orphan(segment, result)
                current_interchange = None
                current_group = None
                current_transaction = None

            elif segment_id == 'GS':
                current_group = _read_gs(segment)
                if current_interchange is not None:
                    current_interchange.groups.append(current_group)
                else:
                    self._orphan(segment, result)

            elif segment_id == 'GE':
                if current_group is not None:
                    current_group.trailer = GroupTrailer(
                        number_of_transactions=_to_int(segment.get_element(1)),
                        control_number=_clean(segment.get_element(2)),
                    )
                else:
                    self._orphan(segment, result)
                current_group = None

            elif segment_id == 'ST':
                current_transaction = _read_st(segment)
                if current_group is not None:
                    current_group.transactions.append(current_transaction)
                else:
                    self._orphan(segment, result)

            elif segment_id == 'SE':
                if current_transaction is not None:
                    current_transaction.trailer = TransactionTrailer(
                        segment_count=_to_int(segment.get_element(1)),
                        control_number=_clean(segment.get_element(2)),
                    )
                else:
                    self._orphan(segment, result)
                current_transaction = None

            elif current_transaction is not None:
                current_transaction.segments.append(segment)

            else:
                self._orphan(segment, result)

    def _orphan(self, segment: Segment, result: ParseResult) -> None:
        logger.debug(f"Orphan segment '{segment.segment_id}' has no open envelope to attach to.")
        result.orphan_segments.append(segment)

    def _check_registered(self, group: CdmFunctionalGroup, transaction: CdmTransaction) -> None:
        info = get_document_type(transaction.transaction_set_id)
        if info is None:
            logger.info(f"Transaction set '{transaction.transaction_set_id}' is not a registered document type.")
        elif group.functional_id and group.functional_id != info.functional_id:
            logger.warning(
                f"Transaction set {transaction.transaction_set_id} ({info.name}) arrived in a "
                f"'{group.functional_id}' group; expected '{info.functional_id}'."
            )

    def _dispatch_transactions(self, result: ParseResult) -> None:
        for interchange in result.interchanges:
            for group in interchange.groups:
                for transaction in group.transactions:
                    self._check_registered(group, transaction)
        for transaction in result.transactions():
            try:
                transaction.parsed = dispatch_transaction(transaction)
            except Exception as e:
                logger.error(
                    f"Failed to read transaction set {transaction.transaction_set_id} "
                    f"(control number {transaction.control_number}): {str(e)}",
                    exc_info=True,
                )
                result.errors.append(CdmParseError(
                    message=f"Transaction set {transaction.transaction_set_id} "
                            f"({transaction.control_number}) could not be read: {str(e)}",
                    segment_id='ST',
                ))


def parse_edi(edi_string: str, delimiter_overrides: Optional[Dict[str, str]] = None) -> ParseResult:
    """Parse raw X12 text into a ParseResult. Malformed input never raises."""
    return EdiParser(edi_string, delimiter_overrides).parse()
