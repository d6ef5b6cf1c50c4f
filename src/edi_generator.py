import logging
from datetime import datetime
from typing import Any, Callable, Mapping, Optional, Union

from cdm import CdmModel, DelimiterSet
from control_numbers import ControlNumberAllocator
from document_builders import DOCUMENT_BUILDERS, DOCUMENT_INPUTS
from document_inputs import PartyId
from edi_builder import EnvelopeOptions, EnvelopeWriter, SegmentBuilder

logger = logging.getLogger(__name__)

PartyLike = Union[PartyId, Mapping[str, Any]]


def _as_party(party: PartyLike) -> PartyId:
    return party if isinstance(party, PartyId) else PartyId.model_validate(party)


class EdiGenerator:
    """
    Outbound facade: builds one transaction set and wraps it in its own
    ISA/GS envelope. Each call consumes fresh control numbers from the
    injected allocator.
    """

    def __init__(
        self,
        allocator: Optional[ControlNumberAllocator] = None,
        options: Optional[EnvelopeOptions] = None,
        delimiters: Optional[DelimiterSet] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.allocator = allocator or ControlNumberAllocator()
        self.delimiters = delimiters or DelimiterSet()
        self.envelope = EnvelopeWriter(self.allocator, options, self.delimiters, clock)

    def generate(self, transaction_set_id: str, data: Union[CdmModel, Mapping[str, Any]], sender: PartyLike, receiver: PartyLike) -> str:
        builder_fn = DOCUMENT_BUILDERS.get(transaction_set_id)
        if builder_fn is None:
            raise ValueError(f"Generation is not supported for transaction set {transaction_set_id}")
        input_model = DOCUMENT_INPUTS[transaction_set_id]
        document = data if isinstance(data, input_model) else input_model.model_validate(data)

        control_number = self.allocator.allocate('transaction')
        builder = builder_fn(document, control_number, SegmentBuilder(self.delimiters))
        edi = self.envelope.wrap(builder.to_string(), transaction_set_id, _as_party(sender), _as_party(receiver))
        logger.info(f"Generated {transaction_set_id} transaction {control_number} ({builder.segment_count} segments).")
        return edi

    def generate_810(self, data, sender: PartyLike, receiver: PartyLike) -> str:
        return self.generate('810', data, sender, receiver)

    def generate_855(self, data, sender: PartyLike, receiver: PartyLike) -> str:
        return self.generate('855', data, sender, receiver)

    def generate_856(self, data, sender: PartyLike, receiver: PartyLike) -> str:
        return self.generate('856', data, sender, receiver)

    def generate_940(self, data, sender: PartyLike, receiver: PartyLike) -> str:
        return self.generate('940', data, sender, receiver)

    def generate_945(self, data, sender: PartyLike, receiver: PartyLike) -> str:
        return self.generate('945', data, sender, receiver)

    def generate_947(self, data, sender: PartyLike, receiver: PartyLike) -> str:
        return self.generate('947', data, sender, receiver)
