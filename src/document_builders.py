"""
Outbound document builders.

Each `build_NNN(data, control_number, builder)` appends the ST..SE span for
one transaction set to `builder` and returns it. Segments whose input is
absent are left out; SE01 counts every segment including ST and SE.
"""
import logging
import math
from typing import Callable, Dict, List, Optional, Type

from cdm import CdmModel
from document_inputs import (
    AsnInput,
    InventoryAdjustmentInput,
    InvoiceInput,
    ItemIdentifiers,
    PartyInput,
    PoAckInput,
    ShippingAdviceInput,
    ShippingOrderInput,
)
from document_registry import UOM_CODES
from edi_builder import SegmentBuilder, format_amount, format_date, format_time

logger = logging.getLogger(__name__)


def _uom(code: Optional[str]) -> str:
    """Unit of measure, EA when absent. Unlisted codes are passed through as given."""
    if not code:
        return 'EA'
    if code not in UOM_CODES:
        logger.debug(f"Unit of measure '{code}' is not a standard code; sending it as-is.")
    return code


def _product_id_elements(item: ItemIdentifiers, include_vendor_part: bool = True) -> List[str]:
    elements: List[str] = []
    if item.upc:
        elements += ['UP', item.upc]
    if item.sku:
        elements += ['SK', item.sku]
    if include_vendor_part and item.vendor_part:
        elements += ['VP', item.vendor_part]
    return elements


def _add_party_loop(builder: SegmentBuilder, entity_code: str, party: Optional[PartyInput], with_contact: bool = False) -> None:
    if party is None:
        return
    builder.add_segment('N1', entity_code, party.name, party.id_qualifier or '92', party.id)
    if party.address1:
        builder.add_segment('N3', party.address1, party.address2)
    if party.city:
        builder.add_segment('N4', party.city, party.state, party.zip, party.country or 'US')
    if with_contact and party.contact:
        builder.add_segment('G61', 'CN', party.contact.name, 'TE', party.contact.phone)


def _close(builder: SegmentBuilder, control_number: str) -> SegmentBuilder:
    # +1 for the SE segment itself
    builder.add_segment('SE', builder.segment_count + 1, control_number)
    logger.debug(f"Closed transaction set {control_number} with {builder.segment_count} segments.")
    return builder


# --- 810 Invoice ---
def build_810(data: InvoiceInput, control_number: str, builder: SegmentBuilder) -> SegmentBuilder:
    builder.add_segment('ST', '810', control_number)
    builder.add_segment(
        'BIG',
        format_date(data.invoice_date),
        data.invoice_number,
        format_date(data.po_date),
        data.po_number,
    )
    if data.currency:
        builder.add_segment('CUR', 'BY', data.currency)
    for ref in data.references:
        builder.add_segment('REF', ref.qualifier, ref.value)

    _add_party_loop(builder, 'ST', data.ship_to)
    _add_party_loop(builder, 'BT', data.bill_to)

    for item in data.items:
        builder.add_segment(
            'IT1',
            item.line_number,
            item.quantity,
            _uom(item.uom),
            format_amount(item.unit_price),
            '',  # basis of unit price
            *_product_id_elements(item),
        )
        if item.description:
            builder.add_segment('PID', 'F', '', '', '', item.description)

    total_amount = sum((item.quantity or 0) * (item.unit_price or 0) for item in data.items)
    # Halves round up, never to even
    builder.add_segment('TDS', math.floor(total_amount * 100 + 0.5))

    if data.carrier:
        builder.add_segment('CAD', data.carrier.method or 'M', '', '', data.carrier.scac, data.carrier.name)

    return _close(builder, control_number)


# --- 855 Purchase Order Acknowledgment ---
def build_855(data: PoAckInput, control_number: str, builder: SegmentBuilder) -> SegmentBuilder:
    builder.add_segment('ST', '855', control_number)
    builder.add_segment(
        'BAK',
        data.purpose or '00',
        data.ack_type or 'AC',
        data.po_number,
        format_date(data.date),
        data.request_reference,
    )
    for ref in data.references:
        builder.add_segment('REF', ref.qualifier, ref.value)

    for item in data.items:
        builder.add_segment(
            'PO1',
            item.line_number,
            item.quantity,
            _uom(item.uom),
            format_amount(item.unit_price),
            '',
            *_product_id_elements(item, include_vendor_part=False),
        )
        status = item.status or 'IA'
        builder.add_segment(
            'ACK',
            status,
            item.ack_quantity if item.ack_quantity is not None else item.quantity,
            _uom(item.uom),
            format_date(item.scheduled_date),
            '', '', '',
            item.reject_reason if status == 'IR' else '',
        )

    builder.add_segment('CTT', len(data.items))
    return _close(builder, control_number)


# --- 856 Advance Ship Notice ---
def build_856(data: AsnInput, control_number: str, builder: SegmentBuilder) -> SegmentBuilder:
    builder.add_segment('ST', '856', control_number)
    builder.add_segment(
        'BSN',
        data.purpose or '00',
        data.shipment_id,
        format_date(data.ship_date),
        format_time(data.ship_date),
        '0001',
    )

    hl_counter = 1
    shipment_hl = hl_counter
    builder.add_segment('HL', shipment_hl, '', 'S')

    if data.packaging:
        builder.add_segment(
            'TD1',
            data.packaging.code or 'CTN',
            data.packaging.quantity or 1,
            '', '', '', '',
            data.packaging.weight,
            data.packaging.weight_unit or 'LB',
        )
    if data.carrier:
        builder.add_segment('TD5', 'B', '2', data.carrier.scac, data.carrier.method or 'M', data.carrier.name)
    if data.equipment:
        builder.add_segment(
            'TD3',
            data.equipment.type or 'TL',
            '',
            data.equipment.number,
            '', '', '', '', '',
            data.equipment.seal_number,
        )
    if data.bol_number:
        builder.add_segment('REF', 'BM', data.bol_number)
    if data.pro_number:
        builder.add_segment('REF', 'CN', data.pro_number)
    if data.ship_date:
        builder.add_segment('DTM', '011', format_date(data.ship_date))
    if data.delivery_date:
        builder.add_segment('DTM', '017', format_date(data.delivery_date))

    _add_party_loop(builder, 'SF', data.ship_from)
    _add_party_loop(builder, 'ST', data.ship_to)

    # An explicit empty list means no order levels at all
    orders = data.orders if data.orders is not None else [None]
    for order in orders:
        hl_counter += 1
        order_hl = hl_counter
        builder.add_segment('HL', order_hl, shipment_hl, 'O')
        if order is None:
            builder.add_segment('PRF', data.po_number)
            order_items = data.items
        else:
            builder.add_segment('PRF', order.po_number, order.release_number, '', format_date(order.date))
            order_items = order.items if order.items is not None else data.items

        for item in order_items:
            hl_counter += 1
            builder.add_segment('HL', hl_counter, order_hl, 'I')
            builder.add_segment('LIN', item.line_number, *_product_id_elements(item))
            builder.add_segment('SN1', '', item.quantity, _uom(item.uom))
            if item.description:
                builder.add_segment('PID', 'F', '', '', '', item.description)
            if item.sscc:
                builder.add_segment('MAN', 'GM', item.sscc)
            if item.lot_number:
                builder.add_segment('MAN', 'L', item.lot_number)

    # CTT01 counts HL levels, not items
    builder.add_segment('CTT', hl_counter)
    return _close(builder, control_number)


# --- 940 Warehouse Shipping Order ---
def build_940(data: ShippingOrderInput, control_number: str, builder: SegmentBuilder) -> SegmentBuilder:
    builder.add_segment('ST', '940', control_number)
    builder.add_segment('W05', data.order_status or 'N', data.order_number, data.po_number, data.link_sequence)

    if data.depositor:
        builder.add_segment('N1', 'DE', data.depositor.name, '92', data.depositor.id)
    _add_party_loop(builder, 'ST', data.ship_to, with_contact=True)

    for note in data.notes:
        builder.add_segment('N9', note.qualifier or 'ZZ', note.value)

    if data.carrier:
        builder.add_segment(
            'W66',
            data.carrier.method or 'M',
            '', '',
            data.carrier.scac,
            data.carrier.name,
            data.carrier.service_level,
        )

    for line_number, item in enumerate(data.items, start=1):
        builder.add_segment('LX', line_number)
        builder.add_segment(
            'W01',
            item.quantity,
            _uom(item.uom),
            '', '',
            item.weight,
            *_product_id_elements(item, include_vendor_part=False),
        )
        if item.description:
            builder.add_segment('G69', item.description)
        if item.lot_number:
            builder.add_segment('N9', 'LT', item.lot_number)
        if item.serial_number:
            builder.add_segment('N9', 'SE', item.serial_number)
        if item.lot:
            builder.add_segment(
                'W20',
                item.lot.number,
                '', '',
                format_date(item.lot.expiration_date),
                format_date(item.lot.manufacture_date),
            )

    total_quantity = sum(item.quantity or 0 for item in data.items)
    total_weight = sum(item.weight or 0 for item in data.items)
    builder.add_segment('W76', len(data.items), float(total_quantity), 'EA', float(total_weight), 'LB')
    return _close(builder, control_number)


# --- 945 Warehouse Shipping Advice ---
def build_945(data: ShippingAdviceInput, control_number: str, builder: SegmentBuilder) -> SegmentBuilder:
    builder.add_segment('ST', '945', control_number)
    builder.add_segment(
        'W06',
        data.report_type or 'B',
        data.order_number,
        format_date(data.ship_date),
        data.shipment_id,
        '',
        data.warehouse_order_number,
    )
    if data.depositor_ref:
        builder.add_segment('N9', 'DO', data.depositor_ref)

    if data.carrier:
        builder.add_segment(
            'W27',
            data.carrier.method or 'M',
            '',
            data.carrier.scac,
            data.carrier.name,
            '',
            data.bol_number,
            '',
            data.carrier.scac,
        )
    if data.consolidation:
        builder.add_segment(
            'W28',
            data.consolidation.weight,
            data.consolidation.weight_qualifier or 'G',
            data.consolidation.quantity,
            data.consolidation.description,
        )

    _add_party_loop(builder, 'ST', data.ship_to)

    for line_number, item in enumerate(data.items, start=1):
        builder.add_segment('LX', line_number)
        builder.add_segment(
            'W12',
            item.shipment_type or 'SH',
            item.quantity_shipped,
            _uom(item.uom),
            '',
            *_product_id_elements(item, include_vendor_part=False),
        )
        if item.description:
            builder.add_segment('G69', item.description)
        if item.lot_number:
            builder.add_segment('N9', 'LT', item.lot_number)

    total_weight = sum(item.weight or 0 for item in data.items)
    builder.add_segment('W03', len(data.items), float(total_weight), 'LB', '', '', data.pallet_count)
    return _close(builder, control_number)


# --- 947 Warehouse Inventory Adjustment Advice ---
def build_947(data: InventoryAdjustmentInput, control_number: str, builder: SegmentBuilder) -> SegmentBuilder:
    builder.add_segment('ST', '947', control_number)
    builder.add_segment(
        'W15',
        data.transaction_type or 'A',
        format_date(data.date),
        format_time(data.date),
        data.reference_id,
    )
    if data.depositor:
        builder.add_segment('N1', 'DE', data.depositor.name, '92', data.depositor.id)

    for adjustment in data.adjustments:
        builder.add_segment(
            'W07',
            adjustment.quantity,
            _uom(adjustment.uom),
            '', '', '',
            *_product_id_elements(adjustment, include_vendor_part=False),
        )
        builder.add_segment(
            'W13',
            adjustment.quantity_before,
            adjustment.quantity_after,
            _uom(adjustment.uom),
            adjustment.reason_code,
        )
        if adjustment.lot_number:
            builder.add_segment('W20', adjustment.lot_number, '', '', format_date(adjustment.expiration_date))
        if adjustment.notes:
            builder.add_segment('N9', 'ZZ', adjustment.notes)

    total_quantity = sum(abs(adjustment.quantity or 0) for adjustment in data.adjustments)
    builder.add_segment('W14', float(total_quantity), '', len(data.adjustments))
    return _close(builder, control_number)


DocumentBuilder = Callable[[CdmModel, str, SegmentBuilder], SegmentBuilder]

DOCUMENT_BUILDERS: Dict[str, DocumentBuilder] = {
    '810': build_810,
    '855': build_855,
    '856': build_856,
    '940': build_940,
    '945': build_945,
    '947': build_947,
}

DOCUMENT_INPUTS: Dict[str, Type[CdmModel]] = {
    '810': InvoiceInput,
    '855': PoAckInput,
    '856': AsnInput,
    '940': ShippingOrderInput,
    '945': ShippingAdviceInput,
    '947': InventoryAdjustmentInput,
}
