"""
Transaction-set readers.

Each reader turns the raw segment list of one ST..SE span into a structured
document. Segments are dispatched by id to `_on_<segment id>` handler
methods; readers keep a small cursor (current party, current item) so that
repeated child segments such as N3/N4 or ACK attach to the most recent loop
header, emulating X12 loop nesting without a separate grouping pass.
"""
import logging
import re
from typing import Dict, List, Optional, Type

from cdm import CdmTransaction, Segment
from document_registry import PRODUCT_ID_QUALIFIERS
from document_models import (
    AdjustmentDetail,
    AdvanceShipNotice,
    AsnItem,
    AsnOrder,
    Carrier,
    Consolidation,
    Contact,
    DateReference,
    Equipment,
    GenericDocument,
    HierarchicalLevel,
    InventoryAdjustment,
    InventoryAdjustmentHeader,
    InventoryAdjustmentLine,
    InventoryAdjustmentTotals,
    Invoice,
    InvoiceCarrier,
    InvoiceHeader,
    InvoiceItem,
    LotInfo,
    Mark,
    Packaging,
    Party,
    PoAckHeader,
    PoAckItem,
    ProductId,
    PurchaseOrder,
    PurchaseOrderAcknowledgment,
    PurchaseOrderHeader,
    PurchaseOrderItem,
    Reference,
    ShippingAdviceHeader,
    ShippingAdviceItem,
    ShippingAdviceTotals,
    ShippingOrderHeader,
    ShippingOrderItem,
    ShippingOrderTotals,
    StockReceiptHeader,
    StockReceiptItem,
    StockReceiptTotals,
    StockTransferHeader,
    StockTransferItem,
    StockTransferReceipt,
    StockTransferShipment,
    WarehouseCarrier,
    WarehouseShippingAdvice,
    WarehouseShippingOrder,
)

logger = logging.getLogger(__name__)

_LEADING_FLOAT = re.compile(r'^\s*[-+]?(\d+\.?\d*|\.\d+)([eE][-+]?\d+)?')
_LEADING_INT = re.compile(r'^\s*[-+]?\d+')


def to_float(value: Optional[str]) -> float:
    """parseFloat-style permissive number: leading numeric prefix or 0."""
    if not value:
        return 0.0
    match = _LEADING_FLOAT.match(value)
    return float(match.group()) if match else 0.0


def to_int(value: Optional[str]) -> int:
    if not value:
        return 0
    match = _LEADING_INT.match(value)
    return int(match.group()) if match else 0


def product_ids(segment: Segment, start: int) -> List[ProductId]:
    """Qualifier/value pairs from `start` (1-based) to the end of the segment."""
    ids: List[ProductId] = []
    for position in range(start, len(segment.elements) + 1, 2):
        qualifier, value = segment.value(position), segment.value(position + 1)
        if qualifier and value:
            if qualifier not in PRODUCT_ID_QUALIFIERS:
                logger.debug(f"{segment.segment_id}: unrecognized product id qualifier '{qualifier}'.")
            ids.append(ProductId(qualifier=qualifier, value=value))
    return ids


def read_party(segment: Segment) -> Party:
    return Party(
        qualifier=segment.value(1),
        name=segment.value(2),
        id_qualifier=segment.value(3),
        id=segment.value(4),
    )


def apply_address(party: Party, segment: Segment) -> None:
    if segment.segment_id == 'N3':
        party.address1 = segment.value(1)
        party.address2 = segment.value(2)
    else:
        party.city = segment.value(1)
        party.state = segment.value(2)
        party.zip = segment.value(3)
        party.country = segment.value(4)


class DocumentReader:
    """Base reader: walk segments, call the matching handler, ignore the rest."""
    document_class: Type = GenericDocument

    def __init__(self):
        self.document = self.document_class()

    def read(self, segments: List[Segment]):
        for segment in segments:
            handler = getattr(self, f"_on_{segment.segment_id.lower()}", None)
            if handler is None:
                logger.debug(f"{type(self).__name__}: no handler for '{segment.segment_id}', skipping.")
                continue
            handler(segment)
        return self.document


class PartyLoopMixin:
    """N1/N3/N4 handling shared by documents with a plain parties list."""

    def _on_n1(self, seg: Segment) -> None:
        self.document.parties.append(read_party(seg))

    def _on_n3(self, seg: Segment) -> None:
        if self.document.parties:
            apply_address(self.document.parties[-1], seg)

    _on_n4 = _on_n3


# --- 850 Purchase Order ---
class PurchaseOrderReader(PartyLoopMixin, DocumentReader):
    document_class = PurchaseOrder

    def __init__(self):
        super().__init__()
        self.current_item: Optional[PurchaseOrderItem] = None

    def _on_beg(self, seg: Segment) -> None:
        header = self.document.header
        header.purpose = seg.value(1)
        header.order_type = seg.value(2)
        header.po_number = seg.value(3)
        header.release_number = seg.value(4)
        header.date = seg.value(5)

    def _on_cur(self, seg: Segment) -> None:
        self.document.header.currency = seg.value(2)

    def _on_ref(self, seg: Segment) -> None:
        self.document.header.references.append(
            Reference(qualifier=seg.value(1), value=seg.value(2), description=seg.value(3))
        )

    def _on_dtm(self, seg: Segment) -> None:
        self.document.header.dates.append(DateReference(qualifier=seg.value(1), date=seg.value(2)))

    def _on_po1(self, seg: Segment) -> None:
        self.current_item = PurchaseOrderItem(
            line_number=seg.value(1),
            quantity=to_float(seg.value(2)),
            uom=seg.value(3),
            unit_price=to_float(seg.value(4)),
            product_ids=product_ids(seg, 6),
        )
        self.document.items.append(self.current_item)

    def _on_pid(self, seg: Segment) -> None:
        if self.current_item is not None:
            self.current_item.description = seg.value(5)

    def _on_ctt(self, seg: Segment) -> None:
        self.document.totals.line_items = to_int(seg.value(1))
        self.document.totals.hash_total = to_float(seg.value(2))

    def _on_amt(self, seg: Segment) -> None:
        self.document.totals.amount = to_float(seg.value(2))


# --- 855 Purchase Order Acknowledgment ---
class PoAcknowledgmentReader(DocumentReader):
    document_class = PurchaseOrderAcknowledgment

    def __init__(self):
        super().__init__()
        self.current_item: Optional[PoAckItem] = None

    def _on_bak(self, seg: Segment) -> None:
        self.document.header = PoAckHeader(
            purpose=seg.value(1),
            ack_type=seg.value(2),
            po_number=seg.value(3),
            date=seg.value(4),
            request_ref=seg.value(5),
            references=self.document.header.references,
        )

    def _on_ref(self, seg: Segment) -> None:
        self.document.header.references.append(Reference(qualifier=seg.value(1), value=seg.value(2)))

    def _on_po1(self, seg: Segment) -> None:
        self.current_item = PoAckItem(
            line_number=seg.value(1),
            quantity=to_float(seg.value(2)),
            uom=seg.value(3),
            unit_price=to_float(seg.value(4)),
            product_ids=product_ids(seg, 6),
        )
        self.document.items.append(self.current_item)

    def _on_ack(self, seg: Segment) -> None:
        if self.current_item is None:
            return
        self.current_item.ack_status = seg.value(1)
        self.current_item.ack_quantity = to_float(seg.value(2))
        self.current_item.ack_uom = seg.value(3)
        self.current_item.scheduled_date = seg.value(4)
        self.current_item.reject_reason = seg.value(8)

    def _on_ctt(self, seg: Segment) -> None:
        self.document.totals.line_items = to_int(seg.value(1))


# --- 856 Advance Ship Notice ---
class AdvanceShipNoticeReader(PartyLoopMixin, DocumentReader):
    document_class = AdvanceShipNotice

    def __init__(self):
        super().__init__()
        self.current_item: Optional[AsnItem] = None

    def _on_bsn(self, seg: Segment) -> None:
        header = self.document.header
        header.purpose = seg.value(1)
        header.shipment_id = seg.value(2)
        header.date = seg.value(3)
        header.time = seg.value(4)

    def _on_hl(self, seg: Segment) -> None:
        self.document.levels.append(
            HierarchicalLevel(id=seg.value(1), parent_id=seg.value(2), level_code=seg.value(3))
        )

    def _on_td1(self, seg: Segment) -> None:
        self.document.shipment.packaging = Packaging(
            packaging_code=seg.value(1),
            lading_quantity=to_int(seg.value(2)),
            weight=to_float(seg.value(7)),
            weight_unit=seg.value(8),
        )

    def _on_td5(self, seg: Segment) -> None:
        self.document.shipment.carrier = Carrier(
            routing_seq=seg.value(1),
            id_qualifier=seg.value(2),
            carrier_id=seg.value(3),
            transport_method=seg.value(4),
            carrier_name=seg.value(5),
        )

    def _on_td3(self, seg: Segment) -> None:
        self.document.shipment.equipment = Equipment(
            equipment_type=seg.value(1),
            equipment_number=seg.value(3),
            seal_number=seg.value(9),
        )

    def _on_ref(self, seg: Segment) -> None:
        qualifier = seg.value(1)
        if qualifier == 'BM':
            self.document.shipment.bol_number = seg.value(2)
        elif qualifier == 'CN':
            self.document.shipment.pro_number = seg.value(2)

    def _on_dtm(self, seg: Segment) -> None:
        qualifier = seg.value(1)
        if qualifier == '011':
            self.document.shipment.ship_date = seg.value(2)
        elif qualifier == '017':
            self.document.shipment.delivery_date = seg.value(2)

    def _on_prf(self, seg: Segment) -> None:
        self.document.orders.append(
            AsnOrder(po_number=seg.value(1), release_number=seg.value(2), date=seg.value(4))
        )

    def _on_lin(self, seg: Segment) -> None:
        self.current_item = AsnItem(line_number=seg.value(1), product_ids=product_ids(seg, 2))
        self.document.items.append(self.current_item)

    def _on_sn1(self, seg: Segment) -> None:
        if self.current_item is not None:
            self.current_item.quantity = to_float(seg.value(2))
            self.current_item.uom = seg.value(3)

    def _on_pid(self, seg: Segment) -> None:
        if self.current_item is not None:
            self.current_item.description = seg.value(5)

    def _on_man(self, seg: Segment) -> None:
        if self.current_item is not None:
            self.current_item.marks.append(Mark(qualifier=seg.value(1), value=seg.value(2)))

    def _on_ctt(self, seg: Segment) -> None:
        self.document.totals.hl_count = to_int(seg.value(1))


# --- 810 Invoice ---
class InvoiceReader(PartyLoopMixin, DocumentReader):
    document_class = Invoice

    def __init__(self):
        super().__init__()
        self.current_item: Optional[InvoiceItem] = None

    def _on_big(self, seg: Segment) -> None:
        self.document.header = InvoiceHeader(
            invoice_date=seg.value(1),
            invoice_number=seg.value(2),
            po_date=seg.value(3),
            po_number=seg.value(4),
            currency=self.document.header.currency,
            references=self.document.header.references,
        )

    def _on_cur(self, seg: Segment) -> None:
        self.document.header.currency = seg.value(2)

    def _on_ref(self, seg: Segment) -> None:
        self.document.header.references.append(Reference(qualifier=seg.value(1), value=seg.value(2)))

    def _on_it1(self, seg: Segment) -> None:
        self.current_item = InvoiceItem(
            line_number=seg.value(1),
            quantity=to_float(seg.value(2)),
            uom=seg.value(3),
            unit_price=to_float(seg.value(4)),
            product_ids=product_ids(seg, 6),
        )
        self.document.items.append(self.current_item)

    def _on_pid(self, seg: Segment) -> None:
        if self.current_item is not None:
            self.current_item.description = seg.value(5)

    def _on_tds(self, seg: Segment) -> None:
        # TDS01 is an implied two-decimal amount
        self.document.totals.total_amount = to_float(seg.value(1)) / 100

    def _on_cad(self, seg: Segment) -> None:
        self.document.carrier = InvoiceCarrier(
            transport_method=seg.value(1),
            carrier_id=seg.value(4),
            carrier_name=seg.value(5),
        )


# --- 940 Warehouse Shipping Order ---
class ShippingOrderReader(DocumentReader):
    document_class = WarehouseShippingOrder

    def __init__(self):
        super().__init__()
        self.current_item: Optional[ShippingOrderItem] = None

    def _on_w05(self, seg: Segment) -> None:
        self.document.header = ShippingOrderHeader(
            order_status=seg.value(1),
            depositor_order_number=seg.value(2),
            purchase_order_number=seg.value(3),
            link_seq=seg.value(4),
        )

    def _on_n1(self, seg: Segment) -> None:
        qualifier = seg.value(1)
        if qualifier == 'ST':
            ship_to = self.document.ship_to
            ship_to.qualifier = qualifier
            ship_to.name = seg.value(2)
            ship_to.id_qualifier = seg.value(3)
            ship_to.id = seg.value(4)
        elif qualifier == 'DE':
            self.document.depositor = read_party(seg)

    def _on_n3(self, seg: Segment) -> None:
        apply_address(self.document.ship_to, seg)

    _on_n4 = _on_n3

    def _on_g61(self, seg: Segment) -> None:
        self.document.ship_to.contact = Contact(
            function_code=seg.value(1),
            name=seg.value(2),
            phone=seg.value(4),
        )

    def _on_w66(self, seg: Segment) -> None:
        self.document.shipping = WarehouseCarrier(
            transport_method=seg.value(1),
            carrier_code=seg.value(4),
            carrier_name=seg.value(5),
            service_level=seg.value(6),
        )

    def _on_lx(self, seg: Segment) -> None:
        self.current_item = ShippingOrderItem(line_number=seg.value(1))
        self.document.items.append(self.current_item)

    def _on_w01(self, seg: Segment) -> None:
        if self.current_item is None:
            return
        self.current_item.quantity = to_float(seg.value(1))
        self.current_item.uom = seg.value(2)
        self.current_item.weight = to_float(seg.value(5))
        self.current_item.product_ids = product_ids(seg, 6)

    def _on_g69(self, seg: Segment) -> None:
        if self.current_item is not None:
            self.current_item.description = seg.value(1)

    def _on_n9(self, seg: Segment) -> None:
        reference = Reference(qualifier=seg.value(1), value=seg.value(2))
        if self.current_item is not None:
            self.current_item.references.append(reference)
        else:
            self.document.notes.append(reference)

    def _on_w20(self, seg: Segment) -> None:
        if self.current_item is not None:
            self.current_item.lot = LotInfo(
                lot_number=seg.value(1),
                expiration_date=seg.value(4),
                manufacture_date=seg.value(5),
            )

    def _on_w76(self, seg: Segment) -> None:
        self.document.totals = ShippingOrderTotals(
            line_count=to_int(seg.value(1)),
            total_quantity=to_float(seg.value(2)),
            quantity_uom=seg.value(3),
            total_weight=to_float(seg.value(4)),
            weight_unit=seg.value(5),
        )


# --- 945 Warehouse Shipping Advice ---
class ShippingAdviceReader(DocumentReader):
    document_class = WarehouseShippingAdvice

    def __init__(self):
        super().__init__()
        self.current_item: Optional[ShippingAdviceItem] = None

    def _on_w06(self, seg: Segment) -> None:
        self.document.header = ShippingAdviceHeader(
            report_type=seg.value(1),
            depositor_order_number=seg.value(2),
            date=seg.value(3),
            shipment_id=seg.value(4),
            warehouse_order_number=seg.value(6),
        )

    def _on_w27(self, seg: Segment) -> None:
        shipment = self.document.shipment
        shipment.transport_method = seg.value(1)
        shipment.carrier_code = seg.value(3)
        shipment.carrier_name = seg.value(4)
        shipment.bol_number = seg.value(6)
        shipment.scac = seg.value(8)

    def _on_w28(self, seg: Segment) -> None:
        self.document.shipment.consolidation = Consolidation(
            weight=to_float(seg.value(1)),
            weight_qualifier=seg.value(2),
            lading_quantity=to_int(seg.value(3)),
            lading_description=seg.value(4),
        )

    def _on_n1(self, seg: Segment) -> None:
        if seg.value(1) == 'ST':
            self.document.ship_to = read_party(seg)

    def _on_n3(self, seg: Segment) -> None:
        if self.document.ship_to is not None:
            apply_address(self.document.ship_to, seg)

    _on_n4 = _on_n3

    def _on_lx(self, seg: Segment) -> None:
        self.current_item = ShippingAdviceItem(line_number=seg.value(1))
        self.document.items.append(self.current_item)

    def _on_w12(self, seg: Segment) -> None:
        if self.current_item is None:
            return
        self.current_item.shipment_type = seg.value(1)
        self.current_item.quantity_shipped = to_float(seg.value(2))
        self.current_item.uom = seg.value(3)
        self.current_item.product_ids = product_ids(seg, 5)

    def _on_g69(self, seg: Segment) -> None:
        if self.current_item is not None:
            self.current_item.description = seg.value(1)

    def _on_n9(self, seg: Segment) -> None:
        if self.current_item is not None:
            self.current_item.references.append(Reference(qualifier=seg.value(1), value=seg.value(2)))
        elif seg.value(1) == 'DO':
            self.document.depositor_ref = seg.value(2)

    def _on_w03(self, seg: Segment) -> None:
        self.document.totals = ShippingAdviceTotals(
            records=to_int(seg.value(1)),
            weight=to_float(seg.value(2)),
            weight_unit=seg.value(3),
            volume=to_float(seg.value(4)),
            volume_unit=seg.value(5),
            lading_quantity=to_int(seg.value(6)),
        )


# --- 943 Stock Transfer Shipment Advice ---
class StockTransferShipmentReader(DocumentReader):
    document_class = StockTransferShipment

    def __init__(self):
        super().__init__()
        self.current_item: Optional[StockTransferItem] = None

    def _on_w06(self, seg: Segment) -> None:
        self.document.header = StockTransferHeader(
            report_type=seg.value(1),
            depositor_order_number=seg.value(2),
            date=seg.value(3),
        )

    def _on_w07(self, seg: Segment) -> None:
        self.current_item = StockTransferItem(
            quantity=to_float(seg.value(1)),
            uom=seg.value(2),
            weight=to_float(seg.value(5)),
            product_ids=product_ids(seg, 6),
        )
        self.document.items.append(self.current_item)

    def _on_w20(self, seg: Segment) -> None:
        if self.current_item is not None:
            self.current_item.lot = LotInfo(
                lot_number=seg.value(1),
                expiration_date=seg.value(4),
                manufacture_date=seg.value(5),
            )


# --- 944 Stock Transfer Receipt Advice ---
class StockTransferReceiptReader(DocumentReader):
    document_class = StockTransferReceipt

    def _on_w17(self, seg: Segment) -> None:
        self.document.header = StockReceiptHeader(
            report_type=seg.value(1),
            reporting_code=seg.value(2),
            date=seg.value(3),
            warehouse_receipt_number=seg.value(4),
            depositor_order_number=seg.value(5),
        )

    def _on_w07(self, seg: Segment) -> None:
        self.document.items.append(StockReceiptItem(
            quantity_received=to_float(seg.value(1)),
            uom=seg.value(2),
            weight=to_float(seg.value(5)),
            product_ids=product_ids(seg, 6),
        ))

    def _on_w14(self, seg: Segment) -> None:
        self.document.totals = StockReceiptTotals(
            quantity_received=to_float(seg.value(1)),
            quantity_damaged=to_float(seg.value(2)),
            records=to_int(seg.value(3)),
        )


# --- 947 Inventory Adjustment Advice ---
class InventoryAdjustmentReader(DocumentReader):
    document_class = InventoryAdjustment

    def __init__(self):
        super().__init__()
        self.current_adjustment: Optional[InventoryAdjustmentLine] = None

    def _on_w15(self, seg: Segment) -> None:
        self.document.header = InventoryAdjustmentHeader(
            transaction_type=seg.value(1),
            date=seg.value(2),
            time=seg.value(3),
            reference_id=seg.value(4),
        )

    def _on_n1(self, seg: Segment) -> None:
        if seg.value(1) == 'DE':
            self.document.depositor = read_party(seg)

    def _on_w07(self, seg: Segment) -> None:
        self.current_adjustment = InventoryAdjustmentLine(
            quantity=to_float(seg.value(1)),
            uom=seg.value(2),
            product_ids=product_ids(seg, 6),
        )
        self.document.adjustments.append(self.current_adjustment)

    def _on_w13(self, seg: Segment) -> None:
        if self.current_adjustment is not None:
            self.current_adjustment.adjustment_detail = AdjustmentDetail(
                quantity_before=to_float(seg.value(1)),
                quantity_after=to_float(seg.value(2)),
                uom=seg.value(3),
                adjustment_reason=seg.value(4),
            )

    def _on_w20(self, seg: Segment) -> None:
        if self.current_adjustment is not None:
            self.current_adjustment.lot = LotInfo(lot_number=seg.value(1), expiration_date=seg.value(4))

    def _on_n9(self, seg: Segment) -> None:
        if self.current_adjustment is not None:
            self.current_adjustment.notes = seg.value(2)

    def _on_w14(self, seg: Segment) -> None:
        self.document.totals = InventoryAdjustmentTotals(
            total_quantity=to_float(seg.value(1)),
            record_count=to_int(seg.value(3)),
        )


DOCUMENT_READERS: Dict[str, Type[DocumentReader]] = {
    '850': PurchaseOrderReader,
    '855': PoAcknowledgmentReader,
    '856': AdvanceShipNoticeReader,
    '810': InvoiceReader,
    '940': ShippingOrderReader,
    '945': ShippingAdviceReader,
    '943': StockTransferShipmentReader,
    '944': StockTransferReceiptReader,
    '947': InventoryAdjustmentReader,
}


def read_document(transaction_set_id: Optional[str], segments: List[Segment]):
    """Structured document for one transaction set; unknown types pass through raw."""
    reader_class = DOCUMENT_READERS.get(transaction_set_id or '')
    if reader_class is None:
        logger.info(f"No reader for transaction set '{transaction_set_id}'; passing segments through.")
        return GenericDocument(type=transaction_set_id, segments=list(segments))
    return reader_class().read(segments)


def dispatch_transaction(transaction: CdmTransaction):
    logger.debug(
        f"Dispatching transaction set {transaction.transaction_set_id} "
        f"({transaction.control_number}) with {len(transaction.segments)} segments."
    )
    return read_document(transaction.transaction_set_id, transaction.segments)
