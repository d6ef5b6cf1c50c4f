# Structured business documents produced by the transaction-set readers.
from pydantic import Field
from typing import List, Literal, Optional

from cdm import CdmModel, Segment

# --- Shared building blocks ---
class ProductId(CdmModel):
    qualifier: str = Field(description="UP=UPC, VP=Vendor Part, SK=SKU, ...")
    value: str

class Reference(CdmModel):
    qualifier: Optional[str] = None
    value: Optional[str] = None
    description: Optional[str] = None

class DateReference(CdmModel):
    qualifier: Optional[str] = Field(None, description="002=Delivery Requested, 010=Requested Ship, ...")
    date: Optional[str] = None

class Contact(CdmModel):
    function_code: Optional[str] = None
    name: Optional[str] = None
    phone: Optional[str] = None

class Party(CdmModel):
    """An N1 loop: the N1 header plus the N3/N4 lines that follow it."""
    qualifier: Optional[str] = Field(None, description="ST=Ship To, BT=Bill To, SF=Ship From, DE=Depositor, ...")
    name: Optional[str] = None
    id_qualifier: Optional[str] = None
    id: Optional[str] = None
    address1: Optional[str] = None
    address2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None
    country: Optional[str] = None
    contact: Optional[Contact] = None

class LotInfo(CdmModel):
    lot_number: Optional[str] = None
    expiration_date: Optional[str] = None
    manufacture_date: Optional[str] = None

# --- 850 Purchase Order ---
class PurchaseOrderHeader(CdmModel):
    purpose: Optional[str] = Field(None, description="00=Original, 01=Cancel, 05=Replace")
    order_type: Optional[str] = Field(None, description="NE=New, RO=Rush")
    po_number: Optional[str] = None
    release_number: Optional[str] = None
    date: Optional[str] = None
    currency: Optional[str] = None
    references: List[Reference] = Field(default_factory=list)
    dates: List[DateReference] = Field(default_factory=list)

class PurchaseOrderItem(CdmModel):
    line_number: Optional[str] = None
    quantity: float = 0
    uom: Optional[str] = None
    unit_price: float = 0
    product_ids: List[ProductId] = Field(default_factory=list)
    description: Optional[str] = None

class PurchaseOrderTotals(CdmModel):
    line_items: Optional[int] = None
    hash_total: Optional[float] = None
    amount: Optional[float] = None

class PurchaseOrder(CdmModel):
    type: Literal['PURCHASE_ORDER'] = 'PURCHASE_ORDER'
    header: PurchaseOrderHeader = Field(default_factory=PurchaseOrderHeader)
    parties: List[Party] = Field(default_factory=list)
    items: List[PurchaseOrderItem] = Field(default_factory=list)
    totals: PurchaseOrderTotals = Field(default_factory=PurchaseOrderTotals)

# --- 855 Purchase Order Acknowledgment ---
class PoAckHeader(CdmModel):
    purpose: Optional[str] = None
    ack_type: Optional[str] = Field(None, description="AC=Acknowledge, AD=Acknowledge with Detail")
    po_number: Optional[str] = None
    date: Optional[str] = None
    request_ref: Optional[str] = None
    references: List[Reference] = Field(default_factory=list)

class PoAckItem(CdmModel):
    line_number: Optional[str] = None
    quantity: float = 0
    uom: Optional[str] = None
    unit_price: float = 0
    product_ids: List[ProductId] = Field(default_factory=list)
    ack_status: Optional[str] = Field(None, description="IA=Accepted, IR=Rejected, IQ=Quantity Changed")
    ack_quantity: Optional[float] = None
    ack_uom: Optional[str] = None
    scheduled_date: Optional[str] = None
    reject_reason: Optional[str] = None

class PoAckTotals(CdmModel):
    line_items: Optional[int] = None

class PurchaseOrderAcknowledgment(CdmModel):
    type: Literal['PO_ACKNOWLEDGMENT'] = 'PO_ACKNOWLEDGMENT'
    header: PoAckHeader = Field(default_factory=PoAckHeader)
    items: List[PoAckItem] = Field(default_factory=list)
    totals: PoAckTotals = Field(default_factory=PoAckTotals)

# --- 856 Advance Ship Notice ---
class AsnHeader(CdmModel):
    purpose: Optional[str] = None
    shipment_id: Optional[str] = None
    date: Optional[str] = None
    time: Optional[str] = None

class Packaging(CdmModel):
    packaging_code: Optional[str] = None
    lading_quantity: int = 0
    weight: float = 0
    weight_unit: Optional[str] = None

class Carrier(CdmModel):
    routing_seq: Optional[str] = None
    id_qualifier: Optional[str] = None
    carrier_id: Optional[str] = None
    transport_method: Optional[str] = None
    carrier_name: Optional[str] = None

class Equipment(CdmModel):
    equipment_type: Optional[str] = None
    equipment_number: Optional[str] = None
    seal_number: Optional[str] = None

class AsnShipment(CdmModel):
    packaging: Optional[Packaging] = None
    carrier: Optional[Carrier] = None
    equipment: Optional[Equipment] = None
    bol_number: Optional[str] = None
    pro_number: Optional[str] = None
    ship_date: Optional[str] = None
    delivery_date: Optional[str] = None

class HierarchicalLevel(CdmModel):
    id: Optional[str] = None
    parent_id: Optional[str] = None
    level_code: Optional[str] = Field(None, description="S=Shipment, O=Order, P=Pack, I=Item")

class AsnOrder(CdmModel):
    po_number: Optional[str] = None
    release_number: Optional[str] = None
    date: Optional[str] = None

class Mark(CdmModel):
    qualifier: Optional[str] = None
    value: Optional[str] = None

class AsnItem(CdmModel):
    line_number: Optional[str] = None
    product_ids: List[ProductId] = Field(default_factory=list)
    quantity: Optional[float] = None
    uom: Optional[str] = None
    description: Optional[str] = None
    marks: List[Mark] = Field(default_factory=list)

class AsnTotals(CdmModel):
    hl_count: Optional[int] = None

class AdvanceShipNotice(CdmModel):
    type: Literal['ASN'] = 'ASN'
    header: AsnHeader = Field(default_factory=AsnHeader)
    shipment: AsnShipment = Field(default_factory=AsnShipment)
    parties: List[Party] = Field(default_factory=list)
    levels: List[HierarchicalLevel] = Field(default_factory=list)
    orders: List[AsnOrder] = Field(default_factory=list)
    items: List[AsnItem] = Field(default_factory=list)
    totals: AsnTotals = Field(default_factory=AsnTotals)

# --- 810 Invoice ---
class InvoiceHeader(CdmModel):
    invoice_date: Optional[str] = None
    invoice_number: Optional[str] = None
    po_date: Optional[str] = None
    po_number: Optional[str] = None
    currency: Optional[str] = None
    references: List[Reference] = Field(default_factory=list)

class InvoiceItem(CdmModel):
    line_number: Optional[str] = None
    quantity: float = 0
    uom: Optional[str] = None
    unit_price: float = 0
    product_ids: List[ProductId] = Field(default_factory=list)
    description: Optional[str] = None

class InvoiceTotals(CdmModel):
    total_amount: Optional[float] = Field(None, description="TDS01 converted from cents")

class InvoiceCarrier(CdmModel):
    transport_method: Optional[str] = None
    carrier_id: Optional[str] = None
    carrier_name: Optional[str] = None

class Invoice(CdmModel):
    type: Literal['INVOICE'] = 'INVOICE'
    header: InvoiceHeader = Field(default_factory=InvoiceHeader)
    parties: List[Party] = Field(default_factory=list)
    items: List[InvoiceItem] = Field(default_factory=list)
    totals: InvoiceTotals = Field(default_factory=InvoiceTotals)
    carrier: Optional[InvoiceCarrier] = None

# --- 940 Warehouse Shipping Order ---
class ShippingOrderHeader(CdmModel):
    order_status: Optional[str] = Field(None, description="N=New, R=Replace, C=Cancel")
    depositor_order_number: Optional[str] = None
    purchase_order_number: Optional[str] = None
    link_seq: Optional[str] = None

class WarehouseCarrier(CdmModel):
    transport_method: Optional[str] = None
    carrier_code: Optional[str] = None
    carrier_name: Optional[str] = None
    service_level: Optional[str] = None

class ShippingOrderItem(CdmModel):
    line_number: Optional[str] = None
    quantity: float = 0
    uom: Optional[str] = None
    weight: float = 0
    product_ids: List[ProductId] = Field(default_factory=list)
    description: Optional[str] = None
    references: List[Reference] = Field(default_factory=list)
    lot: Optional[LotInfo] = None

class ShippingOrderTotals(CdmModel):
    line_count: int = 0
    total_quantity: float = 0
    quantity_uom: Optional[str] = None
    total_weight: float = 0
    weight_unit: Optional[str] = None

class WarehouseShippingOrder(CdmModel):
    type: Literal['WAREHOUSE_SHIPPING_ORDER'] = 'WAREHOUSE_SHIPPING_ORDER'
    header: ShippingOrderHeader = Field(default_factory=ShippingOrderHeader)
    ship_to: Party = Field(default_factory=Party)
    depositor: Optional[Party] = None
    notes: List[Reference] = Field(default_factory=list)
    shipping: Optional[WarehouseCarrier] = None
    items: List[ShippingOrderItem] = Field(default_factory=list)
    totals: Optional[ShippingOrderTotals] = None

# --- 945 Warehouse Shipping Advice ---
class ShippingAdviceHeader(CdmModel):
    report_type: Optional[str] = None
    depositor_order_number: Optional[str] = None
    date: Optional[str] = None
    shipment_id: Optional[str] = None
    warehouse_order_number: Optional[str] = None

class Consolidation(CdmModel):
    weight: float = 0
    weight_qualifier: Optional[str] = None
    lading_quantity: int = 0
    lading_description: Optional[str] = None

class ShippingAdviceShipment(CdmModel):
    transport_method: Optional[str] = None
    carrier_code: Optional[str] = None
    carrier_name: Optional[str] = None
    bol_number: Optional[str] = None
    scac: Optional[str] = None
    consolidation: Optional[Consolidation] = None

class ShippingAdviceItem(CdmModel):
    line_number: Optional[str] = None
    shipment_type: Optional[str] = Field(None, description="SH=Shipped, NC=Not Shipped")
    quantity_shipped: float = 0
    uom: Optional[str] = None
    product_ids: List[ProductId] = Field(default_factory=list)
    description: Optional[str] = None
    references: List[Reference] = Field(default_factory=list)

class ShippingAdviceTotals(CdmModel):
    records: int = 0
    weight: float = 0
    weight_unit: Optional[str] = None
    volume: float = 0
    volume_unit: Optional[str] = None
    lading_quantity: int = 0

class WarehouseShippingAdvice(CdmModel):
    type: Literal['WAREHOUSE_SHIPPING_ADVICE'] = 'WAREHOUSE_SHIPPING_ADVICE'
    header: ShippingAdviceHeader = Field(default_factory=ShippingAdviceHeader)
    depositor_ref: Optional[str] = None
    shipment: ShippingAdviceShipment = Field(default_factory=ShippingAdviceShipment)
    ship_to: Optional[Party] = None
    items: List[ShippingAdviceItem] = Field(default_factory=list)
    totals: Optional[ShippingAdviceTotals] = None

# --- 943 / 944 Stock transfer ---
class StockTransferHeader(CdmModel):
    report_type: Optional[str] = None
    depositor_order_number: Optional[str] = None
    date: Optional[str] = None

class StockTransferItem(CdmModel):
    quantity: float = 0
    uom: Optional[str] = None
    weight: float = 0
    product_ids: List[ProductId] = Field(default_factory=list)
    lot: Optional[LotInfo] = None

class StockTransferShipment(CdmModel):
    type: Literal['STOCK_TRANSFER_SHIPMENT'] = 'STOCK_TRANSFER_SHIPMENT'
    header: StockTransferHeader = Field(default_factory=StockTransferHeader)
    items: List[StockTransferItem] = Field(default_factory=list)

class StockReceiptHeader(CdmModel):
    report_type: Optional[str] = None
    reporting_code: Optional[str] = None
    date: Optional[str] = None
    warehouse_receipt_number: Optional[str] = None
    depositor_order_number: Optional[str] = None

class StockReceiptItem(CdmModel):
    quantity_received: float = 0
    uom: Optional[str] = None
    weight: float = 0
    product_ids: List[ProductId] = Field(default_factory=list)

class StockReceiptTotals(CdmModel):
    quantity_received: float = 0
    quantity_damaged: float = 0
    records: int = 0

class StockTransferReceipt(CdmModel):
    type: Literal['STOCK_TRANSFER_RECEIPT'] = 'STOCK_TRANSFER_RECEIPT'
    header: StockReceiptHeader = Field(default_factory=StockReceiptHeader)
    items: List[StockReceiptItem] = Field(default_factory=list)
    totals: Optional[StockReceiptTotals] = None

# --- 947 Inventory Adjustment ---
class InventoryAdjustmentHeader(CdmModel):
    transaction_type: Optional[str] = None
    date: Optional[str] = None
    time: Optional[str] = None
    reference_id: Optional[str] = None

class AdjustmentDetail(CdmModel):
    quantity_before: float = 0
    quantity_after: float = 0
    uom: Optional[str] = None
    adjustment_reason: Optional[str] = None

class InventoryAdjustmentLine(CdmModel):
    quantity: float = 0
    uom: Optional[str] = None
    product_ids: List[ProductId] = Field(default_factory=list)
    adjustment_detail: Optional[AdjustmentDetail] = None
    lot: Optional[LotInfo] = None
    notes: Optional[str] = None

class InventoryAdjustmentTotals(CdmModel):
    total_quantity: float = 0
    record_count: int = 0

class InventoryAdjustment(CdmModel):
    type: Literal['INVENTORY_ADJUSTMENT'] = 'INVENTORY_ADJUSTMENT'
    header: InventoryAdjustmentHeader = Field(default_factory=InventoryAdjustmentHeader)
    depositor: Optional[Party] = None
    adjustments: List[InventoryAdjustmentLine] = Field(default_factory=list)
    totals: Optional[InventoryAdjustmentTotals] = None

# --- Unsupported transaction sets pass through untouched ---
class GenericDocument(CdmModel):
    type: Optional[str] = None
    segments: List[Segment] = Field(default_factory=list)
