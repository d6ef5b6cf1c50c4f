# Caller-facing input shapes for the outbound document builders.
# Every business field is optional: builders emit what they are given and
# leave required-field validation to the caller.
from datetime import date, datetime
from pydantic import Field
from typing import List, Optional, Union

from cdm import CdmModel

EdiDate = Union[datetime, date]


class PartyId(CdmModel):
    """ISA/GS identity of a trading partner."""
    id: str
    qualifier: Optional[str] = 'ZZ'

class ContactInput(CdmModel):
    name: Optional[str] = None
    phone: Optional[str] = None

class PartyInput(CdmModel):
    name: Optional[str] = None
    id: Optional[str] = None
    id_qualifier: Optional[str] = None
    address1: Optional[str] = None
    address2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None
    country: Optional[str] = None
    contact: Optional[ContactInput] = None

class ReferenceInput(CdmModel):
    qualifier: Optional[str] = None
    value: Optional[str] = None

class CarrierInput(CdmModel):
    scac: Optional[str] = None
    name: Optional[str] = None
    method: Optional[str] = Field(None, description="Transport method code, M=Motor")
    service_level: Optional[str] = None

class ItemIdentifiers(CdmModel):
    upc: Optional[str] = None
    sku: Optional[str] = None
    vendor_part: Optional[str] = None
    description: Optional[str] = None

# --- 810 ---
class InvoiceItemInput(ItemIdentifiers):
    line_number: Optional[Union[int, str]] = None
    quantity: Optional[float] = None
    uom: Optional[str] = None
    unit_price: Optional[float] = None

class InvoiceInput(CdmModel):
    invoice_number: Optional[str] = None
    invoice_date: Optional[EdiDate] = None
    po_number: Optional[str] = None
    po_date: Optional[EdiDate] = None
    currency: Optional[str] = None
    references: List[ReferenceInput] = Field(default_factory=list)
    ship_to: Optional[PartyInput] = None
    bill_to: Optional[PartyInput] = None
    items: List[InvoiceItemInput] = Field(default_factory=list)
    carrier: Optional[CarrierInput] = None

# --- 855 ---
class PoAckItemInput(ItemIdentifiers):
    line_number: Optional[Union[int, str]] = None
    quantity: Optional[float] = None
    uom: Optional[str] = None
    unit_price: Optional[float] = None
    status: Optional[str] = Field(None, description="IA=Accepted, IR=Rejected, IQ=Quantity Changed")
    ack_quantity: Optional[float] = None
    scheduled_date: Optional[EdiDate] = None
    reject_reason: Optional[str] = None

class PoAckInput(CdmModel):
    purpose: Optional[str] = None
    ack_type: Optional[str] = None
    po_number: Optional[str] = None
    date: Optional[EdiDate] = None
    request_reference: Optional[str] = None
    references: List[ReferenceInput] = Field(default_factory=list)
    items: List[PoAckItemInput] = Field(default_factory=list)

# --- 856 ---
class AsnItemInput(ItemIdentifiers):
    line_number: Optional[Union[int, str]] = None
    quantity: Optional[float] = None
    uom: Optional[str] = None
    lot_number: Optional[str] = None
    sscc: Optional[str] = None

class AsnOrderInput(CdmModel):
    po_number: Optional[str] = None
    release_number: Optional[str] = None
    date: Optional[EdiDate] = None
    items: Optional[List[AsnItemInput]] = None

class PackagingInput(CdmModel):
    code: Optional[str] = None
    quantity: Optional[int] = None
    weight: Optional[float] = None
    weight_unit: Optional[str] = None

class EquipmentInput(CdmModel):
    type: Optional[str] = None
    number: Optional[str] = None
    seal_number: Optional[str] = None

class AsnInput(CdmModel):
    purpose: Optional[str] = None
    shipment_id: Optional[str] = None
    ship_date: Optional[EdiDate] = None
    delivery_date: Optional[EdiDate] = None
    bol_number: Optional[str] = None
    pro_number: Optional[str] = None
    carrier: Optional[CarrierInput] = None
    equipment: Optional[EquipmentInput] = None
    packaging: Optional[PackagingInput] = None
    ship_from: Optional[PartyInput] = None
    ship_to: Optional[PartyInput] = None
    po_number: Optional[str] = None
    orders: Optional[List[AsnOrderInput]] = None
    items: List[AsnItemInput] = Field(default_factory=list)

# --- 940 ---
class LotInput(CdmModel):
    number: Optional[str] = None
    expiration_date: Optional[EdiDate] = None
    manufacture_date: Optional[EdiDate] = None

class NoteInput(CdmModel):
    qualifier: Optional[str] = None
    value: Optional[str] = None

class ShippingOrderItemInput(ItemIdentifiers):
    quantity: Optional[float] = None
    uom: Optional[str] = None
    weight: Optional[float] = None
    lot_number: Optional[str] = None
    serial_number: Optional[str] = None
    lot: Optional[LotInput] = None

class ShippingOrderInput(CdmModel):
    order_status: Optional[str] = None
    order_number: Optional[str] = None
    po_number: Optional[str] = None
    link_sequence: Optional[str] = None
    depositor: Optional[PartyInput] = None
    ship_to: Optional[PartyInput] = None
    notes: List[NoteInput] = Field(default_factory=list)
    carrier: Optional[CarrierInput] = None
    items: List[ShippingOrderItemInput] = Field(default_factory=list)

# --- 945 ---
class ConsolidationInput(CdmModel):
    weight: Optional[float] = None
    weight_qualifier: Optional[str] = None
    quantity: Optional[int] = None
    description: Optional[str] = None

class ShippingAdviceItemInput(ItemIdentifiers):
    shipment_type: Optional[str] = None
    quantity_shipped: Optional[float] = None
    uom: Optional[str] = None
    weight: Optional[float] = None
    lot_number: Optional[str] = None

class ShippingAdviceInput(CdmModel):
    report_type: Optional[str] = None
    order_number: Optional[str] = None
    ship_date: Optional[EdiDate] = None
    shipment_id: Optional[str] = None
    warehouse_order_number: Optional[str] = None
    depositor_ref: Optional[str] = None
    carrier: Optional[CarrierInput] = None
    bol_number: Optional[str] = None
    consolidation: Optional[ConsolidationInput] = None
    ship_to: Optional[PartyInput] = None
    items: List[ShippingAdviceItemInput] = Field(default_factory=list)
    pallet_count: Optional[int] = None

# --- 947 ---
class AdjustmentInput(CdmModel):
    quantity: Optional[float] = None
    uom: Optional[str] = None
    upc: Optional[str] = None
    sku: Optional[str] = None
    quantity_before: Optional[float] = None
    quantity_after: Optional[float] = None
    reason_code: Optional[str] = None
    lot_number: Optional[str] = None
    expiration_date: Optional[EdiDate] = None
    notes: Optional[str] = None

class InventoryAdjustmentInput(CdmModel):
    transaction_type: Optional[str] = None
    date: Optional[EdiDate] = None
    reference_id: Optional[str] = None
    depositor: Optional[PartyInput] = None
    adjustments: List[AdjustmentInput] = Field(default_factory=list)
