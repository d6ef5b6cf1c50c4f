"""
Adapters between warehouse business records and EDI documents.

Business records are plain mappings as an order or shipment service would
hand them over (snake_case keys, nested customer/carrier/product records).
"""
import logging
from datetime import date
from typing import Any, Dict, Iterable, Mapping, Optional

from cdm import CdmTransaction
from document_inputs import AsnInput
from document_models import ProductId, PurchaseOrder

logger = logging.getLogger(__name__)


def _nested(record: Optional[Mapping[str, Any]], *keys: str) -> Any:
    value: Any = record
    for key in keys:
        if not isinstance(value, Mapping):
            return None
        value = value.get(key)
    return value


def _find(entries: Iterable[Any], qualifier: str, attribute: str) -> Optional[str]:
    for entry in entries:
        if entry.qualifier == qualifier:
            return getattr(entry, attribute)
    return None


def _section(fields: Dict[str, Any], **defaults: Any) -> Optional[Dict[str, Any]]:
    """The sub-record when any source field is set, else None so its segment is left out."""
    if all(value in (None, '') for value in fields.values()):
        return None
    return {**fields, **{key: value for key, value in defaults.items() if fields.get(key) in (None, '')}}


def parse_edi_date(text: Optional[str]) -> Optional[date]:
    """
    Convert an EDI date (CCYYMMDD or YYMMDD) to a date.

    Two-digit years above 50 fall in the 1900s, the rest in the 2000s.
    Returns None for missing or malformed values.
    """
    if not text:
        return None
    text = text.strip()
    if not text.isdigit():
        return None
    try:
        if len(text) == 8:
            return date(int(text[:4]), int(text[4:6]), int(text[6:8]))
        if len(text) == 6:
            year = int(text[:2])
            full_year = 1900 + year if year > 50 else 2000 + year
            return date(full_year, int(text[2:4]), int(text[4:6]))
    except ValueError:
        logger.warning(f"Invalid EDI date: {text}")
    return None


def asn_input_from_shipment(order: Mapping[str, Any], shipment: Mapping[str, Any], warehouse: Mapping[str, Any]) -> AsnInput:
    """Build 856 input from a customer order, its shipment and the shipping warehouse."""
    shipping_address = order.get('shipping_address') or {}
    lines = order.get('lines') or []
    data = {
        'purpose': '00',
        'shipment_id': shipment.get('shipment_number'),
        'ship_date': shipment.get('ship_date'),
        'delivery_date': shipment.get('estimated_delivery'),
        'bol_number': shipment.get('bol_number'),
        'pro_number': shipment.get('pro_number'),
        'carrier': _section({
            'scac': _nested(shipment, 'carrier', 'scac'),
            'name': _nested(shipment, 'carrier', 'name'),
            'method': _nested(shipment, 'carrier', 'method'),
        }, method='M'),
        'equipment': _section({
            'type': shipment.get('trailer_type'),
            'number': shipment.get('trailer_number'),
            'seal_number': shipment.get('seal_number'),
        }),
        'packaging': _section({
            'quantity': shipment.get('carton_count'),
            'weight': shipment.get('total_weight'),
        }, code='CTN', weight_unit='LB'),
        'ship_from': _section({
            'name': warehouse.get('name'),
            'id': warehouse.get('code'),
            'address1': warehouse.get('address'),
            'city': warehouse.get('city'),
            'state': warehouse.get('state'),
            'zip': warehouse.get('zip_code'),
            'country': warehouse.get('country'),
        }),
        'ship_to': _section({
            'name': _nested(order, 'customer', 'name'),
            'id': _nested(order, 'customer', 'code'),
            'address1': shipping_address.get('address1'),
            'address2': shipping_address.get('address2'),
            'city': shipping_address.get('city'),
            'state': shipping_address.get('state'),
            'zip': shipping_address.get('zip_code'),
            'country': shipping_address.get('country'),
        }),
        'po_number': order.get('customer_po'),
        'items': [
            {
                'line_number': index,
                'upc': _nested(line, 'product', 'upc'),
                'sku': _nested(line, 'product', 'sku'),
                'vendor_part': _nested(line, 'product', 'vendor_part_number'),
                'description': _nested(line, 'product', 'name'),
                'quantity': line.get('quantity_shipped'),
                'uom': line.get('uom') or 'EA',
                'lot_number': line.get('lot_number'),
                'sscc': line.get('sscc'),
            }
            for index, line in enumerate(lines, start=1)
        ],
    }
    return AsnInput.model_validate(data)


def purchase_order_from_850(transaction: CdmTransaction) -> Dict[str, Any]:
    """Flatten a parsed 850 transaction into an order-import record."""
    po = transaction.parsed
    if not isinstance(po, PurchaseOrder):
        raise ValueError(f"Transaction {transaction.control_number} is not a parsed 850 purchase order")

    def product(ids: Iterable[ProductId], qualifier: str) -> Optional[str]:
        return _find(ids, qualifier, 'value')

    return {
        'po_number': po.header.po_number,
        'order_date': parse_edi_date(po.header.date),
        'customer_id': _find(po.parties, 'BY', 'id'),
        'ship_to_id': _find(po.parties, 'ST', 'id'),
        'bill_to_id': _find(po.parties, 'BT', 'id'),
        'currency': po.header.currency or 'USD',
        'requested_delivery_date': _find(po.header.dates, '002', 'date'),
        'lines': [
            {
                'line_number': item.line_number,
                'product_sku': product(item.product_ids, 'SK'),
                'product_upc': product(item.product_ids, 'UP'),
                'vendor_part': product(item.product_ids, 'VP'),
                'quantity': item.quantity,
                'uom': item.uom,
                'unit_price': item.unit_price,
                'description': item.description,
            }
            for item in po.items
        ],
    }
