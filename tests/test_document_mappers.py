from datetime import date

import pytest

from cdm import CdmTransaction
from document_inputs import AsnInput
from document_mappers import asn_input_from_shipment, parse_edi_date, purchase_order_from_850
from edi_parser import parse_edi

pytestmark = pytest.mark.unit

@pytest.fixture
def order() -> dict:
    return {
        "customer_po": "PO-12345",
        "customer": {"name": "ACME STORE 42", "code": "STORE42"},
        "shipping_address": {"address1": "100 MAIN ST", "city": "SPRINGFIELD", "state": "IL", "zip_code": "62701", "country": "US"},
        "lines": [
            {"product": {"upc": "012345678905", "sku": "W-1", "name": "BLUE WIDGET"}, "quantity_shipped": 24},
            {"product": {"sku": "SKU-200", "vendor_part_number": "VP-2"}, "quantity_shipped": 6, "uom": "CS", "lot_number": "L7", "sscc": "0009"},
        ],
    }

@pytest.fixture
def shipment() -> dict:
    return {
        "shipment_number": "SHIP-900",
        "ship_date": date(2024, 7, 15),
        "estimated_delivery": date(2024, 7, 18),
        "bol_number": "BOL-1",
        "carrier": {"scac": "UPSN", "name": "UPS"},
        "trailer_number": "TRL-9",
        "carton_count": 3,
        "total_weight": 42.5,
    }

@pytest.fixture
def warehouse() -> dict:
    return {"name": "MAIN WAREHOUSE", "code": "WH01", "address": "1 DOCK RD", "city": "JOLIET", "state": "IL", "zip_code": "60431"}

@pytest.mark.parametrize("text, expected", [
    ("20240715", date(2024, 7, 15)),
    ("240715", date(2024, 7, 15)),
    ("990101", date(1999, 1, 1)),
    ("500101", date(2050, 1, 1)),
    ("510101", date(1951, 1, 1)),
    ("2024071", None),
    ("20241345", None),
    ("", None),
    (None, None),
])
def test_parse_edi_date(text, expected):
    assert parse_edi_date(text) == expected

def test_asn_input_from_shipment(order, shipment, warehouse):
    asn = asn_input_from_shipment(order, shipment, warehouse)

    assert isinstance(asn, AsnInput)
    assert asn.purpose == "00"
    assert asn.shipment_id == "SHIP-900"
    assert asn.ship_date == date(2024, 7, 15)
    assert asn.carrier.method == "M"
    assert asn.equipment.number == "TRL-9"
    assert asn.packaging.code == "CTN"
    assert asn.packaging.quantity == 3
    assert asn.ship_from.id == "WH01"
    assert asn.ship_from.zip == "60431"
    assert asn.ship_to.name == "ACME STORE 42"
    assert asn.ship_to.zip == "62701"
    assert asn.po_number == "PO-12345"

    first, second = asn.items
    assert first.line_number == 1
    assert first.upc == "012345678905"
    assert first.description == "BLUE WIDGET"
    assert first.uom == "EA"
    assert second.vendor_part == "VP-2"
    assert second.uom == "CS"
    assert second.lot_number == "L7"

def test_asn_input_tolerates_sparse_records():
    asn = asn_input_from_shipment({}, {}, {})
    assert asn.items == []
    assert asn.ship_to is None
    assert asn.ship_from is None
    assert asn.carrier is None

def test_sparse_shipment_leaves_out_absent_segments(generator, sender, receiver):
    asn = asn_input_from_shipment({"customer_po": "PO-1"}, {"shipment_number": "S1"}, {})
    assert asn.carrier is None
    assert asn.equipment is None
    assert asn.packaging is None

    edi = generator.generate_856(asn, sender, receiver)
    segment_ids = [s.segment_id for s in parse_edi(edi).transactions()[0].segments]
    for absent in ("TD1", "TD3", "TD5", "N1"):
        assert absent not in segment_ids
    assert "BSN" in segment_ids

def test_partial_shipment_records_get_defaults():
    asn = asn_input_from_shipment({}, {"carrier": {"scac": "UPSN"}, "total_weight": 12}, {})
    assert asn.carrier.scac == "UPSN"
    assert asn.carrier.method == "M"
    assert asn.packaging.code == "CTN"
    assert asn.packaging.weight_unit == "LB"
    assert asn.packaging.weight == 12.0
    assert asn.equipment is None

def test_asn_input_generates_856(order, shipment, warehouse, generator, sender, receiver):
    edi = generator.generate_856(asn_input_from_shipment(order, shipment, warehouse), sender, receiver)
    parsed = parse_edi(edi).transactions()[0].parsed

    assert parsed.header.shipment_id == "SHIP-900"
    assert parsed.orders[0].po_number == "PO-12345"
    assert [i.quantity for i in parsed.items] == [24.0, 6.0]

def test_purchase_order_from_850(valid_850_edi_string: str):
    transaction = parse_edi(valid_850_edi_string).transactions()[0]
    order = purchase_order_from_850(transaction)

    assert order["po_number"] == "PO-12345"
    assert order["order_date"] == date(2024, 7, 15)
    assert order["customer_id"] == "ACME"
    assert order["ship_to_id"] == "STORE42"
    assert order["bill_to_id"] is None
    assert order["currency"] == "USD"
    assert order["requested_delivery_date"] == "20240801"

    first, second = order["lines"]
    assert first["product_upc"] == "012345678905"
    assert first["vendor_part"] == "WIDGET-1"
    assert first["product_sku"] is None
    assert first["quantity"] == 24.0
    assert first["unit_price"] == 12.5
    assert first["description"] == "BLUE WIDGET"
    assert second["product_sku"] == "SKU-200"

def test_purchase_order_from_850_rejects_other_documents(valid_856_edi_string: str):
    transaction = parse_edi(valid_856_edi_string).transactions()[0]
    with pytest.raises(ValueError):
        purchase_order_from_850(transaction)

def test_purchase_order_from_850_defaults_currency():
    transaction = CdmTransaction(transaction_set_id="850", control_number="1")
    transaction.parsed = parse_edi(
        "ISA*00*          *00*          *ZZ*A              *ZZ*B              *240715*1200*U*00401*000000001*0*P*>~"
        "GS*PO*A*B*20240715*1200*1*X*004010~ST*850*0001~BEG*00*SA*PO-1~SE*3*0001~GE*1*1~IEA*1*000000001~"
    ).transactions()[0].parsed
    assert purchase_order_from_850(transaction)["currency"] == "USD"
