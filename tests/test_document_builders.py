"""
Unit tests for the outbound segment and document builders.
"""

import logging
from datetime import date, datetime

import pytest

from cdm import DelimiterSet, Segment
from document_builders import build_810, build_855, build_856, build_940, build_945, build_947
from document_inputs import (
    AsnInput,
    InventoryAdjustmentInput,
    InvoiceInput,
    PoAckInput,
    ShippingAdviceInput,
    ShippingOrderInput,
)
from edi_builder import SegmentBuilder, format_date, format_number, format_time, render_segments

pytestmark = pytest.mark.unit

def ids(builder: SegmentBuilder):
    return [s.segment_id for s in builder.segments]

def find(builder: SegmentBuilder, segment_id: str):
    return [s for s in builder.segments if s.segment_id == segment_id]

def assert_closed(builder: SegmentBuilder, control_number: str):
    se = builder.segments[-1]
    assert se.segment_id == "SE"
    # SE01 counts ST and SE themselves
    assert se.elements == [str(len(builder.segments)), control_number]

class TestSegmentBuilder:

    def test_trailing_empty_elements_are_trimmed(self):
        builder = SegmentBuilder().add_segment("REF", "BM", "", None)
        assert builder.segments[0].elements == ["BM"]

    def test_inner_empty_elements_are_kept(self):
        builder = SegmentBuilder().add_segment("N1", "ST", None, "92", "X")
        assert builder.to_string() == "N1*ST**92*X~"

    def test_delimiters_inside_values_are_replaced(self):
        builder = SegmentBuilder().add_segment("N1", "ST", "A*B~C")
        assert builder.to_string() == "N1*ST*A B C~"

    def test_custom_delimiters(self):
        builder = SegmentBuilder(DelimiterSet(element="|", segment="\\"))
        builder.add_segment("ST", "856", "0001").add_segment("BSN", "00", "S1")
        assert builder.to_string() == "ST|856|0001\\BSN|00|S1\\"
        assert builder.segment_count == 2

    def test_numbers_render_without_spurious_decimals(self):
        assert format_number(24.0) == "24"
        assert format_number(2.5) == "2.5"
        assert format_number(None) == ""

    def test_date_and_time_formatting(self):
        assert format_date(date(2024, 7, 5)) == "20240705"
        assert format_date(date(2024, 7, 5), short=True) == "240705"
        assert format_date(None) == ""
        assert format_time(datetime(2024, 7, 5, 9, 30)) == "0930"
        assert format_time(date(2024, 7, 5)) == "0000"

    def test_render_empty_segment_list(self):
        assert render_segments([], DelimiterSet()) == ""
        assert render_segments([Segment(segment_id="CTT", elements=["1"])], DelimiterSet()) == "CTT*1~"

class TestBuild810:

    def test_invoice_segments_and_total(self):
        data = InvoiceInput(
            invoice_number="INV-1",
            invoice_date=date(2024, 7, 15),
            po_number="PO-1",
            items=[
                {"lineNumber": 1, "quantity": 10, "unitPrice": 2.5, "upc": "111"},
                {"line_number": 2, "quantity": 3, "unit_price": 0.333},
            ],
        )
        builder = build_810(data, "0001", SegmentBuilder())

        assert ids(builder) == ["ST", "BIG", "IT1", "IT1", "TDS", "SE"]
        assert find(builder, "BIG")[0].elements == ["20240715", "INV-1", "", "PO-1"]
        assert find(builder, "IT1")[0].elements == ["1", "10", "EA", "2.50", "", "UP", "111"]
        # 25.00 + 0.999 -> 2600 cents
        assert find(builder, "TDS")[0].elements == ["2600"]
        assert_closed(builder, "0001")

    @pytest.mark.parametrize("quantity, unit_price, cents", [
        (1, 0.125, "13"),
        (5, 0.125, "63"),
        (2, 0.125, "25"),
        (1, 0.124, "12"),
    ])
    def test_half_cent_totals_round_up(self, quantity, unit_price, cents):
        data = InvoiceInput(items=[{"quantity": quantity, "unit_price": unit_price}])
        builder = build_810(data, "0001", SegmentBuilder())
        assert find(builder, "TDS")[0].elements == [cents]

    def test_optional_segments(self):
        data = InvoiceInput(
            currency="USD",
            references=[{"qualifier": "IA", "value": "V1"}],
            bill_to={"name": "ACME", "id": "ACME", "city": "CHICAGO", "state": "IL", "zip": "60601"},
            carrier={"scac": "UPSN", "name": "UPS"},
            items=[{"quantity": 1, "unit_price": 1, "description": "WIDGET"}],
        )
        builder = build_810(data, "0002", SegmentBuilder())

        assert ids(builder) == ["ST", "BIG", "CUR", "REF", "N1", "N4", "IT1", "PID", "TDS", "CAD", "SE"]
        assert find(builder, "N4")[0].elements == ["CHICAGO", "IL", "60601", "US"]
        assert find(builder, "CAD")[0].elements == ["M", "", "", "UPSN", "UPS"]
        assert_closed(builder, "0002")

class TestBuild855:

    def test_ack_per_item_and_ctt(self):
        data = PoAckInput(
            po_number="PO-1",
            date=date(2024, 7, 15),
            items=[
                {"line_number": 1, "quantity": 10, "unit_price": 2, "upc": "111"},
                {"line_number": 2, "quantity": 5, "unit_price": 3, "status": "IR", "ack_quantity": 0,
                 "reject_reason": "OUT OF STOCK"},
            ],
        )
        builder = build_855(data, "0003", SegmentBuilder())

        assert ids(builder) == ["ST", "BAK", "PO1", "ACK", "PO1", "ACK", "CTT", "SE"]
        assert find(builder, "BAK")[0].elements == ["00", "AC", "PO-1", "20240715"]
        accepted, rejected = find(builder, "ACK")
        assert accepted.elements == ["IA", "10", "EA"]
        assert rejected.elements == ["IR", "0", "EA", "", "", "", "", "OUT OF STOCK"]
        assert find(builder, "CTT")[0].elements == ["2"]
        assert_closed(builder, "0003")

    def test_reject_reason_only_sent_for_rejections(self):
        data = PoAckInput(items=[{"quantity": 1, "status": "IA", "reject_reason": "IGNORED"}])
        builder = build_855(data, "0004", SegmentBuilder())
        assert find(builder, "ACK")[0].elements == ["IA", "1", "EA"]

class TestBuild856:

    def test_hierarchy_and_ctt_counts_levels(self):
        data = AsnInput(
            shipment_id="SHIP-1",
            ship_date=datetime(2024, 7, 15, 14, 30),
            po_number="PO-1",
            items=[
                {"line_number": 1, "quantity": 24, "upc": "111"},
                {"line_number": 2, "quantity": 6, "sku": "SKU-2", "uom": "CS"},
            ],
        )
        builder = build_856(data, "0005", SegmentBuilder())

        hls = [s.elements for s in find(builder, "HL")]
        assert hls == [["1", "", "S"], ["2", "1", "O"], ["3", "2", "I"], ["4", "2", "I"]]
        assert find(builder, "BSN")[0].elements == ["00", "SHIP-1", "20240715", "1430", "0001"]
        assert find(builder, "PRF")[0].elements == ["PO-1"]
        assert find(builder, "DTM")[0].elements == ["011", "20240715"]
        # CTT carries the HL count, not the item count
        assert find(builder, "CTT")[0].elements == ["4"]
        assert_closed(builder, "0005")

    def test_absent_optional_segments_are_omitted(self):
        builder = build_856(AsnInput(items=[{"quantity": 1}]), "0006", SegmentBuilder())

        assert ids(builder) == ["ST", "BSN", "HL", "HL", "PRF", "HL", "LIN", "SN1", "CTT", "SE"]
        assert find(builder, "PRF")[0].elements == []

    def test_nonstandard_uom_is_sent_as_given(self, caplog):
        data = AsnInput(items=[{"quantity": 2, "uom": "XX"}, {"quantity": 1}])
        with caplog.at_level(logging.DEBUG, logger="document_builders"):
            builder = build_856(data, "0007", SegmentBuilder())

        assert [s.elements for s in find(builder, "SN1")] == [["", "2", "XX"], ["", "1", "EA"]]
        assert "'XX' is not a standard code" in caplog.text

    def test_full_shipment_level(self):
        data = AsnInput(
            bol_number="BOL-1",
            pro_number="PRO-1",
            delivery_date=date(2024, 7, 18),
            carrier={"scac": "UPSN", "name": "UPS"},
            equipment={"number": "TRL-9", "seal_number": "SEAL-1"},
            packaging={"quantity": 3, "weight": 42.5},
            ship_from={"name": "WH", "id": "WH01"},
            items=[{"quantity": 1, "description": "WIDGET", "sscc": "0001", "lot_number": "L1"}],
        )
        builder = build_856(data, "0007", SegmentBuilder())

        assert find(builder, "TD1")[0].elements == ["CTN", "3", "", "", "", "", "42.5", "LB"]
        assert find(builder, "TD5")[0].elements == ["B", "2", "UPSN", "M", "UPS"]
        assert find(builder, "TD3")[0].elements == ["TL", "", "TRL-9", "", "", "", "", "", "SEAL-1"]
        assert [r.elements for r in find(builder, "REF")] == [["BM", "BOL-1"], ["CN", "PRO-1"]]
        assert [d.elements for d in find(builder, "DTM")] == [["017", "20240718"]]
        assert find(builder, "N1")[0].elements == ["SF", "WH", "92", "WH01"]
        assert [m.elements for m in find(builder, "MAN")] == [["GM", "0001"], ["L", "L1"]]

    def test_multiple_orders_link_items_to_their_order(self):
        data = AsnInput(
            orders=[
                {"po_number": "PO-A", "items": [{"quantity": 1}, {"quantity": 2}]},
                {"po_number": "PO-B", "release_number": "R1", "date": date(2024, 7, 1)},
            ],
            items=[{"quantity": 9}],
        )
        builder = build_856(data, "0008", SegmentBuilder())

        hls = [s.elements for s in find(builder, "HL")]
        assert hls == [
            ["1", "", "S"],
            ["2", "1", "O"], ["3", "2", "I"], ["4", "2", "I"],
            ["5", "1", "O"], ["6", "5", "I"],
        ]
        assert find(builder, "PRF")[1].elements == ["PO-B", "R1", "", "20240701"]
        # The second order falls back to the document-level items
        assert find(builder, "SN1")[-1].elements == ["", "9", "EA"]
        assert find(builder, "CTT")[0].elements == ["6"]

    def test_empty_orders_list_emits_no_order_levels(self):
        data = AsnInput(po_number="PO-1", orders=[], items=[{"quantity": 1}])
        builder = build_856(data, "0009", SegmentBuilder())

        assert [s.elements for s in find(builder, "HL")] == [["1", "", "S"]]
        assert find(builder, "PRF") == []
        assert find(builder, "LIN") == []
        assert find(builder, "CTT")[0].elements == ["1"]
        assert_closed(builder, "0009")

class TestBuild940:

    def test_shipping_order(self):
        data = ShippingOrderInput(
            order_number="ORD-1",
            po_number="PO-1",
            depositor={"name": "DEP", "id": "DEP1"},
            ship_to={"name": "ACME", "id": "S42", "address1": "1 MAIN", "city": "X", "contact": {"name": "JANE", "phone": "555"}},
            notes=[{"value": "FRAGILE"}],
            carrier={"scac": "UPSN", "name": "UPS", "service_level": "GND"},
            items=[
                {"quantity": 2, "weight": 1.5, "upc": "111", "description": "WIDGET", "lot": {"number": "L1"}},
                {"quantity": 3, "weight": 2, "sku": "SKU-2", "lot_number": "L2"},
            ],
        )
        builder = build_940(data, "0009", SegmentBuilder())

        assert ids(builder) == [
            "ST", "W05", "N1", "N1", "N3", "N4", "G61", "N9", "W66",
            "LX", "W01", "G69", "W20", "LX", "W01", "N9", "W76", "SE",
        ]
        assert find(builder, "W05")[0].elements == ["N", "ORD-1", "PO-1"]
        assert find(builder, "G61")[0].elements == ["CN", "JANE", "TE", "555"]
        assert find(builder, "W66")[0].elements == ["M", "", "", "UPSN", "UPS", "GND"]
        assert find(builder, "W01")[0].elements == ["2", "EA", "", "", "1.5", "UP", "111"]
        assert find(builder, "W76")[0].elements == ["2", "5", "EA", "3.5", "LB"]
        assert_closed(builder, "0009")

class TestBuild945:

    def test_shipping_advice(self):
        data = ShippingAdviceInput(
            order_number="ORD-1",
            ship_date=date(2024, 7, 15),
            shipment_id="SHIP-1",
            depositor_ref="DEP-REF",
            carrier={"scac": "UPSN", "name": "UPS"},
            bol_number="BOL-1",
            consolidation={"weight": 120, "quantity": 2},
            items=[{"quantity_shipped": 10, "upc": "111", "weight": 60}, {"quantity_shipped": 5, "weight": 60}],
            pallet_count=2,
        )
        builder = build_945(data, "0010", SegmentBuilder())

        assert ids(builder) == ["ST", "W06", "N9", "W27", "W28", "LX", "W12", "LX", "W12", "W03", "SE"]
        assert find(builder, "W06")[0].elements == ["B", "ORD-1", "20240715", "SHIP-1"]
        assert find(builder, "W27")[0].elements == ["M", "", "UPSN", "UPS", "", "BOL-1", "", "UPSN"]
        assert find(builder, "W28")[0].elements == ["120", "G", "2"]
        assert find(builder, "W03")[0].elements == ["2", "120", "LB", "", "", "2"]
        assert_closed(builder, "0010")

    def test_carrier_and_consolidation_omitted_when_absent(self):
        builder = build_945(ShippingAdviceInput(items=[{"quantity_shipped": 1}]), "0011", SegmentBuilder())
        assert ids(builder) == ["ST", "W06", "LX", "W12", "W03", "SE"]

class TestBuild947:

    def test_w14_sums_absolute_quantities(self):
        data = InventoryAdjustmentInput(
            date=datetime(2024, 7, 15, 9, 30),
            reference_id="ADJ-1",
            adjustments=[
                {"quantity": -5, "upc": "111", "quantity_before": 20, "quantity_after": 15, "reason_code": "05"},
                {"quantity": 3, "sku": "SKU-2", "lot_number": "L1", "expiration_date": date(2025, 1, 1)},
                {"quantity": 2, "notes": "FOUND"},
            ],
        )
        builder = build_947(data, "0012", SegmentBuilder())

        assert find(builder, "W15")[0].elements == ["A", "20240715", "0930", "ADJ-1"]
        assert len(find(builder, "W07")) == 3
        assert find(builder, "W07")[0].elements == ["-5", "EA", "", "", "", "UP", "111"]
        assert find(builder, "W13")[0].elements == ["20", "15", "EA", "05"]
        assert find(builder, "W20")[0].elements == ["L1", "", "", "20250101"]
        assert find(builder, "N9")[0].elements == ["ZZ", "FOUND"]
        assert find(builder, "W14")[0].elements == ["10", "", "3"]
        assert_closed(builder, "0012")
