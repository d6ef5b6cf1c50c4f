from typing import Dict, Literal, Optional

from pydantic import BaseModel

# Static X12 code tables shared by the parser (dispatch) and the generator
# (GS01 functional identifier per transaction set).


class DocumentTypeInfo(BaseModel):
    name: str
    functional_id: str
    direction: Literal['inbound', 'outbound', 'both']


EDI_DOCUMENT_TYPES: Dict[str, DocumentTypeInfo] = {
    '810': DocumentTypeInfo(name='Invoice', functional_id='IN', direction='outbound'),
    '820': DocumentTypeInfo(name='Payment Order/Remittance Advice', functional_id='RA', direction='both'),
    '850': DocumentTypeInfo(name='Purchase Order', functional_id='PO', direction='inbound'),
    '855': DocumentTypeInfo(name='Purchase Order Acknowledgment', functional_id='PR', direction='outbound'),
    '856': DocumentTypeInfo(name='Advance Ship Notice', functional_id='SH', direction='both'),
    '940': DocumentTypeInfo(name='Warehouse Shipping Order', functional_id='OW', direction='inbound'),
    '943': DocumentTypeInfo(name='Warehouse Stock Transfer Shipment Advice', functional_id='SW', direction='outbound'),
    '944': DocumentTypeInfo(name='Warehouse Stock Transfer Receipt Advice', functional_id='SR', direction='outbound'),
    '945': DocumentTypeInfo(name='Warehouse Shipping Advice', functional_id='SW', direction='outbound'),
    '947': DocumentTypeInfo(name='Warehouse Inventory Adjustment Advice', functional_id='IJ', direction='outbound'),
}

ID_QUALIFIERS: Dict[str, str] = {
    '01': 'DUNS',
    '02': 'SCAC',
    '08': 'UCC/EAN',
    '12': 'Phone',
    '14': 'DUNS+4',
    '27': 'NAICS',
    '28': 'SIC',
    '30': 'ISO',
    'ZZ': 'Mutually Defined',
}

PRODUCT_ID_QUALIFIERS: Dict[str, str] = {
    'UP': 'UPC',
    'UK': 'UPC/EAN Case Code',
    'EN': 'EAN-13',
    'VP': 'Vendor Part Number',
    'BP': 'Buyer Part Number',
    'SK': 'SKU',
    'IN': 'Buyer Item Number',
    'MG': 'Manufacturer ID',
    'MN': 'Model Number',
}

UOM_CODES: Dict[str, str] = {
    'EA': 'Each',
    'CA': 'Case',
    'BX': 'Box',
    'CT': 'Carton',
    'PK': 'Pack',
    'PL': 'Pallet',
    'LB': 'Pound',
    'KG': 'Kilogram',
    'OZ': 'Ounce',
    'GR': 'Gram',
}


def get_document_type(transaction_set_id: Optional[str]) -> Optional[DocumentTypeInfo]:
    if not transaction_set_id:
        return None
    return EDI_DOCUMENT_TYPES.get(transaction_set_id.strip())


def functional_id_for(transaction_set_id: str) -> str:
    """GS01 code for a transaction set; unknown sets cannot be enveloped."""
    info = get_document_type(transaction_set_id)
    if info is None:
        raise ValueError(f"Unknown transaction set type: {transaction_set_id}")
    return info.functional_id
