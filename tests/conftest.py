import pytest
import sys
import os
import logging
from datetime import datetime

# Add src directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from control_numbers import ControlNumberAllocator
from document_inputs import PartyId
from edi_generator import EdiGenerator

# ==============================================================================
# PYTEST CONFIGURATION & HOOKS
# ==============================================================================

def pytest_configure(config):
    """Configure pytest settings and markers."""
    config.addinivalue_line("markers", "unit: Pure unit tests with no external dependencies.")
    config.addinivalue_line("markers", "integration: Tests exercising generation and parsing end to end.")

@pytest.fixture(scope="session", autouse=True)
def setup_test_environment(pytestconfig):
    """Set up test environment with logging configuration."""
    # Use pytest's log_cli_level if available, otherwise default to INFO
    log_level = pytestconfig.getoption("log_cli_level") or "INFO"
    logging.basicConfig(
        level=log_level.upper(),
        format="[%(asctime)s] [%(levelname)s] [%(name)s:%(lineno)d] - %(message)s",
        stream=sys.stdout,
        force=True,
    )
    logging.info(f"Test logging configured with level: {log_level.upper()}")
    yield

# ==============================================================================
# EDI FIXTURES
# ==============================================================================

# ISA padded to its fixed width: element separator at offset 3, ISA11 at 82,
# component separator at 104, segment terminator at 105.
ISA_HEADER = "ISA*00*          *00*          *ZZ*BUYERID        *ZZ*WAREHOUSE01    *240715*1200*U*00401*000000001*0*P*>~"

@pytest.fixture(scope="session")
def isa_header() -> str:
    return ISA_HEADER

@pytest.fixture(scope="session")
def valid_850_edi_string() -> str:
    """A single 850 purchase order in one interchange, one segment per line."""
    return ISA_HEADER + """
GS*PO*BUYERID*WAREHOUSE01*20240715*1200*1*X*004010~
ST*850*0001~
BEG*00*SA*PO-12345**20240715~
CUR*BY*USD~
REF*DP*042~
DTM*002*20240801~
N1*ST*ACME STORE 42*92*STORE42~
N3*100 MAIN ST~
N4*SPRINGFIELD*IL*62701*US~
N1*BY*ACME RETAIL*92*ACME~
PO1*1*24*EA*12.50**UP*012345678905*VP*WIDGET-1~
PID*F****BLUE WIDGET~
PO1*2*6*CS*40**SK*SKU-200~
CTT*2*30~
SE*14*0001~
GE*1*1~
IEA*1*000000001~
"""

@pytest.fixture(scope="session")
def valid_856_edi_string() -> str:
    """An 856 with shipment, order and two item levels."""
    return ISA_HEADER + """
GS*SH*BUYERID*WAREHOUSE01*20240715*1200*7*X*004010~
ST*856*0007~
BSN*00*SHIP-900*20240715*1200*0001~
HL*1**S~
TD1*CTN*3*****42.5*LB~
TD5*B*2*UPSN*M*UPS GROUND~
TD3*TL**TRAILER9******SEAL77~
REF*BM*BOL-1~
REF*CN*PRO-1~
DTM*011*20240715~
DTM*017*20240718~
N1*SF*MAIN WAREHOUSE*92*WH01~
N1*ST*ACME STORE 42*92*STORE42~
HL*2*1*O~
PRF*PO-12345~
HL*3*2*I~
LIN*1*UP*012345678905~
SN1**24*EA~
PID*F****BLUE WIDGET~
MAN*GM*00012345678901234567~
HL*4*2*I~
LIN*2*SK*SKU-200~
SN1**6*CS~
CTT*4~
SE*24*0007~
GE*1*7~
IEA*1*000000001~
"""

@pytest.fixture
def fixed_clock():
    return lambda: datetime(2024, 7, 15, 12, 0)

@pytest.fixture
def allocator() -> ControlNumberAllocator:
    return ControlNumberAllocator()

@pytest.fixture
def generator(allocator: ControlNumberAllocator, fixed_clock) -> EdiGenerator:
    return EdiGenerator(allocator=allocator, clock=fixed_clock)

@pytest.fixture
def sender() -> PartyId:
    return PartyId(id="WAREHOUSE01", qualifier="ZZ")

@pytest.fixture
def receiver() -> PartyId:
    return PartyId(id="ACME", qualifier="12")
