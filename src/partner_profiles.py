import json
import logging
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import Field

from cdm import CdmModel, DelimiterSet
from control_numbers import ControlNumberAllocator
from document_inputs import PartyId
from edi_builder import EnvelopeOptions
from edi_generator import EdiGenerator

logger = logging.getLogger(__name__)

class TradingPartnerProfile(CdmModel):
    """Envelope settings for one trading relationship."""
    name: str
    description: Optional[str] = None
    sender: PartyId
    receiver: PartyId
    envelope: EnvelopeOptions = Field(default_factory=EnvelopeOptions)
    delimiters: DelimiterSet = Field(default_factory=DelimiterSet)
    document_types: List[str] = Field(default_factory=list)

    def supports(self, transaction_set_id: str) -> bool:
        # An empty list means the partner accepts every document type.
        return not self.document_types or transaction_set_id in self.document_types

class PartnerProfileManager:
    """
    Loads trading-partner profiles from the local filesystem and supports
    tenant-specific overrides.
    """

    def __init__(self, profile_base_path: str = "profiles"):
        self.profile_base_path = Path(profile_base_path)
        self._base_profiles: Dict[str, TradingPartnerProfile] = {}
        self._tenant_profiles_cache: Dict[str, TradingPartnerProfile] = {}
        self._load_base_profiles()

    def _load_base_profiles(self):
        """Load base profiles from the profile directory."""
        if not self.profile_base_path.exists():
            logger.warning(f"Profile base path does not exist: {self.profile_base_path}")
            return

        logger.info(f"Loading trading partner profiles from: {self.profile_base_path}")

        for profile_file in sorted(self.profile_base_path.glob("*.json")):
            try:
                self._base_profiles[profile_file.stem] = self._read_profile(profile_file)
                logger.info(f"Loaded base profile: {profile_file.stem}")
            except Exception as e:
                logger.error(f"Failed to load profile {profile_file.name}: {e}")

    @staticmethod
    def _read_profile(path: Path) -> TradingPartnerProfile:
        with open(path, 'r') as f:
            return TradingPartnerProfile.model_validate(json.load(f))

    def get_profile(self, profile_name: str, tenant_id: Optional[str] = None) -> Optional[TradingPartnerProfile]:
        """
        Get a profile for a tenant. Checks tenant-specific profiles first, then
        falls back to base profiles.

        Args:
            profile_name: Profile file name without extension (e.g., "acme-retail")
            tenant_id: Tenant identifier, or None for the base profile only

        Returns:
            TradingPartnerProfile or None if not found
        """
        if tenant_id:
            cache_key = f"{tenant_id}/{profile_name}"
            if cache_key in self._tenant_profiles_cache:
                return self._tenant_profiles_cache[cache_key]

            tenant_profile_path = self.profile_base_path / "tenant-specific" / tenant_id / f"{profile_name}.json"
            if tenant_profile_path.exists():
                try:
                    profile = self._read_profile(tenant_profile_path)
                    self._tenant_profiles_cache[cache_key] = profile
                    logger.info(f"Loaded tenant-specific profile: {cache_key}")
                    return profile
                except Exception as e:
                    logger.error(f"Failed to load tenant profile {cache_key}: {e}")

        if profile_name in self._base_profiles:
            if tenant_id:
                logger.info(f"Using base profile for tenant {tenant_id}: {profile_name}")
            return self._base_profiles[profile_name]

        logger.error(f"Profile not found: {profile_name} for tenant {tenant_id}")
        return None

    def get_base_profile(self, profile_name: str) -> Optional[TradingPartnerProfile]:
        return self._base_profiles.get(profile_name)

    def list_base_profiles(self) -> List[str]:
        """List available base profile names."""
        return list(self._base_profiles.keys())

    def reload_profiles(self):
        """Reload all profiles from filesystem."""
        self._base_profiles.clear()
        self._tenant_profiles_cache.clear()
        self._load_base_profiles()

    def build_generator(
        self,
        profile_name: str,
        tenant_id: Optional[str] = None,
        allocator: Optional[ControlNumberAllocator] = None,
        clock=None,
    ) -> EdiGenerator:
        """Return an EdiGenerator using the profile's envelope options and delimiters."""
        profile = self.get_profile(profile_name, tenant_id)
        if profile is None:
            raise KeyError(f"Unknown trading partner profile: {profile_name}")
        return EdiGenerator(
            allocator=allocator,
            options=profile.envelope,
            delimiters=profile.delimiters,
            clock=clock,
        )
