"""Dealership configuration loaded once at startup.

The brand is persisted as a single settings record. It is read when the
application starts and then passed explicitly to the services that need it
(prompt building, admin views) instead of being looked up on every call.
"""

import logging

from pydantic import BaseModel, Field

from recon_audit.schemas import DealershipBrand

logger = logging.getLogger(__name__)


class DealershipConfig(BaseModel):
    """Dealership-scoped settings."""

    brand: DealershipBrand = Field(
        default=DealershipBrand.HONDA,
        description="Dealership brand used in AI instructions and CPO labels",
    )

    @property
    def cpo_manual_label(self) -> str:
        """Display label for the brand's certified pre-owned manual."""
        labels = {
            DealershipBrand.HONDA: "HCUV Manual (Honda)",
            DealershipBrand.TOYOTA: "TCUV Manual (Toyota)",
            DealershipBrand.CBG: "GM Certified Manual (CBG)",
            DealershipBrand.CADILLAC: "Cadillac Certified Manual",
            DealershipBrand.FORD: "Blue/Gold Advantage Manual",
        }
        return labels.get(self.brand, f"{self.brand.value} CPO Manual")


async def load_dealership_config(gateway) -> DealershipConfig:
    """Read the persisted brand through the gateway (falls back to the default)."""
    brand = await gateway.get_brand()
    logger.info(f"Dealership brand: {brand.value}")
    return DealershipConfig(brand=brand)
