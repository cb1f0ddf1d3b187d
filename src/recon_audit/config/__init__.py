"""Dealership configuration management."""

from recon_audit.config.dealership import (
    DealershipConfig,
    load_dealership_config,
)

__all__ = [
    "DealershipConfig",
    "load_dealership_config",
]
