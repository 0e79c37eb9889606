"""Inventory attributes evaluated on the device for the MDM."""

from macdeploy.inventory.compatibility import (
    compatibility_attribute,
    hardware_model,
    is_supported,
)

__all__ = ["compatibility_attribute", "hardware_model", "is_supported"]
