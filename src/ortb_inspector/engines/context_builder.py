# Author: Green Mountain Systems AI Inc.
# Donated to IAB Tech Lab

"""Context Builder - Infer inventory types and CTV from a located request."""

from typing import Any, Optional

from ..models.validation import InventoryType, PartnerProfile, ValidationContext

# imp key -> inventory tag, in detection order
INVENTORY_KEYS: tuple[tuple[str, InventoryType], ...] = (
    ("banner", InventoryType.BANNER),
    ("video", InventoryType.VIDEO),
    ("audio", InventoryType.AUDIO),
    ("native", InventoryType.NATIVE),
    ("qty", InventoryType.DOOH),
)

# OpenRTB List 5.21: 3 = Connected TV, 7 = Set Top Box
CTV_DEVICE_TYPES = frozenset({3, 7})


def detect_inventory_types(root: Optional[dict]) -> tuple[InventoryType, ...]:
    """Scan every impression once for media keys.

    Returns:
        Detected inventory types ordered banner, video, audio, native, dooh
    """
    found: set[InventoryType] = set()
    imps = root.get("imp") if isinstance(root, dict) else None
    for imp in imps if isinstance(imps, list) else ():
        if not isinstance(imp, dict):
            continue
        for key, inventory_type in INVENTORY_KEYS:
            if imp.get(key) is not None:
                found.add(inventory_type)
    return tuple(inventory_type for _, inventory_type in INVENTORY_KEYS if inventory_type in found)


def detect_ctv(root: Optional[dict]) -> bool:
    """Whether the device type identifies a Connected TV or set-top box."""
    device = root.get("device") if isinstance(root, dict) else None
    if not isinstance(device, dict):
        return False
    device_type: Any = device.get("devicetype")
    return (
        isinstance(device_type, int)
        and not isinstance(device_type, bool)
        and device_type in CTV_DEVICE_TYPES
    )


def build_context(
    root: Optional[dict],
    force_ctv: bool = False,
    partner_profile: Optional[PartnerProfile] = None,
) -> ValidationContext:
    """Build the read-only context shared by every rule.

    Args:
        root: Located bid request, or None
        force_ctv: Validate as CTV regardless of device type
        partner_profile: Partner profile whose rules should apply

    Returns:
        ValidationContext for this analysis
    """
    return ValidationContext(
        root=root,
        inventory_types=detect_inventory_types(root),
        is_ctv=force_ctv or detect_ctv(root),
        partner_profile=partner_profile,
    )
