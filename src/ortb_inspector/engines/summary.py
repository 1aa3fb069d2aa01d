# Author: Green Mountain Systems AI Inc.
# Donated to IAB Tech Lab

"""Summary Deriver - Human-facing classification of a bid request.

The summary is a pure function of the located request and the context
built for rule gating. It never enforces rules itself: a request with both
``app`` and ``site`` simply reports an Unknown platform while the core
rules flag the conflict.
"""

from typing import Any, Optional

from ..models.analysis import AnalysisSummary, Platform, RequestType
from ..models.validation import InventoryType, ValidationContext
from ..rules.helpers import (
    as_list,
    consent_string,
    gdpr_flag,
    get_in,
    is_int,
    is_non_empty_str,
    is_number,
    is_set,
    schain,
    us_privacy,
)

# OpenRTB List 5.21 device types
DEVICE_TYPE_LABELS: dict[int, str] = {
    1: "Mobile/Tablet",
    2: "Personal Computer",
    3: "Connected TV",
    4: "Phone",
    5: "Tablet",
    6: "Connected Device",
    7: "Set Top Box",
    8: "OOH Device",
}

# Formats that define a request type; DOOH is a placement context
PRIMARY_FORMATS: dict[InventoryType, RequestType] = {
    InventoryType.BANNER: RequestType.BANNER,
    InventoryType.VIDEO: RequestType.VIDEO,
    InventoryType.AUDIO: RequestType.AUDIO,
    InventoryType.NATIVE: RequestType.NATIVE,
}

UNKNOWN_DEVICE = "Unknown"
NO_GEO = "N/A"


def derive_request_type(context: ValidationContext) -> RequestType:
    """Classify the request from its primary media formats."""
    primary = [PRIMARY_FORMATS[t] for t in context.inventory_types if t in PRIMARY_FORMATS]
    if not primary:
        return RequestType.UNKNOWN
    if len(primary) > 1:
        return RequestType.MIXED
    return primary[0]


def derive_platform(root: Any) -> Platform:
    has_app = isinstance(get_in(root, "app"), dict)
    has_site = isinstance(get_in(root, "site"), dict)
    if has_app and not has_site:
        return Platform.APP
    if has_site and not has_app:
        return Platform.SITE
    return Platform.UNKNOWN


def device_type_label(device_type: Any) -> str:
    if not is_int(device_type):
        return UNKNOWN_DEVICE
    return DEVICE_TYPE_LABELS.get(device_type, UNKNOWN_DEVICE)


def derive_geo(root: Any) -> str:
    country = get_in(root, "device", "geo", "country")
    return country if is_non_empty_str(country) else NO_GEO


def derive_privacy_signals(context: ValidationContext) -> list[str]:
    """List the privacy frameworks the request signals, in display order."""
    root = context.root
    signals = []
    if is_set(gdpr_flag(context)):
        signals.append("GDPR Applicable")
    if consent_string(context):
        signals.append("TCF Consent String")
    if is_non_empty_str(us_privacy(context)):
        signals.append("CCPA/US Privacy")
    if is_non_empty_str(get_in(root, "regs", "gpp")):
        signals.append("Global Privacy Platform (GPP)")
    if is_set(get_in(root, "regs", "coppa")):
        signals.append("COPPA")
    if is_set(get_in(root, "device", "lmt")):
        signals.append("Limited Ad Tracking")
    return signals


def _currency(root: Any) -> Optional[str]:
    declared = as_list(get_in(root, "cur"))
    if declared and is_non_empty_str(declared[0]):
        return declared[0]
    first_imp_currency = get_in(_first_imp(root), "bidfloorcur")
    return first_imp_currency if is_non_empty_str(first_imp_currency) else None


def _first_imp(root: Any) -> Optional[dict]:
    imps = as_list(get_in(root, "imp"))
    return imps[0] if imps and isinstance(imps[0], dict) else None


def _bid_floor(root: Any, currency: Optional[str]) -> Optional[str]:
    """First impression floor with its currency, e.g. ``"1.25 USD"``."""
    floor = get_in(_first_imp(root), "bidfloor")
    if not is_number(floor) or not floor:
        return None
    floor_currency = get_in(_first_imp(root), "bidfloorcur")
    if not is_non_empty_str(floor_currency):
        floor_currency = currency
    return f"{floor} {floor_currency}" if floor_currency else str(floor)


def _schain_nodes(context: ValidationContext) -> Optional[int]:
    nodes = get_in(schain(context), "nodes")
    return len(nodes) if isinstance(nodes, list) else None


def derive_summary(root: Any, context: ValidationContext) -> AnalysisSummary:
    """Derive the summary shown alongside the issue list.

    Args:
        root: Located bid request, or None
        context: Context built from the same root

    Returns:
        AnalysisSummary; defaults (Unknown, 0, "N/A") when root is None
    """
    if root is None:
        return AnalysisSummary(is_ctv=context.is_ctv)

    timeout = get_in(root, "tmax")
    currency = _currency(root)
    return AnalysisSummary(
        request_type=derive_request_type(context),
        media_formats=[t.value for t in context.inventory_types],
        impressions=len(as_list(get_in(root, "imp"))),
        platform=derive_platform(root),
        device_type=device_type_label(get_in(root, "device", "devicetype")),
        geo=derive_geo(root),
        is_ctv=context.is_ctv,
        timeout_ms=timeout if is_int(timeout) else None,
        currency=currency,
        bid_floor=_bid_floor(root, currency),
        schain_nodes=_schain_nodes(context),
        privacy_signals=derive_privacy_signals(context),
    )
